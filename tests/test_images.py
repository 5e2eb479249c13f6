import base64
import random
import time

import httpx
import pytest

from kebab_builder.core.config import get_settings
from kebab_builder.services.composer import resolve_composition
from kebab_builder.services.images import (
    CraiyonImageGenerator,
    FailureKind,
    HuggingFaceImageGenerator,
    ImageOrchestrator,
    ImageRequest,
    LocalSvgRenderer,
    Measurements,
    MockImageGenerator,
    PollinationsImageGenerator,
    build_generators,
    build_preview,
    build_prompts,
    get_image_orchestrator,
    reset_image_orchestrator,
)
from kebab_builder.services.images.svg import (
    describe_composition,
    render_preview_svg,
    render_wrapped_svg,
)
from tests.conftest import StubGenerator


def _request(**kwargs) -> ImageRequest:
    defaults = dict(
        open_prompt="open medium kebab with chicken",
        wrapped_prompt="wrapped medium kebab",
        size="medium",
        ingredients=["Whole Wheat Tortilla", "Chicken Breast", "Lettuce"],
        measurements=Measurements(length=20, diameter=5, weight=250),
    )
    defaults.update(kwargs)
    return ImageRequest(**defaults)


def _decode(data_uri: str) -> str:
    prefix = "data:image/svg+xml;base64,"
    assert data_uri.startswith(prefix)
    return base64.b64decode(data_uri[len(prefix):]).decode("utf-8")


# =============================================================================
# ORCHESTRATOR
# =============================================================================

async def test_first_successful_tier_wins(catalog):
    first = StubGenerator("huggingface", FailureKind.SERVICE_UNAVAILABLE)
    second = StubGenerator("pollinations")
    third = StubGenerator("craiyon")
    orchestrator = ImageOrchestrator([first, second, third], LocalSvgRenderer(catalog))

    images = await orchestrator.generate_images(_request())

    assert images.open_image == "https://img.test/pollinations/open.png"
    assert images.metadata["service"] == "Stub pollinations"
    assert images.metadata["provider"] == "pollinations"
    assert [a["outcome"] for a in images.metadata["attempts"]] == ["service_unavailable", "success"]
    assert third.calls == 0


async def test_all_tiers_rate_limited_falls_back_to_svg(orchestrator):
    images = await orchestrator.generate_images(_request())

    assert images.metadata["service"] == "Local SVG (Free)"
    assert images.metadata["provider"] == "local_svg"
    outcomes = [a["outcome"] for a in images.metadata["attempts"]]
    assert outcomes == ["rate_limited", "rate_limited", "rate_limited", "success"]
    assert images.open_image.startswith("data:image/svg+xml;base64,")
    assert "generatedAt" in images.metadata
    assert "totalTimeMs" in images.metadata


async def test_slow_tier_is_cut_off_by_its_timeout(catalog):
    slow = StubGenerator("huggingface", delay=5.0, timeout=0.05)
    orchestrator = ImageOrchestrator([slow], LocalSvgRenderer(catalog))

    start = time.perf_counter()
    images = await orchestrator.generate_images(_request())

    assert time.perf_counter() - start < 2.0
    assert images.metadata["attempts"][0]["outcome"] == "timeout"
    assert images.metadata["service"] == "Local SVG (Free)"


async def test_budget_exhaustion_skips_remaining_tiers(catalog):
    slow = StubGenerator("huggingface", delay=5.0, timeout=5.0)
    never = StubGenerator("pollinations")
    orchestrator = ImageOrchestrator([slow, never], LocalSvgRenderer(catalog), budget_seconds=0.05)

    start = time.perf_counter()
    images = await orchestrator.generate_images(_request())

    assert time.perf_counter() - start < 2.0
    assert [a["outcome"] for a in images.metadata["attempts"]] == ["timeout", "skipped", "success"]
    assert never.calls == 0
    assert images.metadata["service"] == "Local SVG (Free)"


async def test_crashing_tier_does_not_escape(catalog):
    broken = StubGenerator("craiyon", error=RuntimeError("boom"))
    orchestrator = ImageOrchestrator([broken], LocalSvgRenderer(catalog))

    images = await orchestrator.generate_images(_request())

    assert images.metadata["attempts"][0]["outcome"] == "service_unavailable"
    assert images.metadata["service"] == "Local SVG (Free)"


# =============================================================================
# REMOTE TIERS
# =============================================================================

async def test_pollinations_rate_limit():
    transport = httpx.MockTransport(lambda request: httpx.Response(429))
    generator = PollinationsImageGenerator(transport=transport)

    result = await generator.generate(_request())

    assert not result.success
    assert result.failure_kind == FailureKind.RATE_LIMITED


async def test_pollinations_builds_prompt_urls():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200)

    generator = PollinationsImageGenerator(
        transport=httpx.MockTransport(handler),
        rng=random.Random(1),
    )
    result = await generator.generate(_request(open_prompt_compact="open compact kebab"))

    assert result.success
    assert seen[0].method == "HEAD"
    open_url = result.images.open_image
    assert open_url.startswith("https://image.pollinations.ai/prompt/open%20compact%20kebab?")
    assert "model=flux" in open_url
    assert "width=512" in open_url
    assert result.images.metadata["service"] == "Pollinations.ai (Free)"


async def test_pollinations_server_error_is_unavailable():
    transport = httpx.MockTransport(lambda request: httpx.Response(503))
    result = await PollinationsImageGenerator(transport=transport).generate(_request())

    assert result.failure_kind == FailureKind.SERVICE_UNAVAILABLE


async def test_huggingface_returns_data_uris():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, content=b"\xff\xd8jpeg", headers={"content-type": "image/jpeg"})

    generator = HuggingFaceImageGenerator(api_key="hf_test", transport=httpx.MockTransport(handler))
    result = await generator.generate(_request())

    assert result.success
    assert len(calls) == 2
    assert calls[0].headers["authorization"] == "Bearer hf_test"
    assert result.images.open_image.startswith("data:image/jpeg;base64,")
    assert result.images.metadata["service"] == "HuggingFace (Free)"


async def test_huggingface_timeout():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    generator = HuggingFaceImageGenerator(transport=httpx.MockTransport(handler))
    result = await generator.generate(_request())

    assert result.failure_kind == FailureKind.TIMEOUT


async def test_huggingface_json_instead_of_image():
    transport = httpx.MockTransport(
        lambda request: httpx.Response(200, json={"error": "Model is loading"})
    )
    result = await HuggingFaceImageGenerator(transport=transport).generate(_request())

    assert result.failure_kind == FailureKind.SERVICE_UNAVAILABLE


async def test_craiyon_reuses_open_image_for_wrapped_view():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"images": ["abc123"]}))
    result = await CraiyonImageGenerator(transport=transport).generate(_request())

    assert result.success
    assert result.images.open_image == "data:image/jpeg;base64,abc123"
    assert result.images.wrapped_image == result.images.open_image


async def test_craiyon_without_images():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"images": []}))
    result = await CraiyonImageGenerator(transport=transport).generate(_request())

    assert result.failure_kind == FailureKind.SERVICE_UNAVAILABLE


async def test_mock_generator_outcomes():
    ok = MockImageGenerator("pollinations", failure_rate=0.0, min_latency=0, max_latency=0)
    result = await ok.generate(_request())
    assert result.success
    assert result.images.open_image.startswith("https://picsum.photos/seed/")

    failing = MockImageGenerator("craiyon", failure_rate=1.0, min_latency=0, max_latency=0)
    result = await failing.generate(_request())
    assert not result.success
    assert result.failure_kind in set(FailureKind)


def test_factory_uses_mocks_in_development(monkeypatch):
    monkeypatch.setenv("ENV_MODE", "development")
    monkeypatch.setenv("IMAGE_SERVICE_PRIORITY", "pollinations, bogus ,craiyon")
    get_settings.cache_clear()

    generators = build_generators()

    assert [g.provider_name for g in generators] == ["pollinations", "craiyon"]
    assert all(isinstance(g, MockImageGenerator) for g in generators)


def test_factory_uses_real_tiers_in_production(monkeypatch):
    monkeypatch.setenv("ENV_MODE", "production")
    monkeypatch.setenv("IMAGE_SERVICE_PRIORITY", "huggingface,pollinations,craiyon")
    get_settings.cache_clear()

    generators = build_generators()

    assert [type(g) for g in generators] == [
        HuggingFaceImageGenerator,
        PollinationsImageGenerator,
        CraiyonImageGenerator,
    ]
    assert generators[0].timeout == 3.0


# =============================================================================
# LOCAL SVG
# =============================================================================

def test_local_svg_uses_catalog_colours(catalog):
    images = LocalSvgRenderer(catalog).render(_request())

    open_svg = _decode(images.open_image)
    assert catalog.find_by_name("Chicken Breast").color in open_svg
    assert "MEDIUM KEBAB - OPEN VIEW" in open_svg
    assert images.metadata["service"] == "Local SVG (Free)"


def test_local_svg_unknown_ingredient_gets_neutral_swatch():
    images = LocalSvgRenderer().render(_request(ingredients=["Mystery <Meat>"]))

    open_svg = _decode(images.open_image)
    assert "#94A3B8" in open_svg
    assert "Mystery &lt;M" in open_svg


def test_wrapped_svg_tolerates_missing_measurements():
    svg = render_wrapped_svg("large", Measurements(length=None, diameter=None, weight=None))

    assert svg.startswith("<svg")
    assert "20 cm" in svg
    assert "Weight: 0g" in svg


def test_open_svg_caps_swatches(catalog):
    names = [i.name for i in catalog.list_ingredients()]
    images = LocalSvgRenderer(catalog).render(_request(ingredients=names))

    assert _decode(images.open_image).count("<ellipse") == 1 + 12


# =============================================================================
# PROMPTS AND PREVIEW
# =============================================================================

def test_prompts_come_from_visual_descriptions(catalog):
    composition = resolve_composition("medium", [21, 1, 5, 11], catalog)
    request = build_prompts(composition)

    assert catalog.get_ingredient(21).visual_description in request.open_prompt
    assert catalog.get_ingredient(1).visual_description in request.open_prompt
    assert "20cm long" in request.wrapped_prompt
    assert len(request.open_prompt_compact) < len(request.open_prompt)
    assert request.ingredients == ["Whole Wheat Tortilla", "Chicken Breast", "Lettuce", "Garlic Sauce"]
    assert request.measurements.weight == 250


def test_description_sentence(catalog):
    composition = resolve_composition("medium", [21, 1, 5, 11], catalog)
    text = describe_composition(composition.size, composition.ingredients)

    assert text == (
        "Medium kebab (20cm x 5cm) featuring whole wheat tortilla wrapped around "
        "chicken breast, topped with lettuce, drizzled with garlic sauce. "
        "Weighs approximately 250g and serves 1-2."
    )


def test_preview_layers_and_coverage(catalog):
    composition = resolve_composition("large", [1, 5, 11, 16], catalog)
    preview = build_preview(composition, catalog)

    layers = preview["layers"]
    assert layers[0]["type"] == "base"
    assert layers[0]["name"] == "White Flour Tortilla"
    coverage = {layer["type"]: layer["coverage"] for layer in layers[1:]}
    assert coverage == {"protein": 80, "vegetable": 70, "sauce": 50, "extra": 60}
    assert preview["size"]["dimensions"] == "25cm x 6cm"


def test_preview_svg_dimensions(catalog):
    family = catalog.get_size("family")
    svg = render_preview_svg(family, [])

    assert svg.startswith('<svg width="400" height="200"')


def test_orchestrator_factory_is_cached_until_reset(monkeypatch):
    monkeypatch.setenv("ENV_MODE", "development")
    monkeypatch.setenv("IMAGE_SERVICE_PRIORITY", "craiyon")
    get_settings.cache_clear()
    reset_image_orchestrator()

    try:
        orchestrator = get_image_orchestrator()
        assert orchestrator is get_image_orchestrator()
        assert orchestrator.tier_names == ["craiyon", "local_svg"]

        monkeypatch.setenv("IMAGE_SERVICE_PRIORITY", "pollinations")
        get_settings.cache_clear()
        reset_image_orchestrator()
        assert get_image_orchestrator().tier_names == ["pollinations", "local_svg"]
    finally:
        reset_image_orchestrator()
