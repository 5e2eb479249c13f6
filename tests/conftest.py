import asyncio
import os

# Must be set before kebab_builder is imported
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["ENV_MODE"] = "development"

from typing import Optional

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from kebab_builder.core.config import get_settings
from kebab_builder.database import Base, get_db
from kebab_builder.main import app
from kebab_builder.services.catalog import Catalog, get_catalog
from kebab_builder.services.catalog.data import DEFAULT_INGREDIENTS, DEFAULT_SIZES
from kebab_builder.services.images import (
    BaseImageGenerator,
    FailureKind,
    GeneratedImages,
    ImageOrchestrator,
    ImageRequest,
    ImageResult,
    LocalSvgRenderer,
    get_image_orchestrator,
)


class StubGenerator(BaseImageGenerator):
    """Image tier with a scripted outcome."""

    def __init__(
        self,
        name: str,
        failure: Optional[FailureKind] = None,
        delay: float = 0.0,
        timeout: float = 1.0,
        error: Optional[Exception] = None,
    ):
        self.name = name
        self.failure = failure
        self.delay = delay
        self.timeout = timeout
        self.error = error
        self.calls = 0

    @property
    def provider_name(self) -> str:
        return self.name

    @property
    def display_name(self) -> str:
        return f"Stub {self.name}"

    async def generate(self, request: ImageRequest) -> ImageResult:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.failure is not None:
            return ImageResult.failed(self.failure, f"{self.name} failed")
        return ImageResult.ok(GeneratedImages(
            open_image=f"https://img.test/{self.name}/open.png",
            wrapped_image=f"https://img.test/{self.name}/wrapped.png",
            metadata={"service": self.display_name},
        ))


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def catalog() -> Catalog:
    return Catalog(DEFAULT_INGREDIENTS, DEFAULT_SIZES)


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
def orchestrator(catalog) -> ImageOrchestrator:
    """Every remote tier rate limited, so the local SVG answers."""
    return ImageOrchestrator(
        [
            StubGenerator("huggingface", FailureKind.RATE_LIMITED),
            StubGenerator("pollinations", FailureKind.RATE_LIMITED),
            StubGenerator("craiyon", FailureKind.RATE_LIMITED),
        ],
        LocalSvgRenderer(catalog),
        budget_seconds=5.0,
    )


@pytest.fixture
async def client(session_maker, catalog, orchestrator):
    async def override_get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_catalog] = lambda: catalog
    app.dependency_overrides[get_image_orchestrator] = lambda: orchestrator

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
