"""
FastAPI Application Entry Point

Kebab Builder API - custom kebab composition, pricing, ordering and
best-effort image generation.
Supports both Mock image tiers (development) and real free APIs (production).

Endpoints:
    - GET  /ingredients: Browse the catalog
    - POST /ingredients/preview: Layered SVG preview of a selection
    - GET  /kebab-builder/config: Menu snapshot for the builder UI
    - POST /kebab-builder/calculate: Price a selection
    - POST /kebab-builder/create: Place an order
    - POST /kebab-builder/generate-images: Open/wrapped kebab images
    - GET  /orders: List orders
    - GET  /health: System health check
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from kebab_builder.core.config import get_settings, setup_logging
from kebab_builder.core.exceptions import KebabBuilderError, ValidationError
from kebab_builder.database import engine, get_db, init_db
from kebab_builder.models import OrderStatus
from kebab_builder.schemas import (
    BuilderConfigResponse,
    CalculateResponse,
    CreateOrderRequest,
    ErrorResponse,
    GenerateImagesRequest,
    GenerateImagesResponse,
    HealthResponse,
    IngredientListResponse,
    IngredientResponse,
    KebabData,
    MeasurementsSchema,
    OrderCreateResponse,
    OrderListResponse,
    OrderResponse,
    OrderStatusUpdate,
    PopularComboResponse,
    PreviewRequest,
    PreviewResponse,
    PromptResponse,
    SelectionRequest,
)
from kebab_builder.services.catalog import POPULAR_COMBOS, Catalog, get_catalog
from kebab_builder.services.composer import resolve_composition
from kebab_builder.services.images import (
    ImageOrchestrator,
    ImageRequest,
    Measurements,
    build_preview,
    build_prompts,
    get_image_orchestrator,
)
from kebab_builder.services.orders import (
    Address,
    CustomerInfo,
    OrderService,
    get_order_service,
)
from kebab_builder.services.pricing import aggregate

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)

ERROR_RESPONSES = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    # Startup
    logger.info("=" * 60)
    logger.info(f"🚀 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    await init_db()
    logger.info("✅ Database initialized")

    catalog = get_catalog()
    orchestrator = get_image_orchestrator()
    logger.info(f"✅ Catalog: {len(catalog.list_ingredients())} ingredients")
    logger.info(f"✅ Image tiers: {' -> '.join(orchestrator.tier_names)}")

    logger.info("=" * 60)
    logger.info("✅ Application ready!")
    logger.info("=" * 60)

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    await engine.dispose()
    logger.info("✅ Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "Build a custom kebab, price it, order it and preview it. "
        "Image generation falls back across free AI services to a local SVG renderer."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """API root with navigation links."""
    return {
        "message": f"🥙 Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "documentation": "/docs",
        "builder": "/kebab-builder/config",
        "health": "/health",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(
    db: AsyncSession = Depends(get_db),
    orchestrator: ImageOrchestrator = Depends(get_image_orchestrator),
) -> HealthResponse:
    """Verify the database is reachable and list the image tiers."""
    db_status = "healthy"
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        db_status = f"unhealthy: {str(e)}"
        logger.error(f"Database health check failed: {e}")

    return HealthResponse(
        status="operational" if db_status == "healthy" else "degraded",
        database=db_status,
        environment=settings.env_mode.value,
        image_tiers=orchestrator.tier_names,
        timestamp=datetime.now(),
    )


# =============================================================================
# INGREDIENT ENDPOINTS
# =============================================================================

@app.get(
    "/ingredients",
    response_model=IngredientListResponse,
    responses=ERROR_RESPONSES,
    tags=["Ingredients"],
)
async def list_ingredients(
    category: Optional[str] = Query(None, examples=["protein"]),
    available: bool = Query(False, description="Only available ingredients"),
    catalog: Catalog = Depends(get_catalog),
) -> IngredientListResponse:
    """List catalog ingredients, optionally filtered by category."""
    try:
        ingredients = catalog.list_ingredients(category, available_only=available)
    except ValueError:
        raise ValidationError(
            f"Invalid category. Options: {catalog.categories}",
            field="category",
        )

    return IngredientListResponse(
        total=len(ingredients),
        ingredients=[IngredientResponse.model_validate(i) for i in ingredients],
    )


@app.get(
    "/ingredients/{ingredient_id}",
    response_model=IngredientResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Ingredients"],
)
async def get_ingredient(
    ingredient_id: int,
    catalog: Catalog = Depends(get_catalog),
) -> IngredientResponse:
    """Get a single ingredient by id."""
    return IngredientResponse.model_validate(catalog.require_ingredient(ingredient_id))


@app.post(
    "/ingredients/preview",
    response_model=PreviewResponse,
    responses=ERROR_RESPONSES,
    tags=["Ingredients"],
    summary="Layered SVG Preview",
)
async def preview_kebab(
    body: PreviewRequest,
    catalog: Catalog = Depends(get_catalog),
) -> PreviewResponse:
    """Render the local layered preview and description for a selection."""
    composition = resolve_composition(body.size, body.selected_ingredients, catalog)
    return PreviewResponse.model_validate(build_preview(composition, catalog))


# =============================================================================
# KEBAB BUILDER ENDPOINTS
# =============================================================================

@app.get(
    "/kebab-builder/config",
    response_model=BuilderConfigResponse,
    tags=["Kebab Builder"],
)
async def builder_config(catalog: Catalog = Depends(get_catalog)) -> BuilderConfigResponse:
    """Menu snapshot: sizes, categories and all ingredients."""
    return BuilderConfigResponse(
        **catalog.config_snapshot(),
        currency_symbol=settings.currency_symbol,
    )


@app.get(
    "/kebab-builder/popular",
    response_model=list[PopularComboResponse],
    tags=["Kebab Builder"],
)
async def popular_combinations(
    catalog: Catalog = Depends(get_catalog),
) -> list[PopularComboResponse]:
    """Preset combinations, priced against the current catalog."""
    combos = []
    for combo in POPULAR_COMBOS:
        composition = resolve_composition(combo["size"], combo["ingredients"], catalog)
        breakdown = aggregate(composition.size, composition.ingredients)
        combos.append(PopularComboResponse(
            id=combo["id"],
            name=combo["name"],
            size=combo["size"],
            ingredients=combo["ingredients"],
            description=combo["description"],
            estimated_price=breakdown.total_price,
        ))
    return combos


@app.post(
    "/kebab-builder/calculate",
    response_model=CalculateResponse,
    responses=ERROR_RESPONSES,
    tags=["Kebab Builder"],
    summary="Price a Selection",
)
async def calculate_price(
    body: SelectionRequest,
    catalog: Catalog = Depends(get_catalog),
) -> CalculateResponse:
    """
    Price a size and ingredient selection.

    Unknown ingredient ids are ignored and echoed in droppedIngredients.
    """
    composition = resolve_composition(body.size, body.selected_ingredients, catalog)
    breakdown = aggregate(composition.size, composition.ingredients)

    return CalculateResponse.build(
        breakdown,
        composition.ingredients,
        composition.dropped_ids,
        currency_symbol=settings.currency_symbol,
    )


@app.post(
    "/kebab-builder/prompts",
    response_model=PromptResponse,
    responses=ERROR_RESPONSES,
    tags=["Kebab Builder"],
    summary="Build Image Prompts",
)
async def build_image_prompts(
    body: SelectionRequest,
    catalog: Catalog = Depends(get_catalog),
) -> PromptResponse:
    """Build the generate-images request body for a selection."""
    composition = resolve_composition(body.size, body.selected_ingredients, catalog)
    request = build_prompts(composition)

    return PromptResponse(
        open_kebab_prompt=request.open_prompt,
        wrapped_kebab_prompt=request.wrapped_prompt,
        open_kebab_prompt_compact=request.open_prompt_compact,
        wrapped_kebab_prompt_compact=request.wrapped_prompt_compact,
        kebab_data=KebabData(
            size=request.size,
            ingredients=request.ingredients,
            measurements=MeasurementsSchema(
                length=request.measurements.length,
                diameter=request.measurements.diameter,
                weight=request.measurements.weight,
            ),
        ),
    )


@app.post(
    "/kebab-builder/create",
    response_model=OrderCreateResponse,
    status_code=201,
    responses={**ERROR_RESPONSES, 409: {"model": ErrorResponse}},
    tags=["Kebab Builder"],
    summary="Create Kebab Order",
)
async def create_kebab_order(
    body: CreateOrderRequest,
    db: AsyncSession = Depends(get_db),
    catalog: Catalog = Depends(get_catalog),
    order_service: OrderService = Depends(get_order_service),
) -> OrderCreateResponse:
    """
    Create and persist a custom kebab order.

    Flow:
    1. Resolve the selection against the catalog
    2. Price it
    3. Materialize the order (exactly one tortilla required)
    4. Persist, retrying once on an order-number collision
    """
    composition = resolve_composition(body.size, body.selected_ingredients, catalog)

    info = body.customer_info
    address = None
    if info is not None and info.address is not None:
        address = Address(
            street=info.address.street,
            city=info.address.city,
            state=info.address.state,
            zip_code=info.address.zip_code,
            country=info.address.country,
        )
    customer = CustomerInfo(
        name=(info.name if info and info.name else body.customer_name) or "Guest",
        email=info.email if info else None,
        phone=info.phone if info else None,
        address=address,
    )

    order = await order_service.place_order(
        db,
        composition,
        customer,
        delivery_type=body.delivery_type,
        special_instructions=body.special_instructions,
        payment_method=body.payment_method,
        order_source=body.order_source,
    )

    return OrderCreateResponse(
        success=True,
        message="Kebab order created successfully",
        order=OrderResponse.from_order(order),
    )


@app.post(
    "/kebab-builder/generate-images",
    response_model=GenerateImagesResponse,
    responses={400: {"model": ErrorResponse}},
    tags=["Kebab Builder"],
    summary="Generate Kebab Images",
)
async def generate_images(
    body: GenerateImagesRequest,
    catalog: Catalog = Depends(get_catalog),
    orchestrator: ImageOrchestrator = Depends(get_image_orchestrator),
) -> GenerateImagesResponse:
    """
    Generate open and wrapped kebab images.

    Always succeeds for a well-formed body: when every AI service fails
    the images come from the local SVG renderer.
    """
    data = body.kebab_data
    size_key = (data.size or "medium").strip().lower()

    defaults = Measurements()
    size = next((s for s in catalog.sizes if s.key == size_key), None)
    if size is not None:
        defaults = Measurements(length=size.length, diameter=size.diameter, weight=size.weight)

    given = data.measurements or MeasurementsSchema()
    request = ImageRequest(
        open_prompt=body.open_kebab_prompt,
        wrapped_prompt=body.wrapped_kebab_prompt,
        open_prompt_compact=body.open_kebab_prompt_compact,
        wrapped_prompt_compact=body.wrapped_kebab_prompt_compact,
        size=size_key,
        ingredients=data.ingredients,
        measurements=Measurements(
            length=given.length if given.length is not None else defaults.length,
            diameter=given.diameter if given.diameter is not None else defaults.diameter,
            weight=given.weight if given.weight is not None else defaults.weight,
        ),
    )

    images = await orchestrator.generate_images(request)
    logger.info(f"Images for {size_key} kebab served by {images.metadata.get('service')}")

    return GenerateImagesResponse(
        success=True,
        open_kebab_image=images.open_image,
        wrapped_kebab_image=images.wrapped_image,
        metadata=images.metadata,
    )


# =============================================================================
# ORDER ENDPOINTS
# =============================================================================

@app.get(
    "/orders",
    response_model=OrderListResponse,
    responses=ERROR_RESPONSES,
    tags=["Orders"],
    summary="List Orders",
)
async def list_orders(
    skip: int = Query(0, ge=0),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    order_service: OrderService = Depends(get_order_service),
) -> OrderListResponse:
    """Retrieve paginated list of orders, newest first."""
    status_enum = None
    if status:
        try:
            status_enum = OrderStatus(status.lower())
        except ValueError:
            raise ValidationError(
                f"Invalid status. Options: {[s.value for s in OrderStatus]}",
                field="status",
            )

    total, orders = await order_service.list_orders(db, status_enum, skip, limit)
    return OrderListResponse(
        total=total,
        orders=[OrderResponse.from_order(order) for order in orders],
    )


@app.get(
    "/orders/{order_number}",
    response_model=OrderResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Orders"],
)
async def get_order(
    order_number: str,
    db: AsyncSession = Depends(get_db),
    order_service: OrderService = Depends(get_order_service),
) -> OrderResponse:
    """Get a specific order by its order number."""
    order = await order_service.get_order(db, order_number)
    return OrderResponse.from_order(order)


@app.patch(
    "/orders/{order_number}/status",
    response_model=OrderResponse,
    responses={**ERROR_RESPONSES, 404: {"model": ErrorResponse}},
    tags=["Orders"],
)
async def update_order_status(
    order_number: str,
    body: OrderStatusUpdate,
    db: AsyncSession = Depends(get_db),
    order_service: OrderService = Depends(get_order_service),
) -> OrderResponse:
    """Move an order to a new status."""
    order = await order_service.update_status(db, order_number, body.status)
    return OrderResponse.from_order(order)


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

@app.exception_handler(KebabBuilderError)
async def domain_exception_handler(request: Request, exc: KebabBuilderError) -> JSONResponse:
    """Render domain errors with their status and offending field."""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__}: {exc.message}")
    else:
        logger.info(f"Rejected {request.method} {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.message, field=exc.field).model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Malformed request bodies are client errors (400), named by field."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    names = [str(part) for part in first.get("loc", ()) if isinstance(part, str) and part != "body"]
    field = names[-1] if names else None
    message = first.get("msg", "Invalid request")

    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error=f"Invalid request: {message}",
            field=field,
            detail=str(errors) if settings.debug else None,
        ).model_dump(),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal Server Error",
            "field": None,
            "detail": str(exc) if settings.debug else "An unexpected error occurred",
        },
    )


def run() -> None:
    """Serve the API with uvicorn on the configured host and port."""
    uvicorn.run(
        "kebab_builder.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
    )


if __name__ == "__main__":
    run()
