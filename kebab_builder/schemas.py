"""
Pydantic Schemas for Request/Response Validation

Wire format is camelCase (the storefront's JSON convention); Python code
uses snake_case field names. Every model accepts both on input.
"""

import re
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from kebab_builder.models import (
    DeliveryType,
    Order,
    OrderSource,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from kebab_builder.services.catalog import Allergen, Category, Ingredient
from kebab_builder.services.pricing import PriceBreakdown


class CamelModel(BaseModel):
    """Base model serialised with camelCase aliases."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# CATALOG
# =============================================================================

class NutritionSchema(CamelModel):
    """Calories (kcal), carbs, fat and fiber (g), sodium (mg)."""
    calories: float = 0
    carbs: float = 0
    fat: float = 0
    fiber: float = 0
    sodium: float = 0


class IngredientResponse(CamelModel):
    """A catalog ingredient."""
    id: int
    name: str
    category: Category
    price: float
    protein: float
    weight: float
    image: Optional[str] = None
    description: Optional[str] = None
    available: bool = True
    single_selection: bool = False
    color: Optional[str] = None
    visual_description: Optional[str] = None
    allergens: List[Allergen] = Field(default_factory=list)
    nutritional_info: NutritionSchema = Field(default_factory=NutritionSchema)
    formatted_price: Optional[str] = None
    is_healthy: bool = False


class IngredientListResponse(CamelModel):
    total: int
    ingredients: List[IngredientResponse]


class SizeResponse(CamelModel):
    """A size tier."""
    key: str
    price: float
    length: float
    diameter: float
    weight: float
    serves: str
    description: str


class BuilderConfigResponse(CamelModel):
    """Everything the builder UI needs to render the menu."""
    base_prices: dict[str, SizeResponse]
    ingredient_categories: List[str]
    sizes: List[str]
    ingredients: List[IngredientResponse]
    currency_symbol: str = "$"


class PopularComboResponse(CamelModel):
    id: int
    name: str
    size: str
    ingredients: List[int]
    description: str
    estimated_price: float


# =============================================================================
# COMPOSITION / PRICING
# =============================================================================

class SelectionRequest(CamelModel):
    """A size and the selected ingredient ids (unknown ids are ignored)."""
    size: Optional[str] = Field(None, examples=["medium"])
    selected_ingredients: List[Any] = Field(default_factory=list, examples=[[20, 1, 5]])


class PreviewRequest(SelectionRequest):
    selected_ingredients: List[Any] = Field(..., examples=[[20, 1, 5]])


class BreakdownLines(CamelModel):
    base: str
    ingredients: str
    total: str
    protein: str
    weight: str
    calories: str


class CalculateResponse(CamelModel):
    """Priced composition."""
    size: str
    base_price: float
    ingredients_price: float
    total_price: float
    total_protein: float
    total_weight: int
    item_count: int
    nutrition: NutritionSchema
    allergens: List[str] = Field(default_factory=list)
    selected_ingredients: List[IngredientResponse]
    dropped_ingredients: List[Any] = Field(default_factory=list)
    breakdown: BreakdownLines

    @classmethod
    def build(
        cls,
        breakdown: PriceBreakdown,
        ingredients: List[Ingredient],
        dropped: List[Any],
        currency_symbol: str = "$",
    ) -> "CalculateResponse":
        return cls(
            size=breakdown.size,
            base_price=breakdown.base_price,
            ingredients_price=breakdown.ingredients_price,
            total_price=breakdown.total_price,
            total_protein=breakdown.total_protein,
            total_weight=breakdown.total_weight,
            item_count=breakdown.item_count,
            nutrition=NutritionSchema.model_validate(breakdown.nutrition),
            allergens=list(breakdown.allergens),
            selected_ingredients=[IngredientResponse.model_validate(i) for i in ingredients],
            dropped_ingredients=dropped,
            breakdown=BreakdownLines(**breakdown.lines(currency_symbol)),
        )


# =============================================================================
# IMAGES
# =============================================================================

class MeasurementsSchema(CamelModel):
    length: Optional[float] = None
    diameter: Optional[float] = None
    weight: Optional[float] = None


class KebabData(CamelModel):
    """Composition summary used by the image tiers."""
    size: Optional[str] = None
    ingredients: List[str] = Field(default_factory=list)
    measurements: Optional[MeasurementsSchema] = None


class PromptResponse(CamelModel):
    """Ready-to-send body for /kebab-builder/generate-images."""
    open_kebab_prompt: str
    wrapped_kebab_prompt: str
    open_kebab_prompt_compact: Optional[str] = None
    wrapped_kebab_prompt_compact: Optional[str] = None
    kebab_data: KebabData


class GenerateImagesRequest(CamelModel):
    open_kebab_prompt: str = Field(..., min_length=1)
    wrapped_kebab_prompt: str = Field(..., min_length=1)
    open_kebab_prompt_compact: Optional[str] = None
    wrapped_kebab_prompt_compact: Optional[str] = None
    kebab_data: KebabData


class GenerateImagesResponse(CamelModel):
    success: bool = True
    open_kebab_image: str
    wrapped_kebab_image: str
    metadata: dict[str, Any]


class PreviewLayer(CamelModel):
    type: str
    name: str
    color: str
    image: Optional[str] = None
    coverage: Optional[int] = None


class PreviewSize(CamelModel):
    name: str
    dimensions: str
    length: float
    width: float
    weight: float
    serves: str
    description: str


class PreviewVisualization(CamelModel):
    svg: str
    description: str


class PreviewResponse(CamelModel):
    size: PreviewSize
    layers: List[PreviewLayer]
    visualization: PreviewVisualization


# =============================================================================
# ORDERS
# =============================================================================

class AddressSchema(CamelModel):
    street: str = Field(..., min_length=1, max_length=255, examples=["350 Fifth Avenue"])
    city: str = Field(..., min_length=1, max_length=100, examples=["New York"])
    state: str = Field(..., min_length=1, max_length=100, examples=["NY"])
    zip_code: str = Field(..., min_length=1, max_length=20, examples=["10001"])
    country: str = Field(default="USA", max_length=50)


class CustomerInfoSchema(CamelModel):
    name: Optional[str] = Field(None, max_length=100, examples=["John Doe"])
    email: Optional[str] = Field(None, examples=["john@example.com"])
    phone: Optional[str] = Field(None, max_length=20, examples=["555-123-4567"])
    address: Optional[AddressSchema] = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "":
            return None
        if not re.match(r'^[\w\.+-]+@[\w\.-]+\.\w+$', v):
            raise ValueError('Invalid email format')
        return v

    @field_validator('phone')
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "":
            return None
        cleaned = re.sub(r'[^\d]', '', v)
        if len(cleaned) < 7:
            raise ValueError('Phone number must have at least 7 digits')
        return v


class CreateOrderRequest(SelectionRequest):
    """Checkout request: a selection plus customer and fulfilment details."""
    customer_name: Optional[str] = Field(None, max_length=100)
    customer_info: Optional[CustomerInfoSchema] = None
    special_instructions: Optional[str] = Field(None, max_length=500)
    delivery_type: DeliveryType = Field(default=DeliveryType.PICKUP, examples=["pickup"])
    payment_method: PaymentMethod = Field(default=PaymentMethod.CASH, examples=["cash"])
    order_source: OrderSource = OrderSource.WEB


class OrderLineResponse(CamelModel):
    ingredient_id: int
    name: str
    category: str
    quantity: int
    unit_price: float
    total_price: float
    protein: float
    weight: float


class OrderResponse(CamelModel):
    """A persisted order."""
    id: int
    order_number: str
    size: str
    items: List[OrderLineResponse]
    special_instructions: Optional[str] = None
    customer_name: str
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    address: Optional[AddressSchema] = None
    base_price: float
    ingredients_price: float
    total_price: float
    total_protein: float
    total_weight: int
    item_count: int
    nutrition: NutritionSchema
    allergens: List[str] = Field(default_factory=list)
    status: OrderStatus
    payment_status: PaymentStatus
    payment_method: PaymentMethod
    delivery_type: DeliveryType
    order_source: OrderSource
    estimated_delivery_time: Optional[datetime] = None
    actual_delivery_time: Optional[datetime] = None
    delivery_delay_minutes: float = 0.0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_order(cls, order: Order) -> "OrderResponse":
        address = order.address_dict()
        return cls(
            id=order.id,
            order_number=order.order_number,
            size=order.size,
            items=[OrderLineResponse(**line) for line in order.line_items],
            special_instructions=order.special_instructions,
            customer_name=order.customer_name,
            customer_email=order.customer_email,
            customer_phone=order.customer_phone,
            address=AddressSchema(**address) if address else None,
            base_price=order.base_price,
            ingredients_price=order.ingredients_price,
            total_price=order.total_price,
            total_protein=order.total_protein,
            total_weight=order.total_weight,
            item_count=order.item_count,
            nutrition=NutritionSchema(**order.nutrition_dict()),
            allergens=order.allergen_list,
            status=order.status,
            payment_status=order.payment_status,
            payment_method=order.payment_method,
            delivery_type=order.delivery_type,
            order_source=order.order_source,
            estimated_delivery_time=order.estimated_delivery_time,
            actual_delivery_time=order.actual_delivery_time,
            delivery_delay_minutes=order.delivery_delay_minutes,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class OrderCreateResponse(CamelModel):
    """Response after successfully creating an order."""
    success: bool = True
    message: str
    order: OrderResponse


class OrderListResponse(CamelModel):
    """Response for listing multiple orders."""
    total: int
    orders: List[OrderResponse]


class OrderStatusUpdate(CamelModel):
    status: OrderStatus


# =============================================================================
# COMMON
# =============================================================================

class ErrorResponse(CamelModel):
    """Standard error response."""
    success: bool = False
    error: str
    field: Optional[str] = None
    detail: Optional[str] = None


class HealthResponse(CamelModel):
    """Health check response."""
    status: str
    database: str
    environment: str
    image_tiers: List[str]
    timestamp: datetime
