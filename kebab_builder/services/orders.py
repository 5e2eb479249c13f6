"""
Order Materializer and Order Service

Turns a priced composition plus customer data into an Order row and
persists it. The materializer is pure (no I/O); OrderService owns the
database boundary.

Order numbers follow ORD-YYYYMMDD-NNN with a 3-digit pseudo-random
suffix. The suffix space is small, so collisions on a busy day are
possible; the unique index on order_number detects them and
OrderService retries with a fresh suffix (ORDER_NUMBER_ATTEMPTS).

Usage:
    service = get_order_service()
    order = await service.place_order(db, composition, customer, DeliveryType.PICKUP)
"""

import json
import logging
import random
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from kebab_builder.core.config import get_settings
from kebab_builder.core.exceptions import (
    EmptyOrderError,
    OrderNotFoundError,
    OrderNumberConflictError,
    QuantityLimitError,
    ValidationError,
)
from kebab_builder.models import (
    DeliveryType,
    Order,
    OrderSource,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from kebab_builder.services.composer import ResolvedComposition
from kebab_builder.services.pricing import PriceBreakdown, aggregate

logger = logging.getLogger(__name__)

MAX_LINE_QUANTITY = 10


@dataclass
class Address:
    street: str
    city: str
    state: str
    zip_code: str
    country: str = "USA"


@dataclass
class CustomerInfo:
    """Customer contact details captured at checkout."""
    name: str = "Guest"
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[Address] = None


# =============================================================================
# DERIVED FIELDS
# =============================================================================

def generate_order_number(
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """
    Build an ORD-YYYYMMDD-NNN order number.

    Args:
        now: Creation time (defaults to current UTC time)
        rng: Random source for the suffix (non-cryptographic)
    """
    now = now or datetime.now(timezone.utc)
    rng = rng or random
    return f"ORD-{now:%Y%m%d}-{rng.randrange(1000):03d}"


def estimate_delivery_time(
    delivery_type: DeliveryType,
    now: Optional[datetime] = None,
    pickup_minutes: int = 20,
    delivery_minutes: int = 45,
) -> datetime:
    """Fixed heuristic: creation time plus pickup or delivery minutes."""
    now = now or datetime.now(timezone.utc)
    minutes = delivery_minutes if delivery_type == DeliveryType.DELIVERY else pickup_minutes
    return now + timedelta(minutes=minutes)


def build_line_items(composition: ResolvedComposition) -> list[dict]:
    """
    Group resolved ingredients into order lines.

    Repeated ingredients become one line with a quantity.

    Raises:
        QuantityLimitError: If an ingredient is repeated more than 10 times
    """
    grouped: "OrderedDict[int, list]" = OrderedDict()
    for ingredient in composition.ingredients:
        grouped.setdefault(ingredient.id, []).append(ingredient)

    lines = []
    for ingredient_id, same in grouped.items():
        ingredient = same[0]
        quantity = len(same)
        if quantity > MAX_LINE_QUANTITY:
            raise QuantityLimitError(ingredient.name, quantity, MAX_LINE_QUANTITY)
        lines.append({
            "ingredient_id": ingredient_id,
            "name": ingredient.name,
            "category": ingredient.category.value,
            "quantity": quantity,
            "unit_price": ingredient.price,
            "total_price": round(ingredient.price * quantity, 2),
            "protein": round(ingredient.protein * quantity, 1),
            "weight": round(ingredient.weight * quantity),
        })
    return lines


# =============================================================================
# MATERIALIZER
# =============================================================================

class OrderMaterializer:
    """
    Converts a priced composition and customer data into an unsaved Order.

    The materializer never transitions status past PENDING; kitchen and
    staff workflow moves orders along through OrderService.update_status.
    """

    def __init__(
        self,
        pickup_minutes: int = 20,
        delivery_minutes: int = 45,
        rng: Optional[random.Random] = None,
    ):
        self.pickup_minutes = pickup_minutes
        self.delivery_minutes = delivery_minutes
        self.rng = rng or random.Random()

    def materialize(
        self,
        composition: ResolvedComposition,
        breakdown: PriceBreakdown,
        customer: CustomerInfo,
        delivery_type: DeliveryType = DeliveryType.PICKUP,
        special_instructions: Optional[str] = None,
        payment_method: PaymentMethod = PaymentMethod.CASH,
        order_source: OrderSource = OrderSource.WEB,
        now: Optional[datetime] = None,
    ) -> Order:
        """
        Build an Order row for a composition.

        Raises:
            EmptyOrderError: No resolvable ingredients
            MissingBaseError / MultipleBaseError: Not exactly one tortilla
            QuantityLimitError: An ingredient repeated more than 10 times
            ValidationError: Delivery order without an address
        """
        lines = build_line_items(composition)
        if not lines:
            raise EmptyOrderError()
        composition.ensure_single_base()

        if delivery_type == DeliveryType.DELIVERY and customer.address is None:
            raise ValidationError("Delivery orders require an address", field="address")

        now = now or datetime.now(timezone.utc)
        address = customer.address

        return Order(
            order_number=generate_order_number(now, self.rng),
            size=composition.size.key,
            items=json.dumps(lines),
            special_instructions=special_instructions or None,
            customer_name=customer.name or "Guest",
            customer_email=customer.email.lower() if customer.email else None,
            customer_phone=customer.phone,
            street=address.street if address else None,
            city=address.city if address else None,
            state=address.state if address else None,
            zip_code=address.zip_code if address else None,
            country=address.country if address else None,
            base_price=breakdown.base_price,
            ingredients_price=breakdown.ingredients_price,
            total_price=breakdown.total_price,
            total_protein=breakdown.total_protein,
            total_weight=breakdown.total_weight,
            item_count=breakdown.item_count,
            total_calories=breakdown.nutrition.calories,
            total_carbs=breakdown.nutrition.carbs,
            total_fat=breakdown.nutrition.fat,
            total_fiber=breakdown.nutrition.fiber,
            total_sodium=breakdown.nutrition.sodium,
            allergens=json.dumps(list(breakdown.allergens)),
            status=OrderStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            payment_method=payment_method,
            delivery_type=delivery_type,
            order_source=order_source,
            estimated_delivery_time=estimate_delivery_time(
                delivery_type, now, self.pickup_minutes, self.delivery_minutes
            ),
        )


# =============================================================================
# PERSISTENCE
# =============================================================================

def is_order_number_conflict(exc: IntegrityError) -> bool:
    """True when the unique order_number index rejected the insert."""
    message = str(exc.orig).lower()
    return "order_number" in message and ("unique" in message or "duplicate" in message)


class OrderService:
    """Persists materialized orders and applies status changes."""

    def __init__(self, materializer: OrderMaterializer, max_attempts: int = 2):
        self.materializer = materializer
        self.max_attempts = max(1, max_attempts)

    async def place_order(
        self,
        db: AsyncSession,
        composition: ResolvedComposition,
        customer: CustomerInfo,
        delivery_type: DeliveryType = DeliveryType.PICKUP,
        special_instructions: Optional[str] = None,
        payment_method: PaymentMethod = PaymentMethod.CASH,
        order_source: OrderSource = OrderSource.WEB,
    ) -> Order:
        """
        Price, materialize and insert an order.

        A uniqueness violation on the order number is retried with a
        freshly drawn suffix until max_attempts is reached.

        Raises:
            OrderNumberConflictError: Every attempt collided
        """
        breakdown = aggregate(composition.size, composition.ingredients)

        for attempt in range(1, self.max_attempts + 1):
            order = self.materializer.materialize(
                composition,
                breakdown,
                customer,
                delivery_type=delivery_type,
                special_instructions=special_instructions,
                payment_method=payment_method,
                order_source=order_source,
            )
            db.add(order)
            try:
                await db.commit()
            except IntegrityError as exc:
                await db.rollback()
                if not is_order_number_conflict(exc):
                    raise
                logger.warning(
                    f"Order number {order.order_number} already taken "
                    f"(attempt {attempt}/{self.max_attempts})"
                )
                continue

            await db.refresh(order)
            logger.info(
                f"Order {order.order_number} created: {order.size} kebab, "
                f"{order.item_count} items, ${order.total_price:.2f}"
            )
            return order

        raise OrderNumberConflictError(self.max_attempts)

    async def get_order(self, db: AsyncSession, order_number: str) -> Order:
        result = await db.execute(select(Order).where(Order.order_number == order_number))
        order = result.scalar_one_or_none()
        if order is None:
            raise OrderNotFoundError(order_number)
        return order

    async def list_orders(
        self,
        db: AsyncSession,
        status: Optional[OrderStatus] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> tuple[int, list[Order]]:
        """Newest-first page of orders plus the total count."""
        query = select(Order).order_by(Order.created_at.desc(), Order.id.desc())
        count_query = select(func.count(Order.id))

        if status is not None:
            query = query.where(Order.status == status)
            count_query = count_query.where(Order.status == status)

        total_result = await db.execute(count_query)
        total = total_result.scalar() or 0

        result = await db.execute(query.offset(skip).limit(limit))
        return total, list(result.scalars().all())

    async def update_status(
        self,
        db: AsyncSession,
        order_number: str,
        status: OrderStatus,
    ) -> Order:
        """
        Move an order to a new status.

        Any transition is accepted. Marking an order delivered stamps
        its actual delivery time.
        """
        order = await self.get_order(db, order_number)
        previous = order.status
        order.status = status
        if status == OrderStatus.DELIVERED and order.actual_delivery_time is None:
            order.actual_delivery_time = datetime.now(timezone.utc)

        await db.commit()
        await db.refresh(order)
        logger.info(f"Order {order_number}: {previous.value} -> {status.value}")
        return order


@lru_cache()
def get_order_service() -> OrderService:
    """Get the configured order service."""
    settings = get_settings()
    materializer = OrderMaterializer(
        pickup_minutes=settings.pickup_minutes,
        delivery_minutes=settings.delivery_minutes,
    )
    return OrderService(materializer, max_attempts=settings.order_number_attempts)
