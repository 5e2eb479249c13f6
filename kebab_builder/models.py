"""
SQLAlchemy Database Models

Persisted order documents for the kebab storefront:
- Pickup/Delivery order types
- Line items snapshotted from the catalog at checkout
- Price and nutrition summary
- Soft lifecycle through the status column (never hard-deleted)
"""

import enum
import json
from datetime import datetime
from typing import Optional

from sqlalchemy import Column, Integer, String, Float, DateTime, Text, Enum
from sqlalchemy.sql import func

from kebab_builder.database import Base


class OrderStatus(str, enum.Enum):
    """Order status workflow."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, enum.Enum):
    CASH = "cash"
    CARD = "card"
    ONLINE = "online"


class DeliveryType(str, enum.Enum):
    """Order type - Pickup or Delivery."""
    PICKUP = "pickup"
    DELIVERY = "delivery"


class OrderSource(str, enum.Enum):
    WEB = "web"
    MOBILE = "mobile"
    PHONE = "phone"


class Order(Base):
    """
    Main Order table - stores every materialized kebab order.

    Tracks the lifecycle from checkout to delivery/pickup.
    """
    __tablename__ = "orders"

    # Primary Key
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Human-friendly ORD-YYYYMMDD-NNN number
    order_number = Column(String(20), nullable=False, unique=True, index=True)

    # =========================================================================
    # COMPOSITION
    # =========================================================================
    size = Column(String(20), nullable=False)
    items = Column(Text, nullable=False)  # JSON string of line items
    special_instructions = Column(Text, nullable=True)

    # =========================================================================
    # CUSTOMER INFORMATION
    # =========================================================================
    customer_name = Column(String(100), nullable=False)
    customer_email = Column(String(255), nullable=True, index=True)
    customer_phone = Column(String(20), nullable=True)

    # Delivery address (only for delivery orders)
    street = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    zip_code = Column(String(20), nullable=True)
    country = Column(String(50), nullable=True)

    # =========================================================================
    # SUMMARY
    # =========================================================================
    base_price = Column(Float, nullable=False)
    ingredients_price = Column(Float, nullable=False)
    total_price = Column(Float, nullable=False)
    total_protein = Column(Float, nullable=False, default=0.0)
    total_weight = Column(Integer, nullable=False, default=0)
    item_count = Column(Integer, nullable=False)
    total_calories = Column(Integer, nullable=False, default=0)
    total_carbs = Column(Float, nullable=False, default=0.0)
    total_fat = Column(Float, nullable=False, default=0.0)
    total_fiber = Column(Float, nullable=False, default=0.0)
    total_sodium = Column(Integer, nullable=False, default=0)
    allergens = Column(Text, nullable=False, default="[]")  # JSON list of allergen names

    # =========================================================================
    # STATUS
    # =========================================================================
    status = Column(
        Enum(OrderStatus),
        default=OrderStatus.PENDING,
        nullable=False,
        index=True
    )
    payment_status = Column(
        Enum(PaymentStatus),
        default=PaymentStatus.PENDING,
        nullable=False
    )
    payment_method = Column(
        Enum(PaymentMethod),
        default=PaymentMethod.CASH,
        nullable=False
    )
    delivery_type = Column(
        Enum(DeliveryType),
        default=DeliveryType.PICKUP,
        nullable=False,
        index=True
    )
    order_source = Column(
        Enum(OrderSource),
        default=OrderSource.WEB,
        nullable=False
    )

    # =========================================================================
    # TIMESTAMPS
    # =========================================================================
    estimated_delivery_time = Column(DateTime(timezone=True), nullable=True)
    actual_delivery_time = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    @property
    def line_items(self) -> list[dict]:
        """Decoded line items."""
        return json.loads(self.items or "[]")

    @property
    def allergen_list(self) -> list[str]:
        return json.loads(self.allergens or "[]")

    def nutrition_dict(self) -> dict:
        return {
            "calories": self.total_calories or 0,
            "carbs": self.total_carbs or 0.0,
            "fat": self.total_fat or 0.0,
            "fiber": self.total_fiber or 0.0,
            "sodium": self.total_sodium or 0,
        }

    @property
    def delivery_delay_minutes(self) -> float:
        """Minutes the order arrived after its estimate (0 when on time or not delivered)."""
        if not self.actual_delivery_time or not self.estimated_delivery_time:
            return 0.0
        actual: datetime = self.actual_delivery_time
        estimated: datetime = self.estimated_delivery_time
        # SQLite hands back naive datetimes
        if (actual.tzinfo is None) != (estimated.tzinfo is None):
            actual = actual.replace(tzinfo=None)
            estimated = estimated.replace(tzinfo=None)
        return max(0.0, (actual - estimated).total_seconds() / 60)

    @property
    def has_address(self) -> bool:
        return bool(self.street)

    def address_dict(self) -> Optional[dict]:
        if not self.has_address:
            return None
        return {
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
            "country": self.country,
        }

    def __repr__(self):
        return f"<Order {self.order_number} - {self.delivery_type.value} - {self.customer_name} - {self.status.value}>"
