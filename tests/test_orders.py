import json
import random
import re
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from kebab_builder.core.exceptions import (
    EmptyOrderError,
    MissingBaseError,
    MultipleBaseError,
    OrderNotFoundError,
    OrderNumberConflictError,
    QuantityLimitError,
    ValidationError,
)
from kebab_builder.models import DeliveryType, OrderStatus, PaymentStatus
from kebab_builder.services.composer import resolve_composition
from kebab_builder.services.orders import (
    Address,
    CustomerInfo,
    OrderMaterializer,
    OrderService,
    build_line_items,
    estimate_delivery_time,
    generate_order_number,
)
from kebab_builder.services.pricing import aggregate

ORDER_NUMBER = re.compile(r"^ORD-\d{8}-\d{3}$")
NOW = datetime(2024, 3, 9, 12, 0, tzinfo=timezone.utc)


class ScriptedRandom(random.Random):
    """Random source whose randrange() replays fixed values."""

    def __init__(self, *values: int):
        super().__init__(0)
        self.values = list(values)

    def randrange(self, *args, **kwargs):
        if len(self.values) > 1:
            return self.values.pop(0)
        return self.values[0]


def _materialize(catalog, ids, size="medium", **kwargs):
    composition = resolve_composition(size, ids, catalog)
    breakdown = aggregate(composition.size, composition.ingredients)
    customer = kwargs.pop("customer", CustomerInfo())
    return OrderMaterializer(rng=ScriptedRandom(42)).materialize(
        composition, breakdown, customer, now=NOW, **kwargs
    )


# =============================================================================
# DERIVED FIELDS
# =============================================================================

def test_order_number_format():
    number = generate_order_number(NOW, ScriptedRandom(7))
    assert number == "ORD-20240309-007"

    for _ in range(50):
        assert ORDER_NUMBER.match(generate_order_number())


@pytest.mark.parametrize(
    "delivery_type, minutes",
    [(DeliveryType.PICKUP, 20), (DeliveryType.DELIVERY, 45)],
)
def test_estimated_delivery_time(delivery_type, minutes):
    assert estimate_delivery_time(delivery_type, NOW) == NOW + timedelta(minutes=minutes)


def test_line_items_group_duplicates(catalog):
    composition = resolve_composition("medium", [20, 1, 1, 5], catalog)
    lines = build_line_items(composition)

    assert [(line["ingredient_id"], line["quantity"]) for line in lines] == [(20, 1), (1, 2), (5, 1)]
    chicken = lines[1]
    assert chicken["name"] == "Chicken Breast"
    assert chicken["unit_price"] == 4.50
    assert chicken["total_price"] == 9.00
    assert chicken["weight"] == 240


def test_line_quantity_limit(catalog):
    composition = resolve_composition("medium", [20] + [5] * 11, catalog)
    with pytest.raises(QuantityLimitError):
        build_line_items(composition)


# =============================================================================
# MATERIALIZER
# =============================================================================

def test_materialize_pickup_order(catalog):
    order = _materialize(catalog, [21, 1, 1, 5], customer=CustomerInfo(name="Ana", email="ANA@Example.com"))

    assert order.order_number == "ORD-20240309-042"
    assert order.status == OrderStatus.PENDING
    assert order.payment_status == PaymentStatus.PENDING
    assert order.customer_email == "ana@example.com"
    assert order.total_price == 7.00 + 0.50 + 9.00 + 0.50
    assert order.item_count == 4
    assert len(json.loads(order.items)) == 3
    assert order.total_calories == 140 + 2 * 198 + 5
    assert order.allergen_list == ["gluten"]
    assert order.nutrition_dict()["sodium"] == 280 + 2 * 90 + 8
    assert order.estimated_delivery_time == NOW + timedelta(minutes=20)
    assert not order.has_address


def test_materialize_rejects_empty_order(catalog):
    with pytest.raises(EmptyOrderError):
        _materialize(catalog, [999])


def test_materialize_requires_exactly_one_tortilla(catalog):
    with pytest.raises(MissingBaseError):
        _materialize(catalog, [1, 5])
    with pytest.raises(MultipleBaseError):
        _materialize(catalog, [20, 21, 1])


def test_delivery_requires_address(catalog):
    with pytest.raises(ValidationError) as exc:
        _materialize(catalog, [20, 1], delivery_type=DeliveryType.DELIVERY)
    assert exc.value.field == "address"


def test_delivery_order_with_address(catalog):
    customer = CustomerInfo(
        name="Ben",
        address=Address(street="1 Main St", city="New York", state="NY", zip_code="10001"),
    )
    order = _materialize(catalog, [20, 2], customer=customer, delivery_type=DeliveryType.DELIVERY)

    assert order.address_dict()["country"] == "USA"
    assert order.estimated_delivery_time == NOW + timedelta(minutes=45)


def test_delivery_delay_minutes(catalog):
    order = _materialize(catalog, [20, 1])
    assert order.delivery_delay_minutes == 0.0

    order.actual_delivery_time = order.estimated_delivery_time + timedelta(minutes=12)
    assert order.delivery_delay_minutes == pytest.approx(12.0)


# =============================================================================
# PERSISTENCE
# =============================================================================

async def test_place_and_fetch_order(db, catalog):
    service = OrderService(OrderMaterializer())
    composition = resolve_composition("large", [22, 3, 6], catalog)

    order = await service.place_order(db, composition, CustomerInfo(name="Cem"))
    assert order.id is not None
    assert ORDER_NUMBER.match(order.order_number)

    fetched = await service.get_order(db, order.order_number)
    assert fetched.id == order.id
    assert fetched.line_items[0]["name"] == "Spinach Tortilla"


async def test_order_number_collision_is_retried(db, catalog):
    service = OrderService(OrderMaterializer(rng=ScriptedRandom(7, 7, 8)), max_attempts=2)
    composition = resolve_composition("medium", [20, 1], catalog)

    first = await service.place_order(db, composition, CustomerInfo())
    first_number = first.order_number
    second = await service.place_order(db, composition, CustomerInfo())

    assert first_number.endswith("-007")
    assert second.order_number.endswith("-008")


async def test_order_number_conflict_after_all_attempts(db, catalog):
    service = OrderService(OrderMaterializer(rng=ScriptedRandom(7)), max_attempts=2)
    composition = resolve_composition("medium", [20, 1], catalog)

    await service.place_order(db, composition, CustomerInfo())
    with pytest.raises(OrderNumberConflictError) as exc:
        await service.place_order(db, composition, CustomerInfo())
    assert exc.value.status_code == 409

    total, _ = await service.list_orders(db)
    assert total == 1


async def test_list_and_update_status(db, catalog):
    service = OrderService(OrderMaterializer(rng=ScriptedRandom(1, 2, 3)))
    composition = resolve_composition("small", [20, 4], catalog)

    orders = [await service.place_order(db, composition, CustomerInfo()) for _ in range(3)]

    updated = await service.update_status(db, orders[0].order_number, OrderStatus.DELIVERED)
    assert updated.status == OrderStatus.DELIVERED
    assert updated.actual_delivery_time is not None

    total, delivered = await service.list_orders(db, status=OrderStatus.DELIVERED)
    assert total == 1
    assert delivered[0].order_number == orders[0].order_number

    total, page = await service.list_orders(db, skip=1, limit=1)
    assert total == 3
    assert len(page) == 1


async def test_unknown_order_number(db):
    service = OrderService(OrderMaterializer())
    with pytest.raises(OrderNotFoundError):
        await service.get_order(db, "ORD-20000101-000")


class NamelessSizeMaterializer(OrderMaterializer):
    """Produces rows that violate the NOT NULL size column."""

    def __init__(self):
        super().__init__(rng=ScriptedRandom(5))
        self.calls = 0

    def materialize(self, *args, **kwargs):
        self.calls += 1
        order = super().materialize(*args, **kwargs)
        order.size = None
        return order


async def test_other_integrity_errors_are_not_retried(db, catalog):
    materializer = NamelessSizeMaterializer()
    service = OrderService(materializer, max_attempts=3)
    composition = resolve_composition("medium", [20, 1], catalog)

    with pytest.raises(IntegrityError):
        await service.place_order(db, composition, CustomerInfo())
    assert materializer.calls == 1


async def test_placed_order_keeps_nutrition_summary(db, catalog):
    service = OrderService(OrderMaterializer())
    composition = resolve_composition("medium", [20, 1, 1, 13], catalog)

    order = await service.place_order(db, composition, CustomerInfo())
    fetched = await service.get_order(db, order.order_number)

    assert fetched.item_count == 4
    assert fetched.total_calories == 150 + 2 * 198 + 25
    assert fetched.allergen_list == ["gluten", "dairy"]
