"""
Error Taxonomy

Domain errors raised by the catalog, composer and order services.
Each error carries the HTTP status it maps to and, for validation
problems, the offending request field. The API layer renders them
through a single exception handler.

Image generation failures are deliberately absent: remote tiers report
failures as values (see services.images.base.FailureKind) and the
orchestrator always recovers.
"""

from typing import Optional


class KebabBuilderError(Exception):
    """Base class for all domain errors."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.field = field
        if status_code is not None:
            self.status_code = status_code


# =============================================================================
# VALIDATION (400)
# =============================================================================

class ValidationError(KebabBuilderError):
    """Malformed or inconsistent request data."""
    status_code = 400


class InvalidSizeError(ValidationError):
    def __init__(self, size: Optional[str]):
        super().__init__(f"Invalid size specified: {size!r}", field="size")
        self.size = size


class MissingBaseError(ValidationError):
    def __init__(self):
        super().__init__(
            "Please select a tortilla - it's required as the base for your kebab",
            field="selectedIngredients",
        )


class MultipleBaseError(ValidationError):
    def __init__(self, count: int):
        super().__init__(
            f"Only one tortilla can be selected, got {count}",
            field="selectedIngredients",
        )
        self.count = count


class EmptyOrderError(ValidationError):
    def __init__(self):
        super().__init__(
            "Order must contain at least one available ingredient",
            field="selectedIngredients",
        )


class QuantityLimitError(ValidationError):
    def __init__(self, name: str, quantity: int, limit: int):
        super().__init__(
            f"Quantity of {name} cannot exceed {limit} (got {quantity})",
            field="selectedIngredients",
        )


# =============================================================================
# NOT FOUND (404)
# =============================================================================

class NotFoundError(KebabBuilderError):
    status_code = 404


class IngredientNotFoundError(NotFoundError):
    def __init__(self, ingredient_id: int):
        super().__init__(f"Ingredient {ingredient_id} not found")
        self.ingredient_id = ingredient_id


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_number: str):
        super().__init__(f"Order {order_number} not found")
        self.order_number = order_number


# =============================================================================
# CONFLICT (409)
# =============================================================================

class OrderNumberConflictError(KebabBuilderError):
    """Every generated order number collided with an existing order."""
    status_code = 409

    def __init__(self, attempts: int):
        super().__init__(
            f"Could not allocate a unique order number after {attempts} attempts"
        )
        self.attempts = attempts
