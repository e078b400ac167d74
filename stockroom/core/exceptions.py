"""
Domain exceptions for the Stockroom application.

Provides specific exception types for different error scenarios.
"""

from typing import Any


class StockroomError(Exception):
    """Base exception for all Stockroom errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Validation Exceptions
class ValidationError(StockroomError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


# Lookup Exceptions
class NotFoundError(StockroomError):
    """Referenced entity does not exist."""

    entity_type = "entity"

    def __init__(self, entity_id: Any):
        super().__init__(
            f"{self.entity_type.replace('_', ' ').capitalize()} not found: {entity_id}",
            code=f"{self.entity_type.upper()}_NOT_FOUND",
            details={f"{self.entity_type}_id": entity_id},
        )


class StockItemNotFoundError(NotFoundError):
    """Stock item not found."""

    entity_type = "stock_item"


class CategoryNotFoundError(NotFoundError):
    """Stock category not found."""

    entity_type = "category"


class UniformItemNotFoundError(NotFoundError):
    """Uniform item not found."""

    entity_type = "uniform_item"


class UniformCategoryNotFoundError(NotFoundError):
    """Uniform category not found."""

    entity_type = "uniform_category"


class IssuedRecordNotFoundError(NotFoundError):
    """Uniform issuance record not found."""

    entity_type = "issued_record"


# Ledger Exceptions
class LedgerError(StockroomError):
    """Base exception for quantity ledger operations."""

    pass


class InsufficientStockError(LedgerError):
    """Requested quantity exceeds what is on hand."""

    def __init__(self, item_id: int, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for item {item_id}: "
            f"requested {requested}, available {available}",
            code="INSUFFICIENT_STOCK",
            details={
                "item_id": item_id,
                "requested": requested,
                "available": available,
            },
        )
        self.requested = requested
        self.available = available


class ConcurrentModificationError(LedgerError):
    """Quantity or record kept changing underneath the operation."""

    def __init__(self, item_id: int, attempts: int, entity: str = "item"):
        super().__init__(
            f"{entity.replace('_', ' ').capitalize()} {item_id} was modified concurrently; "
            f"gave up after {attempts} attempts",
            code="CONCURRENT_MODIFICATION",
            details={f"{entity}_id": item_id, "attempts": attempts},
        )


class StaleQuantityError(LedgerError):
    """Compare-and-set on the item quantity did not match.

    Raised by stores; services catch it and retry with a fresh read.
    """

    def __init__(self, item_id: int, expected: int):
        super().__init__(
            f"Quantity of item {item_id} is no longer {expected}",
            code="STALE_QUANTITY",
            details={"item_id": item_id, "expected": expected},
        )


class StaleRecordError(LedgerError):
    """An issuance record no longer holds the quantity it was read with.

    Raised by stores on a conditional record write; the uniform ledger
    reverses its stock adjustment and retries from a fresh read.
    """

    def __init__(self, record_id: int, expected: int):
        super().__init__(
            f"Issuance record {record_id} no longer holds {expected}",
            code="STALE_RECORD",
            details={"record_id": record_id, "expected": expected},
        )


class CompensationFailedError(LedgerError):
    """Reversing a partially applied operation failed."""

    def __init__(self, operation: str, item_id: int, error: str):
        super().__init__(
            f"Compensation for {operation} on item {item_id} failed: {error}",
            code="COMPENSATION_FAILED",
            details={"operation": operation, "item_id": item_id, "error": error},
        )


# Storage Exceptions
class StorageError(StockroomError):
    """Base exception for storage operations."""

    pass


class PersistenceError(StorageError):
    """Database write or read failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="PERSISTENCE_ERROR",
            details={"operation": operation, "error": error},
        )


class DuplicateCategoryError(StorageError):
    """Category with the same name already exists."""

    def __init__(self, name: str):
        super().__init__(
            f"Category already exists: {name}",
            code="DUPLICATE_CATEGORY",
            details={"name": name},
        )


class ConfigurationError(StockroomError):
    """Configuration error."""

    pass
