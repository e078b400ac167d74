"""Unit tests for domain exceptions."""

from stockroom.core.exceptions import (
    CategoryNotFoundError,
    CompensationFailedError,
    ConcurrentModificationError,
    DuplicateCategoryError,
    InsufficientStockError,
    IssuedRecordNotFoundError,
    LedgerError,
    NotFoundError,
    PersistenceError,
    StaleQuantityError,
    StaleRecordError,
    StockItemNotFoundError,
    StockroomError,
    StorageError,
    UniformItemNotFoundError,
    ValidationError,
)


class TestStockroomError:
    """Tests for base StockroomError exception."""

    def test_basic_initialization(self):
        error = StockroomError("Something went wrong")
        assert error.message == "Something went wrong"
        assert error.code == "StockroomError"
        assert error.details == {}

    def test_to_dict(self):
        error = StockroomError("Failed", code="X", details={"a": 1})
        assert error.to_dict() == {"error": "X", "message": "Failed", "details": {"a": 1}}


class TestValidationError:
    def test_details(self):
        error = ValidationError("quantity", "must be greater than zero", 0)
        assert error.code == "VALIDATION_ERROR"
        assert error.details["field"] == "quantity"
        assert error.details["value"] == "0"
        assert "quantity" in error.message

    def test_none_value(self):
        assert ValidationError("name", "must not be empty").details["value"] is None


class TestNotFoundErrors:
    def test_stock_item(self):
        error = StockItemNotFoundError(42)
        assert isinstance(error, NotFoundError)
        assert error.code == "STOCK_ITEM_NOT_FOUND"
        assert error.details == {"stock_item_id": 42}
        assert error.message == "Stock item not found: 42"

    def test_codes(self):
        assert CategoryNotFoundError(1).code == "CATEGORY_NOT_FOUND"
        assert UniformItemNotFoundError(1).code == "UNIFORM_ITEM_NOT_FOUND"
        assert IssuedRecordNotFoundError(1).code == "ISSUED_RECORD_NOT_FOUND"


class TestLedgerErrors:
    def test_insufficient_stock_carries_available(self):
        error = InsufficientStockError(1, requested=200, available=5)
        assert isinstance(error, LedgerError)
        assert error.available == 5
        assert error.requested == 200
        assert error.details == {"item_id": 1, "requested": 200, "available": 5}

    def test_concurrent_modification(self):
        error = ConcurrentModificationError(3, attempts=4)
        assert error.details["attempts"] == 4

    def test_concurrent_modification_of_record(self):
        error = ConcurrentModificationError(11, attempts=2, entity="issued_record")
        assert error.details == {"issued_record_id": 11, "attempts": 2}
        assert error.message.startswith("Issued record 11")

    def test_stale_record(self):
        error = StaleRecordError(11, expected=10)
        assert isinstance(error, LedgerError)
        assert error.code == "STALE_RECORD"
        assert error.details == {"record_id": 11, "expected": 10}

    def test_stale_quantity(self):
        assert StaleQuantityError(3, expected=10).details["expected"] == 10

    def test_compensation_failed(self):
        error = CompensationFailedError("issue", 7, "disk I/O error")
        assert error.code == "COMPENSATION_FAILED"
        assert error.details["operation"] == "issue"


class TestStorageErrors:
    def test_persistence_error(self):
        error = PersistenceError("apply_quantity_change", "database is locked")
        assert isinstance(error, StorageError)
        assert "apply_quantity_change" in error.message

    def test_duplicate_category(self):
        error = DuplicateCategoryError("Tools")
        assert isinstance(error, StorageError)
        assert error.details == {"name": "Tools"}
