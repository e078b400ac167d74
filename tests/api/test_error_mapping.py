"""Tests for exception to HTTP status mapping."""

import pytest

from stockroom.api.middleware.error_handler import status_for
from stockroom.core.exceptions import (
    CompensationFailedError,
    ConcurrentModificationError,
    ConfigurationError,
    DuplicateCategoryError,
    InsufficientStockError,
    PersistenceError,
    StaleQuantityError,
    StaleRecordError,
    StockItemNotFoundError,
    ValidationError,
)


@pytest.mark.parametrize(
    ("exc", "expected"),
    [
        (ValidationError("quantity", "must be positive", 0), 400),
        (StockItemNotFoundError(1), 404),
        (InsufficientStockError(1, 5, 2), 409),
        (ConcurrentModificationError(1, 4), 409),
        (DuplicateCategoryError("Clothing"), 409),
        (StaleQuantityError(1, 5), 409),
        (StaleRecordError(11, 10), 409),
        (CompensationFailedError("issue", 1, "disk full"), 500),
        (PersistenceError("issue", "disk full"), 500),
        (ConfigurationError("bad"), 500),
        (ValueError("bad"), 400),
        (RuntimeError("boom"), 500),
    ],
)
def test_status_for(exc, expected):
    assert status_for(exc) == expected
