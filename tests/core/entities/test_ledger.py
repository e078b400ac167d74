"""Tests for shared ledger primitives."""

import pytest

from stockroom.core.entities.ledger import (
    LedgerMovement,
    MovementType,
    QuantityChange,
    StockStatus,
    classify_stock,
)
from stockroom.core.exceptions import ValidationError


class TestClassifyStock:
    """Tests for the three-state stock classifier."""

    @pytest.mark.parametrize(
        ("quantity", "min_quantity", "expected"),
        [
            (0, 5, StockStatus.OUT_OF_STOCK),
            (1, 5, StockStatus.LOW_STOCK),
            (5, 5, StockStatus.LOW_STOCK),
            (6, 5, StockStatus.IN_STOCK),
            (100, 10, StockStatus.IN_STOCK),
        ],
    )
    def test_boundaries(self, quantity, min_quantity, expected):
        assert classify_stock(quantity, min_quantity) == expected

    def test_zero_threshold_never_low(self):
        """With min_quantity 0 an item is either in or out of stock."""
        assert classify_stock(0, 0) == StockStatus.OUT_OF_STOCK
        assert classify_stock(1, 0) == StockStatus.IN_STOCK

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            classify_stock(-1, 5)
        assert exc_info.value.details["field"] == "quantity"

    def test_negative_threshold_rejected(self):
        with pytest.raises(ValidationError):
            classify_stock(3, -1)

    def test_status_values(self):
        assert StockStatus.IN_STOCK.value == "in_stock"
        assert StockStatus.LOW_STOCK.value == "low_stock"
        assert StockStatus.OUT_OF_STOCK.value == "out_of_stock"


class TestLedgerMovement:
    def test_balanced_movement(self):
        movement = LedgerMovement(
            movement_type=MovementType.ISSUED,
            quantity_delta=-95,
            previous_quantity=100,
            new_quantity=5,
        )
        assert movement.new_quantity == 5
        assert movement.created_at.tzinfo is not None

    def test_unbalanced_movement_rejected(self):
        with pytest.raises(ValueError, match="does not balance"):
            LedgerMovement(
                movement_type=MovementType.ADDED,
                quantity_delta=10,
                previous_quantity=0,
                new_quantity=5,
            )

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValueError):
            LedgerMovement(
                movement_type=MovementType.ISSUED,
                quantity_delta=-10,
                previous_quantity=5,
                new_quantity=-5,
            )


class TestQuantityChange:
    def test_delta(self):
        change = QuantityChange(MovementType.RETURNED, previous_quantity=5, new_quantity=55)
        assert change.quantity_delta == 50
        assert change.added == 0
        assert change.issued == 0

    def test_negative_result_rejected(self):
        with pytest.raises(ValueError):
            QuantityChange(MovementType.ISSUED, previous_quantity=5, new_quantity=-1)

    def test_frozen(self):
        change = QuantityChange(MovementType.ADDED, previous_quantity=0, new_quantity=1)
        with pytest.raises(AttributeError):
            change.new_quantity = 2
