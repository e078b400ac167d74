"""Tests for the pure quantity planning rules."""

import pytest

from stockroom.core.entities.ledger import MovementType
from stockroom.core.exceptions import InsufficientStockError, ValidationError
from stockroom.core.services.ledger_rules import (
    plan_adjustment,
    plan_initial,
    plan_issue,
    plan_release,
    plan_removal,
    plan_return,
    require_positive,
)


class TestRequirePositive:
    @pytest.mark.parametrize("value", [0, -1, True, 1.5, "3", None])
    def test_rejects(self, value):
        with pytest.raises(ValidationError):
            require_positive("quantity", value)

    def test_accepts(self):
        require_positive("quantity", 1)


class TestPlanInitial:
    def test_opening_movement(self):
        change = plan_initial(100)
        assert change.movement_type == MovementType.ADDED
        assert (change.previous_quantity, change.new_quantity) == (0, 100)
        assert change.added == 100
        assert change.notes == "Initial stock"

    def test_zero_allowed(self):
        assert plan_initial(0).new_quantity == 0

    def test_negative_rejected(self):
        with pytest.raises(ValidationError):
            plan_initial(-1)


class TestPlanIssue:
    def test_issue(self):
        change = plan_issue(1, 100, 95, notes="to class 3", performed_by="u1")
        assert change.movement_type == MovementType.ISSUED
        assert change.new_quantity == 5
        assert change.quantity_delta == -95
        assert change.issued == 95
        assert change.performed_by == "u1"

    def test_issue_everything(self):
        assert plan_issue(1, 7, 7).new_quantity == 0

    def test_insufficient(self):
        with pytest.raises(InsufficientStockError) as exc_info:
            plan_issue(1, 5, 200)
        assert exc_info.value.available == 5
        assert exc_info.value.requested == 200


class TestPlanReturn:
    def test_return_counts_as_added(self):
        change = plan_return(5, 50)
        assert change.movement_type == MovementType.RETURNED
        assert change.new_quantity == 55
        assert change.added == 50
        assert change.issued == 0


class TestPlanRelease:
    def test_release_reduces_issued(self):
        change = plan_release(20, 10)
        assert change.movement_type == MovementType.RETURNED
        assert change.new_quantity == 30
        assert change.issued == -10
        assert change.added == 0


class TestPlanAdjustment:
    def test_positive_adjustment(self):
        change = plan_adjustment(1, 20, 6, issued_delta=-6)
        assert change.movement_type == MovementType.ADJUSTED
        assert change.new_quantity == 26
        assert change.issued == -6

    def test_negative_adjustment(self):
        assert plan_adjustment(1, 20, -20).new_quantity == 0

    def test_cannot_go_negative(self):
        with pytest.raises(InsufficientStockError) as exc_info:
            plan_adjustment(1, 3, -5)
        assert exc_info.value.available == 3
        assert exc_info.value.requested == 5


class TestPlanRemoval:
    def test_removal(self):
        change = plan_removal(12)
        assert change.movement_type == MovementType.REMOVED
        assert change.new_quantity == 0
        assert change.quantity_delta == -12
