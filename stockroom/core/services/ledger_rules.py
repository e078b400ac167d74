"""
Quantity ledger rules.

Pure planning functions: given the freshly read on-hand quantity, they
validate a request and return the QuantityChange to persist. Nothing here
touches storage, so a plan can be recomputed cheaply after a lost
compare-and-set.
"""

from datetime import UTC, datetime

from stockroom.core.entities.ledger import MovementType, QuantityChange
from stockroom.core.exceptions import InsufficientStockError, ValidationError


def require_positive(field: str, quantity: int) -> None:
    """Raise ValidationError unless quantity is a positive integer."""
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError(field, "must be an integer", quantity)
    if quantity <= 0:
        raise ValidationError(field, "must be greater than zero", quantity)


def require_non_negative(field: str, quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError(field, "must be an integer", quantity)
    if quantity < 0:
        raise ValidationError(field, "must not be negative", quantity)


def time_range(
    start: datetime | None, end: datetime | None
) -> tuple[datetime | None, datetime | None]:
    """Validate an inclusive timestamp range. Naive bounds are taken as UTC."""
    start, end = (
        v.replace(tzinfo=UTC) if v is not None and v.tzinfo is None else v
        for v in (start, end)
    )
    if start is not None and end is not None and start > end:
        raise ValidationError("start", "must not be after end", start.isoformat())
    return start, end


def plan_initial(
    quantity: int,
    notes: str | None = "Initial stock",
    performed_by: str | None = None,
) -> QuantityChange:
    """Opening movement for a new item: 0 -> quantity, all of it counted as added."""
    require_non_negative("quantity", quantity)
    return QuantityChange(
        movement_type=MovementType.ADDED,
        previous_quantity=0,
        new_quantity=quantity,
        added=quantity,
        notes=notes,
        performed_by=performed_by,
    )


def plan_issue(
    item_id: int,
    current_quantity: int,
    quantity: int,
    notes: str | None = None,
    performed_by: str | None = None,
) -> QuantityChange:
    """Take quantity out of stock. The issued counter grows by the same amount."""
    require_positive("quantity", quantity)
    if quantity > current_quantity:
        raise InsufficientStockError(item_id, quantity, current_quantity)
    return QuantityChange(
        movement_type=MovementType.ISSUED,
        previous_quantity=current_quantity,
        new_quantity=current_quantity - quantity,
        issued=quantity,
        notes=notes,
        performed_by=performed_by,
    )


def plan_return(
    current_quantity: int,
    quantity: int,
    notes: str | None = None,
    performed_by: str | None = None,
) -> QuantityChange:
    """
    Put quantity back into stock.

    Counts toward the cumulative added total and leaves the issued counter
    untouched: a return is modelled as a restock, not as the reversal of a
    particular issuance.
    """
    require_positive("quantity", quantity)
    return QuantityChange(
        movement_type=MovementType.RETURNED,
        previous_quantity=current_quantity,
        new_quantity=current_quantity + quantity,
        added=quantity,
        notes=notes,
        performed_by=performed_by,
    )


def plan_release(
    current_quantity: int,
    quantity: int,
    notes: str | None = None,
    performed_by: str | None = None,
) -> QuantityChange:
    """Give back stock held by an issuance record that is going away."""
    require_positive("quantity", quantity)
    return QuantityChange(
        movement_type=MovementType.RETURNED,
        previous_quantity=current_quantity,
        new_quantity=current_quantity + quantity,
        issued=-quantity,
        notes=notes,
        performed_by=performed_by,
    )


def plan_adjustment(
    item_id: int,
    current_quantity: int,
    delta: int,
    issued_delta: int = 0,
    notes: str | None = None,
    performed_by: str | None = None,
) -> QuantityChange:
    """
    Shift the on-hand quantity by a signed delta.

    Raises InsufficientStockError when the delta would take the quantity
    below zero.
    """
    if current_quantity + delta < 0:
        raise InsufficientStockError(item_id, -delta, current_quantity)
    return QuantityChange(
        movement_type=MovementType.ADJUSTED,
        previous_quantity=current_quantity,
        new_quantity=current_quantity + delta,
        issued=issued_delta,
        notes=notes,
        performed_by=performed_by,
    )


def plan_removal(
    current_quantity: int,
    notes: str | None = "Item deleted",
    performed_by: str | None = None,
) -> QuantityChange:
    """Drop whatever is left to zero ahead of a delete."""
    return QuantityChange(
        movement_type=MovementType.REMOVED,
        previous_quantity=current_quantity,
        new_quantity=0,
        notes=notes,
        performed_by=performed_by,
    )
