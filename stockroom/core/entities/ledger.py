"""Shared quantity-ledger primitives: stock status, movement types, quantity changes."""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from stockroom.core.exceptions import ValidationError

DEFAULT_MIN_QUANTITY = 5


def utc_now() -> datetime:
    return datetime.now(UTC)


class StockStatus(str, Enum):
    """Three-state stock health classification."""

    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


def classify_stock(quantity: int, min_quantity: int) -> StockStatus:
    """
    Classify stock health from on-hand quantity and reorder threshold.

    out_of_stock when nothing is left, low_stock while at or under the
    threshold, in_stock above it. A threshold of 0 makes low_stock
    unreachable.
    """
    if quantity < 0:
        raise ValidationError("quantity", "must not be negative", quantity)
    if min_quantity < 0:
        raise ValidationError("min_quantity", "must not be negative", min_quantity)

    if quantity == 0:
        return StockStatus.OUT_OF_STOCK
    if quantity <= min_quantity:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


class MovementType(str, Enum):
    """Kinds of quantity-affecting events."""

    ADDED = "added"
    ISSUED = "issued"
    RETURNED = "returned"
    ADJUSTED = "adjusted"
    REMOVED = "removed"


class LedgerMovement(BaseModel):
    """Immutable record of one quantity change."""

    id: int | None = None
    movement_type: MovementType
    quantity_delta: int  # signed: issued negative, added/returned positive
    previous_quantity: int = Field(ge=0)
    new_quantity: int = Field(ge=0)
    notes: str | None = None
    performed_by: str | None = None
    created_at: datetime = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def check_balance(self) -> "LedgerMovement":
        """new_quantity must equal previous_quantity + quantity_delta."""
        if self.previous_quantity + self.quantity_delta != self.new_quantity:
            raise ValueError(
                f"movement does not balance: {self.previous_quantity} "
                f"{self.quantity_delta:+d} != {self.new_quantity}"
            )
        return self


@dataclass(frozen=True)
class QuantityChange:
    """A planned transition of one item's counters.

    previous_quantity is the quantity the plan was computed from; stores
    apply the change only while the item still holds exactly that amount.
    """

    movement_type: MovementType
    previous_quantity: int
    new_quantity: int
    added: int = 0  # increment to the cumulative added counter
    issued: int = 0  # increment to the issued counter
    notes: str | None = None
    performed_by: str | None = None

    def __post_init__(self) -> None:
        if self.previous_quantity < 0 or self.new_quantity < 0:
            raise ValueError("quantity change would leave a negative quantity")

    @property
    def quantity_delta(self) -> int:
        return self.new_quantity - self.previous_quantity
