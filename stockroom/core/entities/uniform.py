"""Uniform inventory and issuance entities."""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from stockroom.core.entities.ledger import (
    DEFAULT_MIN_QUANTITY,
    LedgerMovement,
    StockStatus,
    classify_stock,
    utc_now,
)


class UniformCategory(BaseModel):
    """Uniform category. Items reference it by name."""

    id: int | None = None
    name: str
    created_at: datetime = Field(default_factory=utc_now)


class UniformItem(BaseModel):
    """On-hand state of a uniform item."""

    id: int | None = None
    name: str
    category: str  # denormalized category name
    total_quantity: int = Field(default=0, ge=0)  # cumulative added
    remaining_quantity: int = Field(default=0, ge=0)
    issued: int = Field(default=0, ge=0)  # held by live issuance records
    min_quantity: int = Field(default=DEFAULT_MIN_QUANTITY, ge=0)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def status(self) -> StockStatus:
        return classify_stock(self.remaining_quantity, self.min_quantity)

    @property
    def stock_percentage(self) -> float:
        """Remaining stock as a percentage of everything ever added."""
        if self.total_quantity <= 0:
            return 0.0
        return self.remaining_quantity / self.total_quantity * 100


class UniformItemUpdate(BaseModel):
    """Partial update for a uniform item. Quantity overrides emit no movement."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    category: str | None = None
    min_quantity: int | None = None
    total_quantity: int | None = None
    remaining_quantity: int | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class UniformMovement(LedgerMovement):
    """Movement on a uniform item. uniform_id is a weak reference."""

    uniform_id: int


class IssuedRecord(BaseModel):
    """A uniform handed to a student, tied to one stock decrement."""

    id: int | None = None
    student_name: str
    uniform_id: int
    quantity_taken: int = Field(gt=0)
    issue_date: date
    created_at: datetime = Field(default_factory=utc_now)


class IssuedRecordUpdate(BaseModel):
    """Partial update for an issuance record."""

    model_config = ConfigDict(extra="forbid")

    student_name: str | None = None
    quantity_taken: int | None = None
    issue_date: date | str | None = None  # ISO string accepted, parsed by the ledger

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class UniformItemDetails(BaseModel):
    """Uniform item with its category resolved against known categories."""

    item: UniformItem
    category_exists: bool = True

    def category_name(self, fallback: str = "Uncategorized") -> str:
        return self.item.category if self.category_exists else fallback


class IssuedRecordDetails(BaseModel):
    """Issuance record joined with uniform name and category for display."""

    record: IssuedRecord
    uniform_name: str | None = None  # None once the uniform is deleted
    uniform_category: str | None = None
