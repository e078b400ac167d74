"""Generic stock inventory entities."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from stockroom.core.entities.ledger import (
    DEFAULT_MIN_QUANTITY,
    LedgerMovement,
    StockStatus,
    classify_stock,
    utc_now,
)

DEFAULT_CATEGORY_COLOR = "#3B82F6"


class Category(BaseModel):
    """Grouping for stock items."""

    id: int | None = None
    name: str
    description: str | None = None
    color: str = DEFAULT_CATEGORY_COLOR  # display hint only
    created_at: datetime = Field(default_factory=utc_now)


class CategoryUpdate(BaseModel):
    """Partial update for a category. Only supplied fields are applied."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    description: str | None = None
    color: str | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class StockItem(BaseModel):
    """Current on-hand state of a stock item."""

    id: int | None = None
    name: str
    category_id: int | None = None
    quantity: int = Field(default=0, ge=0)
    total_added: int = Field(default=0, ge=0)  # cumulative, never decreases
    issued: int = Field(default=0, ge=0)  # cumulative, returns leave it alone
    min_quantity: int = Field(default=DEFAULT_MIN_QUANTITY, ge=0)
    person_responsible: str | None = None
    notes: str | None = None
    created_by: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def status(self) -> StockStatus:
        """Derived stock status, recomputed on every access."""
        return classify_stock(self.quantity, self.min_quantity)


class StockItemUpdate(BaseModel):
    """
    Partial update for a stock item.

    Fields left unset are untouched; an explicit None clears a nullable
    field. Setting quantity overrides the on-hand count without a movement.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    category_id: int | None = None
    quantity: int | None = None
    min_quantity: int | None = None
    person_responsible: str | None = None
    notes: str | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class StockMovement(LedgerMovement):
    """Movement on a stock item. item_id is a weak reference."""

    item_id: int


class StockItemDetails(BaseModel):
    """Stock item joined with its category for display."""

    item: StockItem
    category: Category | None = None

    @property
    def status(self) -> StockStatus:
        return self.item.status

    def category_name(self, fallback: str = "Uncategorized") -> str:
        return self.category.name if self.category else fallback


class StockMovementDetails(BaseModel):
    """Movement joined with item and category names for display."""

    movement: StockMovement
    item_name: str | None = None  # None once the item is deleted
    category_name: str | None = None
    category_color: str | None = None

    def display_item_name(self, fallback: str = "Deleted Item") -> str:
        return self.item_name or fallback


class CategoryBreakdown(BaseModel):
    """Item count per category."""

    name: str
    count: int
    color: str


class DashboardStats(BaseModel):
    """Aggregated stock health figures."""

    total_items: int = 0
    in_stock: int = 0
    low_stock: int = 0
    out_of_stock: int = 0
    recently_added: list[StockItem] = Field(default_factory=list)
    recently_issued: list[StockMovementDetails] = Field(default_factory=list)
    category_breakdown: list[CategoryBreakdown] = Field(default_factory=list)
