"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization. Display fallbacks
(uncategorized, deleted item) are resolved before these are built.
"""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field

# --- Stock ---


class CategoryResponse(BaseModel):
    """Stock category response DTO."""

    id: int
    name: str
    description: str | None = None
    color: str
    created_at: datetime


class StockItemResponse(BaseModel):
    """Stock item response DTO with derived status."""

    id: int
    name: str
    category_id: int | None = None
    category_name: str = Field(..., description="Category name or the uncategorized label")
    category_color: str | None = None
    quantity: int
    total_added: int
    issued: int
    min_quantity: int
    status: str = Field(..., description="in_stock, low_stock or out_of_stock")
    person_responsible: str | None = None
    notes: str | None = None
    created_by: str | None = None
    created_at: datetime
    updated_at: datetime


class StockMovementResponse(BaseModel):
    """Stock movement response DTO."""

    id: int
    item_id: int
    item_name: str = Field(..., description="Item name or the deleted item label")
    category_name: str | None = None
    category_color: str | None = None
    movement_type: str
    quantity_delta: int
    previous_quantity: int
    new_quantity: int
    notes: str | None = None
    performed_by: str | None = None
    created_at: datetime


class StockChangeResponse(BaseModel):
    """Item state after a quantity change, with the movement it produced."""

    item: StockItemResponse
    movement: StockMovementResponse


class StockItemListResponse(BaseModel):
    items: list[StockItemResponse]
    total: int


class ActivityLogResponse(BaseModel):
    """Activity log entry response DTO."""

    id: int
    actor_id: str | None = None
    action: str
    entity_type: str
    entity_id: int | None = None
    details: dict[str, Any] | None = None
    created_at: datetime


class CategoryBreakdownResponse(BaseModel):
    name: str
    count: int
    color: str


class DashboardStatsResponse(BaseModel):
    """Dashboard figures."""

    total_items: int
    in_stock: int
    low_stock: int
    out_of_stock: int
    recently_added: list[StockItemResponse]
    recently_issued: list[StockMovementResponse]
    category_breakdown: list[CategoryBreakdownResponse]


# --- Uniforms ---


class UniformCategoryResponse(BaseModel):
    id: int
    name: str
    created_at: datetime


class UniformItemResponse(BaseModel):
    """Uniform item response DTO."""

    id: int
    name: str
    category: str = Field(..., description="Category name or the uncategorized label")
    total_quantity: int
    remaining_quantity: int
    issued: int
    min_quantity: int
    status: str
    stock_percentage: float
    created_at: datetime
    updated_at: datetime


class UniformMovementResponse(BaseModel):
    """Uniform movement response DTO."""

    id: int
    uniform_id: int
    movement_type: str
    quantity_delta: int
    previous_quantity: int
    new_quantity: int
    notes: str | None = None
    performed_by: str | None = None
    created_at: datetime


class UniformChangeResponse(BaseModel):
    uniform: UniformItemResponse
    movement: UniformMovementResponse


class IssuedRecordResponse(BaseModel):
    """Issuance record response DTO."""

    id: int
    student_name: str
    uniform_id: int
    uniform_name: str = Field(..., description="Uniform name or the deleted item label")
    uniform_category: str
    quantity_taken: int
    issue_date: date
    created_at: datetime


class IssueUniformResponse(BaseModel):
    record: IssuedRecordResponse
    uniform: UniformItemResponse


# --- Health & errors ---


class ComponentHealthResponse(BaseModel):
    """Health of a backing component."""

    name: str
    available: bool
    latency_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    uptime_seconds: float
    database: ComponentHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. INSUFFICIENT_STOCK)
    - message: human-readable description
    - hint: suggested recovery action
    - details: structured context from the raised error
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    details: dict[str, Any] = Field(default_factory=dict, description="Structured context")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)
