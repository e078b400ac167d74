"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.
"""

from stockroom.application.dto.requests import (
    AddStockItemRequest,
    AddUniformRequest,
    CreateCategoryRequest,
    CreateUniformCategoryRequest,
    IssueUniformRequest,
    RestockUniformRequest,
    StockQuantityRequest,
    UpdateCategoryRequest,
    UpdateIssuedRecordRequest,
    UpdateStockItemRequest,
    UpdateUniformRequest,
)
from stockroom.application.dto.responses import (
    ActivityLogResponse,
    CategoryBreakdownResponse,
    CategoryResponse,
    ComponentHealthResponse,
    DashboardStatsResponse,
    ErrorResponse,
    HealthResponse,
    IssuedRecordResponse,
    IssueUniformResponse,
    StockChangeResponse,
    StockItemListResponse,
    StockItemResponse,
    StockMovementResponse,
    UniformCategoryResponse,
    UniformChangeResponse,
    UniformItemResponse,
    UniformMovementResponse,
)

__all__ = [
    # Requests
    "AddStockItemRequest",
    "AddUniformRequest",
    "CreateCategoryRequest",
    "CreateUniformCategoryRequest",
    "IssueUniformRequest",
    "RestockUniformRequest",
    "StockQuantityRequest",
    "UpdateCategoryRequest",
    "UpdateIssuedRecordRequest",
    "UpdateStockItemRequest",
    "UpdateUniformRequest",
    # Responses
    "ActivityLogResponse",
    "CategoryBreakdownResponse",
    "CategoryResponse",
    "ComponentHealthResponse",
    "DashboardStatsResponse",
    "ErrorResponse",
    "HealthResponse",
    "IssuedRecordResponse",
    "IssueUniformResponse",
    "StockChangeResponse",
    "StockItemListResponse",
    "StockItemResponse",
    "StockMovementResponse",
    "UniformCategoryResponse",
    "UniformChangeResponse",
    "UniformItemResponse",
    "UniformMovementResponse",
]
