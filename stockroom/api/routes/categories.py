"""Stock category endpoints."""

from fastapi import APIRouter, Depends, status

from stockroom.api.dependencies import get_actor_id, get_stock_service
from stockroom.api.serializers import category_response
from stockroom.application.dto.requests import (
    CreateCategoryRequest,
    UpdateCategoryRequest,
)
from stockroom.application.dto.responses import CategoryResponse, ErrorResponse
from stockroom.core.entities import CategoryUpdate
from stockroom.core.services import StockLedgerService

router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.get("", response_model=list[CategoryResponse])
async def list_categories(
    service: StockLedgerService = Depends(get_stock_service),
) -> list[CategoryResponse]:
    return [category_response(c) for c in await service.list_categories()]


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_category(
    request: CreateCategoryRequest,
    actor_id: str | None = Depends(get_actor_id),
    service: StockLedgerService = Depends(get_stock_service),
) -> CategoryResponse:
    category = await service.create_category(
        name=request.name,
        description=request.description,
        color=request.color,
        actor_id=actor_id,
    )
    return category_response(category)


@router.patch(
    "/{category_id}",
    response_model=CategoryResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def update_category(
    category_id: int,
    request: UpdateCategoryRequest,
    actor_id: str | None = Depends(get_actor_id),
    service: StockLedgerService = Depends(get_stock_service),
) -> CategoryResponse:
    update = CategoryUpdate(**request.model_dump(exclude_unset=True))
    category = await service.update_category(category_id, update, actor_id=actor_id)
    return category_response(category)


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_category(
    category_id: int,
    actor_id: str | None = Depends(get_actor_id),
    service: StockLedgerService = Depends(get_stock_service),
) -> None:
    """Delete a category. Its items become uncategorized."""
    await service.delete_category(category_id, actor_id=actor_id)
