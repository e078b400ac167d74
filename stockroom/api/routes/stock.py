"""Stock item and movement endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status

from stockroom.api.dependencies import get_actor_id, get_stock_service
from stockroom.api.serializers import (
    stock_details_response,
    stock_movement_response,
)
from stockroom.application.dto.requests import (
    AddStockItemRequest,
    StockQuantityRequest,
    UpdateStockItemRequest,
)
from stockroom.application.dto.responses import (
    ErrorResponse,
    StockChangeResponse,
    StockItemListResponse,
    StockItemResponse,
    StockMovementResponse,
)
from stockroom.core.entities import (
    MovementType,
    StockItem,
    StockItemUpdate,
    StockMovement,
    StockMovementDetails,
    StockStatus,
)
from stockroom.core.services import StockLedgerService

router = APIRouter(prefix="/api/stock", tags=["stock"])


async def _change_response(
    service: StockLedgerService, item: StockItem, movement: StockMovement
) -> StockChangeResponse:
    details = await service.get_item(item.id)
    return StockChangeResponse(
        item=stock_details_response(details),
        movement=stock_movement_response(
            StockMovementDetails(
                movement=movement,
                item_name=item.name,
                category_name=details.category.name if details.category else None,
                category_color=details.category.color if details.category else None,
            )
        ),
    )


@router.get("/items", response_model=StockItemListResponse)
async def list_items(
    status_filter: StockStatus | None = Query(default=None, alias="status"),
    category_id: int | None = None,
    start: datetime | None = Query(default=None, description="Created at or after"),
    end: datetime | None = Query(default=None, description="Created at or before"),
    service: StockLedgerService = Depends(get_stock_service),
) -> StockItemListResponse:
    """List stock items, newest first."""
    items = await service.list_items(
        status=status_filter, category_id=category_id, start=start, end=end
    )
    return StockItemListResponse(
        items=[stock_details_response(d) for d in items],
        total=len(items),
    )


@router.post(
    "/items",
    response_model=StockChangeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def add_item(
    request: AddStockItemRequest,
    actor_id: str | None = Depends(get_actor_id),
    service: StockLedgerService = Depends(get_stock_service),
) -> StockChangeResponse:
    """Add a stock item with its opening quantity."""
    item, movement = await service.add_item(
        name=request.name,
        quantity=request.quantity,
        category_id=request.category_id,
        min_quantity=request.min_quantity,
        person_responsible=request.person_responsible,
        notes=request.notes,
        actor_id=actor_id,
    )
    return await _change_response(service, item, movement)


@router.get(
    "/items/{item_id}",
    response_model=StockItemResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_item(
    item_id: int,
    service: StockLedgerService = Depends(get_stock_service),
) -> StockItemResponse:
    return stock_details_response(await service.get_item(item_id))


@router.patch(
    "/items/{item_id}",
    response_model=StockItemResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_item(
    item_id: int,
    request: UpdateStockItemRequest,
    actor_id: str | None = Depends(get_actor_id),
    service: StockLedgerService = Depends(get_stock_service),
) -> StockItemResponse:
    """Partially update an item. A quantity here bypasses the movement log."""
    update = StockItemUpdate(**request.model_dump(exclude_unset=True))
    await service.update_item(item_id, update, actor_id=actor_id)
    return stock_details_response(await service.get_item(item_id))


@router.delete(
    "/items/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_item(
    item_id: int,
    actor_id: str | None = Depends(get_actor_id),
    service: StockLedgerService = Depends(get_stock_service),
) -> None:
    """Delete an item. Its movement history is kept."""
    await service.delete_item(item_id, actor_id=actor_id)


@router.post(
    "/items/{item_id}/issue",
    response_model=StockChangeResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def issue_stock(
    item_id: int,
    request: StockQuantityRequest,
    actor_id: str | None = Depends(get_actor_id),
    service: StockLedgerService = Depends(get_stock_service),
) -> StockChangeResponse:
    """Issue stock. 409 with the available quantity when there is not enough."""
    item, movement = await service.issue(
        item_id, request.quantity, notes=request.notes, actor_id=actor_id
    )
    return await _change_response(service, item, movement)


@router.post(
    "/items/{item_id}/return",
    response_model=StockChangeResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def return_stock(
    item_id: int,
    request: StockQuantityRequest,
    actor_id: str | None = Depends(get_actor_id),
    service: StockLedgerService = Depends(get_stock_service),
) -> StockChangeResponse:
    """Return stock to inventory."""
    item, movement = await service.return_stock(
        item_id, request.quantity, notes=request.notes, actor_id=actor_id
    )
    return await _change_response(service, item, movement)


@router.get("/items/{item_id}/movements", response_model=list[StockMovementResponse])
async def item_movements(
    item_id: int,
    limit: int | None = Query(default=None, ge=1),
    movement_type: MovementType | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    service: StockLedgerService = Depends(get_stock_service),
) -> list[StockMovementResponse]:
    """Full movement history of one item, newest first."""
    movements = await service.list_movements(
        item_id=item_id, limit=limit, movement_type=movement_type, start=start, end=end
    )
    return [stock_movement_response(m) for m in movements]


@router.get("/movements", response_model=list[StockMovementResponse])
async def recent_movements(
    limit: int | None = Query(default=None, ge=1),
    movement_type: MovementType | None = None,
    search: str | None = Query(default=None, description="Matches item name or notes"),
    start: datetime | None = Query(default=None, description="Created at or after"),
    end: datetime | None = Query(default=None, description="Created at or before"),
    service: StockLedgerService = Depends(get_stock_service),
) -> list[StockMovementResponse]:
    """
    Movements across all items, newest first.

    Without filters or limit this is the recent page (size from settings);
    filtered queries return every match unless limit is given.
    """
    filters = {"movement_type": movement_type, "search": search, "start": start, "end": end}
    if limit is None and all(v is None for v in filters.values()):
        movements = await service.list_movements(**filters)
    else:
        movements = await service.list_movements(limit=limit, **filters)
    return [stock_movement_response(m) for m in movements]
