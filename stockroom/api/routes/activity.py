"""Activity log endpoint."""

from fastapi import APIRouter, Depends, Query

from stockroom.api.dependencies import get_stock_service
from stockroom.api.serializers import activity_response
from stockroom.application.dto.responses import ActivityLogResponse
from stockroom.core.services import StockLedgerService

router = APIRouter(prefix="/api/activity", tags=["activity"])


@router.get("", response_model=list[ActivityLogResponse])
async def list_activity(
    limit: int | None = Query(default=None, ge=1),
    service: StockLedgerService = Depends(get_stock_service),
) -> list[ActivityLogResponse]:
    """Most recent activity entries, newest first."""
    if limit is None:
        entries = await service.list_activity()
    else:
        entries = await service.list_activity(limit=limit)
    return [activity_response(e) for e in entries]
