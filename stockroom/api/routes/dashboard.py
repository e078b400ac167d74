"""Dashboard endpoints."""

from fastapi import APIRouter, Depends

from stockroom.api.dependencies import get_dashboard
from stockroom.api.serializers import dashboard_response, stock_details_response
from stockroom.application.dto.responses import DashboardStatsResponse, StockItemResponse
from stockroom.core.services import DashboardService

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardStatsResponse)
async def get_stats(
    service: DashboardService = Depends(get_dashboard),
) -> DashboardStatsResponse:
    return dashboard_response(await service.get_stats())


@router.get("/low-stock", response_model=list[StockItemResponse])
async def low_stock(
    service: DashboardService = Depends(get_dashboard),
) -> list[StockItemResponse]:
    """Items that are low or out of stock."""
    return [stock_details_response(d) for d in await service.low_stock_items()]
