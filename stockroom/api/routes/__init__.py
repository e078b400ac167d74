"""API route modules."""

from stockroom.api.routes.activity import router as activity_router
from stockroom.api.routes.categories import router as categories_router
from stockroom.api.routes.dashboard import router as dashboard_router
from stockroom.api.routes.health import router as health_router
from stockroom.api.routes.stock import router as stock_router
from stockroom.api.routes.uniforms import router as uniforms_router

__all__ = [
    "health_router",
    "categories_router",
    "stock_router",
    "activity_router",
    "dashboard_router",
    "uniforms_router",
]
