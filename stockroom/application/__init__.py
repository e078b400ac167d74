"""Application layer - DTOs and service wiring."""

from stockroom.application.services import (
    get_dashboard_service,
    get_stock_ledger,
    get_uniform_ledger,
    reset_services,
)

__all__ = [
    "get_stock_ledger",
    "get_uniform_ledger",
    "get_dashboard_service",
    "reset_services",
]
