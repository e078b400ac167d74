"""Core domain services."""

from stockroom.core.services.dashboard import DashboardService
from stockroom.core.services.ledger_base import DEFAULT_LIMIT, LedgerService
from stockroom.core.services.stock_ledger import StockLedgerService
from stockroom.core.services.uniform_ledger import UniformLedgerService, parse_issue_date

__all__ = [
    "DEFAULT_LIMIT",
    "LedgerService",
    "StockLedgerService",
    "UniformLedgerService",
    "DashboardService",
    "parse_issue_date",
]
