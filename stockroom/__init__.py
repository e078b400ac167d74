"""Stockroom: inventory and uniform stock ledger."""

__version__ = "1.0.0"
