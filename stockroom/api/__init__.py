"""HTTP API for the stockroom ledger."""
