"""Multi-tenant warehouse stock ledger with FIFO lot costing."""

__version__ = "1.0.0"
