"""
Core business logic services.

Layer-pure services that depend only on:
- warehouse/core/entities/*
- warehouse/core/interfaces/*
- warehouse/core/exceptions.py

NO infrastructure imports. All dependencies injected via constructor.
"""

from warehouse.core.services.fifo_exit_processor import (
    ExitItem,
    ExitPlan,
    FifoExitProcessor,
    allocate_fifo,
)
from warehouse.core.services.lot_resolver import LotResolver, build_lots, fifo_key
from warehouse.core.services.movement_classifier import classify, matches_report_type
from warehouse.core.services.reporting import ReportingService
from warehouse.core.services.stock_reconciler import StockReconciler, StockRepair, fold_stock

__all__ = [
    # Lots
    "LotResolver",
    "build_lots",
    "fifo_key",
    # FIFO exits
    "FifoExitProcessor",
    "ExitItem",
    "ExitPlan",
    "allocate_fifo",
    # Reconciliation
    "StockReconciler",
    "StockRepair",
    "fold_stock",
    # Classification
    "classify",
    "matches_report_type",
    # Reports
    "ReportingService",
]
