"""
Service factory functions for dependency injection.

This module wires the SQLite stores to the core ledger services. Use cases
and API dependencies import from here.

Clean Architecture: Application layer orchestrates DI, not core layer.
"""

from typing import TYPE_CHECKING

from warehouse.config import get_settings
from warehouse.core.services import (
    FifoExitProcessor,
    LotResolver,
    ReportingService,
    StockReconciler,
)

if TYPE_CHECKING:
    from warehouse.core.interfaces import ILedgerStore, IMaterialStore, IReferenceStore


# Singleton service instances
_stock_reconciler: StockReconciler | None = None
_lot_resolver: LotResolver | None = None
_fifo_exit_processor: FifoExitProcessor | None = None
_reporting_service: ReportingService | None = None


async def get_stock_reconciler(
    material_store: "IMaterialStore | None" = None,
    ledger_store: "ILedgerStore | None" = None,
) -> StockReconciler:
    """
    Get or create StockReconciler instance.

    Args:
        material_store: Optional material store override
        ledger_store: Optional ledger store override

    Returns:
        Configured StockReconciler
    """
    global _stock_reconciler

    overridden = material_store is not None or ledger_store is not None
    if _stock_reconciler is not None and not overridden:
        return _stock_reconciler

    # Lazy import infrastructure to avoid circular imports
    from warehouse.infrastructure.storage.sqlite import get_ledger_store, get_material_store

    service = StockReconciler(
        material_store=material_store or await get_material_store(),
        ledger_store=ledger_store or await get_ledger_store(),
    )

    if not overridden:
        _stock_reconciler = service

    return service


async def get_lot_resolver(ledger_store: "ILedgerStore | None" = None) -> LotResolver:
    """Get or create LotResolver instance."""
    global _lot_resolver

    if _lot_resolver is not None and ledger_store is None:
        return _lot_resolver

    from warehouse.infrastructure.storage.sqlite import get_ledger_store

    service = LotResolver(ledger_store or await get_ledger_store())

    if ledger_store is None:
        _lot_resolver = service

    return service


async def get_fifo_exit_processor(
    ledger_store: "ILedgerStore | None" = None,
    reconciler: StockReconciler | None = None,
) -> FifoExitProcessor:
    """
    Get or create FifoExitProcessor instance.

    Retry count and reconcile-before-exit come from inventory settings.

    Args:
        ledger_store: Optional ledger store override
        reconciler: Optional reconciler override

    Returns:
        Configured FifoExitProcessor
    """
    global _fifo_exit_processor

    overridden = ledger_store is not None or reconciler is not None
    if _fifo_exit_processor is not None and not overridden:
        return _fifo_exit_processor

    from warehouse.infrastructure.storage.sqlite import get_ledger_store

    settings = get_settings()
    service = FifoExitProcessor(
        ledger_store=ledger_store or await get_ledger_store(),
        reconciler=reconciler or await get_stock_reconciler(),
        max_retries=settings.inventory.exit_max_retries,
        reconcile_before_exit=settings.inventory.reconcile_before_exit,
    )

    if not overridden:
        _fifo_exit_processor = service

    return service


async def get_reporting_service(
    ledger_store: "ILedgerStore | None" = None,
    material_store: "IMaterialStore | None" = None,
    reference_store: "IReferenceStore | None" = None,
) -> ReportingService:
    """Get or create ReportingService instance."""
    global _reporting_service

    overridden = any(s is not None for s in (ledger_store, material_store, reference_store))
    if _reporting_service is not None and not overridden:
        return _reporting_service

    from warehouse.infrastructure.storage.sqlite import (
        get_ledger_store,
        get_material_store,
        get_reference_store,
    )

    service = ReportingService(
        ledger_store=ledger_store or await get_ledger_store(),
        material_store=material_store or await get_material_store(),
        reference_store=reference_store or await get_reference_store(),
    )

    if not overridden:
        _reporting_service = service

    return service


def reset_services() -> None:
    """
    Reset all singleton service instances.

    Useful for testing or when configuration changes.
    """
    global _stock_reconciler
    global _lot_resolver
    global _fifo_exit_processor
    global _reporting_service

    _stock_reconciler = None
    _lot_resolver = None
    _fifo_exit_processor = None
    _reporting_service = None


__all__ = [
    # Factory functions
    "get_stock_reconciler",
    "get_lot_resolver",
    "get_fifo_exit_processor",
    "get_reporting_service",
    # Reset
    "reset_services",
]
