"""Core interfaces (ports) for dependency injection."""

from warehouse.core.interfaces.ledger_store import ILedgerStore
from warehouse.core.interfaces.material_store import IMaterialStore
from warehouse.core.interfaces.reference_store import IReferenceStore

__all__ = [
    "ILedgerStore",
    "IMaterialStore",
    "IReferenceStore",
]
