"""SQLite storage implementations."""

from warehouse.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_immediate_transaction,
    get_pool,
    get_transaction,
)
from warehouse.infrastructure.storage.sqlite.ledger_store import SQLiteLedgerStore
from warehouse.infrastructure.storage.sqlite.material_store import SQLiteMaterialStore
from warehouse.infrastructure.storage.sqlite.reference_store import SQLiteReferenceStore

# Singleton instances
_ledger_store: SQLiteLedgerStore | None = None
_material_store: SQLiteMaterialStore | None = None
_reference_store: SQLiteReferenceStore | None = None


async def get_ledger_store() -> SQLiteLedgerStore:
    """Get singleton ledger store instance."""
    global _ledger_store
    if _ledger_store is None:
        _ledger_store = SQLiteLedgerStore()
    return _ledger_store


async def get_material_store() -> SQLiteMaterialStore:
    """Get singleton material store instance."""
    global _material_store
    if _material_store is None:
        _material_store = SQLiteMaterialStore()
    return _material_store


async def get_reference_store() -> SQLiteReferenceStore:
    """Get singleton reference store instance."""
    global _reference_store
    if _reference_store is None:
        _reference_store = SQLiteReferenceStore()
    return _reference_store


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    "get_immediate_transaction",
    # Store classes
    "SQLiteLedgerStore",
    "SQLiteMaterialStore",
    "SQLiteReferenceStore",
    # Factory functions
    "get_ledger_store",
    "get_material_store",
    "get_reference_store",
]
