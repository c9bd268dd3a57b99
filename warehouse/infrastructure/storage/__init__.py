"""Storage infrastructure implementations."""

from warehouse.infrastructure.storage.sqlite import (
    SQLiteLedgerStore,
    SQLiteMaterialStore,
    SQLiteReferenceStore,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)

__all__ = [
    # SQLite stores
    "SQLiteLedgerStore",
    "SQLiteMaterialStore",
    "SQLiteReferenceStore",
    # Connection pool
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
]
