"""Abstract interface for the movements ledger."""

from abc import ABC, abstractmethod
from datetime import date

from warehouse.core.entities.movement import (
    ExitTransaction,
    LedgerSnapshot,
    Movement,
    MovementType,
)
from warehouse.core.entities.report import MovementReportFilter, MovementView
from warehouse.core.entities.tenancy import Scope


class ILedgerStore(ABC):
    """
    Interface for ledger persistence.

    Every write touching a material bumps its ``stock_version`` in the same
    transaction. Reads of a material's rows are always ordered by business
    date, then creation time, then id.
    """

    @abstractmethod
    async def get_snapshot(self, material_id: int, scope: Scope) -> LedgerSnapshot | None:
        """Read a material's version and movements; None when out of scope."""
        pass

    @abstractmethod
    async def list_material_movements(
        self,
        material_id: int,
        scope: Scope,
        movement_type: MovementType | None = None,
    ) -> list[Movement]:
        """All rows of one material in FIFO order."""
        pass

    @abstractmethod
    async def get_movement(self, movement_id: int, scope: Scope) -> Movement | None:
        """Get a ledger row by ID."""
        pass

    @abstractmethod
    async def list_movements(
        self,
        scope: Scope,
        movement_type: MovementType | None = None,
        material_id: int | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Movement]:
        """List ledger rows, newest business date first."""
        pass

    @abstractmethod
    async def record_entries(self, movements: list[Movement]) -> list[Movement]:
        """
        Insert entry rows atomically.

        Increments each material's cached stock; supplier entries also set the
        material's last unit price and last supplier.
        """
        pass

    @abstractmethod
    async def record_exit(
        self,
        transaction: ExitTransaction,
        lines: list[Movement],
        expected_versions: dict[int, int],
    ) -> ExitTransaction:
        """
        Insert exit lines atomically under a write lock.

        Inserts the transaction header first when it has no id. Raises
        StaleStockVersionError, writing nothing, when any material's version
        differs from ``expected_versions``.
        """
        pass

    @abstractmethod
    async def get_exit_transaction(
        self, transaction_id: int, scope: Scope
    ) -> ExitTransaction | None:
        """Get an exit transaction with its lines."""
        pass

    @abstractmethod
    async def delete_movement(self, movement_id: int) -> Movement | None:
        """Delete one row; returns it, or None if it did not exist."""
        pass

    @abstractmethod
    async def delete_exit_transaction(self, transaction_id: int) -> list[Movement]:
        """Delete an exit transaction and all its lines; returns the lines."""
        pass

    @abstractmethod
    async def query_views(
        self, filters: MovementReportFilter, scope: Scope
    ) -> list[MovementView]:
        """Rows joined with material, category, party and cost-center names."""
        pass

    @abstractmethod
    async def count_by_type_on(self, day: date, scope: Scope) -> dict[MovementType, int]:
        """Number of rows of each type dated ``day``."""
        pass
