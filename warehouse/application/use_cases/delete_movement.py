"""Delete Movement Use Case - remove ledger rows and reconcile the stock."""

from dataclasses import dataclass

from warehouse.application.dto.responses import (
    DeleteExitTransactionResponse,
    DeleteMovementResponse,
    movement_response,
)
from warehouse.config import get_logger
from warehouse.core.entities.movement import Movement
from warehouse.core.entities.tenancy import Scope
from warehouse.core.exceptions import ExitTransactionNotFoundError, MovementNotFoundError
from warehouse.core.interfaces import ILedgerStore
from warehouse.core.services import StockReconciler

logger = get_logger(__name__)


@dataclass
class DeleteMovementResult:
    movement: Movement
    current_stock: int


@dataclass
class DeleteExitTransactionResult:
    exit_transaction_id: int
    lines: list[Movement]
    stocks: dict[int, int]


class DeleteMovementUseCase:
    """Delete a single row or a whole exit; the stock is always reconciled after."""

    def __init__(
        self,
        ledger_store: ILedgerStore | None = None,
        reconciler: StockReconciler | None = None,
    ):
        self._ledger_store = ledger_store
        self._reconciler = reconciler

    async def _get_ledger_store(self) -> ILedgerStore:
        if self._ledger_store is None:
            from warehouse.infrastructure.storage.sqlite import get_ledger_store

            self._ledger_store = await get_ledger_store()
        return self._ledger_store

    async def _get_reconciler(self) -> StockReconciler:
        if self._reconciler is None:
            from warehouse.application.services import get_stock_reconciler

            self._reconciler = await get_stock_reconciler()
        return self._reconciler

    async def execute(self, scope: Scope, movement_id: int) -> DeleteMovementResult:
        """
        Delete one ledger row.

        Raises:
            MovementNotFoundError: If the row is absent or out of scope
        """
        ledger = await self._get_ledger_store()

        movement = await ledger.get_movement(movement_id, scope)
        if movement is None:
            raise MovementNotFoundError(movement_id)

        deleted = await ledger.delete_movement(movement_id)
        if deleted is None:
            # Removed concurrently
            raise MovementNotFoundError(movement_id)

        reconciler = await self._get_reconciler()
        stock = await reconciler.recalculate(movement.material_id, scope)

        logger.info(
            "movement_delete_complete",
            movement_id=movement_id,
            material_id=movement.material_id,
            current_stock=stock,
        )
        return DeleteMovementResult(movement=deleted, current_stock=stock)

    async def delete_exit_transaction(
        self, scope: Scope, transaction_id: int
    ) -> DeleteExitTransactionResult:
        """
        Undo a whole exit.

        Raises:
            ExitTransactionNotFoundError: If the exit is absent or out of scope
        """
        ledger = await self._get_ledger_store()

        transaction = await ledger.get_exit_transaction(transaction_id, scope)
        if transaction is None:
            raise ExitTransactionNotFoundError(transaction_id)

        lines = await ledger.delete_exit_transaction(transaction_id)

        reconciler = await self._get_reconciler()
        stocks: dict[int, int] = {}
        for material_id in dict.fromkeys(line.material_id for line in transaction.lines):
            stocks[material_id] = await reconciler.recalculate(material_id, scope)

        logger.info(
            "exit_transaction_delete_complete",
            exit_transaction_id=transaction_id,
            lines=len(lines),
            materials=list(stocks),
        )
        return DeleteExitTransactionResult(
            exit_transaction_id=transaction_id,
            lines=lines,
            stocks=stocks,
        )

    def to_response(self, result: DeleteMovementResult) -> DeleteMovementResponse:
        """Convert result to API response."""
        return DeleteMovementResponse(
            deleted=movement_response(result.movement),
            current_stock=result.current_stock,
        )

    def to_transaction_response(
        self, result: DeleteExitTransactionResult
    ) -> DeleteExitTransactionResponse:
        return DeleteExitTransactionResponse(
            exit_transaction_id=result.exit_transaction_id,
            deleted_lines=len(result.lines),
            stocks=result.stocks,
        )
