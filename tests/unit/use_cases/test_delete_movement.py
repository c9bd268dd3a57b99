"""Tests for DeleteMovementUseCase."""

from datetime import date
from unittest.mock import AsyncMock

import pytest

from warehouse.application.use_cases.delete_movement import DeleteMovementUseCase
from warehouse.core.entities.movement import DestinationType, ExitTransaction
from warehouse.core.exceptions import ExitTransactionNotFoundError, MovementNotFoundError


@pytest.fixture
def mock_ledger_store():
    return AsyncMock()


@pytest.fixture
def mock_reconciler():
    reconciler = AsyncMock()
    reconciler.recalculate.return_value = 20
    return reconciler


@pytest.fixture
def use_case(mock_ledger_store, mock_reconciler):
    return DeleteMovementUseCase(ledger_store=mock_ledger_store, reconciler=mock_reconciler)


class TestDeleteMovement:
    async def test_deletes_and_reconciles(
        self, use_case, mock_ledger_store, mock_reconciler, scope, make_exit
    ):
        row = make_exit(12)
        mock_ledger_store.get_movement.return_value = row
        mock_ledger_store.delete_movement.return_value = row

        result = await use_case.execute(scope, row.id)

        assert result.movement == row
        assert result.current_stock == 20
        mock_reconciler.recalculate.assert_awaited_once_with(row.material_id, scope)

    async def test_out_of_scope_row(self, use_case, mock_ledger_store, scope):
        mock_ledger_store.get_movement.return_value = None

        with pytest.raises(MovementNotFoundError):
            await use_case.execute(scope, 5)
        mock_ledger_store.delete_movement.assert_not_awaited()

    async def test_row_removed_concurrently(self, use_case, mock_ledger_store, scope, make_exit):
        mock_ledger_store.get_movement.return_value = make_exit(1)
        mock_ledger_store.delete_movement.return_value = None

        with pytest.raises(MovementNotFoundError):
            await use_case.execute(scope, 5)


class TestDeleteExitTransaction:
    async def test_reconciles_each_material_once(
        self, use_case, mock_ledger_store, mock_reconciler, scope, make_exit
    ):
        lines = [make_exit(10, "5"), make_exit(2, "7"), make_exit(1, "3", material_id=2)]
        mock_ledger_store.get_exit_transaction.return_value = ExitTransaction(
            id=4,
            date=date(2024, 3, 2),
            destination_type=DestinationType.EMPLOYEE,
            lines=lines,
        )
        mock_ledger_store.delete_exit_transaction.return_value = lines

        result = await use_case.delete_exit_transaction(scope, 4)

        assert result.stocks == {1: 20, 2: 20}
        assert mock_reconciler.recalculate.await_count == 2
        response = use_case.to_transaction_response(result)
        assert response.deleted_lines == 3

    async def test_unknown_transaction(self, use_case, mock_ledger_store, scope):
        mock_ledger_store.get_exit_transaction.return_value = None

        with pytest.raises(ExitTransactionNotFoundError):
            await use_case.delete_exit_transaction(scope, 4)
