"""API tests for ledger endpoints."""

from datetime import date
from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from warehouse.api.dependencies import (
    get_create_entry_use_case,
    get_create_exit_use_case,
    get_delete_movement_use_case,
    get_ledger,
)
from warehouse.application.use_cases import (
    CreateEntryUseCase,
    CreateExitUseCase,
    DeleteMovementUseCase,
)
from warehouse.application.use_cases.create_entry import CreateEntryResult
from warehouse.application.use_cases.create_exit import CreateExitResult, ExitFailure
from warehouse.application.use_cases.delete_movement import DeleteExitTransactionResult
from warehouse.core.entities.tenancy import Scope
from warehouse.core.exceptions import (
    InsufficientStockError,
    MaterialNotFoundError,
    StockConflictError,
    ValidationError,
)

ENTRY_BODY = {
    "movement_date": "2024-03-01",
    "origin_type": "supplier",
    "supplier_id": 5,
    "items": [{"material_id": 1, "quantity": 10, "unit_price": "5.00"}],
}

EXIT_BODY = {
    "movement_date": "2024-03-02",
    "destination_type": "employee",
    "destination_employee_id": 3,
    "items": [{"material_id": 1, "quantity": 12}],
}


@pytest.fixture
def entry_use_case(overrides, make_entry):
    uc = AsyncMock(spec=CreateEntryUseCase)
    result = CreateEntryResult(movements=[make_entry(10, "5.00")])
    uc.execute.return_value = result
    uc.to_response.return_value = CreateEntryUseCase().to_response(result)
    overrides(get_create_entry_use_case, uc)
    return uc


@pytest.fixture
def exit_use_case(overrides, exit_transaction):
    uc = AsyncMock(spec=CreateExitUseCase)
    result = CreateExitResult(
        transaction=exit_transaction,
        failures=[ExitFailure(material_id=2, requested=5, available=1, message="short")],
    )
    uc.execute.return_value = result
    uc.to_response.return_value = CreateExitUseCase().to_response(result)
    overrides(get_create_exit_use_case, uc)
    return uc


@pytest.fixture
def mock_ledger(overrides):
    store = AsyncMock()
    overrides(get_ledger, store)
    return store


class TestEntries:
    async def test_create_entry_returns_201(self, client: AsyncClient, entry_use_case):
        response = await client.post("/api/movements/entries", json=ENTRY_BODY)

        assert response.status_code == 201
        data = response.json()
        assert data["total_quantity"] == 10
        assert data["movements"][0]["kind"] == "supplier_entry"

    async def test_scope_from_headers(self, client: AsyncClient, entry_use_case):
        await client.post(
            "/api/movements/entries",
            json=ENTRY_BODY,
            headers={"X-User-ID": "7", "X-Owner-ID": "3"},
        )

        scope = entry_use_case.execute.await_args.args[0]
        assert scope == Scope(owner_id=3, user_id=7)

    async def test_super_admin_sees_every_tenant(self, client: AsyncClient, entry_use_case):
        await client.post(
            "/api/movements/entries",
            json=ENTRY_BODY,
            headers={"X-User-ID": "9", "X-User-Role": "super_admin"},
        )

        assert entry_use_case.execute.await_args.args[0].is_global

    async def test_domain_validation_is_400(self, client: AsyncClient, entry_use_case):
        entry_use_case.execute.side_effect = ValidationError("supplier_id", "required")

        response = await client.post("/api/movements/entries", json=ENTRY_BODY)

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    async def test_schema_violation_is_422(self, client: AsyncClient, entry_use_case):
        response = await client.post("/api/movements/entries", json={"items": []})

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"
        entry_use_case.execute.assert_not_awaited()


class TestExits:
    async def test_create_exit_reports_lines_and_failures(
        self, client: AsyncClient, exit_use_case
    ):
        response = await client.post("/api/movements/exits", json=EXIT_BODY)

        assert response.status_code == 201
        data = response.json()
        assert [line["quantity"] for line in data["transaction"]["lines"]] == [10, 2]
        assert data["transaction"]["total_quantity"] == 12
        assert data["failures"][0]["material_id"] == 2

    async def test_insufficient_stock_is_409(self, client: AsyncClient, exit_use_case):
        exit_use_case.execute.side_effect = InsufficientStockError(1, available=8, requested=12)

        response = await client.post("/api/movements/exits", json=EXIT_BODY)

        assert response.status_code == 409
        body = response.json()
        assert body["error_code"] == "INSUFFICIENT_STOCK"
        assert body["hint"]

    async def test_conflict_is_409(self, client: AsyncClient, exit_use_case):
        exit_use_case.execute.side_effect = StockConflictError(1, attempts=3)

        response = await client.post("/api/movements/exits", json=EXIT_BODY)

        assert response.status_code == 409
        assert response.json()["error_code"] == "STOCK_CONFLICT"

    async def test_unknown_material_is_404(self, client: AsyncClient, exit_use_case):
        exit_use_case.execute.side_effect = MaterialNotFoundError(1)

        response = await client.post("/api/movements/exits", json=EXIT_BODY)

        assert response.status_code == 404
        assert response.json()["error_code"] == "MATERIAL_NOT_FOUND"


class TestReadsAndDeletes:
    async def test_list_movements(self, client: AsyncClient, mock_ledger, make_entry):
        mock_ledger.list_movements.return_value = [make_entry(1, "5"), make_entry(2, "5")]

        response = await client.get(
            "/api/movements", params={"type": "entry", "limit": 2, "start_date": "2024-03-01"}
        )

        assert response.status_code == 200
        data = response.json()
        assert len(data["items"]) == 2
        assert data["has_more"] is True
        kwargs = mock_ledger.list_movements.await_args.kwargs
        assert kwargs["start_date"] == date(2024, 3, 1)
        assert kwargs["limit"] == 2

    async def test_limit_bounds(self, client: AsyncClient, mock_ledger):
        response = await client.get("/api/movements", params={"limit": 501})

        assert response.status_code == 422

    async def test_get_movement_not_found(self, client: AsyncClient, mock_ledger):
        mock_ledger.get_movement.return_value = None

        response = await client.get("/api/movements/99")

        assert response.status_code == 404
        assert response.json()["error_code"] == "MOVEMENT_NOT_FOUND"

    async def test_get_exit_transaction(self, client: AsyncClient, mock_ledger, exit_transaction):
        mock_ledger.get_exit_transaction.return_value = exit_transaction

        response = await client.get("/api/movements/exits/4")

        assert response.status_code == 200
        assert response.json()["id"] == 4

    async def test_delete_exit_transaction(self, client: AsyncClient, overrides, exit_transaction):
        uc = AsyncMock(spec=DeleteMovementUseCase)
        result = DeleteExitTransactionResult(
            exit_transaction_id=4, lines=exit_transaction.lines, stocks={1: 20}
        )
        uc.delete_exit_transaction.return_value = result
        uc.to_transaction_response.return_value = (
            DeleteMovementUseCase().to_transaction_response(result)
        )
        overrides(get_delete_movement_use_case, uc)

        response = await client.delete("/api/movements/exits/4")

        assert response.status_code == 200
        assert response.json() == {"exit_transaction_id": 4, "deleted_lines": 2, "stocks": {"1": 20}}
