"""API tests for reference data endpoints."""

from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from warehouse.api.dependencies import get_manage_references_use_case
from warehouse.application.use_cases import ManageReferencesUseCase
from warehouse.core.entities.reference import CostCenter, Employee, ReferenceKind
from warehouse.core.exceptions import DuplicateCodeError, ReferenceNotFoundError


@pytest.fixture
def references_use_case(overrides):
    uc = AsyncMock(spec=ManageReferencesUseCase)
    overrides(get_manage_references_use_case, uc)
    return uc


class TestReferenceRoutes:
    async def test_create_cost_center(self, client: AsyncClient, references_use_case):
        references_use_case.create.return_value = CostCenter(id=1, name="Obra", code="CC-1")

        response = await client.post("/api/cost-centers", json={"code": "CC-1", "name": "Obra"})

        assert response.status_code == 201
        assert response.json()["code"] == "CC-1"
        kind = references_use_case.create.await_args.args[1]
        assert kind == ReferenceKind.COST_CENTER

    async def test_duplicate_code_is_409(self, client: AsyncClient, references_use_case):
        references_use_case.create.side_effect = DuplicateCodeError("cost_center", "CC-1")

        response = await client.post("/api/cost-centers", json={"code": "CC-1", "name": "Obra"})

        assert response.status_code == 409
        assert response.json()["error_code"] == "DUPLICATE_CODE"

    async def test_list_employees(self, client: AsyncClient, references_use_case):
        references_use_case.list.return_value = [Employee(id=3, name="Ana")]

        response = await client.get("/api/employees", params={"active_only": True})

        assert response.status_code == 200
        assert response.json()[0]["name"] == "Ana"
        assert references_use_case.list.await_args.kwargs["active_only"] is True

    async def test_third_party_path(self, client: AsyncClient, references_use_case):
        references_use_case.get.side_effect = ReferenceNotFoundError("third_party", 9)

        response = await client.get("/api/third-parties/9")

        assert response.status_code == 404
        assert response.json()["error_code"] == "REFERENCE_NOT_FOUND"

    async def test_missing_name_is_422(self, client: AsyncClient, references_use_case):
        response = await client.post("/api/categories", json={})

        assert response.status_code == 422

    async def test_delete_supplier(self, client: AsyncClient, references_use_case):
        response = await client.delete("/api/suppliers/2")

        assert response.status_code == 204
        references_use_case.delete.assert_awaited_once()
