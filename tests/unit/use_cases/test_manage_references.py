"""Tests for ManageReferencesUseCase."""

from unittest.mock import AsyncMock

import pytest

from warehouse.application.dto.requests import CostCenterRequest, SupplierRequest
from warehouse.application.use_cases.manage_references import ManageReferencesUseCase
from warehouse.core.entities.reference import CostCenter, ReferenceKind, Supplier
from warehouse.core.exceptions import DuplicateCodeError, ReferenceNotFoundError


@pytest.fixture
def mock_reference_store():
    store = AsyncMock()

    async def create(kind, entity):
        return entity.model_copy(update={"id": 1})

    async def update(kind, entity):
        return entity

    store.create.side_effect = create
    store.update.side_effect = update
    store.find_cost_center_by_code.return_value = None
    return store


@pytest.fixture
def use_case(mock_reference_store):
    return ManageReferencesUseCase(reference_store=mock_reference_store)


class TestManageReferences:
    async def test_create_supplier(self, use_case, scope):
        supplier = await use_case.create(
            scope, ReferenceKind.SUPPLIER, SupplierRequest(name="Acme", cnpj="123")
        )

        assert isinstance(supplier, Supplier)
        assert supplier.id == 1
        assert supplier.owner_id == scope.owner_id

    async def test_duplicate_cost_center_code(self, use_case, mock_reference_store, scope):
        mock_reference_store.find_cost_center_by_code.return_value = CostCenter(
            id=2, name="Obra", code="CC-1"
        )

        with pytest.raises(DuplicateCodeError):
            await use_case.create(
                scope, ReferenceKind.COST_CENTER, CostCenterRequest(code="CC-1", name="Outra")
            )
        mock_reference_store.create.assert_not_awaited()

    async def test_update_keeps_identity(self, use_case, mock_reference_store, scope):
        current = CostCenter(id=2, name="Obra", code="CC-1", owner_id=1)
        mock_reference_store.get.return_value = current
        mock_reference_store.find_cost_center_by_code.return_value = current

        updated = await use_case.update(
            scope,
            ReferenceKind.COST_CENTER,
            2,
            CostCenterRequest(code="CC-1", name="Obra Norte"),
        )

        assert updated.id == 2
        assert updated.name == "Obra Norte"
        assert updated.created_at == current.created_at

    async def test_update_to_taken_code(self, use_case, mock_reference_store, scope):
        mock_reference_store.get.return_value = CostCenter(id=2, name="Obra", code="CC-1")
        mock_reference_store.find_cost_center_by_code.return_value = CostCenter(
            id=3, name="Outra", code="CC-2"
        )

        with pytest.raises(DuplicateCodeError):
            await use_case.update(
                scope, ReferenceKind.COST_CENTER, 2, CostCenterRequest(code="CC-2", name="Obra")
            )

    async def test_get_missing(self, use_case, mock_reference_store, scope):
        mock_reference_store.get.return_value = None

        with pytest.raises(ReferenceNotFoundError) as exc_info:
            await use_case.get(scope, ReferenceKind.EMPLOYEE, 8)
        assert exc_info.value.details["kind"] == "employee"

    async def test_delete(self, use_case, mock_reference_store, scope):
        mock_reference_store.get.return_value = Supplier(id=4, name="Acme")

        await use_case.delete(scope, ReferenceKind.SUPPLIER, 4)

        mock_reference_store.delete.assert_awaited_once_with(ReferenceKind.SUPPLIER, 4)
