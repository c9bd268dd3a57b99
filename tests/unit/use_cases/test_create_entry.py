"""Tests for CreateEntryUseCase."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from warehouse.application.dto.requests import CreateEntryRequest, EntryItemRequest
from warehouse.application.use_cases.create_entry import CreateEntryUseCase
from warehouse.core.entities.material import Material
from warehouse.core.entities.movement import MovementKind, OriginType
from warehouse.core.entities.reference import ReferenceKind, Supplier
from warehouse.core.exceptions import (
    MaterialNotFoundError,
    ReferenceNotFoundError,
    ValidationError,
)


@pytest.fixture
def mock_material_store():
    store = AsyncMock()
    store.get_material.return_value = Material(
        id=1, name="Luva", unit_price=Decimal("4.50"), owner_id=1
    )
    return store


@pytest.fixture
def mock_ledger_store():
    store = AsyncMock()

    async def record_entries(movements):
        return [m.model_copy(update={"id": i}) for i, m in enumerate(movements, start=1)]

    store.record_entries.side_effect = record_entries
    return store


@pytest.fixture
def mock_reference_store():
    store = AsyncMock()
    store.get.return_value = Supplier(id=5, name="Acme")
    return store


@pytest.fixture
def use_case(mock_material_store, mock_ledger_store, mock_reference_store):
    return CreateEntryUseCase(
        material_store=mock_material_store,
        ledger_store=mock_ledger_store,
        reference_store=mock_reference_store,
    )


def supplier_entry(**overrides) -> CreateEntryRequest:
    data = {
        "origin_type": OriginType.SUPPLIER,
        "supplier_id": 5,
        "items": [EntryItemRequest(material_id=1, quantity=10, unit_price=Decimal("5"))],
    }
    data.update(overrides)
    return CreateEntryRequest(**data)


class TestCreateEntryUseCase:
    async def test_supplier_entry(self, use_case, mock_ledger_store, scope):
        result = await use_case.execute(scope, supplier_entry())

        [movement] = result.movements
        assert movement.id == 1
        assert movement.kind == MovementKind.SUPPLIER_ENTRY
        assert movement.supplier_id == 5
        assert movement.quantity == 10
        assert movement.user_id == scope.user_id
        mock_ledger_store.record_entries.assert_awaited_once()

    async def test_price_defaults_to_material_price(self, use_case, scope):
        request = supplier_entry(items=[EntryItemRequest(material_id=1, quantity=2)])

        result = await use_case.execute(scope, request)

        assert result.movements[0].unit_price == Decimal("4.50")

    async def test_employee_return(self, use_case, mock_reference_store, scope):
        request = CreateEntryRequest(
            origin_type=OriginType.EMPLOYEE_RETURN,
            return_employee_id=3,
            items=[EntryItemRequest(material_id=1, quantity=1)],
        )

        result = await use_case.execute(scope, request)

        assert result.movements[0].kind == MovementKind.EMPLOYEE_RETURN
        mock_reference_store.get.assert_any_await(ReferenceKind.EMPLOYEE, 3, scope)

    async def test_missing_origin_id(self, use_case, mock_ledger_store, scope):
        with pytest.raises(ValidationError) as exc_info:
            await use_case.execute(scope, supplier_entry(supplier_id=None))

        assert exc_info.value.field == "supplier_id"
        mock_ledger_store.record_entries.assert_not_awaited()

    async def test_foreign_origin_id_rejected(self, use_case, scope):
        with pytest.raises(ValidationError) as exc_info:
            await use_case.execute(scope, supplier_entry(return_employee_id=3))

        assert exc_info.value.field == "return_employee_id"

    async def test_non_positive_quantity(self, use_case, scope):
        request = supplier_entry(items=[EntryItemRequest(material_id=1, quantity=0)])

        with pytest.raises(ValidationError):
            await use_case.execute(scope, request)

    async def test_no_items(self, use_case, scope):
        with pytest.raises(ValidationError):
            await use_case.execute(scope, supplier_entry(items=[]))

    async def test_unknown_supplier(self, use_case, mock_reference_store, scope):
        mock_reference_store.get.return_value = None

        with pytest.raises(ReferenceNotFoundError):
            await use_case.execute(scope, supplier_entry())

    async def test_unknown_material(self, use_case, mock_material_store, mock_ledger_store, scope):
        mock_material_store.get_material.return_value = None

        with pytest.raises(MaterialNotFoundError):
            await use_case.execute(scope, supplier_entry())
        mock_ledger_store.record_entries.assert_not_awaited()

    def test_to_response_totals(self, use_case, make_entry):
        from warehouse.application.use_cases.create_entry import CreateEntryResult

        response = use_case.to_response(
            CreateEntryResult(movements=[make_entry(10, "5"), make_entry(2, "7")])
        )

        assert response.total_quantity == 12
        assert response.total_value == Decimal("64")
