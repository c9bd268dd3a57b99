"""Tests for RecalculateStockUseCase and InspectLotsUseCase."""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from warehouse.application.use_cases.inspect_lots import InspectLotsUseCase
from warehouse.application.use_cases.recalculate_stock import RecalculateStockUseCase
from warehouse.core.entities.material import Material
from warehouse.core.entities.movement import Lot, LotAllocation
from warehouse.core.exceptions import MaterialNotFoundError
from warehouse.core.services import StockRepair


class TestRecalculateStock:
    async def test_single_material(self, scope):
        materials = AsyncMock()
        materials.get_material.return_value = Material(id=1, name="Luva")
        reconciler = AsyncMock()
        reconciler.recalculate.return_value = 8
        use_case = RecalculateStockUseCase(material_store=materials, reconciler=reconciler)

        stock = await use_case.execute(scope, 1)

        assert stock == 8
        assert use_case.to_response(1, stock).current_stock == 8

    async def test_unknown_material(self, scope):
        materials = AsyncMock()
        materials.get_material.return_value = None
        reconciler = AsyncMock()
        use_case = RecalculateStockUseCase(material_store=materials, reconciler=reconciler)

        with pytest.raises(MaterialNotFoundError):
            await use_case.execute(scope, 1)
        reconciler.recalculate.assert_not_awaited()

    async def test_all_materials(self, scope):
        reconciler = AsyncMock()
        reconciler.recalculate_all.return_value = [
            StockRepair(material_id=1, name="Luva", previous=3, current=8),
            StockRepair(material_id=2, name="Bota", previous=1, current=1),
        ]
        use_case = RecalculateStockUseCase(material_store=AsyncMock(), reconciler=reconciler)

        response = use_case.to_all_response(await use_case.execute_all(scope))

        assert response.materials == 2
        assert response.repaired == 1
        assert response.repairs[0].changed


class TestInspectLots:
    async def test_lots_response(self, scope):
        resolver = AsyncMock()
        resolver.resolve_lots.return_value = [
            Lot(unit_price=Decimal("7"), total_entries=10, available_quantity=8,
                entry_date=date(2024, 3, 1)),
        ]
        use_case = InspectLotsUseCase(lot_resolver=resolver, processor=AsyncMock())

        lots = await use_case.resolve_lots(scope, 1)
        response = use_case.to_lots_response(1, lots)

        assert response.available_quantity == 8
        assert response.available_value == Decimal("56")

    async def test_preview_response(self, scope):
        processor = AsyncMock()
        processor.preview_exit.return_value = [
            LotAllocation(unit_price=Decimal("5"), quantity=10, entry_date=date(2024, 3, 1)),
            LotAllocation(unit_price=Decimal("7"), quantity=2, entry_date=date(2024, 3, 1)),
        ]
        use_case = InspectLotsUseCase(lot_resolver=AsyncMock(), processor=processor)

        allocations = await use_case.preview_exit(scope, 1, 12)
        response = use_case.to_preview_response(1, 12, allocations)

        processor.preview_exit.assert_awaited_once_with(1, 12, scope)
        assert response.total_value == Decimal("64")
        assert [a.quantity for a in response.allocations] == [10, 2]
