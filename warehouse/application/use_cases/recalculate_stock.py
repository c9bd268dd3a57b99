"""Recalculate Stock Use Case - repair cached stock from the ledger."""

from warehouse.application.dto.responses import (
    RecalculateAllResponse,
    RecalculateStockResponse,
    StockRepairResponse,
)
from warehouse.config import get_logger
from warehouse.core.entities.tenancy import Scope
from warehouse.core.exceptions import MaterialNotFoundError
from warehouse.core.interfaces import IMaterialStore
from warehouse.core.services import StockReconciler, StockRepair

logger = get_logger(__name__)


class RecalculateStockUseCase:
    """Reconcile one material or every material in scope."""

    def __init__(
        self,
        material_store: IMaterialStore | None = None,
        reconciler: StockReconciler | None = None,
    ):
        self._material_store = material_store
        self._reconciler = reconciler

    async def _get_material_store(self) -> IMaterialStore:
        if self._material_store is None:
            from warehouse.infrastructure.storage.sqlite import get_material_store

            self._material_store = await get_material_store()
        return self._material_store

    async def _get_reconciler(self) -> StockReconciler:
        if self._reconciler is None:
            from warehouse.application.services import get_stock_reconciler

            self._reconciler = await get_stock_reconciler()
        return self._reconciler

    async def execute(self, scope: Scope, material_id: int) -> int:
        """
        Reconcile a single material.

        Raises:
            MaterialNotFoundError: If the material is absent or out of scope
        """
        mat_store = await self._get_material_store()
        if await mat_store.get_material(material_id, scope) is None:
            raise MaterialNotFoundError(material_id)

        reconciler = await self._get_reconciler()
        return await reconciler.recalculate(material_id, scope)

    async def execute_all(self, scope: Scope) -> list[StockRepair]:
        """Reconcile every material in scope."""
        reconciler = await self._get_reconciler()
        repairs = await reconciler.recalculate_all(scope)
        logger.info(
            "recalculate_all_complete",
            materials=len(repairs),
            repaired=sum(1 for r in repairs if r.changed),
        )
        return repairs

    @staticmethod
    def to_response(material_id: int, stock: int) -> RecalculateStockResponse:
        return RecalculateStockResponse(material_id=material_id, current_stock=stock)

    @staticmethod
    def to_all_response(repairs: list[StockRepair]) -> RecalculateAllResponse:
        return RecalculateAllResponse(
            materials=len(repairs),
            repaired=sum(1 for r in repairs if r.changed),
            repairs=[
                StockRepairResponse(
                    material_id=r.material_id,
                    name=r.name,
                    previous=r.previous,
                    current=r.current,
                    changed=r.changed,
                )
                for r in repairs
            ],
        )
