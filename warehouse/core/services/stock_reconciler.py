"""
Stock reconciler.

Recomputes a material's stock from its full ledger and rewrites the cached
``current_stock`` counter whenever the two disagree.

The write-back is a compare-and-set on ``stock_version``: an exit or entry
committed between the ledger read and the write makes the write miss, and the
reconciler re-reads the ledger instead of restoring a stale count.
"""

import warnings
from collections.abc import Iterable
from dataclasses import dataclass

from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt

from warehouse.config import get_logger
from warehouse.core.entities.movement import Movement
from warehouse.core.entities.tenancy import Scope
from warehouse.core.exceptions import ConsistencyRepairedWarning, StaleStockVersionError
from warehouse.core.interfaces.ledger_store import ILedgerStore
from warehouse.core.interfaces.material_store import IMaterialStore
from warehouse.core.services.lot_resolver import fifo_key

logger = get_logger(__name__)


def fold_stock(movements: Iterable[Movement]) -> int:
    """Signed sum of a material's rows, without clamping."""
    return sum(m.signed_quantity for m in sorted(movements, key=fifo_key))


@dataclass
class StockRepair:
    """Outcome of reconciling one material."""

    material_id: int
    name: str
    previous: int
    current: int
    # Left untouched because concurrent writers kept moving the version
    contended: bool = False

    @property
    def changed(self) -> bool:
        return not self.contended and self.previous != self.current


class StockReconciler:
    """
    Keeps ``current_stock`` equal to the ledger.

    Idempotent: a second run right after the first never writes.
    """

    PAGE_SIZE = 500
    MAX_ATTEMPTS = 3

    def __init__(self, material_store: IMaterialStore, ledger_store: ILedgerStore):
        self._materials = material_store
        self._ledger = ledger_store

    async def recalculate(self, material_id: int, scope: Scope) -> int:
        """
        Recompute and repair one material's stock.

        Args:
            material_id: Material to reconcile
            scope: Tenant scope

        Returns:
            Reconciled stock, 0 for a material that does not exist in scope
        """
        repair = await self._reconcile(material_id, scope)
        return repair.current if repair else 0

    async def recalculate_all(self, scope: Scope) -> list[StockRepair]:
        """Reconcile every material visible in the scope."""
        repairs: list[StockRepair] = []
        offset = 0

        while True:
            materials = await self._materials.list_materials(
                scope, limit=self.PAGE_SIZE, offset=offset
            )
            for material in materials:
                repair = await self._reconcile(material.id, scope)
                if repair is not None:
                    repairs.append(repair)
            if len(materials) < self.PAGE_SIZE:
                break
            offset += self.PAGE_SIZE

        logger.info(
            "stock_recalculated_all",
            owner_id=scope.owner_id,
            materials=len(repairs),
            repaired=sum(1 for r in repairs if r.changed),
        )
        return repairs

    async def _reconcile(self, material_id: int, scope: Scope) -> StockRepair | None:
        material = await self._materials.get_material(material_id, scope)
        if material is None:
            logger.debug("reconcile_skipped_unknown_material", material_id=material_id)
            return None

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.MAX_ATTEMPTS),
            retry=retry_if_exception_type(StaleStockVersionError),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    repair = await self._repair_once(material_id, material.name, scope)
        except StaleStockVersionError as e:
            # Writers kept moving the version; they keep the counter themselves
            logger.warning(
                "stock_reconcile_contended",
                material_id=material_id,
                attempts=self.MAX_ATTEMPTS,
                error=str(e),
            )
            return StockRepair(
                material_id=material_id,
                name=material.name,
                previous=material.current_stock,
                current=material.current_stock,
                contended=True,
            )

        if repair is not None and repair.changed:
            logger.warning(
                "stock_drift_repaired",
                material_id=material_id,
                cached=repair.previous,
                computed=repair.current,
            )
            warnings.warn(
                ConsistencyRepairedWarning(material_id, repair.previous, repair.current),
                stacklevel=3,
            )
        return repair

    async def _repair_once(self, material_id: int, name: str, scope: Scope) -> StockRepair | None:
        """
        Fold one versioned snapshot and write the result back.

        Raises:
            StaleStockVersionError: If a ledger write landed after the snapshot
        """
        snapshot = await self._ledger.get_snapshot(material_id, scope)
        if snapshot is None:
            return None

        computed = max(0, fold_stock(snapshot.movements))
        repair = StockRepair(
            material_id=material_id,
            name=name,
            previous=snapshot.current_stock if snapshot.current_stock is not None else 0,
            current=computed,
        )
        if repair.changed:
            written = await self._materials.set_current_stock(
                material_id, computed, expected_version=snapshot.stock_version
            )
            if not written:
                raise StaleStockVersionError(material_id, snapshot.stock_version, None)
        return repair
