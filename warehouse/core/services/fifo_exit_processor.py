"""
FIFO exit processor.

Decomposes an exit against the material's open lots oldest-first and persists
one ledger row per lot touched, each tagged with that lot's unit price.

Writes are guarded by the materials' ``stock_version``: the plan is built from
a snapshot, and the store refuses to write when any version moved in between.
The processor then re-plans under a tenacity retry policy, up to
``max_retries`` attempts.
"""

from collections import defaultdict
from dataclasses import dataclass, field

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
)

from warehouse.config import get_logger
from warehouse.core.entities.movement import (
    ExitTransaction,
    Lot,
    LotAllocation,
    Movement,
)
from warehouse.core.entities.tenancy import Scope
from warehouse.core.exceptions import (
    InsufficientStockError,
    MaterialNotFoundError,
    StaleStockVersionError,
    StockConflictError,
    ValidationError,
)
from warehouse.core.interfaces.ledger_store import ILedgerStore
from warehouse.core.services.lot_resolver import build_lots
from warehouse.core.services.stock_reconciler import StockReconciler

logger = get_logger(__name__)


def allocate_fifo(lots: list[Lot], quantity: int, material_id: int) -> list[LotAllocation]:
    """
    Allocate a quantity against lots, oldest first.

    Args:
        lots: Open lots in FIFO order
        quantity: Units to take out
        material_id: Material the lots belong to, for error reporting

    Returns:
        One allocation per lot touched

    Raises:
        ValidationError: If quantity is not positive
        InsufficientStockError: If the lots cannot cover the quantity
    """
    if quantity <= 0:
        raise ValidationError("quantity", "must be greater than zero", quantity)

    available = sum(lot.available_quantity for lot in lots)
    if available < quantity:
        raise InsufficientStockError(material_id, available, quantity)

    allocations: list[LotAllocation] = []
    remaining = quantity
    for lot in lots:
        if remaining == 0:
            break
        taken = min(remaining, lot.available_quantity)
        if taken <= 0:
            continue
        allocations.append(
            LotAllocation(unit_price=lot.unit_price, quantity=taken, entry_date=lot.entry_date)
        )
        remaining -= taken

    return allocations


def consume(lots: list[Lot], allocations: list[LotAllocation]) -> list[Lot]:
    """Lots left open after the allocations are taken out."""
    taken: dict = defaultdict(int)
    for allocation in allocations:
        taken[allocation.unit_price] += allocation.quantity

    remaining: list[Lot] = []
    for lot in lots:
        left = lot.available_quantity - taken.get(lot.unit_price, 0)
        if left > 0:
            remaining.append(lot.model_copy(update={"available_quantity": left}))
    return remaining


@dataclass
class ExitItem:
    """One material requested by an exit."""

    material_id: int
    quantity: int
    purpose: str | None = None


@dataclass
class ExitPlan:
    """Allocations for one item, computed against a versioned snapshot."""

    item: ExitItem
    stock_version: int
    allocations: list[LotAllocation] = field(default_factory=list)


class FifoExitProcessor:
    """
    Runs exits through FIFO lot allocation.

    Required interfaces for DI:
    - ILedgerStore: snapshots and the version-checked exit write
    - StockReconciler: optional, repairs the cached stock around each exit
    """

    DEFAULT_MAX_RETRIES = 3

    def __init__(
        self,
        ledger_store: ILedgerStore,
        reconciler: StockReconciler | None = None,
        max_retries: int | None = None,
        reconcile_before_exit: bool = True,
    ):
        self._ledger = ledger_store
        self._reconciler = reconciler
        self._max_retries = max_retries or self.DEFAULT_MAX_RETRIES
        self._reconcile_before = reconcile_before_exit

    async def preview_exit(
        self, material_id: int, quantity: int, scope: Scope
    ) -> list[LotAllocation]:
        """Compute the allocation an exit would get, without writing."""
        snapshot = await self._ledger.get_snapshot(material_id, scope)
        if snapshot is None:
            raise MaterialNotFoundError(material_id)
        return allocate_fifo(build_lots(snapshot.movements), quantity, material_id)

    async def process_exit(
        self,
        material_id: int,
        quantity: int,
        header: ExitTransaction,
        scope: Scope,
        purpose: str | None = None,
    ) -> ExitTransaction:
        """
        Take one material out of stock.

        Args:
            material_id: Material to take out
            quantity: Units requested
            header: Exit transaction the lines belong to; inserted when it has no id
            scope: Tenant scope
            purpose: Optional purpose stamped on every line

        Returns:
            The exit transaction with the lines written by this call

        Raises:
            InsufficientStockError: If open lots cannot cover the quantity
            StockConflictError: If concurrent writers outlasted every retry
        """
        return await self.process_items(
            [ExitItem(material_id=material_id, quantity=quantity, purpose=purpose)],
            header,
            scope,
        )

    async def process_items(
        self,
        items: list[ExitItem],
        header: ExitTransaction,
        scope: Scope,
    ) -> ExitTransaction:
        """
        Take several items out of stock in a single write.

        Either every item is written or none is.
        """
        if not items:
            raise ValidationError("items", "at least one item is required")

        material_ids = list(dict.fromkeys(item.material_id for item in items))

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._max_retries),
            retry=retry_if_exception_type(StaleStockVersionError),
            before_sleep=self._log_retry,
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    saved = await self._write_once(items, header, scope, material_ids)
        except StaleStockVersionError as e:
            logger.warning("exit_conflict", material_id=e.material_id, attempts=self._max_retries)
            raise StockConflictError(e.material_id, self._max_retries) from e

        if self._reconciler:
            for material_id in material_ids:
                await self._reconciler.recalculate(material_id, scope)

        return saved

    async def _write_once(
        self,
        items: list[ExitItem],
        header: ExitTransaction,
        scope: Scope,
        material_ids: list[int],
    ) -> ExitTransaction:
        """Plan against fresh snapshots and attempt the version-checked write."""
        if self._reconciler and self._reconcile_before:
            for material_id in material_ids:
                await self._reconciler.recalculate(material_id, scope)

        plans = await self._plan(items, scope)
        transaction = header.model_copy(update={"lines": []})
        lines: list[Movement] = [
            transaction.build_line(
                plan.item.material_id, allocation.quantity, allocation.unit_price,
                plan.item.purpose,
            )
            for plan in plans
            for allocation in plan.allocations
        ]
        expected = {plan.item.material_id: plan.stock_version for plan in plans}

        saved = await self._ledger.record_exit(transaction, lines, expected)
        logger.info(
            "exit_processed",
            exit_transaction_id=saved.id,
            materials=material_ids,
            lines=len(saved.lines),
            quantity=saved.total_quantity,
            total_value=saved.total_value,
        )
        return saved

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.info(
            "exit_retry",
            material_id=getattr(error, "material_id", None),
            attempt=retry_state.attempt_number,
            max_retries=self._max_retries,
        )

    async def _plan(self, items: list[ExitItem], scope: Scope) -> list[ExitPlan]:
        """Allocate every item; items sharing a material draw from the same lots."""
        open_lots: dict[int, list[Lot]] = {}
        versions: dict[int, int] = {}
        plans: list[ExitPlan] = []

        for item in items:
            if item.material_id not in open_lots:
                snapshot = await self._ledger.get_snapshot(item.material_id, scope)
                if snapshot is None:
                    raise MaterialNotFoundError(item.material_id)
                open_lots[item.material_id] = build_lots(snapshot.movements)
                versions[item.material_id] = snapshot.stock_version

            lots = open_lots[item.material_id]
            allocations = allocate_fifo(lots, item.quantity, item.material_id)
            open_lots[item.material_id] = consume(lots, allocations)
            plans.append(
                ExitPlan(
                    item=item,
                    stock_version=versions[item.material_id],
                    allocations=allocations,
                )
            )

        return plans
