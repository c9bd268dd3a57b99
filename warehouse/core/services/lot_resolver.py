"""
Lot resolver.

Derives the ordered open FIFO lots of a material from its ledger rows. Lots are
never stored; they are recomputed on every read so deletions and late-dated
rows are always reflected.
"""

from collections.abc import Iterable
from decimal import Decimal

from warehouse.config import get_logger
from warehouse.core.entities.movement import Lot, Movement
from warehouse.core.entities.tenancy import Scope
from warehouse.core.exceptions import MaterialNotFoundError
from warehouse.core.interfaces.ledger_store import ILedgerStore

logger = get_logger(__name__)


def fifo_key(movement: Movement) -> tuple:
    """Sort key giving the ledger's consumption order."""
    return (movement.date, movement.created_at, movement.id or 0)


def build_lots(movements: Iterable[Movement]) -> list[Lot]:
    """
    Build open lots from a material's ledger rows.

    Rows that add stock (supplier entries, returns, legacy return exits) are
    grouped by unit price into lots; each lot keeps the date and supplier of
    its first row. Plain exits are summed and subtracted from the lots oldest
    first. Availability floors at zero.

    Args:
        movements: All ledger rows of one material, in any order

    Returns:
        Lots with available quantity, oldest first
    """
    lots: dict[Decimal, Lot] = {}
    consumed = 0

    for movement in sorted(movements, key=fifo_key):
        if movement.kind.stock_effect < 0:
            consumed += movement.quantity
            continue

        lot = lots.get(movement.unit_price)
        if lot is None:
            lots[movement.unit_price] = Lot(
                unit_price=movement.unit_price,
                total_entries=movement.quantity,
                available_quantity=movement.quantity,
                entry_date=movement.date,
                supplier_id=movement.supplier_id,
            )
        else:
            lot.total_entries += movement.quantity

    # Insertion order already follows the earliest row of each price
    remaining = consumed
    for lot in lots.values():
        taken = min(remaining, lot.total_entries)
        lot.available_quantity = lot.total_entries - taken
        remaining -= taken

    return [lot for lot in lots.values() if lot.available_quantity > 0]


class LotResolver:
    """Resolves lots for a material through the ledger store."""

    def __init__(self, ledger_store: ILedgerStore):
        self._ledger = ledger_store

    async def resolve_lots(self, material_id: int, scope: Scope) -> list[Lot]:
        """
        Get the open lots of a material.

        Raises:
            MaterialNotFoundError: If the material is absent or out of scope
        """
        snapshot = await self._ledger.get_snapshot(material_id, scope)
        if snapshot is None:
            raise MaterialNotFoundError(material_id)

        lots = build_lots(snapshot.movements)
        logger.debug(
            "lots_resolved",
            material_id=material_id,
            lots=len(lots),
            available=sum(lot.available_quantity for lot in lots),
        )
        return lots
