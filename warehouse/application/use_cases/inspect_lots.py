"""Inspect Lots Use Case - open FIFO lots and exit previews."""

from decimal import Decimal

from warehouse.application.dto.responses import (
    FifoPreviewResponse,
    LotAllocationResponse,
    MaterialLotsResponse,
    lot_response,
)
from warehouse.core.entities.movement import Lot, LotAllocation
from warehouse.core.entities.tenancy import Scope
from warehouse.core.services import FifoExitProcessor, LotResolver


class InspectLotsUseCase:
    """Read-only views over a material's lots."""

    def __init__(
        self,
        lot_resolver: LotResolver | None = None,
        processor: FifoExitProcessor | None = None,
    ):
        self._lot_resolver = lot_resolver
        self._processor = processor

    async def _get_lot_resolver(self) -> LotResolver:
        if self._lot_resolver is None:
            from warehouse.application.services import get_lot_resolver

            self._lot_resolver = await get_lot_resolver()
        return self._lot_resolver

    async def _get_processor(self) -> FifoExitProcessor:
        if self._processor is None:
            from warehouse.application.services import get_fifo_exit_processor

            self._processor = await get_fifo_exit_processor()
        return self._processor

    async def resolve_lots(self, scope: Scope, material_id: int) -> list[Lot]:
        resolver = await self._get_lot_resolver()
        return await resolver.resolve_lots(material_id, scope)

    async def preview_exit(
        self, scope: Scope, material_id: int, quantity: int
    ) -> list[LotAllocation]:
        """Allocation an exit of ``quantity`` would get; nothing is written."""
        processor = await self._get_processor()
        return await processor.preview_exit(material_id, quantity, scope)

    @staticmethod
    def to_lots_response(material_id: int, lots: list[Lot]) -> MaterialLotsResponse:
        return MaterialLotsResponse(
            material_id=material_id,
            lots=[lot_response(lot) for lot in lots],
            available_quantity=sum(lot.available_quantity for lot in lots),
            available_value=sum((lot.available_value for lot in lots), Decimal("0")),
        )

    @staticmethod
    def to_preview_response(
        material_id: int, quantity: int, allocations: list[LotAllocation]
    ) -> FifoPreviewResponse:
        return FifoPreviewResponse(
            material_id=material_id,
            quantity=quantity,
            allocations=[
                LotAllocationResponse(
                    unit_price=a.unit_price,
                    quantity=a.quantity,
                    entry_date=a.entry_date,
                    total_value=a.total_value,
                )
                for a in allocations
            ],
            total_value=sum((a.total_value for a in allocations), Decimal("0")),
        )
