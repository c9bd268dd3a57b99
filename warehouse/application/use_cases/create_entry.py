"""Create Entry Use Case - stock coming in from suppliers or returns."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from warehouse.application.dto.requests import CreateEntryRequest
from warehouse.application.dto.responses import CreateEntryResponse, movement_response
from warehouse.config import get_logger
from warehouse.core.entities.movement import Movement, MovementType, OriginType
from warehouse.core.entities.reference import ReferenceKind
from warehouse.core.entities.tenancy import Scope
from warehouse.core.exceptions import (
    MaterialNotFoundError,
    ReferenceNotFoundError,
    ValidationError,
)
from warehouse.core.interfaces import ILedgerStore, IMaterialStore, IReferenceStore

logger = get_logger(__name__)

# Identifier each origin requires
_ORIGIN_FIELDS: dict[OriginType, tuple[str, ReferenceKind]] = {
    OriginType.SUPPLIER: ("supplier_id", ReferenceKind.SUPPLIER),
    OriginType.EMPLOYEE_RETURN: ("return_employee_id", ReferenceKind.EMPLOYEE),
    OriginType.THIRD_PARTY_RETURN: ("return_third_party_id", ReferenceKind.THIRD_PARTY),
}


@dataclass
class CreateEntryResult:
    """Rows written by an entry."""

    movements: list[Movement]


class CreateEntryUseCase:
    """Record an entry: one ledger row per item, written atomically."""

    def __init__(
        self,
        material_store: IMaterialStore | None = None,
        ledger_store: ILedgerStore | None = None,
        reference_store: IReferenceStore | None = None,
    ):
        self._material_store = material_store
        self._ledger_store = ledger_store
        self._reference_store = reference_store

    async def _get_material_store(self) -> IMaterialStore:
        if self._material_store is None:
            from warehouse.infrastructure.storage.sqlite import get_material_store

            self._material_store = await get_material_store()
        return self._material_store

    async def _get_ledger_store(self) -> ILedgerStore:
        if self._ledger_store is None:
            from warehouse.infrastructure.storage.sqlite import get_ledger_store

            self._ledger_store = await get_ledger_store()
        return self._ledger_store

    async def _get_reference_store(self) -> IReferenceStore:
        if self._reference_store is None:
            from warehouse.infrastructure.storage.sqlite import get_reference_store

            self._reference_store = await get_reference_store()
        return self._reference_store

    async def execute(self, scope: Scope, request: CreateEntryRequest) -> CreateEntryResult:
        """Execute create entry use case."""
        self._validate(request)
        logger.info(
            "create_entry_started",
            origin_type=request.origin_type.value,
            items=len(request.items),
            owner_id=scope.owner_id,
        )

        await self._check_references(scope, request)

        mat_store = await self._get_material_store()
        movement_date = request.movement_date or date.today()
        origin_field, _ = _ORIGIN_FIELDS[request.origin_type]

        movements: list[Movement] = []
        for item in request.items:
            material = await mat_store.get_material(item.material_id, scope)
            if material is None:
                raise MaterialNotFoundError(item.material_id)

            unit_price = item.unit_price
            if unit_price is None:
                unit_price = material.unit_price or Decimal("0")

            movements.append(
                Movement(
                    type=MovementType.ENTRY,
                    date=movement_date,
                    material_id=material.id,
                    quantity=item.quantity,
                    unit_price=unit_price,
                    owner_id=material.owner_id,
                    user_id=scope.user_id,
                    notes=request.notes,
                    cost_center_id=request.cost_center_id,
                    origin_type=request.origin_type,
                    **{origin_field: getattr(request, origin_field)},
                )
            )

        ledger = await self._get_ledger_store()
        saved = await ledger.record_entries(movements)

        logger.info(
            "create_entry_complete",
            movements=len(saved),
            quantity=sum(m.quantity for m in saved),
        )
        return CreateEntryResult(movements=saved)

    @staticmethod
    def _validate(request: CreateEntryRequest) -> None:
        """Exactly one origin identifier, matching the origin type; sane items."""
        if not request.items:
            raise ValidationError("items", "at least one item is required")

        expected, _ = _ORIGIN_FIELDS[request.origin_type]
        for field_name, _kind in _ORIGIN_FIELDS.values():
            value = getattr(request, field_name)
            if field_name == expected and value is None:
                raise ValidationError(
                    field_name, f"required for origin '{request.origin_type.value}'"
                )
            if field_name != expected and value is not None:
                raise ValidationError(
                    field_name,
                    f"not allowed for origin '{request.origin_type.value}'",
                    value,
                )

        for index, item in enumerate(request.items):
            if item.quantity <= 0:
                raise ValidationError(
                    f"items[{index}].quantity", "must be greater than zero", item.quantity
                )
            if item.unit_price is not None and item.unit_price < 0:
                raise ValidationError(
                    f"items[{index}].unit_price", "must not be negative", item.unit_price
                )

    async def _check_references(self, scope: Scope, request: CreateEntryRequest) -> None:
        ref_store = await self._get_reference_store()

        field_name, kind = _ORIGIN_FIELDS[request.origin_type]
        party_id = getattr(request, field_name)
        if await ref_store.get(kind, party_id, scope) is None:
            raise ReferenceNotFoundError(kind.label, party_id)

        if request.cost_center_id is not None:
            cost_center = await ref_store.get(
                ReferenceKind.COST_CENTER, request.cost_center_id, scope
            )
            if cost_center is None:
                raise ReferenceNotFoundError(
                    ReferenceKind.COST_CENTER.label, request.cost_center_id
                )

    def to_response(self, result: CreateEntryResult) -> CreateEntryResponse:
        """Convert result to API response."""
        return CreateEntryResponse(
            movements=[movement_response(m) for m in result.movements],
            total_quantity=sum(m.quantity for m in result.movements),
            total_value=sum((m.total_value for m in result.movements), Decimal("0")),
        )
