"""Create Exit Use Case - FIFO-costed stock issue to employees or third parties."""

from dataclasses import dataclass, field
from datetime import date

from warehouse.application.dto.requests import CreateExitRequest
from warehouse.application.dto.responses import (
    CreateExitResponse,
    ExitFailureResponse,
    exit_transaction_response,
)
from warehouse.config import get_logger
from warehouse.core.entities.movement import DestinationType, ExitTransaction
from warehouse.core.entities.reference import ReferenceKind
from warehouse.core.entities.tenancy import Scope
from warehouse.core.exceptions import (
    InsufficientStockError,
    MaterialNotFoundError,
    ReferenceNotFoundError,
    StockConflictError,
    ValidationError,
)
from warehouse.core.interfaces import ILedgerStore, IMaterialStore, IReferenceStore
from warehouse.core.services import ExitItem, FifoExitProcessor

logger = get_logger(__name__)

_DESTINATION_FIELDS: dict[DestinationType, tuple[str, ReferenceKind]] = {
    DestinationType.EMPLOYEE: ("destination_employee_id", ReferenceKind.EMPLOYEE),
    DestinationType.THIRD_PARTY: ("destination_third_party_id", ReferenceKind.THIRD_PARTY),
}


@dataclass
class ExitFailure:
    """An item rejected for lack of stock or lost to concurrent writers."""

    material_id: int
    requested: int
    available: int | None
    message: str
    code: str = "INSUFFICIENT_STOCK"


@dataclass
class CreateExitResult:
    """Written transaction (None when nothing was written) and rejected items."""

    transaction: ExitTransaction | None
    failures: list[ExitFailure] = field(default_factory=list)


class CreateExitUseCase:
    """
    Issue stock through the FIFO exit processor.

    Items succeed or fail independently unless the request asks for
    all-or-nothing, in which case every line is written in one transaction.
    """

    def __init__(
        self,
        material_store: IMaterialStore | None = None,
        ledger_store: ILedgerStore | None = None,
        reference_store: IReferenceStore | None = None,
        processor: FifoExitProcessor | None = None,
    ):
        self._material_store = material_store
        self._ledger_store = ledger_store
        self._reference_store = reference_store
        self._processor = processor

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

    async def _get_processor(self) -> FifoExitProcessor:
        if self._processor is None:
            from warehouse.application.services import get_fifo_exit_processor

            self._processor = await get_fifo_exit_processor()
        return self._processor

    async def execute(self, scope: Scope, request: CreateExitRequest) -> CreateExitResult:
        """
        Execute create exit use case.

        Raises:
            ValidationError: Malformed destination or items
            NotFoundError: Unknown material, party or cost center
            InsufficientStockError: Every item lacked stock, or any item in all-or-nothing mode
            StockConflictError: Every item lost to concurrent writers, or any item
                in all-or-nothing mode
        """
        self._validate(request)
        logger.info(
            "create_exit_started",
            destination_type=request.destination_type.value,
            items=len(request.items),
            all_or_nothing=request.all_or_nothing,
            owner_id=scope.owner_id,
        )

        owner_id = await self._check_materials(scope, request)
        await self._check_references(scope, request)

        header = ExitTransaction(
            date=request.movement_date or date.today(),
            destination_type=request.destination_type,
            destination_employee_id=request.destination_employee_id,
            destination_third_party_id=request.destination_third_party_id,
            cost_center_id=request.cost_center_id,
            owner_id=owner_id,
            user_id=scope.user_id,
            notes=request.notes,
        )
        items = [
            ExitItem(material_id=i.material_id, quantity=i.quantity, purpose=i.purpose)
            for i in request.items
        ]
        processor = await self._get_processor()

        if request.all_or_nothing:
            transaction = await processor.process_items(items, header, scope)
            return CreateExitResult(transaction=transaction)

        failures: list[ExitFailure] = []
        first_error: InsufficientStockError | StockConflictError | None = None
        for item in items:
            try:
                written = await processor.process_exit(
                    item.material_id, item.quantity, header, scope, purpose=item.purpose
                )
            except InsufficientStockError as e:
                first_error = first_error or e
                failures.append(
                    ExitFailure(
                        material_id=e.material_id,
                        requested=e.requested,
                        available=e.available,
                        message=e.message,
                        code=e.code,
                    )
                )
                logger.warning(
                    "exit_item_rejected",
                    material_id=e.material_id,
                    requested=e.requested,
                    available=e.available,
                )
                continue
            except StockConflictError as e:
                # Earlier items are already committed under header.id
                first_error = first_error or e
                failures.append(
                    ExitFailure(
                        material_id=e.material_id,
                        requested=item.quantity,
                        available=None,
                        message=e.message,
                        code=e.code,
                    )
                )
                logger.warning(
                    "exit_item_conflicted",
                    material_id=e.material_id,
                    requested=item.quantity,
                    exit_transaction_id=header.id,
                )
                continue
            header = header.model_copy(update={"id": written.id})

        if header.id is None:
            # Every item was rejected, nothing was written
            raise first_error  # type: ignore[misc]

        ledger = await self._get_ledger_store()
        transaction = await ledger.get_exit_transaction(header.id, scope)

        logger.info(
            "create_exit_complete",
            exit_transaction_id=header.id,
            failures=len(failures),
        )
        return CreateExitResult(transaction=transaction, failures=failures)

    @staticmethod
    def _validate(request: CreateExitRequest) -> None:
        if not request.items:
            raise ValidationError("items", "at least one item is required")

        expected, _ = _DESTINATION_FIELDS[request.destination_type]
        for field_name, _kind in _DESTINATION_FIELDS.values():
            value = getattr(request, field_name)
            if field_name == expected and value is None:
                raise ValidationError(
                    field_name, f"required for destination '{request.destination_type.value}'"
                )
            if field_name != expected and value is not None:
                raise ValidationError(
                    field_name,
                    f"not allowed for destination '{request.destination_type.value}'",
                    value,
                )

        for index, item in enumerate(request.items):
            if item.quantity <= 0:
                raise ValidationError(
                    f"items[{index}].quantity", "must be greater than zero", item.quantity
                )

    async def _check_materials(self, scope: Scope, request: CreateExitRequest) -> int:
        """Every material must exist in scope and share one tenant; returns it."""
        mat_store = await self._get_material_store()
        owners: set[int] = set()
        for item in request.items:
            material = await mat_store.get_material(item.material_id, scope)
            if material is None:
                raise MaterialNotFoundError(item.material_id)
            owners.add(material.owner_id)

        if len(owners) > 1:
            raise ValidationError("items", "materials belong to different tenants")
        return owners.pop()

    async def _check_references(self, scope: Scope, request: CreateExitRequest) -> None:
        ref_store = await self._get_reference_store()

        field_name, kind = _DESTINATION_FIELDS[request.destination_type]
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

    def to_response(self, result: CreateExitResult) -> CreateExitResponse:
        """Convert result to API response."""
        return CreateExitResponse(
            transaction=(
                exit_transaction_response(result.transaction) if result.transaction else None
            ),
            failures=[
                ExitFailureResponse(
                    material_id=f.material_id,
                    requested=f.requested,
                    available=f.available,
                    message=f.message,
                    code=f.code,
                )
                for f in result.failures
            ],
        )
