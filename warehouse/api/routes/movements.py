"""Ledger endpoints: entries, exits and their deletion."""

from datetime import date

from fastapi import APIRouter, Depends, Query, status

from warehouse.api.dependencies import (
    get_create_entry_use_case,
    get_create_exit_use_case,
    get_delete_movement_use_case,
    get_ledger,
    get_scope,
)
from warehouse.application.dto.requests import CreateEntryRequest, CreateExitRequest
from warehouse.application.dto.responses import (
    CreateEntryResponse,
    CreateExitResponse,
    DeleteExitTransactionResponse,
    DeleteMovementResponse,
    ErrorResponse,
    ExitTransactionResponse,
    MovementListResponse,
    MovementResponse,
    exit_transaction_response,
    movement_response,
)
from warehouse.application.use_cases import (
    CreateEntryUseCase,
    CreateExitUseCase,
    DeleteMovementUseCase,
)
from warehouse.core.entities.movement import MovementType
from warehouse.core.entities.tenancy import Scope
from warehouse.core.exceptions import ExitTransactionNotFoundError, MovementNotFoundError
from warehouse.infrastructure.storage.sqlite import SQLiteLedgerStore

router = APIRouter(prefix="/api/movements", tags=["movements"])


@router.post(
    "/entries",
    response_model=CreateEntryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_entry(
    request: CreateEntryRequest,
    scope: Scope = Depends(get_scope),
    use_case: CreateEntryUseCase = Depends(get_create_entry_use_case),
) -> CreateEntryResponse:
    """Register a supplier purchase or a return; one row per item."""
    result = await use_case.execute(scope, request)
    return use_case.to_response(result)


@router.post(
    "/exits",
    response_model=CreateExitResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def create_exit(
    request: CreateExitRequest,
    scope: Scope = Depends(get_scope),
    use_case: CreateExitUseCase = Depends(get_create_exit_use_case),
) -> CreateExitResponse:
    """
    Issue materials, splitting each item across FIFO lots.

    Items without enough stock are reported under ``failures`` unless
    ``all_or_nothing`` is set, in which case the whole exit is rejected.
    """
    result = await use_case.execute(scope, request)
    return use_case.to_response(result)


@router.get("", response_model=MovementListResponse)
async def list_movements(
    type: MovementType | None = None,
    material_id: int | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    scope: Scope = Depends(get_scope),
    store: SQLiteLedgerStore = Depends(get_ledger),
) -> MovementListResponse:
    """List ledger rows, newest first."""
    movements = await store.list_movements(
        scope,
        movement_type=type,
        material_id=material_id,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset,
    )
    return MovementListResponse(
        items=[movement_response(m) for m in movements],
        total=offset + len(movements),
        limit=limit,
        offset=offset,
        has_more=len(movements) == limit,
    )


@router.get(
    "/exits/{transaction_id}",
    response_model=ExitTransactionResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_exit_transaction(
    transaction_id: int,
    scope: Scope = Depends(get_scope),
    store: SQLiteLedgerStore = Depends(get_ledger),
) -> ExitTransactionResponse:
    """Get an exit with its per-lot lines."""
    transaction = await store.get_exit_transaction(transaction_id, scope)
    if transaction is None:
        raise ExitTransactionNotFoundError(transaction_id)
    return exit_transaction_response(transaction)


@router.delete(
    "/exits/{transaction_id}",
    response_model=DeleteExitTransactionResponse,
    responses={404: {"model": ErrorResponse}},
)
async def delete_exit_transaction(
    transaction_id: int,
    scope: Scope = Depends(get_scope),
    use_case: DeleteMovementUseCase = Depends(get_delete_movement_use_case),
) -> DeleteExitTransactionResponse:
    """Undo a whole exit and restore the stock it consumed."""
    result = await use_case.delete_exit_transaction(scope, transaction_id)
    return use_case.to_transaction_response(result)


@router.get(
    "/{movement_id}",
    response_model=MovementResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_movement(
    movement_id: int,
    scope: Scope = Depends(get_scope),
    store: SQLiteLedgerStore = Depends(get_ledger),
) -> MovementResponse:
    """Get a ledger row by ID."""
    movement = await store.get_movement(movement_id, scope)
    if movement is None:
        raise MovementNotFoundError(movement_id)
    return movement_response(movement)


@router.delete(
    "/{movement_id}",
    response_model=DeleteMovementResponse,
    responses={404: {"model": ErrorResponse}},
)
async def delete_movement(
    movement_id: int,
    scope: Scope = Depends(get_scope),
    use_case: DeleteMovementUseCase = Depends(get_delete_movement_use_case),
) -> DeleteMovementResponse:
    """Delete one ledger row; the material's stock is recomputed."""
    result = await use_case.execute(scope, movement_id)
    return use_case.to_response(result)
