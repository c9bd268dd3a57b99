"""Application use cases."""

from warehouse.application.use_cases.create_entry import CreateEntryResult, CreateEntryUseCase
from warehouse.application.use_cases.create_exit import (
    CreateExitResult,
    CreateExitUseCase,
    ExitFailure,
)
from warehouse.application.use_cases.delete_movement import (
    DeleteExitTransactionResult,
    DeleteMovementResult,
    DeleteMovementUseCase,
)
from warehouse.application.use_cases.inspect_lots import InspectLotsUseCase
from warehouse.application.use_cases.manage_materials import ManageMaterialsUseCase
from warehouse.application.use_cases.manage_references import ManageReferencesUseCase
from warehouse.application.use_cases.recalculate_stock import RecalculateStockUseCase

__all__ = [
    "CreateEntryUseCase",
    "CreateEntryResult",
    "CreateExitUseCase",
    "CreateExitResult",
    "ExitFailure",
    "DeleteMovementUseCase",
    "DeleteMovementResult",
    "DeleteExitTransactionResult",
    "RecalculateStockUseCase",
    "InspectLotsUseCase",
    "ManageMaterialsUseCase",
    "ManageReferencesUseCase",
]
