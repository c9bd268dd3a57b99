"""
Application layer - Use cases, DTOs, and service factories.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Implementing use cases that coordinate core services
3. Providing factory functions for dependency injection

Use cases are the only entry point for API handlers.
"""

from warehouse.application.dto.requests import (
    CreateEntryRequest,
    CreateExitRequest,
    CreateMaterialRequest,
    UpdateMaterialRequest,
)
from warehouse.application.dto.responses import (
    CreateEntryResponse,
    CreateExitResponse,
    ErrorResponse,
    HealthResponse,
    MaterialResponse,
    MovementResponse,
    PaginatedResponse,
)
from warehouse.application.services import (
    get_fifo_exit_processor,
    get_lot_resolver,
    get_reporting_service,
    get_stock_reconciler,
    reset_services,
)
from warehouse.application.use_cases import (
    CreateEntryUseCase,
    CreateExitUseCase,
    DeleteMovementUseCase,
    InspectLotsUseCase,
    ManageMaterialsUseCase,
    ManageReferencesUseCase,
    RecalculateStockUseCase,
)

__all__ = [
    # Request DTOs
    "CreateEntryRequest",
    "CreateExitRequest",
    "CreateMaterialRequest",
    "UpdateMaterialRequest",
    # Response DTOs
    "CreateEntryResponse",
    "CreateExitResponse",
    "MovementResponse",
    "MaterialResponse",
    "HealthResponse",
    "ErrorResponse",
    "PaginatedResponse",
    # Use Cases
    "CreateEntryUseCase",
    "CreateExitUseCase",
    "DeleteMovementUseCase",
    "RecalculateStockUseCase",
    "InspectLotsUseCase",
    "ManageMaterialsUseCase",
    "ManageReferencesUseCase",
    # Service factories
    "get_stock_reconciler",
    "get_lot_resolver",
    "get_fifo_exit_processor",
    "get_reporting_service",
    "reset_services",
]
