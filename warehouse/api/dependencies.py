"""
Dependency injection container for FastAPI.

Provides use cases, services and the caller's tenant scope to route handlers.
"""

from functools import lru_cache

from fastapi import Depends, Header

from warehouse.application.services import get_reporting_service
from warehouse.application.use_cases import (
    CreateEntryUseCase,
    CreateExitUseCase,
    DeleteMovementUseCase,
    InspectLotsUseCase,
    ManageMaterialsUseCase,
    ManageReferencesUseCase,
    RecalculateStockUseCase,
)
from warehouse.config import Settings, get_settings
from warehouse.core.entities.tenancy import Role, Scope, User
from warehouse.core.services import ReportingService
from warehouse.infrastructure.storage.sqlite import SQLiteLedgerStore, get_ledger_store


@lru_cache
def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


# Tenant scope
def get_current_user(
    x_user_id: int = Header(default=1, description="Authenticated user ID"),
    x_user_role: Role = Header(default=Role.USER, description="Authenticated user role"),
    x_owner_id: int | None = Header(default=None, description="Tenant the user belongs to"),
) -> User:
    """
    Build the calling user from identity headers.

    Authentication happens upstream; these headers are trusted as set by
    the gateway.
    """
    return User(
        id=x_user_id,
        username=f"user-{x_user_id}",
        role=x_user_role,
        owner_id=x_owner_id,
    )


def get_scope(user: User = Depends(get_current_user)) -> Scope:
    """Tenant scope of the calling user."""
    return Scope.for_user(user)


# Service dependencies
async def get_reporting() -> ReportingService:
    """Get reporting service."""
    return await get_reporting_service()


# Store dependencies
async def get_ledger() -> SQLiteLedgerStore:
    """Get ledger store."""
    return await get_ledger_store()


# Use case dependencies
def get_create_entry_use_case() -> CreateEntryUseCase:
    """Get create entry use case."""
    return CreateEntryUseCase()


def get_create_exit_use_case() -> CreateExitUseCase:
    """Get create exit use case."""
    return CreateExitUseCase()


def get_delete_movement_use_case() -> DeleteMovementUseCase:
    """Get delete movement use case."""
    return DeleteMovementUseCase()


def get_recalculate_stock_use_case() -> RecalculateStockUseCase:
    """Get recalculate stock use case."""
    return RecalculateStockUseCase()


def get_inspect_lots_use_case() -> InspectLotsUseCase:
    """Get inspect lots use case."""
    return InspectLotsUseCase()


def get_manage_materials_use_case() -> ManageMaterialsUseCase:
    """Get manage materials use case."""
    return ManageMaterialsUseCase()


def get_manage_references_use_case() -> ManageReferencesUseCase:
    """Get manage references use case."""
    return ManageReferencesUseCase()
