"""Manage References Use Case - categories, parties and cost centers."""

from pydantic import BaseModel

from warehouse.config import get_logger
from warehouse.core.entities.reference import (
    REFERENCE_MODELS,
    ReferenceEntity,
    ReferenceKind,
)
from warehouse.core.entities.tenancy import Scope
from warehouse.core.exceptions import DuplicateCodeError, ReferenceNotFoundError
from warehouse.core.interfaces import IReferenceStore

logger = get_logger(__name__)


class ManageReferencesUseCase:
    """Tenant-scoped CRUD shared by every reference kind."""

    def __init__(self, reference_store: IReferenceStore | None = None):
        self._reference_store = reference_store

    async def _get_reference_store(self) -> IReferenceStore:
        if self._reference_store is None:
            from warehouse.infrastructure.storage.sqlite import get_reference_store

            self._reference_store = await get_reference_store()
        return self._reference_store

    async def create(
        self, scope: Scope, kind: ReferenceKind, payload: BaseModel
    ) -> ReferenceEntity:
        """
        Create a reference row in the caller's tenant.

        Raises:
            DuplicateCodeError: If a cost center code is already used in the tenant
        """
        owner_id = scope.write_owner()
        entity = REFERENCE_MODELS[kind].model_validate(
            {**payload.model_dump(), "owner_id": owner_id}
        )
        store = await self._get_reference_store()

        if kind == ReferenceKind.COST_CENTER:
            code = entity.code  # type: ignore[attr-defined]
            if await store.find_cost_center_by_code(code, owner_id) is not None:
                raise DuplicateCodeError(kind.label, code)

        return await store.create(kind, entity)

    async def get(self, scope: Scope, kind: ReferenceKind, entity_id: int) -> ReferenceEntity:
        store = await self._get_reference_store()
        entity = await store.get(kind, entity_id, scope)
        if entity is None:
            raise ReferenceNotFoundError(kind.label, entity_id)
        return entity

    async def list(
        self,
        scope: Scope,
        kind: ReferenceKind,
        active_only: bool = False,
        search: str | None = None,
    ) -> list[ReferenceEntity]:
        store = await self._get_reference_store()
        return await store.list(kind, scope, active_only=active_only, search=search)

    async def update(
        self, scope: Scope, kind: ReferenceKind, entity_id: int, payload: BaseModel
    ) -> ReferenceEntity:
        """Replace the editable fields of a row."""
        current = await self.get(scope, kind, entity_id)
        store = await self._get_reference_store()

        updated = REFERENCE_MODELS[kind].model_validate(
            {
                **payload.model_dump(),
                "id": current.id,
                "owner_id": current.owner_id,
                "created_at": current.created_at,
            }
        )

        if kind == ReferenceKind.COST_CENTER:
            code = updated.code  # type: ignore[attr-defined]
            existing = await store.find_cost_center_by_code(code, current.owner_id)
            if existing is not None and existing.id != entity_id:
                raise DuplicateCodeError(kind.label, code)

        return await store.update(kind, updated)

    async def delete(self, scope: Scope, kind: ReferenceKind, entity_id: int) -> None:
        await self.get(scope, kind, entity_id)
        store = await self._get_reference_store()
        await store.delete(kind, entity_id)
        logger.info("reference_delete_complete", kind=kind.label, entity_id=entity_id)
