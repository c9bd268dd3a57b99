"""Manage Materials Use Case - tenant-scoped material CRUD."""

from warehouse.application.dto.requests import CreateMaterialRequest, UpdateMaterialRequest
from warehouse.config import get_logger, get_settings
from warehouse.core.entities.material import Material
from warehouse.core.entities.reference import ReferenceKind
from warehouse.core.entities.tenancy import Scope
from warehouse.core.exceptions import (
    MaterialInUseError,
    MaterialNotFoundError,
    ReferenceNotFoundError,
)
from warehouse.core.interfaces import IMaterialStore, IReferenceStore
from warehouse.core.services import StockReconciler

logger = get_logger(__name__)


class ManageMaterialsUseCase:
    """Create, read, update and delete materials.

    Stock is never written here; it only moves through the ledger.
    """

    def __init__(
        self,
        material_store: IMaterialStore | None = None,
        reference_store: IReferenceStore | None = None,
        reconciler: StockReconciler | None = None,
        reconcile_on_read: bool | None = None,
    ):
        self._material_store = material_store
        self._reference_store = reference_store
        self._reconciler = reconciler
        self._reconcile_on_read = (
            reconcile_on_read
            if reconcile_on_read is not None
            else get_settings().inventory.reconcile_on_read
        )

    async def _get_material_store(self) -> IMaterialStore:
        if self._material_store is None:
            from warehouse.infrastructure.storage.sqlite import get_material_store

            self._material_store = await get_material_store()
        return self._material_store

    async def _get_reference_store(self) -> IReferenceStore:
        if self._reference_store is None:
            from warehouse.infrastructure.storage.sqlite import get_reference_store

            self._reference_store = await get_reference_store()
        return self._reference_store

    async def _get_reconciler(self) -> StockReconciler:
        if self._reconciler is None:
            from warehouse.application.services import get_stock_reconciler

            self._reconciler = await get_stock_reconciler()
        return self._reconciler

    async def create(self, scope: Scope, request: CreateMaterialRequest) -> Material:
        """Register a material owned by the caller's tenant."""
        await self._check_category(scope, request.category_id)
        material = Material(
            name=request.name,
            category_id=request.category_id,
            unit=request.unit,
            description=request.description,
            minimum_stock=request.minimum_stock,
            unit_price=request.unit_price,
            owner_id=scope.write_owner(),
        )
        mat_store = await self._get_material_store()
        return await mat_store.create_material(material)

    async def get(self, scope: Scope, material_id: int) -> Material:
        mat_store = await self._get_material_store()
        material = await mat_store.get_material(material_id, scope)
        if material is None:
            raise MaterialNotFoundError(material_id)
        return material

    async def list(
        self,
        scope: Scope,
        category_id: int | None = None,
        search: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Material]:
        """List materials; reconciles them first when configured to."""
        mat_store = await self._get_material_store()
        materials = await mat_store.list_materials(
            scope, category_id=category_id, search=search, limit=limit, offset=offset
        )
        if not self._reconcile_on_read:
            return materials

        reconciler = await self._get_reconciler()
        refreshed: list[Material] = []
        for material in materials:
            stock = await reconciler.recalculate(material.id, scope)  # type: ignore[arg-type]
            refreshed.append(material.model_copy(update={"current_stock": stock}))
        return refreshed

    async def update(
        self, scope: Scope, material_id: int, request: UpdateMaterialRequest
    ) -> Material:
        """Apply a partial update of descriptive fields."""
        material = await self.get(scope, material_id)
        changes = request.model_dump(exclude_unset=True)
        if "category_id" in changes:
            await self._check_category(scope, changes["category_id"])

        mat_store = await self._get_material_store()
        updated = await mat_store.update_material(material.model_copy(update=changes))
        logger.info("material_update_complete", material_id=material_id, fields=list(changes))
        return updated

    async def delete(self, scope: Scope, material_id: int) -> None:
        """
        Delete a material with no ledger rows.

        Raises:
            MaterialNotFoundError: If absent or out of scope
            MaterialInUseError: If any movement references it
        """
        await self.get(scope, material_id)
        mat_store = await self._get_material_store()

        movements = await mat_store.count_movements(material_id)
        if movements:
            raise MaterialInUseError(material_id, movements)

        await mat_store.delete_material(material_id)

    async def _check_category(self, scope: Scope, category_id: int | None) -> None:
        if category_id is None:
            return
        ref_store = await self._get_reference_store()
        if await ref_store.get(ReferenceKind.CATEGORY, category_id, scope) is None:
            raise ReferenceNotFoundError(ReferenceKind.CATEGORY.label, category_id)
