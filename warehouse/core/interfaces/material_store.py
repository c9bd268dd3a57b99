"""
Abstract interface for material storage.

Defines the contract for material CRUD and the cached stock counter.
"""

from abc import ABC, abstractmethod

from warehouse.core.entities.material import Material
from warehouse.core.entities.tenancy import Scope


class IMaterialStore(ABC):
    """
    Abstract interface for material storage.

    ``current_stock`` is only written through ``set_current_stock`` and the
    ledger store; ``update_material`` never overwrites it.
    """

    @abstractmethod
    async def create_material(self, material: Material) -> Material:
        """Create a new material record."""

    @abstractmethod
    async def get_material(self, material_id: int, scope: Scope) -> Material | None:
        """Get material by ID inside the scope."""

    @abstractmethod
    async def list_materials(
        self,
        scope: Scope,
        category_id: int | None = None,
        search: str | None = None,
        limit: int = 500,
        offset: int = 0,
    ) -> list[Material]:
        """List materials ordered by name."""

    @abstractmethod
    async def list_low_stock(self, scope: Scope) -> list[Material]:
        """Materials whose stock is at or below their minimum."""

    @abstractmethod
    async def update_material(self, material: Material) -> Material:
        """Update descriptive fields of a material."""

    @abstractmethod
    async def delete_material(self, material_id: int) -> bool:
        """Delete a material, returns True if a row was removed."""

    @abstractmethod
    async def set_current_stock(
        self, material_id: int, stock: int, expected_version: int | None = None
    ) -> bool:
        """
        Overwrite the cached stock counter.

        With ``expected_version`` the write only lands while the material's
        ``stock_version`` still equals it. Returns True if a row was updated.
        """

    @abstractmethod
    async def count_movements(self, material_id: int) -> int:
        """Number of ledger rows referencing the material."""
