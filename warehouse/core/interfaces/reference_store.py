"""Abstract interface for reference data storage."""

from abc import ABC, abstractmethod

from warehouse.core.entities.reference import ReferenceEntity, ReferenceKind
from warehouse.core.entities.tenancy import Scope


class IReferenceStore(ABC):
    """CRUD over categories, suppliers, employees, third parties and cost centers."""

    @abstractmethod
    async def create(self, kind: ReferenceKind, entity: ReferenceEntity) -> ReferenceEntity:
        """Insert a reference row."""
        pass

    @abstractmethod
    async def get(
        self, kind: ReferenceKind, entity_id: int, scope: Scope
    ) -> ReferenceEntity | None:
        """Get one row inside the scope."""
        pass

    @abstractmethod
    async def list(
        self,
        kind: ReferenceKind,
        scope: Scope,
        active_only: bool = False,
        search: str | None = None,
    ) -> list[ReferenceEntity]:
        """List rows ordered by name."""
        pass

    @abstractmethod
    async def update(self, kind: ReferenceKind, entity: ReferenceEntity) -> ReferenceEntity:
        """Update a row."""
        pass

    @abstractmethod
    async def delete(self, kind: ReferenceKind, entity_id: int) -> bool:
        """Delete a row, returns True if removed."""
        pass

    @abstractmethod
    async def find_cost_center_by_code(self, code: str, owner_id: int) -> ReferenceEntity | None:
        """Cost center with the given code inside one tenant."""
        pass
