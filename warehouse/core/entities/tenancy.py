"""Tenant and role entities.

Every core call receives an explicit Scope instead of reading ambient
user state, so ledger logic can run in isolation.
"""

from enum import Enum

from pydantic import BaseModel


class Role(str, Enum):
    """User roles."""

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    USER = "user"


class User(BaseModel):
    """An authenticated operator of the warehouse."""

    id: int
    username: str
    role: Role = Role.USER
    owner_id: int | None = None


class Scope(BaseModel):
    """Tenant filter threaded through every store and service call.

    ``owner_id`` of None means every tenant is visible; only super admins
    obtain such a scope.
    """

    owner_id: int | None = None
    user_id: int | None = None

    @classmethod
    def for_user(cls, user: User) -> "Scope":
        """Build the scope a user is allowed to see."""
        if user.role == Role.SUPER_ADMIN:
            return cls(owner_id=None, user_id=user.id)
        # Admins and users without an explicit tenant own their own data
        return cls(owner_id=user.owner_id or user.id, user_id=user.id)

    @property
    def is_global(self) -> bool:
        return self.owner_id is None

    def allows(self, owner_id: int) -> bool:
        """True when a row owned by owner_id is visible in this scope."""
        return self.owner_id is None or self.owner_id == owner_id

    def write_owner(self) -> int:
        """Owner id stamped on rows created in this scope."""
        if self.owner_id is not None:
            return self.owner_id
        if self.user_id is not None:
            return self.user_id
        return 1
