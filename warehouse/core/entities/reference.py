"""Tenant-scoped reference entities (categories, parties, cost centers)."""

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


class ReferenceKind(str, Enum):
    """Reference entity families, named after their tables."""

    CATEGORY = "categories"
    SUPPLIER = "suppliers"
    EMPLOYEE = "employees"
    THIRD_PARTY = "third_parties"
    COST_CENTER = "cost_centers"

    @property
    def label(self) -> str:
        return {
            ReferenceKind.CATEGORY: "category",
            ReferenceKind.SUPPLIER: "supplier",
            ReferenceKind.EMPLOYEE: "employee",
            ReferenceKind.THIRD_PARTY: "third_party",
            ReferenceKind.COST_CENTER: "cost_center",
        }[self]


class ReferenceEntity(BaseModel):
    """Common fields of every reference row."""

    id: int | None = None
    name: str = Field(..., min_length=1, max_length=100)
    is_active: bool = True
    owner_id: int = 1
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class Category(ReferenceEntity):
    description: str | None = None


class Supplier(ReferenceEntity):
    cnpj: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    notes: str | None = None


class Employee(ReferenceEntity):
    department: str | None = None
    email: str | None = None
    phone: str | None = None


class ThirdParty(ReferenceEntity):
    document: str | None = None
    document_type: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None


class CostCenter(ReferenceEntity):
    """Accounting bucket for exits and returns; never for purchases."""

    code: str = Field(..., min_length=1, max_length=30)
    description: str | None = None
    department: str = ""
    responsible: str = ""
    monthly_budget: Decimal | None = None
    annual_budget: Decimal | None = None


REFERENCE_MODELS: dict[ReferenceKind, type[ReferenceEntity]] = {
    ReferenceKind.CATEGORY: Category,
    ReferenceKind.SUPPLIER: Supplier,
    ReferenceKind.EMPLOYEE: Employee,
    ReferenceKind.THIRD_PARTY: ThirdParty,
    ReferenceKind.COST_CENTER: CostCenter,
}
