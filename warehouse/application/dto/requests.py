"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
Business rules (origin/destination shape, positive quantities) are checked by
the use cases so they surface as domain validation errors.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field

from warehouse.core.entities.movement import DestinationType, OriginType

# --- Movements ---


class EntryItemRequest(BaseModel):
    """One material received by an entry."""

    material_id: int = Field(..., description="Material ID")
    quantity: int = Field(..., description="Units received, must be positive")
    unit_price: Decimal | None = Field(
        default=None,
        description="Unit price; defaults to the material's last price",
    )


class CreateEntryRequest(BaseModel):
    """Request to record stock coming in from a supplier or a return."""

    movement_date: date | None = Field(
        default=None,
        description="Business date (defaults to today)",
    )
    origin_type: OriginType = Field(..., description="supplier, employee_return or third_party_return")
    supplier_id: int | None = Field(default=None, description="Supplier for supplier entries")
    return_employee_id: int | None = Field(default=None, description="Employee giving back")
    return_third_party_id: int | None = Field(default=None, description="Third party giving back")
    cost_center_id: int | None = Field(default=None, description="Cost center credited by a return")
    notes: str | None = Field(default=None, description="Additional notes")
    items: list[EntryItemRequest] = Field(default_factory=list, description="Materials received")


class ExitItemRequest(BaseModel):
    """One material taken out by an exit."""

    material_id: int = Field(..., description="Material ID")
    quantity: int = Field(..., description="Units requested, must be positive")
    purpose: str | None = Field(default=None, description="What the material is for")


class CreateExitRequest(BaseModel):
    """Request to take stock out, costed FIFO."""

    movement_date: date | None = Field(
        default=None,
        description="Business date (defaults to today)",
    )
    destination_type: DestinationType = Field(..., description="employee or third_party")
    destination_employee_id: int | None = Field(default=None, description="Receiving employee")
    destination_third_party_id: int | None = Field(
        default=None, description="Receiving third party"
    )
    cost_center_id: int | None = Field(default=None, description="Cost center charged")
    notes: str | None = Field(default=None, description="Additional notes")
    items: list[ExitItemRequest] = Field(default_factory=list, description="Materials requested")
    all_or_nothing: bool = Field(
        default=False,
        description="Write every item or none; by default items succeed independently",
    )


# --- Materials ---


class CreateMaterialRequest(BaseModel):
    """Request to register a material."""

    name: str = Field(..., min_length=1, max_length=200, description="Material name")
    category_id: int | None = Field(default=None, description="Category ID")
    unit: str = Field(default="un", max_length=20, description="Unit of measure")
    description: str | None = Field(default=None, description="Free text description")
    minimum_stock: int = Field(default=0, ge=0, description="Low-stock threshold")
    unit_price: Decimal | None = Field(default=None, ge=0, description="Reference unit price")


class UpdateMaterialRequest(BaseModel):
    """Partial update of a material's descriptive fields."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    category_id: int | None = None
    unit: str | None = Field(default=None, max_length=20)
    description: str | None = None
    minimum_stock: int | None = Field(default=None, ge=0)


# --- Reference data ---


class CategoryRequest(BaseModel):
    """Category create/update payload."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    is_active: bool = True


class SupplierRequest(BaseModel):
    """Supplier create/update payload."""

    name: str = Field(..., min_length=1, max_length=100)
    cnpj: str | None = Field(default=None, description="Company tax ID")
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    notes: str | None = None
    is_active: bool = True


class EmployeeRequest(BaseModel):
    """Employee create/update payload."""

    name: str = Field(..., min_length=1, max_length=100)
    department: str | None = None
    email: str | None = None
    phone: str | None = None
    is_active: bool = True


class ThirdPartyRequest(BaseModel):
    """Third party create/update payload."""

    name: str = Field(..., min_length=1, max_length=100)
    document: str | None = None
    document_type: str | None = Field(default=None, examples=["cpf", "cnpj"])
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    is_active: bool = True


class CostCenterRequest(BaseModel):
    """Cost center create/update payload."""

    code: str = Field(..., min_length=1, max_length=30, description="Unique per tenant")
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None
    department: str = ""
    responsible: str = ""
    monthly_budget: Decimal | None = Field(default=None, ge=0)
    annual_budget: Decimal | None = Field(default=None, ge=0)
    is_active: bool = True
