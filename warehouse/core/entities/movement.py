"""Stock ledger entities."""

from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


class MovementType(str, Enum):
    """Raw ledger row types."""

    ENTRY = "entry"
    EXIT = "exit"


class OriginType(str, Enum):
    """Where an entry came from."""

    SUPPLIER = "supplier"
    EMPLOYEE_RETURN = "employee_return"
    THIRD_PARTY_RETURN = "third_party_return"


class DestinationType(str, Enum):
    """Who received an exit."""

    EMPLOYEE = "employee"
    THIRD_PARTY = "third_party"


class MovementKind(str, Enum):
    """Semantic variant of a ledger row; the stock sign derives from it."""

    SUPPLIER_ENTRY = "supplier_entry"
    EMPLOYEE_RETURN = "employee_return"
    THIRD_PARTY_RETURN = "third_party_return"
    EXIT = "exit"

    @property
    def stock_effect(self) -> int:
        return -1 if self is MovementKind.EXIT else 1

    @property
    def is_return(self) -> bool:
        return self in (MovementKind.EMPLOYEE_RETURN, MovementKind.THIRD_PARTY_RETURN)


class Movement(BaseModel):
    """
    One ledger row.

    Entries carry an origin, exits a destination. Rows are read permissively
    so legacy data never breaks a read; commands validate shape on write.
    """

    id: int | None = None
    type: MovementType
    date: date
    material_id: int
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Decimal("0")
    owner_id: int = 1
    user_id: int | None = None
    notes: str | None = None
    cost_center_id: int | None = None

    # Entry-only
    origin_type: OriginType | None = None
    supplier_id: int | None = None
    return_employee_id: int | None = None
    return_third_party_id: int | None = None

    # Exit-only
    destination_type: DestinationType | None = None
    destination_employee_id: int | None = None
    destination_third_party_id: int | None = None
    exit_transaction_id: int | None = None
    purpose: str | None = None

    # Legacy marker: exit-shaped rows that actually put stock back
    is_return: bool = False

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def kind(self) -> MovementKind:
        """Collapse type/origin/destination/is_return into one variant."""
        if self.type == MovementType.ENTRY:
            if self.origin_type == OriginType.EMPLOYEE_RETURN:
                return MovementKind.EMPLOYEE_RETURN
            if self.origin_type == OriginType.THIRD_PARTY_RETURN:
                return MovementKind.THIRD_PARTY_RETURN
            return MovementKind.SUPPLIER_ENTRY
        if self.is_return:
            if self.destination_type == DestinationType.THIRD_PARTY:
                return MovementKind.THIRD_PARTY_RETURN
            return MovementKind.EMPLOYEE_RETURN
        return MovementKind.EXIT

    @property
    def signed_quantity(self) -> int:
        return self.kind.stock_effect * self.quantity

    @property
    def total_value(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def party_id(self) -> int | None:
        """Supplier, employee or third party this row points at."""
        return (
            self.supplier_id
            or self.return_employee_id
            or self.return_third_party_id
            or self.destination_employee_id
            or self.destination_third_party_id
        )


class ExitTransaction(BaseModel):
    """A user-facing exit owning one ledger line per FIFO lot consumed."""

    id: int | None = None
    date: date
    destination_type: DestinationType
    destination_employee_id: int | None = None
    destination_third_party_id: int | None = None
    cost_center_id: int | None = None
    owner_id: int = 1
    user_id: int | None = None
    notes: str | None = None
    lines: list[Movement] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def total_quantity(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def total_value(self) -> Decimal:
        return sum((line.total_value for line in self.lines), Decimal("0"))

    def build_line(
        self,
        material_id: int,
        quantity: int,
        unit_price: Decimal,
        purpose: str | None = None,
    ) -> Movement:
        """Create an exit row carrying this transaction's destination."""
        return Movement(
            type=MovementType.EXIT,
            date=self.date,
            material_id=material_id,
            quantity=quantity,
            unit_price=unit_price,
            owner_id=self.owner_id,
            user_id=self.user_id,
            notes=self.notes,
            cost_center_id=self.cost_center_id,
            destination_type=self.destination_type,
            destination_employee_id=self.destination_employee_id,
            destination_third_party_id=self.destination_third_party_id,
            exit_transaction_id=self.id,
            purpose=purpose,
        )


class Lot(BaseModel):
    """Price-homogeneous batch of stock, derived from the ledger on demand."""

    unit_price: Decimal
    total_entries: int
    available_quantity: int
    entry_date: date
    supplier_id: int | None = None

    @property
    def available_value(self) -> Decimal:
        return self.unit_price * self.available_quantity


class LotAllocation(BaseModel):
    """Portion of an exit drawn from one lot."""

    unit_price: Decimal
    quantity: int
    entry_date: date

    @property
    def total_value(self) -> Decimal:
        return self.unit_price * self.quantity


class LedgerSnapshot(BaseModel):
    """Movements of one material read together with its version token."""

    material_id: int
    stock_version: int
    # Cached materials.current_stock read alongside the version
    current_stock: int | None = None
    movements: list[Movement] = Field(default_factory=list)
