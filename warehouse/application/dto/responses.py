"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from warehouse.core.entities.material import Material
from warehouse.core.entities.movement import ExitTransaction, Lot, Movement
from warehouse.core.entities.report import MovementReportRow, ReportTotals


class ProviderHealthResponse(BaseModel):
    """Health status of a backing resource."""

    name: str
    available: bool
    latency_ms: float | None = None
    schema_version: str | None = None
    connections_in_use: int | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ProviderHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. INSUFFICIENT_STOCK)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)


class PaginatedResponse(BaseModel):
    """Base for paginated responses."""

    total: int
    limit: int
    offset: int
    has_more: bool


# --- Movements ---


class MovementResponse(BaseModel):
    """Ledger row response DTO."""

    id: int
    type: str
    kind: str
    date: date
    material_id: int
    quantity: int
    unit_price: Decimal
    total_value: Decimal
    owner_id: int
    user_id: int | None = None
    notes: str | None = None
    cost_center_id: int | None = None
    origin_type: str | None = None
    supplier_id: int | None = None
    return_employee_id: int | None = None
    return_third_party_id: int | None = None
    destination_type: str | None = None
    destination_employee_id: int | None = None
    destination_third_party_id: int | None = None
    exit_transaction_id: int | None = None
    purpose: str | None = None
    is_return: bool = False
    created_at: datetime


class MovementListResponse(PaginatedResponse):
    """Paginated ledger rows."""

    items: list[MovementResponse]


class CreateEntryResponse(BaseModel):
    """Rows written by an entry."""

    movements: list[MovementResponse]
    total_quantity: int
    total_value: Decimal


class ExitTransactionResponse(BaseModel):
    """Exit transaction with its per-lot lines."""

    id: int
    date: date
    destination_type: str
    destination_employee_id: int | None = None
    destination_third_party_id: int | None = None
    cost_center_id: int | None = None
    owner_id: int
    user_id: int | None = None
    notes: str | None = None
    lines: list[MovementResponse]
    total_quantity: int
    total_value: Decimal
    created_at: datetime


class ExitFailureResponse(BaseModel):
    """An exit item rejected for lack of stock or a write conflict."""

    material_id: int
    requested: int
    available: int | None = None
    message: str
    code: str = "INSUFFICIENT_STOCK"


class CreateExitResponse(BaseModel):
    """Outcome of an exit request."""

    transaction: ExitTransactionResponse | None = None
    failures: list[ExitFailureResponse] = Field(default_factory=list)


class DeleteMovementResponse(BaseModel):
    """Deleted row and the material's stock after reconciliation."""

    deleted: MovementResponse
    current_stock: int


class DeleteExitTransactionResponse(BaseModel):
    """Deleted exit and the reconciled stock of every material it touched."""

    exit_transaction_id: int
    deleted_lines: int
    stocks: dict[int, int]


# --- Lots ---


class LotResponse(BaseModel):
    """Open FIFO lot."""

    unit_price: Decimal
    total_entries: int
    available_quantity: int
    available_value: Decimal
    entry_date: date
    supplier_id: int | None = None


class MaterialLotsResponse(BaseModel):
    """Open lots of a material, oldest first."""

    material_id: int
    lots: list[LotResponse]
    available_quantity: int
    available_value: Decimal


class LotAllocationResponse(BaseModel):
    unit_price: Decimal
    quantity: int
    entry_date: date
    total_value: Decimal


class FifoPreviewResponse(BaseModel):
    """Allocation an exit would receive right now."""

    material_id: int
    quantity: int
    allocations: list[LotAllocationResponse]
    total_value: Decimal


# --- Stock reconciliation ---


class RecalculateStockResponse(BaseModel):
    material_id: int
    current_stock: int


class StockRepairResponse(BaseModel):
    material_id: int
    name: str
    previous: int
    current: int
    changed: bool


class RecalculateAllResponse(BaseModel):
    """Result of reconciling every material in scope."""

    materials: int
    repaired: int
    repairs: list[StockRepairResponse]


# --- Materials ---


class MaterialResponse(BaseModel):
    """Material response DTO."""

    id: int
    name: str
    category_id: int | None = None
    unit: str
    description: str | None = None
    current_stock: int
    minimum_stock: int
    unit_price: Decimal | None = None
    last_supplier_id: int | None = None
    owner_id: int
    is_low_stock: bool
    created_at: datetime
    updated_at: datetime


class MaterialListResponse(PaginatedResponse):
    """Paginated materials."""

    items: list[MaterialResponse]


# --- Reports ---


class MovementReportResponse(BaseModel):
    """General movements report."""

    rows: list[MovementReportRow]
    totals: ReportTotals


class CostCenterTotalsResponse(BaseModel):
    total_exits: Decimal
    total_returns: Decimal
    exit_count: int
    return_count: int
    net_consumption: Decimal


class CostCenterReportResponse(BaseModel):
    """Exits and returns charged to one cost center."""

    cost_center_id: int
    start_date: date | None = None
    end_date: date | None = None
    rows: list[MovementReportRow]
    totals: CostCenterTotalsResponse


class StockReportRowResponse(BaseModel):
    material_id: int
    name: str
    category_name: str | None = None
    unit: str
    current_stock: int
    minimum_stock: int
    is_low_stock: bool


class ConsumptionRowResponse(BaseModel):
    material_id: int
    name: str
    category_name: str | None = None
    unit: str
    total_consumed: int
    total_returned: int
    net_consumed: int
    consumed_value: Decimal


class FinancialStockRowResponse(BaseModel):
    """Stock valued at its open FIFO lots."""

    material_id: int
    name: str
    category_name: str | None = None
    unit: str
    current_stock: int
    stock_value: Decimal
    average_unit_cost: Decimal
    lots: list[LotResponse]


class FinancialStockReportResponse(BaseModel):
    rows: list[FinancialStockRowResponse]
    total_value: Decimal


class DashboardStatsResponse(BaseModel):
    total_materials: int
    entries_today: int
    exits_today: int
    critical_items: int


# --- Entity conversion ---


def movement_response(movement: Movement) -> MovementResponse:
    """Convert a ledger row to its response DTO."""
    return MovementResponse(
        id=movement.id,  # type: ignore[arg-type]
        type=movement.type.value,
        kind=movement.kind.value,
        date=movement.date,
        material_id=movement.material_id,
        quantity=movement.quantity,
        unit_price=movement.unit_price,
        total_value=movement.total_value,
        owner_id=movement.owner_id,
        user_id=movement.user_id,
        notes=movement.notes,
        cost_center_id=movement.cost_center_id,
        origin_type=movement.origin_type.value if movement.origin_type else None,
        supplier_id=movement.supplier_id,
        return_employee_id=movement.return_employee_id,
        return_third_party_id=movement.return_third_party_id,
        destination_type=movement.destination_type.value if movement.destination_type else None,
        destination_employee_id=movement.destination_employee_id,
        destination_third_party_id=movement.destination_third_party_id,
        exit_transaction_id=movement.exit_transaction_id,
        purpose=movement.purpose,
        is_return=movement.is_return,
        created_at=movement.created_at,
    )


def exit_transaction_response(transaction: ExitTransaction) -> ExitTransactionResponse:
    """Convert an exit transaction and its lines."""
    return ExitTransactionResponse(
        id=transaction.id,  # type: ignore[arg-type]
        date=transaction.date,
        destination_type=transaction.destination_type.value,
        destination_employee_id=transaction.destination_employee_id,
        destination_third_party_id=transaction.destination_third_party_id,
        cost_center_id=transaction.cost_center_id,
        owner_id=transaction.owner_id,
        user_id=transaction.user_id,
        notes=transaction.notes,
        lines=[movement_response(line) for line in transaction.lines],
        total_quantity=transaction.total_quantity,
        total_value=transaction.total_value,
        created_at=transaction.created_at,
    )


def lot_response(lot: Lot) -> LotResponse:
    return LotResponse(
        unit_price=lot.unit_price,
        total_entries=lot.total_entries,
        available_quantity=lot.available_quantity,
        available_value=lot.available_value,
        entry_date=lot.entry_date,
        supplier_id=lot.supplier_id,
    )


def material_response(material: Material) -> MaterialResponse:
    return MaterialResponse(
        id=material.id,  # type: ignore[arg-type]
        name=material.name,
        category_id=material.category_id,
        unit=material.unit,
        description=material.description,
        current_stock=material.current_stock,
        minimum_stock=material.minimum_stock,
        unit_price=material.unit_price,
        last_supplier_id=material.last_supplier_id,
        owner_id=material.owner_id,
        is_low_stock=material.is_low_stock,
        created_at=material.created_at,
        updated_at=material.updated_at,
    )
