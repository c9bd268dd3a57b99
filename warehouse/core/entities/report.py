"""Reporting entities built on top of classified ledger rows."""

from datetime import date
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from warehouse.core.entities.movement import Lot, Movement, MovementKind


class DisplayType(str, Enum):
    """Human-facing movement labels, as shown on reports."""

    ENTRY = "Entrada"
    EXIT = "Saída"
    RETURN = "Devolução"


class ReportBucket(str, Enum):
    """Financial bucket a row contributes to."""

    PURCHASES = "purchases"
    EXITS = "exits"
    RETURNS = "returns"


class ReportMovementType(str, Enum):
    """Type filter accepted by the general movements report."""

    ENTRY = "entry"
    EXIT = "exit"
    RETURN = "return"


class Classification(BaseModel):
    """Semantics derived from a raw ledger row."""

    kind: MovementKind
    display_type: DisplayType
    label: str
    stock_effect: int
    report_bucket: ReportBucket

    @property
    def cost_center_relevant(self) -> bool:
        """Cost centers track consumption and give-back, never procurement."""
        return self.report_bucket != ReportBucket.PURCHASES


class MovementView(BaseModel):
    """A ledger row joined with the names reports print."""

    movement: Movement
    material_name: str
    unit: str = "un"
    category_id: int | None = None
    category_name: str | None = None
    party_name: str | None = None
    cost_center_name: str | None = None


class MovementReportFilter(BaseModel):
    """Filters of the general movements report."""

    start_date: date | None = None
    end_date: date | None = None
    type: ReportMovementType | None = None
    cost_center_id: int | None = None
    supplier_id: int | None = None
    material_id: int | None = None
    category_id: int | None = None
    employee_id: int | None = None


class MovementReportRow(BaseModel):
    id: int
    date: date
    kind: MovementKind
    display_type: DisplayType
    label: str
    material_id: int
    material_name: str
    category_name: str | None = None
    unit: str = "un"
    quantity: int
    unit_price: Decimal
    total_value: Decimal
    cost_center_id: int | None = None
    cost_center_name: str | None = None
    notes: str | None = None


class ReportTotals(BaseModel):
    """Value totals per bucket; grand_total sums all three buckets."""

    total_entries: Decimal = Decimal("0")
    total_exits: Decimal = Decimal("0")
    total_returns: Decimal = Decimal("0")
    grand_total: Decimal = Decimal("0")
    entry_count: int = 0
    exit_count: int = 0
    return_count: int = 0


class MovementReport(BaseModel):
    rows: list[MovementReportRow] = Field(default_factory=list)
    totals: ReportTotals = Field(default_factory=ReportTotals)


class CostCenterTotals(BaseModel):
    total_exits: Decimal = Decimal("0")
    total_returns: Decimal = Decimal("0")
    exit_count: int = 0
    return_count: int = 0

    @property
    def net_consumption(self) -> Decimal:
        return self.total_exits - self.total_returns


class CostCenterReport(BaseModel):
    cost_center_id: int
    start_date: date | None = None
    end_date: date | None = None
    rows: list[MovementReportRow] = Field(default_factory=list)
    totals: CostCenterTotals = Field(default_factory=CostCenterTotals)


class StockReportRow(BaseModel):
    material_id: int
    name: str
    category_name: str | None = None
    unit: str
    current_stock: int
    minimum_stock: int

    @property
    def is_low_stock(self) -> bool:
        return self.current_stock <= self.minimum_stock


class ConsumptionRow(BaseModel):
    material_id: int
    name: str
    category_name: str | None = None
    unit: str
    total_consumed: int = 0
    total_returned: int = 0
    consumed_value: Decimal = Decimal("0")

    @property
    def net_consumed(self) -> int:
        return self.total_consumed - self.total_returned


class FinancialStockRow(BaseModel):
    """Stock valued at the prices of its open FIFO lots."""

    material_id: int
    name: str
    category_name: str | None = None
    unit: str
    current_stock: int
    lots: list[Lot] = Field(default_factory=list)

    @property
    def stock_value(self) -> Decimal:
        return sum((lot.available_value for lot in self.lots), Decimal("0"))

    @property
    def average_unit_cost(self) -> Decimal:
        quantity = sum(lot.available_quantity for lot in self.lots)
        if quantity == 0:
            return Decimal("0")
        return self.stock_value / quantity


class DashboardStats(BaseModel):
    total_materials: int = 0
    entries_today: int = 0
    exits_today: int = 0
    critical_items: int = 0
