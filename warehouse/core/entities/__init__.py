"""Core domain entities."""

from warehouse.core.entities.material import Material
from warehouse.core.entities.movement import (
    DestinationType,
    ExitTransaction,
    LedgerSnapshot,
    Lot,
    LotAllocation,
    Movement,
    MovementKind,
    MovementType,
    OriginType,
)
from warehouse.core.entities.reference import (
    REFERENCE_MODELS,
    Category,
    CostCenter,
    Employee,
    ReferenceEntity,
    ReferenceKind,
    Supplier,
    ThirdParty,
)
from warehouse.core.entities.report import (
    Classification,
    ConsumptionRow,
    CostCenterReport,
    CostCenterTotals,
    DashboardStats,
    DisplayType,
    FinancialStockRow,
    MovementReport,
    MovementReportFilter,
    MovementReportRow,
    MovementView,
    ReportBucket,
    ReportMovementType,
    ReportTotals,
    StockReportRow,
)
from warehouse.core.entities.tenancy import Role, Scope, User

__all__ = [
    # Tenancy
    "Role",
    "Scope",
    "User",
    # Material
    "Material",
    # Ledger
    "DestinationType",
    "ExitTransaction",
    "LedgerSnapshot",
    "Lot",
    "LotAllocation",
    "Movement",
    "MovementKind",
    "MovementType",
    "OriginType",
    # Reference data
    "REFERENCE_MODELS",
    "Category",
    "CostCenter",
    "Employee",
    "ReferenceEntity",
    "ReferenceKind",
    "Supplier",
    "ThirdParty",
    # Reports
    "Classification",
    "ConsumptionRow",
    "CostCenterReport",
    "CostCenterTotals",
    "DashboardStats",
    "DisplayType",
    "FinancialStockRow",
    "MovementReport",
    "MovementReportFilter",
    "MovementReportRow",
    "MovementView",
    "ReportBucket",
    "ReportMovementType",
    "ReportTotals",
    "StockReportRow",
]
