"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from warehouse.application.dto.requests import (
    CategoryRequest,
    CostCenterRequest,
    CreateEntryRequest,
    CreateExitRequest,
    CreateMaterialRequest,
    EmployeeRequest,
    EntryItemRequest,
    ExitItemRequest,
    SupplierRequest,
    ThirdPartyRequest,
    UpdateMaterialRequest,
)
from warehouse.application.dto.responses import (
    CostCenterReportResponse,
    CreateEntryResponse,
    CreateExitResponse,
    DashboardStatsResponse,
    DeleteExitTransactionResponse,
    DeleteMovementResponse,
    ErrorResponse,
    ExitTransactionResponse,
    FifoPreviewResponse,
    FinancialStockReportResponse,
    HealthResponse,
    MaterialListResponse,
    MaterialLotsResponse,
    MaterialResponse,
    MovementListResponse,
    MovementReportResponse,
    MovementResponse,
    PaginatedResponse,
    ProviderHealthResponse,
    RecalculateAllResponse,
    RecalculateStockResponse,
)

__all__ = [
    # Requests
    "CreateEntryRequest",
    "EntryItemRequest",
    "CreateExitRequest",
    "ExitItemRequest",
    "CreateMaterialRequest",
    "UpdateMaterialRequest",
    "CategoryRequest",
    "SupplierRequest",
    "EmployeeRequest",
    "ThirdPartyRequest",
    "CostCenterRequest",
    # Responses
    "MovementResponse",
    "MovementListResponse",
    "CreateEntryResponse",
    "CreateExitResponse",
    "ExitTransactionResponse",
    "DeleteMovementResponse",
    "DeleteExitTransactionResponse",
    "MaterialLotsResponse",
    "FifoPreviewResponse",
    "RecalculateStockResponse",
    "RecalculateAllResponse",
    "MaterialResponse",
    "MaterialListResponse",
    "MovementReportResponse",
    "CostCenterReportResponse",
    "FinancialStockReportResponse",
    "DashboardStatsResponse",
    "HealthResponse",
    "ProviderHealthResponse",
    "ErrorResponse",
    "PaginatedResponse",
]
