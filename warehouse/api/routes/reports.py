"""Report and dashboard endpoints."""

from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends

from warehouse.api.dependencies import get_reporting, get_scope
from warehouse.application.dto.responses import (
    ConsumptionRowResponse,
    CostCenterReportResponse,
    CostCenterTotalsResponse,
    DashboardStatsResponse,
    ErrorResponse,
    FinancialStockReportResponse,
    FinancialStockRowResponse,
    MaterialResponse,
    MovementReportResponse,
    StockReportRowResponse,
    lot_response,
    material_response,
)
from warehouse.core.entities.report import MovementReportFilter, ReportMovementType
from warehouse.core.entities.tenancy import Scope
from warehouse.core.services import ReportingService

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("/general-movements", response_model=MovementReportResponse)
async def general_movements(
    start_date: date | None = None,
    end_date: date | None = None,
    type: ReportMovementType | None = None,
    cost_center_id: int | None = None,
    supplier_id: int | None = None,
    material_id: int | None = None,
    category_id: int | None = None,
    employee_id: int | None = None,
    scope: Scope = Depends(get_scope),
    reporting: ReportingService = Depends(get_reporting),
) -> MovementReportResponse:
    """
    Every movement in the period, labelled Entrada, Saída or Devolução.

    ``type=return`` selects returns only; ``type=entry`` selects purchases.
    """
    filters = MovementReportFilter(
        start_date=start_date,
        end_date=end_date,
        type=type,
        cost_center_id=cost_center_id,
        supplier_id=supplier_id,
        material_id=material_id,
        category_id=category_id,
        employee_id=employee_id,
    )
    report = await reporting.general_movements_report(filters, scope)
    return MovementReportResponse(rows=report.rows, totals=report.totals)


@router.get(
    "/cost-center/{cost_center_id}",
    response_model=CostCenterReportResponse,
    responses={404: {"model": ErrorResponse}},
)
async def cost_center(
    cost_center_id: int,
    start_date: date | None = None,
    end_date: date | None = None,
    scope: Scope = Depends(get_scope),
    reporting: ReportingService = Depends(get_reporting),
) -> CostCenterReportResponse:
    """Exits charged to and returns credited to a cost center."""
    report = await reporting.cost_center_report(
        cost_center_id, scope, start_date=start_date, end_date=end_date
    )
    totals = report.totals
    return CostCenterReportResponse(
        cost_center_id=report.cost_center_id,
        start_date=report.start_date,
        end_date=report.end_date,
        rows=report.rows,
        totals=CostCenterTotalsResponse(
            total_exits=totals.total_exits,
            total_returns=totals.total_returns,
            exit_count=totals.exit_count,
            return_count=totals.return_count,
            net_consumption=totals.net_consumption,
        ),
    )


@router.get("/stock", response_model=list[StockReportRowResponse])
async def stock(
    category_id: int | None = None,
    scope: Scope = Depends(get_scope),
    reporting: ReportingService = Depends(get_reporting),
) -> list[StockReportRowResponse]:
    rows = await reporting.stock_report(scope, category_id=category_id)
    return [
        StockReportRowResponse(
            material_id=r.material_id,
            name=r.name,
            category_name=r.category_name,
            unit=r.unit,
            current_stock=r.current_stock,
            minimum_stock=r.minimum_stock,
            is_low_stock=r.is_low_stock,
        )
        for r in rows
    ]


@router.get("/low-stock", response_model=list[MaterialResponse])
async def low_stock(
    scope: Scope = Depends(get_scope),
    reporting: ReportingService = Depends(get_reporting),
) -> list[MaterialResponse]:
    """Materials at or below their minimum stock."""
    materials = await reporting.low_stock(scope)
    return [material_response(m) for m in materials]


@router.get("/consumption", response_model=list[ConsumptionRowResponse])
async def consumption(
    start_date: date | None = None,
    end_date: date | None = None,
    category_id: int | None = None,
    scope: Scope = Depends(get_scope),
    reporting: ReportingService = Depends(get_reporting),
) -> list[ConsumptionRowResponse]:
    """Units issued and returned per material, biggest consumers first."""
    rows = await reporting.material_consumption_report(
        scope, start_date=start_date, end_date=end_date, category_id=category_id
    )
    return [
        ConsumptionRowResponse(
            material_id=r.material_id,
            name=r.name,
            category_name=r.category_name,
            unit=r.unit,
            total_consumed=r.total_consumed,
            total_returned=r.total_returned,
            net_consumed=r.net_consumed,
            consumed_value=r.consumed_value,
        )
        for r in rows
    ]


@router.get("/financial-stock", response_model=FinancialStockReportResponse)
async def financial_stock(
    search: str | None = None,
    category_id: int | None = None,
    scope: Scope = Depends(get_scope),
    reporting: ReportingService = Depends(get_reporting),
) -> FinancialStockReportResponse:
    """Stock on hand valued at the prices of its open FIFO lots."""
    rows = await reporting.financial_stock_report(scope, search=search, category_id=category_id)
    return FinancialStockReportResponse(
        rows=[
            FinancialStockRowResponse(
                material_id=r.material_id,
                name=r.name,
                category_name=r.category_name,
                unit=r.unit,
                current_stock=r.current_stock,
                stock_value=r.stock_value,
                average_unit_cost=r.average_unit_cost,
                lots=[lot_response(lot) for lot in r.lots],
            )
            for r in rows
        ],
        total_value=sum((r.stock_value for r in rows), Decimal("0")),
    )


dashboard_router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@dashboard_router.get("/stats", response_model=DashboardStatsResponse)
async def dashboard_stats(
    scope: Scope = Depends(get_scope),
    reporting: ReportingService = Depends(get_reporting),
) -> DashboardStatsResponse:
    """Headline counters: materials, today's entries and exits, critical items."""
    stats = await reporting.dashboard_stats(scope)
    return DashboardStatsResponse(
        total_materials=stats.total_materials,
        entries_today=stats.entries_today,
        exits_today=stats.exits_today,
        critical_items=stats.critical_items,
    )
