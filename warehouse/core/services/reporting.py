"""
Reporting service.

Builds movement, cost-center, stock, consumption and financial reports from
classified ledger rows. Layer-pure: stores are injected via constructor.
"""

from datetime import date
from decimal import Decimal

from warehouse.config import get_logger
from warehouse.core.entities.material import Material
from warehouse.core.entities.movement import MovementKind, MovementType
from warehouse.core.entities.reference import ReferenceKind
from warehouse.core.entities.report import (
    Classification,
    ConsumptionRow,
    CostCenterReport,
    CostCenterTotals,
    DashboardStats,
    FinancialStockRow,
    MovementReport,
    MovementReportFilter,
    MovementReportRow,
    MovementView,
    ReportBucket,
    StockReportRow,
)
from warehouse.core.entities.tenancy import Scope
from warehouse.core.exceptions import ReferenceNotFoundError
from warehouse.core.interfaces import ILedgerStore, IMaterialStore, IReferenceStore
from warehouse.core.services.lot_resolver import build_lots
from warehouse.core.services.movement_classifier import classify, matches_report_type

logger = get_logger(__name__)


def _report_row(view: MovementView, classification: Classification) -> MovementReportRow:
    movement = view.movement
    return MovementReportRow(
        id=movement.id,
        date=movement.date,
        kind=classification.kind,
        display_type=classification.display_type,
        label=classification.label,
        material_id=movement.material_id,
        material_name=view.material_name,
        category_name=view.category_name,
        unit=view.unit,
        quantity=movement.quantity,
        unit_price=movement.unit_price,
        total_value=movement.total_value,
        cost_center_id=movement.cost_center_id,
        cost_center_name=view.cost_center_name,
        notes=movement.notes,
    )


class ReportingService:
    """
    Report builder over the ledger.

    Required interfaces for DI:
    - ILedgerStore: joined movement views and daily counts
    - IMaterialStore: stock levels
    - IReferenceStore: category and cost-center names
    """

    PAGE_SIZE = 500

    def __init__(
        self,
        ledger_store: ILedgerStore,
        material_store: IMaterialStore,
        reference_store: IReferenceStore,
    ):
        self._ledger = ledger_store
        self._materials = material_store
        self._references = reference_store

    async def general_movements_report(
        self, filters: MovementReportFilter, scope: Scope
    ) -> MovementReport:
        """
        Every ledger row matching the filters, classified.

        Totals split values into purchases, exits and returns; grand_total
        is the sum of the three.
        """
        views = await self._ledger.query_views(filters, scope)
        report = MovementReport()
        totals = report.totals

        for view in views:
            classification = classify(view.movement, view.party_name)
            if filters.type is not None and not matches_report_type(classification, filters.type):
                continue

            row = _report_row(view, classification)
            report.rows.append(row)

            if classification.report_bucket == ReportBucket.PURCHASES:
                totals.total_entries += row.total_value
                totals.entry_count += 1
            elif classification.report_bucket == ReportBucket.EXITS:
                totals.total_exits += row.total_value
                totals.exit_count += 1
            else:
                totals.total_returns += row.total_value
                totals.return_count += 1

        totals.grand_total = totals.total_entries + totals.total_exits + totals.total_returns

        logger.info(
            "movements_report_built",
            owner_id=scope.owner_id,
            rows=len(report.rows),
            grand_total=totals.grand_total,
        )
        return report

    async def cost_center_report(
        self,
        cost_center_id: int,
        scope: Scope,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> CostCenterReport:
        """
        Exits and returns charged to one cost center.

        Supplier-origin rows never appear, even when tagged with the cost center.

        Raises:
            ReferenceNotFoundError: If the cost center is absent or out of scope
        """
        cost_center = await self._references.get(
            ReferenceKind.COST_CENTER, cost_center_id, scope
        )
        if cost_center is None:
            raise ReferenceNotFoundError(ReferenceKind.COST_CENTER.label, cost_center_id)

        views = await self._ledger.query_views(
            MovementReportFilter(
                cost_center_id=cost_center_id,
                start_date=start_date,
                end_date=end_date,
            ),
            scope,
        )

        rows: list[MovementReportRow] = []
        totals = CostCenterTotals()
        for view in views:
            classification = classify(view.movement, view.party_name)
            if not classification.cost_center_relevant:
                continue

            row = _report_row(view, classification)
            rows.append(row)
            if classification.report_bucket == ReportBucket.EXITS:
                totals.total_exits += row.total_value
                totals.exit_count += 1
            else:
                totals.total_returns += row.total_value
                totals.return_count += 1

        return CostCenterReport(
            cost_center_id=cost_center_id,
            start_date=start_date,
            end_date=end_date,
            rows=rows,
            totals=totals,
        )

    async def stock_report(
        self, scope: Scope, category_id: int | None = None
    ) -> list[StockReportRow]:
        """Current stock of every material, optionally in one category."""
        materials = await self._all_materials(scope, category_id=category_id)
        categories = await self._category_names(scope)
        return [
            StockReportRow(
                material_id=m.id,
                name=m.name,
                category_name=categories.get(m.category_id),
                unit=m.unit,
                current_stock=m.current_stock,
                minimum_stock=m.minimum_stock,
            )
            for m in materials
        ]

    async def low_stock(self, scope: Scope) -> list[Material]:
        """Materials at or below their minimum stock."""
        return await self._materials.list_low_stock(scope)

    async def material_consumption_report(
        self,
        scope: Scope,
        start_date: date | None = None,
        end_date: date | None = None,
        category_id: int | None = None,
    ) -> list[ConsumptionRow]:
        """Units consumed and returned per material over a period."""
        views = await self._ledger.query_views(
            MovementReportFilter(
                start_date=start_date,
                end_date=end_date,
                category_id=category_id,
            ),
            scope,
        )

        rows: dict[int, ConsumptionRow] = {}
        for view in views:
            movement = view.movement
            kind = movement.kind
            if kind == MovementKind.SUPPLIER_ENTRY:
                continue

            row = rows.get(movement.material_id)
            if row is None:
                row = rows[movement.material_id] = ConsumptionRow(
                    material_id=movement.material_id,
                    name=view.material_name,
                    category_name=view.category_name,
                    unit=view.unit,
                )

            if kind == MovementKind.EXIT:
                row.total_consumed += movement.quantity
                row.consumed_value += movement.total_value
            else:
                row.total_returned += movement.quantity

        return sorted(rows.values(), key=lambda r: r.net_consumed, reverse=True)

    async def financial_stock_report(
        self,
        scope: Scope,
        search: str | None = None,
        category_id: int | None = None,
    ) -> list[FinancialStockRow]:
        """Materials in stock valued at the prices of their open FIFO lots."""
        materials = await self._all_materials(scope, category_id=category_id, search=search)
        categories = await self._category_names(scope)

        rows: list[FinancialStockRow] = []
        for material in materials:
            snapshot = await self._ledger.get_snapshot(material.id, scope)
            lots = build_lots(snapshot.movements) if snapshot else []
            if not lots and material.current_stock == 0:
                continue
            rows.append(
                FinancialStockRow(
                    material_id=material.id,
                    name=material.name,
                    category_name=categories.get(material.category_id),
                    unit=material.unit,
                    current_stock=material.current_stock,
                    lots=lots,
                )
            )

        logger.info(
            "financial_stock_report_built",
            owner_id=scope.owner_id,
            materials=len(rows),
            total_value=sum((r.stock_value for r in rows), Decimal("0")),
        )
        return rows

    async def dashboard_stats(self, scope: Scope, today: date | None = None) -> DashboardStats:
        """Headline counters for the dashboard."""
        materials = await self._all_materials(scope)
        low = await self._materials.list_low_stock(scope)
        counts = await self._ledger.count_by_type_on(today or date.today(), scope)
        return DashboardStats(
            total_materials=len(materials),
            entries_today=counts.get(MovementType.ENTRY, 0),
            exits_today=counts.get(MovementType.EXIT, 0),
            critical_items=len(low),
        )

    async def _all_materials(
        self,
        scope: Scope,
        category_id: int | None = None,
        search: str | None = None,
    ) -> list[Material]:
        materials: list[Material] = []
        offset = 0
        while True:
            page = await self._materials.list_materials(
                scope,
                category_id=category_id,
                search=search,
                limit=self.PAGE_SIZE,
                offset=offset,
            )
            materials.extend(page)
            if len(page) < self.PAGE_SIZE:
                return materials
            offset += self.PAGE_SIZE

    async def _category_names(self, scope: Scope) -> dict[int, str]:
        categories = await self._references.list(ReferenceKind.CATEGORY, scope)
        return {c.id: c.name for c in categories}
