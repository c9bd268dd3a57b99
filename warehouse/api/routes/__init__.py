"""API route modules."""

from warehouse.api.routes.health import router as health_router
from warehouse.api.routes.materials import router as materials_router
from warehouse.api.routes.movements import router as movements_router
from warehouse.api.routes.references import (
    categories_router,
    cost_centers_router,
    employees_router,
    suppliers_router,
    third_parties_router,
)
from warehouse.api.routes.reports import dashboard_router
from warehouse.api.routes.reports import router as reports_router

__all__ = [
    "health_router",
    "movements_router",
    "materials_router",
    "categories_router",
    "suppliers_router",
    "employees_router",
    "third_parties_router",
    "cost_centers_router",
    "reports_router",
    "dashboard_router",
]
