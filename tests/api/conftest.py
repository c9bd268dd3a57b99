"""Fixtures for API tests.

Routes are exercised through httpx's ASGI transport with use cases and
services replaced via ``app.dependency_overrides``; the lifespan never runs,
so no database is touched.
"""

from collections.abc import AsyncGenerator
from datetime import UTC, date, datetime
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient

from warehouse.api.main import app
from warehouse.core.entities.material import Material
from warehouse.core.entities.movement import DestinationType, ExitTransaction

NOW = datetime(2024, 3, 2, 9, 0, tzinfo=UTC)


@pytest.fixture
def overrides():
    """Register dependency overrides for one test and drop them afterwards."""
    registered: dict = {}

    def _override(dependency, value):
        registered[dependency] = lambda: value
        app.dependency_overrides[dependency] = registered[dependency]

    yield _override

    for dependency in registered:
        app.dependency_overrides.pop(dependency, None)


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def material() -> Material:
    return Material(
        id=1,
        name="Luva",
        unit="par",
        current_stock=8,
        minimum_stock=2,
        unit_price=Decimal("7.00"),
        created_at=NOW,
        updated_at=NOW,
    )


@pytest.fixture
def exit_transaction() -> ExitTransaction:
    header = ExitTransaction(
        id=4,
        date=date(2024, 3, 2),
        destination_type=DestinationType.EMPLOYEE,
        destination_employee_id=3,
        created_at=NOW,
    )
    header.lines = [
        header.build_line(1, 10, Decimal("5.00")).model_copy(update={"id": 21}),
        header.build_line(1, 2, Decimal("7.00")).model_copy(update={"id": 22}),
    ]
    return header
