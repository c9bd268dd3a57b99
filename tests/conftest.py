"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Callable
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal
from pathlib import Path

import pytest

from warehouse.application.services import reset_services
from warehouse.core.entities.movement import (
    DestinationType,
    LedgerSnapshot,
    Movement,
    MovementType,
    OriginType,
)
from warehouse.core.entities.tenancy import Scope
from warehouse.infrastructure.storage.sqlite import connection as connection_module
from warehouse.infrastructure.storage.sqlite.connection import ConnectionPool
from warehouse.infrastructure.storage.sqlite.migrations.migrator import initialize_database

BASE_TIME = datetime(2024, 3, 1, 8, 0, tzinfo=UTC)


@pytest.fixture
def scope() -> Scope:
    """Tenant 1, user 1."""
    return Scope(owner_id=1, user_id=1)


@pytest.fixture
def global_scope() -> Scope:
    """Super-admin scope that sees every tenant."""
    return Scope(owner_id=None, user_id=99)


@pytest.fixture
def make_entry() -> Callable[..., Movement]:
    """Build supplier entry rows; later calls get later created_at stamps."""
    counter = {"n": 0}

    def _make(
        quantity: int,
        unit_price: str,
        day: date = date(2024, 3, 1),
        material_id: int = 1,
        origin_type: OriginType = OriginType.SUPPLIER,
        **fields,
    ) -> Movement:
        counter["n"] += 1
        if origin_type == OriginType.SUPPLIER:
            fields.setdefault("supplier_id", 1)
        elif origin_type == OriginType.EMPLOYEE_RETURN:
            fields.setdefault("return_employee_id", 1)
        else:
            fields.setdefault("return_third_party_id", 1)
        return Movement(
            id=fields.pop("id", counter["n"]),
            type=MovementType.ENTRY,
            date=day,
            material_id=material_id,
            quantity=quantity,
            unit_price=Decimal(unit_price),
            origin_type=origin_type,
            created_at=BASE_TIME + timedelta(seconds=counter["n"]),
            **fields,
        )

    return _make


@pytest.fixture
def make_exit() -> Callable[..., Movement]:
    """Build plain exit rows to an employee."""
    counter = {"n": 1000}

    def _make(
        quantity: int,
        unit_price: str = "0",
        day: date = date(2024, 3, 2),
        material_id: int = 1,
        **fields,
    ) -> Movement:
        counter["n"] += 1
        fields.setdefault("destination_type", DestinationType.EMPLOYEE)
        if fields["destination_type"] == DestinationType.EMPLOYEE:
            fields.setdefault("destination_employee_id", 1)
        else:
            fields.setdefault("destination_third_party_id", 1)
        return Movement(
            id=fields.pop("id", counter["n"]),
            type=MovementType.EXIT,
            date=day,
            material_id=material_id,
            quantity=quantity,
            unit_price=Decimal(unit_price),
            created_at=BASE_TIME + timedelta(seconds=counter["n"]),
            **fields,
        )

    return _make


@pytest.fixture
def snapshot_of() -> Callable[..., LedgerSnapshot]:
    def _snapshot(
        movements: list[Movement],
        version: int = 1,
        material_id: int = 1,
        current_stock: int | None = None,
    ):
        return LedgerSnapshot(
            material_id=material_id,
            stock_version=version,
            current_stock=current_stock,
            movements=movements,
        )

    return _snapshot


@pytest.fixture
async def ledger_db(tmp_path: Path) -> AsyncGenerator[Path, None]:
    """
    Migrated temporary database installed as the global connection pool.

    Every SQLite store and service factory resolves to it for the test's
    duration.
    """
    db_path = tmp_path / "warehouse.db"
    await initialize_database(db_path, create_backup_before=False)

    pool = ConnectionPool(db_path=db_path, pool_size=2, busy_timeout=5000)
    await pool.initialize()

    previous = connection_module._pool
    connection_module._pool = pool
    reset_services()

    yield db_path

    await pool.close()
    connection_module._pool = previous
    reset_services()
