"""Pytest fixtures for SQLite storage tests."""

from collections.abc import AsyncGenerator
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from warehouse.core.entities.material import Material
from warehouse.core.entities.reference import CostCenter, Employee, ReferenceKind, Supplier
from warehouse.infrastructure.storage.sqlite.ledger_store import SQLiteLedgerStore
from warehouse.infrastructure.storage.sqlite.material_store import SQLiteMaterialStore
from warehouse.infrastructure.storage.sqlite.reference_store import SQLiteReferenceStore


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
def mock_settings(temp_db_path: Path):
    """Mock settings with temp database path."""
    mock = MagicMock()
    mock.storage.db_path = temp_db_path
    mock.storage.pool_size = 2
    mock.storage.busy_timeout = 5000
    return mock


@pytest.fixture
def material_store(ledger_db) -> SQLiteMaterialStore:
    return SQLiteMaterialStore()


@pytest.fixture
def ledger_store(ledger_db) -> SQLiteLedgerStore:
    return SQLiteLedgerStore()


@pytest.fixture
def reference_store(ledger_db) -> SQLiteReferenceStore:
    return SQLiteReferenceStore()


@pytest.fixture
async def seeded(
    material_store: SQLiteMaterialStore,
    reference_store: SQLiteReferenceStore,
) -> AsyncGenerator[dict, None]:
    """One supplier, employee, cost center and material in tenant 1."""
    supplier = await reference_store.create(ReferenceKind.SUPPLIER, Supplier(name="Acme"))
    employee = await reference_store.create(ReferenceKind.EMPLOYEE, Employee(name="Ana"))
    cost_center = await reference_store.create(
        ReferenceKind.COST_CENTER, CostCenter(name="Obra", code="CC-1")
    )
    material = await material_store.create_material(Material(name="Luva", minimum_stock=2))
    yield {
        "supplier": supplier,
        "employee": employee,
        "cost_center": cost_center,
        "material": material,
    }
