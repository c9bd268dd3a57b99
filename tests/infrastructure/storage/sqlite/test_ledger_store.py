"""Tests for SQLiteLedgerStore against a migrated database."""

from datetime import date
from decimal import Decimal

import pytest

from warehouse.core.entities.movement import DestinationType, ExitTransaction, MovementType
from warehouse.core.entities.report import MovementReportFilter
from warehouse.core.entities.tenancy import Scope
from warehouse.core.exceptions import DatabaseError, StaleStockVersionError
from warehouse.infrastructure.storage.sqlite.connection import get_transaction

OTHER_TENANT = Scope(owner_id=2, user_id=2)


@pytest.fixture
async def stocked(ledger_store, seeded, make_entry):
    """Material holding 10@5 then 10@7."""
    material_id = seeded["material"].id
    supplier_id = seeded["supplier"].id
    await ledger_store.record_entries(
        [
            make_entry(10, "5.00", material_id=material_id, supplier_id=supplier_id),
            make_entry(10, "7.00", material_id=material_id, supplier_id=supplier_id),
        ]
    )
    return seeded


def exit_header(seeded) -> ExitTransaction:
    return ExitTransaction(
        date=date(2024, 3, 2),
        destination_type=DestinationType.EMPLOYEE,
        destination_employee_id=seeded["employee"].id,
        cost_center_id=seeded["cost_center"].id,
        user_id=1,
    )


async def write_exit(ledger_store, seeded, scope, *portions):
    material_id = seeded["material"].id
    snapshot = await ledger_store.get_snapshot(material_id, scope)
    header = exit_header(seeded)
    lines = [header.build_line(material_id, qty, Decimal(price)) for qty, price in portions]
    return await ledger_store.record_exit(header, lines, {material_id: snapshot.stock_version})


class TestRecordEntries:
    async def test_bumps_stock_version_and_price(self, ledger_store, material_store, stocked, scope):
        material = await material_store.get_material(stocked["material"].id, scope)

        assert material.current_stock == 20
        assert material.stock_version == 2
        assert material.unit_price == Decimal("7.00")
        assert material.last_supplier_id == stocked["supplier"].id

    async def test_snapshot_in_fifo_order(self, ledger_store, stocked, scope):
        snapshot = await ledger_store.get_snapshot(stocked["material"].id, scope)

        assert snapshot.stock_version == 2
        assert [m.unit_price for m in snapshot.movements] == [Decimal("5.00"), Decimal("7.00")]
        assert all(m.id is not None for m in snapshot.movements)

    async def test_snapshot_hidden_from_other_tenant(self, ledger_store, stocked):
        assert await ledger_store.get_snapshot(stocked["material"].id, OTHER_TENANT) is None

    async def test_snapshot_and_listing_apply_the_same_owner_filter(
        self, ledger_store, stocked, scope, global_scope
    ):
        material_id = stocked["material"].id
        [first, second] = await ledger_store.list_material_movements(material_id, scope)
        async with get_transaction() as conn:
            await conn.execute("UPDATE movements SET owner_id = 2 WHERE id = ?", (second.id,))

        snapshot = await ledger_store.get_snapshot(material_id, scope)
        listed = await ledger_store.list_material_movements(material_id, scope)

        assert [m.id for m in snapshot.movements] == [m.id for m in listed] == [first.id]
        unrestricted = await ledger_store.get_snapshot(material_id, global_scope)
        assert len(unrestricted.movements) == 2

    async def test_unparseable_price_is_an_error(self, ledger_store, stocked, scope):
        material_id = stocked["material"].id
        async with get_transaction() as conn:
            await conn.execute(
                "UPDATE movements SET unit_price = 'abc' WHERE material_id = ?", (material_id,)
            )

        with pytest.raises(DatabaseError) as exc_info:
            await ledger_store.get_snapshot(material_id, scope)

        assert "abc" in exc_info.value.message


class TestRecordExit:
    async def test_writes_header_and_lines(self, ledger_store, material_store, stocked, scope):
        transaction = await write_exit(ledger_store, stocked, scope, (10, "5.00"), (2, "7.00"))

        assert transaction.id is not None
        assert [line.quantity for line in transaction.lines] == [10, 2]
        assert {line.exit_transaction_id for line in transaction.lines} == {transaction.id}

        material = await material_store.get_material(stocked["material"].id, scope)
        assert material.current_stock == 8
        assert material.stock_version == 3

    async def test_stale_version_writes_nothing(self, ledger_store, material_store, stocked, scope):
        material_id = stocked["material"].id
        header = exit_header(stocked)
        lines = [header.build_line(material_id, 1, Decimal("5.00"))]

        with pytest.raises(StaleStockVersionError):
            await ledger_store.record_exit(header, lines, {material_id: 1})

        material = await material_store.get_material(material_id, scope)
        assert material.current_stock == 20
        assert len(await ledger_store.list_material_movements(material_id, scope)) == 2

    async def test_existing_header_gets_more_lines(self, ledger_store, stocked, scope):
        first = await write_exit(ledger_store, stocked, scope, (1, "5.00"))
        material_id = stocked["material"].id
        snapshot = await ledger_store.get_snapshot(material_id, scope)
        header = exit_header(stocked).model_copy(update={"id": first.id})

        await ledger_store.record_exit(
            header,
            [header.build_line(material_id, 1, Decimal("5.00"))],
            {material_id: snapshot.stock_version},
        )

        transaction = await ledger_store.get_exit_transaction(first.id, scope)
        assert len(transaction.lines) == 2

    async def test_transaction_hidden_from_other_tenant(self, ledger_store, stocked, scope):
        transaction = await write_exit(ledger_store, stocked, scope, (1, "5.00"))

        assert await ledger_store.get_exit_transaction(transaction.id, OTHER_TENANT) is None


class TestDeletes:
    async def test_delete_exit_line_restores_stock(
        self, ledger_store, material_store, stocked, scope
    ):
        transaction = await write_exit(ledger_store, stocked, scope, (3, "5.00"))

        deleted = await ledger_store.delete_movement(transaction.lines[0].id)

        assert deleted.quantity == 3
        material = await material_store.get_material(stocked["material"].id, scope)
        assert material.current_stock == 20
        # Last line gone, header dropped
        assert await ledger_store.get_exit_transaction(transaction.id, scope) is None

    async def test_delete_entry_lowers_stock(self, ledger_store, material_store, stocked, scope):
        material_id = stocked["material"].id
        [first, _] = await ledger_store.list_material_movements(material_id, scope)

        await ledger_store.delete_movement(first.id)

        material = await material_store.get_material(material_id, scope)
        assert material.current_stock == 10
        assert material.stock_version == 3

    async def test_delete_missing_row(self, ledger_store, ledger_db):
        assert await ledger_store.delete_movement(999) is None

    async def test_delete_exit_transaction(self, ledger_store, material_store, stocked, scope):
        transaction = await write_exit(ledger_store, stocked, scope, (10, "5.00"), (2, "7.00"))

        lines = await ledger_store.delete_exit_transaction(transaction.id)

        assert len(lines) == 2
        material = await material_store.get_material(stocked["material"].id, scope)
        assert material.current_stock == 20
        assert await ledger_store.get_exit_transaction(transaction.id, scope) is None


class TestQueries:
    async def test_list_movements_newest_first(self, ledger_store, stocked, scope):
        await write_exit(ledger_store, stocked, scope, (1, "5.00"))

        rows = await ledger_store.list_movements(scope)
        exits = await ledger_store.list_movements(scope, movement_type=MovementType.EXIT)
        page = await ledger_store.list_movements(scope, limit=1, offset=1)

        assert rows[0].type == MovementType.EXIT
        assert len(rows) == 3
        assert len(exits) == 1
        assert len(page) == 1
        assert await ledger_store.list_movements(OTHER_TENANT) == []

    async def test_query_views_joins_names(self, ledger_store, stocked, scope):
        await write_exit(ledger_store, stocked, scope, (1, "5.00"))

        views = await ledger_store.query_views(MovementReportFilter(), scope)

        exit_view = views[0]
        assert exit_view.material_name == "Luva"
        assert exit_view.party_name == "Ana"
        assert exit_view.cost_center_name == "Obra"
        assert views[-1].party_name == "Acme"

    async def test_query_views_filters(self, ledger_store, stocked, scope):
        await write_exit(ledger_store, stocked, scope, (1, "5.00"))

        by_cost_center = await ledger_store.query_views(
            MovementReportFilter(cost_center_id=stocked["cost_center"].id), scope
        )
        by_employee = await ledger_store.query_views(
            MovementReportFilter(employee_id=stocked["employee"].id), scope
        )

        assert len(by_cost_center) == 1
        assert len(by_employee) == 1

    async def test_count_by_type_on(self, ledger_store, stocked, scope):
        await write_exit(ledger_store, stocked, scope, (1, "5.00"))

        assert await ledger_store.count_by_type_on(date(2024, 3, 1), scope) == {
            MovementType.ENTRY: 2
        }
        assert await ledger_store.count_by_type_on(date(2024, 3, 2), scope) == {
            MovementType.EXIT: 1
        }
