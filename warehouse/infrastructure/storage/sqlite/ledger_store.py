"""SQLite implementation of the movements ledger."""

from collections import defaultdict
from datetime import UTC, date, datetime
from decimal import Decimal, InvalidOperation

import aiosqlite

from warehouse.config import get_logger
from warehouse.core.entities.movement import (
    DestinationType,
    ExitTransaction,
    LedgerSnapshot,
    Movement,
    MovementKind,
    MovementType,
    OriginType,
)
from warehouse.core.entities.report import MovementReportFilter, MovementView
from warehouse.core.entities.tenancy import Scope
from warehouse.core.exceptions import DatabaseError, StaleStockVersionError
from warehouse.core.interfaces.ledger_store import ILedgerStore
from warehouse.infrastructure.storage.sqlite.connection import (
    get_connection,
    get_immediate_transaction,
    get_transaction,
)

logger = get_logger(__name__)

FIFO_ORDER = "date ASC, created_at ASC, id ASC"
NEWEST_FIRST = "date DESC, created_at DESC, id DESC"

_MOVEMENT_COLUMNS = (
    "type", "date", "material_id", "quantity", "unit_price", "owner_id", "user_id",
    "notes", "cost_center_id", "origin_type", "supplier_id", "return_employee_id",
    "return_third_party_id", "destination_type", "destination_employee_id",
    "destination_third_party_id", "exit_transaction_id", "purpose", "is_return",
    "created_at",
)

_VIEW_QUERY = """
    SELECT m.*,
           mat.name AS material_name,
           mat.unit AS material_unit,
           mat.category_id AS material_category_id,
           cat.name AS category_name,
           COALESCE(s.name, re.name, rt.name, de.name, dt.name) AS party_name,
           cc.name AS cost_center_name
    FROM movements m
    JOIN materials mat ON mat.id = m.material_id
    LEFT JOIN categories cat ON cat.id = mat.category_id
    LEFT JOIN suppliers s ON s.id = m.supplier_id
    LEFT JOIN employees re ON re.id = m.return_employee_id
    LEFT JOIN third_parties rt ON rt.id = m.return_third_party_id
    LEFT JOIN employees de ON de.id = m.destination_employee_id
    LEFT JOIN third_parties dt ON dt.id = m.destination_third_party_id
    LEFT JOIN cost_centers cc ON cc.id = m.cost_center_id
"""


def _utcnow() -> str:
    return datetime.now(UTC).isoformat()


def _parse_timestamp(value: str | None) -> datetime:
    if value:
        try:
            parsed = datetime.fromisoformat(value)
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
        except (ValueError, TypeError):
            pass
    return datetime.now(UTC)


def _parse_decimal(value: str | None, movement_id: int | None = None) -> Decimal:
    """
    Parse a stored money column.

    Raises:
        DatabaseError: If the column holds something that is not a number
    """
    if value is None:
        return Decimal("0")
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        logger.warning("invalid_decimal_in_ledger", movement_id=movement_id, value=value)
        raise DatabaseError("read movement", f"unparseable unit_price {value!r}") from e


class SQLiteLedgerStore(ILedgerStore):
    """SQLite implementation of ledger storage."""

    async def get_snapshot(self, material_id: int, scope: Scope) -> LedgerSnapshot | None:
        """Read the version first so a concurrent write always shows as stale."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT owner_id, stock_version, current_stock FROM materials WHERE id = ?",
                (material_id,),
            )
            row = await cursor.fetchone()
            if row is None or not scope.allows(row["owner_id"]):
                return None

            query, params = self._material_rows_query(material_id, scope)
            cursor = await conn.execute(f"{query} ORDER BY {FIFO_ORDER}", params)
            rows = await cursor.fetchall()
            return LedgerSnapshot(
                material_id=material_id,
                stock_version=row["stock_version"],
                current_stock=row["current_stock"],
                movements=[self._row_to_movement(r) for r in rows],
            )

    @staticmethod
    def _material_rows_query(material_id: int, scope: Scope) -> tuple[str, list]:
        """Rows of one material, restricted to the scope's owner when it has one."""
        query = "SELECT * FROM movements WHERE material_id = ?"
        params: list = [material_id]
        if scope.owner_id is not None:
            query += " AND owner_id = ?"
            params.append(scope.owner_id)
        return query, params

    async def list_material_movements(
        self,
        material_id: int,
        scope: Scope,
        movement_type: MovementType | None = None,
    ) -> list[Movement]:
        """All rows of a material in consumption order."""
        query, params = self._material_rows_query(material_id, scope)
        if movement_type is not None:
            query += " AND type = ?"
            params.append(movement_type.value)
        query += f" ORDER BY {FIFO_ORDER}"

        async with get_connection() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()
            return [self._row_to_movement(row) for row in rows]

    async def get_movement(self, movement_id: int, scope: Scope) -> Movement | None:
        """Get a ledger row by ID."""
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM movements WHERE id = ?", (movement_id,))
            row = await cursor.fetchone()
            if row is None or not scope.allows(row["owner_id"]):
                return None
            return self._row_to_movement(row)

    async def list_movements(
        self,
        scope: Scope,
        movement_type: MovementType | None = None,
        material_id: int | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Movement]:
        """List ledger rows with filters, newest first."""
        conditions: list[str] = []
        params: list = []
        if scope.owner_id is not None:
            conditions.append("owner_id = ?")
            params.append(scope.owner_id)
        if movement_type is not None:
            conditions.append("type = ?")
            params.append(movement_type.value)
        if material_id is not None:
            conditions.append("material_id = ?")
            params.append(material_id)
        if start_date is not None:
            conditions.append("date >= ?")
            params.append(start_date.isoformat())
        if end_date is not None:
            conditions.append("date <= ?")
            params.append(end_date.isoformat())

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        params.extend([limit, offset])

        async with get_connection() as conn:
            cursor = await conn.execute(
                f"SELECT * FROM movements {where} ORDER BY {NEWEST_FIRST} LIMIT ? OFFSET ?",
                params,
            )
            rows = await cursor.fetchall()
            return [self._row_to_movement(row) for row in rows]

    async def record_entries(self, movements: list[Movement]) -> list[Movement]:
        """Insert entry rows and bump each material's stock in one transaction."""
        saved: list[Movement] = []
        async with get_transaction() as conn:
            for movement in movements:
                movement = await self._insert_movement(conn, movement)
                saved.append(movement)
                now = _utcnow()

                if movement.kind == MovementKind.SUPPLIER_ENTRY:
                    await conn.execute(
                        """
                        UPDATE materials SET
                            current_stock = current_stock + ?,
                            stock_version = stock_version + 1,
                            unit_price = ?,
                            last_supplier_id = COALESCE(?, last_supplier_id),
                            updated_at = ?
                        WHERE id = ?
                        """,
                        (
                            movement.quantity,
                            str(movement.unit_price),
                            movement.supplier_id,
                            now,
                            movement.material_id,
                        ),
                    )
                else:
                    await conn.execute(
                        """
                        UPDATE materials SET
                            current_stock = current_stock + ?,
                            stock_version = stock_version + 1,
                            updated_at = ?
                        WHERE id = ?
                        """,
                        (movement.quantity, now, movement.material_id),
                    )

        logger.info(
            "entries_recorded",
            count=len(saved),
            movement_ids=[m.id for m in saved],
            quantity=sum(m.quantity for m in saved),
        )
        return saved

    async def record_exit(
        self,
        transaction: ExitTransaction,
        lines: list[Movement],
        expected_versions: dict[int, int],
    ) -> ExitTransaction:
        """Insert exit lines under the write lock, after checking versions."""
        async with get_immediate_transaction() as conn:
            for material_id, expected in expected_versions.items():
                cursor = await conn.execute(
                    "SELECT stock_version FROM materials WHERE id = ?", (material_id,)
                )
                row = await cursor.fetchone()
                actual = row["stock_version"] if row else None
                if actual != expected:
                    raise StaleStockVersionError(material_id, expected, actual)

            transaction = transaction.model_copy()
            if transaction.id is None:
                cursor = await conn.execute(
                    """
                    INSERT INTO exit_transactions (
                        date, destination_type, destination_employee_id,
                        destination_third_party_id, cost_center_id, owner_id,
                        user_id, notes, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        transaction.date.isoformat(),
                        transaction.destination_type.value,
                        transaction.destination_employee_id,
                        transaction.destination_third_party_id,
                        transaction.cost_center_id,
                        transaction.owner_id,
                        transaction.user_id,
                        transaction.notes,
                        transaction.created_at.isoformat(),
                    ),
                )
                transaction.id = cursor.lastrowid

            saved: list[Movement] = []
            taken: dict[int, int] = defaultdict(int)
            for line in lines:
                line = line.model_copy(update={"exit_transaction_id": transaction.id})
                saved.append(await self._insert_movement(conn, line))
                taken[line.material_id] += line.quantity

            now = _utcnow()
            for material_id, quantity in taken.items():
                await conn.execute(
                    """
                    UPDATE materials SET
                        current_stock = MAX(current_stock - ?, 0),
                        stock_version = stock_version + 1,
                        updated_at = ?
                    WHERE id = ?
                    """,
                    (quantity, now, material_id),
                )

        transaction.lines = saved
        logger.info(
            "exit_recorded",
            exit_transaction_id=transaction.id,
            lines=len(saved),
            materials=list(taken),
        )
        return transaction

    async def get_exit_transaction(
        self, transaction_id: int, scope: Scope
    ) -> ExitTransaction | None:
        """Get an exit transaction with its lines."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM exit_transactions WHERE id = ?", (transaction_id,)
            )
            row = await cursor.fetchone()
            if row is None or not scope.allows(row["owner_id"]):
                return None

            cursor = await conn.execute(
                "SELECT * FROM movements WHERE exit_transaction_id = ? ORDER BY id",
                (transaction_id,),
            )
            lines = [self._row_to_movement(r) for r in await cursor.fetchall()]
            return self._row_to_exit_transaction(row, lines)

    async def delete_movement(self, movement_id: int) -> Movement | None:
        """Delete one row, undoing its effect on the cached stock."""
        async with get_transaction() as conn:
            cursor = await conn.execute("SELECT * FROM movements WHERE id = ?", (movement_id,))
            row = await cursor.fetchone()
            if row is None:
                return None

            movement = self._row_to_movement(row)
            await conn.execute("DELETE FROM movements WHERE id = ?", (movement_id,))
            await self._undo_stock(conn, {movement.material_id: movement.signed_quantity})

            if movement.exit_transaction_id is not None:
                # Drop the header once its last line is gone
                await conn.execute(
                    """
                    DELETE FROM exit_transactions
                    WHERE id = ?
                      AND NOT EXISTS (SELECT 1 FROM movements WHERE exit_transaction_id = ?)
                    """,
                    (movement.exit_transaction_id, movement.exit_transaction_id),
                )

        logger.info(
            "movement_deleted",
            movement_id=movement_id,
            material_id=movement.material_id,
            kind=movement.kind.value,
        )
        return movement

    async def delete_exit_transaction(self, transaction_id: int) -> list[Movement]:
        """Delete an exit transaction and its lines atomically."""
        async with get_transaction() as conn:
            cursor = await conn.execute(
                "SELECT * FROM movements WHERE exit_transaction_id = ? ORDER BY id",
                (transaction_id,),
            )
            lines = [self._row_to_movement(r) for r in await cursor.fetchall()]

            effects: dict[int, int] = defaultdict(int)
            for line in lines:
                effects[line.material_id] += line.signed_quantity

            await conn.execute(
                "DELETE FROM movements WHERE exit_transaction_id = ?", (transaction_id,)
            )
            await conn.execute("DELETE FROM exit_transactions WHERE id = ?", (transaction_id,))
            await self._undo_stock(conn, effects)

        logger.info(
            "exit_transaction_deleted",
            exit_transaction_id=transaction_id,
            lines=len(lines),
        )
        return lines

    async def query_views(
        self, filters: MovementReportFilter, scope: Scope
    ) -> list[MovementView]:
        """Rows joined with display names, newest first."""
        conditions: list[str] = []
        params: list = []
        if scope.owner_id is not None:
            conditions.append("m.owner_id = ?")
            params.append(scope.owner_id)
        if filters.start_date is not None:
            conditions.append("m.date >= ?")
            params.append(filters.start_date.isoformat())
        if filters.end_date is not None:
            conditions.append("m.date <= ?")
            params.append(filters.end_date.isoformat())
        if filters.cost_center_id is not None:
            conditions.append("m.cost_center_id = ?")
            params.append(filters.cost_center_id)
        if filters.supplier_id is not None:
            conditions.append("m.supplier_id = ?")
            params.append(filters.supplier_id)
        if filters.material_id is not None:
            conditions.append("m.material_id = ?")
            params.append(filters.material_id)
        if filters.category_id is not None:
            conditions.append("mat.category_id = ?")
            params.append(filters.category_id)
        if filters.employee_id is not None:
            conditions.append("(m.return_employee_id = ? OR m.destination_employee_id = ?)")
            params.extend([filters.employee_id, filters.employee_id])

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        order = "m.date DESC, m.created_at DESC, m.id DESC"

        async with get_connection() as conn:
            cursor = await conn.execute(f"{_VIEW_QUERY} {where} ORDER BY {order}", params)
            rows = await cursor.fetchall()
            return [
                MovementView(
                    movement=self._row_to_movement(row),
                    material_name=row["material_name"],
                    unit=row["material_unit"] or "un",
                    category_id=row["material_category_id"],
                    category_name=row["category_name"],
                    party_name=row["party_name"],
                    cost_center_name=row["cost_center_name"],
                )
                for row in rows
            ]

    async def count_by_type_on(self, day: date, scope: Scope) -> dict[MovementType, int]:
        """Row counts per type for one business date."""
        query = "SELECT type, COUNT(*) AS total FROM movements WHERE date = ?"
        params: list = [day.isoformat()]
        if scope.owner_id is not None:
            query += " AND owner_id = ?"
            params.append(scope.owner_id)
        query += " GROUP BY type"

        async with get_connection() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()
            return {MovementType(row["type"]): row["total"] for row in rows}

    async def _insert_movement(self, conn: aiosqlite.Connection, movement: Movement) -> Movement:
        values = (
            movement.type.value,
            movement.date.isoformat(),
            movement.material_id,
            movement.quantity,
            str(movement.unit_price),
            movement.owner_id,
            movement.user_id,
            movement.notes,
            movement.cost_center_id,
            movement.origin_type.value if movement.origin_type else None,
            movement.supplier_id,
            movement.return_employee_id,
            movement.return_third_party_id,
            movement.destination_type.value if movement.destination_type else None,
            movement.destination_employee_id,
            movement.destination_third_party_id,
            movement.exit_transaction_id,
            movement.purpose,
            int(movement.is_return),
            movement.created_at.isoformat(),
        )
        placeholders = ", ".join("?" for _ in _MOVEMENT_COLUMNS)
        cursor = await conn.execute(
            f"INSERT INTO movements ({', '.join(_MOVEMENT_COLUMNS)}) VALUES ({placeholders})",
            values,
        )
        movement.id = cursor.lastrowid
        return movement

    @staticmethod
    async def _undo_stock(conn: aiosqlite.Connection, effects: dict[int, int]) -> None:
        """Reverse signed stock effects of deleted rows and bump versions."""
        now = _utcnow()
        for material_id, signed in effects.items():
            await conn.execute(
                """
                UPDATE materials SET
                    current_stock = MAX(current_stock - ?, 0),
                    stock_version = stock_version + 1,
                    updated_at = ?
                WHERE id = ?
                """,
                (signed, now, material_id),
            )

    @staticmethod
    def _row_to_movement(row: aiosqlite.Row) -> Movement:
        """Convert a database row to a Movement entity."""
        try:
            movement_date = date.fromisoformat(row["date"])
        except (ValueError, TypeError):
            movement_date = _parse_timestamp(row["date"]).date()

        return Movement(
            id=row["id"],
            type=MovementType(row["type"]),
            date=movement_date,
            material_id=row["material_id"],
            quantity=row["quantity"],
            unit_price=_parse_decimal(row["unit_price"], row["id"]),
            owner_id=row["owner_id"],
            user_id=row["user_id"],
            notes=row["notes"],
            cost_center_id=row["cost_center_id"],
            origin_type=OriginType(row["origin_type"]) if row["origin_type"] else None,
            supplier_id=row["supplier_id"],
            return_employee_id=row["return_employee_id"],
            return_third_party_id=row["return_third_party_id"],
            destination_type=(
                DestinationType(row["destination_type"]) if row["destination_type"] else None
            ),
            destination_employee_id=row["destination_employee_id"],
            destination_third_party_id=row["destination_third_party_id"],
            exit_transaction_id=row["exit_transaction_id"],
            purpose=row["purpose"],
            is_return=bool(row["is_return"]),
            created_at=_parse_timestamp(row["created_at"]),
        )

    @staticmethod
    def _row_to_exit_transaction(row: aiosqlite.Row, lines: list[Movement]) -> ExitTransaction:
        """Convert a database row to an ExitTransaction entity."""
        return ExitTransaction(
            id=row["id"],
            date=date.fromisoformat(row["date"]),
            destination_type=DestinationType(row["destination_type"]),
            destination_employee_id=row["destination_employee_id"],
            destination_third_party_id=row["destination_third_party_id"],
            cost_center_id=row["cost_center_id"],
            owner_id=row["owner_id"],
            user_id=row["user_id"],
            notes=row["notes"],
            lines=lines,
            created_at=_parse_timestamp(row["created_at"]),
        )
