"""
SQLite implementation of reference data storage.

One generic store serves every reference table; columns are taken from the
pydantic model registered for each kind.
"""

from datetime import UTC, datetime
from decimal import Decimal

import aiosqlite

from warehouse.config import get_logger
from warehouse.core.entities.reference import (
    REFERENCE_MODELS,
    ReferenceEntity,
    ReferenceKind,
)
from warehouse.core.entities.tenancy import Scope
from warehouse.core.exceptions import DuplicateCodeError
from warehouse.core.interfaces.reference_store import IReferenceStore
from warehouse.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)


def _columns(kind: ReferenceKind) -> list[str]:
    return [name for name in REFERENCE_MODELS[kind].model_fields if name != "id"]


def _to_db(value):
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class SQLiteReferenceStore(IReferenceStore):
    """SQLite implementation of reference data storage."""

    async def create(self, kind: ReferenceKind, entity: ReferenceEntity) -> ReferenceEntity:
        """Insert a reference row."""
        entity.created_at = datetime.now(UTC)
        columns = _columns(kind)
        values = [_to_db(getattr(entity, c)) for c in columns]

        try:
            async with get_transaction() as conn:
                cursor = await conn.execute(
                    f"INSERT INTO {kind.value} ({', '.join(columns)}) "
                    f"VALUES ({', '.join('?' for _ in columns)})",
                    values,
                )
                entity.id = cursor.lastrowid
        except aiosqlite.IntegrityError as e:
            raise DuplicateCodeError(kind.label, getattr(entity, "code", "")) from e

        logger.info(
            "reference_created",
            kind=kind.label,
            entity_id=entity.id,
            owner_id=entity.owner_id,
        )
        return entity

    async def get(
        self, kind: ReferenceKind, entity_id: int, scope: Scope
    ) -> ReferenceEntity | None:
        """Get one row by ID."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"SELECT * FROM {kind.value} WHERE id = ?", (entity_id,)
            )
            row = await cursor.fetchone()
            if row is None or not scope.allows(row["owner_id"]):
                return None
            return self._row_to_entity(kind, row)

    async def list(
        self,
        kind: ReferenceKind,
        scope: Scope,
        active_only: bool = False,
        search: str | None = None,
    ) -> list[ReferenceEntity]:
        """List rows ordered by name."""
        conditions: list[str] = []
        params: list = []
        if scope.owner_id is not None:
            conditions.append("owner_id = ?")
            params.append(scope.owner_id)
        if active_only:
            conditions.append("is_active = 1")
        if search:
            if kind == ReferenceKind.COST_CENTER:
                conditions.append("(name LIKE ? OR code LIKE ?)")
                params.extend([f"%{search}%", f"%{search}%"])
            else:
                conditions.append("name LIKE ?")
                params.append(f"%{search}%")

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        async with get_connection() as conn:
            cursor = await conn.execute(
                f"SELECT * FROM {kind.value} {where} ORDER BY name, id", params
            )
            rows = await cursor.fetchall()
            return [self._row_to_entity(kind, row) for row in rows]

    async def update(self, kind: ReferenceKind, entity: ReferenceEntity) -> ReferenceEntity:
        """Update every column except id, owner and creation time."""
        columns = [c for c in _columns(kind) if c not in ("owner_id", "created_at")]
        values = [_to_db(getattr(entity, c)) for c in columns]

        try:
            async with get_transaction() as conn:
                await conn.execute(
                    f"UPDATE {kind.value} SET {', '.join(f'{c} = ?' for c in columns)} "
                    "WHERE id = ?",
                    [*values, entity.id],
                )
        except aiosqlite.IntegrityError as e:
            raise DuplicateCodeError(kind.label, getattr(entity, "code", "")) from e

        logger.info("reference_updated", kind=kind.label, entity_id=entity.id)
        return entity

    async def delete(self, kind: ReferenceKind, entity_id: int) -> bool:
        """Delete a row."""
        async with get_transaction() as conn:
            cursor = await conn.execute(f"DELETE FROM {kind.value} WHERE id = ?", (entity_id,))
            deleted = cursor.rowcount > 0
        if deleted:
            logger.info("reference_deleted", kind=kind.label, entity_id=entity_id)
        return deleted

    async def find_cost_center_by_code(self, code: str, owner_id: int) -> ReferenceEntity | None:
        """Cost center with the given code inside one tenant."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT * FROM cost_centers WHERE code = ? AND owner_id = ?",
                (code, owner_id),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_entity(ReferenceKind.COST_CENTER, row)

    @staticmethod
    def _row_to_entity(kind: ReferenceKind, row: aiosqlite.Row) -> ReferenceEntity:
        """Convert a database row to the kind's model; pydantic coerces the types."""
        data = {key: row[key] for key in row.keys()}
        data["is_active"] = bool(data.get("is_active", 1))
        created_at = data.get("created_at")
        if created_at:
            try:
                parsed = datetime.fromisoformat(created_at)
                data["created_at"] = parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
            except (ValueError, TypeError):
                data.pop("created_at")
        else:
            data.pop("created_at", None)
        return REFERENCE_MODELS[kind].model_validate(data)
