"""
SQLite implementation of material storage.

The cached stock counter and version token are owned by the ledger store and
the reconciler; descriptive updates here never write them.
"""

from datetime import UTC, datetime
from decimal import Decimal, InvalidOperation

import aiosqlite

from warehouse.config import get_logger
from warehouse.core.entities.material import Material
from warehouse.core.entities.tenancy import Scope
from warehouse.core.interfaces.material_store import IMaterialStore
from warehouse.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)


class SQLiteMaterialStore(IMaterialStore):
    """SQLite implementation of material storage."""

    async def create_material(self, material: Material) -> Material:
        """Create a new material record."""
        now = datetime.now(UTC)
        material.created_at = now
        material.updated_at = now
        async with get_transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO materials (
                    name, category_id, unit, description, current_stock,
                    minimum_stock, unit_price, last_supplier_id, owner_id,
                    stock_version, created_at, updated_at
                ) VALUES (?, ?, ?, ?, 0, ?, ?, ?, ?, 0, ?, ?)
                """,
                (
                    material.name,
                    material.category_id,
                    material.unit,
                    material.description,
                    material.minimum_stock,
                    str(material.unit_price) if material.unit_price is not None else None,
                    material.last_supplier_id,
                    material.owner_id,
                    material.created_at.isoformat(),
                    material.updated_at.isoformat(),
                ),
            )
            material.id = cursor.lastrowid
            material.current_stock = 0
            material.stock_version = 0
            logger.info(
                "material_created",
                material_id=material.id,
                name=material.name,
                owner_id=material.owner_id,
            )
            return material

    async def get_material(self, material_id: int, scope: Scope) -> Material | None:
        """Get material by ID."""
        async with get_connection() as conn:
            cursor = await conn.execute("SELECT * FROM materials WHERE id = ?", (material_id,))
            row = await cursor.fetchone()
            if row is None or not scope.allows(row["owner_id"]):
                return None
            return self._row_to_material(row)

    async def list_materials(
        self,
        scope: Scope,
        category_id: int | None = None,
        search: str | None = None,
        limit: int = 500,
        offset: int = 0,
    ) -> list[Material]:
        """List materials ordered by name."""
        conditions: list[str] = []
        params: list = []
        if scope.owner_id is not None:
            conditions.append("owner_id = ?")
            params.append(scope.owner_id)
        if category_id is not None:
            conditions.append("category_id = ?")
            params.append(category_id)
        if search:
            conditions.append("(name LIKE ? OR description LIKE ?)")
            pattern = f"%{search}%"
            params.extend([pattern, pattern])

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
        params.extend([limit, offset])

        async with get_connection() as conn:
            cursor = await conn.execute(
                f"SELECT * FROM materials {where} ORDER BY name, id LIMIT ? OFFSET ?",
                params,
            )
            rows = await cursor.fetchall()
            return [self._row_to_material(row) for row in rows]

    async def list_low_stock(self, scope: Scope) -> list[Material]:
        """Materials at or below their minimum stock."""
        query = "SELECT * FROM materials WHERE current_stock <= minimum_stock"
        params: list = []
        if scope.owner_id is not None:
            query += " AND owner_id = ?"
            params.append(scope.owner_id)
        query += " ORDER BY current_stock, name"

        async with get_connection() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()
            return [self._row_to_material(row) for row in rows]

    async def update_material(self, material: Material) -> Material:
        """Update descriptive fields."""
        material.updated_at = datetime.now(UTC)
        async with get_transaction() as conn:
            await conn.execute(
                """
                UPDATE materials SET
                    name = ?, category_id = ?, unit = ?, description = ?,
                    minimum_stock = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    material.name,
                    material.category_id,
                    material.unit,
                    material.description,
                    material.minimum_stock,
                    material.updated_at.isoformat(),
                    material.id,
                ),
            )
            logger.info("material_updated", material_id=material.id)
            return material

    async def delete_material(self, material_id: int) -> bool:
        """Delete a material."""
        async with get_transaction() as conn:
            cursor = await conn.execute("DELETE FROM materials WHERE id = ?", (material_id,))
            deleted = cursor.rowcount > 0
        if deleted:
            logger.info("material_deleted", material_id=material_id)
        return deleted

    async def set_current_stock(
        self, material_id: int, stock: int, expected_version: int | None = None
    ) -> bool:
        """Overwrite the cached stock counter, optionally guarded by stock_version."""
        query = "UPDATE materials SET current_stock = ?, updated_at = ? WHERE id = ?"
        params: list = [max(0, stock), datetime.now(UTC).isoformat(), material_id]
        if expected_version is not None:
            query += " AND stock_version = ?"
            params.append(expected_version)

        async with get_transaction() as conn:
            cursor = await conn.execute(query, params)
            updated = cursor.rowcount > 0
        if not updated and expected_version is not None:
            logger.debug(
                "stock_write_skipped_stale_version",
                material_id=material_id,
                expected_version=expected_version,
            )
        return updated

    async def count_movements(self, material_id: int) -> int:
        """Number of ledger rows for the material."""
        async with get_connection() as conn:
            cursor = await conn.execute(
                "SELECT COUNT(*) FROM movements WHERE material_id = ?", (material_id,)
            )
            row = await cursor.fetchone()
            return row[0] if row else 0

    @staticmethod
    def _row_to_material(row: aiosqlite.Row) -> Material:
        """Convert a database row to a Material entity."""
        unit_price = None
        if row["unit_price"] is not None:
            try:
                unit_price = Decimal(str(row["unit_price"]))
            except InvalidOperation:
                pass

        def _ts(value: str | None) -> datetime:
            if value:
                try:
                    parsed = datetime.fromisoformat(value)
                    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
                except (ValueError, TypeError):
                    pass
            return datetime.now(UTC)

        return Material(
            id=row["id"],
            name=row["name"],
            category_id=row["category_id"],
            unit=row["unit"] or "un",
            description=row["description"],
            current_stock=max(0, row["current_stock"] or 0),
            minimum_stock=row["minimum_stock"] or 0,
            unit_price=unit_price,
            last_supplier_id=row["last_supplier_id"],
            owner_id=row["owner_id"],
            stock_version=row["stock_version"],
            created_at=_ts(row["created_at"]),
            updated_at=_ts(row["updated_at"]),
        )
