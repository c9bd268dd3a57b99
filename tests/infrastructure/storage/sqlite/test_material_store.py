"""Tests for SQLiteMaterialStore."""

from decimal import Decimal

from warehouse.core.entities.material import Material
from warehouse.core.entities.reference import Category, ReferenceKind


class TestMaterialStore:
    async def test_create_and_get(self, material_store, scope):
        created = await material_store.create_material(
            Material(name="Luva", unit="par", unit_price=Decimal("4.50"), current_stock=9)
        )

        fetched = await material_store.get_material(created.id, scope)

        assert fetched.name == "Luva"
        assert fetched.unit == "par"
        assert fetched.unit_price == Decimal("4.50")
        # Stock only ever comes from the ledger
        assert fetched.current_stock == 0
        assert fetched.stock_version == 0

    async def test_tenant_isolation(self, material_store, scope, global_scope):
        other = await material_store.create_material(Material(name="Bota", owner_id=2))

        assert await material_store.get_material(other.id, scope) is None
        assert await material_store.get_material(other.id, global_scope) is not None
        assert await material_store.list_materials(scope) == []

    async def test_list_filters_and_pages(self, material_store, reference_store, scope):
        category = await reference_store.create(ReferenceKind.CATEGORY, Category(name="EPI"))
        for name in ("Capacete", "Bota", "Luva"):
            await material_store.create_material(
                Material(name=name, category_id=category.id if name != "Bota" else None)
            )

        names = [m.name for m in await material_store.list_materials(scope)]
        in_category = await material_store.list_materials(scope, category_id=category.id)
        searched = await material_store.list_materials(scope, search="uva")
        page = await material_store.list_materials(scope, limit=1, offset=1)

        assert names == ["Bota", "Capacete", "Luva"]
        assert len(in_category) == 2
        assert [m.name for m in searched] == ["Luva"]
        assert [m.name for m in page] == ["Capacete"]

    async def test_update_leaves_stock_alone(self, material_store, scope):
        material = await material_store.create_material(Material(name="Luva"))
        await material_store.set_current_stock(material.id, 5)

        material.name = "Luva nitrílica"
        material.current_stock = 99
        await material_store.update_material(material)

        fetched = await material_store.get_material(material.id, scope)
        assert fetched.name == "Luva nitrílica"
        assert fetched.current_stock == 5

    async def test_set_current_stock_clamps_and_keeps_version(self, material_store, scope):
        material = await material_store.create_material(Material(name="Luva"))

        await material_store.set_current_stock(material.id, -4)

        fetched = await material_store.get_material(material.id, scope)
        assert fetched.current_stock == 0
        assert fetched.stock_version == 0

    async def test_set_current_stock_with_stale_version_writes_nothing(
        self, material_store, scope
    ):
        material = await material_store.create_material(Material(name="Luva"))

        assert await material_store.set_current_stock(material.id, 7, expected_version=3) is False
        assert (await material_store.get_material(material.id, scope)).current_stock == 0

        assert await material_store.set_current_stock(material.id, 7, expected_version=0) is True
        assert (await material_store.get_material(material.id, scope)).current_stock == 7

    async def test_low_stock(self, material_store, scope):
        low = await material_store.create_material(Material(name="Luva", minimum_stock=3))
        ok = await material_store.create_material(Material(name="Bota", minimum_stock=0))
        await material_store.set_current_stock(ok.id, 10)

        assert [m.id for m in await material_store.list_low_stock(scope)] == [low.id]

    async def test_delete_and_count(self, material_store, scope):
        material = await material_store.create_material(Material(name="Luva"))

        assert await material_store.count_movements(material.id) == 0
        assert await material_store.delete_material(material.id) is True
        assert await material_store.delete_material(material.id) is False
        assert await material_store.get_material(material.id, scope) is None

    async def test_category_delete_detaches_material(self, material_store, reference_store, scope):
        category = await reference_store.create(ReferenceKind.CATEGORY, Category(name="EPI"))
        material = await material_store.create_material(
            Material(name="Luva", category_id=category.id)
        )

        await reference_store.delete(ReferenceKind.CATEGORY, category.id)

        assert (await material_store.get_material(material.id, scope)).category_id is None
