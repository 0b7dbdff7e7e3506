"""Tests for inventory manager module."""

from datetime import date, timedelta

import pytest

from pantry_tracker.data_store import DataStore, StoreError
from pantry_tracker.inventory_manager import InventoryManager, ProductNotFoundError
from pantry_tracker.models import Category, Product, StockStatus
from pantry_tracker.stock import InvalidAmountError


class FailingWriteStore(DataStore):
    """DataStore whose product writes fail after setup."""

    fail = False

    def upsert_product(self, product):
        if self.fail:
            raise StoreError("disk full")
        super().upsert_product(product)

    def delete_product(self, product_id):
        if self.fail:
            raise StoreError("disk full")
        super().delete_product(product_id)


class TestSaveProduct:
    """Tests for creating and updating products."""

    def test_save_new(self, inventory_manager, data_store):
        """Saved products are written and loaded into memory."""
        saved = inventory_manager.save_product(Product(name="Rice", current_quantity=2))
        assert saved.name == "Rice"
        assert [p.name for p in data_store.list_products()] == ["Rice"]
        assert inventory_manager.find_product(saved.id) is not None

    def test_status_synced(self, inventory_manager):
        """Status is recomputed on save."""
        saved = inventory_manager.save_product(
            Product(name="Rice", current_quantity=0, status=StockStatus.NORMAL)
        )
        assert saved.status == StockStatus.CRITICAL

    def test_price_calculated(self, inventory_manager, cheese):
        """Weighed fractional items get their unit price."""
        saved = inventory_manager.save_product(cheese)
        assert saved.price_per_unit == 10.0

    def test_update_existing(self, stocked_manager):
        rice = stocked_manager.get_product("rice")
        stocked_manager.save_product(rice.model_copy(update={"min_quantity": 5}))
        assert stocked_manager.get_product("rice").status == StockStatus.WARNING
        assert len(stocked_manager.products) == 4


class TestGetProduct:
    """Tests for looking up products."""

    def test_found(self, stocked_manager):
        assert stocked_manager.get_product("milk").name == "Milk"

    def test_not_found(self, stocked_manager):
        with pytest.raises(ProductNotFoundError, match="ghost"):
            stocked_manager.get_product("ghost")
        assert stocked_manager.find_product("ghost") is None


class TestDeleteProduct:
    """Tests for deleting products."""

    def test_delete(self, stocked_manager, data_store):
        data_store.add_manual_shopping_id("rice")
        stocked_manager.refresh()

        removed = stocked_manager.delete_product("rice")

        assert removed.name == "Rice"
        assert stocked_manager.find_product("rice") is None
        assert "rice" not in stocked_manager.manual_ids
        assert "rice" not in {p.id for p in data_store.list_products()}
        assert data_store.list_manual_shopping_ids() == set()

    def test_delete_unknown(self, stocked_manager):
        assert stocked_manager.delete_product("ghost") is None
        assert len(stocked_manager.products) == 4

    def test_delete_failure_reloads(self, temp_data_dir):
        """A failed delete restores the stored state."""
        store = FailingWriteStore(data_dir=temp_data_dir)
        manager = InventoryManager(store)
        manager.save_product(Product(id="a", name="Apples"))
        store.fail = True

        with pytest.raises(StoreError):
            manager.delete_product("a")
        assert manager.find_product("a") is not None


class TestConsume:
    """Tests for recording consumption."""

    def test_whole(self, stocked_manager, data_store):
        """Consumption is applied in memory and written."""
        updated = stocked_manager.consume("rice")
        assert updated.current_quantity == 2
        assert stocked_manager.get_product("rice").current_quantity == 2
        stored = {p.id: p for p in data_store.list_products()}
        assert stored["rice"].current_quantity == 2

    def test_fractional(self, stocked_manager):
        updated = stocked_manager.consume("cheese", "2")
        assert updated.current_quantity == 3
        assert updated.content_per_unit == "3.000"

    def test_fractional_invalid_amount(self, stocked_manager):
        with pytest.raises(InvalidAmountError):
            stocked_manager.consume("cheese", 0)
        assert stocked_manager.get_product("cheese").current_quantity == 5

    def test_empty_fractional_unchanged(self, inventory_manager, cheese):
        saved = inventory_manager.save_product(cheese.model_copy(update={"current_quantity": 0}))
        assert inventory_manager.consume("cheese", 1) == saved

    def test_empty_whole_not_written(self, temp_data_dir):
        """Consuming a whole item at zero makes no store write."""
        store = FailingWriteStore(data_dir=temp_data_dir)
        manager = InventoryManager(store)
        manager.save_product(Product(id="a", name="Apples", current_quantity=0))
        store.fail = True

        updated = manager.consume("a")
        assert updated.current_quantity == 0
        assert updated.status == StockStatus.CRITICAL

    def test_unknown(self, stocked_manager):
        assert stocked_manager.consume("ghost") is None

    def test_failure_reloads(self, temp_data_dir):
        """A failed write is reconciled from the store and re-raised."""
        store = FailingWriteStore(data_dir=temp_data_dir)
        manager = InventoryManager(store)
        manager.save_product(Product(id="a", name="Apples", current_quantity=3))
        store.fail = True

        with pytest.raises(StoreError):
            manager.consume("a")
        assert manager.get_product("a").current_quantity == 3


class TestQueries:
    """Tests for filtering the catalog."""

    def test_by_category(self, stocked_manager):
        products = stocked_manager.get_products(category=Category.DAIRY)
        assert [p.name for p in products] == ["Cheese", "Milk"]

    def test_by_category_value(self, stocked_manager):
        products = stocked_manager.get_products(category="Personal Care")
        assert [p.name for p in products] == ["Soap"]

    def test_by_search(self, stocked_manager):
        assert [p.name for p in stocked_manager.get_products(search="IL")] == ["Milk"]

    def test_by_status(self, stocked_manager):
        products = stocked_manager.get_products(status=StockStatus.CRITICAL)
        assert [p.name for p in products] == ["Soap"]

    def test_expiring_soon(self, inventory_manager):
        """Products expiring within the window, soonest first."""
        today = date.today()
        inventory_manager.save_product(
            Product(name="Yogurt", expiration_date=today + timedelta(days=2))
        )
        inventory_manager.save_product(Product(name="Ham", expiration_date=today))
        inventory_manager.save_product(
            Product(name="Jam", expiration_date=today + timedelta(days=30))
        )
        inventory_manager.save_product(Product(name="Salt"))

        expiring = inventory_manager.get_expiring_soon(days=3)
        assert [p.name for p in expiring] == ["Ham", "Yogurt"]
