"""Tests for SQLite data store."""

import sqlite3
from datetime import date, datetime

import pytest

from pantry_tracker.data_store import StoreError
from pantry_tracker.models import (
    Category,
    ConsumptionType,
    MeasurementUnit,
    PricePoint,
    Product,
    PurchaseItem,
    PurchaseRecord,
    StockStatus,
)
from pantry_tracker.sqlite_store import SQLiteStore


@pytest.fixture
def sqlite_store(tmp_path):
    """Create a SQLite store in a temporary directory."""
    return SQLiteStore(db_path=tmp_path / "test.db")


class TestInit:
    """Tests for schema creation."""

    def test_creates_tables(self, sqlite_store):
        conn = sqlite3.connect(sqlite_store.db_path)
        tables = {
            row[0]
            for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
        }
        conn.close()
        assert {
            "products",
            "price_history",
            "shopping_list",
            "purchase_history",
            "dismissed_notifications",
        } <= tables

    def test_reopen(self, sqlite_store):
        """Opening an existing database keeps its data."""
        sqlite_store.upsert_product(Product(id="a", name="Apples"))
        reopened = SQLiteStore(db_path=sqlite_store.db_path)
        assert [p.id for p in reopened.list_products()] == ["a"]


class TestProducts:
    """Tests for product persistence."""

    def test_roundtrip_all_fields(self, sqlite_store):
        product = Product(
            id="cheese",
            name="Cheese",
            category=Category.DAIRY,
            unit="Piece",
            content_per_unit="1.250",
            measurement_unit=MeasurementUnit.KG,
            current_quantity=2.5,
            min_quantity=1,
            price_per_unit=12.5,
            price_per_kg=10,
            is_essential=True,
            status=StockStatus.NORMAL,
            consumption_type=ConsumptionType.FRACTIONAL,
            expiration_date=date(2026, 4, 1),
            average_consumption=0.25,
            price_history=[PricePoint(price=12, date=date(2026, 2, 1))],
        )
        sqlite_store.upsert_product(product)
        assert sqlite_store.list_products() == [product]

    def test_sorted_case_insensitive(self, sqlite_store):
        sqlite_store.upsert_product(Product(id="b", name="beans"))
        sqlite_store.upsert_product(Product(id="a", name="Apples"))
        assert [p.name for p in sqlite_store.list_products()] == ["Apples", "beans"]

    def test_upsert_keeps_history(self, sqlite_store):
        product = Product(id="a", name="Apples")
        sqlite_store.upsert_product(product)
        sqlite_store.append_price_history("a", 2.0, date(2026, 3, 1))
        sqlite_store.append_price_history("a", 2.5, date(2026, 3, 9))
        sqlite_store.upsert_product(product.model_copy(update={"current_quantity": 3}))

        stored = sqlite_store.list_products()[0]
        assert stored.current_quantity == 3
        assert [p.price for p in stored.price_history] == [2.0, 2.5]

    def test_delete_cascades(self, sqlite_store):
        """Deleting a product drops its history and list entry."""
        sqlite_store.upsert_product(Product(id="a", name="Apples"))
        sqlite_store.append_price_history("a", 2.0, date(2026, 3, 1))
        sqlite_store.add_manual_shopping_id("a")

        sqlite_store.delete_product("a")

        assert sqlite_store.list_products() == []
        assert sqlite_store.list_manual_shopping_ids() == set()
        conn = sqlite3.connect(sqlite_store.db_path)
        count = conn.execute("SELECT COUNT(*) FROM price_history").fetchone()[0]
        conn.close()
        assert count == 0

    def test_history_for_missing_product_skipped(self, sqlite_store):
        sqlite_store.append_price_history("ghost", 1.0, date(2026, 3, 1))
        assert sqlite_store.list_products() == []


class TestShoppingAndHistory:
    """Tests for list membership, purchases and dismissals."""

    def test_manual_ids(self, sqlite_store):
        sqlite_store.add_manual_shopping_id("a")
        sqlite_store.add_manual_shopping_id("a")
        sqlite_store.add_manual_shopping_id("b")
        sqlite_store.remove_manual_shopping_id("b")
        assert sqlite_store.list_manual_shopping_ids() == {"a"}
        sqlite_store.clear_manual_shopping_ids()
        assert sqlite_store.list_manual_shopping_ids() == set()

    def test_purchase_history(self, sqlite_store):
        item = PurchaseItem(
            product_id="a",
            product_name="Apples",
            category=Category.PRODUCE,
            quantity=2,
            unit_price=1.5,
            total=3,
        )
        older = PurchaseRecord(date=datetime(2026, 3, 1, 9), items=[item], total_amount=3)
        newer = PurchaseRecord(date=datetime(2026, 3, 8, 9), items=[item], total_amount=3)
        sqlite_store.append_purchase_record(older)
        sqlite_store.append_purchase_record(newer)

        history = sqlite_store.list_purchase_history()
        assert [r.id for r in history] == [newer.id, older.id]
        assert history[1] == older

    def test_duplicate_purchase_id(self, sqlite_store):
        """Constraint failures surface as StoreError."""
        record = PurchaseRecord(total_amount=1)
        sqlite_store.append_purchase_record(record)
        with pytest.raises(StoreError):
            sqlite_store.append_purchase_record(record)

    def test_dismissed(self, sqlite_store):
        sqlite_store.save_dismissed_notifications({"low_a", "out_b"})
        sqlite_store.save_dismissed_notifications({"out_b"})
        assert sqlite_store.load_dismissed_notifications() == {"out_b"}
