"""SQLite-based data persistence for Pantry Tracker.

This module provides SQLite database storage as an alternative to JSON files.
It implements the same interface as DataStore for seamless switching.
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path

from .data_store import JSONEncoder, StoreError
from .models import PricePoint, Product, PurchaseItem, PurchaseRecord

logger = logging.getLogger(__name__)


def adapt_datetime(dt: datetime) -> str:
    """Adapt datetime to ISO string for SQLite."""
    return dt.isoformat()


def adapt_date(d: date) -> str:
    """Adapt date to ISO string for SQLite."""
    return d.isoformat()


# Register adapters
sqlite3.register_adapter(datetime, adapt_datetime)
sqlite3.register_adapter(date, adapt_date)


class SQLiteStore:
    """Manages SQLite database persistence for pantry data."""

    SCHEMA_VERSION = 1

    def __init__(self, db_path: Path | None = None):
        """Initialize SQLite store.

        Args:
            db_path: Path to the SQLite database file. Defaults to ./data/pantry.db
        """
        if db_path is None:
            db_path = Path.cwd() / "data" / "pantry.db"
        self.db_path = db_path
        self._ensure_directories()
        self._init_database()

    def _ensure_directories(self) -> None:
        """Create necessary directories if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def _get_connection(self):
        """Get a database connection with proper cleanup."""
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise StoreError(f"Could not open database: {e}") from e
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError(str(e)) from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_database(self) -> None:
        """Initialize database schema if not exists."""
        with self._get_connection() as conn:
            conn.executescript("""
                -- Schema version tracking
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY
                );

                -- Catalogued products
                CREATE TABLE IF NOT EXISTS products (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    category TEXT NOT NULL DEFAULT 'Other',
                    unit TEXT NOT NULL,
                    content_per_unit TEXT NOT NULL DEFAULT '1',
                    measurement_unit TEXT NOT NULL DEFAULT 'un',
                    current_quantity REAL NOT NULL DEFAULT 0,
                    min_quantity REAL NOT NULL DEFAULT 0,
                    price_per_unit REAL NOT NULL DEFAULT 0,
                    price_per_kg REAL,
                    is_essential INTEGER NOT NULL DEFAULT 0,
                    status TEXT NOT NULL,
                    consumption_type TEXT NOT NULL DEFAULT 'WHOLE',
                    image_url TEXT,
                    expiration_date TEXT,
                    average_consumption REAL NOT NULL DEFAULT 0
                );

                -- Price snapshots, in insertion order
                CREATE TABLE IF NOT EXISTS price_history (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    product_id TEXT NOT NULL REFERENCES products(id) ON DELETE CASCADE,
                    price REAL NOT NULL,
                    date TEXT NOT NULL
                );

                -- Manually added shopping list entries
                CREATE TABLE IF NOT EXISTS shopping_list (
                    product_id TEXT PRIMARY KEY,
                    added_at TEXT NOT NULL
                );

                -- Confirmed purchases
                CREATE TABLE IF NOT EXISTS purchase_history (
                    id TEXT PRIMARY KEY,
                    date TEXT NOT NULL,
                    total_amount REAL NOT NULL,
                    items TEXT NOT NULL
                );

                -- Dismissed notification ids
                CREATE TABLE IF NOT EXISTS dismissed_notifications (
                    id TEXT PRIMARY KEY
                );

                CREATE INDEX IF NOT EXISTS idx_price_history_product
                    ON price_history(product_id);
                CREATE INDEX IF NOT EXISTS idx_purchase_history_date
                    ON purchase_history(date);
            """)

            cursor = conn.execute("SELECT version FROM schema_version LIMIT 1")
            if cursor.fetchone() is None:
                conn.execute(
                    "INSERT INTO schema_version (version) VALUES (?)", (self.SCHEMA_VERSION,)
                )

    # --- Product Operations ---

    def list_products(self) -> list[Product]:
        """Load all products with their price history, sorted by name."""
        with self._get_connection() as conn:
            product_rows = conn.execute(
                "SELECT * FROM products ORDER BY name COLLATE NOCASE"
            ).fetchall()
            history_rows = conn.execute(
                "SELECT product_id, price, date FROM price_history ORDER BY id"
            ).fetchall()

        history: dict[str, list[PricePoint]] = {}
        for row in history_rows:
            history.setdefault(row["product_id"], []).append(
                PricePoint(price=row["price"], date=row["date"])
            )

        products = []
        for row in product_rows:
            data = dict(row)
            data["is_essential"] = bool(data["is_essential"])
            data["price_history"] = history.get(data["id"], [])
            products.append(Product(**data))
        return products

    def upsert_product(self, product: Product) -> None:
        """Insert a product or replace the one with the same id.

        The stored price history of an existing product is kept; use
        append_price_history to extend it.
        """
        with self._get_connection() as conn:
            is_new = (
                conn.execute("SELECT 1 FROM products WHERE id = ?", (product.id,)).fetchone()
                is None
            )
            conn.execute(
                """
                INSERT INTO products (
                    id, name, category, unit, content_per_unit, measurement_unit,
                    current_quantity, min_quantity, price_per_unit, price_per_kg,
                    is_essential, status, consumption_type, image_url,
                    expiration_date, average_consumption
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    category = excluded.category,
                    unit = excluded.unit,
                    content_per_unit = excluded.content_per_unit,
                    measurement_unit = excluded.measurement_unit,
                    current_quantity = excluded.current_quantity,
                    min_quantity = excluded.min_quantity,
                    price_per_unit = excluded.price_per_unit,
                    price_per_kg = excluded.price_per_kg,
                    is_essential = excluded.is_essential,
                    status = excluded.status,
                    consumption_type = excluded.consumption_type,
                    image_url = excluded.image_url,
                    expiration_date = excluded.expiration_date,
                    average_consumption = excluded.average_consumption
                """,
                (
                    product.id,
                    product.name,
                    product.category.value,
                    product.unit,
                    product.content_per_unit,
                    product.measurement_unit.value,
                    product.current_quantity,
                    product.min_quantity,
                    product.price_per_unit,
                    product.price_per_kg,
                    int(product.is_essential),
                    product.status.value,
                    product.consumption_type.value,
                    product.image_url,
                    product.expiration_date,
                    product.average_consumption,
                ),
            )
            if is_new:
                conn.executemany(
                    "INSERT INTO price_history (product_id, price, date) VALUES (?, ?, ?)",
                    [(product.id, p.price, p.date) for p in product.price_history],
                )

    def delete_product(self, product_id: str) -> None:
        """Delete a product and its history. Unknown ids are ignored."""
        with self._get_connection() as conn:
            conn.execute("DELETE FROM shopping_list WHERE product_id = ?", (product_id,))
            conn.execute("DELETE FROM products WHERE id = ?", (product_id,))

    def append_price_history(self, product_id: str, price: float, on: date) -> None:
        """Append a price snapshot to a product's history."""
        with self._get_connection() as conn:
            exists = conn.execute(
                "SELECT 1 FROM products WHERE id = ?", (product_id,)
            ).fetchone()
            if exists is None:
                logger.debug("Price history skipped for missing product %s", product_id)
                return
            conn.execute(
                "INSERT INTO price_history (product_id, price, date) VALUES (?, ?, ?)",
                (product_id, price, on),
            )

    # --- Shopping List Operations ---

    def list_manual_shopping_ids(self) -> set[str]:
        with self._get_connection() as conn:
            rows = conn.execute("SELECT product_id FROM shopping_list").fetchall()
        return {row["product_id"] for row in rows}

    def add_manual_shopping_id(self, product_id: str) -> None:
        with self._get_connection() as conn:
            conn.execute(
                "INSERT OR IGNORE INTO shopping_list (product_id, added_at) VALUES (?, ?)",
                (product_id, datetime.now()),
            )

    def remove_manual_shopping_id(self, product_id: str) -> None:
        with self._get_connection() as conn:
            conn.execute("DELETE FROM shopping_list WHERE product_id = ?", (product_id,))

    def clear_manual_shopping_ids(self) -> None:
        with self._get_connection() as conn:
            conn.execute("DELETE FROM shopping_list")

    # --- Purchase History Operations ---

    def append_purchase_record(self, record: PurchaseRecord) -> None:
        """Append a purchase record with its items stored as JSON."""
        items = json.dumps([i.model_dump() for i in record.items], cls=JSONEncoder)
        with self._get_connection() as conn:
            conn.execute(
                """
                INSERT INTO purchase_history (id, date, total_amount, items)
                VALUES (?, ?, ?, ?)
                """,
                (record.id, record.date, record.total_amount, items),
            )

    def list_purchase_history(self) -> list[PurchaseRecord]:
        """List all purchases, newest first."""
        with self._get_connection() as conn:
            rows = conn.execute("SELECT * FROM purchase_history ORDER BY date DESC").fetchall()

        return [
            PurchaseRecord(
                id=row["id"],
                date=datetime.fromisoformat(row["date"]),
                total_amount=row["total_amount"],
                items=[PurchaseItem(**i) for i in json.loads(row["items"])],
            )
            for row in rows
        ]

    # --- Notification Operations ---

    def load_dismissed_notifications(self) -> set[str]:
        with self._get_connection() as conn:
            rows = conn.execute("SELECT id FROM dismissed_notifications").fetchall()
        return {row["id"] for row in rows}

    def save_dismissed_notifications(self, ids: set[str]) -> None:
        with self._get_connection() as conn:
            conn.execute("DELETE FROM dismissed_notifications")
            conn.executemany(
                "INSERT INTO dismissed_notifications (id) VALUES (?)",
                [(i,) for i in sorted(ids)],
            )
