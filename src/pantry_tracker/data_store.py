"""Data persistence for Pantry Tracker.

This module provides data persistence with support for JSON (default) or SQLite backends.
Use create_data_store() to get the appropriate backend based on configuration.
"""

import json
import logging
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from pydantic import ValidationError

from .models import PricePoint, Product, PurchaseRecord

logger = logging.getLogger(__name__)


class BackendType(str, Enum):
    """Data storage backend types."""

    JSON = "json"
    SQLITE = "sqlite"


class StoreError(Exception):
    """Raised when the record store cannot read or write."""


class RecordStore(Protocol):
    """Protocol defining the record store interface."""

    def list_products(self) -> list[Product]: ...
    def upsert_product(self, product: Product) -> None: ...
    def delete_product(self, product_id: str) -> None: ...
    def list_manual_shopping_ids(self) -> set[str]: ...
    def add_manual_shopping_id(self, product_id: str) -> None: ...
    def remove_manual_shopping_id(self, product_id: str) -> None: ...
    def clear_manual_shopping_ids(self) -> None: ...
    def append_purchase_record(self, record: PurchaseRecord) -> None: ...
    def list_purchase_history(self) -> list[PurchaseRecord]: ...
    def append_price_history(self, product_id: str, price: float, on: date) -> None: ...
    def load_dismissed_notifications(self) -> set[str]: ...
    def save_dismissed_notifications(self, ids: set[str]) -> None: ...


class JSONEncoder(json.JSONEncoder):
    """Custom JSON encoder for our data types."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, date):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


class DataStore:
    """Manages JSON file persistence for pantry data."""

    def __init__(self, data_dir: Path | None = None):
        """Initialize data store.

        Args:
            data_dir: Directory for data files. Defaults to ./data
        """
        self.data_dir = data_dir or Path.cwd() / "data"
        self._ensure_directories()

    def _ensure_directories(self) -> None:
        """Create necessary directories if they don't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _products_path(self) -> Path:
        return self.data_dir / "products.json"

    def _shopping_list_path(self) -> Path:
        return self.data_dir / "shopping_list.json"

    def _purchase_history_path(self) -> Path:
        return self.data_dir / "purchase_history.json"

    def _dismissed_path(self) -> Path:
        return self.data_dir / "dismissed_notifications.json"

    def _read(self, path: Path, default: Any) -> Any:
        if not path.exists():
            return default
        try:
            with open(path) as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StoreError(f"Could not read {path.name}: {e}") from e

    def _write(self, path: Path, data: Any) -> None:
        try:
            with open(path, "w") as f:
                json.dump(data, f, cls=JSONEncoder, indent=2)
        except OSError as e:
            raise StoreError(f"Could not write {path.name}: {e}") from e

    # --- Product Operations ---

    def list_products(self) -> list[Product]:
        """Load all products sorted by name.

        Returns:
            List of products, empty if file doesn't exist
        """
        data = self._read(self._products_path(), [])
        try:
            products = [Product(**p) for p in data]
        except ValidationError as e:
            raise StoreError(f"Malformed product record: {e}") from e
        return sorted(products, key=lambda p: p.name.lower())

    def _save_products(self, products: list[Product]) -> None:
        self._write(self._products_path(), [p.model_dump() for p in products])

    def upsert_product(self, product: Product) -> None:
        """Insert a product or replace the one with the same id.

        The stored price history of an existing product is kept; use
        append_price_history to extend it.

        Args:
            product: Product to save
        """
        products = self.list_products()
        for i, existing in enumerate(products):
            if existing.id == product.id:
                products[i] = product.model_copy(update={"price_history": existing.price_history})
                break
        else:
            products.append(product)
        self._save_products(products)

    def delete_product(self, product_id: str) -> None:
        """Delete a product. Unknown ids are ignored."""
        products = self.list_products()
        remaining = [p for p in products if p.id != product_id]
        if len(remaining) != len(products):
            self._save_products(remaining)

    def append_price_history(self, product_id: str, price: float, on: date) -> None:
        """Append a price snapshot to a product's history.

        Args:
            product_id: Product to update
            price: Unit price
            on: Date of the snapshot
        """
        products = self.list_products()
        for product in products:
            if product.id == product_id:
                product.price_history.append(PricePoint(price=price, date=on))
                self._save_products(products)
                return
        logger.debug("Price history skipped for missing product %s", product_id)

    # --- Shopping List Operations ---

    def list_manual_shopping_ids(self) -> set[str]:
        return set(self._read(self._shopping_list_path(), []))

    def _save_manual_ids(self, ids: list[str]) -> None:
        self._write(self._shopping_list_path(), ids)

    def add_manual_shopping_id(self, product_id: str) -> None:
        ids = self._read(self._shopping_list_path(), [])
        if product_id not in ids:
            ids.append(product_id)
            self._save_manual_ids(ids)

    def remove_manual_shopping_id(self, product_id: str) -> None:
        ids = self._read(self._shopping_list_path(), [])
        if product_id in ids:
            ids.remove(product_id)
            self._save_manual_ids(ids)

    def clear_manual_shopping_ids(self) -> None:
        self._save_manual_ids([])

    # --- Purchase History Operations ---

    def append_purchase_record(self, record: PurchaseRecord) -> None:
        """Append a purchase record to the history.

        Args:
            record: PurchaseRecord to save
        """
        history = self._read(self._purchase_history_path(), [])
        history.append(record.model_dump())
        self._write(self._purchase_history_path(), history)

    def list_purchase_history(self) -> list[PurchaseRecord]:
        """List all purchases, newest first."""
        data = self._read(self._purchase_history_path(), [])
        try:
            records = [PurchaseRecord(**r) for r in data]
        except ValidationError as e:
            raise StoreError(f"Malformed purchase record: {e}") from e
        return sorted(records, key=lambda r: r.date, reverse=True)

    # --- Notification Operations ---

    def load_dismissed_notifications(self) -> set[str]:
        return set(self._read(self._dismissed_path(), []))

    def save_dismissed_notifications(self, ids: set[str]) -> None:
        self._write(self._dismissed_path(), sorted(ids))


def create_data_store(
    backend: BackendType = BackendType.JSON,
    data_dir: Path | None = None,
    db_path: Path | None = None,
) -> RecordStore:
    """Create a data store with the specified backend.

    Args:
        backend: Which backend to use (json or sqlite)
        data_dir: Directory for data files (used by JSON backend, also used
                  as base path for SQLite if db_path not specified)
        db_path: Path to SQLite database file (only used by SQLite backend)

    Returns:
        A DataStore or SQLiteStore instance

    Example:
        # Use JSON backend (default)
        store = create_data_store()

        # Use SQLite with custom path
        store = create_data_store(
            BackendType.SQLITE,
            db_path=Path("./my_data/pantry.db")
        )
    """
    if backend == BackendType.SQLITE:
        from .sqlite_store import SQLiteStore

        if db_path is None and data_dir is not None:
            db_path = data_dir / "pantry.db"

        return SQLiteStore(db_path=db_path)
    else:
        return DataStore(data_dir=data_dir)
