"""Inventory management for Pantry Tracker."""

import logging
from datetime import date, timedelta

from .data_store import DataStore, RecordStore, StoreError
from .models import Category, Product, StockStatus
from .notifications import NotificationCenter
from .stock import consume, sync_status, sync_statuses
from .units import recalculate_price

logger = logging.getLogger(__name__)


class ProductNotFoundError(Exception):
    """Raised when a product is not found."""

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product with ID '{product_id}' not found")


class InventoryManager:
    """Holds the current product state and applies changes to the store.

    Changes are applied to memory first and then written. When a write
    fails the in-memory state is replaced by a fresh read from the store.
    """

    def __init__(self, data_store: RecordStore | None = None):
        self.data_store = data_store or DataStore()
        self.products: list[Product] = []
        self.manual_ids: set[str] = set()
        self.refresh()

    def refresh(self) -> None:
        """Reload products and manual list membership from the store."""
        self.products = sync_statuses(self.data_store.list_products())
        self.manual_ids = self.data_store.list_manual_shopping_ids()
        logger.debug(
            "Loaded %d products, %d manual list entries", len(self.products), len(self.manual_ids)
        )
        self._prune_dismissed()

    def _prune_dismissed(self) -> None:
        dismissed = self.data_store.load_dismissed_notifications()
        if not dismissed:
            return
        center = NotificationCenter(dismissed)
        stale = center.prune(self.products, self.manual_ids)
        if not stale:
            return
        try:
            self.data_store.save_dismissed_notifications(center.dismissed)
        except StoreError as e:
            logger.error("Error saving dismissed notifications: %s", e)
            return
        logger.debug("Cleared %d resolved notification dismissals", len(stale))

    def _reconcile(self, action: str, error: StoreError) -> None:
        logger.error("Error %s: %s", action, error)
        self.refresh()

    def find_product(self, product_id: str) -> Product | None:
        for product in self.products:
            if product.id == product_id:
                return product
        return None

    def get_product(self, product_id: str) -> Product:
        """Get a product by ID.

        Raises:
            ProductNotFoundError: If product not found
        """
        product = self.find_product(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def _replace(self, product: Product) -> None:
        for i, existing in enumerate(self.products):
            if existing.id == product.id:
                self.products[i] = product
                return
        self.products.append(product)

    def save_product(self, product: Product) -> Product:
        """Create or update a product.

        The automatic unit price and the stock status are applied before
        the product is written.

        Args:
            product: Product to save

        Returns:
            The saved product

        Raises:
            StoreError: If the write fails
        """
        product = sync_status(recalculate_price(product))
        try:
            self.data_store.upsert_product(product)
        except StoreError as e:
            logger.error("Error saving product %s: %s", product.name, e)
            raise
        self.refresh()
        return self.find_product(product.id) or product

    def delete_product(self, product_id: str) -> Product | None:
        """Delete a product.

        Returns:
            The removed product, or None if it was not present

        Raises:
            StoreError: If the write fails; state is reloaded first
        """
        product = self.find_product(product_id)
        if product is None:
            return None

        self.products = [p for p in self.products if p.id != product_id]
        self.manual_ids.discard(product_id)
        try:
            self.data_store.delete_product(product_id)
            self.data_store.remove_manual_shopping_id(product_id)
        except StoreError as e:
            self._reconcile("deleting product", e)
            raise
        return product

    def consume(self, product_id: str, amount: float | str = 1) -> Product | None:
        """Record consumption of a product.

        Args:
            product_id: Product consumed
            amount: Purchase units used, only read for fractional items

        Returns:
            The updated product, or None if the product is unknown

        Raises:
            InvalidAmountError: If a fractional amount is not positive
            StoreError: If the write fails; state is reloaded first
        """
        product = self.find_product(product_id)
        if product is None:
            return None

        updated = consume(product, amount)
        if updated is product:
            return product

        self._replace(updated)
        try:
            self.data_store.upsert_product(updated)
        except StoreError as e:
            self._reconcile("updating stock", e)
            raise

        logger.info(
            "Consumed %s: %g -> %g", updated.name, product.current_quantity, updated.current_quantity
        )
        return updated

    def get_products(
        self,
        category: Category | str | None = None,
        search: str | None = None,
        status: StockStatus | None = None,
    ) -> list[Product]:
        """Get products with optional filters.

        Args:
            category: Filter by category
            search: Case-insensitive name substring
            status: Filter by stock status

        Returns:
            List of matching products
        """
        products = self.products

        if category:
            category = Category(category)
            products = [p for p in products if p.category == category]
        if search:
            term = search.lower()
            products = [p for p in products if term in p.name.lower()]
        if status:
            products = [p for p in products if p.status == status]

        return products

    def get_expiring_soon(self, days: int = 3) -> list[Product]:
        """Get products expiring within a number of days.

        Args:
            days: Number of days to look ahead

        Returns:
            List of expiring products sorted by expiration date
        """
        cutoff = date.today() + timedelta(days=days)
        expiring = [
            p for p in self.products if p.expiration_date is not None and p.expiration_date <= cutoff
        ]
        return sorted(expiring, key=lambda p: p.expiration_date)  # type: ignore[arg-type, return-value]
