"""Shopping list management operations."""

import logging
from collections.abc import Mapping
from datetime import datetime

from .data_store import StoreError
from .inventory_manager import InventoryManager
from .models import BudgetEvaluation, Product, PurchaseResult, ShoppingItem
from .purchases import record_purchase
from .shopping import available_products, build_shopping_list, evaluate_budget, toggle_manual_id

logger = logging.getLogger(__name__)


class PurchaseError(Exception):
    """Raised when a purchase record cannot be stored."""


class ShoppingListManager:
    """Manages the shopping list, budget and purchase confirmation."""

    def __init__(self, inventory: InventoryManager, budget: float = 150.0):
        """Initialize list manager.

        Args:
            inventory: InventoryManager holding the current products
            budget: Shopping budget ceiling
        """
        self.inventory = inventory
        self.budget = budget

    @property
    def data_store(self):
        return self.inventory.data_store

    def get_list(self) -> list[ShoppingItem]:
        """Build the shopping list from current state."""
        return build_shopping_list(self.inventory.products, self.inventory.manual_ids)

    def toggle(self, product_id: str) -> bool | None:
        """Add a product to the list by hand, or take it off again.

        Returns:
            True if now on the list, False if removed, None if the
            product is unknown

        Raises:
            StoreError: If the write fails; memory is left unchanged
        """
        if self.inventory.find_product(product_id) is None:
            return None

        manual_ids, added = toggle_manual_id(self.inventory.manual_ids, product_id)
        try:
            if added:
                self.data_store.add_manual_shopping_id(product_id)
            else:
                self.data_store.remove_manual_shopping_id(product_id)
        except StoreError as e:
            logger.error("Error updating shopping list: %s", e)
            raise

        self.inventory.manual_ids = manual_ids
        return added

    def available(self, search: str | None = None) -> list[Product]:
        """Products not on the list that can be added by hand."""
        return available_products(self.inventory.products, self.get_list(), search)

    def evaluate(
        self,
        quantities: Mapping[str, float] | None = None,
        budget: float | None = None,
    ) -> BudgetEvaluation:
        """Project the list total against the budget."""
        return evaluate_budget(
            self.get_list(), self.budget if budget is None else budget, quantities
        )

    def default_quantities(self) -> dict[str, float]:
        return {item.id: item.needed_quantity for item in self.get_list()}

    def confirm_purchase(
        self, quantities: Mapping[str, float], now: datetime | None = None
    ) -> dict:
        """Confirm a purchase and apply it to the store.

        The purchase record is stored first. Price history and quantity
        updates are then applied product by product; a failed product does
        not stop the others. Manual list entries are cleared and state is
        reloaded afterwards.

        Args:
            quantities: Product id -> purchase units bought
            now: Purchase timestamp

        Returns:
            Dict with the PurchaseResult and any products that failed

        Raises:
            EmptyPurchaseError: If no positive quantity is given
            PurchaseError: If the purchase record cannot be stored
        """
        result: PurchaseResult = record_purchase(self.inventory.products, quantities, now=now)

        try:
            self.data_store.append_purchase_record(result.record)
        except StoreError as e:
            logger.error("Error saving purchase history: %s", e)
            raise PurchaseError(f"Could not save purchase: {e}") from e

        appends = {a.product_id: a for a in result.price_history_appends}
        failed: list[str] = []
        for update in result.product_updates:
            product = self.inventory.find_product(update.product_id)
            if product is None:
                continue
            append = appends[update.product_id]
            try:
                self.data_store.append_price_history(append.product_id, append.price, append.date)
                self.data_store.upsert_product(
                    product.model_copy(
                        update={"current_quantity": update.new_quantity, "status": update.status}
                    )
                )
            except StoreError as e:
                logger.error("Error updating %s after purchase: %s", product.name, e)
                failed.append(update.product_id)

        try:
            self.data_store.clear_manual_shopping_ids()
        except StoreError as e:
            logger.error("Error clearing shopping list: %s", e)

        self.inventory.refresh()
        logger.info(
            "Purchase %s recorded: %d items, total %.2f",
            result.record.id,
            len(result.record.items),
            result.record.total_amount,
        )

        return {
            "success": True,
            "message": f"Recorded purchase of {len(result.record.items)} items",
            "data": {
                "purchase": result.record.model_dump(mode="json"),
                "failed_product_ids": failed,
            },
        }
