"""Shopping list construction and budget evaluation."""

import math
from collections.abc import Iterable, Mapping

from .models import BudgetEvaluation, ConsumptionType, Product, ShoppingItem


def needed_quantity(product: Product) -> float:
    """Purchase units to buy to bring a product back to its minimum.

    Fractional shortfalls cannot be converted to a purchase count, so
    fractional items are always restocked by one unit.
    """
    if product.consumption_type == ConsumptionType.WHOLE:
        return max(1, math.ceil(product.min_quantity - product.current_quantity))
    return 1


def _to_item(product: Product, needed: float, is_manual: bool) -> ShoppingItem:
    data = product.model_dump(exclude={"needed_quantity", "is_manual", "is_completed"})
    return ShoppingItem(**data, needed_quantity=needed, is_manual=is_manual)


def is_below_minimum(product: Product) -> bool:
    return product.current_quantity < product.min_quantity


def build_shopping_list(
    products: Iterable[Product], manually_added_ids: Iterable[str]
) -> list[ShoppingItem]:
    """Merge low-stock products with manually added ones.

    Low-stock items come first in product order, followed by manual items
    that are not already on the list.
    """
    products = list(products)
    manual_ids = set(manually_added_ids)

    auto_items = [
        _to_item(product, needed_quantity(product), is_manual=False)
        for product in products
        if is_below_minimum(product)
    ]
    auto_ids = {item.id for item in auto_items}

    manual_items = [
        _to_item(product, 1, is_manual=True)
        for product in products
        if product.id in manual_ids and product.id not in auto_ids
    ]

    return auto_items + manual_items


def toggle_manual_id(manual_ids: set[str], product_id: str) -> tuple[set[str], bool]:
    """Flip manual list membership for a product.

    Returns:
        The new id set and whether the product is now on the list
    """
    updated = set(manual_ids)
    if product_id in updated:
        updated.discard(product_id)
        return updated, False
    updated.add(product_id)
    return updated, True


def available_products(
    products: Iterable[Product], shopping_items: Iterable[ShoppingItem], search: str | None = None
) -> list[Product]:
    """Products that can still be added to the list by hand."""
    listed = {item.id for item in shopping_items}
    available = [p for p in products if p.id not in listed]
    if search:
        term = search.lower()
        available = [p for p in available if term in p.name.lower()]
    return available


def evaluate_budget(
    shopping_items: list[ShoppingItem],
    budget: float,
    quantities: Mapping[str, float] | None = None,
) -> BudgetEvaluation:
    """Project the list cost against a budget ceiling.

    ``quantities`` overrides the needed quantity per product id. The
    percentage is for progress display and is clamped at 100; overspend is
    reported by ``is_over_budget`` and ``over_budget_amount``.
    """
    quantities = quantities or {}
    total = sum(
        item.price_per_unit * quantities.get(item.id, item.needed_quantity)
        for item in shopping_items
    )

    if budget > 0:
        percent = min(100.0, total / budget * 100)
    else:
        percent = 100.0 if total > 0 else 0.0

    return BudgetEvaluation(
        total=total,
        budget=budget,
        is_over_budget=total > budget,
        over_budget_amount=max(0.0, total - budget),
        budget_percent=percent,
        item_count=len(shopping_items),
        essential_count=sum(1 for item in shopping_items if item.is_essential),
    )
