"""Purchase confirmation planning."""

from collections.abc import Iterable, Mapping
from datetime import date, datetime

from .models import (
    PriceHistoryAppend,
    Product,
    ProductUpdate,
    PurchaseItem,
    PurchaseRecord,
    PurchaseResult,
    StockStatus,
)
from .units import parse_decimal


class EmptyPurchaseError(ValueError):
    """Raised when a purchase has no positive quantities."""

    def __init__(self):
        super().__init__("Nothing to purchase: no product has a positive quantity")


def record_purchase(
    products: Iterable[Product],
    quantities: Mapping[str, float],
    now: datetime | None = None,
) -> PurchaseResult:
    """Turn confirmed quantities into a purchase record and product updates.

    Non-positive quantities and ids that match no product are dropped.
    Each bought product gets a price snapshot at its current unit price and
    its quantity increased. Status is set to normal on purchase rather than
    reclassified.

    Args:
        products: Current products
        quantities: Product id -> purchase units bought
        now: Purchase timestamp, defaults to now

    Returns:
        PurchaseResult with the record and the changes to apply

    Raises:
        EmptyPurchaseError: If no product is left to buy
    """
    now = now or datetime.now()
    today: date = now.date()
    by_id = {p.id: p for p in products}

    items: list[PurchaseItem] = []
    updates: list[ProductUpdate] = []
    appends: list[PriceHistoryAppend] = []

    for product_id, raw_quantity in quantities.items():
        quantity = parse_decimal(raw_quantity)
        if quantity <= 0:
            continue
        product = by_id.get(product_id)
        if product is None:
            continue

        items.append(
            PurchaseItem(
                product_id=product.id,
                product_name=product.name,
                category=product.category,
                quantity=quantity,
                unit_price=product.price_per_unit,
                total=product.price_per_unit * quantity,
            )
        )
        appends.append(
            PriceHistoryAppend(product_id=product.id, price=product.price_per_unit, date=today)
        )
        updates.append(
            ProductUpdate(
                product_id=product.id,
                previous_quantity=product.current_quantity,
                new_quantity=product.current_quantity + quantity,
                status=StockStatus.NORMAL,
            )
        )

    if not items:
        raise EmptyPurchaseError()

    record = PurchaseRecord(
        date=now,
        items=items,
        total_amount=sum(item.total for item in items),
    )
    return PurchaseResult(record=record, product_updates=updates, price_history_appends=appends)
