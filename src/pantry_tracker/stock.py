"""Stock status classification and consumption."""

from .models import ConsumptionType, Product, StockStatus
from .units import is_weight_unit, parse_decimal


class InvalidAmountError(ValueError):
    """Raised when a fractional consumption amount is not a positive number."""

    def __init__(self, amount: object):
        self.amount = amount
        super().__init__(f"Consumption amount must be a positive number, got {amount!r}")


def classify(current_quantity: float, min_quantity: float) -> StockStatus:
    """Map a quantity and its minimum to a stock status."""
    if current_quantity <= 0:
        return StockStatus.CRITICAL
    if current_quantity <= min_quantity:
        return StockStatus.WARNING
    return StockStatus.NORMAL


def sync_status(product: Product) -> Product:
    """Return the product with ``status`` recomputed from its quantities."""
    status = classify(product.current_quantity, product.min_quantity)
    if status == product.status:
        return product
    return product.model_copy(update={"status": status})


def sync_statuses(products: list[Product]) -> list[Product]:
    return [sync_status(p) for p in products]


def consume(product: Product, amount: float | str = 1) -> Product:
    """Apply one consumption event to a product.

    Whole items always lose exactly one purchase unit and ignore ``amount``.
    Fractional items lose ``amount`` units; for weighed items the remaining
    content is rescaled to what is left. An item already at zero is
    returned unchanged.

    Raises:
        InvalidAmountError: If a fractional amount is not positive
    """
    if product.current_quantity <= 0:
        return product

    if product.consumption_type == ConsumptionType.WHOLE:
        new_quantity = max(0.0, product.current_quantity - 1)
        return sync_status(product.model_copy(update={"current_quantity": new_quantity}))

    initial_quantity = product.current_quantity
    amount = parse_decimal(amount)
    if amount <= 0:
        raise InvalidAmountError(amount)

    new_quantity = max(0.0, initial_quantity - amount)
    update: dict[str, object] = {"current_quantity": new_quantity}

    if is_weight_unit(product.measurement_unit.value):
        total_weight = parse_decimal(product.content_per_unit)
        if total_weight > 0:
            weight_per_unit = total_weight / initial_quantity
            update["content_per_unit"] = f"{weight_per_unit * new_quantity:.3f}"

    return sync_status(product.model_copy(update=update))
