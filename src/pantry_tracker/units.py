"""Unit conversion and unit-price calculation."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import Product

WEIGHT_UNITS = ("kg", "g")

_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)")


def parse_decimal(value: Any) -> float:
    """Parse a decimal that may use ``,`` as separator.

    Only the leading numeric part is read, so ``"1,5 kg"`` gives ``1.5``.
    Empty or non-numeric input gives ``0.0``.
    """
    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)

    text = str(value).strip().replace(",", ".", 1)
    match = _LEADING_NUMBER.match(text)
    if not match:
        return 0.0
    return float(match.group(0))


def is_weight_unit(measurement_unit: str) -> bool:
    return measurement_unit in WEIGHT_UNITS


def to_kilograms(amount: float, measurement_unit: str) -> float:
    """Convert a weight in ``kg`` or ``g`` to kilograms."""
    if measurement_unit == "g":
        return amount / 1000
    if measurement_unit == "kg":
        return amount
    raise ValueError(f"Not a weight unit: {measurement_unit}")


def calculate_unit_price(
    consumption_type: str,
    measurement_unit: str,
    content_per_unit: Any,
    price_per_kg: float | None,
    current_quantity: float,
) -> float | None:
    """Derive the price of one purchase unit from a per-kg price.

    Applies only to fractional items weighed in ``kg`` or ``g`` with a
    positive per-kg price. The total weight is priced and spread over the
    purchase units (at least one).

    Returns:
        The unit price rounded to 2 places, or None when no automatic
        price applies.
    """
    if consumption_type != "FRACTIONAL":
        return None
    if not is_weight_unit(measurement_unit) or not price_per_kg or price_per_kg <= 0:
        return None

    weight = parse_decimal(content_per_unit)
    if weight <= 0:
        return None

    total_cost = to_kilograms(weight, measurement_unit) * price_per_kg
    quantity = max(1.0, current_quantity or 0)
    return round(total_cost / quantity, 2)


def recalculate_price(product: Product) -> Product:
    """Return the product with its automatic unit price applied.

    The same instance is returned when nothing changes, so callers can
    compare identity before writing.
    """
    price = calculate_unit_price(
        product.consumption_type.value,
        product.measurement_unit.value,
        product.content_per_unit,
        product.price_per_kg,
        product.current_quantity,
    )
    if price is None or price == product.price_per_unit:
        return product
    return product.model_copy(update={"price_per_unit": price})
