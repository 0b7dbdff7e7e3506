"""Tests for unit conversion and unit-price calculation."""

import pytest

from pantry_tracker.models import ConsumptionType, MeasurementUnit, Product
from pantry_tracker.units import (
    calculate_unit_price,
    parse_decimal,
    recalculate_price,
    to_kilograms,
)


class TestParseDecimal:
    """Tests for parse_decimal."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("1,5", 1.5),
            ("2.25", 2.25),
            ("1,5 kg", 1.5),
            ("", 0.0),
            ("abc", 0.0),
            (None, 0.0),
            (3, 3.0),
        ],
    )
    def test_parse(self, value, expected):
        """Comma and dot decimals parse; junk gives zero."""
        assert parse_decimal(value) == expected


class TestToKilograms:
    """Tests for weight conversion."""

    def test_grams(self):
        assert to_kilograms(500, "g") == 0.5

    def test_kilograms(self):
        assert to_kilograms(2, "kg") == 2

    def test_not_weight(self):
        """Volume units are not weights."""
        with pytest.raises(ValueError):
            to_kilograms(1, "L")


class TestCalculateUnitPrice:
    """Tests for calculate_unit_price."""

    def test_spread_over_quantity(self):
        """Total weight price is spread across purchase units."""
        assert calculate_unit_price("FRACTIONAL", "kg", "2", 10, 4) == 5.0

    def test_grams(self):
        """Gram contents are converted to kilograms."""
        assert calculate_unit_price("FRACTIONAL", "g", "500", 20, 1) == 10.0

    def test_quantity_floor_of_one(self):
        """Zero quantity still prices one unit."""
        assert calculate_unit_price("FRACTIONAL", "kg", "1,5", 10, 0) == 15.0

    def test_rounded(self):
        """Result is rounded to cents."""
        assert calculate_unit_price("FRACTIONAL", "kg", "1", 10, 3) == 3.33

    @pytest.mark.parametrize(
        "consumption,unit,content,per_kg",
        [
            ("WHOLE", "kg", "2", 10),
            ("FRACTIONAL", "L", "2", 10),
            ("FRACTIONAL", "kg", "2", None),
            ("FRACTIONAL", "kg", "2", 0),
            ("FRACTIONAL", "kg", "", 10),
        ],
    )
    def test_not_applicable(self, consumption, unit, content, per_kg):
        """No automatic price outside weighed fractional items."""
        assert calculate_unit_price(consumption, unit, content, per_kg, 4) is None


class TestRecalculatePrice:
    """Tests for recalculate_price."""

    def test_applies_price(self):
        """Weighed fractional product gets its unit price."""
        product = Product(
            name="Cheese",
            consumption_type=ConsumptionType.FRACTIONAL,
            measurement_unit=MeasurementUnit.KG,
            content_per_unit="2",
            price_per_kg=10,
            current_quantity=4,
        )
        updated = recalculate_price(product)
        assert updated.price_per_unit == 5.0
        assert product.price_per_unit == 0.0

    def test_unchanged_returns_same_instance(self):
        """No copy is made when the price is already right."""
        product = Product(
            name="Cheese",
            consumption_type=ConsumptionType.FRACTIONAL,
            measurement_unit=MeasurementUnit.KG,
            content_per_unit="2",
            price_per_kg=10,
            current_quantity=4,
            price_per_unit=5.0,
        )
        assert recalculate_price(product) is product

    def test_whole_product_untouched(self):
        """Whole products keep their manual price."""
        product = Product(name="Soap", price_per_unit=2.0, price_per_kg=50)
        assert recalculate_price(product) is product
