"""Tests for data models."""

from datetime import date, timedelta

import pytest
from pydantic import ValidationError

from pantry_tracker.models import (
    Category,
    ConsumptionType,
    MeasurementUnit,
    PricePoint,
    Product,
    PurchaseRecord,
    ShoppingItem,
    StockStatus,
)


class TestProduct:
    """Tests for Product model."""

    def test_create_minimal(self):
        """Create product with only a name."""
        product = Product(name="Beans")
        assert product.name == "Beans"
        assert product.category == Category.OTHER
        assert product.unit == "Package"
        assert product.content_per_unit == "1"
        assert product.measurement_unit == MeasurementUnit.UNIT
        assert product.consumption_type == ConsumptionType.WHOLE
        assert product.status == StockStatus.NORMAL
        assert product.price_history == []
        assert product.id

    def test_ids_are_unique(self):
        """Each product gets its own id."""
        assert Product(name="A").id != Product(name="B").id

    def test_numbers_as_text(self):
        """Numbers stored as text are coerced, including comma decimals."""
        product = Product(
            name="Flour",
            current_quantity="2,5",
            min_quantity="1",
            price_per_unit="3.49",
            price_per_kg="",
        )
        assert product.current_quantity == 2.5
        assert product.min_quantity == 1.0
        assert product.price_per_unit == 3.49
        assert product.price_per_kg is None

    def test_blank_content_defaults_to_one(self):
        """Empty content per unit reads as one."""
        product = Product(name="Eggs", content_per_unit="")
        assert product.content_per_unit == "1"

    def test_missing_measurement_unit(self):
        """Missing measurement unit falls back to units."""
        product = Product(name="Eggs", measurement_unit=None)
        assert product.measurement_unit == MeasurementUnit.UNIT

    def test_blank_expiration_is_none(self):
        """Blank expiration string reads as no expiration."""
        product = Product(name="Salt", expiration_date="")
        assert product.expiration_date is None
        assert product.days_until_expiration is None

    def test_negative_quantity_rejected(self):
        """Quantities cannot be negative."""
        with pytest.raises(ValidationError):
            Product(name="Oil", current_quantity=-1)

    def test_category_by_value(self):
        """Categories are parsed from their display value."""
        product = Product(name="Ham", category="Meat, Poultry & Fish")
        assert product.category == Category.MEAT

    def test_is_fractional(self):
        """Fractional flag follows the consumption type."""
        assert Product(name="Cheese", consumption_type="FRACTIONAL").is_fractional
        assert not Product(name="Soap").is_fractional

    def test_days_until_expiration(self):
        """Days until expiration counts from today."""
        product = Product(name="Yogurt", expiration_date=date.today() + timedelta(days=4))
        assert product.days_until_expiration == 4


class TestPricePoint:
    """Tests for PricePoint model."""

    def test_price_as_text(self):
        """Text prices are coerced."""
        point = PricePoint(price="10,50", date="2026-01-01")
        assert point.price == 10.5
        assert point.date == date(2026, 1, 1)


class TestShoppingItem:
    """Tests for ShoppingItem model."""

    def test_defaults(self):
        """A shopping item needs one unit unless told otherwise."""
        item = ShoppingItem(name="Milk")
        assert item.needed_quantity == 1
        assert item.is_manual is False
        assert item.is_completed is False


class TestPurchaseRecord:
    """Tests for PurchaseRecord model."""

    def test_total_as_text(self):
        """Stored totals given as text are coerced."""
        record = PurchaseRecord(total_amount="12,30")
        assert record.total_amount == 12.3
        assert record.items == []
