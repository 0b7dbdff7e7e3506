"""Shared test fixtures for Pantry Tracker."""

from datetime import date

import pytest

from pantry_tracker.data_store import DataStore
from pantry_tracker.inventory_manager import InventoryManager
from pantry_tracker.list_manager import ShoppingListManager
from pantry_tracker.models import (
    Category,
    ConsumptionType,
    MeasurementUnit,
    PricePoint,
    Product,
)


@pytest.fixture
def temp_data_dir(tmp_path):
    """Create a temporary data directory."""
    data_dir = tmp_path / "test_data"
    data_dir.mkdir()
    return data_dir


@pytest.fixture
def data_store(temp_data_dir):
    """Create a DataStore with temporary directory."""
    return DataStore(data_dir=temp_data_dir)


@pytest.fixture
def inventory_manager(data_store):
    """Create an InventoryManager with temporary storage."""
    return InventoryManager(data_store=data_store)


@pytest.fixture
def list_manager(inventory_manager):
    """Create a ShoppingListManager with temporary storage."""
    return ShoppingListManager(inventory_manager, budget=150.0)


@pytest.fixture
def rice():
    """Whole product comfortably in stock."""
    return Product(
        id="rice",
        name="Rice",
        category=Category.GROCERIES,
        unit="Bag",
        content_per_unit="5",
        measurement_unit=MeasurementUnit.KG,
        current_quantity=3,
        min_quantity=1,
        price_per_unit=4.5,
        is_essential=True,
        average_consumption=0.5,
    )


@pytest.fixture
def milk():
    """Whole product below its minimum."""
    return Product(
        id="milk",
        name="Milk",
        category=Category.DAIRY,
        unit="Bottle",
        measurement_unit=MeasurementUnit.L,
        current_quantity=1,
        min_quantity=4,
        price_per_unit=1.2,
        is_essential=True,
        average_consumption=1,
    )


@pytest.fixture
def cheese():
    """Fractional product weighed in kg."""
    return Product(
        id="cheese",
        name="Cheese",
        category=Category.DAIRY,
        unit="Piece",
        content_per_unit="5",
        measurement_unit=MeasurementUnit.KG,
        current_quantity=5,
        min_quantity=1,
        price_per_kg=10,
        consumption_type=ConsumptionType.FRACTIONAL,
    )


@pytest.fixture
def soap():
    """Out of stock product with price history."""
    return Product(
        id="soap",
        name="Soap",
        category=Category.PERSONAL_CARE,
        unit="Bar",
        current_quantity=0,
        min_quantity=1,
        price_per_unit=15,
        price_history=[
            PricePoint(price=10, date=date(2026, 1, 10)),
            PricePoint(price=12, date=date(2026, 3, 5)),
        ],
    )


@pytest.fixture
def stocked_manager(inventory_manager, rice, milk, cheese, soap):
    """InventoryManager with the sample products saved."""
    for product in (rice, milk, cheese, soap):
        inventory_manager.save_product(product)
    return inventory_manager


@pytest.fixture
def stocked_list_manager(stocked_manager):
    """ShoppingListManager over the sample products."""
    return ShoppingListManager(stocked_manager, budget=150.0)
