"""Pantry Tracker - Household stock, shopping list and budget tracking."""

from .config import ConfigManager
from .data_store import BackendType, DataStore, RecordStore, StoreError, create_data_store
from .inventory_manager import InventoryManager, ProductNotFoundError
from .list_manager import PurchaseError, ShoppingListManager
from .models import (
    AppNotification,
    AutonomyTier,
    BudgetEvaluation,
    Category,
    CategorySpending,
    ConsumptionType,
    MeasurementUnit,
    PricePoint,
    PriceVariation,
    Product,
    PurchaseItem,
    PurchaseRecord,
    PurchaseResult,
    ReportPeriod,
    ShoppingItem,
    SpendingReport,
    StockAutonomy,
    StockStatus,
)
from .notifications import NotificationCenter
from .output_formatter import OutputFormatter
from .purchases import EmptyPurchaseError
from .sqlite_store import SQLiteStore
from .stock import InvalidAmountError

__version__ = "0.1.0"

__all__ = [
    "AppNotification",
    "AutonomyTier",
    "BackendType",
    "BudgetEvaluation",
    "Category",
    "CategorySpending",
    "ConfigManager",
    "ConsumptionType",
    "create_data_store",
    "DataStore",
    "EmptyPurchaseError",
    "InvalidAmountError",
    "InventoryManager",
    "MeasurementUnit",
    "NotificationCenter",
    "OutputFormatter",
    "PricePoint",
    "PriceVariation",
    "Product",
    "ProductNotFoundError",
    "PurchaseError",
    "PurchaseItem",
    "PurchaseRecord",
    "PurchaseResult",
    "RecordStore",
    "ReportPeriod",
    "ShoppingItem",
    "ShoppingListManager",
    "SpendingReport",
    "SQLiteStore",
    "StockAutonomy",
    "StockStatus",
    "StoreError",
]
