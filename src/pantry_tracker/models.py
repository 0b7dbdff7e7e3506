"""Core data models for Pantry Tracker."""

from datetime import date, datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from .units import parse_decimal


class Category(str, Enum):
    """Household product categories."""

    GROCERIES = "Groceries"
    PRODUCE = "Produce"
    MEAT = "Meat, Poultry & Fish"
    DAIRY = "Deli & Dairy"
    FROZEN = "Frozen"
    BAKERY = "Bakery"
    BEVERAGES = "Beverages"
    CLEANING = "Household Cleaning"
    PERSONAL_CARE = "Personal Care"
    OTHER = "Other"


class StockStatus(str, Enum):
    """Stock level of a product."""

    NORMAL = "in_stock"
    WARNING = "running_low"
    CRITICAL = "out_of_stock"


class ConsumptionType(str, Enum):
    """How a product is used up."""

    WHOLE = "WHOLE"
    FRACTIONAL = "FRACTIONAL"


class MeasurementUnit(str, Enum):
    """Unit for the content inside one purchase unit."""

    KG = "kg"
    G = "g"
    L = "L"
    ML = "ml"
    UNIT = "un"
    SLICE = "fatia"
    DOSE = "dose"


PURCHASE_UNITS = [
    "Package",
    "Box",
    "Bottle",
    "Can",
    "Tray",
    "Tub",
    "Bag",
    "Sack",
    "Jar",
    "Punnet",
    "Unit",
    "Roll",
    "Tube",
    "Bar",
    "Kit",
    "Bundle",
    "Gallon",
]


class PricePoint(BaseModel):
    """A single price snapshot."""

    price: float = Field(ge=0)
    date: date

    @field_validator("price", mode="before")
    @classmethod
    def _coerce_price(cls, value: Any) -> float:
        return _coerce_number(value)


def _coerce_number(value: Any) -> float:
    """Coerce a stored numeric value that may arrive as text."""
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return value
    return parse_decimal(value)


class Product(BaseModel):
    """A catalogued household product."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    category: Category = Category.OTHER
    unit: str = "Package"
    content_per_unit: str = "1"
    measurement_unit: MeasurementUnit = MeasurementUnit.UNIT
    current_quantity: float = Field(default=0.0, ge=0)
    min_quantity: float = Field(default=0.0, ge=0)
    price_per_unit: float = Field(default=0.0, ge=0)
    price_per_kg: float | None = Field(default=None, ge=0)
    is_essential: bool = False
    status: StockStatus = StockStatus.NORMAL
    consumption_type: ConsumptionType = ConsumptionType.WHOLE
    image_url: str | None = None
    expiration_date: date | None = None
    average_consumption: float = Field(default=0.0, ge=0)
    price_history: list[PricePoint] = Field(default_factory=list)

    @field_validator(
        "current_quantity", "min_quantity", "price_per_unit", "average_consumption", mode="before"
    )
    @classmethod
    def _coerce_numeric(cls, value: Any) -> float:
        return _coerce_number(value)

    @field_validator("price_per_kg", mode="before")
    @classmethod
    def _coerce_optional_numeric(cls, value: Any) -> float | None:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        return _coerce_number(value)

    @field_validator("content_per_unit", mode="before")
    @classmethod
    def _coerce_content(cls, value: Any) -> str:
        if value is None or (isinstance(value, str) and not value.strip()):
            return "1"
        return str(value)

    @field_validator("measurement_unit", mode="before")
    @classmethod
    def _default_measurement(cls, value: Any) -> Any:
        return value or MeasurementUnit.UNIT

    @field_validator("expiration_date", "image_url", mode="before")
    @classmethod
    def _blank_as_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def is_fractional(self) -> bool:
        return self.consumption_type == ConsumptionType.FRACTIONAL

    @property
    def days_until_expiration(self) -> int | None:
        """Days until expiration."""
        if self.expiration_date is None:
            return None
        return (self.expiration_date - date.today()).days


class ShoppingItem(Product):
    """A product on the shopping list with the quantity to buy."""

    needed_quantity: float = 1
    is_manual: bool = False
    is_completed: bool = False


class PurchaseItem(BaseModel):
    """One product bought in a purchase."""

    product_id: str
    product_name: str
    category: Category = Category.OTHER
    quantity: float
    unit_price: float
    total: float


class PurchaseRecord(BaseModel):
    """A confirmed purchase. Append-only."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    date: datetime = Field(default_factory=datetime.now)
    items: list[PurchaseItem] = Field(default_factory=list)
    total_amount: float = 0.0

    @field_validator("total_amount", mode="before")
    @classmethod
    def _coerce_total(cls, value: Any) -> float:
        return _coerce_number(value)


class NotificationCategory(str, Enum):
    """Notification grouping."""

    STOCK = "stock"
    SHOPPING = "shopping"
    FINANCIAL = "financial"


class NotificationType(str, Enum):
    """Kinds of derived alerts."""

    ITEM_OUT = "item_out"
    ITEM_LOW = "item_low"
    LIST_READY = "list_ready"


class AppNotification(BaseModel):
    """A transient alert derived from current state."""

    id: str
    category: NotificationCategory
    type: NotificationType
    title: str
    message: str
    timestamp: datetime = Field(default_factory=datetime.now)
    read: bool = False


class BudgetEvaluation(BaseModel):
    """Projected shopping list cost against the budget."""

    total: float
    budget: float
    is_over_budget: bool
    over_budget_amount: float
    budget_percent: float
    item_count: int = 0
    essential_count: int = 0


class AutonomyTier(str, Enum):
    """How long current stock is expected to last."""

    NO_DATA = "no_data"
    CRITICAL = "critical"
    MODERATE = "moderate"
    COMFORTABLE = "comfortable"


class StockAutonomy(BaseModel):
    """Days of supply remaining, bottlenecked by the first item to run out."""

    days: int = 0
    tier: AutonomyTier = AutonomyTier.NO_DATA
    bottleneck_product_id: str | None = None
    bottleneck_product_name: str | None = None


class PriceVariation(BaseModel):
    """Price change of a product against a reference price."""

    product_id: str
    name: str
    category: Category
    unit: str
    old_price: float
    new_price: float
    change_percent: float


class ProductUpdate(BaseModel):
    """Quantity change to apply to a product after a purchase."""

    product_id: str
    previous_quantity: float
    new_quantity: float
    status: StockStatus = StockStatus.NORMAL


class PriceHistoryAppend(BaseModel):
    """Price snapshot to append to a product's history."""

    product_id: str
    price: float
    date: date


class PurchaseResult(BaseModel):
    """Everything a confirmed purchase changes."""

    record: PurchaseRecord
    product_updates: list[ProductUpdate] = Field(default_factory=list)
    price_history_appends: list[PriceHistoryAppend] = Field(default_factory=list)
    clear_manual_ids: bool = True


class ReportPeriod(str, Enum):
    """Reporting windows."""

    WEEK = "7d"
    FORTNIGHT = "15d"
    MONTH = "month"
    YEAR = "year"


class CategorySpending(BaseModel):
    """Spending for a category within a period."""

    category: str
    total: float


class SpendingReport(BaseModel):
    """Spending and stock report for a period."""

    period: ReportPeriod
    start_date: date
    total_spent: float = 0.0
    purchase_count: int = 0
    below_minimum_count: int = 0
    active_category_count: int = 0
    categories: list[CategorySpending] = Field(default_factory=list)
    price_variations: list[PriceVariation] = Field(default_factory=list)
    autonomy: StockAutonomy = Field(default_factory=StockAutonomy)
