"""Spending reports, stock autonomy and price trends."""

import math
from collections import defaultdict
from collections.abc import Iterable
from datetime import date, datetime, time, timedelta

from .models import (
    AutonomyTier,
    CategorySpending,
    PriceVariation,
    Product,
    PurchaseRecord,
    ReportPeriod,
    SpendingReport,
    StockAutonomy,
)
from .shopping import is_below_minimum


def period_start(period: ReportPeriod | str, now: datetime | None = None) -> datetime:
    """First moment included in a reporting period.

    Rolling periods (``7d``, ``15d``) count back from ``now`` to the same
    time of day; ``month`` and ``year`` start at midnight on their first day.
    """
    now = now or datetime.now()
    period = ReportPeriod(period)
    if period == ReportPeriod.WEEK:
        return now - timedelta(days=7)
    if period == ReportPeriod.FORTNIGHT:
        return now - timedelta(days=15)
    midnight = datetime.combine(now.date(), time.min)
    if period == ReportPeriod.YEAR:
        return midnight.replace(month=1, day=1)
    return midnight.replace(day=1)


def _at_midnight(day: date) -> datetime:
    return datetime.combine(day, time.min)


def autonomy_tier(days: int) -> AutonomyTier:
    if days < 3:
        return AutonomyTier.CRITICAL
    if days <= 7:
        return AutonomyTier.MODERATE
    return AutonomyTier.COMFORTABLE


def forecast_autonomy(products: Iterable[Product]) -> StockAutonomy:
    """Estimate how many days current stock lasts.

    Only products with a known average consumption count. Autonomy is the
    smallest days-of-supply among them, rounded down.
    """
    tracked = [p for p in products if p.average_consumption > 0]
    if not tracked:
        return StockAutonomy(days=0, tier=AutonomyTier.NO_DATA)

    bottleneck = min(tracked, key=lambda p: p.current_quantity / p.average_consumption)
    days = math.floor(bottleneck.current_quantity / bottleneck.average_consumption)

    return StockAutonomy(
        days=days,
        tier=autonomy_tier(days),
        bottleneck_product_id=bottleneck.id,
        bottleneck_product_name=bottleneck.name,
    )


def analyze_price_variation(product: Product, start: datetime) -> PriceVariation | None:
    """Compare the current price with the last known price before ``start``.

    When no history predates the period, the first price inside it is the
    reference. Price points are dated by day and count from midnight.
    Returns None without enough history or a usable reference.
    """
    history = product.price_history
    if len(history) < 2:
        return None

    before = [h for h in history if _at_midnight(h.date) < start]
    in_period = [h for h in history if _at_midnight(h.date) >= start]
    if not in_period:
        return None

    reference = before[-1].price if before else in_period[0].price
    if reference <= 0:
        return None

    change = (product.price_per_unit - reference) / reference * 100
    return PriceVariation(
        product_id=product.id,
        name=product.name,
        category=product.category,
        unit=product.unit,
        old_price=reference,
        new_price=product.price_per_unit,
        change_percent=change,
    )


def price_variations(products: Iterable[Product], start: datetime) -> list[PriceVariation]:
    """Price variations for all products, largest change first."""
    variations = [v for p in products if (v := analyze_price_variation(p, start)) is not None]
    return sorted(variations, key=lambda v: abs(v.change_percent), reverse=True)


def purchases_since(
    history: Iterable[PurchaseRecord], start: datetime
) -> list[PurchaseRecord]:
    return [record for record in history if record.date >= start]


def category_spending(purchases: Iterable[PurchaseRecord]) -> list[CategorySpending]:
    """Sum purchase item totals per category, highest first."""
    totals: dict[str, float] = defaultdict(float)
    for purchase in purchases:
        for item in purchase.items:
            totals[item.category.value] += item.total

    return [
        CategorySpending(category=category, total=total)
        for category, total in sorted(totals.items(), key=lambda x: x[1], reverse=True)
    ]


def spending_report(
    products: list[Product],
    history: list[PurchaseRecord],
    period: ReportPeriod | str = ReportPeriod.MONTH,
    now: datetime | None = None,
) -> SpendingReport:
    """Build the spending and stock report for a period."""
    period = ReportPeriod(period)
    start = period_start(period, now)
    purchases = purchases_since(history, start)
    categories = category_spending(purchases)

    return SpendingReport(
        period=period,
        start_date=start.date(),
        total_spent=sum(p.total_amount for p in purchases),
        purchase_count=len(purchases),
        below_minimum_count=sum(1 for p in products if is_below_minimum(p)),
        active_category_count=len(categories),
        categories=categories,
        price_variations=price_variations(products, start),
        autonomy=forecast_autonomy(products),
    )
