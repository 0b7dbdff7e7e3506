"""Derived stock and shopping alerts."""

import logging
from collections.abc import Iterable
from datetime import datetime

from .models import AppNotification, NotificationCategory, NotificationType, Product
from .shopping import is_below_minimum

logger = logging.getLogger(__name__)

LIST_READY_ID = "list_ready"


def out_of_stock_id(product_id: str) -> str:
    return f"out_{product_id}"


def low_stock_id(product_id: str) -> str:
    return f"low_{product_id}"


def _format_quantity(value: float) -> str:
    return f"{value:g}"


def generate_notifications(
    products: Iterable[Product],
    manual_ids: Iterable[str],
    dismissed: Iterable[str] = (),
    now: datetime | None = None,
) -> list[AppNotification]:
    """Recompute alerts from current products and list membership.

    Ids are derived from the alert kind and subject, so a dismissed alert
    stays hidden for as long as the same condition holds.
    """
    products = list(products)
    timestamp = now or datetime.now()
    notifications: list[AppNotification] = []

    for product in products:
        if product.current_quantity <= 0:
            notifications.append(
                AppNotification(
                    id=out_of_stock_id(product.id),
                    category=NotificationCategory.STOCK,
                    type=NotificationType.ITEM_OUT,
                    title="Out of Stock",
                    message=f"{product.name} is out of stock.",
                    timestamp=timestamp,
                )
            )
        elif product.current_quantity <= product.min_quantity:
            notifications.append(
                AppNotification(
                    id=low_stock_id(product.id),
                    category=NotificationCategory.STOCK,
                    type=NotificationType.ITEM_LOW,
                    title="Running Low",
                    message=(
                        f"{product.name} is below its minimum "
                        f"({_format_quantity(product.current_quantity)}/"
                        f"{_format_quantity(product.min_quantity)})."
                    ),
                    timestamp=timestamp,
                )
            )

    to_buy = {p.id for p in products if is_below_minimum(p)} | set(manual_ids)
    if to_buy:
        count = len(to_buy)
        notifications.append(
            AppNotification(
                id=LIST_READY_ID,
                category=NotificationCategory.SHOPPING,
                type=NotificationType.LIST_READY,
                title="Shopping List Ready",
                message=f"There {'is' if count == 1 else 'are'} {count} "
                f"{'item' if count == 1 else 'items'} to buy.",
                timestamp=timestamp,
            )
        )

    dismissed = set(dismissed)
    return [n for n in notifications if n.id not in dismissed]


class NotificationCenter:
    """Keeps the dismissed-id set and filters regenerated alerts."""

    def __init__(self, dismissed: Iterable[str] = ()):
        self.dismissed: set[str] = set(dismissed)

    def visible(
        self,
        products: Iterable[Product],
        manual_ids: Iterable[str],
        now: datetime | None = None,
    ) -> list[AppNotification]:
        return generate_notifications(products, manual_ids, self.dismissed, now=now)

    def dismiss(self, notification_id: str) -> None:
        self.dismissed.add(notification_id)
        logger.debug("Dismissed notification %s", notification_id)

    def prune(self, products: Iterable[Product], manual_ids: Iterable[str]) -> list[str]:
        """Forget dismissals whose condition no longer holds.

        Once an alert clears, a later recurrence of the same condition is
        shown again.

        Returns:
            The ids dropped from the dismissed set
        """
        active = {n.id for n in generate_notifications(products, manual_ids)}
        stale = sorted(self.dismissed - active)
        self.dismissed &= active
        return stale

    def dismiss_all(self, visible: Iterable[AppNotification]) -> list[str]:
        """Dismiss the currently visible alerts only.

        Alerts that appear later with a new id still surface.
        """
        ids = [n.id for n in visible]
        self.dismissed.update(ids)
        return ids
