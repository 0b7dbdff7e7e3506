"""CLI entry point for Pantry Tracker."""

import logging
from datetime import date
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from .config import ConfigManager
from .data_store import BackendType, RecordStore, StoreError, create_data_store
from .inventory_manager import InventoryManager, ProductNotFoundError
from .list_manager import PurchaseError, ShoppingListManager
from .models import (
    PURCHASE_UNITS,
    Category,
    ConsumptionType,
    MeasurementUnit,
    Product,
    ReportPeriod,
    StockStatus,
)
from .notifications import NotificationCenter
from .output_formatter import OutputFormatter
from .purchases import EmptyPurchaseError
from .reports import spending_report
from .stock import InvalidAmountError
from .units import parse_decimal

app = typer.Typer(
    name="pantry",
    help="Household inventory and shopping budget tracker",
    no_args_is_help=True,
)

console = Console()
logger = logging.getLogger(__name__)

# Global state for formatter and config (set by callback)
formatter: OutputFormatter = OutputFormatter()
config: ConfigManager | None = None
data_store: RecordStore | None = None
inventory_manager: InventoryManager | None = None
list_manager: ShoppingListManager | None = None


def get_config() -> ConfigManager:
    """Get or create ConfigManager instance."""
    global config
    if config is None:
        config = ConfigManager()
    return config


def get_data_store() -> RecordStore:
    """Get or create the record store using config values."""
    global data_store
    if data_store is None:
        cfg = get_config()
        backend = BackendType(cfg.data.backend)
        data_store = create_data_store(backend=backend, data_dir=cfg.data.storage_dir)
    return data_store


def get_inventory_manager() -> InventoryManager:
    """Get or create InventoryManager instance."""
    global inventory_manager
    if inventory_manager is None:
        inventory_manager = InventoryManager(get_data_store())
    return inventory_manager


def get_list_manager() -> ShoppingListManager:
    """Get or create ShoppingListManager instance."""
    global list_manager
    if list_manager is None:
        list_manager = ShoppingListManager(
            get_inventory_manager(), budget=get_config().budget.shopping_limit
        )
    return list_manager


def configure_logging(level: str) -> None:
    """Send log records to stderr through Rich."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)
    root.addHandler(RichHandler(console=Console(stderr=True), show_path=False))
    root.setLevel(level)


def parse_quantities(values: list[str] | None) -> dict[str, float]:
    """Parse ``ID=QTY`` pairs.

    Raises:
        typer.BadParameter: If a pair is malformed
    """
    quantities: dict[str, float] = {}
    for value in values or []:
        if "=" not in value:
            raise typer.BadParameter(f"Expected ID=QTY, got '{value}'")
        product_id, qty = value.split("=", 1)
        quantities[product_id.strip()] = parse_decimal(qty)
    return quantities


def resolve_product_id(product_id: str) -> str:
    """Accept a full id or a unique prefix as shown in tables."""
    products = get_inventory_manager().products
    if any(p.id == product_id for p in products):
        return product_id
    matches = [p.id for p in products if p.id.startswith(product_id)]
    if len(matches) == 1:
        return matches[0]
    return product_id


@app.callback()
def main(
    json_output: Annotated[
        bool, typer.Option("--json", help="Output as JSON for programmatic use")
    ] = False,
    data_dir: Annotated[Path | None, typer.Option("--data-dir", help="Data directory path")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Pantry Tracker CLI - Track household stock and shopping spend."""
    global formatter, config, data_store, inventory_manager, list_manager

    formatter = OutputFormatter(json_mode=json_output)

    # Load config early
    config = ConfigManager()
    configure_logging("DEBUG" if verbose else config.logging.level)

    # CLI --data-dir overrides config, which overrides default
    effective_data_dir = data_dir if data_dir else config.data.storage_dir
    backend = BackendType(config.data.backend)

    data_store = create_data_store(backend=backend, data_dir=effective_data_dir)
    inventory_manager = None
    list_manager = None


# --- Products ---


@app.command()
def add(
    name: Annotated[str, typer.Argument(help="Product name")],
    category: Annotated[
        Category, typer.Option("--category", "-c", help="Product category")
    ] = Category.OTHER,
    unit: Annotated[
        str, typer.Option("--unit", "-u", help=f"Purchase unit ({', '.join(PURCHASE_UNITS)})")
    ] = "Package",
    content: Annotated[
        str, typer.Option("--content", help="Content per purchase unit, e.g. 1,5")
    ] = "1",
    measure: Annotated[
        MeasurementUnit, typer.Option("--measure", "-m", help="Measurement unit")
    ] = MeasurementUnit.UNIT,
    quantity: Annotated[float, typer.Option("--quantity", "-q", help="Units in stock")] = 1.0,
    minimum: Annotated[float, typer.Option("--min", help="Minimum units to keep")] = 1.0,
    price: Annotated[float, typer.Option("--price", "-p", help="Price per unit")] = 0.0,
    price_per_kg: Annotated[
        float | None, typer.Option("--price-per-kg", help="Price per kg for weighed items")
    ] = None,
    fractional: Annotated[
        bool, typer.Option("--fractional", help="Consumed in fractions of a unit")
    ] = False,
    essential: Annotated[bool, typer.Option("--essential", help="Mark as essential")] = False,
    average: Annotated[
        float, typer.Option("--avg", help="Average consumption in units per day")
    ] = 0.0,
    expiration: Annotated[
        str | None, typer.Option("--expires", help="Expiration date (YYYY-MM-DD)")
    ] = None,
    image: Annotated[str | None, typer.Option("--image", help="Image URL")] = None,
) -> None:
    """Add a product to the inventory."""
    try:
        product = Product(
            name=name,
            category=category,
            unit=unit,
            content_per_unit=content,
            measurement_unit=measure,
            current_quantity=quantity,
            min_quantity=minimum,
            price_per_unit=price,
            price_per_kg=price_per_kg,
            is_essential=essential,
            consumption_type=(
                ConsumptionType.FRACTIONAL if fractional else ConsumptionType.WHOLE
            ),
            average_consumption=average,
            expiration_date=date.fromisoformat(expiration) if expiration else None,
            image_url=image,
        )
        saved = get_inventory_manager().save_product(product)
        output_data = {
            "success": True,
            "message": f"Added {saved.name} to inventory",
            "data": {"product": saved.model_dump(mode="json")},
        }
        formatter.output(output_data, output_data["message"])
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@app.command()
def edit(
    product_id: Annotated[str, typer.Argument(help="Product ID")],
    name: Annotated[str | None, typer.Option("--name", help="New name")] = None,
    category: Annotated[Category | None, typer.Option("--category", "-c")] = None,
    unit: Annotated[str | None, typer.Option("--unit", "-u")] = None,
    content: Annotated[str | None, typer.Option("--content")] = None,
    measure: Annotated[MeasurementUnit | None, typer.Option("--measure", "-m")] = None,
    quantity: Annotated[float | None, typer.Option("--quantity", "-q")] = None,
    minimum: Annotated[float | None, typer.Option("--min")] = None,
    price: Annotated[float | None, typer.Option("--price", "-p")] = None,
    price_per_kg: Annotated[float | None, typer.Option("--price-per-kg")] = None,
    consumption: Annotated[ConsumptionType | None, typer.Option("--consumption")] = None,
    essential: Annotated[bool | None, typer.Option("--essential/--not-essential")] = None,
    average: Annotated[float | None, typer.Option("--avg")] = None,
    expiration: Annotated[str | None, typer.Option("--expires")] = None,
) -> None:
    """Edit a product."""
    try:
        mgr = get_inventory_manager()
        product = mgr.get_product(resolve_product_id(product_id))

        changes = {
            "name": name,
            "category": category,
            "unit": unit,
            "content_per_unit": content,
            "measurement_unit": measure,
            "current_quantity": quantity,
            "min_quantity": minimum,
            "price_per_unit": price,
            "price_per_kg": price_per_kg,
            "consumption_type": consumption,
            "is_essential": essential,
            "average_consumption": average,
            "expiration_date": date.fromisoformat(expiration) if expiration else None,
        }
        data = product.model_dump()
        data.update({k: v for k, v in changes.items() if v is not None})

        saved = mgr.save_product(Product(**data))
        output_data = {
            "success": True,
            "message": f"Updated {saved.name}",
            "data": {"product": saved.model_dump(mode="json")},
        }
        formatter.output(output_data, output_data["message"])
    except ProductNotFoundError as e:
        formatter.error(str(e), error_code="PRODUCT_NOT_FOUND")
        raise typer.Exit(code=1)
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@app.command()
def remove(
    product_id: Annotated[str, typer.Argument(help="Product ID to remove")],
) -> None:
    """Remove a product from the inventory."""
    try:
        removed = get_inventory_manager().delete_product(resolve_product_id(product_id))
        if removed is None:
            formatter.warning(f"No product with ID '{product_id}'")
            return
        output_data = {
            "success": True,
            "message": f"Removed {removed.name}",
            "data": {"product": removed.model_dump(mode="json")},
        }
        formatter.output(output_data, output_data["message"])
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@app.command()
def show(
    product_id: Annotated[str, typer.Argument(help="Product ID")],
) -> None:
    """Show a single product."""
    try:
        product = get_inventory_manager().get_product(resolve_product_id(product_id))
        formatter.output({"success": True, "data": {"product": product.model_dump(mode="json")}})
    except ProductNotFoundError as e:
        formatter.error(str(e), error_code="PRODUCT_NOT_FOUND")
        raise typer.Exit(code=1)
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@app.command()
def inventory(
    category: Annotated[
        Category | None, typer.Option("--category", "-c", help="Filter by category")
    ] = None,
    search: Annotated[str | None, typer.Option("--search", "-s", help="Name contains")] = None,
    status: Annotated[
        StockStatus | None, typer.Option("--status", help="Filter by stock status")
    ] = None,
) -> None:
    """View the product inventory."""
    try:
        products = get_inventory_manager().get_products(
            category=category, search=search, status=status
        )
        formatter.output(
            {
                "success": True,
                "data": {
                    "products": [p.model_dump(mode="json") for p in products],
                    "count": len(products),
                },
            }
        )
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@app.command()
def expiring(
    days: Annotated[int, typer.Option("--days", "-d", help="Days to look ahead")] = 3,
) -> None:
    """Show products expiring soon."""
    try:
        products = get_inventory_manager().get_expiring_soon(days=days)
        formatter.output(
            {"success": True, "data": {"expiring": [p.model_dump(mode="json") for p in products]}}
        )
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@app.command()
def consume(
    product_id: Annotated[str, typer.Argument(help="Product ID")],
    amount: Annotated[
        str, typer.Option("--amount", "-a", help="Units used (fractional items only)")
    ] = "1",
) -> None:
    """Record that a product was used."""
    try:
        updated = get_inventory_manager().consume(resolve_product_id(product_id), amount)
        if updated is None:
            formatter.warning(f"No product with ID '{product_id}'")
            return
        output_data = {
            "success": True,
            "message": f"{updated.name}: {updated.current_quantity:g} {updated.unit} left",
            "data": {"product": updated.model_dump(mode="json")},
        }
        formatter.output(output_data, output_data["message"])
    except InvalidAmountError as e:
        formatter.error(str(e), error_code="INVALID_AMOUNT")
        raise typer.Exit(code=1)
    except StoreError as e:
        formatter.error(str(e), error_code="STORE_ERROR")
        raise typer.Exit(code=1)
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


# --- Shopping list ---


@app.command(name="list")
def list_items(
    budget: Annotated[
        float | None, typer.Option("--budget", "-b", help="Budget ceiling for this trip")
    ] = None,
    qty: Annotated[
        list[str] | None, typer.Option("--qty", help="Override quantity as ID=QTY")
    ] = None,
) -> None:
    """View the shopping list and its projected cost."""
    try:
        mgr = get_list_manager()
        quantities = {resolve_product_id(k): v for k, v in parse_quantities(qty).items()}
        items = mgr.get_list()
        evaluation = mgr.evaluate(quantities=quantities, budget=budget)
        for item in items:
            if item.id in quantities:
                item.needed_quantity = quantities[item.id]
        formatter.output(
            {
                "success": True,
                "data": {
                    "shopping_list": [i.model_dump(mode="json") for i in items],
                    "budget": evaluation.model_dump(mode="json"),
                },
            }
        )
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@app.command()
def toggle(
    product_id: Annotated[str, typer.Argument(help="Product ID")],
) -> None:
    """Add a product to the shopping list by hand, or take it off."""
    try:
        mgr = get_list_manager()
        resolved = resolve_product_id(product_id)
        added = mgr.toggle(resolved)
        if added is None:
            formatter.warning(f"No product with ID '{product_id}'")
            return
        product = mgr.inventory.get_product(resolved)
        message = (
            f"Added {product.name} to the shopping list"
            if added
            else f"Removed {product.name} from the shopping list"
        )
        formatter.success(message, {"product_id": resolved, "on_list": added})
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@app.command()
def available(
    search: Annotated[str | None, typer.Option("--search", "-s", help="Name contains")] = None,
) -> None:
    """Products that can be added to the shopping list."""
    try:
        products = get_list_manager().available(search=search)
        formatter.output(
            {"success": True, "data": {"available": [p.model_dump(mode="json") for p in products]}}
        )
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@app.command()
def buy(
    qty: Annotated[
        list[str] | None,
        typer.Option("--qty", help="Quantity bought as ID=QTY (default: whole list)"),
    ] = None,
) -> None:
    """Confirm a purchase and restock products."""
    try:
        mgr = get_list_manager()
        quantities = {resolve_product_id(k): v for k, v in parse_quantities(qty).items()}
        if not quantities:
            quantities = mgr.default_quantities()
        result = mgr.confirm_purchase(quantities)
        formatter.output(result, result["message"])
    except EmptyPurchaseError as e:
        formatter.error(str(e), error_code="EMPTY_PURCHASE")
        raise typer.Exit(code=1)
    except PurchaseError as e:
        formatter.error(str(e), error_code="PURCHASE_FAILED")
        raise typer.Exit(code=1)
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@app.command()
def history() -> None:
    """View purchase history."""
    try:
        records = get_data_store().list_purchase_history()
        formatter.output(
            {"success": True, "data": {"history": [r.model_dump(mode="json") for r in records]}}
        )
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


# --- Reports and alerts ---


@app.command()
def report(
    period: Annotated[
        ReportPeriod | None, typer.Option("--period", "-p", help="Reporting period")
    ] = None,
) -> None:
    """Spending, price changes and stock autonomy."""
    try:
        mgr = get_inventory_manager()
        selected = period or ReportPeriod(get_config().reports.default_period)
        result = spending_report(
            mgr.products, get_data_store().list_purchase_history(), period=selected
        )
        formatter.output({"success": True, "data": {"report": result.model_dump(mode="json")}})
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@app.command()
def notifications(
    dismiss: Annotated[
        str | None, typer.Option("--dismiss", help="Dismiss a notification by ID")
    ] = None,
    dismiss_all: Annotated[
        bool, typer.Option("--dismiss-all", help="Dismiss all current notifications")
    ] = False,
) -> None:
    """View stock and shopping alerts."""
    try:
        store = get_data_store()
        mgr = get_inventory_manager()
        center = NotificationCenter(store.load_dismissed_notifications())

        if dismiss:
            center.dismiss(dismiss)
            store.save_dismissed_notifications(center.dismissed)
        if dismiss_all:
            center.dismiss_all(center.visible(mgr.products, mgr.manual_ids))
            store.save_dismissed_notifications(center.dismissed)

        visible = center.visible(mgr.products, mgr.manual_ids)
        formatter.output(
            {
                "success": True,
                "data": {"notifications": [n.model_dump(mode="json") for n in visible]},
            }
        )
    except Exception as e:
        formatter.error(str(e))
        raise typer.Exit(code=1)


@app.command()
def tui() -> None:
    """Open the interactive terminal interface."""
    from .tui import PantryTrackerTUI

    PantryTrackerTUI(get_list_manager()).run()


if __name__ == "__main__":
    app()
