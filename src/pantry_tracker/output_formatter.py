"""Output formatting for CLI and programmatic use."""

import json
from datetime import date, datetime
from enum import Enum
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table


class JSONEncoder(json.JSONEncoder):
    """Custom JSON encoder for output."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, date):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


STATUS_STYLES = {
    "in_stock": "[green]In stock[/green]",
    "running_low": "[yellow]Running low[/yellow]",
    "out_of_stock": "[red]Out of stock[/red]",
}

AUTONOMY_STYLES = {
    "no_data": ("dim", "No data"),
    "critical": ("red", "Critical stock"),
    "moderate": ("yellow", "Moderate stock"),
    "comfortable": ("green", "Comfortable stock"),
}


def _qty(value: Any) -> str:
    try:
        return f"{float(value):g}"
    except (TypeError, ValueError):
        return str(value)


def _money(value: Any) -> str:
    return f"${float(value or 0):.2f}"


class OutputFormatter:
    """Formats output for both Rich terminal and JSON modes."""

    def __init__(self, json_mode: bool = False):
        """Initialize formatter.

        Args:
            json_mode: If True, output JSON instead of Rich formatting
        """
        self.json_mode = json_mode
        self.console = Console()

    def output(self, data: dict[str, Any], message: str = "") -> None:
        """Output data in appropriate format.

        Args:
            data: Data to output
            message: Optional message for Rich mode
        """
        if self.json_mode:
            self._output_json(data)
        else:
            self._output_rich(data, message)

    def _output_json(self, data: dict[str, Any]) -> None:
        """Output as JSON to stdout."""
        print(json.dumps(data, cls=JSONEncoder, indent=2))

    def _output_rich(self, data: dict[str, Any], message: str) -> None:
        """Output with Rich formatting."""
        if message:
            self.console.print(f"[green]✓[/green] {message}")

        payload = data.get("data", {})
        if "products" in payload:
            self._render_products(payload["products"])
        elif "product" in payload:
            self._render_product(payload["product"])
        elif "shopping_list" in payload:
            self._render_shopping_list(payload)
        elif "available" in payload:
            self._render_products(payload["available"], title="Available to Add")
        elif "purchase" in payload:
            self._render_purchase(payload)
        elif "history" in payload:
            self._render_history(payload["history"])
        elif "report" in payload:
            self._render_report(payload["report"])
        elif "notifications" in payload:
            self._render_notifications(payload["notifications"])
        elif "expiring" in payload:
            self._render_expiring(payload["expiring"])

    def _render_products(self, products: list[dict], title: str = "Inventory") -> None:
        """Render product catalog."""
        if not products:
            self.console.print("[dim]No products catalogued[/dim]")
            return

        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("ID", style="dim", no_wrap=True)
        table.add_column("Product", style="cyan")
        table.add_column("Category", style="yellow")
        table.add_column("Qty", justify="right", style="magenta")
        table.add_column("Min", justify="right")
        table.add_column("Content")
        table.add_column("Price", justify="right", style="green")
        table.add_column("Status")

        for p in products:
            name = p["name"] + (" [bold]*[/bold]" if p.get("is_essential") else "")
            table.add_row(
                p["id"][:8],
                name,
                p.get("category", "Other"),
                f"{_qty(p.get('current_quantity', 0))} {p.get('unit', '')}",
                _qty(p.get("min_quantity", 0)),
                f"{p.get('content_per_unit', '')} {p.get('measurement_unit', '')}",
                _money(p.get("price_per_unit")),
                STATUS_STYLES.get(p.get("status", ""), p.get("status", "")),
            )

        self.console.print(table)
        count = len(products)
        self.console.print(f"\n{count} {'item' if count == 1 else 'items'} catalogued")

    def _render_product(self, p: dict) -> None:
        """Render a single product."""
        panel_content = f"""[bold]{p["name"]}[/bold]

ID: {p["id"]}
Category: {p.get("category", "Other")}
Stock: {_qty(p.get("current_quantity", 0))} {p.get("unit", "")} (min {_qty(p.get("min_quantity", 0))})
Content: {p.get("content_per_unit", "")} {p.get("measurement_unit", "")}
Price: {_money(p.get("price_per_unit"))} per {p.get("unit", "unit")}
Consumption: {p.get("consumption_type", "WHOLE")}
Status: {STATUS_STYLES.get(p.get("status", ""), p.get("status", ""))}"""

        if p.get("expiration_date"):
            panel_content += f"\nExpires: {p['expiration_date']}"
        if p.get("average_consumption"):
            panel_content += f"\nAverage use: {_qty(p['average_consumption'])}/day"

        self.console.print(Panel(panel_content, title="Product", border_style="blue"))

    def _render_shopping_list(self, payload: dict) -> None:
        """Render shopping list with budget."""
        items = payload["shopping_list"]

        if not items:
            self.console.print("[dim]Nothing to buy[/dim]")
        else:
            table = Table(title="Shopping List", show_header=True, header_style="bold cyan")
            table.add_column("ID", style="dim", no_wrap=True)
            table.add_column("Product", style="cyan")
            table.add_column("Buy", justify="right", style="magenta")
            table.add_column("Unit Price", justify="right")
            table.add_column("Subtotal", justify="right", style="green")
            table.add_column("Source")

            for item in items:
                qty = item.get("needed_quantity", 1)
                table.add_row(
                    item["id"][:8],
                    item["name"] + (" [bold]*[/bold]" if item.get("is_essential") else ""),
                    f"{_qty(qty)} {item.get('unit', '')}",
                    _money(item.get("price_per_unit")),
                    _money(float(item.get("price_per_unit", 0)) * float(qty)),
                    "manual" if item.get("is_manual") else "low stock",
                )
            self.console.print(table)

        budget = payload.get("budget")
        if budget:
            color = "red" if budget["is_over_budget"] else "green"
            self.console.print(
                f"\nEstimated total: [{color}]{_money(budget['total'])}[/{color}]"
                f" of {_money(budget['budget'])} ({budget['budget_percent']:.0f}%)"
            )
            if budget["is_over_budget"]:
                self.console.print(
                    f"[red]Over budget by {_money(budget['over_budget_amount'])}[/red]"
                )
            if budget.get("essential_count"):
                self.console.print(
                    f"[dim]{budget['essential_count']} essential items on the list[/dim]"
                )

    def _render_purchase(self, payload: dict) -> None:
        """Render a confirmed purchase."""
        purchase = payload["purchase"]

        table = Table(title="Purchase", show_header=True, header_style="bold")
        table.add_column("Product")
        table.add_column("Qty", justify="right")
        table.add_column("Unit Price", justify="right")
        table.add_column("Total", justify="right", style="green")

        for item in purchase["items"]:
            table.add_row(
                item["product_name"],
                _qty(item["quantity"]),
                _money(item["unit_price"]),
                _money(item["total"]),
            )

        self.console.print(table)
        self.console.print(f"\n[bold]Total: {_money(purchase['total_amount'])}[/bold]")

        failed = payload.get("failed_product_ids") or []
        if failed:
            self.console.print(
                f"[yellow]⚠ {len(failed)} products could not be updated[/yellow]"
            )

    def _render_history(self, history: list[dict]) -> None:
        """Render purchase history."""
        if not history:
            self.console.print("[dim]No purchases yet[/dim]")
            return

        table = Table(title="Purchase History", show_header=True, header_style="bold")
        table.add_column("Date")
        table.add_column("Items", justify="right")
        table.add_column("Total", justify="right", style="green")

        for record in history:
            table.add_row(
                str(record["date"])[:16].replace("T", " "),
                str(len(record.get("items", []))),
                _money(record.get("total_amount")),
            )

        self.console.print(table)

    def _render_report(self, report: dict) -> None:
        """Render spending report."""
        self.console.print(
            f"\n[bold]Spending Report[/bold] ({report['period']}, since {report['start_date']})"
        )
        self.console.print(f"Total spent: [green]{_money(report['total_spent'])}[/green]")
        self.console.print(f"Purchases: {report['purchase_count']}")
        self.console.print(f"Items below minimum: {report['below_minimum_count']}")
        self.console.print(f"Categories with spending: {report['active_category_count']}")

        autonomy = report.get("autonomy", {})
        style, label = AUTONOMY_STYLES.get(autonomy.get("tier", "no_data"), ("dim", ""))
        if autonomy.get("tier") == "no_data":
            self.console.print(f"Stock autonomy: [{style}]{label}[/{style}]")
        else:
            self.console.print(
                f"Stock autonomy: [{style}]{autonomy['days']} days ({label})[/{style}]"
            )

        if report.get("categories"):
            table = Table(title="By Category", show_header=True, header_style="bold")
            table.add_column("Category")
            table.add_column("Spent", justify="right")
            for cat in report["categories"]:
                table.add_row(cat["category"], _money(cat["total"]))
            self.console.print(table)

        if report.get("price_variations"):
            table = Table(title="Price Changes", show_header=True, header_style="bold")
            table.add_column("Product")
            table.add_column("Before", justify="right")
            table.add_column("Now", justify="right")
            table.add_column("Change", justify="right")
            for v in report["price_variations"]:
                change = v["change_percent"]
                color = "red" if change > 0 else "green"
                table.add_row(
                    v["name"],
                    _money(v["old_price"]),
                    _money(v["new_price"]),
                    f"[{color}]{change:+.1f}%[/{color}]",
                )
            self.console.print(table)

    def _render_notifications(self, notifications: list[dict]) -> None:
        """Render notifications."""
        if not notifications:
            self.console.print("[dim]No notifications[/dim]")
            return

        icons = {"item_out": "[red]✗[/red]", "item_low": "[yellow]⚠[/yellow]"}
        for n in notifications:
            icon = icons.get(n["type"], "[blue]•[/blue]")
            self.console.print(f"{icon} [bold]{n['title']}[/bold]: {n['message']} [dim]({n['id']})[/dim]")

    def _render_expiring(self, products: list[dict]) -> None:
        """Render expiring products."""
        if not products:
            self.console.print("[dim]Nothing expiring soon[/dim]")
            return

        table = Table(title="Expiring Soon", show_header=True, header_style="bold")
        table.add_column("Product")
        table.add_column("Qty", justify="right")
        table.add_column("Expires")

        today = date.today()
        for p in products:
            exp = date.fromisoformat(str(p["expiration_date"]))
            days = (exp - today).days
            if days < 0:
                label = f"[red]{exp} (expired)[/red]"
            elif days == 0:
                label = f"[red]{exp} (today)[/red]"
            elif days == 1:
                label = f"[yellow]{exp} (tomorrow)[/yellow]"
            else:
                label = f"{exp} ({days} days)"
            table.add_row(p["name"], _qty(p.get("current_quantity", 0)), label)

        self.console.print(table)

    def error(self, message: str, error_code: str | None = None) -> None:
        """Output error message.

        Args:
            message: Error message
            error_code: Optional error code
        """
        if self.json_mode:
            output = {"success": False, "error": message}
            if error_code:
                output["error_code"] = error_code
            print(json.dumps(output))
        else:
            self.console.print(f"[red]✗ Error:[/red] {message}")

    def success(self, message: str, data: dict | None = None) -> None:
        """Output success message.

        Args:
            message: Success message
            data: Optional data to include
        """
        if self.json_mode:
            output: dict[str, Any] = {"success": True, "message": message}
            if data:
                output["data"] = data
            print(json.dumps(output, cls=JSONEncoder))
        else:
            self.console.print(f"[green]✓[/green] {message}")

    def warning(self, message: str) -> None:
        """Output warning message.

        Args:
            message: Warning message
        """
        if self.json_mode:
            print(json.dumps({"warning": message}))
        else:
            self.console.print(f"[yellow]⚠[/yellow] {message}")
