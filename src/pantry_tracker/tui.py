"""Terminal UI for Pantry Tracker."""

from __future__ import annotations

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import (
    Button,
    DataTable,
    Footer,
    Header,
    Input,
    Label,
    Static,
    TabbedContent,
    TabPane,
)

from .list_manager import PurchaseError, ShoppingListManager
from .models import Product
from .purchases import EmptyPurchaseError
from .stock import InvalidAmountError
from .units import parse_decimal

STATUS_LABELS = {
    "in_stock": "In stock",
    "running_low": "Running low",
    "out_of_stock": "Out of stock",
}


class ConsumeAmountScreen(ModalScreen[str | None]):
    """Modal dialog asking how much of a fractional product was used."""

    DEFAULT_CSS = """
    ConsumeAmountScreen {
        align: center middle;
    }

    #consume-dialog {
        width: 50;
        height: auto;
        padding: 1 2;
        border: round $accent;
        background: $surface;
    }

    #consume-actions {
        align-horizontal: right;
        height: auto;
        margin-top: 1;
    }
    """

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, product: Product):
        super().__init__()
        self.product = product

    def compose(self) -> ComposeResult:
        with Vertical(id="consume-dialog"):
            yield Label(f"How much {self.product.name} was used?")
            yield Label(
                f"In stock: {self.product.current_quantity:g} {self.product.unit}",
            )
            yield Input(value="1", placeholder="0,5", id="amount")
            with Horizontal(id="consume-actions"):
                yield Button("Cancel", id="cancel")
                yield Button("Use", id="submit", variant="primary")

    def action_cancel(self) -> None:
        self.dismiss(None)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.dismiss(None)
            return

        if event.button.id != "submit":
            return

        raw = self.query_one("#amount", Input).value.strip()
        if parse_decimal(raw) <= 0:
            self.app.bell()
            return
        self.dismiss(raw)


class PantryTrackerTUI(App[None]):
    """Interactive terminal UI for stock and shopping workflows."""

    TITLE = "Pantry Tracker"
    SUB_TITLE = "Terminal Interface"

    DEFAULT_CSS = """
    #status {
        dock: bottom;
        height: 1;
        padding: 0 1;
        background: $boost;
        color: $text;
    }

    #budget {
        height: 1;
        padding: 0 1;
    }

    DataTable {
        height: 1fr;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("r", "refresh", "Refresh"),
        Binding("u", "consume_selected", "Use"),
        Binding("t", "toggle_selected", "Toggle List"),
        Binding("p", "purchase", "Purchase"),
        Binding("s", "show_shopping", "Shopping Tab"),
        Binding("v", "show_inventory", "Inventory Tab"),
    ]

    def __init__(self, list_manager: ShoppingListManager):
        super().__init__()
        self.list_manager = list_manager
        self.inventory_manager = list_manager.inventory
        self._shopping_ids: list[str] = []
        self._inventory_ids: list[str] = []

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with TabbedContent(initial="inventory"):
            with TabPane("Inventory", id="inventory"):
                yield DataTable(id="inventory-table")
            with TabPane("Shopping List", id="shopping"):
                yield Static("", id="budget")
                yield DataTable(id="shopping-table")
        yield Static(
            "u:use  t:toggle list  p:purchase  r:refresh  q:quit",
            id="status",
        )
        yield Footer()

    def on_mount(self) -> None:
        inventory_table = self.query_one("#inventory-table", DataTable)
        inventory_table.cursor_type = "row"
        inventory_table.add_columns("Product", "Category", "Qty", "Min", "Content", "Status")

        shopping_table = self.query_one("#shopping-table", DataTable)
        shopping_table.cursor_type = "row"
        shopping_table.add_columns("Product", "Buy", "Unit Price", "Subtotal", "Source")

        self.action_refresh()

    def action_refresh(self) -> None:
        try:
            self.inventory_manager.refresh()
            self._redraw()
            self._set_status("Refreshed inventory and shopping list")
        except Exception as exc:
            self._set_status(f"Refresh failed: {exc}")

    def action_consume_selected(self) -> None:
        if self._active_tab() != "inventory":
            self._set_status("Switch to Inventory tab to use products")
            return

        product_id = self._selected_id("inventory")
        if product_id is None:
            self._set_status("No product selected")
            return

        product = self.inventory_manager.find_product(product_id)
        if product is None:
            self._set_status("Selected product is unavailable")
            return

        if product.is_fractional:
            if product.current_quantity <= 0:
                self._set_status(f"{product.name} is out of stock")
                return
            self.push_screen(
                ConsumeAmountScreen(product),
                lambda amount, selected_id=product_id: self._handle_consume(selected_id, amount),
            )
            return

        self._handle_consume(product_id, "1")

    def action_toggle_selected(self) -> None:
        tab = self._active_tab()
        product_id = self._selected_id(tab)
        if product_id is None:
            self._set_status("No product selected")
            return

        try:
            added = self.list_manager.toggle(product_id)
            self._redraw()
            if added is None:
                self._set_status("Selected product is unavailable")
            elif added:
                self._set_status("Added to shopping list")
            else:
                self._set_status("Removed from shopping list")
        except Exception as exc:
            self._set_status(f"Toggle failed: {exc}")

    def action_purchase(self) -> None:
        try:
            result = self.list_manager.confirm_purchase(self.list_manager.default_quantities())
            self._redraw()
            self._set_status(result["message"])
        except EmptyPurchaseError as exc:
            self._set_status(str(exc))
        except PurchaseError as exc:
            self._set_status(str(exc))
        except Exception as exc:
            self._set_status(f"Purchase failed: {exc}")

    def action_show_shopping(self) -> None:
        self.query_one(TabbedContent).active = "shopping"

    def action_show_inventory(self) -> None:
        self.query_one(TabbedContent).active = "inventory"

    def _handle_consume(self, product_id: str, amount: str | None) -> None:
        if amount is None:
            self._set_status("Use canceled")
            return

        try:
            updated = self.inventory_manager.consume(product_id, amount)
            self._redraw()
            if updated is None:
                self._set_status("Selected product is unavailable")
            else:
                self._set_status(
                    f"Used {updated.name} (remaining: {updated.current_quantity:g} {updated.unit})"
                )
        except InvalidAmountError as exc:
            self._set_status(str(exc))
        except Exception as exc:
            self._redraw()
            self._set_status(f"Use failed: {exc}")

    def _redraw(self) -> None:
        self._refresh_inventory_table()
        self._refresh_shopping_table()

    def _refresh_inventory_table(self) -> None:
        table = self.query_one("#inventory-table", DataTable)
        table.clear(columns=False)
        self._inventory_ids = []

        for product in self.inventory_manager.products:
            self._inventory_ids.append(product.id)
            table.add_row(
                product.name + (" *" if product.is_essential else ""),
                product.category.value,
                f"{product.current_quantity:g} {product.unit}",
                f"{product.min_quantity:g}",
                f"{product.content_per_unit} {product.measurement_unit.value}",
                STATUS_LABELS[product.status.value],
                key=product.id,
            )

        if self._inventory_ids:
            table.move_cursor(row=0, column=0)

    def _refresh_shopping_table(self) -> None:
        table = self.query_one("#shopping-table", DataTable)
        table.clear(columns=False)
        self._shopping_ids = []

        for item in self.list_manager.get_list():
            self._shopping_ids.append(item.id)
            table.add_row(
                item.name + (" *" if item.is_essential else ""),
                f"{item.needed_quantity:g} {item.unit}",
                f"${item.price_per_unit:.2f}",
                f"${item.price_per_unit * item.needed_quantity:.2f}",
                "manual" if item.is_manual else "low stock",
                key=item.id,
            )

        if self._shopping_ids:
            table.move_cursor(row=0, column=0)

        evaluation = self.list_manager.evaluate()
        text = (
            f"Estimated ${evaluation.total:.2f} of ${evaluation.budget:.2f}"
            f" ({evaluation.budget_percent:.0f}%)"
        )
        if evaluation.is_over_budget:
            text += f"  [red]over by ${evaluation.over_budget_amount:.2f}[/red]"
        self.query_one("#budget", Static).update(text)

    def _selected_id(self, tab: str) -> str | None:
        ids = self._shopping_ids if tab == "shopping" else self._inventory_ids
        table = self.query_one(f"#{tab}-table", DataTable)
        row = table.cursor_row
        if row is None or row < 0 or row >= len(ids):
            return None
        return ids[row]

    def _active_tab(self) -> str:
        tabbed_content = self.query_one(TabbedContent)
        return tabbed_content.active or "inventory"

    def _set_status(self, message: str) -> None:
        self.query_one("#status", Static).update(message)
