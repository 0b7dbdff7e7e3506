"""Tests for shopping list construction and budget evaluation."""

from pantry_tracker.models import ConsumptionType, Product, ShoppingItem
from pantry_tracker.shopping import (
    available_products,
    build_shopping_list,
    evaluate_budget,
    needed_quantity,
    toggle_manual_id,
)


def _product(pid, current, minimum, **kwargs):
    return Product(id=pid, name=pid.title(), current_quantity=current, min_quantity=minimum, **kwargs)


class TestNeededQuantity:
    """Tests for needed_quantity."""

    def test_whole_shortfall(self):
        """Whole items are bought up to the minimum."""
        assert needed_quantity(_product("a", 2, 5)) == 3

    def test_whole_fractional_shortfall_rounds_up(self):
        assert needed_quantity(_product("a", 2.5, 5)) == 3

    def test_whole_at_least_one(self):
        """Manual items at or above minimum still need one."""
        assert needed_quantity(_product("a", 5, 5)) == 1

    def test_fractional_always_one(self):
        product = _product("a", 2, 5, consumption_type=ConsumptionType.FRACTIONAL)
        assert needed_quantity(product) == 1


class TestBuildShoppingList:
    """Tests for build_shopping_list."""

    def test_below_minimum_included(self):
        """Only products strictly below the minimum are added automatically."""
        products = [_product("low", 1, 3), _product("equal", 2, 2), _product("ok", 5, 1)]
        items = build_shopping_list(products, set())
        assert [i.id for i in items] == ["low"]
        assert items[0].needed_quantity == 2
        assert items[0].is_manual is False
        assert isinstance(items[0], ShoppingItem)

    def test_manual_items_after_auto(self):
        """Manual items follow the automatic ones."""
        products = [_product("manual", 5, 1), _product("low", 1, 3)]
        items = build_shopping_list(products, {"manual"})
        assert [i.id for i in items] == ["low", "manual"]
        assert items[1].is_manual is True
        assert items[1].needed_quantity == 1

    def test_no_duplicates(self):
        """A manual product that is also low appears once, as automatic."""
        products = [_product("low", 1, 3)]
        items = build_shopping_list(products, {"low"})
        assert len(items) == 1
        assert items[0].is_manual is False

    def test_unknown_manual_id_ignored(self):
        assert build_shopping_list([_product("a", 5, 1)], {"ghost"}) == []


class TestToggleManualId:
    """Tests for toggle_manual_id."""

    def test_add_then_remove(self):
        ids, added = toggle_manual_id(set(), "a")
        assert ids == {"a"} and added is True
        ids, added = toggle_manual_id(ids, "a")
        assert ids == set() and added is False

    def test_input_not_mutated(self):
        original = {"a"}
        toggle_manual_id(original, "b")
        assert original == {"a"}


class TestAvailableProducts:
    """Tests for available_products."""

    def test_excludes_listed(self):
        products = [_product("low", 1, 3), _product("ok", 5, 1)]
        items = build_shopping_list(products, set())
        assert [p.id for p in available_products(products, items)] == ["ok"]

    def test_search(self):
        """Search is a case-insensitive name match."""
        products = [_product("rice", 5, 1), _product("beans", 5, 1)]
        assert [p.id for p in available_products(products, [], "RI")] == ["rice"]


class TestEvaluateBudget:
    """Tests for evaluate_budget."""

    def _items(self, *prices):
        return [
            ShoppingItem(id=f"p{i}", name=f"P{i}", price_per_unit=price, needed_quantity=1)
            for i, price in enumerate(prices)
        ]

    def test_over_budget(self):
        """Overspend is reported and the percentage is clamped."""
        evaluation = evaluate_budget(self._items(120, 80), 150)
        assert evaluation.total == 200
        assert evaluation.is_over_budget is True
        assert evaluation.over_budget_amount == 50
        assert evaluation.budget_percent == 100

    def test_under_budget(self):
        evaluation = evaluate_budget(self._items(30, 45), 150)
        assert evaluation.is_over_budget is False
        assert evaluation.over_budget_amount == 0
        assert evaluation.budget_percent == 50
        assert evaluation.item_count == 2

    def test_quantity_override(self):
        """Confirmed quantities replace the needed quantity."""
        evaluation = evaluate_budget(self._items(10), 100, {"p0": 3})
        assert evaluation.total == 30

    def test_zero_budget(self):
        """Any spend against a zero budget is full and over."""
        evaluation = evaluate_budget(self._items(5), 0)
        assert evaluation.budget_percent == 100
        assert evaluation.is_over_budget is True
        assert evaluate_budget([], 0).budget_percent == 0

    def test_essential_count(self):
        items = self._items(1, 2)
        items[0].is_essential = True
        assert evaluate_budget(items, 10).essential_count == 1
