"""Unit tests for applying matched items to an order."""
from decimal import Decimal

import pytest

from orderbot.services.ordering.matcher import ItemMatch
from orderbot.services.ordering.models import Order, OrderItem, SelectedModifier
from orderbot.services.ordering.mutator import apply_match, effective_tax_rate


@pytest.fixture
def burger(test_menu):
    return test_menu.get_item("burger")


@pytest.fixture
def fries(test_menu):
    return test_menu.get_item("fries")


def assert_totals_consistent(order: Order):
    assert order.subtotal == sum((item.line_total for item in order.items), Decimal("0"))
    assert order.total == order.subtotal + order.tax


class TestApplyMatch:
    """Test order mutation from matches."""

    def test_no_match_returns_same_order(self):
        """Test a missing match leaves the order untouched."""
        order = Order()
        result = apply_match(order, None)

        assert result.order is order
        assert result.line is None
        assert result.created is False

    def test_new_line_at_base_price(self, burger):
        """Test a new line is created at the menu base price."""
        result = apply_match(Order(), ItemMatch(menu_item=burger, quantity=2))

        assert result.created is True
        assert len(result.order.items) == 1
        line = result.order.items[0]
        assert line.menu_item_id == "burger"
        assert line.name == "Burger"
        assert line.quantity == 2
        assert line.unit_price == Decimal("10.00")
        assert line.selected_modifiers == []
        assert result.order.subtotal == Decimal("20.00")
        assert_totals_consistent(result.order)

    def test_merges_into_existing_line(self, burger):
        """Test adding the same item twice keeps a single line."""
        first = apply_match(Order(), ItemMatch(menu_item=burger, quantity=1))
        second = apply_match(first.order, ItemMatch(menu_item=burger, quantity=1))

        assert second.created is False
        assert len(second.order.items) == 1
        assert second.order.items[0].quantity == 2
        assert second.order.items[0].id == first.order.items[0].id
        assert second.order.subtotal == Decimal("20.00")

    def test_line_with_modifiers_is_not_merged(self, burger):
        """Test a customised line gets a sibling instead of a merge."""
        order = Order(
            items=[
                OrderItem(
                    menu_item_id="burger",
                    name="Burger",
                    quantity=1,
                    unit_price=Decimal("11.00"),
                    selected_modifiers=[
                        SelectedModifier(group_id="cheese", option_id="cheddar")
                    ],
                )
            ],
            subtotal=Decimal("11.00"),
            total=Decimal("11.00"),
        )
        result = apply_match(order, ItemMatch(menu_item=burger, quantity=1))

        assert result.created is True
        assert len(result.order.items) == 2
        assert result.order.subtotal == Decimal("21.00")

    def test_existing_tax_rate_is_preserved(self, fries):
        """Test the order's effective tax rate carries over."""
        order = Order(
            items=[
                OrderItem(menu_item_id="burger", name="Burger", unit_price=Decimal("10.00"))
            ],
            subtotal=Decimal("10.00"),
            tax=Decimal("0.80"),
            total=Decimal("10.80"),
        )
        result = apply_match(order, ItemMatch(menu_item=fries, quantity=1))

        assert result.order.subtotal == Decimal("14.00")
        assert result.order.tax == Decimal("1.12")
        assert result.order.total == Decimal("15.12")

    def test_input_order_is_not_mutated(self, burger):
        """Test the original order is left intact."""
        order = Order()
        apply_match(order, ItemMatch(menu_item=burger, quantity=3))

        assert order.items == []
        assert order.subtotal == Decimal("0")


class TestEffectiveTaxRate:
    """Test tax rate inference."""

    def test_zero_subtotal(self):
        """Test an empty order has a zero rate."""
        assert effective_tax_rate(Order()) == Decimal("0")

    def test_ratio_of_tax_to_subtotal(self):
        """Test the rate is tax divided by subtotal."""
        order = Order(subtotal=Decimal("10.00"), tax=Decimal("0.80"), total=Decimal("10.80"))
        assert effective_tax_rate(order) == Decimal("0.08")
