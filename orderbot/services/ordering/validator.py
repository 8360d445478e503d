"""Order validation and pricing service."""
import logging
from decimal import Decimal
from typing import Dict, List, Sequence, Union

from orderbot.services.menu.base import Menu, MenuItem
from orderbot.services.ordering.models import (
    ZERO,
    Order,
    OrderItem,
    OrderValidationError,
    SelectedModifier,
    ValidationErrorKind,
    ValidationResult,
    round_money,
)

logger = logging.getLogger(__name__)

DEFAULT_TAX_RATE = Decimal("0.08")


class OrderValidator:
    """
    Re-derives an order's prices from a menu snapshot and reports defects.

    Client-declared names and prices are never trusted: every line is
    rebuilt from the menu. The validator is pure; it performs no I/O and
    the same (order, menu) pair always yields the same result.
    """

    def __init__(
        self,
        tax_rate: Union[Decimal, float, str] = DEFAULT_TAX_RATE,
        strict_prices: bool = False,
    ):
        self.tax_rate = Decimal(str(tax_rate))
        # When set, a client unit price that differs from the menu-derived
        # price is reported as price-mismatch instead of silently corrected.
        self.strict_prices = strict_prices

    def validate(
        self, order: Order, menu: Union[Menu, Sequence[MenuItem]]
    ) -> ValidationResult:
        """Validate and reprice ``order`` against ``menu``."""
        if not isinstance(menu, Menu):
            menu = Menu(items=list(menu))

        errors: List[OrderValidationError] = []
        validated_items: List[OrderItem] = []

        for line in order.items:
            menu_item = menu.get_item(line.menu_item_id)
            if menu_item is None:
                errors.append(
                    OrderValidationError(
                        kind=ValidationErrorKind.ITEM_NOT_FOUND,
                        message=f"Menu item with ID '{line.menu_item_id}' not found.",
                        item_id=line.id,
                        menu_item_id=line.menu_item_id,
                    )
                )
                # Carried through unpriced so it adds nothing to the subtotal
                validated_items.append(line.model_copy(update={"unit_price": ZERO}))
                continue

            validated_items.append(self._validate_line(line, menu_item, errors))

        subtotal = round_money(sum((item.line_total for item in validated_items), ZERO))
        tax = round_money(subtotal * self.tax_rate)

        validated_order = order.model_copy(
            update={
                "items": validated_items,
                "subtotal": subtotal,
                "tax": tax,
                "total": subtotal + tax,
            }
        )

        if errors:
            logger.info(
                f"[VALIDATOR] Order {order.id} invalid - "
                f"{[str(e.kind) for e in errors]}"
            )
        else:
            logger.debug(f"[VALIDATOR] Order {order.id} valid - total {validated_order.total}")

        return ValidationResult(
            is_valid=not errors,
            errors=errors,
            validated_order=validated_order,
        )

    def _validate_line(
        self,
        line: OrderItem,
        menu_item: MenuItem,
        errors: List[OrderValidationError],
    ) -> OrderItem:
        if not menu_item.is_available:
            errors.append(
                OrderValidationError(
                    kind=ValidationErrorKind.ITEM_UNAVAILABLE,
                    message=f"Item '{menu_item.name}' is currently unavailable.",
                    item_id=line.id,
                    menu_item_id=menu_item.id,
                )
            )

        selections: Dict[str, List[str]] = {}
        for modifier in line.selected_modifiers:
            selections.setdefault(modifier.group_id, []).append(modifier.option_id)

        known_groups = {group.id for group in menu_item.modifier_groups}
        for group_id in selections:
            if group_id not in known_groups:
                errors.append(
                    OrderValidationError(
                        kind=ValidationErrorKind.MODIFIER_INVALID,
                        message=f"'{menu_item.name}' has no modifier group '{group_id}'.",
                        item_id=line.id,
                        menu_item_id=menu_item.id,
                        details={"group_id": group_id},
                    )
                )

        unit_price = menu_item.base_price
        validated_modifiers: List[SelectedModifier] = []

        # Walk the menu's groups so untouched required groups are reported too
        for group in menu_item.modifier_groups:
            chosen = selections.get(group.id, [])

            if len(chosen) < group.min_selection:
                errors.append(
                    OrderValidationError(
                        kind=ValidationErrorKind.MODIFIER_REQUIRED,
                        message=f"Selection required for '{group.name}'.",
                        item_id=line.id,
                        menu_item_id=menu_item.id,
                        details={
                            "group_id": group.id,
                            "required": group.min_selection,
                            "provided": len(chosen),
                        },
                    )
                )

            if len(chosen) > group.max_selection:
                errors.append(
                    OrderValidationError(
                        kind=ValidationErrorKind.MODIFIER_INVALID,
                        message=(
                            f"Too many selections for '{group.name}'. "
                            f"Max allowed: {group.max_selection}."
                        ),
                        item_id=line.id,
                        menu_item_id=menu_item.id,
                        details={
                            "group_id": group.id,
                            "max": group.max_selection,
                            "provided": len(chosen),
                        },
                    )
                )

            options = {option.id: option for option in group.options}
            for option_id in chosen:
                option = options.get(option_id)
                if option is None:
                    errors.append(
                        OrderValidationError(
                            kind=ValidationErrorKind.MODIFIER_INVALID,
                            message=f"Invalid option ID '{option_id}' for group '{group.name}'.",
                            item_id=line.id,
                            menu_item_id=menu_item.id,
                            details={"group_id": group.id, "option_id": option_id},
                        )
                    )
                    continue

                if not option.is_available:
                    errors.append(
                        OrderValidationError(
                            kind=ValidationErrorKind.MODIFIER_INVALID,
                            message=f"Option '{option.name}' is currently unavailable.",
                            item_id=line.id,
                            menu_item_id=menu_item.id,
                            details={"group_id": group.id, "option_id": option.id},
                        )
                    )

                unit_price += option.price_adjustment
                validated_modifiers.append(
                    SelectedModifier(
                        group_id=group.id,
                        option_id=option.id,
                        name=option.name,
                        price_adjustment=option.price_adjustment,
                    )
                )

        if self.strict_prices and line.unit_price != unit_price:
            errors.append(
                OrderValidationError(
                    kind=ValidationErrorKind.PRICE_MISMATCH,
                    message=(
                        f"Price for '{menu_item.name}' is ${unit_price:.2f}, "
                        f"not ${line.unit_price:.2f}."
                    ),
                    item_id=line.id,
                    menu_item_id=menu_item.id,
                    details={
                        "expected": str(unit_price),
                        "provided": str(line.unit_price),
                    },
                )
            )

        return line.model_copy(
            update={
                "name": menu_item.name,
                "unit_price": unit_price,
                "selected_modifiers": validated_modifiers,
            }
        )
