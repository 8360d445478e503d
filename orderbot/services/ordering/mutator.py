"""Applies matched items to a running order."""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

from orderbot.services.ordering.matcher import ItemMatch
from orderbot.services.ordering.models import (
    ZERO,
    Order,
    OrderItem,
    new_id,
    round_money,
    utc_now,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MutationResult:
    """New order snapshot plus the line that was created or merged into."""

    order: Order
    line: Optional[OrderItem] = None
    created: bool = False


def effective_tax_rate(order: Order) -> Decimal:
    """Tax as a fraction of subtotal, or zero for an empty subtotal."""
    if order.subtotal > 0:
        return order.tax / order.subtotal
    return ZERO


def reprice(order: Order, items: List[OrderItem], tax_rate: Decimal) -> Order:
    """Return a copy of ``order`` with new lines and recomputed totals."""
    subtotal = round_money(sum((item.line_total for item in items), ZERO))
    tax = round_money(subtotal * tax_rate)
    return order.model_copy(
        update={
            "items": items,
            "subtotal": subtotal,
            "tax": tax,
            "total": subtotal + tax,
            "updated_at": utc_now(),
        }
    )


def apply_match(order: Order, match: Optional[ItemMatch]) -> MutationResult:
    """
    Add a matched item to the order without mutating it.

    A line for the same menu item with no selected modifiers absorbs the
    quantity; otherwise a new line is appended at the item's base price.
    Modifiers are never chosen here, and nothing is validated: that is
    left to the validator.
    """
    if match is None:
        return MutationResult(order=order)

    menu_item = match.menu_item
    tax_rate = effective_tax_rate(order)

    existing = next(
        (
            line
            for line in order.items
            if line.menu_item_id == menu_item.id and not line.selected_modifiers
        ),
        None,
    )

    if existing is not None:
        merged = existing.model_copy(
            update={"quantity": existing.quantity + match.quantity}
        )
        items = [merged if line.id == existing.id else line for line in order.items]
        logger.info(
            f"[MUTATOR] Merged {match.quantity}x '{menu_item.name}' into line "
            f"{existing.id} (now {merged.quantity})"
        )
        return MutationResult(order=reprice(order, items, tax_rate), line=merged)

    line = OrderItem(
        id=new_id("line"),
        menu_item_id=menu_item.id,
        name=menu_item.name,
        quantity=match.quantity,
        unit_price=menu_item.base_price,
        selected_modifiers=[],
    )
    logger.info(f"[MUTATOR] Added new line {line.id}: {line.quantity}x '{line.name}'")
    return MutationResult(
        order=reprice(order, [*order.items, line], tax_rate), line=line, created=True
    )
