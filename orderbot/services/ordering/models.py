"""Order models."""
import uuid
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

CENT = Decimal("0.01")
ZERO = Decimal("0")


def round_money(amount: Decimal) -> Decimal:
    """Round to 2 decimal places for currency, half-up."""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


class OrderStatus(str, Enum):
    """Order lifecycle; only forward progression is allowed."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    def __str__(self) -> str:
        return self.value


class SelectedModifier(BaseModel):
    """Snapshot of a chosen modifier option."""

    model_config = ConfigDict(frozen=True)

    group_id: str
    option_id: str
    name: str = ""
    price_adjustment: Decimal = ZERO


class OrderItem(BaseModel):
    """One line of an order; distinct from the menu item it references."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: new_id("line"))
    menu_item_id: str
    name: str = ""
    quantity: int = Field(default=1, ge=1)
    unit_price: Decimal = ZERO
    selected_modifiers: List[SelectedModifier] = []
    special_instructions: Optional[str] = None

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class Order(BaseModel):
    """A customer order. Totals are always derived server-side."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: new_id("ord"))
    customer_id: Optional[str] = None
    items: List[OrderItem] = []
    subtotal: Decimal = ZERO
    tax: Decimal = ZERO
    total: Decimal = ZERO
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def has_items(self) -> bool:
        return len(self.items) > 0

    def get_summary(self) -> str:
        """Get a text summary of the order."""
        if not self.items:
            return "No items in order yet."
        lines = []
        for item in self.items:
            mod_str = (
                f" ({', '.join(m.name or m.option_id for m in item.selected_modifiers)})"
                if item.selected_modifiers
                else ""
            )
            qty_str = f"{item.quantity}x " if item.quantity > 1 else ""
            lines.append(f"- {qty_str}{item.name}{mod_str}")
        return "\n".join(lines)


class ValidationErrorKind(str, Enum):
    """Kinds of defects the validator reports."""

    ITEM_NOT_FOUND = "item-not-found"
    ITEM_UNAVAILABLE = "item-unavailable"
    MODIFIER_REQUIRED = "modifier-required"
    MODIFIER_INVALID = "modifier-invalid"
    PRICE_MISMATCH = "price-mismatch"

    def __str__(self) -> str:
        return self.value


class OrderValidationError(BaseModel):
    """A single defect found in an order."""

    model_config = ConfigDict(frozen=True)

    kind: ValidationErrorKind
    message: str
    item_id: Optional[str] = None
    menu_item_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class ValidationResult(BaseModel):
    """Outcome of validating an order against a menu snapshot.

    ``validated_order`` is always populated so callers can preview the
    corrected totals even when the order is invalid.
    """

    model_config = ConfigDict(frozen=True)

    is_valid: bool
    errors: List[OrderValidationError] = []
    validated_order: Order
