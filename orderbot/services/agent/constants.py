"""Constants for conversation flow and the finalize guardrail."""

# Indicators that the customer wants the order placed.
# Substring match on the lower-cased user text.
FINALIZE_INDICATORS = [
    "confirm",
    "place order",
    "place the order",
    "place my order",
    "confirmar",
]

# Metadata keys attached to assistant turns
ITEM_ADDED = "item_added"
QUANTITY_ADDED = "quantity_added"
ORDER_STATUS_CHANGED = "order_status_changed"
VALIDATION_ERRORS = "validation_errors"

EMPTY_ORDER_REPLY = (
    "I don't see any items in your order yet. What would you like to order?"
)
INVALID_ORDER_PREFIX = "I can't place the order yet."
