"""Conversation orchestration: one user turn in, one new state out."""
import logging
from typing import Any, Dict, Optional, Tuple

from orderbot.services.agent.constants import (
    EMPTY_ORDER_REPLY,
    FINALIZE_INDICATORS,
    INVALID_ORDER_PREFIX,
    ITEM_ADDED,
    ORDER_STATUS_CHANGED,
    QUANTITY_ADDED,
    VALIDATION_ERRORS,
)
from orderbot.services.agent.generator import ReplyGenerationError, ReplyGenerator
from orderbot.services.agent.state import ConversationState, TurnRole, new_turn
from orderbot.services.menu.base import Menu, MenuFetchError
from orderbot.services.menu.repository import (
    DEFAULT_ITEMS_PER_CATEGORY,
    MenuRepository,
    build_menu_summary,
)
from orderbot.services.ordering.matcher import ItemMatcher
from orderbot.services.ordering.models import Order, OrderStatus, utc_now
from orderbot.services.ordering.mutator import apply_match
from orderbot.services.ordering.validator import OrderValidator

logger = logging.getLogger(__name__)


class ConversationError(Exception):
    """A turn could not be completed; the incoming state is unchanged."""

    REPLY_GENERATION_FAILED = "reply_generation_failed"
    MENU_UNAVAILABLE = "menu_unavailable"

    def __init__(self, message: str, code: str):
        super().__init__(message)
        self.message = message
        self.code = code


def is_finalize_intent(user_text: str) -> bool:
    """Check if the customer is asking to place the order."""
    text = user_text.lower()
    return any(indicator in text for indicator in FINALIZE_INDICATORS)


class ConversationOrchestrator:
    """
    Advances a conversation by one user turn.

    Holds no per-conversation memory: the full state is passed in and a
    new state is returned. Turns of the same conversation must be issued
    one at a time by the caller.
    """

    def __init__(
        self,
        menu_repository: MenuRepository,
        reply_generator: ReplyGenerator,
        validator: Optional[OrderValidator] = None,
        matcher: Optional[ItemMatcher] = None,
        items_per_category: int = DEFAULT_ITEMS_PER_CATEGORY,
        tolerate_menu_failure: bool = False,
    ):
        self.menu_repository = menu_repository
        self.reply_generator = reply_generator
        self.validator = validator or OrderValidator()
        self.matcher = matcher or ItemMatcher()
        self.items_per_category = items_per_category
        self.tolerate_menu_failure = tolerate_menu_failure

    async def advance(self, state: ConversationState, user_text: str) -> ConversationState:
        """
        Process one customer message.

        Raises:
            ConversationError: if the menu or the reply generator fails
        """
        text = user_text.strip()
        user_turn = new_turn(TurnRole.USER, text)
        logger.info(
            f"[ORCHESTRATOR] Conversation {state.conversation_id} - user: '{text}'"
        )

        menu = await self._load_menu()
        metadata: Dict[str, Any] = {}

        order = state.current_order
        if order.status == OrderStatus.PENDING:
            match = self.matcher.match(text, menu.items)
            mutation = apply_match(order, match)
            order = mutation.order
            if mutation.line is not None:
                metadata[ITEM_ADDED] = mutation.line.name
                metadata[QUANTITY_ADDED] = match.quantity

        try:
            reply = await self.reply_generator.generate(
                state.history,
                text,
                build_menu_summary(menu, self.items_per_category),
            )
        except ReplyGenerationError as e:
            logger.error(
                f"[ORCHESTRATOR] Reply generation failed ({e.code}) for "
                f"conversation {state.conversation_id}: {e.message}"
            )
            raise ConversationError(
                "Failed to generate response.",
                ConversationError.REPLY_GENERATION_FAILED,
            ) from e
        except Exception as e:
            logger.error(
                f"[ORCHESTRATOR] Unexpected reply generator error for conversation "
                f"{state.conversation_id}: {type(e).__name__}: {str(e)}",
                exc_info=True,
            )
            raise ConversationError(
                "Failed to generate response.",
                ConversationError.REPLY_GENERATION_FAILED,
            ) from e

        if order.status == OrderStatus.PENDING and is_finalize_intent(text):
            order, reply = self._finalize(order, menu, reply, metadata)

        assistant_turn = new_turn(TurnRole.ASSISTANT, reply, metadata)
        new_state = (
            state.append_turn(user_turn)
            .append_turn(assistant_turn)
            .model_copy(update={"current_order": order})
        )
        logger.info(
            f"[ORCHESTRATOR] Conversation {state.conversation_id} - "
            f"{len(order.items)} lines, status {order.status}, metadata {metadata}"
        )
        return new_state

    async def _load_menu(self) -> Menu:
        try:
            return await self.menu_repository.get_menu()
        except MenuFetchError as e:
            if self.tolerate_menu_failure:
                logger.warning(
                    f"[ORCHESTRATOR] Menu unavailable ({e.code}); continuing with an empty catalog"
                )
                return Menu(items=[])
            raise ConversationError(
                f"Menu unavailable: {e.message}", ConversationError.MENU_UNAVAILABLE
            ) from e

    def _finalize(
        self, order: Order, menu: Menu, reply: str, metadata: Dict[str, Any]
    ) -> Tuple[Order, str]:
        """Guardrail run before an order may become confirmed."""
        if not order.has_items():
            logger.warning("[ORCHESTRATOR] Finalize requested but the order is empty")
            return order, EMPTY_ORDER_REPLY

        result = self.validator.validate(order, menu)
        if not result.is_valid:
            logger.warning(
                f"[ORCHESTRATOR] Guardrail blocked order {order.id}: "
                f"{[str(e.kind) for e in result.errors]}"
            )
            metadata[VALIDATION_ERRORS] = [
                error.model_dump(mode="json") for error in result.errors
            ]
            messages = " ".join(error.message for error in result.errors)
            return order, f"{INVALID_ORDER_PREFIX} {messages}"

        confirmed = result.validated_order.model_copy(
            update={"status": OrderStatus.CONFIRMED, "updated_at": utc_now()}
        )
        metadata[ORDER_STATUS_CHANGED] = OrderStatus.CONFIRMED.value
        logger.info(
            f"[ORCHESTRATOR] Order {order.id} status changed: "
            f"{OrderStatus.PENDING} -> {OrderStatus.CONFIRMED}\n{confirmed.get_summary()}"
        )
        return confirmed, reply
