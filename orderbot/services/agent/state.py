"""Conversation state management."""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from orderbot.services.ordering.models import Order, new_id, utc_now


class TurnRole(str, Enum):
    """Who produced a conversation turn."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"

    def __str__(self) -> str:
        return self.value


class ConversationTurn(BaseModel):
    """One turn of the conversation."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: new_id("turn"))
    role: TurnRole
    content: str
    timestamp: datetime = Field(default_factory=utc_now)
    # Side effects such as "item_added" or "order_status_changed"
    metadata: Dict[str, Any] = {}


class ConversationState(BaseModel):
    """Conversation history plus the single live order."""

    model_config = ConfigDict(frozen=True)

    conversation_id: str = Field(default_factory=lambda: new_id("conv"))
    history: Tuple[ConversationTurn, ...] = ()
    current_order: Order = Field(default_factory=Order)
    last_updated: datetime = Field(default_factory=utc_now)

    def append_turn(self, turn: ConversationTurn) -> "ConversationState":
        """Return a new state with ``turn`` appended to the history."""
        return self.model_copy(
            update={"history": (*self.history, turn), "last_updated": utc_now()}
        )

    @property
    def last_reply(self) -> Optional[str]:
        """Content of the latest assistant turn, if the history ends with one."""
        if self.history and self.history[-1].role == TurnRole.ASSISTANT:
            return self.history[-1].content
        return None


def new_turn(
    role: TurnRole, content: str, metadata: Optional[Dict[str, Any]] = None
) -> ConversationTurn:
    """Create a turn stamped with a fresh id and the current time."""
    return ConversationTurn(role=role, content=content, metadata=metadata or {})


def create_initial_state(
    conversation_id: Optional[str] = None, customer_id: Optional[str] = "guest"
) -> ConversationState:
    """Fresh conversation with an empty pending order."""
    now = utc_now()
    return ConversationState(
        conversation_id=conversation_id or new_id("conv"),
        history=(),
        current_order=Order(customer_id=customer_id, created_at=now, updated_at=now),
        last_updated=now,
    )
