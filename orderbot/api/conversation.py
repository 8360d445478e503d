"""Conversation API endpoint."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from orderbot.core.dependencies import get_orchestrator
from orderbot.services.agent.orchestrator import ConversationError, ConversationOrchestrator
from orderbot.services.agent.state import ConversationState, create_initial_state

router = APIRouter()
logger = logging.getLogger(__name__)

CONVERSATION_ERROR_STATUS = {
    ConversationError.REPLY_GENERATION_FAILED: 502,
    ConversationError.MENU_UNAVAILABLE: 503,
}


class ConversationRequest(BaseModel):
    """One customer message, with the state returned by the previous turn."""
    message: str
    state: Optional[ConversationState] = None


class ConversationResponse(BaseModel):
    """The advanced state and the assistant's reply."""
    state: ConversationState
    reply: str


@router.post("/api/conversation", response_model=ConversationResponse)
async def converse(
    body: ConversationRequest,
    orchestrator: ConversationOrchestrator = Depends(get_orchestrator),
):
    """Advance a conversation by one customer message."""
    if not body.message.strip():
        raise HTTPException(status_code=400, detail="Message must not be empty")

    state = body.state or create_initial_state()
    logger.info(
        f"[CONVERSATION] Turn received - conversation {state.conversation_id}, "
        f"{len(state.history)} prior turns"
    )

    try:
        new_state = await orchestrator.advance(state, body.message)
    except ConversationError as e:
        logger.error(
            f"[CONVERSATION] Turn failed for conversation {state.conversation_id} - "
            f"{e.code}: {e.message}"
        )
        return JSONResponse(
            status_code=CONVERSATION_ERROR_STATUS.get(e.code, 500),
            content={"error": e.message, "code": e.code},
        )

    return ConversationResponse(state=new_state, reply=new_state.last_reply or "")
