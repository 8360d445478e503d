"""Reply generation for the ordering assistant."""
import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence

from openai import AsyncOpenAI, OpenAIError

from orderbot.services.agent.prompt import get_menu_context, get_system_prompt
from orderbot.services.agent.state import ConversationTurn

logger = logging.getLogger(__name__)


class ReplyGenerationError(Exception):
    """Raised when the reply generator cannot produce text."""

    UPSTREAM_ERROR = "upstream_error"
    EMPTY_RESPONSE = "empty_response"

    def __init__(self, message: str, code: str = UPSTREAM_ERROR):
        super().__init__(message)
        self.message = message
        self.code = code


class ReplyGenerator(ABC):
    """Text-in, text-out assistant reply capability."""

    @abstractmethod
    async def generate(
        self,
        history: Sequence[ConversationTurn],
        new_message: str,
        menu_summary: str,
    ) -> str:
        """
        Produce the assistant's reply.

        Args:
            history: Turns preceding ``new_message``
            new_message: The customer's latest message
            menu_summary: Compact menu text for context

        Raises:
            ReplyGenerationError: on provider failure or an empty reply
        """
        pass


class OpenAIReplyGenerator(ReplyGenerator):
    """Reply generator backed by the OpenAI chat completions API."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        restaurant_name: str = "Restaurant",
        temperature: float = 0.7,
        max_tokens: int = 500,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.client = client or AsyncOpenAI(api_key=api_key)
        self.model = model
        self.restaurant_name = restaurant_name
        self.temperature = temperature
        self.max_tokens = max_tokens

    def build_messages(
        self,
        history: Sequence[ConversationTurn],
        new_message: str,
        menu_summary: str,
    ) -> List[Dict[str, str]]:
        messages = [
            {"role": "system", "content": get_system_prompt(self.restaurant_name)}
        ]
        if menu_summary:
            messages.append({"role": "system", "content": get_menu_context(menu_summary)})
        messages.extend(
            {"role": turn.role.value, "content": turn.content} for turn in history
        )
        messages.append({"role": "user", "content": new_message})
        return messages

    async def generate(
        self,
        history: Sequence[ConversationTurn],
        new_message: str,
        menu_summary: str,
    ) -> str:
        messages = self.build_messages(history, new_message, menu_summary)
        logger.debug(
            f"[GENERATOR] Requesting reply - {len(messages)} messages, model {self.model}"
        )

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except OpenAIError as e:
            logger.error(
                f"[GENERATOR] Provider error: {type(e).__name__}: {str(e)}",
                exc_info=True,
            )
            raise ReplyGenerationError(
                f"AI provider error: {str(e)}", ReplyGenerationError.UPSTREAM_ERROR
            ) from e

        content = None
        if response.choices:
            content = response.choices[0].message.content
        if not content or not content.strip():
            raise ReplyGenerationError(
                "AI provider returned an empty response.",
                ReplyGenerationError.EMPTY_RESPONSE,
            )
        return content.strip()
