"""Unit tests for the OpenAI reply generator."""
from unittest.mock import AsyncMock, Mock

import httpx
import openai
import pytest

from orderbot.services.agent.generator import OpenAIReplyGenerator, ReplyGenerationError
from orderbot.services.agent.state import TurnRole, new_turn


@pytest.fixture
def mock_openai():
    """Mock OpenAI API client."""
    mock_client = Mock()
    mock_completion = Mock()
    mock_completion.choices = [Mock(message=Mock(content="  Sure, one burger coming up!  "))]
    mock_client.chat.completions.create = AsyncMock(return_value=mock_completion)
    return mock_client


@pytest.fixture
def generator(mock_openai):
    return OpenAIReplyGenerator(
        api_key="test-key",
        model="gpt-4o-mini",
        restaurant_name="Test Restaurant",
        client=mock_openai,
    )


class TestBuildMessages:
    """Test prompt assembly."""

    def test_message_order(self, generator):
        """Test system prompt, menu context, history, then the new message."""
        history = [
            new_turn(TurnRole.USER, "hi"),
            new_turn(TurnRole.ASSISTANT, "Hello! What can I get you?"),
        ]

        messages = generator.build_messages(history, "a burger", "mains: Burger ($10.00)")

        assert [m["role"] for m in messages] == ["system", "system", "user", "assistant", "user"]
        assert "Test Restaurant" in messages[0]["content"]
        assert messages[1]["content"] == "MENU CONTEXT:\nmains: Burger ($10.00)"
        assert messages[-1] == {"role": "user", "content": "a burger"}

    def test_empty_summary_is_omitted(self, generator):
        """Test no menu context message when the summary is empty."""
        messages = generator.build_messages([], "hello", "")

        assert [m["role"] for m in messages] == ["system", "user"]


class TestGenerate:
    """Test reply generation."""

    @pytest.mark.asyncio
    async def test_returns_stripped_content(self, generator, mock_openai):
        """Test the reply text is returned stripped."""
        reply = await generator.generate([], "a burger", "")

        assert reply == "Sure, one burger coming up!"
        kwargs = mock_openai.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["max_tokens"] == 500

    @pytest.mark.asyncio
    async def test_empty_response(self, generator, mock_openai):
        """Test an empty completion raises empty_response."""
        mock_openai.chat.completions.create.return_value.choices = [Mock(message=Mock(content=""))]

        with pytest.raises(ReplyGenerationError) as exc_info:
            await generator.generate([], "a burger", "")

        assert exc_info.value.code == ReplyGenerationError.EMPTY_RESPONSE

    @pytest.mark.asyncio
    async def test_provider_error(self, generator, mock_openai):
        """Test OpenAI errors raise upstream_error."""
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        mock_openai.chat.completions.create.side_effect = openai.APIConnectionError(request=request)

        with pytest.raises(ReplyGenerationError) as exc_info:
            await generator.generate([], "a burger", "")

        assert exc_info.value.code == ReplyGenerationError.UPSTREAM_ERROR
