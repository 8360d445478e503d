"""Shared test fixtures and configuration."""
import pytest
import os
from pathlib import Path
from unittest.mock import AsyncMock

import httpx
import yaml
from fastapi.testclient import TestClient

# Set test environment variables before importing app
os.environ.setdefault("OPENAI_API_KEY", "test-key")
os.environ.setdefault("RESTAURANT_NAME", "Test Restaurant")

from orderbot.main import app
from orderbot.core.dependencies import (
    get_menu_repository,
    get_orchestrator,
    get_submission_client,
    get_validator,
)
from orderbot.services.agent.generator import ReplyGenerator
from orderbot.services.agent.orchestrator import ConversationOrchestrator
from orderbot.services.menu.base import Menu
from orderbot.services.menu.in_memory_menu import InMemoryMenuProvider
from orderbot.services.menu.repository import MenuRepository
from orderbot.services.ordering.submission import OrderSubmissionClient, RetryPolicy
from orderbot.services.ordering.validator import OrderValidator

DEFAULT_REPLY = "Got it! Would you like anything else?"


@pytest.fixture
def test_menu_path():
    """Return path to test menu YAML file."""
    return Path(__file__).parent / "fixtures" / "test_menu.yaml"


@pytest.fixture
def test_menu(test_menu_path):
    """Menu snapshot parsed from the test fixture."""
    with open(test_menu_path, "r", encoding="utf-8") as f:
        return Menu(**yaml.safe_load(f))


@pytest.fixture
def test_menu_repository(test_menu_path):
    """Create menu repository with test data."""
    provider = InMemoryMenuProvider(menu_file=str(test_menu_path))
    return MenuRepository(provider)


@pytest.fixture
def validator():
    return OrderValidator(tax_rate="0.08")


@pytest.fixture
def mock_reply_generator():
    """Reply generator returning a canned reply."""
    generator = AsyncMock(spec=ReplyGenerator)
    generator.generate.return_value = DEFAULT_REPLY
    return generator


@pytest.fixture
def orchestrator(test_menu_repository, mock_reply_generator, validator):
    return ConversationOrchestrator(
        menu_repository=test_menu_repository,
        reply_generator=mock_reply_generator,
        validator=validator,
    )


@pytest.fixture
def sleep_calls():
    """Delays passed to the submission client's sleep."""
    return []


@pytest.fixture
def fake_sleep(sleep_calls):
    async def _sleep(delay):
        sleep_calls.append(delay)
    return _sleep


@pytest.fixture
def fulfillment_responses():
    """Queue of (status, json) pairs served by the fake fulfillment API."""
    return [(200, {"confirmationId": "conf-123", "estimatedWaitTimeMinutes": 20})]


@pytest.fixture
def fulfillment_requests():
    return []


@pytest.fixture
def fulfillment_transport(fulfillment_responses, fulfillment_requests):
    """Mock transport replaying ``fulfillment_responses``; the last one repeats."""
    def handler(request: httpx.Request) -> httpx.Response:
        fulfillment_requests.append(request)
        index = min(len(fulfillment_requests), len(fulfillment_responses)) - 1
        status, body = fulfillment_responses[index]
        return httpx.Response(status, json=body)
    return httpx.MockTransport(handler)


@pytest.fixture
def submission_client(fulfillment_transport, fake_sleep):
    return OrderSubmissionClient(
        submission_url="https://fulfillment.test/orders",
        api_key="secret",
        retry_policy=RetryPolicy(max_retries=3, initial_delay=1.0, backoff_factor=2.0),
        transport=fulfillment_transport,
        sleep=fake_sleep,
    )


@pytest.fixture
def test_client(test_menu_repository, orchestrator, validator, submission_client):
    """Create FastAPI test client with overrides."""
    app.dependency_overrides[get_menu_repository] = lambda: test_menu_repository
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_validator] = lambda: validator
    app.dependency_overrides[get_submission_client] = lambda: submission_client

    client = TestClient(app)

    yield client

    # Clear overrides
    app.dependency_overrides.clear()
