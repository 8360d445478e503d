"""FastAPI dependencies."""
from fastapi import Request

from orderbot.core.config import Settings
from orderbot.services.agent.generator import OpenAIReplyGenerator, ReplyGenerator
from orderbot.services.agent.orchestrator import ConversationOrchestrator
from orderbot.services.menu.base import MenuSource
from orderbot.services.menu.http_menu import HttpMenuProvider
from orderbot.services.menu.in_memory_menu import InMemoryMenuProvider
from orderbot.services.menu.repository import MenuRepository
from orderbot.services.ordering.matcher import ItemMatcher
from orderbot.services.ordering.submission import OrderSubmissionClient, RetryPolicy
from orderbot.services.ordering.validator import OrderValidator


def build_menu_source(settings: Settings) -> MenuSource:
    """HTTP menu when a URL is configured, the YAML menu otherwise."""
    if settings.menu_api_url:
        return HttpMenuProvider(
            base_url=settings.menu_api_url,
            api_key=settings.api_key,
            timeout=settings.http_timeout_seconds,
        )
    return InMemoryMenuProvider(menu_file=settings.menu_file)


def build_menu_repository(settings: Settings) -> MenuRepository:
    return MenuRepository(
        source=build_menu_source(settings),
        ttl_seconds=settings.menu_cache_ttl_seconds,
    )


def build_validator(settings: Settings) -> OrderValidator:
    return OrderValidator(tax_rate=str(settings.tax_rate))


def build_reply_generator(settings: Settings) -> ReplyGenerator:
    return OpenAIReplyGenerator(
        api_key=settings.openai_api_key,
        model=settings.openai_model,
        restaurant_name=settings.restaurant_name,
        temperature=settings.openai_temperature,
        max_tokens=settings.openai_max_tokens,
    )


def build_submission_client(settings: Settings) -> OrderSubmissionClient:
    return OrderSubmissionClient(
        submission_url=settings.order_submission_url,
        api_key=settings.api_key,
        retry_policy=RetryPolicy(
            max_retries=settings.submission_max_retries,
            initial_delay=settings.submission_initial_delay_seconds,
            backoff_factor=settings.submission_backoff_factor,
        ),
        timeout=settings.http_timeout_seconds,
    )


def build_orchestrator(
    settings: Settings,
    menu_repository: MenuRepository,
    reply_generator: ReplyGenerator,
) -> ConversationOrchestrator:
    return ConversationOrchestrator(
        menu_repository=menu_repository,
        reply_generator=reply_generator,
        validator=build_validator(settings),
        matcher=ItemMatcher(locale=settings.number_locale),
        items_per_category=settings.menu_summary_items_per_category,
        tolerate_menu_failure=settings.tolerate_menu_failure,
    )


def get_menu_repository(request: Request) -> MenuRepository:
    """Get the application's menu repository."""
    return request.app.state.menu_repository


def get_orchestrator(request: Request) -> ConversationOrchestrator:
    """Get the application's conversation orchestrator."""
    return request.app.state.orchestrator


def get_validator(request: Request) -> OrderValidator:
    """Get the application's order validator."""
    return request.app.state.validator


def get_submission_client(request: Request) -> OrderSubmissionClient:
    """Get the application's order submission client."""
    return request.app.state.submission_client
