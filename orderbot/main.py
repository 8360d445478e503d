"""Main FastAPI application."""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from orderbot.api import conversation, health, menu, orders
from orderbot.core.config import settings
from orderbot.core.dependencies import (
    build_menu_repository,
    build_orchestrator,
    build_reply_generator,
    build_submission_client,
    build_validator,
)
from orderbot.core.logging import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging()
    menu_repository = build_menu_repository(settings)
    app.state.menu_repository = menu_repository
    app.state.validator = build_validator(settings)
    app.state.submission_client = build_submission_client(settings)
    app.state.orchestrator = build_orchestrator(
        settings, menu_repository, build_reply_generator(settings)
    )
    yield
    # Shutdown
    menu_repository.clear()


app = FastAPI(
    title="Order Assistant",
    description="Conversational food ordering with server-side order validation",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(health.router, tags=["health"])
app.include_router(menu.router, tags=["menu"])
app.include_router(conversation.router, tags=["conversation"])
app.include_router(orders.router, tags=["orders"])
