"""Menu API endpoints."""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from orderbot.core.dependencies import get_menu_repository
from orderbot.services.menu.base import MenuFetchError, MenuItem
from orderbot.services.menu.repository import MenuRepository

router = APIRouter()
logger = logging.getLogger(__name__)

MENU_ERROR_STATUS = {
    MenuFetchError.NETWORK_ERROR: 503,
    MenuFetchError.HTTP_ERROR: 502,
    MenuFetchError.INVALID_FORMAT: 500,
}


class MenuResponse(BaseModel):
    """Menu response model."""
    items: List[MenuItem]
    categories: List[str] = []
    summary: Optional[str] = None


def menu_error_to_http(error: MenuFetchError) -> HTTPException:
    """Map a menu source failure onto an HTTP error."""
    return HTTPException(
        status_code=MENU_ERROR_STATUS.get(error.code, 500),
        detail={"error": error.message, "code": error.code},
    )


@router.get("/api/menu", response_model=MenuResponse)
async def get_menu(
    request: Request,
    menu_repository: MenuRepository = Depends(get_menu_repository),
):
    """Get the full menu with its compact summary."""
    logger.info(
        f"[MENU] Request received - Client: {request.client.host if request.client else 'unknown'}"
    )

    try:
        menu = await menu_repository.get_menu()
        summary = await menu_repository.get_menu_summary()
    except MenuFetchError as e:
        logger.error(f"[MENU] Error fetching menu - {e.code}: {e.message}")
        raise menu_error_to_http(e)

    logger.info(f"[MENU] Menu loaded - {len(menu.items)} items, {len(menu.categories)} categories")
    return MenuResponse(items=menu.items, categories=menu.categories, summary=summary)


@router.post("/api/menu/refresh", response_model=MenuResponse)
async def refresh_menu(
    menu_repository: MenuRepository = Depends(get_menu_repository),
):
    """Force a fresh menu fetch, bypassing the cache."""
    logger.info("[MENU] Refresh requested")

    try:
        menu = await menu_repository.refresh()
    except MenuFetchError as e:
        logger.error(f"[MENU] Refresh failed - {e.code}: {e.message}")
        raise menu_error_to_http(e)

    return MenuResponse(items=menu.items, categories=menu.categories)
