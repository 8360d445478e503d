"""HTTP menu source."""
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from orderbot.services.menu.base import Menu, MenuFetchError, MenuItem, MenuSource

logger = logging.getLogger(__name__)


def normalize_menu_payload(payload: Any) -> List[MenuItem]:
    """
    Convert an upstream menu payload into menu items.

    Accepts a bare list of items, a list of categories with nested
    ``plates``, or a mapping wrapping either under ``data``, ``menu``
    or ``categories``.

    Raises:
        MenuFetchError: if the payload shape is not recognised
    """
    if isinstance(payload, list):
        if not payload:
            return []
        first = payload[0]
        if isinstance(first, dict):
            if "plates" in first:
                return _flatten_categories(payload)
            if "base_price" in first or "basePrice" in first or "price" in first:
                return _parse_items(payload)

    if isinstance(payload, dict):
        if isinstance(payload.get("data"), list):
            return normalize_menu_payload(payload["data"])
        if isinstance(payload.get("categories"), list):
            return _flatten_categories(payload["categories"])
        if isinstance(payload.get("menu"), list):
            return normalize_menu_payload(payload["menu"])

    raise MenuFetchError(
        "Invalid menu data format received from API", MenuFetchError.INVALID_FORMAT
    )


def _parse_items(raw_items: List[Dict[str, Any]]) -> List[MenuItem]:
    items = []
    for raw in raw_items:
        data = dict(raw)
        # Accept the camelCase shape used by JS menu services
        if "basePrice" in data:
            data["base_price"] = data.pop("basePrice")
        elif "price" in data and "base_price" not in data:
            data["base_price"] = data.pop("price") or 0
        if "isAvailable" in data:
            data["is_available"] = data.pop("isAvailable")
        groups = data.pop("modifierGroups", None)
        if groups is not None:
            data["modifier_groups"] = [_snake_group(g) for g in groups]
        data["id"] = str(data.get("id", ""))
        try:
            items.append(MenuItem(**data))
        except ValidationError as e:
            raise MenuFetchError(
                f"Invalid menu item in API response: {e}", MenuFetchError.INVALID_FORMAT
            ) from e
    return items


def _snake_group(group: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": str(group.get("id", "")),
        "name": group.get("name", ""),
        "min_selection": group.get("minSelection", group.get("min_selection", 0)),
        "max_selection": group.get("maxSelection", group.get("max_selection", 1)),
        "options": [
            {
                "id": str(option.get("id", "")),
                "name": option.get("name", ""),
                "price_adjustment": option.get(
                    "priceAdjustment", option.get("price_adjustment", 0)
                ),
                "is_available": option.get(
                    "isAvailable", option.get("is_available", True)
                ),
            }
            for option in group.get("options", [])
        ],
    }


def _flatten_categories(categories: List[Dict[str, Any]]) -> List[MenuItem]:
    items = []
    for category in categories:
        for plate in category.get("plates") or []:
            try:
                items.append(
                    MenuItem(
                        id=str(plate["id"]),
                        name=plate["name"],
                        description=plate.get("description") or "",
                        base_price=plate.get("price") or 0,
                        category=category.get("name"),
                        is_available=True,
                        modifier_groups=[],
                    )
                )
            except (KeyError, ValidationError) as e:
                raise MenuFetchError(
                    f"Invalid plate in API response: {e}", MenuFetchError.INVALID_FORMAT
                ) from e
    return items


class HttpMenuProvider(MenuSource):
    """Menu source backed by an external menu API."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport

    async def fetch(self) -> Menu:
        """Fetch the menu from the configured endpoint."""
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.get(
                    self.base_url, params={"origin": "API"}, headers=headers
                )
        except httpx.HTTPError as e:
            logger.error(f"[MENU] Network error fetching menu from {self.base_url}: {e}")
            raise MenuFetchError(
                "Network error occurred while retrieving the menu.",
                MenuFetchError.NETWORK_ERROR,
            ) from e

        if response.is_error:
            raise MenuFetchError(
                f"Failed to fetch menu: {response.status_code} {response.reason_phrase}",
                MenuFetchError.HTTP_ERROR,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise MenuFetchError(
                "Menu API returned a non-JSON body", MenuFetchError.INVALID_FORMAT
            ) from e

        menu = Menu(items=normalize_menu_payload(payload))
        logger.info(f"[MENU] Fetched {len(menu.items)} items from {self.base_url}")
        return menu
