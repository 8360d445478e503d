"""YAML-backed menu source."""
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from orderbot.services.menu.base import Menu, MenuFetchError, MenuItem, MenuSource

logger = logging.getLogger(__name__)

DEFAULT_MENU_FILE = Path(__file__).parent / "data" / "menu.yaml"


def _default_menu() -> Menu:
    """Minimal menu used when no menu file is present."""
    return Menu(
        items=[
            MenuItem(
                id="burger_classic",
                name="Classic Burger",
                description="Beef patty with lettuce and tomato",
                base_price="10.00",
                category="Mains",
                modifier_groups=[
                    {
                        "id": "cheese_group",
                        "name": "Cheese Selection",
                        "min_selection": 0,
                        "max_selection": 1,
                        "options": [
                            {"id": "cheddar", "name": "Cheddar", "price_adjustment": "1.00"},
                            {"id": "swiss", "name": "Swiss", "price_adjustment": "1.50"},
                        ],
                    }
                ],
            ),
            MenuItem(
                id="fries_side",
                name="French Fries",
                description="Crispy salted fries",
                base_price="4.00",
                category="Sides",
            ),
        ]
    )


class InMemoryMenuProvider(MenuSource):
    """Menu source reading a YAML file on every fetch."""

    def __init__(self, menu_file: Optional[str] = None):
        """Initialize with optional menu file path."""
        self.menu_file = Path(menu_file) if menu_file else DEFAULT_MENU_FILE

    async def fetch(self) -> Menu:
        """Load the menu from the YAML file."""
        if not self.menu_file.exists():
            logger.warning(f"[MENU] Menu file {self.menu_file} not found, using default menu")
            return _default_menu()

        try:
            with open(self.menu_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise MenuFetchError(
                f"Menu file {self.menu_file} is not valid YAML: {e}",
                MenuFetchError.INVALID_FORMAT,
            ) from e

        if not isinstance(data, dict):
            raise MenuFetchError(
                f"Menu file {self.menu_file} must contain a mapping with an 'items' list",
                MenuFetchError.INVALID_FORMAT,
            )

        try:
            menu = Menu(items=data.get("items", []))
        except ValidationError as e:
            raise MenuFetchError(
                f"Menu file {self.menu_file} has invalid items: {e}",
                MenuFetchError.INVALID_FORMAT,
            ) from e

        logger.debug(f"[MENU] Loaded {len(menu.items)} items from {self.menu_file}")
        return menu
