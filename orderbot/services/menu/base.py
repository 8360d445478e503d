"""Menu models and menu source interface."""
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ModifierOption(BaseModel):
    """A single choice inside a modifier group (e.g. "Extra Cheese")."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    price_adjustment: Decimal = Decimal("0")  # Can be zero or negative
    is_available: bool = True


class ModifierGroup(BaseModel):
    """A group of modifier options with selection bounds."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    min_selection: int = Field(default=0, ge=0)
    max_selection: int = Field(default=1, ge=0)
    options: List[ModifierOption] = []

    @model_validator(mode="after")
    def check_bounds(self) -> "ModifierGroup":
        if self.min_selection > self.max_selection:
            raise ValueError(
                f"min_selection ({self.min_selection}) exceeds "
                f"max_selection ({self.max_selection}) for group '{self.name}'"
            )
        return self


class MenuItem(BaseModel):
    """Menu item model."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    base_price: Decimal = Field(default=Decimal("0"), ge=0)
    category: Optional[str] = None
    is_available: bool = True
    modifier_groups: List[ModifierGroup] = []


class Menu(BaseModel):
    """Point-in-time menu snapshot."""

    model_config = ConfigDict(frozen=True)

    items: List[MenuItem] = []

    @property
    def categories(self) -> List[str]:
        """Categories in first-seen order, without duplicates."""
        seen: List[str] = []
        for item in self.items:
            if item.category and item.category not in seen:
                seen.append(item.category)
        return seen

    def get_item(self, menu_item_id: str) -> Optional[MenuItem]:
        """Look up an item by its identifier."""
        for item in self.items:
            if item.id == menu_item_id:
                return item
        return None


class MenuFetchError(Exception):
    """Raised when a menu source cannot produce a snapshot."""

    NETWORK_ERROR = "network_error"
    HTTP_ERROR = "http_error"
    INVALID_FORMAT = "invalid_format"

    def __init__(self, message: str, code: str = NETWORK_ERROR):
        super().__init__(message)
        self.message = message
        self.code = code


class MenuSource(ABC):
    """Abstract base class for menu sources."""

    @abstractmethod
    async def fetch(self) -> Menu:
        """Fetch a fresh menu snapshot.

        Raises:
            MenuFetchError: if the menu cannot be retrieved or parsed
        """
        pass
