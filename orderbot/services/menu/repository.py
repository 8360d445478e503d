"""Menu repository."""
import logging
import time
from typing import Callable, Dict, List, Optional

from orderbot.services.menu.base import Menu, MenuSource

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0
DEFAULT_ITEMS_PER_CATEGORY = 6


class MenuRepository:
    """
    Owns the menu snapshot for its callers.

    The snapshot is fetched from the source on first use and reused until
    ``ttl_seconds`` have elapsed. There is no module-level cache: whoever
    constructs the repository owns the cached snapshot.
    """

    def __init__(
        self,
        source: MenuSource,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.source = source
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._menu: Optional[Menu] = None
        self._fetched_at: Optional[float] = None

    @property
    def last_refreshed(self) -> Optional[float]:
        """Clock reading of the last successful fetch, if any."""
        return self._fetched_at

    def is_fresh(self) -> bool:
        """Whether the cached snapshot is still within its TTL."""
        if self._menu is None or self._fetched_at is None:
            return False
        return (self._clock() - self._fetched_at) < self.ttl_seconds

    async def get_menu(self) -> Menu:
        """Return the cached snapshot, fetching a new one when stale."""
        if self.is_fresh():
            return self._menu
        return await self.refresh()

    async def refresh(self) -> Menu:
        """Fetch a new snapshot regardless of cache state.

        A failed fetch leaves the previous snapshot untouched and propagates
        the MenuFetchError.
        """
        menu = await self.source.fetch()
        self._menu = menu
        self._fetched_at = self._clock()
        logger.info(f"[MENU] Snapshot refreshed - {len(menu.items)} items")
        return menu

    def clear(self) -> None:
        """Drop the cached snapshot."""
        self._menu = None
        self._fetched_at = None

    async def get_menu_summary(
        self, items_per_category: int = DEFAULT_ITEMS_PER_CATEGORY
    ) -> str:
        """Get menu summary text for LLM context."""
        return build_menu_summary(await self.get_menu(), items_per_category)


def build_menu_summary(
    menu: Menu, items_per_category: int = DEFAULT_ITEMS_PER_CATEGORY
) -> str:
    """
    Render a compact, category-grouped menu description.

    Each category lists at most ``items_per_category`` available items as
    ``Name ($price)``. Categories keep first-seen order.
    """
    grouped: Dict[str, List[str]] = {}
    for item in menu.items:
        if not item.is_available:
            continue
        category = item.category or "Other"
        entries = grouped.setdefault(category, [])
        if len(entries) < items_per_category:
            entries.append(f"{item.name} (${item.base_price:.2f})")

    return "\n".join(
        f"{category}: {', '.join(entries)}" for category, entries in grouped.items()
    )
