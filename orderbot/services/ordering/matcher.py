"""Lexical menu item matching for free-form utterances."""
import logging
import re
import unicodedata
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from orderbot.services.menu.base import MenuItem
from orderbot.services.ordering.numbers import DEFAULT_LOCALE, get_number_words

logger = logging.getLogger(__name__)

_TOKEN_SPLIT_RE = re.compile(r"[^a-z0-9]+")
_DIGITS_RE = re.compile(r"^(\d+)x?$")

MIN_TOKEN_LENGTH = 3
QUANTITY_WINDOW = 3


def normalize_utterance(text: str) -> str:
    """Lower-case, strip accents and collapse whitespace."""
    decomposed = unicodedata.normalize("NFKD", text or "")
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    return " ".join(stripped.lower().split())


def tokenize(text: str) -> List[str]:
    return [token for token in _TOKEN_SPLIT_RE.split(text) if token]


@dataclass(frozen=True)
class ItemMatch:
    """A menu item found in an utterance and the quantity asked for."""

    menu_item: MenuItem
    quantity: int = 1


class ItemMatcher:
    """
    Best-effort matcher from an utterance to one menu item and a quantity.

    An item matches when its full name appears in the utterance, or when
    any of its name tokens of at least three characters does. The first
    matching catalog entry wins; there is no scoring. Never raises:
    "no match" is returned as None.
    """

    def __init__(self, locale: str = DEFAULT_LOCALE):
        self.locale = locale
        self.number_words = get_number_words(locale)
        words = sorted(self.number_words, key=len, reverse=True)
        self._number_alternation = "|".join([r"\d+"] + [re.escape(w) for w in words])

    def match(self, utterance: str, catalog: Sequence[MenuItem]) -> Optional[ItemMatch]:
        """Find the first catalog item mentioned in the utterance."""
        text = normalize_utterance(utterance)
        if not text or not catalog:
            return None

        found = self.find_item(text, catalog)
        if found is None:
            logger.debug(f"[MATCHER] No menu item found in '{text}'")
            return None

        menu_item, span_tokens = found
        quantity = self.extract_quantity(text, span_tokens)
        logger.info(
            f"[MATCHER] Matched '{menu_item.name}' x{quantity} from '{text}'"
        )
        return ItemMatch(menu_item=menu_item, quantity=quantity)

    def find_item(
        self, text: str, catalog: Sequence[MenuItem]
    ) -> Optional[Tuple[MenuItem, List[str]]]:
        """
        Return the first matching item and the name tokens that matched.

        The tokens are the whole name on a full-name match, or the single
        token that matched otherwise.
        """
        for item in catalog:
            name = normalize_utterance(item.name)
            name_tokens = tokenize(name)
            if not name_tokens:
                continue
            if name in text:
                return item, name_tokens
            for token in name_tokens:
                if len(token) >= MIN_TOKEN_LENGTH and token in text:
                    return item, [token]
        return None

    def extract_quantity(self, text: str, span_tokens: List[str]) -> int:
        """
        Find the quantity for a matched name.

        A number directly before or after the name wins; otherwise the
        first number within three tokens of the name is used. Defaults to 1.
        """
        name_pattern = r"[^a-z0-9]+".join(re.escape(token) for token in span_tokens)
        numbers = self._number_alternation

        before = re.search(
            rf"(?<![a-z0-9])(?P<qty>{numbers})\s*(?:x\s*)?{name_pattern}", text
        )
        after = re.search(
            rf"{name_pattern}(?:e?s)?\s*(?:x\s*)?(?P<qty>{numbers})(?![a-z0-9])", text
        )
        adjacent = before or after
        if adjacent:
            return self._to_quantity(adjacent.group("qty"))

        text_tokens = tokenize(text)
        index = next(
            (
                i
                for i, token in enumerate(text_tokens)
                if any(name_token in token for name_token in span_tokens)
            ),
            -1,
        )
        if index < 0:
            return 1

        start = max(0, index - QUANTITY_WINDOW)
        end = min(len(text_tokens), index + QUANTITY_WINDOW + 1)
        for token in text_tokens[start:end]:
            # A number inside the item name ("Combo 2") is not a quantity
            if token in span_tokens:
                continue
            digits = _DIGITS_RE.match(token)
            if digits:
                return max(1, int(digits.group(1)))
            if token in self.number_words:
                return self.number_words[token]
        return 1

    def _to_quantity(self, raw: str) -> int:
        if raw.isdigit():
            return max(1, int(raw))
        return max(1, self.number_words.get(raw, 1))
