"""Session shopping list of missing ingredient names."""

import logging
from typing import List, Sequence

logger = logging.getLogger(__name__)


class ShoppingList:
    """Ordered, duplicate-free list. Matching is exact and case-sensitive."""

    def __init__(self) -> None:
        self._items: List[str] = []

    @property
    def items(self) -> List[str]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item: str) -> bool:
        return item in self._items

    def add(self, items: Sequence[str]) -> List[str]:
        """Append the items not already present, in their given order. Returns what was added."""
        added: List[str] = []
        for item in items:
            if item not in self._items and item not in added:
                added.append(item)
        self._items = self._items + added
        if added:
            logger.info("Added %d item(s) to shopping list", len(added))
        return added

    def remove(self, item: str) -> bool:
        """Delete the first exact match. Returns False when the item is not listed."""
        if item not in self._items:
            return False
        index = self._items.index(item)
        self._items = self._items[:index] + self._items[index + 1:]
        return True
