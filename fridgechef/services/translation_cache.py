"""
Per-language memoized translation of recipe and chat text.

Entries are keyed by (owner key, language code). An entry is written only after a
fully successful translation, so a missing entry always means "not translated yet".
Only one translation may be in flight per (owner key, language); a concurrent
request for the same pair is suppressed rather than queued.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Generic, List, Optional, Sequence, Set, Tuple, TypeVar

from fridgechef.config import settings
from fridgechef.constants import language_name
from fridgechef.models.recipe import Recipe, RecipeTranslation
from fridgechef.services.ai_client import RecipeAI
from fridgechef.utils.exceptions import FridgeChefException

logger = logging.getLogger(__name__)

T = TypeVar("T")
CacheKey = Tuple[str, str]


class InFlightTracker:
    """Set of (owner, language) pairs with a translation request outstanding."""

    def __init__(self) -> None:
        self._keys: Set[CacheKey] = set()

    def begin(self, owner: str, language: str) -> bool:
        """Claim the pair. Returns False if a request for it is already running."""
        key = (owner, language)
        if key in self._keys:
            return False
        self._keys.add(key)
        return True

    def end(self, owner: str, language: str) -> None:
        self._keys.discard((owner, language))

    def is_running(self, owner: str, language: str) -> bool:
        return (owner, language) in self._keys


class TranslationCache(Generic[T]):
    """Translated payloads by (owner key, language)."""

    def __init__(self) -> None:
        self._entries: Dict[CacheKey, T] = {}
        self.in_flight = InFlightTracker()

    def get(self, owner: str, language: str) -> Optional[T]:
        return self._entries.get((owner, language))

    def put(self, owner: str, language: str, value: T) -> None:
        key = (owner, language)
        if key in self._entries:
            # First successful translation wins; entries are never recomputed.
            return
        self._entries[key] = value

    def __len__(self) -> int:
        return len(self._entries)


class Translator:
    """Fail-soft front for the AI translation call."""

    def __init__(self, ai: RecipeAI, default_language: Optional[str] = None) -> None:
        self.ai = ai
        self.default_language = default_language or settings.default_language

    async def try_translate(self, items: Sequence[str], language: str) -> Optional[List[str]]:
        """
        Translate `items` into `language`.

        Returns the default-language input unchanged, and None on any failure
        (unknown language, transport error, wrong-length or malformed payload).
        """
        if language == self.default_language or not items:
            return list(items)

        target = language_name(language)
        if target is None:
            logger.warning("No translation target for language code %s", language)
            return None

        try:
            translated = await self.ai.translate_batch(list(items), target)
        except FridgeChefException as e:
            logger.warning("Translation to %s failed: %s", language, e)
            return None

        if len(translated) != len(items):
            logger.warning(
                "Translation to %s returned %d items for %d inputs", language, len(translated), len(items)
            )
            return None
        return translated

    async def translate(self, items: Sequence[str], language: str) -> List[str]:
        """Same-length, same-order translation; the originals on failure."""
        translated = await self.try_translate(items, language)
        return list(items) if translated is None else translated


class RecipeTranslator:
    """Translates a recipe's ingredient names and steps, cached per recipe id."""

    def __init__(self, translator: Translator, cache: Optional[TranslationCache[RecipeTranslation]] = None) -> None:
        self.translator = translator
        self.cache: TranslationCache[RecipeTranslation] = cache or TranslationCache()

    @property
    def default_language(self) -> str:
        return self.translator.default_language

    def cached(self, recipe: Recipe, language: str) -> Optional[RecipeTranslation]:
        return self.cache.get(recipe.id, language)

    def is_translating(self, recipe: Recipe, language: str) -> bool:
        return self.cache.in_flight.is_running(recipe.id, language)

    async def translate_recipe(self, recipe: Recipe, language: str) -> Optional[RecipeTranslation]:
        """
        Translate and cache `recipe` for `language`.

        Both batches are requested concurrently and the entry is published only
        when both succeed. Returns None for the default language, on failure,
        or when a translation for the same recipe and language is already running.
        The entry is stored under the recipe's own id, so a late result never
        lands on another recipe.
        """
        if language == self.default_language:
            return None

        cached = self.cache.get(recipe.id, language)
        if cached is not None:
            return cached

        if not self.cache.in_flight.begin(recipe.id, language):
            logger.debug("Translation of %s to %s already in flight", recipe.id, language)
            return None

        try:
            names, steps = await asyncio.gather(
                self.translator.try_translate(recipe.ingredient_names, language),
                self.translator.try_translate(recipe.instructions, language),
            )
            if names is None or steps is None:
                return None

            entry = RecipeTranslation(language=language, ingredientNames=names, instructions=steps)
            self.cache.put(recipe.id, language, entry)
            logger.info("Recipe translated", extra={"recipe_id": recipe.id, "language": language})
            return self.cache.get(recipe.id, language)
        finally:
            self.cache.in_flight.end(recipe.id, language)

    def display(self, recipe: Recipe, language: str) -> Tuple[List[str], List[str]]:
        """Ingredient names and steps to show for `language`, originals when untranslated."""
        entry = self.cache.get(recipe.id, language)
        if entry is None:
            return recipe.ingredient_names, list(recipe.instructions)
        return entry.ingredientNames, entry.instructions
