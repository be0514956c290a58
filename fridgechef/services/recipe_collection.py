"""Working set of suggested recipes, favorites, dietary filters and search."""

import logging
from typing import Iterable, List, Optional, Sequence

from fridgechef.constants import DIETARY_OPTIONS
from fridgechef.models.recipe import Recipe
from fridgechef.models.state import Tab
from fridgechef.services.favorites_store import FavoritesStore
from fridgechef.utils.exceptions import ValidationError

logger = logging.getLogger(__name__)


def filter_by_dietary_tags(recipes: Sequence[Recipe], tags: Iterable[str]) -> List[Recipe]:
    """Keep recipes carrying every tag in `tags`. No tags keeps everything."""
    required = set(tags)
    if not required:
        return list(recipes)
    return [recipe for recipe in recipes if required.issubset(recipe.dietaryTags)]


def search_recipes(recipes: Sequence[Recipe], query: Optional[str]) -> List[Recipe]:
    """Case-insensitive substring match on the recipe name or any ingredient name."""
    q = (query or "").strip().lower()
    if not q:
        return list(recipes)
    return [
        recipe
        for recipe in recipes
        if q in recipe.name.lower() or any(q in name.lower() for name in recipe.ingredient_names)
    ]


class RecipeCollection:
    """
    Holds the latest analysis result and the persisted favorites.

    The filtered view is recomputed from scratch on every read.
    Favorites are identified by recipe name.
    """

    def __init__(self, store: FavoritesStore) -> None:
        self.store = store
        self.recipes: List[Recipe] = []
        self.favorites: List[Recipe] = store.load()
        self.active_filters: List[str] = []
        self.search_query: str = ""

    # Recipes

    def replace_recipes(self, recipes: Sequence[Recipe]) -> None:
        self.recipes = list(recipes)

    def clear_recipes(self) -> None:
        self.recipes = []

    def find(self, recipe_id: str) -> Optional[Recipe]:
        for recipe in self.recipes + self.favorites:
            if recipe.id == recipe_id:
                return recipe
        return None

    # Filters and search

    def toggle_filter(self, tag: str) -> List[str]:
        if tag not in DIETARY_OPTIONS:
            raise ValidationError(f"Unknown dietary filter: {tag}")
        if tag in self.active_filters:
            self.active_filters = [f for f in self.active_filters if f != tag]
        else:
            self.active_filters = self.active_filters + [tag]
        return self.active_filters

    def clear_filters(self) -> None:
        self.active_filters = []

    def set_search_query(self, query: str) -> None:
        self.search_query = query or ""

    def source(self, tab: Tab) -> List[Recipe]:
        if tab == Tab.FAVORITES:
            return self.favorites
        return self.recipes

    def filtered_view(self, tab: Tab) -> List[Recipe]:
        """Source for the tab -> dietary filters (AND) -> search query."""
        return search_recipes(filter_by_dietary_tags(self.source(tab), self.active_filters), self.search_query)

    # Favorites

    def is_favorite(self, recipe: Recipe) -> bool:
        return any(fav.name == recipe.name for fav in self.favorites)

    def toggle_favorite(self, recipe: Recipe) -> bool:
        """Add or remove `recipe` by name and persist. Returns the new favorite status."""
        if self.is_favorite(recipe):
            self.favorites = [fav for fav in self.favorites if fav.name != recipe.name]
            favorited = False
        else:
            self.favorites = self.favorites + [recipe]
            favorited = True
        self.store.save(self.favorites)
        logger.info("Favorite toggled", extra={"recipe": recipe.name, "favorited": favorited})
        return favorited
