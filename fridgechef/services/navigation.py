"""
Top-level screen state machine.

    upload --show_recipes--> recipes --enter_cooking(recipe)--> cooking
    cooking --back_to_recipes--> recipes
    recipes|cooking --reset--> upload
    any --fail_upload--> upload

The selected recipe lives here together with the view, so "cooking without a
recipe" cannot be represented: enter_cooking is the only way in and it
requires a recipe.
"""

import logging
from typing import Optional

from fridgechef.models.recipe import Recipe
from fridgechef.models.state import Tab, View
from fridgechef.utils.exceptions import InvalidTransitionError

logger = logging.getLogger(__name__)


class Navigator:
    def __init__(self) -> None:
        self._view = View.UPLOAD
        self._tab = Tab.RECIPES
        self._selected: Optional[Recipe] = None

    @property
    def view(self) -> View:
        return self._view

    @property
    def tab(self) -> Tab:
        return self._tab

    @property
    def selected_recipe(self) -> Optional[Recipe]:
        return self._selected

    def _go(self, view: View) -> None:
        if view != self._view:
            logger.info("View %s -> %s", self._view.value, view.value)
        self._view = view

    def show_recipes(self) -> None:
        """Successful analysis: land on the suggested recipes tab."""
        self._selected = None
        self._tab = Tab.RECIPES
        self._go(View.RECIPES)

    def fail_upload(self) -> None:
        self._selected = None
        self._go(View.UPLOAD)

    def enter_cooking(self, recipe: Optional[Recipe]) -> None:
        if recipe is None:
            raise InvalidTransitionError("Cannot enter cooking mode without a selected recipe")
        if self._view == View.UPLOAD:
            raise InvalidTransitionError("Cannot enter cooking mode before recipes are shown")
        self._selected = recipe
        self._go(View.COOKING)

    def back_to_recipes(self) -> None:
        if self._view != View.COOKING:
            raise InvalidTransitionError(f"Cannot go back to recipes from {self._view.value}")
        self._selected = None
        self._go(View.RECIPES)

    def reset(self) -> None:
        self._selected = None
        self._go(View.UPLOAD)

    def set_tab(self, tab: Tab) -> None:
        self._tab = tab
