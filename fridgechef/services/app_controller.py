"""
Single owner of the application state.

Every component holds its own slice (navigation, recipes and favorites,
shopping list, chat, the cooking session); the controller is the only thing
that mutates them, one command at a time, and derives read-only snapshots for
the presentation layer.
"""

import logging
from typing import AsyncGenerator, AsyncIterator, Dict, List, Optional

from fridgechef.constants import (
    ANALYSIS_FAILED_MESSAGE,
    DIETARY_OPTIONS,
    ITEMS_ADDED_MESSAGE,
    NO_FAVORITES_MESSAGE,
    NO_MATCHES_MESSAGE,
    TRANSLATION_LANGUAGES,
)
from fridgechef.models.chat import ChatEvent, ChatMessage
from fridgechef.models.recipe import Recipe
from fridgechef.models.state import AppSnapshot, ChatSummary, CookingSnapshot, RecipeCard, Tab, TabCounts, View
from fridgechef.services.ai_client import RecipeAI
from fridgechef.services.chat_orchestrator import ChatOrchestrator
from fridgechef.services.cooking_session import CookingSession
from fridgechef.services.favorites_store import FavoritesStore
from fridgechef.services.image_service import ImageService
from fridgechef.services.navigation import Navigator
from fridgechef.services.recipe_collection import RecipeCollection
from fridgechef.services.shopping_list import ShoppingList
from fridgechef.services.speech import SpeechCapability, UnsupportedSpeech, VoiceCommand
from fridgechef.services.translation_cache import RecipeTranslator, Translator
from fridgechef.utils.exceptions import (
    GeminiError,
    ImageProcessingError,
    InvalidTransitionError,
    NotFoundError,
    RecipeParseError,
)

logger = logging.getLogger(__name__)


class AppController:
    """Commands and snapshots over the whole fridge-to-recipes session."""

    def __init__(
        self,
        ai: RecipeAI,
        speech: Optional[SpeechCapability] = None,
        image_service: Optional[ImageService] = None,
        favorites_store: Optional[FavoritesStore] = None,
        default_language: Optional[str] = None,
    ) -> None:
        self.ai = ai
        self.speech = speech or UnsupportedSpeech()
        self.images = image_service or ImageService()

        self.translator = Translator(ai, default_language)
        self.recipe_translator = RecipeTranslator(self.translator)
        self.cook_time_estimates: Dict[str, int] = {}

        self.navigator = Navigator()
        self.collection = RecipeCollection(favorites_store or FavoritesStore())
        self.shopping_list = ShoppingList()
        self.chat = ChatOrchestrator(ai, self.translator)
        self.cooking: Optional[CookingSession] = None

        self.is_loading = False
        self.error: Optional[str] = None

    async def start(self) -> None:
        await self.chat.initialize()

    # ---------------------------------------------------------------------
    # Snapshots
    # ---------------------------------------------------------------------

    def _empty_message(self, tab: Tab, visible: List[Recipe]) -> Optional[str]:
        if tab == Tab.SHOPPING_LIST or visible:
            return None
        if tab == Tab.FAVORITES and not self.collection.favorites:
            return NO_FAVORITES_MESSAGE
        return NO_MATCHES_MESSAGE

    def visible_recipes(self) -> List[RecipeCard]:
        tab = self.navigator.tab
        if tab == Tab.SHOPPING_LIST:
            return []
        return [
            RecipeCard(recipe=recipe, isFavorite=self.collection.is_favorite(recipe))
            for recipe in self.collection.filtered_view(tab)
        ]

    def snapshot(self) -> AppSnapshot:
        tab = self.navigator.tab
        cards = self.visible_recipes()
        selected = self.navigator.selected_recipe
        return AppSnapshot(
            view=self.navigator.view,
            activeTab=tab,
            isLoading=self.is_loading,
            error=self.error,
            activeFilters=list(self.collection.active_filters),
            searchQuery=self.collection.search_query,
            recipes=cards,
            emptyMessage=self._empty_message(tab, [card.recipe for card in cards]),
            counts=TabCounts(
                recipes=len(self.collection.recipes),
                favorites=len(self.collection.favorites),
                shoppingList=len(self.shopping_list),
            ),
            shoppingList=self.shopping_list.items,
            selectedRecipeId=selected.id if selected else None,
            dietaryOptions=list(DIETARY_OPTIONS),
            languages=[dict(language) for language in TRANSLATION_LANGUAGES],
            chat=ChatSummary(
                available=self.chat.available,
                isOpen=self.chat.is_open,
                state=self.chat.state,
                language=self.chat.language,
                messageCount=len(self.chat.messages),
            ),
        )

    def cooking_snapshot(self) -> CookingSnapshot:
        session = self._require_cooking()
        return session.snapshot(self.collection.is_favorite(session.recipe))

    # ---------------------------------------------------------------------
    # Upload and analysis
    # ---------------------------------------------------------------------

    async def analyze_image(self, file_content: bytes) -> List[Recipe]:
        """
        Turn a fridge photo into the new recipe set.

        On failure the error text is recorded, the view returns to upload and
        the previously shown recipes are kept; the exception is re-raised.
        """
        self.is_loading = True
        self.error = None
        try:
            image_data, mime_type = self.images.prepare(file_content)
            recipes = await self.ai.extract_recipes(image_data, mime_type, list(self.collection.active_filters))
        except (ImageProcessingError, RecipeParseError) as e:
            logger.warning("Image analysis rejected: %s", str(e))
            self._fail_analysis(str(e))
            raise
        except GeminiError as e:
            logger.error("Image analysis failed: %s", str(e), exc_info=True)
            self._fail_analysis(ANALYSIS_FAILED_MESSAGE)
            raise
        finally:
            self.is_loading = False

        self._close_cooking()
        self.collection.replace_recipes(recipes)
        self.navigator.show_recipes()
        logger.info("Image analyzed", extra={"recipe_count": len(recipes)})
        return recipes

    def _fail_analysis(self, message: str) -> None:
        self.error = message
        self._close_cooking()
        self.navigator.fail_upload()

    def reset(self) -> None:
        """Back to upload. Favorites and the shopping list survive."""
        self._close_cooking()
        self.collection.clear_recipes()
        self.collection.set_search_query("")
        self.error = None
        self.navigator.reset()

    # ---------------------------------------------------------------------
    # Recipes view
    # ---------------------------------------------------------------------

    def toggle_filter(self, tag: str) -> List[str]:
        return self.collection.toggle_filter(tag)

    def clear_filters(self) -> None:
        self.collection.clear_filters()

    def set_search_query(self, query: str) -> None:
        self.collection.set_search_query(query)

    def set_tab(self, tab: Tab) -> None:
        self.navigator.set_tab(tab)

    def get_recipe(self, recipe_id: str) -> Recipe:
        recipe = self.collection.find(recipe_id)
        if recipe is None:
            raise NotFoundError(f"Recipe not found: {recipe_id}")
        return recipe

    def toggle_favorite(self, recipe_id: str) -> bool:
        return self.collection.toggle_favorite(self.get_recipe(recipe_id))

    # ---------------------------------------------------------------------
    # Cooking mode
    # ---------------------------------------------------------------------

    def select_recipe(self, recipe_id: str) -> CookingSession:
        """Enter cooking mode with a fresh session. Call estimate_cook_time() afterwards."""
        recipe = self.get_recipe(recipe_id)
        self.navigator.enter_cooking(recipe)
        self._close_cooking()
        self.cooking = CookingSession(
            recipe, self.ai, self.recipe_translator, self.speech, self.cook_time_estimates
        )
        logger.info("Recipe selected", extra={"recipe_id": recipe.id, "recipe": recipe.name})
        return self.cooking

    async def estimate_cook_time(self) -> Optional[int]:
        session = self.cooking
        if session is None:
            return None
        return await session.estimate_cook_time()

    def back_to_recipes(self) -> None:
        self.navigator.back_to_recipes()
        self._close_cooking()

    def _close_cooking(self) -> None:
        if self.cooking is not None:
            self.cooking.speech.cancel()
            self.cooking.stop_listening()
            self.cooking = None

    def _require_cooking(self) -> CookingSession:
        if self.cooking is None or self.navigator.view != View.COOKING:
            raise InvalidTransitionError("No recipe is being cooked")
        return self.cooking

    def next_step(self) -> int:
        return self._require_cooking().next_step()

    def previous_step(self) -> int:
        return self._require_cooking().previous_step()

    def toggle_ingredient(self, ingredient_name: str) -> bool:
        return self._require_cooking().toggle_availability(ingredient_name)

    async def set_cooking_language(self, language: str) -> None:
        await self._require_cooking().set_language(language)

    def apply_voice_command(self, transcript: str) -> Optional[VoiceCommand]:
        return self._require_cooking().apply_voice_command(transcript)

    def read_aloud(self) -> Optional[str]:
        return self._require_cooking().read_aloud()

    def add_missing_to_shopping_list(self) -> str:
        added = self.shopping_list.add(self._require_cooking().missing_ingredients)
        return ITEMS_ADDED_MESSAGE.format(count=len(added))

    def remove_shopping_item(self, item: str) -> None:
        if not self.shopping_list.remove(item):
            raise NotFoundError(f"Not on the shopping list: {item}")

    # ---------------------------------------------------------------------
    # Chat
    # ---------------------------------------------------------------------

    def set_chat_open(self, is_open: bool) -> None:
        self.chat.set_open(is_open)

    async def set_chat_language(self, language: str) -> bool:
        self.chat.set_language(language)
        return await self.chat.translate_transcript(language)

    async def send_chat_message(self, text: str) -> ChatMessage:
        """Run a whole turn; returns the final model message."""
        reply = await self.chat.send_message(text).wait()
        await self.chat.translate_transcript()
        return reply

    def stream_chat_message(self, text: str) -> AsyncIterator[ChatEvent]:
        """Claim the turn immediately and stream its events, then any follow-up translations."""
        return self._with_translation(self.chat.stream_message(text))

    async def _with_translation(self, events: AsyncGenerator[ChatEvent, None]) -> AsyncIterator[ChatEvent]:
        try:
            async for event in events:
                yield event
        finally:
            # Closing early must reach the turn's own stream so it can cancel the turn.
            await events.aclose()

        updates: List[ChatEvent] = []
        unsubscribe = self.chat.subscribe(updates.append)
        try:
            await self.chat.translate_transcript()
        finally:
            unsubscribe()
        for event in updates:
            yield event

    def ask_substitute(self, ingredient_name: str) -> AsyncIterator[ChatEvent]:
        prompt = self._require_cooking().substitute_prompt(ingredient_name)
        self.chat.set_open(True)
        return self.stream_chat_message(prompt)

    def ask_social_links(self) -> AsyncIterator[ChatEvent]:
        prompt = self._require_cooking().social_links_prompt()
        self.chat.set_open(True)
        return self.stream_chat_message(prompt)
