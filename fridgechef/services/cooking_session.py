"""State derived from the recipe currently being cooked."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from fridgechef.constants import (
    SOCIAL_LINKS_PROMPT,
    SUBSTITUTE_PROMPT,
    TRANSLATION_FAILED_MESSAGE,
    language_name,
)
from fridgechef.models.recipe import Recipe
from fridgechef.models.state import CookingSnapshot, IngredientView
from fridgechef.services.ai_client import RecipeAI
from fridgechef.services.speech import SpeechCapability, VoiceCommand, parse_voice_command
from fridgechef.services.translation_cache import RecipeTranslator
from fridgechef.utils.exceptions import FridgeChefException, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class CookingSession:
    """
    One selection of one recipe.

    A new session is created every time a recipe is selected, which resets
    ingredient availability and the step counter. Translations and cook-time
    estimates live outside the session, keyed by recipe id, so results that
    arrive after the user moved on are kept for later without touching the
    recipe now on screen.
    """

    def __init__(
        self,
        recipe: Recipe,
        ai: RecipeAI,
        translator: RecipeTranslator,
        speech: SpeechCapability,
        cook_time_estimates: Dict[str, int],
    ) -> None:
        self.recipe = recipe
        self.ai = ai
        self.translator = translator
        self.speech = speech
        self.cook_time_estimates = cook_time_estimates

        self.availability: Dict[str, bool] = {i.name: i.isAvailable for i in recipe.ingredients}
        self.current_step = 0
        self.language = translator.default_language
        self.translation_error: Optional[str] = None
        self.is_estimating = False
        self.is_speaking = False
        self.is_listening = False

    # ---------------------------------------------------------------------
    # Ingredients
    # ---------------------------------------------------------------------

    def toggle_availability(self, ingredient_name: str) -> bool:
        """Flip availability of an ingredient, addressed by its original name."""
        if ingredient_name not in self.availability:
            raise NotFoundError(f"Ingredient not in recipe: {ingredient_name}")
        self.availability[ingredient_name] = not self.availability[ingredient_name]
        return self.availability[ingredient_name]

    @property
    def missing_ingredients(self) -> List[str]:
        return [name for name in self.recipe.ingredient_names if not self.availability.get(name, False)]

    # ---------------------------------------------------------------------
    # Translation
    # ---------------------------------------------------------------------

    def displayed(self):
        return self.translator.display(self.recipe, self.language)

    @property
    def is_translating(self) -> bool:
        return self.translator.is_translating(self.recipe, self.language)

    async def set_language(self, language: str) -> None:
        if language_name(language) is None:
            raise ValidationError(f"Unsupported language: {language}")

        self.language = language
        self.translation_error = None
        if language == self.translator.default_language:
            return

        entry = await self.translator.translate_recipe(self.recipe, language)
        if entry is not None or self.translator.is_translating(self.recipe, language):
            return

        logger.warning("Recipe translation failed", extra={"recipe_id": self.recipe.id, "language": language})
        # Only revert if the user has not picked another language meanwhile
        if self.language == language:
            self.translation_error = TRANSLATION_FAILED_MESSAGE
            self.language = self.translator.default_language

    # ---------------------------------------------------------------------
    # Cook time
    # ---------------------------------------------------------------------

    @property
    def estimated_cook_time(self) -> Optional[int]:
        return self.cook_time_estimates.get(self.recipe.id)

    async def estimate_cook_time(self) -> Optional[int]:
        """Ask for an estimate when the recipe has no cook time. Failures yield None."""
        if self.recipe.cookTime is not None:
            return None
        if self.recipe.id in self.cook_time_estimates:
            return self.cook_time_estimates[self.recipe.id]

        self.is_estimating = True
        try:
            minutes = await self.ai.estimate_cook_time(self.recipe.name, self.recipe.instructions)
        except FridgeChefException as e:
            logger.warning("Cook time estimation failed for %s: %s", self.recipe.name, e)
            minutes = None
        finally:
            self.is_estimating = False

        if minutes is None or minutes <= 0:
            return None
        self.cook_time_estimates[self.recipe.id] = minutes
        return minutes

    # ---------------------------------------------------------------------
    # Steps and speech
    # ---------------------------------------------------------------------

    @property
    def step_count(self) -> int:
        return len(self.recipe.instructions)

    def _stop_speaking(self) -> None:
        self.speech.cancel()
        self.is_speaking = False

    def next_step(self) -> int:
        if self.current_step < self.step_count - 1:
            self.current_step += 1
            self._stop_speaking()
        return self.current_step

    def previous_step(self) -> int:
        if self.current_step > 0:
            self.current_step -= 1
            self._stop_speaking()
        return self.current_step

    def current_instruction(self) -> Optional[str]:
        _, steps = self.displayed()
        if not steps:
            return None
        return steps[self.current_step]

    def read_aloud(self) -> Optional[str]:
        """Toggle reading the current step. Returns the text being read, if any."""
        if self.is_speaking:
            self._stop_speaking()
            return None

        text = self.current_instruction()
        if text is None or not self.speech.supported:
            return text

        self.speech.speak(text, self.language, on_end=self._on_speech_end)
        self.is_speaking = True
        return text

    def _on_speech_end(self) -> None:
        self.is_speaking = False

    def apply_voice_command(self, transcript: str) -> Optional[VoiceCommand]:
        command = parse_voice_command(transcript)
        if command == VoiceCommand.NEXT:
            self.next_step()
        elif command == VoiceCommand.PREVIOUS:
            self.previous_step()
        return command

    async def listen(self) -> None:
        """Apply voice commands from the recognizer until it stops or stop_listening() is called."""
        if not self.speech.supported:
            return
        self.is_listening = True
        try:
            async for transcript in self.speech.recognize(self.language):
                if not self.is_listening:
                    break
                self.apply_voice_command(transcript)
        finally:
            self.is_listening = False

    def stop_listening(self) -> None:
        self.is_listening = False

    # ---------------------------------------------------------------------
    # Chat prompts
    # ---------------------------------------------------------------------

    def substitute_prompt(self, ingredient_name: str) -> str:
        names, _ = self.displayed()
        try:
            display_name = names[self.recipe.ingredient_names.index(ingredient_name)]
        except ValueError:
            raise NotFoundError(f"Ingredient not in recipe: {ingredient_name}")
        return SUBSTITUTE_PROMPT.format(ingredient=display_name, recipe=self.recipe.name)

    def social_links_prompt(self) -> str:
        return SOCIAL_LINKS_PROMPT.format(recipe=self.recipe.name)

    # ---------------------------------------------------------------------
    # Snapshot
    # ---------------------------------------------------------------------

    def snapshot(self, is_favorite: bool) -> CookingSnapshot:
        names, steps = self.displayed()
        return CookingSnapshot(
            recipe=self.recipe,
            isFavorite=is_favorite,
            language=self.language,
            isTranslating=self.is_translating,
            translationError=self.translation_error,
            ingredients=[
                IngredientView(name=display, originalName=original, isAvailable=self.availability.get(original, False))
                for display, original in zip(names, self.recipe.ingredient_names)
            ],
            missingIngredients=self.missing_ingredients,
            instructions=steps,
            currentStep=self.current_step,
            stepCount=self.step_count,
            currentInstruction=self.current_instruction(),
            cookTime=self.recipe.cookTime,
            estimatedCookTime=self.estimated_cook_time,
            isEstimatingCookTime=self.is_estimating,
            speechSupported=self.speech.supported,
            isSpeaking=self.is_speaking,
            isListening=self.is_listening,
        )
