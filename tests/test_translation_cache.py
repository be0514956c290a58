"""Tests for translation caching and fallback."""

import asyncio

from conftest import make_recipe, run

from fridgechef.services.translation_cache import (
    InFlightTracker,
    RecipeTranslator,
    TranslationCache,
    Translator,
)
from fridgechef.utils.exceptions import GeminiError


def test_default_language_is_identity(fake_ai):
    """Translating to English never calls the service."""
    translator = Translator(fake_ai, "en")
    assert run(translator.translate(["Eggs"], "en")) == ["Eggs"]
    assert fake_ai.translate_calls == []


def test_translate_uses_language_name(fake_ai):
    translator = Translator(fake_ai, "en")
    assert run(translator.translate(["Eggs", "Milk"], "es")) == ["Spanish: Eggs", "Spanish: Milk"]
    assert fake_ai.translate_calls == [(["Eggs", "Milk"], "Spanish")]


def test_wrong_length_falls_back_to_originals(fake_ai):
    """No partial substitution when the service drops an item."""
    fake_ai.drop_translations = 1
    translator = Translator(fake_ai, "en")

    assert run(translator.try_translate(["Eggs", "Milk"], "fr")) is None
    assert run(translator.translate(["Eggs", "Milk"], "fr")) == ["Eggs", "Milk"]


def test_transport_error_falls_back_to_originals(fake_ai):
    fake_ai.translate_error = GeminiError("offline")
    translator = Translator(fake_ai, "en")
    assert run(translator.translate(["Eggs"], "de")) == ["Eggs"]


def test_unknown_language_is_not_translated(fake_ai):
    translator = Translator(fake_ai, "en")
    assert run(translator.try_translate(["Eggs"], "xx")) is None
    assert fake_ai.translate_calls == []


def test_cache_first_write_wins():
    cache = TranslationCache()
    cache.put("r1", "es", "uno")
    cache.put("r1", "es", "dos")
    assert cache.get("r1", "es") == "uno"
    assert cache.get("r1", "fr") is None
    assert len(cache) == 1


def test_in_flight_tracker_suppresses_duplicates():
    tracker = InFlightTracker()
    assert tracker.begin("chat", "es") is True
    assert tracker.begin("chat", "es") is False
    assert tracker.begin("chat", "fr") is True
    tracker.end("chat", "es")
    assert tracker.is_running("chat", "es") is False
    assert tracker.begin("chat", "es") is True


def test_recipe_translation_is_cached(fake_ai):
    """Once translated, a recipe is never sent again for that language."""
    recipe = make_recipe("Omelette", ingredients=["Eggs", "Cheese"], steps=["Whisk.", "Fry."])
    translator = RecipeTranslator(Translator(fake_ai, "en"))

    entry = run(translator.translate_recipe(recipe, "es"))
    assert entry.ingredientNames == ["Spanish: Eggs", "Spanish: Cheese"]
    assert entry.instructions == ["Spanish: Whisk.", "Spanish: Fry."]
    assert len(fake_ai.translate_calls) == 2

    run(translator.translate_recipe(recipe, "es"))
    assert len(fake_ai.translate_calls) == 2
    assert translator.display(recipe, "es") == (entry.ingredientNames, entry.instructions)


def test_recipe_translation_failure_publishes_nothing(fake_ai):
    """A failed batch leaves the recipe displaying its original text."""
    recipe = make_recipe("Omelette", ingredients=["Eggs", "Cheese"], steps=["Whisk.", "Fry."])
    fake_ai.drop_translations = 1
    translator = RecipeTranslator(Translator(fake_ai, "en"))

    assert run(translator.translate_recipe(recipe, "es")) is None
    assert translator.cached(recipe, "es") is None
    assert translator.display(recipe, "es") == (["Eggs", "Cheese"], ["Whisk.", "Fry."])
    assert translator.is_translating(recipe, "es") is False


def test_concurrent_recipe_translation_is_suppressed(fake_ai):
    """A second request for the same recipe and language while one runs is dropped."""
    recipe = make_recipe("Omelette")
    translator = RecipeTranslator(Translator(fake_ai, "en"))

    async def both():
        return await asyncio.gather(
            translator.translate_recipe(recipe, "ja"),
            translator.translate_recipe(recipe, "ja"),
        )

    first, second = run(both())
    assert first is not None
    assert second is None
    assert len(fake_ai.translate_calls) == 2


def test_translations_are_keyed_by_recipe_id(fake_ai):
    """Two recipes sharing a name keep separate cache entries."""
    first = make_recipe("Soup", ingredients=["Leek"])
    second = make_recipe("Soup", ingredients=["Tomato"])
    translator = RecipeTranslator(Translator(fake_ai, "en"))

    run(translator.translate_recipe(first, "fr"))
    assert translator.cached(second, "fr") is None
    assert translator.display(second, "fr")[0] == ["Tomato"]
