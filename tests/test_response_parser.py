"""Tests for parsing model output."""

import json

import pytest

from fridgechef.constants import INVALID_FORMAT_MESSAGE, NO_RECIPES_MESSAGE
from fridgechef.services.gemini_utils import strip_code_fences
from fridgechef.services.response_parser import (
    normalize_recipe_json,
    parse_number_estimate,
    parse_recipe_batch,
    parse_translation_batch,
)
from fridgechef.utils.exceptions import RecipeParseError, TranslationError

RECIPES = [
    {
        "name": "Veggie Omelette",
        "difficulty": "easy",
        "prepTime": 5,
        "cookTime": 10,
        "calories": 320,
        "dietaryTags": ["Vegetarian", "Keto"],
        "ingredients": [{"name": "Eggs", "isAvailable": True}, {"name": "Spinach", "isAvailable": False}],
        "instructions": ["Whisk the eggs.", "Cook with spinach."],
    },
    {
        "name": "Tomato Soup",
        "difficulty": "Medium",
        "prepTime": "15 minutes",
        "calories": 180,
        "dietaryTags": ["Vegan"],
        "ingredients": ["Tomatoes", "Onion"],
        "instructions": ["Simmer.", "Blend."],
    },
]


def test_strip_code_fences_with_language_tag():
    """Fenced payloads are unwrapped whatever the tag."""
    assert strip_code_fences('```json\n[1, 2]\n```') == "[1, 2]"
    assert strip_code_fences("```JSON\n[]\n```") == "[]"
    assert strip_code_fences("```\n[\"a\"]\n```") == '["a"]'
    assert strip_code_fences("  [1]  ") == "[1]"


def test_parse_recipe_batch_plain_and_fenced():
    """Both raw and fenced arrays parse to the same recipes."""
    raw = json.dumps(RECIPES)
    plain = parse_recipe_batch(raw)
    fenced = parse_recipe_batch(f"```json\n{raw}\n```")

    assert [r.name for r in plain] == ["Veggie Omelette", "Tomato Soup"]
    assert [r.name for r in fenced] == ["Veggie Omelette", "Tomato Soup"]


def test_parse_recipe_batch_normalizes_fields():
    """Difficulty case, string times and string ingredients are coerced."""
    omelette, soup = parse_recipe_batch(json.dumps(RECIPES))

    assert omelette.difficulty == "Easy"
    assert omelette.ingredients[0].isAvailable is True
    assert soup.prepTime == 15
    assert soup.cookTime is None
    assert [i.name for i in soup.ingredients] == ["Tomatoes", "Onion"]
    assert all(not i.isAvailable for i in soup.ingredients)


def test_parse_recipe_batch_assigns_fresh_ids():
    """Incoming ids are ignored and every recipe gets its own."""
    items = [dict(RECIPES[0], id="same"), dict(RECIPES[0], id="same")]
    first, second = parse_recipe_batch(json.dumps(items))

    assert first.id != "same"
    assert first.id != second.id


def test_parse_recipe_batch_rejects_non_array():
    """An object payload is a hard failure, not an empty result."""
    with pytest.raises(RecipeParseError) as exc_info:
        parse_recipe_batch(json.dumps({"recipes": RECIPES}))
    assert str(exc_info.value) == INVALID_FORMAT_MESSAGE


def test_parse_recipe_batch_rejects_prose():
    with pytest.raises(RecipeParseError):
        parse_recipe_batch("Here are some recipes you could make: omelette, soup.")


def test_parse_recipe_batch_rejects_empty_text():
    with pytest.raises(RecipeParseError):
        parse_recipe_batch("")


def test_parse_recipe_batch_without_usable_recipes():
    """An array with nothing recipe-shaped tells the user to try a clearer photo."""
    with pytest.raises(RecipeParseError) as exc_info:
        parse_recipe_batch('[1, "x", {"difficulty": "Easy"}]')
    assert str(exc_info.value) == NO_RECIPES_MESSAGE


def test_normalize_recipe_json_requires_name():
    assert normalize_recipe_json({"difficulty": "Easy"}) is None
    assert normalize_recipe_json("Soup") is None


def test_parse_translation_batch_exact_length():
    assert parse_translation_batch('```json\n["Huevos", "Leche"]\n```', 2) == ["Huevos", "Leche"]


def test_parse_translation_batch_wrong_length():
    """A short array fails the whole batch."""
    with pytest.raises(TranslationError):
        parse_translation_batch('["Huevos"]', 2)


def test_parse_translation_batch_wrong_type():
    with pytest.raises(TranslationError):
        parse_translation_batch('{"0": "Huevos"}', 1)
    with pytest.raises(TranslationError):
        parse_translation_batch("[1, 2]", 2)
    with pytest.raises(TranslationError):
        parse_translation_batch("not json", 1)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("25", 25),
        (" 40 minutes", 40),
        ("15 min.", 15),
        ("12.6", 13),
        ("about twenty minutes", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_number_estimate(text, expected):
    """Non-numeric text means no estimate, never an error."""
    assert parse_number_estimate(text) == expected
