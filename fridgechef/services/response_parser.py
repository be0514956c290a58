"""
Parsing of free-form model output into validated structured data.

All functions are pure: text in, parsed value (or a typed failure) out.

- Recipe batches must be a JSON array after fence stripping; anything else is a
  RecipeParseError. Individual items are shape-normalized, not deeply validated.
- Translation batches must be a JSON array of exactly the requested length.
- Number estimates degrade to None instead of raising.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from fridgechef.constants import EMPTY_RESPONSE_MESSAGE, INVALID_FORMAT_MESSAGE, NO_RECIPES_MESSAGE
from fridgechef.models.recipe import Recipe
from fridgechef.services.gemini_utils import strip_code_fences
from fridgechef.utils.exceptions import RecipeParseError, TranslationError

logger = logging.getLogger(__name__)

_DIFFICULTIES = {"easy": "Easy", "medium": "Medium", "hard": "Hard"}
_NUMBER_RE = re.compile(r"^(\d+(?:\.\d+)?)\s*(?:minutes?|mins?|min)?\s*\.?$", re.IGNORECASE)
_LEADING_INT_RE = re.compile(r"^\s*(\d+)")


# ---------------------------------------------------------------------
# Recipes
# ---------------------------------------------------------------------

def parse_recipe_batch(text: Optional[str]) -> List[Recipe]:
    """
    Parse a model response into a list of recipes.

    Raises:
        RecipeParseError: empty response, non-array payload, invalid JSON,
            or an array without a single usable recipe.
    """
    payload = strip_code_fences(text)
    if not payload:
        raise RecipeParseError(EMPTY_RESPONSE_MESSAGE)

    if not (payload.startswith("[") and payload.endswith("]")):
        logger.warning("Recipe response is not a JSON array: %s", payload[:200])
        raise RecipeParseError(INVALID_FORMAT_MESSAGE)

    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        logger.warning("Recipe response is not valid JSON: %s", e)
        raise RecipeParseError(INVALID_FORMAT_MESSAGE) from e

    if not isinstance(data, list):
        raise RecipeParseError(INVALID_FORMAT_MESSAGE)

    recipes: List[Recipe] = []
    for index, item in enumerate(data):
        normalized = normalize_recipe_json(item)
        if normalized is None:
            logger.warning("Skipping unrecognizable recipe at index %d", index)
            continue
        try:
            recipes.append(Recipe(**normalized))
        except PydanticValidationError as e:
            logger.warning("Skipping invalid recipe at index %d: %s", index, e)

    if not recipes:
        raise RecipeParseError(NO_RECIPES_MESSAGE)

    return recipes


def normalize_recipe_json(item: Any) -> Optional[Dict[str, Any]]:
    """
    Coerce one recipe-shaped JSON value to the Recipe model's field types.

    Returns None when the value is not an object or has no name.
    Any incoming "id" is discarded; ids are assigned at ingestion.
    """
    if not isinstance(item, dict):
        return None

    name = str(item.get("name") or "").strip()
    if not name:
        return None

    difficulty = _DIFFICULTIES.get(str(item.get("difficulty") or "").strip().lower(), "Medium")

    ingredients: List[Dict[str, Any]] = []
    raw_ingredients = item.get("ingredients")
    if isinstance(raw_ingredients, list):
        for ing in raw_ingredients:
            # Allow strings -> convert
            if isinstance(ing, str):
                ing_name = ing.strip()
                available = False
            elif isinstance(ing, dict):
                ing_name = str(ing.get("name") or "").strip()
                available = _to_bool(ing.get("isAvailable"))
            else:
                continue
            if ing_name:
                ingredients.append({"name": ing_name, "isAvailable": available})

    instructions = item.get("instructions")
    if isinstance(instructions, str):
        instructions = [instructions]
    if not isinstance(instructions, list):
        instructions = []

    tags = item.get("dietaryTags")
    if isinstance(tags, str):
        tags = [tags]
    if not isinstance(tags, list):
        tags = []

    return {
        "name": name,
        "difficulty": difficulty,
        "prepTime": _to_count(item.get("prepTime")) or 0,
        "cookTime": _to_count(item.get("cookTime")),
        "calories": _to_count(item.get("calories")) or 0,
        "dietaryTags": _unique_strings(tags),
        "ingredients": ingredients,
        "instructions": [str(x).strip() for x in instructions if str(x).strip()],
    }


def _to_count(value: Any) -> Optional[int]:
    """Non-negative integer from a number or a string like '15 minutes' or '320 kcal'."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return max(0, int(round(value)))
    if isinstance(value, str):
        match = _LEADING_INT_RE.match(value)
        if match:
            return int(match.group(1))
    return None


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1")
    return bool(value)


def _unique_strings(values: List[Any]) -> List[str]:
    seen: List[str] = []
    for v in values:
        s = str(v).strip()
        if s and s not in seen:
            seen.append(s)
    return seen


# ---------------------------------------------------------------------
# Translations
# ---------------------------------------------------------------------

def parse_translation_batch(text: Optional[str], expected_count: int) -> List[str]:
    """
    Parse a JSON array of translated strings.

    Raises:
        TranslationError: payload is not an array of strings of exactly
            `expected_count` elements.
    """
    payload = strip_code_fences(text)
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise TranslationError(f"Translation response is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise TranslationError("Translation response is not a JSON array")

    if len(data) != expected_count:
        raise TranslationError(
            f"Translation returned {len(data)} items, expected {expected_count}"
        )

    if not all(isinstance(x, str) for x in data):
        raise TranslationError("Translation response contains non-string items")

    return data


# ---------------------------------------------------------------------
# Numbers
# ---------------------------------------------------------------------

def parse_number_estimate(text: Optional[str]) -> Optional[int]:
    """
    Parse a bare number of minutes ("25", "25 minutes", "25.").

    Returns None for anything else; a missing estimate is not an error.
    """
    payload = strip_code_fences(text)
    match = _NUMBER_RE.match(payload)
    if not match:
        if payload:
            logger.debug("No numeric estimate in response: %s", payload[:100])
        return None
    return int(round(float(match.group(1))))
