"""Shared Gemini API helper utilities."""

from functools import lru_cache
from typing import Any, Dict, List

from pydantic import TypeAdapter


def clean_schema_for_gemini(schema: Dict[str, Any]) -> Dict[str, Any]:
    """
    Clean Pydantic JSON schema for Gemini responseSchema format.
    - Resolves $ref references to their definitions (Gemini doesn't support $ref)
    - Removes 'additionalProperties' (Gemini rejects this field)
    - Removes Pydantic metadata fields (title, description, examples, default, $defs)
    - Handles anyOf for Optional fields (extracts the non-null type)
    """
    defs = schema.get("$defs", {})

    def resolve_ref(ref: str) -> Dict[str, Any]:
        if ref.startswith("#/$defs/"):
            return defs.get(ref[len("#/$defs/"):], {})
        return {}

    def clean(s: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(s, dict):
            return s

        if "$ref" in s:
            return clean(resolve_ref(s["$ref"]))

        result: Dict[str, Any] = {}

        for key, value in s.items():
            if key in ("additionalProperties", "title", "description",
                       "examples", "example", "default", "$defs"):
                continue

            if isinstance(value, dict):
                # "properties" maps field names to schemas; clean each schema, keep the names
                if key == "properties":
                    result[key] = {name: clean(prop) for name, prop in value.items()}
                else:
                    result[key] = clean(value)
            elif isinstance(value, list):
                result[key] = [clean(item) if isinstance(item, dict) else item for item in value]
            else:
                result[key] = value

        # Optional[X] -> X, Gemini treats absent keys as null anyway
        if "anyOf" in result:
            any_of = result.pop("anyOf")
            for option in any_of:
                if isinstance(option, dict) and option.get("type") != "null":
                    result.update(option)
                    break

        return result

    return clean(schema)


def drop_properties(schema: Dict[str, Any], names: List[str]) -> Dict[str, Any]:
    """Remove properties (and their 'required' entries) from an object schema."""
    out = dict(schema)
    out["properties"] = {k: v for k, v in schema.get("properties", {}).items() if k not in names}
    if "required" in schema:
        out["required"] = [r for r in schema["required"] if r not in names]
    return out


@lru_cache(maxsize=1)
def get_recipe_batch_schema() -> dict:
    """Response schema for an array of recipes, without the locally generated id."""
    from fridgechef.models.recipe import Recipe

    schema = clean_schema_for_gemini(TypeAdapter(List[Recipe]).json_schema())
    schema["items"] = drop_properties(schema["items"], ["id"])
    return schema
