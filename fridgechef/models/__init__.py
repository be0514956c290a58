"""Pydantic models."""

from fridgechef.models.chat import (
    ChatEvent,
    ChatMessage,
    ChatState,
    ChatStreamChunk,
    GroundingChunk,
)
from fridgechef.models.recipe import (
    Ingredient,
    Recipe,
    RecipeTranslation,
)
from fridgechef.models.state import (
    AppSnapshot,
    ChatTranscript,
    CookingSnapshot,
    Tab,
    View,
)

__all__ = [
    "AppSnapshot",
    "ChatEvent",
    "ChatMessage",
    "ChatState",
    "ChatStreamChunk",
    "ChatTranscript",
    "CookingSnapshot",
    "GroundingChunk",
    "Ingredient",
    "Recipe",
    "RecipeTranslation",
    "Tab",
    "View",
]
