"""Narrow interfaces the orchestration layer uses to reach the generative-AI backend."""

from __future__ import annotations

from typing import AsyncIterator, List, Optional, Protocol, Sequence

from fridgechef.models.chat import ChatStreamChunk
from fridgechef.models.recipe import Recipe


class ChatSession(Protocol):
    """A persistent conversation with the model."""

    def send_message_stream(self, message: str) -> AsyncIterator[ChatStreamChunk]:
        """Yield the cumulative reply text in arrival order; the last chunk may carry citations."""
        ...


class RecipeAI(Protocol):
    """Recipe extraction, translation and estimation backed by a generative model."""

    async def extract_recipes(
        self, image_data: bytes, mime_type: str, dietary_filters: Sequence[str]
    ) -> List[Recipe]:
        """Raises RecipeParseError for unusable content, GeminiError for transport failures."""
        ...

    async def translate_batch(self, texts: Sequence[str], language_name: str) -> List[str]:
        """Same length and order as `texts`. Raises TranslationError or GeminiError."""
        ...

    async def estimate_cook_time(self, recipe_name: str, instructions: Sequence[str]) -> Optional[int]:
        """Minutes of active cooking, or None when the model gives no number."""
        ...

    async def create_chat_session(self, system_instruction: str) -> ChatSession:
        """Raises GeminiError when the session cannot be created."""
        ...
