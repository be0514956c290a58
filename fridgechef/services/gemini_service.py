"""
Gemini adapter for recipe extraction, translation, cook-time estimation and chat.

Key design:
- Prompt construction lives here; response parsing lives in response_parser.
- Recipe extraction may use Google Search grounding. Tool use + response_mime_type
  'application/json' is unsupported by the API, so grounded calls request plain text
  and rely on fence stripping; ungrounded calls request JSON with a response schema.
- SDK calls are synchronous and run in a worker thread; chat uses the async client.
"""

from __future__ import annotations

import asyncio
import base64
import json
import logging
from typing import Any, AsyncIterator, List, Optional, Sequence

from google import genai
from google.genai import types

from fridgechef.config import settings
from fridgechef.constants import EMPTY_RESPONSE_MESSAGE
from fridgechef.models.chat import ChatStreamChunk
from fridgechef.models.recipe import Recipe
from fridgechef.services.gemini_utils import (
    extract_grounding_chunks,
    get_response_text,
    log_empty_response,
)
from fridgechef.services.response_parser import (
    parse_number_estimate,
    parse_recipe_batch,
    parse_translation_batch,
)
from fridgechef.utils.exceptions import GeminiError, RecipeParseError
from fridgechef.utils.gemini_helpers import get_recipe_batch_schema

logger = logging.getLogger(__name__)


def google_search_tool() -> types.Tool:
    return types.Tool(google_search=types.GoogleSearch())


class GeminiChatSession:
    """
    Streaming chat session on top of the SDK's async chat.

    The SDK streams deltas; each yielded chunk carries the reply text so far.
    """

    def __init__(self, chat: Any) -> None:
        self._chat = chat

    async def send_message_stream(self, message: str) -> AsyncIterator[ChatStreamChunk]:
        running = ""
        try:
            stream = await self._chat.send_message_stream(message)
            async for response in stream:
                running += get_response_text(response)
                yield ChatStreamChunk(
                    text=running,
                    groundingChunks=extract_grounding_chunks(response),
                )
        except Exception as e:
            logger.error("Chat stream failed: %s", str(e), exc_info=True)
            raise GeminiError(f"Chat stream failed: {str(e)}") from e


class GeminiService:
    """Service for interacting with Gemini API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        search_grounding: Optional[bool] = None,
    ) -> None:
        self._api_key = api_key if api_key is not None else settings.gemini_api_key
        self.model = model or settings.gemini_model
        self.search_grounding = (
            settings.recipe_search_grounding if search_grounding is None else search_grounding
        )
        self._client: Optional[genai.Client] = None

    @property
    def client(self) -> genai.Client:
        """Get or create Gemini client (lazy initialization)."""
        if self._client is None:
            if not self._api_key:
                raise GeminiError("GEMINI_API_KEY is not set")
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------

    async def extract_recipes(
        self, image_data: bytes, mime_type: str, dietary_filters: Sequence[str]
    ) -> List[Recipe]:
        """
        Suggest recipes from a fridge photo.

        Raises:
            RecipeParseError: the model answered but nothing usable could be parsed
            GeminiError: the call itself failed
        """
        prompt = self._build_recipe_prompt(dietary_filters)
        contents = [
            {"inline_data": {"mime_type": mime_type, "data": base64.b64encode(image_data).decode("utf-8")}},
            prompt,
        ]

        if self.search_grounding:
            config = types.GenerateContentConfig(
                tools=[google_search_tool()],
                temperature=settings.gemini_temperature,
            )
        else:
            config = types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=get_recipe_batch_schema(),
                temperature=settings.gemini_temperature,
            )

        logger.info(
            "Extracting recipes from image",
            extra={
                "mime_type": mime_type,
                "dietary_filters": list(dietary_filters),
                "grounded": self.search_grounding,
            },
        )
        response = await self._call_gemini(contents=contents, config=config)

        text = get_response_text(response)
        if not text.strip():
            log_empty_response("Recipe extraction", response)
            raise RecipeParseError(EMPTY_RESPONSE_MESSAGE)

        recipes = parse_recipe_batch(text)
        logger.info("Extracted %d recipes", len(recipes))
        return recipes

    async def translate_batch(self, texts: Sequence[str], language_name: str) -> List[str]:
        """
        Translate strings into `language_name`, same length and order.

        Raises:
            TranslationError: payload mismatch
            GeminiError: the call itself failed
        """
        if not texts:
            return []

        prompt = self._build_translation_prompt(texts, language_name)
        logger.info("Translating %d strings to %s", len(texts), language_name)
        response = await self._call_gemini(
            contents=prompt,
            config=types.GenerateContentConfig(temperature=0.0),
        )
        return parse_translation_batch(get_response_text(response), len(texts))

    async def estimate_cook_time(self, recipe_name: str, instructions: Sequence[str]) -> Optional[int]:
        """Estimate active cooking minutes. Returns None when no number comes back."""
        prompt = self._build_cook_time_prompt(recipe_name, instructions)
        logger.info("Estimating cook time for %s", recipe_name)
        response = await self._call_gemini(
            contents=prompt,
            config=types.GenerateContentConfig(temperature=0.0),
        )
        return parse_number_estimate(get_response_text(response))

    async def create_chat_session(self, system_instruction: str) -> GeminiChatSession:
        """Create the assistant conversation with search grounding enabled."""
        try:
            chat = self.client.aio.chats.create(
                model=self.model,
                config=types.GenerateContentConfig(
                    system_instruction=system_instruction,
                    tools=[google_search_tool()],
                ),
            )
        except GeminiError:
            raise
        except Exception as e:
            raise GeminiError(f"Failed to create chat session: {str(e)}") from e
        logger.info("Chat session created (model=%s)", self.model)
        return GeminiChatSession(chat)

    # ---------------------------------------------------------------------
    # Prompts
    # ---------------------------------------------------------------------

    def _build_recipe_prompt(self, dietary_filters: Sequence[str]) -> str:
        dietary_text = (
            f"Prioritize recipes that fit these dietary restrictions: {', '.join(dietary_filters)}."
            if dietary_filters
            else ""
        )
        search_text = (
            " Use Google Search to find popular and accurate recipes." if self.search_grounding else ""
        )
        return f"""
You are a smart fridge culinary assistant.
Analyze the ingredients in the provided image of a refrigerator.
Based on the identified ingredients, generate {settings.recipe_count} diverse recipes.{search_text}
For each recipe, provide the following details: name, difficulty ('Easy', 'Medium', or 'Hard'), prepTime (in minutes), cookTime (in minutes, omit if unknown), calories (per serving), dietaryTags (an array of strings), ingredients (an array of objects with 'name' and 'isAvailable' boolean), and instructions (an array of strings for each step).
{dietary_text}
IMPORTANT: Your entire response MUST be a single, valid JSON array of recipe objects. Do not include any introductory text, markdown formatting (like ```json), or any other characters outside of the JSON array. The response should be directly parsable as JSON.
""".strip()

    def _build_translation_prompt(self, texts: Sequence[str], language_name: str) -> str:
        return f"""
Translate each string in the following JSON array into {language_name}.
Your response MUST be a single, valid JSON array of strings, with the same number of elements and in the same order as the input. Do not include any other text or formatting.
Input:
{json.dumps(list(texts), ensure_ascii=False)}
""".strip()

    def _build_cook_time_prompt(self, recipe_name: str, instructions: Sequence[str]) -> str:
        steps = "\n".join(f"{i}. {step}" for i, step in enumerate(instructions, 1))
        return f"""
Estimate the active cooking time, in minutes, for the recipe "{recipe_name}".
Count only time spent actively cooking (heating, baking, frying, simmering); exclude passive waiting such as marinating, chilling, resting or rising.
Respond with a single integer only, with no units and no other text.
Steps:
{steps}
""".strip()

    # ---------------------------------------------------------------------
    # Core Gemini call
    # ---------------------------------------------------------------------

    async def _call_gemini(self, *, contents: Any, config: types.GenerateContentConfig) -> Any:
        """Single Gemini call in a worker thread; transport failures become GeminiError."""
        def _sync_call() -> Any:
            return self.client.models.generate_content(
                model=self.model,
                contents=contents,
                config=config,
            )

        try:
            response = await asyncio.to_thread(_sync_call)
        except GeminiError:
            raise
        except Exception as e:
            logger.error("Gemini call failed: %s", str(e), exc_info=True)
            raise GeminiError(f"Gemini call failed: {str(e)}") from e

        logger.debug("Gemini raw response:\n%s", get_response_text(response))
        return response
