"""Pytest configuration and fixtures."""

import asyncio
from typing import Callable, List, Optional, Sequence

import pytest
from fastapi.testclient import TestClient

from fridgechef.api.dependencies import get_controller
from fridgechef.main import app
from fridgechef.middleware.rate_limit import limiter
from fridgechef.models.chat import ChatStreamChunk
from fridgechef.models.recipe import Ingredient, Recipe
from fridgechef.services.app_controller import AppController
from fridgechef.services.favorites_store import FavoritesStore

# Smallest byte string the image service accepts as a PNG
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def make_recipe(name: str, tags: Sequence[str] = (), ingredients: Sequence[str] = ("Eggs",),
                steps: Sequence[str] = ("Cook it.",), cook_time: Optional[int] = 10) -> Recipe:
    return Recipe(
        name=name,
        difficulty="Easy",
        prepTime=5,
        cookTime=cook_time,
        calories=300,
        dietaryTags=list(tags),
        ingredients=[Ingredient(name=i, isAvailable=False) for i in ingredients],
        instructions=list(steps),
    )


class FakeChatSession:
    """Replays scripted replies; an Exception in a script is raised at that point of the stream."""

    def __init__(self) -> None:
        self.scripts: List[list] = []
        self.sent: List[str] = []

    def queue(self, *items) -> None:
        self.scripts.append(list(items))

    async def send_message_stream(self, message: str):
        self.sent.append(message)
        script = self.scripts.pop(0) if self.scripts else [ChatStreamChunk(text="Sure!")]
        for item in script:
            if isinstance(item, Exception):
                raise item
            yield item


class FakeRecipeAI:
    """In-memory stand-in for the Gemini service."""

    def __init__(self) -> None:
        self.recipes: List[Recipe] = [make_recipe("Omelette"), make_recipe("Soup"), make_recipe("Salad")]
        self.extract_error: Optional[Exception] = None
        self.extract_calls: List[tuple] = []

        self.translate_error: Optional[Exception] = None
        self.drop_translations = 0
        self.translate_calls: List[tuple] = []

        self.cook_time: Optional[int] = 25
        self.cook_time_calls: List[str] = []

        self.chat_error: Optional[Exception] = None
        self.chat = FakeChatSession()

    async def extract_recipes(self, image_data, mime_type, dietary_filters):
        self.extract_calls.append((mime_type, list(dietary_filters)))
        if self.extract_error is not None:
            raise self.extract_error
        return [recipe.model_copy() for recipe in self.recipes]

    async def translate_batch(self, texts, language_name):
        self.translate_calls.append((list(texts), language_name))
        if self.translate_error is not None:
            raise self.translate_error
        translated = [f"{language_name}: {text}" for text in texts]
        if self.drop_translations:
            translated = translated[: len(translated) - self.drop_translations]
        return translated

    async def estimate_cook_time(self, recipe_name, instructions):
        self.cook_time_calls.append(recipe_name)
        return self.cook_time

    async def create_chat_session(self, system_instruction):
        if self.chat_error is not None:
            raise self.chat_error
        return self.chat


class FakeSpeech:
    supported = True

    def __init__(self) -> None:
        self.spoken: List[tuple] = []
        self.cancelled = 0
        self.transcripts: List[str] = []
        self._on_end: Optional[Callable[[], None]] = None

    def speak(self, text, language, on_end=None):
        self.spoken.append((text, language))
        self._on_end = on_end

    def finish(self) -> None:
        if self._on_end:
            self._on_end()

    def cancel(self):
        self.cancelled += 1

    async def recognize(self, language):
        for transcript in self.transcripts:
            yield transcript


def run(coro):
    """Drive a coroutine from a plain test function."""
    return asyncio.run(coro)


@pytest.fixture
def fake_ai() -> FakeRecipeAI:
    return FakeRecipeAI()


@pytest.fixture
def fake_speech() -> FakeSpeech:
    return FakeSpeech()


@pytest.fixture
def favorites_path(tmp_path):
    return str(tmp_path / "favorites.json")


@pytest.fixture
def controller(fake_ai, fake_speech, favorites_path) -> AppController:
    """Started controller with fakes for AI, speech and a temporary favorites file."""
    ctrl = AppController(
        fake_ai,
        speech=fake_speech,
        favorites_store=FavoritesStore(favorites_path, "favoriteRecipes"),
        default_language="en",
    )
    run(ctrl.start())
    return ctrl


@pytest.fixture
def client(controller):
    """Create test client bound to the fake-backed controller."""
    limiter.enabled = False
    app.dependency_overrides[get_controller] = lambda: controller
    yield TestClient(app)
    app.dependency_overrides.clear()
    limiter.enabled = True
