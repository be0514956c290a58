"""Shared API dependencies."""

from functools import lru_cache

from fridgechef.config import settings
from fridgechef.services.app_controller import AppController
from fridgechef.services.favorites_store import FavoritesStore
from fridgechef.services.gemini_service import GeminiService


@lru_cache()
def get_controller() -> AppController:
    """The one application state of this local, single-user server."""
    return AppController(
        GeminiService(),
        favorites_store=FavoritesStore(settings.favorites_path, settings.favorites_storage_key),
        default_language=settings.default_language,
    )
