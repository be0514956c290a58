"""Application configuration using pydantic-settings."""

from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Keys
    gemini_api_key: Optional[str] = None

    # Server (local, single user)
    port: int = 8080
    host: str = "127.0.0.1"

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # "json" or "text"

    # Uploads
    max_image_size: int = 10 * 1024 * 1024  # 10MB

    # Rate Limiting (AI-backed routes only)
    rate_limit_per_hour: int = 100

    # CORS
    cors_origins: str = "*"  # Comma-separated origins or "*" for all

    # Gemini Settings
    gemini_model: str = "gemini-2.5-flash"
    gemini_temperature: float = 0.4
    recipe_count: int = 5
    recipe_search_grounding: bool = True

    # Translation
    default_language: str = "en"

    # Favorites persistence
    favorites_path: str = "favorite_recipes.json"
    favorites_storage_key: str = "favoriteRecipes"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Get list of CORS origins."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",")]


# Global settings instance
settings = Settings()
