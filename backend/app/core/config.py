"""Configuration management using pydantic-settings."""
from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Gemini API credential (required)
    api_key: str = Field(validation_alias=AliasChoices("API_KEY", "GEMINI_API_KEY"))

    # Remote model identifiers
    generation_model: str = "imagen-4.0-generate-001"
    edit_model: str = "gemini-2.5-flash-image-preview"

    # Language used for user-facing error messages ("en" or "pt-BR")
    locale: str = "en"

    # Application settings
    app_name: str = "Image Studio"

    # Origin allowed by CORS (frontend dev server)
    frontend_port: int = 3000


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
