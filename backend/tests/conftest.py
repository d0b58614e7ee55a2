"""Shared test fixtures and configuration."""
import pytest

from app.core.config import get_settings


@pytest.fixture(autouse=True)
def set_required_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set the Gemini API key for all tests."""
    monkeypatch.setenv("API_KEY", "test-api-key")
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("LOCALE", raising=False)
    get_settings.cache_clear()
