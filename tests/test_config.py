"""Tests for environment-driven settings."""

import pytest

from shopdesk.config import Settings, get_settings

ENV_VARS = (
    "DATABASE_URL",
    "APP_VERSION",
    "HOST",
    "PORT",
    "DEBUG",
    "LOG_LEVEL",
    "CORS_ORIGINS",
    "AUTO_CREATE_SCHEMA",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    settings = Settings.from_env()

    assert settings.database_url.startswith("postgresql+asyncpg://")
    assert settings.port == 5000
    assert settings.debug is False
    assert settings.log_level == "INFO"
    assert settings.cors_origins == ("*",)
    assert settings.auto_create_schema is True


def test_overrides(clean_env):
    clean_env.setenv("DATABASE_URL", "sqlite+aiosqlite:///shop.db")
    clean_env.setenv("PORT", "8080")
    clean_env.setenv("DEBUG", "TRUE")
    clean_env.setenv("LOG_LEVEL", "debug")
    clean_env.setenv("CORS_ORIGINS", "https://a.example, https://b.example,")
    clean_env.setenv("AUTO_CREATE_SCHEMA", "false")

    settings = Settings.from_env()

    assert settings.database_url == "sqlite+aiosqlite:///shop.db"
    assert settings.PORT == 8080
    assert settings.DEBUG is True
    assert settings.log_level == "DEBUG"
    assert settings.cors_origins == ("https://a.example", "https://b.example")
    assert settings.auto_create_schema is False


def test_get_settings_cached(clean_env):
    get_settings.cache_clear()
    try:
        assert get_settings() is get_settings()
    finally:
        get_settings.cache_clear()
