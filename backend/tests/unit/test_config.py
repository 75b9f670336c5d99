"""Unit tests for environment-driven settings."""

from config import Settings, get_settings


class TestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("DRAFT_TIMESTAMP_COLUMNS", raising=False)
        settings = Settings(_env_file=None)
        assert settings.DRAFT_TIMESTAMP_COLUMNS == ["created_at"]
        assert settings.DRAFT_DEFAULT_NULLIFY == []
        assert settings.LOG_JSON is True
        assert not hasattr(settings, "ENVIRONMENT")

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("DRAFT_TIMESTAMP_COLUMNS", '["created_at", "inserted_at"]')
        monkeypatch.setenv("LOG_LEVEL", "WARNING")

        settings = Settings(_env_file=None)

        assert settings.DRAFT_TIMESTAMP_COLUMNS == ["created_at", "inserted_at"]
        assert settings.LOG_LEVEL == "WARNING"

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
