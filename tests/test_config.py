"""Tests for environment-driven settings."""

from ffiec_mcp.config import Settings


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.peer_count == 10
    assert settings.top_n == 100
    assert settings.validation_tolerance == 1.0
    assert settings.strict_missing_fields is False


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PEER_COUNT", "5")
    monkeypatch.setenv("STRICT_MISSING_FIELDS", "true")
    settings = Settings(_env_file=None)
    assert settings.peer_count == 5
    assert settings.strict_missing_fields is True


def test_connection_string_is_stripped(monkeypatch):
    monkeypatch.setenv("MONGODB_URI", '  "mongodb://localhost:27017"  ')
    assert Settings(_env_file=None).mongodb_uri == "mongodb://localhost:27017"
