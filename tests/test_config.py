import pytest

import config


@pytest.fixture
def fresh_config():
    config.reset_config_cache()
    yield config.get_config
    config.reset_config_cache()


def test_parse_helpers():
    assert config._parse_bool("Yes")
    assert not config._parse_bool("off", True)
    assert config._parse_bool(None, True)
    assert config._parse_list(" a, ,b ") == ["a", "b"]
    assert config._parse_list("", ["*"]) == ["*"]


def test_gemini_key_falls_back_to_api_key(monkeypatch, fresh_config):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.setenv("API_KEY", "legacy-key")
    assert fresh_config()["GEMINI_API_KEY"] == "legacy-key"


def test_marketplace_overrides(monkeypatch, fresh_config):
    monkeypatch.setenv("CHAT_AUTO_REPLY", "false")
    monkeypatch.setenv("DEFAULT_COUNTRY_CODE", "971")
    monkeypatch.setenv("CORS_ORIGINS", "https://bazaar.example.com, https://admin.example.com")
    monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@db:5432/bazaar_test")
    cfg = fresh_config()
    assert cfg["CHAT_AUTO_REPLY"] is False
    assert cfg["DEFAULT_COUNTRY_CODE"] == "971"
    assert cfg["CORS_ORIGINS"] == ["https://bazaar.example.com", "https://admin.example.com"]
    assert cfg["DATABASE_URL"] == "postgresql://u:p@db:5432/bazaar_test"


def test_database_url_from_parts(monkeypatch, fresh_config):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("DB_HOST", "pg")
    monkeypatch.setenv("DB_PORT", "5432")
    monkeypatch.setenv("DB_NAME", "shop")
    monkeypatch.setenv("DB_USER", "shopper")
    monkeypatch.setenv("DB_PASSWORD", "pw")
    assert fresh_config()["DATABASE_URL"] == "postgresql://shopper:pw@pg:5432/shop"


def test_config_is_cached(fresh_config):
    assert fresh_config() is fresh_config()
