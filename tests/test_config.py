import os

import pytest

from inout.config import Settings, load_settings, validate_settings
from inout.exceptions import ConfigError

ENV_VARS = (
    "INOUT_SEED_PATH", "INOUT_CURRENCY", "INOUT_LOG_LEVEL",
    "INOUT_LOG_FILE", "INOUT_RECENT_LIMIT", "INOUT_TOP_CATEGORIES",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    empty_env = tmp_path / ".env"
    empty_env.write_text("", encoding="utf-8")
    yield str(empty_env)
    # load_dotenv writes straight into os.environ
    for name in ENV_VARS:
        os.environ.pop(name, None)


def test_defaults(clean_env):
    assert load_settings(clean_env) == Settings()


def test_values_from_environment(clean_env, monkeypatch):
    monkeypatch.setenv("INOUT_CURRENCY", "eur")
    monkeypatch.setenv("INOUT_RECENT_LIMIT", "10")
    monkeypatch.setenv("INOUT_SEED_PATH", "")

    settings = load_settings(clean_env)
    assert settings.currency == "EUR"
    assert settings.recent_limit == 10
    assert settings.seed_path is None


def test_values_from_env_file(clean_env, monkeypatch, tmp_path):
    env_file = tmp_path / "custom.env"
    env_file.write_text("INOUT_TOP_CATEGORIES=3\nINOUT_LOG_LEVEL=DEBUG\n", encoding="utf-8")

    settings = load_settings(str(env_file))
    assert settings.top_categories == 3
    assert settings.log_level == "DEBUG"


def test_non_integer_limit(clean_env, monkeypatch):
    monkeypatch.setenv("INOUT_RECENT_LIMIT", "five")
    with pytest.raises(ConfigError):
        load_settings(clean_env)


def test_invalid_currency(clean_env, monkeypatch):
    monkeypatch.setenv("INOUT_CURRENCY", "XYZ")
    with pytest.raises(ConfigError):
        load_settings(clean_env)


def test_validate_settings():
    assert validate_settings(Settings())[0]
    ok, message = validate_settings(Settings(top_categories=0))
    assert not ok
    assert "Top categories" in message
    assert not validate_settings(Settings(log_level="chatty"))[0]
    assert not validate_settings(Settings(recent_limit=-1))[0]
