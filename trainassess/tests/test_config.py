"""Tests for settings loading."""

import pydantic
import pytest

from trainassess import create_app
from trainassess.common.exceptions import ConfigurationError
from trainassess.config import Settings, load_settings


def test_yaml_file_overrides_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("CONFIG_PATH", raising=False)
    config_file = tmp_path / "config.yaml"
    config_file.write_text("STORE_URL: memory://\nMAX_SCORE_PER_QUESTION: 5\nLOG_LEVEL: debug\n")

    settings = load_settings(str(config_file))

    assert settings.STORE_URL == "memory://"
    assert settings.MAX_SCORE_PER_QUESTION == 5
    assert settings.LOG_LEVEL == "DEBUG"


def test_explicit_overrides_win_over_file(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("PORT: 9000\n")

    assert load_settings(str(config_file), PORT=9100).PORT == 9100


def test_config_path_from_environment(tmp_path, monkeypatch):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("APP_NAME: From Env Path\n")
    monkeypatch.setenv("CONFIG_PATH", str(config_file))

    assert load_settings().APP_NAME == "From Env Path"


def test_missing_file_falls_back_to_defaults(tmp_path):
    settings = load_settings(str(tmp_path / "absent.yaml"))
    assert settings.MAX_SCORE_PER_QUESTION == 10


def test_malformed_file(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text("- just\n- a list\n")
    with pytest.raises(ConfigurationError):
        load_settings(str(config_file))


def test_environment_variables(monkeypatch):
    monkeypatch.setenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30")
    assert Settings().ACCESS_TOKEN_EXPIRE_MINUTES == 30


@pytest.mark.parametrize("field,value", [
    ("ENV", "moon"),
    ("LOG_LEVEL", "LOUD"),
    ("MAX_SCORE_PER_QUESTION", 0),
])
def test_invalid_values(field, value):
    with pytest.raises(pydantic.ValidationError):
        Settings(**{field: value})


def test_production_requires_secret():
    with pytest.raises(ConfigurationError):
        create_app(Settings(ENV="production", STORE_URL="memory://"))
    assert create_app(Settings(ENV="production", STORE_URL="memory://", JWT_SECRET_KEY="real-secret"))
