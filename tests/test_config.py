"""
Tests for configuration loading and backend settings resolution.
"""

from pathlib import Path

import pytest

from common.config import Config, load_config
from reservations.errors import ConfigurationError
from reservations.settings import API_KEY_ENV_VAR, URL_ENV_VAR, load_backend_settings

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def test_config_defaults():
    """Test basic Config creation."""
    config = Config()

    assert config.gateway.host == "127.0.0.1"
    assert config.gateway.port > 0
    assert config.backend.url == ""
    assert config.backend.request_timeout is None
    assert config.auth.enabled is True
    assert config.auth.allowed_logins == []
    assert config.observability.tracing is False
    assert config.log_level == "INFO"


def test_config_yaml_file_exists():
    """Test that config.yaml file exists."""
    config_path = PROJECT_ROOT / "config.yaml"
    assert config_path.exists(), "config.yaml file should exist in the project root"


def test_project_config_yaml_loads():
    config = load_config(PROJECT_ROOT / "config.yaml")

    assert config.gateway.port == 8787
    assert config.auth.user_api_url == "https://api.github.com/user"


def test_load_config_maps_nested_logging(tmp_path: Path):
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "gateway:\n"
        "  port: 9000\n"
        "backend:\n"
        "  url: https://db.example.com\n"
        "  request_timeout: 5\n"
        "auth:\n"
        "  enabled: false\n"
        "  allowed_logins: [octocat]\n"
        "observability:\n"
        "  tracing: true\n"
        "logging:\n"
        "  level: DEBUG\n"
        "  save_to_file: true\n",
        encoding="utf-8",
    )

    config = load_config(config_path)

    assert config.gateway.port == 9000
    assert config.backend.url == "https://db.example.com"
    assert config.backend.request_timeout == 5
    assert config.auth.enabled is False
    assert config.auth.allowed_logins == ["octocat"]
    assert config.observability.tracing is True
    assert config.log_level == "DEBUG"
    assert config.save_to_file is True


def test_load_config_missing_file_uses_defaults(tmp_path: Path):
    config = load_config(tmp_path / "absent.yaml")
    assert config == Config()


def test_backend_settings_from_environment():
    settings = load_backend_settings(
        environ={URL_ENV_VAR: "https://db.example.com/", API_KEY_ENV_VAR: "secret"}
    )

    checked = settings.require()
    assert checked.url == "https://db.example.com"
    assert checked.api_key == "secret"


def test_configured_url_takes_precedence_over_environment():
    settings = load_backend_settings(
        url="https://configured.example.com",
        environ={URL_ENV_VAR: "https://env.example.com", API_KEY_ENV_VAR: "secret"},
    )
    assert settings.url == "https://configured.example.com"


def test_missing_url_is_configuration_error():
    with pytest.raises(ConfigurationError, match="Backend URL"):
        load_backend_settings(environ={API_KEY_ENV_VAR: "secret"}).require()


def test_missing_api_key_is_configuration_error():
    with pytest.raises(ConfigurationError, match=API_KEY_ENV_VAR):
        load_backend_settings(environ={URL_ENV_VAR: "https://db.example.com"}).require()


def test_settings_repr_hides_api_key():
    settings = load_backend_settings(
        environ={URL_ENV_VAR: "https://db.example.com", API_KEY_ENV_VAR: "super-secret"}
    )
    assert "super-secret" not in repr(settings)
