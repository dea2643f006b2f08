"""Tests for configuration loading and validation."""

import pytest
import yaml

from src.config.settings import ConfigLoader, get_settings, load_config
from src.config.validation import ConfigValidationError, validate_config


@pytest.fixture
def config_dir(tmp_path):
    """A config directory with a default file and a staging override."""
    (tmp_path / "environment").mkdir()
    (tmp_path / "default.yaml").write_text(yaml.safe_dump({
        "app": {"name": "Test Validator"},
        "rules": {"max_nesting": 2, "preview_url": "http://preview:9000"},
        "api": {"port": 9100},
    }))
    (tmp_path / "environment" / "staging.yaml").write_text(yaml.safe_dump({
        "rules": {"max_nesting": 4},
        "logging": {"level": "DEBUG"},
    }))
    return tmp_path


class TestConfigLoader:
    """Test YAML loading and overrides."""

    def test_project_defaults(self):
        """Test the shipped default.yaml."""
        settings = load_config()
        assert settings.rules.max_nesting == 3
        assert settings.rules.default_lookback_days == 30
        assert settings.api.port == 8100
        assert settings.auth.enabled is False

    def test_custom_directory(self, config_dir):
        """Test values come from the given directory, with dataclass defaults for the rest."""
        settings = ConfigLoader(config_dir).load()
        assert settings.app.name == "Test Validator"
        assert settings.rules.max_nesting == 2
        assert settings.rules.preview_url == "http://preview:9000"
        assert settings.rules.preview_timeout == 30.0
        assert settings.api.port == 9100
        assert settings.logging.file_enabled is False

    def test_environment_file_merged(self, config_dir, monkeypatch):
        """Test environment/<RULES_ENV>.yaml is deep-merged over the defaults."""
        monkeypatch.setenv("RULES_ENV", "staging")
        settings = ConfigLoader(config_dir).load()
        assert settings.rules.max_nesting == 4
        assert settings.rules.preview_url == "http://preview:9000"
        assert settings.logging.level == "DEBUG"

    def test_config_dir_from_environment(self, config_dir, monkeypatch):
        """Test RULES_CONFIG_DIR wins over the default location."""
        monkeypatch.setenv("RULES_CONFIG_DIR", str(config_dir))
        assert load_config().app.name == "Test Validator"

    def test_environment_variable_overrides(self, config_dir, monkeypatch):
        """Test env vars override YAML and are converted to the right types."""
        monkeypatch.setenv("RULES_MAX_NESTING", "5")
        monkeypatch.setenv("PREVIEW_TIMEOUT", "2.5")
        monkeypatch.setenv("PREVIEW_SERVICE_URL", "https://preview.example.com")
        monkeypatch.setenv("AUTH_ENABLED", "true")
        monkeypatch.setenv("AUTH_PASSWORD", "12345")
        settings = ConfigLoader(config_dir).load()
        assert settings.rules.max_nesting == 5
        assert settings.rules.preview_timeout == 2.5
        assert settings.rules.preview_url == "https://preview.example.com"
        assert settings.auth.enabled is True
        assert settings.auth.password == "12345"

    def test_invalid_override_rejected(self, config_dir, monkeypatch):
        """Test out-of-range values fail loading."""
        monkeypatch.setenv("RULES_MAX_NESTING", "20")
        with pytest.raises(ConfigValidationError, match="rules.max_nesting"):
            ConfigLoader(config_dir).load()

    def test_dot_key_access(self, config_dir):
        """Test Settings.get on the raw merged config."""
        settings = ConfigLoader(config_dir).load()
        assert settings.get("rules.preview_url") == "http://preview:9000"
        assert settings.get("rules.missing", "fallback") == "fallback"
        assert settings.get("nope.deeper") is None


class TestGetSettings:
    """Test the process-wide settings cache."""

    def test_cached(self):
        """Test repeated calls return the same instance."""
        assert get_settings() is get_settings()

    def test_force_reload(self, monkeypatch):
        """Test force_reload picks up new environment values."""
        first = get_settings()
        monkeypatch.setenv("RULES_MAX_NESTING", "6")
        second = get_settings(force_reload=True)
        assert second is not first
        assert second.rules.max_nesting == 6


class TestValidateConfig:
    """Test raw config validation."""

    def test_valid_config(self):
        """Test a correct config passes."""
        validate_config({
            "rules": {"max_nesting": 3, "preview_url": "http://localhost:8000", "preview_timeout": 10},
            "api": {"port": 8100, "host": "127.0.0.1", "cors_origins": ["http://localhost:3000"]},
            "logging": {"level": "info", "file": {"enabled": True, "backup_count": 3}},
        })

    def test_every_problem_listed(self):
        """Test all problems are reported in one exception."""
        with pytest.raises(ConfigValidationError) as exc_info:
            validate_config({
                "rules": {"max_nesting": True, "preview_url": "ftp://preview", "preview_timeout": 0},
                "api": {"port": 80},
                "auth": {"enabled": "yes"},
                "logging": {"level": "LOUD", "console": "on", "buffer_size": 0},
            })
        message = str(exc_info.value)
        for expected in [
            "rules.max_nesting must be an integer between 0 and 10",
            "rules.preview_url must be an http(s) URL",
            "rules.preview_timeout must be a positive number",
            "api.port must be an integer between 1024 and 65535",
            "auth.enabled must be a boolean",
            "logging.level must be one of",
            "logging.console must be a dictionary",
            "logging.buffer_size must be a positive integer",
        ]:
            assert expected in message

    def test_empty_config(self):
        """Test an empty config relies on defaults."""
        validate_config({})
