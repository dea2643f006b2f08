"""
Configuration management for the rule validation service.

Loads settings from YAML files and environment variables, providing typed
dataclasses for easy access.
"""

import os
import yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, List, Optional
from dotenv import load_dotenv

from .validation import validate_config


@dataclass
class AppConfig:
    """Application-level configuration."""
    name: str = "Rule Validation Service"
    log_level: str = "INFO"
    logs_dir: str = "logs"


@dataclass
class RulesConfig:
    """Rule validation and preview configuration."""
    max_nesting: int = 3
    preview_url: str = "http://localhost:8000"
    preview_timeout: float = 30.0
    default_lookback_days: int = 30
    templates_path: str = ""  # Optional JSON file with extra rule templates


@dataclass
class ApiConfig:
    """HTTP API configuration."""
    host: str = "0.0.0.0"
    port: int = 8100
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])


@dataclass
class AuthConfig:
    """HTTP Basic authentication for the API."""
    enabled: bool = False
    username: str = "admin"
    password: str = "change-me"


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_enabled: bool = False
    file_path: str = "logs/rule_validator.log"
    file_backup_count: int = 5
    console_enabled: bool = True
    console_level: str = "INFO"
    buffer_size: int = 100  # Lines kept for the /api/v1/logs endpoint


@dataclass
class Settings:
    """Main settings container with all configuration sections."""
    app: AppConfig = field(default_factory=AppConfig)
    rules: RulesConfig = field(default_factory=RulesConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Raw merged config, for keys without a typed field
    _raw_config: Dict[str, Any] = field(default_factory=dict, repr=False)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dot-separated key."""
        keys = key.split('.')
        current = self._raw_config
        for k in keys:
            if isinstance(current, dict) and k in current:
                current = current[k]
            else:
                return default
        return current


class ConfigLoader:
    """Loads and manages configuration from multiple sources."""

    def __init__(self, config_dir: Optional[Path] = None):
        env_config_dir = os.getenv("RULES_CONFIG_DIR")
        default_dir = Path(__file__).parent.parent.parent / "config"
        self.config_dir = Path(env_config_dir) if env_config_dir else (config_dir or default_dir)
        self.project_root = Path(__file__).parent.parent.parent

        # Load environment variables
        dotenv_path = os.getenv("RULES_DOTENV_PATH")
        if dotenv_path:
            load_dotenv(dotenv_path=dotenv_path)
        load_dotenv(dotenv_path=self.project_root / ".env")

    def load(self) -> Settings:
        """Load configuration and return a Settings object.

        Raises:
            ConfigValidationError: If any configured value is invalid
        """
        raw_config = self._load_raw_config()
        validate_config(raw_config)
        return self._create_settings(raw_config)

    def _load_raw_config(self) -> Dict[str, Any]:
        """Load raw configuration from YAML and environment."""
        # Load default config
        config = self._load_yaml_file("default.yaml")

        # Load environment-specific overrides
        env = os.getenv("RULES_ENV", "development")
        env_config = self._load_yaml_file(f"environment/{env}.yaml")
        config = self._deep_merge(config, env_config)

        # Apply environment variable overrides
        self._apply_env_overrides(config)

        return config

    def _load_yaml_file(self, filename: str) -> Dict[str, Any]:
        """Load a YAML file from the config directory."""
        file_path = self.config_dir / filename
        if file_path.exists():
            with open(file_path, 'r') as f:
                return yaml.safe_load(f) or {}
        return {}

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> None:
        """Apply environment variable overrides."""
        env_mappings = {
            "LOG_LEVEL": ("logging", "level"),
            "RULES_MAX_NESTING": ("rules", "max_nesting"),
            "PREVIEW_SERVICE_URL": ("rules", "preview_url"),
            "PREVIEW_TIMEOUT": ("rules", "preview_timeout"),
            "RULES_TEMPLATES_PATH": ("rules", "templates_path"),
            "API_HOST": ("api", "host"),
            "API_PORT": ("api", "port"),
            "AUTH_ENABLED": ("auth", "enabled"),
            "AUTH_USERNAME": ("auth", "username"),
            "AUTH_PASSWORD": ("auth", "password"),
        }
        string_keys = {"AUTH_USERNAME", "AUTH_PASSWORD", "PREVIEW_SERVICE_URL", "RULES_TEMPLATES_PATH", "API_HOST"}

        for env_key, config_path in env_mappings.items():
            value = os.getenv(env_key)
            if value is not None:
                converted = value if env_key in string_keys else self._convert_value(value)
                self._set_nested(config, config_path, converted)

    def _set_nested(self, config: Dict[str, Any], path: tuple, value: Any) -> None:
        """Set a nested value in config dict."""
        current = config
        for key in path[:-1]:
            if key not in current:
                current[key] = {}
            current = current[key]
        current[path[-1]] = value

    def _convert_value(self, value: str) -> Any:
        """Convert string value to appropriate type."""
        if value.lower() in ('true', 'false'):
            return value.lower() == 'true'
        try:
            if '.' not in value:
                return int(value)
            return float(value)
        except ValueError:
            return value

    def _create_settings(self, raw_config: Dict[str, Any]) -> Settings:
        """Create Settings object from raw config dict."""
        app_cfg = raw_config.get("app", {})
        rules_cfg = raw_config.get("rules", {})
        api_cfg = raw_config.get("api", {})
        auth_cfg = raw_config.get("auth", {})
        logging_cfg = raw_config.get("logging", {})

        return Settings(
            app=AppConfig(
                name=app_cfg.get("name", "Rule Validation Service"),
                log_level=app_cfg.get("log_level", "INFO"),
                logs_dir=app_cfg.get("logs_dir", "logs"),
            ),
            rules=RulesConfig(
                max_nesting=rules_cfg.get("max_nesting", 3),
                preview_url=rules_cfg.get("preview_url", "http://localhost:8000"),
                preview_timeout=rules_cfg.get("preview_timeout", 30.0),
                default_lookback_days=rules_cfg.get("default_lookback_days", 30),
                templates_path=rules_cfg.get("templates_path", "") or "",
            ),
            api=ApiConfig(
                host=api_cfg.get("host", "0.0.0.0"),
                port=api_cfg.get("port", 8100),
                cors_origins=api_cfg.get("cors_origins", ["http://localhost:3000"]),
            ),
            auth=AuthConfig(
                enabled=auth_cfg.get("enabled", False),
                username=auth_cfg.get("username", "admin"),
                password=auth_cfg.get("password", "change-me"),
            ),
            logging=LoggingConfig(
                level=logging_cfg.get("level", "INFO"),
                format=logging_cfg.get("format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
                file_enabled=logging_cfg.get("file", {}).get("enabled", False),
                file_path=logging_cfg.get("file", {}).get("path", "logs/rule_validator.log"),
                file_backup_count=logging_cfg.get("file", {}).get("backup_count", 5),
                console_enabled=logging_cfg.get("console", {}).get("enabled", True),
                console_level=logging_cfg.get("console", {}).get("level", "INFO"),
                buffer_size=logging_cfg.get("buffer_size", 100),
            ),
            _raw_config=raw_config,
        )


def load_config(config_dir: Optional[Path] = None) -> Settings:
    """Load configuration and return Settings object.

    Args:
        config_dir: Optional path to config directory. Defaults to project's config/ folder.

    Returns:
        Settings object with all configuration values.
    """
    loader = ConfigLoader(config_dir)
    return loader.load()


# Global settings instance (lazy loaded)
_settings: Optional[Settings] = None


def get_settings(force_reload: bool = False) -> Settings:
    """Get the global settings instance.

    Settings are loaded on first access and cached for subsequent calls.

    Args:
        force_reload: Force reloading settings from files.

    Returns:
        Settings object.
    """
    global _settings
    if _settings is None or force_reload:
        _settings = load_config()
    return _settings
