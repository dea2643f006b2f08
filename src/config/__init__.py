"""Configuration module for the rule validation service."""

from .settings import (
    Settings,
    AppConfig,
    RulesConfig,
    ApiConfig,
    AuthConfig,
    LoggingConfig,
    ConfigLoader,
    load_config,
    get_settings,
)

from .validation import (
    ConfigValidationError,
    validate_config,
)

__all__ = [
    'Settings',
    'AppConfig',
    'RulesConfig',
    'ApiConfig',
    'AuthConfig',
    'LoggingConfig',
    'ConfigLoader',
    'load_config',
    'get_settings',
    'ConfigValidationError',
    'validate_config',
]
