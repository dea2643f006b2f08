from typing import Dict, Any, List


VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']


class ConfigValidationError(Exception):
    """Exception raised for configuration validation errors."""
    pass


def validate_config(config: Dict[str, Any]) -> None:
    """Validate the configuration values."""
    errors = []

    # Validate rule settings
    errors.extend(_validate_rules_config(config.get('rules', {})))

    # Validate API settings
    errors.extend(_validate_api_config(config.get('api', {})))

    # Validate auth settings
    errors.extend(_validate_auth_config(config.get('auth', {})))

    # Validate logging settings
    errors.extend(_validate_logging_config(config.get('logging', {})))

    if errors:
        raise ConfigValidationError("Configuration validation failed:\n" + "\n".join(errors))


def _is_positive_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def _validate_rules_config(rules: Dict[str, Any]) -> List[str]:
    """Validate rule validation configuration."""
    errors = []

    # Max nesting
    if 'max_nesting' in rules:
        value = rules['max_nesting']
        if not isinstance(value, int) or isinstance(value, bool) or not (0 <= value <= 10):
            errors.append("rules.max_nesting must be an integer between 0 and 10")

    # Preview service
    if 'preview_url' in rules:
        value = rules['preview_url']
        if not isinstance(value, str) or not value.startswith(('http://', 'https://')):
            errors.append("rules.preview_url must be an http(s) URL")

    if 'preview_timeout' in rules and not _is_positive_number(rules['preview_timeout']):
        errors.append("rules.preview_timeout must be a positive number")

    if 'default_lookback_days' in rules:
        value = rules['default_lookback_days']
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            errors.append("rules.default_lookback_days must be a positive integer")

    # Templates file
    if 'templates_path' in rules:
        if rules['templates_path'] is not None and not isinstance(rules['templates_path'], str):
            errors.append("rules.templates_path must be a string")

    return errors


def _validate_api_config(api: Dict[str, Any]) -> List[str]:
    """Validate API configuration."""
    errors = []

    # Port
    if 'port' in api:
        if not isinstance(api['port'], int) or not (1024 <= api['port'] <= 65535):
            errors.append("api.port must be an integer between 1024 and 65535")

    # Host
    if 'host' in api:
        if not isinstance(api['host'], str):
            errors.append("api.host must be a string")

    # CORS origins
    if 'cors_origins' in api:
        origins = api['cors_origins']
        if not isinstance(origins, list) or not all(isinstance(o, str) for o in origins):
            errors.append("api.cors_origins must be a list of strings")

    return errors


def _validate_auth_config(auth: Dict[str, Any]) -> List[str]:
    """Validate auth configuration."""
    errors = []

    if 'enabled' in auth and not isinstance(auth['enabled'], bool):
        errors.append("auth.enabled must be a boolean")

    for key in ['username', 'password']:
        if key in auth and not isinstance(auth[key], str):
            errors.append(f"auth.{key} must be a string")

    return errors


def _validate_logging_config(logging: Dict[str, Any]) -> List[str]:
    """Validate logging configuration."""
    errors = []

    # Level
    if 'level' in logging:
        if not isinstance(logging['level'], str) or logging['level'].upper() not in VALID_LOG_LEVELS:
            errors.append(f"logging.level must be one of: {', '.join(VALID_LOG_LEVELS)}")

    # Format
    if 'format' in logging:
        if not isinstance(logging['format'], str):
            errors.append("logging.format must be a string")

    # Log buffer
    if 'buffer_size' in logging:
        size = logging['buffer_size']
        if not isinstance(size, int) or isinstance(size, bool) or size < 1:
            errors.append("logging.buffer_size must be a positive integer")

    # File configuration
    if 'file' in logging:
        file_config = logging['file']
        if isinstance(file_config, dict):
            if 'enabled' in file_config and not isinstance(file_config['enabled'], bool):
                errors.append("logging.file.enabled must be a boolean")

            if 'path' in file_config and not isinstance(file_config['path'], str):
                errors.append("logging.file.path must be a string")

            if 'backup_count' in file_config:
                if not isinstance(file_config['backup_count'], int) or file_config['backup_count'] < 0:
                    errors.append("logging.file.backup_count must be a non-negative integer")
        else:
            errors.append("logging.file must be a dictionary")

    # Console configuration
    if 'console' in logging:
        console_config = logging['console']
        if isinstance(console_config, dict):
            if 'enabled' in console_config and not isinstance(console_config['enabled'], bool):
                errors.append("logging.console.enabled must be a boolean")

            if 'level' in console_config:
                level = console_config['level']
                if not isinstance(level, str) or level.upper() not in VALID_LOG_LEVELS:
                    errors.append(f"logging.console.level must be one of: {', '.join(VALID_LOG_LEVELS)}")
        else:
            errors.append("logging.console must be a dictionary")

    return errors
