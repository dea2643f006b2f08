"""
Indicator Configuration Validation Module

Validates the set of indicators active on a chart.

Validation checks:
- Required parameters are present and numeric
- Parameter values are within range
- Cross-parameter logic (RSI overbought/oversold, MACD fast/slow)
- Composite indicators have their base indicators enabled
- Too many RSI instances or moving averages (warnings)
"""

import math
from typing import Any, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from src.rules.models import ValidationResult
from src.rules.semantics import (
    INDICATOR_DEPENDENCIES,
    INDICATOR_PARAM_RULES,
    MAX_MOVING_AVERAGES,
    MAX_RSI_INSTANCES,
    MIN_RSI_BAND_WIDTH,
    MOVING_AVERAGE_INDICATORS,
)
from src.rules.serialization import format_validation_errors
from src.utils import get_logger

from .models import IndicatorConfig


logger = get_logger(__name__)


def to_number(value: Any) -> Optional[float]:
    """Coerce a parameter value to a number, or None if it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value)
        except ValueError:
            return None
    else:
        return None
    return None if math.isnan(number) else number


def validate_indicator(config: IndicatorConfig) -> ValidationResult:
    """
    Validate a single indicator configuration.

    Args:
        config: The IndicatorConfig to validate

    Returns:
        ValidationResult with errors and warnings for this indicator
    """
    errors: List[str] = []
    warnings: List[str] = []

    if not config.name or not config.name.strip():
        return ValidationResult(errors=["Indicator name is required"])

    rules = INDICATOR_PARAM_RULES.get(config.name)
    if rules is None:
        warnings.append(f"No validation rules defined for {config.name}")
        return ValidationResult(warnings=warnings)

    # 1. Required parameters and ranges
    for param_name, rule in rules.items():
        if param_name not in config.params:
            if rule.required:
                errors.append(f"Missing required parameter: {param_name}")
            continue

        if rule.type != "number":
            continue

        number = to_number(config.params[param_name])
        if number is None:
            errors.append(f"{param_name} must be a number")
            continue

        if rule.min is not None and number < rule.min:
            errors.append(f"{param_name} must be >= {rule.min}")
        if rule.max is not None and number > rule.max:
            errors.append(f"{param_name} must be <= {rule.max}")

    # 2. Indicator-specific logic
    if config.name == "RSI":
        overbought = to_number(config.params.get("overbought"))
        oversold = to_number(config.params.get("oversold"))
        if overbought is not None and oversold is not None:
            if overbought <= oversold:
                errors.append("Overbought level must be greater than oversold level")
            elif overbought - oversold < MIN_RSI_BAND_WIDTH:
                warnings.append("Narrow range between overbought/oversold may generate excessive signals")

    if config.name == "MACD":
        fast = to_number(config.params.get("fast"))
        slow = to_number(config.params.get("slow"))
        if fast is not None and slow is not None and fast >= slow:
            errors.append("Fast period must be less than slow period")

    return ValidationResult(errors=errors, warnings=warnings)


def validate_dependencies(indicators: Sequence[IndicatorConfig]) -> ValidationResult:
    """
    Check that composite indicators have their base indicators enabled.

    Args:
        indicators: The active indicator configurations

    Returns:
        ValidationResult with dependency errors and clutter warnings
    """
    errors: List[str] = []
    warnings: List[str] = []

    available = {indicator.name for indicator in indicators}

    for indicator in indicators:
        for dependency in INDICATOR_DEPENDENCIES.get(indicator.name, ()):
            if dependency not in available:
                errors.append(f"{indicator.name} requires {dependency} to be enabled")

    rsi_count = sum(1 for indicator in indicators if indicator.name == "RSI")
    if rsi_count > MAX_RSI_INSTANCES:
        warnings.append("Multiple RSI indicators may clutter the chart")

    moving_averages = sum(1 for indicator in indicators if indicator.name in MOVING_AVERAGE_INDICATORS)
    if moving_averages > MAX_MOVING_AVERAGES:
        warnings.append("Too many moving averages may reduce chart clarity")

    return ValidationResult(errors=errors, warnings=warnings)


def get_dependency_hints(indicator_name: str) -> List[str]:
    """Describe the base indicators a composite indicator needs."""
    return [
        f"Requires {dependency} to be enabled for full functionality"
        for dependency in INDICATOR_DEPENDENCIES.get(indicator_name, ())
    ]


def validate_indicator_set(
    indicators: Sequence[Union[IndicatorConfig, Mapping[str, Any]]],
) -> ValidationResult:
    """
    Validate an entire indicator set.

    Per-indicator messages are prefixed with the indicator name. Entries
    that cannot be read as an indicator configuration are reported as
    errors and left out of the dependency checks.

    Args:
        indicators: IndicatorConfig objects or mappings of the same shape

    Returns:
        ValidationResult for the whole set
    """
    errors: List[str] = []
    warnings: List[str] = []
    configs: List[IndicatorConfig] = []

    for index, item in enumerate(indicators, start=1):
        if isinstance(item, IndicatorConfig):
            configs.append(item)
            continue
        try:
            configs.append(IndicatorConfig.model_validate(item))
        except ValidationError as e:
            errors.extend(format_validation_errors(e, f"indicator {index}"))

    # 1. Each indicator individually
    for config in configs:
        result = validate_indicator(config)
        label = config.name or "Indicator"
        errors.extend(f"{label}: {error}" for error in result.errors)
        warnings.extend(f"{label}: {warning}" for warning in result.warnings)

    # 2. Dependencies and clutter
    dependency_result = validate_dependencies(configs)
    errors.extend(dependency_result.errors)
    warnings.extend(dependency_result.warnings)

    logger.debug(f"Validated {len(configs)} indicators: {len(errors)} errors, {len(warnings)} warnings")
    return ValidationResult(errors=errors, warnings=warnings)
