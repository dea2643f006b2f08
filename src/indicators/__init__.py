"""
Indicator configuration validation.

Flat counterpart of the rule tree validator: parameter ranges,
cross-indicator dependencies and chart clutter heuristics.
"""

from .models import IndicatorConfig, IndicatorPreset
from .validator import (
    validate_indicator,
    validate_dependencies,
    validate_indicator_set,
    get_dependency_hints,
)
from .presets import get_sample_presets

__all__ = [
    'IndicatorConfig',
    'IndicatorPreset',
    'validate_indicator',
    'validate_dependencies',
    'validate_indicator_set',
    'get_dependency_hints',
    'get_sample_presets',
]
