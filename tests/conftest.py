"""Shared fixtures for rule and indicator validation tests."""

from __future__ import annotations

import pytest

from src.config import settings as settings_module
from src.rules.models import RuleCondition, RuleGroup


_CONFIG_ENV_VARS = (
    "RULES_ENV",
    "RULES_CONFIG_DIR",
    "RULES_DOTENV_PATH",
    "LOG_LEVEL",
    "RULES_MAX_NESTING",
    "PREVIEW_SERVICE_URL",
    "PREVIEW_TIMEOUT",
    "RULES_TEMPLATES_PATH",
    "API_HOST",
    "API_PORT",
    "AUTH_ENABLED",
    "AUTH_USERNAME",
    "AUTH_PASSWORD",
    "API_RATE_LIMIT_ENABLED",
    "API_RATE_LIMIT_RPS",
    "API_RATE_LIMIT_BURST",
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Run every test against the default YAML config, with a fresh settings cache."""
    for name in _CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(settings_module, "_settings", None)
    yield
    settings_module._settings = None


@pytest.fixture
def make_condition():
    """Factory for complete conditions; override any property by keyword."""
    def _make(field="RSI", operator="less_than", value=30, **kwargs):
        kwargs.setdefault("type", "indicator")
        return RuleCondition(field=field, operator=operator, value=value, **kwargs)
    return _make


@pytest.fixture
def make_group():
    """Factory for rule groups."""
    def _make(*conditions, logic="AND", groups=()):
        return RuleGroup(logic=logic, conditions=tuple(conditions), groups=tuple(groups))
    return _make


@pytest.fixture
def breakout_group_data():
    """Raw JSON shape of a valid two-level rule group."""
    return {
        "logic": "AND",
        "conditions": [
            {"type": "price", "field": "current_price", "operator": "greater_than", "value": 100},
            {"type": "volume", "field": "volume_ratio", "operator": "greater_than", "value": 1.5},
        ],
        "groups": [
            {
                "logic": "OR",
                "conditions": [
                    {"type": "indicator", "field": "RSI", "operator": "greater_than", "value": 50},
                    {"type": "indicator", "field": "MACD", "operator": "crosses_above", "value": 0},
                ],
            }
        ],
    }
