"""
Rule template catalog.

Built-in templates seed new rules in the rule builder. Thresholds set to 0
are placeholders the user customizes (recent high, safety line, target).
Additional templates can be loaded from the JSON file configured as
``rules.templates_path``.
"""

from pathlib import Path
from typing import List, Optional

from src.config.settings import get_settings
from src.utils import get_logger

from .models import Rule, RuleTemplate
from .serialization import RuleSerializationError, load_templates


logger = get_logger(__name__)


_BUILTIN_TEMPLATE_DATA = [
    {
        "id": "template-001",
        "name": "RSI Oversold Bounce",
        "category": "reversal",
        "description": "Buy when RSI drops below 30 and starts to recover. Classic mean reversion strategy.",
        "root_group": {
            "id": "group-1",
            "logic": "AND",
            "conditions": [
                {"id": "cond-1", "type": "indicator", "field": "RSI", "operator": "less_than",
                 "value": 30, "timeframe": "1d"},
                {"id": "cond-2", "type": "indicator", "field": "RSI", "operator": "crosses_above",
                 "value": 30, "timeframe": "1d"},
            ],
            "groups": [],
        },
        "actions": [
            {"type": "alert", "alert_type": "opportunity",
             "message": "RSI oversold bounce detected - potential buying opportunity"},
        ],
        "popularity": 85,
        "avg_win_rate": 0.62,
    },
    {
        "id": "template-002",
        "name": "Momentum Breakout",
        "category": "breakout",
        "description": "Alert when price breaks above resistance with high volume. Trend-following strategy.",
        "root_group": {
            "id": "group-1",
            "logic": "AND",
            "conditions": [
                {"id": "cond-1", "type": "price", "field": "current_price", "operator": "crosses_above",
                 "value": 0, "timeframe": "1d"},
                {"id": "cond-2", "type": "volume", "field": "volume_ratio", "operator": "greater_than",
                 "value": 1.5},
                {"id": "cond-3", "type": "indicator", "field": "RSI", "operator": "greater_than",
                 "value": 50, "timeframe": "1d"},
            ],
            "groups": [],
        },
        "actions": [
            {"type": "alert", "alert_type": "opportunity", "message": "Breakout detected with strong volume"},
        ],
        "popularity": 78,
        "avg_win_rate": 0.58,
    },
    {
        "id": "template-003",
        "name": "Stop Loss Trigger",
        "category": "risk_management",
        "description": "Automatically sell when price drops below your safety line. Essential risk management.",
        "root_group": {
            "id": "group-1",
            "logic": "AND",
            "conditions": [
                {"id": "cond-1", "type": "price", "field": "current_price", "operator": "less_than",
                 "value": 0},
            ],
            "groups": [],
        },
        "actions": [
            {"type": "alert", "alert_type": "protect", "message": "Safety line breached - consider selling"},
            {"type": "sell", "message": "Auto-sell triggered by safety line", "shares": 0},
        ],
        "popularity": 92,
        "avg_win_rate": 0.71,
    },
    {
        "id": "template-004",
        "name": "MACD Golden Cross",
        "category": "momentum",
        "description": "Buy signal when MACD line crosses above signal line. Strong momentum indicator.",
        "root_group": {
            "id": "group-1",
            "logic": "AND",
            "conditions": [
                {"id": "cond-1", "type": "indicator", "field": "MACD", "operator": "crosses_above",
                 "value": 0, "timeframe": "1d"},
                {"id": "cond-2", "type": "volume", "field": "volume_ratio", "operator": "greater_than",
                 "value": 1.0},
            ],
            "groups": [],
        },
        "actions": [
            {"type": "alert", "alert_type": "opportunity", "message": "MACD bullish crossover - strong buy signal"},
        ],
        "popularity": 73,
        "avg_win_rate": 0.56,
    },
    {
        "id": "template-005",
        "name": "Bollinger Band Squeeze",
        "category": "breakout",
        "description": "Alert when price breaks out of narrow Bollinger Bands. Volatility expansion play.",
        "root_group": {
            "id": "group-1",
            "logic": "OR",
            "conditions": [],
            "groups": [
                {
                    "id": "group-2",
                    "logic": "AND",
                    "conditions": [
                        {"id": "cond-1", "type": "indicator", "field": "Bollinger_Upper",
                         "operator": "crosses_above", "value": 0, "timeframe": "1d"},
                        {"id": "cond-2", "type": "volume", "field": "volume_ratio",
                         "operator": "greater_than", "value": 1.3},
                    ],
                    "groups": [],
                },
                {
                    "id": "group-3",
                    "logic": "AND",
                    "conditions": [
                        {"id": "cond-3", "type": "indicator", "field": "Bollinger_Lower",
                         "operator": "crosses_below", "value": 0, "timeframe": "1d"},
                        {"id": "cond-4", "type": "volume", "field": "volume_ratio",
                         "operator": "greater_than", "value": 1.3},
                    ],
                    "groups": [],
                },
            ],
        },
        "actions": [
            {"type": "alert", "alert_type": "opportunity", "message": "Bollinger Band breakout - volatility expansion"},
        ],
        "popularity": 65,
        "avg_win_rate": 0.54,
    },
    {
        "id": "template-006",
        "name": "Moving Average Crossover",
        "category": "momentum",
        "description": "Classic golden cross: 50-day SMA crosses above 200-day SMA. Long-term bullish signal.",
        "root_group": {
            "id": "group-1",
            "logic": "AND",
            "conditions": [
                {"id": "cond-1", "type": "indicator", "field": "SMA_50", "operator": "crosses_above",
                 "value": 0, "timeframe": "1d"},
            ],
            "groups": [],
        },
        "actions": [
            {"type": "alert", "alert_type": "opportunity", "message": "Golden Cross detected - long-term bullish trend"},
        ],
        "popularity": 88,
        "avg_win_rate": 0.67,
    },
    {
        "id": "template-007",
        "name": "High Volume Breakout",
        "category": "breakout",
        "description": "Price breakout confirmed by exceptional volume. Institutional activity indicator.",
        "root_group": {
            "id": "group-1",
            "logic": "AND",
            "conditions": [
                {"id": "cond-1", "type": "volume", "field": "volume_ratio", "operator": "greater_than",
                 "value": 2.0},
                {"id": "cond-2", "type": "price", "field": "current_price", "operator": "greater_than",
                 "value": 0},
                {"id": "cond-3", "type": "indicator", "field": "ATR", "operator": "greater_than",
                 "value": 0, "timeframe": "1d"},
            ],
            "groups": [],
        },
        "actions": [
            {"type": "alert", "alert_type": "opportunity",
             "message": "High volume breakout - strong institutional interest"},
        ],
        "popularity": 70,
        "avg_win_rate": 0.59,
    },
    {
        "id": "template-008",
        "name": "Take Profit at Target",
        "category": "risk_management",
        "description": "Automatically sell when your profit target is reached. Lock in gains.",
        "root_group": {
            "id": "group-1",
            "logic": "AND",
            "conditions": [
                {"id": "cond-1", "type": "price", "field": "current_price", "operator": "greater_than",
                 "value": 0},
            ],
            "groups": [],
        },
        "actions": [
            {"type": "alert", "alert_type": "opportunity", "message": "Profit target reached - consider taking profits"},
            {"type": "sell", "message": "Auto-sell at profit target", "shares": 0},
        ],
        "popularity": 81,
        "avg_win_rate": 0.75,
    },
]

BUILTIN_TEMPLATES = tuple(RuleTemplate.model_validate(data) for data in _BUILTIN_TEMPLATE_DATA)


def _custom_templates() -> List[RuleTemplate]:
    templates_path = get_settings().rules.templates_path
    if not templates_path:
        return []

    try:
        return load_templates(Path(templates_path))
    except (FileNotFoundError, RuleSerializationError) as e:
        logger.warning(f"Failed to load custom rule templates: {e}")
        return []


def get_rule_templates(category: Optional[str] = None) -> List[RuleTemplate]:
    """
    List available rule templates, most popular first.

    Args:
        category: Optional category filter (e.g. 'breakout')

    Returns:
        List of RuleTemplate objects
    """
    templates = list(BUILTIN_TEMPLATES) + _custom_templates()
    if category:
        templates = [t for t in templates if t.category == category]
    return sorted(templates, key=lambda t: -t.popularity)


def get_rule_template(template_id: str) -> Optional[RuleTemplate]:
    """Find a template by ID. Returns None if not found."""
    for template in get_rule_templates():
        if template.id == template_id:
            return template
    return None


def rule_from_template(
    template: RuleTemplate,
    name: Optional[str] = None,
    symbol: Optional[str] = None,
) -> Rule:
    """
    Create a new rule seeded from a template.

    The template's root group is immutable and is reused as-is; editing
    the rule later replaces nodes rather than changing the template.

    Args:
        template: Template to copy
        name: Optional rule name (defaults to the template name)
        symbol: Optional ticker symbol

    Returns:
        New Rule object with a fresh ID
    """
    return Rule(
        name=name or template.name,
        description=template.description,
        symbol=symbol.upper() if symbol else None,
        root_group=template.root_group,
        actions=list(template.actions),
    )
