"""
Improvement suggestions for rule trees.

Heuristics only: suggestions never block saving a rule. Callers usually
show them once the tree validates.
"""

from typing import List, Set

from .models import RuleGroup
from .semantics import MAX_RULE_CONDITIONS, PRICE_FIELDS, RISK_FIELDS, VOLUME_FIELDS


def count_conditions(group: RuleGroup) -> int:
    """Count all conditions in a group, including nested groups."""
    return len(group.conditions) + sum(count_conditions(g) for g in group.groups)


def get_used_fields(group: RuleGroup) -> Set[str]:
    """Collect the distinct field names used anywhere in a group."""
    fields = {c.field for c in group.conditions if c.field}
    for nested_group in group.groups:
        fields |= get_used_fields(nested_group)
    return fields


def suggest_improvements(group: RuleGroup) -> List[str]:
    """
    Suggest improvements for a rule tree.

    Args:
        group: Root group of the rule

    Returns:
        List of suggestion strings (empty if nothing to suggest)
    """
    suggestions: List[str] = []
    fields = get_used_fields(group)
    condition_count = count_conditions(group)
    has_price = bool(fields & PRICE_FIELDS)

    if has_price and not fields & VOLUME_FIELDS:
        suggestions.append("Consider adding volume confirmation to improve signal quality")

    if "MACD" in fields and "RSI" not in fields:
        suggestions.append("Adding RSI can help confirm MACD signals and reduce false positives")

    if condition_count == 1:
        suggestions.append(
            "Single-condition rules may produce false signals. Consider adding confirmation conditions."
        )

    if condition_count > MAX_RULE_CONDITIONS:
        suggestions.append("Rules with many conditions may be overfitted and perform poorly in live trading")

    if has_price and not fields & RISK_FIELDS:
        suggestions.append("Consider adding a stop-loss condition for risk management")

    return suggestions
