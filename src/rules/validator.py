"""
Rule Tree Validation Module

Validates rule condition trees before a rule is saved, activated or sent
to the preview service.

Validation checks:
- Nesting depth stays within the configured maximum
- Every group has logic and at least one condition or nested group
- Every condition is complete and within its field's value domain
- AND groups contain no mutually exclusive same-field conditions

The whole tree is always walked; every problem found is reported in one
ValidationResult and nothing is raised for malformed input.
"""

from typing import Any, List, Union

from src.utils import get_logger

from .conditions import validate_condition
from .conflicts import detect_and_conflicts
from .models import LogicOperator, Rule, RuleCondition, RuleGroup, ValidationResult
from .serialization import split_rule_group


logger = get_logger(__name__)

DEFAULT_MAX_NESTING = 3


def validate_rule_group(
    group: Union[RuleGroup, Any],
    max_nesting: int = DEFAULT_MAX_NESTING,
    depth: int = 0,
) -> ValidationResult:
    """
    Validate a rule group and everything nested below it.

    Raw mappings are checked child by child, so a condition that cannot be
    read is reported as ``Condition i: ...`` while its siblings are still
    range-checked and compared for conflicts.

    Args:
        group: The RuleGroup or raw mapping to validate
        max_nesting: Deepest allowed group depth, the root being depth 0
        depth: Depth of ``group`` in the tree

    Returns:
        ValidationResult aggregating errors, warnings and conflicts
    """
    if depth > max_nesting:
        return ValidationResult(errors=[f"Maximum nesting depth of {max_nesting} exceeded"])

    parts = split_rule_group(group)
    if parts is None:
        return ValidationResult(errors=["Rule group must be an object"])

    errors: List[str] = list(parts.errors)
    warnings: List[str] = []
    conflicts: List[str] = []

    # 1. Group logic (an unreadable shell is already reported)
    logic = parts.shell.logic if parts.shell is not None else None
    if parts.shell is not None and not logic:
        errors.append("Group logic is required")

    # 2. Leaf conditions
    conditions: List[RuleCondition] = []
    for index, (condition, parse_errors) in enumerate(parts.conditions, start=1):
        if condition is None:
            errors.append(f"Condition {index}: {', '.join(parse_errors)}")
            continue
        conditions.append(condition)
        condition_result = validate_condition(condition)
        if condition_result.errors:
            errors.append(f"Condition {index}: {', '.join(condition_result.errors)}")
        warnings.extend(condition_result.warnings)

    # 3. Conflicts between AND-combined conditions
    if logic == LogicOperator.AND:
        conflicts.extend(detect_and_conflicts(conditions))

    # 4. Nested groups
    for index, nested_group in enumerate(parts.groups, start=1):
        nested_result = validate_rule_group(nested_group, max_nesting, depth + 1)
        prefix = f"Nested group {index}: "
        if nested_result.errors:
            errors.append(prefix + ", ".join(nested_result.errors))
        warnings.extend(prefix + warning for warning in nested_result.warnings)
        conflicts.extend(prefix + conflict for conflict in nested_result.conflicts)

    # 5. Empty group
    if not parts.conditions and not parts.groups:
        errors.append("Group must contain at least one condition or nested group")

    result = ValidationResult(errors=errors, warnings=warnings, conflicts=conflicts)
    if depth == 0:
        logger.debug(
            "Validated rule group: valid=%s errors=%d warnings=%d conflicts=%d",
            result.valid, len(errors), len(warnings), len(conflicts),
        )
    return result


def validate_rule(rule: Rule, max_nesting: int = DEFAULT_MAX_NESTING) -> ValidationResult:
    """
    Validate a complete rule before it is persisted.

    Args:
        rule: The Rule to validate
        max_nesting: Deepest allowed group depth

    Returns:
        ValidationResult for the rule and its condition tree
    """
    errors: List[str] = []

    if not rule.name or not rule.name.strip():
        errors.append("Rule name is required")

    if not rule.actions:
        errors.append("Rule must have at least one action")

    for index, action in enumerate(rule.actions, start=1):
        if action.shares is not None and action.shares < 0:
            errors.append(f"Action {index}: shares cannot be negative")
        if action.limit_price is not None and action.limit_price < 0:
            errors.append(f"Action {index}: limit price cannot be negative")

    group_result = validate_rule_group(rule.root_group, max_nesting)

    return ValidationResult(
        errors=errors + group_result.errors,
        warnings=group_result.warnings,
        conflicts=group_result.conflicts,
    )
