"""
Validation of single rule conditions.

Checks run in a fixed order: required properties, operator support for the
field, value types, domain bounds, the 'between' pair, and finally the
advisory rarity caveats (warnings only).
"""

from typing import Any, List

from .models import Operator, RuleCondition, ValidationResult
from .semantics import ValueDomain, lookup_field_domain


def is_number(value: Any) -> bool:
    """True for int/float values, excluding bools."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_condition(condition: RuleCondition) -> ValidationResult:
    """
    Validate a single leaf condition.

    Args:
        condition: The RuleCondition to validate

    Returns:
        ValidationResult with errors and warnings for this condition
    """
    errors: List[str] = []
    warnings: List[str] = []

    # 1. Required properties
    if not condition.type:
        errors.append("Condition type is required")
    if not condition.field:
        errors.append("Field is required")
    if not condition.operator:
        errors.append("Operator is required")
    if condition.value is None:
        errors.append("Value is required")

    domain = lookup_field_domain(condition.field)

    # 2. Domain checks
    if domain is not None:
        errors.extend(_check_domain(condition, domain))

    # 3. Between operator
    if condition.operator == Operator.BETWEEN:
        if condition.value2 is None:
            errors.append("Between operator requires two values")
        elif is_number(condition.value):
            if condition.value >= condition.value2:
                errors.append("First value must be less than second value for between operator")
        elif condition.value is not None:
            errors.append("Between operator requires numeric values")

    # 4. Rarity caveats
    if domain is not None and is_number(condition.value):
        for caveat in domain.caveats:
            if caveat.applies(condition.operator, condition.value):
                warnings.append(caveat.message.format(value=condition.value))

    return ValidationResult(errors=errors, warnings=warnings)


def _check_domain(condition: RuleCondition, domain: ValueDomain) -> List[str]:
    errors: List[str] = []

    if not domain.supports(condition.operator):
        errors.append(f"Operator '{condition.operator}' is not supported for {condition.field}")

    value = condition.value
    if value is None:
        return errors

    if domain.type == "number":
        if not is_number(value):
            errors.append(f"{domain.label} value must be a number")
            return errors
        violation = domain.bound_violation(value)
        if violation:
            errors.append(violation)
        if condition.value2 is not None:
            violation = domain.bound_violation(condition.value2, name="value2")
            if violation:
                errors.append(violation)
    elif domain.type == "string" and not isinstance(value, str):
        errors.append(f"{domain.label} value must be text")

    return errors

