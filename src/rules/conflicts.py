"""
Conflict detection for AND groups.

Two conditions conflict when they test the same field and can never be
true at the same time. The check is pairwise and limited to conditions of
one AND group sharing a field name: it does not look across fields, into
sibling subgroups, or at three-way interactions.

Operator pairs are resolved through ``CONFLICT_RULES``; supporting a new
operator combination means adding one entry to that table.
"""

from collections import OrderedDict
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .conditions import is_number
from .models import Operator, RuleCondition

Number = Union[int, float]
ConflictCheck = Callable[[RuleCondition, RuleCondition], Optional[str]]


def _numbers(first: RuleCondition, second: RuleCondition) -> Optional[Tuple[Number, Number]]:
    if is_number(first.value) and is_number(second.value):
        return first.value, second.value
    return None


def _greater_less(first: RuleCondition, second: RuleCondition) -> Optional[str]:
    values = _numbers(first, second)
    if values and values[0] >= values[1]:
        return f"{first.field} cannot be both > {values[0]} AND < {values[1]} (impossible)"
    return None


def _less_greater(first: RuleCondition, second: RuleCondition) -> Optional[str]:
    values = _numbers(first, second)
    if values and values[0] <= values[1]:
        return f"{first.field} cannot be both < {values[0]} AND > {values[1]} (impossible)"
    return None


def _equals_equals(first: RuleCondition, second: RuleCondition) -> Optional[str]:
    # Text values (e.g. news categories) are compared as-is
    if first.value is None or second.value is None:
        return None
    if first.value != second.value:
        return f"{first.field} cannot equal both {first.value} and {second.value} (impossible)"
    return None


def _equals_greater(first: RuleCondition, second: RuleCondition) -> Optional[str]:
    values = _numbers(first, second)
    if values and values[0] <= values[1]:
        return f"{first.field} = {values[0]} conflicts with {first.field} > {values[1]} (impossible)"
    return None


def _equals_less(first: RuleCondition, second: RuleCondition) -> Optional[str]:
    values = _numbers(first, second)
    if values and values[0] >= values[1]:
        return f"{first.field} = {values[0]} conflicts with {first.field} < {values[1]} (impossible)"
    return None


def _between_bounds(condition: RuleCondition) -> Tuple[Number, Number]:
    low = condition.value
    high = condition.value2 if is_number(condition.value2) else low
    return low, high


def _between_greater(first: RuleCondition, second: RuleCondition) -> Optional[str]:
    if not _numbers(first, second):
        return None
    low, high = _between_bounds(first)
    if second.value >= high:
        return (
            f"{first.field} between {low}-{high} conflicts with "
            f"{first.field} > {second.value} (impossible)"
        )
    return None


def _between_less(first: RuleCondition, second: RuleCondition) -> Optional[str]:
    if not _numbers(first, second):
        return None
    low, high = _between_bounds(first)
    if second.value <= low:
        return (
            f"{first.field} between {low}-{high} conflicts with "
            f"{first.field} < {second.value} (impossible)"
        )
    return None


CONFLICT_RULES: Mapping[Tuple[Operator, Operator], ConflictCheck] = MappingProxyType({
    (Operator.GREATER_THAN, Operator.LESS_THAN): _greater_less,
    (Operator.LESS_THAN, Operator.GREATER_THAN): _less_greater,
    (Operator.EQUALS, Operator.EQUALS): _equals_equals,
    (Operator.EQUALS, Operator.GREATER_THAN): _equals_greater,
    (Operator.EQUALS, Operator.LESS_THAN): _equals_less,
    (Operator.BETWEEN, Operator.GREATER_THAN): _between_greater,
    (Operator.BETWEEN, Operator.LESS_THAN): _between_less,
})


def detect_condition_conflict(first: RuleCondition, second: RuleCondition) -> Optional[str]:
    """
    Check whether two conditions on the same field are mutually exclusive.

    The pair is unordered: if the table has no entry for
    ``(first.operator, second.operator)`` the reversed pair is tried.

    Returns:
        A human-readable conflict description, or None
    """
    if first.field != second.field or not first.operator or not second.operator:
        return None

    first_op, second_op = Operator(first.operator), Operator(second.operator)
    check = CONFLICT_RULES.get((first_op, second_op))
    if check is not None:
        return check(first, second)

    check = CONFLICT_RULES.get((second_op, first_op))
    if check is not None:
        return check(second, first)

    return None


def detect_and_conflicts(conditions: Sequence[RuleCondition]) -> List[str]:
    """
    Detect mutually exclusive conditions combined with AND.

    Args:
        conditions: Conditions of a single AND group

    Returns:
        List of conflict descriptions (empty if none)
    """
    conflicts: List[str] = []

    by_field: Dict[str, List[RuleCondition]] = OrderedDict()
    for condition in conditions:
        if not condition.field:
            continue
        by_field.setdefault(condition.field, []).append(condition)

    for field_conditions in by_field.values():
        if len(field_conditions) < 2:
            continue
        for i in range(len(field_conditions)):
            for j in range(i + 1, len(field_conditions)):
                conflict = detect_condition_conflict(field_conditions[i], field_conditions[j])
                if conflict:
                    conflicts.append(conflict)

    return conflicts
