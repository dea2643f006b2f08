"""
Serialization utilities for rule trees, rules and templates.

``parse_rule_group`` and ``split_rule_group`` are the tolerant entry
points: they never raise and report coercion problems as strings. The file and
JSON helpers raise ``RuleSerializationError`` like any other I/O layer.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from pydantic import ValidationError

from .models import Rule, RuleCondition, RuleGroup, RuleTemplate


class RuleSerializationError(Exception):
    """Raised when rule serialization/deserialization fails."""
    pass


def format_validation_errors(exc: ValidationError, subject: str) -> List[str]:
    """Turn a pydantic ValidationError into one message per problem."""
    messages: List[str] = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()))
        if location:
            messages.append(f"Invalid {subject} at {location}: {err.get('msg')}")
        else:
            messages.append(f"Invalid {subject}: {err.get('msg')}")
    return messages


def parse_rule_group(data: Any) -> Tuple[Optional[RuleGroup], List[str]]:
    """
    Coerce raw JSON-like data into a RuleGroup.

    Args:
        data: A RuleGroup or a mapping with the rule group shape

    Returns:
        Tuple of (group, errors). If coercion fails: (None, error messages)
    """
    if isinstance(data, RuleGroup):
        return data, []
    if not isinstance(data, dict):
        return None, ["Rule group must be an object"]

    try:
        return RuleGroup.model_validate(data), []
    except ValidationError as e:
        return None, format_validation_errors(e, "rule group")


class RuleGroupParts(NamedTuple):
    """A raw rule group split into its shell and its children."""
    shell: Optional[RuleGroup]
    conditions: List[Tuple[Optional[RuleCondition], List[str]]]
    groups: List[Any]
    errors: List[str]


def parse_rule_condition(data: Any) -> Tuple[Optional[RuleCondition], List[str]]:
    """Coerce one raw condition. Returns (condition, []) or (None, errors)."""
    if isinstance(data, RuleCondition):
        return data, []
    try:
        return RuleCondition.model_validate(data), []
    except ValidationError as e:
        return None, format_validation_errors(e, "condition")


def _child_list(data: Dict[str, Any], key: str, errors: List[str]) -> List[Any]:
    items = data.get(key)
    if items is None:
        return []
    if not isinstance(items, (list, tuple)):
        errors.append(f"Invalid rule group at {key}: Input should be a valid list")
        return []
    return list(items)


def split_rule_group(data: Any) -> Optional[RuleGroupParts]:
    """
    Take a rule group apart so each child can be checked on its own.

    Unlike ``parse_rule_group`` a broken condition does not hide its
    siblings: every condition is coerced separately and nested groups
    are left raw for the caller to recurse into.

    Args:
        data: A RuleGroup or a mapping with the rule group shape

    Returns:
        RuleGroupParts, or None if ``data`` is not an object at all.
        ``shell`` carries the group's id and logic and is None when
        those are unreadable.
    """
    if isinstance(data, RuleGroup):
        return RuleGroupParts(data, [(c, []) for c in data.conditions], list(data.groups), [])
    if not isinstance(data, dict):
        return None

    errors: List[str] = []
    try:
        shell = RuleGroup.model_validate({k: data[k] for k in ("id", "logic") if k in data})
    except ValidationError as e:
        shell = None
        errors.extend(format_validation_errors(e, "rule group"))

    conditions = [parse_rule_condition(item) for item in _child_list(data, "conditions", errors)]
    groups = _child_list(data, "groups", errors)
    return RuleGroupParts(shell, conditions, groups, errors)


def rule_group_to_json(group: RuleGroup, pretty: bool = True) -> str:
    """
    Convert a rule group to a JSON string.

    Args:
        group: RuleGroup to convert
        pretty: Whether to format with indentation

    Returns:
        JSON string representation
    """
    group_dict = group.model_dump(mode='json')
    if pretty:
        return json.dumps(group_dict, indent=2, ensure_ascii=False)
    return json.dumps(group_dict, ensure_ascii=False)


def validate_rule_group_json(json_str: str) -> Tuple[bool, Optional[str], Optional[RuleGroup]]:
    """
    Check that a JSON string describes a rule group.

    Returns:
        Tuple of (is_valid, error_message, group)
        If valid: (True, None, RuleGroup)
        If invalid: (False, error_message, None)
    """
    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        return False, f"Invalid JSON: {e}", None

    group, errors = parse_rule_group(data)
    if group is None:
        return False, "; ".join(errors), None
    return True, None, group


def rule_group_from_json(json_str: str) -> RuleGroup:
    """
    Create a rule group from a JSON string.

    Raises:
        RuleSerializationError: If parsing fails
    """
    is_valid, error, group = validate_rule_group_json(json_str)
    if not is_valid:
        raise RuleSerializationError(error)
    return group


def save_rule(rule: Rule, path: Path) -> None:
    """
    Save a rule to a JSON file.

    Raises:
        RuleSerializationError: If serialization fails
    """
    try:
        rule.updated_at = datetime.now(timezone.utc)
        rule_dict = rule.model_dump(mode='json')

        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(rule_dict, f, indent=2, ensure_ascii=False)

    except (OSError, TypeError, ValueError) as e:
        raise RuleSerializationError(f"Failed to save rule to {path}: {e}") from e


def load_rule(path: Path) -> Rule:
    """
    Load a rule from a JSON file.

    Raises:
        RuleSerializationError: If loading or parsing fails
        FileNotFoundError: If the file doesn't exist
    """
    if not path.exists():
        raise FileNotFoundError(f"Rule file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return Rule.model_validate(data)

    except json.JSONDecodeError as e:
        raise RuleSerializationError(f"Invalid JSON in {path}: {e}") from e
    except ValidationError as e:
        raise RuleSerializationError(f"Invalid rule in {path}: {e}") from e


def load_templates(path: Path) -> List[RuleTemplate]:
    """
    Load rule templates from a JSON file.

    The file holds either a list of templates or an object with a
    ``templates`` list, the shape returned by the templates endpoint.

    Raises:
        RuleSerializationError: If loading or parsing fails
        FileNotFoundError: If the file doesn't exist
    """
    if not path.exists():
        raise FileNotFoundError(f"Template file not found: {path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise RuleSerializationError(f"Invalid JSON in {path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("templates", [])
    if not isinstance(data, list):
        raise RuleSerializationError(f"Expected a list of templates in {path}")

    try:
        return [RuleTemplate.model_validate(item) for item in data]
    except ValidationError as e:
        raise RuleSerializationError(f"Invalid template in {path}: {e}") from e
