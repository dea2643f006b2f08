"""
Rule condition trees and their validation.

This module provides the rule data structures, the tree validator with
conflict detection, improvement suggestions and the template catalog.
"""

from .models import (
    ConditionType,
    Operator,
    LogicOperator,
    ActionType,
    TemplateCategory,
    RuleCondition,
    RuleGroup,
    RuleAction,
    Rule,
    RuleTemplate,
    ValidationResult,
)
from .conditions import validate_condition
from .conflicts import (
    CONFLICT_RULES,
    detect_and_conflicts,
    detect_condition_conflict,
)
from .validator import (
    DEFAULT_MAX_NESTING,
    validate_rule_group,
    validate_rule,
)
from .advisor import (
    count_conditions,
    get_used_fields,
    suggest_improvements,
)
from .serialization import (
    RuleSerializationError,
    parse_rule_group,
    split_rule_group,
    rule_group_to_json,
    rule_group_from_json,
    validate_rule_group_json,
    save_rule,
    load_rule,
    load_templates,
)

__all__ = [
    # Enums
    'ConditionType',
    'Operator',
    'LogicOperator',
    'ActionType',
    'TemplateCategory',
    # Models
    'RuleCondition',
    'RuleGroup',
    'RuleAction',
    'Rule',
    'RuleTemplate',
    'ValidationResult',
    # Validation
    'validate_condition',
    'CONFLICT_RULES',
    'detect_and_conflicts',
    'detect_condition_conflict',
    'DEFAULT_MAX_NESTING',
    'validate_rule_group',
    'validate_rule',
    # Advisor
    'count_conditions',
    'get_used_fields',
    'suggest_improvements',
    # Serialization
    'RuleSerializationError',
    'parse_rule_group',
    'split_rule_group',
    'rule_group_to_json',
    'rule_group_from_json',
    'validate_rule_group_json',
    'save_rule',
    'load_rule',
    'load_templates',
]
