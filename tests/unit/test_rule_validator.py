"""
Unit Tests for Rule Tree Validation

Tests for the recursive group validator and the whole-rule pre-save guard.
"""

import pytest

from src.rules.models import Rule, RuleAction, RuleCondition, RuleGroup
from src.rules.validator import validate_rule, validate_rule_group


def _nested(depth, leaf):
    """Build a chain of AND groups ``depth`` levels below the root."""
    group = RuleGroup(logic="AND", conditions=(leaf,))
    for _ in range(depth):
        group = RuleGroup(logic="AND", groups=(group,))
    return group


# ============================================================================
# Group structure
# ============================================================================

class TestGroupStructure:
    """Test structural checks on groups."""

    def test_valid_single_level_group(self, make_condition, make_group):
        """Test a simple AND group of two independent conditions."""
        group = make_group(
            make_condition("RSI", "less_than", 30),
            make_condition("volume_ratio", "greater_than", 1.5, type="volume"),
        )
        result = validate_rule_group(group)
        assert result.valid
        assert result.errors == []
        assert result.warnings == []
        assert result.conflicts == []

    def test_empty_group(self, make_group):
        """Test a group without conditions or nested groups."""
        result = validate_rule_group(make_group())
        assert not result.valid
        assert result.errors == ["Group must contain at least one condition or nested group"]

    def test_empty_raw_group(self):
        """Test the empty group JSON shape."""
        result = validate_rule_group({"logic": "AND", "conditions": [], "groups": []})
        assert not result.valid
        assert "Group must contain at least one condition or nested group" in result.errors

    def test_missing_logic(self, make_condition):
        """Test a group without logic."""
        group = RuleGroup(conditions=(make_condition(),))
        result = validate_rule_group(group)
        assert result.errors == ["Group logic is required"]

    def test_condition_errors_collapsed_with_index(self, make_condition, make_group):
        """Test condition errors are joined per condition with a 1-based index."""
        group = make_group(
            make_condition("RSI", "less_than", 30),
            RuleCondition(field="RSI"),
        )
        result = validate_rule_group(group)
        assert result.errors == [
            "Condition 2: Condition type is required, Operator is required, Value is required"
        ]

    def test_condition_warnings_pass_through(self, make_condition, make_group):
        """Test condition warnings are kept without a prefix."""
        group = make_group(make_condition("RSI", "greater_than", 95))
        result = validate_rule_group(group)
        assert result.valid
        assert result.warnings == ["RSI > 95 is extremely rare and may never trigger"]

    def test_missing_value2_fine_outside_between(self, make_condition, make_group):
        """Test a missing value2 never causes errors for non-between operators."""
        group = make_group(
            make_condition("RSI", "greater_than", 70),
            make_condition("volume_ratio", "less_than", 2, type="volume"),
        )
        assert validate_rule_group(group).valid

    def test_value2_range_checked_for_any_operator(self, make_condition, make_group):
        """Test a stray value2 is still held to the field's bounds."""
        group = make_group(make_condition("RSI", "greater_than", 50, value2=150))
        result = validate_rule_group(group)
        assert result.errors == ["Condition 1: RSI value2 must be between 0 and 100"]

    @pytest.mark.parametrize("value,value2,valid", [
        (40, None, False),
        (40, 60, True),
        (60, 40, False),
        (50, 50, False),
    ])
    def test_between_errors_iff_unordered_or_missing(self, make_condition, make_group, value, value2, valid):
        """Test between is valid exactly when value2 is given and above value."""
        group = make_group(make_condition("RSI", "between", value, value2=value2))
        assert validate_rule_group(group).valid is valid


# ============================================================================
# Conflicts
# ============================================================================

class TestGroupConflicts:
    """Test conflict detection inside the tree validator."""

    def test_rsi_band_conflict(self, make_condition, make_group):
        """Test RSI > 70 AND RSI < 50 is flagged."""
        group = make_group(
            make_condition("RSI", "greater_than", 70),
            make_condition("RSI", "less_than", 50),
        )
        result = validate_rule_group(group)
        assert not result.valid
        assert result.errors == []
        assert result.conflicts == ["RSI cannot be both > 70 AND < 50 (impossible)"]

    def test_rsi_band_satisfiable(self, make_condition, make_group):
        """Test RSI > 20 AND RSI < 50 is fine."""
        group = make_group(
            make_condition("RSI", "greater_than", 20),
            make_condition("RSI", "less_than", 50),
        )
        result = validate_rule_group(group)
        assert result.valid
        assert result.conflicts == []

    def test_price_window_conflict(self, make_condition, make_group):
        """Test current_price > 100 AND current_price < 90."""
        group = make_group(
            make_condition("current_price", "greater_than", 100, type="price"),
            make_condition("current_price", "less_than", 90, type="price"),
        )
        result = validate_rule_group(group)
        assert not result.valid
        assert len(result.conflicts) == 1
        assert "100" in result.conflicts[0]
        assert "90" in result.conflicts[0]

    def test_or_group_skips_conflicts(self, make_condition, make_group):
        """Test mutually exclusive conditions are fine under OR."""
        group = make_group(
            make_condition("RSI", "greater_than", 70),
            make_condition("RSI", "less_than", 30),
            logic="OR",
        )
        result = validate_rule_group(group)
        assert result.valid
        assert result.conflicts == []

    def test_no_conflicts_across_subgroups(self, make_condition, make_group):
        """Test a parent condition is not compared with a child group's conditions."""
        child = make_group(make_condition("RSI", "less_than", 30))
        group = make_group(make_condition("RSI", "greater_than", 70), groups=[child])
        assert validate_rule_group(group).conflicts == []

    def test_conflict_and_errors_reported_together(self, make_condition, make_group):
        """Test the whole group is walked after the first problem."""
        group = make_group(
            make_condition("RSI", "greater_than", 70),
            make_condition("RSI", "less_than", 50),
            make_condition("volume_ratio", "greater_than", -2, type="volume"),
        )
        result = validate_rule_group(group)
        assert result.errors == ["Condition 3: Volume ratio cannot be negative"]
        assert len(result.conflicts) == 1


# ============================================================================
# Nesting
# ============================================================================

class TestNesting:
    """Test recursion into nested groups."""

    def test_nested_errors_prefixed(self, make_condition, make_group):
        """Test nested errors are merged with a group prefix."""
        child = make_group(make_condition("RSI", "less_than", 150))
        group = make_group(make_condition("MACD", "greater_than", 0), groups=[child])
        result = validate_rule_group(group)
        assert result.errors == ["Nested group 1: Condition 1: RSI value must be between 0 and 100"]

    def test_nested_warnings_and_conflicts_prefixed(self, make_condition, make_group):
        """Test each nested warning and conflict keeps its own prefix."""
        ok_child = make_group(make_condition("MACD", "greater_than", 0))
        bad_child = make_group(
            make_condition("RSI", "greater_than", 95),
            make_condition("RSI", "less_than", 50),
        )
        group = make_group(make_condition("volume", "greater_than", 1000, type="volume"),
                           groups=[ok_child, bad_child])
        result = validate_rule_group(group)
        assert result.warnings == ["Nested group 2: RSI > 95 is extremely rare and may never trigger"]
        assert result.conflicts == ["Nested group 2: RSI cannot be both > 95 AND < 50 (impossible)"]
        assert not result.valid

    def test_group_with_only_nested_groups(self, make_condition, make_group):
        """Test a group made only of nested groups is not empty."""
        child = make_group(make_condition())
        assert validate_rule_group(make_group(groups=[child])).valid

    def test_three_levels_allowed(self, make_condition):
        """Test depth 3 is within the default limit."""
        assert validate_rule_group(_nested(3, make_condition())).valid

    def test_four_levels_exceed_default(self, make_condition):
        """Test depth 4 fails regardless of leaf content."""
        result = validate_rule_group(_nested(4, make_condition()))
        assert not result.valid
        assert any("Maximum nesting depth of 3 exceeded" in error for error in result.errors)

    def test_depth_error_with_invalid_leaf(self):
        """Test the depth error is reported instead of the leaf's errors."""
        result = validate_rule_group(_nested(4, RuleCondition()))
        assert result.errors == [
            "Nested group 1: Nested group 1: Nested group 1: Nested group 1: "
            "Maximum nesting depth of 3 exceeded"
        ]

    def test_custom_max_nesting(self, make_condition):
        """Test a smaller nesting limit."""
        result = validate_rule_group(_nested(2, make_condition()), max_nesting=1)
        assert not result.valid
        assert "Maximum nesting depth of 1 exceeded" in result.errors[0]

    def test_start_depth_beyond_limit(self, make_condition, make_group):
        """Test the depth check happens before anything else."""
        result = validate_rule_group(make_group(), max_nesting=0, depth=1)
        assert result.errors == ["Maximum nesting depth of 0 exceeded"]


# ============================================================================
# Input handling
# ============================================================================

class TestInputHandling:
    """Test raw input coercion and determinism."""

    def test_raw_mapping(self, breakout_group_data):
        """Test JSON-like mappings are coerced first."""
        result = validate_rule_group(breakout_group_data)
        assert result.valid

    def test_non_mapping_input(self):
        """Test garbage input becomes an error rather than an exception."""
        result = validate_rule_group(["not", "a", "group"])
        assert result.errors == ["Rule group must be an object"]

    def test_bad_operator_in_mapping(self):
        """Test coercion failures are reported against the condition."""
        result = validate_rule_group({
            "logic": "AND",
            "conditions": [{"type": "indicator", "field": "RSI", "operator": "approx", "value": 3}],
        })
        assert not result.valid
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Condition 1: Invalid condition at operator")

    def test_unreadable_condition_keeps_siblings_checked(self):
        """Test one broken condition does not hide range errors or conflicts next to it."""
        result = validate_rule_group({
            "logic": "AND",
            "conditions": [
                {"type": "indicator", "field": "RSI", "operator": "approx", "value": 3},
                {"type": "indicator", "field": "RSI", "operator": "greater_than", "value": 500},
                {"type": "price", "field": "current_price", "operator": "greater_than", "value": 100},
                {"type": "price", "field": "current_price", "operator": "less_than", "value": 90},
            ],
        })
        assert len(result.errors) == 2
        assert result.errors[0].startswith("Condition 1: Invalid condition at operator")
        assert result.errors[1] == "Condition 2: RSI value must be between 0 and 100"
        assert result.conflicts == ["current_price cannot be both > 100 AND < 90 (impossible)"]

    def test_unreadable_nested_group(self, breakout_group_data):
        """Test broken nested groups are reported by position."""
        data = dict(breakout_group_data)
        data["groups"] = ["oops", {"logic": "XOR", "conditions": [
            {"type": "indicator", "field": "RSI", "operator": "less_than", "value": 130},
        ]}]
        result = validate_rule_group(data)
        assert result.errors[0] == "Nested group 1: Rule group must be an object"
        assert result.errors[1].startswith("Nested group 2: Invalid rule group at logic")
        assert result.errors[1].endswith("Condition 1: RSI value must be between 0 and 100")

    def test_non_list_conditions(self):
        """Test a conditions value that is not a list."""
        result = validate_rule_group({"logic": "OR", "conditions": "RSI < 30"})
        assert result.errors == [
            "Invalid rule group at conditions: Input should be a valid list",
            "Group must contain at least one condition or nested group",
        ]

    def test_idempotent(self, make_condition, make_group):
        """Test validating the same tree twice gives identical results."""
        child = make_group(
            make_condition("RSI", "greater_than", 95),
            make_condition("RSI", "less_than", 50),
        )
        group = make_group(RuleCondition(field="MACD"), groups=[child])
        first = validate_rule_group(group)
        second = validate_rule_group(group)
        assert first.model_dump_json() == second.model_dump_json()

    def test_tree_is_not_mutated(self, breakout_group_data):
        """Test validation leaves the tree untouched."""
        group = RuleGroup.model_validate(breakout_group_data)
        before = group.model_dump_json()
        validate_rule_group(group)
        assert group.model_dump_json() == before


# ============================================================================
# Whole rules
# ============================================================================

class TestValidateRule:
    """Test the pre-save guard for complete rules."""

    def test_valid_rule(self, make_condition, make_group):
        """Test a named rule with an action and a valid tree."""
        rule = Rule(
            name="Oversold",
            root_group=make_group(make_condition("RSI", "less_than", 30)),
            actions=[RuleAction(type="alert")],
        )
        assert validate_rule(rule).valid

    def test_rule_needs_name_and_action(self, make_condition, make_group):
        """Test missing name and actions are errors."""
        rule = Rule(name="  ", root_group=make_group(make_condition()))
        result = validate_rule(rule)
        assert result.errors == ["Rule name is required", "Rule must have at least one action"]

    def test_negative_order_values(self, make_condition, make_group):
        """Test buy/sell actions cannot use negative shares or prices."""
        rule = Rule(
            name="Bad order",
            root_group=make_group(make_condition()),
            actions=[RuleAction(type="buy", shares=-10, limit_price=-1.0)],
        )
        result = validate_rule(rule)
        assert result.errors == [
            "Action 1: shares cannot be negative",
            "Action 1: limit price cannot be negative",
        ]

    def test_tree_problems_merged(self, make_condition, make_group):
        """Test the root group's result is merged into the rule result."""
        rule = Rule(
            name="Impossible",
            root_group=make_group(
                make_condition("RSI", "greater_than", 70),
                make_condition("RSI", "less_than", 30),
            ),
            actions=[RuleAction(type="alert")],
        )
        result = validate_rule(rule)
        assert result.errors == []
        assert result.conflicts == ["RSI cannot be both > 70 AND < 30 (impossible)"]
        assert not result.valid
