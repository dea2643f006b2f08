#!/usr/bin/env python3
"""
Rule Check Tool

Validates a rule (or a bare rule group) stored as JSON and prints the
errors, warnings and conflicts found, plus optional improvement hints.

Usage:
    python tools/check_rule.py my_rule.json --suggest
    python tools/check_rule.py group.json --max-nesting 2
"""

import os
import sys
import argparse
import json
import logging

from pydantic import ValidationError

# Add project root to path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from src.config.settings import get_settings
from src.rules.advisor import suggest_improvements
from src.rules.models import Rule, ValidationResult
from src.rules.serialization import format_validation_errors, parse_rule_group
from src.rules.validator import validate_rule, validate_rule_group
from src.utils.logger import setup_logging

logger = logging.getLogger("check_rule")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Validate a trading rule JSON file")
    parser.add_argument("path", type=str, help="Rule or rule group JSON file")
    parser.add_argument("--max-nesting", type=int, default=None, help="Maximum group nesting depth")
    parser.add_argument("--suggest", action="store_true", help="Print improvement suggestions")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def check_document(data, max_nesting: int):
    """
    Validate a loaded JSON document.

    Documents with a ``root_group`` key are treated as full rules, anything
    else as a bare rule group.

    Returns:
        Tuple of (ValidationResult, parsed RuleGroup or None)
    """
    if isinstance(data, dict) and "root_group" in data:
        try:
            rule = Rule.model_validate(data)
        except ValidationError as e:
            return ValidationResult(errors=format_validation_errors(e, "rule")), None
        return validate_rule(rule, max_nesting), rule.root_group

    group, _ = parse_rule_group(data)
    return validate_rule_group(data, max_nesting), group


def _print_section(title, items):
    if not items:
        return
    print(f"{title}:")
    for item in items:
        print(f"  - {item}")


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(level=logging.DEBUG if args.verbose else logging.WARNING)

    max_nesting = args.max_nesting
    if max_nesting is None:
        max_nesting = get_settings().rules.max_nesting

    try:
        with open(args.path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.error(f"File not found: {args.path}")
        return 2
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in {args.path}: {e}")
        return 2

    result, group = check_document(data, max_nesting)

    print(f"{args.path}: {'VALID' if result.valid else 'INVALID'}")
    _print_section("Errors", result.errors)
    _print_section("Conflicts", result.conflicts)
    _print_section("Warnings", result.warnings)

    if args.suggest and group is not None:
        _print_section("Suggestions", suggest_improvements(group))

    return 0 if result.valid else 1


if __name__ == "__main__":
    sys.exit(main())
