from __future__ import annotations

from sql_checker.engine import check_file, check_statement, check_statements
from sql_checker.heuristics import get_table_name, is_create_statement
from sql_checker.matcher import check_pattern, evaluate_rule
from sql_checker.models import CheckConfig, CheckSummary, Diagnostic, PatternType, Rule, Severity
from sql_checker.rules import BUILTIN_RULES, RuleRegistry, default_registry

__all__ = [
    "BUILTIN_RULES",
    "CheckConfig",
    "CheckSummary",
    "Diagnostic",
    "PatternType",
    "Rule",
    "RuleRegistry",
    "Severity",
    "check_file",
    "check_pattern",
    "check_statement",
    "check_statements",
    "default_registry",
    "evaluate_rule",
    "get_table_name",
    "is_create_statement",
]
