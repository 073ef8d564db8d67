from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import TYPE_CHECKING

from sql_checker.heuristics import get_table_name, is_create_statement
from sql_checker.models import CheckConfig, Diagnostic, PatternType, Rule, Severity

if TYPE_CHECKING:
    from sql_checker.reporting import DiagnosticSink

logger = logging.getLogger(__name__)

TABLE_NAME_PLACEHOLDER = "{table_name}"


def check_pattern(
    config: CheckConfig,
    statement: str,
    pattern: re.Pattern[str],
    severity: Severity,
    pattern_type: PatternType,
    title: str,
    message: str,
    match_polarity: bool,
    *,
    sink: DiagnosticSink,
    rule_id: str,
) -> Diagnostic | None:
    """Search ``statement`` for ``pattern`` and emit a diagnostic on violation.

    With ``match_polarity`` a hit is the violation, otherwise a miss is.
    The search is unanchored. Returns the emitted diagnostic, or ``None``.
    """
    found = pattern.search(statement) is not None
    if found != match_polarity:
        return None

    if not config.should_report(rule_id, severity, pattern_type):
        return None

    diagnostic = Diagnostic(
        rule_id=rule_id,
        title=title,
        message=message,
        severity=severity,
        pattern_type=pattern_type,
        statement=statement,
    )
    logger.debug("Rule %s matched statement: %.80s", rule_id, statement)
    sink.emit(diagnostic)
    return diagnostic


def evaluate_rule(
    config: CheckConfig,
    statement: str,
    rule: Rule,
    sink: DiagnosticSink,
    pattern: re.Pattern[str] | None = None,
) -> Diagnostic | None:
    if rule.creation_only and not is_create_statement(statement):
        return None

    if rule.requires_table_name:
        table_name = get_table_name(statement)
        if not table_name:
            return None
        pattern = compile_pattern(rule.pattern.replace(TABLE_NAME_PLACEHOLDER, re.escape(table_name)))
    elif pattern is None:
        pattern = compile_pattern(rule.pattern)

    return check_pattern(
        config,
        statement,
        pattern,
        rule.severity,
        rule.pattern_type,
        rule.title,
        rule.message,
        rule.match_polarity,
        sink=sink,
        rule_id=rule.rule_id,
    )


@lru_cache(maxsize=512)
def compile_pattern(source: str) -> re.Pattern[str]:
    return re.compile(source, re.IGNORECASE)
