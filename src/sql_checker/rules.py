"""Built-in SQL anti-pattern rules.

Each rule is a data record evaluated by :func:`sql_checker.matcher.evaluate_rule`.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Iterator

from sql_checker.matcher import TABLE_NAME_PLACEHOLDER, compile_pattern, evaluate_rule
from sql_checker.models import CheckConfig, Diagnostic, PatternType, Rule, Severity
from sql_checker.reporting import DiagnosticSink

logger = logging.getLogger(__name__)


SELECT_STAR = Rule(
    rule_id="select-star",
    title="SELECT *",
    severity=Severity.ERROR,
    pattern_type=PatternType.QUERY,
    pattern=r"(select\s+\*)",
    match_polarity=True,
    message=(
        "Inefficiency in moving data to the consumer:\n"
        "SELECT * usually retrieves more columns than the application needs. More data\n"
        "moves from the database server to the client, slowing access, adding load and\n"
        "network time. Columns added to the table later are dragged along as well.\n"
        "\n"
        "Indexing issues:\n"
        "A covering index over the columns you actually use cannot serve a SELECT *, and\n"
        "a column added later makes the optimizer skip an index that used to cover the\n"
        "query, so performance drops for no apparent reason.\n"
        "\n"
        "Binding problems:\n"
        "Joining two tables that both have a column called ID returns two columns with the\n"
        "same name and the consumer cannot tell them apart. Views built on SELECT * may\n"
        "return nonsense after the underlying tables change.\n"
    ),
)

MULTI_VALUED_ATTRIBUTE = Rule(
    rule_id="multi-valued-attribute",
    title="Multi-Valued Attribute",
    severity=Severity.ERROR,
    pattern_type=PatternType.CREATION,
    pattern=r"(id\s+varchar)|(id\s+text)|(id\s+regexp)",
    match_polarity=True,
    message=(
        "Store each value in its own column and row:\n"
        "Keeping a list of IDs in a VARCHAR/TEXT column hurts performance and data\n"
        "integrity. Queries need pattern matching, joining a comma-separated list to the\n"
        "matching rows is awkward and costly, and the IDs are hard to validate. Move the\n"
        "values to an intersection table with one row per value; it models the\n"
        "many-to-many relationship between the two referenced tables.\n"
    ),
)

RECURSIVE_DEPENDENCY = Rule(
    rule_id="recursive-dependency",
    title="Recursive Dependency",
    severity=Severity.ERROR,
    pattern_type=PatternType.CREATION,
    pattern=r"(references\s+" + TABLE_NAME_PLACEHOLDER + r")(?!\w)",
    match_polarity=True,
    requires_table_name=True,
    message=(
        "Avoid recursive relationships:\n"
        "A foreign key from a table to itself models a tree, but every level of the tree\n"
        "costs another join and fetching all ancestors or descendants needs recursive\n"
        "queries. A closure table stores every path through the tree, not only direct\n"
        "parent-child links. Compare closure table, path enumeration and nested sets and\n"
        "pick the design that fits the application.\n"
    ),
)

PRIMARY_KEY_EXISTS = Rule(
    rule_id="primary-key-exists",
    title="Primary Key Exists",
    severity=Severity.WARNING,
    pattern_type=PatternType.CREATION,
    pattern=r"(primary key)",
    match_polarity=False,
    creation_only=True,
    message=(
        "Consider adding a primary key:\n"
        "A primary key prevents duplicate rows, lets queries reference individual rows\n"
        "and is the target of foreign key references. Without one, checking for duplicate\n"
        "rows becomes your job. Define a primary key for every table and use compound\n"
        "keys where they fit.\n"
    ),
)

GENERIC_PRIMARY_KEY = Rule(
    rule_id="generic-primary-key",
    title="Generic Primary Key",
    severity=Severity.ERROR,
    pattern_type=PatternType.CREATION,
    pattern=r"(\s+[\(]?id\s+)|(,id\s+)|(\s+id\s+serial)",
    match_polarity=True,
    creation_only=True,
    message=(
        "Skip using a generic primary key (id):\n"
        "An id column on every table can end up as a redundant key, or allow duplicate\n"
        "rows when it is part of a compound key. The name carries no meaning, which\n"
        "matters most when joining two tables that share the same key column name.\n"
    ),
)

FOREIGN_KEY_EXISTS = Rule(
    rule_id="foreign-key-exists",
    title="Foreign Key Exists",
    severity=Severity.WARNING,
    pattern_type=PatternType.CREATION,
    pattern=r"(foreign key)",
    match_polarity=False,
    creation_only=True,
    message=(
        "Consider adding a foreign key:\n"
        "Leaving out foreign key constraints looks simpler, but referential integrity then\n"
        "has to be enforced by application code. Constraints also give cascading updates\n"
        "and deletes: ON UPDATE and ON DELETE let the database maintain the child rows\n"
        "when a parent row changes. Make the schema mistake-proof with constraints.\n"
    ),
)

BUILTIN_RULES = (
    SELECT_STAR,
    MULTI_VALUED_ATTRIBUTE,
    RECURSIVE_DEPENDENCY,
    PRIMARY_KEY_EXISTS,
    GENERIC_PRIMARY_KEY,
    FOREIGN_KEY_EXISTS,
)


class RuleRegistry:
    """Compiled rule set. Rules whose pattern fails to compile are left out."""

    def __init__(self, rules: Iterable[Rule] = ()):
        self._rules: dict[str, Rule] = {}
        self._compiled: dict[str, re.Pattern[str] | None] = {}
        self.failed: dict[str, str] = {}
        for rule in rules:
            self.register(rule)

    def register(self, rule: Rule) -> bool:
        if rule.rule_id in self._rules or rule.rule_id in self.failed:
            raise ValueError(f"Duplicate rule id: {rule.rule_id}")

        compiled = None
        try:
            if rule.requires_table_name:
                # validated against a stand-in name; the real one is spliced in per statement
                compile_pattern(rule.pattern.replace(TABLE_NAME_PLACEHOLDER, "t"))
            else:
                compiled = compile_pattern(rule.pattern)
        except re.error as exc:
            logger.error("Rule %s has an invalid pattern %r: %s", rule.rule_id, rule.pattern, exc)
            self.failed[rule.rule_id] = str(exc)
            return False

        self._rules[rule.rule_id] = rule
        self._compiled[rule.rule_id] = compiled
        return True

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def get(self, rule_id: str) -> Rule:
        try:
            return self._rules[rule_id]
        except KeyError:
            raise ValueError(f"Unknown rule: {rule_id}") from None

    def evaluate(
        self,
        config: CheckConfig,
        statement: str,
        sink: DiagnosticSink,
    ) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        for rule_id, rule in self._rules.items():
            try:
                diagnostic = evaluate_rule(config, statement, rule, sink, self._compiled[rule_id])
            except Exception:
                logger.exception("Rule %s failed on statement: %.80s", rule_id, statement)
                continue
            if diagnostic is not None:
                diagnostics.append(diagnostic)
        return diagnostics

    def list_rules(self) -> list[dict]:
        return [
            {
                "rule_id": rule.rule_id,
                "title": rule.title,
                "severity": rule.severity.name.lower(),
                "classification": rule.pattern_type.value,
                "violation_on": "match" if rule.match_polarity else "absence",
            }
            for rule in self._rules.values()
        ]


def default_registry() -> RuleRegistry:
    return RuleRegistry(BUILTIN_RULES)


def check_select_star(config: CheckConfig, statement: str, sink: DiagnosticSink) -> Diagnostic | None:
    return evaluate_rule(config, statement, SELECT_STAR, sink)


def check_multi_valued_attribute(config: CheckConfig, statement: str, sink: DiagnosticSink) -> Diagnostic | None:
    return evaluate_rule(config, statement, MULTI_VALUED_ATTRIBUTE, sink)


def check_recursive_dependency(config: CheckConfig, statement: str, sink: DiagnosticSink) -> Diagnostic | None:
    return evaluate_rule(config, statement, RECURSIVE_DEPENDENCY, sink)


def check_primary_key_exists(config: CheckConfig, statement: str, sink: DiagnosticSink) -> Diagnostic | None:
    return evaluate_rule(config, statement, PRIMARY_KEY_EXISTS, sink)


def check_generic_primary_key(config: CheckConfig, statement: str, sink: DiagnosticSink) -> Diagnostic | None:
    return evaluate_rule(config, statement, GENERIC_PRIMARY_KEY, sink)


def check_foreign_key_exists(config: CheckConfig, statement: str, sink: DiagnosticSink) -> Diagnostic | None:
    return evaluate_rule(config, statement, FOREIGN_KEY_EXISTS, sink)
