import re

import pytest

from sql_checker.matcher import check_pattern, evaluate_rule
from sql_checker.models import CheckConfig, PatternType, Rule, Severity
from sql_checker.reporting import CollectingSink
from sql_checker.rules import BUILTIN_RULES


def _check(statement, pattern, *, polarity, config=None, severity=Severity.ERROR, rule_id="demo-rule"):
    sink = CollectingSink()
    result = check_pattern(
        config or CheckConfig(),
        statement,
        re.compile(pattern, re.IGNORECASE),
        severity,
        PatternType.QUERY,
        "Demo",
        "demo message",
        polarity,
        sink=sink,
        rule_id=rule_id,
    )
    return result, sink.diagnostics


def test_match_polarity_reports_on_hit():
    result, emitted = _check("select name from t", r"name", polarity=True)
    assert result is not None
    assert emitted == [result]
    assert result.statement == "select name from t"
    assert result.rule_id == "demo-rule"

    result, emitted = _check("select id from t", r"name", polarity=True)
    assert result is None
    assert emitted == []


def test_absence_polarity_reports_on_miss():
    result, emitted = _check("create table t (a int)", r"primary key", polarity=False)
    assert result is not None
    assert len(emitted) == 1

    result, emitted = _check("create table t (a int primary key)", r"primary key", polarity=False)
    assert result is None
    assert emitted == []


def test_search_is_unanchored():
    result, _ = _check("with x as (select 1) select name from x", r"select name", polarity=True)
    assert result is not None


def test_min_severity_filters_warnings():
    config = CheckConfig(min_severity=Severity.ERROR)
    result, emitted = _check("abc", r"abc", polarity=True, config=config, severity=Severity.WARNING)
    assert result is None
    assert emitted == []

    result, emitted = _check("abc", r"abc", polarity=True, config=config, severity=Severity.ERROR)
    assert result is not None


def test_disabled_and_enabled_rules():
    result, _ = _check("abc", r"abc", polarity=True, config=CheckConfig(disabled=frozenset({"demo-rule"})))
    assert result is None

    result, _ = _check("abc", r"abc", polarity=True, config=CheckConfig(enabled=frozenset({"creation"})))
    assert result is None

    result, _ = _check("abc", r"abc", polarity=True, config=CheckConfig(enabled=frozenset({"query"})))
    assert result is not None


def test_rule_id_is_carried_into_the_diagnostic():
    sink = CollectingSink()
    result = check_pattern(
        CheckConfig(),
        "select * from t",
        re.compile(r"select\s+\*"),
        Severity.ERROR,
        PatternType.QUERY,
        "SELECT *",
        "",
        True,
        sink=sink,
        rule_id="select-star",
    )
    assert result.rule_id == "select-star"
    assert result.title == "SELECT *"


def test_rule_id_is_required():
    with pytest.raises(TypeError):
        check_pattern(
            CheckConfig(),
            "x",
            re.compile("x"),
            Severity.ERROR,
            PatternType.QUERY,
            "X",
            "",
            True,
            sink=CollectingSink(),
        )


def test_same_input_gives_same_diagnostic():
    first, _ = _check("select name from t", r"name", polarity=True)
    second, _ = _check("select name from t", r"name", polarity=True)
    assert first == second


def test_evaluate_rule_respects_creation_gate():
    rule = Rule(
        rule_id="needs-pk",
        title="Needs PK",
        message="",
        severity=Severity.WARNING,
        pattern_type=PatternType.CREATION,
        pattern=r"primary key",
        match_polarity=False,
        creation_only=True,
    )
    sink = CollectingSink()
    assert evaluate_rule(CheckConfig(), "select 1", rule, sink) is None
    assert evaluate_rule(CheckConfig(), "create table t (a int)", rule, sink) is not None
    assert len(sink.diagnostics) == 1


def test_builtin_rules_handle_empty_and_blank_statements():
    sink = CollectingSink()
    for statement in ("", "   ", "\n\t"):
        for rule in BUILTIN_RULES:
            evaluate_rule(CheckConfig(), statement, rule, sink)
    assert sink.diagnostics == []
