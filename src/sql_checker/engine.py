from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Iterable

from sql_checker.models import CheckConfig, CheckSummary, Diagnostic
from sql_checker.reporting import DiagnosticSink, summarize
from sql_checker.rules import RuleRegistry, default_registry
from sql_checker.splitter import split_statements

logger = logging.getLogger(__name__)


def check_statement(
    statement: str,
    config: CheckConfig,
    sink: DiagnosticSink,
    registry: RuleRegistry | None = None,
) -> list[Diagnostic]:
    registry = registry if registry is not None else default_registry()
    return registry.evaluate(config, statement, sink)


def check_statements(
    statements: Iterable[str],
    config: CheckConfig,
    sink: DiagnosticSink,
    registry: RuleRegistry | None = None,
    *,
    workers: int = 1,
) -> CheckSummary:
    registry = registry if registry is not None else default_registry()
    items = list(statements)
    diagnostics: list[Diagnostic] = []

    if workers <= 1:
        for index, statement in enumerate(items):
            diagnostics.extend(_check_one(index, statement, config, sink, registry))
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(_check_one, index, statement, config, sink, registry)
                for index, statement in enumerate(items)
            ]
            for future in as_completed(futures):
                diagnostics.extend(future.result())

    summary = summarize(diagnostics, statements_checked=len(items))
    logger.info(
        "Checked %d statements: %d errors, %d warnings",
        summary.statements_checked,
        summary.error_count,
        summary.warning_count,
    )
    return summary


def check_file(
    path: str | Path,
    config: CheckConfig,
    sink: DiagnosticSink,
    registry: RuleRegistry | None = None,
    *,
    workers: int = 1,
) -> CheckSummary:
    text = Path(path).read_text(encoding="utf-8")
    statements = split_statements(text, config.delimiter)
    logger.info("Read %d statements from %s", len(statements), path)
    return check_statements(statements, config, sink, registry, workers=workers)


def _check_one(
    index: int,
    statement: str,
    config: CheckConfig,
    sink: DiagnosticSink,
    registry: RuleRegistry,
) -> list[Diagnostic]:
    try:
        return registry.evaluate(config, statement, sink)
    except Exception:
        logger.exception("Failed to check statement #%d", index + 1)
        return []
