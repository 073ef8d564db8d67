from __future__ import annotations

import csv
import json
import sys
import threading
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol, TextIO

from sql_checker.models import CheckSummary, Diagnostic

EVIDENCE_LIMIT = 500


class DiagnosticSink(Protocol):
    def emit(self, diagnostic: Diagnostic) -> None:
        ...


class CollectingSink:
    def __init__(self) -> None:
        self.diagnostics: list[Diagnostic] = []
        self._lock = threading.Lock()

    def emit(self, diagnostic: Diagnostic) -> None:
        with self._lock:
            self.diagnostics.append(diagnostic)


class StreamSink:
    """Prints diagnostics as text. Safe to share between threads."""

    def __init__(self, stream: TextIO | None = None, *, verbose: bool = False):
        self.stream = stream if stream is not None else sys.stdout
        self.verbose = verbose
        self.emitted = 0
        self._lock = threading.Lock()

    def emit(self, diagnostic: Diagnostic) -> None:
        text = format_diagnostic(diagnostic, verbose=self.verbose)
        with self._lock:
            self.stream.write(text)
            self.stream.flush()
            self.emitted += 1


class TeeSink:
    def __init__(self, *sinks: DiagnosticSink):
        self.sinks = sinks

    def emit(self, diagnostic: Diagnostic) -> None:
        for sink in self.sinks:
            sink.emit(diagnostic)


def format_diagnostic(diagnostic: Diagnostic, *, verbose: bool = False) -> str:
    lines = [
        "-" * 64,
        f"[{diagnostic.severity.name}] ({diagnostic.pattern_type.value}) {diagnostic.title}",
        _evidence(diagnostic.statement),
    ]
    if verbose:
        lines.append("")
        lines.append(diagnostic.message.rstrip("\n"))
    return "\n".join(lines) + "\n"


def summarize(diagnostics: list[Diagnostic], statements_checked: int) -> CheckSummary:
    by_rule = Counter(item.rule_id for item in diagnostics)
    by_severity = Counter(item.severity.name for item in diagnostics)
    return CheckSummary(
        statements_checked=statements_checked,
        diagnostics_count=len(diagnostics),
        error_count=by_severity.get("ERROR", 0),
        warning_count=by_severity.get("WARNING", 0),
        by_rule=dict(sorted(by_rule.items())),
    )


def generate_reports(
    diagnostics: list[Diagnostic],
    summary: CheckSummary,
    output_dir: str | Path,
) -> dict:
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    by_rule_counts: Counter = Counter((item.rule_id, item.title, item.severity, item.pattern_type) for item in diagnostics)
    by_rule = [
        {
            "rule_id": rule_id,
            "title": title,
            "severity": severity.name.lower(),
            "classification": pattern_type.value,
            "diagnostic_count": count,
        }
        for (rule_id, title, severity, pattern_type), count in sorted(
            by_rule_counts.items(),
            key=lambda item: (-item[1], item[0][0]),
        )
    ]

    rows = [
        {
            "rule_id": item.rule_id,
            "title": item.title,
            "severity": item.severity.name.lower(),
            "classification": item.pattern_type.value,
            "statement": _evidence(item.statement),
        }
        for item in sorted(diagnostics, key=lambda item: (-item.severity, item.rule_id))
    ]

    payload = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "summary": summary.to_dict(),
        "files": {},
    }

    summary_json = out_dir / "check_summary.json"
    by_rule_csv = out_dir / "diagnostics_by_rule.csv"
    diagnostics_csv = out_dir / "diagnostics.csv"

    _write_csv(by_rule_csv, by_rule)
    _write_csv(diagnostics_csv, rows)

    payload["files"] = {
        "check_summary": str(summary_json.resolve()),
        "diagnostics_by_rule": str(by_rule_csv.resolve()),
        "diagnostics": str(diagnostics_csv.resolve()),
    }
    _write_json(summary_json, payload)
    return payload


def _evidence(statement: str) -> str:
    return " ".join(statement.split())[:EVIDENCE_LIMIT]


def _write_json(path: Path, payload: dict) -> None:
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, ensure_ascii=True)


def _write_csv(path: Path, rows: list[dict]) -> None:
    with path.open("w", encoding="utf-8", newline="") as handle:
        if not rows:
            handle.write("")
            return

        fieldnames: list[str] = []
        seen = set()
        for row in rows:
            for key in row:
                if key not in seen:
                    seen.add(key)
                    fieldnames.append(key)

        writer = csv.DictWriter(handle, fieldnames=fieldnames)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
