from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

from sql_checker.config import ConfigError, apply_env_overrides, load_config
from sql_checker.engine import check_statements
from sql_checker.models import CheckConfig, Severity
from sql_checker.reporting import CollectingSink, StreamSink, TeeSink, generate_reports, summarize
from sql_checker.rules import default_registry
from sql_checker.splitter import split_statements


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sql-checker",
        description="Regex-based checker for common SQL schema and query anti-patterns",
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level for stderr output")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--log-level", default=argparse.SUPPRESS, help="Logging level for stderr output")

    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser("check", parents=[common], help="Check SQL files (or stdin) for anti-patterns")
    check_parser.add_argument("files", nargs="*", help="SQL files to check; stdin when omitted")
    check_parser.add_argument("--config", default=None, help="JSON config file")
    check_parser.add_argument(
        "--min-severity",
        choices=[item.name.lower() for item in Severity],
        default=None,
        help="Lowest severity to report",
    )
    check_parser.add_argument(
        "--rule",
        action="append",
        default=[],
        help="Only run this rule id or classification (repeatable)",
    )
    check_parser.add_argument(
        "--disable",
        action="append",
        default=[],
        help="Skip this rule id or classification (repeatable)",
    )
    check_parser.add_argument("--verbose", action="store_true", help="Print the explanation for each finding")
    check_parser.add_argument("--delimiter", default=None, help="Statement delimiter (default ';')")
    check_parser.add_argument("--workers", type=int, default=1)
    check_parser.add_argument("--report-dir", default=None, help="Also write JSON/CSV reports here")
    check_parser.add_argument("--json", action="store_true", help="Print results as JSON")

    rules_parser = subparsers.add_parser("rules", parents=[common], help="List available rules")
    rules_parser.add_argument("--json", action="store_true")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    registry = default_registry()

    if args.command == "rules":
        rows = registry.list_rules()
        if args.json:
            print(json.dumps(rows, indent=2, ensure_ascii=True))
        else:
            for row in rows:
                print(
                    f"{row['rule_id']:<24} {row['severity']:<8} {row['classification']:<9} "
                    f"{row['violation_on']:<8} {row['title']}"
                )
        return 0

    if args.command == "check":
        try:
            config = _resolve_config(args)
        except ConfigError as exc:
            parser.error(str(exc))
            return 2

        try:
            statements = _read_statements(args.files, config.delimiter)
        except (OSError, UnicodeDecodeError) as exc:
            parser.error(f"Cannot read input: {exc}")
            return 2

        collector = CollectingSink()
        sink = collector if args.json else TeeSink(StreamSink(sys.stdout, verbose=config.verbose), collector)
        check_statements(statements, config, sink, registry, workers=max(1, int(args.workers)))
        summary = summarize(collector.diagnostics, statements_checked=len(statements))

        report_payload = None
        if args.report_dir:
            report_payload = generate_reports(collector.diagnostics, summary, args.report_dir)

        if args.json:
            payload = {
                "summary": summary.to_dict(),
                "diagnostics": [item.to_dict() for item in collector.diagnostics],
            }
            if report_payload is not None:
                payload["files"] = report_payload["files"]
            print(json.dumps(payload, indent=2, ensure_ascii=True))
        elif summary.diagnostics_count == 0:
            print(f"No issues found in {summary.statements_checked} statements.")
        else:
            print("=" * 64)
            print(
                f"Summary: {summary.statements_checked} statements, "
                f"{summary.error_count} errors, {summary.warning_count} warnings"
            )

        return 1 if summary.error_count else 0

    parser.error(f"Unsupported command: {args.command}")
    return 2


def _resolve_config(args: argparse.Namespace) -> CheckConfig:
    config = load_config(args.config) if args.config else CheckConfig()
    config = apply_env_overrides(config)

    if args.min_severity:
        config = replace(config, min_severity=Severity.parse(args.min_severity))
    if args.rule:
        config = replace(config, enabled=frozenset(item.strip().lower() for item in args.rule))
    if args.disable:
        config = replace(config, disabled=config.disabled | {item.strip().lower() for item in args.disable})
    if args.verbose:
        config = replace(config, verbose=True)
    if args.delimiter is not None:
        if not args.delimiter:
            raise ConfigError("--delimiter must not be empty")
        config = replace(config, delimiter=args.delimiter)
    return config


def _read_statements(files: list[str], delimiter: str) -> list[str]:
    if not files:
        return split_statements(sys.stdin.read(), delimiter)

    statements: list[str] = []
    for name in files:
        text = Path(name).read_text(encoding="utf-8")
        statements.extend(split_statements(text, delimiter))
    return statements


if __name__ == "__main__":
    raise SystemExit(main())
