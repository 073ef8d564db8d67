from __future__ import annotations

import json
import os
from dataclasses import replace
from pathlib import Path

from sql_checker.models import CheckConfig, Severity


class ConfigError(ValueError):
    pass


def load_config(path: str | Path) -> CheckConfig:
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as handle:
        try:
            raw = json.load(handle)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Config file is not valid JSON: {config_path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError("Config must be a JSON object")

    delimiter = str(raw.get("delimiter", ";"))
    if not delimiter:
        raise ConfigError("'delimiter' must not be empty")

    return CheckConfig(
        min_severity=_parse_severity(raw.get("min_severity", "warning")),
        enabled=frozenset(_ensure_string_list(raw.get("enabled"), "enabled")),
        disabled=frozenset(_ensure_string_list(raw.get("disabled"), "disabled")),
        verbose=_parse_bool(raw.get("verbose", False)),
        delimiter=delimiter,
    )


def apply_env_overrides(config: CheckConfig) -> CheckConfig:
    min_severity = os.getenv("SQL_CHECKER_MIN_SEVERITY")
    if min_severity:
        config = replace(config, min_severity=_parse_severity(min_severity))
    if os.getenv("SQL_CHECKER_VERBOSE") is not None:
        config = replace(config, verbose=_env_true("SQL_CHECKER_VERBOSE"))
    return config


def _parse_severity(value: object) -> Severity:
    try:
        return Severity.parse(value)
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc


def _ensure_string_list(value: object, key: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"'{key}' must be a list of strings")
    return [str(item).strip().lower() for item in value if str(item).strip()]


def _parse_bool(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _env_true(name: str) -> bool:
    return _parse_bool(os.getenv(name) or "")
