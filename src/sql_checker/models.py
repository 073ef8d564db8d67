from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum, IntEnum
from typing import Any


class Severity(IntEnum):
    WARNING = 1
    ERROR = 2

    @classmethod
    def parse(cls, value: object) -> "Severity":
        if isinstance(value, Severity):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)

        text = str(value).strip().upper()
        if text == "WARN":
            text = "WARNING"
        try:
            return cls[text]
        except KeyError:
            raise ValueError(f"Unknown severity: {value!r}") from None


class PatternType(str, Enum):
    CREATION = "creation"
    QUERY = "query"


@dataclass(frozen=True)
class Rule:
    rule_id: str
    title: str
    message: str
    severity: Severity
    pattern_type: PatternType
    pattern: str
    match_polarity: bool = True
    creation_only: bool = False
    requires_table_name: bool = False


@dataclass(frozen=True)
class Diagnostic:
    rule_id: str
    title: str
    message: str
    severity: Severity
    pattern_type: PatternType
    statement: str

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["severity"] = self.severity.name.lower()
        payload["pattern_type"] = self.pattern_type.value
        return payload


@dataclass(frozen=True)
class CheckConfig:
    min_severity: Severity = Severity.WARNING
    enabled: frozenset[str] = frozenset()
    disabled: frozenset[str] = frozenset()
    verbose: bool = False
    delimiter: str = ";"

    def is_enabled(self, rule_id: str, pattern_type: PatternType) -> bool:
        keys = {rule_id, pattern_type.value}
        if keys & self.disabled:
            return False
        if not self.enabled:
            return True
        return bool(keys & self.enabled)

    def should_report(self, rule_id: str, severity: Severity, pattern_type: PatternType) -> bool:
        return severity >= self.min_severity and self.is_enabled(rule_id, pattern_type)


@dataclass(frozen=True)
class CheckSummary:
    statements_checked: int
    diagnostics_count: int
    error_count: int
    warning_count: int
    by_rule: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
