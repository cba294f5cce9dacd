from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Severity(Enum):
    """How a diagnostic must be handled."""
    WARNING = "warning"  # auto-corrected or informational
    ERROR = "error"  # requires a manual change in the source


class Outcome(Enum):
    """Classification of a single formatting run."""
    CLEAN = "clean"
    FORMATTED = "formatted"
    MANUAL_FIX_REQUIRED = "manual_fix_required"


@dataclass(frozen=True)
class SourceSpan:
    """1-based line/column range in the original source."""
    line: int
    column: int
    end_line: int
    end_column: int

    @classmethod
    def at(cls, line: int, column: int) -> "SourceSpan":
        """Create an empty span at a single position."""
        return cls(line=line, column=column, end_line=line, end_column=column)

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class Diagnostic:
    """A single finding produced by the formatter, the checker or the suppression tracker."""
    severity: Severity
    rule: str
    span: SourceSpan
    message: str

    @classmethod
    def warning(cls, rule: str, span: SourceSpan, message: str) -> "Diagnostic":
        return cls(severity=Severity.WARNING, rule=rule, span=span, message=message)

    @classmethod
    def error(cls, rule: str, span: SourceSpan, message: str) -> "Diagnostic":
        return cls(severity=Severity.ERROR, rule=rule, span=span, message=message)

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def sort_key(self) -> tuple[int, int, str, str]:
        return (self.span.line, self.span.column, self.rule, self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for reporters."""
        return {
            "severity": self.severity.value,
            "rule": self.rule,
            "line": self.span.line,
            "column": self.span.column,
            "message": self.message,
        }


@dataclass(frozen=True)
class FormatOutcome:
    """
    Result of running the whole core on one source text.

    `text` is always the fully formatted text, even when the outcome is
    MANUAL_FIX_REQUIRED; callers decide whether to write it back.
    """
    text: str
    changed: bool
    outcome: Outcome
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if not d.is_error]

    def should_write(self) -> bool:
        """True when the rewritten text may be written back to the file."""
        return self.outcome is Outcome.FORMATTED

    def to_dict(self) -> dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "changed": self.changed,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }
