"""Interface for diagnostic reporting."""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from shader_formatter.domain.entities import FormatOutcome, Outcome
    from shader_formatter.domain.tokens import Token


class DiagnosticReporter(Protocol):
    """Protocol for reporting formatting results to the user."""

    def report_file(self, path: str, outcome: "FormatOutcome") -> None:
        """Report the diagnostics of one file."""
        ...

    def report_diff(self, path: str, original: str, formatted: str) -> None:
        """Show what formatting would change in one file."""
        ...

    def report_tokens(self, path: str, tokens: list["Token"]) -> None:
        """Print the token stream of one file."""
        ...

    def report_summary(self, outcomes: dict[str, "Outcome"]) -> None:
        """Print the per-outcome totals of a run."""
        ...
