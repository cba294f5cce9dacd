"""Terminal reporter implementation using rich tables."""

import difflib
from collections import Counter
from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from shader_formatter.domain.entities import FormatOutcome, Outcome, Severity
from shader_formatter.domain.tokens import Token

_OUTCOME_STYLES: dict[Outcome, str] = {
    Outcome.CLEAN: "green",
    Outcome.FORMATTED: "cyan",
    Outcome.MANUAL_FIX_REQUIRED: "red",
}


class TerminalDiagnosticReporter:
    """Renders diagnostics, diffs and token listings on a rich console."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def report_file(self, path: str, outcome: FormatOutcome) -> None:
        """Print one table per file; clean files get a single line."""
        style = _OUTCOME_STYLES[outcome.outcome]
        if not outcome.diagnostics:
            self.console.print(f"[bold]{path}[/bold]: [{style}]{outcome.outcome.value}[/{style}]")
            return

        table = Table(
            title=f"{path} ({outcome.outcome.value})",
            caption=f"{len(outcome.errors)} error(s), {len(outcome.warnings)} warning(s)",
            show_lines=False,
            pad_edge=False,
        )
        table.add_column("Line", justify="right")
        table.add_column("Col", justify="right")
        table.add_column("Severity")
        table.add_column("Rule", style="bold")
        table.add_column("Message")
        for diagnostic in outcome.diagnostics:
            severity_style = "red" if diagnostic.severity is Severity.ERROR else "yellow"
            table.add_row(
                str(diagnostic.span.line),
                str(diagnostic.span.column),
                Text(diagnostic.severity.value, style=severity_style),
                diagnostic.rule,
                diagnostic.message,
            )
        self.console.print(table)

    def report_diff(self, path: str, original: str, formatted: str) -> None:
        diff = difflib.unified_diff(
            original.splitlines(keepends=True),
            formatted.splitlines(keepends=True),
            fromfile=path,
            tofile=f"{path} (formatted)",
        )
        for line in diff:
            if line.startswith("+") and not line.startswith("+++"):
                style = "green"
            elif line.startswith("-") and not line.startswith("---"):
                style = "red"
            else:
                style = "dim"
            self.console.print(Text(line.rstrip("\r\n"), style=style))

    def report_tokens(self, path: str, tokens: list[Token]) -> None:
        table = Table(title=path, show_lines=False, pad_edge=False)
        table.add_column("Pos", justify="right")
        table.add_column("Kind", style="bold")
        table.add_column("Text")
        for token in tokens:
            detail = token.text
            if token.directive:
                detail += f"  (#{token.directive})"
            elif token.type_category is not None:
                detail += f"  ({token.type_category.value})"
            table.add_row(f"{token.line}:{token.column}", token.kind.value, repr(detail))
        self.console.print(table)

    def report_summary(self, outcomes: dict[str, Outcome]) -> None:
        counts = Counter(outcomes.values())
        table = Table(title="Summary", show_lines=False, pad_edge=False)
        table.add_column("Outcome", style="bold")
        table.add_column("Files", justify="right")
        for outcome in Outcome:
            style = _OUTCOME_STYLES[outcome]
            table.add_row(Text(outcome.value, style=style), str(counts.get(outcome, 0)))
        self.console.print(table)
