"""Inline suppression markers: NOLINT, NOLINTBEGIN/END and NOFORMATBEGIN/END."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from shader_formatter.domain.entities import Diagnostic
from shader_formatter.domain.tokens import Token

_MARKER_RE = re.compile(
    r"^[\s/!*]*(NOLINTBEGIN|NOLINTEND|NOFORMATBEGIN|NOFORMATEND|NOLINT)\b"
)


class Marker(Enum):
    NOLINT = "NOLINT"
    NOLINT_BEGIN = "NOLINTBEGIN"
    NOLINT_END = "NOLINTEND"
    NOFORMAT_BEGIN = "NOFORMATBEGIN"
    NOFORMAT_END = "NOFORMATEND"


def marker_of(token: Token) -> Optional[Marker]:
    """Return the suppression marker a comment token carries, if any."""
    if not token.is_comment:
        return None
    match = _MARKER_RE.match(token.comment_body())
    return Marker(match.group(1)) if match else None


@dataclass(frozen=True)
class Suppression:
    """
    Per-token suppression flags, finalized before any pass reads them.

    Index `i` of each tuple belongs to token `i` of the stream the
    annotation was computed from.
    """
    format_flags: tuple[bool, ...]
    check_flags: tuple[bool, ...]
    diagnostics: tuple[Diagnostic, ...] = field(default_factory=tuple)

    @classmethod
    def none(cls, token_count: int) -> "Suppression":
        flags = (False,) * token_count
        return cls(format_flags=flags, check_flags=flags)

    def format_suppressed(self, index: int) -> bool:
        return self.format_flags[index]

    def check_suppressed(self, index: int) -> bool:
        return self.check_flags[index]


class _Region:
    """Running toggle for one kind of BEGIN/END region."""

    def __init__(self, begin: Marker, end: Marker) -> None:
        self.begin = begin
        self.end = end
        self.opened_by: Optional[Token] = None
        self.diagnostics: list[Diagnostic] = []

    @property
    def active(self) -> bool:
        return self.opened_by is not None

    def feed(self, token: Token, marker: Optional[Marker]) -> bool:
        """Advance over one token and return whether it lies inside the region."""
        if marker is self.begin:
            if self.opened_by is None:
                self.opened_by = token
            return True
        if marker is self.end:
            if self.opened_by is None:
                self.diagnostics.append(
                    Diagnostic.warning(
                        "unmatched-suppression-end",
                        token.span,
                        f"{self.end.value} without a preceding {self.begin.value}",
                    )
                )
                return False
            self.opened_by = None
            return True
        return self.active

    def close(self) -> None:
        if self.opened_by is not None:
            self.diagnostics.append(
                Diagnostic.warning(
                    "unterminated-suppression",
                    self.opened_by.span,
                    f"{self.begin.value} without a matching {self.end.value}; "
                    "suppressed to end of file",
                )
            )


class SuppressionTracker:
    """Computes the Suppression annotation in a single forward pass."""

    def scan(self, tokens: list[Token]) -> Suppression:
        formatting = _Region(Marker.NOFORMAT_BEGIN, Marker.NOFORMAT_END)
        checking = _Region(Marker.NOLINT_BEGIN, Marker.NOLINT_END)
        format_flags: list[bool] = []
        check_flags: list[bool] = []
        nolint_lines: set[int] = set()

        for token in tokens:
            marker = marker_of(token)
            if marker is Marker.NOLINT:
                nolint_lines.add(token.line)
            format_flags.append(formatting.feed(token, marker))
            check_flags.append(checking.feed(token, marker))

        formatting.close()
        checking.close()

        if nolint_lines:
            check_flags = [
                flag or token.line in nolint_lines for flag, token in zip(check_flags, tokens)
            ]

        diagnostics = sorted(
            formatting.diagnostics + checking.diagnostics, key=Diagnostic.sort_key
        )
        return Suppression(
            format_flags=tuple(format_flags),
            check_flags=tuple(check_flags),
            diagnostics=tuple(diagnostics),
        )
