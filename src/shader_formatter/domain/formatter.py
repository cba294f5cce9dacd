"""Whitespace formatter: brace placement, bracket spacing, indentation, blank lines, line endings."""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from shader_formatter.domain.config import BracePlacement, RuleSet
from shader_formatter.domain.entities import Diagnostic, SourceSpan
from shader_formatter.domain.suppression import Suppression
from shader_formatter.domain.tokens import Token, TokenKind

logger = logging.getLogger(__name__)

_LAYOUT_KINDS = frozenset({TokenKind.WHITESPACE, TokenKind.LINE_BREAK})
_HEADER_KINDS = frozenset({TokenKind.IDENTIFIER, TokenKind.KEYWORD, TokenKind.TYPE_NAME})
_NOT_A_HEADER = frozenset({"return"})
_BRACKET_PAIRS = {"(": ")", "[": "]"}
_OPENING_DIRECTIVES = frozenset({"if", "ifdef", "ifndef"})
_BRANCH_DIRECTIVES = frozenset({"elif", "else", "elifdef", "elifndef"})
_EMBEDDED_BREAK_RE = re.compile(r"\r\n|\r|\n")
# Tokens that may span lines; their embedded breaks follow the configured ending too.
_MULTILINE_KINDS = frozenset({TokenKind.BLOCK_COMMENT, TokenKind.DOC_BLOCK_COMMENT, TokenKind.PREPROCESSOR})


@dataclass
class _Piece:
    """One slot of the output; `token` is None for inserted whitespace."""
    kind: TokenKind
    text: str
    token: Optional[Token] = None
    suppressed: bool = False

    @property
    def is_layout(self) -> bool:
        return self.kind in _LAYOUT_KINDS

    def is_punct(self, value: str) -> bool:
        return self.kind is TokenKind.PUNCTUATION and self.text == value


@dataclass(frozen=True)
class FormattedText:
    text: str
    diagnostics: list[Diagnostic] = field(default_factory=list)


class Formatter:
    """
    Rewrites only whitespace and line breaks; every other token is emitted verbatim.

    Format-suppressed tokens (including the whitespace inside a
    NOFORMATBEGIN/NOFORMATEND region) are never modified, so such regions
    come out byte for byte.
    """

    def __init__(self, rules: RuleSet) -> None:
        self.rules = rules

    def format(self, tokens: list[Token], suppression: Suppression) -> FormattedText:
        pieces = [
            _Piece(token.kind, token.text, token, suppression.format_suppressed(index))
            for index, token in enumerate(tokens)
            if token.kind is not TokenKind.EOF
        ]
        diagnostics: list[Diagnostic] = []
        pieces = self._place_braces(pieces, diagnostics)
        pieces = self._space_brackets(pieces, diagnostics)
        pieces = self._format_lines(pieces, diagnostics)
        text = "".join(piece.text for piece in pieces)
        logger.debug("formatter produced %d diagnostics", len(diagnostics))
        return FormattedText(text=text, diagnostics=diagnostics)

    # -- brace placement -------------------------------------------------

    def _place_braces(self, pieces: list[_Piece], diagnostics: list[Diagnostic]) -> list[_Piece]:
        result: list[_Piece] = []
        for piece in pieces:
            if piece.is_punct("{") and not piece.suppressed:
                self._place_brace(result, piece, diagnostics)
            result.append(piece)
        return result

    def _place_brace(
        self, result: list[_Piece], brace: _Piece, diagnostics: list[Diagnostic]
    ) -> None:
        """Fix the layout between the header already in `result` and the brace about to follow."""
        header_index = len(result) - 1
        while header_index >= 0 and result[header_index].is_layout:
            header_index -= 1
        if header_index < 0 or not self._is_header_end(result[header_index]):
            return
        between = result[header_index + 1:]
        if result[header_index].suppressed or any(p.suppressed for p in between):
            return

        line_breaks = sum(1 for p in between if p.kind is TokenKind.LINE_BREAK)
        if self.rules.new_line_on_open_brace is BracePlacement.AFTER:
            if len(between) == 1 and between[0].text == " ":
                return
            replacement = [_Piece(TokenKind.WHITESPACE, " ")]
            message = "opening brace should be on the same line as its header"
        else:
            if line_breaks == 1:
                return
            replacement = [_Piece(TokenKind.LINE_BREAK, self.rules.line_ending)]
            message = "opening brace should start its own line"

        del result[header_index + 1:]
        result.extend(replacement)
        assert brace.token is not None
        diagnostics.append(Diagnostic.warning("brace-placement", brace.token.span, message))

    @staticmethod
    def _is_header_end(piece: _Piece) -> bool:
        if piece.is_punct(")") or piece.is_punct("]"):
            return True
        return piece.kind in _HEADER_KINDS and piece.text not in _NOT_A_HEADER

    # -- bracket spacing -------------------------------------------------

    def _space_brackets(self, pieces: list[_Piece], diagnostics: list[Diagnostic]) -> list[_Piece]:
        pairs: list[tuple[int, int]] = []
        stack: list[int] = []
        for index, piece in enumerate(pieces):
            if piece.kind is not TokenKind.PUNCTUATION:
                continue
            if piece.text in _BRACKET_PAIRS:
                stack.append(index)
            elif piece.text in (")", "]") and stack:
                if _BRACKET_PAIRS[pieces[stack[-1]].text] == piece.text:
                    pairs.append((stack.pop(), index))

        inner = " " if self.rules.spaces_in_brackets else ""
        # Each pair maps to replacements of the layout runs just inside it.
        edits: dict[int, tuple[int, str]] = {}
        for open_index, close_index in sorted(pairs):
            changed = self._plan_pair(pieces, open_index, close_index, inner, edits)
            if changed:
                token = pieces[open_index].token
                assert token is not None
                diagnostics.append(
                    Diagnostic.warning(
                        "spaces-in-brackets",
                        token.span,
                        "expected one space inside brackets"
                        if inner
                        else "expected no space inside brackets",
                    )
                )

        result: list[_Piece] = []
        index = 0
        while index < len(pieces):
            edit = edits.pop(index, None)
            if edit is not None:
                end, text = edit
                if text:
                    result.append(_Piece(TokenKind.WHITESPACE, text))
                if end > index:
                    index = end
                    continue
            result.append(pieces[index])
            index += 1
        return result

    @staticmethod
    def _plan_pair(
        pieces: list[_Piece],
        open_index: int,
        close_index: int,
        inner: str,
        edits: dict[int, tuple[int, str]],
    ) -> bool:
        """Record the whitespace edits for one pair; edits are keyed by the start of the run they replace."""
        if pieces[open_index].suppressed or pieces[close_index].suppressed:
            return False

        after_open = open_index + 1
        content = after_open
        while content < close_index and pieces[content].kind is TokenKind.WHITESPACE:
            content += 1

        def wanted(start: int, end: int, text: str) -> bool:
            run = pieces[start:end]
            if any(p.suppressed for p in run):
                return False
            if "".join(p.text for p in run) == text:
                return False
            edits[start] = (end, text)
            return True

        if content == close_index:
            return wanted(after_open, close_index, "")

        changed = False
        if pieces[content].kind is not TokenKind.LINE_BREAK:
            changed |= wanted(after_open, content, inner)

        before_close = close_index
        while before_close > content and pieces[before_close - 1].kind is TokenKind.WHITESPACE:
            before_close -= 1
        if pieces[before_close - 1].kind is not TokenKind.LINE_BREAK:
            changed |= wanted(before_close, close_index, inner)
        return changed

    # -- line pass -------------------------------------------------------

    def _format_lines(self, pieces: list[_Piece], diagnostics: list[Diagnostic]) -> list[_Piece]:
        rules = self.rules
        unit = rules.indentation.unit
        result: list[_Piece] = []
        brace_depth = 0
        pp_depth = 0
        blank_run = 0
        reported_blank_run = False
        reported_line_ending = False

        for line in _split_lines(pieces):
            content = [p for p in line if not p.is_layout]

            if not content:
                blank_run += 1
                if blank_run > rules.max_empty_lines and not any(p.suppressed for p in line):
                    if not reported_blank_run:
                        diagnostics.append(
                            Diagnostic.warning(
                                "max-empty-lines",
                                _span_of(line),
                                f"more than {rules.max_empty_lines} consecutive empty line(s)",
                            )
                        )
                        reported_blank_run = True
                    continue
            else:
                blank_run = 0
                reported_blank_run = False

            if content:
                first = content[0]
                level, pp_depth, is_directive = self._line_level(first, brace_depth, pp_depth)
                indent = unit * max(level, 0)
                if is_directive and not rules.indent_preprocessor:
                    indent = ""
                if self._reindent(line, indent):
                    rule = "preprocessor-indentation" if is_directive else "indentation"
                    message = (
                        f"expected indentation level {max(level, 0)}" if indent else "expected no indentation"
                    )
                    diagnostics.append(Diagnostic.warning(rule, _span_of(content), message))
                for piece in content:
                    if piece.is_punct("{"):
                        brace_depth += 1
                    elif piece.is_punct("}"):
                        brace_depth = max(brace_depth - 1, 0)

            trailing = self._strip_trailing(line)
            if trailing is not None:
                diagnostics.append(Diagnostic.warning("trailing-whitespace", trailing, "trailing whitespace"))

            for piece in line:
                if piece.suppressed or piece.token is None:
                    continue
                if piece.kind is TokenKind.LINE_BREAK:
                    normalized = rules.line_ending
                elif piece.kind in _MULTILINE_KINDS:
                    normalized = _EMBEDDED_BREAK_RE.sub(rules.line_ending, piece.text)
                else:
                    continue
                if normalized == piece.text:
                    continue
                if not reported_line_ending:
                    diagnostics.append(
                        Diagnostic.warning(
                            "line-ending",
                            piece.token.span,
                            f"line endings normalized to {rules.line_ending!r}",
                        )
                    )
                    reported_line_ending = True
                piece.text = normalized

            result.extend(p for p in line if p.text or p.token is not None)
        return result

    def _line_level(self, first: _Piece, brace_depth: int, pp_depth: int) -> tuple[int, int, bool]:
        """Indentation level of a line starting with `first`, and the preprocessor depth after it."""
        nesting = self.rules.nests_preprocessor
        if first.kind is TokenKind.PREPROCESSOR:
            directive = first.token.directive if first.token else ""
            if not nesting:
                return brace_depth, pp_depth, True
            if directive in _OPENING_DIRECTIVES:
                return brace_depth + pp_depth, pp_depth + 1, True
            if directive in _BRANCH_DIRECTIVES:
                return brace_depth + max(pp_depth - 1, 0), pp_depth, True
            if directive == "endif":
                pp_depth = max(pp_depth - 1, 0)
            return brace_depth + pp_depth, pp_depth, True

        level = brace_depth - 1 if first.is_punct("}") else brace_depth
        if nesting:
            level += pp_depth
        return level, pp_depth, False

    @staticmethod
    def _reindent(line: list[_Piece], indent: str) -> bool:
        """Replace the leading whitespace of a non-blank line; returns True if it changed."""
        leading = 0
        while line[leading].kind is TokenKind.WHITESPACE:
            leading += 1
        if line[leading].suppressed or any(p.suppressed for p in line[:leading]):
            return False
        current = "".join(p.text for p in line[:leading])
        if current == indent:
            return False
        line[:leading] = [_Piece(TokenKind.WHITESPACE, indent)]
        return True

    @staticmethod
    def _strip_trailing(line: list[_Piece]) -> Optional[SourceSpan]:
        """Blank out trailing whitespace; returns where it started, None if there was none."""
        end = len(line)
        if line[-1].kind is TokenKind.LINE_BREAK:
            end -= 1
        span: Optional[SourceSpan] = None
        index = end - 1
        while index >= 0 and line[index].kind is TokenKind.WHITESPACE:
            piece = line[index]
            if piece.suppressed:
                break
            if piece.text:
                span = piece.token.span if piece.token is not None else _span_of(line)
                piece.text = ""
            index -= 1
        return span


def _split_lines(pieces: list[_Piece]) -> list[list[_Piece]]:
    """Group pieces into lines; each line keeps its terminating line break."""
    lines: list[list[_Piece]] = []
    current: list[_Piece] = []
    for piece in pieces:
        current.append(piece)
        if piece.kind is TokenKind.LINE_BREAK:
            lines.append(current)
            current = []
    if current:
        lines.append(current)
    return lines


def _span_of(pieces: list[_Piece]) -> SourceSpan:
    for piece in pieces:
        if piece.token is not None:
            return piece.token.span
    return SourceSpan.at(1, 1)
