"""Lossless lexer for HLSL and GLSL source text."""

import logging
import re
from typing import Optional

from shader_formatter.domain.dialects import Dialect, DialectTables, tables_for
from shader_formatter.domain.errors import LexError
from shader_formatter.domain.tokens import Token, TokenKind, TypeCategory

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"[ \t\f\v]+")
_EOL_RE = re.compile(r"[\r\n]")
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")
_IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_NUMBER_RE = re.compile(
    r"0[xX][0-9a-fA-F]+[uUlL]*"
    r"|(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?[fFhHlLuU]*"
)
_DIRECTIVE_RE = re.compile(r"#[ \t]*([A-Za-z_][A-Za-z0-9_]*)?")

# Longest first so that `<<=` wins over `<<` and `<`.
_OPERATORS: tuple[str, ...] = (
    "<<=", ">>=",
    "++", "--", "<<", ">>", "<=", ">=", "==", "!=", "&&", "||",
    "+=", "-=", "*=", "/=", "%=", "&=", "|=", "^=", "->", "::",
    "+", "-", "*", "/", "%", "=", "<", ">", "!", "&", "|", "^", "~", "?", ".",
)
_PUNCTUATION = frozenset("()[]{};,:")
_DIGITS = "0123456789"


def _starts_number(text: str, index: int) -> bool:
    return index < len(text) and text[index] in _DIGITS


def _after_escape(text: str, backslash: int) -> int:
    """Index just past an escape sequence; an escaped line break counts as one character."""
    newline = _LINE_BREAK_RE.match(text, backslash + 1)
    return newline.end() if newline else backslash + 2


class Lexer:
    """Turns source text into a flat, lossless token list ending with EOF."""

    def __init__(self, dialect: Dialect = Dialect.HLSL) -> None:
        self.tables: DialectTables = tables_for(dialect)

    def tokenize(self, text: str) -> list[Token]:
        scanner = _Scanner(text, self.tables)
        tokens = scanner.run()
        logger.debug("lexed %d tokens (%s)", len(tokens), self.tables.dialect.value)
        return tokens


class _Scanner:
    """Cursor over one source text; keeps line/column bookkeeping."""

    def __init__(self, text: str, tables: DialectTables) -> None:
        self.text = text
        self.tables = tables
        self.pos = 0
        self.line = 1
        self.line_start = 0
        self.at_line_start = True
        self.tokens: list[Token] = []

    @property
    def column(self) -> int:
        return self.pos - self.line_start + 1

    def run(self) -> list[Token]:
        while self.pos < len(self.text):
            self._scan_one()
        self.tokens.append(
            Token(
                kind=TokenKind.EOF,
                text="",
                start=self.pos,
                end=self.pos,
                line=self.line,
                column=self.column,
                end_line=self.line,
                end_column=self.column,
            )
        )
        return self.tokens

    def _scan_one(self) -> None:
        text, pos = self.text, self.pos
        ch = text[pos]

        match = _WHITESPACE_RE.match(text, pos)
        if match:
            self._emit(TokenKind.WHITESPACE, match.end())
            return

        match = _LINE_BREAK_RE.match(text, pos)
        if match:
            self._emit(TokenKind.LINE_BREAK, match.end())
            self.at_line_start = True
            return

        if ch == "#" and self.at_line_start:
            self._scan_preprocessor()
        elif text.startswith("//", pos):
            self._scan_line_comment()
        elif text.startswith("/*", pos):
            self._scan_block_comment()
        elif ch in "\"'":
            self._scan_string(ch)
        elif ch in _DIGITS or (ch == "." and _starts_number(text, pos + 1)):
            match = _NUMBER_RE.match(text, pos)
            assert match is not None
            self._emit(TokenKind.NUMBER, match.end())
        elif ch == "_" or (ch.isascii() and ch.isalpha()):
            self._scan_identifier()
        elif ch in _PUNCTUATION and not text.startswith("::", pos):
            self._emit(TokenKind.PUNCTUATION, pos + 1)
        else:
            for op in _OPERATORS:
                if text.startswith(op, pos):
                    self._emit(TokenKind.OPERATOR, pos + len(op))
                    break
            else:
                # Anything unrecognised is kept as a one-character token.
                self._emit(TokenKind.PUNCTUATION, pos + 1)
        self.at_line_start = False

    def _scan_identifier(self) -> None:
        match = _IDENTIFIER_RE.match(self.text, self.pos)
        assert match is not None
        name = match.group()
        category = self.tables.type_category(name)
        if category is not None:
            self._emit(TokenKind.TYPE_NAME, match.end(), type_category=category)
        elif name in self.tables.keywords:
            self._emit(TokenKind.KEYWORD, match.end())
        else:
            self._emit(TokenKind.IDENTIFIER, match.end())

    def _scan_line_comment(self) -> None:
        end = self._end_of_line(self.pos)
        body = self.text[self.pos:end]
        is_doc = (body.startswith("///") and not body.startswith("////")) or body.startswith("//!")
        self._emit(TokenKind.DOC_LINE_COMMENT if is_doc else TokenKind.LINE_COMMENT, end)

    def _scan_block_comment(self) -> None:
        end = self._block_comment_end(self.pos)
        body = self.text[self.pos:end]
        is_doc = (body.startswith("/**") or body.startswith("/*!")) and body != "/**/"
        self._emit(TokenKind.DOC_BLOCK_COMMENT if is_doc else TokenKind.BLOCK_COMMENT, end)

    def _scan_string(self, quote: str) -> None:
        text = self.text
        index = self.pos + 1
        while index < len(text):
            ch = text[index]
            if ch == "\\" and index + 1 < len(text):
                index = _after_escape(text, index)
                continue
            if ch == quote:
                self._emit(TokenKind.STRING, index + 1)
                return
            if ch in "\r\n":
                break
            index += 1
        kind = "string" if quote == '"' else "character"
        raise LexError(f"unterminated {kind} literal", self.line, self.column)

    def _scan_preprocessor(self) -> None:
        """A directive runs to the end of its logical line, minus a trailing `//` comment."""
        text = self.text
        index = self.pos
        while index < len(text):
            ch = text[index]
            if ch == "\\":
                newline = _LINE_BREAK_RE.match(text, index + 1)
                if newline:
                    index = newline.end()
                    continue
                index += 1
            elif ch in "\r\n":
                break
            elif text.startswith("//", index):
                break
            elif text.startswith("/*", index):
                index = self._block_comment_end(index)
            elif ch == '"':
                index = self._directive_string_end(index)
            else:
                index += 1

        end = index
        while end > self.pos + 1 and text[end - 1] in " \t\f\v":
            end -= 1
        match = _DIRECTIVE_RE.match(text, self.pos)
        directive = match.group(1) if match and match.group(1) else ""
        self._emit(TokenKind.PREPROCESSOR, end, directive=directive)

    def _directive_string_end(self, index: int) -> int:
        """Skip a quoted string inside a directive; an open quote simply ends at the line break."""
        text = self.text
        index += 1
        while index < len(text) and text[index] not in "\r\n":
            if text[index] == "\\":
                index = _after_escape(text, index)
                continue
            if text[index] == '"':
                return index + 1
            index += 1
        return min(index, len(text))

    def _block_comment_end(self, start: int) -> int:
        close = self.text.find("*/", start + 2)
        if close < 0:
            line, column = self._position_of(start)
            raise LexError("unterminated block comment", line, column)
        return close + 2

    def _end_of_line(self, start: int) -> int:
        match = _EOL_RE.search(self.text, start)
        return match.start() if match else len(self.text)

    def _position_of(self, offset: int) -> tuple[int, int]:
        """Line/column of an offset at or after the current token start."""
        line, line_start = self.line, self.line_start
        for newline in _LINE_BREAK_RE.finditer(self.text, self.pos, offset):
            line += 1
            line_start = newline.end()
        return line, offset - line_start + 1

    def _emit(
        self,
        kind: TokenKind,
        end: int,
        directive: Optional[str] = None,
        type_category: Optional[TypeCategory] = None,
    ) -> None:
        start, line, column = self.pos, self.line, self.column
        end_line, end_column = self._position_of(end)
        self.tokens.append(
            Token(
                kind=kind,
                text=self.text[start:end],
                start=start,
                end=end,
                line=line,
                column=column,
                end_line=end_line,
                end_column=end_column,
                directive=directive,
                type_category=type_category,
            )
        )
        if end_line != line:
            self.line = end_line
            self.line_start = end - end_column + 1
        self.pos = end
