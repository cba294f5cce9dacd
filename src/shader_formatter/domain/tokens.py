"""Token types produced by the lexer."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from shader_formatter.domain.entities import SourceSpan


class TokenKind(Enum):
    IDENTIFIER = "identifier"
    KEYWORD = "keyword"
    TYPE_NAME = "type_name"
    PUNCTUATION = "punctuation"
    OPERATOR = "operator"
    NUMBER = "number"
    STRING = "string"
    LINE_COMMENT = "line_comment"
    BLOCK_COMMENT = "block_comment"
    DOC_LINE_COMMENT = "doc_line_comment"
    DOC_BLOCK_COMMENT = "doc_block_comment"
    PREPROCESSOR = "preprocessor"
    WHITESPACE = "whitespace"
    LINE_BREAK = "line_break"
    EOF = "eof"


class TypeCategory(Enum):
    """Coarse category of a built-in type, used by the type-prefix rules."""
    VOID = "void"
    BOOL = "bool"
    INTEGER = "integer"
    FLOAT = "float"
    VECTOR = "vector"
    MATRIX = "matrix"
    TEXTURE = "texture"
    SAMPLER = "sampler"
    BUFFER = "buffer"
    OTHER = "other"


COMMENT_KINDS: frozenset[TokenKind] = frozenset(
    {
        TokenKind.LINE_COMMENT,
        TokenKind.BLOCK_COMMENT,
        TokenKind.DOC_LINE_COMMENT,
        TokenKind.DOC_BLOCK_COMMENT,
    }
)

TRIVIA_KINDS: frozenset[TokenKind] = COMMENT_KINDS | {
    TokenKind.WHITESPACE,
    TokenKind.LINE_BREAK,
}


@dataclass(frozen=True)
class Token:
    """
    A classified slice of the source text.

    `start`/`end` are character offsets (not byte offsets) into the source
    string, so that `source[token.start:token.end] == token.text` always holds.
    """
    kind: TokenKind
    text: str
    start: int
    end: int
    line: int
    column: int
    end_line: int
    end_column: int
    directive: Optional[str] = None
    type_category: Optional[TypeCategory] = None

    @property
    def span(self) -> SourceSpan:
        return SourceSpan(self.line, self.column, self.end_line, self.end_column)

    @property
    def is_comment(self) -> bool:
        return self.kind in COMMENT_KINDS

    @property
    def is_trivia(self) -> bool:
        """Whitespace, line breaks and comments."""
        return self.kind in TRIVIA_KINDS

    def is_punct(self, value: str) -> bool:
        return self.kind is TokenKind.PUNCTUATION and self.text == value

    def comment_body(self) -> str:
        """Text of a comment without its delimiters (`/**`, `/*!`, `///` and `//!` included)."""
        if self.kind is TokenKind.LINE_COMMENT:
            return self.text[2:]
        if self.kind is TokenKind.DOC_LINE_COMMENT:
            return self.text[3:]
        if self.kind is TokenKind.BLOCK_COMMENT:
            return self.text[2:-2]
        if self.kind is TokenKind.DOC_BLOCK_COMMENT:
            return self.text[3:-2]
        return ""
