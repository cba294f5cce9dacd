import re

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from shader_formatter.domain.dialects import Dialect
from shader_formatter.domain.errors import LexError
from shader_formatter.domain.lexer import Lexer
from shader_formatter.domain.tokens import TokenKind, TypeCategory

_BREAK_RE = re.compile(r"\r\n|\r|\n")

# No quotes and no `*`: every text over this alphabet lexes without error.
_SAFE_TEXT = st.text(alphabet="abzAZ_019 \t\r\n/#\\.+-=<>()[]{};,:!&|é", max_size=200)


def _kinds(tokens):
    return [t.kind for t in tokens]


class TestLexerClassification:
    def test_declaration_with_trailing_comment(self, significant) -> None:
        tokens = significant("float4 pos; // c")

        assert [(t.kind, t.text) for t in tokens] == [
            (TokenKind.TYPE_NAME, "float4"),
            (TokenKind.IDENTIFIER, "pos"),
            (TokenKind.PUNCTUATION, ";"),
            (TokenKind.LINE_COMMENT, "// c"),
        ]
        assert tokens[0].type_category is TypeCategory.VECTOR

    def test_stream_ends_with_eof(self) -> None:
        tokens = Lexer().tokenize("int a;")
        assert tokens[-1].kind is TokenKind.EOF
        assert tokens[-1].start == tokens[-1].end == len("int a;")

    def test_empty_text_is_only_eof(self) -> None:
        assert _kinds(Lexer().tokenize("")) == [TokenKind.EOF]

    def test_keywords_and_identifiers(self, significant) -> None:
        tokens = significant("return myValue;")
        assert tokens[0].kind is TokenKind.KEYWORD
        assert tokens[1].kind is TokenKind.IDENTIFIER

    def test_type_tables_follow_dialect(self, significant) -> None:
        assert significant("vec3 v;", Dialect.GLSL)[0].kind is TokenKind.TYPE_NAME
        assert significant("vec3 v;", Dialect.HLSL)[0].kind is TokenKind.IDENTIFIER
        assert significant("float3 v;", Dialect.HLSL)[0].kind is TokenKind.TYPE_NAME

    @pytest.mark.parametrize("literal", ["1.0f", "0x1F", "1e-3", ".5", "10u", "2.", "0.5h"])
    def test_numbers(self, significant, literal: str) -> None:
        tokens = significant(f"x = {literal};")
        assert (tokens[2].kind, tokens[2].text) == (TokenKind.NUMBER, literal)

    def test_longest_operator_wins(self, significant) -> None:
        tokens = significant("a <<= b >= c")
        assert [t.text for t in tokens if t.kind is TokenKind.OPERATOR] == ["<<=", ">="]

    def test_scope_operator_is_not_two_colons(self, significant) -> None:
        tokens = significant("Foo::Bar")
        assert (tokens[1].kind, tokens[1].text) == (TokenKind.OPERATOR, "::")

    def test_strings_with_escapes(self, significant) -> None:
        tokens = significant('x = "a \\" b";')
        assert (tokens[2].kind, tokens[2].text) == (TokenKind.STRING, '"a \\" b"')


class TestLexerComments:
    @pytest.mark.parametrize(
        ("text", "kind"),
        [
            ("// plain", TokenKind.LINE_COMMENT),
            ("/// doc", TokenKind.DOC_LINE_COMMENT),
            ("//! doc", TokenKind.DOC_LINE_COMMENT),
            ("//// banner", TokenKind.LINE_COMMENT),
            ("/* plain */", TokenKind.BLOCK_COMMENT),
            ("/** doc */", TokenKind.DOC_BLOCK_COMMENT),
            ("/*! doc */", TokenKind.DOC_BLOCK_COMMENT),
            ("/**/", TokenKind.BLOCK_COMMENT),
        ],
    )
    def test_comment_forms(self, significant, text: str, kind: TokenKind) -> None:
        tokens = significant(text)
        assert len(tokens) == 1
        assert tokens[0].kind is kind

    def test_block_comments_do_not_nest(self, significant) -> None:
        tokens = significant("/* a /* b */ c")
        assert tokens[0].text == "/* a /* b */"
        assert tokens[1].text == "c"

    def test_multiline_block_comment_positions(self) -> None:
        tokens = Lexer().tokenize("/* a\n b */ x")
        comment = tokens[0]
        assert (comment.line, comment.column, comment.end_line, comment.end_column) == (1, 1, 2, 6)
        identifier = tokens[2]
        assert (identifier.line, identifier.column) == (2, 7)


class TestLexerPreprocessor:
    def test_continuation_and_trailing_comment(self) -> None:
        text = "#define FOO(x) \\\n  (x + 1) // trailing\nint a;"
        tokens = Lexer().tokenize(text)

        directive = tokens[0]
        assert directive.kind is TokenKind.PREPROCESSOR
        assert directive.text == "#define FOO(x) \\\n  (x + 1)"
        assert directive.directive == "define"
        assert (directive.line, directive.end_line) == (1, 2)

        assert tokens[1].kind is TokenKind.WHITESPACE
        assert (tokens[1].line, tokens[1].column) == (2, 10)
        assert tokens[2].kind is TokenKind.LINE_COMMENT
        int_token = next(t for t in tokens if t.text == "int")
        assert int_token.line == 3

    def test_indented_directive(self, significant) -> None:
        tokens = significant("  #pragma once")
        assert tokens[0].kind is TokenKind.PREPROCESSOR
        assert tokens[0].directive == "pragma"

    def test_space_after_hash(self, significant) -> None:
        assert significant("# if X")[0].directive == "if"

    def test_hash_inside_a_line_is_not_a_directive(self, significant) -> None:
        tokens = significant("a # b")
        assert TokenKind.PREPROCESSOR not in _kinds(tokens)

    def test_comment_slashes_inside_include_string(self, significant) -> None:
        tokens = significant('#include "dir//file.hlsli"')
        assert len(tokens) == 1
        assert tokens[0].text == '#include "dir//file.hlsli"'


class TestLexerLineBreaks:
    def test_crlf_is_one_break(self) -> None:
        tokens = Lexer().tokenize("a\r\nb")
        assert _kinds(tokens) == [
            TokenKind.IDENTIFIER,
            TokenKind.LINE_BREAK,
            TokenKind.IDENTIFIER,
            TokenKind.EOF,
        ]
        assert tokens[1].text == "\r\n"
        assert (tokens[2].line, tokens[2].column) == (2, 1)

    def test_lone_carriage_return(self) -> None:
        tokens = Lexer().tokenize("a\rb")
        assert tokens[1].text == "\r"
        assert tokens[2].line == 2


class TestLexerErrors:
    def test_unterminated_block_comment(self) -> None:
        with pytest.raises(LexError) as info:
            Lexer().tokenize("int a;\n/* open")
        assert (info.value.line, info.value.column) == (2, 1)
        assert "unterminated block comment" in str(info.value)

    def test_unterminated_string(self) -> None:
        with pytest.raises(LexError) as info:
            Lexer().tokenize('x = "abc\n')
        assert (info.value.line, info.value.column) == (1, 5)
        assert info.value.message == "unterminated string literal"

    def test_unterminated_character(self) -> None:
        with pytest.raises(LexError, match="unterminated character literal"):
            Lexer().tokenize("c = 'a")


@settings(max_examples=200, deadline=None)
@given(text=_SAFE_TEXT)
def test_tokens_reproduce_the_source_exactly(text: str) -> None:
    tokens = Lexer().tokenize(text)

    assert "".join(t.text for t in tokens) == text
    assert tokens[-1].kind is TokenKind.EOF
    for previous, current in zip(tokens, tokens[1:]):
        assert previous.end == current.start
    for token in tokens:
        assert text[token.start:token.end] == token.text
        prefix = text[:token.start]
        breaks = list(_BREAK_RE.finditer(prefix))
        assert token.line == len(breaks) + 1
        line_start = breaks[-1].end() if breaks else 0
        assert token.column == token.start - line_start + 1


@settings(max_examples=100, deadline=None)
@given(text=_SAFE_TEXT)
def test_glsl_lexing_is_lossless_too(text: str) -> None:
    tokens = Lexer(Dialect.GLSL).tokenize(text)
    assert "".join(t.text for t in tokens) == text
