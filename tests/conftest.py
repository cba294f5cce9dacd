"""Shared pytest fixtures.

Run pytest from the project root; pythonpath in pyproject.toml puts src/ on sys.path.
Helpers are exposed as fixtures so test modules never import conftest directly.
"""

from typing import Callable

import pytest

from shader_formatter.domain.config import RuleSet
from shader_formatter.domain.dialects import Dialect
from shader_formatter.domain.entities import FormatOutcome
from shader_formatter.domain.lexer import Lexer
from shader_formatter.domain.tokens import Token, TokenKind
from shader_formatter.use_cases.format_source import FormatSourceUseCase


def _run_core(text: str, dialect: Dialect = Dialect.HLSL, **rules: object) -> FormatOutcome:
    return FormatSourceUseCase().execute(text, RuleSet(**rules), dialect)  # type: ignore[arg-type]


def _significant(text: str, dialect: Dialect = Dialect.HLSL) -> list[Token]:
    """Tokens without whitespace, line breaks and the trailing EOF."""
    return [
        t
        for t in Lexer(dialect).tokenize(text)
        if t.kind not in (TokenKind.WHITESPACE, TokenKind.LINE_BREAK, TokenKind.EOF)
    ]


@pytest.fixture
def run_core() -> Callable[..., FormatOutcome]:
    """Run lexer, suppression, formatter and checker with rule overrides as keyword arguments."""
    return _run_core


@pytest.fixture
def significant() -> Callable[..., list[Token]]:
    return _significant
