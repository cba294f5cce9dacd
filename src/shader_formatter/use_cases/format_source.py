"""Use Case: Format and check one source text."""

import logging

from shader_formatter.domain.checker import StyleChecker
from shader_formatter.domain.config import RuleSet
from shader_formatter.domain.dialects import Dialect, tables_for
from shader_formatter.domain.entities import Diagnostic, FormatOutcome, Outcome
from shader_formatter.domain.formatter import Formatter
from shader_formatter.domain.lexer import Lexer
from shader_formatter.domain.suppression import SuppressionTracker
from shader_formatter.domain.tokens import Token

logger = logging.getLogger(__name__)


def aggregate(original: str, formatted: str, diagnostics: list[Diagnostic]) -> FormatOutcome:
    """Classify a run; only error diagnostics can make it MANUAL_FIX_REQUIRED."""
    ordered = sorted(diagnostics, key=Diagnostic.sort_key)
    changed = formatted != original
    if any(d.is_error for d in ordered):
        outcome = Outcome.MANUAL_FIX_REQUIRED
    elif changed:
        outcome = Outcome.FORMATTED
    else:
        outcome = Outcome.CLEAN
    return FormatOutcome(text=formatted, changed=changed, outcome=outcome, diagnostics=ordered)


class FormatSourceUseCase:
    """Lexer -> suppression -> formatter and checker -> aggregate. Never touches the filesystem."""

    def execute(self, text: str, rules: RuleSet, dialect: Dialect = Dialect.HLSL) -> FormatOutcome:
        """Raises LexError when the text cannot be tokenized safely."""
        tokens = self.tokenize(text, dialect)
        suppression = SuppressionTracker().scan(tokens)
        formatted = Formatter(rules).format(tokens, suppression)
        errors = StyleChecker(rules, tables_for(dialect)).check(tokens, suppression)
        outcome = aggregate(
            text,
            formatted.text,
            [*suppression.diagnostics, *formatted.diagnostics, *errors],
        )
        logger.debug(
            "%s with %d diagnostic(s)", outcome.outcome.value, len(outcome.diagnostics)
        )
        return outcome

    def tokenize(self, text: str, dialect: Dialect = Dialect.HLSL) -> list[Token]:
        return Lexer(dialect).tokenize(text)
