"""Fatal errors raised by the formatting core."""

from typing import Optional


class ShaderFormatterError(Exception):
    """Base class for errors that abort processing."""


class ConfigParseError(ShaderFormatterError):
    """
    The configuration file exists but cannot be turned into a RuleSet.

    Raised for unknown keys, values outside an enumerated set, values of the
    wrong type and contradictory rule combinations. Processing never starts
    when this is raised.
    """

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        self.message = message
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


class LexError(ShaderFormatterError):
    """The source text cannot be tokenized (unterminated comment or literal)."""

    def __init__(self, message: str, line: int, column: int) -> None:
        self.message = message
        self.line = line
        self.column = column
        super().__init__(f"line {line}, column {column}: {message}")
