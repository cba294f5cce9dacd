"""Configuration model: every formatting/checking rule and its defaults."""

import sys
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Callable, Optional

if sys.version_info >= (3, 11):
    import tomllib as toml_lib
else:
    import tomli as toml_lib

from shader_formatter.domain.errors import ConfigParseError

CONFIG_FILE_NAME = "shader-formatter.toml"

CANONICAL_LINE_ENDING = "\n"
ALLOWED_LINE_ENDINGS: tuple[str, ...] = ("\n", "\r\n", "\r")


class IndentationStyle(Enum):
    TAB = "Tab"
    TWO_SPACES = "TwoSpaces"
    FOUR_SPACES = "FourSpaces"

    @property
    def unit(self) -> str:
        """Text of one indentation level."""
        return {"Tab": "\t", "TwoSpaces": "  ", "FourSpaces": "    "}[self.value]


class BracePlacement(Enum):
    AFTER = "After"  # `void main() {`
    BEFORE = "Before"  # brace on its own line


class CaseStyle(Enum):
    CAMEL = "Camel"
    PASCAL = "Pascal"
    SNAKE = "Snake"
    UPPER_SNAKE = "UpperSnake"


class NameCategory(Enum):
    """Name categories that may opt into stripping the type prefix before the case check."""
    VARIABLE = "Variable"
    LOCAL_VARIABLE = "LocalVariable"
    FIELD = "Field"
    PARAMETER = "Parameter"


@dataclass(frozen=True)
class RuleSet:
    """
    Resolved rules for one run.

    Rules with a hard default are never None. For every other rule None means
    "not configured" and the rule is not checked at all, which is different
    from a rule configured to a falsy value.
    """

    indentation: IndentationStyle = IndentationStyle.FOUR_SPACES
    new_line_on_open_brace: BracePlacement = BracePlacement.AFTER
    max_empty_lines: int = 1
    spaces_in_brackets: bool = False
    indent_preprocessor: bool = False
    preprocessor_if_creates_nesting: bool = False
    require_docs_on_functions: Optional[bool] = None
    require_docs_on_structs: Optional[bool] = None
    require_docs_on_fields: Optional[bool] = None
    variable_case: Optional[CaseStyle] = None
    function_case: Optional[CaseStyle] = None
    struct_case: Optional[CaseStyle] = None
    local_variable_case: Optional[CaseStyle] = None
    bool_prefix: Optional[str] = None
    int_prefix: Optional[str] = None
    float_prefix: Optional[str] = None
    global_variable_prefix: Optional[str] = None
    force_line_ending: Optional[str] = None
    strip_prefix_before_case: frozenset[NameCategory] = field(default_factory=frozenset)

    def is_set(self, rule: str) -> bool:
        """Return True if the named optional rule was configured."""
        return getattr(self, rule) is not None

    @property
    def line_ending(self) -> str:
        return self.force_line_ending if self.force_line_ending is not None else CANONICAL_LINE_ENDING

    @property
    def nests_preprocessor(self) -> bool:
        return self.indent_preprocessor and self.preprocessor_if_creates_nesting

    def has_type_prefix(self) -> bool:
        return any(p is not None for p in (self.bool_prefix, self.int_prefix, self.float_prefix))


@dataclass(frozen=True)
class _RuleSpec:
    """How one configuration key maps onto a RuleSet field."""
    attribute: str
    convert: Callable[[str, object], Any]


class RuleSetParser:
    """Turns the key/value document of a configuration file into a RuleSet."""

    LEGACY_ALIASES: dict[str, str] = {"NewLineAroundOpenBraceRule": "NewLineOnOpenBrace"}

    @staticmethod
    def parse_text(text: str, path: Optional[str] = None) -> RuleSet:
        """Parse TOML text. Any problem raises ConfigParseError."""
        try:
            data = toml_lib.loads(text)
        except toml_lib.TOMLDecodeError as exc:
            raise ConfigParseError(f"invalid TOML: {exc}", path) from exc
        return RuleSetParser.from_mapping(data, path)

    @staticmethod
    def from_mapping(data: Mapping[str, object], path: Optional[str] = None) -> RuleSet:
        """Build a RuleSet from already decoded key/value pairs."""
        values: dict[str, Any] = {}
        seen: dict[str, str] = {}
        for key, raw in data.items():
            canonical = RuleSetParser.LEGACY_ALIASES.get(key, key)
            spec = _RULES.get(canonical)
            if spec is None:
                raise ConfigParseError(f'found unknown rule "{key}"', path)
            if canonical in seen:
                raise ConfigParseError(
                    f'rule "{canonical}" is given twice (as "{seen[canonical]}" and "{key}")', path
                )
            seen[canonical] = key
            try:
                values[spec.attribute] = spec.convert(key, raw)
            except ConfigParseError as exc:
                raise ConfigParseError(exc.message, path) from None

        rules = RuleSet(**values)
        RuleSetParser.validate(rules, path)
        return rules

    @staticmethod
    def validate(rules: RuleSet, path: Optional[str] = None) -> None:
        """Reject rule combinations whose meaning would be ambiguous."""
        if rules.preprocessor_if_creates_nesting and not rules.indent_preprocessor:
            raise ConfigParseError(
                '"PreprocessorIfCreatesNesting" requires "IndentPreprocessor" to be enabled', path
            )
        if rules.strip_prefix_before_case and not rules.has_type_prefix():
            raise ConfigParseError(
                '"StripPrefixBeforeCase" is set but none of "BoolPrefix", "IntPrefix", '
                '"FloatPrefix" is configured',
                path,
            )

    @staticmethod
    def known_keys() -> list[str]:
        return sorted(_RULES)


def _type_name(value: object) -> str:
    return type(value).__name__


def _enum(enum_type: type[Enum]) -> Callable[[str, object], Enum]:
    def convert(key: str, value: object) -> Enum:
        if not isinstance(value, str):
            raise ConfigParseError(
                f'expected value for key "{key}" to be a string, got {_type_name(value)}'
            )
        for member in enum_type:
            if member.value == value:
                return member
        allowed = ", ".join(m.value for m in enum_type)
        raise ConfigParseError(
            f'found unknown value "{value}" for rule "{key}" (expected one of: {allowed})'
        )
    return convert


def _bool(key: str, value: object) -> bool:
    if not isinstance(value, bool):
        raise ConfigParseError(
            f'expected value for key "{key}" to be a boolean, got {_type_name(value)}'
        )
    return value


def _non_negative_int(key: str, value: object) -> int:
    # bool is a subclass of int
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigParseError(
            f'expected value for key "{key}" to be an integer, got {_type_name(value)}'
        )
    if value < 0:
        raise ConfigParseError(f'expected value for key "{key}" to be non-negative, got {value}')
    return value


def _prefix(key: str, value: object) -> str:
    if not isinstance(value, str):
        raise ConfigParseError(
            f'expected value for key "{key}" to be a string, got {_type_name(value)}'
        )
    if not value:
        raise ConfigParseError(f'expected value for key "{key}" to be a non-empty string')
    if not value.isascii() or any(ch.isspace() for ch in value):
        raise ConfigParseError(
            f'expected value for key "{key}" to be an ASCII string without whitespace'
        )
    return value


def _line_ending(key: str, value: object) -> str:
    if not isinstance(value, str):
        raise ConfigParseError(
            f'expected value for key "{key}" to be a string, got {_type_name(value)}'
        )
    if value not in ALLOWED_LINE_ENDINGS:
        raise ConfigParseError(
            f'found unknown value {value!r} for rule "{key}" (expected "\\n", "\\r\\n" or "\\r")'
        )
    return value


def _categories(key: str, value: object) -> frozenset[NameCategory]:
    if not isinstance(value, list):
        raise ConfigParseError(
            f'expected value for key "{key}" to be a list of strings, got {_type_name(value)}'
        )
    convert = _enum(NameCategory)
    return frozenset(convert(key, item) for item in value)  # type: ignore[misc]


_RULES: dict[str, _RuleSpec] = {
    "Indentation": _RuleSpec("indentation", _enum(IndentationStyle)),
    "NewLineOnOpenBrace": _RuleSpec("new_line_on_open_brace", _enum(BracePlacement)),
    "MaxEmptyLines": _RuleSpec("max_empty_lines", _non_negative_int),
    "SpacesInBrackets": _RuleSpec("spaces_in_brackets", _bool),
    "IndentPreprocessor": _RuleSpec("indent_preprocessor", _bool),
    "PreprocessorIfCreatesNesting": _RuleSpec("preprocessor_if_creates_nesting", _bool),
    "RequireDocsOnFunctions": _RuleSpec("require_docs_on_functions", _bool),
    "RequireDocsOnStructs": _RuleSpec("require_docs_on_structs", _bool),
    "RequireDocsOnFields": _RuleSpec("require_docs_on_fields", _bool),
    "VariableCase": _RuleSpec("variable_case", _enum(CaseStyle)),
    "FunctionCase": _RuleSpec("function_case", _enum(CaseStyle)),
    "StructCase": _RuleSpec("struct_case", _enum(CaseStyle)),
    "LocalVariableCase": _RuleSpec("local_variable_case", _enum(CaseStyle)),
    "BoolPrefix": _RuleSpec("bool_prefix", _prefix),
    "IntPrefix": _RuleSpec("int_prefix", _prefix),
    "FloatPrefix": _RuleSpec("float_prefix", _prefix),
    "GlobalVariablePrefix": _RuleSpec("global_variable_prefix", _prefix),
    "ForceLineEnding": _RuleSpec("force_line_ending", _line_ending),
    "StripPrefixBeforeCase": _RuleSpec("strip_prefix_before_case", _categories),
}

# Every RuleSet field is reachable from exactly one key.
assert {spec.attribute for spec in _RULES.values()} == {f.name for f in fields(RuleSet)}
