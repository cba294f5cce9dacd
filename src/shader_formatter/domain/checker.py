"""Naming and documentation rules applied to recognised declarations."""

import logging
from collections import Counter
from typing import Optional

from shader_formatter.domain.config import CaseStyle, NameCategory, RuleSet
from shader_formatter.domain.declarations import (
    Declaration,
    DeclarationKind,
    DeclarationScanner,
    find_documentation,
)
from shader_formatter.domain.dialects import DialectTables
from shader_formatter.domain.entities import Diagnostic, SourceSpan
from shader_formatter.domain.naming import convert, matches
from shader_formatter.domain.suppression import Suppression
from shader_formatter.domain.tokens import Token, TypeCategory

logger = logging.getLogger(__name__)

_TYPE_PREFIX_RULES: dict[TypeCategory, tuple[str, str]] = {
    TypeCategory.BOOL: ("bool_prefix", "bool-prefix"),
    TypeCategory.INTEGER: ("int_prefix", "int-prefix"),
    TypeCategory.FLOAT: ("float_prefix", "float-prefix"),
}

_DOC_RULES: dict[DeclarationKind, tuple[str, str]] = {
    DeclarationKind.FUNCTION: ("require_docs_on_functions", "require-docs-on-functions"),
    DeclarationKind.STRUCT: ("require_docs_on_structs", "require-docs-on-structs"),
    DeclarationKind.FIELD: ("require_docs_on_fields", "require-docs-on-fields"),
}


class StyleChecker:
    """Produces error diagnostics for naming and documentation violations."""

    def __init__(self, rules: RuleSet, tables: DialectTables) -> None:
        self.rules = rules
        self.scanner = DeclarationScanner(tables)

    def check(self, tokens: list[Token], suppression: Suppression) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        declarations = self.scanner.scan(tokens)
        logger.debug("checking %d declarations", len(declarations))
        for declaration in declarations:
            if suppression.check_suppressed(declaration.name_index):
                continue
            span = tokens[declaration.name_index].span
            diagnostics.extend(self._check_name(declaration, span))
            diagnostics.extend(self._check_docs(tokens, declaration, span))
        return diagnostics

    # -- naming ----------------------------------------------------------

    def _check_name(self, declaration: Declaration, span: SourceSpan) -> list[Diagnostic]:
        if declaration.kind is DeclarationKind.STRUCT:
            return self._check_case(
                declaration, span, "", declaration.name, self.rules.struct_case, "struct-case"
            )
        if declaration.kind is DeclarationKind.FUNCTION:
            return self._check_case(
                declaration, span, "", declaration.name, self.rules.function_case, "function-case"
            )
        return self._check_variable(declaration, span)

    def _check_variable(self, declaration: Declaration, span: SourceSpan) -> list[Diagnostic]:
        """Global prefix first, then case and type prefix in the configured order."""
        rules = self.rules
        diagnostics: list[Diagnostic] = []
        prefix = ""
        remainder = declaration.name

        global_prefix = rules.global_variable_prefix
        if declaration.is_global and global_prefix is not None:
            if remainder.startswith(global_prefix):
                prefix, remainder = global_prefix, remainder[len(global_prefix):]
            else:
                diagnostics.append(
                    Diagnostic.error(
                        "global-variable-prefix",
                        span,
                        f"global variable '{declaration.name}' should start with '{global_prefix}'",
                    )
                )

        case, case_rule = self._variable_case(declaration)
        type_prefix, prefix_rule = self._type_prefix(declaration)
        case_prefix, case_subject = prefix, remainder
        if type_prefix is not None:
            if remainder.startswith(type_prefix):
                if _category_of(declaration) in rules.strip_prefix_before_case:
                    case_prefix = prefix + type_prefix
                    case_subject = remainder[len(type_prefix):]
            else:
                diagnostics.append(
                    Diagnostic.error(
                        prefix_rule,
                        span,
                        f"{_describe(declaration)} '{declaration.name}' of type "
                        f"'{declaration.type_name}' should start with '{prefix}{type_prefix}'",
                    )
                )

        diagnostics.extend(
            self._check_case(declaration, span, case_prefix, case_subject, case, case_rule)
        )
        return diagnostics

    @staticmethod
    def _check_case(
        declaration: Declaration,
        span: SourceSpan,
        prefix: str,
        subject: str,
        style: Optional[CaseStyle],
        rule: str,
    ) -> list[Diagnostic]:
        if style is None or not subject or matches(subject, style):
            return []
        suggestion = prefix + convert(subject, style)
        return [
            Diagnostic.error(
                rule,
                span,
                f"{_describe(declaration)} '{declaration.name}' should be {style.value} case: "
                f"'{suggestion}'",
            )
        ]

    def _variable_case(self, declaration: Declaration) -> tuple[Optional[CaseStyle], str]:
        if declaration.is_local and self.rules.local_variable_case is not None:
            return self.rules.local_variable_case, "local-variable-case"
        return self.rules.variable_case, "variable-case"

    def _type_prefix(self, declaration: Declaration) -> tuple[Optional[str], str]:
        if declaration.is_array or declaration.type_category not in _TYPE_PREFIX_RULES:
            return None, ""
        attribute, rule = _TYPE_PREFIX_RULES[declaration.type_category]
        return getattr(self.rules, attribute), rule

    # -- documentation ---------------------------------------------------

    def _check_docs(
        self, tokens: list[Token], declaration: Declaration, span: SourceSpan
    ) -> list[Diagnostic]:
        if declaration.kind not in _DOC_RULES:
            return []
        attribute, rule = _DOC_RULES[declaration.kind]
        if getattr(self.rules, attribute) is not True:
            return []

        documentation = find_documentation(tokens, declaration.start_index)
        if documentation is None:
            return [
                Diagnostic.error(
                    rule,
                    span,
                    f"{_describe(declaration)} '{declaration.name}' is missing a documentation comment",
                )
            ]
        if declaration.kind is not DeclarationKind.FUNCTION:
            return []

        diagnostics: list[Diagnostic] = []

        def problem(message: str) -> None:
            diagnostics.append(
                Diagnostic.error(rule, span, f"function '{declaration.name}': {message}")
            )

        documented = Counter(documentation.param_names())
        parameters = [p.name for p in declaration.parameters]
        for name in parameters:
            if documented[name] == 0:
                problem(f"missing @param for '{name}'")
        for name, count in documented.items():
            if name not in parameters:
                problem(f"@param '{name}' does not name a parameter")
            elif count > 1:
                problem(f"@param '{name}' is documented more than once")

        returns = documentation.return_count()
        if declaration.returns_value and returns == 0:
            problem("missing @return")
        elif declaration.returns_value and returns > 1:
            problem("more than one @return")
        elif not declaration.returns_value and returns:
            problem("@return on a function returning void")
        return diagnostics


def _category_of(declaration: Declaration) -> NameCategory:
    if declaration.kind is DeclarationKind.FIELD:
        return NameCategory.FIELD
    if declaration.kind is DeclarationKind.PARAMETER:
        return NameCategory.PARAMETER
    if declaration.depth > 0:
        return NameCategory.LOCAL_VARIABLE
    return NameCategory.VARIABLE


def _describe(declaration: Declaration) -> str:
    if declaration.kind is DeclarationKind.VARIABLE:
        return "global variable" if declaration.is_global else "local variable"
    return declaration.kind.value
