"""Declaration recognition over the token stream, and documentation lookup."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from shader_formatter.domain.dialects import DialectTables
from shader_formatter.domain.suppression import marker_of
from shader_formatter.domain.tokens import Token, TokenKind, TypeCategory

_VARIABLE_FOLLOWERS = frozenset({";", ",", "[", ":"})
_STATEMENT_ENDS = frozenset({";", "{", "}"})
_PARAM_TAG_RE = re.compile(r"[@\\]param(?:\s*\[[^\]]*\])?\s+([A-Za-z_][A-Za-z0-9_]*)")
_RETURN_TAG_RE = re.compile(r"[@\\]returns?\b")


class DeclarationKind(Enum):
    VARIABLE = "variable"
    FUNCTION = "function"
    STRUCT = "struct"
    FIELD = "field"
    PARAMETER = "parameter"


@dataclass(frozen=True)
class Declaration:
    """
    A declared name and what the checker needs to know about it.

    `start_index` is the token index where the whole declaration begins
    (qualifiers and attributes included); documentation is looked up
    from there.
    """
    kind: DeclarationKind
    name: str
    name_index: int
    depth: int
    start_index: int
    type_name: str = ""
    type_category: TypeCategory = TypeCategory.OTHER
    is_array: bool = False
    parameters: tuple["Declaration", ...] = field(default_factory=tuple)

    @property
    def is_global(self) -> bool:
        return self.kind is DeclarationKind.VARIABLE and self.depth == 0

    @property
    def is_local(self) -> bool:
        return self.kind is DeclarationKind.PARAMETER or (
            self.kind is DeclarationKind.VARIABLE and self.depth > 0
        )

    @property
    def returns_value(self) -> bool:
        return self.kind is DeclarationKind.FUNCTION and self.type_name != "void"


@dataclass(frozen=True)
class Documentation:
    """Comment tokens documenting a declaration, top to bottom."""
    comments: tuple[Token, ...]

    @property
    def text(self) -> str:
        return "\n".join(token.comment_body() for token in self.comments)

    def param_names(self) -> list[str]:
        return _PARAM_TAG_RE.findall(self.text)

    def return_count(self) -> int:
        return len(_RETURN_TAG_RE.findall(self.text))


def find_documentation(tokens: list[Token], start_index: int) -> Optional[Documentation]:
    """
    Return the documentation attached to the declaration starting at `start_index`.

    Accepted forms: a doc block comment (`/** ... */`) on the lines directly
    above, or earlier on the same line; or a run of `//` comments, each on
    its own line, directly above with no blank line in between. Suppression
    marker comments are never documentation.
    """
    index = _skip_back(tokens, start_index - 1, TokenKind.WHITESPACE)
    if index < 0:
        return None
    token = tokens[index]
    if token.kind is TokenKind.DOC_BLOCK_COMMENT and marker_of(token) is None:
        return Documentation((token,))
    if token.kind is not TokenKind.LINE_BREAK:
        return None

    run: list[Token] = []
    while index >= 0 and tokens[index].kind is TokenKind.LINE_BREAK:
        comment_index = _skip_back(tokens, index - 1, TokenKind.WHITESPACE)
        if comment_index < 0:
            break
        comment = tokens[comment_index]
        if not comment.is_comment or marker_of(comment) is not None:
            break
        line_start = _skip_back(tokens, comment_index - 1, TokenKind.WHITESPACE)
        if line_start >= 0 and tokens[line_start].kind is not TokenKind.LINE_BREAK:
            break  # code before the comment on that line
        if comment.kind is TokenKind.DOC_BLOCK_COMMENT:
            if not run:
                run.append(comment)
            break
        if comment.kind not in (TokenKind.LINE_COMMENT, TokenKind.DOC_LINE_COMMENT):
            break
        run.append(comment)
        index = line_start

    if not run:
        return None
    return Documentation(tuple(reversed(run)))


def _is_assignment(token: Token) -> bool:
    return token.kind is TokenKind.OPERATOR and token.text == "="


def _follows_variable_name(token: Token) -> bool:
    """`;`, `=`, `,`, `[` or `:` right after a name make it a variable or field."""
    return _is_assignment(token) or (
        token.kind is TokenKind.PUNCTUATION and token.text in _VARIABLE_FOLLOWERS
    )


def _skip_back(tokens: list[Token], index: int, kind: TokenKind) -> int:
    while index >= 0 and tokens[index].kind is kind:
        index -= 1
    return index


class DeclarationScanner:
    """Finds structs, functions, variables, fields and parameters in one file."""

    def __init__(self, tables: DialectTables) -> None:
        self.tables = tables

    def scan(self, tokens: list[Token]) -> list[Declaration]:
        return _ScanState(tokens, self.tables).run()


class _ScanState:
    """Walks the significant tokens; `k` positions index `self.sig`, not `tokens`."""

    def __init__(self, tokens: list[Token], tables: DialectTables) -> None:
        self.tokens = tokens
        self.tables = tables
        self.sig = [
            i for i, t in enumerate(tokens) if not t.is_trivia and t.kind is not TokenKind.EOF
        ]
        self.declarations: list[Declaration] = []
        self.scopes: list[str] = []
        self.pending_scope = "block"

    def tok(self, k: int) -> Optional[Token]:
        return self.tokens[self.sig[k]] if 0 <= k < len(self.sig) else None

    def is_punct(self, k: int, value: str) -> bool:
        token = self.tok(k)
        return token is not None and token.is_punct(value)

    @property
    def depth(self) -> int:
        return len(self.scopes)

    @property
    def in_struct(self) -> bool:
        return bool(self.scopes) and self.scopes[-1] == "struct"

    def run(self) -> list[Declaration]:
        at_start = True
        k = 0
        while k < len(self.sig):
            token = self.tok(k)
            assert token is not None
            if token.kind is TokenKind.PREPROCESSOR:
                at_start = True
                k += 1
                continue
            if token.is_punct("{"):
                self.scopes.append(self.pending_scope)
                self.pending_scope = "block"
                at_start = True
                k += 1
                continue
            if token.is_punct("}"):
                if self.scopes:
                    self.scopes.pop()
                at_start = True
                k += 1
                continue
            if token.is_punct(";"):
                self.pending_scope = "block"
                at_start = True
                k += 1
                continue
            if at_start:
                at_start = False
                resume = self._statement(k)
                if resume is not None:
                    k = resume
                    continue
            previous = self.tok(k - 1)
            if token.is_punct("(") and previous is not None and previous.text == "for":
                at_start = True
            k += 1
        return self.declarations

    # -- statements ------------------------------------------------------

    def _statement(self, k: int) -> Optional[int]:
        """Try to read a declaration at statement start `k`; returns where scanning resumes."""
        start_index = self.sig[k]
        j = k
        while True:
            token = self.tok(j)
            if token is None:
                return None
            if token.is_punct("["):
                end = self._matching(j, "[", "]")
                if end is None:
                    return None
                j = end + 1
            elif token.text == "layout" and self.is_punct(j + 1, "("):
                end = self._matching(j + 1, "(", ")")
                if end is None:
                    return None
                j = end + 1
            elif token.text in self.tables.struct_introducers and self._is_struct_header(j):
                return self._struct(j, start_index)
            elif token.kind is TokenKind.KEYWORD and token.text in self.tables.qualifiers:
                j += 1
            else:
                break

        type_token = self.tok(j)
        if type_token is None or type_token.kind not in (TokenKind.TYPE_NAME, TokenKind.IDENTIFIER):
            return None
        name_k = j + 1
        if self._is_operator(name_k, "<"):
            end = self._template_end(name_k)
            if end is None:
                return None
            name_k = end + 1
        name = self.tok(name_k)
        if name is None or name.kind is not TokenKind.IDENTIFIER:
            return None
        follower = self.tok(name_k + 1)
        if follower is None:
            return None

        if follower.is_punct("(") and self.depth == 0:
            return self._function(j, name_k, start_index)
        if _follows_variable_name(follower):
            return self._variables(type_token, name_k, start_index)
        return None

    def _is_struct_header(self, j: int) -> bool:
        name = self.tok(j + 1)
        if name is None or name.kind is not TokenKind.IDENTIFIER:
            return False
        k = j + 2
        if self.is_punct(k, "{"):
            return True
        if not self.is_punct(k, ":"):
            return False
        while k < len(self.sig):
            token = self.tok(k)
            assert token is not None
            if token.is_punct("{"):
                return True
            if token.kind is TokenKind.PUNCTUATION and token.text in (";", "}"):
                return False
            k += 1
        return False

    def _struct(self, j: int, start_index: int) -> int:
        name_k = j + 1
        name = self.tok(name_k)
        assert name is not None
        self.declarations.append(
            Declaration(
                kind=DeclarationKind.STRUCT,
                name=name.text,
                name_index=self.sig[name_k],
                depth=self.depth,
                start_index=start_index,
            )
        )
        self.pending_scope = "struct"
        k = name_k + 1
        while not self.is_punct(k, "{"):
            k += 1
        return k

    def _function(self, type_k: int, name_k: int, start_index: int) -> Optional[int]:
        open_k = name_k + 1
        close_k = self._matching(open_k, "(", ")")
        if close_k is None:
            return None
        type_token = self.tok(type_k)
        name = self.tok(name_k)
        assert type_token is not None and name is not None
        parameters = tuple(self._parameters(open_k, close_k))

        k = close_k + 1
        if self.is_punct(k, ":"):
            k += 2  # return semantic, e.g. `: SV_Target`
        if not (self.is_punct(k, "{") or self.is_punct(k, ";")):
            return None

        self.declarations.append(
            Declaration(
                kind=DeclarationKind.FUNCTION,
                name=name.text,
                name_index=self.sig[name_k],
                depth=0,
                start_index=start_index,
                type_name=type_token.text,
                type_category=type_token.type_category or TypeCategory.OTHER,
                parameters=parameters,
            )
        )
        self.declarations.extend(parameters)
        if self.is_punct(k, "{"):
            self.pending_scope = "function"
        return k

    def _parameters(self, open_k: int, close_k: int) -> list[Declaration]:
        segments: list[list[int]] = [[]]
        level = 0
        for k in range(open_k + 1, close_k):
            token = self.tok(k)
            assert token is not None
            if token.kind is TokenKind.PUNCTUATION and token.text in "([{":
                level += 1
            elif token.kind is TokenKind.PUNCTUATION and token.text in ")]}":
                level -= 1
            elif token.is_punct(",") and level == 0:
                segments.append([])
                continue
            segments[-1].append(k)

        parameters = []
        for segment in segments:
            parameter = self._parameter(segment)
            if parameter is not None:
                parameters.append(parameter)
        return parameters

    def _parameter(self, segment: list[int]) -> Optional[Declaration]:
        """The name is the last identifier before any `[`, `:` or `=`; the type sits before it."""
        head: list[int] = []
        for k in segment:
            token = self.tok(k)
            assert token is not None
            if token.is_punct("[") or token.is_punct(":") or _is_assignment(token):
                break
            head.append(k)
        if len(head) < 2:
            return None
        name = self.tok(head[-1])
        if name is None or name.kind is not TokenKind.IDENTIFIER:
            return None
        type_token = self._type_before(head[:-1])
        rest = segment[len(head):]
        return Declaration(
            kind=DeclarationKind.PARAMETER,
            name=name.text,
            name_index=self.sig[head[-1]],
            depth=1,
            start_index=self.sig[segment[0]],
            type_name=type_token.text if type_token else "",
            type_category=(type_token.type_category if type_token else None) or TypeCategory.OTHER,
            is_array=bool(rest) and self.is_punct(rest[0], "["),
        )

    def _type_before(self, head: list[int]) -> Optional[Token]:
        """Type token of a parameter head, looking through a `<...>` template argument."""
        level = 0
        for k in reversed(head):
            token = self.tok(k)
            assert token is not None
            if token.kind is TokenKind.OPERATOR and token.text in (">", ">>"):
                level += len(token.text)
            elif token.kind is TokenKind.OPERATOR and token.text == "<":
                level -= 1
            elif level == 0 and token.kind in (TokenKind.TYPE_NAME, TokenKind.IDENTIFIER):
                return token
        return None

    def _variables(self, type_token: Token, name_k: int, start_index: int) -> int:
        kind = DeclarationKind.FIELD if self.in_struct else DeclarationKind.VARIABLE
        category = type_token.type_category or TypeCategory.OTHER

        def declare(k: int) -> None:
            name = self.tok(k)
            assert name is not None
            self.declarations.append(
                Declaration(
                    kind=kind,
                    name=name.text,
                    name_index=self.sig[k],
                    depth=self.depth,
                    start_index=start_index,
                    type_name=type_token.text,
                    type_category=category,
                    is_array=self.is_punct(k + 1, "["),
                )
            )

        declare(name_k)
        level = 0
        k = name_k + 1
        while k < len(self.sig):
            token = self.tok(k)
            assert token is not None
            if token.kind is TokenKind.PUNCTUATION:
                if level == 0 and token.text in _STATEMENT_ENDS:
                    return k
                if token.text in "([{":
                    level += 1
                elif token.text in ")]}":
                    if level == 0:
                        return k
                    level -= 1
                elif token.text == "," and level == 0:
                    following = self.tok(k + 2)
                    name = self.tok(k + 1)
                    if (
                        name is not None
                        and name.kind is TokenKind.IDENTIFIER
                        and following is not None
                        and _follows_variable_name(following)
                    ):
                        declare(k + 1)
            elif token.kind is TokenKind.PREPROCESSOR:
                return k
            k += 1
        return k

    # -- helpers ---------------------------------------------------------

    def _is_operator(self, k: int, value: str) -> bool:
        token = self.tok(k)
        return token is not None and token.kind is TokenKind.OPERATOR and token.text == value

    def _matching(self, k: int, opening: str, closing: str) -> Optional[int]:
        level = 0
        while k < len(self.sig):
            token = self.tok(k)
            assert token is not None
            if token.is_punct(opening):
                level += 1
            elif token.is_punct(closing):
                level -= 1
                if level == 0:
                    return k
            k += 1
        return None

    def _template_end(self, k: int) -> Optional[int]:
        level = 0
        while k < len(self.sig):
            token = self.tok(k)
            assert token is not None
            if token.kind is TokenKind.OPERATOR and token.text == "<":
                level += 1
            elif token.kind is TokenKind.OPERATOR and token.text in (">", ">>"):
                level -= len(token.text)
                if level <= 0:
                    return k
            elif token.kind is TokenKind.PUNCTUATION and token.text in _STATEMENT_ENDS:
                return None
            k += 1
        return None
