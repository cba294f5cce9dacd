"""Case-style validation and name reconstruction."""

import re

from shader_formatter.domain.config import CaseStyle

CASE_PATTERNS: dict[CaseStyle, re.Pattern[str]] = {
    CaseStyle.CAMEL: re.compile(r"[a-z][a-z0-9]*(?:[A-Z][a-z0-9]*)*"),
    CaseStyle.PASCAL: re.compile(r"(?:[A-Z][a-z0-9]*)+"),
    CaseStyle.SNAKE: re.compile(r"[a-z][a-z0-9]*(?:_[a-z0-9]+)*"),
    CaseStyle.UPPER_SNAKE: re.compile(r"[A-Z][A-Z0-9]*(?:_[A-Z0-9]+)*"),
}

# An acronym run (stops before a capitalised word), a capitalised or lowercase word, or digits.
_WORD_RE = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z0-9]+")


def matches(name: str, style: CaseStyle) -> bool:
    """A name matches only in reconstructible form: `myURL` is not Camel, `myUrl` is."""
    if CASE_PATTERNS[style].fullmatch(name) is None:
        return False
    return convert(name, style) == name


def split_words(name: str) -> list[str]:
    """Split an identifier into words on underscores and case boundaries."""
    words: list[str] = []
    for part in name.split("_"):
        words.extend(_WORD_RE.findall(part))
    return words


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def convert(name: str, style: CaseStyle) -> str:
    """Rebuild `name` in `style`; a name without any word characters is returned unchanged."""
    words = split_words(name)
    if not words:
        return name
    if style is CaseStyle.CAMEL:
        return words[0].lower() + "".join(_capitalize(w) for w in words[1:])
    if style is CaseStyle.PASCAL:
        return "".join(_capitalize(w) for w in words)
    if style is CaseStyle.SNAKE:
        return "_".join(w.lower() for w in words)
    return "_".join(w.upper() for w in words)
