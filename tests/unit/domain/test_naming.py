import pytest
from hypothesis import given
from hypothesis import strategies as st

from shader_formatter.domain.config import CaseStyle
from shader_formatter.domain.naming import convert, matches, split_words

_IDENTIFIERS = st.from_regex(r"[A-Za-z][A-Za-z0-9_]{0,20}", fullmatch=True)


@pytest.mark.parametrize(
    ("name", "style", "expected"),
    [
        ("albedoColor", CaseStyle.CAMEL, True),
        ("AlbedoColor", CaseStyle.CAMEL, False),
        ("albedo_color", CaseStyle.CAMEL, False),
        ("VertexInput", CaseStyle.PASCAL, True),
        ("vertexInput", CaseStyle.PASCAL, False),
        ("light_dir2", CaseStyle.SNAKE, True),
        ("light__dir", CaseStyle.SNAKE, False),
        ("MAX_LIGHTS", CaseStyle.UPPER_SNAKE, True),
        ("Max_Lights", CaseStyle.UPPER_SNAKE, False),
        ("myURL", CaseStyle.CAMEL, False),
        ("myUrl", CaseStyle.CAMEL, True),
        ("HTTPServer", CaseStyle.PASCAL, False),
        ("HttpServer", CaseStyle.PASCAL, True),
        ("uvXY", CaseStyle.CAMEL, False),
        ("tex2D", CaseStyle.CAMEL, True),
    ],
)
def test_matches(name: str, style: CaseStyle, expected: bool) -> None:
    assert matches(name, style) is expected


@pytest.mark.parametrize(
    ("name", "words"),
    [
        ("albedoColor", ["albedo", "Color"]),
        ("g_lightDir", ["g", "light", "Dir"]),
        ("HTTPServer", ["HTTP", "Server"]),
        ("MAX_LIGHTS", ["MAX", "LIGHTS"]),
        ("uv2Scale", ["uv2", "Scale"]),
    ],
)
def test_split_words(name: str, words: list[str]) -> None:
    assert split_words(name) == words


@pytest.mark.parametrize(
    ("name", "style", "expected"),
    [
        ("albedo_color", CaseStyle.CAMEL, "albedoColor"),
        ("albedo_color", CaseStyle.PASCAL, "AlbedoColor"),
        ("AlbedoColor", CaseStyle.SNAKE, "albedo_color"),
        ("albedoColor", CaseStyle.UPPER_SNAKE, "ALBEDO_COLOR"),
        ("HTTPServer", CaseStyle.CAMEL, "httpServer"),
        ("__", CaseStyle.CAMEL, "__"),
    ],
)
def test_convert(name: str, style: CaseStyle, expected: str) -> None:
    assert convert(name, style) == expected


@pytest.mark.parametrize("style", list(CaseStyle))
@given(name=_IDENTIFIERS)
def test_matching_names_are_their_own_reconstruction(style: CaseStyle, name: str) -> None:
    if matches(name, style):
        assert convert(name, style) == name


@pytest.mark.parametrize(
    ("name", "style"),
    [
        ("albedo_color", CaseStyle.CAMEL),
        ("AlbedoColor", CaseStyle.SNAKE),
        ("HTTPServer", CaseStyle.PASCAL),
        ("myURL", CaseStyle.CAMEL),
        ("lightDir", CaseStyle.UPPER_SNAKE),
    ],
)
def test_suggested_names_match_their_style(name: str, style: CaseStyle) -> None:
    assert matches(convert(name, style), style)

