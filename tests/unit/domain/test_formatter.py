import pytest

from shader_formatter.domain.config import BracePlacement, IndentationStyle, RuleSet
from shader_formatter.domain.formatter import Formatter
from shader_formatter.domain.lexer import Lexer
from shader_formatter.domain.suppression import SuppressionTracker


def _format(text: str, **rules):
    tokens = Lexer().tokenize(text)
    suppression = SuppressionTracker().scan(tokens)
    return Formatter(RuleSet(**rules)).format(tokens, suppression)


def _rules_of(result) -> list[str]:
    return [d.rule for d in result.diagnostics]


class TestBracePlacement:
    def test_after_pulls_brace_onto_header_line(self) -> None:
        result = _format("void main()\n{\nfloat x = 1.0;\n}\n")

        assert result.text == "void main() {\n    float x = 1.0;\n}\n"
        assert "brace-placement" in _rules_of(result)
        assert "indentation" in _rules_of(result)

    def test_after_normalizes_gap_to_one_space(self) -> None:
        assert _format("struct Light{\n};\n").text == "struct Light {\n};\n"
        assert _format("void f()    {\n}\n").text == "void f() {\n}\n"

    def test_before_moves_brace_to_its_own_line(self) -> None:
        result = _format("void main() {\n}\n", new_line_on_open_brace=BracePlacement.BEFORE)
        assert result.text == "void main()\n{\n}\n"

    def test_before_keeps_a_brace_already_on_its_own_line(self) -> None:
        text = "void main()\n{\n    return;\n}\n"
        result = _format(text, new_line_on_open_brace=BracePlacement.BEFORE)
        assert result.text == text
        assert result.diagnostics == []

    def test_brace_after_comment_is_left_alone(self) -> None:
        text = "void main() // entry\n{\n}\n"
        assert _format(text).text == text

    def test_initializer_brace_after_operator_is_left_alone(self) -> None:
        text = "static const float weights[3] = {\n    0.25, 0.5, 0.25\n};\n"
        assert _format(text).text == text


class TestBracketSpacing:
    def test_spaces_added(self) -> None:
        result = _format("foo(param1, param2);\n", spaces_in_brackets=True)
        assert result.text == "foo( param1, param2 );\n"
        assert _rules_of(result) == ["spaces-in-brackets"]

    def test_spaces_removed(self) -> None:
        result = _format("foo( param1, param2 );\n")
        assert result.text == "foo(param1, param2);\n"

    def test_empty_brackets_stay_empty(self) -> None:
        assert _format("foo( );\n", spaces_in_brackets=True).text == "foo();\n"
        assert _format("a[ ] = b;\n").text == "a[] = b;\n"

    def test_nested_brackets(self) -> None:
        result = _format("x = f(g(a), b[i]);\n", spaces_in_brackets=True)
        assert result.text == "x = f( g( a ), b[ i ] );\n"

    def test_line_break_inside_bracket_is_kept(self) -> None:
        result = _format("foo(\na,\nb );\n")
        assert result.text == "foo(\na,\nb);\n"


class TestIndentation:
    @pytest.mark.parametrize(
        ("style", "unit"),
        [
            (IndentationStyle.TAB, "\t"),
            (IndentationStyle.TWO_SPACES, "  "),
            (IndentationStyle.FOUR_SPACES, "    "),
        ],
    )
    def test_indentation_units(self, style: IndentationStyle, unit: str) -> None:
        result = _format("void f() {\nif (a) {\nb();\n}\n}\n", indentation=style)
        assert result.text == f"void f() {{\n{unit}if (a) {{\n{unit}{unit}b();\n{unit}}}\n}}\n"

    def test_closing_brace_dedents(self) -> None:
        result = _format("struct S {\n    float a;\n    };\n")
        assert result.text == "struct S {\n    float a;\n};\n"

    def test_preprocessor_flush_left_by_default(self) -> None:
        text = "void f() {\n    #ifdef X\n    a();\n    #endif\n}\n"
        result = _format(text)
        assert result.text == "void f() {\n#ifdef X\n    a();\n#endif\n}\n"
        assert "preprocessor-indentation" in _rules_of(result)

    def test_preprocessor_follows_code_when_indented(self) -> None:
        text = "void f() {\n#ifdef X\n    a();\n#endif\n}\n"
        result = _format(text, indent_preprocessor=True)
        assert result.text == "void f() {\n    #ifdef X\n    a();\n    #endif\n}\n"

    def test_preprocessor_conditionals_nest(self) -> None:
        text = "#if FOO\nfloat x;\n#else\nfloat y;\n#endif\nfloat z;\n"
        result = _format(text, indent_preprocessor=True, preprocessor_if_creates_nesting=True)
        assert result.text == "#if FOO\n    float x;\n#else\n    float y;\n#endif\nfloat z;\n"

    def test_nested_conditionals_inside_function(self) -> None:
        text = "void f() {\n#if A\n#ifdef B\nb();\n#endif\n#endif\n}\n"
        result = _format(text, indent_preprocessor=True, preprocessor_if_creates_nesting=True)
        assert result.text == (
            "void f() {\n"
            "    #if A\n"
            "        #ifdef B\n"
            "            b();\n"
            "        #endif\n"
            "    #endif\n"
            "}\n"
        )


class TestLinesAndWhitespace:
    def test_excess_empty_lines_collapse(self) -> None:
        result = _format("a;\n\n\n\nb;\n")
        assert result.text == "a;\n\nb;\n"
        assert _rules_of(result) == ["max-empty-lines"]

    def test_zero_empty_lines(self) -> None:
        assert _format("a;\n\nb;\n", max_empty_lines=0).text == "a;\nb;\n"

    def test_allowed_empty_lines_untouched(self) -> None:
        text = "a;\n\n\nb;\n"
        assert _format(text, max_empty_lines=2).text == text

    def test_trailing_whitespace_removed(self) -> None:
        result = _format("a;   \nb;\t\n")
        assert result.text == "a;\nb;\n"
        assert _rules_of(result) == ["trailing-whitespace", "trailing-whitespace"]

    def test_line_endings_normalized_and_reported_once(self) -> None:
        result = _format("a;\r\nb;\r\nc;\n")
        assert result.text == "a;\nb;\nc;\n"
        assert _rules_of(result) == ["line-ending"]

    def test_forced_line_ending(self) -> None:
        result = _format("void f()\n{\n}\n", force_line_ending="\r\n")
        assert result.text == "void f() {\r\n}\r\n"

    def test_breaks_inside_multiline_comments_are_normalized(self) -> None:
        result = _format("/**\r\n * Doc.\r\n */\r\nfloat x;\r\n")
        assert result.text == "/**\n * Doc.\n */\nfloat x;\n"
        assert _rules_of(result) == ["line-ending"]

        forced = _format("/* a\n   b */\nfloat x;\n", force_line_ending="\r\n")
        assert forced.text == "/* a\r\n   b */\r\nfloat x;\r\n"

    def test_breaks_inside_continued_directives_are_normalized(self) -> None:
        result = _format("#define ADD(a, b) \\\r\n    (a + b)\r\nint x;\r\n")
        assert result.text == "#define ADD(a, b) \\\n    (a + b)\nint x;\n"

    def test_no_final_newline_is_added(self) -> None:
        assert _format("a;").text == "a;"


class TestSuppressedRegions:
    MESSY = "void   f( )  \n{\n  int    x;\n\n\n\n}   \n"

    @pytest.mark.parametrize(
        "rules",
        [
            {},
            {"new_line_on_open_brace": BracePlacement.BEFORE},
            {"indentation": IndentationStyle.TAB, "spaces_in_brackets": True},
            {"force_line_ending": "\r\n"},
        ],
    )
    def test_noformat_region_is_byte_identical(self, rules: dict) -> None:
        text = "// NOFORMATBEGIN\n" + self.MESSY + "// NOFORMATEND"
        assert _format(text, **rules).text == text

    def test_code_around_region_is_still_formatted(self) -> None:
        text = "int  a; \n// NOFORMATBEGIN\nint  b; \n// NOFORMATEND\nint  c; \n"
        assert _format(text).text == "int  a;\n// NOFORMATBEGIN\nint  b; \n// NOFORMATEND\nint  c;\n"


class TestIdempotence:
    @pytest.mark.parametrize(
        "text",
        [
            "void main()\n{\nfloat x = 1.0;\n}\n",
            "struct S{\nfloat a;\n\n\n\nfloat b;\n};\n",
            "float4 shade( Light light )\n{\n  return float4( light.direction , 1.0 );  \n}\n",
            "#if A\nint a;\n#endif\nvoid f()\n{\nif (a) {\nb();\n}\n}\n",
        ],
    )
    @pytest.mark.parametrize(
        "rules",
        [
            {},
            {"new_line_on_open_brace": BracePlacement.BEFORE, "spaces_in_brackets": True},
            {"indent_preprocessor": True, "preprocessor_if_creates_nesting": True},
            {"indentation": IndentationStyle.TAB, "max_empty_lines": 0},
        ],
    )
    def test_formatting_twice_changes_nothing(self, text: str, rules: dict) -> None:
        once = _format(text, **rules).text
        twice = _format(once, **rules)
        assert twice.text == once
        assert twice.diagnostics == []
