"""Tests for the template compiler and its control-flow statements."""

import pytest

from sitestack.domain.errors import TemplateSyntaxError
from sitestack.domain.template import (
    CompiledTemplate,
    ExpressionAppend,
    LiteralAppend,
    RawStatement,
    compile_template,
    scan,
)


class TestScan:
    """Tests for the single-pass delimiter scan."""

    def test_scan_splits_literals_and_fragments_in_order(self) -> None:
        assert scan("a{{ b }}c<< d = 1 >>e") == [
            LiteralAppend("a"),
            ExpressionAppend("b"),
            LiteralAppend("c"),
            RawStatement("d = 1"),
            LiteralAppend("e"),
        ]

    def test_scan_emits_no_empty_literals(self) -> None:
        assert scan("{{ a }}{{ b }}") == [ExpressionAppend("a"), ExpressionAppend("b")]

    def test_scan_empty_source(self) -> None:
        assert scan("") == []

    def test_scan_fragments_may_span_lines(self) -> None:
        assert scan("{{\n  name\n}}") == [ExpressionAppend("name")]


class TestRendering:
    """Tests for CompiledTemplate output."""

    def test_no_delimiters_renders_source_verbatim(self) -> None:
        source = "<p>plain 'text' with \\ backslash\r\nand separators</p>\n"
        assert compile_template(source)() == source

    def test_empty_template_renders_empty_string(self) -> None:
        assert compile_template("")() == ""

    def test_expression_substitution(self) -> None:
        template = compile_template("Hi {{ name }}!")
        assert template({"name": "Ada"}) == "Hi Ada!"

    def test_missing_name_appends_nothing(self) -> None:
        template = compile_template("Hi {{ name }}!")
        assert template({}) == "Hi !"
        assert template() == "Hi !"

    @pytest.mark.parametrize(
        "value, expected",
        [(0, "0"), (False, "False"), ("", ""), ([1, 2], "[1, 2]")],
    )
    def test_falsy_values_other_than_none_are_stringified(self, value, expected) -> None:
        assert compile_template("{{ value }}")({"value": value}) == expected

    def test_compile_context_is_base_scope(self) -> None:
        template = compile_template("{{ greet }}", {"greet": "hello"})
        assert template() == "hello"
        assert template({"greet": "bye"}) == "bye"

    def test_returns_compiled_template(self) -> None:
        assert isinstance(compile_template("x"), CompiledTemplate)

    def test_dollar_names_resolve_to_dollar_keys(self) -> None:
        template = compile_template("<title>{{ $title }}</title>{{ $content }}")
        assert template({"$title": "Docs", "$content": "body"}) == "<title>Docs</title>body"

    def test_dollar_inside_string_literal_is_left_alone(self) -> None:
        assert compile_template("{{ '$5 ' + price }}")({"price": "each"}) == "$5 each"

    def test_mapping_attribute_access(self) -> None:
        template = compile_template("{{ page.title }}|{{ page.missing }}|{{ page.get('title') }}")
        assert template({"page": {"title": "Intro"}}) == "Intro||Intro"

    def test_dollar_attribute_reads_context_key(self) -> None:
        template = compile_template("{{ $.$title }}")
        ctx = {"$title": "T"}
        ctx["$"] = ctx
        assert template(ctx) == "T"

    def test_attribute_on_none_raises_type_error(self) -> None:
        with pytest.raises(TypeError):
            compile_template("{{ missing.title }}")({})

    def test_safe_builtins_available(self) -> None:
        template = compile_template("{{ len(items) }}:{{ ', '.join(sorted(items)) }}")
        assert template({"items": ["b", "a", "c"]}) == "3:a, b, c"

    def test_fstring_and_conditional_expression(self) -> None:
        template = compile_template("{{ f'{n} item' + ('s' if n != 1 else '') }}")
        assert template({"n": 1}) == "1 item"
        assert template({"n": 2}) == "2 items"

    def test_dollar_names_inside_fstring_fields(self) -> None:
        template = compile_template('{{ f"<title>{$title}</title>" }}{{ f"{$count:>3}|{name!r}" }}')
        assert template({"$title": "Docs", "$count": 7, "name": "x"}) == "<title>Docs</title>  7|'x'"


class TestStatements:
    """Tests for << >> statements."""

    def test_for_loop(self) -> None:
        template = compile_template("<< for x in items >>[{{ x }}]<< end >>")
        assert template({"items": [1, 2]}) == "[1][2]"

    def test_for_loop_trailing_colon_and_endfor(self) -> None:
        template = compile_template("<< for x in items: >>{{ x }}<< endfor >>")
        assert template({"items": "ab"}) == "ab"

    def test_for_loop_tuple_target(self) -> None:
        template = compile_template("<< for k, v in pairs >>{{ k }}={{ v }};<< end >>")
        assert template({"pairs": [("a", 1), ("b", 2)]}) == "a=1;b=2;"

    def test_for_else_runs_only_without_iterations(self) -> None:
        template = compile_template("<< for x in items >>{{ x }}<< else >>none<< end >>")
        assert template({"items": []}) == "none"
        assert template({"items": [1]}) == "1"

    def test_if_elif_else(self) -> None:
        template = compile_template(
            "<< if n > 1 >>many<< elif n == 1 >>one<< else >>none<< endif >>"
        )
        assert template({"n": 2}) == "many"
        assert template({"n": 1}) == "one"
        assert template({"n": 0}) == "none"

    def test_empty_statement_closes_block(self) -> None:
        assert compile_template("<< if True >>yes<< >>!")() == "yes!"

    def test_nested_blocks(self) -> None:
        template = compile_template(
            "<< for row in rows >><< for cell in row >><< if cell >>{{ cell }}<< end >><< end >>;<< end >>"
        )
        assert template({"rows": [[1, 0, 2], [3]]}) == "12;3;"

    def test_assignment_stays_local_to_render(self) -> None:
        template = compile_template("<< greeting = 'hi' >>{{ greeting }}")
        ctx: dict = {}
        assert template(ctx) == "hi"
        assert "greeting" not in ctx

    def test_augmented_assignment(self) -> None:
        template = compile_template(
            "<< total = 0 >><< for x in items >><< total += x >><< end >>{{ total }}"
        )
        assert template({"items": [1, 2, 3]}) == "6"

    def test_expression_statement_appends_nothing(self) -> None:
        calls = []
        template = compile_template("a<< record('x') >>b")
        assert template({"record": calls.append}) == "ab"
        assert calls == ["x"]

    def test_helper_writes_to_context_are_visible_afterwards(self) -> None:
        def set_title(title, ctx):
            ctx["$title"] = title

        template = compile_template("<< set_title('New', $) >>{{ $title }}")
        ctx = {"set_title": set_title, "$title": "Old"}
        ctx["$"] = ctx
        assert template(ctx) == "New"


class TestSyntaxErrors:
    """Malformed templates fail at compile time."""

    @pytest.mark.parametrize(
        "source",
        [
            "<< end >>",
            "<< if x >>open",
            "<< else >>",
            "<< elif x >>",
            "<< for x in items >><< elif y >><< end >>",
            "<< if x >><< else >><< else >><< end >>",
            "<< if x >><< else >><< elif y >><< end >>",
            "{{ x = 1 }}",
            "{{ }}",
            "<< while True >>",
            "<< import os >>",
            "<< x.y = 1 >>",
            "<< for x.y in items >><< end >>",
            "{{ (lambda: 1)() }}",
            "{{ [x for x in items] }}",
        ],
    )
    def test_malformed_source_raises(self, source: str) -> None:
        with pytest.raises(TemplateSyntaxError):
            compile_template(source)

    def test_error_carries_fragment(self) -> None:
        with pytest.raises(TemplateSyntaxError) as exc_info:
            compile_template("{{ 1 + }}")

        assert exc_info.value.fragment == "1 +"
        assert "'1 +'" in str(exc_info.value)
