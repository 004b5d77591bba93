"""
Tests for compiled code templates and indentation helpers.

Run from the repository root:
    python -m pytest backend/tests/test_templates.py -v
"""
from __future__ import annotations

import pytest

from modelgen.errors import TemplateSubstitutionError
from modelgen.services.templates import CompiledTemplate, body_or_pass, indent_code


# ─────────────────────────────────────────────────────────────────────────────
# 1. CompiledTemplate
# ─────────────────────────────────────────────────────────────────────────────

class TestCompiledTemplate:

    def test_render_substitutes_every_placeholder(self):
        t = CompiledTemplate("{callee}({args})", "ctor")
        assert t.render({"callee": "torch.nn.ReLU", "args": ""}) == "torch.nn.ReLU()"

    def test_placeholders_are_ordered_and_unique(self):
        t = CompiledTemplate("{a} {b} {a}")
        assert t.placeholders == ("a", "b")

    def test_repeated_placeholder_rendered_each_time(self):
        t = CompiledTemplate("{x}-{x}")
        assert t.render({"x": 7}) == "7-7"

    def test_escaped_braces_are_literal(self):
        t = CompiledTemplate("{{x}} = {value}")
        assert t.placeholders == ("value",)
        assert t.render({"value": 1}) == "{x} = 1"

    def test_missing_value_raises(self):
        t = CompiledTemplate("{a} and {b}", "pair")
        with pytest.raises(TemplateSubstitutionError) as exc:
            t.render({"a": 1})
        assert exc.value.placeholders == ("b",)
        assert exc.value.kind == "internal_error"
        assert "pair" in exc.value.message

    def test_extra_values_are_ignored(self):
        t = CompiledTemplate("{a}")
        assert t.render({"a": "x", "unused": "y"}) == "x"

    def test_unbalanced_brace_rejected_at_compile(self):
        with pytest.raises(TemplateSubstitutionError):
            CompiledTemplate("def f(:\n    return {", "bad")

    def test_positional_field_rejected(self):
        with pytest.raises(TemplateSubstitutionError):
            CompiledTemplate("{0}")

    def test_format_spec_rejected(self):
        with pytest.raises(TemplateSubstitutionError):
            CompiledTemplate("{value:>10}")

    def test_conversion_rejected(self):
        with pytest.raises(TemplateSubstitutionError):
            CompiledTemplate("{value!r}")

    def test_values_are_not_reinterpreted(self):
        """Braces inside substituted values pass through untouched."""
        t = CompiledTemplate("print({msg})")
        assert t.render({"msg": 'f"{loss}"'}) == 'print(f"{loss}")'


# ─────────────────────────────────────────────────────────────────────────────
# 2. indent_code / body_or_pass
# ─────────────────────────────────────────────────────────────────────────────

class TestIndentCode:

    def test_level_two_is_eight_spaces(self):
        assert indent_code("x = 1", 2) == "        x = 1"

    def test_blank_lines_untouched(self):
        out = indent_code("a\n\nb", 1)
        assert out == "    a\n\n    b"

    def test_whitespace_only_line_untouched(self):
        assert indent_code("a\n   \nb", 1) == "    a\n   \n    b"

    def test_relative_indentation_kept(self):
        code = "if x:\n    y()"
        assert indent_code(code, 1) == "    if x:\n        y()"

    def test_level_zero_is_identity(self):
        assert indent_code("a\n b", 0) == "a\n b"

    def test_negative_level_is_identity(self):
        assert indent_code("a", -3) == "a"

    def test_empty_input(self):
        assert indent_code("", 4) == ""

    def test_body_or_pass_empty(self):
        assert body_or_pass("", 2) == "        pass"
        assert body_or_pass("\n  \n", 1) == "    pass"

    def test_body_or_pass_strips_outer_newlines(self):
        assert body_or_pass("\nreturn 1\n", 1) == "    return 1"
