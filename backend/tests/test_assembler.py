"""
Tests for the code assembler and formatter selection.

Run from the repository root:
    python -m pytest backend/tests/test_assembler.py -v
"""
from __future__ import annotations

import pytest

from modelgen.services.assembler import assemble, get_formatter, tidy, with_imports


class TestAssemble:

    def test_fragments_joined_with_one_newline(self):
        assert assemble(["a = 1", "b = 2"]) == "a = 1\nb = 2"

    def test_trailing_whitespace_removed(self):
        assert assemble(["a = 1   ", "b = 2\t"]) == "a = 1\nb = 2"

    def test_surrounding_blank_lines_removed(self):
        assert assemble(["", "\n\nx\n", ""]) == "x"

    def test_inner_blank_line_kept(self):
        assert assemble(["class A:\n    pass", "", "y = A()"]) == "class A:\n    pass\n\ny = A()"

    def test_idempotent(self):
        once = assemble(["  \nx = 1  \n\n\ny = 2\n  "])
        assert assemble([once]) == once
        assert tidy(once) == once

    def test_leading_indentation_kept(self):
        assert tidy("    x = 1\n") == "    x = 1"

    def test_empty(self):
        assert assemble([]) == ""

    def test_formatter_output_is_tidied(self):
        assert assemble(["x"], formatter=lambda code: code + "   \n\n") == "x"

    def test_formatter_skipped_for_empty_code(self):
        def _fail(code):
            raise AssertionError("formatter should not run")

        assert assemble(["", "  "], formatter=_fail) == ""


class TestWithImports:

    def test_header_and_blank_line(self):
        assert with_imports("x", ["import torch"]) == "import torch\n\nx"

    def test_no_imports(self):
        assert with_imports("x", []) == "x"

    def test_no_code(self):
        assert with_imports("", ["import torch"]) == "import torch"


class TestFormatterSelection:

    def test_none(self):
        assert get_formatter("none") is None
        assert get_formatter("") is None

    def test_default_from_config(self):
        # CODE_FORMATTER is "none" for the test session (see conftest.py)
        assert get_formatter() is None

    def test_unknown(self):
        with pytest.raises(ValueError):
            get_formatter("yapf")

    def test_black(self):
        pytest.importorskip("black")
        fmt = get_formatter("Black")
        assert fmt("x=torch.nn.Linear( 4,2 )\n") == "x = torch.nn.Linear(4, 2)\n"
