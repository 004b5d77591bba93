"""
Code templates — compiled once, rendered many times.

A template is ordinary ``str.format`` syntax (``{name}`` placeholders, ``{{``
and ``}}`` for literal braces). Compilation splits it into an ordered list of
literal and placeholder segments so rendering is a straight join and a
malformed template is rejected when the plugin class is defined, not when a
request hits it.
"""
from __future__ import annotations
from string import Formatter
from typing import Any, Mapping

from ..config import INDENT_WIDTH
from ..errors import TemplateSubstitutionError


class CompiledTemplate:
    """Template pre-split into ``(literal, placeholder | None)`` segments."""

    __slots__ = ("name", "source", "segments", "placeholders")

    def __init__(self, source: str, name: str = "<template>"):
        self.name = name
        self.source = source
        segments: list[tuple[str, str | None]] = []
        placeholders: list[str] = []
        try:
            parsed = list(Formatter().parse(source))
        except ValueError as e:
            raise TemplateSubstitutionError(name, detail=str(e)) from e

        for literal, field, spec, conversion in parsed:
            if field is not None:
                if not field.isidentifier():
                    raise TemplateSubstitutionError(name, detail=f"invalid placeholder {{{field}}}")
                if spec or conversion:
                    raise TemplateSubstitutionError(name, detail=f"format spec not allowed in {{{field}}}")
                if field not in placeholders:
                    placeholders.append(field)
            segments.append((literal, field))

        self.segments: tuple[tuple[str, str | None], ...] = tuple(segments)
        self.placeholders: tuple[str, ...] = tuple(placeholders)

    def render(self, values: Mapping[str, Any]) -> str:
        """Substitute every placeholder; a missing value is a plugin defect."""
        missing = [p for p in self.placeholders if p not in values]
        if missing:
            raise TemplateSubstitutionError(self.name, missing)
        parts: list[str] = []
        for literal, field in self.segments:
            parts.append(literal)
            if field is not None:
                parts.append(str(values[field]))
        return "".join(parts)

    def __repr__(self) -> str:
        return f"CompiledTemplate({self.name!r}, placeholders={list(self.placeholders)})"


def indent_code(code: str, level: int) -> str:
    """Prefix every non-blank line with ``INDENT_WIDTH * level`` spaces.

    Blank (or whitespace-only) lines are returned untouched.
    """
    if not code or level <= 0:
        return code
    pad = " " * (INDENT_WIDTH * level)
    return "\n".join(pad + line if line.strip() else line for line in code.split("\n"))


def body_or_pass(code: str, level: int) -> str:
    """Indent a method/loop body, substituting ``pass`` for an empty one."""
    code = code.strip("\n")
    if not code.strip():
        code = "pass"
    return indent_code(code, level)
