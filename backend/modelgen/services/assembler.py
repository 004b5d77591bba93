"""
Code assembler — final cosmetic pass over translated fragments.

Joins fragments with a single newline, drops trailing whitespace on every line
and leading/trailing blank lines of the whole. No semantic checks. Running it
on its own output returns the same text.
"""
from __future__ import annotations
from typing import Callable, Iterable

from ..config import CODE_FORMATTER

Formatter = Callable[[str], str]


def tidy(code: str) -> str:
    """Right-strip every line and trim surrounding blank lines."""
    return "\n".join(line.rstrip() for line in code.split("\n")).strip("\n")


def assemble(fragments: Iterable[str], formatter: Formatter | None = None) -> str:
    code = tidy("\n".join(fragments))
    if formatter is not None and code:
        code = tidy(formatter(code))
    return code


def with_imports(code: str, imports: Iterable[str]) -> str:
    """Prefix an import block, separated from the body by one blank line."""
    header = "\n".join(imports)
    if not header:
        return code
    if not code:
        return header
    return f"{header}\n\n{code}"


# ─── External formatters ─────────────────────────────────────────────────────

def black_formatter(line_length: int = 88) -> Formatter:
    """Formatter backed by black (install the ``format`` extra)."""
    import black

    mode = black.Mode(line_length=line_length)

    def _format(code: str) -> str:
        return black.format_str(code, mode=mode)

    return _format


def get_formatter(name: str | None = None) -> Formatter | None:
    """Formatter selected by name, defaulting to the CODE_FORMATTER setting."""
    choice = (name if name is not None else CODE_FORMATTER).strip().lower()
    if choice in ("", "none"):
        return None
    if choice == "black":
        return black_formatter()
    raise ValueError(f"Unknown code formatter: {choice!r}")
