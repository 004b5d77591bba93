"""
Command-line translator.

    python -m modelgen.cli graph.json
    python -m modelgen.cli graph.yaml -o model.py --imports --format black

Prints the generated code (or writes it to ``--output``). On a translation
error the structured error object is printed to stderr as JSON and the exit
status is 1.
"""
from __future__ import annotations
import argparse
import json
import sys
from pathlib import Path

from . import logging_service as logger
from .config import CODE_FORMATTER, LOG_LEVEL
from .errors import TranslationError
from .services.assembler import get_formatter
from .services.translator import build_program
from .utils.graph_io import load_graph_file


# ── CLI ────────────────────────────────────────────────────────────────────────

def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Translate a model graph into PyTorch code")
    p.add_argument("graph", help="Graph file (.json, .yaml or .yml)")
    p.add_argument("-o", "--output", default=None, help="Write code to this file instead of stdout")
    p.add_argument("--imports", action="store_true", help="Prepend the import block")
    p.add_argument("--format", dest="formatter", default=CODE_FORMATTER, choices=["none", "black"],
                   help="Post-translation code formatter")
    return p.parse_args(argv)


def run(graph: str, output: str | None = None, imports: bool = False, formatter: str = "none") -> int:
    try:
        model_graph = load_graph_file(graph)
        result = build_program(model_graph, include_imports=imports, formatter=get_formatter(formatter))
    except TranslationError as e:
        logger.log("translation", "WARNING", f"CLI translation failed: {e.message}",
                   {"graph": graph, "error": e.to_dict()}, component="cli")
        print(json.dumps(e.to_dict()), file=sys.stderr)
        return 1
    except OSError as e:
        print(json.dumps({"kind": "io_error", "message": str(e)}), file=sys.stderr)
        return 1

    code = result.code + "\n" if result.code else ""
    if output:
        Path(output).write_text(code, encoding="utf-8")
        print(f"Wrote {output}", file=sys.stderr)
    else:
        sys.stdout.write(code)

    logger.log("translation", "INFO", "CLI translation", {
        "graph": graph, "layers": len(model_graph.layers), "output": output,
    }, component="cli")
    return 0


def main(argv: list[str] | None = None) -> int:
    logger.set_min_level(LOG_LEVEL)
    args = _parse_args(argv)
    return run(graph=args.graph, output=args.output, imports=args.imports, formatter=args.formatter)


if __name__ == "__main__":
    sys.exit(main())
