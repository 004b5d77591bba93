"""
Graph file loading for the CLI: JSON or YAML documents from disk.
"""
from __future__ import annotations
import json
from pathlib import Path

import yaml

from ..errors import InvalidGraph
from ..schemas.graph import ModelGraph


def load_graph_document(path: str | Path):
    """Decode a graph file by extension (.json, .yaml, .yml)."""
    path = Path(path)
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    try:
        if suffix in (".yaml", ".yml"):
            return yaml.safe_load(text)
        if suffix == ".json":
            return json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise InvalidGraph(f"Could not parse {path.name}: {e}") from e
    raise InvalidGraph(f"Unsupported graph file type {suffix or '(none)'!r}, expected .json, .yaml or .yml")


def load_graph_file(path: str | Path) -> ModelGraph:
    return ModelGraph.from_document(load_graph_document(path))
