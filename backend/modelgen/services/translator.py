"""
Translator — converts a model graph into PyTorch source code.

Layers are translated strictly in graph order, one plugin call each, and the
fragments are joined with a single newline. Empty fragments (a block with
nothing to emit) are dropped and leave no blank line. A layer's ``child`` is
handed to its plugin untouched; container plugins call back into
``translate_layer`` / ``translate_layers`` for their children. Any error
aborts the whole translation, there is no partial output.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Iterable

from pydantic import ValidationError

from ..errors import InvalidGraph
from ..plugins.loader import resolve
from ..schemas.graph import Layer, ModelGraph
from .assembler import Formatter, assemble, with_imports


@dataclass
class TranslationResult:
    """Generated code plus the packaging metadata of every plugin used."""
    code: str
    imports: list[str] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "imports": self.imports, "dependencies": self.dependencies}


def as_layers(value: Any) -> list[Layer]:
    """Normalize a child value (layer, dict, list of either, or None) to layers."""
    if value is None:
        return []
    items = value if isinstance(value, (list, tuple)) else [value]
    layers: list[Layer] = []
    for item in items:
        if isinstance(item, Layer):
            layers.append(item)
            continue
        try:
            layers.append(Layer.model_validate(item))
        except ValidationError as e:
            raise InvalidGraph(f"Malformed child layer: {e.errors()[0].get('msg', 'invalid')}") from e
    return layers


def translate_layer(layer: Layer | dict) -> str:
    """Translate one layer through its plugin."""
    if not isinstance(layer, Layer):
        layer = as_layers(layer)[0]
    plugin = resolve(layer.type)
    return plugin.get_translation_code(layer.settings, layer.child)


def translate_layers(layers: Iterable[Layer | dict]) -> list[str]:
    """Translate layers in order, one fragment per layer."""
    return [translate_layer(layer) for layer in layers]


def _non_empty(fragments: list[str]) -> list[str]:
    return [f for f in fragments if f.strip()]


def translate(graph: Any, formatter: Formatter | None = None) -> str:
    """Translate a model graph (``ModelGraph`` or decoded JSON) into code."""
    model_graph = ModelGraph.from_document(graph)
    return assemble(_non_empty(translate_layers(model_graph.layers)), formatter=formatter)


def collect_metadata(layers: Iterable[Layer]) -> tuple[list[str], list[str]]:
    """Ordered, de-duplicated imports and dependencies, children included."""
    imports: dict[str, None] = {}
    dependencies: dict[str, None] = {}
    stack = list(layers)[::-1]
    while stack:
        layer = stack.pop()
        plugin = resolve(layer.type)
        imports.update(dict.fromkeys(plugin.get_imports()))
        dependencies.update(dict.fromkeys(plugin.get_dependencies()))
        stack.extend(layer.children()[::-1])
    return list(imports), list(dependencies)


def build_program(
    graph: Any,
    include_imports: bool = False,
    formatter: Formatter | None = None,
) -> TranslationResult:
    """Translate a graph and gather what the generated code needs to run."""
    model_graph = ModelGraph.from_document(graph)
    body = assemble(_non_empty(translate_layers(model_graph.layers)))
    imports, dependencies = collect_metadata(model_graph.layers)
    code = with_imports(body, imports) if include_imports else body
    if formatter is not None:
        code = assemble([code], formatter=formatter)
    return TranslationResult(code=code, imports=imports, dependencies=dependencies)
