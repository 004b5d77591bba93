"""
Schemas for the translation backend.

A model graph is an ordered collection of layers, submitted either as a JSON
array or as a JSON object keyed by node id. Each layer names a plugin ``type``,
carries an open ``settings`` map and optionally nests a ``child`` layer or
layer list.
"""
from __future__ import annotations
from typing import Any, Union

from pydantic import BaseModel, Field, ValidationError

from ..errors import InvalidGraph


class Layer(BaseModel):
    """Single node of the visual model graph."""
    type: str
    settings: dict[str, Any] | None = None
    child: Union["Layer", list["Layer"], None] = None

    def children(self) -> list["Layer"]:
        """The child value normalized to a (possibly empty) list."""
        if self.child is None:
            return []
        if isinstance(self.child, Layer):
            return [self.child]
        return list(self.child)


Layer.model_rebuild()


class ModelGraph(BaseModel):
    """Ordered layers of a model graph, in the document's own order."""
    layers: list[Layer] = Field(default_factory=list)

    @classmethod
    def from_document(cls, doc: Any) -> "ModelGraph":
        """
        Build a graph from a decoded JSON document.

        Accepted shapes:
          - ``[layer, layer, ...]``
          - ``{"node_1": layer, "node_2": layer, ...}`` (key order is kept)
          - ``{"layers": [layer, ...]}``
        """
        if isinstance(doc, ModelGraph):
            return doc
        if isinstance(doc, dict):
            if isinstance(doc.get("layers"), list):
                raw = doc["layers"]
            else:
                raw = list(doc.values())
        elif isinstance(doc, list):
            raw = doc
        else:
            raise InvalidGraph(f"Model graph must be an object or an array, got {type(doc).__name__}")

        try:
            return cls(layers=[Layer.model_validate(item) for item in raw])
        except ValidationError as e:
            first = e.errors()[0]
            where = ".".join(str(p) for p in first.get("loc", ()))
            raise InvalidGraph(f"Malformed layer ({where}): {first.get('msg', 'invalid')}") from e


# ─── API payloads ────────────────────────────────────────────────────────────

class TranslateRequest(BaseModel):
    """Request to translate a model graph into source code."""
    graph: dict[str, Any] | list[Any]
    include_imports: bool | None = Field(None, alias="includeImports")

    model_config = {"populate_by_name": True}


class TranslateResponse(BaseModel):
    """Generated code plus the packaging metadata of the plugins used."""
    code: str
    imports: list[str] = Field(default_factory=list)
    dependencies: list[str] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Structured translation failure."""
    kind: str
    message: str
    node_type: str | None = Field(None, alias="nodeType")
    key: str | None = None

    model_config = {"populate_by_name": True}
