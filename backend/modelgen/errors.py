"""
Translation error taxonomy.

Every error raised by the translation core derives from ``TranslationError``
and can be rendered as the structured object returned to callers:

    {"kind": ..., "message": ..., "nodeType": ..., "key": ...}

``nodeType`` and ``key`` are only present when they apply.
"""
from __future__ import annotations
from typing import Any, Iterable

from .constants import ErrorKind


class TranslationError(Exception):
    """Base class for all failures that abort a translation."""

    kind: str = ErrorKind.INTERNAL

    def __init__(self, message: str, *, node_type: str | None = None, key: str | None = None):
        super().__init__(message)
        self.message = message
        self.node_type = node_type
        self.key = key

    @property
    def is_user_error(self) -> bool:
        return self.kind in ErrorKind.USER_INPUT

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"kind": self.kind, "message": self.message}
        if self.node_type is not None:
            out["nodeType"] = self.node_type
        if self.key is not None:
            out["key"] = self.key
        return out


class UnknownNodeType(TranslationError):
    """The graph references a layer type with no registered plugin."""

    kind = ErrorKind.UNKNOWN_NODE_TYPE

    def __init__(self, node_type: str):
        super().__init__(f"Unknown node type: {node_type!r}", node_type=node_type)


class MissingRequiredSetting(TranslationError):
    """Required settings are absent after merging caller settings with defaults."""

    kind = ErrorKind.MISSING_REQUIRED_SETTING

    def __init__(self, node_type: str, keys: Iterable[str]):
        self.keys = tuple(keys)
        super().__init__(
            f"Missing required settings for {node_type}: {', '.join(self.keys)}",
            node_type=node_type,
            key=self.keys[0] if len(self.keys) == 1 else None,
        )

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        out["keys"] = list(self.keys)
        return out


class InvalidSettingValue(TranslationError):
    """A present setting value fails validation."""

    kind = ErrorKind.INVALID_SETTING_VALUE

    def __init__(self, node_type: str, key: str, reason: str):
        self.reason = reason
        super().__init__(f"Invalid value for {node_type}.{key}: {reason}", node_type=node_type, key=key)


class PluginResolutionError(TranslationError):
    """A registered factory failed to produce a usable plugin."""

    kind = ErrorKind.PLUGIN_RESOLUTION

    def __init__(self, node_type: str, reason: str):
        self.reason = reason
        super().__init__(f"Could not resolve plugin for {node_type!r}: {reason}", node_type=node_type)


class TemplateSubstitutionError(TranslationError):
    """A plugin template is malformed or references a placeholder never supplied.

    This is a defect in the plugin, not in the submitted graph.
    """

    kind = ErrorKind.INTERNAL

    def __init__(self, template_name: str, placeholders: Iterable[str] = (), detail: str = ""):
        self.template_name = template_name
        self.placeholders = tuple(placeholders)
        msg = f"Template {template_name!r}"
        if self.placeholders:
            msg += f" has unresolved placeholders: {', '.join(self.placeholders)}"
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)


class InvalidGraph(TranslationError):
    """The submitted document is not a model graph at all."""

    kind = ErrorKind.INVALID_GRAPH
