"""
Plugin base classes:
  - NodePlugin         : contract every layer "type" implements (metadata,
                         defaults, get_translation_code)
  - ConstructorPlugin  : plugins whose output is a single constructor call,
                         optionally assigned to a variable
  - ModelLayerPlugin   : torch.nn layers (Linear, Conv2d, ReLU, …)

Settings are declared per plugin as a frozen pydantic model with camelCase
aliases. A field with a default is an optional setting, a field without one is
required; ``default_settings`` and ``required_settings`` are derived from the
model once, when the subclass is defined.
"""
from __future__ import annotations
import keyword
from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Annotated, Any, ClassVar, Mapping, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticUndefined

from ..constants import NodeType
from ..errors import InvalidSettingValue
from ..services.settings_resolver import build_arguments, parse_settings
from ..services.templates import CompiledTemplate


# ── Shared setting field types ───────────────────────────────────────────────

def _check_identifier(value: str) -> str:
    if not value.isidentifier() or keyword.iskeyword(value):
        raise ValueError(f"{value!r} is not a valid Python identifier")
    return value


def _check_dotted_name(value: str) -> str:
    for part in value.split("."):
        _check_identifier(part)
    return value


Identifier = Annotated[str, AfterValidator(_check_identifier)]
DottedName = Annotated[str, AfterValidator(_check_dotted_name)]
PositiveInt = Annotated[int, Field(strict=True, gt=0)]
NonNegativeInt = Annotated[int, Field(strict=True, ge=0)]
Probability = Annotated[float, Field(ge=0.0, le=1.0)]
PositiveFloat = Annotated[float, Field(gt=0.0)]
Size2d = Union[PositiveInt, tuple[PositiveInt, PositiveInt]]
Padding2d = Union[NonNegativeInt, tuple[NonNegativeInt, NonNegativeInt]]


class PluginSettings(BaseModel):
    """Base settings model: camelCase keys, unknown keys rejected, immutable."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=False,
        extra="forbid",
        frozen=True,
    )


def _freeze(value: Any) -> Any:
    """Deep-immutable copy of a default value."""
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    if isinstance(value, dict):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    return value


# ── NodePlugin ───────────────────────────────────────────────────────────────

class NodePlugin(ABC):
    """Base class for every node plugin.

    Subclasses set the class attributes below and implement
    ``get_translation_code``. Instances hold no state: the registry builds a
    fresh one per lookup and identical inputs always produce identical code.
    """

    # Registry key, e.g. "Linear"
    type_key: ClassVar[str] = ""
    # Human-readable label for the node palette
    name: ClassVar[str] = ""
    node_type: ClassVar[str] = NodeType.CUSTOM

    # Connector counts for the graph editor
    input_lines: ClassVar[int] = 1
    output_lines_count: ClassVar[int] = 1
    secondary_input_lines_count: ClassVar[int] = 0

    settings_model: ClassVar[type[PluginSettings]] = PluginSettings

    # str.format-style template; compiled once per class
    template: ClassVar[str] = ""
    compiled_template: ClassVar[CompiledTemplate | None] = None

    _default_settings: ClassVar[Mapping[str, Any]] = MappingProxyType({})
    _required_settings: ClassVar[tuple[str, ...]] = ()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "template" in cls.__dict__:
            cls.compiled_template = CompiledTemplate(cls.template, name=cls.type_key or cls.__name__)
        if "settings_model" in cls.__dict__:
            defaults: dict[str, Any] = {}
            required: list[str] = []
            for field_name, info in cls.settings_model.model_fields.items():
                key = info.alias or field_name
                if info.default is not PydanticUndefined:
                    defaults[key] = _freeze(info.default)
                elif info.default_factory is not None:
                    defaults[key] = _freeze(info.default_factory())
                else:
                    required.append(key)
            cls._default_settings = MappingProxyType(defaults)
            cls._required_settings = tuple(required)

    # ── Metadata ─────────────────────────────────────────────────────────────

    @property
    def default_settings(self) -> Mapping[str, Any]:
        """Canonical default for every optional setting key."""
        return self._default_settings

    @property
    def required_settings(self) -> tuple[str, ...]:
        return self._required_settings

    @property
    def description(self) -> str:
        return (type(self).__doc__ or "").strip().split("\n")[0]

    # ── Behaviour ────────────────────────────────────────────────────────────

    @abstractmethod
    def get_translation_code(self, settings: Mapping[str, Any] | None, child: Any = None) -> str:
        """Return the source fragment for one node."""

    def get_dependencies(self) -> list[str]:
        """Python packages the generated code needs at runtime."""
        return []

    def get_imports(self) -> list[str]:
        """Import statements the generated code needs."""
        return []

    # ── Helpers for subclasses ───────────────────────────────────────────────

    def parse_settings(self, settings: Mapping[str, Any] | None) -> Any:
        """Defaults + caller settings, required-checked and validated."""
        return parse_settings(
            self.type_key,
            self.settings_model,
            self._default_settings,
            self._required_settings,
            settings,
        )

    def render(self, **values: Any) -> str:
        if self.compiled_template is None:
            raise NotImplementedError(f"{type(self).__name__} declares no template")
        return self.compiled_template.render(values)

    def reject_child(self, child: Any) -> None:
        if child:
            raise InvalidSettingValue(self.type_key, "child", "this node does not accept child layers")

    def invalid(self, key: str, reason: str) -> InvalidSettingValue:
        return InvalidSettingValue(self.type_key, key, reason)

    def to_info_dict(self) -> dict[str, Any]:
        return {
            "type": self.type_key,
            "name": self.name,
            "node_type": self.node_type,
            "description": self.description,
            "input_lines": self.input_lines,
            "output_lines_count": self.output_lines_count,
            "secondary_input_lines_count": self.secondary_input_lines_count,
            "default_settings": _thaw(self._default_settings),
            "required_settings": list(self._required_settings),
            "imports": self.get_imports(),
            "dependencies": self.get_dependencies(),
        }


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


# ── Constructor plugins ──────────────────────────────────────────────────────

class ConstructorSettings(PluginSettings):
    """Settings shared by plugins that emit one constructor call."""
    variable_name: Identifier | None = None


class ConstructorPlugin(NodePlugin):
    """Plugin emitting ``[var = ]callee(args)``.

    Subclasses provide ``callee`` and ``constructor_params``; arguments equal
    to their entry in ``suppress_defaults`` are left out of the call.
    """

    callee: ClassVar[str] = ""
    suppress_defaults: ClassVar[Mapping[str, Any]] = MappingProxyType({})
    positional_required: ClassVar[bool] = True

    settings_model = ConstructorSettings
    template = "{assignment}{callee}({args})"

    @abstractmethod
    def constructor_params(self, s: Any) -> tuple[dict[str, Any], dict[str, Any]]:
        """Return ``(required_params, optional_params)`` keyed by Python argument name."""

    def validate(self, s: Any) -> None:
        """Cross-field checks that a single field constraint cannot express."""

    def assignment_target(self, s: Any) -> str | None:
        return s.variable_name

    def get_translation_code(self, settings: Mapping[str, Any] | None, child: Any = None) -> str:
        self.reject_child(child)
        s = self.parse_settings(settings)
        self.validate(s)
        required, optional = self.constructor_params(s)
        target = self.assignment_target(s)
        return self.render(
            assignment=f"{target} = " if target else "",
            callee=self.callee,
            args=build_arguments(required, optional, self.suppress_defaults,
                                 positional=self.positional_required),
        )


class ModelLayerPlugin(ConstructorPlugin):
    """Base class for torch.nn layer plugins."""

    node_type = NodeType.MODEL_LAYER

    def get_imports(self) -> list[str]:
        return ["import torch", "import torch.nn as nn"]

    def get_dependencies(self) -> list[str]:
        return ["torch"]
