"""
Settings resolver / constructor builder.

Turns a plugin's defaults plus the caller's settings into a validated settings
object, and turns resolved values into a minimal Python argument list:

    build_arguments({"in_features": 784, "out_features": 10},
                    {"bias": True}, {"bias": True})
    -> "784, 10"

Everything here is pure string construction.
"""
from __future__ import annotations
import math
from typing import Any, Mapping

from pydantic import BaseModel, ValidationError

from ..errors import InvalidSettingValue, MissingRequiredSetting, TranslationError
from .templates import CompiledTemplate


class PyExpr(str):
    """A raw Python expression, emitted verbatim instead of as a string literal."""
    __slots__ = ()


# ─── Literal serialization ───────────────────────────────────────────────────

def python_literal(value: Any) -> str:
    """Render a settings value as Python source."""
    if isinstance(value, PyExpr):
        return str(value)
    if isinstance(value, bool):
        return "True" if value else "False"
    if value is None:
        return "None"
    if isinstance(value, float) and not math.isfinite(value):
        if math.isnan(value):
            return 'float("nan")'
        return 'float("inf")' if value > 0 else '-float("inf")'
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return repr(value)
    if isinstance(value, tuple):
        items = [python_literal(v) for v in value]
        return f"({items[0]},)" if len(items) == 1 else f"({', '.join(items)})"
    if isinstance(value, list):
        return "[" + ", ".join(python_literal(v) for v in value) + "]"
    if isinstance(value, Mapping):
        return "{" + ", ".join(f"{python_literal(k)}: {python_literal(v)}" for k, v in value.items()) + "}"
    raise TypeError(f"Unsupported parameter type: {type(value).__name__}")


def same_value(value: Any, default: Any) -> bool:
    """Exact equality: ``1 == True`` and ``1 == 1.0`` do not count."""
    if type(value) is not type(default):
        return False
    if isinstance(value, (tuple, list)):
        return len(value) == len(default) and all(same_value(a, b) for a, b in zip(value, default))
    return value == default


# ─── Constructor building ────────────────────────────────────────────────────

_CONSTRUCTOR = CompiledTemplate("{callee}({args})", "constructor")


def build_arguments(
    required_params: Mapping[str, Any],
    optional_params: Mapping[str, Any] | None = None,
    suppress_defaults: Mapping[str, Any] | None = None,
    *,
    positional: bool = True,
) -> str:
    """
    Build a call's argument list.

    Required params are always emitted in declared order (positionally unless
    ``positional=False``). Optional params are emitted as ``name=value`` only
    when they differ from their suppress-default; an optional ``None`` with no
    suppress-default is left out.
    """
    suppress = suppress_defaults or {}
    args: list[str] = []
    for name, value in required_params.items():
        literal = python_literal(value)
        args.append(literal if positional else f"{name}={literal}")
    for name, value in (optional_params or {}).items():
        if name in suppress:
            if same_value(value, suppress[name]):
                continue
        elif value is None:
            continue
        args.append(f"{name}={python_literal(value)}")
    return ", ".join(args)


def build_constructor(
    callee: str,
    required_params: Mapping[str, Any],
    optional_params: Mapping[str, Any] | None = None,
    suppress_defaults: Mapping[str, Any] | None = None,
    *,
    positional: bool = True,
) -> str:
    """``callee(<arguments>)`` with the argument list from ``build_arguments``."""
    args = build_arguments(required_params, optional_params, suppress_defaults, positional=positional)
    return _CONSTRUCTOR.render({"callee": callee, "args": args})


# ─── Settings resolution ─────────────────────────────────────────────────────

def merge_settings(defaults: Mapping[str, Any], settings: Mapping[str, Any] | None) -> dict[str, Any]:
    """Caller settings layered over plugin defaults (neither input is mutated)."""
    merged = dict(defaults)
    if settings:
        merged.update(settings)
    return merged


def check_required(node_type: str, merged: Mapping[str, Any], required: tuple[str, ...]) -> None:
    """Raise ``MissingRequiredSetting`` for every required key absent or None."""
    missing = [key for key in required if merged.get(key) is None]
    if missing:
        raise MissingRequiredSetting(node_type, missing)


def _validation_error(node_type: str, exc: ValidationError) -> TranslationError:
    errors = exc.errors()
    missing = [str(e["loc"][0]) for e in errors if e["type"] == "missing" and e["loc"]]
    if missing:
        return MissingRequiredSetting(node_type, missing)
    first = errors[0]
    key = str(first["loc"][0]) if first["loc"] else "settings"
    if first["type"] == "extra_forbidden":
        reason = "unrecognized setting"
    else:
        reason = first["msg"]
    return InvalidSettingValue(node_type, key, reason)


def parse_settings(
    node_type: str,
    model: type[BaseModel],
    defaults: Mapping[str, Any],
    required: tuple[str, ...],
    settings: Mapping[str, Any] | None,
) -> BaseModel:
    """Merge, check required keys, then validate into the plugin's settings model."""
    if settings is not None and not isinstance(settings, Mapping):
        raise InvalidSettingValue(node_type, "settings", "settings must be an object")
    merged = merge_settings(defaults, settings)
    check_required(node_type, merged, required)
    try:
        return model.model_validate(merged)
    except ValidationError as e:
        raise _validation_error(node_type, e) from e
