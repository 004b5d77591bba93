"""
Plugin loader — registry of node plugins, keyed by layer type.

The registry maps a type string to a factory (normally the plugin class).
``resolve`` builds a fresh instance per call; plugins are stateless templates.
Built-in plugins live in ``plugins/layers`` and self-register on import;
``discover_plugins`` imports them once.
"""
from __future__ import annotations
import importlib
import pkgutil
import threading
from typing import Callable

from .. import logging_service as logger
from ..errors import PluginResolutionError, TranslationError, UnknownNodeType
from .base import NodePlugin

NodeFactory = Callable[[], NodePlugin]


# ── Registry ─────────────────────────────────────────────────────────────────

_node_factories: dict[str, NodeFactory] = {}
_discovered = False
_discover_lock = threading.Lock()


def register_node(factory: NodeFactory, type_key: str | None = None) -> None:
    """Register a plugin factory under its type key (case-insensitive).

    Re-registering the same factory is a no-op; a different factory under a
    taken key is rejected rather than shadowing the existing one.
    """
    key = type_key or getattr(factory, "type_key", "")
    if not key:
        raise ValueError(f"Plugin factory {factory!r} has no type_key")
    existing = _node_factories.get(key.lower())
    if existing is not None:
        if existing is factory:
            return
        raise ValueError(f"Node type {key!r} is already registered by {existing!r}")
    _node_factories[key.lower()] = factory


def unregister_node(type_key: str) -> bool:
    """Remove a registration. Returns False if nothing was registered."""
    return _node_factories.pop(type_key.lower(), None) is not None


# ── Accessors ────────────────────────────────────────────────────────────────

def get_node_factory(type_key: str) -> NodeFactory | None:
    discover_plugins()
    return _node_factories.get(type_key.lower())


def resolve(type_key: str) -> NodePlugin:
    """Build a fresh plugin instance for a layer type."""
    factory = get_node_factory(type_key) if isinstance(type_key, str) else None
    if factory is None:
        raise UnknownNodeType(str(type_key))
    try:
        plugin = factory()
    except TranslationError:
        raise
    except Exception as e:
        raise PluginResolutionError(type_key, f"{type(e).__name__}: {e}") from e
    if not callable(getattr(plugin, "get_translation_code", None)):
        raise PluginResolutionError(type_key, "factory did not return a node plugin")
    return plugin


def registered_types() -> list[str]:
    """Type keys in registration order."""
    discover_plugins()
    return [getattr(f, "type_key", k) or k for k, f in _node_factories.items()]


def all_node_plugins() -> list[NodePlugin]:
    discover_plugins()
    return [factory() for factory in _node_factories.values()]


# ── Discovery ────────────────────────────────────────────────────────────────

def discover_plugins() -> dict[str, int]:
    """Import all built-in plugin modules so they self-register (once)."""
    global _discovered
    if _discovered:
        return {"nodes": len(_node_factories)}

    with _discover_lock:
        if not _discovered:
            from . import layers

            for importer, modname, ispkg in pkgutil.iter_modules(layers.__path__):
                try:
                    importlib.import_module(f"{layers.__name__}.{modname}")
                except Exception as e:
                    logger.log("plugin", "ERROR", f"Failed to load plugin module {modname}: {e}",
                               component="loader")
            _discovered = True

    return {"nodes": len(_node_factories)}
