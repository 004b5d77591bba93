"""
Shared constants used across backend modules.
Consolidates hardcoded string literals for node types, error kinds and log categories.
"""
from __future__ import annotations


# ── Node Types ────────────────────────────────────────────────────────────────
# Structural category of a plugin; the graph editor validates connections with
# these, the translator itself never branches on them.

class NodeType:
    """Node type strings exposed in plugin metadata."""
    CUSTOM = "custom"
    TRAINER = "trainer"
    EVALUATOR = "evaluator"
    MODEL = "model"
    MODEL_LAYER = "model_layer"
    DATALOADER = "dataloader"
    DATASET = "dataset"
    OPTIMIZER = "optimizer"
    REPORT = "report"
    FUNCTION = "function"
    LOSS_FUNCTION = "loss_function"

    ALL = frozenset({
        CUSTOM, TRAINER, EVALUATOR, MODEL, MODEL_LAYER, DATALOADER,
        DATASET, OPTIMIZER, REPORT, FUNCTION, LOSS_FUNCTION,
    })


# ── Error Kinds ───────────────────────────────────────────────────────────────
# The ``kind`` field of structured error objects returned to callers.

class ErrorKind:
    UNKNOWN_NODE_TYPE = "unknown_node_type"
    MISSING_REQUIRED_SETTING = "missing_required_setting"
    INVALID_SETTING_VALUE = "invalid_setting_value"
    PLUGIN_RESOLUTION = "plugin_resolution_error"
    INVALID_GRAPH = "invalid_graph"
    INTERNAL = "internal_error"

    # Caused by the submitted graph, safe to show verbatim
    USER_INPUT = frozenset({
        UNKNOWN_NODE_TYPE, MISSING_REQUIRED_SETTING, INVALID_SETTING_VALUE, INVALID_GRAPH,
    })


# ── Log Categories ────────────────────────────────────────────────────────────

LOG_CATEGORIES = ("system", "translation", "plugin")
