"""Loss function plugins."""
from __future__ import annotations
from types import MappingProxyType
from typing import Literal

from pydantic import StrictInt

from ...constants import NodeType
from ...services.settings_resolver import PyExpr
from ..base import ConstructorPlugin, ConstructorSettings, DottedName, Identifier, Probability
from ..loader import register_node


class CrossEntropyLossSettings(ConstructorSettings):
    variable_name: Identifier | None = "loss_fn"
    # Name of a tensor variable holding per-class weights
    weight: DottedName | None = None
    ignore_index: StrictInt = -100
    reduction: Literal["mean", "sum", "none"] = "mean"
    label_smoothing: Probability = 0.0


class CrossEntropyLossPlugin(ConstructorPlugin):
    """Cross entropy between input logits and target."""

    type_key = "CrossEntropyLoss"
    name = "Cross Entropy Loss"
    node_type = NodeType.LOSS_FUNCTION
    callee = "torch.nn.CrossEntropyLoss"
    settings_model = CrossEntropyLossSettings
    suppress_defaults = MappingProxyType({
        "ignore_index": -100,
        "reduction": "mean",
        "label_smoothing": 0.0,
    })

    def constructor_params(self, s: CrossEntropyLossSettings):
        optional = {
            "weight": PyExpr(s.weight) if s.weight else None,
            "ignore_index": s.ignore_index,
            "reduction": s.reduction,
            "label_smoothing": s.label_smoothing,
        }
        return {}, optional

    def get_imports(self) -> list[str]:
        return ["import torch"]

    def get_dependencies(self) -> list[str]:
        return ["torch"]


register_node(CrossEntropyLossPlugin)
