"""Fully connected layer plugin."""
from __future__ import annotations
from types import MappingProxyType

from ..base import ConstructorSettings, ModelLayerPlugin, PositiveInt
from ..loader import register_node


class LinearSettings(ConstructorSettings):
    in_features: PositiveInt
    out_features: PositiveInt
    bias: bool = True


class LinearPlugin(ModelLayerPlugin):
    """Applies an affine transformation y = xAᵀ + b."""

    type_key = "Linear"
    name = "Linear Layer"
    callee = "torch.nn.Linear"
    settings_model = LinearSettings
    suppress_defaults = MappingProxyType({"bias": True})

    def constructor_params(self, s: LinearSettings):
        return (
            {"in_features": s.in_features, "out_features": s.out_features},
            {"bias": s.bias},
        )


register_node(LinearPlugin)
