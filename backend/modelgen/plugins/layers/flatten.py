"""Flatten layer plugin."""
from __future__ import annotations
from types import MappingProxyType

from pydantic import StrictInt

from ..base import ConstructorSettings, ModelLayerPlugin
from ..loader import register_node


class FlattenSettings(ConstructorSettings):
    start_dim: StrictInt = 1
    end_dim: StrictInt = -1


class FlattenPlugin(ModelLayerPlugin):
    """Flattens a contiguous range of dims into one tensor dimension."""

    type_key = "Flatten"
    name = "Flatten"
    callee = "torch.nn.Flatten"
    settings_model = FlattenSettings
    suppress_defaults = MappingProxyType({"start_dim": 1, "end_dim": -1})

    def validate(self, s: FlattenSettings) -> None:
        if s.start_dim >= 0 and s.end_dim >= 0 and s.end_dim < s.start_dim:
            raise self.invalid("endDim", "endDim must not come before startDim")

    def constructor_params(self, s: FlattenSettings):
        return {}, {"start_dim": s.start_dim, "end_dim": s.end_dim}


register_node(FlattenPlugin)
