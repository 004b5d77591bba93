"""Activation layer plugins: ReLU, Softmax."""
from __future__ import annotations
from types import MappingProxyType

from pydantic import StrictInt

from ..base import ConstructorSettings, ModelLayerPlugin
from ..loader import register_node


class ReLUSettings(ConstructorSettings):
    inplace: bool = False


class ReLUPlugin(ModelLayerPlugin):
    """Rectified linear unit, max(0, x)."""

    type_key = "ReLU"
    name = "ReLU Activation"
    callee = "torch.nn.ReLU"
    settings_model = ReLUSettings
    suppress_defaults = MappingProxyType({"inplace": False})

    def constructor_params(self, s: ReLUSettings):
        return {}, {"inplace": s.inplace}


class SoftmaxSettings(ConstructorSettings):
    dim: StrictInt | None = None


class SoftmaxPlugin(ModelLayerPlugin):
    """Softmax over one dimension."""

    type_key = "Softmax"
    name = "Softmax"
    callee = "torch.nn.Softmax"
    settings_model = SoftmaxSettings

    def constructor_params(self, s: SoftmaxSettings):
        # torch warns on an implicit dim, so it is only left out when unset
        return {}, {"dim": s.dim}


register_node(ReLUPlugin)
register_node(SoftmaxPlugin)
