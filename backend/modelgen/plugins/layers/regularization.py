"""Regularization layer plugins: Dropout, BatchNorm2d."""
from __future__ import annotations
from types import MappingProxyType

from ..base import ConstructorSettings, ModelLayerPlugin, PositiveFloat, PositiveInt, Probability
from ..loader import register_node


class DropoutSettings(ConstructorSettings):
    p: Probability = 0.5
    inplace: bool = False


class DropoutPlugin(ModelLayerPlugin):
    """Randomly zeroes elements with probability p during training."""

    type_key = "Dropout"
    name = "Dropout"
    callee = "torch.nn.Dropout"
    settings_model = DropoutSettings
    suppress_defaults = MappingProxyType({"p": 0.5, "inplace": False})

    def constructor_params(self, s: DropoutSettings):
        return {}, {"p": s.p, "inplace": s.inplace}


class BatchNorm2dSettings(ConstructorSettings):
    num_features: PositiveInt
    eps: PositiveFloat = 1e-05
    momentum: Probability | None = 0.1
    affine: bool = True
    track_running_stats: bool = True


class BatchNorm2dPlugin(ModelLayerPlugin):
    """Batch normalization over a 4D input."""

    type_key = "BatchNorm2d"
    name = "BatchNorm2d"
    callee = "torch.nn.BatchNorm2d"
    settings_model = BatchNorm2dSettings
    suppress_defaults = MappingProxyType({
        "eps": 1e-05,
        "momentum": 0.1,
        "affine": True,
        "track_running_stats": True,
    })

    def constructor_params(self, s: BatchNorm2dSettings):
        optional = {
            "eps": s.eps,
            "momentum": s.momentum,
            "affine": s.affine,
            "track_running_stats": s.track_running_stats,
        }
        return {"num_features": s.num_features}, optional


register_node(DropoutPlugin)
register_node(BatchNorm2dPlugin)
