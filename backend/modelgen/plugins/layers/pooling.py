"""Pooling layer plugins."""
from __future__ import annotations
from types import MappingProxyType

from ..base import ConstructorSettings, ModelLayerPlugin, Padding2d, PositiveInt, Size2d
from ..loader import register_node


class MaxPool2dSettings(ConstructorSettings):
    kernel_size: Size2d
    # None means "same as kernel_size", torch's own default
    stride: Size2d | None = None
    padding: Padding2d = 0
    dilation: Size2d = 1
    ceil_mode: bool = False


class MaxPool2dPlugin(ModelLayerPlugin):
    """2D max pooling over an input signal."""

    type_key = "MaxPool2d"
    name = "MaxPool2d Layer"
    callee = "torch.nn.MaxPool2d"
    settings_model = MaxPool2dSettings
    suppress_defaults = MappingProxyType({
        "stride": None,
        "padding": 0,
        "dilation": 1,
        "ceil_mode": False,
    })

    def validate(self, s: MaxPool2dSettings) -> None:
        kernels = s.kernel_size if isinstance(s.kernel_size, tuple) else (s.kernel_size,) * 2
        pads = s.padding if isinstance(s.padding, tuple) else (s.padding,) * 2
        if any(p * 2 > k for p, k in zip(pads, kernels)):
            raise self.invalid("padding", "padding should be at most half of kernelSize")

    def constructor_params(self, s: MaxPool2dSettings):
        optional = {
            "stride": s.stride,
            "padding": s.padding,
            "dilation": s.dilation,
            "ceil_mode": s.ceil_mode,
        }
        return {"kernel_size": s.kernel_size}, optional


register_node(MaxPool2dPlugin)
