"""2D convolution plugin."""
from __future__ import annotations
from types import MappingProxyType
from typing import Literal

from ..base import ConstructorSettings, ModelLayerPlugin, Padding2d, PositiveInt, Size2d
from ..loader import register_node


class Conv2dSettings(ConstructorSettings):
    in_channels: PositiveInt
    out_channels: PositiveInt
    kernel_size: Size2d
    stride: Size2d = 1
    padding: Padding2d | Literal["same", "valid"] = 0
    dilation: Size2d = 1
    groups: PositiveInt = 1
    bias: bool = True
    padding_mode: Literal["zeros", "reflect", "replicate", "circular"] = "zeros"


class Conv2dPlugin(ModelLayerPlugin):
    """2D convolution over an input signal composed of several planes."""

    type_key = "Conv2d"
    name = "Conv2d Layer"
    callee = "torch.nn.Conv2d"
    settings_model = Conv2dSettings
    suppress_defaults = MappingProxyType({
        "stride": 1,
        "padding": 0,
        "dilation": 1,
        "groups": 1,
        "bias": True,
        "padding_mode": "zeros",
    })

    def validate(self, s: Conv2dSettings) -> None:
        if s.in_channels % s.groups or s.out_channels % s.groups:
            raise self.invalid("groups", "inChannels and outChannels must both be divisible by groups")

    def constructor_params(self, s: Conv2dSettings):
        required = {
            "in_channels": s.in_channels,
            "out_channels": s.out_channels,
            "kernel_size": s.kernel_size,
        }
        optional = {
            "stride": s.stride,
            "padding": s.padding,
            "dilation": s.dilation,
            "groups": s.groups,
            "bias": s.bias,
            "padding_mode": s.padding_mode,
        }
        return required, optional


register_node(Conv2dPlugin)
