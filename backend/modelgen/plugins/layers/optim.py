"""Optimizer plugins: Adam, SGD."""
from __future__ import annotations
from types import MappingProxyType
from typing import Annotated

from pydantic import Field

from ...constants import NodeType
from ...services.settings_resolver import PyExpr
from ..base import ConstructorPlugin, ConstructorSettings, Identifier, PositiveFloat
from ..loader import register_node

NonNegativeFloat = Annotated[float, Field(ge=0.0)]
Beta = Annotated[float, Field(ge=0.0, lt=1.0)]


class _OptimizerSettings(ConstructorSettings):
    variable_name: Identifier | None = "optimizer"
    # Expression yielding the parameters to optimize
    params: Annotated[str, Field(min_length=1)] = "model.parameters()"
    lr: PositiveFloat = 0.001
    weight_decay: NonNegativeFloat = 0.0


class _OptimizerPlugin(ConstructorPlugin):
    node_type = NodeType.OPTIMIZER
    input_lines = 0

    def get_imports(self) -> list[str]:
        return ["import torch"]

    def get_dependencies(self) -> list[str]:
        return ["torch"]


class AdamSettings(_OptimizerSettings):
    betas: tuple[Beta, Beta] = (0.9, 0.999)
    eps: PositiveFloat = 1e-08
    amsgrad: bool = False


class OptimAdamPlugin(_OptimizerPlugin):
    """Adam optimizer over the model's parameters."""

    type_key = "OptimAdam"
    name = "PyTorch Optimizer Adam"
    callee = "torch.optim.Adam"
    settings_model = AdamSettings
    suppress_defaults = MappingProxyType({
        "lr": 0.001,
        "betas": (0.9, 0.999),
        "eps": 1e-08,
        "weight_decay": 0.0,
        "amsgrad": False,
    })

    def constructor_params(self, s: AdamSettings):
        optional = {
            "lr": s.lr,
            "betas": s.betas,
            "eps": s.eps,
            "weight_decay": s.weight_decay,
            "amsgrad": s.amsgrad,
        }
        return {"params": PyExpr(s.params)}, optional


class SGDSettings(_OptimizerSettings):
    momentum: NonNegativeFloat = 0.0
    dampening: NonNegativeFloat = 0.0
    nesterov: bool = False


class OptimSGDPlugin(_OptimizerPlugin):
    """Stochastic gradient descent, optionally with momentum."""

    type_key = "OptimSGD"
    name = "PyTorch Optimizer SGD"
    callee = "torch.optim.SGD"
    settings_model = SGDSettings
    suppress_defaults = MappingProxyType({
        "lr": 0.001,
        "momentum": 0.0,
        "dampening": 0.0,
        "weight_decay": 0.0,
        "nesterov": False,
    })

    def validate(self, s: SGDSettings) -> None:
        if s.nesterov and (s.momentum <= 0 or s.dampening != 0):
            raise self.invalid("nesterov", "Nesterov momentum requires a momentum and zero dampening")

    def constructor_params(self, s: SGDSettings):
        optional = {
            "lr": s.lr,
            "momentum": s.momentum,
            "dampening": s.dampening,
            "weight_decay": s.weight_decay,
            "nesterov": s.nesterov,
        }
        return {"params": PyExpr(s.params)}, optional


register_node(OptimAdamPlugin)
register_node(OptimSGDPlugin)
