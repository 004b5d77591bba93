"""
Data plugins:
  - Dataset    : a torch.utils.data.Dataset subclass skeleton, with user code
                 spliced into __init__, __len__ and __getitem__
  - Dataloader : a DataLoader over a dataset variable
"""
from __future__ import annotations
from types import MappingProxyType
from typing import Any, Mapping

from ...constants import NodeType
from ...services.settings_resolver import PyExpr
from ...services.templates import body_or_pass
from ..base import (
    ConstructorPlugin, ConstructorSettings, DottedName, Identifier,
    NodePlugin, NonNegativeInt, PluginSettings, PositiveInt,
)
from ..loader import register_node


# ─── Dataset ─────────────────────────────────────────────────────────────────

class DatasetSettings(PluginSettings):
    class_name: Identifier = "CustomDataset"
    constructor_params: tuple[Identifier, ...] = ("self",)
    init_code: str = ""
    len_params: tuple[Identifier, ...] = ("self",)
    len_code: str = ""
    getitem_params: tuple[Identifier, ...] = ("self", "idx")
    getitem_code: str = ""


class DatasetPlugin(NodePlugin):
    """Custom map-style dataset class."""

    type_key = "Dataset"
    name = "PyTorch NN Dataset"
    node_type = NodeType.DATASET
    input_lines = 0
    settings_model = DatasetSettings
    template = (
        "class {class_name}(Dataset):\n"
        "    def __init__({constructor_params}):\n"
        "{init_body}\n"
        "\n"
        "    def __len__({len_params}):\n"
        "{len_body}\n"
        "\n"
        "    def __getitem__({getitem_params}):\n"
        "{getitem_body}"
    )

    def get_translation_code(self, settings: Mapping[str, Any] | None, child: Any = None) -> str:
        self.reject_child(child)
        s: DatasetSettings = self.parse_settings(settings)
        for key, params in (
            ("constructorParams", s.constructor_params),
            ("lenParams", s.len_params),
            ("getitemParams", s.getitem_params),
        ):
            if not params:
                raise self.invalid(key, "a method needs at least the 'self' parameter")

        return self.render(
            class_name=s.class_name,
            constructor_params=", ".join(s.constructor_params),
            init_body=body_or_pass(s.init_code, 2),
            len_params=", ".join(s.len_params),
            len_body=body_or_pass(s.len_code, 2),
            getitem_params=", ".join(s.getitem_params),
            getitem_body=body_or_pass(s.getitem_code, 2),
        )

    def get_imports(self) -> list[str]:
        return ["from torch.utils.data import Dataset"]

    def get_dependencies(self) -> list[str]:
        return ["torch"]


# ─── Dataloader ──────────────────────────────────────────────────────────────

class DataloaderSettings(ConstructorSettings):
    variable_name: Identifier | None = "data_loader"
    dataset_variable: DottedName
    batch_size: PositiveInt = 1
    shuffle: bool = False
    num_workers: NonNegativeInt = 0
    drop_last: bool = False
    pin_memory: bool = False


class DataloaderPlugin(ConstructorPlugin):
    """Batches and optionally shuffles a dataset."""

    type_key = "Dataloader"
    name = "PyTorch DataLoader"
    node_type = NodeType.DATALOADER
    input_lines = 0
    callee = "DataLoader"
    settings_model = DataloaderSettings
    suppress_defaults = MappingProxyType({
        "batch_size": 1,
        "shuffle": False,
        "num_workers": 0,
        "drop_last": False,
        "pin_memory": False,
    })

    def constructor_params(self, s: DataloaderSettings):
        optional = {
            "batch_size": s.batch_size,
            "shuffle": s.shuffle,
            "num_workers": s.num_workers,
            "drop_last": s.drop_last,
            "pin_memory": s.pin_memory,
        }
        return {"dataset": PyExpr(s.dataset_variable)}, optional

    def get_imports(self) -> list[str]:
        return ["from torch.utils.data import DataLoader"]

    def get_dependencies(self) -> list[str]:
        return ["torch"]


register_node(DatasetPlugin)
register_node(DataloaderPlugin)
