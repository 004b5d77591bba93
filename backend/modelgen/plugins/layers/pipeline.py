"""
Pipeline plugin — a whole training program from its child sections.

Each child (dataset, dataloader, model, optimizer, loss, training function,
trainer, …) is translated through its own plugin and the sections are laid
out in child order, one blank line apart. Dataset and model classes are
followed by an instance of the class, and the import lines every section
needs head the program.
"""
from __future__ import annotations
from typing import Any, Mapping

from ...constants import NodeType
from ...services.assembler import with_imports
from ...services.translator import as_layers, collect_metadata, translate_layer
from ..base import Identifier, NodePlugin, PluginSettings
from ..loader import register_node, resolve


class PipelineSettings(PluginSettings):
    include_imports: bool = True
    # Instance bound after a Dataset / NNModule section; None skips it
    dataset_variable: Identifier | None = "dataset"
    model_variable: Identifier | None = "model"


class PipelinePlugin(NodePlugin):
    """Complete training program composed from nested sections."""

    type_key = "Pipeline"
    name = "PyTorch Pipeline"
    node_type = NodeType.CUSTOM
    input_lines = 7
    settings_model = PipelineSettings
    template = "{section}\n\n{variable} = {class_name}()"

    def get_translation_code(self, settings: Mapping[str, Any] | None, child: Any = None) -> str:
        s: PipelineSettings = self.parse_settings(settings)
        instances = {NodeType.DATASET: s.dataset_variable, NodeType.MODEL: s.model_variable}

        layers = as_layers(child)
        sections: list[str] = []
        for layer in layers:
            section = translate_layer(layer).strip("\n")
            if not section.strip():
                continue
            plugin = resolve(layer.type)
            variable = instances.get(plugin.node_type)
            if variable and "className" in plugin.default_settings:
                class_name = (layer.settings or {}).get("className") or plugin.default_settings["className"]
                section = self.render(section=section, variable=variable, class_name=class_name)
            sections.append(section)

        body = "\n\n".join(sections)
        if not s.include_imports:
            return body
        imports, _ = collect_metadata(layers)
        return with_imports(body, imports)


register_node(PipelinePlugin)
