"""
Training loop plugins:
  - ReportLoss     : ``if <condition>:`` block reporting the running loss
  - TrainOneEpoch  : one-epoch training function; its child (usually a
                     ReportLoss node) is embedded inside the batch loop
  - Trainer        : the epoch loop calling the training function
"""
from __future__ import annotations
from typing import Any, Mapping

from ...constants import NodeType
from ...services.templates import indent_code
from ...services.translator import as_layers, translate_layer
from ..base import Identifier, NodePlugin, PluginSettings, PositiveInt
from ..loader import register_node


# ─── ReportLoss ──────────────────────────────────────────────────────────────

class ReportLossSettings(PluginSettings):
    report_condition: str = "batch_no % 1000 == 999"
    report_statements: str = (
        "last_loss = running_loss / 1000\n"
        "print(f\"  batch {batch_no + 1} loss: {last_loss}\")"
    )
    reset_running_loss: bool = True


class ReportLossPlugin(NodePlugin):
    """Periodic loss report inside a training loop."""

    type_key = "ReportLoss"
    name = "Report Loss"
    node_type = NodeType.REPORT
    settings_model = ReportLossSettings
    template = "if {condition}:\n{statements}{reset}"

    def get_translation_code(self, settings: Mapping[str, Any] | None, child: Any = None) -> str:
        self.reject_child(child)
        s: ReportLossSettings = self.parse_settings(settings)
        condition = s.report_condition.strip()
        statements = s.report_statements.strip("\n")
        # Nothing to report: the block is left out entirely
        if not condition or not statements.strip():
            return ""
        if "\n" in condition:
            raise self.invalid("reportCondition", "condition must be a single line")
        reset = "\n" + indent_code("running_loss = 0.", 1) if s.reset_running_loss else ""
        return self.render(condition=condition, statements=indent_code(statements, 1), reset=reset)


# ─── TrainOneEpoch ───────────────────────────────────────────────────────────

class TrainOneEpochSettings(PluginSettings):
    function_name: Identifier = "train_one_epoch"
    destructure_data_variables: tuple[Identifier, ...] = ("inputs", "labels")
    model_input_order: tuple[Identifier, ...] = ("inputs",)
    model_output_variables: tuple[Identifier, ...] = ("outputs",)
    loss_function_inputs: tuple[Identifier, ...] = ("outputs", "labels")


class TrainOneEpochPlugin(NodePlugin):
    """Function running one epoch of optimisation over a dataloader."""

    type_key = "TrainOneEpoch"
    name = "PyTorch Train One Epoch"
    node_type = NodeType.FUNCTION
    input_lines = 0
    settings_model = TrainOneEpochSettings
    template = (
        "def {function_name}(epoch_index, optimizer, dataloader, model, loss_fn):\n"
        "    running_loss = 0.\n"
        "    last_loss = 0.\n"
        "\n"
        "    for batch_no, data in enumerate(dataloader):\n"
        "        {destructure} = data\n"
        "        optimizer.zero_grad()\n"
        "        {model_outputs} = model({model_inputs})\n"
        "        loss = loss_fn({loss_inputs})\n"
        "        loss.backward()\n"
        "        optimizer.step()\n"
        "        running_loss += loss.item(){report_code}\n"
        "\n"
        "    return last_loss"
    )

    def get_translation_code(self, settings: Mapping[str, Any] | None, child: Any = None) -> str:
        s: TrainOneEpochSettings = self.parse_settings(settings)
        for key, names in (
            ("destructureDataVariables", s.destructure_data_variables),
            ("modelInputOrder", s.model_input_order),
            ("modelOutputVariables", s.model_output_variables),
            ("lossFunctionInputs", s.loss_function_inputs),
        ):
            if not names:
                raise self.invalid(key, "at least one variable is required")

        blocks = [translate_layer(layer).strip("\n") for layer in as_layers(child)]
        report = "\n".join(b for b in blocks if b.strip())
        return self.render(
            function_name=s.function_name,
            destructure=", ".join(s.destructure_data_variables),
            model_outputs=", ".join(s.model_output_variables),
            model_inputs=", ".join(s.model_input_order),
            loss_inputs=", ".join(s.loss_function_inputs),
            report_code="\n" + indent_code(report, 2) if report else "",
        )


# ─── Trainer ─────────────────────────────────────────────────────────────────

class TrainerSettings(PluginSettings):
    num_epochs: PositiveInt = 1
    train_function_name: Identifier = "train_one_epoch"
    optimizer_variable: Identifier = "optimizer"
    dataloader_variable: Identifier = "data_loader"
    model_variable: Identifier = "model"
    loss_function_variable: Identifier = "loss_fn"
    avg_loss_variable: Identifier = "avg_loss"
    additional_code: str = ""


class TrainerPlugin(NodePlugin):
    """Epoch loop driving the one-epoch training function."""

    type_key = "Trainer"
    name = "PyTorch Trainer"
    node_type = NodeType.TRAINER
    input_lines = 0
    settings_model = TrainerSettings
    template = (
        "for epoch_index in range({num_epochs}):\n"
        "    {model}.train(True)\n"
        "    {avg_loss} = {train_fn}(epoch_index, {optimizer}, {dataloader}, {model}, {loss_fn}){additional}"
    )

    def get_translation_code(self, settings: Mapping[str, Any] | None, child: Any = None) -> str:
        self.reject_child(child)
        s: TrainerSettings = self.parse_settings(settings)
        extra = s.additional_code.strip("\n")
        return self.render(
            num_epochs=s.num_epochs,
            model=s.model_variable,
            avg_loss=s.avg_loss_variable,
            train_fn=s.train_function_name,
            optimizer=s.optimizer_variable,
            dataloader=s.dataloader_variable,
            loss_fn=s.loss_function_variable,
            additional="\n" + indent_code(extra, 1) if extra.strip() else "",
        )


register_node(ReportLossPlugin)
register_node(TrainOneEpochPlugin)
register_node(TrainerPlugin)
