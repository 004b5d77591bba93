"""
nn.Module container plugin.

The node's ``child`` layers become attributes assigned in ``__init__``
(``self.layer_0``, ``self.layer_1``, … or the child's own ``variableName``),
and ``dataFlow`` becomes the body of ``forward``. Bare references to those
attributes in ``dataFlow`` get a ``self.`` prefix; string literals, comments
and keyword argument names are left as written. With no ``dataFlow`` and a
single forward parameter the layers are chained in order.
"""
from __future__ import annotations
import io
import keyword
import re
import tokenize
from typing import Any, Mapping

from ...constants import NodeType
from ...services.templates import body_or_pass, indent_code
from ...services.translator import as_layers
from ..base import Identifier, NodePlugin, PluginSettings
from ..loader import register_node, resolve

_LAYER_NAME = re.compile(r"layer_\d+")
_ASSIGN_OPS = frozenset({
    "=", ":=", "+=", "-=", "*=", "/=", "//=", "%=", "**=",
    "@=", "&=", "|=", "^=", ">>=", "<<=",
})
_OPENERS = frozenset("([{")
_CLOSERS = frozenset(")]}")


class NNModuleSettings(PluginSettings):
    class_name: Identifier = "NeuralNetwork"
    constructor_params: tuple[Identifier, ...] = ()
    forward_params: tuple[Identifier, ...] = ("x",)
    data_flow: str = ""


class NNModulePlugin(NodePlugin):
    """A torch.nn.Module subclass built from nested layers."""

    type_key = "NNModule"
    name = "PyTorch NN Module"
    node_type = NodeType.MODEL
    input_lines = 0
    settings_model = NNModuleSettings
    template = (
        "class {class_name}(nn.Module):\n"
        "    def __init__({init_params}):\n"
        "{init_body}\n"
        "\n"
        "    def forward({forward_params}):\n"
        "{forward_body}"
    )

    def get_translation_code(self, settings: Mapping[str, Any] | None, child: Any = None) -> str:
        s: NNModuleSettings = self.parse_settings(settings)

        attrs: list[str] = []
        init_lines = ["super().__init__()"]
        for index, layer in enumerate(as_layers(child)):
            layer_settings = dict(layer.settings or {})
            attr = layer_settings.pop("variableName", None) or f"layer_{index}"
            if not isinstance(attr, str) or not attr.isidentifier() or keyword.iskeyword(attr) or attr == "self":
                raise self.invalid("child", f"child {index} has an invalid variableName: {attr!r}")
            if attr in attrs:
                raise self.invalid("child", f"duplicate layer attribute {attr!r}")
            plugin = resolve(layer.type)
            # Bound only as the attribute, never to the plugin's default variable
            if "variableName" in plugin.default_settings:
                layer_settings["variableName"] = None
            code = plugin.get_translation_code(layer_settings, layer.child)
            if "\n" in code.strip():
                raise self.invalid("child", f"child {index} ({layer.type}) is not a single-expression layer")
            attrs.append(attr)
            init_lines.append(f"self.{attr} = {code.strip()}")

        if s.data_flow.strip():
            forward = self._resolve_data_flow(s.data_flow, attrs)
        elif len(s.forward_params) == 1:
            x = s.forward_params[0]
            forward = "\n".join([f"{x} = self.{a}({x})" for a in attrs] + [f"return {x}"])
        else:
            forward = ""

        return self.render(
            class_name=s.class_name,
            init_params=", ".join(("self",) + s.constructor_params),
            init_body=indent_code("\n".join(init_lines), 2),
            forward_params=", ".join(("self",) + s.forward_params),
            forward_body=body_or_pass(forward, 2),
        )

    def _resolve_data_flow(self, data_flow: str, attrs: list[str]) -> str:
        """Prefix bare layer attribute references in ``data_flow`` with ``self.``."""
        lines = [line.rstrip() for line in data_flow.strip("\n").split("\n")]
        try:
            tokens = list(tokenize.generate_tokens(io.StringIO("\n".join(lines) + "\n").readline))
        except (tokenize.TokenError, SyntaxError) as e:
            raise self.invalid("dataFlow", f"cannot be tokenized: {e}") from e

        inserts: list[tuple[int, int]] = []
        depth = 0
        statement_start = 0
        for i, tok in enumerate(tokens):
            if tok.type == tokenize.NEWLINE:
                statement_start = i + 1
                continue
            if tok.type == tokenize.OP:
                if tok.string in _OPENERS:
                    depth += 1
                elif tok.string in _CLOSERS:
                    depth = max(depth - 1, 0)
                elif tok.string == ";" and depth == 0:
                    statement_start = i + 1
                elif tok.string == ":=":
                    self._check_targets(tokens, i - 1, i, attrs)
                elif tok.string in _ASSIGN_OPS and depth == 0:
                    self._check_targets(tokens, statement_start, i, attrs)
                continue
            if tok.type != tokenize.NAME:
                continue

            prev, after = _neighbours(tokens, i)
            if prev is not None and tokens[prev].string == ".":
                continue
            if tok.string == "self":
                if after is not None and tokens[after].string == ".":
                    name = _neighbours(tokens, after)[1]
                    ref = tokens[name] if name is not None else None
                    if ref is not None and _LAYER_NAME.fullmatch(ref.string) and ref.string not in attrs:
                        raise self.invalid(
                            "dataFlow", f"undefined layer 'self.{ref.string}' at line {ref.start[0]}")
                continue
            if tok.string not in attrs:
                continue
            # Keyword argument names inside a call
            if depth > 0 and after is not None and tokens[after].string == "=":
                continue
            inserts.append(tok.start)

        for row, col in sorted(inserts, reverse=True):
            line = lines[row - 1]
            lines[row - 1] = f"{line[:col]}self.{line[col:]}"
        return "\n".join(lines)

    def _check_targets(self, tokens: list[tokenize.TokenInfo], start: int, stop: int, attrs: list[str]) -> None:
        """Raise if a name in ``tokens[start:stop]`` rebinds a layer attribute."""
        depth = 0
        for i in range(max(start, 0), stop):
            tok = tokens[i]
            if tok.type == tokenize.OP and tok.string in _OPENERS:
                depth += 1
            elif tok.type == tokenize.OP and tok.string in _CLOSERS:
                depth = max(depth - 1, 0)
            elif tok.type == tokenize.NAME and tok.string in attrs and depth == 0:
                prev, after = _neighbours(tokens, i)
                if prev is not None and tokens[prev].string == ".":
                    continue
                if after is not None and tokens[after].string in (".", "[", "("):
                    continue
                raise self.invalid(
                    "dataFlow", f"cannot assign to layer attribute {tok.string!r} at line {tok.start[0]}")

    def get_imports(self) -> list[str]:
        return ["import torch", "import torch.nn as nn"]

    def get_dependencies(self) -> list[str]:
        return ["torch"]


_SKIPPED = (tokenize.NL, tokenize.COMMENT, tokenize.INDENT, tokenize.DEDENT)


def _neighbours(tokens, index):
    """Indexes of the nearest tokens before and after ``index`` that carry code."""
    prev = next((i for i in range(index - 1, -1, -1) if tokens[i].type not in _SKIPPED), None)
    after = next((i for i in range(index + 1, len(tokens)) if tokens[i].type not in _SKIPPED), None)
    return prev, after


register_node(NNModulePlugin)
