"""
Tests for the command-line translator and graph file loading.

Run from the repository root:
    python -m pytest backend/tests/test_cli.py -v
"""
from __future__ import annotations
import json

import pytest

from modelgen.cli import main
from modelgen.errors import InvalidGraph
from modelgen.utils.graph_io import load_graph_file

GRAPH = [
    {"type": "Linear", "settings": {"inFeatures": 784, "outFeatures": 128}},
    {"type": "ReLU", "settings": {}},
]

GRAPH_YAML = """\
fc:
  type: Linear
  settings:
    inFeatures: 784
    outFeatures: 10
act:
  type: Softmax
  settings:
    dim: 1
"""


# ─────────────────────────────────────────────────────────────────────────────
# 1. Graph files
# ─────────────────────────────────────────────────────────────────────────────

class TestGraphFiles:

    def test_json(self, tmp_path):
        path = tmp_path / "graph.json"
        path.write_text(json.dumps(GRAPH))
        graph = load_graph_file(path)
        assert [layer.type for layer in graph.layers] == ["Linear", "ReLU"]

    def test_yaml_keeps_key_order(self, tmp_path):
        path = tmp_path / "graph.yaml"
        path.write_text(GRAPH_YAML)
        graph = load_graph_file(path)
        assert [layer.type for layer in graph.layers] == ["Linear", "Softmax"]

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "graph.txt"
        path.write_text("[]")
        with pytest.raises(InvalidGraph):
            load_graph_file(path)

    def test_broken_json(self, tmp_path):
        path = tmp_path / "graph.json"
        path.write_text("[{")
        with pytest.raises(InvalidGraph):
            load_graph_file(path)

    def test_scalar_document(self, tmp_path):
        path = tmp_path / "graph.yml"
        path.write_text("just a string\n")
        with pytest.raises(InvalidGraph):
            load_graph_file(path)


# ─────────────────────────────────────────────────────────────────────────────
# 2. CLI
# ─────────────────────────────────────────────────────────────────────────────

class TestCli:

    def test_prints_code(self, tmp_path, capsys):
        path = tmp_path / "graph.json"
        path.write_text(json.dumps(GRAPH))
        assert main([str(path)]) == 0
        assert capsys.readouterr().out == "torch.nn.Linear(784, 128)\ntorch.nn.ReLU()\n"

    def test_yaml_with_imports(self, tmp_path, capsys):
        path = tmp_path / "graph.yaml"
        path.write_text(GRAPH_YAML)
        assert main([str(path), "--imports"]) == 0
        assert capsys.readouterr().out == (
            "import torch\n"
            "import torch.nn as nn\n"
            "\n"
            "torch.nn.Linear(784, 10)\n"
            "torch.nn.Softmax(dim=1)\n"
        )

    def test_output_file(self, tmp_path):
        src = tmp_path / "graph.json"
        src.write_text(json.dumps(GRAPH))
        out = tmp_path / "model.py"
        assert main([str(src), "-o", str(out)]) == 0
        assert out.read_text() == "torch.nn.Linear(784, 128)\ntorch.nn.ReLU()\n"

    def test_translation_error(self, tmp_path, capsys):
        path = tmp_path / "graph.json"
        path.write_text(json.dumps([{"type": "NotARealLayer"}]))
        assert main([str(path)]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert json.loads(captured.err)["kind"] == "unknown_node_type"

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "absent.json")]) == 1
        assert "absent.json" in capsys.readouterr().err

    def test_unknown_formatter_choice(self, tmp_path):
        path = tmp_path / "graph.json"
        path.write_text("[]")
        with pytest.raises(SystemExit):
            main([str(path), "--format", "yapf"])
