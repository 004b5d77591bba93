"""
Tests for settings resolution and constructor-call building.

Run from the repository root:
    python -m pytest backend/tests/test_settings_resolver.py -v
"""
from __future__ import annotations

import pytest

from modelgen.errors import InvalidSettingValue, MissingRequiredSetting
from modelgen.plugins.base import PluginSettings, PositiveInt
from modelgen.services.settings_resolver import (
    PyExpr, build_arguments, build_constructor, check_required,
    merge_settings, parse_settings, python_literal, same_value,
)


# ─────────────────────────────────────────────────────────────────────────────
# 1. Literal serialization
# ─────────────────────────────────────────────────────────────────────────────

class TestPythonLiteral:

    @pytest.mark.parametrize("value, expected", [
        (True, "True"),
        (False, "False"),
        (None, "None"),
        (3, "3"),
        (-100, "-100"),
        (0.5, "0.5"),
        (1e-08, "1e-08"),
        ("mean", "'mean'"),
        ((3,), "(3,)"),
        ((0.9, 0.999), "(0.9, 0.999)"),
        ([1, "a"], "[1, 'a']"),
        ({"k": 1}, "{'k': 1}"),
    ])
    def test_values(self, value, expected):
        assert python_literal(value) == expected

    def test_expression_is_verbatim(self):
        assert python_literal(PyExpr("model.parameters()")) == "model.parameters()"

    def test_non_finite_floats(self):
        assert python_literal(float("inf")) == 'float("inf")'
        assert python_literal(float("-inf")) == '-float("inf")'
        assert python_literal(float("nan")) == 'float("nan")'

    def test_quotes_are_escaped(self):
        assert python_literal("it's") == '"it\'s"'

    def test_unsupported_type(self):
        with pytest.raises(TypeError):
            python_literal(object())


class TestSameValue:

    def test_bool_is_not_int(self):
        assert not same_value(1, True)
        assert not same_value(True, 1)

    def test_int_is_not_float(self):
        assert not same_value(1, 1.0)

    def test_equal_tuples(self):
        assert same_value((0.9, 0.999), (0.9, 0.999))

    def test_tuple_element_types_compared(self):
        assert not same_value((1, 1), (1, True))

    def test_none(self):
        assert same_value(None, None)
        assert not same_value(0, None)


# ─────────────────────────────────────────────────────────────────────────────
# 2. Argument building
# ─────────────────────────────────────────────────────────────────────────────

class TestBuildArguments:

    def test_required_positional_in_order(self):
        assert build_arguments({"in_features": 784, "out_features": 10}) == "784, 10"

    def test_required_as_keywords(self):
        out = build_arguments({"a": 1, "b": "x"}, positional=False)
        assert out == "a=1, b='x'"

    def test_default_suppressed(self):
        out = build_arguments({"n": 1}, {"bias": True}, {"bias": True})
        assert out == "1"

    def test_non_default_emitted_as_keyword(self):
        out = build_arguments({"n": 1}, {"bias": False}, {"bias": True})
        assert out == "1, bias=False"

    def test_suppression_is_type_exact(self):
        out = build_arguments({}, {"p": 1}, {"p": 1.0})
        assert out == "p=1"

    def test_none_without_suppress_default_left_out(self):
        assert build_arguments({}, {"dim": None}) == ""

    def test_none_differing_from_suppress_default_emitted(self):
        out = build_arguments({}, {"momentum": None}, {"momentum": 0.1})
        assert out == "momentum=None"

    def test_optional_order_kept(self):
        out = build_arguments({}, {"b": 2, "a": 1})
        assert out == "b=2, a=1"

    def test_constructor(self):
        assert build_constructor("torch.nn.Flatten", {}) == "torch.nn.Flatten()"
        assert build_constructor("f", {"x": 1}, {"y": 2}, {"y": 3}) == "f(1, y=2)"


# ─────────────────────────────────────────────────────────────────────────────
# 3. Settings resolution
# ─────────────────────────────────────────────────────────────────────────────

class _Dims(PluginSettings):
    in_features: PositiveInt
    out_features: PositiveInt
    bias: bool = True


_DEFAULTS = {"bias": True}
_REQUIRED = ("inFeatures", "outFeatures")


class TestParseSettings:

    def test_merge_does_not_mutate(self):
        defaults = {"a": 1}
        settings = {"b": 2}
        merged = merge_settings(defaults, settings)
        assert merged == {"a": 1, "b": 2}
        assert defaults == {"a": 1}
        assert settings == {"b": 2}

    def test_caller_overrides_default(self):
        assert merge_settings({"a": 1}, {"a": 5}) == {"a": 5}

    def test_check_required_names_every_missing_key(self):
        with pytest.raises(MissingRequiredSetting) as exc:
            check_required("Linear", {}, _REQUIRED)
        assert exc.value.keys == ("inFeatures", "outFeatures")
        assert exc.value.key is None

    def test_none_counts_as_missing(self):
        with pytest.raises(MissingRequiredSetting) as exc:
            check_required("Linear", {"inFeatures": 1, "outFeatures": None}, _REQUIRED)
        assert exc.value.key == "outFeatures"

    def test_parse_valid(self):
        s = parse_settings("Linear", _Dims, _DEFAULTS, _REQUIRED, {"inFeatures": 4, "outFeatures": 2})
        assert (s.in_features, s.out_features, s.bias) == (4, 2, True)

    def test_out_of_range_value(self):
        with pytest.raises(InvalidSettingValue) as exc:
            parse_settings("Linear", _Dims, _DEFAULTS, _REQUIRED, {"inFeatures": 4, "outFeatures": 0})
        assert exc.value.key == "outFeatures"
        assert exc.value.node_type == "Linear"

    def test_wrong_type_value(self):
        with pytest.raises(InvalidSettingValue) as exc:
            parse_settings("Linear", _Dims, _DEFAULTS, _REQUIRED, {"inFeatures": "4", "outFeatures": 2})
        assert exc.value.key == "inFeatures"

    def test_unknown_key_rejected(self):
        with pytest.raises(InvalidSettingValue) as exc:
            parse_settings("Linear", _Dims, _DEFAULTS, _REQUIRED,
                           {"inFeatures": 4, "outFeatures": 2, "outFeature": 3})
        assert exc.value.key == "outFeature"
        assert exc.value.reason == "unrecognized setting"

    def test_settings_must_be_mapping(self):
        with pytest.raises(InvalidSettingValue) as exc:
            parse_settings("Linear", _Dims, _DEFAULTS, _REQUIRED, [1, 2])
        assert exc.value.key == "settings"

    def test_none_settings_uses_defaults(self):
        with pytest.raises(MissingRequiredSetting):
            parse_settings("Linear", _Dims, _DEFAULTS, _REQUIRED, None)
