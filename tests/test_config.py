"""Tests for TransformOptions validation and construction."""

from __future__ import annotations

import dataclasses

import pytest
from reflective_bind.config import (
	OPT_OUT_PATTERN,
	StaleRenderPolicy,
	TransformOptions,
)
from reflective_bind.errors import ConfigError


class TestTransformOptions:
	def test_defaults(self):
		options = TransformOptions()
		assert options.hoisted_name_prefix == "rbHoisted"
		assert options.helper_binding_name == "rbBabelBind"
		assert options.helper_module == "reflective-bind"
		assert options.log_level == "off"
		assert options.context_fields == ("props", "state")
		assert options.prop_name_regex is None
		assert options.stale_render is None

	def test_frozen(self):
		options = TransformOptions()
		with pytest.raises(dataclasses.FrozenInstanceError):
			options.log_level = "debug"  # pyright: ignore[reportAttributeAccessIssue]

	def test_invalid_log_level(self):
		with pytest.raises(ConfigError, match="Invalid log level 'verbose'"):
			TransformOptions(log_level="verbose")  # pyright: ignore[reportArgumentType]

	def test_empty_names_are_rejected(self):
		with pytest.raises(ConfigError, match="helper_module"):
			TransformOptions(helper_module="")

	def test_empty_context_fields(self):
		with pytest.raises(ConfigError):
			TransformOptions(context_fields=())

	def test_invalid_prop_pattern(self):
		with pytest.raises(ConfigError, match="Invalid prop name pattern"):
			TransformOptions(prop_name_pattern="on[")

	def test_prop_name_regex(self):
		regex = TransformOptions(prop_name_pattern="^on[A-Z]").prop_name_regex
		assert regex is not None
		assert regex.search("onClick")
		assert not regex.search("render")

	def test_config_error_is_a_value_error(self):
		with pytest.raises(ValueError):
			TransformOptions(log_level="loud")  # pyright: ignore[reportArgumentType]


class TestFromMapping:
	def test_snake_case(self):
		options = TransformOptions.from_mapping(
			{"log_level": "warn", "context_fields": ["props"]}
		)
		assert options.log_level == "warn"
		assert options.context_fields == ("props",)

	def test_plugin_names(self):
		options = TransformOptions.from_mapping(
			{
				"log": "debug",
				"hoistedSlug": "lifted",
				"babelBindSlug": "bindIt",
				"indexModule": "./bind",
				"propRegex": "^on",
			}
		)
		assert options == TransformOptions(
			log_level="debug",
			hoisted_name_prefix="lifted",
			helper_binding_name="bindIt",
			helper_module="./bind",
			prop_name_pattern="^on",
		)

	def test_unknown_option(self):
		with pytest.raises(ConfigError, match="Unknown option 'colour'"):
			TransformOptions.from_mapping({"colour": "red"})

	def test_duplicate_option(self):
		with pytest.raises(ConfigError, match="more than once"):
			TransformOptions.from_mapping({"log": "warn", "log_level": "debug"})


def test_stale_render_policy_defaults():
	policy = StaleRenderPolicy()
	assert "setState" in policy.safe_context_members
	assert "Math" in policy.pure_globals


def test_opt_out_pattern_needs_its_own_line():
	assert OPT_OUT_PATTERN.search("a;\n// @no-reflective-bind-babel\nb;")
	assert not OPT_OUT_PATTERN.search("a; // @no-reflective-bind-babel")
	assert not OPT_OUT_PATTERN.search("/* @no-reflective-bind-babel */")


def test_opt_out_pattern_accepts_crlf_lines():
	assert OPT_OUT_PATTERN.search("// @no-reflective-bind-babel\r\nfoo();\r\n")
	assert OPT_OUT_PATTERN.search("a;\r\n// @no-reflective-bind-babel\r\n")
	assert not OPT_OUT_PATTERN.search("// @no-reflective-bind-babel!\r\n")
