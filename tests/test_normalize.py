"""Tests for context-access equality and parameter synthesis."""

from __future__ import annotations

from typing import Any

import pytest
from reflective_bind.analysis import analyze_closure
from reflective_bind.codegen import emit
from reflective_bind.config import TransformOptions
from reflective_bind.context import UnitContext
from reflective_bind.errors import StructuralInvariantError
from reflective_bind.normalize import nodes_definitely_equal, normalize_context_accesses
from reflective_bind.parser import parse


def expression(source: str) -> dict[str, Any]:
	return parse(f"({source});")["body"][0]["expression"]


class TestNodesDefinitelyEqual:
	def test_same_member_chain(self):
		assert nodes_definitely_equal(expression("this.props"), expression("this.props"))
		assert nodes_definitely_equal(
			expression("this.props.a"), expression("this.props.a")
		)

	def test_different_property(self):
		assert not nodes_definitely_equal(
			expression("this.props.a"), expression("this.props.b")
		)

	def test_computed_string_key(self):
		assert nodes_definitely_equal(
			expression('this.props["a"]'), expression("this.props['a']")
		)

	def test_computed_and_dotted_differ(self):
		assert not nodes_definitely_equal(
			expression('this.props["a"]'), expression("this.props.a")
		)

	def test_literal_types_differ(self):
		assert not nodes_definitely_equal(expression("1"), expression('"1"'))

	def test_different_node_types(self):
		assert not nodes_definitely_equal(expression("a"), expression("this"))

	def test_unsupported_node_raises(self):
		with pytest.raises(StructuralInvariantError):
			nodes_definitely_equal(expression("f()"), expression("f()"))

	def test_regex_raises(self):
		with pytest.raises(StructuralInvariantError):
			nodes_definitely_equal(expression("/a/"), expression("/a/"))


def normalized(source: str) -> tuple[list[str], str]:
	"""Normalize the accesses of the only arrow in `source`."""
	ctx = UnitContext(parse(source), TransformOptions())
	closure = next(p for p in ctx.index if p.node["type"] == "ArrowFunctionExpression")
	state = analyze_closure(closure, ctx)
	node = closure.node
	params = normalize_context_accesses(state.context_accesses, ctx.uids)
	return [p.name for p in params], emit(node)


class TestNormalizeContextAccesses:
	def test_equal_accesses_share_a_parameter(self):
		names, code = normalized(
			'function render() { return () => this.props["a"] + this.props["a"]; }'
		)
		assert names == ["_temp"]
		assert code == "() => _temp + _temp"

	def test_distinct_accesses_get_their_own_parameter(self):
		names, code = normalized(
			"function render() { return () => this.props.a(this.state.b); }"
		)
		assert names == ["_temp", "_temp2"]
		assert code == "() => _temp(_temp2)"

	def test_remaining_chain_stays_on_parameter(self):
		names, code = normalized(
			"function render() { return () => this.props.nested.value; }"
		)
		assert names == ["_temp"]
		assert code == "() => _temp.value"

	def test_parameter_names_avoid_existing_names(self):
		names, _ = normalized(
			"function render(_temp) { return () => this.props.x + _temp; }"
		)
		assert names == ["_temp2"]
