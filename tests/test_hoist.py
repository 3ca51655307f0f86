"""Tests for hoisted-function construction and call-site rewrites."""

from __future__ import annotations

from typing import Any

import pytest
from reflective_bind.analysis import analyze_closure
from reflective_bind.codegen import emit
from reflective_bind.config import TransformOptions
from reflective_bind.context import UnitContext
from reflective_bind.errors import StructuralInvariantError
from reflective_bind.hoist import (
	add_to_hoist_path,
	ensure_block_body,
	hoist_closure,
	insert_helper_import,
	is_bind_call,
	rewrite_bind_call,
)
from reflective_bind.nodes import identifier, return_statement
from reflective_bind.parser import parse
from reflective_bind.paths import NodePath


def expression(source: str) -> dict[str, Any]:
	return parse(f"({source});")["body"][0]["expression"]


def context(source: str, **options: Any) -> UnitContext:
	return UnitContext(parse(source), TransformOptions(**options))


def first(ctx: UnitContext, kind: str) -> NodePath:
	return next(p for p in ctx.index if p.node["type"] == kind)


PANEL = """
class Panel extends Component {
	render() {
		const f = () => this.props.nested.value;
		return <Row onClick={f} />;
	}
}
"""


def test_is_bind_call():
	assert is_bind_call(expression("fn.bind(this)"))
	assert is_bind_call(expression("this.handle.bind(null, 1, 2)"))
	assert not is_bind_call(expression('fn["bind"](this)'))
	assert not is_bind_call(expression("bind(fn)"))
	assert not is_bind_call(expression("fn.bind"))


def test_ensure_block_body():
	body = expression("a + b")
	block = ensure_block_body(body)
	assert block["type"] == "BlockStatement"
	assert block["body"][0]["type"] == "ReturnStatement"
	assert block["body"][0]["argument"] is body

	existing = {"type": "BlockStatement", "body": []}
	assert ensure_block_body(existing) is existing


def test_add_to_hoist_path_takes_over_leading_comments():
	program = parse("// @flow\nrender();")
	node = return_statement(None)
	add_to_hoist_path(program, node)
	assert program["body"][0] is node
	assert [c["value"] for c in node["leadingComments"]] == [" @flow"]
	assert not program["body"][1].get("leadingComments")


def test_add_to_hoist_path_on_empty_program():
	program = parse("")
	node = return_statement(identifier("a"))
	add_to_hoist_path(program, node)
	assert program["body"] == [node]


class TestRewriteBindCall:
	def test_rewrite(self):
		ctx = context("function render() { const g = this.handle.bind(this, 1, 2); }")
		rewrite_bind_call(first(ctx, "CallExpression"), ctx)
		assert "const g = _rbBabelBind(this.handle, this, 1, 2);" in emit(ctx.program)

	def test_index_is_rebuilt(self):
		ctx = context("g = fn.bind(null);")
		old = first(ctx, "CallExpression")
		new_path = rewrite_bind_call(old, ctx)
		assert old.stale
		assert ctx.index.find(new_path.node) is not None

	def test_rejects_other_calls(self):
		ctx = context("fn(1);")
		with pytest.raises(StructuralInvariantError):
			rewrite_bind_call(first(ctx, "CallExpression"), ctx)

	def test_custom_helper_name(self):
		ctx = context("fn.bind(this);", helper_binding_name="bindIt")
		rewrite_bind_call(first(ctx, "CallExpression"), ctx)
		assert emit(ctx.program) == "_bindIt(fn, this);\n"


class TestHoistClosure:
	def test_captured_and_original_params(self):
		ctx = context(
			"function render() { let a = 1; const h = (c, d) => { let b = 2; return a + b + c + d; }; }"
		)
		closure = first(ctx, "ArrowFunctionExpression")
		hoisted = hoist_closure(closure, analyze_closure(closure, ctx), ctx)
		assert emit(hoisted) == "\n".join(
			[
				"function _rbHoisted(a, c, d) {",
				"  let b = 2;",
				"  return a + b + c + d;",
				"}",
			]
		)
		assert ctx.program["body"][0] is hoisted
		assert "const h = _rbBabelBind(_rbHoisted, this, a);" in emit(ctx.program)

	def test_context_access_parameter(self):
		ctx = context(PANEL)
		closure = first(ctx, "ArrowFunctionExpression")
		hoisted = hoist_closure(closure, analyze_closure(closure, ctx), ctx)
		assert emit(hoisted) == "\n".join(
			[
				"function _rbHoisted(_temp) {",
				"  return _temp.value;",
				"}",
			]
		)
		assert "const f = _rbBabelBind(_rbHoisted, this, this.props.nested);" in emit(
			ctx.program
		)

	def test_hoisted_function_is_tracked(self):
		ctx = context(PANEL)
		closure = first(ctx, "ArrowFunctionExpression")
		hoisted = hoist_closure(closure, analyze_closure(closure, ctx), ctx)
		assert id(hoisted) in ctx.hoisted
		assert closure.stale

	def test_custom_prefix(self):
		ctx = context(PANEL, hoisted_name_prefix="lifted")
		closure = first(ctx, "ArrowFunctionExpression")
		hoisted = hoist_closure(closure, analyze_closure(closure, ctx), ctx)
		assert hoisted["id"]["name"] == "_lifted"

	def test_rejected_closure_raises(self):
		ctx = context("function render() { const f = () => a; let a = 1; }")
		closure = first(ctx, "ArrowFunctionExpression")
		state = analyze_closure(closure, ctx)
		with pytest.raises(StructuralInvariantError):
			hoist_closure(closure, state, ctx)


def test_insert_helper_import():
	ctx = context("render();", helper_module="@app/bind", helper_export_name="bind")
	insert_helper_import(ctx)
	assert emit(ctx.program) == "\n".join(
		[
			'import { bind as _rbBabelBind } from "@app/bind";',
			"render();",
			"",
		]
	)
