"""Builds hoisted functions and helper calls."""

from __future__ import annotations

from typing import Any

from reflective_bind.analysis import AnalysisState
from reflective_bind.context import UnitContext
from reflective_bind.errors import StructuralInvariantError
from reflective_bind.nodes import (
	block_statement,
	call_expression,
	function_declaration,
	identifier,
	import_declaration,
	return_statement,
	this_expression,
)
from reflective_bind.normalize import normalize_context_accesses
from reflective_bind.paths import NodePath

Node = dict[str, Any]


def is_bind_call(node: Node) -> bool:
	"""`expr.bind(...)` with a plain, non-computed `bind` member."""
	if node["type"] != "CallExpression":
		return False
	callee = node["callee"]
	return (
		callee["type"] == "MemberExpression"
		and not callee["computed"]
		and callee["property"]["type"] == "Identifier"
		and callee["property"]["name"] == "bind"
	)


def helper_call(ctx: UnitContext, arguments: list[Node]) -> Node:
	return call_expression(identifier(ctx.helper_name), arguments)


def rewrite_bind_call(path: NodePath, ctx: UnitContext) -> NodePath:
	"""`expr.bind(ctx, ...args)` -> `helper(expr, ctx, ...args)`."""
	node = path.node
	if not is_bind_call(node):
		raise StructuralInvariantError("Not a call to 'bind'", node)
	replacement = helper_call(ctx, [node["callee"]["object"], *node["arguments"]])
	replacement["loc"] = node.get("loc")
	new_path = path.replace_with(replacement)
	ctx.mark_dirty()
	return new_path


def ensure_block_body(body: Node) -> Node:
	if body["type"] == "BlockStatement":
		return body
	# Expression bodies return their value
	return block_statement([return_statement(body)])


def add_to_hoist_path(program: Node, node: Node) -> None:
	"""Unshift onto the program, taking over the first statement's comments."""
	body: list[Node] = program["body"]
	if body:
		first = body[0]
		comments = first.pop("leadingComments", None)
		if comments:
			node["leadingComments"] = comments
	body.insert(0, node)


def hoist_closure(closure: NodePath, state: AnalysisState, ctx: UnitContext) -> Node:
	"""Lift an eligible arrow to the top of the unit and bind it in place.

	The hoisted function takes `[captured..., context params..., params...]`;
	the first two groups are seeded by the helper call that replaces the
	closure, the original parameters stay free.
	"""
	node = closure.node
	if not state.can_hoist:
		raise StructuralInvariantError("Closure was not found hoistable", node)
	context_params = normalize_context_accesses(state.context_accesses, ctx.uids)
	captured = state.captured_names

	name = ctx.uids.generate(ctx.options.hoisted_name_prefix)
	hoisted = function_declaration(
		name,
		[
			*(identifier(n) for n in captured),
			*(identifier(p.name) for p in context_params),
			*node["params"],
		],
		ensure_block_body(node["body"]),
	)
	call = helper_call(
		ctx,
		[
			identifier(name),
			this_expression(),
			*(identifier(n) for n in captured),
			*(p.node for p in context_params),
		],
	)
	call["loc"] = node.get("loc")
	closure.replace_with(call)
	add_to_hoist_path(ctx.program, hoisted)
	ctx.mark_hoisted(hoisted)
	ctx.mark_dirty()
	return hoisted


def insert_helper_import(ctx: UnitContext) -> Node:
	options = ctx.options
	declaration = import_declaration(
		ctx.helper_name, options.helper_export_name, options.helper_module
	)
	add_to_hoist_path(ctx.program, declaration)
	ctx.mark_dirty()
	return declaration
