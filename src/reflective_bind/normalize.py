"""Rewrites `this.<field>[.attr]` accesses into synthetic parameters."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from reflective_bind.errors import StructuralInvariantError
from reflective_bind.nodes import identifier
from reflective_bind.paths import NodePath
from reflective_bind.scope import UidGenerator

Node = dict[str, Any]


@dataclass
class ContextParam:
	name: str
	node: Node


def nodes_definitely_equal(a: Node, b: Node) -> bool:
	"""Structural equality for context accesses.

	Only `this`, identifiers, literals and member expressions built from
	them are supported; anything else raises StructuralInvariantError.
	"""
	if a["type"] != b["type"]:
		return False
	kind = a["type"]
	if kind == "ThisExpression":
		return True
	if kind == "Identifier":
		return a["name"] == b["name"]
	if kind == "Literal":
		if a.get("regex") or b.get("regex"):
			raise StructuralInvariantError(
				"Equality comparison not supported for regular expression literals", a
			)
		return type(a.get("value")) is type(b.get("value")) and a.get("value") == b.get(
			"value"
		)
	if kind == "MemberExpression":
		return (
			bool(a["computed"]) == bool(b["computed"])
			and nodes_definitely_equal(a["object"], b["object"])
			and nodes_definitely_equal(a["property"], b["property"])
		)
	raise StructuralInvariantError(
		f'Equality comparison not supported for node type "{kind}"', a
	)


def normalize_context_accesses(
	paths: Sequence[NodePath], uids: UidGenerator
) -> list[ContextParam]:
	"""Replace each access with a parameter; equal accesses share one."""
	params: list[ContextParam] = []
	for path in paths:
		node = path.node
		for param in params:
			if nodes_definitely_equal(param.node, node):
				path.replace_with(identifier(param.name))
				break
		else:
			param = ContextParam(uids.generate(), node)
			params.append(param)
			path.replace_with(identifier(param.name))
	return params
