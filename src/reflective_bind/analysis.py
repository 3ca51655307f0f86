"""Eligibility analysis for hoisting a closure out of its enclosing scope."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from reflective_bind.context import UnitContext
from reflective_bind.errors import StructuralInvariantError
from reflective_bind.nodes import (
	describe,
	is_function,
	is_loop,
	is_referenced,
	is_type_only,
	iter_children,
)
from reflective_bind.ordering import (
	common_ancestor_indices,
	is_ancestor_scope,
	is_definitely_before,
)
from reflective_bind.paths import NodePath
from reflective_bind.scope import Binding, UnitIndex

logger = logging.getLogger(__name__)

Node = dict[str, Any]

_WRITE_PATTERN_TYPES = frozenset(
	{"ArrayPattern", "ObjectPattern", "RestElement", "AssignmentPattern"}
)


@dataclass
class AnalysisFailure:
	name: str
	reason: str
	node: Node


@dataclass(eq=False)
class AnalysisState:
	"""Verdict for one candidate closure; discarded once it is resolved."""

	closure: NodePath
	failure: AnalysisFailure | None = None
	captured: dict[str, None] = field(default_factory=dict)
	context_accesses: list[NodePath] = field(default_factory=list)

	@property
	def can_hoist(self) -> bool:
		return self.failure is None

	@property
	def captured_names(self) -> list[str]:
		return list(self.captured)

	def fail(self, name: str, reason: str, node: Node) -> None:
		if self.failure is None:
			self.failure = AnalysisFailure(name, reason, node)


def analyze_closure(closure: NodePath, ctx: UnitContext) -> AnalysisState:
	"""Walk the closure's params and body, stopping at the first failure."""
	state = AnalysisState(closure)
	index = ctx.index
	stack = _children(closure, index)
	while stack:
		path = stack.pop()
		node = path.node
		kind = node["type"]
		if kind in ("Identifier", "JSXIdentifier"):
			_visit_identifier(path, state, ctx)
		elif kind == "ThisExpression":
			_visit_this(path, state, ctx)
		elif kind == "Super" or (
			kind == "MetaProperty" and node["meta"].get("name") == "new"
		):
			if _same_context(path, closure):
				state.fail(describe(node), "depends on the enclosing function", node)
		if state.failure is not None:
			failure = state.failure
			logger.warning(
				ctx.msg(
					f"Cannot transform arrow function because '{failure.name}' "
					f"{failure.reason}.",
					failure.node,
				)
			)
			break
		stack.extend(_children(path, index))
	return state


def _children(path: NodePath, index: UnitIndex) -> list[NodePath]:
	return [
		index.path_of(child)
		for _, _, child in reversed(list(iter_children(path.node)))
		if not is_type_only(child)
	]


def _same_context(path: NodePath, closure: NodePath) -> bool:
	"""Whether `this` at `path` is the closure's own `this`.

	Only arrows may sit in between. Other functions and class field
	initializers bind their own.
	"""
	for cur in path.ancestry():
		if cur.node is closure.node:
			return True
		if cur.is_field_initializer:
			return False
		if is_function(cur.node) and cur.type != "ArrowFunctionExpression":
			return False
	return False


# =============================================================================
# Identifiers
# =============================================================================


def _visit_identifier(path: NodePath, state: AnalysisState, ctx: UnitContext) -> None:
	node = path.node
	if not is_referenced(node, path.parent_node, path.key):
		return
	name = node["name"]
	closure = state.closure

	if node["type"] == "JSXIdentifier" and name == "this":
		_check_escaping_this(path, state, ctx)
		return

	if _bound_within(path, closure, name):
		return

	parent_scope = closure.scope.parent
	binding = parent_scope.get_binding(name) if parent_scope is not None else None
	if binding is None:
		if name == "arguments" and _same_context(path, closure):
			state.fail(name, "refers to the enclosing function's arguments", node)
		else:
			_check_global(path, state, ctx)
		return
	if id(binding.path.node) in ctx.hoisted:
		return

	if not _is_before_closure(binding, closure):
		state.fail(
			name, "is declared or assigned to after the arrow function definition", node
		)
		return
	state.captured[name] = None
	_log_nested_access(path, ctx)


def _bound_within(path: NodePath, closure: NodePath, name: str) -> bool:
	"""True if `name` is declared between the reference and the closure scope."""
	scope = path.scope
	while scope is not None:
		if scope.has_own_binding(name):
			return True
		if scope is closure.scope:
			return False
		scope = scope.parent
	raise StructuralInvariantError(
		"identifier has no valid binding and the closure scope is not an ancestor",
		path.node,
	)


def _is_before_closure(binding: Binding, closure: NodePath) -> bool:
	if binding.scope is not closure.scope and not is_ancestor_scope(
		binding.scope, closure.scope
	):
		raise StructuralInvariantError(
			"binding's scope must be equal to or an ancestor of the closure scope",
			binding.path.node,
		)
	if not is_definitely_before(binding.path, closure):
		return False
	if binding.kind == "var" and _may_run_again(binding.path, closure, binding):
		return False
	if not binding.reassignable:
		return True
	for site in binding.constant_violations:
		if not is_definitely_before(site, closure):
			return False
		if _may_run_again(site, closure, binding):
			return False
	return True


def _may_run_again(site: NodePath, closure: NodePath, binding: Binding) -> bool:
	"""Whether `site` can execute again after the closure was created.

	That happens when a loop or function between the two positions and the
	binding's scope re-enters code that writes the shared binding, or when
	the closure lives in a function declaration that can be called before
	`site` runs.
	"""
	ancestry_site = site.ancestry()
	ancestry_closure = closure.ancestry()
	i, j = common_ancestor_indices(ancestry_site, ancestry_closure)
	if i <= 0 or j <= 0:
		return True
	rel = ancestry_closure[j - 1].node
	if rel["type"] == "FunctionDeclaration" or (
		rel["type"] in ("ExportNamedDeclaration", "ExportDefaultDeclaration")
		and (rel.get("declaration") or {}).get("type") == "FunctionDeclaration"
	):
		return True
	for ancestor in ancestry_site[i:]:
		node = ancestor.node
		if node is binding.scope.block:
			break
		if is_loop(node) or is_function(node) or ancestor.is_field_initializer:
			return True
	return False


def _check_global(path: NodePath, state: AnalysisState, ctx: UnitContext) -> None:
	policy = ctx.options.stale_render
	if policy is None:
		return
	name = path.node["name"]
	if name in policy.pure_globals or name == "undefined":
		return
	if _is_call_root(path):
		state.fail(name, "is a global that is not known to be pure", path.node)


def _is_call_root(path: NodePath) -> bool:
	"""`name(...)`, `name.a.b(...)` or `new name(...)`."""
	cur = path
	parent = cur.parent
	while (
		parent is not None
		and parent.node["type"] == "MemberExpression"
		and cur.key == "object"
	):
		cur = parent
		parent = cur.parent
	return (
		parent is not None
		and parent.node["type"] in ("CallExpression", "NewExpression")
		and cur.key == "callee"
	)


def _log_nested_access(path: NodePath, ctx: UnitContext) -> None:
	if not logger.isEnabledFor(logging.INFO):
		return
	parent = path.parent
	if parent is None or parent.node["type"] != "MemberExpression":
		return
	if path.key != "object":
		return
	grand = parent.parent
	if grand is None or grand.node["type"] == "CallExpression":
		return
	logger.info(
		ctx.msg(
			f"Accessing nested property '{describe(parent.node)}'. Consider pulling "
			"the nested property value out to a constant and closing over the "
			"constant.",
			path.node,
		)
	)


# =============================================================================
# `this`
# =============================================================================


def _visit_this(path: NodePath, state: AnalysisState, ctx: UnitContext) -> None:
	if not _same_context(path, state.closure):
		return
	access = _context_access(path, ctx)
	if access is None:
		_check_escaping_this(path, state, ctx)
		return
	_log_nested_access(access, ctx)
	state.context_accesses.append(access)


def _context_access(path: NodePath, ctx: UnitContext) -> NodePath | None:
	"""`this.<field>` or `this.<field>.<attr>` to turn into a parameter."""
	parent = path.parent
	if parent is None or path.key != "object":
		return None
	member = parent.node
	if member["type"] != "MemberExpression" or member["computed"]:
		return None
	prop = member["property"]
	if prop["type"] != "Identifier" or prop["name"] not in ctx.options.context_fields:
		return None
	# `this.props(...)` keeps its receiver
	if parent.key == "callee" and parent.parent_node is not None:
		if parent.parent_node["type"] in ("CallExpression", "NewExpression"):
			return None
	if _is_write_target(parent):
		return None

	grand = parent.parent
	if (
		grand is not None
		and parent.key == "object"
		and grand.node["type"] == "MemberExpression"
		and (
			not grand.node["computed"] or grand.node["property"]["type"] == "Literal"
		)
		and not _is_write_target(grand)
	):
		return grand
	return parent


def _is_write_target(path: NodePath) -> bool:
	parent = path.parent
	while parent is not None and parent.node["type"] in _WRITE_PATTERN_TYPES:
		if parent.node["type"] == "AssignmentPattern" and path.key != "left":
			return False
		path, parent = parent, parent.parent
	if parent is None:
		return False
	kind = parent.node["type"]
	if kind == "AssignmentExpression":
		return path.key == "left"
	if kind == "UpdateExpression":
		return True
	if kind == "UnaryExpression":
		return parent.node["operator"] == "delete"
	if kind in ("ForInStatement", "ForOfStatement"):
		return path.key == "left"
	if kind == "Property":
		# Object pattern members used as assignment targets
		grand = parent.parent
		return (
			path.key == "value"
			and grand is not None
			and grand.node["type"] == "ObjectPattern"
			and _is_write_target(grand)
		)
	return False


def _check_escaping_this(path: NodePath, state: AnalysisState, ctx: UnitContext) -> None:
	policy = ctx.options.stale_render
	if policy is None or not _same_context(path, state.closure):
		return
	parent = path.parent
	if parent is not None:
		pnode = parent.node
		if (
			pnode["type"] == "MemberExpression"
			and path.key == "object"
			and not pnode["computed"]
			and pnode["property"].get("name") in policy.safe_context_members
		):
			return
		if (
			pnode["type"] == "CallExpression"
			and path.key == "arguments"
			and path.index == 1
			and pnode["callee"]["type"] == "Identifier"
			and pnode["callee"]["name"] == ctx.helper_name
		):
			return
	state.fail("this", "escapes the render that created the arrow function", path.node)
