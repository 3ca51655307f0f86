"""
Per-unit driver: finds rewrite sites, hoists eligible closures, rewrites
`.bind` calls and inserts the helper import.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Any, Literal

from reflective_bind.analysis import analyze_closure
from reflective_bind.codegen import emit
from reflective_bind.config import OPT_OUT_PATTERN, TransformOptions
from reflective_bind.context import UnitContext
from reflective_bind.hoist import (
	hoist_closure,
	insert_helper_import,
	is_bind_call,
	rewrite_bind_call,
)
from reflective_bind.log import set_log_level
from reflective_bind.nodes import is_compat_tag
from reflective_bind.parser import parse
from reflective_bind.paths import NodePath

logger = logging.getLogger(__name__)

Node = dict[str, Any]

DriverState = Literal["idle", "scanning", "finalizing"]

OPT_OUT_COMMENT = " @no-reflective-bind-babel"

# Diagnostics only: rewrites across every unit in this process
_total_transformed = 0


@dataclass
class TransformResult:
	program: Node
	count: int
	skipped: bool = False


@dataclass
class SourceResult:
	code: str
	count: int
	skipped: bool = False


def is_opted_out(program: Node, source: str | None = None) -> bool:
	if source is not None:
		return OPT_OUT_PATTERN.search(source) is not None
	for comment in program.get("comments") or ():
		if comment.get("type") == "Line" and comment.get("value") == OPT_OUT_COMMENT:
			return True
	return False


def default_attachment_predicate(
	container: NodePath, options: TransformOptions
) -> bool:
	"""JSX expression containers whose closures are worth hoisting.

	Attribute values of component elements (never `ref`, and only names
	matching `prop_name_pattern` when one is configured) and expression
	children of component elements. Raw markup tags such as `div` never
	take part, and neither does anything nested in a `ref` callback or in
	a raw tag's attributes.
	"""
	parent = container.parent
	if parent is None or _inside_skipped_subtree(parent):
		return False
	pnode = parent.node
	if pnode["type"] == "JSXAttribute" and container.key == "value":
		name = pnode["name"]
		if name["type"] != "JSXIdentifier":
			return False
		regex = options.prop_name_regex
		if regex is not None and regex.search(name["name"]) is None:
			return False
		opening = parent.parent
		return opening is not None and _is_component(opening.node)
	if pnode["type"] == "JSXElement" and container.key == "children":
		return _is_component(pnode["openingElement"])
	return False


def _inside_skipped_subtree(path: NodePath) -> bool:
	"""Whether `path` is inside a `ref` value or the attributes of a raw tag."""
	for cur in path.ancestry():
		if cur.type == "JSXAttribute":
			name = cur.node["name"]
			if name["type"] == "JSXIdentifier" and name["name"] == "ref":
				return True
		elif cur.type == "JSXOpeningElement":
			name = cur.node["name"]
			if name["type"] == "JSXIdentifier" and is_compat_tag(name["name"]):
				return True
	return False


def _is_component(opening: Node) -> bool:
	name = opening["name"]
	if name["type"] == "JSXIdentifier":
		return not is_compat_tag(name["name"])
	return name["type"] == "JSXMemberExpression"


class Driver:
	"""Runs the scan/rewrite loop for one unit.

	The tree is scanned depth-first in pre-order. Every rewrite invalidates
	all paths, so the index is rebuilt and the scan restarts from the root,
	skipping sites that were already handled. Closures that moved into a
	hoisted function are thereby found after the closure that contained
	them.
	"""

	ctx: UnitContext
	state: DriverState

	def __init__(self, ctx: UnitContext) -> None:
		self.ctx = ctx
		self.state = "idle"

	def run(self) -> int:
		self.state = "scanning"
		while True:
			site = self._next_site()
			if site is None:
				break
			self.ctx.mark_processed(site.node)
			if site.node["type"] == "CallExpression":
				self._process_bind(site)
			else:
				self._process_container(site)
		if self.ctx.count == 0:
			self.state = "idle"
			return 0
		self.state = "finalizing"
		insert_helper_import(self.ctx)
		_add_to_total(self.ctx.count)
		self.state = "idle"
		return self.ctx.count

	def _is_attachment(self, path: NodePath) -> bool:
		options = self.ctx.options
		if options.attachment_predicate is not None:
			return options.attachment_predicate(path)
		return default_attachment_predicate(path, options)

	def _next_site(self) -> NodePath | None:
		for path in self.ctx.index:
			node = path.node
			if self.ctx.is_processed(node):
				continue
			if is_bind_call(node):
				return path
			if node["type"] == "JSXExpressionContainer" and self._is_attachment(path):
				return path
		return None

	# =========================================================================
	# Candidate resolution
	# =========================================================================

	def _process_container(self, container: NodePath) -> None:
		expression = container.node["expression"]
		if expression["type"] == "Identifier":
			expr_path = self.ctx.index.path_of(expression)
			binding = expr_path.scope.get_binding(expression["name"])
			if binding is None:
				return
			roots = [binding.path, *binding.constant_violations]
		else:
			roots = [self.ctx.index.path_of(expression)]

		candidates: list[Node] = []
		for root in roots:
			self._collect(root, candidates)
		for node in candidates:
			path = self._live_path(node)
			if path is None:
				continue
			if node["type"] == "CallExpression":
				self._process_bind(path)
			else:
				self._process_arrow(path)

	def _collect(self, path: NodePath | None, out: list[Node]) -> None:
		"""Follow declarators, assignments, conditionals and logical operands."""
		if path is None:
			return
		node = path.node
		kind = node["type"]
		index = self.ctx.index
		if kind == "VariableDeclarator":
			if node.get("init") is not None:
				self._collect(index.path_of(node["init"]), out)
		elif kind == "AssignmentExpression":
			if node["operator"] == "=":
				self._collect(index.path_of(node["right"]), out)
		elif kind == "ConditionalExpression":
			self._collect(index.path_of(node["consequent"]), out)
			self._collect(index.path_of(node["alternate"]), out)
		elif kind == "LogicalExpression":
			self._collect(index.path_of(node["left"]), out)
			self._collect(index.path_of(node["right"]), out)
		elif kind == "ArrowFunctionExpression" or is_bind_call(node):
			out.append(node)

	def _live_path(self, node: Node) -> NodePath | None:
		return self.ctx.index.find(node)

	# =========================================================================
	# Rewrites
	# =========================================================================

	def _process_bind(self, path: NodePath) -> None:
		logger.debug(self.ctx.msg("Transformed call to 'bind'", path.node))
		new_path = rewrite_bind_call(path, self.ctx)
		self.ctx.mark_processed(new_path.node)
		self.ctx.count += 1

	def _process_arrow(self, path: NodePath) -> None:
		node = path.node
		if self.ctx.is_processed(node):
			return
		self.ctx.mark_processed(node)

		# Hoisting a closure that already sits at the top gains nothing
		parent = path.parent
		if parent is not None and parent.scope is self.ctx.index.program_scope:
			logger.debug(
				self.ctx.msg(
					"Skipping arrow function defined in the outermost scope", node
				)
			)
			return
		if node.get("async") or node.get("generator"):
			logger.debug(self.ctx.msg("Skipping async arrow function", node))
			return

		state = analyze_closure(path, self.ctx)
		if not state.can_hoist:
			return
		logger.debug(self.ctx.msg("Transformed arrow function", node))
		hoist_closure(path, state, self.ctx)
		self.ctx.count += 1


def _add_to_total(count: int) -> None:
	global _total_transformed
	_total_transformed += count
	logger.debug(f"Total inline functions transformed: {_total_transformed}")


def transform(
	program: Node,
	options: TransformOptions | None = None,
	filename: str | None = None,
	source: str | None = None,
) -> TransformResult:
	"""Rewrite one parsed unit.

	Works on a deep copy: if a StructuralInvariantError escapes, the caller's
	tree is untouched.
	"""
	options = options or TransformOptions()
	set_log_level(options.log_level)
	if is_opted_out(program, source):
		return TransformResult(program, 0, skipped=True)
	working = copy.deepcopy(program)
	ctx = UnitContext(working, options, filename)
	count = Driver(ctx).run()
	if count == 0:
		return TransformResult(program, 0)
	return TransformResult(working, count)


def transform_source(
	source: str,
	options: TransformOptions | None = None,
	filename: str | None = None,
) -> SourceResult:
	"""Parse, rewrite and print one unit; untouched units keep their text."""
	options = options or TransformOptions()
	set_log_level(options.log_level)
	if OPT_OUT_PATTERN.search(source) is not None:
		return SourceResult(source, 0, skipped=True)
	program = parse(source, filename)
	result = transform(program, options, filename, source)
	if result.count == 0:
		return SourceResult(source, 0, skipped=result.skipped)
	return SourceResult(emit(result.program), result.count)
