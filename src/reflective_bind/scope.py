"""Scope tree, bindings and the per-unit path index.

The tree is crawled in one pre-order pass. The first pass creates a path for
every node, builds the scope tree and registers declarations; a second pass
attaches reassignment sites to the bindings they target once every hoisted
declaration is known. Any mutation of the tree invalidates the whole index;
callers rebuild it rather than patching it.
"""

from __future__ import annotations

import itertools
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Literal

from reflective_bind.errors import StructuralInvariantError
from reflective_bind.nodes import (
	CLASS_TYPES,
	FUNCTION_TYPES,
	is_function,
	is_node,
	is_type_only,
	iter_children,
)
from reflective_bind.paths import NodePath

Node = dict[str, Any]

ScopeKind = Literal["program", "function", "class", "block", "catch", "for", "switch"]
BindingKind = Literal["var", "let", "const", "hoisted", "local", "param", "module"]

_FOR_TYPES = frozenset({"ForStatement", "ForInStatement", "ForOfStatement"})
_IMPORT_SPECIFIERS = frozenset(
	{"ImportSpecifier", "ImportDefaultSpecifier", "ImportNamespaceSpecifier"}
)

_scope_ids = itertools.count(1)


@dataclass(eq=False)
class Binding:
	name: str
	kind: BindingKind
	path: NodePath
	scope: Scope
	constant_violations: list[NodePath] = field(default_factory=list)

	@property
	def reassignable(self) -> bool:
		return self.kind != "const" or bool(self.constant_violations)

	def reassign(self, path: NodePath) -> None:
		self.constant_violations.append(path)


@dataclass(eq=False)
class Scope:
	kind: ScopeKind
	block: Node
	parent: Scope | None
	bindings: dict[str, Binding] = field(default_factory=dict)
	id: int = field(default_factory=lambda: next(_scope_ids))

	def has_own_binding(self, name: str) -> bool:
		return name in self.bindings

	def get_binding(self, name: str) -> Binding | None:
		scope: Scope | None = self
		while scope is not None:
			binding = scope.bindings.get(name)
			if binding is not None:
				return binding
			scope = scope.parent
		return None

	def function_scope(self) -> Scope:
		"""Nearest enclosing function or program scope (where `var` lands)."""
		scope: Scope | None = self
		while scope is not None:
			if scope.kind in ("function", "program"):
				return scope
			scope = scope.parent
		raise StructuralInvariantError("Scope chain has no program scope", self.block)

	def program_scope(self) -> Scope:
		scope = self
		while scope.parent is not None:
			scope = scope.parent
		return scope

	def register(self, name: str, kind: BindingKind, path: NodePath) -> Binding:
		existing = self.bindings.get(name)
		if existing is not None:
			# Redeclaring `var`/function names rebinds the same slot
			existing.reassign(path)
			return existing
		binding = Binding(name, kind, path, self)
		self.bindings[name] = binding
		return binding

	def __repr__(self) -> str:
		return f"Scope({self.kind}#{self.id}, {sorted(self.bindings)})"


def binding_identifiers(node: Node | None) -> list[Node]:
	"""Identifiers declared by a pattern (`a`, `{a, b: [c]}`, `...d`, `e = 1`)."""
	out: list[Node] = []
	stack: list[Node | None] = [node]
	while stack:
		cur = stack.pop()
		if cur is None or not is_node(cur):
			continue
		kind = cur["type"]
		if kind == "Identifier":
			out.append(cur)
		elif kind == "ObjectPattern":
			for prop in reversed(cur["properties"]):
				if prop["type"] == "RestElement":
					stack.append(prop)
				else:
					stack.append(prop["value"])
		elif kind == "ArrayPattern":
			stack.extend(reversed(cur["elements"]))
		elif kind == "RestElement":
			stack.append(cur["argument"])
		elif kind == "AssignmentPattern":
			stack.append(cur["left"])
		elif kind == "VariableDeclaration":
			stack.extend(reversed([d["id"] for d in cur["declarations"]]))
		# MemberExpression targets bind nothing
	return out


def _creates_scope(node: Node, parent: Node | None, key: str | None) -> ScopeKind | None:
	kind = node["type"]
	if kind == "Program":
		return "program"
	if kind in FUNCTION_TYPES:
		return "function"
	if kind in CLASS_TYPES:
		return "class"
	if kind == "CatchClause":
		return "catch"
	if kind in _FOR_TYPES:
		return "for"
	if kind == "SwitchStatement":
		return "switch"
	if kind == "BlockStatement":
		if parent is not None and key == "body":
			if is_function(parent) or parent["type"] == "CatchClause":
				return None
		return "block"
	return None


class UidGenerator:
	"""Babel-style unique names: `_name`, `_name2`, `_name3`, ..."""

	used: set[str]

	def __init__(self) -> None:
		self.used = set()

	def observe(self, names: set[str]) -> None:
		self.used |= names

	def generate(self, name: str = "temp") -> str:
		base = re.sub(r"[^A-Za-z0-9_$]", "", name)
		base = re.sub(r"^_+", "", base)
		base = re.sub(r"[0-9]+$", "", base) or "temp"
		for i in itertools.count(1):
			uid = f"_{base}{i if i > 1 else ''}"
			if uid not in self.used:
				self.used.add(uid)
				return uid
		raise AssertionError("unreachable")


class UnitIndex:
	"""Paths, scopes and bindings for one crawled program."""

	program: Node
	paths: list[NodePath]
	program_scope: Scope
	names: set[str]
	_by_node: dict[int, NodePath]

	def __init__(self, program: Node) -> None:
		self.program = program
		self.paths = []
		self.names = set()
		self._by_node = {}
		self._violations: list[NodePath] = []
		self._crawl()
		for path in self._violations:
			_register_violation(path)

	def path_of(self, node: Node) -> NodePath:
		path = self._by_node.get(id(node))
		if path is None or path.stale:
			raise StructuralInvariantError(
				f"No live path for {node.get('type')} node", node
			)
		return path

	def find(self, node: Node) -> NodePath | None:
		"""Live path of `node`, or None if it is no longer in the tree."""
		path = self._by_node.get(id(node))
		if path is None or path.stale or path._node is not node:
			return None
		return path

	def __iter__(self) -> Iterator[NodePath]:
		return iter(self.paths)

	def invalidate(self) -> None:
		for path in self.paths:
			path.stale = True

	def _crawl(self) -> None:
		root_scope = Scope("program", self.program, None)
		self.program_scope = root_scope
		root = NodePath(self.program, None, None, None, root_scope)
		stack: list[NodePath] = [root]
		while stack:
			path = stack.pop()
			node = path._node
			self.paths.append(path)
			self._by_node[id(node)] = path
			self._declare(path)
			children: list[NodePath] = []
			for key, index, child in iter_children(node):
				if is_type_only(child):
					continue
				scope = path.scope
				kind = _creates_scope(child, node, key)
				if kind is not None:
					scope = Scope(kind, child, path.scope)
				children.append(NodePath(child, path, key, index, scope))
			stack.extend(reversed(children))

	def _declare(self, path: NodePath) -> None:
		node = path._node
		kind = node["type"]
		parent = path.parent._node if path.parent is not None else None

		if kind in ("Identifier", "JSXIdentifier"):
			self.names.add(node["name"])
		elif kind == "VariableDeclarator":
			assert parent is not None
			decl_kind = parent["kind"]
			scope = path.scope.function_scope() if decl_kind == "var" else path.scope
			for ident in binding_identifiers(node["id"]):
				scope.register(ident["name"], decl_kind, path)
		elif kind == "FunctionDeclaration" and node.get("id"):
			outer = _declaring_scope(path)
			outer.register(node["id"]["name"], "hoisted", path)
		elif kind == "ClassDeclaration" and node.get("id"):
			_declaring_scope(path).register(node["id"]["name"], "let", path)
		elif kind in ("FunctionExpression", "ClassExpression") and node.get("id"):
			path.scope.register(node["id"]["name"], "local", path)
		elif kind == "CatchClause" and node.get("param"):
			for ident in binding_identifiers(node["param"]):
				path.scope.register(ident["name"], "let", path)
		elif kind in _IMPORT_SPECIFIERS:
			path.scope.program_scope().register(node["local"]["name"], "module", path)
		elif kind in ("AssignmentExpression", "UpdateExpression"):
			self._violations.append(path)
		elif kind in ("ForInStatement", "ForOfStatement"):
			if node["left"]["type"] != "VariableDeclaration":
				self._violations.append(path)

		if parent is not None and path.key == "params" and is_function(parent):
			for ident in binding_identifiers(node):
				path.scope.register(ident["name"], "param", path)


def _declaring_scope(path: NodePath) -> Scope:
	"""Scope a declaration's name lands in, outside the scope it creates."""
	if path.parent is None:
		raise StructuralInvariantError("Declaration without parent", path.node)
	return path.parent.scope


def _register_violation(path: NodePath) -> None:
	node = path._node
	kind = node["type"]
	if kind == "AssignmentExpression":
		targets = binding_identifiers(node["left"])
	elif kind == "UpdateExpression":
		targets = binding_identifiers(node["argument"])
	else:
		targets = binding_identifiers(node["left"])
	for ident in targets:
		binding = path.scope.get_binding(ident["name"])
		if binding is not None:
			binding.reassign(path)


def crawl(program: Node) -> UnitIndex:
	if program.get("type") != "Program":
		raise StructuralInvariantError("Expected a Program node", program)
	return UnitIndex(program)
