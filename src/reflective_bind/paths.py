"""Mutable cursors into a syntax tree."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from reflective_bind.errors import StalePathError, StructuralInvariantError
from reflective_bind.nodes import CLASS_PROPERTY_TYPES

if TYPE_CHECKING:
	from reflective_bind.scope import Scope

Node = dict[str, Any]


class NodePath:
	"""Location of a node in the tree plus the scope it lives in.

	`index` is the position inside `parent.node[key]` when that field is a
	list, otherwise None. Once `replace_with()` ran, the path is stale and
	must be re-fetched from a freshly crawled index.
	"""

	__slots__: tuple[str, ...] = ("_node", "parent", "key", "index", "scope", "stale")

	_node: Node
	parent: NodePath | None
	key: str | None
	index: int | None
	scope: Scope
	stale: bool

	def __init__(
		self,
		node: Node,
		parent: NodePath | None,
		key: str | None,
		index: int | None,
		scope: Scope,
	) -> None:
		self._node = node
		self.parent = parent
		self.key = key
		self.index = index
		self.scope = scope
		self.stale = False

	@property
	def node(self) -> Node:
		if self.stale:
			raise StalePathError(
				f"Path to replaced {self._node.get('type')} node was reused", self._node
			)
		return self._node

	@property
	def type(self) -> str:
		return self.node["type"]

	@property
	def parent_node(self) -> Node | None:
		return self.parent.node if self.parent is not None else None

	@property
	def is_list_member(self) -> bool:
		return self.index is not None

	def ancestry(self) -> list[NodePath]:
		"""This path followed by every ancestor, ending at the root."""
		out: list[NodePath] = []
		cur: NodePath | None = self
		while cur is not None:
			out.append(cur)
			cur = cur.parent
		return out

	@property
	def is_field_initializer(self) -> bool:
		"""The `value` of a class field, evaluated once per constructed instance."""
		parent = self.parent
		return (
			self.key == "value" and parent is not None and parent.type in CLASS_PROPERTY_TYPES
		)

	def replace_with(self, node: Node) -> NodePath:
		if self.parent is None or self.key is None:
			raise StructuralInvariantError("Cannot replace the root node", self.node)
		container = self.parent.node[self.key]
		if self.index is not None:
			if container[self.index] is not self._node:
				raise StalePathError("Container slot no longer holds this node", self._node)
			container[self.index] = node
		else:
			if container is not self._node:
				raise StalePathError("Field no longer holds this node", self._node)
			self.parent.node[self.key] = node
		self.stale = True
		return NodePath(node, self.parent, self.key, self.index, self.scope)

	def __repr__(self) -> str:
		where = self.key if self.index is None else f"{self.key}[{self.index}]"
		return f"NodePath({self._node.get('type')} at {where})"
