"""Structural execution-order checks between two tree positions."""

from __future__ import annotations

from reflective_bind.errors import StructuralInvariantError
from reflective_bind.nodes import child_keys, is_function
from reflective_bind.paths import NodePath
from reflective_bind.scope import Scope


def common_ancestor_indices(
	ancestry_a: list[NodePath], ancestry_b: list[NodePath]
) -> tuple[int, int]:
	"""Positions of the lowest common ancestor in both ancestries, or (-1, -1)."""
	positions = {id(p.node): j for j, p in enumerate(ancestry_b)}
	for i, path in enumerate(ancestry_a):
		j = positions.get(id(path.node))
		if j is not None:
			return i, j
	return -1, -1


def is_definitely_before(path_a: NodePath, path_b: NodePath) -> bool:
	"""True only if `path_a` provably finishes executing before `path_b` runs.

	Source positions are never consulted; after earlier rewrites they no
	longer describe the tree.
	"""
	ancestry_a = path_a.ancestry()
	ancestry_b = path_b.ancestry()
	idx_a, idx_b = common_ancestor_indices(ancestry_a, ancestry_b)

	# A encloses B, e.g. `const f = () => f()`
	if idx_a == 0:
		return False
	# B encloses A: a declaration or reassignment inside the closure itself
	if idx_b == 0:
		return False
	if idx_a < 0 or idx_b < 0:
		raise StructuralInvariantError(
			f"Invalid common ancestor indices [{idx_a}, {idx_b}]", path_a.node
		)

	# Code inside a function or a class field initializer may run at any later time
	for i in range(idx_a):
		ancestor = ancestry_a[i]
		if ancestor.is_field_initializer or (i > 0 and is_function(ancestor.node)):
			return False

	rel_a = ancestry_a[idx_a - 1]
	rel_b = ancestry_b[idx_b - 1]
	if rel_a.is_list_member and rel_b.is_list_member and rel_a.key == rel_b.key:
		assert rel_a.index is not None and rel_b.index is not None
		# Function declarations are callable before their position
		return path_a.node["type"] == "FunctionDeclaration" or rel_a.index < rel_b.index

	common = ancestry_a[idx_a].node
	keys = child_keys(common)
	if rel_a.key not in keys:
		raise StructuralInvariantError(
			f"Field {rel_a.key!r} is not a child of {common['type']}", common
		)
	if rel_b.key not in keys:
		raise StructuralInvariantError(
			f"Field {rel_b.key!r} is not a child of {common['type']}", common
		)
	return keys.index(rel_a.key) < keys.index(rel_b.key)


def is_ancestor_scope(maybe_ancestor: Scope, scope: Scope) -> bool:
	"""Strict ancestry: a scope is not its own ancestor."""
	cur = scope.parent
	while cur is not None:
		if cur is maybe_ancestor:
			return True
		cur = cur.parent
	return False
