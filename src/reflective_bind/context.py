from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from reflective_bind.config import TransformOptions
from reflective_bind.log import make_msg
from reflective_bind.scope import UidGenerator, UnitIndex, crawl

Node = dict[str, Any]


@dataclass(eq=False)
class UnitContext:
	"""State for one translation unit, threaded through every pass.

	Created fresh per unit and never shared. `index` is rebuilt lazily after
	every mutation of `program`.
	"""

	program: Node
	options: TransformOptions
	filename: str | None = None
	uids: UidGenerator = field(default_factory=UidGenerator)
	helper_name: str = ""
	count: int = 0
	# Keyed by id(); the matching nodes are kept alive in `_retained`
	processed: set[int] = field(default_factory=set)
	hoisted: set[int] = field(default_factory=set)
	_index: UnitIndex | None = field(default=None, init=False, repr=False)
	_retained: list[Node] = field(default_factory=list, init=False, repr=False)

	def __post_init__(self) -> None:
		self.uids.observe(self.index.names)
		if not self.helper_name:
			self.helper_name = self.uids.generate(self.options.helper_binding_name)

	@property
	def index(self) -> UnitIndex:
		if self._index is None:
			self._index = crawl(self.program)
			self.uids.observe(self._index.names)
		return self._index

	def mark_dirty(self) -> None:
		"""Drop the index after a mutation; every old path becomes stale."""
		if self._index is not None:
			self._index.invalidate()
			self._index = None

	def mark_processed(self, node: Node) -> None:
		self.processed.add(id(node))
		self._retained.append(node)

	def is_processed(self, node: Node) -> bool:
		return id(node) in self.processed

	def mark_hoisted(self, node: Node) -> None:
		self.hoisted.add(id(node))
		self._retained.append(node)

	def msg(self, text: str, node: Node | None) -> str:
		return make_msg(text, node, self.filename)
