from __future__ import annotations

from typing import Any


class ReflectiveBindError(Exception):
	"""Base error for everything raised by the transform."""


class ParseError(ReflectiveBindError):
	"""Raised when a source unit is not valid JavaScript/JSX."""

	filename: str | None
	line: int | None
	column: int | None

	def __init__(
		self,
		message: str,
		*,
		filename: str | None = None,
		line: int | None = None,
		column: int | None = None,
	) -> None:
		self.filename = filename
		self.line = line
		self.column = column
		where = filename or "<unknown>"
		if line is not None:
			where = f"{where}:{line}:{column if column is not None else 0}"
		super().__init__(f"{where}: {message}")


class ConfigError(ReflectiveBindError, ValueError):
	"""Raised for invalid transform options."""


class StructuralInvariantError(ReflectiveBindError):
	"""Raised when the analysis meets a tree shape it cannot reason about.

	These abort the current unit only and leave its source unmodified. They
	point at an analyzer bug or an unsupported syntax shape, never at a user
	error, so callers should not retry.
	"""

	node: dict[str, Any] | None

	def __init__(self, message: str, node: dict[str, Any] | None = None) -> None:
		self.node = node
		super().__init__(message)


class StalePathError(StructuralInvariantError):
	"""Raised when a path is dereferenced after its node was replaced."""
