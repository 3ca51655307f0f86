"""JavaScript/JSX parsing into plain ESTree dictionaries."""

from __future__ import annotations

from typing import Any

import esprima
from esprima.error_handler import Error as EsprimaError

from reflective_bind.errors import ParseError

Node = dict[str, Any]

# esprima-python renames fields that clash with Python keywords
_FIELD_RENAMES: dict[str, str] = {"isAsync": "async"}

_PARSE_OPTIONS: dict[str, Any] = {
	"jsx": True,
	"classProperties": True,
	"range": True,
	"loc": True,
	"comment": True,
	"attachComment": True,
}


def parse(source: str, filename: str | None = None) -> Node:
	"""Parse a source unit, preferring module goal over script goal."""
	try:
		tree = esprima.parseModule(source, dict(_PARSE_OPTIONS))
	except EsprimaError as module_exc:
		try:
			tree = esprima.parseScript(source, dict(_PARSE_OPTIONS))
		except EsprimaError:
			raise _parse_error(module_exc, filename) from None
	program = to_estree(tree)
	if not isinstance(program, dict) or program.get("type") != "Program":
		raise ParseError("parser did not produce a Program", filename=filename)
	return program


def _parse_error(exc: EsprimaError, filename: str | None) -> ParseError:
	description = getattr(exc, "description", None) or str(exc)
	return ParseError(
		description,
		filename=filename,
		line=getattr(exc, "lineNumber", None),
		column=getattr(exc, "column", None),
	)


def to_estree(value: Any) -> Any:
	"""Convert esprima's node objects into dicts, lists and primitives."""
	if value is None or isinstance(value, (bool, int, float, str)):
		return value
	if isinstance(value, (list, tuple)):
		return [to_estree(item) for item in value]
	if isinstance(value, dict):
		return {
			_FIELD_RENAMES.get(str(k), str(k)): to_estree(v) for k, v in value.items()
		}
	attrs = getattr(value, "__dict__", None)
	if attrs is not None:
		return {
			_FIELD_RENAMES.get(k, k): to_estree(v)
			for k, v in attrs.items()
			if not k.startswith("_")
		}
	# Compiled regex values and other host objects; the printer uses `raw`
	return None
