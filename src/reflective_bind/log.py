"""Leveled diagnostics with source positions."""

from __future__ import annotations

import logging
from typing import Any

from reflective_bind.errors import ConfigError

logger = logging.getLogger("reflective_bind")

# "off" sits above every level the transform emits
LOG_LEVELS: dict[str, int] = {
	"off": logging.CRITICAL + 10,
	"debug": logging.DEBUG,
	"info": logging.INFO,
	"warn": logging.WARNING,
}


def set_log_level(level: str) -> None:
	if level not in LOG_LEVELS:
		raise ConfigError(
			f"Invalid log level {level!r}, expected one of: "
			+ ", ".join(LOG_LEVELS)
		)
	logger.setLevel(LOG_LEVELS[level])


def position(node: dict[str, Any] | None) -> str:
	loc = node.get("loc") if node else None
	if not loc:
		return "?"
	start = loc["start"]
	return f"{start['line']}:{start['column']}"


def make_msg(msg: str, node: dict[str, Any] | None, filename: str | None) -> str:
	return f"{msg} ({filename or '<unknown>'} {position(node)})"
