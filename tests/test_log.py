"""Tests for diagnostic formatting and level handling."""

from __future__ import annotations

import logging

import pytest
from reflective_bind.errors import ConfigError
from reflective_bind.log import logger, make_msg, position, set_log_level


@pytest.mark.parametrize(
	"level,expected",
	[
		("debug", logging.DEBUG),
		("info", logging.INFO),
		("warn", logging.WARNING),
	],
)
def test_set_log_level(level: str, expected: int):
	set_log_level(level)
	assert logger.level == expected


def test_off_disables_warnings():
	set_log_level("off")
	assert not logger.isEnabledFor(logging.WARNING)
	assert not logger.isEnabledFor(logging.CRITICAL)


def test_invalid_level():
	with pytest.raises(ConfigError):
		set_log_level("trace")


def test_position():
	node = {"type": "Identifier", "loc": {"start": {"line": 3, "column": 7}}}
	assert position(node) == "3:7"
	assert position({"type": "Identifier"}) == "?"
	assert position(None) == "?"


def test_make_msg():
	node = {"type": "Identifier", "loc": {"start": {"line": 1, "column": 0}}}
	assert make_msg("Transformed call to 'bind'", node, "app.jsx") == (
		"Transformed call to 'bind' (app.jsx 1:0)"
	)
	assert make_msg("Skipped", None, None) == "Skipped (<unknown> ?)"
