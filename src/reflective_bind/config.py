"""Options accepted by the transform and the command line."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING, Any, Literal

from reflective_bind.errors import ConfigError

if TYPE_CHECKING:
	from reflective_bind.paths import NodePath

LogLevel = Literal["off", "debug", "info", "warn"]
LOG_LEVEL_NAMES: tuple[str, ...] = ("off", "debug", "info", "warn")

AttachmentPredicate = Callable[["NodePath"], bool]

OPT_OUT_PATTERN = re.compile(r"^// @no-reflective-bind-babel\r?$", re.MULTILINE)

# Names of the original plugin options, mapped onto TransformOptions fields
_OPTION_ALIASES: dict[str, str] = {
	"log": "log_level",
	"hoistedSlug": "hoisted_name_prefix",
	"babelBindSlug": "helper_binding_name",
	"indexModule": "helper_module",
	"propRegex": "prop_name_pattern",
	"hoistedNamePrefix": "hoisted_name_prefix",
	"helperBindingName": "helper_binding_name",
	"helperModuleLocation": "helper_module",
	"logLevel": "log_level",
}

DEFAULT_SAFE_CONTEXT_MEMBERS: frozenset[str] = frozenset({"setState", "forceUpdate"})

DEFAULT_PURE_GLOBALS: frozenset[str] = frozenset(
	{
		"Array",
		"Boolean",
		"Date",
		"JSON",
		"Math",
		"Number",
		"Object",
		"String",
		"isFinite",
		"isNaN",
		"parseFloat",
		"parseInt",
		"encodeURIComponent",
		"decodeURIComponent",
	}
)


@dataclass(frozen=True)
class StaleRenderPolicy:
	"""Whitelists used to reject closures that may observe a stale render.

	A closure that escapes `this` other than through a normalized context
	access or one of `safe_context_members`, or that calls an unbound global
	whose root name is not in `pure_globals`, is not hoisted.
	"""

	safe_context_members: frozenset[str] = DEFAULT_SAFE_CONTEXT_MEMBERS
	pure_globals: frozenset[str] = DEFAULT_PURE_GLOBALS


@dataclass(frozen=True)
class TransformOptions:
	hoisted_name_prefix: str = "rbHoisted"
	helper_binding_name: str = "rbBabelBind"
	helper_module: str = "reflective-bind"
	helper_export_name: str = "babelBind"
	log_level: LogLevel = "off"
	context_fields: tuple[str, ...] = ("props", "state")
	prop_name_pattern: str | None = None
	attachment_predicate: AttachmentPredicate | None = field(
		default=None, compare=False
	)
	stale_render: StaleRenderPolicy | None = None

	def __post_init__(self) -> None:
		if self.log_level not in LOG_LEVEL_NAMES:
			raise ConfigError(
				f"Invalid log level {self.log_level!r}, expected one of: "
				+ ", ".join(LOG_LEVEL_NAMES)
			)
		for name in (
			"hoisted_name_prefix",
			"helper_binding_name",
			"helper_module",
			"helper_export_name",
		):
			value = getattr(self, name)
			if not isinstance(value, str) or not value:
				raise ConfigError(f"{name} must be a non-empty string")
		if not self.context_fields:
			raise ConfigError("context_fields must name at least one field")
		if self.prop_name_pattern is not None:
			try:
				re.compile(self.prop_name_pattern)
			except re.error as exc:
				raise ConfigError(
					f"Invalid prop name pattern {self.prop_name_pattern!r}: {exc}"
				) from None

	@property
	def prop_name_regex(self) -> re.Pattern[str] | None:
		if self.prop_name_pattern is None:
			return None
		return re.compile(self.prop_name_pattern)

	@classmethod
	def from_mapping(cls, mapping: Mapping[str, Any]) -> TransformOptions:
		"""Build options from snake_case names or the plugin's camelCase names."""
		known = {f.name for f in fields(cls)}
		kwargs: dict[str, Any] = {}
		for key, value in mapping.items():
			name = _OPTION_ALIASES.get(key, key)
			if name not in known:
				raise ConfigError(f"Unknown option {key!r}")
			if name in kwargs:
				raise ConfigError(f"Option {key!r} given more than once")
			kwargs[name] = value
		if isinstance(kwargs.get("context_fields"), list):
			kwargs["context_fields"] = tuple(kwargs["context_fields"])
		return cls(**kwargs)
