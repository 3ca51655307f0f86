"""
Command-line interface for reflective-bind-transform.
Rewrites JavaScript/JSX files and reports what changed.
"""
# typer relies on function calls used as default values
# pyright: reportCallInDefaultInitializer=false

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from reflective_bind.config import LOG_LEVEL_NAMES, StaleRenderPolicy, TransformOptions
from reflective_bind.errors import ConfigError, ReflectiveBindError
from reflective_bind.log import logger as package_logger
from reflective_bind.transform import transform_source

ENV_LOG_LEVEL = "REFLECTIVE_BIND_LOG"

cli = typer.Typer(
	name="reflective-bind",
	help="Hoist inline JSX callbacks and rewrite .bind calls for reflective-bind",
	no_args_is_help=True,
)


@cli.callback()
def _root() -> None:
	"""reflective-bind source transform."""


def _install_log_handler(console: Console) -> None:
	for handler in package_logger.handlers:
		if isinstance(handler, RichHandler):
			package_logger.removeHandler(handler)
	package_logger.addHandler(
		RichHandler(console=console, show_time=False, show_path=False, markup=False)
	)
	package_logger.propagate = False


@cli.command("transform")
def transform(
	files: list[Path] = typer.Argument(
		...,
		exists=True,
		dir_okay=False,
		readable=True,
		help="JavaScript/JSX files to transform",
	),
	out_dir: Path | None = typer.Option(
		None, "--out-dir", "-o", help="Write transformed files into this directory"
	),
	in_place: bool = typer.Option(False, "--in-place", help="Overwrite the inputs"),
	check: bool = typer.Option(
		False, "--check", help="Only report rewrites; exit 1 if any file would change"
	),
	log_level: str = typer.Option(
		"warn",
		"--log-level",
		envvar=ENV_LOG_LEVEL,
		help=f"One of: {', '.join(LOG_LEVEL_NAMES)}",
	),
	prefix: str = typer.Option(
		"rbHoisted", "--prefix", help="Name prefix of hoisted functions"
	),
	helper_name: str = typer.Option(
		"rbBabelBind", "--helper-name", help="Local name of the imported helper"
	),
	helper_module: str = typer.Option(
		"reflective-bind", "--helper-module", help="Module the helper is imported from"
	),
	prop_pattern: str | None = typer.Option(
		None,
		"--prop-pattern",
		help="Only hoist closures passed to props matching this regex",
	),
	stale_render_check: bool = typer.Option(
		False,
		"--stale-render-check",
		help="Refuse closures that escape `this` or call impure globals",
	),
):
	"""Transform FILES, printing the result when a single file is given."""
	console = Console(stderr=True)
	_install_log_handler(console)

	if out_dir is not None and in_place:
		console.print("❌ Cannot use --out-dir and --in-place at the same time.")
		raise typer.Exit(1)
	writes_files = out_dir is not None or in_place
	if not check and not writes_files and len(files) > 1:
		console.print("❌ Use --out-dir or --in-place with more than one file.")
		raise typer.Exit(1)

	try:
		options = TransformOptions(
			hoisted_name_prefix=prefix,
			helper_binding_name=helper_name,
			helper_module=helper_module,
			log_level=log_level,  # pyright: ignore[reportArgumentType]
			prop_name_pattern=prop_pattern,
			stale_render=StaleRenderPolicy() if stale_render_check else None,
		)
	except ConfigError as exc:
		console.print(f"❌ {exc}")
		raise typer.Exit(1) from None

	if out_dir is not None:
		out_dir.mkdir(parents=True, exist_ok=True)

	failed = 0
	changed = 0
	for file in files:
		source = file.read_text(encoding="utf-8")
		try:
			result = transform_source(source, options, filename=str(file))
		except ReflectiveBindError as exc:
			failed += 1
			console.print(f"❌ {file}: {exc}")
			continue
		if result.count:
			changed += 1

		if check:
			status = "opted out" if result.skipped else f"{result.count} rewrite(s)"
			typer.echo(f"{file}: {status}")
		elif in_place:
			if result.count:
				file.write_text(result.code, encoding="utf-8")
				console.print(f"✏️  {file}: {result.count} rewrite(s)")
		elif out_dir is not None:
			target = out_dir / file.name
			target.write_text(result.code, encoding="utf-8")
			console.print(f"📄 {target}: {result.count} rewrite(s)")
		else:
			typer.echo(result.code, nl=False)

	if failed or (check and changed):
		raise typer.Exit(1)


def main():
	"""Main CLI entry point."""
	try:
		cli()
	except Exception:
		console = Console()
		console.print_exception()
		raise typer.Exit(1) from None


if __name__ == "__main__":
	main()
