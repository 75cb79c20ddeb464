"""Command-line interface package for todotree."""

from __future__ import annotations

import datetime
import logging
from pathlib import Path
from typing import Annotated

import typer

from todotree import __version__
from todotree.utils.log_setup import log_environment_info, setup_logging

from .scan_cmd import register_command as register_scan_command
from .scan_cmd import run_scan

logger = logging.getLogger(__name__)

app = typer.Typer(
	help=f"todotree - TODO annotations grouped by the commit that introduced them\n\nVersion: {__version__}",
	context_settings={"help_option_names": ["-h", "--help"]},
)

# --- Global Options Callback ---


def _version_callback(value: bool) -> None:
	"""Callback for --version option."""
	if value:
		typer.echo(f"todotree version: {__version__}")
		raise typer.Exit


@app.callback(invoke_without_command=True)
def global_options(
	ctx: typer.Context,
	is_verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable verbose logging.")] = False,
	is_output_log: Annotated[
		bool,
		typer.Option(
			"--save-log",
			help="Enable logging to a file. Logs to logs/todotree_{datetime}.log.",
		),
	] = False,
	_version: Annotated[
		bool | None,
		typer.Option("--version", help="Show version and exit.", callback=_version_callback, is_eager=True),
	] = None,
) -> None:
	"""Global CLI options and logging setup. Without a command, scans the current repository."""
	ctx.meta["is_verbose"] = is_verbose
	ctx.meta["is_output_log"] = is_output_log

	log_file_path_to_use: Path | None = None
	if is_output_log:
		current_time = datetime.datetime.now(tz=datetime.UTC).strftime("%Y-%m-%d_%H-%M-%S")
		log_file_path_to_use = Path("logs") / f"todotree_{current_time}.log"

	setup_logging(is_verbose=is_verbose, log_file_path=log_file_path_to_use)
	log_environment_info()

	if ctx.invoked_subcommand is None:
		run_scan()


register_scan_command(app)


def main() -> None:
	"""Console script entry point."""
	app()


__all__ = ["app", "main"]
