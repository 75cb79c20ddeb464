"""Command for scanning a repository for TODO annotations."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer

logger = logging.getLogger(__name__)

# --- Command Argument Annotations ---

PathArg = Annotated[
	Path | None,
	typer.Argument(
		help="Path inside the repository to scan (defaults to the current directory)",
		exists=True,
		file_okay=False,
		resolve_path=True,
	),
]

DiffFlag = Annotated[
	bool | None,
	typer.Option(
		"--diff/--all",
		help="Scan only files that differ from the base branch, or the whole working tree",
		show_default=False,
	),
]

BranchOpt = Annotated[
	str | None,
	typer.Option("--branch", "-b", help="Base branch for diff mode (implies --diff)"),
]

NewestFirstFlag = Annotated[
	bool | None,
	typer.Option("--newest-first/--oldest-first", help="Order of commit groups", show_default=False),
]

ConfigOpt = Annotated[
	Path | None,
	typer.Option("--config", "-c", help="Configuration file to use instead of .todotree.yml", dir_okay=False),
]

# --- Registration Function ---


def register_command(app: typer.Typer) -> None:
	"""Register the scan command with the CLI app."""

	@app.command(name="scan")
	def scan_command(
		path: PathArg = None,
		diff: DiffFlag = None,
		branch: BranchOpt = None,
		newest_first: NewestFirstFlag = None,
		config_file: ConfigOpt = None,
	) -> None:
		"""
		Find TODO annotations and group them by commit, tag and author.

		Each annotation is attributed to the commit that last changed its
		line; lines that are not committed yet are listed as Uncommitted.

		"""
		run_scan(
			path=path,
			diff=diff,
			branch=branch,
			newest_first=newest_first,
			config_file=config_file,
		)


# --- Implementation Function ---


def run_scan(
	path: Path | None = None,
	diff: bool | None = None,
	branch: str | None = None,
	newest_first: bool | None = None,
	config_file: Path | None = None,
) -> None:
	"""Scan the repository containing ``path`` and print the report."""
	from todotree.git.utils import GitError, GitRepoContext, ReferenceNotFoundError
	from todotree.report.tree_report import render_report
	from todotree.scanner.models import ScanMode
	from todotree.scanner.pipeline import ScanOptions, TodoScanner
	from todotree.utils.cli_utils import exit_with_error, handle_keyboard_interrupt, loading_spinner
	from todotree.utils.config_loader import ConfigError, ConfigLoader

	if branch is not None and diff is False:
		exit_with_error("--branch cannot be combined with --all")

	try:
		repo_context = GitRepoContext(path)
		config = ConfigLoader.get_instance(
			config_file=str(config_file) if config_file else None,
			reload=True,
			repo_root=repo_context.workdir,
		)

		options = ScanOptions.from_config(config)
		if branch is not None:
			options.base_branch = branch
			options.mode = ScanMode.DIFF
		elif diff is not None:
			options.mode = ScanMode.DIFF if diff else ScanMode.TREE
		if newest_first is not None:
			options.newest_first = newest_first

		logger.debug("Scanning %s in %s mode", repo_context.workdir, options.mode.value)
		scanner = TodoScanner(repo_context, options)
		with loading_spinner("Scanning for TODOs..."):
			result = scanner.scan()

	except KeyboardInterrupt:
		handle_keyboard_interrupt()
	except ReferenceNotFoundError as e:
		exit_with_error(f"{e}; diff mode needs an existing base branch", exception=e)
	except (GitError, ConfigError) as e:
		exit_with_error(str(e), exception=e)
	else:
		render_report(result.grouped, repo_context.workdir)
