"""
Logging setup for todotree.

Console logging goes through rich; an optional log file receives
everything at DEBUG level.

"""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

# Diagnostics go to stderr so the report on stdout stays clean
console = Console(stderr=True)


def setup_logging(
	is_verbose: bool = False,
	log_to_console: bool = True,
	log_file_path: Path | str | None = None,
) -> None:
	"""
	Set up logging configuration.

	Args:
	    is_verbose: Enable verbose logging
	    log_to_console: Whether to log to the console
	    log_file_path: Optional path to a file for logging. If None, no file logging.

	"""
	log_level = logging.DEBUG if is_verbose else logging.WARNING

	root_logger = logging.getLogger()
	root_logger.setLevel(logging.DEBUG if log_file_path else log_level)

	# Clear existing handlers to avoid duplicate logs if called multiple times
	for handler in root_logger.handlers[:]:
		root_logger.removeHandler(handler)

	if log_to_console:
		console_handler = RichHandler(
			level=log_level,
			console=console,
			rich_tracebacks=True,
			show_time=is_verbose,
			show_path=is_verbose,
		)
		root_logger.addHandler(console_handler)

	if log_file_path:
		try:
			file_handler_path = Path(log_file_path)
			file_handler_path.parent.mkdir(parents=True, exist_ok=True)

			file_handler = logging.FileHandler(file_handler_path, mode="a", encoding="utf-8")
			file_handler.setLevel(logging.DEBUG)
			file_formatter = logging.Formatter(
				"%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(lineno)d - %(message)s"
			)
			file_handler.setFormatter(file_formatter)
			root_logger.addHandler(file_handler)
			root_logger.debug("Logging to file: %s", file_handler_path)
		except (OSError, PermissionError, TypeError) as e:
			crit_logger = logging.getLogger("todotree.cli.critical_setup")
			crit_logger.handlers.clear()
			console_err_handler = logging.StreamHandler()
			console_err_handler.setFormatter(logging.Formatter("%(message)s"))
			crit_logger.addHandler(console_err_handler)
			crit_logger.propagate = False
			crit_logger.critical("Failed to set up file logging to %s: %s", log_file_path, e)


def log_environment_info() -> None:
	"""Log information about the execution environment."""
	logger = logging.getLogger(__name__)

	import platform

	import pygit2

	from todotree import __version__

	logger.debug("todotree version: %s", __version__)
	logger.debug("pygit2 version: %s (libgit2 %s)", pygit2.__version__, pygit2.LIBGIT2_VERSION)
	logger.debug("Python version: %s", platform.python_version())
	logger.debug("Platform: %s", platform.platform())
