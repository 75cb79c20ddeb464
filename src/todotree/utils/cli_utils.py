"""Utility functions for CLI operations in todotree."""

from __future__ import annotations

import contextlib
import logging
import os
from typing import TYPE_CHECKING, Self

import typer
from rich.markup import escape

from todotree.utils.log_setup import console

if TYPE_CHECKING:
	from collections.abc import Iterator

logger = logging.getLogger(__name__)


class SpinnerState:
	"""Singleton class to track spinner state."""

	_instance = None
	is_active = False

	def __new__(cls) -> Self:
		"""
		Create or return the singleton instance.

		Returns:
		    The singleton instance of SpinnerState

		"""
		if cls._instance is None:
			cls._instance = super().__new__(cls)
		return cls._instance


@contextlib.contextmanager
def loading_spinner(message: str = "Processing...") -> Iterator[None]:
	"""
	Display a loading spinner while executing a task.

	Args:
	    message: Message to display alongside the spinner

	Yields:
	    None

	"""
	# In test environments, don't display a spinner
	if os.environ.get("PYTEST_CURRENT_TEST") or os.environ.get("CI"):
		yield
		return

	spinner_state = SpinnerState()
	if spinner_state.is_active or not console.is_terminal:
		yield
		return

	try:
		spinner_state.is_active = True
		with console.status(message):
			yield
	finally:
		spinner_state.is_active = False


def show_error(message: str, exception: Exception | None = None) -> None:
	"""
	Print a one-line error diagnostic.

	Args:
	        message: The error message to display
	        exception: Optional exception that caused the error, logged at debug level

	"""
	if exception is not None:
		logger.debug("Error details", exc_info=exception)
	console.print(f"[bold red]Error:[/bold red] {escape(message)}")


def exit_with_error(message: str, exit_code: int = 1, exception: Exception | None = None) -> None:
	"""
	Display an error message and exit.

	Args:
	        message: Error message to display
	        exit_code: Exit code to use
	        exception: Optional exception that caused the error

	"""
	show_error(message, exception)
	raise typer.Exit(exit_code) from exception


def handle_keyboard_interrupt() -> None:
	"""Handles KeyboardInterrupt by printing a message and exiting cleanly."""
	console.print("\n[yellow]Operation cancelled by user.[/yellow]")
	raise typer.Exit(130)
