"""Tests for CLI utility functions."""

from __future__ import annotations

from unittest.mock import patch

import pytest
import typer

from todotree.utils.cli_utils import exit_with_error, handle_keyboard_interrupt, loading_spinner, show_error


@pytest.mark.unit
@pytest.mark.cli
class TestCliUtils:
	"""Test cases for CLI utility functions."""

	def test_show_error_escapes_markup(self) -> None:
		"""Test messages are printed literally after the error prefix."""
		with patch("todotree.utils.cli_utils.console") as mock_console:
			show_error("Reference '[main]' not found")

		printed = mock_console.print.call_args[0][0]
		assert printed.startswith("[bold red]Error:[/bold red] ")
		assert "\\[main]" in printed

	def test_exit_with_error(self) -> None:
		"""Test the error is shown and the exit code is propagated."""
		cause = ValueError("boom")
		with patch("todotree.utils.cli_utils.show_error") as mock_show, pytest.raises(typer.Exit) as exc_info:
			exit_with_error("failed", exception=cause)

		mock_show.assert_called_once_with("failed", cause)
		assert exc_info.value.exit_code == 1
		assert exc_info.value.__cause__ is cause

	def test_keyboard_interrupt_exit_code(self) -> None:
		"""Test a cancelled run exits with 130."""
		with patch("todotree.utils.cli_utils.console"), pytest.raises(typer.Exit) as exc_info:
			handle_keyboard_interrupt()

		assert exc_info.value.exit_code == 130

	def test_spinner_disabled_under_pytest(self) -> None:
		"""Test no status display is started while tests run."""
		with patch("todotree.utils.cli_utils.console") as mock_console, loading_spinner("Working"):
			pass

		mock_console.status.assert_not_called()
