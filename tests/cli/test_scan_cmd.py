"""Tests for the scan command CLI."""

from __future__ import annotations

import pytest
from typer.testing import CliRunner

from todotree import __version__
from todotree.cli import app
from tests.base import BASE_TIMESTAMP, DAY, GitTestBase

NO_TODOS = "No TODOs found in the repository."


@pytest.mark.cli
@pytest.mark.git
class TestScanCommand(GitTestBase):
	"""Test cases for the 'scan' CLI command."""

	runner: CliRunner

	@pytest.fixture(autouse=True)
	def setup_cli(self, setup_repo: None, monkeypatch: pytest.MonkeyPatch) -> None:  # noqa: ARG002
		"""Run every command from inside the test repository."""
		self.runner = CliRunner()
		monkeypatch.chdir(self.repo_path)

	def test_default_invocation_scans(self) -> None:
		"""Test running without a command prints the tree report."""
		self.commit({"app.py": "# TODO(bug): fix it\n"}, author="Alice")

		result = self.runner.invoke(app, [])

		assert result.exit_code == 0, result.output
		assert "🏷️ bug" in result.output
		assert "👤 Alice" in result.output
		assert "app.py:1 - # TODO(bug): fix it" in result.output

	def test_scan_command(self) -> None:
		"""Test the explicit scan command with a path argument."""
		self.commit({"pkg/mod.py": "# TODO: refactor\n"}, author="Bob")

		result = self.runner.invoke(app, ["scan", str(self.repo_path / "pkg")])

		assert result.exit_code == 0, result.output
		assert "👤 Bob" in result.output
		assert "mod.py:1 - # TODO: refactor" in result.output

	def test_no_todos(self) -> None:
		"""Test an empty report is a success."""
		self.commit({"app.py": "print('done')\n"})

		result = self.runner.invoke(app, ["scan"])

		assert result.exit_code == 0
		assert NO_TODOS in result.output

	def test_uncommitted_group(self) -> None:
		"""Test untracked annotations are listed under the uncommitted author."""
		self.write("draft.py", "# TODO: write me\n")

		result = self.runner.invoke(app, ["scan"])

		assert result.exit_code == 0, result.output
		assert "[uncommitted/" in result.output
		assert "👤 Uncommitted" in result.output

	def test_not_a_repository(self, monkeypatch: pytest.MonkeyPatch) -> None:
		"""Test a directory outside any repository is an error."""
		plain = self.temp_dir / "plain"
		plain.mkdir()
		monkeypatch.chdir(plain)

		result = self.runner.invoke(app, ["scan"])

		assert result.exit_code == 1
		assert "Not a git repository" in result.output

	def test_branch_limits_to_changes(self) -> None:
		"""Test --branch scans only files changed since the base branch."""
		self.commit({"old.py": "# TODO: old\n"})
		self.create_branch("base")
		self.commit({"new.py": "# TODO: new\n"}, timestamp=BASE_TIMESTAMP + DAY)

		result = self.runner.invoke(app, ["scan", "--branch", "base"])

		assert result.exit_code == 0, result.output
		assert "new.py:1" in result.output
		assert "old.py" not in result.output

	def test_missing_branch(self) -> None:
		"""Test diff mode against a missing branch fails with a diagnostic."""
		self.commit({"a.py": "# TODO: a\n"})

		result = self.runner.invoke(app, ["scan", "--diff", "--branch", "nope"])

		assert result.exit_code == 1
		assert "Reference 'nope' not found" in result.output

	def test_branch_with_all_is_rejected(self) -> None:
		"""Test contradictory scan mode flags."""
		self.commit({"a.py": "# TODO: a\n"})

		result = self.runner.invoke(app, ["scan", "--all", "--branch", "base"])

		assert result.exit_code == 1
		assert "cannot be combined" in result.output

	def test_config_file_mode(self) -> None:
		"""Test scan.mode from the repository config file is honoured and --all overrides it."""
		self.commit({"old.py": "# TODO: old\n"})
		self.create_branch("base")
		self.write(".todotree.yml", "scan:\n  mode: diff\n  base_branch: base\n")
		self.write("new.py", "# TODO: new\n")

		diff_result = self.runner.invoke(app, ["scan"])
		all_result = self.runner.invoke(app, ["scan", "--all"])

		assert diff_result.exit_code == 0, diff_result.output
		assert "old.py" not in diff_result.output
		assert "new.py:1" in diff_result.output
		assert "old.py:1" in all_result.output

	def test_invalid_config(self) -> None:
		"""Test a malformed config file fails the run."""
		self.commit({"a.py": "# TODO: a\n"})
		config = self.write_file("bad.yml", "scan: [unclosed\n")

		result = self.runner.invoke(app, ["scan", "--config", str(config)])

		assert result.exit_code == 1
		assert "Error loading configuration" in result.output

	def test_newest_first(self) -> None:
		"""Test --newest-first reverses the group order."""
		self.commit({"a.py": "# TODO: older\n"}, author="Alice")
		self.commit({"b.py": "# TODO: newer\n"}, author="Bob", timestamp=BASE_TIMESTAMP + DAY)

		oldest = self.runner.invoke(app, ["scan"]).output
		newest = self.runner.invoke(app, ["scan", "--newest-first"]).output

		assert oldest.index("Alice") < oldest.index("Bob")
		assert newest.index("Bob") < newest.index("Alice")

	def test_version(self) -> None:
		"""Test --version prints the version and exits."""
		result = self.runner.invoke(app, ["--version"])

		assert result.exit_code == 0
		assert f"todotree version: {__version__}" in result.output
