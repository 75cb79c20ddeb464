"""End-to-end tests for the scan pipeline."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path
from unittest.mock import patch

import pytest

from todotree.git.utils import GitError, GitRepoContext, ReferenceNotFoundError
from todotree.scanner.models import NO_TAG, UNCOMMITTED_AUTHOR, UNCOMMITTED_COMMIT_ID, ScanMode
from todotree.scanner.pipeline import ScanOptions, TodoScanner
from todotree.utils.config_loader import ConfigLoader
from todotree.utils.time_utils import from_timestamp
from tests.base import BASE_TIMESTAMP, DAY, GitTestBase

NOW = datetime(2024, 3, 1, tzinfo=UTC)

FILE_WITH_BUG = """import sys


def main():
    # TODO(bug): fix overflow
    return sys.maxsize + 1
"""


@pytest.mark.integration
@pytest.mark.git
class TestTodoScanner(GitTestBase):
	"""Test cases for TodoScanner."""

	def scanner(self, **options: object) -> TodoScanner:
		"""Build a scanner over the test repository."""
		return TodoScanner(GitRepoContext(self.repo_path), ScanOptions(**options))

	def test_single_committed_annotation(self) -> None:
		"""Test one committed TODO is attributed to its author and commit."""
		commit_id = self.commit({"file.py": FILE_WITH_BUG}, author="Alice")

		result = self.scanner().scan(now=NOW)

		(todo,) = result.todos
		assert todo.path == "file.py"
		assert todo.line == 5
		assert todo.tags == ("bug",)
		assert todo.message == "fix overflow"
		assert todo.author == "Alice"
		assert todo.commit_id == commit_id
		assert todo.commit_time == from_timestamp(BASE_TIMESTAMP)

		(key,) = result.grouped
		assert key.commit_id == commit_id
		assert result.grouped[key] == {"bug": {"Alice": [todo]}}

	def test_untracked_file_is_uncommitted(self) -> None:
		"""Test an untracked file's annotations carry the sentinel author and scan time."""
		self.commit({"README.md": "readme\n"})
		self.write("scratch.py", "# TODO: try this\n")

		before = datetime.now(tz=UTC)
		result = self.scanner().scan()
		after = datetime.now(tz=UTC)

		(todo,) = result.todos
		assert todo.author == UNCOMMITTED_AUTHOR
		assert todo.commit_id == UNCOMMITTED_COMMIT_ID
		assert not todo.is_committed
		assert before <= todo.commit_time <= after
		assert todo.commit_time == result.started_at

	def test_repository_without_commits(self) -> None:
		"""Test scanning before the first commit treats everything as uncommitted."""
		self.write("a.py", "# TODO: first\n")

		(todo,) = self.scanner().scan(now=NOW).todos

		assert todo.author == UNCOMMITTED_AUTHOR
		assert todo.commit_time == NOW

	def test_no_annotations(self) -> None:
		"""Test a repository without TODOs gives an empty result."""
		self.commit({"a.py": "print('hello')\n", "b.md": "# Notes about autodoc\n"})

		result = self.scanner().scan(now=NOW)

		assert result.is_empty
		assert result.grouped == {}
		assert result.files_scanned == 2

	def test_empty_messages_are_dropped(self) -> None:
		"""Test markers without a message are not reported."""
		self.commit({"a.py": "# TODO\n# TODO(bug):\n# TODO: ''\n# TODO: real one\n"})

		result = self.scanner().scan(now=NOW)

		assert [(t.line, t.message) for t in result.todos] == [(4, "real one")]

	def test_local_edits_beyond_history_are_uncommitted(self) -> None:
		"""Test lines past the committed coverage are unattributed."""
		self.commit({"a.py": "# TODO: committed\n"}, author="Alice")
		self.write("a.py", "# TODO: committed\n# TODO: local edit\n")

		result = self.scanner().scan(now=NOW)

		assert [(t.line, t.author) for t in result.todos] == [(1, "Alice"), (2, UNCOMMITTED_AUTHOR)]
		assert len(result.grouped) == 2

	def test_line_inserted_above_committed_annotation(self) -> None:
		"""Test a local insertion is uncommitted and the committed TODO below keeps its author."""
		commit_id = self.commit({"a.py": "x = 1\n# TODO: committed\n"}, author="Alice")
		self.write("a.py", "# TODO: brand new local line\nx = 1\n# TODO: committed\n")

		result = self.scanner().scan(now=NOW)

		assert [(t.line, t.message, t.author) for t in result.todos] == [
			(1, "brand new local line", UNCOMMITTED_AUTHOR),
			(3, "committed", "Alice"),
		]
		assert result.todos[1].commit_id == commit_id

	def test_annotation_edited_in_place_is_uncommitted(self) -> None:
		"""Test a committed TODO rewritten locally no longer belongs to its old commit."""
		self.commit({"a.py": "# TODO: old text\n# TODO: untouched\n"}, author="Alice")
		self.write("a.py", "# TODO: rewritten locally\n# TODO: untouched\n")

		result = self.scanner().scan(now=NOW)

		assert [(t.line, t.message, t.author) for t in result.todos] == [
			(1, "rewritten locally", UNCOMMITTED_AUTHOR),
			(2, "untouched", "Alice"),
		]

	def test_deleted_lines_above_annotation(self) -> None:
		"""Test removing lines above a committed TODO keeps its attribution."""
		self.commit({"a.py": "one\ntwo\n# TODO: stays\n"}, author="Alice")
		self.write("a.py", "# TODO: stays\n")

		(todo,) = self.scanner().scan(now=NOW).todos

		assert (todo.line, todo.author) == (1, "Alice")

	def test_groups_by_commit_tag_and_author(self) -> None:
		"""Test a history with several authors is grouped and ordered."""
		old = self.commit({"a.py": "# TODO(x, y): shared\n# TODO: plain\n"}, author="Alice")
		new = self.commit(
			{"b.py": "# TODO(y): later\n"},
			author="Bob",
			timestamp=BASE_TIMESTAMP + DAY,
		)

		result = self.scanner().scan(now=NOW)

		assert [key.commit_id for key in result.grouped] == [old, new]
		old_key, new_key = result.grouped
		assert list(result.grouped[old_key]) == [NO_TAG, "x", "y"]
		shared = result.todos[0]
		assert result.grouped[old_key]["x"]["Alice"] == [shared]
		assert result.grouped[old_key]["y"]["Alice"] == [shared]
		assert list(result.grouped[new_key]) == ["y"]
		assert list(result.grouped[new_key]["y"]) == ["Bob"]

	def test_newest_first(self) -> None:
		"""Test the reversed group order option."""
		old = self.commit({"a.py": "# TODO: a\n"}, author="Alice")
		new = self.commit({"b.py": "# TODO: b\n"}, author="Bob", timestamp=BASE_TIMESTAMP + DAY)

		result = self.scanner(newest_first=True).scan(now=NOW)

		assert [key.commit_id for key in result.grouped] == [new, old]

	def test_scan_is_idempotent(self) -> None:
		"""Test two scans of an unchanged repository agree."""
		self.commit({"a.py": "# TODO(x): a\n", "sub/b.py": "# TODO: b\n"}, author="Alice")
		self.write("c.py", "# TODO(y, x): c\n")

		first = self.scanner().scan(now=NOW)
		second = self.scanner().scan(now=NOW)

		assert first.todos == second.todos
		assert [(k.commit_id, k.label, k.sort_key) for k in first.grouped] == [
			(k.commit_id, k.label, k.sort_key) for k in second.grouped
		]
		assert list(first.grouped.values()) == list(second.grouped.values())

	def test_diff_mode(self) -> None:
		"""Test diff mode reports only annotations in changed files."""
		self.commit({"stable.py": "# TODO: stable\n"})
		self.create_branch("base")
		self.commit({"feature.py": "# TODO(feat): finish\n"}, author="Bob", timestamp=BASE_TIMESTAMP + DAY)

		result = self.scanner(mode=ScanMode.DIFF, base_branch="base").scan(now=NOW)

		assert [(t.path, t.author) for t in result.todos] == [("feature.py", "Bob")]

	def test_diff_mode_missing_branch(self) -> None:
		"""Test the scan aborts when the base branch is missing."""
		self.commit({"a.py": "# TODO: a\n"})

		with pytest.raises(ReferenceNotFoundError):
			self.scanner(mode=ScanMode.DIFF, base_branch="missing").scan(now=NOW)

	def test_blame_failure_does_not_abort(self, caplog: pytest.LogCaptureFixture) -> None:
		"""Test a file whose blame fails is still reported, unattributed."""
		self.commit({"a.py": "# TODO: a\n", "b.py": "# TODO: b\n"})

		original_blame = GitRepoContext.blame

		def flaky_blame(context: GitRepoContext, relative_path: str) -> list:
			if relative_path == "a.py":
				msg = "Failed to blame a.py: boom"
				raise GitError(msg)
			return original_blame(context, relative_path)

		with patch.object(GitRepoContext, "blame", autospec=True, side_effect=flaky_blame):
			result = self.scanner().scan(now=NOW)

		assert [(t.path, t.author) for t in result.todos] == [("a.py", UNCOMMITTED_AUTHOR), ("b.py", "Alice")]
		assert "Skipping attribution for a.py" in caplog.text

	def test_blame_only_for_files_with_annotations(self) -> None:
		"""Test history is not queried for files without TODOs."""
		self.commit({"a.py": "# TODO: a\n", "b.py": "nothing here\n", "c.py": "autodoc\n"})

		with patch.object(GitRepoContext, "blame", autospec=True, return_value=[]) as mock_blame:
			self.scanner().scan(now=NOW)

		assert [c.args[1] for c in mock_blame.call_args_list] == ["a.py"]

	def test_display_highlights_marker(self) -> None:
		"""Test annotations carry a highlighted copy of their line."""
		self.commit({"a.py": "    # todo: indented\n"})

		(todo,) = self.scanner(highlight_style="underline").scan(now=NOW).todos

		assert todo.display is not None
		assert todo.display.plain == "# todo: indented"
		assert [str(span.style) for span in todo.display.spans] == ["underline"]


@pytest.mark.unit
def test_scan_options_from_config(tmp_path: Path) -> None:
	"""Test options are read from the configuration."""
	config_file = tmp_path / "config.yml"
	config_file.write_text(
		"scan:\n  mode: diff\n  base_branch: develop\n  exclude_patterns: ['docs/']\n"
		"report:\n  newest_first: true\n  short_id_length: 10\n"
	)

	options = ScanOptions.from_config(ConfigLoader(str(config_file)))

	assert options.mode is ScanMode.DIFF
	assert options.base_branch == "develop"
	assert options.exclude_patterns == ["docs/"]
	assert options.newest_first is True
	assert options.short_id_length == 10
	assert options.binary_check_bytes == 1024
	assert options.highlight_style == "bold red"


@pytest.mark.unit
def test_now_defaults_to_current_time() -> None:
	"""Test the scan start defaults to the wall clock."""
	with patch("todotree.scanner.pipeline.CandidateSelector") as mock_selector:
		mock_selector.return_value.select.return_value = iter([])
		scanner = TodoScanner(GitRepoContext.__new__(GitRepoContext))
		before = datetime.now(tz=UTC)
		result = scanner.scan()

	assert before <= result.started_at <= before + timedelta(minutes=1)
	assert result.is_empty
