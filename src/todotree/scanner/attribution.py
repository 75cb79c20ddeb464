"""Line-level attribution of file contents to commits."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from todotree.git.utils import GitError

if TYPE_CHECKING:
	from collections.abc import Iterable

	from todotree.git.utils import BlameHunk, CommitSummary, GitRepoContext

logger = logging.getLogger(__name__)

# 1-indexed line number -> commit that last changed it
LineAttributionMap = dict[int, "CommitSummary"]


def build_line_map(hunks: Iterable[BlameHunk]) -> LineAttributionMap:
	"""
	Expand blame hunks into a per-line map.

	Lines are numbered from 1 in hunk order. Lines of unattributed hunks
	take up their line numbers but get no entry.

	"""
	line_map: LineAttributionMap = {}
	current_line = 1
	for hunk in hunks:
		if hunk.commit is not None:
			for line_number in range(current_line, current_line + hunk.lines):
				line_map[line_number] = hunk.commit
		current_line += hunk.lines
	return line_map


def remap_line_map(committed: LineAttributionMap, unchanged: dict[int, int]) -> LineAttributionMap:
	"""Re-key a HEAD line map by working-copy line numbers, keeping only unchanged lines."""
	return {line: committed[head_line] for line, head_line in unchanged.items() if head_line in committed}


class HistoryAttributor:
	"""Attributes the lines of files in one repository to commits."""

	def __init__(self, repo_context: GitRepoContext) -> None:
		"""Wrap an opened repository."""
		self.repo_context = repo_context

	def hunks(self, relative_path: str) -> list[BlameHunk]:
		"""
		Blame hunks for a file, empty when the file has no usable history.

		A failed blame is logged and treated like a file without history.
		"""
		try:
			return self.repo_context.blame(relative_path)
		except GitError as e:
			logger.warning("Skipping attribution for %s: %s", relative_path, e)
			return []

	def line_map(self, relative_path: str) -> LineAttributionMap:
		"""
		Per-line commit map for the working copy of a file.

		Blame covers the file as committed in HEAD; its lines are carried over
		to the working copy through the lines left unchanged since then. Lines
		added or rewritten locally get no entry.

		"""
		committed = build_line_map(self.hunks(relative_path))
		if not committed:
			return {}

		try:
			unchanged = self.repo_context.unchanged_lines(relative_path)
		except GitError as e:
			logger.warning("Skipping attribution for %s: %s", relative_path, e)
			return {}

		return remap_line_map(committed, unchanged)
