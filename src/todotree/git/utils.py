"""Git repository access for todotree, built on pygit2."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from pygit2 import Blob, Commit, Tree, discover_repository
from pygit2 import GitError as Pygit2GitError
from pygit2.enums import DeltaStatus, DiffOption
from pygit2.repository import Repository

from todotree.utils.path_utils import build_exclude_spec, to_posix

if TYPE_CHECKING:
	from collections.abc import Iterator

	import pathspec
	from pygit2 import Oid

logger = logging.getLogger(__name__)

NULL_COMMIT_ID = "0" * 40
UNKNOWN_AUTHOR = "Unknown"


class GitError(Exception):
	"""Custom exception for Git-related errors."""


class ReferenceNotFoundError(GitError):
	"""Raised when the reference used for a diff does not exist."""


@dataclass(frozen=True)
class CommitSummary:
	"""Immutable snapshot of the commit a run of lines is attributed to."""

	commit_id: str
	author: str
	timestamp: int
	"""Commit time in seconds since the epoch."""


@dataclass(frozen=True)
class BlameHunk:
	"""A contiguous run of lines last changed by one commit."""

	commit: CommitSummary | None
	"""None when the lines are not attributed to any commit."""

	lines: int


class GitRepoContext:
	"""Read-only view of a repository and its working directory."""

	@classmethod
	def get_repo_root(cls, path: Path | None = None) -> Path:
		"""
		Find the git directory of the repository containing ``path``.

		Raises:
			GitError: If ``path`` is not inside a repository.
		"""
		start = path or Path.cwd()
		git_dir = discover_repository(str(start))
		if git_dir is None:
			msg = f"Not a git repository: {start}"
			raise GitError(msg)
		return Path(git_dir)

	def __init__(self, path: Path | None = None) -> None:
		"""
		Open the repository containing ``path`` (defaults to the current directory).

		Raises:
			GitError: If no repository is found or it has no working directory.
		"""
		git_dir = self.get_repo_root(path)
		try:
			self.repo = Repository(str(git_dir))
		except Pygit2GitError as e:
			msg = f"Could not open repository at {git_dir}: {e}"
			raise GitError(msg) from e

		if self.repo.is_bare or self.repo.workdir is None:
			msg = f"Repository at {git_dir} has no working directory"
			raise GitError(msg)

		self.workdir = Path(self.repo.workdir)
		self._commit_cache: dict[str, CommitSummary | None] = {}
		logger.debug("Opened repository %s (branch: %s)", self.workdir, self.branch or "<detached>")

	@property
	def branch(self) -> str:
		"""Current branch name, or an empty string when HEAD is detached or unborn."""
		if self.repo.head_is_unborn or self.repo.head_is_detached:
			return ""
		return self.repo.head.shorthand or ""

	def head_tree(self) -> Tree | None:
		"""Tree of the HEAD commit, or None for a repository without commits."""
		if self.repo.head_is_unborn:
			return None
		return self.repo.head.peel(Tree)

	def is_in_head(self, relative_path: str) -> bool:
		"""Whether ``relative_path`` exists in the HEAD commit."""
		tree = self.head_tree()
		if tree is None:
			return False
		try:
			tree[relative_path]
		except KeyError:
			return False
		return True

	def is_ignored(self, relative_path: str) -> bool:
		"""Check the repository's ignore rules for a workdir-relative path."""
		return self.repo.path_is_ignored(relative_path)

	def walk_files(self, exclude_spec: pathspec.PathSpec | None = None) -> Iterator[str]:
		"""
		Walk the working directory in sorted order, honouring ignore rules.

		Ignored directories are pruned instead of descended into.

		Args:
			exclude_spec: Extra patterns to skip; defaults to the built-in excludes.

		Yields:
			Repository-relative POSIX paths of the entries that are not directories.
		"""
		spec = exclude_spec or build_exclude_spec()

		for root, dirs, files in os.walk(self.workdir):
			root_path = Path(root)
			rel_root = root_path.relative_to(self.workdir)

			kept_dirs = []
			for dir_name in sorted(dirs):
				rel_dir = to_posix(rel_root / dir_name) + "/"
				if spec.match_file(rel_dir) or self.is_ignored(rel_dir):
					logger.debug("Skipping ignored directory: %s", rel_dir)
					continue
				kept_dirs.append(dir_name)
			dirs[:] = kept_dirs

			for file_name in sorted(files):
				rel_file = to_posix(rel_root / file_name)
				if spec.match_file(rel_file) or self.is_ignored(rel_file):
					continue
				yield rel_file

	def changed_files(self, reference: str) -> list[str]:
		"""
		List files that differ between ``reference`` and the working directory.

		Untracked files are included; deleted files are not.

		Args:
			reference: Branch name or any other revision git understands.

		Returns:
			Sorted repository-relative POSIX paths.

		Raises:
			ReferenceNotFoundError: If ``reference`` cannot be resolved to a tree.
		"""
		try:
			tree = self.repo.revparse_single(reference).peel(Tree)
		except (KeyError, ValueError, Pygit2GitError) as e:
			msg = f"Reference '{reference}' not found"
			raise ReferenceNotFoundError(msg) from e

		diff = tree.diff_to_workdir(flags=DiffOption.INCLUDE_UNTRACKED | DiffOption.RECURSE_UNTRACKED_DIRS)
		paths = {delta.new_file.path for delta in diff.deltas if delta.status != DeltaStatus.DELETED}
		logger.debug("%d files differ from %s", len(paths), reference)
		return sorted(paths)

	def blame(self, relative_path: str) -> list[BlameHunk]:
		"""
		Attribute the committed lines of a file to commits.

		Files absent from HEAD have no history and yield an empty list.

		Args:
			relative_path: Repository-relative path of the file.

		Returns:
			Hunks in line order, covering the file as committed in HEAD.

		Raises:
			GitError: If the blame cannot be computed.
		"""
		if not self.is_in_head(relative_path):
			logger.debug("No history for %s", relative_path)
			return []

		try:
			blame = self.repo.blame(relative_path)
		except (KeyError, ValueError, Pygit2GitError) as e:
			msg = f"Failed to blame {relative_path}: {e}"
			raise GitError(msg) from e

		return [BlameHunk(commit=self._commit_summary(hunk.final_commit_id), lines=hunk.lines_in_hunk) for hunk in blame]

	def unchanged_lines(self, relative_path: str) -> dict[int, int]:
		"""
		Match the lines of the working copy to the file as committed in HEAD.

		The HEAD blob is diffed against the bytes on disk. Lines the diff adds
		or rewrites have no entry; every other line maps to its HEAD line number.

		Args:
			relative_path: Repository-relative path of the file.

		Returns:
			Working-copy line number -> HEAD line number, both 1-indexed. Empty when
			the file is absent from HEAD or either side is binary.

		Raises:
			GitError: If the working copy cannot be read or diffed.
		"""
		tree = self.head_tree()
		if tree is None:
			return {}
		try:
			blob = self.repo[tree[relative_path].id]
		except KeyError:
			return {}
		if not isinstance(blob, Blob):
			return {}

		try:
			content = (self.workdir / relative_path).read_bytes()
			patch = blob.diff_to_buffer(content)
		except (OSError, Pygit2GitError) as e:
			msg = f"Failed to diff {relative_path} against HEAD: {e}"
			raise GitError(msg) from e

		if patch.delta.is_binary:
			return {}

		added: set[int] = set()
		removed: set[int] = set()
		for hunk in patch.hunks:
			for line in hunk.lines:
				if line.origin == "+":
					added.add(line.new_lineno)
				elif line.origin == "-":
					removed.add(line.old_lineno)

		# Unchanged lines appear in the same order on both sides
		line_count = content.count(b"\n") + (1 if content and not content.endswith(b"\n") else 0)
		mapping: dict[int, int] = {}
		head_line = 1
		for line_number in range(1, line_count + 1):
			if line_number in added:
				continue
			while head_line in removed:
				head_line += 1
			mapping[line_number] = head_line
			head_line += 1

		logger.debug("%s: %d of %d lines unchanged since HEAD", relative_path, len(mapping), line_count)
		return mapping

	def _commit_summary(self, oid: Oid) -> CommitSummary | None:
		"""Resolve a commit id to a cached summary, None for the null id."""
		commit_id = str(oid)
		if commit_id in self._commit_cache:
			return self._commit_cache[commit_id]

		summary = None
		if commit_id != NULL_COMMIT_ID:
			try:
				commit = self.repo[oid].peel(Commit)
			except (KeyError, ValueError, Pygit2GitError):
				logger.warning("Commit %s referenced by blame could not be read", commit_id)
			else:
				summary = CommitSummary(
					commit_id=commit_id,
					author=commit.author.name or UNKNOWN_AUTHOR,
					timestamp=commit.commit_time,
				)

		self._commit_cache[commit_id] = summary
		return summary
