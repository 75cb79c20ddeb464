"""Selection of the files a scan looks at."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from todotree.scanner.models import ScanMode
from todotree.utils.file_utils import DEFAULT_BINARY_CHECK_BYTES, is_text_file, read_file_lines
from todotree.utils.path_utils import build_exclude_spec

if TYPE_CHECKING:
	from collections.abc import Iterator
	from pathlib import Path

	from todotree.git.utils import GitRepoContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CandidateFile:
	"""A text file selected for scanning, with its current lines."""

	path: str
	"""Repository-relative POSIX path."""

	absolute_path: Path
	lines: list[str]


class CandidateSelector:
	"""
	Produces the files to scan under one of two policies.

	In tree mode every file of the working directory that is not ignored is
	a candidate. In diff mode only files that differ from ``base_branch``
	(including untracked ones) are. In both modes missing, non-regular and
	binary files are dropped silently.

	"""

	def __init__(
		self,
		repo_context: GitRepoContext,
		mode: ScanMode = ScanMode.TREE,
		base_branch: str = "main",
		exclude_patterns: list[str] | None = None,
		binary_check_bytes: int = DEFAULT_BINARY_CHECK_BYTES,
	) -> None:
		"""
		Configure the selector.

		Args:
			repo_context: Opened repository.
			mode: Selection policy.
			base_branch: Reference compared against in diff mode.
			exclude_patterns: Extra gitwildmatch patterns to skip.
			binary_check_bytes: Prefix size read by the binary check.
		"""
		self.repo_context = repo_context
		self.mode = mode
		self.base_branch = base_branch
		self.exclude_spec = build_exclude_spec(exclude_patterns)
		self.binary_check_bytes = binary_check_bytes

	def candidate_paths(self) -> list[str]:
		"""
		Repository-relative paths the current policy selects, before content checks.

		Raises:
			ReferenceNotFoundError: In diff mode, if the base branch does not exist.
		"""
		if self.mode is ScanMode.DIFF:
			return [p for p in self.repo_context.changed_files(self.base_branch) if not self.exclude_spec.match_file(p)]
		return list(self.repo_context.walk_files(self.exclude_spec))

	def select(self) -> Iterator[CandidateFile]:
		"""
		Yield readable text files in path order.

		Raises:
			ReferenceNotFoundError: In diff mode, if the base branch does not exist.
		"""
		for relative_path in self.candidate_paths():
			candidate = self._load(relative_path)
			if candidate is not None:
				yield candidate

	def _load(self, relative_path: str) -> CandidateFile | None:
		absolute_path = self.repo_context.workdir / relative_path

		if not absolute_path.is_file():
			logger.debug("Skipping missing or non-regular file: %s", relative_path)
			return None
		if not is_text_file(absolute_path, self.binary_check_bytes):
			logger.debug("Skipping binary file: %s", relative_path)
			return None

		try:
			lines = read_file_lines(absolute_path)
		except OSError as e:
			logger.warning("Could not read %s: %s", relative_path, e)
			return None

		return CandidateFile(path=relative_path, absolute_path=absolute_path, lines=lines)
