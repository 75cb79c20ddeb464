"""The scan pipeline: select files, parse annotations, attribute and group them."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from todotree.scanner.aggregator import DEFAULT_SHORT_ID_LENGTH, group_todos
from todotree.scanner.attribution import HistoryAttributor
from todotree.scanner.models import UNCOMMITTED_AUTHOR, UNCOMMITTED_COMMIT_ID, AggregatedTree, ScanMode, Todo
from todotree.scanner.parser import DEFAULT_HIGHLIGHT_STYLE, might_contain_todo, parse_todo
from todotree.scanner.selector import CandidateSelector
from todotree.utils.file_utils import DEFAULT_BINARY_CHECK_BYTES
from todotree.utils.time_utils import from_timestamp

if TYPE_CHECKING:
	from collections.abc import Iterator

	from todotree.git.utils import GitRepoContext
	from todotree.scanner.attribution import LineAttributionMap
	from todotree.scanner.selector import CandidateFile
	from todotree.utils.config_loader import ConfigLoader

logger = logging.getLogger(__name__)


@dataclass
class ScanOptions:
	"""Settings for one scan run."""

	mode: ScanMode = ScanMode.TREE
	base_branch: str = "main"
	exclude_patterns: list[str] = field(default_factory=list)
	binary_check_bytes: int = DEFAULT_BINARY_CHECK_BYTES
	newest_first: bool = False
	short_id_length: int = DEFAULT_SHORT_ID_LENGTH
	highlight_style: str = DEFAULT_HIGHLIGHT_STYLE

	@classmethod
	def from_config(cls, config: ConfigLoader) -> ScanOptions:
		"""Read options from a loaded configuration."""
		return cls(
			mode=ScanMode(config.get("scan.mode", ScanMode.TREE.value)),
			base_branch=config.get("scan.base_branch", "main"),
			exclude_patterns=list(config.get("scan.exclude_patterns", [])),
			binary_check_bytes=config.get("scan.binary_check_bytes", DEFAULT_BINARY_CHECK_BYTES),
			newest_first=config.get("report.newest_first", False),
			short_id_length=config.get("report.short_id_length", DEFAULT_SHORT_ID_LENGTH),
			highlight_style=config.get("report.highlight_style", DEFAULT_HIGHLIGHT_STYLE),
		)


@dataclass
class ScanResult:
	"""Annotations found by a scan and their grouping."""

	todos: list[Todo]
	grouped: AggregatedTree
	started_at: datetime
	files_scanned: int = 0

	@property
	def is_empty(self) -> bool:
		"""Whether the scan found no annotations."""
		return not self.todos


class TodoScanner:
	"""Runs the scan pipeline over one repository."""

	def __init__(self, repo_context: GitRepoContext, options: ScanOptions | None = None) -> None:
		"""
		Prepare a scan.

		Args:
			repo_context: Opened repository, only read from.
			options: Scan settings; defaults scan the whole tree.
		"""
		self.repo_context = repo_context
		self.options = options or ScanOptions()
		self.selector = CandidateSelector(
			repo_context,
			mode=self.options.mode,
			base_branch=self.options.base_branch,
			exclude_patterns=self.options.exclude_patterns,
			binary_check_bytes=self.options.binary_check_bytes,
		)
		self.attributor = HistoryAttributor(repo_context)

	def scan(self, now: datetime | None = None) -> ScanResult:
		"""
		Scan the repository.

		Args:
			now: Scan start time; stands in for the commit time of unattributed
				lines and anchors relative-time labels. Defaults to the current time.

		Returns:
			The annotations in discovery order and their grouping.

		Raises:
			ReferenceNotFoundError: In diff mode, if the base branch does not exist.
		"""
		started_at = now or datetime.now(tz=UTC)

		todos: list[Todo] = []
		files_scanned = 0
		for candidate in self.selector.select():
			files_scanned += 1
			todos.extend(self.scan_file(candidate, started_at))

		logger.debug("Found %d annotations in %d files", len(todos), files_scanned)

		grouped = group_todos(
			todos,
			now=started_at,
			newest_first=self.options.newest_first,
			short_id_length=self.options.short_id_length,
		)
		return ScanResult(todos=todos, grouped=grouped, started_at=started_at, files_scanned=files_scanned)

	def scan_file(self, candidate: CandidateFile, started_at: datetime) -> Iterator[Todo]:
		"""
		Yield the annotations of one file, attributed to commits.

		Blame is only computed for files that contain at least one annotation.
		Annotations whose message is empty are dropped.
		"""
		line_map: LineAttributionMap | None = None

		for line_number, line in enumerate(candidate.lines, start=1):
			if not might_contain_todo(line):
				continue
			parsed = parse_todo(line, highlight_style=self.options.highlight_style)
			if parsed is None or not parsed.message:
				continue

			if line_map is None:
				line_map = self.attributor.line_map(candidate.path)

			commit = line_map.get(line_number)
			if commit is None:
				author, commit_id, commit_time = UNCOMMITTED_AUTHOR, UNCOMMITTED_COMMIT_ID, started_at
			else:
				author, commit_id, commit_time = commit.author, commit.commit_id, from_timestamp(commit.timestamp)

			yield Todo(
				path=candidate.path,
				line=line_number,
				tags=parsed.tags,
				message=parsed.message,
				author=author,
				commit_id=commit_id,
				commit_time=commit_time,
				display=parsed.display,
			)
