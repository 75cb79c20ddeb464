"""Data models for scanned TODO annotations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from todotree.git.utils import NULL_COMMIT_ID

if TYPE_CHECKING:
	from datetime import datetime

	from rich.text import Text

# Placeholder author for lines no commit is responsible for
UNCOMMITTED_AUTHOR = "Uncommitted"

# Placeholder commit id for the same lines
UNCOMMITTED_COMMIT_ID = NULL_COMMIT_ID

# Tag bucket for annotations without an explicit tag list; sorts first
NO_TAG = "__no_tag__"


class ScanMode(Enum):
	"""Which files a scan looks at."""

	TREE = "tree"  # Every non-ignored text file in the working directory
	DIFF = "diff"  # Files that differ from a reference branch


@dataclass(frozen=True)
class Todo:
	"""A TODO annotation found in a file, with the commit it is attributed to."""

	path: str
	"""Repository-relative POSIX path of the file."""

	line: int
	"""Line number (1-indexed)."""

	tags: tuple[str, ...]
	"""Tags from ``TODO(tag, ...)``, in source order."""

	message: str
	"""Text after the marker and tag list."""

	author: str
	"""Author of the attributed commit, or UNCOMMITTED_AUTHOR."""

	commit_id: str
	"""Full id of the attributed commit, or UNCOMMITTED_COMMIT_ID."""

	commit_time: datetime
	"""Commit time, or the scan start time for unattributed lines."""

	display: Text | None = field(default=None, compare=False, repr=False)
	"""The source line with TODO markers highlighted, for reports."""

	@property
	def is_committed(self) -> bool:
		"""Whether a commit is responsible for this line."""
		return self.commit_id != UNCOMMITTED_COMMIT_ID


@dataclass(frozen=True)
class GroupKey:
	"""
	Bucket of annotations that come from one commit.

	Equality and hashing use only ``commit_id``; ``label`` is for display and
	``sort_key`` orders groups numerically.

	"""

	commit_id: str
	label: str = field(compare=False)
	sort_key: int = field(compare=False)
	"""Commit time in nanoseconds since the epoch."""


# group -> tag -> author -> annotations in discovery order
AggregatedTree = dict[GroupKey, dict[str, dict[str, list[Todo]]]]
