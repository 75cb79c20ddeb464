"""Utilities for handling paths and file system operations."""

from __future__ import annotations

import logging
from pathlib import Path

import pathspec

logger = logging.getLogger(__name__)

# Directories never worth scanning, whatever the repository's ignore files say
DEFAULT_EXCLUDE_PATTERNS = [
	".git/",
	"__pycache__/",
	".mypy_cache/",
	".pytest_cache/",
	".ruff_cache/",
	".tox/",
	".nox/",
	".venv/",
	"node_modules/",
]


def build_exclude_spec(patterns: list[str] | None = None) -> pathspec.PathSpec:
	"""
	Compile exclude patterns into a gitwildmatch path spec.

	Args:
	    patterns: Extra patterns from configuration, applied on top of the defaults

	Returns:
	    A PathSpec matching repository-relative paths to exclude

	"""
	all_patterns = list(DEFAULT_EXCLUDE_PATTERNS)
	all_patterns.extend(p for p in patterns or [] if p not in all_patterns)
	logger.debug("Compiled %d exclude patterns", len(all_patterns))
	return pathspec.PathSpec.from_lines("gitwildmatch", all_patterns)


def get_relative_path(path: Path, base_path: Path) -> Path:
	"""
	Get path relative to base_path if possible, otherwise return absolute path.

	Args:
	    path: The path to make relative
	    base_path: The base path to make it relative to

	Returns:
	    Relative path if possible, otherwise absolute path

	"""
	try:
		return path.relative_to(base_path)
	except ValueError:
		return path.absolute()


def to_posix(path: Path | str) -> str:
	"""Render a repository-relative path with forward slashes."""
	return Path(path).as_posix()
