"""Utility functions for file operations in todotree."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_BINARY_CHECK_BYTES = 1024


def is_text_file(file_path: Path, check_bytes: int = DEFAULT_BINARY_CHECK_BYTES) -> bool:
	"""
	Check whether a file looks like text.

	A file is binary when the first ``check_bytes`` bytes contain a NUL byte.
	Files that cannot be read are not text.

	Args:
	    file_path: Path to the file to check
	    check_bytes: Size of the prefix to inspect

	Returns:
	    True if the file can be read and its prefix has no NUL byte

	"""
	try:
		with file_path.open("rb") as f:
			chunk = f.read(check_bytes)
	except OSError:
		logger.debug("Could not read %s for the binary check", file_path)
		return False
	return b"\x00" not in chunk


def read_file_content(file_path: Path | str) -> str:
	"""
	Read content from a file with proper error handling.

	Args:
	    file_path: Path to the file to read

	Returns:
	    Content of the file as string

	Raises:
	    OSError: If the file cannot be read

	"""
	path_obj = Path(file_path)
	try:
		with path_obj.open("r", encoding="utf-8", newline="") as f:
			return f.read()
	except UnicodeDecodeError:
		logger.debug("File %s contains non-UTF-8 characters, decoding with errors='replace'", path_obj)
		with path_obj.open("rb") as f:
			return f.read().decode("utf-8", errors="replace")


def split_lines(content: str) -> list[str]:
	"""
	Split file content into lines the way git counts them.

	Only ``\\n`` ends a line; a trailing ``\\r`` is removed from each line.
	A final newline does not start an extra empty line.

	"""
	if not content:
		return []
	lines = content.split("\n")
	if lines[-1] == "":
		lines.pop()
	return [line.removesuffix("\r") for line in lines]


def read_file_lines(file_path: Path | str) -> list[str]:
	"""Read a file and return its lines without line terminators."""
	return split_lines(read_file_content(file_path))
