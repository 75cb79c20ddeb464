"""Parsing of TODO annotations out of single source lines."""

from __future__ import annotations

import re
from dataclasses import dataclass

from rich.text import Text

DEFAULT_HIGHLIGHT_STYLE = "bold red"

# TODO as a whole word, optional "(tag, tag)", optional "!" or ":", then the message
TODO_PATTERN = re.compile(r"\bTODO\b(?:\((?P<tags>[^)]*)\))?[!:]?(?P<message>.*)$", re.IGNORECASE)

MARKER_PATTERN = re.compile(r"\bTODO\b", re.IGNORECASE)

# One layer of these is removed from around a message
_ENCLOSING_PAIRS = {'"': '"', "'": "'", "(": ")"}


@dataclass(frozen=True)
class ParsedTodo:
	"""Result of parsing one line."""

	tags: tuple[str, ...]
	message: str
	display: Text


def might_contain_todo(line: str) -> bool:
	"""Cheap substring check run before the regular expression."""
	return "todo" in line.lower()


def split_tags(raw_tags: str | None) -> tuple[str, ...]:
	"""Split a comma separated tag list, dropping blank entries."""
	if not raw_tags:
		return ()
	return tuple(tag for tag in (part.strip() for part in raw_tags.split(",")) if tag)


def strip_enclosing(message: str) -> str:
	"""Trim whitespace and one symmetric layer of quotes or parentheses."""
	message = message.strip()
	if len(message) >= 2 and _ENCLOSING_PAIRS.get(message[0]) == message[-1]:
		message = message[1:-1].strip()
	return message


def highlight_todo(line: str, style: str = DEFAULT_HIGHLIGHT_STYLE) -> Text:
	"""Return ``line`` as rich text with every whole-word TODO styled."""
	text = Text(line)
	text.highlight_regex(MARKER_PATTERN, style=style)
	return text


def parse_todo(line: str, highlight_style: str = DEFAULT_HIGHLIGHT_STYLE) -> ParsedTodo | None:
	"""
	Parse a TODO annotation from a single line.

	The message may come back empty (``# TODO``); callers decide what to do
	with such lines.

	Args:
		line: One line of text without its line terminator.
		highlight_style: Rich style for the markers in the display copy.

	Returns:
		The parsed annotation, or None if the line has no TODO marker.
	"""
	match = TODO_PATTERN.search(line)
	if match is None:
		return None

	return ParsedTodo(
		tags=split_tags(match.group("tags")),
		message=strip_enclosing(match.group("message")),
		display=highlight_todo(line.strip(), style=highlight_style),
	)
