"""Grouping of annotations by commit, tag and author."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from todotree.scanner.models import NO_TAG, UNCOMMITTED_COMMIT_ID, AggregatedTree, GroupKey
from todotree.utils.time_utils import humanize_delta, to_nanos

if TYPE_CHECKING:
	from collections.abc import Iterable
	from datetime import datetime

	from todotree.scanner.models import Todo

logger = logging.getLogger(__name__)

DEFAULT_SHORT_ID_LENGTH = 7


def make_group_key(todo: Todo, now: datetime, short_id_length: int = DEFAULT_SHORT_ID_LENGTH) -> GroupKey:
	"""
	Build the group key for an annotation.

	The label reads ``[<short id>/<relative time>]``, e.g. ``[1a2b3c4/3 days ago]``.
	Unattributed annotations are labelled ``[uncommitted/<relative time>]``.
	"""
	if todo.commit_id == UNCOMMITTED_COMMIT_ID:
		short_id = "uncommitted"
	else:
		short_id = todo.commit_id[:short_id_length]
	return GroupKey(
		commit_id=todo.commit_id,
		label=f"[{short_id}/{humanize_delta(todo.commit_time, now)}]",
		sort_key=to_nanos(todo.commit_time),
	)


def tag_sort_key(tag: str) -> tuple[bool, str]:
	"""Sort key placing NO_TAG before every named tag."""
	return (tag != NO_TAG, tag)


def group_todos(
	todos: Iterable[Todo],
	now: datetime,
	newest_first: bool = False,
	short_id_length: int = DEFAULT_SHORT_ID_LENGTH,
) -> AggregatedTree:
	"""
	Group annotations into commit -> tag -> author buckets.

	An annotation with several tags is placed once under each distinct tag; one with
	no tags goes under NO_TAG. A tag repeated on one line (``TODO(x, x)``) still
	gives a single leaf entry under that tag, so no leaf list lists an annotation twice. The returned dictionaries iterate in report
	order: groups by commit time (oldest first unless ``newest_first``, ties
	broken by commit id), NO_TAG then tags alphabetically, authors
	alphabetically. Annotations keep the order they were given in.

	Args:
		todos: Annotations in discovery order.
		now: Reference time for the relative-time labels.
		newest_first: Put the most recent commit group first.
		short_id_length: Width of the commit id in group labels.

	Returns:
		The ordered grouping.
	"""
	grouped: AggregatedTree = {}
	for todo in todos:
		key = make_group_key(todo, now, short_id_length)
		tag_buckets = grouped.setdefault(key, {})
		for tag in dict.fromkeys(todo.tags or (NO_TAG,)):
			tag_buckets.setdefault(tag, {}).setdefault(todo.author, []).append(todo)

	ordered_keys = sorted(grouped, key=lambda k: (k.sort_key, k.commit_id), reverse=newest_first)

	result: AggregatedTree = {}
	for key in ordered_keys:
		tags = grouped[key]
		result[key] = {
			tag: {author: tags[tag][author] for author in sorted(tags[tag])}
			for tag in sorted(tags, key=tag_sort_key)
		}

	logger.debug("Grouped annotations into %d commit groups", len(result))
	return result
