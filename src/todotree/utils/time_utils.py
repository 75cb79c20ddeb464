"""Timestamp helpers: epoch conversions and relative-time phrases."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)

# Upper bound (in seconds) of each phrase, checked in order
_MINUTE = 60
_HOUR = 60 * _MINUTE
_DAY = 24 * _HOUR
_WEEK = 7 * _DAY
_MONTH = 30 * _DAY
_YEAR = 365 * _DAY
_NOW_THRESHOLD = 10


def from_timestamp(seconds: int) -> datetime:
	"""Convert seconds since the epoch to an aware UTC datetime."""
	return EPOCH + timedelta(seconds=seconds)


def to_nanos(moment: datetime) -> int:
	"""Nanoseconds since the epoch, computed without float rounding."""
	delta = moment - EPOCH
	return (delta.days * 86_400 + delta.seconds) * 1_000_000_000 + delta.microseconds * 1_000


def _plural(count: int, unit: str, article: str = "a") -> str:
	if count == 1:
		return f"{article} {unit}"
	return f"{count} {unit}s"


def humanize_delta(moment: datetime, now: datetime) -> str:
	"""
	Describe ``moment`` relative to ``now``.

	Examples: ``now``, ``5 minutes ago``, ``an hour ago``, ``3 weeks ago``,
	``in 2 days`` for a moment in the future.

	"""
	seconds = int((now - moment).total_seconds())
	in_future = seconds < 0
	seconds = abs(seconds)

	if seconds < _NOW_THRESHOLD:
		return "now"
	if seconds < _MINUTE:
		phrase = _plural(seconds, "second")
	elif seconds < _HOUR:
		phrase = _plural(seconds // _MINUTE, "minute")
	elif seconds < _DAY:
		phrase = _plural(seconds // _HOUR, "hour", article="an")
	elif seconds < _WEEK:
		phrase = _plural(seconds // _DAY, "day")
	elif seconds < _MONTH:
		phrase = _plural(seconds // _WEEK, "week")
	elif seconds < _YEAR:
		phrase = _plural(seconds // _MONTH, "month")
	else:
		phrase = _plural(seconds // _YEAR, "year")

	return f"in {phrase}" if in_future else f"{phrase} ago"
