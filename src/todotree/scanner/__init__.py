"""TODO scanning: selection, parsing, attribution and grouping."""

from .models import NO_TAG, UNCOMMITTED_AUTHOR, GroupKey, ScanMode, Todo
from .pipeline import ScanOptions, ScanResult, TodoScanner

__all__ = [
	"NO_TAG",
	"UNCOMMITTED_AUTHOR",
	"GroupKey",
	"ScanMode",
	"ScanOptions",
	"ScanResult",
	"Todo",
	"TodoScanner",
]
