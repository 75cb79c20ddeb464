"""Git repository access for todotree."""

from .utils import (
	BlameHunk,
	CommitSummary,
	GitError,
	GitRepoContext,
	ReferenceNotFoundError,
)

__all__ = [
	"BlameHunk",
	"CommitSummary",
	"GitError",
	"GitRepoContext",
	"ReferenceNotFoundError",
]
