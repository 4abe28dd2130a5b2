"""
Custom exception types used across git-history.

Every failure raised by the loader derives from GitHistoryError so
callers can catch the whole family at once, while still being able to
tell a missing reference apart from a line git printed in a shape we do
not understand.
"""

from __future__ import annotations

from typing import Optional


class GitHistoryError(Exception):
    """Base class for all git-history specific errors."""


class GitError(GitHistoryError):
    """Raised when a git invocation fails."""


class ReferenceResolutionError(GitError):
    """Raised when a reference cannot be resolved in a non-empty repository."""

    def __init__(self, ref: str, detail: Optional[str] = None) -> None:
        message = f"cannot resolve reference {ref!r}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.ref = ref


class ObjectNotFoundError(GitHistoryError):
    """Raised when a commit object is missing or has no tree line."""

    def __init__(self, commit_hash: str, detail: str = "tree not found") -> None:
        super().__init__(f"commit {commit_hash}: {detail}")
        self.commit_hash = commit_hash


class UnrecognizedChangeTypeError(GitHistoryError):
    """Raised when a name-status line starts with an unknown status code."""

    def __init__(self, code: str, line: str) -> None:
        super().__init__(f"diff type not recognised: {code!r} in line {line!r}")
        self.code = code
        self.line = line


class MalformedLineError(GitHistoryError):
    """Raised when a line of git output is missing a delimiter or field."""

    def __init__(self, line: str, reason: str) -> None:
        super().__init__(f"malformed line {line!r}: {reason}")
        self.line = line
        self.reason = reason


class InvalidRepoIdError(GitHistoryError, ValueError):
    """Raised when a repository identity is not of the form owner/name."""


class RepositoryMergeError(GitHistoryError):
    """Raised when two repositories disagree about the same commit."""
