"""
Core domain models for git-history.

These dataclasses describe the in-memory commit graph and file-level
diffs between commits. They carry no git or subprocess dependencies so
parsers and tests can construct them directly.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Tuple

from .repo_id import RepoIdString

Hash = str
Path = str


@dataclass(frozen=True)
class Commit:
    """
    A single commit in the history graph.

    short_hash is an abbreviation and is not guaranteed to be unique.
    parent_hashes is empty for a root commit and has two or more
    entries for a merge.
    """

    hash: Hash
    short_hash: str
    summary: str
    parent_hashes: Tuple[Hash, ...] = ()


@dataclass(frozen=True)
class Repository:
    """
    Every commit reachable from a reference, plus the repositories each
    commit was found in.

    After a successful load both maps have the same key set.
    """

    commits: Dict[Hash, Commit] = field(default_factory=dict)
    commit_to_repo_id: Dict[Hash, FrozenSet[RepoIdString]] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "Repository":
        return cls(commits={}, commit_to_repo_id={})


class ChangeType(enum.Enum):
    ADDED = "A"
    MODIFIED = "M"
    DELETED = "D"
    RENAMED = "R"


@dataclass(frozen=True)
class ChangedFile:
    """
    A path touched between two commits.

    For renames only the destination path is kept.
    """

    path: Path
    change_type: ChangeType


@dataclass(frozen=True)
class CommitDiff:
    commit: Hash
    prev_commit: Hash
    changed_files: Dict[Path, ChangedFile] = field(default_factory=dict)
