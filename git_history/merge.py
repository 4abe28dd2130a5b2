"""
Combine repositories loaded from several tracked sources.

Forks and mirrors share commits, so the same hash can be discovered in
more than one repository. Merging keeps one Commit per hash and the
union of the repositories it was seen in.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Iterable

from .domain import Commit, Hash, Repository
from .errors import RepositoryMergeError
from .repo_id import RepoIdString


def merge_repositories(repositories: Iterable[Repository]) -> Repository:
    """
    Union several repositories into one.

    Abbreviated hashes depend on each repository's object count, so
    short_hash is not compared; the first one seen is kept.
    """

    commits: Dict[Hash, Commit] = {}
    commit_to_repo_id: Dict[Hash, FrozenSet[RepoIdString]] = {}

    for repository in repositories:
        for commit_hash, commit in repository.commits.items():
            existing = commits.get(commit_hash)
            if existing is None:
                commits[commit_hash] = commit
            elif not _same_commit(existing, commit):
                raise RepositoryMergeError(
                    f"conflicting records for commit {commit_hash}: {existing!r} != {commit!r}"
                )

        for commit_hash, repo_ids in repository.commit_to_repo_id.items():
            commit_to_repo_id[commit_hash] = commit_to_repo_id.get(commit_hash, frozenset()) | repo_ids

    return Repository(commits=commits, commit_to_repo_id=commit_to_repo_id)


def _same_commit(a: Commit, b: Commit) -> bool:
    return (a.hash, a.summary, a.parent_hashes) == (b.hash, b.summary, b.parent_hashes)
