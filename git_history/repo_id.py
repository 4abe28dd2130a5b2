"""
Repository identities.

A RepoId names a tracked repository as an owner/name pair. The loader
records, for every commit, the string form of each RepoId the commit was
discovered in.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import InvalidRepoIdError

RepoIdString = str

_OWNER_RE = re.compile(r"^[A-Za-z0-9-]+$")
_NAME_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


@dataclass(frozen=True)
class RepoId:
    owner: str
    name: str

    def __str__(self) -> str:
        return repo_id_to_string(self)


def make_repo_id(owner: str, name: str) -> RepoId:
    """
    Build a RepoId, validating both components.
    """

    if not _OWNER_RE.match(owner):
        raise InvalidRepoIdError(f"invalid repository owner: {owner!r}")
    if not _NAME_RE.match(name):
        raise InvalidRepoIdError(f"invalid repository name: {name!r}")
    return RepoId(owner=owner, name=name)


def repo_id_to_string(repo_id: RepoId) -> RepoIdString:
    return f"{repo_id.owner}/{repo_id.name}"


def string_to_repo_id(value: str) -> RepoId:
    """
    Parse an "owner/name" string back into a RepoId.
    """

    parts = value.split("/")
    if len(parts) != 2:
        raise InvalidRepoIdError(f"expected owner/name, got: {value!r}")
    return make_repo_id(parts[0], parts[1])
