"""
Configuration model for git-history.

Callers construct a Config and pass it to loader.load_repository so the
repository location and git invocation can be adjusted without relying
on global state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from .repo_id import RepoId, RepoIdString


@dataclass
class Config:
    """
    Settings for loading one repository.

    root_ref accepts anything `git rev-parse` does: "HEAD",
    "origin/master", a tag, or a full SHA to pin a particular state.
    """

    repo_id: Union[RepoId, RepoIdString]
    repository_path: str = "."
    root_ref: str = "HEAD"
    git_binary: str = "git"
    timeout: Optional[float] = None
