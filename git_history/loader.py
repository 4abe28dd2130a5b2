"""
Load a git repository's history into memory.

The commit graph is read with a single `git log` call. Tree hashes and
file-level diffs are looked up afterwards, one commit (or commit pair)
at a time. Blob contents are never loaded.

If the repository contains file names that are not valid UTF-8, the
result is undefined.
"""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, List, Union

from .config import Config
from .domain import ChangedFile, Commit, CommitDiff, Hash, Path, Repository
from .errors import GitError, ObjectNotFoundError, ReferenceResolutionError
from .git_adapter import GitRunner, LocalGit
from .line_parser import (
    HISTORY_FORMAT,
    find_tree_hash,
    iter_lines,
    parse_commit_line,
    parse_name_status_line,
)
from .repo_id import RepoId, RepoIdString, repo_id_to_string

LOG = logging.getLogger(__name__)

# Probed to tell an empty repository apart from a bad root reference.
DEFAULT_REF = "HEAD"


def load_repository(config: Config) -> Repository:
    """
    Load the repository described by config using the local git binary.
    """

    git = LocalGit(config.repository_path, git_binary=config.git_binary, timeout=config.timeout)
    return load_graph(git, config.root_ref, config.repo_id)


def load_graph(git: GitRunner, root_ref: str, repo_id: Union[RepoId, RepoIdString]) -> Repository:
    """
    Load every commit reachable from root_ref.

    An empty repository is valid input and yields an empty Repository.
    HEAD is probed rather than root_ref so that a non-empty repository
    with a missing root_ref still fails with ReferenceResolutionError.
    """

    if not _has_commits(git):
        LOG.info("Repository has no commits; returning an empty repository")
        return Repository.empty()

    commits = _find_commits(git, root_ref)
    repo_id_string = repo_id if isinstance(repo_id, str) else repo_id_to_string(repo_id)
    repo_ids: FrozenSet[RepoIdString] = frozenset([repo_id_string])

    LOG.info("Loaded %d commits reachable from %s for %s", len(commits), root_ref, repo_id_string)
    return Repository(
        commits={commit.hash: commit for commit in commits},
        commit_to_repo_id={commit.hash: repo_ids for commit in commits},
    )


def _has_commits(git: GitRunner) -> bool:
    try:
        git.run(["rev-parse", "--verify", DEFAULT_REF])
    except GitError:
        return False
    return True


def _find_commits(git: GitRunner, root_ref: str) -> List[Commit]:
    _verify_ref(git, root_ref)
    output = git.run(["log", f"--format={HISTORY_FORMAT}", root_ref, "--"])
    return [parse_commit_line(line) for line in iter_lines(output)]


def _verify_ref(git: GitRunner, ref: str) -> None:
    try:
        git.run(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"])
    except GitError as exc:
        raise ReferenceResolutionError(ref, str(exc)) from exc


def resolve_tree_hash(git: GitRunner, commit_hash: Hash) -> Hash:
    """
    Return the hash of the root tree recorded in a commit object.
    """

    try:
        output = git.run(["cat-file", "-p", commit_hash])
    except GitError as exc:
        raise ObjectNotFoundError(commit_hash, str(exc)) from exc

    tree_hash = find_tree_hash(output)
    if tree_hash is None:
        raise ObjectNotFoundError(commit_hash)
    return tree_hash


def diff_commits(git: GitRunner, commit_hash: Hash, prev_commit_hash: Hash) -> CommitDiff:
    """
    Compute the files changed going from prev_commit_hash to commit_hash.

    When several lines report the same path, the last one wins.
    """

    # Keep UTF-8 names literal; paths git still quotes are unquoted by the parser.
    output = git.run(
        [
            "-c",
            "core.quotePath=false",
            "diff",
            "--name-status",
            "--find-renames",
            prev_commit_hash,
            commit_hash,
        ]
    )

    changed_files: Dict[Path, ChangedFile] = {}
    for line in iter_lines(output):
        changed = parse_name_status_line(line)
        changed_files[changed.path] = changed

    LOG.debug("%d files changed between %s and %s", len(changed_files), prev_commit_hash, commit_hash)
    return CommitDiff(commit=commit_hash, prev_commit=prev_commit_hash, changed_files=changed_files)
