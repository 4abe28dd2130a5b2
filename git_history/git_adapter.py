"""
Git integration for git-history.

The loader never starts processes itself. It talks to a GitRunner, whose
only job is to run one git command and hand back its stdout. LocalGit
is the runner backed by the real git binary; tests substitute runners
that replay canned output.
"""

from __future__ import annotations

import logging
import subprocess
from abc import ABC, abstractmethod
from typing import List, Optional

from .errors import GitError

LOG = logging.getLogger(__name__)


class GitRunner(ABC):
    """
    Abstract interface for running git commands.
    """

    @abstractmethod
    def run(self, args: List[str]) -> str:
        """
        Run git with the given arguments and return its stdout.

        Implementations must raise GitError when the command exits with
        a non-zero status or cannot be started at all.
        """


class LocalGit(GitRunner):
    """
    Run git as a subprocess inside a repository directory.

    Every call starts a fresh process, so one instance can be shared by
    callers issuing lookups in parallel.
    """

    def __init__(
        self,
        repository_path: str,
        git_binary: str = "git",
        timeout: Optional[float] = None,
    ) -> None:
        self.repository_path = repository_path
        self.git_binary = git_binary
        self.timeout = timeout

    def run(self, args: List[str]) -> str:
        return _run_git(
            args,
            cwd=self.repository_path,
            git_binary=self.git_binary,
            timeout=self.timeout,
        ).stdout


def _run_git(
    args: List[str],
    cwd: Optional[str] = None,
    git_binary: str = "git",
    timeout: Optional[float] = None,
) -> subprocess.CompletedProcess[str]:
    """
    Run a git command and return the completed process.

    Error handling and logging for every git invocation live here.
    """

    cmd = [git_binary, *args]
    LOG.debug("Running git command: %s", " ".join(cmd))
    try:
        completed = subprocess.run(
            cmd,
            cwd=cwd,
            check=False,
            text=True,
            capture_output=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        raise GitError(f"git command timed out after {timeout}s: {' '.join(cmd)}") from exc
    except OSError as exc:
        raise GitError(f"failed to execute git: {exc}") from exc

    if completed.returncode != 0:
        stderr = (completed.stderr or "").strip()
        LOG.debug("git stderr: %s", stderr)
        message = f"git command failed: {' '.join(cmd)}"
        if stderr:
            message = f"{message}: {stderr}"
        raise GitError(message)

    return completed
