import shutil
import subprocess
from pathlib import Path

import pytest

from git_history.config import Config
from git_history.domain import ChangeType
from git_history.errors import GitError, ReferenceResolutionError
from git_history.git_adapter import LocalGit
from git_history.loader import diff_commits, load_graph, load_repository, resolve_tree_hash
from git_history.repo_id import make_repo_id


pytestmark = pytest.mark.skipif(
    shutil.which("git") is None,
    reason="git is not installed; integration tests against a real repository are disabled",
)

REPO_ID = make_repo_id("example", "project")


def _run_git(args, cwd: Path) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        text=True,
        capture_output=True,
        check=True,
    )


def _rev_parse(ref: str, cwd: Path) -> str:
    return _run_git(["rev-parse", ref], cwd=cwd).stdout.strip()


@pytest.fixture
def repo(tmp_path):
    repo = tmp_path / "repo"
    repo.mkdir()
    _run_git(["init", "-q"], cwd=repo)
    _run_git(["config", "user.name", "git-history"], cwd=repo)
    _run_git(["config", "user.email", "git-history@example.com"], cwd=repo)
    _run_git(["config", "commit.gpgsign", "false"], cwd=repo)
    return repo


def _commit(repo: Path, message: str) -> str:
    _run_git(["add", "-A"], cwd=repo)
    _run_git(["commit", "-q", "-m", message], cwd=repo)
    return _rev_parse("HEAD", repo)


def test_empty_repository(repo):
    repository = load_repository(Config(repo_id=REPO_ID, repository_path=str(repo)))
    assert repository.commits == {}
    assert repository.commit_to_repo_id == {}


def test_history_with_merge(repo):
    """
    Build a small history with a branch and a merge commit:

        base -- main-work ---- merge
            \\                  /
             feature-work ----
    """

    (repo / "a.txt").write_text("a\n")
    base = _commit(repo, "Initial commit")
    main_branch = _run_git(["rev-parse", "--abbrev-ref", "HEAD"], cwd=repo).stdout.strip()

    _run_git(["checkout", "-q", "-b", "feature"], cwd=repo)
    (repo / "feature.txt").write_text("feature\n")
    feature = _commit(repo, "Add feature | with a pipe")

    _run_git(["checkout", "-q", main_branch], cwd=repo)
    (repo / "main.txt").write_text("main\n")
    main_work = _commit(repo, "Main work")

    _run_git(["merge", "-q", "--no-ff", "-m", "Merge branch 'feature'", "feature"], cwd=repo)
    merge = _rev_parse("HEAD", repo)

    repository = load_repository(Config(repo_id=REPO_ID, repository_path=str(repo)))

    assert set(repository.commits) == {base, feature, main_work, merge}
    assert set(repository.commit_to_repo_id) == set(repository.commits)
    assert repository.commits[base].parent_hashes == ()
    assert repository.commits[merge].parent_hashes == (main_work, feature)
    assert repository.commits[feature].summary == "Add feature | with a pipe"
    assert merge.startswith(repository.commits[merge].short_hash)

    # Loading from the feature branch only sees its own ancestry.
    feature_only = load_graph(LocalGit(str(repo)), "feature", REPO_ID)
    assert set(feature_only.commits) == {base, feature}


def test_unknown_root_ref(repo):
    (repo / "a.txt").write_text("a\n")
    _commit(repo, "Initial commit")

    with pytest.raises(ReferenceResolutionError):
        load_repository(Config(repo_id=REPO_ID, repository_path=str(repo), root_ref="no-such-branch"))


def test_tree_hash_and_diff(repo):
    (repo / "keep.txt").write_text("keep\n")
    (repo / "edit.txt").write_text("before\n")
    (repo / "drop.txt").write_text("drop\n")
    (repo / "move.txt").write_text("a file that is moved without any change\n" * 5)
    first = _commit(repo, "First")

    (repo / "edit.txt").write_text("after\n")
    (repo / "drop.txt").unlink()
    (repo / "new.txt").write_text("new\n")
    (repo / "move.txt").rename(repo / "moved.txt")
    second = _commit(repo, "Second")

    git = LocalGit(str(repo))
    assert resolve_tree_hash(git, second) == _rev_parse(f"{second}^{{tree}}", repo)

    diff = diff_commits(git, second, first)
    kinds = {path: changed.change_type for path, changed in diff.changed_files.items()}
    assert kinds == {
        "edit.txt": ChangeType.MODIFIED,
        "drop.txt": ChangeType.DELETED,
        "new.txt": ChangeType.ADDED,
        "moved.txt": ChangeType.RENAMED,
    }


def test_diff_with_quoted_file_names(repo):
    (repo / "plain.txt").write_text("plain\n")
    first = _commit(repo, "First")

    (repo / 'we"ird.txt').write_text("quote\n")
    (repo / "café.txt").write_text("accent\n")
    (repo / "back\\slash.txt").write_text("backslash\n")
    second = _commit(repo, "Second")

    diff = diff_commits(LocalGit(str(repo)), second, first)

    assert set(diff.changed_files) == {'we"ird.txt', "café.txt", "back\\slash.txt"}
    assert all(c.change_type is ChangeType.ADDED for c in diff.changed_files.values())


def test_history_failure_is_not_reported_as_bad_ref(repo, monkeypatch):
    (repo / "a.txt").write_text("a\n")
    _commit(repo, "Initial commit")

    git = LocalGit(str(repo))
    real_run = git.run

    def failing_log(args):
        if args[0] == "log":
            raise GitError("git command timed out after 1s: git log")
        return real_run(args)

    monkeypatch.setattr(git, "run", failing_log)

    with pytest.raises(GitError) as excinfo:
        load_graph(git, "HEAD", REPO_ID)
    assert not isinstance(excinfo.value, ReferenceResolutionError)
