"""
Shared fixtures for repomirror tests.

Provides a projects directory in tmp_path and factories that build real
git repositories (working copies, bare repositories, fake metadata) so the
locator and the end-to-end tests can run against the real filesystem.
"""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Callable, Iterable, Optional

import pytest

from repomirror.config.settings import MODE_LOCAL, MODE_REMOTE, RunConfig


# Keep the user's global git config (signing, hooks, templates) out of tests
GIT_ENV = {
    **os.environ,
    "GIT_AUTHOR_NAME": "Test Author",
    "GIT_AUTHOR_EMAIL": "author@example.com",
    "GIT_COMMITTER_NAME": "Test Author",
    "GIT_COMMITTER_EMAIL": "author@example.com",
    "GIT_CONFIG_GLOBAL": os.devnull,
    "GIT_CONFIG_NOSYSTEM": "1",
}


def run_git(cwd: Path, *args: str) -> str:
    """Run git for test setup; fail loudly."""
    result = subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        capture_output=True,
        text=True,
        env=GIT_ENV,
    )
    assert result.returncode == 0, f"git {' '.join(args)} failed: {result.stderr}"
    return result.stdout.strip()


@pytest.fixture
def git() -> Callable[..., str]:
    """The run_git helper, as a fixture."""
    return run_git


@pytest.fixture
def projects_dir(tmp_path: Path) -> Path:
    """An empty ~/Projects stand-in."""
    path = tmp_path / "Projects"
    path.mkdir()
    return path


@pytest.fixture
def backup_dir(tmp_path: Path) -> Path:
    """Where local mirrors go. Not created: the run creates it."""
    return tmp_path / "backup" / "git-repositories"


@pytest.fixture
def make_repo() -> Callable[..., Path]:
    """
    Factory for working copies with real history.

    make_repo(path, branches=("main", "dev"), tags=("v1.0",))
    """

    def _make(
        path: Path,
        branches: Iterable[str] = ("main",),
        tags: Iterable[str] = (),
        origin: Optional[str] = None,
    ) -> Path:
        branches = list(branches)
        path.mkdir(parents=True, exist_ok=True)
        run_git(path, "init", "-q")
        run_git(path, "symbolic-ref", "HEAD", f"refs/heads/{branches[0]}")
        (path / "README.md").write_text(f"# {path.name}\n")
        run_git(path, "add", "README.md")
        run_git(path, "commit", "-q", "-m", "Initial commit")
        for branch in branches[1:]:
            run_git(path, "branch", branch)
        for tag in tags:
            run_git(path, "tag", tag)
        if origin:
            run_git(path, "remote", "add", "origin", origin)
        return path

    return _make


@pytest.fixture
def make_bare() -> Callable[[Path], Path]:
    """Factory for empty bare repositories."""

    def _make(path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        run_git(path.parent, "init", "-q", "--bare", path.name)
        return path

    return _make


@pytest.fixture
def fake_working_copy() -> Callable[[Path], Path]:
    """A directory with a .git folder; no git needed. For locator tests."""

    def _make(path: Path) -> Path:
        (path / ".git").mkdir(parents=True)
        (path / ".git" / "HEAD").write_text("ref: refs/heads/main\n")
        return path

    return _make


@pytest.fixture
def fake_bare() -> Callable[[Path], Path]:
    """A directory laid out like a bare repository; no git needed."""

    def _make(path: Path) -> Path:
        (path / "objects").mkdir(parents=True)
        (path / "refs").mkdir()
        (path / "HEAD").write_text("ref: refs/heads/main\n")
        return path

    return _make


@pytest.fixture
def local_config(projects_dir: Path, backup_dir: Path, tmp_path: Path) -> RunConfig:
    """RunConfig for a local run inside tmp_path."""
    return RunConfig(
        mode=MODE_LOCAL,
        projects_dir=projects_dir,
        backup_dir=backup_dir,
        log_file=tmp_path / "backup-repos.log",
    )


@pytest.fixture
def remote_config(projects_dir: Path) -> RunConfig:
    """RunConfig for a remote run against gitlab.com."""
    return RunConfig(
        mode=MODE_REMOTE,
        projects_dir=projects_dir,
        host="gitlab.com",
        user="alice",
    )
