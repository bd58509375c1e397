"""
Git Operations — Every git and ssh subprocess repomirror runs.

Failures are raised as the typed errors from repomirror.errors so the
executor can turn them into outcomes. Text matching on git output happens
only in classify_push_failure().
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import Optional, Type

from ..errors import (
    CloneError,
    FetchError,
    MirrorError,
    PushError,
    RemoteError,
    RemoteNotProvisioned,
)

logger = logging.getLogger(__name__)

# Local queries (remote get-url, status) never touch the network
QUERY_TIMEOUT = 30
SSH_PROBE_TIMEOUT = 15

# git push prints these when the hosting side has no such repository
REMOTE_MISSING_SIGNATURES = (
    "does not appear to be a git repository",
    "Could not read from remote repository",
    "Repository not found",
)

SSH_OK_SIGNATURES = (
    "successfully authenticated",
    "Welcome",
)


# ---------------------------------------------------------------------------
# Subprocess helpers
# ---------------------------------------------------------------------------

def _git(cwd: Optional[Path], *args: str, timeout: Optional[float] = QUERY_TIMEOUT) -> subprocess.CompletedProcess:
    """
    Run a git command, capturing output.

    Repository discovery stops at cwd's parent, so a broken repository
    never resolves to an enclosing one. Undecodable bytes in git's output
    (non-UTF-8 paths) are replaced rather than raised.
    """
    cmd = ["git"] + list(args)
    logger.debug(f"[mirror-git] {' '.join(cmd)} (cwd={cwd})")
    env = None
    if cwd:
        ceiling = Path(os.path.abspath(cwd)).parent
        env = {**os.environ, "GIT_CEILING_DIRECTORIES": str(ceiling)}
    return subprocess.run(
        cmd,
        cwd=str(cwd) if cwd else None,
        env=env,
        capture_output=True,
        text=True,
        errors="replace",
        timeout=timeout,
    )


def _output_of(result: subprocess.CompletedProcess) -> str:
    """Combined stderr + stdout, the way a terminal would show it."""
    parts = [result.stderr or "", result.stdout or ""]
    return "\n".join(p.strip() for p in parts if p.strip())


def git_available() -> bool:
    return shutil.which("git") is not None


# ---------------------------------------------------------------------------
# Failure classification
# ---------------------------------------------------------------------------

def classify_push_failure(output: str) -> Type[MirrorError]:
    """
    Map the output of a failed `git push --mirror` to an error type.

    git has no structured error channel for this, so this is the one place
    that knows which messages mean "the hosting side has no repository".
    """
    for signature in REMOTE_MISSING_SIGNATURES:
        if signature in output:
            return RemoteNotProvisioned
    return PushError


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def get_remote_url(repo: Path, remote_name: str) -> Optional[str]:
    """URL of a named remote, or None if it isn't configured."""
    result = _git(repo, "remote", "get-url", remote_name)
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def has_uncommitted_changes(repo: Path) -> bool:
    """True when tracked files differ from HEAD (staged or not)."""
    result = _git(repo, "status", "--porcelain", "--untracked-files=no")
    if result.returncode != 0:
        logger.debug(f"[mirror-git] status failed in {repo}: {_output_of(result)}")
        return False
    return bool(result.stdout.strip())


# ---------------------------------------------------------------------------
# Local mirrors
# ---------------------------------------------------------------------------

def clone_mirror(source: Path, target: Path, timeout: Optional[float] = None) -> None:
    """
    Create a bare mirror of source at target.

    A partially written target is removed on failure so the next run
    takes the create path again.
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    try:
        result = _git(None, "clone", "--mirror", str(source), str(target), timeout=timeout)
    except subprocess.TimeoutExpired:
        remove_partial(target)
        raise

    if result.returncode != 0:
        remove_partial(target)
        raise CloneError(f"Failed to create mirror of {source}", detail=_output_of(result))


def is_mirror(path: Path) -> bool:
    """True when path is itself a bare repository."""
    result = _git(None, "--git-dir", str(path), "rev-parse", "--is-bare-repository")
    return result.returncode == 0 and result.stdout.strip() == "true"


def update_mirror(mirror: Path, source: Path, timeout: Optional[float] = None) -> None:
    """Re-point an existing mirror at source and fetch with pruning."""
    git_dir = ("--git-dir", str(mirror))
    # The source may have moved since the mirror was created
    result = _git(None, *git_dir, "remote", "set-url", "origin", str(source))
    if result.returncode != 0:
        raise FetchError(f"Failed to update origin of {mirror}", detail=_output_of(result))

    result = _git(None, *git_dir, "remote", "update", "--prune", timeout=timeout)
    if result.returncode != 0:
        raise FetchError(f"Failed to update mirror {mirror}", detail=_output_of(result))


def remove_partial(target: Path) -> None:
    """Delete whatever an interrupted clone left at target."""
    if target.is_dir() and not target.is_symlink():
        logger.warning(f"[mirror-git] Removing partial mirror: {target}")
        shutil.rmtree(target, ignore_errors=True)
    elif target.exists() or target.is_symlink():
        logger.warning(f"[mirror-git] Removing non-mirror file: {target}")
        target.unlink()


# ---------------------------------------------------------------------------
# Remote mirrors
# ---------------------------------------------------------------------------

def ensure_remote(repo: Path, remote_name: str, remote_url: str) -> bool:
    """
    Make remote_name point at remote_url.

    Returns True if the remote was added, False if it already existed
    (its URL is corrected when it has drifted).
    """
    current_url = get_remote_url(repo, remote_name)

    if current_url is not None:
        if current_url != remote_url:
            logger.info(f"[mirror-git] Remote URL differs, updating {remote_name}: {current_url} → {remote_url}")
            result = _git(repo, "remote", "set-url", remote_name, remote_url)
            if result.returncode != 0:
                raise RemoteError(f"Failed to update remote {remote_name}", detail=_output_of(result))
        return False

    logger.info(f"[mirror-git] Adding remote: {remote_name} → {remote_url}")
    result = _git(repo, "remote", "add", remote_name, remote_url)
    if result.returncode != 0:
        raise RemoteError(f"Failed to add remote {remote_name}", detail=_output_of(result))
    return True


def has_tracking_refs(repo: Path, remote_name: str) -> bool:
    """
    True once a push to remote_name has succeeded.

    A successful `git push --mirror` records remote-tracking refs under
    refs/remotes/<remote_name>/; a failed or never-attempted push leaves none.
    """
    result = _git(repo, "for-each-ref", "--count=1", "--format=%(refname)", f"refs/remotes/{remote_name}")
    return result.returncode == 0 and bool(result.stdout.strip())


def push_mirror(repo: Path, remote_name: str, timeout: Optional[float] = None) -> str:
    """
    Push all refs, including deletions, to remote_name.

    Returns git's output on success.

    Raises:
        RemoteNotProvisioned: the hosting side has no such repository
        PushError: any other push failure
    """
    result = _git(repo, "push", remote_name, "--mirror", timeout=timeout)
    output = _output_of(result)

    if result.returncode == 0:
        return output

    error_type = classify_push_failure(output)
    raise error_type(f"Push to {remote_name} failed", detail=output)


def probe_ssh(host: str, ssh_user: str = "git", timeout: float = SSH_PROBE_TIMEOUT) -> bool:
    """
    Check that the caller's SSH setup is accepted by host.

    Hosting services reject shell access but greet authenticated users,
    and `ssh -T` exits non-zero either way, so only the greeting counts.
    """
    cmd = ["ssh", "-T", "-o", "BatchMode=yes", f"{ssh_user}@{host}"]
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, errors="replace", timeout=timeout)
    except FileNotFoundError:
        logger.warning("[mirror-ssh] ssh executable not found")
        return False
    except subprocess.TimeoutExpired:
        logger.warning(f"[mirror-ssh] SSH probe to {host} timed out")
        return False

    output = _output_of(result)
    logger.debug(f"[mirror-ssh] {host}: {output}")
    return any(signature in output for signature in SSH_OK_SIGNATURES)
