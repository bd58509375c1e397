"""
Errors — Exception taxonomy for discovery and replication.

Per-repository errors (clone, fetch, push, remote configuration) are caught
by the executor and turned into outcomes. Precondition errors (root,
credentials, destination, name collisions) abort the run before the loop.

## Usage

    from repomirror.errors import MirrorError

    try:
        run_local_mirror(config)
    except MirrorError as e:
        print(f"Aborted: {e}")
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional


class MirrorError(Exception):
    """Base class for every error raised by repomirror."""

    reason = "error"

    def __init__(self, message: str, detail: Optional[str] = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


# --- Precondition errors (abort the run) ---


class InvalidRoot(MirrorError):
    """The directory to scan does not exist or cannot be read."""

    reason = "invalid-root"

    def __init__(self, path: Path, why: str = "does not exist"):
        self.path = path
        super().__init__(f"Projects directory {why}: {path}")


class MissingCredential(MirrorError):
    """Remote mode was asked for without a host or user."""

    reason = "missing-credential"

    def __init__(self, missing: List[str]):
        self.missing = missing
        super().__init__(f"Missing required remote parameter(s): {', '.join(missing)}")


class DestinationError(MirrorError):
    """The backup directory cannot be created or written to."""

    reason = "destination-error"


class ConfigError(MirrorError):
    """A config file or environment variable holds an unusable value."""

    reason = "config-error"


class NameCollision(MirrorError):
    """Two or more repositories resolve to the same mirror target."""

    reason = "name-collision"

    def __init__(self, collisions: Dict[str, List[Path]]):
        self.collisions = collisions
        lines = [
            f"{target} <- {', '.join(str(p) for p in paths)}"
            for target, paths in sorted(collisions.items())
        ]
        super().__init__(
            "Repositories share a mirror target (use --namespaced): " + "; ".join(lines)
        )


# --- Per-repository errors (converted to outcomes) ---


class CloneError(MirrorError):
    reason = "clone-error"


class FetchError(MirrorError):
    reason = "fetch-error"


class RemoteError(MirrorError):
    """The mirror remote could not be added or re-pointed."""

    reason = "remote-error"


class PushError(MirrorError):
    reason = "push-error"


class RemoteNotProvisioned(MirrorError):
    """
    The hosting side has no repository to push into.

    Expected condition rather than a failure: the operator has to create
    the repository out-of-band and re-run.
    """

    reason = "remote-not-provisioned"


class UncommittedChanges(MirrorError):
    """Advisory only. Mirrors carry committed history, so replication proceeds."""

    reason = "uncommitted-changes"

    def __init__(self, path: Path):
        self.path = path
        super().__init__("Repository has uncommitted changes. Commit them before mirroring.")
