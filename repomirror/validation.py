"""
Validation — Preconditions checked before any repository is touched.

A failure here aborts the whole run; everything after this point is
isolated per repository.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .config.settings import RunConfig
from .errors import DestinationError, MirrorError, MissingCredential
from .mirror import git_ops
from .mirror.locator import validate_root

logger = logging.getLogger(__name__)


def validate_git() -> None:
    """git must be on PATH."""
    if not git_ops.git_available():
        raise MirrorError("git executable not found on PATH")


def validate_remote_params(config: RunConfig) -> None:
    """Remote runs need both a host and a user."""
    missing = [label for label, value in (("host", config.host), ("username", config.user)) if not value]
    if missing:
        raise MissingCredential(missing)


def prepare_backup_dir(path: Path) -> bool:
    """
    Make sure the backup directory exists and is writable.

    Returns True if it had to be created.

    Raises:
        DestinationError: it cannot be created or written to
    """
    created = False
    if not path.exists():
        logger.info(f"Creating backup directory: {path}")
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DestinationError(f"Failed to create backup directory: {path}", detail=str(e))
        created = True

    if not path.is_dir():
        raise DestinationError(f"Backup path is not a directory: {path}")
    if not os.access(path, os.W_OK | os.X_OK):
        raise DestinationError(f"Backup directory is not writable: {path}")
    return created


def validate_run(config: RunConfig) -> None:
    """Run every precondition for config's mode."""
    validate_root(config.projects_dir)
    validate_git()
    if config.is_remote:
        validate_remote_params(config)
    elif config.backup_dir is not None:
        prepare_backup_dir(config.backup_dir)
