"""
Replication Executor — Create or update the mirror of one repository.

Local targets:
    missing  → git clone --mirror                 → created / failed(clone-error)
    invalid  → removed, then cloned as missing
    present  → set-url origin + remote update --prune → updated / failed(fetch-error)

Remote targets:
    reconcile the mirror remote, then git push --mirror
    → created (first successful push) / updated
    → skipped(remote-not-provisioned) / failed(push-error | remote-error)

replicate() never raises for a per-repository problem; it always returns
an outcome so one broken repository cannot stop the run.
"""

from __future__ import annotations

import logging
import subprocess
from typing import List, Optional

from ..config.settings import RunConfig
from ..errors import (
    CloneError,
    FetchError,
    MirrorError,
    PushError,
    RemoteNotProvisioned,
    UncommittedChanges,
)
from ..models.records import MirrorTarget, ReplicationOutcome, RepositoryRecord
from . import git_ops

logger = logging.getLogger(__name__)

REASON_TIMEOUT = "timeout"


def collect_advisories(record: RepositoryRecord) -> List[str]:
    """Non-fatal warnings about the source repository."""
    if record.is_bare:
        return []
    try:
        if git_ops.has_uncommitted_changes(record.path):
            return [str(UncommittedChanges(record.path))]
    except (subprocess.TimeoutExpired, OSError):
        logger.warning(f"[executor] Could not check {record.path} for uncommitted changes")
    return []


def replicate_local(
    record: RepositoryRecord,
    target: MirrorTarget,
    config: RunConfig,
    **extra,
) -> ReplicationOutcome:
    """Clone a new mirror, or refresh an existing one."""
    path = target.path

    if (path.exists() or path.is_symlink()) and not git_ops.is_mirror(path):
        # Left behind by an interrupted clone
        git_ops.remove_partial(path)

    if not path.exists():
        logger.info(f"[executor] Creating new mirror: {path}")
        git_ops.clone_mirror(record.path, path, timeout=config.timeout)
        return ReplicationOutcome.created(record, target, **extra)

    logger.info(f"[executor] Updating existing mirror: {path}")
    git_ops.update_mirror(path, record.path, timeout=config.timeout)
    return ReplicationOutcome.updated(record, target, **extra)


def replicate_remote(
    record: RepositoryRecord,
    target: MirrorTarget,
    config: RunConfig,
    **extra,
) -> ReplicationOutcome:
    """Point the mirror remote at target and push every ref."""
    git_ops.ensure_remote(record.path, config.remote_name, target.locator)
    first_push = not git_ops.has_tracking_refs(record.path, config.remote_name)

    logger.info(f"[executor] Pushing {record.name} to {config.remote_name}")
    git_ops.push_mirror(record.path, config.remote_name, timeout=config.timeout)

    if first_push:
        return ReplicationOutcome.created(record, target, **extra)
    return ReplicationOutcome.updated(record, target, **extra)


def replicate(
    record: RepositoryRecord,
    target: MirrorTarget,
    config: RunConfig,
) -> ReplicationOutcome:
    """Replicate one repository and classify what happened."""
    extra = {
        "advisories": collect_advisories(record),
        "origin_url": _origin_url(record),
    }

    try:
        if target.is_local:
            return replicate_local(record, target, config, **extra)
        return replicate_remote(record, target, config, **extra)

    except RemoteNotProvisioned as e:
        logger.warning(f"[executor] {record.name}: remote repository does not exist yet", extra=_log_extra(record, target))
        return ReplicationOutcome.skipped(
            record, target, e.reason, detail=e.detail or e.message, **extra,
        )

    except MirrorError as e:
        logger.error(f"[executor] {record.name}: {e.message}", extra=_log_extra(record, target))
        return ReplicationOutcome.failed(
            record, target, e.reason, detail=e.detail or e.message, **extra,
        )

    except subprocess.TimeoutExpired as e:
        logger.error(f"[executor] {record.name}: git timed out after {e.timeout}s", extra=_log_extra(record, target))
        return ReplicationOutcome.failed(
            record, target, REASON_TIMEOUT, detail=f"git timed out after {e.timeout}s", **extra,
        )

    except OSError as e:
        # Source or mirror vanished or is not a directory
        logger.error(f"[executor] {record.name}: {e}", extra=_log_extra(record, target))
        return ReplicationOutcome.failed(
            record, target, _fallback_reason(target), detail=str(e), **extra,
        )


def _fallback_reason(target: MirrorTarget) -> str:
    if not target.is_local:
        return PushError.reason
    return FetchError.reason if target.path.exists() else CloneError.reason


def _log_extra(record: RepositoryRecord, target: MirrorTarget) -> dict:
    return {"repository": record.name, "target": target.locator}


def _origin_url(record: RepositoryRecord) -> Optional[str]:
    try:
        return git_ops.get_remote_url(record.path, "origin")
    except (subprocess.TimeoutExpired, OSError):
        return None
