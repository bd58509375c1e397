"""
Mirror Target Resolver — Name the mirror of each repository.

Pure string construction, no filesystem or network access:

    local:   <backup_dir>/<name>.git
    remote:  <prefix><host>:<user>/<name>.git     (prefix defaults to git@)

With namespaced naming the name is the path relative to the scanned root,
so ~/Projects/work/api and ~/Projects/home/api stop colliding.
"""

from __future__ import annotations

from collections import defaultdict
from pathlib import Path, PurePosixPath
from typing import Dict, Iterable, List, Tuple

from ..config.settings import RunConfig
from ..errors import MissingCredential, NameCollision
from ..models.records import MirrorTarget, RepositoryRecord, TargetKind


def mirror_name(record: RepositoryRecord, config: RunConfig) -> str:
    """The name part of the target, without the .git suffix."""
    if not config.namespaced:
        return record.name

    try:
        relative = record.path.relative_to(config.projects_dir)
    except ValueError:
        # Paths from the locator are resolved; the configured root may not be
        try:
            relative = record.path.relative_to(config.projects_dir.resolve())
        except ValueError:
            return record.name

    parts = list(relative.parts)
    if not parts:
        return record.name
    parts[-1] = record.name

    if config.is_remote:
        return "-".join(parts)
    return str(PurePosixPath(*parts))


def resolve_target(record: RepositoryRecord, config: RunConfig) -> MirrorTarget:
    """
    Compute the mirror target for one repository.

    Raises:
        MissingCredential: remote mode without host or user
        ValueError: local mode without a backup directory
    """
    name = mirror_name(record, config)

    if config.is_remote:
        missing = [label for label, value in (("host", config.host), ("username", config.user)) if not value]
        if missing:
            raise MissingCredential(missing)
        return MirrorTarget(
            kind=TargetKind.REMOTE_URL,
            locator=f"{config.protocol_prefix}{config.host}:{config.user}/{name}.git",
        )

    if config.backup_dir is None:
        raise ValueError("Local mirroring needs a backup directory")
    return MirrorTarget(
        kind=TargetKind.LOCAL_PATH,
        locator=str(Path(config.backup_dir) / f"{name}.git"),
    )


def resolve_all(
    records: Iterable[RepositoryRecord],
    config: RunConfig,
) -> List[Tuple[RepositoryRecord, MirrorTarget]]:
    """
    Resolve a whole run, failing fast if two repositories share a target.

    Raises:
        NameCollision: lists every target reached by more than one repository
    """
    pairs = [(record, resolve_target(record, config)) for record in records]

    by_target: Dict[str, List[Path]] = defaultdict(list)
    for record, target in pairs:
        by_target[target.locator].append(record.path)

    collisions = {target: paths for target, paths in by_target.items() if len(paths) > 1}
    if collisions:
        raise NameCollision(collisions)

    return pairs


def hosting_url(record: RepositoryRecord, config: RunConfig) -> str:
    """Web page where the operator creates a missing remote repository."""
    return f"https://{config.host}/{config.user}/{mirror_name(record, config)}"
