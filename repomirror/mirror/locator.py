"""
Repository Locator — Find git repositories under a root directory.

Working copies are found through their `.git` directory. Bare
repositories (HEAD + objects/ + refs/, no index) are recognised so they
can be excluded: mirroring a mirror is redundant.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, List

from ..errors import InvalidRoot
from ..models.records import RepositoryKind, RepositoryRecord

logger = logging.getLogger(__name__)

GIT_DIR_NAME = ".git"


def _resolve(path: Path) -> Path:
    return Path(os.path.abspath(os.path.realpath(path)))


def _is_inside(path: Path, parents: List[Path]) -> bool:
    return any(path == parent or path.is_relative_to(parent) for parent in parents)


def looks_bare(directory: Path) -> bool:
    """HEAD file present, no working-tree index."""
    return (directory / "HEAD").is_file() and not (directory / "index").exists()


def _is_bare_repository(directory: Path) -> bool:
    return (
        looks_bare(directory)
        and (directory / "objects").is_dir()
        and (directory / "refs").is_dir()
    )


def _bare_name(directory: Path) -> str:
    name = directory.name
    return name[:-4] if name.endswith(".git") and len(name) > 4 else name


def _bare_record(directory: Path) -> RepositoryRecord:
    return RepositoryRecord(
        path=directory, name=_bare_name(directory), kind=RepositoryKind.BARE,
    )


def validate_root(root: Path) -> Path:
    """Return the resolved root, or raise InvalidRoot."""
    if not root.exists():
        raise InvalidRoot(root)
    if not root.is_dir():
        raise InvalidRoot(root, "is not a directory")
    if not os.access(root, os.R_OK | os.X_OK):
        raise InvalidRoot(root, "is not readable")
    return _resolve(root)


def locate_repositories(
    root: Path,
    exclude: Iterable[Path] = (),
    include_bare: bool = False,
) -> Iterator[RepositoryRecord]:
    """
    Walk root and yield one record per repository.

    Args:
        root: Directory to scan
        exclude: Directories never to enter (the backup directory)
        include_bare: Yield bare repositories instead of skipping them

    Raises:
        InvalidRoot: root is missing or unreadable (raised on first next())
    """
    root = validate_root(Path(root))
    excluded = [_resolve(Path(p)) for p in exclude]

    logger.info(f"[locator] Searching for git repositories in {root}")

    for dirpath, dirnames, _filenames in os.walk(root, followlinks=False):
        current = Path(dirpath)
        dirnames.sort()

        # Prune excluded trees before descending
        dirnames[:] = [
            d for d in dirnames
            if not _is_inside(_resolve(current / d), excluded)
        ]

        if current != root and _is_bare_repository(current):
            dirnames[:] = []
            if include_bare:
                yield _bare_record(current)
            else:
                logger.info(f"[locator] Skipping bare repository: {current}")
            continue

        if GIT_DIR_NAME in dirnames:
            # Never descend into git metadata
            dirnames.remove(GIT_DIR_NAME)
            if not (current / GIT_DIR_NAME).is_dir():
                continue

            if looks_bare(current):
                if include_bare:
                    yield _bare_record(current)
                else:
                    logger.info(f"[locator] Skipping bare repository: {current}")
                continue

            logger.debug(f"[locator] Found working copy: {current}")
            yield RepositoryRecord(
                path=current, name=current.name, kind=RepositoryKind.WORKING_COPY,
            )
