"""
repomirror — CLI Entry Point

Usage:
    python -m repomirror local [PROJECTS_DIR] [BACKUP_DIR]
    python -m repomirror remote <HOST> <USERNAME> [PROJECTS_DIR]

Standalone entry points installed by the package:
    local-mirror-backup [PROJECTS_DIR] [BACKUP_DIR]
    remote-mirror <HOST> <USERNAME> [PROJECTS_DIR]
"""

from __future__ import annotations

# Load .env FIRST, before anything reads REPOMIRROR_* variables
from pathlib import Path
from dotenv import load_dotenv

_project_root = Path(__file__).parent.parent
for _env_file in (_project_root / ".env", Path.cwd() / ".env"):
    if _env_file.exists():
        load_dotenv(_env_file)

import click

from . import __version__
from .cli.local import local_mirror
from .cli.remote import remote_mirror


@click.group()
@click.version_option(__version__, prog_name="repomirror")
def cli() -> None:
    """repomirror — Discover local git repositories and mirror them."""


cli.add_command(local_mirror)
cli.add_command(remote_mirror)


def local_mirror_backup_main() -> None:
    """Console script: local-mirror-backup."""
    local_mirror.main(prog_name="local-mirror-backup")


def remote_mirror_main() -> None:
    """Console script: remote-mirror."""
    remote_mirror.main(prog_name="remote-mirror")


if __name__ == "__main__":
    cli()
