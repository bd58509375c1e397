"""
CLI local mirror command — back up every repository as a bare mirror.

Usage:
    local-mirror-backup [PROJECTS_DIR] [BACKUP_DIR] [--log-file FILE]
    repomirror local [PROJECTS_DIR] [BACKUP_DIR]

Exit code is 1 if any repository failed, 0 otherwise.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from ..config.settings import MODE_LOCAL, load_run_config
from ..errors import MirrorError
from ..logging_config import setup_logging
from ..models.records import OutcomeStatus, ReplicationOutcome
from ..persistence.run_log import RunLog
from .options import common_options
from .report import (
    print_bare_skipped,
    print_error,
    print_header,
    print_info,
    print_repository,
    print_summary,
)

SUCCESS_MESSAGES = {
    OutcomeStatus.CREATED: "Mirror created successfully",
    OutcomeStatus.UPDATED: "Mirror updated successfully",
}


def _failure_message(outcome: ReplicationOutcome) -> str:
    if outcome.reason == "clone-error":
        return "Failed to create mirror"
    if outcome.reason == "fetch-error":
        return "Failed to update mirror"
    return f"Failed to back up repository ({outcome.reason})"


@click.command("local")
@click.argument("projects_dir", required=False, type=click.Path(file_okay=False, path_type=Path))
@click.argument("backup_dir", required=False, type=click.Path(file_okay=False, path_type=Path))
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Append timestamped run lines here (default: ~/backup-repos.log)",
)
@common_options
def local_mirror(
    projects_dir: Optional[Path],
    backup_dir: Optional[Path],
    log_file: Optional[Path],
    config_file: Optional[Path],
    jobs: Optional[int],
    timeout: Optional[float],
    namespaced: Optional[bool],
    log_level: Optional[str],
    log_format: Optional[str],
) -> None:
    """Create or update bare mirrors of all repositories in PROJECTS_DIR."""
    from ..mirror.runner import ReplicationRunner
    from ..validation import validate_run

    setup_logging(log_level, log_format)

    try:
        config = load_run_config(
            MODE_LOCAL,
            config_file=config_file,
            projects_dir=projects_dir,
            backup_dir=backup_dir,
            log_file=log_file,
            jobs=jobs,
            timeout=timeout,
            namespaced=namespaced,
        )
    except MirrorError as e:
        print_error(str(e))
        raise SystemExit(1)

    print_header("Git Repository Backup Script", width=34)
    click.echo()
    print_info(f"Projects directory: {config.projects_dir}")
    print_info(f"Backup directory: {config.backup_dir}")
    print_info(f"Log file: {config.log_file}")
    click.echo()

    if config.projects_dir.is_dir() and not config.backup_dir.exists():
        print_info(f"Creating backup directory: {config.backup_dir}")

    try:
        validate_run(config)
    except MirrorError as e:
        print_error(str(e))
        raise SystemExit(1)

    try:
        run_log = RunLog(config.log_file)
    except MirrorError as e:
        print_error(str(e))
        if e.detail:
            click.echo(f"    {e.detail}")
        raise SystemExit(1)
    run_log.start(config.projects_dir, config.backup_dir)

    def _report(outcome: ReplicationOutcome) -> None:
        print_repository(outcome, SUCCESS_MESSAGES, _failure_message)
        run_log.outcome(outcome)

    print_info("Searching for git repositories...")
    click.echo()

    runner = ReplicationRunner(config, on_outcome=_report, on_bare_skipped=print_bare_skipped)
    try:
        result = runner.run()
    except MirrorError as e:
        print_error(str(e))
        run_log.emit(f"Aborted: {e}")
        run_log.emit("")
        raise SystemExit(1)

    print_summary("Backup Summary", result.summary)
    print_info(f"Backups location: {config.backup_dir}")
    print_info(f"Log file: {config.log_file}")
    click.echo("=" * 48)

    run_log.finish(result.summary)

    raise SystemExit(result.exit_code)
