"""
CLI remote mirror command — push every repository to a git hosting service.

Usage:
    remote-mirror <HOST> <USERNAME> [PROJECTS_DIR]
    repomirror remote <HOST> <USERNAME> [PROJECTS_DIR]

Repositories must already exist on the hosting side; ones that don't are
reported as skipped and do not fail the run.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import click

from ..config.settings import MODE_REMOTE, RunConfig, load_run_config
from ..errors import MirrorError
from ..logging_config import setup_logging
from ..mirror.resolver import hosting_url, mirror_name
from ..models.records import OutcomeStatus, ReplicationOutcome
from .options import common_options
from .report import (
    print_bare_skipped,
    print_error,
    print_header,
    print_info,
    print_repository,
    print_success,
    print_summary,
    print_warning,
)

SUCCESS_MESSAGES = {
    OutcomeStatus.CREATED: "Repository mirrored successfully (first push)",
    OutcomeStatus.UPDATED: "Repository mirrored successfully",
}

EXAMPLE_HOSTS = ("gitlab.com", "bitbucket.org", "codeberg.org")


def _failure_message(outcome: ReplicationOutcome) -> str:
    if outcome.reason == "remote-error":
        return "Failed to configure mirror remote"
    if outcome.reason == "timeout":
        return "Push to mirror timed out"
    return "Failed to push to mirror"


def _ssh_user(protocol_prefix: str) -> str:
    """'git@' → 'git'; anything without a user part falls back to git."""
    user = protocol_prefix.rsplit("//", 1)[-1].rstrip("@")
    return user or "git"


def _print_usage(prog: str) -> None:
    click.echo(f"Usage: {prog} <host> <username> [projects_dir]")
    click.echo()
    click.echo("Examples:")
    click.echo(f"  {prog} {EXAMPLE_HOSTS[0]} myusername")
    click.echo(f"  {prog} {EXAMPLE_HOSTS[1]} myusername ~/Projects")
    click.echo(f"  {prog} {EXAMPLE_HOSTS[2]} myusername")
    click.echo()


def _check_ssh(config: RunConfig, assume_yes: bool) -> None:
    """Probe the host; ask before continuing if the probe is inconclusive."""
    from ..mirror.git_ops import probe_ssh

    ssh_user = _ssh_user(config.protocol_prefix)
    print_info(f"Checking SSH connection to {config.host}...")
    if probe_ssh(config.host, ssh_user=ssh_user):
        print_success("SSH connection verified")
        return

    print_warning("Could not verify SSH connection. You may need to set up SSH keys.")
    if assume_yes:
        print_warning("Continuing anyway (--yes)")
        return
    if not click.confirm("Continue anyway?", default=False):
        raise SystemExit(1)


def _print_next_steps(skipped: List[ReplicationOutcome], config: RunConfig) -> None:
    print_header("Next Steps")
    print_info("For skipped repositories:")
    click.echo(f"  1. Create the repositories on https://{config.host}")
    for outcome in skipped:
        click.echo(f"       {hosting_url(outcome.repository, config)}")
    click.echo("  2. Run this command again to push them")
    click.echo()


@click.command("remote")
@click.argument("host", required=False)
@click.argument("username", required=False)
@click.argument("projects_dir", required=False, type=click.Path(file_okay=False, path_type=Path))
@click.option("--remote-name", default=None, help="Name of the mirror remote (default: mirror)")
@click.option("--protocol-prefix", default=None, help="Prefix before the host in mirror URLs (default: git@)")
@click.option("--check-ssh/--no-check-ssh", default=True, help="Probe the host over SSH before pushing")
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Don't ask when the SSH probe fails")
@common_options
@click.pass_context
def remote_mirror(
    ctx: click.Context,
    host: Optional[str],
    username: Optional[str],
    projects_dir: Optional[Path],
    remote_name: Optional[str],
    protocol_prefix: Optional[str],
    check_ssh: bool,
    assume_yes: bool,
    config_file: Optional[Path],
    jobs: Optional[int],
    timeout: Optional[float],
    namespaced: Optional[bool],
    log_level: Optional[str],
    log_format: Optional[str],
) -> None:
    """Mirror all repositories in PROJECTS_DIR to HOST under USERNAME."""
    from ..mirror.runner import ReplicationRunner
    from ..validation import validate_run

    if not host or not username:
        _print_usage(ctx.command_path)
        raise SystemExit(1)

    setup_logging(log_level, log_format)

    try:
        config = load_run_config(
            MODE_REMOTE,
            config_file=config_file,
            projects_dir=projects_dir,
            host=host,
            user=username,
            remote_name=remote_name,
            protocol_prefix=protocol_prefix,
            jobs=jobs,
            timeout=timeout,
            namespaced=namespaced,
        )
    except MirrorError as e:
        print_error(str(e))
        raise SystemExit(1)

    print_header("Git Repository Mirror to Remote Host")
    click.echo()
    print_info(f"Mirror host: {config.host}")
    print_info(f"Mirror user: {config.user}")
    print_info(f"Projects directory: {config.projects_dir}")
    print_info(f"Remote name: {config.remote_name}")
    click.echo()

    try:
        validate_run(config)
    except MirrorError as e:
        print_error(str(e))
        raise SystemExit(1)

    if check_ssh:
        _check_ssh(config, assume_yes)
        click.echo()

    def _skip_message(outcome: ReplicationOutcome) -> None:
        print_warning("Remote repository does not exist yet")
        print_warning(f"Please create '{mirror_name(outcome.repository, config)}' on {config.host} first")
        print_warning(f"Visit: {hosting_url(outcome.repository, config)}")

    def _report(outcome: ReplicationOutcome) -> None:
        print_repository(outcome, SUCCESS_MESSAGES, _failure_message, _skip_message)

    print_info("Searching for git repositories...")
    click.echo()

    runner = ReplicationRunner(config, on_outcome=_report, on_bare_skipped=print_bare_skipped)
    try:
        result = runner.run()
    except MirrorError as e:
        print_error(str(e))
        raise SystemExit(1)

    print_summary("Mirror Summary", result.summary, skipped_label="Skipped (repo not created)")

    if result.skipped:
        _print_next_steps(result.skipped, config)

    click.echo("=" * 48)

    raise SystemExit(result.exit_code)
