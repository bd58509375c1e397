"""
CLI report helpers — progress lines, per-repository blocks and summaries.

Everything the commands print to stdout goes through here so the local
and remote commands share one look.
"""

from __future__ import annotations

from typing import Callable, Optional

import click

from ..models.records import OutcomeStatus, ReplicationOutcome, RepositoryRecord, RunSummary

RULE = "-" * 40


def _printable(message: str) -> str:
    """Escape undecodable filename bytes so the terminal never sees a lone surrogate."""
    return message.encode("utf-8", "backslashreplace").decode("utf-8")


def print_info(message: str) -> None:
    click.secho("[INFO]", fg="blue", nl=False)
    click.echo(f" {_printable(message)}")


def print_success(message: str) -> None:
    click.secho("[SUCCESS]", fg="green", nl=False)
    click.echo(f" {_printable(message)}")


def print_warning(message: str) -> None:
    click.secho("[WARNING]", fg="yellow", nl=False)
    click.echo(f" {_printable(message)}")


def print_error(message: str) -> None:
    click.secho("[ERROR]", fg="red", nl=False)
    click.echo(f" {_printable(message)}")


def print_header(title: str, width: int = 48) -> None:
    click.echo("=" * width)
    click.echo(f"  {title}")
    click.echo("=" * width)


def print_repository(
    outcome: ReplicationOutcome,
    success_messages: dict,
    failure_message: Callable[[ReplicationOutcome], str],
    skip_message: Optional[Callable[[ReplicationOutcome], None]] = None,
) -> None:
    """
    Print the block for one repository.

    Args:
        outcome: What happened
        success_messages: {OutcomeStatus: message} for created/updated
        failure_message: Builds the error line for a failed outcome
        skip_message: Prints the lines for a skipped outcome
    """
    repo = outcome.repository

    click.echo(RULE)
    print_info(f"Repository: {repo.name}")
    print_info(f"Location: {repo.path}")
    if outcome.origin_url:
        print_info(f"Remote: {outcome.origin_url}")
    print_info(f"Mirror: {outcome.target.locator}")

    for advisory in outcome.advisories:
        print_warning(advisory)

    if outcome.status in success_messages:
        print_success(success_messages[outcome.status])
    elif outcome.status == OutcomeStatus.SKIPPED and skip_message is not None:
        skip_message(outcome)
    else:
        print_error(failure_message(outcome))
        if outcome.detail:
            for line in outcome.detail.splitlines():
                click.echo(f"    {_printable(line)}")

    click.echo()


def print_summary(title: str, summary: RunSummary, skipped_label: str = "Skipped") -> None:
    """Closing block with the run tally."""
    print_header(title)
    print_info(f"Total repositories found: {summary.total}")
    print_success(f"Successful: {summary.succeeded}")
    if summary.created > 0:
        print_info(f"New mirrors created: {summary.created}")
    if summary.updated > 0:
        print_info(f"Mirrors updated: {summary.updated}")
    if summary.skipped > 0:
        print_warning(f"{skipped_label}: {summary.skipped}")
    if summary.failed > 0:
        print_error(f"Failed: {summary.failed}")
    click.echo()


def print_bare_skipped(record: RepositoryRecord) -> None:
    print_warning(f"Skipping bare repository: {record.path}")
