"""
Options shared by the local and remote commands.
"""

from __future__ import annotations

from pathlib import Path

import click


def common_options(fn):
    """Attach the run options both mirror commands accept."""
    options = [
        click.option(
            "--config", "config_file",
            type=click.Path(dir_okay=False, path_type=Path),
            default=None,
            help="YAML config file (default: $REPOMIRROR_CONFIG)",
        ),
        click.option(
            "--jobs", "-j",
            type=click.IntRange(min=1),
            default=None,
            help="Repositories to replicate in parallel (default: 1)",
        ),
        click.option(
            "--timeout",
            type=click.FloatRange(min=0),
            default=None,
            help="Seconds before a clone/fetch/push is abandoned (default: none)",
        ),
        click.option(
            "--namespaced/--flat",
            default=None,
            help="Name mirrors by path relative to the projects directory",
        ),
        click.option(
            "--log-level",
            type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
            default=None,
            help="Diagnostic log level on stderr",
        ),
        click.option(
            "--log-format",
            type=click.Choice(["text", "json"]),
            default=None,
            help="Diagnostic log format",
        ),
    ]
    for option in reversed(options):
        fn = option(fn)
    return fn
