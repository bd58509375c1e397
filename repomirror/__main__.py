"""Allow `python -m repomirror`."""

from .main import cli

cli(prog_name="repomirror")
