"""
Run Log — Append-only, timestamped text log of backup runs.

Each line is `[YYYY-MM-DD HH:MM:SS] message`. Lines are never edited,
only appended, so a scheduler's history survives across runs.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional

from ..errors import DestinationError
from ..models.records import OutcomeStatus, ReplicationOutcome, RunSummary

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class RunLog:
    """
    Append-only run log writer.

    Usage:
        log = RunLog(Path("~/backup-repos.log").expanduser())
        log.start(projects_dir, backup_dir)
        log.outcome(outcome)
        log.finish(summary)
    """

    def __init__(self, path: Path):
        self.path = path
        self._ensure_exists()

    def _ensure_exists(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # Opening for append also proves the file is writable
            with self.path.open("a", encoding="utf-8"):
                pass
        except OSError as e:
            raise DestinationError(f"Cannot write log file: {self.path}", detail=str(e))

    def emit(self, message: str, now: Optional[datetime] = None) -> None:
        """Append one line. An empty message writes a blank separator line."""
        if message:
            stamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
            line = f"[{stamp}] {message}"
        else:
            line = ""
        # Paths from the filesystem may carry undecodable bytes
        with self.path.open("a", encoding="utf-8", errors="backslashreplace") as f:
            f.write(line + "\n")

    def start(self, projects_dir: Path, backup_dir: Path) -> None:
        self.emit("=== Backup started ===")
        self.emit(f"Projects: {projects_dir}")
        self.emit(f"Backups: {backup_dir}")

    def outcome(self, outcome: ReplicationOutcome) -> None:
        name = outcome.repository.name
        messages = {
            OutcomeStatus.CREATED: f"Created: {name}",
            OutcomeStatus.UPDATED: f"Updated: {name}",
            OutcomeStatus.SKIPPED: f"Skipped ({outcome.reason}): {name}",
        }
        if outcome.status in messages:
            self.emit(messages[outcome.status])
        elif outcome.reason == "clone-error":
            self.emit(f"Failed to create: {name}")
        elif outcome.reason == "fetch-error":
            self.emit(f"Failed to update: {name}")
        else:
            self.emit(f"Failed ({outcome.reason}): {name}")

    def finish(self, summary: RunSummary) -> None:
        self.emit("=== Backup completed ===")
        self.emit(
            f"Total: {summary.total} | Success: {summary.succeeded} | Failed: {summary.failed}"
        )
        self.emit("")
