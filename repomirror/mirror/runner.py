"""
Replication Runner — Locate, resolve and replicate every repository.

This is the main entry point for a mirror run. It checks preconditions,
discovers repositories, resolves all targets up front (so name collisions
fail before anything is written), then replicates each repository and
folds the outcomes into a RunSummary.

## Usage

    from repomirror.mirror.runner import ReplicationRunner

    runner = ReplicationRunner(config, on_outcome=print)
    result = runner.run()
    raise SystemExit(result.exit_code)

With config.jobs > 1 the executor step runs on a thread pool; outcomes are
still folded and reported only by the calling thread.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from ..config.settings import RunConfig
from ..models.records import (
    MirrorTarget,
    OutcomeStatus,
    ReplicationOutcome,
    RepositoryRecord,
    RunSummary,
)
from ..validation import validate_run
from .executor import replicate
from .locator import locate_repositories
from .resolver import resolve_all

logger = logging.getLogger(__name__)

Pair = Tuple[RepositoryRecord, MirrorTarget]
ReplicateFn = Callable[[RepositoryRecord, MirrorTarget, RunConfig], ReplicationOutcome]
OutcomeCallback = Callable[[ReplicationOutcome], None]
BareCallback = Callable[[RepositoryRecord], None]


@dataclass
class RunResult:
    """Everything a run produced."""

    outcomes: List[ReplicationOutcome] = field(default_factory=list)
    summary: RunSummary = field(default_factory=RunSummary)

    @property
    def exit_code(self) -> int:
        return 1 if self.summary.has_failures else 0

    @property
    def skipped(self) -> List[ReplicationOutcome]:
        return [o for o in self.outcomes if o.status == OutcomeStatus.SKIPPED]


class ReplicationRunner:
    """
    Drives one replication pass.

    Precondition failures raise MirrorError subclasses out of run();
    per-repository failures only ever show up as outcomes.
    """

    def __init__(
        self,
        config: RunConfig,
        replicate_fn: ReplicateFn = replicate,
        on_outcome: Optional[OutcomeCallback] = None,
        on_bare_skipped: Optional[BareCallback] = None,
    ):
        self.config = config
        self.replicate_fn = replicate_fn
        self.on_outcome = on_outcome
        self.on_bare_skipped = on_bare_skipped

    def discover(self) -> List[RepositoryRecord]:
        """All working copies under the projects directory. Bare repositories are reported and dropped."""
        records = []
        for record in locate_repositories(
            self.config.projects_dir,
            exclude=self.config.exclude_dirs,
            include_bare=True,
        ):
            if record.is_bare:
                logger.info(f"[runner] Skipping bare repository: {record.path}")
                if self.on_bare_skipped is not None:
                    self.on_bare_skipped(record)
                continue
            records.append(record)
        return records

    def plan(self) -> List[Pair]:
        """Discover and resolve. Raises NameCollision."""
        records = self.discover()
        logger.info(f"[runner] Found {len(records)} repositories")
        return resolve_all(records, self.config)

    def run(self, pairs: Optional[Sequence[Pair]] = None) -> RunResult:
        """
        Replicate every repository and return the folded result.

        Args:
            pairs: Pre-resolved (record, target) pairs; planned if omitted.
        """
        validate_run(self.config)
        if pairs is None:
            pairs = self.plan()

        result = RunResult()
        for outcome in self._execute(pairs):
            result.outcomes.append(outcome)
            result.summary = result.summary.add(outcome)
            if self.on_outcome is not None:
                self.on_outcome(outcome)

        logger.info(
            f"[runner] Done: {result.summary.succeeded}/{result.summary.total} ok, "
            f"{result.summary.skipped} skipped, {result.summary.failed} failed"
        )
        return result

    def _execute(self, pairs: Sequence[Pair]) -> Iterator[ReplicationOutcome]:
        jobs = max(1, self.config.jobs)

        if jobs == 1 or len(pairs) <= 1:
            for record, target in pairs:
                yield self.replicate_fn(record, target, self.config)
            return

        logger.info(f"[runner] Replicating with {jobs} workers")
        with ThreadPoolExecutor(max_workers=jobs, thread_name_prefix="repomirror") as pool:
            futures = [
                pool.submit(self.replicate_fn, record, target, self.config)
                for record, target in pairs
            ]
            for future in as_completed(futures):
                yield future.result()
