"""
Replication Models — Pydantic schemas for one replication pass.

Nothing here is persisted. Records are produced by the locator, targets by
the resolver, outcomes by the executor, and the summary is a fold over the
outcomes.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RepositoryKind(str, Enum):
    """How a discovered repository is laid out on disk."""
    WORKING_COPY = "working-copy"
    BARE = "bare"


class TargetKind(str, Enum):
    """Where a mirror lives."""
    LOCAL_PATH = "local-path"
    REMOTE_URL = "remote-url"


class OutcomeStatus(str, Enum):
    """Result of replicating one repository."""
    CREATED = "created"
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


class RepositoryRecord(BaseModel):
    """A repository found by the locator."""

    model_config = ConfigDict(frozen=True)

    path: Path
    name: str
    kind: RepositoryKind = RepositoryKind.WORKING_COPY

    @property
    def is_bare(self) -> bool:
        return self.kind == RepositoryKind.BARE


class MirrorTarget(BaseModel):
    """Where a repository gets replicated to."""

    model_config = ConfigDict(frozen=True)

    kind: TargetKind
    locator: str

    @property
    def is_local(self) -> bool:
        return self.kind == TargetKind.LOCAL_PATH

    @property
    def path(self) -> Path:
        """Filesystem path of a local target."""
        if not self.is_local:
            raise ValueError(f"Remote target has no local path: {self.locator}")
        return Path(self.locator)

    def __str__(self) -> str:
        return self.locator


class ReplicationOutcome(BaseModel):
    """What happened to one repository."""

    model_config = ConfigDict(frozen=True)

    repository: RepositoryRecord
    target: MirrorTarget
    status: OutcomeStatus
    reason: Optional[str] = None
    detail: Optional[str] = None
    origin_url: Optional[str] = None
    advisories: List[str] = Field(default_factory=list)

    @classmethod
    def created(cls, repository: RepositoryRecord, target: MirrorTarget, **kwargs) -> "ReplicationOutcome":
        return cls(repository=repository, target=target, status=OutcomeStatus.CREATED, **kwargs)

    @classmethod
    def updated(cls, repository: RepositoryRecord, target: MirrorTarget, **kwargs) -> "ReplicationOutcome":
        return cls(repository=repository, target=target, status=OutcomeStatus.UPDATED, **kwargs)

    @classmethod
    def skipped(cls, repository: RepositoryRecord, target: MirrorTarget, reason: str, **kwargs) -> "ReplicationOutcome":
        return cls(repository=repository, target=target, status=OutcomeStatus.SKIPPED, reason=reason, **kwargs)

    @classmethod
    def failed(cls, repository: RepositoryRecord, target: MirrorTarget, reason: str, **kwargs) -> "ReplicationOutcome":
        return cls(repository=repository, target=target, status=OutcomeStatus.FAILED, reason=reason, **kwargs)

    @property
    def ok(self) -> bool:
        return self.status in (OutcomeStatus.CREATED, OutcomeStatus.UPDATED)


class RunSummary(BaseModel):
    """Tally of one run. Immutable: add() returns a new summary."""

    model_config = ConfigDict(frozen=True)

    total: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0

    def add(self, outcome: ReplicationOutcome) -> "RunSummary":
        field_name = outcome.status.value
        return self.model_copy(update={
            "total": self.total + 1,
            field_name: getattr(self, field_name) + 1,
        })

    @classmethod
    def fold(cls, outcomes: Iterable[ReplicationOutcome]) -> "RunSummary":
        summary = cls()
        for outcome in outcomes:
            summary = summary.add(outcome)
        return summary

    @property
    def succeeded(self) -> int:
        return self.created + self.updated

    @property
    def has_failures(self) -> bool:
        return self.failed > 0
