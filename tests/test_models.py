"""
Tests for replication models — records, targets, outcomes and the summary fold.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from repomirror.models.records import (
    MirrorTarget,
    OutcomeStatus,
    ReplicationOutcome,
    RepositoryKind,
    RepositoryRecord,
    RunSummary,
    TargetKind,
)


def _record(name: str = "a") -> RepositoryRecord:
    return RepositoryRecord(path=Path(f"/home/me/Projects/{name}"), name=name)


def _target(name: str = "a") -> MirrorTarget:
    return MirrorTarget(kind=TargetKind.LOCAL_PATH, locator=f"/backup/{name}.git")


class TestRepositoryRecord:

    def test_defaults_to_working_copy(self):
        record = _record()
        assert record.kind == RepositoryKind.WORKING_COPY
        assert record.is_bare is False

    def test_is_immutable(self):
        record = _record()
        with pytest.raises(ValidationError):
            record.name = "b"


class TestMirrorTarget:

    def test_local_target_has_path(self):
        assert _target("a").path == Path("/backup/a.git")

    def test_remote_target_has_no_path(self):
        target = MirrorTarget(kind=TargetKind.REMOTE_URL, locator="git@gitlab.com:alice/a.git")
        assert target.is_local is False
        with pytest.raises(ValueError):
            target.path

    def test_str_is_locator(self):
        assert str(_target("a")) == "/backup/a.git"


class TestReplicationOutcome:

    def test_created_and_updated_are_ok(self):
        assert ReplicationOutcome.created(_record(), _target()).ok
        assert ReplicationOutcome.updated(_record(), _target()).ok

    def test_skipped_carries_reason(self):
        outcome = ReplicationOutcome.skipped(_record(), _target(), "remote-not-provisioned")
        assert outcome.status == OutcomeStatus.SKIPPED
        assert outcome.reason == "remote-not-provisioned"
        assert outcome.ok is False

    def test_failed_carries_detail_and_advisories(self):
        outcome = ReplicationOutcome.failed(
            _record(), _target(), "clone-error",
            detail="fatal: boom", advisories=["uncommitted"],
        )
        assert outcome.detail == "fatal: boom"
        assert outcome.advisories == ["uncommitted"]


class TestRunSummary:

    def test_add_returns_new_summary(self):
        empty = RunSummary()
        one = empty.add(ReplicationOutcome.created(_record(), _target()))

        assert empty.total == 0
        assert one.total == 1
        assert one.created == 1

    def test_fold_tallies_every_status(self):
        outcomes = [
            ReplicationOutcome.created(_record("a"), _target("a")),
            ReplicationOutcome.updated(_record("b"), _target("b")),
            ReplicationOutcome.updated(_record("c"), _target("c")),
            ReplicationOutcome.skipped(_record("d"), _target("d"), "remote-not-provisioned"),
            ReplicationOutcome.failed(_record("e"), _target("e"), "fetch-error"),
        ]

        summary = RunSummary.fold(outcomes)

        assert summary == RunSummary(total=5, created=1, updated=2, skipped=1, failed=1)
        assert summary.succeeded == 3
        assert summary.has_failures is True

    def test_skips_alone_are_not_failures(self):
        summary = RunSummary.fold([
            ReplicationOutcome.skipped(_record(), _target(), "remote-not-provisioned"),
        ])
        assert summary.has_failures is False
