"""
Tests for the mirror target resolver — pure string construction.
"""

from dataclasses import replace
from pathlib import Path

import pytest

from repomirror.errors import MissingCredential, NameCollision
from repomirror.mirror.resolver import hosting_url, mirror_name, resolve_all, resolve_target
from repomirror.models.records import RepositoryRecord, TargetKind


def _record(projects_dir: Path, *parts: str) -> RepositoryRecord:
    return RepositoryRecord(path=projects_dir.joinpath(*parts), name=parts[-1])


class TestLocalTargets:

    def test_local_target(self, local_config, projects_dir, backup_dir):
        target = resolve_target(_record(projects_dir, "a"), local_config)

        assert target.kind == TargetKind.LOCAL_PATH
        assert target.path == backup_dir / "a.git"

    def test_local_needs_backup_dir(self, local_config, projects_dir):
        config = replace(local_config, backup_dir=None)
        with pytest.raises(ValueError):
            resolve_target(_record(projects_dir, "a"), config)

    def test_namespaced_local_target_nests_directories(self, local_config, projects_dir, backup_dir):
        config = replace(local_config, namespaced=True)

        target = resolve_target(_record(projects_dir, "work", "api"), config)

        assert target.path == backup_dir / "work" / "api.git"


class TestRemoteTargets:

    def test_remote_target(self, remote_config, projects_dir):
        target = resolve_target(_record(projects_dir, "a"), remote_config)

        assert target.kind == TargetKind.REMOTE_URL
        assert target.locator == "git@gitlab.com:alice/a.git"

    def test_custom_protocol_prefix(self, remote_config, projects_dir):
        config = replace(remote_config, protocol_prefix="deploy@")

        target = resolve_target(_record(projects_dir, "a"), config)

        assert target.locator == "deploy@gitlab.com:alice/a.git"

    @pytest.mark.parametrize("host,user,missing", [
        (None, "alice", ["host"]),
        ("gitlab.com", None, ["username"]),
        ("", "", ["host", "username"]),
    ])
    def test_missing_credentials(self, remote_config, projects_dir, host, user, missing):
        config = replace(remote_config, host=host, user=user)

        with pytest.raises(MissingCredential) as exc_info:
            resolve_target(_record(projects_dir, "a"), config)

        assert exc_info.value.missing == missing

    def test_namespaced_remote_target_joins_with_dash(self, remote_config, projects_dir):
        config = replace(remote_config, namespaced=True)

        target = resolve_target(_record(projects_dir, "work", "api"), config)

        assert target.locator == "git@gitlab.com:alice/work-api.git"

    def test_hosting_url(self, remote_config, projects_dir):
        assert hosting_url(_record(projects_dir, "a"), remote_config) == "https://gitlab.com/alice/a"


class TestMirrorName:

    def test_flat_name_is_record_name(self, local_config, projects_dir):
        assert mirror_name(_record(projects_dir, "x", "y"), local_config) == "y"

    def test_namespaced_outside_root_falls_back_to_name(self, local_config, tmp_path):
        config = replace(local_config, namespaced=True)
        record = RepositoryRecord(path=tmp_path / "elsewhere" / "z", name="z")

        assert mirror_name(record, config) == "z"


class TestResolveAll:

    def test_resolves_every_record(self, local_config, projects_dir, backup_dir):
        records = [_record(projects_dir, "a"), _record(projects_dir, "b")]

        pairs = resolve_all(records, local_config)

        assert [t.path for _, t in pairs] == [backup_dir / "a.git", backup_dir / "b.git"]

    def test_shared_basename_fails_fast(self, local_config, projects_dir, backup_dir):
        records = [
            _record(projects_dir, "work", "api"),
            _record(projects_dir, "home", "api"),
            _record(projects_dir, "solo"),
        ]

        with pytest.raises(NameCollision) as exc_info:
            resolve_all(records, local_config)

        collisions = exc_info.value.collisions
        assert list(collisions) == [str(backup_dir / "api.git")]
        assert len(collisions[str(backup_dir / "api.git")]) == 2
        assert "--namespaced" in str(exc_info.value)

    def test_namespaced_resolves_collision(self, local_config, projects_dir):
        config = replace(local_config, namespaced=True)
        records = [
            _record(projects_dir, "work", "api"),
            _record(projects_dir, "home", "api"),
        ]

        pairs = resolve_all(records, config)

        assert len({t.locator for _, t in pairs}) == 2
