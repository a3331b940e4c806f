"""Tests for workspace.py — pnpm workspace discovery."""

from pathlib import Path

import pytest

from monolink.manifest import PackageManifest
from monolink.workspace import (
    WorkspaceEntry,
    WorkspaceIndex,
    load_workspace_index,
    load_workspace_packages,
    locate_workspace_config,
    parse_workspace_members,
)

_CONFIG = """\
packages:
  - 'packages/*'
  - 'apps/web'
"""


def _write_config(root: Path, content: str = _CONFIG) -> Path:
    path = root / "pnpm-workspace.yaml"
    path.write_text(content)
    return path


class TestLocateWorkspaceConfig:
    def test_in_start_dir(self, monorepo: Path):
        config = _write_config(monorepo)
        assert locate_workspace_config(monorepo) == config

    def test_in_ancestor(self, monorepo: Path, service: Path):
        config = _write_config(monorepo)
        assert locate_workspace_config(service) == config

    def test_closest_wins(self, monorepo: Path, service: Path):
        _write_config(monorepo)
        inner = _write_config(service)
        assert locate_workspace_config(service) == inner

    def test_directory_named_like_config_ignored(self, monorepo: Path, service: Path):
        (service / "pnpm-workspace.yaml").mkdir()
        config = _write_config(monorepo)
        assert locate_workspace_config(service) == config

    def test_not_found(self, service: Path):
        assert locate_workspace_config(service) is None


class TestParseWorkspaceMembers:
    def test_single_quoted_items(self, tmp_path: Path):
        config = _write_config(tmp_path)
        assert parse_workspace_members(config) == ["packages/*", "apps/web"]

    def test_other_lines_ignored(self, tmp_path: Path):
        config = _write_config(
            tmp_path,
            """\
# comment
packages:
  - "double/*"
  - bare/*
  -   'spaced/*'   # trailing comment
catalog:
  react: ^18.0.0
- 'top/level'
""",
        )
        assert parse_workspace_members(config) == ["spaced/*", "top/level"]

    def test_empty_file(self, tmp_path: Path):
        config = _write_config(tmp_path, "")
        assert parse_workspace_members(config) == []


class TestLoadWorkspacePackages:
    def test_loads_members(self, monorepo: Path, write_package):
        config = _write_config(monorepo)
        write_package(monorepo / "packages" / "core", name="@repo/core")
        write_package(monorepo / "packages" / "utils", name="utils", dependencies={"x": "*"})
        write_package(monorepo / "apps" / "web", name="web")

        entries = load_workspace_packages(config)
        by_name = {e.name: e for e in entries}
        assert set(by_name) == {"@repo/core", "utils", "web"}
        assert by_name["utils"].manifest_path == (
            monorepo / "packages" / "utils" / "package.json"
        )
        assert by_name["utils"].manifest.dependency_names == ["x"]

    def test_skips_dirs_without_manifest(self, monorepo: Path, write_package):
        config = _write_config(monorepo)
        (monorepo / "packages" / "empty").mkdir(parents=True)
        write_package(monorepo / "packages" / "core", name="core")
        assert [e.name for e in load_workspace_packages(config)] == ["core"]

    def test_skips_malformed_manifest(self, monorepo: Path, write_package):
        config = _write_config(monorepo)
        broken = monorepo / "packages" / "broken"
        broken.mkdir(parents=True)
        (broken / "package.json").write_text("{not json")
        write_package(monorepo / "packages" / "core", name="core")
        assert [e.name for e in load_workspace_packages(config)] == ["core"]

    def test_skips_unnamed_manifest(self, monorepo: Path, write_package):
        config = _write_config(monorepo)
        write_package(monorepo / "packages" / "anon")
        assert load_workspace_packages(config) == []

    def test_bad_glob_skipped(
        self, monorepo: Path, write_package, monkeypatch: pytest.MonkeyPatch
    ):
        config = _write_config(monorepo)
        write_package(monorepo / "apps" / "web", name="web")
        original_glob = Path.glob

        def _glob(self, pattern, *args, **kwargs):
            if pattern == "packages/*":
                raise ValueError("Invalid pattern")
            return original_glob(self, pattern, *args, **kwargs)

        monkeypatch.setattr(Path, "glob", _glob)
        assert [e.name for e in load_workspace_packages(config)] == ["web"]

    def test_unreadable_config(self, tmp_path: Path):
        assert load_workspace_packages(tmp_path / "pnpm-workspace.yaml") == []


class TestWorkspaceIndex:
    def test_first_entry_wins(self):
        entries = [
            WorkspaceEntry(Path("/r/a/package.json"), PackageManifest(name="dup")),
            WorkspaceEntry(Path("/r/b/package.json"), PackageManifest(name="dup")),
        ]
        index = WorkspaceIndex.from_entries(entries)
        assert index.lookup("dup") == Path("/r/a/package.json")
        assert len(index) == 1

    def test_lookup_miss(self):
        assert WorkspaceIndex().lookup("nope") is None

    def test_empty_is_falsy(self):
        assert not WorkspaceIndex()


class TestLoadWorkspaceIndex:
    def test_without_config(self, service: Path):
        assert len(load_workspace_index(service)) == 0

    def test_with_config(self, monorepo: Path, service: Path, write_package):
        _write_config(monorepo)
        write_package(monorepo / "packages" / "core", name="core")
        index = load_workspace_index(service)
        assert index.lookup("core") == monorepo / "packages" / "core" / "package.json"
