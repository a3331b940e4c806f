"""Shared fixtures for building fake package trees on disk."""

import json
from pathlib import Path
from typing import Callable

import pytest

WritePackage = Callable[..., Path]


@pytest.fixture
def write_package() -> WritePackage:
    """Return a helper that writes ``<directory>/package.json``.

    Usage: write_package(dir, name="a", dependencies={"b": "*"}) -> dir
    """

    def _write(
        directory: Path,
        name: str | None = None,
        dependencies: dict[str, str] | None = None,
    ) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        data: dict = {}
        if name is not None:
            data["name"] = name
        if dependencies is not None:
            data["dependencies"] = dependencies
        (directory / "package.json").write_text(json.dumps(data))
        return directory

    return _write


@pytest.fixture
def monorepo(tmp_path: Path) -> Path:
    """Monorepo root with hoisted node_modules; the service lives in services/api."""
    root = tmp_path / "repo"
    (root / "node_modules").mkdir(parents=True)
    (root / "services" / "api").mkdir(parents=True)
    return root.resolve()


@pytest.fixture
def service(monorepo: Path) -> Path:
    return monorepo / "services" / "api"
