"""Typed package.json model.

Only the two fields the linker needs are kept: the package name and the keys
of its ``dependencies`` table. Version ranges are carried along but never
interpreted.

Key entities:
  - PackageManifest: frozen dataclass parsed from package.json.
  - load_manifest(): read + validate a manifest file.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .errors import ManifestError

MANIFEST_FILE = "package.json"


@dataclass(frozen=True)
class PackageManifest:
    """The subset of package.json the linker reads."""

    name: str = ""
    dependencies: dict[str, str] = field(default_factory=dict)

    @property
    def dependency_names(self) -> list[str]:
        return list(self.dependencies)


def parse_manifest(data: Any, source: Path) -> PackageManifest:
    """Validate decoded package.json content.

    Raises:
        ManifestError: If the top level is not an object, ``name`` is not a
            string, or ``dependencies`` is not a string-to-string object.
    """
    if not isinstance(data, dict):
        raise ManifestError(source, "top level must be a JSON object")

    name = data.get("name", "")
    if not isinstance(name, str):
        raise ManifestError(source, "'name' must be a string")

    raw_deps = data.get("dependencies")
    if raw_deps is None:
        raw_deps = {}
    if not isinstance(raw_deps, dict):
        raise ManifestError(source, "'dependencies' must be an object")

    dependencies: dict[str, str] = {}
    for dep_name, dep_range in raw_deps.items():
        if not isinstance(dep_range, str):
            raise ManifestError(
                source, f"version range for '{dep_name}' must be a string"
            )
        dependencies[dep_name] = dep_range

    return PackageManifest(name=name, dependencies=dependencies)


def load_manifest(path: Path) -> PackageManifest:
    """Read and parse the manifest at *path*.

    Raises:
        ManifestError: If the file cannot be read, is not valid JSON, or fails
            schema validation.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ManifestError(path, f"cannot read file ({e.strerror or e})") from e
    except json.JSONDecodeError as e:
        raise ManifestError(path, f"invalid JSON ({e.msg} at line {e.lineno})") from e
    return parse_manifest(data, path)
