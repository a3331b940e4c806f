"""pnpm workspace discovery.

Finds the nearest pnpm-workspace.yaml above a service, expands its package
globs and loads each member's package.json, producing a name -> manifest
lookup that takes priority over node_modules resolution.

The YAML is not parsed as YAML: only list items of the form ``- 'glob'`` are
read. Discovery is best-effort; a member that cannot be loaded is skipped
and the linker falls back to node_modules resolution for it.

Key functions:
    locate_workspace_config  — walk up from a directory to the config file
    parse_workspace_members  — extract glob patterns from the config
    load_workspace_packages  — glob + load member manifests
    load_workspace_index     — all of the above → WorkspaceIndex
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ManifestError
from .manifest import MANIFEST_FILE, PackageManifest, load_manifest

logger = logging.getLogger(__name__)

WORKSPACE_FILE = "pnpm-workspace.yaml"

# Matches list items with a single-quoted value, e.g. "  - 'packages/*'"
_MEMBER_RE = re.compile(r"^\s*-\s*'([^']+)'")


@dataclass(frozen=True)
class WorkspaceEntry:
    """A workspace member package."""

    manifest_path: Path
    manifest: PackageManifest

    @property
    def name(self) -> str:
        return self.manifest.name


@dataclass(frozen=True)
class WorkspaceIndex:
    """Immutable name -> manifest path lookup for workspace members."""

    packages: dict[str, Path] = field(default_factory=dict)

    @classmethod
    def from_entries(cls, entries: list[WorkspaceEntry]) -> WorkspaceIndex:
        packages: dict[str, Path] = {}
        for entry in entries:
            # First declared member wins on duplicate names
            packages.setdefault(entry.name, entry.manifest_path)
        return cls(packages=packages)

    def lookup(self, name: str) -> Path | None:
        return self.packages.get(name)

    def __len__(self) -> int:
        return len(self.packages)


def locate_workspace_config(start_dir: Path) -> Path | None:
    """Return the closest pnpm-workspace.yaml at or above *start_dir*."""
    current = start_dir
    while True:
        candidate = current / WORKSPACE_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        # Reached the filesystem root
        if parent == current:
            return None
        current = parent


def parse_workspace_members(config_path: Path) -> list[str]:
    """Return the glob patterns listed in a workspace config file."""
    text = config_path.read_text(encoding="utf-8")
    patterns: list[str] = []
    for line in text.splitlines():
        match = _MEMBER_RE.match(line)
        if match:
            patterns.append(match.group(1))
    return patterns


def load_workspace_packages(config_path: Path) -> list[WorkspaceEntry]:
    """Load the manifest of every member directory matched by the config globs."""
    workspace_dir = config_path.parent
    try:
        patterns = parse_workspace_members(config_path)
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Cannot read workspace config %s: %s", config_path, e)
        return []

    entries: list[WorkspaceEntry] = []
    for pattern in patterns:
        try:
            matches = sorted(workspace_dir.glob(pattern))
        except (ValueError, NotImplementedError, OSError) as e:
            logger.debug("Skipping workspace glob %r: %s", pattern, e)
            continue

        for package_dir in matches:
            manifest_path = package_dir / MANIFEST_FILE
            if not manifest_path.is_file():
                continue
            try:
                manifest = load_manifest(manifest_path)
            except ManifestError as e:
                logger.debug("Skipping workspace member: %s", e)
                continue
            if not manifest.name:
                logger.debug("Skipping unnamed workspace member %s", manifest_path)
                continue
            entries.append(WorkspaceEntry(manifest_path, manifest))

    return entries


def load_workspace_index(start_dir: Path) -> WorkspaceIndex:
    """Build the workspace index for a service; empty if there is no workspace."""
    config_path = locate_workspace_config(start_dir)
    if config_path is None:
        logger.debug("No %s found above %s", WORKSPACE_FILE, start_dir)
        return WorkspaceIndex()

    index = WorkspaceIndex.from_entries(load_workspace_packages(config_path))
    logger.debug("Loaded %d workspace packages from %s", len(index), config_path)
    return index
