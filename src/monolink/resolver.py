"""Package name -> package.json resolution.

Emulates Node's node_modules lookup (without global folders), with the
workspace index consulted first so monorepo siblings always resolve to their
source directory rather than a stale installed copy.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .errors import ResolutionError
from .manifest import MANIFEST_FILE
from .workspace import WorkspaceIndex

logger = logging.getLogger(__name__)

NODE_MODULES = "node_modules"


@dataclass(frozen=True)
class ResolvedPackage:
    """Where a dependency name resolved to."""

    name: str
    manifest_path: Path

    @property
    def package_dir(self) -> Path:
        return self.manifest_path.parent

    @property
    def nesting_depth(self) -> int:
        """Number of node_modules segments in the manifest path."""
        return self.manifest_path.parts.count(NODE_MODULES)


def node_module_paths(from_dir: Path) -> list[Path]:
    """Return the node_modules search directories for *from_dir*, closest first."""
    return [directory / NODE_MODULES for directory in (from_dir, *from_dir.parents)]


def resolve_package(
    name: str, from_dir: Path, workspace: WorkspaceIndex | None = None
) -> ResolvedPackage:
    """Find the package.json for *name* as seen from *from_dir*.

    Raises:
        ResolutionError: If neither the workspace nor any node_modules
            directory on the search path contains the package.
    """
    if workspace:
        manifest_path = workspace.lookup(name)
        if manifest_path is not None:
            return ResolvedPackage(name, manifest_path)

    for search_dir in node_module_paths(from_dir):
        candidate = search_dir / name / MANIFEST_FILE
        if candidate.is_file():
            # Report the real location, as the host runtime does
            return ResolvedPackage(name, candidate.resolve())

    raise ResolutionError(name, from_dir)
