"""Exception hierarchy for link and cleanup passes.

Every error a pass raises on purpose derives from MonolinkError so the CLI
can report it without a traceback. Filesystem OSErrors are not wrapped; they
propagate unchanged.
"""

from __future__ import annotations

from pathlib import Path


class MonolinkError(Exception):
    """Base class for all monolink errors."""


class ResolutionError(MonolinkError):
    """A dependency could not be found in the workspace or any node_modules."""

    def __init__(self, name: str, from_dir: Path) -> None:
        self.name = name
        self.from_dir = from_dir
        super().__init__(
            f"Cannot find module '{name}' from '{from_dir}'. "
            "Run the package manager's install step first."
        )


class ManifestError(MonolinkError):
    """A package.json could not be read or does not match the schema."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid manifest {path}: {reason}")


class SettingsError(MonolinkError):
    """Invalid monolink configuration."""
