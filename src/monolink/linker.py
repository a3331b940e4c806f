"""Dependency symlink creation.

Walks the dependency graph of a service's package.json and creates one
relative symlink per reachable package directly under the service's
node_modules directory (scoped packages one level deeper, under @scope/).

Rules applied to every dependency name:
  - A name already on the current chain is skipped (circular graphs).
  - Packages that only resolve inside another package's node_modules are not
    linked; the nested package still finds them through its own
    node_modules when loaded.
  - Each name is linked at most once per pass, first come first served.

All blocking filesystem calls run in asyncio.to_thread(); sibling subtrees
are linked concurrently.

Key class: LinkPass.
"""

from __future__ import annotations

import asyncio
import errno
import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from .manifest import load_manifest
from .resolver import resolve_package
from .settings import DEFAULT_LINK_TYPE, LinkSettings
from .workspace import WorkspaceIndex, load_workspace_index

logger = logging.getLogger(__name__)

# Something is already at the link path: an earlier link or a real package
_TOLERATED_ERRNOS = (errno.EEXIST, errno.EISDIR)

_IS_WINDOWS = os.name == "nt"


def _create_junction(target: str, link_path: Path) -> None:
    """Create an NTFS junction at *link_path* (Windows only).

    The os module has no junction API; _winapi.CreateJunction is the call
    CPython's own test suite uses. Junctions cannot hold relative targets.
    """
    import _winapi

    absolute = os.path.normpath(os.path.join(link_path.parent, target))
    _winapi.CreateJunction(absolute, str(link_path))


def create_link(target: str, link_path: Path, link_type: str) -> bool:
    """Create a directory symlink at *link_path* pointing at relative *target*.

    Returns:
        True if a link was created, False if something already occupied
        *link_path*.

    Raises:
        OSError: For any failure other than the path already existing.
    """
    link_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        if link_type == "junction" and _IS_WINDOWS:
            _create_junction(target, link_path)
        else:
            os.symlink(target, link_path, target_is_directory=True)
    except OSError as e:
        if e.errno in _TOLERATED_ERRNOS:
            logger.debug("Already present, keeping: %s", link_path)
            return False
        raise
    logger.debug("Linked %s -> %s", link_path, target)
    return True


@dataclass
class LinkPass:
    """State for one link pass into a single node_modules directory.

    Build a fresh instance per pass; ``created`` is what keeps each name
    linked at most once.
    """

    node_modules_dir: Path
    link_type: str = DEFAULT_LINK_TYPE
    workspace: WorkspaceIndex = field(default_factory=WorkspaceIndex)

    # Names claimed in node_modules_dir during this pass
    created: set[str] = field(default_factory=set)
    # Links actually written (pre-existing entries are not counted)
    links_written: int = 0

    async def link_all(
        self,
        names: Iterable[str],
        from_dir: Path,
        resolved_chain: tuple[str, ...] = (),
    ) -> None:
        """Link every name in *names* concurrently.

        Siblings are allowed to finish even if one of them fails; the first
        failure in *names* order is then re-raised unchanged.
        """
        results = await asyncio.gather(
            *(self.link_package(name, from_dir, resolved_chain) for name in names),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result

    async def link_package(
        self,
        name: str,
        from_dir: Path,
        resolved_chain: tuple[str, ...] = (),
    ) -> None:
        """Link *name* as resolved from *from_dir*, then its dependencies.

        Raises:
            ResolutionError: If *name* or any transitive dependency is not
                installed.
            ManifestError: If a resolved package.json is malformed.
            OSError: On filesystem failures other than existing entries.
        """
        if name in resolved_chain:
            return

        package = await asyncio.to_thread(
            resolve_package, name, from_dir, self.workspace
        )

        link_path = self.node_modules_dir / name
        if package.nesting_depth > 1:
            logger.debug(
                "Not linking nested package %s at %s", package.name, package.package_dir
            )
        elif name not in self.created:
            # Claim before suspending so concurrent branches see it
            self.created.add(name)
            target = os.path.relpath(package.package_dir, link_path.parent)
            if await asyncio.to_thread(create_link, target, link_path, self.link_type):
                self.links_written += 1

        manifest = await asyncio.to_thread(load_manifest, package.manifest_path)
        await self.link_all(
            manifest.dependency_names, package.package_dir, (*resolved_chain, name)
        )


async def link_dependencies(settings: LinkSettings) -> LinkPass:
    """Run a full link pass for the service described by *settings*.

    Returns:
        The finished LinkPass, for inspecting what was linked.
    """
    root = await asyncio.to_thread(load_manifest, settings.manifest_file)
    workspace = await asyncio.to_thread(load_workspace_index, settings.path)

    link_pass = LinkPass(
        node_modules_dir=settings.node_modules_dir,
        link_type=settings.link_type,
        workspace=workspace,
    )

    logger.info("Creating dependency symlinks")
    await link_pass.link_all(root.dependency_names, settings.path)
    logger.info(
        "Linked %d packages (%d new) into %s",
        len(link_pass.created),
        link_pass.links_written,
        settings.node_modules_dir,
    )
    return link_pass
