"""Dependency symlink removal.

Removes the links a LinkPass created: every symlink directly inside
node_modules and inside its @scope directories. Directories are only removed
once they are empty, so real installed packages and anything else a user put
there survive.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path

from .settings import LinkSettings

logger = logging.getLogger(__name__)

SCOPE_PREFIX = "@"


def _is_link(path: Path) -> bool:
    if path.is_symlink():
        return True
    isjunction = getattr(os.path, "isjunction", None)
    return bool(isjunction and isjunction(path))


def _scan(directory: Path) -> tuple[list[Path], list[Path]]:
    """Split the entries of *directory* into (links, scope dirs)."""
    links: list[Path] = []
    scopes: list[Path] = []
    for entry in directory.iterdir():
        if _is_link(entry):
            links.append(entry)
        elif entry.name.startswith(SCOPE_PREFIX) and entry.is_dir():
            scopes.append(entry)
    return links, scopes


def _remove_if_empty(directory: Path) -> bool:
    if any(directory.iterdir()):
        return False
    directory.rmdir()
    logger.debug("Removed empty directory %s", directory)
    return True


async def clean_links(directory: Path) -> int:
    """Remove symlinks in *directory* and its scope dirs, pruning emptied dirs.

    Returns:
        Number of links removed.
    """
    if not await asyncio.to_thread(directory.is_dir):
        return 0

    links, scopes = await asyncio.to_thread(_scan, directory)
    await asyncio.gather(*(asyncio.to_thread(link.unlink) for link in links))
    for link in links:
        logger.debug("Removed link %s", link)

    removed = len(links)
    for count in await asyncio.gather(*(clean_links(scope) for scope in scopes)):
        removed += count

    await asyncio.to_thread(_remove_if_empty, directory)
    return removed


async def clean_dependencies(settings: LinkSettings) -> int:
    """Remove dependency symlinks from the service's node_modules."""
    logger.info("Cleaning dependency symlinks")
    removed = await clean_links(settings.node_modules_dir)
    logger.info("Removed %d links from %s", removed, settings.node_modules_dir)
    return removed
