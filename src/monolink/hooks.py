"""Packaging lifecycle hooks.

Maps the host framework's lifecycle events to link/clean passes, so a
deployment tool can call ``run_hook(event, settings)`` at each stage:

  package:cleanup              → clean
  package:initialize           → link
  before:offline:start:init    → link
  offline:start                → link
  deploy:function:initialize   → clean, then link
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from .cleaner import clean_dependencies
from .linker import link_dependencies
from .settings import LinkSettings

logger = logging.getLogger(__name__)


async def _link(settings: LinkSettings) -> None:
    await link_dependencies(settings)


async def _clean(settings: LinkSettings) -> None:
    await clean_dependencies(settings)


async def _relink(settings: LinkSettings) -> None:
    await clean_dependencies(settings)
    await link_dependencies(settings)


HOOKS: dict[str, Callable[[LinkSettings], Awaitable[None]]] = {
    "package:cleanup": _clean,
    "package:initialize": _link,
    "before:offline:start:init": _link,
    "offline:start": _link,
    "deploy:function:initialize": _relink,
}


async def run_hook(event: str, settings: LinkSettings) -> None:
    """Run the pass bound to lifecycle *event*.

    Raises:
        KeyError: If *event* has no hook.
    """
    handler = HOOKS.get(event)
    if handler is None:
        raise KeyError(f"Unknown hook {event!r}; known hooks: {', '.join(HOOKS)}")
    logger.debug("Running hook %s for %s", event, settings.path)
    await handler(settings)
