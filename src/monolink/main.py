"""Application entry point — CLI dispatcher.

Commands:
  1. `monolink link [dir]`   — symlink the service's dependencies into dir/node_modules.
  2. `monolink clean [dir]`  — remove those symlinks again.
  3. `monolink relink [dir]` — clean, then link.
  4. `monolink hook <event> [dir]` — run a packaging lifecycle hook (see hooks.py).

`dir` defaults to the current directory. Settings come from dir/monolink.toml,
dir/.env and MONOLINK_* environment variables.
"""

import asyncio
import logging
import os
import sys
from pathlib import Path

USAGE = "usage: monolink {link,clean,relink} [dir] | monolink hook <event> [dir]"

_COMMAND_HOOKS = {
    "link": "package:initialize",
    "clean": "package:cleanup",
    "relink": "deploy:function:initialize",
}


def _parse_args(argv: list[str]) -> tuple[str, Path | None] | None:
    """Return (hook event, service dir) for *argv*, or None if it is invalid."""
    if not argv:
        return None
    command, rest = argv[0], argv[1:]
    if command == "hook":
        if not rest or len(rest) > 2:
            return None
        event, rest = rest[0], rest[1:]
    elif command in _COMMAND_HOOKS:
        if len(rest) > 1:
            return None
        event = _COMMAND_HOOKS[command]
    else:
        return None
    service_dir = Path(rest[0]) if rest else None
    return event, service_dir


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parsed = _parse_args(sys.argv[1:] if argv is None else argv)
    if parsed is None:
        print(USAGE, file=sys.stderr)
        return 2
    event, service_dir = parsed

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.WARNING,
    )
    debug = os.environ.get("MONOLINK_DEBUG") == "1"
    logging.getLogger("monolink").setLevel(logging.DEBUG if debug else logging.INFO)

    from .errors import MonolinkError
    from .hooks import HOOKS, run_hook
    from .settings import load_settings

    if event not in HOOKS:
        print(f"Error: unknown hook {event!r}", file=sys.stderr)
        print(f"Known hooks: {', '.join(HOOKS)}", file=sys.stderr)
        return 2

    try:
        settings = load_settings(service_dir)
        asyncio.run(run_hook(event, settings))
    except (MonolinkError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
