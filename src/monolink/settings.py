"""Link settings — reads monolink.toml + .env to produce LinkSettings.

Resolution order for each value (highest first):
  1. Environment (MONOLINK_PATH, MONOLINK_LINK_TYPE), then the same keys in
     the service's .env file. The .env file is read, never exported, so one
     service's values cannot leak into the next.
  2. The ``[monolink]`` table of ``<service_dir>/monolink.toml``.
  3. Defaults: the service directory itself and ``junction`` links.

Key entities:
  - LinkSettings: frozen dataclass with the resolved root path and link type.
  - load_settings(): parse .env + monolink.toml → LinkSettings.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

from dotenv import dotenv_values

from .errors import SettingsError
from .manifest import MANIFEST_FILE
from .resolver import NODE_MODULES

logger = logging.getLogger(__name__)

SETTINGS_FILE = "monolink.toml"

# "junction" only differs from "dir" on Windows
LINK_TYPES = ("junction", "dir")
DEFAULT_LINK_TYPE = "junction"


@dataclass(frozen=True)
class LinkSettings:
    """Resolved configuration for one service."""

    path: Path
    link_type: str = DEFAULT_LINK_TYPE

    def __post_init__(self) -> None:
        if self.link_type not in LINK_TYPES:
            raise SettingsError(
                f"Unknown link type {self.link_type!r}; "
                f"expected one of: {', '.join(LINK_TYPES)}"
            )
        if not self.path.is_absolute():
            raise SettingsError(f"Service path must be absolute: {self.path}")

    @property
    def manifest_file(self) -> Path:
        return self.path / MANIFEST_FILE

    @property
    def node_modules_dir(self) -> Path:
        return self.path / NODE_MODULES


def load_settings(service_dir: Path | None = None) -> LinkSettings:
    """Read .env + monolink.toml for a service and return LinkSettings.

    Args:
        service_dir: Directory holding the service's package.json.
                     Defaults to the current working directory.

    Raises:
        SettingsError: If monolink.toml is malformed or a value is invalid.
    """
    if service_dir is None:
        service_dir = Path.cwd()
    service_dir = service_dir.expanduser().resolve()

    # .env values never enter os.environ; real environment variables win
    env: dict[str, str | None] = {}
    env_file = service_dir / ".env"
    if env_file.is_file():
        env.update(dotenv_values(env_file))
    env.update(os.environ)

    file_section = _read_settings_file(service_dir / SETTINGS_FILE)

    raw_path = env.get("MONOLINK_PATH") or file_section.get("path")
    link_type = env.get("MONOLINK_LINK_TYPE") or file_section.get(
        "link_type", DEFAULT_LINK_TYPE
    )

    if raw_path is None:
        path = service_dir
    elif isinstance(raw_path, str):
        # Relative paths are relative to the service, not the cwd
        path = (service_dir / Path(raw_path).expanduser()).resolve()
    else:
        raise SettingsError(f"'path' must be a string, got {raw_path!r}")

    if not isinstance(link_type, str):
        raise SettingsError(f"'link_type' must be a string, got {link_type!r}")

    settings = LinkSettings(path=path, link_type=link_type)
    logger.debug("Settings: path=%s link_type=%s", settings.path, settings.link_type)
    return settings


def _read_settings_file(toml_path: Path) -> dict:
    """Return the [monolink] table of *toml_path*, or {} if the file is absent."""
    if not toml_path.is_file():
        return {}
    try:
        with open(toml_path, "rb") as f:
            raw = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise SettingsError(f"Cannot read {toml_path}: {e}") from e

    section = raw.get("monolink", {})
    if not isinstance(section, dict):
        raise SettingsError(f"{toml_path}: [monolink] must be a table")
    return section
