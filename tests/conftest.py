"""Root conftest — keeps the developer's MONOLINK_* environment out of tests.

load_settings() gives real MONOLINK_PATH / MONOLINK_LINK_TYPE variables
priority over monolink.toml and .env, so any set in the shell running the
tests are cleared first.
"""

import pytest


@pytest.fixture(autouse=True)
def _clean_monolink_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("MONOLINK_PATH", "MONOLINK_LINK_TYPE", "MONOLINK_DEBUG"):
        monkeypatch.delenv(var, raising=False)
