import logging

import pytest

from core.config import reset_config

_ENV_KEYS = (
    "CELLSTATE_CONFIG",
    "CELLSTATE_LOG_LEVEL",
    "CELLSTATE_LOG_FORMAT",
    "CELLSTATE_LOG_FILE",
    "CELLSTATE_FOOTPRINT_MODE",
    "CELLSTATE_DERIVE_INIT_CODE_HASH",
    "CELLSTATE_PROOF_SELF_CHECK",
)


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch):
    """Every test starts from default configuration, free of the caller's env."""
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    reset_config()
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    reset_config()
    # CLI entry points reconfigure the root logger
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def footprint_mode(monkeypatch):
    """Switch accounts.footprint_mode for one test: footprint_mode("fast")."""

    def _set(mode: str) -> None:
        monkeypatch.setenv("CELLSTATE_FOOTPRINT_MODE", mode)
        reset_config()

    return _set
