"""
Version helpers for cellstate.

- Exposes __version__.
- Resolution order:
    1) CELLSTATE_VERSION env var (authoritative override)
    2) installed distribution metadata ("cellstate")
    3) DEFAULT_VERSION

No external dependencies; safe to import very early.
"""

from __future__ import annotations

import os
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _dist_version

DEFAULT_VERSION = "0.1.0"
DIST_NAME = "cellstate"


def resolve_version() -> str:
    env = os.getenv("CELLSTATE_VERSION")
    if env:
        return env.strip()
    try:
        return _dist_version(DIST_NAME)
    except PackageNotFoundError:
        return DEFAULT_VERSION


__version__ = resolve_version()


if __name__ == "__main__":
    # python -m core.version
    print(__version__)
