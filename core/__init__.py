"""
cellstate core package.

Ambient substrate shared by every subsystem: the error taxonomy, structured
logging, layered configuration and byte/hash helpers. The ledger packages
(cells, accounts, shard) build on top.

Only re-exports the version here to keep import-time side effects near zero.
"""

from __future__ import annotations

from .version import __version__


def get_version() -> str:
    """Return the semantic version string for this package."""
    return __version__


__all__ = ["__version__", "get_version"]
