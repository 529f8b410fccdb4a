"""
cellstate • shard: shard placement and the shard-wide account index

  • ident.py    : ShardIdent (workchain + tagged prefix), account membership
  • balance.py  : DepthBalanceInfo, the augmentation carried by the index
  • accounts.py : ShardAccounts, HashmapAugE 256 of ShardAccount
  • state.py    : ShardStateUnsplit, the root proofs are taken against

Submodules are loaded lazily.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

_SUBMODULES = ("ident", "balance", "accounts", "state")


def __getattr__(name: str) -> Any:
    if name in _SUBMODULES:
        return import_module(f"{__name__}.{name}")
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(_SUBMODULES))


__all__ = list(_SUBMODULES)
