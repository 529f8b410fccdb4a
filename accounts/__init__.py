"""
cellstate • accounts: the ledger account model

  • currency.py      : CurrencyCollection (grams + extra currencies)
  • address.py       : internal addresses (addr_std / addr_var)
  • state_init.py    : StateInit, TickTock, SimpleLib
  • storage.py       : StorageUsed / StorageUsedShort footprint engine, StorageInfo
  • state.py         : AccountStatus, AccountState variants, AccountStorage
  • messages.py      : the inbound-message view used to create accounts
  • account.py       : Account / AccountStuff, lifecycle and wire layouts
  • shard_account.py : ShardAccount, lazy reference held by the shard index
  • proof.py         : account existence proofs against a shard state root
  • cli/             : inspect-account and prove-account tools

Typical usage
-------------
    from accounts.account import Account
    from accounts.address import AddrStd
    from accounts.currency import CurrencyCollection

    acc = Account.with_address_and_balance(AddrStd(0, b"\\x11" * 32), CurrencyCollection(100))
    assert Account.construct_from_cell(acc.serialize()) == acc

Submodules are loaded lazily.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

_SUBMODULES = (
    "errors",
    "currency",
    "address",
    "state_init",
    "storage",
    "state",
    "messages",
    "account",
    "shard_account",
    "proof",
    "cli",
)


def __getattr__(name: str) -> Any:
    if name in _SUBMODULES:
        return import_module(f"{__name__}.{name}")
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(_SUBMODULES))


__all__ = list(_SUBMODULES)
