"""
shard.accounts: the shard-wide account index.

    _ (HashmapAugE 256 ShardAccount DepthBalanceInfo) = ShardAccounts;

Keyed by the 256-bit account id. Each leaf carries the account's
DepthBalanceInfo; the root extra is the shard's total balance.
"""

from __future__ import annotations

from typing import Any, Iterator, Optional, Tuple

from accounts.account import Account
from accounts.errors import PreconditionFailed
from accounts.shard_account import ShardAccount
from cells.builder import CellBuilder
from cells.codec import CellSerializable
from cells.dictionary import Hashmap
from cells.slice import CellSlice
from core.logging import get_logger

from .balance import DEPTH_BALANCE, DepthBalanceInfo

log = get_logger(__name__)

ACCOUNT_KEY_BITS = 256


class ShardAccounts(CellSerializable):
    __slots__ = ("_map",)

    def __init__(self, root: Any = None, root_extra: Optional[DepthBalanceInfo] = None) -> None:
        self._map = Hashmap(ACCOUNT_KEY_BITS, root, DEPTH_BALANCE, root_extra)

    @property
    def root(self) -> Any:
        return self._map.root

    def is_empty(self) -> bool:
        return self._map.is_empty()

    def insert(self, account: Account, last_trans_hash: bytes, last_trans_lt: int) -> ShardAccount:
        """Add or replace `account` under its id; returns the stored entry."""
        account_id = account.get_id()
        if account_id is None:
            raise PreconditionFailed("account has no 256-bit id", account=str(account))
        entry = ShardAccount.with_params(account, last_trans_hash, last_trans_lt)
        self._map.set(account_id, entry, account.aug())
        log.debug("shard account stored", extra={"account": str(account.get_addr())})
        return entry

    def set(self, account_id: int, entry: ShardAccount, extra: DepthBalanceInfo) -> None:
        self._map.set(account_id, entry, extra)

    def get_serialized(self, account_id: int) -> Optional[ShardAccount]:
        s = self._map.get(account_id)
        return None if s is None else ShardAccount.read_from(s)

    get = get_serialized

    def get_extra(self, account_id: int) -> Optional[DepthBalanceInfo]:
        found = self._map.get_with_extra(account_id)
        return None if found is None else found[1]

    def remove(self, account_id: int) -> bool:
        return self._map.remove(account_id)

    def __contains__(self, account_id: int) -> bool:
        return account_id in self._map

    def __len__(self) -> int:
        return len(self._map)

    def items(self) -> Iterator[Tuple[int, ShardAccount]]:
        for key, s in self._map.items():
            yield key, ShardAccount.read_from(s)

    def full_balance(self) -> DepthBalanceInfo:
        return self._map.root_extra()

    def write_to(self, b: CellBuilder) -> None:
        self._map.write_to(b)

    @classmethod
    def read_from(cls, s: CellSlice) -> "ShardAccounts":
        m = Hashmap.read_from(s, ACCOUNT_KEY_BITS, DEPTH_BALANCE)
        return cls(m.root, m.root_extra())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ShardAccounts):
            return NotImplemented
        return self._map == other._map

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"ShardAccounts({self._map!r})"


__all__ = ["ShardAccounts", "ACCOUNT_KEY_BITS"]
