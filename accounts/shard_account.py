"""
accounts.shard_account: lazy reference to an account inside the shard index.

    account_descr$_ account:^Account last_trans_hash:bits256 last_trans_lt:uint64 = ShardAccount;

A ShardAccount holds the account's root cell, not the decoded account.
`read_account()` parses on every call and caches nothing, so a ShardAccount
read under a usage tree touches the account cells only when asked to.
Equality and hashing use the root cell's hash plus the bookkeeping fields.
"""

from __future__ import annotations

from typing import Any

from cells.builder import CellBuilder
from cells.cell import Cell
from cells.codec import CellSerializable
from cells.slice import CellSlice
from core.utils.hash import ZERO32

from .account import Account


class ShardAccount(CellSerializable):
    __slots__ = ("_account", "_last_trans_hash", "_last_trans_lt")

    def __init__(self, account_cell: Any = None, last_trans_hash: bytes = ZERO32, last_trans_lt: int = 0) -> None:
        if account_cell is None:
            account_cell = Account().serialize()
        if len(last_trans_hash) != 32:
            raise ValueError("last_trans_hash must be 32 bytes")
        if not 0 <= last_trans_lt < (1 << 64):
            raise ValueError("last_trans_lt must fit uint64")
        self._account = account_cell
        self._last_trans_hash = bytes(last_trans_hash)
        self._last_trans_lt = last_trans_lt

    @classmethod
    def with_params(cls, account: Account, last_trans_hash: bytes, last_trans_lt: int) -> "ShardAccount":
        return cls(account.serialize(), last_trans_hash, last_trans_lt)

    @classmethod
    def with_account_root(cls, account_root: Cell, last_trans_hash: bytes, last_trans_lt: int) -> "ShardAccount":
        return cls(account_root, last_trans_hash, last_trans_lt)

    # ---- account -----------------------------------------------------------

    def read_account(self) -> Account:
        return Account.construct_from_cell(self._account)

    def write_account(self, account: Account) -> None:
        self._account = account.serialize()

    def account_cell(self) -> Any:
        return self._account

    def set_account_cell(self, cell: Cell) -> None:
        self._account = cell

    # ---- bookkeeping ---------------------------------------------------------

    def last_trans_hash(self) -> bytes:
        return self._last_trans_hash

    def set_last_trans_hash(self, h: bytes) -> None:
        if len(h) != 32:
            raise ValueError("last_trans_hash must be 32 bytes")
        self._last_trans_hash = bytes(h)

    def last_trans_lt(self) -> int:
        return self._last_trans_lt

    def set_last_trans_lt(self, lt: int) -> None:
        if not 0 <= lt < (1 << 64):
            raise ValueError("last_trans_lt must fit uint64")
        self._last_trans_lt = lt

    # ---- wire ----------------------------------------------------------------

    def write_to(self, b: CellBuilder) -> None:
        b.store_ref(self._account)
        b.store_bytes(self._last_trans_hash)
        b.store_uint(self._last_trans_lt, 64)

    @classmethod
    def read_from(cls, s: CellSlice) -> "ShardAccount":
        account = s.load_ref()
        last_trans_hash = s.load_hash()
        return cls(account, last_trans_hash, s.load_uint(64))

    # ---- identity ------------------------------------------------------------

    def _key(self) -> tuple:
        return (self._account.hash, self._last_trans_hash, self._last_trans_lt)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ShardAccount):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return (
            f"ShardAccount(account={self._account.hash.hex()[:16]}…, "
            f"last_trans_lt={self._last_trans_lt})"
        )


__all__ = ["ShardAccount"]
