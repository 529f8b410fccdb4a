"""
accounts.state: account lifecycle status, state variants and storage.

    acc_state_uninit$00 acc_state_frozen$01 acc_state_active$10 acc_state_nonexist$11 = AccountStatus;

    account_uninit$00 = AccountState;
    account_active$1 _:StateInit = AccountState;
    account_frozen$01 state_hash:bits256 = AccountState;

    account_storage$_ last_trans_lt:uint64 balance:CurrencyCollection
                      state:AccountState [init_code_hash:(Maybe bits256)] = AccountStorage;

AccountStatus is a fixed 2-bit reporting code; AccountState is the
prefix-free code embedded in storage (active is the single-bit case).

The trailing init_code_hash is written only when present and read only by
the extended account layout (see accounts.account).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional

from cells.builder import CellBuilder
from cells.codec import CellSerializable, read_maybe, write_maybe
from cells.slice import CellSlice

from .currency import CurrencyCollection
from .state_init import StateInit


class AccountStatus(IntEnum):
    UNINIT = 0b00
    FROZEN = 0b01
    ACTIVE = 0b10
    NONEXIST = 0b11

    def write_to(self, b: CellBuilder) -> None:
        b.store_uint(int(self), 2)

    @classmethod
    def read_from(cls, s: CellSlice) -> "AccountStatus":
        return cls(s.load_uint(2))

    @property
    def label(self) -> str:
        return self.name.lower()


class AccountState(CellSerializable):
    """Base of the three state variants; `read_from` dispatches on the prefix."""

    status: AccountStatus

    @classmethod
    def read_from(cls, s: CellSlice) -> "AccountState":
        if s.load_bit():
            return AccountActive(StateInit.read_from(s))
        if s.load_bit():
            return AccountFrozen(s.load_hash())
        return AccountUninit()


@dataclass(frozen=True)
class AccountUninit(AccountState):
    status = AccountStatus.UNINIT

    def write_to(self, b: CellBuilder) -> None:
        b.store_bits(0b00, 2)


@dataclass
class AccountActive(AccountState):
    state_init: StateInit
    status = AccountStatus.ACTIVE

    def write_to(self, b: CellBuilder) -> None:
        b.store_bit(1)
        self.state_init.write_to(b)


@dataclass(frozen=True)
class AccountFrozen(AccountState):
    state_init_hash: bytes
    status = AccountStatus.FROZEN

    def __post_init__(self) -> None:
        if len(self.state_init_hash) != 32:
            raise ValueError("state_init_hash must be 32 bytes")

    def write_to(self, b: CellBuilder) -> None:
        b.store_bits(0b01, 2)
        b.store_bytes(self.state_init_hash)


def _store_hash(b: CellBuilder, h: bytes) -> None:
    b.store_bytes(h)


@dataclass
class AccountStorage(CellSerializable):
    last_trans_lt: int = 0
    balance: CurrencyCollection = field(default_factory=CurrencyCollection)
    state: AccountState = field(default_factory=AccountUninit)
    init_code_hash: Optional[bytes] = None

    def __post_init__(self) -> None:
        if not 0 <= self.last_trans_lt < (1 << 64):
            raise ValueError("last_trans_lt must fit uint64")

    @classmethod
    def with_balance(cls, balance: CurrencyCollection) -> "AccountStorage":
        return cls(balance=balance)

    @classmethod
    def active_by_init_code_hash(
        cls,
        last_trans_lt: int,
        balance: CurrencyCollection,
        state_init: StateInit,
        derive_init_code_hash: bool,
    ) -> "AccountStorage":
        code_hash = state_init.code.hash if derive_init_code_hash and state_init.code is not None else None
        return cls(last_trans_lt, balance, AccountActive(state_init), code_hash)

    @classmethod
    def frozen(cls, last_trans_lt: int, balance: CurrencyCollection, state_init_hash: bytes) -> "AccountStorage":
        return cls(last_trans_lt, balance, AccountFrozen(state_init_hash))

    def write_fields(self, b: CellBuilder) -> None:
        """The three fields every layout carries."""
        b.store_uint(self.last_trans_lt, 64)
        self.balance.write_to(b)
        self.state.write_to(b)

    def write_to(self, b: CellBuilder) -> None:
        self.write_fields(b)
        if self.init_code_hash is not None:
            write_maybe(b, self.init_code_hash, _store_hash)

    @classmethod
    def read_from(cls, s: CellSlice, extended: bool = False) -> "AccountStorage":
        last_trans_lt = s.load_uint(64)
        balance = CurrencyCollection.read_from(s)
        state = AccountState.read_from(s)
        init_code_hash = read_maybe(s, CellSlice.load_hash) if extended else None
        return cls(last_trans_lt, balance, state, init_code_hash)


__all__ = [
    "AccountStatus",
    "AccountState",
    "AccountUninit",
    "AccountActive",
    "AccountFrozen",
    "AccountStorage",
]
