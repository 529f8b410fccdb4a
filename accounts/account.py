"""
accounts.account: the account record and its lifecycle.

    account_none$0 = Account;
    account$1 addr:MsgAddressInt storage_stat:StorageInfo storage:AccountStorage = Account;

Wire layouts
------------
An account is written in one of two layouts, chosen by whether
`init_code_hash` is set:

    original   1 addr storage_stat last_trans_lt balance state
    extended   0 001 addr storage_stat last_trans_lt balance state maybe(init_code_hash)
    none       0                       (also accepted: 0 000)

Readers accept all of the above; any other 3-bit tag after a leading 0 is
rejected with UnknownTag.

Lifecycle
---------
    Uninit --activate(hash == address)--> Active
    Active --freeze--> Frozen(hash(state_init))
    Frozen --activate(hash == frozen hash)--> Active
    Active --uninit_account--> Uninit

Activation from Active is a no-op; freeze and uninit from anything but
Active are no-ops. A rejected activation leaves the account unchanged.

Footprint
---------
Mutators that change a persisted storage field refresh `storage_stat.used`
according to `accounts.footprint_mode` (exact, fast or off). Decoding and
`with_storage` keep whatever footprint they are given.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from cells.builder import CellBuilder
from cells.cell import Cell
from cells.codec import CellSerializable
from cells.errors import UnknownTag
from cells.slice import CellSlice
from core.config import get_config
from core.errors import MalformedInput
from core.logging import get_logger

from .address import MsgAddressInt, read_address
from .currency import CurrencyCollection
from .errors import ActivationRejected, CounterOverflow, PreconditionFailed
from .messages import Message
from .state import (
    AccountActive,
    AccountFrozen,
    AccountState,
    AccountStatus,
    AccountStorage,
    AccountUninit,
)
from .state_init import SimpleLib, StateInit, TickTock
from .storage import StorageInfo, StorageUsed

log = get_logger(__name__)

LAYOUT_NONE = "none"
LAYOUT_ORIGINAL = "original"
LAYOUT_EXTENDED = "extended"

_EXTENDED_PREFIX = 0b0001
_TAG_NONE = 0b000
_TAG_EXTENDED = 0b001


@dataclass
class AccountStuff(CellSerializable):
    addr: MsgAddressInt
    storage_stat: StorageInfo = field(default_factory=StorageInfo)
    storage: AccountStorage = field(default_factory=AccountStorage)

    def update_storage_stat(self) -> None:
        """Exact deduplicated footprint of the serialized storage."""
        self.storage_stat.used = StorageUsed.calculate_for_struct(self.storage)

    def update_storage_stat_fast(self) -> None:
        """Tree totals without deduplication; drops any storage extra."""
        self.storage_stat.used = StorageUsed.tree_totals(self.storage.serialize())

    def write_to(self, b: CellBuilder) -> None:
        self.addr.write_to(b)
        self.storage_stat.write_to(b)
        self.storage.write_to(b)

    @classmethod
    def read_from(cls, s: CellSlice, extended: bool = False) -> "AccountStuff":
        addr = read_address(s)
        storage_stat = StorageInfo.read_from(s)
        storage = AccountStorage.read_from(s, extended=extended)
        return cls(addr, storage_stat, storage)


@dataclass
class Account(CellSerializable):
    """An account slot; `stuff` is None for a non-existent account."""

    stuff: Optional[AccountStuff] = None

    # ---- constructors --------------------------------------------------------

    @classmethod
    def none(cls) -> "Account":
        return cls()

    @classmethod
    def with_address(cls, addr: MsgAddressInt) -> "Account":
        return cls(AccountStuff(addr))

    @classmethod
    def with_address_and_balance(cls, addr: MsgAddressInt, balance: CurrencyCollection) -> "Account":
        return cls(AccountStuff(addr, storage=AccountStorage.with_balance(balance.copy())))

    @classmethod
    def with_storage(cls, addr: MsgAddressInt, storage_stat: StorageInfo, storage: AccountStorage) -> "Account":
        return cls(AccountStuff(addr, storage_stat, storage))

    @classmethod
    def active_by_init_code_hash(
        cls,
        addr: MsgAddressInt,
        balance: CurrencyCollection,
        last_paid: int,
        state_init: StateInit,
        derive_init_code_hash: bool,
    ) -> "Account":
        storage = AccountStorage.active_by_init_code_hash(0, balance, state_init, derive_init_code_hash)
        account = cls(AccountStuff(addr, StorageInfo(last_paid=last_paid), storage))
        account.update_storage_stat()
        return account

    @classmethod
    def uninit(
        cls,
        addr: MsgAddressInt,
        last_trans_lt: int,
        last_paid: int,
        balance: CurrencyCollection,
    ) -> "Account":
        storage = AccountStorage(last_trans_lt, balance, AccountUninit())
        used = StorageUsed(1, storage.serialize().bit_len)
        return cls(AccountStuff(addr, StorageInfo(used, last_paid), storage))

    @classmethod
    def frozen(
        cls,
        addr: MsgAddressInt,
        last_trans_lt: int,
        last_paid: int,
        state_hash: bytes,
        due_payment: Optional[int],
        balance: CurrencyCollection,
    ) -> "Account":
        storage = AccountStorage.frozen(last_trans_lt, balance, state_hash)
        used = StorageUsed.calculate_for_struct(storage)
        return cls(AccountStuff(addr, StorageInfo(used, last_paid, due_payment), storage))

    @classmethod
    def from_message_by_init_code_hash(cls, msg: Message, derive_init_code_hash: bool) -> Optional["Account"]:
        """
        Account a constructor message would create, or None when it creates
        nothing: no internal header, zero grams attached, a state init without
        code, or a bounceable message without a state init.
        """
        hdr = msg.int_header()
        if hdr is None or hdr.value.grams == 0:
            return None
        storage = AccountStorage(balance=hdr.value.copy())
        init = msg.state_init
        if init is not None:
            if init.code is None:
                return None
            storage.init_code_hash = init.code.hash if derive_init_code_hash else None
            storage.state = AccountActive(init.copy())
        elif hdr.bounce:
            return None
        account = cls(AccountStuff(hdr.dst, StorageInfo(), storage))
        try:
            account.update_storage_stat()
        except CounterOverflow:
            log.debug("message account footprint overflow", extra={"dst": str(hdr.dst)})
            return None
        return account

    @classmethod
    def from_message(cls, msg: Message) -> Optional["Account"]:
        return cls.from_message_by_init_code_hash(msg, get_config().accounts.derive_init_code_hash)

    # ---- basic views ---------------------------------------------------------

    def is_none(self) -> bool:
        return self.stuff is None

    def get_addr(self) -> Optional[MsgAddressInt]:
        return None if self.stuff is None else self.stuff.addr

    def get_id(self) -> Optional[int]:
        """256-bit account id, or None (absent account, or non-standard id width)."""
        return None if self.stuff is None else self.stuff.addr.account_id

    def status(self) -> AccountStatus:
        if self.stuff is None:
            return AccountStatus.NONEXIST
        return self.stuff.storage.state.status

    def state(self) -> Optional[AccountState]:
        return None if self.stuff is None else self.stuff.storage.state

    def state_init(self) -> Optional[StateInit]:
        state = self.state()
        return state.state_init if isinstance(state, AccountActive) else None

    def storage_info(self) -> Optional[StorageInfo]:
        return None if self.stuff is None else self.stuff.storage_stat

    def layout(self) -> str:
        if self.stuff is None:
            return LAYOUT_NONE
        return LAYOUT_ORIGINAL if self.stuff.storage.init_code_hash is None else LAYOUT_EXTENDED

    # ---- footprint -----------------------------------------------------------

    def update_storage_stat(self) -> None:
        if self.stuff is not None:
            self.stuff.update_storage_stat()

    def update_storage_stat_fast(self) -> None:
        if self.stuff is not None:
            self.stuff.update_storage_stat_fast()

    def _refresh_footprint(self) -> None:
        mode = get_config().accounts.footprint_mode
        if mode == "exact":
            self.update_storage_stat()
        elif mode == "fast":
            self.update_storage_stat_fast()

    # ---- balance -------------------------------------------------------------

    def balance(self) -> Optional[CurrencyCollection]:
        return None if self.stuff is None else self.stuff.storage.balance

    def balance_checked(self) -> CurrencyCollection:
        return CurrencyCollection() if self.stuff is None else self.stuff.storage.balance.copy()

    def set_balance(self, balance: CurrencyCollection) -> None:
        if self.stuff is not None:
            self.stuff.storage.balance = balance
            self._refresh_footprint()

    def add_funds(self, funds: CurrencyCollection) -> None:
        if self.stuff is not None:
            self.stuff.storage.balance.add(funds)
            self._refresh_footprint()

    def sub_funds(self, funds: CurrencyCollection) -> bool:
        """Debit `funds` if every currency covers it; False leaves the balance as is."""
        if self.stuff is None:
            return False
        if not self.stuff.storage.balance.sub(funds):
            return False
        self._refresh_footprint()
        return True

    # ---- storage bookkeeping -------------------------------------------------

    def last_paid(self) -> int:
        return 0 if self.stuff is None else self.stuff.storage_stat.last_paid

    def set_last_paid(self, last_paid: int) -> None:
        if self.stuff is not None:
            self.stuff.storage_stat.last_paid = last_paid

    def due_payment(self) -> Optional[int]:
        return None if self.stuff is None else self.stuff.storage_stat.due_payment

    def set_due_payment(self, due_payment: Optional[int]) -> None:
        if self.stuff is not None:
            self.stuff.storage_stat.due_payment = due_payment

    def last_tr_time(self) -> Optional[int]:
        return None if self.stuff is None else self.stuff.storage.last_trans_lt

    def set_last_tr_time(self, last_trans_lt: int) -> None:
        if self.stuff is not None:
            self.stuff.storage.last_trans_lt = last_trans_lt
            self._refresh_footprint()

    # ---- code, data and libraries --------------------------------------------

    def split_depth(self) -> Optional[int]:
        init = self.state_init()
        return None if init is None else init.split_depth

    def get_tick_tock(self) -> Optional[TickTock]:
        init = self.state_init()
        return None if init is None else init.special

    def get_code(self) -> Optional[Cell]:
        init = self.state_init()
        return None if init is None else init.code

    def get_code_hash(self) -> Optional[bytes]:
        code = self.get_code()
        return None if code is None else code.hash

    def get_data(self) -> Optional[Cell]:
        init = self.state_init()
        return None if init is None else init.data

    def get_data_hash(self) -> Optional[bytes]:
        data = self.get_data()
        return None if data is None else data.hash

    def set_code(self, code: Cell) -> bool:
        init = self.state_init()
        if init is None:
            return False
        init.set_code(code)
        self._refresh_footprint()
        return True

    def set_data(self, data: Cell) -> bool:
        init = self.state_init()
        if init is None:
            return False
        init.set_data(data)
        self._refresh_footprint()
        return True

    def set_library(self, code: Cell, public: bool) -> bool:
        init = self.state_init()
        if init is None:
            return False
        init.set_library(code, public)
        self._refresh_footprint()
        return True

    def set_library_flag(self, lib_hash: bytes, public: bool) -> bool:
        init = self.state_init()
        if init is None or not init.set_library_flag(lib_hash, public):
            return False
        self._refresh_footprint()
        return True

    def delete_library(self, lib_hash: bytes) -> bool:
        init = self.state_init()
        if init is None or not init.delete_library(lib_hash):
            return False
        self._refresh_footprint()
        return True

    def libraries(self) -> Dict[bytes, SimpleLib]:
        init = self.state_init()
        return {} if init is None else init.libraries()

    def frozen_hash(self) -> Optional[bytes]:
        state = self.state()
        return state.state_init_hash if isinstance(state, AccountFrozen) else None

    def init_code_hash(self) -> Optional[bytes]:
        return None if self.stuff is None else self.stuff.storage.init_code_hash

    def set_init_code_hash(self, init_code_hash: bytes) -> None:
        if self.stuff is not None:
            self.stuff.storage.init_code_hash = init_code_hash
            self._refresh_footprint()

    def set_addr(self, addr: MsgAddressInt) -> None:
        if self.stuff is not None:
            self.stuff.addr = addr

    # ---- lifecycle -----------------------------------------------------------

    def try_activate_by_init_code_hash(self, state_init: StateInit, derive_init_code_hash: bool) -> None:
        """
        Move Uninit or Frozen to Active with `state_init`.

        From Uninit the state init's hash must equal the account id; from
        Frozen it must equal the stored state hash. Otherwise
        ActivationRejected is raised and nothing changes. Already-active
        accounts are left as they are.
        """
        if self.stuff is None:
            raise PreconditionFailed("Cannot activate not existing account")
        stuff = self.stuff
        state = stuff.storage.state
        if isinstance(state, AccountActive):
            log.debug("activation skipped, account already active", extra={"account": str(stuff.addr)})
            return

        h = state_init.hash()
        if isinstance(state, AccountUninit):
            ok = stuff.addr.account_id == int.from_bytes(h, "big")
            reason = "state init does not match uninit account address"
        else:
            ok = state.state_init_hash == h
            reason = "state init does not match frozen hash"
        if not ok:
            log.warning(reason, extra={"account": str(stuff.addr), "state_init_hash": h.hex()})
            raise ActivationRejected(reason, account=str(stuff.addr), state_init_hash=h)

        # only a first activation pins the code hash; a thawed account records none
        code = state_init.code if isinstance(state, AccountUninit) else None
        stuff.storage.state = AccountActive(state_init.copy())
        stuff.storage.init_code_hash = code.hash if derive_init_code_hash and code is not None else None
        log.debug(
            "account activated",
            extra={"account": str(stuff.addr), "from": state.status.label, "state_init_hash": h.hex()},
        )
        self._refresh_footprint()

    def try_activate(self, state_init: StateInit) -> None:
        self.try_activate_by_init_code_hash(state_init, get_config().accounts.derive_init_code_hash)

    def try_freeze(self) -> None:
        stuff = self.stuff
        init = self.state_init()
        if stuff is None or init is None:
            return
        stuff.storage.state = AccountFrozen(init.hash())
        log.debug("account frozen", extra={"account": str(stuff.addr)})
        self._refresh_footprint()

    def uninit_account(self) -> None:
        stuff = self.stuff
        if stuff is None or self.state_init() is None:
            return
        stuff.storage.state = AccountUninit()
        self._refresh_footprint()

    # ---- shard placement -----------------------------------------------------

    def belongs_to_shard(self, shard: Any) -> bool:
        if self.stuff is None:
            raise PreconditionFailed("Account is None")
        addr = self.stuff.addr
        value, nbits = addr.address_bits()
        return addr.workchain_id == shard.workchain_id and shard.contains_account(value, nbits)

    def aug(self) -> Any:
        """DepthBalanceInfo this account contributes to the shard index."""
        from shard.balance import DepthBalanceInfo

        return DepthBalanceInfo(self.split_depth() or 0, self.balance_checked())

    def prepare_proof(self, state_root: Cell) -> Cell:
        from .proof import prepare_proof

        return prepare_proof(self, state_root)

    # ---- wire ----------------------------------------------------------------

    def write_original_format(self, b: CellBuilder) -> None:
        if self.stuff is None:
            b.store_bit(0)
            return
        b.store_bit(1)
        self.stuff.addr.write_to(b)
        self.stuff.storage_stat.write_to(b)
        self.stuff.storage.write_fields(b)

    def write_to(self, b: CellBuilder) -> None:
        if self.stuff is not None and self.stuff.storage.init_code_hash is not None:
            b.store_uint(_EXTENDED_PREFIX, 4)
            self.stuff.write_to(b)
            return
        self.write_original_format(b)

    @classmethod
    def read_from(cls, s: CellSlice) -> "Account":
        if s.load_bit():
            return cls(AccountStuff.read_from(s))
        if s.remaining_bits == 0:
            return cls()
        tag = s.load_uint(3)
        if tag == _TAG_NONE:
            return cls()
        if tag == _TAG_EXTENDED:
            try:
                return cls(AccountStuff.read_from(s, extended=True))
            except MalformedInput as e:
                raise e.with_context(layout=LAYOUT_EXTENDED) from e
        raise UnknownTag("wrong tag deserializing account", tag=f"{tag:03b}")

    # ---- presentation --------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"status": self.status().label, "layout": self.layout()}
        if self.stuff is None:
            return out
        stat = self.stuff.storage_stat
        storage = self.stuff.storage

        def _hex(h: Optional[bytes]) -> Optional[str]:
            return None if h is None else h.hex()

        out.update(
            address=str(self.stuff.addr),
            balance=storage.balance.to_dict(),
            last_trans_lt=storage.last_trans_lt,
            last_paid=stat.last_paid,
            due_payment=stat.due_payment,
            storage_used={
                "cells": stat.used.cells,
                "bits": stat.used.bits,
                "extra": str(stat.used.extra),
            },
            init_code_hash=_hex(storage.init_code_hash),
            code_hash=_hex(self.get_code_hash()),
            data_hash=_hex(self.get_data_hash()),
            frozen_hash=_hex(self.frozen_hash()),
        )
        return out

    def __str__(self) -> str:
        if self.stuff is None:
            return "Account[none]"
        return f"Account[{self.status().label} {self.stuff.addr} {self.stuff.storage.balance}]"


__all__ = [
    "Account",
    "AccountStuff",
    "LAYOUT_NONE",
    "LAYOUT_ORIGINAL",
    "LAYOUT_EXTENDED",
]
