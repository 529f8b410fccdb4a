"""
accounts.address: internal message addresses.

    anycast_info$_ depth:(#<= 30) { depth >= 1 } rewrite_pfx:(bits depth) = Anycast;
    addr_std$10 anycast:(Maybe Anycast) workchain_id:int8 address:bits256 = MsgAddressInt;
    addr_var$11 anycast:(Maybe Anycast) addr_len:(## 9) workchain_id:int32
                address:(bits addr_len) = MsgAddressInt;

Addresses are immutable values. `address_bits()` returns the account id as
(value, bit length); `account_id` is the 256-bit id as an integer when the
address has one (always for addr_std), which is the key of the shard-wide
account index.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from cells.builder import CellBuilder
from cells.codec import CellSerializable, bits_for_max, read_maybe, write_maybe
from cells.errors import DeserializationError, UnknownTag
from cells.slice import CellSlice

MAX_ANYCAST_DEPTH = 30
ACCOUNT_ID_BITS = 256


@dataclass(frozen=True)
class Anycast(CellSerializable):
    depth: int
    rewrite_pfx: int

    def __post_init__(self) -> None:
        if not 1 <= self.depth <= MAX_ANYCAST_DEPTH:
            raise ValueError("anycast depth must be in 1..30")
        if self.rewrite_pfx < 0 or self.rewrite_pfx >> self.depth:
            raise ValueError("rewrite prefix wider than depth")

    def write_to(self, b: CellBuilder) -> None:
        b.store_uint(self.depth, bits_for_max(MAX_ANYCAST_DEPTH))
        b.store_bits(self.rewrite_pfx, self.depth)

    @classmethod
    def read_from(cls, s: CellSlice) -> "Anycast":
        depth = s.load_uint(bits_for_max(MAX_ANYCAST_DEPTH))
        if not 1 <= depth <= MAX_ANYCAST_DEPTH:
            raise DeserializationError("bad anycast depth", depth=depth)
        return cls(depth, s.load_bits(depth))


def _write_anycast(b: CellBuilder, a: Anycast) -> None:
    a.write_to(b)


@dataclass(frozen=True)
class AddrStd(CellSerializable):
    workchain_id: int
    address: bytes
    anycast: Optional[Anycast] = None

    def __post_init__(self) -> None:
        if not -128 <= self.workchain_id <= 127:
            raise ValueError("addr_std workchain must fit int8")
        if len(self.address) != ACCOUNT_ID_BITS // 8:
            raise ValueError("addr_std address must be 32 bytes")

    def address_bits(self) -> Tuple[int, int]:
        return int.from_bytes(self.address, "big"), ACCOUNT_ID_BITS

    @property
    def account_id(self) -> Optional[int]:
        return int.from_bytes(self.address, "big")

    def write_to(self, b: CellBuilder) -> None:
        b.store_bits(0b10, 2)
        write_maybe(b, self.anycast, _write_anycast)
        b.store_int(self.workchain_id, 8)
        b.store_bytes(self.address)

    def __str__(self) -> str:
        return f"{self.workchain_id}:{self.address.hex()}"


@dataclass(frozen=True)
class AddrVar(CellSerializable):
    workchain_id: int
    address: int
    address_len: int
    anycast: Optional[Anycast] = None

    def __post_init__(self) -> None:
        if not 0 <= self.address_len < 512:
            raise ValueError("addr_var length must fit 9 bits")
        if self.address < 0 or self.address >> self.address_len:
            raise ValueError("address wider than address_len")
        if not -(1 << 31) <= self.workchain_id < (1 << 31):
            raise ValueError("addr_var workchain must fit int32")

    def address_bits(self) -> Tuple[int, int]:
        return self.address, self.address_len

    @property
    def account_id(self) -> Optional[int]:
        return self.address if self.address_len == ACCOUNT_ID_BITS else None

    def write_to(self, b: CellBuilder) -> None:
        b.store_bits(0b11, 2)
        write_maybe(b, self.anycast, _write_anycast)
        b.store_uint(self.address_len, 9)
        b.store_int(self.workchain_id, 32)
        b.store_bits(self.address, self.address_len)

    def __str__(self) -> str:
        width = (self.address_len + 3) // 4
        return f"{self.workchain_id}:{self.address:0{width}x}/{self.address_len}"


MsgAddressInt = Union[AddrStd, AddrVar]


def read_address(s: CellSlice) -> MsgAddressInt:
    tag = s.load_uint(2)
    if tag == 0b10:
        anycast = read_maybe(s, Anycast.read_from)
        wc = s.load_int(8)
        return AddrStd(wc, s.load_bytes(32), anycast)
    if tag == 0b11:
        anycast = read_maybe(s, Anycast.read_from)
        length = s.load_uint(9)
        wc = s.load_int(32)
        return AddrVar(wc, s.load_bits(length), length, anycast)
    raise UnknownTag("not an internal address", tag=f"{tag:02b}")


def parse_address(text: str) -> AddrStd:
    """Parse the `workchain:hex64` form used on the command line."""
    try:
        wc, hex_id = text.strip().split(":", 1)
        return AddrStd(int(wc), bytes.fromhex(hex_id))
    except ValueError as e:
        raise DeserializationError("bad address, expected <workchain>:<64 hex>", text=text).with_cause(e)


__all__ = [
    "Anycast",
    "AddrStd",
    "AddrVar",
    "MsgAddressInt",
    "read_address",
    "parse_address",
    "ACCOUNT_ID_BITS",
]
