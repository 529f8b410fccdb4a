"""
shard.ident: shard identifiers.

    shard_ident$00 shard_pfx_bits:(#<= 60) workchain_id:int32 shard_prefix:uint64 = ShardIdent;

In memory a shard is (workchain_id, prefix) where `prefix` is the 64-bit
tagged form: the prefix bits left-aligned, followed by a single 1 tag bit.
The full shard of a workchain is 0x8000000000000000 (no prefix bits).
On the wire the tag bit is dropped and the length is stored separately.

An account belongs to a shard when its workchain matches and the first
`prefix_len` bits of its id equal the shard's prefix bits.
"""

from __future__ import annotations

from dataclasses import dataclass

from cells.builder import CellBuilder
from cells.codec import CellSerializable, bits_for_max
from cells.errors import DeserializationError, UnknownTag
from cells.slice import CellSlice

FULL_PREFIX = 1 << 63
MAX_SPLIT_DEPTH = 60


@dataclass(frozen=True)
class ShardIdent(CellSerializable):
    workchain_id: int
    prefix: int = FULL_PREFIX

    def __post_init__(self) -> None:
        if not 0 < self.prefix < (1 << 64):
            raise ValueError("shard prefix must be a non-zero uint64")
        if self.prefix_len > MAX_SPLIT_DEPTH:
            raise ValueError("shard prefix longer than 60 bits")

    @classmethod
    def full(cls, workchain_id: int) -> "ShardIdent":
        return cls(workchain_id, FULL_PREFIX)

    @classmethod
    def with_prefix(cls, workchain_id: int, bits: int, length: int) -> "ShardIdent":
        """Shard whose prefix is the `length`-bit string `bits`."""
        if bits >> length:
            raise ValueError("prefix bits wider than length")
        return cls(workchain_id, ((bits << 1) | 1) << (63 - length))

    @property
    def prefix_len(self) -> int:
        return 63 - ((self.prefix & -self.prefix).bit_length() - 1)

    @property
    def prefix_bits(self) -> int:
        return self.prefix >> (64 - self.prefix_len) if self.prefix_len else 0

    def is_full(self) -> bool:
        return self.prefix == FULL_PREFIX

    def contains_account(self, account_id: int, id_bits: int = 256) -> bool:
        n = self.prefix_len
        if n == 0:
            return True
        if id_bits < n:
            return False
        return account_id >> (id_bits - n) == self.prefix_bits

    def split(self) -> "tuple[ShardIdent, ShardIdent]":
        n, bits = self.prefix_len, self.prefix_bits
        return (
            ShardIdent.with_prefix(self.workchain_id, bits << 1, n + 1),
            ShardIdent.with_prefix(self.workchain_id, (bits << 1) | 1, n + 1),
        )

    def write_to(self, b: CellBuilder) -> None:
        b.store_bits(0b00, 2)
        b.store_uint(self.prefix_len, bits_for_max(MAX_SPLIT_DEPTH))
        b.store_int(self.workchain_id, 32)
        b.store_uint(self.prefix & (self.prefix - 1), 64)

    @classmethod
    def read_from(cls, s: CellSlice) -> "ShardIdent":
        tag = s.load_uint(2)
        if tag != 0:
            raise UnknownTag("bad shard_ident tag", tag=f"{tag:02b}")
        length = s.load_uint(bits_for_max(MAX_SPLIT_DEPTH))
        if length > MAX_SPLIT_DEPTH:
            raise DeserializationError("shard prefix too long", length=length)
        workchain_id = s.load_int(32)
        raw = s.load_uint(64)
        tag_bit = 1 << (63 - length)
        if raw & ((tag_bit << 1) - 1):
            raise DeserializationError("shard prefix has bits past its length", prefix=f"{raw:016x}")
        return cls(workchain_id, raw | tag_bit)

    def __str__(self) -> str:
        return f"{self.workchain_id}:{self.prefix:016x}"


__all__ = ["ShardIdent", "FULL_PREFIX"]
