"""
shard.balance: the per-node extra of the shard account index.

    depth_balance$_ split_depth:(#<= 30) balance:CurrencyCollection = DepthBalanceInfo;

Every fork of `ShardAccounts` carries the fold of its leaves' extras, so the
root extra is the shard's total balance.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from accounts.currency import CurrencyCollection
from cells.builder import CellBuilder
from cells.codec import CellSerializable, bits_for_max
from cells.errors import DeserializationError
from cells.slice import CellSlice

MAX_SPLIT_DEPTH = 30


@dataclass
class DepthBalanceInfo(CellSerializable):
    split_depth: int = 0
    balance: CurrencyCollection = field(default_factory=CurrencyCollection)

    def __post_init__(self) -> None:
        if not 0 <= self.split_depth <= MAX_SPLIT_DEPTH:
            raise ValueError("split_depth must be in 0..30")

    def combine(self, other: "DepthBalanceInfo") -> "DepthBalanceInfo":
        balance = self.balance.copy()
        balance.add(other.balance)
        return DepthBalanceInfo(max(self.split_depth, other.split_depth), balance)

    def write_to(self, b: CellBuilder) -> None:
        b.store_uint(self.split_depth, bits_for_max(MAX_SPLIT_DEPTH))
        self.balance.write_to(b)

    @classmethod
    def read_from(cls, s: CellSlice) -> "DepthBalanceInfo":
        depth = s.load_uint(bits_for_max(MAX_SPLIT_DEPTH))
        if depth > MAX_SPLIT_DEPTH:
            raise DeserializationError("bad split depth", split_depth=depth)
        return cls(depth, CurrencyCollection.read_from(s))


class DepthBalanceAug:
    """Augmentation plugging DepthBalanceInfo into a Hashmap."""

    def write_extra(self, b: CellBuilder, extra: DepthBalanceInfo) -> None:
        extra.write_to(b)

    def read_extra(self, s: CellSlice) -> DepthBalanceInfo:
        return DepthBalanceInfo.read_from(s)

    def combine(self, left: DepthBalanceInfo, right: DepthBalanceInfo) -> DepthBalanceInfo:
        return left.combine(right)

    def empty(self) -> DepthBalanceInfo:
        return DepthBalanceInfo()


DEPTH_BALANCE = DepthBalanceAug()

__all__ = ["DepthBalanceInfo", "DepthBalanceAug", "DEPTH_BALANCE"]
