"""
shard.state: the minimal shard state a proof is taken against.

    shard_state#9023afe2 global_id:int32 shard_id:ShardIdent seq_no:uint32
                         gen_utime:uint32 accounts:^ShardAccounts = ShardStateUnsplit;

The account index sits behind a reference so a proof for one account can
prune everything else under the state root.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from cells.builder import CellBuilder
from cells.codec import CellSerializable
from cells.errors import UnknownTag
from cells.slice import CellSlice

from .accounts import ShardAccounts
from .ident import ShardIdent

SHARD_STATE_TAG = 0x9023AFE2


@dataclass
class ShardStateUnsplit(CellSerializable):
    global_id: int = 0
    shard_id: ShardIdent = field(default_factory=lambda: ShardIdent.full(0))
    seq_no: int = 0
    gen_utime: int = 0
    accounts_root: Optional[Any] = None

    def __post_init__(self) -> None:
        if not -(1 << 31) <= self.global_id < (1 << 31):
            raise ValueError("global_id must fit int32")
        for name in ("seq_no", "gen_utime"):
            if not 0 <= getattr(self, name) < (1 << 32):
                raise ValueError(f"{name} must fit uint32")
        if self.accounts_root is None:
            self.accounts_root = ShardAccounts().serialize()

    def read_accounts(self) -> ShardAccounts:
        return ShardAccounts.construct_from_cell(self.accounts_root)

    def write_accounts(self, accounts: ShardAccounts) -> None:
        self.accounts_root = accounts.serialize()

    def write_to(self, b: CellBuilder) -> None:
        b.store_uint(SHARD_STATE_TAG, 32)
        b.store_int(self.global_id, 32)
        self.shard_id.write_to(b)
        b.store_uint(self.seq_no, 32)
        b.store_uint(self.gen_utime, 32)
        b.store_ref(self.accounts_root)

    @classmethod
    def read_from(cls, s: CellSlice) -> "ShardStateUnsplit":
        tag = s.load_uint(32)
        if tag != SHARD_STATE_TAG:
            raise UnknownTag("not a shard state", tag=f"{tag:08x}")
        global_id = s.load_int(32)
        shard_id = ShardIdent.read_from(s)
        seq_no = s.load_uint(32)
        gen_utime = s.load_uint(32)
        return cls(global_id, shard_id, seq_no, gen_utime, s.load_ref())


__all__ = ["ShardStateUnsplit", "SHARD_STATE_TAG"]
