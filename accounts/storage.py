"""
accounts.storage: storage-footprint engine and rent bookkeeping.

    storage_used$_ cells:(VarUInteger 7) bits:(VarUInteger 7) extra:StorageExtra = StorageUsed;
    storage_extra_none$000 = StorageExtra;
    storage_extra_info$001 dict_hash:uint256 = StorageExtra;
    storage_used_short$_ cells:(VarUInteger 7) bits:(VarUInteger 7) = StorageUsedShort;
    storage_info$_ used:StorageUsed last_paid:uint32 due_payment:(Maybe Grams) = StorageInfo;

Footprint
---------
The footprint of a value is measured over the *distinct* cells reachable
from its serialized root: a depth-first walk keyed by cell hash counts each
cell once (1 cell plus its own data bits) and skips repeat visits, so a
subtree shared by several parents is paid for once.

`calculate_for_struct` uses a fresh visited set per call. `StorageUsedShort`
also keeps a running set across `append()` calls, so several related roots
can be measured together without counting their shared cells twice.

Counters are VarUInteger 7 (max 2^48 - 1); going past that raises
CounterOverflow rather than wrapping.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Set, Tuple

from cells.builder import CellBuilder
from cells.cell import Cell
from cells.codec import CellSerializable, read_maybe, write_maybe
from cells.errors import UnknownTag
from cells.slice import CellSlice

from .errors import CounterOverflow

MAX_COUNTER = (1 << 48) - 1
COUNTER_VAR_BYTES = 7


def _check_counter(name: str, value: int) -> int:
    if value < 0 or value > MAX_COUNTER:
        raise CounterOverflow(f"{name} counter out of range", value=value, max=MAX_COUNTER)
    return value


def count_distinct(roots: Iterable[Any], seen: Set[bytes]) -> Tuple[int, int]:
    """
    Walk every root, adding first-seen cells to `seen`.
    Returns the (cells, bits) added by this call.
    """
    cells = bits = 0
    stack = list(roots)
    while stack:
        cell = stack.pop()
        h = cell.hash
        if h in seen:
            continue
        seen.add(h)
        cells += 1
        bits += cell.bit_len
        stack.extend(cell.unwrap().refs)
    return cells, bits


# ---------------------------------------------------------------------------
# StorageExtra
# ---------------------------------------------------------------------------


class StorageExtra(CellSerializable):
    tag = 0b000

    @classmethod
    def read_from(cls, s: CellSlice) -> "StorageExtra":
        tag = s.load_uint(3)
        if tag == NoStorageExtra.tag:
            return NoStorageExtra()
        if tag == DictStorageExtra.tag:
            return DictStorageExtra(s.load_hash())
        raise UnknownTag("unknown StorageUsed extra tag", tag=f"{tag:03b}")


@dataclass(frozen=True)
class NoStorageExtra(StorageExtra):
    tag = 0b000

    def write_to(self, b: CellBuilder) -> None:
        b.store_uint(self.tag, 3)

    def __str__(self) -> str:
        return "none"


@dataclass(frozen=True)
class DictStorageExtra(StorageExtra):
    dict_hash: bytes
    tag = 0b001

    def write_to(self, b: CellBuilder) -> None:
        b.store_uint(self.tag, 3)
        b.store_bytes(self.dict_hash)

    def __str__(self) -> str:
        return f"dict:{self.dict_hash.hex()}"


# ---------------------------------------------------------------------------
# StorageUsed / StorageUsedShort
# ---------------------------------------------------------------------------


def _write_counters(b: CellBuilder, cells: int, bits: int) -> None:
    b.store_var_uint(_check_counter("cells", cells), COUNTER_VAR_BYTES)
    b.store_var_uint(_check_counter("bits", bits), COUNTER_VAR_BYTES)


@dataclass
class StorageUsedShort(CellSerializable):
    cells: int = 0
    bits: int = 0
    _seen: Set[bytes] = field(default_factory=set, init=False, compare=False, repr=False)

    def __post_init__(self) -> None:
        _check_counter("cells", self.cells)
        _check_counter("bits", self.bits)

    @classmethod
    def calculate_for_cell(cls, root: Cell) -> "StorageUsedShort":
        used = cls()
        used.append(root)
        return used

    @classmethod
    def calculate_for_struct(cls, value: CellSerializable) -> "StorageUsedShort":
        return cls.calculate_for_cell(value.serialize())

    def append(self, root: Cell) -> None:
        """Add the cells of `root` not already counted by this instance."""
        cells, bits = count_distinct([root], self._seen)
        self.cells = _check_counter("cells", self.cells + cells)
        self.bits = _check_counter("bits", self.bits + bits)

    def write_to(self, b: CellBuilder) -> None:
        _write_counters(b, self.cells, self.bits)

    @classmethod
    def read_from(cls, s: CellSlice) -> "StorageUsedShort":
        return cls(s.load_var_uint(COUNTER_VAR_BYTES), s.load_var_uint(COUNTER_VAR_BYTES))


@dataclass
class StorageUsed(CellSerializable):
    cells: int = 0
    bits: int = 0
    extra: StorageExtra = field(default_factory=NoStorageExtra)

    def __post_init__(self) -> None:
        _check_counter("cells", self.cells)
        _check_counter("bits", self.bits)

    @classmethod
    def calculate_for_cell(cls, root: Cell) -> "StorageUsed":
        cells, bits = count_distinct([root], set())
        return cls(cells, bits)

    @classmethod
    def calculate_for_struct(cls, value: CellSerializable) -> "StorageUsed":
        return cls.calculate_for_cell(value.serialize())

    @classmethod
    def tree_totals(cls, root: Cell) -> "StorageUsed":
        """Precomputed non-deduplicated totals; shared cells count per edge."""
        return cls(root.tree_cell_count, root.tree_bits_count)

    def dict_hash(self) -> Optional[bytes]:
        return self.extra.dict_hash if isinstance(self.extra, DictStorageExtra) else None

    def write_to(self, b: CellBuilder) -> None:
        _write_counters(b, self.cells, self.bits)
        self.extra.write_to(b)

    @classmethod
    def read_from(cls, s: CellSlice) -> "StorageUsed":
        cells = s.load_var_uint(COUNTER_VAR_BYTES)
        bits = s.load_var_uint(COUNTER_VAR_BYTES)
        return cls(cells, bits, StorageExtra.read_from(s))

    def __str__(self) -> str:
        return f"cells={self.cells} bits={self.bits} extra={self.extra}"


# ---------------------------------------------------------------------------
# StorageInfo
# ---------------------------------------------------------------------------


@dataclass
class StorageInfo(CellSerializable):
    used: StorageUsed = field(default_factory=StorageUsed)
    last_paid: int = 0
    due_payment: Optional[int] = None

    def __post_init__(self) -> None:
        if not 0 <= self.last_paid < (1 << 32):
            raise ValueError("last_paid must fit uint32")

    def write_to(self, b: CellBuilder) -> None:
        self.used.write_to(b)
        b.store_uint(self.last_paid, 32)
        write_maybe(b, self.due_payment, CellBuilder.store_grams)

    @classmethod
    def read_from(cls, s: CellSlice) -> "StorageInfo":
        used = StorageUsed.read_from(s)
        last_paid = s.load_uint(32)
        return cls(used, last_paid, read_maybe(s, CellSlice.load_grams))


__all__ = [
    "MAX_COUNTER",
    "count_distinct",
    "StorageExtra",
    "NoStorageExtra",
    "DictStorageExtra",
    "StorageUsed",
    "StorageUsedShort",
    "StorageInfo",
]
