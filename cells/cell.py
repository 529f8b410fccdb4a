"""
cellstate • cells: content-addressed node primitive

A `Cell` is an immutable node with up to 1023 data bits and up to 4 ordered
child references. Its identity is its representation hash:

    hash = SHA-256( d1 || d2 || data_padded || depth(c_i) ... || hash(c_i) ... )

    d1 = refs + 8 * exotic
    d2 = floor(bits / 8) + ceil(bits / 8)
    data_padded appends a single 1 completion bit when bits % 8 != 0
    depth(c) is big-endian u16, hash(c) is 32 bytes

Exotic cells
------------
  PRUNED_BRANCH  type 0x01 | level mask 0x01 | hash:256 | depth:u16, no refs.
                 Stands in for a subtree; its `hash`/`depth` are the stored
                 values, so a parent's hash is unchanged by the substitution.
  MERKLE_PROOF   type 0x03 | hash:256 | depth:u16, exactly one ref whose
                 hash and depth must match the stored values.

The constructor is the only way to build a cell and computes hash, depth and
the (non-deduplicated) tree totals once. Equality and `hash()` follow the
content hash.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Dict, Iterable, List, Tuple

from core.utils.bytes import bits_to_bytes
from core.utils.hash import sha256

from .errors import CellOverflow, DeserializationError, PrunedCellAccess, UnknownTag
from .slice import CellSlice

MAX_BITS = 1023
MAX_REFS = 4
MAX_DEPTH = 1024

PRUNED_BITS = 8 + 8 + 256 + 16
MERKLE_PROOF_BITS = 8 + 256 + 16


class CellType(IntEnum):
    ORDINARY = -1
    PRUNED_BRANCH = 1
    MERKLE_PROOF = 3


def descriptors(bit_len: int, refs_count: int, exotic: bool) -> bytes:
    d1 = refs_count + (8 if exotic else 0)
    d2 = bit_len // 8 + (bit_len + 7) // 8
    return bytes((d1, d2))


def _repr_hash(
    bits: int,
    bit_len: int,
    exotic: bool,
    child_depths: Iterable[int],
    child_hashes: Iterable[bytes],
) -> bytes:
    depths = list(child_depths)
    buf = bytearray(descriptors(bit_len, len(depths), exotic))
    buf += bits_to_bytes(bits, bit_len, completion=True)
    for d in depths:
        buf += d.to_bytes(2, "big")
    for h in child_hashes:
        buf += h
    return sha256(bytes(buf))


def _pruned_fields(bits: int) -> Tuple[bytes, int]:
    return ((bits >> 16) & ((1 << 256) - 1)).to_bytes(32, "big"), bits & 0xFFFF


def _exotic_type(bits: int, bit_len: int, refs: Tuple["Cell", ...]) -> CellType:
    if bit_len < 8:
        raise DeserializationError("exotic cell without type byte", bits=bit_len)
    tag = bits >> (bit_len - 8)
    if tag == CellType.PRUNED_BRANCH:
        if bit_len != PRUNED_BITS or refs:
            raise DeserializationError("bad pruned branch layout", bits=bit_len, refs=len(refs))
        if (bits >> 272) & 0xFF != 1:
            raise DeserializationError("pruned branch level mask must be 1")
        return CellType.PRUNED_BRANCH
    if tag == CellType.MERKLE_PROOF:
        if bit_len != MERKLE_PROOF_BITS or len(refs) != 1:
            raise DeserializationError("bad merkle proof layout", bits=bit_len, refs=len(refs))
        stored_hash = ((bits >> 16) & ((1 << 256) - 1)).to_bytes(32, "big")
        if stored_hash != refs[0].hash or bits & 0xFFFF != refs[0].depth:
            raise DeserializationError("merkle proof does not match its root", hash=stored_hash)
        return CellType.MERKLE_PROOF
    raise UnknownTag("unknown exotic cell type", type=tag)


class Cell:
    __slots__ = ("bits", "bit_len", "refs", "type", "_hash", "_depth", "_tree_cells", "_tree_bits")

    def __init__(
        self,
        bits: int = 0,
        bit_len: int = 0,
        refs: Iterable[Any] = (),
        *,
        exotic: bool = False,
    ) -> None:
        refs = tuple(r.unwrap() for r in refs)
        if not 0 <= bit_len <= MAX_BITS:
            raise CellOverflow("too many data bits", bits=bit_len, max=MAX_BITS)
        if len(refs) > MAX_REFS:
            raise CellOverflow("too many references", refs=len(refs), max=MAX_REFS)
        if bits < 0 or bits >> bit_len:
            raise CellOverflow("data wider than declared length", bits=bit_len)

        self.bits = bits
        self.bit_len = bit_len
        self.refs: Tuple[Cell, ...] = refs
        self.type = _exotic_type(bits, bit_len, refs) if exotic else CellType.ORDINARY

        if self.type is CellType.PRUNED_BRANCH:
            self._hash, self._depth = _pruned_fields(bits)
        else:
            depth = 1 + max(r._depth for r in refs) if refs else 0
            if depth > MAX_DEPTH:
                raise CellOverflow("cell tree too deep", depth=depth, max=MAX_DEPTH)
            self._depth = depth
            self._hash = _repr_hash(
                bits, bit_len, exotic, (r._depth for r in refs), (r._hash for r in refs)
            )
        self._tree_cells = 1 + sum(r._tree_cells for r in refs)
        self._tree_bits = bit_len + sum(r._tree_bits for r in refs)

    # ---- constructors ------------------------------------------------------

    @classmethod
    def empty(cls) -> "Cell":
        return cls()

    @classmethod
    def pruned(cls, hash: bytes, depth: int) -> "Cell":
        """Hash-only placeholder for a subtree with the given hash and depth."""
        if len(hash) != 32 or not 0 <= depth <= MAX_DEPTH:
            raise CellOverflow("bad pruned branch parameters", depth=depth)
        bits = (CellType.PRUNED_BRANCH << 280) | (1 << 272) | (int.from_bytes(hash, "big") << 16) | depth
        return cls(bits, PRUNED_BITS, exotic=True)

    # ---- identity ----------------------------------------------------------

    @property
    def hash(self) -> bytes:
        return self._hash

    @property
    def depth(self) -> int:
        return self._depth

    @property
    def is_exotic(self) -> bool:
        return self.type is not CellType.ORDINARY

    @property
    def is_pruned(self) -> bool:
        return self.type is CellType.PRUNED_BRANCH

    @property
    def refs_count(self) -> int:
        return len(self.refs)

    @property
    def tree_cell_count(self) -> int:
        return self._tree_cells

    @property
    def tree_bits_count(self) -> int:
        return self._tree_bits

    def unwrap(self) -> "Cell":
        return self

    def reference(self, i: int) -> "Cell":
        return self.refs[i]

    def data_bytes(self) -> bytes:
        """Data bits left-aligned, with the completion tag when needed."""
        return bits_to_bytes(self.bits, self.bit_len, completion=True)

    def begin_parse(self) -> CellSlice:
        if self.type is CellType.PRUNED_BRANCH:
            raise PrunedCellAccess("cell is pruned", hash=self._hash)
        return CellSlice(self.bits, self.bit_len, self.refs)

    def __eq__(self, other: object) -> bool:
        if not hasattr(other, "unwrap"):
            return NotImplemented
        return self._hash == other.unwrap()._hash  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash(self._hash)

    def __repr__(self) -> str:
        kind = "" if self.type is CellType.ORDINARY else f", {self.type.name.lower()}"
        return f"Cell(bits={self.bit_len}, refs={len(self.refs)}{kind}, hash={self._hash.hex()[:16]}…)"


def recompute_hash(root: Cell) -> bytes:
    """
    Recompute `root`'s hash bottom-up from raw data bits, trusting only the
    stored hash/depth of pruned placeholders.
    """
    memo: Dict[int, Tuple[bytes, int]] = {}
    stack: List[Tuple[Cell, bool]] = [(root, False)]
    while stack:
        cell, ready = stack.pop()
        key = id(cell)
        if key in memo:
            continue
        if cell.type is CellType.PRUNED_BRANCH:
            memo[key] = _pruned_fields(cell.bits)
            continue
        if not ready:
            stack.append((cell, True))
            stack.extend((r, False) for r in cell.refs if id(r) not in memo)
            continue
        children = [memo[id(r)] for r in cell.refs]
        depth = 1 + max(d for _, d in children) if children else 0
        memo[key] = (
            _repr_hash(
                cell.bits,
                cell.bit_len,
                cell.is_exotic,
                (d for _, d in children),
                (h for h, _ in children),
            ),
            depth,
        )
    return memo[id(root)][0]


__all__ = [
    "Cell",
    "CellType",
    "MAX_BITS",
    "MAX_REFS",
    "MAX_DEPTH",
    "PRUNED_BITS",
    "MERKLE_PROOF_BITS",
    "descriptors",
    "recompute_hash",
]
