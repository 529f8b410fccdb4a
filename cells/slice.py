"""
cellstate • cells: read cursor over a cell

A `CellSlice` owns a bit window (`bits`, `bit_len`) plus a tuple of child
references and two cursors. It never touches hashes and never parses the
children it hands out; callers decide whether to `begin_parse()` them.

All `load_*` methods advance the cursor, `preload_*` do not. Reading past
the end raises `CellUnderflow`.
"""

from __future__ import annotations

from typing import Any, Optional, Tuple

from core.utils.hash import HASH_BITS

from .errors import CellUnderflow


def var_uint_len_bits(n: int) -> int:
    """Width of the byte-count prefix of a VarUInteger n."""
    return (n - 1).bit_length()


class CellSlice:
    __slots__ = ("bits", "bit_len", "refs", "pos", "ref_pos")

    def __init__(self, bits: int, bit_len: int, refs: Tuple[Any, ...] = ()) -> None:
        self.bits = bits
        self.bit_len = bit_len
        self.refs = tuple(refs)
        self.pos = 0
        self.ref_pos = 0

    # ---- cursors -------------------------------------------------------

    @property
    def remaining_bits(self) -> int:
        return self.bit_len - self.pos

    @property
    def remaining_refs(self) -> int:
        return len(self.refs) - self.ref_pos

    def is_empty(self) -> bool:
        return self.remaining_bits == 0 and self.remaining_refs == 0

    def clone(self) -> "CellSlice":
        out = CellSlice(self.bits, self.bit_len, self.refs)
        out.pos = self.pos
        out.ref_pos = self.ref_pos
        return out

    # ---- bits ------------------------------------------------------------

    def _peek(self, n: int) -> int:
        if n < 0:
            raise ValueError("bit count must be non-negative")
        if n > self.remaining_bits:
            raise CellUnderflow("not enough bits", need=n, left=self.remaining_bits)
        shift = self.bit_len - self.pos - n
        return (self.bits >> shift) & ((1 << n) - 1)

    def preload_bits(self, n: int) -> int:
        return self._peek(n)

    def preload_uint(self, n: int) -> int:
        return self._peek(n)

    def preload_bit(self) -> bool:
        return bool(self._peek(1))

    def load_bits(self, n: int) -> int:
        v = self._peek(n)
        self.pos += n
        return v

    def skip_bits(self, n: int) -> None:
        self._peek(n)
        self.pos += n

    def load_bit(self) -> bool:
        return bool(self.load_bits(1))

    def load_uint(self, n: int) -> int:
        return self.load_bits(n)

    def load_int(self, n: int) -> int:
        v = self.load_bits(n)
        if n and v >> (n - 1):
            v -= 1 << n
        return v

    def load_bytes(self, n: int) -> bytes:
        return self.load_bits(8 * n).to_bytes(n, "big")

    def load_hash(self) -> bytes:
        return self.load_bytes(HASH_BITS // 8)

    def load_var_uint(self, n: int) -> int:
        length = self.load_uint(var_uint_len_bits(n))
        return self.load_uint(8 * length)

    def load_grams(self) -> int:
        return self.load_var_uint(16)

    def load_remaining(self) -> Tuple[int, int]:
        """Consume every remaining bit; returns (value, nbits)."""
        n = self.remaining_bits
        return self.load_bits(n), n

    # ---- references --------------------------------------------------------

    def reference(self, i: int) -> Any:
        """Random access to the i-th child reference (cursor untouched)."""
        if not 0 <= i < len(self.refs):
            raise CellUnderflow("no such reference", index=i, refs=len(self.refs))
        return self.refs[i]

    def preload_ref(self) -> Any:
        if self.remaining_refs <= 0:
            raise CellUnderflow("not enough references", need=1, left=0)
        return self.refs[self.ref_pos]

    def load_ref(self) -> Any:
        ref = self.preload_ref()
        self.ref_pos += 1
        return ref

    def load_maybe_ref(self) -> Optional[Any]:
        return self.load_ref() if self.load_bit() else None

    def __repr__(self) -> str:
        return f"CellSlice(bits={self.remaining_bits}/{self.bit_len}, refs={self.remaining_refs}/{len(self.refs)})"


__all__ = ["CellSlice", "HASH_BITS", "var_uint_len_bits"]
