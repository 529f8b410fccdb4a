"""
cellstate • cells: bit builder

`CellBuilder` accumulates data bits as one big integer plus a length, and a
list of child references. Every `store_*` returns the builder so calls can
be chained:

    cell = CellBuilder().store_uint(0x9023AFE2, 32).store_ref(child).end_cell()

Exceeding 1023 bits or 4 references, or storing a value that does not fit
its field, raises `CellOverflow`.
"""

from __future__ import annotations

from typing import Any, List, Optional

from .cell import MAX_BITS, MAX_REFS, Cell
from .errors import CellOverflow
from .slice import CellSlice, var_uint_len_bits


class CellBuilder:
    __slots__ = ("_bits", "_len", "_refs")

    def __init__(self) -> None:
        self._bits = 0
        self._len = 0
        self._refs: List[Cell] = []

    @property
    def bits_used(self) -> int:
        return self._len

    @property
    def refs_used(self) -> int:
        return len(self._refs)

    @property
    def remaining_bits(self) -> int:
        return MAX_BITS - self._len

    # ---- bits ------------------------------------------------------------

    def store_bits(self, value: int, n: int) -> "CellBuilder":
        """Append the low `n` bits of `value`, MSB first."""
        if n < 0 or value < 0 or value >> n:
            raise CellOverflow("value does not fit", bits=n)
        if self._len + n > MAX_BITS:
            raise CellOverflow("too many data bits", bits=self._len + n, max=MAX_BITS)
        self._bits = (self._bits << n) | value
        self._len += n
        return self

    def store_bit(self, bit: bool | int) -> "CellBuilder":
        return self.store_bits(1 if bit else 0, 1)

    def store_uint(self, value: int, n: int) -> "CellBuilder":
        return self.store_bits(value, n)

    def store_int(self, value: int, n: int) -> "CellBuilder":
        if n <= 0 or not -(1 << (n - 1)) <= value < (1 << (n - 1)):
            raise CellOverflow("signed value does not fit", value=value, bits=n)
        return self.store_bits(value & ((1 << n) - 1), n)

    def store_bytes(self, data: bytes) -> "CellBuilder":
        return self.store_bits(int.from_bytes(data, "big"), 8 * len(data))

    def store_var_uint(self, value: int, n: int) -> "CellBuilder":
        """VarUInteger n: byte count (< n) in (n-1).bit_length() bits, then the bytes."""
        length = (value.bit_length() + 7) // 8 if value > 0 else 0
        if value < 0 or length >= n:
            raise CellOverflow(f"value does not fit VarUInteger {n}", value=value)
        self.store_uint(length, var_uint_len_bits(n))
        return self.store_uint(value, 8 * length)

    def store_grams(self, value: int) -> "CellBuilder":
        return self.store_var_uint(value, 16)

    # ---- references --------------------------------------------------------

    def store_ref(self, cell: Any) -> "CellBuilder":
        if len(self._refs) >= MAX_REFS:
            raise CellOverflow("too many references", max=MAX_REFS)
        self._refs.append(cell.unwrap())
        return self

    def store_maybe_ref(self, cell: Optional[Any]) -> "CellBuilder":
        if cell is None:
            return self.store_bit(0)
        return self.store_bit(1).store_ref(cell)

    # ---- composition ---------------------------------------------------------

    def store_slice(self, s: CellSlice) -> "CellBuilder":
        """Copy the slice's remaining bits and refs; the slice is not advanced."""
        c = s.clone()
        value, n = c.load_remaining()
        self.store_bits(value, n)
        while c.remaining_refs:
            self.store_ref(c.load_ref())
        return self

    def store_builder(self, other: "CellBuilder") -> "CellBuilder":
        self.store_bits(other._bits, other._len)
        for r in other._refs:
            self.store_ref(r)
        return self

    def end_cell(self, *, exotic: bool = False) -> Cell:
        return Cell(self._bits, self._len, self._refs, exotic=exotic)

    def __repr__(self) -> str:
        return f"CellBuilder(bits={self._len}, refs={len(self._refs)})"


__all__ = ["CellBuilder"]
