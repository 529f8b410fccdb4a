"""
cellstate • cells: structure codec helpers

`CellSerializable` is the mixin every wire structure implements:

    write_to(builder)         append this value to a builder
    read_from(slice)          classmethod; parse a value, advancing the slice
    serialize() -> Cell       write into a fresh builder and close it
    construct_from_cell(c)    classmethod; parse from the start of a cell
    hash() -> bytes           representation hash of serialize()

Maybe fields use a 0/1 presence bit before the value.
"""

from __future__ import annotations

from typing import Callable, Optional, Type, TypeVar

from .builder import CellBuilder
from .cell import Cell
from .slice import CellSlice

T = TypeVar("T")
S = TypeVar("S", bound="CellSerializable")


class CellSerializable:
    def write_to(self, b: CellBuilder) -> None:
        raise NotImplementedError

    @classmethod
    def read_from(cls: Type[S], s: CellSlice) -> S:
        raise NotImplementedError

    def serialize(self) -> Cell:
        b = CellBuilder()
        self.write_to(b)
        return b.end_cell()

    @classmethod
    def construct_from_cell(cls: Type[S], cell: Cell) -> S:
        return cls.read_from(cell.begin_parse())

    def hash(self) -> bytes:
        return self.serialize().hash


def write_maybe(b: CellBuilder, value: Optional[T], write: Callable[[CellBuilder, T], object]) -> None:
    if value is None:
        b.store_bit(0)
    else:
        b.store_bit(1)
        write(b, value)


def read_maybe(s: CellSlice, read: Callable[[CellSlice], T]) -> Optional[T]:
    return read(s) if s.load_bit() else None


def bits_for_max(m: int) -> int:
    """Width of a `#<= m` field."""
    return m.bit_length()


__all__ = ["CellSerializable", "write_maybe", "read_maybe", "bits_for_max"]
