"""
accounts.state_init: the program bundle an active account carries.

    tick_tock$_ tick:Bool tock:Bool = TickTock;
    simple_lib$_ public:Bool root:^Cell = SimpleLib;
    _ split_depth:(Maybe (## 5)) special:(Maybe TickTock)
      code:(Maybe ^Cell) data:(Maybe ^Cell)
      library:(HashmapE 256 SimpleLib) = StateInit;

The library dictionary is kept as a lazy `Hashmap` keyed by the library
root's hash; entries are parsed only when asked for. `hash()` of a
StateInit is the hash of its serialized cell and is what an uninit
account's address commits to.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Optional

from cells.builder import CellBuilder
from cells.cell import Cell
from cells.codec import CellSerializable, read_maybe, write_maybe
from cells.dictionary import Hashmap
from cells.slice import CellSlice

LIBRARY_KEY_BITS = 256


@dataclass(frozen=True)
class TickTock(CellSerializable):
    tick: bool = False
    tock: bool = False

    def write_to(self, b: CellBuilder) -> None:
        b.store_bit(self.tick).store_bit(self.tock)

    @classmethod
    def read_from(cls, s: CellSlice) -> "TickTock":
        return cls(s.load_bit(), s.load_bit())


@dataclass(frozen=True)
class SimpleLib(CellSerializable):
    root: Cell
    public: bool = False

    def write_to(self, b: CellBuilder) -> None:
        b.store_bit(self.public).store_ref(self.root)

    @classmethod
    def read_from(cls, s: CellSlice) -> "SimpleLib":
        public = s.load_bit()
        return cls(s.load_ref(), public)


def _empty_library() -> Hashmap:
    return Hashmap(LIBRARY_KEY_BITS)


@dataclass
class StateInit(CellSerializable):
    split_depth: Optional[int] = None
    special: Optional[TickTock] = None
    code: Optional[Cell] = None
    data: Optional[Cell] = None
    library: Hashmap = field(default_factory=_empty_library)

    def __post_init__(self) -> None:
        if self.split_depth is not None and not 0 <= self.split_depth < 32:
            raise ValueError("split_depth must fit 5 bits")

    def copy(self) -> "StateInit":
        return replace(self, library=self.library.copy())

    def set_code(self, code: Cell) -> None:
        self.code = code

    def set_data(self, data: Cell) -> None:
        self.data = data

    # ---- libraries -----------------------------------------------------------

    def set_library(self, code: Cell, public: bool) -> None:
        key = int.from_bytes(code.hash, "big")
        self.library.set(key, SimpleLib(code, public))

    def get_library(self, lib_hash: bytes) -> Optional[SimpleLib]:
        s = self.library.get(int.from_bytes(lib_hash, "big"))
        return None if s is None else SimpleLib.read_from(s)

    def set_library_flag(self, lib_hash: bytes, public: bool) -> bool:
        """Change a library's public flag; False when no such library."""
        lib = self.get_library(lib_hash)
        if lib is None:
            return False
        if lib.public != public:
            self.library.set(int.from_bytes(lib_hash, "big"), SimpleLib(lib.root, public))
        return True

    def delete_library(self, lib_hash: bytes) -> bool:
        return self.library.remove(int.from_bytes(lib_hash, "big"))

    def libraries(self) -> Dict[bytes, SimpleLib]:
        return {
            key.to_bytes(32, "big"): SimpleLib.read_from(s) for key, s in self.library.items()
        }

    # ---- wire ------------------------------------------------------------------

    def write_to(self, b: CellBuilder) -> None:
        write_maybe(b, self.split_depth, lambda b, v: b.store_uint(v, 5))
        write_maybe(b, self.special, lambda b, v: v.write_to(b))
        b.store_maybe_ref(self.code)
        b.store_maybe_ref(self.data)
        self.library.write_to(b)

    @classmethod
    def read_from(cls, s: CellSlice) -> "StateInit":
        split_depth = read_maybe(s, lambda s: s.load_uint(5))
        special = read_maybe(s, TickTock.read_from)
        code = s.load_maybe_ref()
        data = s.load_maybe_ref()
        library = Hashmap.read_from(s, LIBRARY_KEY_BITS)
        return cls(split_depth, special, code, data, library)


__all__ = ["StateInit", "TickTock", "SimpleLib"]
