"""
cellstate • cells: label-compressed binary dictionary

`Hashmap` is a Patricia trie over cells keyed by fixed-width unsigned keys
(`HashmapE n X`, or `HashmapAugE n X Y` when an `Augmentation` is given).

Node layout
-----------
    edge   := label node
    leaf   := [extra:Y] value:X                  (no key bits left)
    fork   := ^left ^right [extra:Y]             (next key bit picks the side)

    label  := hml_short$0  len:Unary  bits        (2l + 2 bits)
            | hml_long$10  len:#<=m   bits        (2 + w + l bits)
            | hml_same$11  bit        len:#<=m    (3 + w bits)

where m is the number of key bits still unresolved and w = m.bit_length().
The encoder picks the shortest form; the decoder accepts all three.

Lookups walk only the path to the key, so sibling subtrees are never parsed
(this is what keeps usage-tracked proofs small). Mutations gather the
entries and rebuild; unchanged subtrees come out as identical cells.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional, Protocol, Tuple, Union

from .builder import CellBuilder
from .codec import CellSerializable
from .errors import DeserializationError
from .slice import CellSlice


class Augmentation(Protocol):
    """How a HashmapAugE stores and folds its per-node extra values."""

    def write_extra(self, b: CellBuilder, extra: Any) -> None: ...

    def read_extra(self, s: CellSlice) -> Any: ...

    def combine(self, left: Any, right: Any) -> Any: ...

    def empty(self) -> Any: ...


Value = Union[CellBuilder, CellSlice, CellSerializable]
_Entry = Tuple[int, CellBuilder, Any]


def _to_builder(value: Value) -> CellBuilder:
    if isinstance(value, CellBuilder):
        return value
    if isinstance(value, CellSlice):
        return CellBuilder().store_slice(value)
    b = CellBuilder()
    value.write_to(b)
    return b


# ---------------------------------------------------------------------------
# Labels
# ---------------------------------------------------------------------------


def write_label(b: CellBuilder, label: int, length: int, m: int) -> None:
    w = m.bit_length()
    size_short = 2 * length + 2
    size_long = 2 + w + length
    uniform = length > 0 and label in (0, (1 << length) - 1)
    size_same = 3 + w if uniform else None

    if size_short <= size_long and (size_same is None or size_short <= size_same):
        b.store_bit(0)
        b.store_bits((1 << (length + 1)) - 2, length + 1)  # unary: `length` ones then a zero
        b.store_bits(label, length)
    elif size_same is None or size_long <= size_same:
        b.store_bits(0b10, 2)
        b.store_uint(length, w)
        b.store_bits(label, length)
    else:
        b.store_bits(0b11, 2)
        b.store_bit(label != 0)
        b.store_uint(length, w)


def read_label(s: CellSlice, m: int) -> Tuple[int, int]:
    """Parse a label for an m-bit remainder; returns (label bits, length)."""
    if not s.load_bit():
        length = 0
        while s.load_bit():
            length += 1
            if length > m:
                raise DeserializationError("label longer than key", length=length, max=m)
        return s.load_bits(length), length
    w = m.bit_length()
    if not s.load_bit():
        length = s.load_uint(w)
        if length > m:
            raise DeserializationError("label longer than key", length=length, max=m)
        return s.load_bits(length), length
    bit = s.load_bit()
    length = s.load_uint(w)
    if length > m:
        raise DeserializationError("label longer than key", length=length, max=m)
    return ((1 << length) - 1 if bit else 0), length


# ---------------------------------------------------------------------------
# Dictionary
# ---------------------------------------------------------------------------


class Hashmap:
    """
    HashmapE / HashmapAugE over `key_bits`-wide keys.

    `root` may be a plain Cell or a usage-tracking view of one; values come
    back as slices positioned at the start of X (the leaf extra is skipped).
    """

    __slots__ = ("key_bits", "root", "aug", "_extra")

    def __init__(
        self,
        key_bits: int,
        root: Optional[Any] = None,
        aug: Optional[Augmentation] = None,
        root_extra: Any = None,
    ) -> None:
        if key_bits <= 0:
            raise ValueError("key_bits must be positive")
        self.key_bits = key_bits
        self.root = root
        self.aug = aug
        self._extra = root_extra

    def copy(self) -> "Hashmap":
        return Hashmap(self.key_bits, self.root, self.aug, self._extra)

    def is_empty(self) -> bool:
        return self.root is None

    def _check_key(self, key: int) -> None:
        if key < 0 or key >> self.key_bits:
            raise ValueError(f"key does not fit in {self.key_bits} bits")

    # ---- lookup ----------------------------------------------------------

    def get_with_extra(self, key: int) -> Optional[Tuple[CellSlice, Any]]:
        self._check_key(key)
        cell, m, k = self.root, self.key_bits, key
        while cell is not None:
            s = cell.begin_parse()
            label, length = read_label(s, m)
            rest = m - length
            if k >> rest != label:
                return None
            k &= (1 << rest) - 1
            if rest == 0:
                extra = self.aug.read_extra(s) if self.aug else None
                return s, extra
            bit = k >> (rest - 1)
            k &= (1 << (rest - 1)) - 1
            cell = s.reference(bit)
            m = rest - 1
        return None

    def get(self, key: int) -> Optional[CellSlice]:
        found = self.get_with_extra(key)
        return None if found is None else found[0]

    def __contains__(self, key: int) -> bool:
        return self.get_with_extra(key) is not None

    # ---- iteration ---------------------------------------------------------

    def items_with_extra(self) -> Iterator[Tuple[int, CellSlice, Any]]:
        """Ascending (key, value slice, leaf extra) triples."""
        if self.root is None:
            return
        stack: List[Tuple[Any, int, int]] = [(self.root, self.key_bits, 0)]
        while stack:
            cell, m, prefix = stack.pop()
            s = cell.begin_parse()
            label, length = read_label(s, m)
            prefix = (prefix << length) | label
            m -= length
            if m == 0:
                extra = self.aug.read_extra(s) if self.aug else None
                yield prefix, s, extra
                continue
            left, right = s.load_ref(), s.load_ref()
            stack.append((right, m - 1, (prefix << 1) | 1))
            stack.append((left, m - 1, prefix << 1))

    def items(self) -> Iterator[Tuple[int, CellSlice]]:
        for key, value, _ in self.items_with_extra():
            yield key, value

    def keys(self) -> Iterator[int]:
        for key, _, _ in self.items_with_extra():
            yield key

    def __len__(self) -> int:
        return sum(1 for _ in self.items_with_extra())

    # ---- mutation ----------------------------------------------------------

    def _entries(self) -> Dict[int, Tuple[CellBuilder, Any]]:
        return {k: (CellBuilder().store_slice(v), e) for k, v, e in self.items_with_extra()}

    def set(self, key: int, value: Value, extra: Any = None) -> None:
        self._check_key(key)
        if self.aug is not None and extra is None:
            raise ValueError("augmented dictionary needs an extra value")
        entries = self._entries()
        entries[key] = (_to_builder(value), extra)
        self._rebuild(entries)

    def remove(self, key: int) -> bool:
        self._check_key(key)
        if key not in self:
            return False
        entries = self._entries()
        del entries[key]
        self._rebuild(entries)
        return True

    def _rebuild(self, entries: Dict[int, Tuple[CellBuilder, Any]]) -> None:
        if not entries:
            self.root = None
            self._extra = self.aug.empty() if self.aug else None
            return
        ordered = [(k, v, e) for k, (v, e) in sorted(entries.items())]
        self.root, self._extra = self._build(ordered, self.key_bits)

    def _build(self, entries: List[_Entry], m: int) -> Tuple[Any, Any]:
        first, last = entries[0][0], entries[-1][0]
        rest = (first ^ last).bit_length()
        length = m - rest
        b = CellBuilder()
        write_label(b, first >> rest, length, m)
        if rest == 0:
            _, value, extra = entries[0]
            if self.aug:
                self.aug.write_extra(b, extra)
            b.store_builder(value)
            return b.end_cell(), extra

        half = 1 << (rest - 1)
        mask = half - 1
        low = [(k & mask, v, e) for k, v, e in entries if not k & half]
        high = [(k & mask, v, e) for k, v, e in entries if k & half]
        left, left_extra = self._build(low, rest - 1)
        right, right_extra = self._build(high, rest - 1)
        b.store_ref(left).store_ref(right)
        extra = None
        if self.aug:
            extra = self.aug.combine(left_extra, right_extra)
            self.aug.write_extra(b, extra)
        return b.end_cell(), extra

    # ---- augmentation ------------------------------------------------------

    def root_extra(self) -> Any:
        """The fold of every leaf extra (augmented dictionaries only)."""
        if self.aug is None:
            return None
        if self._extra is None:
            if self.root is None:
                self._extra = self.aug.empty()
            else:
                s = self.root.begin_parse()
                read_label(s, self.key_bits)
                self._extra = self.aug.read_extra(s)
        return self._extra

    # ---- wire ----------------------------------------------------------------

    def write_to(self, b: CellBuilder) -> None:
        b.store_maybe_ref(self.root)
        if self.aug is not None:
            self.aug.write_extra(b, self.root_extra())

    @classmethod
    def read_from(cls, s: CellSlice, key_bits: int, aug: Optional[Augmentation] = None) -> "Hashmap":
        root = s.load_maybe_ref()
        extra = aug.read_extra(s) if aug is not None else None
        return cls(key_bits, root, aug, extra)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Hashmap):
            return NotImplemented
        mine = None if self.root is None else self.root.hash
        theirs = None if other.root is None else other.root.hash
        return self.key_bits == other.key_bits and mine == theirs

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        root = "empty" if self.root is None else self.root.hash.hex()[:16] + "…"
        return f"Hashmap(key_bits={self.key_bits}, root={root})"


__all__ = ["Augmentation", "Hashmap", "write_label", "read_label"]
