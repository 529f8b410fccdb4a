"""
cellstate • cells: bag of cells

Single-root serialization used by the command-line tools.

Layout
------
    magic           b5 ee 9c 72
    flags|size      1 byte: high 5 bits flags (must be 0), low 3 bits ref size
    off_bytes       1 byte
    cells           ref size
    roots           ref size (always 1)
    absent          ref size (always 0)
    tot_cells_size  off_bytes
    root_list       ref size (always 0: the root comes first)
    cell data       per cell: d1 d2 data[ceil(d2/2)] ref_index*refs

Cells are deduplicated by hash and laid out parents-before-children, so
every reference index is strictly greater than its owner's index.
"""

from __future__ import annotations

from typing import Dict, List

from core.utils.bytes import strip_completion

from .cell import Cell, descriptors
from .errors import DeserializationError

BOC_MAGIC = bytes.fromhex("b5ee9c72")


def _width(n: int) -> int:
    return max(1, (n.bit_length() + 7) // 8)


def _topological(root: Cell) -> List[Cell]:
    order: List[Cell] = []
    seen: Dict[bytes, bool] = {}
    stack = [(root, False)]
    while stack:
        cell, done = stack.pop()
        if done:
            order.append(cell)
            continue
        if cell.hash in seen:
            continue
        seen[cell.hash] = True
        stack.append((cell, True))
        stack.extend((r, False) for r in reversed(cell.refs))
    order.reverse()
    return order


def serialize_boc(root: Cell) -> bytes:
    cells = _topological(root.unwrap())
    index = {c.hash: i for i, c in enumerate(cells)}
    ref_size = _width(len(cells))

    body = bytearray()
    for c in cells:
        body += descriptors(c.bit_len, len(c.refs), c.is_exotic)
        body += c.data_bytes()
        for r in c.refs:
            body += index[r.hash].to_bytes(ref_size, "big")
    off_bytes = _width(len(body))

    out = bytearray(BOC_MAGIC)
    out.append(ref_size)
    out.append(off_bytes)
    out += len(cells).to_bytes(ref_size, "big")
    out += (1).to_bytes(ref_size, "big")
    out += (0).to_bytes(ref_size, "big")
    out += len(body).to_bytes(off_bytes, "big")
    out += (0).to_bytes(ref_size, "big")
    out += body
    return bytes(out)


class _Reader:
    __slots__ = ("data", "pos")

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.pos = 0

    def take(self, n: int) -> bytes:
        if self.pos + n > len(self.data):
            raise DeserializationError("bag of cells truncated", need=n, left=len(self.data) - self.pos)
        out = self.data[self.pos : self.pos + n]
        self.pos += n
        return out

    def uint(self, n: int) -> int:
        return int.from_bytes(self.take(n), "big")


def deserialize_boc(data: bytes) -> Cell:
    r = _Reader(bytes(data))
    if r.take(4) != BOC_MAGIC:
        raise DeserializationError("bad bag-of-cells magic")
    flags = r.uint(1)
    if flags >> 3:
        raise DeserializationError("unsupported bag-of-cells flags", flags=flags)
    ref_size = flags & 0x7
    off_bytes = r.uint(1)
    if not 1 <= ref_size <= 4 or not 1 <= off_bytes <= 8:
        raise DeserializationError("bad size fields", ref_size=ref_size, off_bytes=off_bytes)

    count = r.uint(ref_size)
    roots = r.uint(ref_size)
    absent = r.uint(ref_size)
    total = r.uint(off_bytes)
    if roots != 1 or absent != 0:
        raise DeserializationError("only single-root complete bags are supported", roots=roots, absent=absent)
    if r.uint(ref_size) != 0:
        raise DeserializationError("root must be the first cell")
    if count == 0:
        raise DeserializationError("empty bag of cells")

    start = r.pos
    raw = []
    for i in range(count):
        d1, d2 = r.take(2)
        refs_count, exotic = d1 & 7, bool(d1 & 8)
        if d1 >> 4 or refs_count > 4:
            raise DeserializationError("bad cell descriptor", index=i, d1=d1)
        payload = r.take((d2 + 1) // 2)
        if d2 % 2:
            try:
                bits, bit_len = strip_completion(payload)
            except ValueError as e:
                raise DeserializationError("missing completion tag", index=i).with_cause(e)
            if bit_len <= 8 * (d2 // 2):
                raise DeserializationError("completion tag in wrong byte", index=i)
        else:
            bits, bit_len = int.from_bytes(payload, "big"), 8 * len(payload)
        refs = [r.uint(ref_size) for _ in range(refs_count)]
        for ref in refs:
            if not i < ref < count:
                raise DeserializationError("dangling or backward reference", index=i, ref=ref)
        raw.append((bits, bit_len, exotic, refs))
    if r.pos - start != total:
        raise DeserializationError("cell data size mismatch", declared=total, actual=r.pos - start)
    if r.pos != len(r.data):
        raise DeserializationError("trailing bytes after bag of cells", extra=len(r.data) - r.pos)

    built: List[Cell] = [None] * count  # type: ignore[list-item]
    for i in range(count - 1, -1, -1):
        bits, bit_len, exotic, refs = raw[i]
        built[i] = Cell(bits, bit_len, [built[j] for j in refs], exotic=exotic)
    return built[0]


__all__ = ["BOC_MAGIC", "serialize_boc", "deserialize_boc"]
