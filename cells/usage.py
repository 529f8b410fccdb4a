"""
cellstate • cells: usage tracking

`UsageTree.with_root(cell).root_cell()` returns a view of the cell that
records, by hash, every node whose data gets parsed. References handed out
by a tracked node are tracked views too, so an ordinary parse of the tree
leaves behind exactly the set of nodes a verifier needs to see.

Holding a reference is not a visit; only `begin_parse()` is.
"""

from __future__ import annotations

from typing import FrozenSet, Set

from .cell import Cell, CellType
from .errors import PrunedCellAccess
from .slice import CellSlice


class UsageTree:
    __slots__ = ("root", "_visited")

    def __init__(self, root: Cell) -> None:
        self.root = root.unwrap()
        self._visited: Set[bytes] = set()

    @classmethod
    def with_root(cls, root: Cell) -> "UsageTree":
        return cls(root)

    def root_cell(self) -> "UsageCell":
        return UsageCell(self.root, self)

    def contains(self, h: bytes) -> bool:
        return h in self._visited

    @property
    def visited(self) -> FrozenSet[bytes]:
        return frozenset(self._visited)

    def __len__(self) -> int:
        return len(self._visited)


class UsageCell:
    """Tracking view over a `Cell`; hashes and equality pass through."""

    __slots__ = ("cell", "tree")

    def __init__(self, cell: Cell, tree: UsageTree) -> None:
        self.cell = cell
        self.tree = tree

    def unwrap(self) -> Cell:
        return self.cell

    @property
    def hash(self) -> bytes:
        return self.cell.hash

    @property
    def depth(self) -> int:
        return self.cell.depth

    @property
    def bit_len(self) -> int:
        return self.cell.bit_len

    @property
    def type(self) -> CellType:
        return self.cell.type

    @property
    def refs_count(self) -> int:
        return self.cell.refs_count

    def reference(self, i: int) -> "UsageCell":
        return UsageCell(self.cell.refs[i], self.tree)

    def begin_parse(self) -> CellSlice:
        cell = self.cell
        if cell.type is CellType.PRUNED_BRANCH:
            raise PrunedCellAccess("cell is pruned", hash=cell.hash)
        self.tree._visited.add(cell.hash)
        return CellSlice(cell.bits, cell.bit_len, tuple(UsageCell(r, self.tree) for r in cell.refs))

    def __eq__(self, other: object) -> bool:
        if not hasattr(other, "unwrap"):
            return NotImplemented
        return self.cell.hash == other.unwrap().hash  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash(self.cell.hash)

    def __repr__(self) -> str:
        return f"UsageCell({self.cell!r})"


__all__ = ["UsageTree", "UsageCell"]
