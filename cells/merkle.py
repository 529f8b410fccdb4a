"""
cellstate • cells: Merkle proofs

A proof is the original tree with every node the prover did not touch
replaced by a pruned placeholder carrying only that node's hash and depth.
Because a parent's hash only depends on its children's hashes and depths,
the pruned tree hashes to exactly the original root hash.

Wire form: a MERKLE_PROOF exotic cell (type 0x03, hash, depth) whose single
reference is the pruned tree.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

from core.errors import PreconditionFailed
from core.logging import get_logger

from .builder import CellBuilder
from .cell import MERKLE_PROOF_BITS, Cell, CellType, recompute_hash
from .codec import CellSerializable
from .errors import UnknownTag
from .slice import CellSlice
from .usage import UsageTree

log = get_logger(__name__)


def prune(root: Cell, visited: frozenset) -> Cell:
    """Rebuild `root` keeping visited nodes and pruning everything else."""
    memo: Dict[bytes, Cell] = {}
    stack: List[Tuple[Cell, bool]] = [(root, False)]
    while stack:
        cell, ready = stack.pop()
        h = cell.hash
        if h in memo:
            continue
        if cell.is_pruned:
            memo[h] = cell
        elif h not in visited:
            memo[h] = Cell.pruned(h, cell.depth)
        elif ready:
            memo[h] = Cell(cell.bits, cell.bit_len, [memo[r.hash] for r in cell.refs], exotic=cell.is_exotic)
        else:
            stack.append((cell, True))
            stack.extend((r, False) for r in cell.refs if r.hash not in memo)
    return memo[root.hash]


@dataclass
class MerkleProof(CellSerializable):
    root_hash: bytes
    root_depth: int
    proof: Cell

    @classmethod
    def create_by_usage_tree(cls, root: Cell, usage: UsageTree) -> "MerkleProof":
        root = root.unwrap()
        if not usage.contains(root.hash):
            raise PreconditionFailed("root cell was never visited", root=root.hash)
        proof = prune(root, usage.visited)
        log.debug(
            "merkle proof built",
            extra={"visited": len(usage), "tree_cells": root.tree_cell_count},
        )
        return cls(root_hash=root.hash, root_depth=root.depth, proof=proof)

    def write_to(self, b: CellBuilder) -> None:
        b.store_uint(CellType.MERKLE_PROOF, 8)
        b.store_bytes(self.root_hash)
        b.store_uint(self.root_depth, 16)
        b.store_ref(self.proof)

    def serialize(self) -> Cell:
        b = CellBuilder()
        self.write_to(b)
        return b.end_cell(exotic=True)

    @classmethod
    def read_from(cls, s: CellSlice) -> "MerkleProof":
        tag = s.load_uint(8)
        if tag != CellType.MERKLE_PROOF:
            raise UnknownTag("not a merkle proof", type=tag)
        h = s.load_hash()
        depth = s.load_uint(16)
        return cls(root_hash=h, root_depth=depth, proof=s.load_ref())

    @classmethod
    def construct_from_cell(cls, cell: Cell) -> "MerkleProof":
        cell = cell.unwrap()
        if cell.type is not CellType.MERKLE_PROOF or cell.bit_len != MERKLE_PROOF_BITS:
            raise UnknownTag("not a merkle proof cell", type=int(cell.type))
        return cls.read_from(CellSlice(cell.bits, cell.bit_len, cell.refs))

    def check(self, expected_hash: bytes) -> bool:
        """Independently rehash the pruned tree and compare with both hashes."""
        actual = recompute_hash(self.proof)
        return actual == self.root_hash == expected_hash


__all__ = ["MerkleProof", "prune"]
