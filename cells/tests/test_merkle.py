import pytest

from cells.builder import CellBuilder
from cells.cell import Cell, CellType
from cells.errors import UnknownTag
from cells.merkle import MerkleProof
from cells.usage import UsageTree
from core.errors import PreconditionFailed


def _tree():
    a_leaf = CellBuilder().store_uint(0xA1, 8).end_cell()
    b_leaf = CellBuilder().store_uint(0xB1, 8).end_cell()
    a = CellBuilder().store_uint(0xA, 4).store_ref(a_leaf).end_cell()
    b = CellBuilder().store_uint(0xB, 4).store_ref(b_leaf).end_cell()
    root = CellBuilder().store_uint(1, 1).store_ref(a).store_ref(b).end_cell()
    return root, a, b


def _visit_a(root):
    tree = UsageTree.with_root(root)
    s = tree.root_cell().begin_parse()
    s.load_ref().begin_parse()
    return tree


def test_untouched_siblings_are_pruned():
    root, a, b = _tree()
    proof = MerkleProof.create_by_usage_tree(root, _visit_a(root))

    assert proof.root_hash == root.hash
    assert proof.proof.hash == root.hash
    kept_a, pruned_b = proof.proof.refs
    assert kept_a.type is CellType.ORDINARY
    assert kept_a.bits == a.bits
    assert kept_a.refs[0].is_pruned
    assert pruned_b.is_pruned
    assert pruned_b.hash == b.hash


def test_holding_a_reference_is_not_a_visit():
    root, _, b = _tree()
    tree = UsageTree.with_root(root)
    s = tree.root_cell().begin_parse()
    s.load_ref()
    s.load_ref()
    assert not tree.contains(b.hash)
    assert len(tree) == 1


def test_check_recomputes_root_hash():
    root, _, _ = _tree()
    proof = MerkleProof.create_by_usage_tree(root, _visit_a(root))
    assert proof.check(root.hash)
    assert not proof.check(b"\x00" * 32)


def test_unvisited_root_rejected():
    root, _, _ = _tree()
    with pytest.raises(PreconditionFailed):
        MerkleProof.create_by_usage_tree(root, UsageTree.with_root(root))


def test_serialized_proof_round_trip():
    root, _, _ = _tree()
    proof = MerkleProof.create_by_usage_tree(root, _visit_a(root))
    cell = proof.serialize()
    assert cell.type is CellType.MERKLE_PROOF
    back = MerkleProof.construct_from_cell(cell)
    assert back.root_hash == root.hash
    assert back.root_depth == root.depth
    assert back.proof == proof.proof
    assert back.check(root.hash)


def test_ordinary_cell_is_not_a_proof():
    with pytest.raises(UnknownTag):
        MerkleProof.construct_from_cell(Cell(3, 8))


def test_proof_fields_leave_the_cell_hash_method_alone():
    root, _, _ = _tree()
    proof = MerkleProof(root_hash=root.hash, root_depth=root.depth, proof=root)
    assert callable(proof.hash)
    assert proof.hash() == proof.serialize().hash
    assert proof.hash() != proof.root_hash
