import pytest

from cells.builder import CellBuilder
from cells.dictionary import Hashmap, read_label, write_label
from cells.errors import DeserializationError
from cells.usage import UsageTree


def _val(v: int) -> CellBuilder:
    return CellBuilder().store_uint(v, 16)


def _filled(keys, bits: int = 8) -> Hashmap:
    d = Hashmap(bits)
    for k in keys:
        d.set(k, _val(k * 3))
    return d


class _CountAug:
    """Counts leaves: every leaf carries 1, forks carry the sum."""

    def write_extra(self, b, extra):
        b.store_uint(extra, 32)

    def read_extra(self, s):
        return s.load_uint(32)

    def combine(self, left, right):
        return left + right

    def empty(self):
        return 0


# ---------------------------
# Basic operations
# ---------------------------


def test_empty_dictionary():
    d = Hashmap(8)
    assert d.is_empty()
    assert d.get(1) is None
    assert len(d) == 0
    b = CellBuilder()
    d.write_to(b)
    assert b.bits_used == 1


def test_set_get_items():
    d = _filled([5, 200, 17, 0, 255])
    assert d.get(17).load_uint(16) == 51
    assert d.get(18) is None
    assert list(d.keys()) == [0, 5, 17, 200, 255]
    assert [v.load_uint(16) for _, v in d.items()] == [0, 15, 51, 600, 765]


def test_overwrite_keeps_single_entry():
    d = _filled([1, 2])
    d.set(2, _val(99))
    assert len(d) == 2
    assert d.get(2).load_uint(16) == 99


def test_insertion_order_does_not_change_root():
    assert _filled([1, 2, 3, 100]) == _filled([100, 3, 2, 1])
    assert _filled([1, 2, 3, 100]).root.hash == _filled([3, 1, 100, 2]).root.hash


def test_remove():
    d = _filled([1, 2, 3])
    assert d.remove(2) is True
    assert d.remove(2) is False
    assert list(d.keys()) == [1, 3]
    assert d == _filled([1, 3])
    d.remove(1)
    d.remove(3)
    assert d.is_empty()


def test_key_width_checked():
    with pytest.raises(ValueError):
        Hashmap(8).set(256, _val(1))


def test_wire_round_trip():
    d = _filled([9, 10, 11], bits=32)
    b = CellBuilder()
    d.write_to(b)
    back = Hashmap.read_from(b.end_cell().begin_parse(), 32)
    assert back == d
    assert back.get(10).load_uint(16) == 30


def test_full_width_keys():
    d = Hashmap(256)
    k1, k2 = 2**255 + 1, 7
    d.set(k1, _val(1))
    d.set(k2, _val(2))
    assert d.get(k1).load_uint(16) == 1
    assert d.get(k2).load_uint(16) == 2


# ---------------------------
# Labels
# ---------------------------


@pytest.mark.parametrize("form", ["short", "long", "same"])
def test_decoder_accepts_every_label_form(form):
    b = CellBuilder()
    if form == "short":
        b.store_bit(0).store_bits(0b1110, 4).store_bits(0b111, 3)
    elif form == "long":
        b.store_bits(0b10, 2).store_uint(3, 4).store_bits(0b111, 3)
    else:
        b.store_bits(0b11, 2).store_bit(1).store_uint(3, 4)
    assert read_label(b.end_cell().begin_parse(), 8) == (0b111, 3)


def test_encoder_prefers_short_label_forms():
    b = CellBuilder()
    write_label(b, 0, 0, 8)
    assert b.bits_used == 2
    b = CellBuilder()
    write_label(b, 2**100 - 1, 100, 255)
    assert b.bits_used == 3 + 8


def test_label_longer_than_key_rejected():
    b = CellBuilder().store_bit(0).store_bits(0b1110, 4).store_bits(0b101, 3)
    with pytest.raises(DeserializationError):
        read_label(b.end_cell().begin_parse(), 2)


# ---------------------------
# Path-only lookups
# ---------------------------


def test_get_parses_only_the_path():
    d = _filled(range(0, 256, 16))
    tree = UsageTree.with_root(d.root)
    tracked = Hashmap(8, tree.root_cell())
    assert tracked.get(32).load_uint(16) == 96
    # 16 leaves under 15 forks; the path is 4 forks and the leaf
    assert d.root.tree_cell_count == 31
    assert len(tree) == 5


# ---------------------------
# Augmented dictionaries
# ---------------------------


def test_augmented_root_extra_folds_leaves():
    aug = _CountAug()
    d = Hashmap(16, aug=aug)
    assert d.root_extra() == 0
    for k in (1, 2, 300, 4000, 65535):
        d.set(k, _val(k), extra=1)
    assert d.root_extra() == 5
    assert d.get_with_extra(300)[1] == 1

    b = CellBuilder()
    d.write_to(b)
    back = Hashmap.read_from(b.end_cell().begin_parse(), 16, aug)
    assert back.root_extra() == 5
    assert back == d

    back.remove(2)
    assert back.root_extra() == 4


def test_augmented_extra_recovered_from_root_cell():
    aug = _CountAug()
    d = Hashmap(16, aug=aug)
    for k in (10, 20, 30):
        d.set(k, _val(k), extra=1)
    assert Hashmap(16, d.root, aug).root_extra() == 3


def test_augmented_set_requires_extra():
    with pytest.raises(ValueError):
        Hashmap(8, aug=_CountAug()).set(1, _val(1))


def test_empty_augmented_writes_empty_extra():
    b = CellBuilder()
    Hashmap(8, aug=_CountAug()).write_to(b)
    s = b.end_cell().begin_parse()
    assert s.load_bit() is False
    assert s.load_uint(32) == 0
