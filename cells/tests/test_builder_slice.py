import pytest

from cells.builder import CellBuilder
from cells.cell import Cell
from cells.errors import CellOverflow, CellUnderflow


def test_fixed_width_fields_round_trip():
    cell = (
        CellBuilder()
        .store_bit(1)
        .store_uint(0x9023AFE2, 32)
        .store_int(-5, 8)
        .store_bytes(b"\x01\x02")
        .end_cell()
    )
    s = cell.begin_parse()
    assert s.load_bit() is True
    assert s.load_uint(32) == 0x9023AFE2
    assert s.load_int(8) == -5
    assert s.load_bytes(2) == b"\x01\x02"
    assert s.remaining_bits == 0


def test_negative_int_is_twos_complement():
    s = CellBuilder().store_int(-1, 8).end_cell().begin_parse()
    assert s.load_uint(8) == 0xFF


def test_signed_range_checked():
    with pytest.raises(CellOverflow):
        CellBuilder().store_int(128, 8)


def test_preload_does_not_advance():
    s = CellBuilder().store_uint(0b1011, 4).end_cell().begin_parse()
    assert s.preload_uint(2) == 0b10
    assert s.preload_bit() is True
    assert s.load_uint(4) == 0b1011


def test_reading_past_end_is_underflow():
    s = CellBuilder().store_uint(1, 3).end_cell().begin_parse()
    with pytest.raises(CellUnderflow):
        s.load_uint(4)
    with pytest.raises(CellUnderflow):
        s.load_ref()


# ---------------------------
# VarUInteger
# ---------------------------


def test_grams_layout():
    zero = CellBuilder().store_grams(0)
    assert zero.bits_used == 4
    one = CellBuilder().store_grams(1)
    assert one.bits_used == 4 + 8
    assert one.end_cell().begin_parse().load_grams() == 1


def test_var_uint_7_bounds():
    b = CellBuilder().store_var_uint(2**48 - 1, 7)
    assert b.bits_used == 3 + 48
    assert b.end_cell().begin_parse().load_var_uint(7) == 2**48 - 1
    with pytest.raises(CellOverflow):
        CellBuilder().store_var_uint(2**48, 7)


def test_var_uint_rejects_negative():
    with pytest.raises(CellOverflow):
        CellBuilder().store_grams(-1)


# ---------------------------
# References and composition
# ---------------------------


def test_maybe_ref():
    leaf = Cell(1, 1)
    s = CellBuilder().store_maybe_ref(None).store_maybe_ref(leaf).end_cell().begin_parse()
    assert s.load_maybe_ref() is None
    assert s.load_maybe_ref() == leaf


def test_ref_limit():
    b = CellBuilder()
    for _ in range(4):
        b.store_ref(Cell())
    with pytest.raises(CellOverflow):
        b.store_ref(Cell())


def test_bit_limit():
    b = CellBuilder().store_uint(0, 1000)
    with pytest.raises(CellOverflow):
        b.store_uint(0, 24)


def test_store_slice_copies_without_consuming():
    leaf = Cell(3, 2)
    src = CellBuilder().store_uint(0xAB, 8).store_ref(leaf).end_cell().begin_parse()
    src.skip_bits(4)
    copy = CellBuilder().store_slice(src).end_cell()
    assert src.remaining_bits == 4 and src.remaining_refs == 1
    s = copy.begin_parse()
    assert s.load_uint(4) == 0xB
    assert s.load_ref() == leaf


def test_store_builder_appends():
    inner = CellBuilder().store_uint(3, 2).store_ref(Cell())
    outer = CellBuilder().store_bit(1).store_builder(inner).end_cell()
    assert outer.bit_len == 3
    assert outer.refs_count == 1


def test_clone_is_independent():
    s = CellBuilder().store_uint(0xFF, 8).end_cell().begin_parse()
    c = s.clone()
    c.skip_bits(8)
    assert s.remaining_bits == 8
    assert c.is_empty()
