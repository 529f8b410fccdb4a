import pytest

from accounts.address import AddrStd, AddrVar, Anycast, parse_address, read_address
from cells.builder import CellBuilder
from cells.errors import DeserializationError, UnknownTag


def _round_trip(addr):
    b = CellBuilder()
    addr.write_to(b)
    return read_address(b.end_cell().begin_parse())


def test_std_layout_and_round_trip():
    addr = AddrStd(-1, bytes(range(32)))
    assert addr.serialize().bit_len == 2 + 1 + 8 + 256
    assert _round_trip(addr) == addr
    assert addr.account_id == int.from_bytes(bytes(range(32)), "big")


def test_std_with_anycast():
    addr = AddrStd(0, b"\x11" * 32, Anycast(24, 0x983217))
    assert _round_trip(addr) == addr
    assert addr.serialize().bit_len == 2 + 1 + 5 + 24 + 8 + 256


def test_var_address():
    short = AddrVar(1000, 0b1011, 4)
    assert _round_trip(short) == short
    assert short.account_id is None
    full = AddrVar(7, 1 << 255, 256)
    assert full.account_id == 1 << 255


def test_unknown_address_tag():
    cell = CellBuilder().store_bits(0b01, 2).store_uint(0, 16).end_cell()
    with pytest.raises(UnknownTag):
        read_address(cell.begin_parse())


def test_anycast_depth_bounds():
    with pytest.raises(ValueError):
        Anycast(0, 0)
    with pytest.raises(ValueError):
        Anycast(31, 0)
    with pytest.raises(ValueError):
        Anycast(2, 0b111)


def test_parse_address():
    addr = parse_address("0:" + "ab" * 32)
    assert addr == AddrStd(0, bytes.fromhex("ab" * 32))
    assert str(addr) == "0:" + "ab" * 32
    with pytest.raises(DeserializationError):
        parse_address("nonsense")
