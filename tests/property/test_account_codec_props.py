"""
Account codec properties.

- decode(encode(a)) == a for every account, in both layouts.
- Re-encoding a decoded account is bit-identical (same root hash).
- The layout on the wire follows the init code hash alone.
- The exact footprint is never larger than the tree totals.
"""
from __future__ import annotations

from hypothesis import given

from accounts.account import LAYOUT_EXTENDED, LAYOUT_NONE, LAYOUT_ORIGINAL, Account
from accounts.storage import StorageUsed

from .strategies import accounts


@given(accounts())
def test_account_round_trip(account):
    cell = account.serialize()
    back = Account.construct_from_cell(cell)
    assert back == account
    assert back.serialize().hash == cell.hash
    assert back.status() == account.status()


@given(accounts())
def test_layout_tracks_init_code_hash(account):
    first = account.serialize().begin_parse()
    if account.is_none():
        assert account.layout() == LAYOUT_NONE
        assert first.load_bit() == 0
    elif account.init_code_hash() is None:
        assert account.layout() == LAYOUT_ORIGINAL
        assert first.load_bit() == 1
    else:
        assert account.layout() == LAYOUT_EXTENDED
        assert first.load_uint(4) == 0b0001


@given(accounts())
def test_exact_footprint_bounded_by_tree_totals(account):
    if account.is_none():
        return
    exact = account.storage_info().used
    totals = StorageUsed.tree_totals(account.stuff.storage.serialize())
    assert exact.cells <= totals.cells
    assert exact.bits <= totals.bits
