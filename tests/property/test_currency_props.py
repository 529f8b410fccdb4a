"""
CurrencyCollection arithmetic properties.

- add then sub of the same funds restores the balance.
- sub is all-or-nothing: on failure the balance is untouched.
- Zero extra-currency entries never survive, so equal amounts compare equal.
"""
from __future__ import annotations

from hypothesis import given

from accounts.currency import CurrencyCollection

from .strategies import currencies, small_currencies


@given(small_currencies, small_currencies)
def test_add_then_sub_restores(base, funds):
    bal = base.copy()
    bal.add(funds)
    assert bal.sub(funds) is True
    assert bal == base


@given(small_currencies, small_currencies)
def test_sub_is_all_or_nothing(base, funds):
    bal = base.copy()
    ok = bal.sub(funds)
    if not ok:
        assert bal == base
    else:
        back = bal.copy()
        back.add(funds)
        assert back == base
    assert all(v > 0 for v in bal.other.values())


@given(currencies)
def test_wire_round_trip(cc):
    assert CurrencyCollection.construct_from_cell(cc.serialize()) == cc


@given(small_currencies)
def test_sub_self_leaves_zero(cc):
    bal = cc.copy()
    assert bal.sub(cc) is True
    assert bal.is_zero()
