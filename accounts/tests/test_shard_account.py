import pytest

from accounts.account import Account
from accounts.currency import CurrencyCollection
from accounts.shard_account import ShardAccount
from cells.usage import UsageTree

from .factories import generate_test_account

TX_HASH = b"\xee" * 32


def test_with_params_reads_back_account():
    acc = generate_test_account()
    sa = ShardAccount.with_params(acc, TX_HASH, 77)
    assert sa.read_account() == acc
    assert sa.account_cell().hash == acc.serialize().hash
    assert sa.last_trans_hash() == TX_HASH
    assert sa.last_trans_lt() == 77


def test_read_account_parses_fresh_each_time():
    sa = ShardAccount.with_params(generate_test_account(), TX_HASH, 1)
    first = sa.read_account()
    first.add_funds(CurrencyCollection(1))
    assert sa.read_account() != first
    assert sa.read_account() == generate_test_account()


def test_write_account_replaces_root():
    sa = ShardAccount()
    assert sa.read_account().is_none()
    acc = generate_test_account()
    sa.write_account(acc)
    assert sa.account_cell().hash == acc.serialize().hash
    sa.set_account_cell(Account.none().serialize())
    assert sa.read_account().is_none()


def test_wire_layout_and_round_trip():
    sa = ShardAccount.with_params(generate_test_account(), TX_HASH, 2**64 - 1)
    cell = sa.serialize()
    assert cell.bit_len == 256 + 64
    assert cell.refs_count == 1
    back = ShardAccount.construct_from_cell(cell)
    assert back == sa
    assert hash(back) == hash(sa)


def test_equality_uses_root_hash_and_bookkeeping():
    acc = generate_test_account()
    a = ShardAccount.with_account_root(acc.serialize(), TX_HASH, 5)
    b = ShardAccount.with_params(acc, TX_HASH, 5)
    assert a == b
    b.set_last_trans_lt(6)
    assert a != b
    b.set_last_trans_lt(5)
    b.set_last_trans_hash(b"\x00" * 32)
    assert a != b


def test_bookkeeping_validation():
    with pytest.raises(ValueError):
        ShardAccount(last_trans_hash=b"short")
    sa = ShardAccount()
    with pytest.raises(ValueError):
        sa.set_last_trans_lt(1 << 64)


def test_decoding_under_usage_tree_does_not_touch_account():
    sa = ShardAccount.with_params(generate_test_account(), TX_HASH, 3)
    root = sa.serialize()
    tree = UsageTree.with_root(root)
    back = ShardAccount.construct_from_cell(tree.root_cell())
    assert not tree.contains(sa.account_cell().hash)
    back.read_account()
    assert tree.contains(sa.account_cell().hash)
