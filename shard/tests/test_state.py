import pytest

from cells.builder import CellBuilder
from cells.errors import UnknownTag
from shard.ident import ShardIdent
from shard.state import SHARD_STATE_TAG, ShardStateUnsplit

from accounts.tests.factories import account_with_id, shard_state


def test_default_state_has_empty_index():
    state = ShardStateUnsplit()
    assert state.read_accounts().is_empty()
    assert state.shard_id.is_full()


def test_round_trip_keeps_header_and_index():
    root, index = shard_state([account_with_id(0x10, 1), account_with_id(0x20, 2)])
    state = ShardStateUnsplit.construct_from_cell(root)
    assert state.global_id == 42
    assert state.seq_no == 7
    assert state.gen_utime == 1_700_000_000
    assert state.shard_id == ShardIdent.full(0)
    assert state.read_accounts() == index
    assert state.serialize().hash == root.hash


def test_header_field_bounds():
    with pytest.raises(ValueError):
        ShardStateUnsplit(global_id=1 << 31)
    with pytest.raises(ValueError):
        ShardStateUnsplit(seq_no=-1)


def test_wrong_tag_is_rejected():
    cell = CellBuilder().store_uint(SHARD_STATE_TAG ^ 1, 32).end_cell()
    with pytest.raises(UnknownTag):
        ShardStateUnsplit.construct_from_cell(cell)
