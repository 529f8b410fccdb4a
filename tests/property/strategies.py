"""Hypothesis strategies for cells, currencies, addresses and accounts."""
from __future__ import annotations

from hypothesis import strategies as st

from accounts.account import Account, AccountStuff
from accounts.address import AddrStd, AddrVar, Anycast
from accounts.currency import MAX_EXTRA, MAX_GRAMS, CurrencyCollection
from accounts.state import AccountActive, AccountFrozen, AccountStorage, AccountUninit
from accounts.state_init import StateInit, TickTock
from accounts.storage import StorageInfo
from cells.builder import CellBuilder

hashes = st.binary(min_size=32, max_size=32)
grams = st.integers(min_value=0, max_value=MAX_GRAMS)
small_grams = st.integers(min_value=0, max_value=10**12)


@st.composite
def leaf_cells(draw, max_bits: int = 64):
    nbits = draw(st.integers(min_value=0, max_value=max_bits))
    value = draw(st.integers(min_value=0, max_value=(1 << nbits) - 1)) if nbits else 0
    return CellBuilder().store_bits(value, nbits).end_cell()


@st.composite
def cell_trees(draw, max_depth: int = 3):
    """Small trees; a node may reuse an earlier subtree so DAGs show up too."""
    pool = draw(st.lists(leaf_cells(), min_size=1, max_size=4))
    for _ in range(draw(st.integers(min_value=0, max_value=max_depth))):
        refs = draw(st.lists(st.sampled_from(pool), min_size=1, max_size=4))
        b = CellBuilder().store_uint(draw(st.integers(0, 0xFFFF)), 16)
        for r in refs:
            b.store_ref(r)
        pool.append(b.end_cell())
    return pool[-1]


currencies = st.builds(
    CurrencyCollection,
    grams,
    st.dictionaries(
        st.integers(min_value=0, max_value=(1 << 32) - 1),
        st.integers(min_value=1, max_value=MAX_EXTRA),
        max_size=4,
    ),
)

small_currencies = st.builds(
    CurrencyCollection,
    small_grams,
    st.dictionaries(st.integers(min_value=0, max_value=8), st.integers(min_value=0, max_value=10**9), max_size=3),
)


@st.composite
def anycasts(draw):
    depth = draw(st.integers(min_value=1, max_value=30))
    return Anycast(depth, draw(st.integers(min_value=0, max_value=(1 << depth) - 1)))


addr_std = st.builds(AddrStd, st.integers(min_value=-128, max_value=127), hashes, st.none() | anycasts())


@st.composite
def addr_var(draw, max_len: int = 256):
    length = draw(st.integers(min_value=0, max_value=max_len))
    value = draw(st.integers(min_value=0, max_value=(1 << length) - 1)) if length else 0
    wc = draw(st.integers(min_value=-(1 << 31), max_value=(1 << 31) - 1))
    return AddrVar(wc, value, length, draw(st.none() | anycasts()))


addresses = addr_std | addr_var()


@st.composite
def state_inits(draw):
    init = StateInit(
        split_depth=draw(st.none() | st.integers(min_value=0, max_value=31)),
        special=draw(st.none() | st.builds(TickTock, st.booleans(), st.booleans())),
        code=draw(st.none() | cell_trees()),
        data=draw(st.none() | cell_trees()),
    )
    for lib in draw(st.lists(leaf_cells(), max_size=2)):
        init.set_library(lib, draw(st.booleans()))
    return init


account_states = st.one_of(
    st.just(AccountUninit()),
    st.builds(AccountFrozen, hashes),
    st.builds(AccountActive, state_inits()),
)


@st.composite
def accounts(draw):
    """
    Any account, including the absent one; footprint is exact.

    Frozen accounts never carry an init code hash here: together with a
    wide balance and an anycast address that would not fit one cell.
    """
    if draw(st.integers(min_value=0, max_value=9)) == 0:
        return Account.none()
    state = draw(account_states)
    init_code_hash = None if isinstance(state, AccountFrozen) else draw(st.none() | hashes)
    storage = AccountStorage(
        draw(st.integers(min_value=0, max_value=(1 << 64) - 1)),
        draw(currencies),
        state,
        init_code_hash,
    )
    info = StorageInfo(
        last_paid=draw(st.integers(min_value=0, max_value=(1 << 32) - 1)),
        due_payment=draw(st.none() | small_grams),
    )
    stuff = AccountStuff(draw(addresses), info, storage)
    stuff.update_storage_stat()
    return Account(stuff)


__all__ = [
    "hashes",
    "grams",
    "leaf_cells",
    "cell_trees",
    "currencies",
    "small_currencies",
    "addresses",
    "state_inits",
    "account_states",
    "accounts",
]
