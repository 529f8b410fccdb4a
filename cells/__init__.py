"""
cellstate • cells: content-addressed node graph

This subpackage implements the node primitive the ledger state is made of:

  • cell.py       : immutable hash-identified node, exotic pruned/proof types
  • slice.py      : bit/reference read cursor
  • builder.py    : bit/reference writer (var-ints, maybe refs)
  • codec.py      : CellSerializable mixin and maybe-field helpers
  • dictionary.py : label-compressed Patricia trie (HashmapE / HashmapAugE)
  • usage.py      : usage-tracking views for proof extraction
  • merkle.py     : Merkle proofs built from a usage tree
  • boc.py        : bag-of-cells byte serialization

Typical usage
-------------
    from cells.builder import CellBuilder

    leaf = CellBuilder().store_uint(7, 8).end_cell()
    root = CellBuilder().store_ref(leaf).end_cell()
    assert root.begin_parse().load_ref() == leaf

Submodules are loaded lazily.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

_SUBMODULES = (
    "errors",
    "cell",
    "slice",
    "builder",
    "codec",
    "dictionary",
    "usage",
    "merkle",
    "boc",
)


def __getattr__(name: str) -> Any:
    if name in _SUBMODULES:
        return import_module(f"{__name__}.{name}")
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(_SUBMODULES))


__all__ = list(_SUBMODULES)
