"""
cellstate: core.utils
---------------------

Stdlib-only helpers shared by every package:

    from core.utils.bytes import from_hex, bits_to_bytes
    from core.utils.hash import sha256, ZERO32

Submodules load on first attribute access (`core.utils.hash`), so importing
the package itself pulls in nothing.
"""

from __future__ import annotations

from importlib import import_module
from types import ModuleType

__all__ = ["bytes", "hash"]


def __getattr__(name: str) -> ModuleType:
    if name in __all__:
        mod = import_module(f"{__name__}.{name}")
        globals()[name] = mod
        return mod
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
