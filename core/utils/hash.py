"""
core.utils.hash
===============

Digest helpers for the cell layer. Every cell and account hash is a
SHA-256 digest; ZERO32 stands in where a hash-shaped field is still empty.
"""

from __future__ import annotations

import hashlib

from .bytes import BytesLike

ZERO32 = b"\x00" * 32
HASH_BITS = 256


def sha256(*parts: BytesLike) -> bytes:
    """SHA-256 over the concatenation of `parts`."""
    h = hashlib.sha256()
    for p in parts:
        h.update(p)
    return h.digest()


__all__ = ["ZERO32", "HASH_BITS", "sha256"]
