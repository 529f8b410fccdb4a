"""
core.utils.bytes
================

Byte and bit-string helpers shared by the cell layer and the CLIs.

A bit string travels as a pair (value, nbits), MSB-first: the first bit of
the string is bit (nbits - 1) of `value`. On the wire, a string whose
length is not a whole number of bytes is "completion tagged": one 1 bit
follows the data, then zeros up to the byte boundary.

>>> from_hex('0x b5ee 9c72')
b'\\xb5\\xee\\x9cr'
>>> bits_to_bytes(0b101, 3, completion=True)
b'\\xb0'
>>> strip_completion(b'\\xb0')
(5, 3)
"""

from __future__ import annotations

from typing import Tuple, Union

BytesLike = Union[bytes, bytearray, memoryview]


def from_hex(text: str) -> bytes:
    """Hex to bytes. Accepts a 0x prefix, inner whitespace and an odd digit count."""
    if not isinstance(text, str):
        raise TypeError(f"from_hex expects str, got {type(text).__name__}")
    digits = "".join(text.split())
    if digits[:2] in ("0x", "0X"):
        digits = digits[2:]
    if len(digits) & 1:
        digits = "0" + digits
    try:
        return bytes.fromhex(digits)
    except ValueError as e:
        raise ValueError(f"invalid hex string: {e}") from e


def bits_to_bytes(value: int, nbits: int, *, completion: bool = False) -> bytes:
    """Left-align `nbits` bits into whole bytes, optionally completion tagged."""
    pad = -nbits % 8
    if not pad:
        return value.to_bytes(nbits // 8, "big")
    shifted = value << pad
    if completion:
        shifted |= 1 << (pad - 1)
    return shifted.to_bytes((nbits + pad) // 8, "big")


def strip_completion(data: BytesLike) -> Tuple[int, int]:
    """Inverse of `bits_to_bytes(..., completion=True)`: returns (value, nbits)."""
    raw = bytes(data)
    tagged = int.from_bytes(raw, "big")
    if not tagged:
        raise ValueError("completion tag missing")
    zeros = (tagged & -tagged).bit_length() - 1
    return tagged >> (zeros + 1), len(raw) * 8 - zeros - 1


__all__ = ["BytesLike", "from_hex", "bits_to_bytes", "strip_completion"]
