"""
accounts.currency: native amount plus sparse extra currencies.

    currencies$_ grams:Grams other:(HashmapE 32 (VarUInteger 32)) = CurrencyCollection;

Grams is VarUInteger 16 (max 2^120 - 1); extra-currency amounts are
VarUInteger 32 (max 2^248 - 1). Zero entries are never kept in `other`,
so two collections holding the same amounts compare equal.

Arithmetic:
- add(): per currency, saturating at the field maximum.
- sub(): all-or-nothing; returns False and leaves the balance untouched
  when any currency would go negative.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from cells.builder import CellBuilder
from cells.codec import CellSerializable
from cells.dictionary import Hashmap
from cells.slice import CellSlice

MAX_GRAMS = (1 << 120) - 1
MAX_EXTRA = (1 << 248) - 1
CURRENCY_ID_BITS = 32


def _check_amount(name: str, value: int, cap: int) -> int:
    if not isinstance(value, int):
        raise TypeError(f"{name} must be int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative")
    if value > cap:
        raise OverflowError(f"{name} exceeds the field maximum")
    return value


@dataclass
class CurrencyCollection(CellSerializable):
    grams: int = 0
    other: Dict[int, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _check_amount("grams", self.grams, MAX_GRAMS)
        cleaned: Dict[int, int] = {}
        for cid, amount in self.other.items():
            if not 0 <= cid < (1 << CURRENCY_ID_BITS):
                raise ValueError("currency id must fit uint32")
            if _check_amount("extra currency", amount, MAX_EXTRA):
                cleaned[cid] = amount
        self.other = cleaned

    @classmethod
    def with_grams(cls, grams: int) -> "CurrencyCollection":
        return cls(grams=grams)

    def is_zero(self) -> bool:
        return self.grams == 0 and not self.other

    def copy(self) -> "CurrencyCollection":
        return CurrencyCollection(self.grams, dict(self.other))

    # ---- arithmetic ----------------------------------------------------------

    def add(self, funds: "CurrencyCollection") -> None:
        self.grams = min(self.grams + funds.grams, MAX_GRAMS)
        for cid, amount in funds.other.items():
            self.other[cid] = min(self.other.get(cid, 0) + amount, MAX_EXTRA)

    def sub(self, funds: "CurrencyCollection") -> bool:
        if self.grams < funds.grams:
            return False
        for cid, amount in funds.other.items():
            if self.other.get(cid, 0) < amount:
                return False
        self.grams -= funds.grams
        for cid, amount in funds.other.items():
            if not amount:
                continue
            left = self.other[cid] - amount
            if left:
                self.other[cid] = left
            else:
                self.other.pop(cid, None)
        return True

    # ---- wire ------------------------------------------------------------------

    def _extra_dict(self) -> Hashmap:
        d = Hashmap(CURRENCY_ID_BITS)
        for cid, amount in sorted(self.other.items()):
            d.set(cid, CellBuilder().store_var_uint(amount, 32))
        return d

    def write_to(self, b: CellBuilder) -> None:
        b.store_grams(self.grams)
        self._extra_dict().write_to(b)

    @classmethod
    def read_from(cls, s: CellSlice) -> "CurrencyCollection":
        grams = s.load_grams()
        d = Hashmap.read_from(s, CURRENCY_ID_BITS)
        return cls(grams, {cid: v.load_var_uint(32) for cid, v in d.items()})

    def to_dict(self) -> Dict[str, Any]:
        return {"grams": self.grams, "other": {str(k): v for k, v in sorted(self.other.items())}}

    def __str__(self) -> str:
        if not self.other:
            return f"{self.grams} grams"
        extra = ", ".join(f"{k}:{v}" for k, v in sorted(self.other.items()))
        return f"{self.grams} grams + {{{extra}}}"


__all__ = ["CurrencyCollection", "MAX_GRAMS", "MAX_EXTRA"]
