"""
accounts.messages: the inbound-message view account construction needs.

Only the fields `Account.from_message_by_init_code_hash` reads are modelled:
the internal header (destination, attached value, bounce flag) and an
optional embedded StateInit. External messages have no internal header.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from cells.cell import Cell

from .address import MsgAddressInt
from .currency import CurrencyCollection
from .state_init import StateInit


@dataclass
class InternalMessageHeader:
    dst: MsgAddressInt
    value: CurrencyCollection = field(default_factory=CurrencyCollection)
    bounce: bool = False
    src: Optional[MsgAddressInt] = None


@dataclass
class Message:
    header: Optional[InternalMessageHeader] = None
    state_init: Optional[StateInit] = None
    body: Optional[Cell] = None

    @classmethod
    def internal(
        cls,
        dst: MsgAddressInt,
        value: CurrencyCollection,
        *,
        bounce: bool = False,
        state_init: Optional[StateInit] = None,
    ) -> "Message":
        return cls(InternalMessageHeader(dst, value, bounce), state_init)

    def int_header(self) -> Optional[InternalMessageHeader]:
        return self.header


__all__ = ["InternalMessageHeader", "Message"]
