"""
accounts.errors: failure kinds raised by the account model.

    CounterOverflow     footprint counter past the VarUInteger 7 maximum (bad data)
    ActivationRejected  state init hash does not match the commitment (unauthorized)
    AccountNotFound     account absent under a state root, or wrong shard (absent)

PreconditionFailed and DeserializationError are shared from core.errors.
"""

from __future__ import annotations

from core.errors import (
    DeserializationError,
    ErrorCode,
    MalformedInput,
    NotFound,
    PolicyViolation,
    PreconditionFailed,
)


class CounterOverflow(MalformedInput):
    default_code = ErrorCode.COUNTER_OVERFLOW


class ActivationRejected(PolicyViolation):
    default_code = ErrorCode.ACTIVATION_REJECTED


class AccountNotFound(NotFound):
    pass


__all__ = [
    "CounterOverflow",
    "ActivationRejected",
    "AccountNotFound",
    "PreconditionFailed",
    "DeserializationError",
]
