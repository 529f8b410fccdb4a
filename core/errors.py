"""
cellstate: core.errors
----------------------

Exceptions shared by every package. Each one carries a stable `code`, a
human `message` and JSON-safe `data`, and belongs to exactly one `Category`
so callers (and the CLIs' exit codes) can tell failures apart:

    bad_data      wire data that does not parse, truncated bit streams, counter overflow
    unauthorized  a state init that fails the activation hash gate
    absent        account missing under a state root, or outside the shard
    precondition  an operation that needs a present account got none

Every operation here is a deterministic single pass, so nothing is
retryable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, Mapping, Optional


class Severity(IntEnum):
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50


class ErrorCode(str, Enum):
    INTERNAL = "CORE/INTERNAL"
    CONFIG = "CORE/CONFIG"

    DESERIALIZATION = "CELL/DESERIALIZATION"
    UNDERFLOW = "CELL/UNDERFLOW"
    OVERFLOW = "CELL/OVERFLOW"
    UNKNOWN_TAG = "CELL/UNKNOWN_TAG"
    PRUNED_ACCESS = "CELL/PRUNED_ACCESS"
    COUNTER_OVERFLOW = "STORAGE/COUNTER_OVERFLOW"

    POLICY = "ACCOUNT/POLICY_VIOLATION"
    ACTIVATION_REJECTED = "ACCOUNT/ACTIVATION_REJECTED"

    NOT_FOUND = "ACCOUNT/NOT_FOUND"
    PRECONDITION = "ACCOUNT/PRECONDITION"


class Category(str, Enum):
    BAD_DATA = "bad_data"
    UNAUTHORIZED = "unauthorized"
    ABSENT = "absent"
    PRECONDITION = "precondition"
    CONFIG = "config"
    INTERNAL = "internal"


@dataclass(eq=False)
class LedgerError(Exception):
    """Root of the hierarchy. Concrete kinds below fill `code` and `severity` in."""

    code: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)
    severity: Severity = Severity.ERROR
    retryable: bool = False
    cause: Optional[BaseException] = field(default=None, compare=False, repr=False)

    category = Category.INTERNAL

    def __post_init__(self) -> None:
        Exception.__init__(self, self._headline())

    def _headline(self) -> str:
        code = self.code.value if isinstance(self.code, Enum) else self.code
        return f"{code}: {self.message}"

    def with_context(self, **ctx: Any) -> "LedgerError":
        """Copy of this error with `ctx` merged into `data`."""
        clone = Exception.__new__(type(self))
        clone.__dict__.update(self.__dict__)
        clone.data = {**self.data, **_jsonmap(ctx)}
        Exception.__init__(clone, clone._headline())
        return clone

    def with_cause(self, exc: BaseException) -> "LedgerError":
        self.cause = exc
        self.__cause__ = exc
        return self

    def to_dict(self, include_cause: bool = False) -> Dict[str, Any]:
        code = self.code.value if isinstance(self.code, Enum) else self.code
        out: Dict[str, Any] = {
            "code": str(code),
            "category": self.category.value,
            "message": self.message,
            "data": _coerce_json(self.data),
            "severity": int(self.severity),
            "retryable": self.retryable,
        }
        if include_cause and self.cause is not None:
            out["cause"] = {"type": type(self.cause).__name__, "message": str(self.cause)}
        return out

    def __str__(self) -> str:  # pragma: no cover - human formatting
        if not self.data:
            return self._headline()
        shown = ", ".join(f"{k}={_preview(v)}" for k, v in self.data.items())
        return f"{self._headline()} [{shown}]"


class _Kind(LedgerError):
    # concrete errors take (message, **data); class attributes supply the rest
    default_code: ErrorCode = ErrorCode.INTERNAL
    default_message = "internal error"
    default_severity = Severity.ERROR

    def __init__(self, message: Optional[str] = None, **data: Any) -> None:
        super().__init__(
            code=self.default_code,
            message=message or self.default_message,
            data=_jsonmap(data),
            severity=self.default_severity,
        )


class InternalError(_Kind):
    pass


class ConfigError(_Kind):
    category = Category.CONFIG
    default_code = ErrorCode.CONFIG
    default_message = "invalid configuration"


class MalformedInput(_Kind):
    """Bad wire data: unknown tags, truncated streams, counter overflow."""

    category = Category.BAD_DATA
    default_code = ErrorCode.DESERIALIZATION
    default_message = "malformed input"


class DeserializationError(MalformedInput):
    pass


class PolicyViolation(_Kind):
    category = Category.UNAUTHORIZED
    default_code = ErrorCode.POLICY
    default_message = "policy violation"
    default_severity = Severity.WARNING


class NotFound(_Kind):
    category = Category.ABSENT
    default_code = ErrorCode.NOT_FOUND
    default_message = "not found"


class PreconditionFailed(_Kind):
    category = Category.PRECONDITION
    default_code = ErrorCode.PRECONDITION
    default_message = "precondition failed"


def _jsonmap(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {str(k): _coerce_json(v) for k, v in data.items()}


def _coerce_json(v: Any) -> Any:
    if v is None or isinstance(v, (bool, int, float, str)):
        return v
    if isinstance(v, (bytes, bytearray, memoryview)):
        return bytes(v).hex()
    if isinstance(v, Enum):
        return _coerce_json(v.value)
    if isinstance(v, Mapping):
        return _jsonmap(v)
    if isinstance(v, (list, tuple, set, frozenset)):
        return [_coerce_json(x) for x in v]
    return str(v)


def _preview(v: Any, limit: int = 96) -> str:
    text = str(_coerce_json(v))
    return text if len(text) <= limit else text[: limit - 3] + "..."


__all__ = [
    "Severity",
    "ErrorCode",
    "Category",
    "LedgerError",
    "InternalError",
    "ConfigError",
    "MalformedInput",
    "DeserializationError",
    "PolicyViolation",
    "NotFound",
    "PreconditionFailed",
]
