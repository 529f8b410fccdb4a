"""
cellstate: core.logging
-----------------------

Structured logging for the ledger packages.

- One JSON object per line, or a compact text line for terminals
- Context fields (trace_id, component, account, shard, root) carried in a
  `ContextVar` so every record emitted inside a scope is tagged with them
- Hashes and other bytes are rendered as hex; long hex strings are
  abbreviated in text mode only

Usage
-----
    from core import logging as clog

    clog.configure(json=False, level="INFO")  # once, in an entry point
    log = clog.get_logger(__name__)

    with clog.trace_scope():
        clog.bind(component="prove", account=account_id)
        log.info("proof built", extra={"cells": 12})

Library modules only call `get_logger`. Handlers are installed by entry
points (the CLIs, or a host process embedding the library).
"""

from __future__ import annotations

import datetime as _dt
import io
import json
import logging
import os
import sys
import traceback
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import asdict, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

ROOT_LOGGER = "cellstate"

CONTEXT_KEYS = ("trace_id", "component", "account", "shard", "root")

_CONTEXT: ContextVar[Dict[str, Any]] = ContextVar("cellstate_log_context", default={})

# attributes every LogRecord has; anything else came in through `extra=`
_BUILTIN_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}

_HEX_ABBREV = 16


# ---- context -----------------------------------------------------------------


def context() -> Dict[str, Any]:
    """Copy of the fields bound in the current context."""
    return dict(_CONTEXT.get())


def bind(**fields: Any) -> None:
    merged = dict(_CONTEXT.get())
    merged.update((k, _plain(v)) for k, v in fields.items())
    _CONTEXT.set(merged)


def clear_context() -> None:
    _CONTEXT.set({})


def new_trace_id() -> str:
    return uuid.uuid4().hex[:12]


@contextmanager
def trace_scope(trace_id: Optional[str] = None) -> Iterator[str]:
    """Bind a trace id for the body of the block; the previous context comes back on exit."""
    token = _CONTEXT.set(dict(_CONTEXT.get()))
    tid = trace_id or new_trace_id()
    try:
        bind(trace_id=tid)
        yield tid
    finally:
        _CONTEXT.reset(token)


# ---- value rendering -----------------------------------------------------------


def _plain(v: Any) -> Any:
    if v is None or isinstance(v, (bool, int, float, str)):
        return v
    if isinstance(v, (bytes, bytearray, memoryview)):
        return bytes(v).hex()
    if isinstance(v, Enum):
        return v.value
    if isinstance(v, Path):
        return str(v)
    if isinstance(v, _dt.datetime):
        return (v if v.tzinfo else v.replace(tzinfo=_dt.timezone.utc)).isoformat()
    if is_dataclass(v) and not isinstance(v, type):
        return _plain(asdict(v))
    if isinstance(v, dict):
        return {str(k): _plain(x) for k, x in v.items()}
    if isinstance(v, (list, tuple, set, frozenset)):
        return [_plain(x) for x in v]
    return str(v)


def _abbrev(v: Any) -> str:
    s = str(v)
    if len(s) > _HEX_ABBREV + 2 and all(c in "0123456789abcdef" for c in s):
        return s[:_HEX_ABBREV] + ".."
    return s


def _record_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {k: _plain(v) for k, v in vars(record).items() if k not in _BUILTIN_ATTRS and not k.startswith("_")}


def _timestamp(record: logging.LogRecord) -> str:
    ts = _dt.datetime.fromtimestamp(record.created, tz=_dt.timezone.utc)
    return ts.isoformat(timespec="milliseconds")


def _traceback(record: logging.LogRecord) -> Optional[str]:
    if not record.exc_info:
        return None
    return "".join(traceback.format_exception(*record.exc_info)).rstrip()


# ---- formatters ----------------------------------------------------------------


class JSONFormatter(logging.Formatter):
    """One JSON object per record: ts, level, logger, msg, context, extras."""

    def format(self, record: logging.LogRecord) -> str:
        out: Dict[str, Any] = {
            "ts": _timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        out.update(context())
        for k, v in _record_fields(record).items():
            out.setdefault(k, v)
        tb = _traceback(record)
        if tb:
            out["err"] = tb
        return json.dumps(out, default=str, separators=(",", ":"))


_LEVEL_COLORS = {
    "DEBUG": "\x1b[2m",
    "INFO": "\x1b[36m",
    "WARNING": "\x1b[33m",
    "ERROR": "\x1b[31m",
    "CRITICAL": "\x1b[41m",
}


def _is_tty(stream: Any) -> bool:
    isatty = getattr(stream, "isatty", None)
    try:
        return bool(isatty and isatty()) and "NO_COLOR" not in os.environ
    except ValueError:
        return False


class TextFormatter(logging.Formatter):
    """
    ts | LEVEL | logger | ctx=.. | message key=value ...

    Context fields come first in CONTEXT_KEYS order; long hex values are
    cut to their first 16 digits.
    """

    def __init__(self, color: bool = False) -> None:
        super().__init__()
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        ctx = context()
        level = record.levelname
        if self.color and level in _LEVEL_COLORS:
            level = f"{_LEVEL_COLORS[level]}{level}\x1b[0m"
        parts = [_timestamp(record), level, record.name]
        bound = " ".join(f"{k}={_abbrev(ctx[k])}" for k in CONTEXT_KEYS if ctx.get(k) is not None)
        if bound:
            parts.append(bound)
        line = " | ".join(parts) + " | " + record.getMessage()
        extras = " ".join(f"{k}={_abbrev(v)}" for k, v in _record_fields(record).items() if k not in ctx)
        if extras:
            line += " " + extras
        tb = _traceback(record)
        return f"{line}\n{tb}" if tb else line


# ---- setup -----------------------------------------------------------------------


def _level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    return value if isinstance(value, int) else logging.INFO


def _wants_json(json_flag: Optional[bool], stream: Any) -> bool:
    if json_flag is not None:
        return json_flag
    fmt = os.environ.get("CELLSTATE_LOG_FORMAT", "").strip().lower()
    if fmt in ("json", "text"):
        return fmt == "json"
    return not _is_tty(stream)


def configure(
    *,
    json: Optional[bool] = None,
    level: str | int = "INFO",
    stream: Optional[io.TextIOBase] = None,
    file_path: Optional[Path | str] = None,
) -> None:
    """
    Replace the root logger's handlers.

    json=None reads CELLSTATE_LOG_FORMAT (json|text) and otherwise picks
    text for a terminal and JSON for pipes. A file handler, when asked
    for, always writes JSON.
    """
    stream = stream or sys.stderr
    lvl = _level(level)

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    root.setLevel(lvl)

    console = logging.StreamHandler(stream)
    console.setFormatter(JSONFormatter() if _wants_json(json, stream) else TextFormatter(_is_tty(stream)))
    root.addHandler(console)

    if file_path:
        path = Path(file_path).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(path, encoding="utf-8")
        fh.setFormatter(JSONFormatter())
        root.addHandler(fh)


def configure_from_config(cfg: Any, *, stream: Optional[io.TextIOBase] = None) -> None:
    """Apply the `log` section of a `core.config.Config`."""
    fmt = (cfg.log.format or "auto").lower()
    configure(
        json=None if fmt == "auto" else fmt == "json",
        level=cfg.log.level,
        stream=stream,
        file_path=cfg.log.file,
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Standard library logger; the unnamed default is `cellstate`."""
    return logging.getLogger(name or ROOT_LOGGER)


__all__ = [
    "CONTEXT_KEYS",
    "bind",
    "clear_context",
    "context",
    "new_trace_id",
    "trace_scope",
    "JSONFormatter",
    "TextFormatter",
    "configure",
    "configure_from_config",
    "get_logger",
]
