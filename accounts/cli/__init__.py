"""
cellstate accounts.cli
----------------------
Command-line tools over bag-of-cells files:

- inspect : decode an account and print status, balance and footprints
- prove   : build a Merkle proof for one account under a shard state

Every tool reads its input from a hex argument, a file path, or stdin
("-"), accepting either raw BOC bytes or hex text.

Usage:
  python -m accounts.cli inspect account.boc
  python -m accounts.cli prove state.boc --account 0:<64 hex>
  python -m accounts.cli.inspect_account --json -   # single tool
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Optional

import typer

from cells.boc import BOC_MAGIC, deserialize_boc
from cells.cell import Cell
from core.config import get_config, load
from core.errors import DeserializationError, LedgerError
from core.logging import configure_from_config
from core.utils.bytes import from_hex
from core.version import __version__

__all__ = ["build_app", "read_source", "load_root", "setup", "fail", "__version__"]

EXIT_BAD_DATA = 2
EXIT_NOT_FOUND = 3


def read_source(source: str) -> bytes:
    """Raw BOC bytes from '-' (stdin), a file path, or a hex string."""
    if source == "-":
        data = sys.stdin.buffer.read()
    else:
        path = os.path.expanduser(source)
        data = Path(path).read_bytes() if os.path.isfile(path) else source.encode()
    if data.startswith(BOC_MAGIC):
        return data
    try:
        return from_hex(data.decode("ascii", errors="replace"))
    except ValueError as e:
        raise DeserializationError("input is neither a BOC nor hex", source=source[:64]).with_cause(e)


def load_root(source: str) -> Cell:
    return deserialize_boc(read_source(source))


def setup(log_level: Optional[str]) -> None:
    cfg = load(log={"level": log_level.upper()}) if log_level else get_config()
    configure_from_config(cfg)


def fail(err: LedgerError, code: int, json_out: bool) -> "typer.Exit":
    """Report `err` the way the caller asked for and return the Exit to raise."""
    if json_out:
        typer.echo(json.dumps({"ok": False, "error": err.to_dict()}, sort_keys=True))
    else:
        typer.echo(f"error: {err}", err=True)
    return typer.Exit(code)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(f"cellstate {__version__}")
        raise typer.Exit(0)


def build_app() -> typer.Typer:
    from . import inspect_account, prove_account

    app = typer.Typer(
        name="cellstate-accounts",
        help="Account tools: inspect encoded accounts and build account proofs",
        no_args_is_help=True,
        add_completion=False,
    )

    @app.callback()
    def _meta(
        version: bool = typer.Option(
            False, "--version", "-V", help="Print version and exit", is_eager=True, callback=_print_version
        ),
    ) -> None:
        pass

    app.command("inspect")(inspect_account.inspect)
    app.command("prove")(prove_account.prove)
    return app


def main(argv: Optional[list[str]] = None) -> int:
    app = build_app()
    app(args=argv)
    return 0
