#!/usr/bin/env python3
"""
accounts.cli.inspect_account
============================

Decode an account from a bag of cells and print:

- status, wire layout and address
- balance, last transaction lt, last paid / due payment
- stored footprint next to the exact and fast recomputations
- code, data, frozen and init-code hashes where present

By default prints a human report; use --json for machine-readable output.

Examples:
  python -m accounts.cli.inspect_account account.boc
  python -m accounts.cli.inspect_account b5ee9c72...
  cat account.boc | python -m accounts.cli.inspect_account --json -

Exit codes: 0 ok, 2 input does not decode.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from accounts.account import Account
from accounts.storage import StorageUsed
from core.errors import MalformedInput
from core.logging import bind, get_logger, trace_scope

from . import EXIT_BAD_DATA, fail, load_root, setup

log = get_logger(__name__)

app = typer.Typer(
    name="inspect-account",
    help="Decode an account from a bag of cells and report its state and footprint.",
    add_completion=False,
)


def describe(account: Account) -> Dict[str, Any]:
    """Account summary plus footprints recomputed from the decoded storage."""
    out = account.to_dict()
    if account.stuff is not None:
        storage = account.stuff.storage
        exact = StorageUsed.calculate_for_struct(storage)
        fast = StorageUsed.tree_totals(storage.serialize())
        out["recomputed"] = {
            "exact": {"cells": exact.cells, "bits": exact.bits},
            "fast": {"cells": fast.cells, "bits": fast.bits},
        }
        out["footprint_matches"] = (exact.cells, exact.bits) == (
            account.stuff.storage_stat.used.cells,
            account.stuff.storage_stat.used.bits,
        )
    return out


def _human_report(console: Console, root_hash: bytes, info: Dict[str, Any]) -> None:
    t = Table(title="Account", box=box.SIMPLE, show_header=False)
    t.add_column("Field")
    t.add_column("Value")
    t.add_row("root hash", root_hash.hex())
    t.add_row("status", info["status"])
    t.add_row("layout", info["layout"])
    if "address" in info:
        bal = info["balance"]
        extra = ", ".join(f"{k}:{v}" for k, v in bal["other"].items())
        t.add_row("address", info["address"])
        t.add_row("balance", f"{bal['grams']}" + (f" + {{{extra}}}" if extra else ""))
        t.add_row("last trans lt", str(info["last_trans_lt"]))
        t.add_row("last paid", str(info["last_paid"]))
        t.add_row("due payment", "-" if info["due_payment"] is None else str(info["due_payment"]))
        used = info["storage_used"]
        t.add_row("stored footprint", f"{used['cells']} cells / {used['bits']} bits ({used['extra']})")
        for mode in ("exact", "fast"):
            r = info["recomputed"][mode]
            t.add_row(f"{mode} footprint", f"{r['cells']} cells / {r['bits']} bits")
        for key in ("code_hash", "data_hash", "frozen_hash", "init_code_hash"):
            if info[key]:
                t.add_row(key.replace("_", " "), info[key])
    console.print(t)


@app.command()
def inspect(
    source: str = typer.Argument("-", help="BOC file, hex string, or '-' for stdin"),
    json_out: bool = typer.Option(False, "--json", help="Print machine-readable JSON"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override the configured log level"),
) -> None:
    """Decode one account and print its state."""
    setup(log_level)
    with trace_scope():
        bind(component="inspect")
        try:
            root = load_root(source)
            account = Account.construct_from_cell(root)
            info = describe(account)
        except MalformedInput as e:
            log.debug("account did not decode", extra={"error": e.to_dict()})
            raise fail(e, EXIT_BAD_DATA, json_out)

    if json_out:
        typer.echo(json.dumps({"ok": True, "root_hash": root.hash.hex(), **info}, indent=2, sort_keys=True))
        return
    _human_report(Console(), root.hash, info)


def main(argv: Optional[list[str]] = None) -> int:
    app(args=argv)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
