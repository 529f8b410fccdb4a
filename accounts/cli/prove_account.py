#!/usr/bin/env python3
"""
accounts.cli.prove_account
==========================

Build a Merkle proof that an account exists under a shard state root.

The proof is printed as BOC hex (default) or as a JSON summary with the
state hash, the proof hash and the BOC.

Examples:
  python -m accounts.cli.prove_account state.boc --account 0:3f2a...
  python -m accounts.cli.prove_account state.boc --account 3f2a... --json

Exit codes: 0 ok, 2 bad input data, 3 account not found.
"""

from __future__ import annotations

import json
from typing import Optional

import typer

from accounts.address import parse_address
from accounts.errors import AccountNotFound, PreconditionFailed
from accounts.proof import prepare_proof
from cells.boc import serialize_boc
from core.errors import DeserializationError, MalformedInput
from core.logging import bind, get_logger, trace_scope
from shard.state import ShardStateUnsplit

from . import EXIT_BAD_DATA, EXIT_NOT_FOUND, fail, load_root, setup

log = get_logger(__name__)

app = typer.Typer(
    name="prove-account",
    help="Build a Merkle proof for one account against a shard state bag of cells.",
    add_completion=False,
)


def parse_account_id(text: str) -> int:
    """Account id from '<workchain>:<64 hex>' or bare 64 hex digits."""
    if ":" in text:
        return int.from_bytes(parse_address(text).address, "big")
    raw = text.strip().lower()
    if raw.startswith("0x"):
        raw = raw[2:]
    if len(raw) != 64:
        raise DeserializationError("account id must be 64 hex digits", text=text)
    try:
        return int(raw, 16)
    except ValueError as e:
        raise DeserializationError("account id must be 64 hex digits", text=text).with_cause(e)


@app.command()
def prove(
    source: str = typer.Argument(..., help="Shard state BOC file, hex string, or '-' for stdin"),
    account: str = typer.Option(..., "--account", "-a", help="Account as <workchain>:<hex> or 64 hex digits"),
    json_out: bool = typer.Option(False, "--json", help="Print a JSON summary"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override the configured log level"),
) -> None:
    """Prove one account's presence under the given shard state."""
    setup(log_level)
    with trace_scope():
        bind(component="prove")
        try:
            account_id = parse_account_id(account)
            bind(account=f"{account_id:064x}")
            root = load_root(source)
            state = ShardStateUnsplit.construct_from_cell(root)
            entry = state.read_accounts().get_serialized(account_id)
            if entry is None:
                raise AccountNotFound("account not in shard state", account_id=f"{account_id:064x}")
            acc = entry.read_account()
            proof = prepare_proof(acc, root)
        except MalformedInput as e:
            raise fail(e, EXIT_BAD_DATA, json_out)
        except (AccountNotFound, PreconditionFailed) as e:
            raise fail(e, EXIT_NOT_FOUND, json_out)

        boc = serialize_boc(proof)
        log.info("account proof built", extra={"bytes": len(boc), "cells": proof.tree_cell_count})
    if not json_out:
        typer.echo(boc.hex())
        return
    out = {
        "ok": True,
        "account": str(acc.get_addr()),
        "status": acc.status().label,
        "state_hash": root.hash.hex(),
        "proof_hash": proof.hash.hex(),
        "proof_boc": boc.hex(),
        "proof_cells": proof.tree_cell_count,
    }
    typer.echo(json.dumps(out, indent=2, sort_keys=True))


def main(argv: Optional[list[str]] = None) -> int:
    app(args=argv)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
