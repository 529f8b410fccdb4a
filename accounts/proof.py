"""
accounts.proof: existence proofs for one account under a shard state root.

Building a proof replays the lookup a verifier would perform (parse the
shard state, walk the account index to the account's leaf, parse the
account) under a usage tree, then prunes every cell that lookup never
parsed. The result is a MERKLE_PROOF cell whose inner root hash equals the
state root hash; sibling accounts appear only as pruned placeholders.

`check_account_proof` is the light-client side: it verifies the proof
against a trusted state hash and re-reads the account from it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cells.cell import Cell
from cells.merkle import MerkleProof
from cells.usage import UsageTree
from core.config import get_config
from core.errors import DeserializationError, InternalError
from core.logging import get_logger
from shard.state import ShardStateUnsplit

from .errors import AccountNotFound, PreconditionFailed

if TYPE_CHECKING:
    from .account import Account

log = get_logger(__name__)


def prepare_proof(account: "Account", state_root: Cell) -> Cell:
    """
    Serialized Merkle proof of `account` under `state_root`.

    Raises PreconditionFailed for an absent account, AccountNotFound when the
    account is outside the state's shard or missing from its index, and a
    MalformedInput subclass when the state root does not decode.
    """
    if account.is_none():
        raise PreconditionFailed("Account cannot be None")
    account_id = account.get_id()
    if account_id is None:
        raise AccountNotFound("account has no 256-bit id", account=str(account.get_addr()))

    usage = UsageTree.with_root(state_root)
    state = ShardStateUnsplit.construct_from_cell(usage.root_cell())
    if not account.belongs_to_shard(state.shard_id):
        raise AccountNotFound(
            "Account doesn't belong to given shard state",
            account=str(account.get_addr()),
            shard=str(state.shard_id),
        )
    entry = state.read_accounts().get_serialized(account_id)
    if entry is None:
        raise AccountNotFound(
            "Account doesn't belong to given shard state",
            account=str(account.get_addr()),
        )
    if entry.read_account().is_none():
        raise AccountNotFound("account slot holds no account", account=str(account.get_addr()))

    proof = MerkleProof.create_by_usage_tree(state_root, usage)
    if get_config().proofs.self_check and not proof.check(state_root.hash):
        raise InternalError("proof does not reproduce the state root hash", root=state_root.hash)
    log.debug(
        "account proof prepared",
        extra={"account": str(account.get_addr()), "visited": len(usage), "root": state_root.hash.hex()},
    )
    return proof.serialize()


def check_account_proof(proof_cell: Cell, state_hash: bytes, account_id: int) -> "Account":
    """Verify `proof_cell` against `state_hash` and return the proven account."""
    proof = MerkleProof.construct_from_cell(proof_cell)
    if not proof.check(state_hash):
        raise DeserializationError(
            "proof does not match state hash",
            expected=state_hash,
            proof_hash=proof.root_hash,
        )
    state = ShardStateUnsplit.construct_from_cell(proof.proof)
    entry = state.read_accounts().get_serialized(account_id)
    if entry is None:
        raise AccountNotFound("account not present in proof", account_id=f"{account_id:064x}")
    proven = entry.read_account()
    if proven.is_none():
        raise AccountNotFound("account slot holds no account", account_id=f"{account_id:064x}")
    return proven


__all__ = ["prepare_proof", "check_account_proof"]
