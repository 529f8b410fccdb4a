import json

import pytest
from typer.testing import CliRunner

from accounts.cli import build_app, read_source
from accounts.cli import inspect_account, prove_account
from cells.boc import deserialize_boc, serialize_boc
from cells.merkle import MerkleProof
from core.config import reset_config
from core.errors import DeserializationError

from .factories import account_with_id, generate_test_account, shard_state

runner = CliRunner()


@pytest.fixture(autouse=True)
def _quiet_logs(monkeypatch):
    # some runners fold stderr into stdout
    monkeypatch.setenv("CELLSTATE_LOG_LEVEL", "WARNING")
    reset_config()


@pytest.fixture
def account_hex():
    return serialize_boc(generate_test_account().serialize()).hex()


@pytest.fixture
def state():
    a = account_with_id(0x10, 1_000, code_tag=1)
    b = account_with_id(0x90, 2_000, code_tag=2)
    root, _ = shard_state([a, b])
    return root, a


def test_read_source_accepts_hex_file_and_binary(tmp_path, account_hex):
    raw = bytes.fromhex(account_hex)
    assert read_source(account_hex) == raw
    assert read_source("0x" + account_hex) == raw
    f = tmp_path / "acc.boc"
    f.write_bytes(raw)
    assert read_source(str(f)) == raw
    h = tmp_path / "acc.hex"
    h.write_text(account_hex + "\n")
    assert read_source(str(h)) == raw
    with pytest.raises(DeserializationError):
        read_source("not hex at all")


def test_inspect_json(account_hex):
    result = runner.invoke(inspect_account.app, ["--json", account_hex])
    assert result.exit_code == 0, result.output
    out = json.loads(result.stdout)
    assert out["ok"] is True
    assert out["status"] == "active"
    assert out["layout"] == "original"
    assert out["footprint_matches"] is True
    assert out["recomputed"]["fast"]["cells"] >= out["recomputed"]["exact"]["cells"]


def test_inspect_human_report_from_file(tmp_path, account_hex):
    f = tmp_path / "acc.boc"
    f.write_bytes(bytes.fromhex(account_hex))
    result = runner.invoke(inspect_account.app, [str(f)])
    assert result.exit_code == 0, result.output
    assert "active" in result.stdout
    assert "footprint" in result.stdout


def test_inspect_from_stdin(account_hex):
    result = runner.invoke(inspect_account.app, ["--json", "-"], input=account_hex)
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["status"] == "active"


def test_inspect_bad_data_exit_code():
    result = runner.invoke(inspect_account.app, ["--json", "b5ee9c7200"])
    assert result.exit_code == 2
    assert json.loads(result.stdout)["error"]["category"] == "bad_data"


def test_prove_json(state):
    root, a = state
    state_hex = serialize_boc(root).hex()
    addr = str(a.get_addr())
    result = runner.invoke(prove_account.app, [state_hex, "--account", addr, "--json"])
    assert result.exit_code == 0, result.output
    out = json.loads(result.stdout)
    assert out["state_hash"] == root.hash.hex()
    proof = MerkleProof.construct_from_cell(deserialize_boc(bytes.fromhex(out["proof_boc"])))
    assert proof.check(root.hash)


def test_prove_plain_hex_output(state):
    root, a = state
    result = runner.invoke(prove_account.app, [serialize_boc(root).hex(), "-a", f"{a.get_id():064x}"])
    assert result.exit_code == 0, result.output
    cell = deserialize_boc(bytes.fromhex(result.stdout.strip()))
    assert MerkleProof.construct_from_cell(cell).root_hash == root.hash


def test_prove_unknown_account_exit_code(state):
    root, _ = state
    result = runner.invoke(prove_account.app, [serialize_boc(root).hex(), "--account", "0:" + "55" * 32])
    assert result.exit_code == 3


def test_prove_bad_inputs_exit_code(state, account_hex):
    root, a = state
    result = runner.invoke(prove_account.app, [account_hex, "--account", str(a.get_addr())])
    assert result.exit_code == 2
    result = runner.invoke(prove_account.app, [serialize_boc(root).hex(), "--account", "zz"])
    assert result.exit_code == 2


def test_combined_app_routes_subcommands(account_hex):
    app = build_app()
    result = runner.invoke(app, ["inspect", "--json", account_hex])
    assert result.exit_code == 0, result.output
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.startswith("cellstate ")
