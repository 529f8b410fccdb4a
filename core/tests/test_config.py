import json

import pytest

from core.config import Config, get_config, load, main, reset_config
from core.errors import ConfigError


def test_defaults():
    cfg = load()
    assert cfg.accounts.footprint_mode == "exact"
    assert cfg.accounts.derive_init_code_hash is False
    assert cfg.proofs.self_check is True
    assert cfg.log.level == "INFO"


def test_precedence_overrides_env_file(tmp_path, monkeypatch):
    f = tmp_path / "cellstate.toml"
    f.write_text('[accounts]\nfootprint_mode = "off"\nderive_init_code_hash = true\n[log]\nlevel = "debug"\n')
    cfg = load(f)
    assert cfg.accounts.footprint_mode == "off"
    assert cfg.accounts.derive_init_code_hash is True
    assert cfg.log.level == "DEBUG"

    monkeypatch.setenv("CELLSTATE_FOOTPRINT_MODE", "fast")
    assert load(f).accounts.footprint_mode == "fast"
    assert load(f, accounts={"footprint_mode": "exact"}).accounts.footprint_mode == "exact"


def test_config_file_from_env_and_json(tmp_path, monkeypatch):
    f = tmp_path / "cellstate.json"
    f.write_text(json.dumps({"proofs": {"self_check": False}}))
    monkeypatch.setenv("CELLSTATE_CONFIG", str(f))
    assert load().proofs.self_check is False


def test_bad_values_raise_config_error(tmp_path, monkeypatch):
    with pytest.raises(ConfigError):
        load(accounts={"footprint_mode": "sometimes"})
    with pytest.raises(ConfigError):
        load(log={"level": "chatty"})
    with pytest.raises(ConfigError):
        load(tmp_path / "missing.toml")
    bad = tmp_path / "cellstate.yaml"
    bad.write_text("x: 1")
    with pytest.raises(ConfigError):
        load(bad)
    broken = tmp_path / "broken.toml"
    broken.write_text("[accounts\n")
    with pytest.raises(ConfigError) as ei:
        load(broken)
    assert ei.value.cause is not None


def test_cached_config_and_reset(monkeypatch):
    first = get_config()
    assert get_config() is first
    monkeypatch.setenv("CELLSTATE_PROOF_SELF_CHECK", "no")
    assert get_config().proofs.self_check is True
    reset_config()
    assert get_config().proofs.self_check is False


def test_to_dict_and_cli(capsys):
    d = Config().to_dict()
    assert d["accounts"] == {"footprint_mode": "exact", "derive_init_code_hash": False}
    assert main([]) == 0
    assert json.loads(capsys.readouterr().out)["proofs"]["self_check"] is True
    assert main(["/nonexistent/cellstate.toml"]) == 2
