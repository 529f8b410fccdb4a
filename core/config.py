"""
cellstate: core.config
----------------------

Settings for logging, footprint bookkeeping and proof building, as typed
dataclasses validated on construction. `load()` layers its sources, later
ones winning: built-in defaults, a TOML/JSON file, CELLSTATE_* variables,
keyword overrides.

  log:      { level, format, file }
  accounts: { footprint_mode, derive_init_code_hash }
  proofs:   { self_check }

Recognised variables:

  CELLSTATE_CONFIG=path/to/cellstate.toml
  CELLSTATE_LOG_LEVEL=DEBUG
  CELLSTATE_LOG_FORMAT=json|text|auto
  CELLSTATE_LOG_FILE=./logs/cellstate.log
  CELLSTATE_FOOTPRINT_MODE=exact|fast|off
  CELLSTATE_DERIVE_INIT_CODE_HASH=1
  CELLSTATE_PROOF_SELF_CHECK=0
"""

from __future__ import annotations

import json
import os
import sys
import tomllib
from dataclasses import asdict, dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import ConfigError

FOOTPRINT_MODES = ("exact", "fast", "off")
LOG_FORMATS = ("auto", "json", "text")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _expand(p: str | Path) -> Path:
    return Path(p).expanduser().resolve()


def _parse_bool(v: str) -> bool:
    return v.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _env_bool(name: str, default: bool) -> bool:
    v = os.environ.get(name)
    return _parse_bool(v) if v is not None and v.strip() != "" else default


# ---- model ----


@dataclass
class LogConfig:
    level: str = "INFO"
    format: str = "auto"
    file: Optional[Path] = None

    def validate(self) -> None:
        if self.level.upper() not in LOG_LEVELS:
            raise ConfigError("unknown log level", level=self.level)
        if self.format.lower() not in LOG_FORMATS:
            raise ConfigError("unknown log format", format=self.format)


@dataclass
class AccountsConfig:
    """
    footprint_mode decides how mutators refresh `storage_stat.used`:
      exact - deduplicating walk (shared code/data/library nodes count once)
      fast  - precomputed per-tree counts, no dedup
      off   - leave the stored footprint untouched
    """

    footprint_mode: str = "exact"
    derive_init_code_hash: bool = False

    def validate(self) -> None:
        if self.footprint_mode not in FOOTPRINT_MODES:
            raise ConfigError(
                "footprint_mode must be one of exact|fast|off",
                footprint_mode=self.footprint_mode,
            )


@dataclass
class ProofConfig:
    self_check: bool = True


@dataclass
class Config:
    log: LogConfig = field(default_factory=LogConfig)
    accounts: AccountsConfig = field(default_factory=AccountsConfig)
    proofs: ProofConfig = field(default_factory=ProofConfig)

    def validate(self) -> None:
        self.log.validate()
        self.accounts.validate()

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        if d["log"]["file"] is not None:
            d["log"]["file"] = str(d["log"]["file"])
        return d


# ---- sources ----


def _load_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError("config file not found", path=str(path))
    suffix = path.suffix.lower()
    with path.open("rb") as f:
        try:
            if suffix in {".toml", ".tml"}:
                return tomllib.load(f)
            if suffix == ".json":
                return json.load(f)
        except (tomllib.TOMLDecodeError, json.JSONDecodeError) as e:
            raise ConfigError("unparseable config file", path=str(path)).with_cause(e)
    raise ConfigError("unsupported config format, use .toml or .json", path=str(path))


def _merge_dict(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    """Nested dict merge: values in b override a."""
    out = dict(a)
    for k, v in b.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge_dict(out[k], v)
        else:
            out[k] = v
    return out


def _env_layer() -> Dict[str, Any]:
    env: Dict[str, Any] = {"log": {}, "accounts": {}, "proofs": {}}
    if "CELLSTATE_LOG_LEVEL" in os.environ:
        env["log"]["level"] = os.environ["CELLSTATE_LOG_LEVEL"].strip().upper()
    if "CELLSTATE_LOG_FORMAT" in os.environ:
        env["log"]["format"] = os.environ["CELLSTATE_LOG_FORMAT"].strip().lower()
    if os.environ.get("CELLSTATE_LOG_FILE"):
        env["log"]["file"] = os.environ["CELLSTATE_LOG_FILE"]
    if "CELLSTATE_FOOTPRINT_MODE" in os.environ:
        env["accounts"]["footprint_mode"] = os.environ["CELLSTATE_FOOTPRINT_MODE"].strip().lower()
    if "CELLSTATE_DERIVE_INIT_CODE_HASH" in os.environ:
        env["accounts"]["derive_init_code_hash"] = _env_bool("CELLSTATE_DERIVE_INIT_CODE_HASH", False)
    if "CELLSTATE_PROOF_SELF_CHECK" in os.environ:
        env["proofs"]["self_check"] = _env_bool("CELLSTATE_PROOF_SELF_CHECK", True)
    return env


# ---- load ----


def load(config_file: Optional[str | Path] = None, **overrides: Any) -> Config:
    """
    Load the configuration.

    Precedence: overrides > env > file > defaults. When `config_file` is not
    given, CELLSTATE_CONFIG is consulted.

    overrides : keyword sections, e.g. load(accounts={"footprint_mode": "fast"})
    """
    base: Dict[str, Any] = Config().to_dict()

    path = config_file or os.environ.get("CELLSTATE_CONFIG")
    if path:
        base = _merge_dict(base, _load_file(_expand(path)))

    base = _merge_dict(base, _env_layer())
    if overrides:
        base = _merge_dict(base, overrides)

    try:
        log = base["log"]
        cfg = Config(
            log=LogConfig(
                level=str(log["level"]).upper(),
                format=str(log["format"]).lower(),
                file=_expand(log["file"]) if log.get("file") else None,
            ),
            accounts=AccountsConfig(
                footprint_mode=str(base["accounts"]["footprint_mode"]).lower(),
                derive_init_code_hash=bool(base["accounts"]["derive_init_code_hash"]),
            ),
            proofs=ProofConfig(self_check=bool(base["proofs"]["self_check"])),
        )
    except (KeyError, TypeError) as e:
        raise ConfigError("malformed configuration section").with_cause(e)

    cfg.validate()
    return cfg


@lru_cache(maxsize=1)
def get_config() -> Config:
    """Process-wide configuration (defaults + file + env), loaded once."""
    return load()


def reset_config() -> None:
    """Drop the cached configuration (tests, or after changing env vars)."""
    get_config.cache_clear()


# ---- python -m core.config ----


def main(argv: List[str] | None = None) -> int:
    """
    CLI usage:

        python -m core.config                        # defaults/env; print JSON
        python -m core.config path/to/cellstate.toml # load file; print JSON
    """
    argv = list(sys.argv[1:] if argv is None else argv)
    path = argv[0] if argv else None
    try:
        cfg = load(path)
    except ConfigError as e:
        print(f"config error: {e}", file=sys.stderr)
        return 2
    print(json.dumps(cfg.to_dict(), indent=2, sort_keys=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
