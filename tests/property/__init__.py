"""
Property tests (Hypothesis) for the cell codecs and the account model.

Profiles:
- dev (default locally), ci (picked when CI is truthy), fast, stress.
- HYPOTHESIS_PROFILE overrides the automatic choice.
"""
from __future__ import annotations

import os
from typing import Final

from hypothesis import HealthCheck, settings

_SUPPRESS = (HealthCheck.too_slow, HealthCheck.filter_too_much)

settings.register_profile("dev", max_examples=100, deadline=None, suppress_health_check=_SUPPRESS)
settings.register_profile(
    "ci", max_examples=200, deadline=None, suppress_health_check=_SUPPRESS, derandomize=True
)
settings.register_profile("fast", max_examples=25, deadline=None, suppress_health_check=_SUPPRESS)
settings.register_profile(
    "stress",
    max_examples=1000,
    deadline=None,
    suppress_health_check=_SUPPRESS + (HealthCheck.data_too_large,),
    derandomize=True,
)


def _env_truthy(name: str) -> bool:
    return (os.getenv(name) or "").lower() not in ("", "0", "false", "no", "off")


_active: Final[str] = os.getenv("HYPOTHESIS_PROFILE") or ("ci" if _env_truthy("CI") else "dev")
settings.load_profile(_active)


def active_profile() -> str:
    return _active
