import io
import json
import logging

import pytest

from core import logging as clog
from core.config import load


@pytest.fixture(autouse=True)
def _restore_root():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in root.handlers:
        if h not in handlers:
            h.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    clog.clear_context()


def test_json_lines_carry_context_and_extras():
    buf = io.StringIO()
    clog.configure(json=True, level="DEBUG", stream=buf)
    log = clog.get_logger("cellstate.test")
    with clog.trace_scope("t-1"):
        clog.bind(component="prove", account=b"\xab")
        log.info("proof built", extra={"cells": 7})
    assert clog.context() == {}

    rec = json.loads(buf.getvalue().strip())
    assert rec["msg"] == "proof built"
    assert rec["trace_id"] == "t-1"
    assert rec["component"] == "prove"
    assert rec["account"] == "ab"
    assert rec["cells"] == 7
    assert rec["level"] == "INFO"


def test_text_format_and_level_filter():
    buf = io.StringIO()
    clog.configure(json=False, level="WARNING", stream=buf)
    log = clog.get_logger()
    log.info("hidden")
    log.warning("activation rejected", extra={"account": "0:ab"})
    out = buf.getvalue()
    assert "hidden" not in out
    assert "| WARNING | cellstate | activation rejected account=0:ab" in out


def test_configure_from_config_writes_json_file(tmp_path):
    path = tmp_path / "logs" / "cellstate.log"
    cfg = load(log={"level": "DEBUG", "format": "text", "file": str(path)})
    clog.configure_from_config(cfg, stream=io.StringIO())
    clog.get_logger("cellstate.file").debug("to file")
    for h in logging.getLogger().handlers:
        h.flush()
    assert json.loads(path.read_text().strip())["msg"] == "to file"
