# tests/test_config_and_logging.py
import json
import logging
from pathlib import Path

import pytest

from hlskey.config import manager as cfgman
from hlskey.utils.logger import JsonFormatter, configure_logging

def test_missing_config_gives_defaults(tmp_path: Path):
    p = tmp_path / "config.json"
    cfg = cfgman.load_config(p)
    assert cfg == cfgman.DEFAULTS
    assert cfg is not cfgman.DEFAULTS
    assert not p.exists()

def test_config_overrides_defaults(tmp_path: Path):
    p = tmp_path / "config.json"
    p.write_text(json.dumps({"rand_iv": True, "tmp_dir": str(tmp_path)}), encoding="utf-8")
    cfg = cfgman.load_config(p)
    assert cfg["rand_iv"] is True
    assert cfg["tmp_dir"] == str(tmp_path)
    assert cfg["log_level"] == "WARNING"

def test_config_path_from_env(tmp_path: Path, monkeypatch):
    p = tmp_path / "custom.json"
    p.write_text('{"log_level": "DEBUG"}', encoding="utf-8")
    monkeypatch.setenv("HLSKEY_CONFIG", str(p))
    assert cfgman.get_config_path() == p
    assert cfgman.load_config()["log_level"] == "DEBUG"

def test_invalid_config_raises(tmp_path: Path):
    p = tmp_path / "config.json"
    p.write_text("{not json", encoding="utf-8")
    with pytest.raises(cfgman.ConfigError):
        cfgman.load_config(p)
    p.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(cfgman.ConfigError):
        cfgman.load_config(p)

def test_json_formatter_fields():
    rec = logging.LogRecord("hlskey.test", logging.WARNING, __file__, 1, "hello %s", ("world",), None)
    obj = json.loads(JsonFormatter().format(rec))
    assert obj["level"] == "WARNING"
    assert obj["logger"] == "hlskey.test"
    assert obj["where"].endswith(":1")
    assert obj["message"] == "hello world"
    assert "time" in obj

def test_configure_logging_writes_json_lines(tmp_path: Path):
    log_path = tmp_path / "log.jsonl"
    logger = configure_logging("DEBUG", str(log_path))
    try:
        logging.getLogger("hlskey.core.keyinfo").warning("fallback")
        for h in logger.handlers:
            h.flush()
        lines = log_path.read_text(encoding="utf-8").splitlines()
        assert json.loads(lines[-1])["message"] == "fallback"
        # drugie wywołanie nie dubluje handlerów
        configure_logging("INFO")
        assert len(logger.handlers) == 1
    finally:
        for h in list(logger.handlers):
            logger.removeHandler(h)
            h.close()
        logger.setLevel(logging.NOTSET)

def test_unknown_log_level_raises(tmp_path: Path):
    p = tmp_path / "config.json"
    p.write_text('{"log_level": "LOUD"}', encoding="utf-8")
    with pytest.raises(cfgman.ConfigError):
        cfgman.load_config(p)
    p.write_text('{"log_level": "debug"}', encoding="utf-8")
    assert cfgman.load_config(p)["log_level"] == "debug"
