from __future__ import annotations

from pathlib import Path

import pytest
from config import DEFAULTS, ConfigError, load_config


def test_defaults() -> None:
    cfg = load_config()
    assert cfg == DEFAULTS
    assert cfg is not DEFAULTS


def test_dict_overlay() -> None:
    cfg = load_config({"trace": "yes", "step_limit": "500"})
    assert cfg["trace"] is True
    assert cfg["step_limit"] == 500
    assert cfg["logfile"] == DEFAULTS["logfile"]


def test_yaml_file(tmp_path: Path) -> None:
    p = tmp_path / "cfg.yaml"
    p.write_text("trace: true\nstep_limit: 1000\nlogfile: run.log\n", encoding="utf-8")
    cfg = load_config(str(p))
    assert cfg["trace"] is True
    assert cfg["step_limit"] == 1000
    assert cfg["logfile"] == "run.log"


def test_empty_yaml_file(tmp_path: Path) -> None:
    p = tmp_path / "cfg.yaml"
    p.write_text("", encoding="utf-8")
    assert load_config(str(p)) == DEFAULTS


@pytest.mark.parametrize(
    ("cfg", "message"),
    [
        ({"step_limit": 0}, "step_limit must be positive"),
        ({"step_limit": "many"}, "Bad types"),
        ({"logfile": ""}, "logfile must not be empty"),
        ({"mem_cells": 10}, "Unknown config keys: mem_cells"),
    ],
)
def test_invalid_values(cfg: dict, message: str) -> None:
    with pytest.raises(ConfigError, match=message):
        load_config(cfg)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_config(str(tmp_path / "nope.yaml"))


def test_non_mapping_file(tmp_path: Path) -> None:
    p = tmp_path / "cfg.yaml"
    p.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="does not contain a mapping"):
        load_config(str(p))


def test_broken_yaml(tmp_path: Path) -> None:
    p = tmp_path / "cfg.yaml"
    p.write_text("trace: [1,\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="Failed to load"):
        load_config(str(p))


def test_unsupported_input() -> None:
    with pytest.raises(ConfigError, match="Unsupported"):
        load_config(42)  # type: ignore[arg-type]
