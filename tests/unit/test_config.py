"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from riskscan.config import DEFAULT_MODEL, RiskScanConfig


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    for name in ("RISKSCAN_API_KEY", "OPENAI_API_KEY", "RISKSCAN_API_BASE", "RISKSCAN_MODEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    return tmp_path


def test_defaults(isolated_env: Path):
    config = RiskScanConfig.load()
    assert config.api_key == ""
    assert config.model == DEFAULT_MODEL
    assert config.db_path == isolated_env / "data" / "riskscan" / "state.db"


def test_openai_key_fallback(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-openai")
    assert RiskScanConfig.load().api_key == "sk-openai"

    monkeypatch.setenv("RISKSCAN_API_KEY", "sk-riskscan")
    assert RiskScanConfig.load().api_key == "sk-riskscan"


def test_yaml_file_then_env(monkeypatch: pytest.MonkeyPatch, isolated_env: Path):
    config_dir = isolated_env / "config" / "riskscan"
    config_dir.mkdir(parents=True)
    (config_dir / "config.yaml").write_text(
        "api_key: sk-file\nmodel: gpt-4o-mini\nmax_tokens_code: 1200\n"
    )
    monkeypatch.setenv("RISKSCAN_MODEL", "gpt-4o")

    config = RiskScanConfig.load()
    assert config.api_key == "sk-file"
    assert config.max_tokens_code == 1200
    assert config.model == "gpt-4o"


def test_yaml_must_be_mapping(isolated_env: Path):
    config_dir = isolated_env / "config" / "riskscan"
    config_dir.mkdir(parents=True)
    (config_dir / "config.yaml").write_text("- just\n- a list\n")

    with pytest.raises(ValueError, match="mapping"):
        RiskScanConfig.load()
