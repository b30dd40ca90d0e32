"""Global configuration — XDG paths, config.yaml, env vars, defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

DEFAULT_API_BASE = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4"


def _default_data_dir() -> Path:
    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return Path(xdg) / "riskscan"
    return Path.home() / ".local" / "share" / "riskscan"


def _default_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "riskscan"
    return Path.home() / ".config" / "riskscan"


@dataclass
class RiskScanConfig:
    """Application-wide configuration."""

    data_dir: Path = field(default_factory=_default_data_dir)
    config_dir: Path = field(default_factory=_default_config_dir)
    api_key: str = ""
    api_base: str = DEFAULT_API_BASE
    model: str = DEFAULT_MODEL
    max_tokens_code: int = 700
    max_tokens_dependencies: int = 500
    verbose: bool = False

    @property
    def db_path(self) -> Path:
        return self.data_dir / "state.db"

    @classmethod
    def load(cls) -> RiskScanConfig:
        """Load config from config.yaml and environment variables."""
        config = cls()

        config_file = config.config_dir / "config.yaml"
        if config_file.is_file():
            config._apply_file(config_file)

        env_key = os.environ.get("RISKSCAN_API_KEY") or os.environ.get(
            "OPENAI_API_KEY"
        )
        if env_key:
            config.api_key = env_key

        env_base = os.environ.get("RISKSCAN_API_BASE")
        if env_base:
            config.api_base = env_base

        env_model = os.environ.get("RISKSCAN_MODEL")
        if env_model:
            config.model = env_model

        return config

    def _apply_file(self, path: Path) -> None:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must be a mapping")

        self.api_key = str(data.get("api_key", self.api_key))
        self.api_base = str(data.get("api_base", self.api_base))
        self.model = str(data.get("model", self.model))
        self.max_tokens_code = int(data.get("max_tokens_code", self.max_tokens_code))
        self.max_tokens_dependencies = int(
            data.get("max_tokens_dependencies", self.max_tokens_dependencies)
        )
        if "data_dir" in data:
            self.data_dir = Path(data["data_dir"]).expanduser()
