"""
Configuration management for jXSS.

Supports YAML/JSON config files and CLI overrides.
"""

import json
from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Any

import yaml

from jxss.errors import ConfigError


@dataclass
class OutputSettings:
    """Output/reporting settings."""
    format: str = "text"                 # text, json, csv, html
    file: str | None = None


@dataclass
class JXSSConfig:
    """Complete jXSS configuration."""
    # Extra detection patterns, applied after the built-in one
    patterns: list[str] = field(default_factory=list)
    # e.g. ["http://127.0.0.1:8080", "socks5://127.0.0.1:1080"]
    proxies: list[str] = field(default_factory=list)
    rate_limit: float = 5.0              # Requests per second, also the burst size
    concurrency: int = 5
    canary: str = ""
    timeout: float = 15.0
    verify_ssl: bool = True
    empty_literals_only: bool = False    # Only test assignments of '' / ""
    headers: dict[str, str] = field(default_factory=dict)
    output: OutputSettings = field(default_factory=OutputSettings)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        data = asdict(self)
        data["output"] = asdict(self.output)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "JXSSConfig":
        """Create config from dictionary. Unknown keys are ignored."""
        config = cls()
        if not data:
            return config
        if not isinstance(data, dict):
            raise ConfigError(f"config must be a mapping, got {type(data).__name__}")

        for key, value in data.items():
            if key == "output":
                if not isinstance(value, dict):
                    raise ConfigError("'output' must be a mapping")
                for okey, ovalue in value.items():
                    if hasattr(config.output, okey):
                        setattr(config.output, okey, ovalue)
            elif key in _FIELDS and value is not None:
                setattr(config, key, value)

        config.validate()
        return config

    @classmethod
    def from_file(cls, filepath: str | Path) -> "JXSSConfig":
        """Load config from a YAML or JSON file."""
        filepath = Path(filepath)
        if not filepath.exists():
            raise ConfigError(f"Config file not found: {filepath}")

        try:
            with open(filepath) as f:
                if filepath.suffix.lower() == ".json":
                    data = json.load(f)
                else:
                    data = yaml.safe_load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigError(f"cannot load config {filepath}: {e}") from e

        return cls.from_dict(data)

    def validate(self):
        """Raise ConfigError for values the scanner cannot run with."""
        if not isinstance(self.patterns, list) or not all(isinstance(p, str) for p in self.patterns):
            raise ConfigError("'patterns' must be a list of strings")
        if not isinstance(self.proxies, list) or not all(isinstance(p, str) for p in self.proxies):
            raise ConfigError("'proxies' must be a list of strings")
        if not isinstance(self.headers, dict):
            raise ConfigError("'headers' must be a mapping")
        if not isinstance(self.canary, str):
            self.canary = str(self.canary)
        try:
            self.rate_limit = float(self.rate_limit)
            self.timeout = float(self.timeout)
            self.concurrency = int(self.concurrency)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"invalid numeric setting: {e}") from e
        if self.rate_limit <= 0:
            raise ConfigError(f"'rate_limit' must be positive, got {self.rate_limit}")
        if self.concurrency < 1:
            raise ConfigError(f"'concurrency' must be at least 1, got {self.concurrency}")
        if self.timeout <= 0:
            raise ConfigError(f"'timeout' must be positive, got {self.timeout}")

    def save(self, filepath: str | Path):
        """Save config to a YAML file."""
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        with open(filepath, "w") as f:
            yaml.safe_dump(self.to_dict(), f, sort_keys=False)


_FIELDS = {f.name for f in fields(JXSSConfig)}


def load_config(filepath: str | Path | None = None) -> JXSSConfig:
    """Load config from a file, or return defaults when no file is given."""
    if not filepath:
        return JXSSConfig()
    return JXSSConfig.from_file(filepath)


def generate_example_config() -> str:
    """Generate example configuration YAML."""
    config = JXSSConfig(
        patterns=[r"(?i)window\.([a-zA-Z0-9_$]+)\s*=\s*(['\"])\2"],
        proxies=["http://127.0.0.1:8080", "socks5://127.0.0.1:1080"],
        canary="jxss1337",
    )
    return yaml.safe_dump(config.to_dict(), sort_keys=False)
