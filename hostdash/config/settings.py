"""YAML config loader with environment variable expansion."""

from __future__ import annotations

import os
import re
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator


def _expand_env_vars(value: str) -> str:
    """Replace ${VAR_NAME} with environment variable values."""
    pattern = re.compile(r"\$\{([^}]+)\}")
    def replacer(match: re.Match) -> str:
        var = match.group(1)
        return os.environ.get(var, match.group(0))
    return pattern.sub(replacer, value)


def _walk_and_expand(obj: object) -> object:
    """Recursively expand environment variables in strings."""
    if isinstance(obj, str):
        return _expand_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _walk_and_expand(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_walk_and_expand(item) for item in obj]
    return obj


class PollConfig(BaseModel):
    interval: float = Field(default=5.0, gt=0)
    history_size: int = Field(default=120, ge=1)
    close_timeout: float = Field(default=10.0, gt=0)


class SSHConfig(BaseModel):
    username: str | None = None       # used when the host string has no user@
    ssh_key: str | None = None
    ssh_config: str = "~/.ssh/config"
    strict_host_keys: bool = True
    connect_timeout: float = Field(default=10.0, gt=0)
    command_timeout: float = Field(default=30.0, gt=0)

    @property
    def ssh_config_path(self) -> str | None:
        """Expanded OpenSSH config path, or None if the file is missing."""
        path = Path(self.ssh_config).expanduser()
        return str(path) if path.is_file() else None


class Settings(BaseModel):
    hosts: list[str] = Field(default_factory=list)
    poll: PollConfig = Field(default_factory=PollConfig)
    ssh: SSHConfig = Field(default_factory=SSHConfig)
    log_level: str = "INFO"

    @field_validator("hosts")
    @classmethod
    def _hosts_not_empty(cls, hosts: list[str]) -> list[str]:
        for host in hosts:
            if not host:
                raise ValueError("host entries must be non-empty strings")
        return hosts

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, level: str) -> str:
        level = level.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {level}")
        return level

    def merge_hosts(self, extra: list[str]) -> None:
        """Append *extra* hosts, dropping exact duplicates, preserving order."""
        merged: list[str] = []
        for host in [*self.hosts, *extra]:
            if not host:
                raise ValueError("host entries must be non-empty strings")
            if host not in merged:
                merged.append(host)
        self.hosts = merged


def load_config(path: str | Path | None = None) -> Settings:
    """Load configuration from a YAML file, falling back to defaults."""
    if path is None:
        candidates = [
            Path("hostdash.yaml"),
            Path("hostdash.yml"),
            Path.home() / ".hostdash" / "config.yaml",
        ]
        for candidate in candidates:
            if candidate.exists():
                path = candidate
                break

    if path is not None:
        path = Path(path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        raw = _walk_and_expand(raw)
        return Settings.model_validate(raw)

    return Settings()
