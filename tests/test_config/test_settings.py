"""Tests for config loading."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from hostdash.config.settings import PollConfig, Settings, SSHConfig, load_config


def _write_yaml(path: Path, data: dict) -> None:
    with open(path, "w") as f:
        yaml.dump(data, f)


def test_defaults():
    s = Settings()
    assert s.hosts == []
    assert s.poll.interval == 5.0
    assert s.poll.history_size == 120
    assert s.ssh.strict_host_keys is True
    assert s.ssh.ssh_config == "~/.ssh/config"
    assert s.log_level == "INFO"


def test_load_config_from_file(tmp_path):
    cfg = tmp_path / "hostdash.yaml"
    _write_yaml(cfg, {
        "hosts": ["admin@10.0.0.1", "web-01"],
        "poll": {"interval": 2, "history_size": 30},
        "ssh": {"username": "ops", "strict_host_keys": False},
        "log_level": "debug",
    })

    s = load_config(cfg)

    assert s.hosts == ["admin@10.0.0.1", "web-01"]
    assert s.poll.interval == 2
    assert s.poll.history_size == 30
    assert s.ssh.username == "ops"
    assert s.ssh.strict_host_keys is False
    assert s.log_level == "DEBUG"


def test_load_config_expands_env_vars(tmp_path, monkeypatch):
    monkeypatch.setenv("HOSTDASH_KEY", "/keys/id_ed25519")
    cfg = tmp_path / "hostdash.yaml"
    _write_yaml(cfg, {"ssh": {"ssh_key": "${HOSTDASH_KEY}"},
                      "hosts": ["${UNSET_HOSTDASH_VAR}"]})

    s = load_config(cfg)

    assert s.ssh.ssh_key == "/keys/id_ed25519"
    assert s.hosts == ["${UNSET_HOSTDASH_VAR}"]


def test_load_config_empty_file(tmp_path):
    cfg = tmp_path / "hostdash.yaml"
    cfg.write_text("")
    assert load_config(cfg) == Settings()


def test_load_config_non_mapping(tmp_path):
    cfg = tmp_path / "hostdash.yaml"
    cfg.write_text("- just\n- a list\n")
    with pytest.raises(ValueError, match="mapping"):
        load_config(cfg)


def test_load_config_searches_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    _write_yaml(tmp_path / "hostdash.yaml", {"hosts": ["found"]})
    assert load_config().hosts == ["found"]


def test_load_config_no_file_gives_defaults(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    assert load_config() == Settings()


def test_missing_explicit_file_raises(tmp_path):
    with pytest.raises(OSError):
        load_config(tmp_path / "nope.yaml")


def test_invalid_values_rejected():
    with pytest.raises(ValidationError):
        PollConfig(interval=0)
    with pytest.raises(ValidationError):
        PollConfig(history_size=0)
    with pytest.raises(ValidationError):
        Settings(hosts=["ok", ""])
    with pytest.raises(ValidationError):
        Settings(log_level="chatty")


def test_merge_hosts_dedupes_and_keeps_order():
    s = Settings(hosts=["a", "b"])
    s.merge_hosts(["b", "c", "a", "C"])
    assert s.hosts == ["a", "b", "c", "C"]


def test_merge_hosts_rejects_empty():
    s = Settings()
    with pytest.raises(ValueError):
        s.merge_hosts([""])


def test_ssh_config_path_only_when_file_exists(tmp_path):
    existing = tmp_path / "config"
    existing.write_text("Host *\n")
    assert SSHConfig(ssh_config=str(existing)).ssh_config_path == str(existing)
    assert SSHConfig(ssh_config=str(tmp_path / "missing")).ssh_config_path is None
