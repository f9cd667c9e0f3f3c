"""Tests for the CLI entry point and the application orchestrator."""

from __future__ import annotations

import asyncio
import logging
from unittest.mock import AsyncMock, patch

import pytest

from hostdash.__main__ import build_parser, main
from hostdash.app import Application, build_session_factory
from hostdash.config.settings import Settings, SSHConfig
from hostdash.session.netmiko_session import NetmikoSession


@pytest.fixture
def isolated_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    return tmp_path


# --- CLI ---


def test_parser_collects_hosts():
    args = build_parser().parse_args(
        ["--host", "a", "b", "--host", "root@c", "--poll-rate", "2"],
    )
    assert args.hosts == ["a", "b", "root@c"]
    assert args.poll_rate == 2.0


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.hosts == []
    assert args.poll_rate is None
    assert args.config is None


def test_main_requires_a_host(isolated_cwd):
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 2


def test_main_rejects_bad_poll_rate(isolated_cwd):
    with pytest.raises(SystemExit) as exc:
        main(["--host", "a", "--poll-rate", "0"])
    assert exc.value.code == 2


def test_main_runs_application(isolated_cwd):
    with patch("hostdash.app.Application") as app_cls:
        app_cls.return_value.start = AsyncMock()
        code = main(["--host", "a", "--host", "b", "--poll-rate", "3",
                     "--history", "15", "-v"])

    assert code == 0
    settings = app_cls.call_args.kwargs["settings"]
    assert settings.hosts == ["a", "b"]
    assert settings.poll.interval == 3
    assert settings.poll.history_size == 15
    assert settings.log_level == "DEBUG"
    app_cls.return_value.start.assert_awaited_once()


def test_main_merges_config_hosts(isolated_cwd):
    (isolated_cwd / "hostdash.yaml").write_text("hosts: [a, b]\n")
    with patch("hostdash.app.Application") as app_cls:
        app_cls.return_value.start = AsyncMock()
        main(["--host", "b", "c"])

    assert app_cls.call_args.kwargs["settings"].hosts == ["a", "b", "c"]


# --- Application ---


def test_build_session_factory(tmp_path):
    settings = Settings(ssh=SSHConfig(
        username="ops", ssh_config=str(tmp_path / "missing"),
        strict_host_keys=False, connect_timeout=4,
    ))
    session = build_session_factory(settings)("web-01")

    assert isinstance(session, NetmikoSession)
    assert session.username == "ops"
    assert session.ssh_config is None
    assert session.strict_host_keys is False
    assert session.connect_timeout == 4


@pytest.mark.asyncio
async def test_shutdown_closes_all_sessions(sample_settings, factory):
    app = Application(settings=sample_settings, session_factory=factory)
    for host in sample_settings.hosts:
        await app.poller.add_host(host)
    app.poller.start(sample_settings.poll.interval)

    await app.shutdown()

    assert not app.poller.running
    assert len(app.pool) == 0
    assert all(s.closed for s in factory.sessions)


@pytest.mark.asyncio
async def test_shutdown_is_bounded(sample_settings, factory):
    sample_settings.poll.close_timeout = 0.05
    factory.hanging_close.add("web-01")
    app = Application(settings=sample_settings, session_factory=factory)
    await app.poller.add_host("web-01")

    await asyncio.wait_for(app.shutdown(), timeout=2)


@pytest.mark.asyncio
async def test_start_without_hosts_fails(factory):
    app = Application(settings=Settings(), session_factory=factory)
    with pytest.raises(ValueError):
        await app.start()


def test_setup_logging_quiets_ssh_libraries(sample_settings, factory):
    app = Application(settings=sample_settings, session_factory=factory)
    app._setup_logging()
    assert logging.getLogger("paramiko").level == logging.CRITICAL
    assert logging.getLogger("netmiko").level == logging.CRITICAL
