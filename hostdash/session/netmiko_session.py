"""Netmiko/SSH session for POSIX hosts."""

from __future__ import annotations

import asyncio
import getpass
import logging
from concurrent.futures import ThreadPoolExecutor
from functools import partial

from hostdash.session.base import RemoteSession
from hostdash.session.models import parse_target

logger = logging.getLogger(__name__)

_executor = ThreadPoolExecutor(max_workers=16, thread_name_prefix="ssh")


class NetmikoSession(RemoteSession):
    """Remote session over SSH using Netmiko's generic Linux driver."""

    def __init__(self, host: str, username: str | None = None,
                 ssh_key: str | None = None, ssh_config: str | None = None,
                 strict_host_keys: bool = True, connect_timeout: float = 10.0,
                 command_timeout: float = 30.0):
        super().__init__(host)
        self.target = parse_target(host)
        self.username = self.target.username or username or getpass.getuser()
        self.ssh_key = ssh_key
        self.ssh_config = ssh_config
        self.strict_host_keys = strict_host_keys
        self.connect_timeout = connect_timeout
        self.command_timeout = command_timeout
        self._conn = None

    def connect_kwargs(self) -> dict:
        kwargs: dict = {
            "device_type": "linux",
            "host": self.target.host,
            "username": self.username,
            "port": self.target.port,
            "use_keys": True,
            "allow_agent": True,
            "ssh_strict": self.strict_host_keys,
            "system_host_keys": self.strict_host_keys,
            "conn_timeout": self.connect_timeout,
        }
        if self.ssh_key:
            kwargs["key_file"] = self.ssh_key
        if self.ssh_config:
            kwargs["ssh_config_file"] = self.ssh_config
        return kwargs

    async def connect(self) -> None:
        from netmiko import ConnectHandler

        loop = asyncio.get_running_loop()
        pending = loop.run_in_executor(
            _executor, partial(ConnectHandler, **self.connect_kwargs())
        )
        try:
            self._conn = await asyncio.shield(pending)
        except asyncio.CancelledError:
            # The handshake thread cannot be interrupted; drop its result.
            pending.add_done_callback(self._disconnect_late)
            raise
        self._connected = True
        logger.info("SSH session opened to %s", self.host)

    def _disconnect_late(self, pending: asyncio.Future) -> None:
        if pending.cancelled() or pending.exception() is not None:
            return
        logger.info("Closing SSH session to %s opened after cancel", self.host)
        _executor.submit(pending.result().disconnect)

    async def close(self) -> None:
        conn, self._conn = self._conn, None
        self._connected = False
        if conn is not None:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(_executor, conn.disconnect)
            logger.info("SSH session closed to %s", self.host)

    async def check(self) -> bool:
        if self._conn is None:
            return False
        loop = asyncio.get_running_loop()
        try:
            alive = await loop.run_in_executor(_executor, self._conn.is_alive)
        except Exception as exc:
            logger.debug("Liveness check raised for %s: %s", self.host, exc)
            alive = False
        if not alive:
            self._connected = False
        return bool(alive)

    async def run_command(self, command: str) -> str:
        if self._conn is None:
            raise ConnectionError(f"Session to {self.host} is not open")

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            _executor,
            partial(self._conn.send_command, command,
                    read_timeout=self.command_timeout),
        )
