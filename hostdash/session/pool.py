"""Session pool — one persistent session per host, serialised command dispatch."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Callable

from hostdash.session.base import RemoteSession
from hostdash.session.models import (
    CommandResult,
    SessionFailure,
    SessionInfo,
    SessionStatus,
)
from hostdash.session.netmiko_session import NetmikoSession

logger = logging.getLogger(__name__)

SessionFactory = Callable[[str], RemoteSession]


class SessionPool:
    """Owns the host → session map.

    Every operation on a host runs under that host's lock, so at most one
    command is in flight per host and a stale session is replaced by
    exactly one reconnect attempt. Different hosts never wait on each
    other.
    """

    def __init__(
        self,
        session_factory: SessionFactory | None = None,
        close_timeout: float = 5.0,
    ) -> None:
        self._factory: SessionFactory = session_factory or NetmikoSession
        self._close_timeout = close_timeout
        self._sessions: dict[str, RemoteSession] = {}
        self._info: dict[str, SessionInfo] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._closing = False

    def __len__(self) -> int:
        return len(self._sessions)

    def _lock_for(self, host: str) -> asyncio.Lock:
        return self._locks.setdefault(host, asyncio.Lock())

    # ── Lifecycle ───────────────────────────────────────────────────────

    async def register(self, host: str) -> bool:
        """Open a session for *host* unless one already exists.

        Connection failures are logged and reported as ``False``; the host
        is then simply absent from the pool until the next attempt.
        """
        if not host:
            raise ValueError("host must be a non-empty string")

        if self._closing:
            logger.debug("Pool is closing, not registering %s", host)
            return False

        async with self._lock_for(host):
            if host in self._sessions:
                return True
            return await self._connect(host, SessionStatus.CONNECTING)

    async def close(self, host: str) -> None:
        """Close and remove the session for *host*. No-op if absent."""
        lock = self._locks.get(host)
        if lock is None:
            # Never registered, so there is nothing to close.
            return
        async with lock:
            await self._discard(host)
            info = self._info.get(host)
            if info is not None:
                info.status = SessionStatus.DISCONNECTED
                info.connected_since = None

    async def unregister(self, host: str) -> None:
        """Close the session and forget everything known about *host*."""
        await self.close(host)
        self._info.pop(host, None)
        lock = self._locks.get(host)
        if lock is not None and not lock.locked():
            del self._locks[host]

    async def close_all(self) -> None:
        """Close every session. Best effort; never raises.

        Once called, the pool refuses new registrations. Hosts with a
        connect still in flight are included: their lock is awaited and
        whatever session the connect produced is discarded.
        """
        self._closing = True
        hosts = list(self._locks)
        if not hosts:
            return
        logger.info("Closing %d session(s)", len(self._sessions))
        results = await asyncio.gather(
            *(self.close(host) for host in hosts), return_exceptions=True,
        )
        for host, result in zip(hosts, results):
            if isinstance(result, BaseException):
                logger.error("Failed to close session to %s: %s", host, result)
                self._sessions.pop(host, None)

    # ── Command dispatch ────────────────────────────────────────────────

    async def run_command(self, host: str, command: str) -> CommandResult:
        """Run *command* on *host* at most once.

        Returns ``NOT_CONNECTED`` when the host has no session and
        ``RECONNECTING`` when the liveness check failed; in that case the
        stale session has already been replaced (or dropped) and the
        command was not sent.
        """
        lock = self._locks.get(host)
        if lock is None:
            return CommandResult.failed(
                command, SessionFailure.NOT_CONNECTED,
                f"Host '{host}' not connected",
            )

        async with lock:
            session = self._sessions.get(host)
            if session is None:
                return CommandResult.failed(
                    command, SessionFailure.NOT_CONNECTED,
                    f"Host '{host}' not connected",
                )

            if not await self._is_alive(session):
                logger.warning("Session to %s is stale, reconnecting", host)
                await self._discard(host)
                await self._connect(host, SessionStatus.RECONNECTING)
                return CommandResult.failed(
                    command, SessionFailure.RECONNECTING,
                    f"Session to '{host}' was stale",
                )

            info = self._info[host]
            try:
                output = await session.run_command(command)
            except Exception as exc:
                logger.error("Command failed on %s: %s", host, exc)
                info.error = str(exc)
                return CommandResult.failed(
                    command, SessionFailure.COMMAND_FAILED, str(exc),
                )

            info.last_check = datetime.now()
            return CommandResult(command=command, output=output)

    # ── Introspection ───────────────────────────────────────────────────

    def is_connected(self, host: str) -> bool:
        return host in self._sessions

    def hosts(self) -> list[str]:
        return list(self._info)

    def connected_hosts(self) -> list[str]:
        return [h for h, s in self._sessions.items() if s.is_connected]

    def get_info(self, host: str) -> SessionInfo | None:
        return self._info.get(host)

    def list_info(self) -> list[SessionInfo]:
        return list(self._info.values())

    # ── Internals (caller holds the host lock) ──────────────────────────

    async def _connect(self, host: str, status: SessionStatus) -> bool:
        info = self._info.setdefault(host, SessionInfo(host=host))
        if self._closing:
            info.status = SessionStatus.DISCONNECTED
            info.connected_since = None
            return False

        info.status = status
        try:
            session = self._factory(host)
        except Exception as exc:
            self._connect_failed(info, exc)
            return False

        try:
            await session.connect()
        except asyncio.CancelledError:
            # A connect finishing after cancellation must not leak.
            logger.info("Connect to %s cancelled", host)
            info.status = SessionStatus.DISCONNECTED
            info.connected_since = None
            await self._close_session(host, session)
            raise
        except Exception as exc:
            self._connect_failed(info, exc)
            return False

        self._sessions[host] = session
        info.status = SessionStatus.CONNECTED
        info.error = ""
        info.connected_since = datetime.now()
        logger.info("Connected to %s via %s", host, session.session_name)
        return True

    @staticmethod
    def _connect_failed(info: SessionInfo, exc: Exception) -> None:
        logger.warning("Failed to connect to %s: %s", info.host, exc)
        info.status = SessionStatus.ERROR
        info.error = str(exc)
        info.connected_since = None

    async def _discard(self, host: str) -> None:
        session = self._sessions.pop(host, None)
        if session is None:
            return
        await self._close_session(host, session)

    async def _close_session(self, host: str, session: RemoteSession) -> None:
        try:
            await asyncio.wait_for(session.close(), timeout=self._close_timeout)
        except asyncio.TimeoutError:
            logger.error("Timed out closing session to %s", host)
        except Exception as exc:
            logger.error("Failed to close session to %s: %s", host, exc)

    @staticmethod
    async def _is_alive(session: RemoteSession) -> bool:
        try:
            return await session.check()
        except Exception as exc:
            logger.debug("Liveness check failed for %s: %s", session.host, exc)
            return False
