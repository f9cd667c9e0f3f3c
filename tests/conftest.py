"""Shared test fixtures."""

from __future__ import annotations

import asyncio

import pytest

from hostdash.config.settings import PollConfig, Settings
from hostdash.metrics import CPU, DISK, MEMORY
from hostdash.monitor.poller import Poller
from hostdash.session.base import RemoteSession
from hostdash.session.pool import SessionPool


class FakeSession(RemoteSession):
    """In-memory session driven by its factory's scripted behaviour."""

    def __init__(self, host: str, factory: FakeSessionFactory) -> None:
        super().__init__(host)
        self.factory = factory
        self.alive = True
        self.closed = False
        self.commands: list[str] = []
        self.checks = 0

    async def connect(self) -> None:
        self.factory.connect_attempts[self.host] = (
            self.factory.connect_attempts.get(self.host, 0) + 1
        )
        await asyncio.sleep(self.factory.connect_delay)
        if self.host in self.factory.unreachable:
            raise ConnectionError(f"Connection refused: {self.host}")
        self._connected = True

    async def close(self) -> None:
        self.closed = True
        self._connected = False
        if self.host in self.factory.hanging_close:
            await asyncio.sleep(3600)
        if self.host in self.factory.failing_close:
            raise OSError("close failed")

    async def check(self) -> bool:
        self.checks += 1
        if isinstance(self.alive, Exception):
            raise self.alive
        return self.alive

    async def run_command(self, command: str) -> str:
        self.commands.append(command)
        self.factory.in_flight += 1
        self.factory.max_in_flight = max(self.factory.max_in_flight,
                                         self.factory.in_flight)
        key = (self.host, command)
        self.factory.host_in_flight[self.host] = (
            self.factory.host_in_flight.get(self.host, 0) + 1
        )
        self.factory.max_host_in_flight = max(
            self.factory.max_host_in_flight, self.factory.host_in_flight[self.host],
        )
        try:
            await asyncio.sleep(self.factory.command_delay)
            queue = self.factory.outputs.get(key, [""])
            output = queue.pop(0) if len(queue) > 1 else queue[0]
            if isinstance(output, Exception):
                raise output
            return output
        finally:
            self.factory.in_flight -= 1
            self.factory.host_in_flight[self.host] -= 1


class FakeSessionFactory:
    """Session factory recording every session it creates."""

    def __init__(self) -> None:
        self.sessions: list[FakeSession] = []
        self.unreachable: set[str] = set()
        self.failing_close: set[str] = set()
        self.hanging_close: set[str] = set()
        self.outputs: dict[tuple[str, str], list] = {}
        self.connect_attempts: dict[str, int] = {}
        self.connect_delay = 0.0
        self.command_delay = 0.0
        self.in_flight = 0
        self.max_in_flight = 0
        self.host_in_flight: dict[str, int] = {}
        self.max_host_in_flight = 0

    def __call__(self, host: str) -> FakeSession:
        session = FakeSession(host, self)
        self.sessions.append(session)
        return session

    def script(self, host: str, command: str, *outputs: object) -> None:
        """Queue outputs for a command; the last one repeats forever."""
        self.outputs[(host, command)] = list(outputs)

    def script_probes(self, host: str, cpu: object, memory: object,
                      disk: object) -> None:
        self.script(host, CPU.command, cpu)
        self.script(host, MEMORY.command, memory)
        self.script(host, DISK.command, disk)

    def for_host(self, host: str) -> list[FakeSession]:
        return [s for s in self.sessions if s.host == host]

    def live(self, host: str) -> list[FakeSession]:
        return [s for s in self.for_host(host) if s.is_connected and not s.closed]


@pytest.fixture
def factory() -> FakeSessionFactory:
    return FakeSessionFactory()


@pytest.fixture
def pool(factory: FakeSessionFactory) -> SessionPool:
    return SessionPool(session_factory=factory, close_timeout=0.1)


@pytest.fixture
def poller(pool: SessionPool) -> Poller:
    return Poller(pool, history_size=5)


@pytest.fixture
def sample_settings() -> Settings:
    return Settings(
        hosts=["admin@10.0.0.1", "web-01"],
        poll=PollConfig(interval=60, history_size=10, close_timeout=1),
    )
