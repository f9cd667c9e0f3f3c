"""Abstract remote session interface."""

from __future__ import annotations

from abc import ABC, abstractmethod


class RemoteSession(ABC):
    """Base class for a persistent command session to one host."""

    def __init__(self, host: str):
        self.host = host
        self._connected = False

    @abstractmethod
    async def connect(self) -> None:
        """Establish the session. Raises on failure."""

    @abstractmethod
    async def close(self) -> None:
        """Close the session."""

    @abstractmethod
    async def run_command(self, command: str) -> str:
        """Execute a command verbatim and return its standard output."""

    @abstractmethod
    async def check(self) -> bool:
        """Cheap round trip proving the session is still usable."""

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def session_name(self) -> str:
        return self.__class__.__name__
