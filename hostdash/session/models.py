"""Session data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class SessionStatus(str, Enum):
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    DISCONNECTED = "disconnected"
    ERROR = "error"


class SessionFailure(str, Enum):
    NOT_CONNECTED = "not_connected"
    RECONNECTING = "reconnecting"
    COMMAND_FAILED = "command_failed"


@dataclass
class CommandResult:
    command: str
    output: str
    success: bool = True
    failure: SessionFailure | None = None
    error: str | None = None
    timestamp: datetime = field(default_factory=datetime.now)

    @classmethod
    def failed(cls, command: str, failure: SessionFailure,
               error: str | None = None) -> CommandResult:
        return cls(command=command, output="", success=False,
                   failure=failure, error=error)


@dataclass
class SessionInfo:
    host: str
    status: SessionStatus = SessionStatus.DISCONNECTED
    connected_since: datetime | None = None
    last_check: datetime | None = None
    error: str = ""


@dataclass(frozen=True)
class SSHTarget:
    host: str
    username: str | None = None
    port: int = 22


def parse_target(target: str) -> SSHTarget:
    """Split a host identifier of the form ``[user@]address[:port]``.

    IPv6 literals must be bracketed to carry a port (``[::1]:2222``);
    a bare IPv6 address is taken as-is.
    """
    username: str | None = None
    rest = target
    if "@" in rest:
        username, rest = rest.rsplit("@", 1)
        username = username or None

    port = 22
    if rest.startswith("["):
        address, _, tail = rest[1:].partition("]")
        if tail.startswith(":") and tail[1:].isdigit():
            port = int(tail[1:])
        return SSHTarget(host=address, username=username, port=port)

    if rest.count(":") == 1:
        address, port_text = rest.split(":", 1)
        if port_text.isdigit():
            return SSHTarget(host=address, username=username, port=int(port_text))

    return SSHTarget(host=rest, username=username, port=port)
