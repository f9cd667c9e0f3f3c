"""Per-host gauges and bounded histories."""

from __future__ import annotations

from collections import deque
from datetime import datetime

DEFAULT_HISTORY_SIZE = 120


class MetricRecord:
    """Current CPU/memory/disk gauges for one host plus CPU/memory history.

    Histories are FIFO rings: once *history_size* values are held, each
    new value evicts the oldest.
    """

    def __init__(self, host: str, history_size: int = DEFAULT_HISTORY_SIZE) -> None:
        if history_size < 1:
            raise ValueError("history_size must be at least 1")
        self.host = host
        self.cpu = 0
        self.memory = 0
        self.disk = 0
        self.cpu_history: deque[int] = deque(maxlen=history_size)
        self.memory_history: deque[int] = deque(maxlen=history_size)
        self.last_update: datetime | None = None
        self.last_error = ""

    @property
    def history_size(self) -> int:
        return self.cpu_history.maxlen or 0

    def gauge(self, probe_name: str) -> int:
        if probe_name not in ("cpu", "memory", "disk"):
            raise KeyError(probe_name)
        return getattr(self, probe_name)

    def history(self, probe_name: str) -> list[int]:
        """Oldest-first copy of a history, empty for probes without one."""
        ring = self._ring(probe_name)
        return list(ring) if ring is not None else []

    def apply(self, probe_name: str, value: int) -> None:
        """Record a successful probe: set the gauge, extend its history."""
        self.gauge(probe_name)  # raises KeyError for unknown probes
        setattr(self, probe_name, value)
        ring = self._ring(probe_name)
        if ring is not None:
            ring.append(value)
        self.last_update = datetime.now()
        self.last_error = ""

    def mark_failed(self, probe_name: str, reason: str) -> None:
        """Record a failed probe. Gauges and histories are left untouched."""
        self.last_error = f"{probe_name}: {reason}"

    def _ring(self, probe_name: str) -> deque[int] | None:
        if probe_name == "cpu":
            return self.cpu_history
        if probe_name == "memory":
            return self.memory_history
        return None
