"""Periodic probe collection across all monitored hosts."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable

from hostdash.metrics import PROBES, Probe, try_extract
from hostdash.monitor.record import DEFAULT_HISTORY_SIZE, MetricRecord
from hostdash.session.pool import SessionPool

logger = logging.getLogger(__name__)


class Poller:
    """Runs the fixed probe set on every host and updates its MetricRecord.

    Hosts are refreshed concurrently, one task per host. Within a host the
    probes run strictly in order, since they share one session.
    """

    def __init__(
        self,
        pool: SessionPool,
        probes: Iterable[Probe] = PROBES,
        history_size: int = DEFAULT_HISTORY_SIZE,
    ) -> None:
        self._pool = pool
        self._probes = tuple(probes)
        self._history_size = history_size
        self._records: dict[str, MetricRecord] = {}
        self._task: asyncio.Task | None = None
        self._stopping = asyncio.Event()

    # ── Host registry ───────────────────────────────────────────────────

    async def add_host(self, host: str) -> bool:
        """Start tracking *host*. Returns whether its session came up."""
        if host not in self._records:
            self._records[host] = MetricRecord(host, self._history_size)
        return await self._pool.register(host)

    async def remove_host(self, host: str) -> None:
        self._records.pop(host, None)
        await self._pool.unregister(host)

    def hosts(self) -> list[str]:
        return list(self._records)

    def get_record(self, host: str) -> MetricRecord | None:
        return self._records.get(host)

    def records(self) -> list[MetricRecord]:
        return list(self._records.values())

    # ── Refresh ─────────────────────────────────────────────────────────

    async def refresh_host(self, host: str) -> None:
        """One probing pass for a single host: cpu, memory, disk in order."""
        record = self._records.get(host)
        if record is None:
            logger.debug("Refresh requested for untracked host %s", host)
            return

        # Hosts that never connected, or whose reconnect failed, get
        # another attempt every cycle.
        if not self._pool.is_connected(host):
            await self._pool.register(host)

        for probe in self._probes:
            result = await self._pool.run_command(host, probe.command)
            if not result.success:
                reason = result.failure.value if result.failure else "failed"
                logger.debug("Probe %s on %s: %s", probe.name, host, reason)
                record.mark_failed(probe.name, reason)
                continue

            value = try_extract(result.output)
            if value is None:
                logger.debug("Probe %s on %s returned unparsable output",
                             probe.name, host)
                record.mark_failed(probe.name, "unparsable output")
                continue

            record.apply(probe.name, value)

    async def refresh_all(self, hosts: Iterable[str] | None = None) -> None:
        """Refresh every given host (default: all tracked hosts) concurrently."""
        targets = list(hosts) if hosts is not None else list(self._records)
        if not targets:
            return
        results = await asyncio.gather(
            *(self.refresh_host(h) for h in targets), return_exceptions=True,
        )
        for host, result in zip(targets, results):
            if isinstance(result, Exception):
                logger.error("Refresh of %s failed: %s", host, result)

    # ── Periodic driver ─────────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, interval: float) -> None:
        """Refresh all hosts every *interval* seconds in the background."""
        if interval <= 0:
            raise ValueError("interval must be positive")
        if self.running:
            return
        self._stopping = asyncio.Event()
        self._task = asyncio.create_task(self._run_loop(interval), name="poller")
        logger.info("Poller started: %d host(s) every %ss",
                    len(self._records), interval)

    async def stop(self, timeout: float | None = None) -> None:
        """Stop the periodic loop.

        A pass already in progress is allowed to finish; after *timeout*
        seconds it is cancelled instead.
        """
        task, self._task = self._task, None
        if task is None:
            return
        self._stopping.set()
        try:
            await asyncio.wait_for(asyncio.shield(task), timeout)
        except asyncio.TimeoutError:
            logger.warning("Refresh pass still running after %ss, cancelling",
                           timeout)
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        logger.info("Poller stopped")

    async def _run_loop(self, interval: float) -> None:
        loop = asyncio.get_running_loop()
        while not self._stopping.is_set():
            started = loop.time()
            try:
                await self.refresh_all()
            except Exception as exc:
                logger.error("Refresh pass failed: %s", exc)
            remaining = max(0.0, interval - (loop.time() - started))
            try:
                await asyncio.wait_for(self._stopping.wait(), remaining)
            except asyncio.TimeoutError:
                pass
