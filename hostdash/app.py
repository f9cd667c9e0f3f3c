"""Application orchestrator — wires together all components."""

from __future__ import annotations

import asyncio
import logging
from functools import partial
from pathlib import Path

from hostdash.config.settings import Settings, load_config
from hostdash.monitor.poller import Poller
from hostdash.session.netmiko_session import NetmikoSession
from hostdash.session.pool import SessionFactory, SessionPool
from hostdash.ui.tui import HostDash

logger = logging.getLogger(__name__)


def build_session_factory(settings: Settings) -> SessionFactory:
    ssh = settings.ssh
    return partial(
        NetmikoSession,
        username=ssh.username,
        ssh_key=str(Path(ssh.ssh_key).expanduser()) if ssh.ssh_key else None,
        ssh_config=ssh.ssh_config_path,
        strict_host_keys=ssh.strict_host_keys,
        connect_timeout=ssh.connect_timeout,
        command_timeout=ssh.command_timeout,
    )


class Application:
    """Top-level application orchestrator."""

    def __init__(
        self,
        config_path: str | Path | None = None,
        settings: Settings | None = None,
        session_factory: SessionFactory | None = None,
    ) -> None:
        self.settings = settings if settings is not None else load_config(config_path)
        self.pool = SessionPool(
            session_factory=session_factory or build_session_factory(self.settings),
            close_timeout=self.settings.poll.close_timeout,
        )
        self.poller = Poller(
            self.pool, history_size=self.settings.poll.history_size,
        )

    async def start(self) -> None:
        """Run the dashboard until the user quits."""
        self._setup_logging()
        if not self.settings.hosts:
            raise ValueError("No hosts to monitor")

        tui = HostDash(
            poller=self.poller,
            pool=self.pool,
            hosts=self.settings.hosts,
            poll_interval=self.settings.poll.interval,
        )
        try:
            await tui.run_async()
        finally:
            await self.shutdown()

    async def shutdown(self) -> None:
        """Stop polling and close every session within the close timeout."""
        logger.info("Shutting down...")
        timeout = self.settings.poll.close_timeout
        await self.poller.stop(timeout=timeout)
        try:
            await asyncio.wait_for(self.pool.close_all(), timeout=timeout)
        except asyncio.TimeoutError:
            logger.error("Timed out closing sessions after %ss", timeout)
        logger.info("Shutdown complete.")

    def _setup_logging(self) -> None:
        # Level only; the TUI installs its own handler in on_mount()
        logging.root.setLevel(self.settings.log_level)

        # The pool reports connection failures itself; SSH library
        # tracebacks would only leak to stderr under the TUI.
        logging.getLogger("paramiko").setLevel(logging.CRITICAL)
        logging.getLogger("netmiko").setLevel(logging.CRITICAL)
