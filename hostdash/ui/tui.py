"""Textual TUI for hostdash — one panel per host plus a log tab."""

from __future__ import annotations

import asyncio
import logging

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.widgets import Footer, Header, RichLog, TabbedContent, TabPane

from hostdash.monitor.poller import Poller
from hostdash.session.pool import SessionPool
from hostdash.ui.logging_handler import TextualLogHandler
from hostdash.ui.widgets import HostPanel

logger = logging.getLogger(__name__)

REDRAW_SECONDS = 1


def _panel_id(index: int) -> str:
    return f"host-{index}"


class HostDash(App):
    """Main Textual application for hostdash."""

    TITLE = "hostdash"

    CSS = """
    #tabs {
        height: 1fr;
    }
    TabPane {
        height: 1fr;
    }
    #hosts {
        height: 1fr;
    }
    #log-panel {
        height: 1fr;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit", show=True),
        Binding("ctrl+c", "quit", "Quit", show=False),
        Binding("ctrl+r", "refresh_now", "Refresh", show=True),
        Binding("ctrl+g", "focus_logs", "Logs", show=True),
        Binding("ctrl+t", "focus_hosts", "Hosts", show=True),
    ]

    def __init__(
        self,
        poller: Poller,
        pool: SessionPool,
        hosts: list[str],
        poll_interval: float = 5.0,
        **kwargs: object,
    ) -> None:
        super().__init__(**kwargs)
        self._poller = poller
        self._pool = pool
        self._hosts = list(hosts)
        self._poll_interval = poll_interval
        self._log_handler: TextualLogHandler | None = None
        self._panels: dict[str, HostPanel] = {}
        self._refreshing = False

    # ── Layout ──────────────────────────────────────────────────────────

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        with TabbedContent(initial="tab-hosts", id="tabs"):
            with TabPane("Hosts", id="tab-hosts"):
                with VerticalScroll(id="hosts"):
                    for index, host in enumerate(self._hosts):
                        panel = HostPanel(host, id=_panel_id(index))
                        self._panels[host] = panel
                        yield panel
            with TabPane("Logs", id="tab-logs"):
                yield RichLog(id="log-panel", highlight=True, markup=True)
        yield Footer()

    # ── Lifecycle ───────────────────────────────────────────────────────

    def on_mount(self) -> None:
        self._log_handler = TextualLogHandler(
            self, self.query_one("#log-panel", RichLog),
        )
        root = logging.getLogger()
        # Remove existing StreamHandlers to avoid writing over the screen
        for h in list(root.handlers):
            if isinstance(h, logging.StreamHandler) and not isinstance(h, TextualLogHandler):
                root.removeHandler(h)
        root.addHandler(self._log_handler)

        self.set_interval(REDRAW_SECONDS, self._redraw)
        self._redraw()
        self._connect_and_start()

    def on_unmount(self) -> None:
        if self._log_handler:
            logging.getLogger().removeHandler(self._log_handler)
            self._log_handler = None

    @work(exclusive=False)
    async def _connect_and_start(self) -> None:
        """Open sessions to all hosts concurrently, then start polling."""
        logger.info("Connecting to %d host(s)...", len(self._hosts))
        await asyncio.gather(*(self._poller.add_host(h) for h in self._hosts))
        connected = self._pool.connected_hosts()
        logger.info("Connected to %d host(s): %s", len(connected), connected)
        self._redraw()
        self._poller.start(self._poll_interval)

    # ── Rendering ───────────────────────────────────────────────────────

    def _redraw(self) -> None:
        for host, panel in self._panels.items():
            record = self._poller.get_record(host)
            if record is None:
                continue
            panel.update_record(record, self._pool.get_info(host))

    # ── Keybinding actions ──────────────────────────────────────────────

    @work(exclusive=False, group="refresh")
    async def action_refresh_now(self) -> None:
        if self._refreshing:
            return
        self._refreshing = True
        try:
            await self._poller.refresh_all()
        finally:
            self._refreshing = False
        self._redraw()

    def action_focus_logs(self) -> None:
        tabs: TabbedContent = self.query_one("#tabs", TabbedContent)
        tabs.active = "tab-logs"

    def action_focus_hosts(self) -> None:
        tabs: TabbedContent = self.query_one("#tabs", TabbedContent)
        tabs.active = "tab-hosts"
