"""Logging handler feeding the dashboard's Logs tab."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import TYPE_CHECKING

from rich.text import Text

if TYPE_CHECKING:
    from textual.app import App
    from textual.widgets import RichLog

_LEVEL_STYLES: dict[int, str] = {
    logging.DEBUG: "dim cyan",
    logging.INFO: "cyan",
    logging.WARNING: "yellow",
    logging.ERROR: "red",
    logging.CRITICAL: "bold red",
}


def format_record(record: logging.LogRecord) -> Text:
    """``HH:MM:SS LEVEL module: message`` with the level coloured."""
    text = Text()
    text.append(datetime.fromtimestamp(record.created).strftime("%H:%M:%S"),
                style="dim")
    text.append(f" {record.levelname[:4]:<4} ",
                style=_LEVEL_STYLES.get(record.levelno, ""))
    text.append(f"{record.name.rsplit('.', 1)[-1]}: ", style="dim")
    text.append(record.getMessage())
    if record.exc_info and record.exc_info[1] is not None:
        text.append(f" ({record.exc_info[1]!r})", style="red")
    return text


class TextualLogHandler(logging.Handler):
    """Writes records into a RichLog.

    Records from SSH executor threads are handed over with
    ``call_from_thread``; records from the app thread are written in place.
    """

    def __init__(self, app: App, log: RichLog, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self._app = app
        self._log = log
        self._app_thread = threading.get_ident()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = format_record(record)
            if threading.get_ident() == self._app_thread:
                self._log.write(line)
            else:
                self._app.call_from_thread(self._log.write, line)
        except Exception:
            self.handleError(record)
