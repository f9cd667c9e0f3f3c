"""Custom Textual widgets for the hostdash TUI."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from rich.table import Table
from rich.text import Text
from textual.widgets import Static

if TYPE_CHECKING:
    from hostdash.monitor.record import MetricRecord
    from hostdash.session.models import SessionInfo

SPARKLINE_CHARS = "▁▂▃▄▅▆▇█"
BAR_FILL = "█"
BAR_EMPTY = "░"
BAR_WIDTH = 30
SPARKLINE_WIDTH = 40

# Colour thresholds (percent)
COLOR_GREEN_MAX = 50
COLOR_YELLOW_MAX = 75

# Status dot colours keyed by SessionStatus value
_STATUS_DOTS: dict[str, tuple[str, str]] = {
    "connected":    ("\u25cf", "green"),       # ●
    "connecting":   ("\u25cf", "yellow"),      # ●
    "reconnecting": ("\u25cf", "yellow"),      # ●
    "disconnected": ("\u25cf", "red"),         # ●
    "error":        ("\u25cf", "bold red"),    # ●
}


def percent_style(value: int) -> str:
    if value <= COLOR_GREEN_MAX:
        return "green"
    if value <= COLOR_YELLOW_MAX:
        return "yellow"
    return "red"


def render_bar(value: int, width: int = BAR_WIDTH) -> Text:
    """Horizontal gauge; values outside 0–100 are clamped for drawing only."""
    shown = min(max(value, 0), 100)
    filled = round(shown / 100 * width)
    text = Text()
    text.append(BAR_FILL * filled, style=percent_style(shown))
    text.append(BAR_EMPTY * (width - filled), style="dim")
    text.append(f" {value:3d}%")
    return text


def render_sparkline(values: Iterable[int], width: int = SPARKLINE_WIDTH,
                     maximum: int = 100) -> Text:
    """Oldest-first sparkline of the most recent *width* values."""
    recent = list(values)[-width:]
    top = len(SPARKLINE_CHARS) - 1
    chars = []
    for v in recent:
        level = min(max(v, 0), maximum) / maximum if maximum else 0
        chars.append(SPARKLINE_CHARS[round(level * top)])
    return Text("".join(chars).rjust(width), style="blue")


class HostPanel(Static):
    """Gauges and sparklines for one host."""

    DEFAULT_CSS = """
    HostPanel {
        border: double $primary;
        padding: 0 1;
        height: auto;
    }
    """

    def __init__(self, host: str, **kwargs: object) -> None:
        super().__init__("", **kwargs)
        self.host = host
        self.border_title = f"host: {host}"

    def update_record(self, record: MetricRecord,
                      info: SessionInfo | None = None) -> None:
        status = info.status.value if info is not None else "disconnected"
        dot, dot_style = _STATUS_DOTS.get(status, ("\u25cf", "white"))
        self.border_subtitle = f"{dot} {status}"
        self.styles.border_subtitle_color = dot_style.split()[-1]

        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold", no_wrap=True)
        table.add_column(no_wrap=True)
        table.add_column(no_wrap=True)
        table.add_row("CPU %", render_bar(record.cpu),
                      render_sparkline(record.cpu_history))
        table.add_row("Memory %", render_bar(record.memory),
                      render_sparkline(record.memory_history))
        table.add_row("Disk %", render_bar(record.disk), Text(""))

        footer = Text()
        if record.last_update is not None:
            footer.append(f"updated {record.last_update:%H:%M:%S}", style="dim")
        if record.last_error:
            footer.append(f"  last miss: {record.last_error}", style="yellow")
        elif info is not None and info.error:
            footer.append(f"  {info.error}", style="red")

        grid = Table.grid()
        grid.add_row(table)
        grid.add_row(footer)
        self.update(grid)
