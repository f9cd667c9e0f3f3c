"""Fixed shell probes run on every monitored host."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Probe:
    """A command executed verbatim that prints one line of decimal text."""
    name: str
    command: str
    unit: str = "%"


CPU = Probe(
    name="cpu",
    command="top -b -n 10 -d.2 | grep 'Cpu' |  awk 'NR==3{ print($2)}'",
)

MEMORY = Probe(
    name="memory",
    command="free | grep Mem | awk '{print $3/$2 * 100.0}'",
)

DISK = Probe(
    name="disk",
    command="df / | awk 'END{print $5}' | sed 's/%//g'",
)

# Execution order per host is fixed
PROBES: tuple[Probe, ...] = (CPU, MEMORY, DISK)
