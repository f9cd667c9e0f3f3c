"""Metric extraction — probe definitions and the output parser."""

from __future__ import annotations

from hostdash.metrics.extract import FALLBACK_VALUE, extract, try_extract
from hostdash.metrics.probes import CPU, DISK, MEMORY, PROBES, Probe

__all__ = [
    "CPU",
    "DISK",
    "FALLBACK_VALUE",
    "MEMORY",
    "PROBES",
    "Probe",
    "extract",
    "try_extract",
]
