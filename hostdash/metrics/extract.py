"""Probe output → integer gauge value."""

from __future__ import annotations

import logging
import math

logger = logging.getLogger(__name__)

FALLBACK_VALUE = 0


def _decode(raw: bytes | str | None) -> str | None:
    if raw is None:
        return None
    if isinstance(raw, str):
        return raw
    try:
        return bytes(raw).decode("utf-8")
    except UnicodeDecodeError:
        return None


def _strip_line_terminator(text: str) -> str:
    if text.endswith("\r\n"):
        return text[:-2]
    if text.endswith("\n"):
        return text[:-1]
    return text


def try_extract(raw: bytes | str | None) -> int | None:
    """Parse a single-line decimal probe output.

    Returns ``None`` if the output cannot be read as a finite number.
    The value is truncated toward zero; negatives saturate at 0.
    """
    text = _decode(raw)
    if text is None:
        logger.debug("Probe output is not valid UTF-8")
        return None

    candidate = _strip_line_terminator(text).strip()
    if "_" in candidate or not candidate.isascii():
        # float() also reads digit-group underscores and non-ASCII digits
        logger.debug("Unparsable probe output: %r", candidate[:40])
        return None
    try:
        number = float(candidate)
    except ValueError:
        logger.debug("Unparsable probe output: %r", candidate[:40])
        return None
    if not math.isfinite(number):
        logger.debug("Non-finite probe output: %r", candidate[:40])
        return None

    return max(0, int(number))


def extract(raw: bytes | str | None) -> int:
    """Total variant of :func:`try_extract`: never fails, falls back to 0."""
    value = try_extract(raw)
    if value is None:
        return FALLBACK_VALUE
    return value
