"""Parsing and validation of the aggregation interval."""

from __future__ import annotations

import math
import re
from datetime import timedelta
from decimal import Decimal
from typing import Union

from .errors import InvalidIntervalError
from .records import NANOS_PER_SECOND

IntervalLike = Union[str, int, float, timedelta]

DEFAULT_INTERVAL = "1 second"

_UNIT_NANOS = {
    "ns": 1,
    "nsec": 1,
    "us": 1_000,
    "µs": 1_000,
    "usec": 1_000,
    "ms": 1_000_000,
    "msec": 1_000_000,
    "s": NANOS_PER_SECOND,
    "sec": NANOS_PER_SECOND,
    "secs": NANOS_PER_SECOND,
    "second": NANOS_PER_SECOND,
    "seconds": NANOS_PER_SECOND,
    "m": 60 * NANOS_PER_SECOND,
    "min": 60 * NANOS_PER_SECOND,
    "mins": 60 * NANOS_PER_SECOND,
    "minute": 60 * NANOS_PER_SECOND,
    "minutes": 60 * NANOS_PER_SECOND,
    "h": 3600 * NANOS_PER_SECOND,
    "hr": 3600 * NANOS_PER_SECOND,
    "hrs": 3600 * NANOS_PER_SECOND,
    "hour": 3600 * NANOS_PER_SECOND,
    "hours": 3600 * NANOS_PER_SECOND,
    "d": 86400 * NANOS_PER_SECOND,
    "day": 86400 * NANOS_PER_SECOND,
    "days": 86400 * NANOS_PER_SECOND,
}

_TERM_PATTERN = re.compile(r"\s*(\d+(?:\.\d*)?|\.\d+)\s*([a-zµ]+)\s*", re.IGNORECASE)


def parse_interval(text: str) -> int:
    """Parse a human readable duration such as ``"1 second"`` or ``"1m 30s"``.

    The text is a sequence of ``<number><unit>`` terms whose values are
    summed. Returns the duration in nanoseconds.
    """

    if not text or not text.strip():
        raise InvalidIntervalError("Interval must not be empty")

    total = Decimal(0)
    position = 0
    while position < len(text):
        match = _TERM_PATTERN.match(text, position)
        if match is None:
            raise InvalidIntervalError(f"Cannot parse interval {text!r}")
        number, unit = match.groups()
        scale = _UNIT_NANOS.get(unit.lower())
        if scale is None:
            raise InvalidIntervalError(f"Unknown time unit {unit!r} in interval {text!r}")
        total += Decimal(number) * scale
        position = match.end()

    return _require_positive(int(total), text)


def interval_to_ns(interval: IntervalLike) -> int:
    """Normalise an interval given as text, seconds or ``timedelta`` to nanoseconds."""

    if isinstance(interval, str):
        return parse_interval(interval)
    if isinstance(interval, timedelta):
        nanos = (interval.days * 86400 + interval.seconds) * NANOS_PER_SECOND + interval.microseconds * 1_000
        return _require_positive(nanos, interval)
    if isinstance(interval, bool) or not isinstance(interval, (int, float)):
        raise InvalidIntervalError(f"Unsupported interval type {type(interval).__name__}")
    if not math.isfinite(interval):
        raise InvalidIntervalError(f"Interval must be finite, got {interval!r}")
    return _require_positive(round(interval * NANOS_PER_SECOND), interval)


def _require_positive(nanos: int, original: object) -> int:
    if nanos <= 0:
        raise InvalidIntervalError(f"Interval must be positive, got {original!r}")
    return nanos
