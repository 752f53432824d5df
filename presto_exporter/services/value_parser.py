"""Parsing of the textual timestamp and duration fields Presto reports.

Presto prints timestamps as RFC 3339 (``2018-06-01T13:28:02.405Z``) and
durations as a number followed by a unit (``5.20s``, ``500.00ms``,
``1.50d``). Each function handles exactly one field so a caller can drop a
single bad record without losing its siblings.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

from presto_exporter.core.errors import ValueParseError

_RFC3339 = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})[Tt](?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<frac>\d+))?(?P<tz>[Zz]|[+-]\d{2}:\d{2})$"
)

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,  # U+00B5 micro sign
    "μs": 1e-6,  # U+03BC greek mu
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
    "d": 86400.0,
}

_DURATION_TERM = re.compile(r"(\d*\.?\d*)([a-zµμ]+)")


def parse_timestamp(text: str) -> datetime:
    """Parse an RFC 3339 timestamp into an aware UTC datetime."""
    match = _RFC3339.match(text.strip())
    if match is None:
        raise ValueParseError(f"invalid timestamp: {text!r}")
    # fromisoformat only takes up to microsecond precision
    frac = (match["frac"] or "").ljust(6, "0")[:6]
    tz = "+00:00" if match["tz"] in ("Z", "z") else match["tz"]
    try:
        parsed = datetime.fromisoformat(f"{match['date']}T{match['time']}.{frac}{tz}")
    except ValueError as exc:
        raise ValueParseError(f"invalid timestamp: {text!r}") from exc
    return parsed.astimezone(timezone.utc)


def parse_duration(text: str) -> float:
    """Parse a duration such as ``"5.2s"`` or ``"1m30s"`` into seconds."""
    s = text.strip()
    if not s:
        raise ValueParseError("invalid duration: ''")

    sign = 1.0
    if s[0] in "+-":
        sign = -1.0 if s[0] == "-" else 1.0
        s = s[1:]
    if s == "0":
        return 0.0

    total = 0.0
    pos = 0
    while pos < len(s):
        term = _DURATION_TERM.match(s, pos)
        if term is None or term.end() == pos:
            raise ValueParseError(f"invalid duration: {text!r}")
        number, unit = term.groups()
        if number in ("", "."):
            raise ValueParseError(f"missing number in duration: {text!r}")
        if unit not in _UNIT_SECONDS:
            raise ValueParseError(f"unknown unit {unit!r} in duration {text!r}")
        total += float(number) * _UNIT_SECONDS[unit]
        pos = term.end()
    if pos == 0:
        raise ValueParseError(f"invalid duration: {text!r}")
    return sign * total
