"""EXENT scalar types that Python has no native spelling for.

The EXENT value model maps onto plain Python objects almost everywhere:

    Null    -> None             String -> str
    Bool    -> bool             Date   -> datetime.datetime (UTC)
    Int     -> int              Array  -> list
    Float   -> float            Object -> dict (or SimpleNamespace)

Two variants need a marker so they survive a round trip with their
suffix intact: ``BigInt`` (``123n``) and ``DecimalNumber`` (``1.5d``).
Both subclass the numeric type they carry, so arithmetic and equality
behave like the underlying number.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any, Optional

from ._errors import ERR_INVALID_DATE, ExentError


class BigInt(int):
    """Arbitrary-precision integer tagged as "big" (``digits`` + ``n``)."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "BigInt({})".format(int(self))


class DecimalNumber(float):
    """Double-precision number tagged with decimal intent (``digits`` + ``d``)."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "DecimalNumber({})".format(float.__repr__(self))


def object_items(val: Any):
    """Key/value pairs of an Object, whichever Python shape it has."""
    if isinstance(val, SimpleNamespace):
        return list(vars(val).items())
    return list(val.items())


# ── Dates ─────────────────────────────────────────────────────
# Dates are instants at millisecond resolution, normalized to UTC.
# A timestamp with no offset is read as UTC rather than local time so
# that parsing never depends on the host's timezone.

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)

_ISO_RE = re.compile(
    r"^(\d{4})(?:-(\d{2})(?:-(\d{2})"
    r"(?:T(\d{2}):(\d{2})(?::(\d{2})(?:\.(\d+))?)?)?)?)?"
    r"(Z|[+-]\d{2}:?\d{2})?$"
)


def parse_iso_date(text: str, pos: Optional[int] = None) -> datetime:
    """Parse an ISO-8601 timestamp into an aware UTC datetime."""
    m = _ISO_RE.match(text)
    if not m:
        raise ExentError(ERR_INVALID_DATE, "invalid date: {!r}".format(text), pos)
    year, month, day, hour, minute, second, frac, offset = m.groups()
    micro = int((frac or "")[:3].ljust(3, "0")) * 1000
    tz = timezone.utc
    if offset and offset != "Z":
        sign = -1 if offset[0] == "-" else 1
        digits = offset[1:].replace(":", "")
        tz = timezone(sign * timedelta(hours=int(digits[:2]), minutes=int(digits[2:])))
    try:
        dt = datetime(int(year), int(month or 1), int(day or 1),
                      int(hour or 0), int(minute or 0), int(second or 0),
                      micro, tzinfo=tz)
        return dt.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        raise ExentError(ERR_INVALID_DATE, "invalid date: {!r}".format(text), pos)


def to_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_iso_date(dt: datetime) -> str:
    """Render as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    dt = to_utc(dt)
    return "{:04d}-{:02d}-{:02d}T{:02d}:{:02d}:{:02d}.{:03d}Z".format(
        dt.year, dt.month, dt.day, dt.hour, dt.minute, dt.second,
        dt.microsecond // 1000)


def date_to_millis(dt: datetime) -> int:
    return (to_utc(dt) - EPOCH) // _ONE_MS


def millis_to_date(ms: float, pos: Optional[int] = None) -> datetime:
    try:
        return EPOCH + timedelta(milliseconds=int(ms))
    except (ValueError, OverflowError):
        raise ExentError(ERR_INVALID_DATE, "date out of range: {!r}".format(ms), pos)
