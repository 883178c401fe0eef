# Overview: UTC helpers for timestamps stored by the ledger and rendered on the wire.

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current time as a naive UTC datetime, matching what the store keeps."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Read a date or datetime filter/field value.

    Accepts "2026-01-31", "2026-01-31T08:00" and offset forms such as
    "...Z" or "...+02:00". Offsets are folded into UTC and dropped, so the
    result compares directly against stored columns. Blank input is None;
    anything unparseable raises ValueError.
    """
    if value is None or not value.strip():
        return None

    raw = value.strip()
    if raw[-1] in "zZ":
        raw = f"{raw[:-1]}+00:00"

    parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def to_utc_z(moment: Optional[datetime]) -> Optional[str]:
    """Second-precision ISO-8601 with a trailing Z; naive values are taken as UTC."""
    if moment is None:
        return None
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment.replace(microsecond=0).isoformat() + "Z"
