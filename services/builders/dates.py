"""Serialization helpers for date ranges and zoned date-times."""

import re
from datetime import date as date_type
from typing import Dict, Optional

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_PATTERN = re.compile(r"^([01][0-9]|2[0-3]):[0-5][0-9](:[0-5][0-9])?$")
DATE_TIME_PATTERN = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})"
    r"(?:T(?P<time>\d{2}:\d{2}(?::\d{2})?))?"
    r"(?:\[(?P<timezone>[^\]]+)\])?$"
)


def _clean(value: Optional[str]) -> str:
    return value.strip() if isinstance(value, str) else ""


def serialize_date_entry(start_date: Optional[str], end_date: Optional[str]) -> str:
    """'start', '/end' or 'start/end'; empty when neither is set."""
    start, end = _clean(start_date), _clean(end_date)
    if start and end:
        return f"{start}/{end}"
    if end:
        return f"/{end}"
    return start


def parse_date_entry(value: Optional[str]) -> Dict[str, str]:
    """Inverse of serialize_date_entry."""
    text = _clean(value)
    if "/" not in text:
        return {"startDate": text, "endDate": ""}
    start, end = text.split("/", 1)
    return {"startDate": start.strip(), "endDate": end.strip()}


def build_date_time(date: Optional[str], time: Optional[str] = None, timezone: Optional[str] = None) -> str:
    """Combine date, optional time and optional zone as 'YYYY-MM-DDTHH:MM[:SS][Zone]'."""
    day, clock, zone = _clean(date), _clean(time), _clean(timezone)
    if not day:
        return ""

    if not DATE_PATTERN.match(day):
        raise ValueError(f"Invalid date: {date!r}")
    date_type.fromisoformat(day)
    if clock and not TIME_PATTERN.match(clock):
        raise ValueError(f"Invalid time: {time!r}")
    if "[" in zone or "]" in zone:
        raise ValueError(f"Invalid timezone: {timezone!r}")

    value = day
    if clock:
        value += f"T{clock}"
    if zone:
        value += f"[{zone}]"
    return value


def parse_date_time(value: Optional[str]) -> Dict[str, str]:
    """Split a value produced by build_date_time back into its parts."""
    text = _clean(value)
    if not text:
        return {"date": "", "time": "", "timezone": ""}

    match = DATE_TIME_PATTERN.match(text)
    if not match:
        raise ValueError(f"Invalid date-time value: {value!r}")
    return {
        "date": match.group("date"),
        "time": match.group("time") or "",
        "timezone": match.group("timezone") or "",
    }
