# waterbill/extractors/dates.py
from __future__ import annotations
from datetime import datetime
from typing import Optional, Tuple

from .errors import DateParseFailure
from .patterns import DATE_TOKEN_RE

DATE_FMT = "%d/%m/%Y"


def normalize_date(text: Optional[str]) -> Optional[str]:
    """First D/M/Y-like token as DD/MM/YYYY; 2-digit years are 20YY."""
    m = DATE_TOKEN_RE.search(text or "")
    if not m:
        return None
    dd, mm, yy = m.groups()
    yyyy = "20" + yy if len(yy) == 2 else yy
    return f"{dd.zfill(2)}/{mm.zfill(2)}/{yyyy}"


def _parse(date_str: str) -> datetime:
    try:
        return datetime.strptime(date_str, DATE_FMT)
    except ValueError as e:
        raise DateParseFailure(f"invalid date {date_str!r}") from e


def day_count(start: str, end: str) -> int:
    return abs((_parse(end) - _parse(start)).days)


def billing_period(start: Optional[str], end: Optional[str]) -> Optional[Tuple[str, str]]:
    """
    ("start - end", days) for two raw date strings, or None when either side
    is missing or not a calendar date.
    """
    s, e = normalize_date(start), normalize_date(end)
    if not (s and e):
        return None
    try:
        days = day_count(s, e)
    except DateParseFailure:
        return None
    return f"{s} - {e}", str(days)
