from __future__ import annotations

import math
import re
from datetime import date
from typing import Optional, Union

import pandas as pd

from . import config

DateLike = Union[pd.Timestamp, date, str]

_DMY = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_YMD = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")


def as_date(value: DateLike) -> pd.Timestamp:
    """Normalize a date-like value to a timezone-naive midnight Timestamp."""
    if value is None:
        raise TypeError("date value is required")
    if isinstance(value, str):
        parsed = parse_date(value)
        if parsed is None:
            raise ValueError(f"Unparseable date: {value!r}")
        return parsed
    return pd.Timestamp(value).normalize()


def add_months(d: pd.Timestamp, months: int) -> pd.Timestamp:
    """
    Calendar month addition. Day-of-month is clamped to the last valid day
    of the target month (31 Jan + 1M -> 28/29 Feb).
    """
    return pd.Timestamp(d) + pd.DateOffset(months=months)


def actual_days(start: pd.Timestamp, end: pd.Timestamp) -> int:
    """Whole calendar days from start to end (negative if end precedes start)."""
    return (pd.Timestamp(end).normalize() - pd.Timestamp(start).normalize()).days


def yearfrac(start: pd.Timestamp, end: pd.Timestamp) -> float:
    """Year fraction under Actual/365 fixed."""
    days = actual_days(start, end)
    if days < 0:
        raise ValueError(f"end < start: {start=} {end=}")
    return days / 365.0


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


# ---- text inputs ----

def parse_date(text: Optional[str]) -> Optional[pd.Timestamp]:
    """
    Parse "DD/MM/YYYY" (primary) or "YYYY-MM-DD" (fallback).

    Returns None for anything else, including impossible calendar dates.
    """
    if not text:
        return None
    text = text.strip()

    m = _DMY.match(text)
    if m:
        day, month, year = (int(g) for g in m.groups())
    else:
        m = _YMD.match(text)
        if not m:
            return None
        year, month, day = (int(g) for g in m.groups())

    try:
        return pd.Timestamp(year=year, month=month, day=day)
    except ValueError:
        return None


def format_date(d: Optional[pd.Timestamp]) -> str:
    if d is None:
        return "—"
    return pd.Timestamp(d).strftime(config.DATE_FORMAT)


def format_amount_input(text: str) -> str:
    """Keep digits only and group thousands with "." (1234567 -> 1.234.567)."""
    digits = re.sub(r"\D", "", text or "")
    if not digits:
        return ""
    return f"{int(digits):,}".replace(",", ".")


def parse_amount_input(text: Optional[str]) -> Optional[float]:
    """Inverse of format_amount_input. None when the text is not a number."""
    if text is None:
        return None
    cleaned = re.sub(r"[.,\s]", "", str(text))
    if not cleaned or not cleaned.isdigit():
        return None
    return float(cleaned)
