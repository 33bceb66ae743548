from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple

import pandas as pd

from .calendar import HolidaysLike, holiday_set, roll_forward
from .utils import add_months

ALLOWED_FREQUENCIES = (1, 2, 3, 4, 6, 12)


class ScheduleRegime(str, Enum):
    """NORMAL: plain month stepping. CALENDAR_ADJUSTED: roll weekends/holidays forward."""
    NORMAL = "NORMAL"
    CALENDAR_ADJUSTED = "CALENDAR_ADJUSTED"


def build_schedule(
    issue: pd.Timestamp,
    maturity: pd.Timestamp,
    freq: int,
    holidays: HolidaysLike = None,
    regime: ScheduleRegime = ScheduleRegime.NORMAL,
) -> Tuple[pd.Timestamp, ...]:
    """
    Coupon dates from issue to maturity inclusive.

    Every date is issue + i * (12 / freq) months, so a roll-forward on one
    coupon never shifts the next. The first date past maturity is replaced
    by maturity itself and generation stops.
    """
    issue = pd.Timestamp(issue).normalize()
    maturity = pd.Timestamp(maturity).normalize()

    if freq not in ALLOWED_FREQUENCIES:
        raise ValueError(f"Unsupported frequency {freq}; expected one of {ALLOWED_FREQUENCIES}.")
    if issue >= maturity:
        raise ValueError(f"Issue date {issue.date()} must precede maturity {maturity.date()}.")

    months = 12 // freq
    adjust = ScheduleRegime(regime) is ScheduleRegime.CALENDAR_ADJUSTED
    days_off = holiday_set(holidays) if adjust else frozenset()

    dates = [issue]
    d = issue
    i = 1
    while d < maturity:
        d = add_months(issue, i * months)
        if adjust:
            d = roll_forward(d, days_off)
        i += 1
        if d > maturity:
            dates.append(maturity)
            break
        dates.append(d)

    return tuple(dates)


def find_prev_next(
    schedule: Tuple[pd.Timestamp, ...],
    settle: pd.Timestamp,
) -> Tuple[Optional[pd.Timestamp], Optional[pd.Timestamp]]:
    """(latest coupon date <= settle, earliest coupon date > settle)."""
    settle = pd.Timestamp(settle)
    prev = None
    nxt = None
    for d in schedule:
        if d <= settle:
            prev = d
        elif nxt is None:
            nxt = d
    return prev, nxt
