"""
Business-day calendar: holiday expansion, roll-forward and working-day
subtraction. Weekends are Saturday and Sunday.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Mapping, Union

import pandas as pd

from .utils import as_date

ONE_DAY = pd.Timedelta(days=1)


@dataclass(frozen=True)
class HolidayCalendar:
    """Holiday start date -> number of consecutive calendar days off."""
    holidays: Mapping[pd.Timestamp, int] = field(default_factory=dict)

    def __post_init__(self):
        normalized = {}
        for start, duration in self.holidays.items():
            duration = int(duration)
            if duration < 1:
                raise ValueError(f"Holiday starting {start} has duration {duration} < 1.")
            normalized[as_date(start)] = duration
        object.__setattr__(self, "holidays", normalized)

    def expand(self) -> FrozenSet[pd.Timestamp]:
        days = set()
        for start, duration in self.holidays.items():
            for k in range(duration):
                days.add(start + pd.Timedelta(days=k))
        return frozenset(days)


HolidaysLike = Union[HolidayCalendar, Iterable[pd.Timestamp], None]


def holiday_set(holidays: HolidaysLike) -> FrozenSet[pd.Timestamp]:
    """
    Accepts a HolidayCalendar (expanded on every call), an already expanded
    collection of dates, or None.
    """
    if holidays is None:
        return frozenset()
    if isinstance(holidays, HolidayCalendar):
        return holidays.expand()
    if isinstance(holidays, frozenset):
        return holidays
    return frozenset(as_date(d) for d in holidays)


def is_weekend(d: pd.Timestamp) -> bool:
    return d.weekday() >= 5


def is_business_day(d: pd.Timestamp, holidays: HolidaysLike = None) -> bool:
    return not is_weekend(d) and pd.Timestamp(d).normalize() not in holiday_set(holidays)


def roll_forward(d: pd.Timestamp, holidays: HolidaysLike = None) -> pd.Timestamp:
    """Move a weekend or holiday date forward to the next business day."""
    days_off = holiday_set(holidays)
    result = pd.Timestamp(d).normalize()

    while is_weekend(result) or result in days_off:
        # Saturday jumps straight to Monday
        result += 2 * ONE_DAY if result.weekday() == 5 else ONE_DAY
    return result


def subtract_working_days(d: pd.Timestamp, n: int, holidays: HolidaysLike = None) -> pd.Timestamp:
    """
    Step back one calendar day at a time until n business days have been
    counted. The returned date is the n-th business day before d.
    """
    if n < 0:
        raise ValueError("n must be non-negative")

    days_off = holiday_set(holidays)
    result = pd.Timestamp(d).normalize()
    remaining = n

    while remaining > 0:
        result -= ONE_DAY
        if not is_weekend(result) and result not in days_off:
            remaining -= 1
    return result
