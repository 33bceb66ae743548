"""
Recording period: the working days before a coupon date during which the
coupon belongs to the holder already on record. A settlement inside the
window does not receive that coupon.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pandas as pd

from .calendar import HolidaysLike, subtract_working_days


@dataclass(frozen=True)
class RecordingStatus:
    in_recording_period: bool
    coupon_date: Optional[pd.Timestamp]
    recording_start_date: Optional[pd.Timestamp]


def recording_start_date(
    coupon_date: pd.Timestamp,
    recording_days: int,
    holidays: HolidaysLike = None,
) -> pd.Timestamp:
    return subtract_working_days(coupon_date, recording_days, holidays)


def is_in_recording_period(
    settle: pd.Timestamp,
    coupon_date: pd.Timestamp,
    recording_days: int,
    holidays: HolidaysLike = None,
) -> bool:
    settle = pd.Timestamp(settle)
    start = recording_start_date(coupon_date, recording_days, holidays)
    return start <= settle < pd.Timestamp(coupon_date)


def recording_status(
    settle: pd.Timestamp,
    coupon_date: Optional[pd.Timestamp],
    recording_days: int,
    holidays: HolidaysLike = None,
) -> RecordingStatus:
    if coupon_date is None:
        return RecordingStatus(False, None, None)

    start = recording_start_date(coupon_date, recording_days, holidays)
    inside = start <= pd.Timestamp(settle) < pd.Timestamp(coupon_date)
    return RecordingStatus(inside, pd.Timestamp(coupon_date), start)
