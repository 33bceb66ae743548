from __future__ import annotations

import pandas as pd
from typing import Iterable, List, Optional

from . import config
from .bonds import Bond, price_floating_bond
from .calendar import HolidaysLike, holiday_set
from .rates import BankRateTable
from .recording import is_in_recording_period
from .schedule import find_prev_next
from .utils import add_months, as_date


def qc_flags_for_bond(bond: Bond, settle: pd.Timestamp, in_recording: bool = False) -> List[str]:
    flags: List[str] = []

    if pd.Timestamp(settle) >= bond.maturity_date:
        flags.append("MATURED")

    if in_recording:
        flags.append("RECORDING")

    if not bond.reference_banks and any(s.is_floating for s in bond.interest_schedule):
        flags.append("NO_REFERENCE_BANKS")

    return flags


def price_portfolio(
    bonds: Iterable[Bond],
    settle: pd.Timestamp,
    yield_pct: float,
    holidays: HolidaysLike = None,
    bank_rates: Optional[BankRateTable] = None,
) -> pd.DataFrame:
    """One pricing row per bond at a common settlement date and yield."""
    settle = as_date(settle)
    days_off = holiday_set(holidays)
    bank_rates = bank_rates or BankRateTable()

    rows = []
    for bond in bonds:
        avg = bank_rates.average(bond.reference_banks)
        r = price_floating_bond(bond, settle, yield_pct, days_off, avg)
        flags = qc_flags_for_bond(bond, settle, r.in_recording_period)
        rows.append(
            {
                "code": bond.code,
                "maturity": bond.maturity_date,
                "avg_bank_rate": avg,
                "dirty": r.dirty_price,
                "clean": r.clean_price,
                "accrued": r.accrued_interest,
                "next_coupon": r.next_coupon,
                "in_recording_period": r.in_recording_period,
                "flags": "|".join(flags),
            }
        )

    columns = ["code", "maturity", "avg_bank_rate", "dirty", "clean", "accrued",
               "next_coupon", "in_recording_period", "flags"]
    return pd.DataFrame(rows, columns=columns)


# ---------- Holding-period screening ----------

def has_coupon_in_period(
    bond: Bond,
    start: pd.Timestamp,
    end: pd.Timestamp,
    holidays: HolidaysLike = None,
) -> bool:
    """
    True if a coupon is paid in (start, end], or if `end` falls inside the
    recording window of a later coupon (the sale would lose it).
    """
    days_off = holiday_set(holidays)
    for coupon_date in bond.schedule(days_off):
        if start < coupon_date <= end:
            return True
        if coupon_date > end and is_in_recording_period(end, coupon_date, bond.recording_days, days_off):
            return True
    return False


def bonds_for_holding_period(
    bonds: Iterable[Bond],
    start: pd.Timestamp,
    duration: str,
    holidays: HolidaysLike = None,
) -> pd.DataFrame:
    """
    Candidate bonds for holding from `start` over `duration` ("1M" .. "1Y").

    Short durations keep only bonds with no coupon in the period; longer ones
    keep every live bond and report has_coupon. Sorted by next coupon,
    latest first.
    """
    if duration not in config.HOLDING_PERIOD_MONTHS:
        raise ValueError(f"Unknown duration {duration!r}; expected one of {list(config.HOLDING_PERIOD_MONTHS)}.")

    start = as_date(start)
    end = add_months(start, config.HOLDING_PERIOD_MONTHS[duration])
    days_off = holiday_set(holidays)
    coupon_free_only = duration in config.COUPON_FREE_DURATIONS

    rows = []
    for bond in bonds:
        if bond.maturity_date <= start:
            continue

        has_coupon = has_coupon_in_period(bond, start, end, days_off)
        if coupon_free_only and has_coupon:
            continue

        _, next_coupon = find_prev_next(bond.schedule(days_off), start)
        rows.append({"code": bond.code, "next_coupon": next_coupon, "has_coupon": has_coupon})

    out = pd.DataFrame(rows, columns=["code", "next_coupon", "has_coupon"])
    return out.sort_values("next_coupon", ascending=False, na_position="last").reset_index(drop=True)


def offered_rate(category: str, duration: str) -> float:
    """Reference offered holding rate (percent p.a.)."""
    try:
        return config.OFFERED_RATES[category][duration]
    except KeyError:
        raise ValueError(f"No offered rate for {category!r} / {duration!r}.") from None
