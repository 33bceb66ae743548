from __future__ import annotations

import numpy as np
import pandas as pd
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Optional, Tuple

from . import config
from .calendar import HolidaysLike, holiday_set
from .rates import BankRateTable, RateStep, coupon_rate, payment_index
from .recording import recording_status
from .schedule import ALLOWED_FREQUENCIES, ScheduleRegime, build_schedule, find_prev_next
from .utils import as_date, yearfrac


class ListingClass(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


LISTING_FEE_RATES = {
    ListingClass.PUBLIC: config.PUBLIC_FEE_RATE,
    ListingClass.PRIVATE: config.PRIVATE_FEE_RATE,
}


@dataclass(frozen=True)
class Bond:
    code: str
    issue_date: pd.Timestamp
    maturity_date: pd.Timestamp
    frequency: int
    face_value: float
    interest_schedule: Tuple[RateStep, ...]
    reference_banks: Tuple[str, ...] = ()
    recording_days: int = config.DEFAULT_RECORDING_DAYS
    listing: ListingClass = ListingClass.PUBLIC
    regime: ScheduleRegime = ScheduleRegime.NORMAL

    def __post_init__(self):
        object.__setattr__(self, "issue_date", as_date(self.issue_date))
        object.__setattr__(self, "maturity_date", as_date(self.maturity_date))
        object.__setattr__(self, "interest_schedule", tuple(self.interest_schedule))
        object.__setattr__(self, "reference_banks", tuple(self.reference_banks))
        object.__setattr__(self, "listing", ListingClass(self.listing))
        object.__setattr__(self, "regime", ScheduleRegime(self.regime))

        if self.issue_date >= self.maturity_date:
            raise ValueError(f"{self.code}: issue date must precede maturity.")
        if self.frequency not in ALLOWED_FREQUENCIES:
            raise ValueError(f"{self.code}: unsupported frequency {self.frequency}.")
        if not self.face_value > 0:
            raise ValueError(f"{self.code}: face value must be positive.")
        if self.recording_days < 0:
            raise ValueError(f"{self.code}: recording days must be non-negative.")

        steps = self.interest_schedule
        if not steps or steps[0].payment != 0:
            raise ValueError(f"{self.code}: interest schedule must start at payment 0.")
        if any(steps[i].payment >= steps[i + 1].payment for i in range(len(steps) - 1)):
            raise ValueError(f"{self.code}: interest schedule must be sorted by payment.")

    @property
    def fee_rate(self) -> float:
        return LISTING_FEE_RATES[self.listing]

    def schedule(self, holidays: HolidaysLike = None) -> Tuple[pd.Timestamp, ...]:
        return build_schedule(self.issue_date, self.maturity_date, self.frequency, holidays, self.regime)


@dataclass(frozen=True)
class CashFlow:
    payment_date: pd.Timestamp
    payment_index: int
    year_fraction: float
    rate: float
    coupon_amount: float
    principal: float
    gross_amount: float
    discount_factor: float
    present_value: float
    skipped: bool = False
    reason: str = ""


@dataclass(frozen=True)
class PricingResult:
    settle: pd.Timestamp
    yield_pct: float
    dirty_price: float
    clean_price: float
    accrued_interest: float
    previous_coupon: Optional[pd.Timestamp]
    next_coupon: Optional[pd.Timestamp]
    cash_flows: Tuple[CashFlow, ...] = field(default_factory=tuple)
    in_recording_period: bool = False
    upcoming_coupon_date: Optional[pd.Timestamp] = None
    recording_start_date: Optional[pd.Timestamp] = None

    def to_frame(self) -> pd.DataFrame:
        columns = [f.name for f in fields(CashFlow)]
        return pd.DataFrame([asdict(cf) for cf in self.cash_flows], columns=columns)


def price_floating_bond(
    bond: Bond,
    settle: pd.Timestamp,
    yield_pct: float,
    holidays: HolidaysLike = None,
    bank_rate_average: float = 0.0,
) -> PricingResult:
    """
    Dirty/clean price and cash flows of a (floating-rate) bond in currency
    units per bond, discounted at an annual yield in percent:

        DF(t) = (1 + y/100) ** -yearfrac(settle, t)

    If settlement falls in the recording period of the next coupon, that
    coupon is emitted as a skipped zero cash flow and accrued interest is 0.
    """
    settle = as_date(settle)
    days_off = holiday_set(holidays)

    schedule = bond.schedule(days_off)
    prev, nxt = find_prev_next(schedule, settle)

    status = recording_status(settle, nxt, bond.recording_days, days_off)
    excluded = nxt if status.in_recording_period else None

    accrued = 0.0
    if nxt is not None and prev is not None and excluded is None:
        rate = coupon_rate(bond.interest_schedule, payment_index(schedule, prev), bank_rate_average)
        accrued = bond.face_value * rate * yearfrac(prev, settle)

    rows = []
    # index 0 is the issue date itself, never a payment
    for i, pay_date in enumerate(schedule[1:], start=1):
        if pay_date <= settle:
            continue

        prior = schedule[i - 1]
        yf = yearfrac(prior, pay_date)
        rate = coupon_rate(bond.interest_schedule, i, bank_rate_average)
        coupon = bond.face_value * rate * yf
        principal = bond.face_value if pay_date == bond.maturity_date else 0.0

        if pay_date == excluded:
            rows.append((pay_date, i, yf, rate, 0.0, 0.0, yearfrac(settle, pay_date), True))
        else:
            rows.append((pay_date, i, yf, rate, coupon, principal, yearfrac(settle, pay_date), False))

    cash_flows: Tuple[CashFlow, ...] = ()
    dirty = 0.0
    if rows:
        amounts = np.array([r[4] + r[5] for r in rows], dtype=float)
        taus = np.array([r[6] for r in rows], dtype=float)
        dfs = np.power(1.0 + yield_pct / 100.0, -taus)
        pvs = amounts * dfs
        dirty = float(np.sum(pvs))

        cash_flows = tuple(
            CashFlow(
                payment_date=pay_date,
                payment_index=idx,
                year_fraction=yf,
                rate=rate,
                coupon_amount=coupon,
                principal=principal,
                gross_amount=float(amounts[k]),
                discount_factor=float(dfs[k]),
                present_value=float(pvs[k]),
                skipped=skipped,
                reason="recording period" if skipped else "",
            )
            for k, (pay_date, idx, yf, rate, coupon, principal, _, skipped) in enumerate(rows)
        )

    return PricingResult(
        settle=settle,
        yield_pct=float(yield_pct),
        dirty_price=dirty,
        clean_price=dirty - accrued,
        accrued_interest=accrued,
        previous_coupon=prev,
        next_coupon=nxt,
        cash_flows=cash_flows,
        in_recording_period=status.in_recording_period,
        upcoming_coupon_date=status.coupon_date,
        recording_start_date=status.recording_start_date,
    )


def price_fixed_bond(
    face_value: float,
    coupon_pct: float,
    yield_pct: float,
    freq: int,
    issue: pd.Timestamp,
    settle: pd.Timestamp,
    maturity: pd.Timestamp,
) -> Tuple[float, float, float]:
    """
    Fixed-coupon bond on an unadjusted issue-anchored schedule.
    Returns (dirty, clean, accrued) in currency units; discounting compounds
    per coupon period: DF(t) = (1 + y/100/f) ** (-f * t).
    """
    settle = as_date(settle)
    maturity = as_date(maturity)
    schedule = build_schedule(issue, maturity, freq)
    prev, nxt = find_prev_next(schedule, settle)

    if nxt is None:
        return 0.0, 0.0, 0.0

    accrued = face_value * (coupon_pct / 100.0) * yearfrac(prev, settle) if prev is not None else 0.0

    periods = [(schedule[i - 1], d) for i, d in enumerate(schedule) if i > 0 and d > settle]
    pay_dates = [d for _, d in periods]
    yfs = np.array([yearfrac(p, d) for p, d in periods], dtype=float)
    cfs = face_value * (coupon_pct / 100.0) * yfs
    cfs[-1] += face_value

    taus = np.array([yearfrac(settle, d) for d in pay_dates], dtype=float)
    dfs = np.power(1.0 + (yield_pct / 100.0) / freq, -freq * taus)

    dirty = float(np.sum(cfs * dfs))
    return dirty, dirty - accrued, accrued


@dataclass(frozen=True)
class PricingParams:
    """Everything needed to price a bond except the yield."""
    bond: Bond
    settle: pd.Timestamp
    holidays: HolidaysLike = None
    bank_rate_average: float = 0.0

    def price(self, yield_pct: float) -> PricingResult:
        return price_floating_bond(self.bond, self.settle, yield_pct, self.holidays, self.bank_rate_average)


class BondPricer:
    def __init__(self, bank_rates: Optional[BankRateTable] = None, holidays: HolidaysLike = None):
        self.bank_rates = bank_rates or BankRateTable()
        # expand once; the calendar is treated as a snapshot for this pricer
        self.holidays = holiday_set(holidays)

    def validate(self, bond: Bond, settle: pd.Timestamp) -> None:
        if not isinstance(bond, Bond):
            raise TypeError(f"Expected Bond, got {type(bond).__name__}.")
        if settle is None:
            raise ValueError(f"{bond.code}: settlement date is required.")

        dates = bond.schedule(self.holidays)
        if any(dates[i] >= dates[i + 1] for i in range(len(dates) - 1)):
            raise ValueError(f"{bond.code}: non-increasing schedule.")

    def params(self, bond: Bond, settle: pd.Timestamp) -> PricingParams:
        return PricingParams(bond, as_date(settle), self.holidays, self.bank_rates.average(bond.reference_banks))

    def price(self, bond: Bond, settle: pd.Timestamp, yield_pct: float) -> PricingResult:
        self.validate(bond, settle)
        return self.params(bond, settle).price(yield_pct)
