from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Sequence

import pandas as pd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateStep:
    """
    Coupon rate in force from coupon number `payment` onwards.

    rate is a decimal (0.025 = 2.5%). For floating steps it is the spread
    over the average reference bank deposit rate.
    """
    payment: int
    rate: float
    is_floating: bool = False
    floor_rate: Optional[float] = None


ZERO_STEP = RateStep(payment=0, rate=0.0)


@dataclass(frozen=True)
class BankRateTable:
    rates: Mapping[str, float] = field(default_factory=dict)
    last_updated: Optional[str] = None

    def average(self, banks: Iterable[str]) -> float:
        return average_bank_rate(banks, self.rates)


def average_bank_rate(banks: Iterable[str], rates: Mapping[str, float]) -> float:
    """Mean deposit rate over the reference banks found in `rates`; 0.0 if none."""
    found = []
    for bank in banks or ():
        if bank in rates:
            found.append(float(rates[bank]))
        else:
            logger.warning("Reference bank %s missing from bank rate table", bank)
    if not found:
        return 0.0
    return sum(found) / len(found)


def payment_index(schedule: Sequence[pd.Timestamp], d: pd.Timestamp) -> int:
    """0-based position of d in the schedule, len(schedule) if absent."""
    d = pd.Timestamp(d)
    for i, x in enumerate(schedule):
        if x == d:
            return i
    return len(schedule)


def resolve_rate(steps: Sequence[RateStep], index: int) -> RateStep:
    """Most recent step whose payment threshold is <= index."""
    for step in reversed(steps):
        if index >= step.payment:
            return step
    return steps[0] if steps else ZERO_STEP


def effective_rate(step: RateStep, average_bank_rate: float) -> float:
    rate = step.rate + (average_bank_rate if step.is_floating else 0.0)
    if step.floor_rate is not None and rate < step.floor_rate:
        rate = step.floor_rate
    return rate


def coupon_rate(steps: Sequence[RateStep], index: int, average_bank_rate: float) -> float:
    return effective_rate(resolve_rate(steps, index), average_bank_rate)
