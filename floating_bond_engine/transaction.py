"""
Buy-then-sell round trip on a floating-rate bond.

Leg 1 buys at a discount yield; leg 2 sells at whatever price delivers a
target annualized holding return on the total investment, after coupons
received while holding.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

import pandas as pd

from . import config
from .bonds import Bond, PricingParams, price_floating_bond
from .calendar import HolidaysLike, holiday_set
from .rates import coupon_rate
from .recording import recording_start_date
from .utils import actual_days, as_date, round_half_up, yearfrac
from .ytm import YieldResult, solve_yield

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransactionParams:
    bond: Bond
    num_bonds: int
    buy_date: pd.Timestamp
    discount_yield: float
    sell_date: pd.Timestamp
    holding_rate: float
    cover_fees: bool = False
    holidays: HolidaysLike = None
    bank_rate_average: float = 0.0
    fee_rate: Optional[float] = None
    institutional: bool = False

    @property
    def effective_fee_rate(self) -> float:
        return self.bond.fee_rate if self.fee_rate is None else self.fee_rate

    @property
    def coupon_tax_rate(self) -> float:
        return config.INSTITUTIONAL_COUPON_TAX_RATE if self.institutional else config.COUPON_TAX_RATE


@dataclass(frozen=True)
class PurchaseLeg:
    payment_date: pd.Timestamp
    discount_yield: float
    price_per_bond: float
    settlement_amount: float
    transaction_fee: float
    total_investment: float
    in_recording_period: bool
    upcoming_coupon_date: Optional[pd.Timestamp]
    recording_start_date: Optional[pd.Timestamp]


@dataclass(frozen=True)
class SaleLeg:
    payment_date: pd.Timestamp
    holding_rate: float
    price_per_bond: float
    market_price_per_bond: float
    settlement_amount: float
    transaction_fee: float
    transfer_tax: float
    transfer_fee: float
    total_received: float
    remaining_yield: YieldResult
    in_recording_period: bool
    upcoming_coupon_date: Optional[pd.Timestamp]
    recording_start_date: Optional[pd.Timestamp]


@dataclass(frozen=True)
class CouponReceipt:
    payment_date: pd.Timestamp
    payment_index: int
    record_date: pd.Timestamp
    rate: float
    gross_amount: float
    tax: float
    net_amount: float


@dataclass(frozen=True)
class ProfitSummary:
    days_holding: int
    expected_interest: float
    target_amount: float
    coupons_received: float
    coupon_tax: float
    net_coupons: float
    total_profit: float
    holding_interest_rate: float


@dataclass(frozen=True)
class TransactionResult:
    leg1: PurchaseLeg
    leg2: SaleLeg
    coupons: Tuple[CouponReceipt, ...]
    profit: ProfitSummary


def coupons_while_holding(
    bond: Bond,
    buy_date: pd.Timestamp,
    sell_date: pd.Timestamp,
    num_bonds: int,
    tax_rate: float,
    holidays: HolidaysLike = None,
    bank_rate_average: float = 0.0,
) -> Tuple[CouponReceipt, ...]:
    """
    Coupons collected by a holder from buy_date to sell_date.

    A coupon counts when its record date (coupon date minus the recording
    window) lies in [buy_date, sell_date): the buyer is on record and has
    not yet sold when the register closes.
    """
    days_off = holiday_set(holidays)
    schedule = bond.schedule(days_off)

    receipts = []
    for i in range(1, len(schedule)):
        coupon_date = schedule[i]
        record_date = recording_start_date(coupon_date, bond.recording_days, days_off)
        if not (buy_date <= record_date < sell_date):
            continue

        rate = coupon_rate(bond.interest_schedule, i, bank_rate_average)
        gross = bond.face_value * rate * yearfrac(schedule[i - 1], coupon_date) * num_bonds
        tax = gross * tax_rate
        receipts.append(
            CouponReceipt(
                payment_date=coupon_date,
                payment_index=i,
                record_date=record_date,
                rate=rate,
                gross_amount=gross,
                tax=tax,
                net_amount=gross - tax,
            )
        )
    return tuple(receipts)


def transfer_fee(num_bonds: int) -> float:
    return min(config.TRANSFER_FEE_CAP, num_bonds * config.TRANSFER_FEE_PER_BOND)


def calculate_transaction(params: TransactionParams) -> TransactionResult:
    bond = params.bond
    n = params.num_bonds
    buy_date = as_date(params.buy_date)
    sell_date = as_date(params.sell_date)

    if n <= 0:
        raise ValueError("num_bonds must be positive.")
    if sell_date <= buy_date:
        raise ValueError(f"Sell date {sell_date.date()} must be after buy date {buy_date.date()}.")

    days_off = holiday_set(params.holidays)
    fee_rate = params.effective_fee_rate

    # ---- Leg 1: purchase ----
    buy_px = price_floating_bond(bond, buy_date, params.discount_yield, days_off, params.bank_rate_average)
    price1 = float(math.ceil(buy_px.dirty_price))
    settlement1 = price1 * n
    fee1 = settlement1 * fee_rate
    total_investment = settlement1 + fee1

    leg1 = PurchaseLeg(
        payment_date=buy_date,
        discount_yield=params.discount_yield,
        price_per_bond=price1,
        settlement_amount=settlement1,
        transaction_fee=fee1,
        total_investment=total_investment,
        in_recording_period=buy_px.in_recording_period,
        upcoming_coupon_date=buy_px.upcoming_coupon_date,
        recording_start_date=buy_px.recording_start_date,
    )

    # ---- Coupons while holding ----
    coupons = coupons_while_holding(
        bond, buy_date, sell_date, n, params.coupon_tax_rate, days_off, params.bank_rate_average
    )
    gross_coupons = sum(c.gross_amount for c in coupons)
    coupon_tax = sum(c.tax for c in coupons)
    net_coupons = sum(c.net_amount for c in coupons)

    days_holding = actual_days(buy_date, sell_date)
    target_amount = total_investment * (1.0 + params.holding_rate / 100.0 * days_holding / config.DAYS_PER_YEAR)

    # ---- Leg 2: sale ----
    t_fee = transfer_fee(n)
    if params.cover_fees:
        gross_up = (target_amount - net_coupons + t_fee) / (1.0 - fee_rate - config.TRANSFER_TAX_RATE)
        price2 = float(round_half_up(gross_up / n))
        settlement2 = price2 * n
        fee2 = settlement2 * fee_rate
        t_tax = settlement2 * config.TRANSFER_TAX_RATE
        total_received = settlement2 - fee2 - t_tax - t_fee + net_coupons
    else:
        settlement2 = target_amount - net_coupons
        price2 = settlement2 / n
        fee2 = settlement2 * fee_rate
        t_tax = settlement2 * config.TRANSFER_TAX_RATE
        total_received = settlement2 + net_coupons

    sell_params = PricingParams(bond, sell_date, days_off, params.bank_rate_average)
    market_px = sell_params.price(params.discount_yield)
    remaining = solve_yield(price2, sell_params, initial_guess=params.holding_rate)

    leg2 = SaleLeg(
        payment_date=sell_date,
        holding_rate=params.holding_rate,
        price_per_bond=price2,
        market_price_per_bond=float(math.ceil(market_px.dirty_price)),
        settlement_amount=settlement2,
        transaction_fee=fee2,
        transfer_tax=t_tax,
        transfer_fee=t_fee,
        total_received=total_received,
        remaining_yield=remaining,
        in_recording_period=market_px.in_recording_period,
        upcoming_coupon_date=market_px.upcoming_coupon_date,
        recording_start_date=market_px.recording_start_date,
    )

    # ---- Profit ----
    if params.cover_fees:
        total_profit = total_received - total_investment
    else:
        total_profit = total_received - total_investment - t_fee - t_tax - fee2

    holding_interest_rate = total_profit / total_investment * config.DAYS_PER_YEAR / days_holding * 100.0

    profit = ProfitSummary(
        days_holding=days_holding,
        expected_interest=target_amount - total_investment,
        target_amount=target_amount,
        coupons_received=gross_coupons,
        coupon_tax=coupon_tax,
        net_coupons=net_coupons,
        total_profit=total_profit,
        holding_interest_rate=holding_interest_rate,
    )

    logger.debug(
        "%s: %d bonds %s -> %s, profit %.0f (%.3f%% p.a.)",
        bond.code, n, buy_date.date(), sell_date.date(), total_profit, holding_interest_rate,
    )
    return TransactionResult(leg1=leg1, leg2=leg2, coupons=coupons, profit=profit)
