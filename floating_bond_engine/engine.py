"""
Entry points for callers holding raw user input (date strings such as
"15/03/2025", amounts such as "101.250.000").

Each returns the populated result or an InputError; nothing here raises for
bad user input. Invalid Bond objects or wrong argument types still raise.
"""
from __future__ import annotations

import math
from dataclasses import replace
from typing import Optional, Union

import pandas as pd

from . import config
from .bonds import Bond, PricingParams, PricingResult, price_floating_bond
from .calendar import HolidaysLike
from .errors import INVALID_AMOUNT, INVALID_DATE, INVALID_RANGE, InputError
from .rates import BankRateTable
from .transaction import TransactionParams, TransactionResult, calculate_transaction
from .utils import DateLike, as_date, parse_amount_input, parse_date
from .ytm import YieldResult, solve_yield

Amount = Union[str, float, int]


def _date_or_error(value: Optional[DateLike], field: str) -> Union[pd.Timestamp, InputError]:
    d = parse_date(value) if isinstance(value, str) or value is None else as_date(value)
    if d is None:
        return InputError(
            message=f"Invalid date format for {field} (DD/MM/YYYY)",
            code=INVALID_DATE,
            field=field,
            value=str(value),
        )
    return d


def _amount_or_error(value: Optional[Amount], field: str) -> Union[float, InputError]:
    amount = parse_amount_input(value) if isinstance(value, str) or value is None else float(value)
    if amount is None or not math.isfinite(amount) or amount <= 0:
        return InputError(
            message=f"{field} must be a positive number",
            code=INVALID_AMOUNT,
            field=field,
            value=str(value),
        )
    return amount


def _count_or_error(value: Optional[Amount], field: str) -> Union[int, InputError]:
    """Whole positive count: an int, an integral float, or digit text ("1.000")."""
    amount = _amount_or_error(value, field)
    if isinstance(amount, InputError):
        return amount
    if not amount.is_integer():
        return InputError(
            message=f"{field} must be a whole number",
            code=INVALID_AMOUNT,
            field=field,
            value=str(value),
        )
    return int(amount)


def _rate_or_error(value: Optional[Union[str, float, int]], field: str) -> Union[float, InputError]:
    """Percent rate as a number or text ("6.8", "6,8"). May be zero or negative."""
    try:
        rate = float(value.strip().replace(",", ".")) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        rate = None
    if rate is None or not math.isfinite(rate):
        return InputError(
            message=f"{field} must be a number (percent)",
            code=INVALID_AMOUNT,
            field=field,
            value=str(value),
        )
    return rate


def _average(bond: Bond, bank_rates: Optional[BankRateTable]) -> float:
    return bank_rates.average(bond.reference_banks) if bank_rates is not None else 0.0


def quote_price(
    bond: Bond,
    settle: Optional[DateLike],
    yield_pct: Union[str, float],
    holidays: HolidaysLike = None,
    bank_rates: Optional[BankRateTable] = None,
    face_value: Optional[Amount] = None,
) -> Union[PricingResult, InputError]:
    """
    Price at a yield. `face_value`, when given, overrides the bond's face
    value for this quote only.
    """
    d = _date_or_error(settle, "settle")
    if isinstance(d, InputError):
        return d
    y = _rate_or_error(yield_pct, "yield_pct")
    if isinstance(y, InputError):
        return y

    if face_value is not None:
        fv = _amount_or_error(face_value, "face_value")
        if isinstance(fv, InputError):
            return fv
        bond = replace(bond, face_value=fv)

    return price_floating_bond(bond, d, y, holidays, _average(bond, bank_rates))


def quote_yield(
    bond: Bond,
    settle: Optional[DateLike],
    target_price: Optional[Amount],
    holidays: HolidaysLike = None,
    bank_rates: Optional[BankRateTable] = None,
    initial_guess: float = config.YTM_INITIAL_GUESS,
) -> Union[YieldResult, InputError]:
    d = _date_or_error(settle, "settle")
    if isinstance(d, InputError):
        return d
    price = _amount_or_error(target_price, "target_price")
    if isinstance(price, InputError):
        return price

    params = PricingParams(bond, d, holidays, _average(bond, bank_rates))
    return solve_yield(price, params, initial_guess=initial_guess)


def quote_transaction(
    bond: Bond,
    num_bonds: Amount,
    buy_date: Optional[DateLike],
    discount_yield: Union[str, float],
    sell_date: Optional[DateLike],
    holding_rate: Union[str, float],
    cover_fees: bool = False,
    holidays: HolidaysLike = None,
    bank_rates: Optional[BankRateTable] = None,
    fee_rate: Optional[float] = None,
    institutional: bool = False,
) -> Union[TransactionResult, InputError]:
    buy = _date_or_error(buy_date, "buy_date")
    if isinstance(buy, InputError):
        return buy
    sell = _date_or_error(sell_date, "sell_date")
    if isinstance(sell, InputError):
        return sell

    if sell <= buy:
        return InputError(
            message="Selling date must be after buying date",
            code=INVALID_RANGE,
            field="sell_date",
            value=str(sell_date),
        )

    n = _count_or_error(num_bonds, "num_bonds")
    if isinstance(n, InputError):
        return n
    buy_yield = _rate_or_error(discount_yield, "discount_yield")
    if isinstance(buy_yield, InputError):
        return buy_yield
    target_rate = _rate_or_error(holding_rate, "holding_rate")
    if isinstance(target_rate, InputError):
        return target_rate

    params = TransactionParams(
        bond=bond,
        num_bonds=n,
        buy_date=buy,
        discount_yield=buy_yield,
        sell_date=sell,
        holding_rate=target_rate,
        cover_fees=cover_fees,
        holidays=holidays,
        bank_rate_average=_average(bond, bank_rates),
        fee_rate=fee_rate,
        institutional=institutional,
    )
    return calculate_transaction(params)
