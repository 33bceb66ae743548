import pandas as pd
import pytest

from floating_bond_engine.calendar import (
    HolidayCalendar,
    holiday_set,
    is_business_day,
    roll_forward,
    subtract_working_days,
)
from floating_bond_engine.utils import (
    actual_days,
    add_months,
    format_amount_input,
    format_date,
    parse_amount_input,
    parse_date,
    round_half_up,
    yearfrac,
)


def test_add_months_clamps_to_month_end():
    assert add_months(pd.Timestamp("2024-01-31"), 1) == pd.Timestamp("2024-02-29")
    assert add_months(pd.Timestamp("2023-01-31"), 1) == pd.Timestamp("2023-02-28")
    assert add_months(pd.Timestamp("2024-08-31"), 6) == pd.Timestamp("2025-02-28")
    assert add_months(pd.Timestamp("2024-03-15"), 12) == pd.Timestamp("2025-03-15")


def test_actual_days_and_yearfrac():
    assert actual_days(pd.Timestamp("2024-01-01"), pd.Timestamp("2025-01-01")) == 366
    assert yearfrac(pd.Timestamp("2024-01-01"), pd.Timestamp("2025-01-01")) == pytest.approx(366 / 365)
    assert yearfrac(pd.Timestamp("2025-03-15"), pd.Timestamp("2025-03-15")) == 0.0


def test_yearfrac_rejects_reversed_dates():
    with pytest.raises(ValueError):
        yearfrac(pd.Timestamp("2025-02-01"), pd.Timestamp("2025-01-01"))


def test_parse_date_formats():
    assert parse_date("15/03/2025") == pd.Timestamp("2025-03-15")
    assert parse_date("5/3/2025") == pd.Timestamp("2025-03-05")
    assert parse_date("2025-03-15") == pd.Timestamp("2025-03-15")


@pytest.mark.parametrize("text", ["", None, "15.03.2025", "aa/bb/cccc", "31/02/2025", "2025/03/15", "15/03"])
def test_parse_date_invalid_returns_none(text):
    assert parse_date(text) is None


def test_format_date():
    assert format_date(pd.Timestamp("2025-01-05")) == "05/01/2025"
    assert parse_date(format_date(pd.Timestamp("2025-12-31"))) == pd.Timestamp("2025-12-31")


def test_amount_input_helpers():
    assert format_amount_input("100000000") == "100.000.000"
    assert format_amount_input("1a2b3") == "123"
    assert format_amount_input("") == ""
    assert parse_amount_input("100.000.000") == 100_000_000.0
    assert parse_amount_input("1,250") == 1250.0
    assert parse_amount_input("abc") is None
    assert parse_amount_input(None) is None


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(3.49) == 3


def test_holiday_calendar_expansion():
    cal = HolidayCalendar({"30/04/2025": 2, pd.Timestamp("2025-09-02"): 1})
    days = cal.expand()
    assert days == frozenset(
        {pd.Timestamp("2025-04-30"), pd.Timestamp("2025-05-01"), pd.Timestamp("2025-09-02")}
    )


def test_holiday_calendar_rejects_zero_duration():
    with pytest.raises(ValueError):
        HolidayCalendar({"01/01/2025": 0})


def test_holiday_set_accepts_calendar_iterable_or_none():
    cal = HolidayCalendar({"01/01/2025": 1})
    assert holiday_set(None) == frozenset()
    assert holiday_set(cal) == frozenset({pd.Timestamp("2025-01-01")})
    assert holiday_set(["2025-01-01"]) == frozenset({pd.Timestamp("2025-01-01")})


def test_is_business_day():
    assert not is_business_day(pd.Timestamp("2025-03-15"))  # Saturday
    assert is_business_day(pd.Timestamp("2025-03-14"))
    assert not is_business_day(pd.Timestamp("2025-03-14"), [pd.Timestamp("2025-03-14")])


def test_roll_forward_weekends():
    assert roll_forward(pd.Timestamp("2025-03-15")) == pd.Timestamp("2025-03-17")  # Sat -> Mon
    assert roll_forward(pd.Timestamp("2025-03-16")) == pd.Timestamp("2025-03-17")  # Sun -> Mon
    assert roll_forward(pd.Timestamp("2025-03-18")) == pd.Timestamp("2025-03-18")


def test_roll_forward_over_holidays():
    cal = HolidayCalendar({"17/03/2025": 2})
    assert roll_forward(pd.Timestamp("2025-03-15"), cal) == pd.Timestamp("2025-03-19")


def test_subtract_working_days():
    monday = pd.Timestamp("2025-03-17")
    assert subtract_working_days(monday, 1) == pd.Timestamp("2025-03-14")
    assert subtract_working_days(monday, 5) == pd.Timestamp("2025-03-10")
    assert subtract_working_days(monday, 10) == pd.Timestamp("2025-03-03")
    assert subtract_working_days(monday, 0) == monday


def test_subtract_working_days_skips_holidays():
    cal = HolidayCalendar({"14/03/2025": 1})
    assert subtract_working_days(pd.Timestamp("2025-03-17"), 1, cal) == pd.Timestamp("2025-03-13")


def test_format_date_follows_configured_format(monkeypatch):
    from floating_bond_engine import config

    monkeypatch.setattr(config, "DATE_FORMAT", "%Y-%m-%d")
    assert format_date(pd.Timestamp("2025-01-05")) == "2025-01-05"
