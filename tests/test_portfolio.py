import pandas as pd
import pytest

from floating_bond_engine.bonds import Bond
from floating_bond_engine.portfolio import (
    bonds_for_holding_period,
    has_coupon_in_period,
    offered_rate,
    price_portfolio,
)
from floating_bond_engine.rates import BankRateTable, RateStep

FACE = 100_000_000.0


def _bond(code, issue, maturity, steps=(RateStep(0, 0.09),), banks=()):
    return Bond(
        code=code,
        issue_date=pd.Timestamp(issue),
        maturity_date=pd.Timestamp(maturity),
        frequency=2,
        face_value=FACE,
        interest_schedule=steps,
        reference_banks=banks,
    )


@pytest.fixture(scope="module")
def bonds():
    floating = (RateStep(0, 0.095), RateStep(2, 0.03, True, 0.08))
    return [
        _bond("AAA2401", "2024-03-15", "2029-03-15", floating, ("VCB", "BIDV")),  # coupons 15 Mar / 15 Sep
        _bond("BBB2412", "2024-12-20", "2027-12-20"),  # coupon 20 Jun 2025
        _bond("CCC2407", "2024-07-10", "2027-07-10"),  # coupon 10 Jul 2025, window opens 26 Jun
        _bond("DDD2201", "2022-01-01", "2025-01-01"),  # matured
    ]


@pytest.fixture(scope="module")
def start():
    return pd.Timestamp("2025-06-02")


def test_has_coupon_in_period(bonds, start):
    a, b, c, _ = bonds
    end = pd.Timestamp("2025-07-02")
    assert not has_coupon_in_period(a, start, end)
    assert has_coupon_in_period(b, start, end)
    # no payment before 2 Jul, but selling then falls inside the 10 Jul recording window
    assert has_coupon_in_period(c, start, end)


def test_short_holding_keeps_only_coupon_free_bonds(bonds, start):
    out = bonds_for_holding_period(bonds, start, "1M")
    assert list(out["code"]) == ["AAA2401"]
    assert not out["has_coupon"].any()


def test_long_holding_lists_live_bonds_latest_coupon_first(bonds, start):
    out = bonds_for_holding_period(bonds, start, "3M")
    assert list(out["code"]) == ["AAA2401", "CCC2407", "BBB2412"]
    assert out["has_coupon"].all()
    assert out.loc[0, "next_coupon"] == pd.Timestamp("2025-09-15")


def test_unknown_duration(bonds, start):
    with pytest.raises(ValueError):
        bonds_for_holding_period(bonds, start, "5M")


def test_offered_rate():
    assert offered_rate("corporate", "1Y") == pytest.approx(6.8)
    assert offered_rate("bank", "3M") == pytest.approx(5.4)
    with pytest.raises(ValueError):
        offered_rate("sovereign", "1M")


def test_price_portfolio_flags(bonds):
    rates = BankRateTable({"VCB": 0.048, "BIDV": 0.05})
    df = price_portfolio(bonds, pd.Timestamp("2025-09-05"), 7.0, bank_rates=rates).set_index("code")

    assert len(df) == 4
    assert df.loc["AAA2401", "avg_bank_rate"] == pytest.approx(0.049)
    assert df.loc["AAA2401", "in_recording_period"]
    assert df.loc["AAA2401", "flags"] == "RECORDING"
    assert df.loc["AAA2401", "dirty"] == pytest.approx(df.loc["AAA2401", "clean"])

    assert df.loc["DDD2201", "flags"] == "MATURED"
    assert df.loc["DDD2201", "dirty"] == 0.0
    assert df.loc["BBB2412", "flags"] == ""


def test_floating_bond_without_reference_banks_is_flagged(start):
    orphan = _bond("EEE2501", "2025-01-15", "2028-01-15", (RateStep(0, 0.02, True, 0.06),))
    df = price_portfolio([orphan], start, 7.0)
    assert df.loc[0, "flags"] == "NO_REFERENCE_BANKS"
    assert df.loc[0, "avg_bank_rate"] == 0.0
