import json
import logging

import pandas as pd
import pytest

from floating_bond_engine.bonds import ListingClass
from floating_bond_engine.data_loader import (
    bond_from_record,
    bonds_frame,
    holiday_calendar_from_record,
    load_market_data,
)
from floating_bond_engine.schedule import ScheduleRegime

RECORD = {
    "code": "ABC12401",
    "issueDate": "15/03/2024",
    "maturity": "15/03/2029",
    "frequency": 2,
    "faceValue": 100000000,
    "interestSchedule": [
        {"payment": 2, "rate": 0.035, "isFloat": True, "floorRate": 0.08},
        {"payment": 0, "rate": 0.095, "isFloat": False},
    ],
    "referenceBank": ["VCB", "BIDV"],
}


@pytest.fixture
def market_file(tmp_path):
    payload = {
        "bonds": {"bonds": [RECORD, {**RECORD, "code": "XYZ12501", "recordDays": 5, "regime": "CALENDAR_ADJUSTED"}]},
        "bankRates": {"rates": {"VCB": 0.048, "BIDV": 0.05}, "lastUpdated": "01/06/2025"},
        "holidays": {"29/01/2025": {"duration": 5}, "30/04/2025": 2},
    }
    path = tmp_path / "market.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_bond_from_record_defaults_and_sorting():
    bond = bond_from_record(RECORD)
    assert bond.issue_date == pd.Timestamp("2024-03-15")
    assert bond.maturity_date == pd.Timestamp("2029-03-15")
    assert [s.payment for s in bond.interest_schedule] == [0, 2]
    assert bond.interest_schedule[1].is_floating
    assert bond.interest_schedule[1].floor_rate == 0.08
    assert bond.interest_schedule[0].floor_rate is None
    assert bond.recording_days == 10
    assert bond.listing is ListingClass.PUBLIC
    assert bond.regime is ScheduleRegime.NORMAL


def test_bond_from_record_rejects_bad_dates():
    with pytest.raises(ValueError):
        bond_from_record({**RECORD, "maturity": "2029/03/15"})


def test_holiday_calendar_from_record():
    cal = holiday_calendar_from_record({"29/01/2025": {"durationDays": 3}, "2025-09-02": 1})
    assert cal.expand() == frozenset(
        pd.Timestamp(d) for d in ("2025-01-29", "2025-01-30", "2025-01-31", "2025-09-02")
    )
    with pytest.raises(ValueError):
        holiday_calendar_from_record({"not a date": 1})


def test_load_market_data(market_file, caplog):
    with caplog.at_level(logging.INFO, logger="floating_bond_engine.data_loader"):
        bonds, bank_rates, holidays = load_market_data(str(market_file))

    assert [b.code for b in bonds] == ["ABC12401", "XYZ12501"]
    assert bonds[1].recording_days == 5
    assert bonds[1].regime is ScheduleRegime.CALENDAR_ADJUSTED
    assert bank_rates.average(bonds[0].reference_banks) == pytest.approx(0.049)
    assert bank_rates.last_updated == "01/06/2025"
    assert len(holidays.expand()) == 7
    assert "Loaded 2 bonds" in caplog.text


def test_bonds_frame():
    df = bonds_frame([bond_from_record(RECORD)])
    assert list(df["code"]) == ["ABC12401"]
    assert df.loc[0, "reference_banks"] == "VCB, BIDV"
    assert df.loc[0, "regime"] == "NORMAL"
