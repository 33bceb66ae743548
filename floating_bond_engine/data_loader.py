# data_loader.py
# Purpose: Convert JSON-shaped market data (bonds, bank rates, holidays) into engine objects

from __future__ import annotations

import json
import logging
from typing import Dict, List, Mapping, Tuple

import pandas as pd

from . import config
from .bonds import Bond, ListingClass
from .calendar import HolidayCalendar
from .rates import BankRateTable, RateStep
from .schedule import ScheduleRegime
from .utils import parse_date

logger = logging.getLogger(__name__)


def _required_date(record: Mapping, key: str) -> pd.Timestamp:
    d = parse_date(str(record.get(key, "")))
    if d is None:
        raise ValueError(f"{record.get('code', '?')}: invalid {key} {record.get(key)!r}")
    return d


def rate_step_from_record(record: Mapping) -> RateStep:
    floor = record.get("floorRate")
    return RateStep(
        payment=int(record.get("payment", 0)),
        rate=float(record["rate"]),
        is_floating=bool(record.get("isFloat", False)),
        floor_rate=float(floor) if floor is not None else None,
    )


def bond_from_record(record: Mapping) -> Bond:
    """
    Build a Bond from a record such as

        {"code": "ABC12401", "issueDate": "15/03/2024", "maturity": "15/03/2029",
         "frequency": 2, "faceValue": 100000000,
         "interestSchedule": [{"payment": 0, "rate": 0.095, "isFloat": false},
                              {"payment": 2, "rate": 0.035, "isFloat": true}],
         "referenceBank": ["VCB", "BIDV"], "recordDays": 10, "regime": "NORMAL"}
    """
    steps = sorted((rate_step_from_record(s) for s in record.get("interestSchedule", [])), key=lambda s: s.payment)
    return Bond(
        code=str(record["code"]),
        issue_date=_required_date(record, "issueDate"),
        maturity_date=_required_date(record, "maturity"),
        frequency=int(record["frequency"]),
        face_value=float(record["faceValue"]),
        interest_schedule=tuple(steps),
        reference_banks=tuple(record.get("referenceBank", ())),
        recording_days=int(record.get("recordDays") or config.DEFAULT_RECORDING_DAYS),
        listing=ListingClass(record.get("listing", ListingClass.PUBLIC.value)),
        regime=ScheduleRegime(record.get("regime") or ScheduleRegime.NORMAL.value),
    )


def bank_rates_from_record(record: Mapping) -> BankRateTable:
    rates = {str(k): float(v) for k, v in record.get("rates", {}).items()}
    return BankRateTable(rates=rates, last_updated=record.get("lastUpdated"))


def holiday_calendar_from_record(record: Mapping) -> HolidayCalendar:
    """{"DD/MM/YYYY": {"duration": n}} or {"DD/MM/YYYY": n}."""
    holidays: Dict[pd.Timestamp, int] = {}
    for key, value in record.items():
        start = parse_date(key)
        if start is None:
            raise ValueError(f"Invalid holiday date {key!r}")
        if isinstance(value, Mapping):
            value = value.get("duration", value.get("durationDays", 1))
        holidays[start] = int(value)
    return HolidayCalendar(holidays)


def load_market_data(path: str) -> Tuple[List[Bond], BankRateTable, HolidayCalendar]:
    """Read a JSON file with "bonds", "bankRates" and "holidays" sections."""
    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)

    bonds_section = data.get("bonds", [])
    if isinstance(bonds_section, Mapping):
        bonds_section = bonds_section.get("bonds", [])

    bonds = [bond_from_record(r) for r in bonds_section]
    bank_rates = bank_rates_from_record(data.get("bankRates", {}))
    holidays = holiday_calendar_from_record(data.get("holidays", {}))

    logger.info("Loaded %d bonds, %d bank rates, %d holidays from %s",
                len(bonds), len(bank_rates.rates), len(holidays.holidays), path)
    return bonds, bank_rates, holidays


def bonds_frame(bonds: List[Bond]) -> pd.DataFrame:
    rows = [
        {
            "code": b.code,
            "issue_date": b.issue_date,
            "maturity_date": b.maturity_date,
            "frequency": b.frequency,
            "face_value": b.face_value,
            "reference_banks": ", ".join(b.reference_banks),
            "recording_days": b.recording_days,
            "listing": b.listing.value,
            "regime": b.regime.value,
        }
        for b in bonds
    ]
    return pd.DataFrame(rows)
