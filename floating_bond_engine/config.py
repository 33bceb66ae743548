# config.py
# Purpose: Central constants for the floating bond engine (fees, taxes, solver setup)

from __future__ import annotations

# Recording window before each coupon, in working days
DEFAULT_RECORDING_DAYS = 10

# Transaction fee on settlement amount, by listing class
PUBLIC_FEE_RATE = 0.001
PRIVATE_FEE_RATE = 0.00015

# Coupon income tax (individual holders); institutions pay none
COUPON_TAX_RATE = 0.05
INSTITUTIONAL_COUPON_TAX_RATE = 0.0

# Sale-side charges
TRANSFER_TAX_RATE = 0.001
TRANSFER_FEE_PER_BOND = 0.3
TRANSFER_FEE_CAP = 300_000.0

# Yield solver (yields in percent, tolerance in currency units)
YTM_INITIAL_GUESS = 8.0
YTM_TOL = 1e-4
YTM_MAX_ITER = 100
YTM_BUMP = 0.001
YTM_MIN_DERIVATIVE = 1e-10
YTM_LOWER_BOUND = -50.0
YTM_UPPER_BOUND = 100.0

DAYS_PER_YEAR = 365

DATE_FORMAT = "%d/%m/%Y"

# Holding-period screening
HOLDING_PERIOD_MONTHS = {
    "1M": 1,
    "2M": 2,
    "3M": 3,
    "6M": 6,
    "1Y": 12,
}
# Durations for which only coupon-free bonds qualify
COUPON_FREE_DURATIONS = ("1M", "2M")

# Reference offered rates (percent p.a.) by issuer category and duration
OFFERED_RATES = {
    "corporate": {"1M": 4.7, "2M": 5.9, "3M": 6.2, "6M": 6.4, "1Y": 6.8},
    "bank": {"1M": 4.3, "2M": 5.2, "3M": 5.4, "6M": 5.7, "1Y": 5.9},
}
