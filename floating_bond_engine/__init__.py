"""
Floating Bond Engine

Modules:
- utils: Actual/365 day counts, month arithmetic, DD/MM/YYYY and amount text helpers
- calendar: holidays, business days, roll-forward, working-day subtraction
- schedule: issue-anchored coupon schedules (NORMAL / CALENDAR_ADJUSTED)
- rates: rate step resolution, floating index + floor, bank rate averages
- recording: recording-period (register closure) policy
- bonds: bond objects + dirty/clean pricing with cash flows
- ytm: Newton-Raphson and bracketed yield solvers
- transaction: buy/sell round trip with coupons, tax, fees and profit
- portfolio: multi-bond pricing table + holding-period screening
- data_loader: JSON records -> bonds, bank rates, holiday calendar
- engine: raw-input entry points returning typed errors
"""
