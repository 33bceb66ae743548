"""
Error values returned (not raised) for expected failures: bad user input and
yield-solver non-convergence. Contract violations still raise.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

INVALID_DATE = "INVALID_DATE"
INVALID_AMOUNT = "INVALID_AMOUNT"
INVALID_RANGE = "INVALID_RANGE"

DEGENERATE_DERIVATIVE = "DEGENERATE_DERIVATIVE"
OUT_OF_RANGE = "OUT_OF_RANGE"
MAX_ITERATIONS = "MAX_ITERATIONS"
NOT_BRACKETED = "NOT_BRACKETED"


@dataclass(frozen=True)
class EngineError:
    message: str
    code: str

    def to_dict(self) -> Dict[str, object]:
        return {"message": self.message, "code": self.code}


@dataclass(frozen=True)
class InputError(EngineError):
    """A user-supplied field could not be parsed or is out of range."""
    field: str
    value: str

    def to_dict(self) -> Dict[str, object]:
        return {**EngineError.to_dict(self), "field": self.field, "value": self.value}


@dataclass(frozen=True)
class ConvergenceError(EngineError):
    iterations: int
    residual: Optional[float]
    yield_pct: Optional[float]
    bound: Optional[float] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            **EngineError.to_dict(self),
            "iterations": self.iterations,
            "residual": self.residual,
            "yield_pct": self.yield_pct,
            "bound": self.bound,
        }
