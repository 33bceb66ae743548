from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from scipy.optimize import brentq

from . import config
from .bonds import PricingParams, PricingResult
from .errors import (
    DEGENERATE_DERIVATIVE,
    MAX_ITERATIONS,
    NOT_BRACKETED,
    OUT_OF_RANGE,
    ConvergenceError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class YieldResult:
    success: bool
    yield_pct: Optional[float]
    iterations: int
    precision: Optional[float]
    pricing: Optional[PricingResult] = None
    error: Optional[ConvergenceError] = None

    @property
    def message(self) -> str:
        if self.success:
            return f"Converged in {self.iterations} iterations (precision: {self.precision:.2e})"
        return self.error.message


def _failure(message: str, code: str, iterations: int, residual, yield_pct, bound=None) -> YieldResult:
    logger.warning("Yield solver failed: %s", message)
    err = ConvergenceError(
        message=message,
        code=code,
        iterations=iterations,
        residual=residual,
        yield_pct=yield_pct,
        bound=bound,
    )
    return YieldResult(success=False, yield_pct=None, iterations=iterations, precision=residual, error=err)


def solve_yield(
    target_price: float,
    params: PricingParams,
    initial_guess: float = config.YTM_INITIAL_GUESS,
    tolerance: float = config.YTM_TOL,
    max_iterations: int = config.YTM_MAX_ITER,
) -> YieldResult:
    """
    Newton-Raphson on f(y) = dirty(y) - target, y in percent.

    The derivative is a forward difference with a 0.001 pct bump. Failures
    (flat derivative, yield leaving [-50, 100], iteration budget) come back
    as YieldResult(success=False) with a ConvergenceError attached.
    """
    y = float(initial_guess)
    residual = None
    h = config.YTM_BUMP

    for it in range(1, max_iterations + 1):
        result = params.price(y)
        residual = result.dirty_price - target_price

        if abs(residual) <= tolerance:
            logger.debug("Yield converged: y=%.8f after %d iterations", y, it)
            return YieldResult(
                success=True,
                yield_pct=y,
                iterations=it,
                precision=abs(residual),
                pricing=result,
            )

        bumped = params.price(y + h).dirty_price - target_price
        derivative = (bumped - residual) / h

        if abs(derivative) < config.YTM_MIN_DERIVATIVE:
            return _failure(
                f"Derivative too small at yield {y:.6f}% (iteration {it}); no further progress possible.",
                DEGENERATE_DERIVATIVE, it, abs(residual), y,
            )

        y_next = y - residual / derivative
        logger.debug("iteration %d: y=%.8f residual=%.6f next=%.8f", it, y, residual, y_next)

        if y_next < config.YTM_LOWER_BOUND or y_next > config.YTM_UPPER_BOUND:
            bound = config.YTM_LOWER_BOUND if y_next < config.YTM_LOWER_BOUND else config.YTM_UPPER_BOUND
            return _failure(
                f"Yield out of range: {y_next:.4f}% (bounds {config.YTM_LOWER_BOUND}% to {config.YTM_UPPER_BOUND}%).",
                OUT_OF_RANGE, it, abs(residual), y_next, bound,
            )

        y = y_next

    return _failure(
        f"Did not converge within {max_iterations} iterations (residual {abs(residual):.6f}).",
        MAX_ITERATIONS, max_iterations, abs(residual), y,
    )


def solve_yield_bracketed(
    target_price: float,
    params: PricingParams,
    lower: float = config.YTM_LOWER_BOUND,
    upper: float = config.YTM_UPPER_BOUND,
    tolerance: float = config.YTM_TOL,
    max_iterations: int = config.YTM_MAX_ITER,
) -> YieldResult:
    """
    Brent root search over [lower, upper]. Slower than Newton but does not
    depend on a starting guess; callers can fall back to it themselves.
    """
    def f(y: float) -> float:
        return params.price(y).dirty_price - target_price

    f_lo, f_hi = f(lower), f(upper)
    if f_lo * f_hi > 0:
        return _failure(
            f"Target price {target_price:.2f} not bracketed by yields [{lower}%, {upper}%].",
            NOT_BRACKETED, 0, min(abs(f_lo), abs(f_hi)), None,
        )

    y, info = brentq(f, lower, upper, xtol=1e-12, maxiter=max_iterations, full_output=True, disp=False)
    result = params.price(y)
    residual = abs(result.dirty_price - target_price)

    if not info.converged or residual > tolerance:
        return _failure(
            f"Bracketed search stopped after {info.iterations} iterations (residual {residual:.6f}).",
            MAX_ITERATIONS, info.iterations, residual, y,
        )

    return YieldResult(success=True, yield_pct=float(y), iterations=info.iterations, precision=residual, pricing=result)
