"""NPV, IRR and payback-period calculations on annual cash-flow series.

All series are periodic (index = year, year 0 first). Rates passed to and
returned from this module are decimals (0.12 = 12%).
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from feasibility.constants import (
    IRR_ESCAPE_GUESS,
    IRR_INITIAL_GUESS,
    IRR_MAX_ITERATIONS,
    IRR_MAX_RATE,
    IRR_MIN_RATE,
    IRR_TOLERANCE,
)
from feasibility.finance.utils import DiagnosticCallback, emit_diagnostic
from feasibility.project_types import IrrSolution

logger = logging.getLogger(__name__)


# ============================================================================
# NPV
# ============================================================================


def compute_npv(discounted: Sequence[float]) -> float:
    """Net Present Value of an already-discounted series: its plain sum."""
    return float(sum(discounted))


def npv(rate: float, cashflows: Sequence[float]) -> float:
    """Classic periodic Net Present Value.

    NPV(r) = sum_{t=0..N} CF[t] / (1+r)^t

    Parameters
    ----------
    rate : float
        Discount rate (decimal, e.g. 0.12 for 12%)
    cashflows : Sequence[float]
        Cashflow series starting at t=0

    Notes
    -----
    Equivalent to ``compute_npv(discount_series(cfs, discount_factors(n, rate*100)))``
    up to float rounding. Rate clamped above -100% to avoid division errors.

    Examples
    --------
    >>> npv(0.10, [-1000, 500, 500, 500])
    243.426...
    """
    r = float(rate)
    if r <= -1.0:
        r = -0.999999

    total = 0.0
    for t, cf in enumerate(cashflows):
        total += float(cf) / ((1.0 + r) ** t)
    return total


# ============================================================================
# IRR (Newton-Raphson)
# ============================================================================


def _npv_and_derivative(rate: float, cashflows: Sequence[float]):
    value = 0.0
    slope = 0.0
    for t, cf in enumerate(cashflows):
        value += cf / (1.0 + rate) ** t
        slope -= t * cf / (1.0 + rate) ** (t + 1)
    return value, slope


def solve_irr(
    cashflows: Sequence[float],
    guess: float = IRR_INITIAL_GUESS,
    max_iterations: int = IRR_MAX_ITERATIONS,
    tolerance: float = IRR_TOLERANCE,
    on_diagnostic: Optional[DiagnosticCallback] = None,
) -> IrrSolution:
    """Internal Rate of Return by Newton-Raphson, with solver diagnostics.

    Parameters
    ----------
    cashflows : Sequence[float]
        Cashflow series starting at t=0
    guess : float
        Starting rate (decimal)
    max_iterations : int
        Iteration budget; doubles as the solver's only timeout
    tolerance : float
        Stop once |NPV(r)| falls below this; also the flat-slope threshold

    Returns
    -------
    IrrSolution
        ``rate`` is the last guess reached. ``converged`` is False when the
        budget ran out first; the rate is then a best-effort estimate.

    Notes
    -----
    - Flat region (|dNPV/dr| < tolerance): skip the step and jump the guess to
      -0.9 if it is positive, else +0.9.
    - Every Newton step is clamped to [-0.99, 10].
    - Fewer than 2 cash flows: rate 0.0.

    Edge Cases
    ----------
    - Alternating-sign series with several roots may cycle between the escape
      guesses without converging; no root selection is attempted.
    - A float failure mid-search (zero denominator after underflow, overflow
      on very long horizons) ends the search at the current guess.
    """
    cfs = [float(x) for x in cashflows]
    if len(cfs) < 2:
        return IrrSolution(rate=0.0, iterations=0, converged=False)

    rate = float(guess)
    iterations = 0
    converged = False

    for i in range(max_iterations):
        iterations = i + 1
        try:
            value, slope = _npv_and_derivative(rate, cfs)
        except (ZeroDivisionError, OverflowError) as exc:
            logger.warning("IRR search stopped at r=%.6f: %s", rate, exc)
            emit_diagnostic(on_diagnostic, "compute_irr", f"search stopped: {exc}")
            break

        if abs(value) < tolerance:
            converged = True
            break

        if abs(slope) < tolerance:
            rate = -IRR_ESCAPE_GUESS if rate > 0 else IRR_ESCAPE_GUESS
            continue

        rate = rate - value / slope
        rate = min(max(rate, IRR_MIN_RATE), IRR_MAX_RATE)

    if not converged:
        logger.warning(
            "IRR did not converge after %d iterations; returning r=%.6f",
            iterations,
            rate,
        )
        emit_diagnostic(
            on_diagnostic,
            "compute_irr",
            f"did not converge after {iterations} iterations (r={rate:.6f})",
        )

    return IrrSolution(rate=rate, iterations=iterations, converged=converged)


def compute_irr(
    cashflows: Sequence[float],
    on_diagnostic: Optional[DiagnosticCallback] = None,
) -> float:
    """Periodic IRR as a decimal fraction (best effort, never raises).

    Examples
    --------
    >>> compute_irr([-1000, 1100])
    0.1
    """
    return solve_irr(cashflows, on_diagnostic=on_diagnostic).rate


# ============================================================================
# PAYBACK PERIOD
# ============================================================================


def compute_payback_period(cumulative: Sequence[float]) -> float:
    """Fractional year in which the cumulative discounted series turns non-negative.

    Parameters
    ----------
    cumulative : Sequence[float]
        Cumulative discounted cash flow, index = year

    Returns
    -------
    float
        0.0 if already recovered at year 0; otherwise linear interpolation
        inside the crossing year. ``len(cumulative) - 1`` if never recovered.
        NaN entries never count as recovered.

    Examples
    --------
    >>> compute_payback_period([-100, -40, 20, 80])
    1.666...
    """
    for i, current in enumerate(cumulative):
        if not current >= 0:
            continue
        if i == 0:
            return 0.0
        previous = cumulative[i - 1]
        delta = current - previous
        # Flat step onto zero: no crossing to interpolate, keep scanning.
        if delta != 0:
            return (i - 1) + abs(previous) / delta

    return float(len(cumulative) - 1)


__all__ = [
    "compute_npv",
    "npv",
    "solve_irr",
    "compute_irr",
    "compute_payback_period",
]
