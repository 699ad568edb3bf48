"""
Discounting engine: discount factors, discounted series, running totals.

Discount factors are stored as divisors (``(1 + r)^t``), not as present-value
multipliers, so ``discounted[t] = cashflow[t] / factor[t]``.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from feasibility.analytics.config_schema import RequiredFieldSpec, register_required_fields
from feasibility.constants import DEFAULT_DISCOUNT_RATE_PCT, FALLBACK_DISCOUNT_FACTORS
from feasibility.finance.utils import (
    DiagnosticCallback,
    as_float,
    emit_diagnostic,
    pct_to_decimal,
)

logger = logging.getLogger(__name__)

register_required_fields(
    "discounting",
    [
        RequiredFieldSpec(
            module="discounting",
            name="discount_rate",
            paths=(("discountRate",), ("discount_rate",), ("project", "discount_rate_pct")),
            required=True,
            severity="warning",
            default=DEFAULT_DISCOUNT_RATE_PCT,
            description="Discount rate / MARR, percent per year (12 means 12%).",
            validator=lambda v: as_float(v) is not None,
        ),
    ],
)


def discount_factors(
    years: int,
    rate_percent: float,
    on_diagnostic: Optional[DiagnosticCallback] = None,
) -> List[float]:
    """
    ``[1.0, (1+r)^1, ..., (1+r)^years]`` with ``r = rate_percent / 100``.

    Returns the sentinel ``[1.0]`` when the factors cannot be computed
    (e.g. float overflow for an extreme rate over a long horizon).
    """
    try:
        rate = pct_to_decimal(rate_percent)
        factors: List[float] = [1.0]
        for t in range(1, int(years) + 1):
            factors.append(float((1.0 + rate) ** t))
        return factors
    except Exception as exc:
        logger.error("Discount factor generation failed, returning [1.0]: %s", exc)
        emit_diagnostic(on_diagnostic, "discount_factors", f"fallback to [1.0]: {exc}")
        return list(FALLBACK_DISCOUNT_FACTORS)


def discount_series(cashflows: Sequence[float], factors: Sequence[float]) -> List[float]:
    """
    Elementwise ``cashflows[t] / factors[t]``; 0.0 where the factor is zero.

    The output always has ``len(cashflows)`` entries. A missing factor (only
    possible after a sentinel fallback upstream) is treated like a zero factor.
    """
    if len(factors) < len(cashflows):
        logger.warning(
            "Discount factors shorter than cash flows (%d < %d); "
            "undiscountable years set to 0",
            len(factors),
            len(cashflows),
        )

    out: List[float] = []
    for t, cf in enumerate(cashflows):
        factor = factors[t] if t < len(factors) else 0.0
        out.append(cf / factor if factor != 0 else 0.0)
    return out


def cumulative_series(discounted: Sequence[float]) -> List[float]:
    """Running total: ``out[i] = discounted[0] + ... + discounted[i]``."""
    out: List[float] = []
    total = 0.0
    for value in discounted:
        total += value
        out.append(total)
    return out


__all__ = ["discount_factors", "discount_series", "cumulative_series"]
