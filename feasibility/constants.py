"""Shared defaults for the feasibility engine.

Percent-denominated values are stored as percents (12.0 means 12%), matching
the way project documents carry them.
"""

from __future__ import annotations

from typing import List

# ---------------------------------------------------------------------------
# Project defaults
# ---------------------------------------------------------------------------

DEFAULT_PROJECT_YEARS: int = 5
DEFAULT_DISCOUNT_RATE_PCT: float = 12.0
DEFAULT_GROWTH_PCT: float = 0.0

# ---------------------------------------------------------------------------
# Sensitivity
# ---------------------------------------------------------------------------

DEFAULT_VARIATION_PCT: float = 20.0
# Lowest discount rate (percent) the downward rate scenario may reach.
MIN_SCENARIO_DISCOUNT_RATE_PCT: float = 0.1

# sensitivity_pct thresholds (percent of |base NPV|)
RISK_HIGH_THRESHOLD_PCT: float = 50.0
RISK_MEDIUM_THRESHOLD_PCT: float = 25.0

# ---------------------------------------------------------------------------
# IRR solver
# ---------------------------------------------------------------------------

IRR_INITIAL_GUESS: float = 0.10
IRR_MAX_ITERATIONS: int = 100
IRR_TOLERANCE: float = 1e-6
IRR_ESCAPE_GUESS: float = 0.9
IRR_MIN_RATE: float = -0.99
IRR_MAX_RATE: float = 10.0

# ---------------------------------------------------------------------------
# Sentinel series returned when a series cannot be generated
# ---------------------------------------------------------------------------

FALLBACK_CASH_FLOWS: List[float] = [0.0]
FALLBACK_DISCOUNT_FACTORS: List[float] = [1.0]


__all__ = [
    "DEFAULT_PROJECT_YEARS",
    "DEFAULT_DISCOUNT_RATE_PCT",
    "DEFAULT_GROWTH_PCT",
    "DEFAULT_VARIATION_PCT",
    "MIN_SCENARIO_DISCOUNT_RATE_PCT",
    "RISK_HIGH_THRESHOLD_PCT",
    "RISK_MEDIUM_THRESHOLD_PCT",
    "IRR_INITIAL_GUESS",
    "IRR_MAX_ITERATIONS",
    "IRR_TOLERANCE",
    "IRR_ESCAPE_GUESS",
    "IRR_MIN_RATE",
    "IRR_MAX_RATE",
    "FALLBACK_CASH_FLOWS",
    "FALLBACK_DISCOUNT_FACTORS",
]
