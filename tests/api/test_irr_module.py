"""
Tests for feasibility.finance.irr

We verify:
- npv() matches the documented example and the discounted-sum path.
- solve_irr() finds known roots and reports non-convergence.
- compute_payback_period() interpolates inside the crossing year.
"""

from __future__ import annotations

import pytest

from feasibility.finance.discounting import discount_factors, discount_series
from feasibility.finance.irr import (
    compute_irr,
    compute_npv,
    compute_payback_period,
    npv,
    solve_irr,
)


# ============================================================================
# NPV
# ============================================================================


def test_npv_matches_doc_example():
    assert npv(0.10, [-1000.0, 500.0, 500.0, 500.0]) == pytest.approx(243.425995, rel=1e-6)


def test_npv_agrees_with_discounted_sum():
    flows = [-1000.0, 500.0, 500.0, 500.0]
    discounted = discount_series(flows, discount_factors(3, 10))

    assert compute_npv(discounted) == pytest.approx(npv(0.10, flows))


def test_single_point_npv_is_the_point():
    assert compute_npv([-5000.0]) == -5000.0
    assert compute_npv([]) == 0.0


# ============================================================================
# IRR
# ============================================================================


def test_irr_two_point_series():
    assert compute_irr([-1000.0, 1100.0]) == pytest.approx(0.10, abs=1e-6)


def test_irr_doc_example():
    rate = compute_irr([-1000.0, 500.0, 500.0, 500.0])

    assert rate == pytest.approx(0.2343, abs=1e-3)
    assert npv(rate, [-1000.0, 500.0, 500.0, 500.0]) == pytest.approx(0.0, abs=1e-5)


def test_irr_quadratic_root():
    # 60x + 60x^2 = 100 with x = 1 / (1 + r)
    solution = solve_irr([-100.0, 60.0, 60.0])

    assert solution.converged
    assert solution.rate == pytest.approx(0.130662, abs=1e-5)


def test_irr_needs_two_points():
    assert compute_irr([]) == 0.0
    assert compute_irr([-100.0]) == 0.0
    assert solve_irr([-100.0]).iterations == 0


def test_irr_without_sign_change_hits_clamp_and_reports():
    notices = []

    solution = solve_irr([100.0, 100.0, 100.0], on_diagnostic=lambda src, msg: notices.append(src))

    assert not solution.converged
    assert solution.iterations == 100
    assert solution.rate == pytest.approx(10.0)
    assert notices == ["compute_irr"]


def test_irr_flat_slope_flips_between_escape_guesses():
    # dNPV/dr is identically zero, so each iteration only flips the guess
    solution = solve_irr([5.0, 0.0], max_iterations=3)

    assert not solution.converged
    assert solution.rate == pytest.approx(-0.9)

    solution = solve_irr([5.0, 0.0], max_iterations=4)
    assert solution.rate == pytest.approx(0.9)


# ============================================================================
# PAYBACK
# ============================================================================


def test_payback_interpolates_within_year():
    assert compute_payback_period([-100.0, -40.0, 20.0, 80.0]) == pytest.approx(1.0 + 40.0 / 60.0)


def test_payback_zero_when_recovered_at_start():
    assert compute_payback_period([10.0, 20.0]) == 0.0


def test_payback_exact_zero_crossing():
    assert compute_payback_period([-10.0, 0.0, 5.0]) == pytest.approx(1.0)


def test_payback_never_recovered_returns_last_index():
    assert compute_payback_period([-100.0, -50.0, -10.0]) == 2.0


def test_irr_step_below_minus_one_is_clamped():
    # root is r = -0.999, so every Newton step overshoots the lower clamp
    solution = solve_irr([-1.0, 0.001])

    assert not solution.converged
    assert solution.rate == pytest.approx(-0.99)
    assert solution.rate >= -0.99


def test_payback_skips_nan_entries():
    nan = float("nan")

    assert compute_payback_period([nan, -1.0, 5.0]) == pytest.approx(1.0 + 1.0 / 6.0)
    assert compute_payback_period([nan, nan, nan]) == 2.0
