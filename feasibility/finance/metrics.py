"""KPI Calculation Module: one full pipeline pass per project snapshot.

PIPELINE:
---------
ProjectData -> project_cash_flows -> discount_factors -> discount_series
            -> cumulative_series -> NPV / IRR / payback

``compute_metrics`` is the unit the sensitivity driver re-invokes per
scenario. ``compute_cash_flow_table`` / ``cash_flow_frame`` expose the
intermediate series for table and chart collaborators.
``evaluate_investment`` applies the three accept/reject rules on top.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import List, NamedTuple, Optional

import pandas as pd

from feasibility.finance.aggregate import capex_total, yearly_expenses, yearly_revenue
from feasibility.finance.cashflow import project_cash_flows
from feasibility.finance.discounting import (
    cumulative_series,
    discount_factors,
    discount_series,
)
from feasibility.finance.irr import compute_irr, compute_npv, compute_payback_period
from feasibility.finance.utils import DiagnosticCallback
from feasibility.project_types import (
    CashFlowRow,
    DecisionCriterion,
    FinancialMetrics,
    InvestmentDecision,
    ProjectData,
    Recommendation,
)

logger = logging.getLogger(__name__)

CASH_FLOW_COLUMNS: List[str] = [
    "year",
    "cash_flow",
    "discount_factor",
    "discounted_cash_flow",
    "cumulative_cash_flow",
]


class _Series(NamedTuple):
    cashflows: List[float]
    factors: List[float]
    discounted: List[float]
    cumulative: List[float]


def _run_pipeline(
    data: ProjectData,
    on_diagnostic: Optional[DiagnosticCallback] = None,
) -> _Series:
    cashflows = project_cash_flows(data, on_diagnostic=on_diagnostic)
    factors = discount_factors(data.project_years, data.discount_rate, on_diagnostic=on_diagnostic)
    discounted = discount_series(cashflows, factors)
    cumulative = cumulative_series(discounted)
    return _Series(cashflows, factors, discounted, cumulative)


# -----------------------------------------------------------------------------
# Metrics
# -----------------------------------------------------------------------------


def compute_metrics(
    data: ProjectData,
    on_diagnostic: Optional[DiagnosticCallback] = None,
) -> FinancialMetrics:
    """
    NPV, IRR, payback period and the three base totals for ``data``.

    Parameters
    ----------
    data : ProjectData
        Project snapshot (not modified).
    on_diagnostic : callable, optional
        Receives sentinel-fallback and IRR non-convergence notices.

    Returns
    -------
    FinancialMetrics
        ``irr`` is a decimal fraction; ``payback_period`` is in years.
    """
    series = _run_pipeline(data, on_diagnostic)

    metrics = FinancialMetrics(
        npv=compute_npv(series.discounted),
        irr=compute_irr(series.cashflows, on_diagnostic=on_diagnostic),
        payback_period=compute_payback_period(series.cumulative),
        total_capex=capex_total(data),
        yearly_revenue=yearly_revenue(data),
        yearly_expenses=yearly_expenses(data),
    )

    logger.debug(
        "Metrics: NPV=%.2f | IRR=%.4f | payback=%.2fy",
        metrics.npv,
        metrics.irr,
        metrics.payback_period,
    )
    return metrics


def compute_cash_flow_table(
    data: ProjectData,
    on_diagnostic: Optional[DiagnosticCallback] = None,
) -> List[CashFlowRow]:
    """One row per year with the raw, discounted and cumulative cash flow."""
    series = _run_pipeline(data, on_diagnostic)
    rows: List[CashFlowRow] = []
    for year, cf in enumerate(series.cashflows):
        rows.append(
            CashFlowRow(
                year=year,
                cash_flow=cf,
                discounted_cash_flow=series.discounted[year],
                cumulative_cash_flow=series.cumulative[year],
                # factors can only be shorter after a fallback
                discount_factor=series.factors[year] if year < len(series.factors) else 0.0,
            )
        )
    return rows


def cash_flow_frame(
    data: ProjectData,
    on_diagnostic: Optional[DiagnosticCallback] = None,
) -> pd.DataFrame:
    """``compute_cash_flow_table`` as a DataFrame (columns: CASH_FLOW_COLUMNS)."""
    rows = compute_cash_flow_table(data, on_diagnostic)
    if not rows:
        return pd.DataFrame(columns=CASH_FLOW_COLUMNS)
    df = pd.DataFrame([asdict(r) for r in rows])
    return df[CASH_FLOW_COLUMNS]


# -----------------------------------------------------------------------------
# Accept / reject
# -----------------------------------------------------------------------------


def profitability_index(metrics: FinancialMetrics) -> Optional[float]:
    """
    Present value of the returns per unit of CAPEX: ``(npv + capex) / capex``.

    Above 1 the project is acceptable. None when there is no CAPEX.
    """
    if metrics.total_capex == 0:
        return None
    return (metrics.npv + metrics.total_capex) / metrics.total_capex


def evaluate_investment(
    data: ProjectData,
    metrics: Optional[FinancialMetrics] = None,
) -> InvestmentDecision:
    """
    Score the project against the three standard criteria.

    - NPV > 0
    - IRR (as a percent) > discount rate
    - payback period <= project horizon

    All three pass -> PROCEED, two -> PROCEED_WITH_CAUTION, else REJECT.
    The profitability index is attached for reporting only.
    """
    if metrics is None:
        metrics = compute_metrics(data)

    criteria = (
        DecisionCriterion(
            metric="NPV",
            threshold="NPV > 0",
            passed=metrics.npv > 0,
            description="Project creates positive value",
        ),
        DecisionCriterion(
            metric="IRR",
            threshold=f"IRR > {data.discount_rate}%",
            passed=metrics.irr * 100 > data.discount_rate,
            description="Return exceeds required rate",
        ),
        DecisionCriterion(
            metric="Payback Period",
            threshold=f"PBP <= {data.project_years} years",
            passed=metrics.payback_period <= data.project_years,
            description="Investment recovered within timeline",
        ),
    )

    passed = sum(1 for c in criteria if c.passed)
    if passed == len(criteria):
        recommendation = Recommendation.PROCEED
    elif passed == len(criteria) - 1:
        recommendation = Recommendation.PROCEED_WITH_CAUTION
    else:
        recommendation = Recommendation.REJECT

    logger.info("Investment decision: %d/%d criteria met -> %s", passed, len(criteria), recommendation.value)
    return InvestmentDecision(
        criteria=criteria,
        recommendation=recommendation,
        profitability_index=profitability_index(metrics),
    )


__all__ = [
    "CASH_FLOW_COLUMNS",
    "compute_metrics",
    "compute_cash_flow_table",
    "cash_flow_frame",
    "profitability_index",
    "evaluate_investment",
]
