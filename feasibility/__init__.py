"""
feasibility: capital-budgeting engine.

Net cash flow, discounting, NPV, IRR, payback period and one-variable
(tornado) sensitivity analysis for an investment project.
"""

from feasibility.project_types import (
    CashFlowRow,
    FinancialMetrics,
    InvestmentDecision,
    IrrSolution,
    LineItem,
    ProjectData,
    Recommendation,
    SensitivityResult,
    SensitivityVariable,
)
from feasibility.finance.aggregate import aggregate_total
from feasibility.finance.cashflow import project_cash_flows
from feasibility.finance.discounting import cumulative_series, discount_factors, discount_series
from feasibility.finance.irr import compute_irr, compute_npv, compute_payback_period, solve_irr
from feasibility.finance.metrics import (
    cash_flow_frame,
    compute_cash_flow_table,
    compute_metrics,
    evaluate_investment,
    profitability_index,
)
from feasibility.analytics.sensitivity import SensitivityAnalyzer, compute_sensitivity

__version__ = "0.1.0"

__all__ = [
    "CashFlowRow",
    "FinancialMetrics",
    "InvestmentDecision",
    "IrrSolution",
    "LineItem",
    "ProjectData",
    "Recommendation",
    "SensitivityResult",
    "SensitivityVariable",
    "aggregate_total",
    "project_cash_flows",
    "discount_factors",
    "discount_series",
    "cumulative_series",
    "compute_npv",
    "compute_irr",
    "solve_irr",
    "compute_payback_period",
    "compute_metrics",
    "compute_cash_flow_table",
    "cash_flow_frame",
    "evaluate_investment",
    "profitability_index",
    "compute_sensitivity",
    "SensitivityAnalyzer",
]
