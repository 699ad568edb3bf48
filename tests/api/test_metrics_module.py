"""
Tests for feasibility.finance.metrics

- compute_metrics(): end-to-end NPV / IRR / payback on small projects.
- compute_cash_flow_table() / cash_flow_frame(): per-year rows.
- evaluate_investment(): 3 / 2 / <2 criteria -> proceed / caution / reject.
"""

from __future__ import annotations

import pytest

from feasibility.finance.irr import npv
from feasibility.finance.metrics import (
    CASH_FLOW_COLUMNS,
    cash_flow_frame,
    compute_cash_flow_table,
    compute_metrics,
    evaluate_investment,
    profitability_index,
)
from feasibility.project_types import FinancialMetrics, LineItem, ProjectData, Recommendation


def _item(name: str, volume: float, price: float) -> LineItem:
    return LineItem(id=name, name=name, volume=volume, unit="unit", price=price)


def _project(**overrides) -> ProjectData:
    base = dict(
        capex_items=[_item("plant", 1, 1000.0)],
        opex_cash_in=[_item("sales", 1, 500.0)],
        opex_cash_out=[_item("staff", 1, 200.0)],
        project_years=5,
        discount_rate=10.0,
    )
    base.update(overrides)
    return ProjectData(**base)


def test_compute_metrics_basic_project():
    m = compute_metrics(_project())

    assert m.npv == pytest.approx(npv(0.10, [-1000.0] + [300.0] * 5))
    assert m.npv == pytest.approx(137.236, abs=1e-3)
    assert m.irr == pytest.approx(0.1524, abs=1e-3)
    assert m.payback_period == pytest.approx(4.263, abs=1e-2)
    assert m.total_capex == 1000.0
    assert m.yearly_revenue == 500.0
    assert m.yearly_expenses == 200.0


def test_compute_metrics_is_idempotent():
    data = _project(opex_in_growth=3.0, opex_out_growth=2.0)

    assert compute_metrics(data) == compute_metrics(data)


def test_zero_year_horizon():
    m = compute_metrics(_project(project_years=0))

    assert m.npv == -1000.0
    assert m.irr == 0.0
    assert m.payback_period == 0.0


def test_npv_equals_last_cumulative_value():
    data = _project(opex_in_growth=5.0)
    rows = compute_cash_flow_table(data)

    assert len(rows) == data.project_years + 1
    assert rows[0].discount_factor == 1.0
    assert rows[-1].cumulative_cash_flow == pytest.approx(compute_metrics(data).npv)


def test_cash_flow_frame_columns():
    df = cash_flow_frame(_project(project_years=3))

    assert list(df.columns) == CASH_FLOW_COLUMNS
    assert list(df["year"]) == [0, 1, 2, 3]
    assert df["cash_flow"].iloc[0] == -1000.0


def test_overflow_diagnostics_reach_the_caller():
    notices = []

    m = compute_metrics(
        _project(opex_in_growth=1e6, project_years=200),
        on_diagnostic=lambda src, msg: notices.append(src),
    )

    assert "project_cash_flows" in notices
    assert m.irr == 0.0
    assert m.npv == 0.0


def test_evaluate_investment_proceed():
    decision = evaluate_investment(_project())

    assert decision.recommendation is Recommendation.PROCEED
    assert decision.passed_count == 3
    assert [c.metric for c in decision.criteria] == ["NPV", "IRR", "Payback Period"]
    assert decision.criteria[1].threshold == "IRR > 10.0%"


def test_evaluate_investment_caution_from_given_metrics():
    data = _project(discount_rate=12.0)
    metrics = FinancialMetrics(
        npv=10.0,
        irr=0.05,
        payback_period=2.0,
        total_capex=1000.0,
        yearly_revenue=500.0,
        yearly_expenses=200.0,
    )

    decision = evaluate_investment(data, metrics)

    assert decision.recommendation is Recommendation.PROCEED_WITH_CAUTION
    assert decision.to_dict()["passed_count"] == 2


def test_evaluate_investment_reject():
    data = _project(opex_cash_in=[_item("sales", 1, 250.0)])

    decision = evaluate_investment(data)

    assert decision.recommendation is Recommendation.REJECT
    assert decision.to_dict()["recommendation"] == "reject"


def _metrics(npv: float, total_capex: float) -> FinancialMetrics:
    return FinancialMetrics(
        npv=npv,
        irr=0.0,
        payback_period=0.0,
        total_capex=total_capex,
        yearly_revenue=0.0,
        yearly_expenses=0.0,
    )


def test_profitability_index_values():
    assert profitability_index(_metrics(npv=250.0, total_capex=1000.0)) == pytest.approx(1.25)
    assert profitability_index(_metrics(npv=-400.0, total_capex=1000.0)) == pytest.approx(0.6)
    assert profitability_index(_metrics(npv=0.0, total_capex=1000.0)) == pytest.approx(1.0)
    assert profitability_index(_metrics(npv=50.0, total_capex=0.0)) is None


def test_decision_reports_profitability_index():
    good = evaluate_investment(_project())
    assert good.profitability_index == pytest.approx((137.236 + 1000.0) / 1000.0, abs=1e-5)
    assert good.to_dict()["profitability_index_acceptable"] is True

    breakeven = evaluate_investment(_project(), _metrics(npv=0.0, total_capex=1000.0))
    assert breakeven.profitability_index_acceptable is False

    no_capex = evaluate_investment(_project(capex_items=[]))
    assert no_capex.profitability_index is None
    assert no_capex.to_dict()["profitability_index_acceptable"] is None


def test_cash_flow_table_reports_fallbacks():
    notices = []
    data = _project(opex_in_growth=1e6, project_years=200)

    rows = compute_cash_flow_table(data, on_diagnostic=lambda src, msg: notices.append(src))
    frame = cash_flow_frame(data, on_diagnostic=lambda src, msg: notices.append(src))

    assert len(rows) == 1
    assert len(frame) == 1
    assert notices == ["project_cash_flows", "project_cash_flows"]
