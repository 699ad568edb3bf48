"""
Unit tests for feasibility.finance.cashflow.project_cash_flows.

We verify:
- Year 0 carries -CAPEX and every later year the net operating flow.
- Growth compounds from the baseline with exponent = year index.
- The series length is project_years + 1 (including a zero-year horizon).
- Overflow falls back to [0.0] and is reported through on_diagnostic.
"""

from __future__ import annotations

import pytest

from feasibility.finance.cashflow import project_cash_flows
from feasibility.project_types import LineItem, ProjectData


def _item(name: str, volume: float, price: float) -> LineItem:
    return LineItem(id=name, name=name, volume=volume, unit="unit", price=price)


def _project(**overrides) -> ProjectData:
    base = dict(
        capex_items=[_item("plant", 2, 500_000.0)],
        opex_cash_in=[_item("sales", 1, 500_000.0)],
        opex_cash_out=[_item("staff", 1, 200_000.0)],
        project_years=3,
        discount_rate=10.0,
    )
    base.update(overrides)
    return ProjectData(**base)


def test_flat_project_series():
    flows = project_cash_flows(_project())

    assert flows == pytest.approx([-1_000_000.0, 300_000.0, 300_000.0, 300_000.0])


def test_length_is_horizon_plus_one():
    assert len(project_cash_flows(_project(project_years=7))) == 8


def test_growth_compounds_from_year_one():
    data = _project(
        capex_items=[],
        opex_cash_in=[_item("sales", 1, 100.0)],
        opex_cash_out=[_item("staff", 1, 50.0)],
        project_years=2,
        opex_in_growth=10.0,
        opex_out_growth=-10.0,
    )

    flows = project_cash_flows(data)

    assert flows[0] == 0.0
    assert flows[1] == pytest.approx(110.0 - 45.0)
    assert flows[2] == pytest.approx(121.0 - 40.5)


def test_zero_year_horizon_only_has_capex():
    assert project_cash_flows(_project(project_years=0)) == pytest.approx([-1_000_000.0])


def test_empty_project_is_all_zero():
    flows = project_cash_flows(ProjectData(project_years=4))

    assert flows == [0.0] * 5


def test_input_snapshot_is_not_modified():
    data = _project()
    before = data.to_dict()

    project_cash_flows(data)

    assert data.to_dict() == before


def test_overflow_falls_back_to_sentinel():
    notices = []
    data = _project(opex_in_growth=1e6, project_years=200)

    flows = project_cash_flows(data, on_diagnostic=lambda src, msg: notices.append((src, msg)))

    assert flows == [0.0]
    assert len(notices) == 1
    assert notices[0][0] == "project_cash_flows"
