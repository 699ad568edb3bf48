"""Line-item totals: volume x price, summed per category."""

from __future__ import annotations

import math
from typing import Iterable

from feasibility.project_types import LineItem, ProjectData


def line_item_total(item: LineItem) -> float:
    return item.volume * item.price


def aggregate_total(items: Iterable[LineItem]) -> float:
    """
    Sum of ``volume * price`` across ``items``; 0.0 when empty.

    Negative volumes or prices are not validated here and simply propagate.
    """
    # fsum is exact-rounded, so the total does not depend on item order.
    return math.fsum(line_item_total(item) for item in items)


def capex_total(data: ProjectData) -> float:
    return aggregate_total(data.capex_items)


def yearly_revenue(data: ProjectData) -> float:
    """Year-0 baseline inflow, before growth."""
    return aggregate_total(data.opex_cash_in)


def yearly_expenses(data: ProjectData) -> float:
    """Year-0 baseline outflow, before growth."""
    return aggregate_total(data.opex_cash_out)


__all__ = [
    "line_item_total",
    "aggregate_total",
    "capex_total",
    "yearly_revenue",
    "yearly_expenses",
]
