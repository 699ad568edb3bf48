"""Cash Flow Module: year 0..N net cash flows for a project snapshot.

SERIES LAYOUT:
--------------
- Year 0: -(total CAPEX)
- Year y (1..N): inflow_base * (1 + g_in)^y - outflow_base * (1 + g_out)^y

Growth compounds from the year-0 baseline, so the exponent equals the year
index: year 1 already carries one growth step.

FAILURE POLICY:
---------------
If the series cannot be generated (overflow on extreme growth/horizon, bad
types slipping past the loader) the projector returns the sentinel ``[0.0]``
instead of raising. The failure is logged and reported to ``on_diagnostic``.
"""

from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from feasibility.analytics.config_schema import RequiredFieldSpec, register_required_fields
from feasibility.constants import (
    DEFAULT_GROWTH_PCT,
    DEFAULT_PROJECT_YEARS,
    FALLBACK_CASH_FLOWS,
)
from feasibility.finance.aggregate import capex_total, yearly_expenses, yearly_revenue
from feasibility.finance.utils import (
    DiagnosticCallback,
    as_float,
    as_int,
    emit_diagnostic,
    pct_to_decimal,
)
from feasibility.project_types import ProjectData

logger = logging.getLogger(__name__)


# =============================================================================
# Config fields read by the projector
# =============================================================================


def _is_number(value: Any) -> bool:
    return as_float(value) is not None


def _is_horizon(value: Any) -> bool:
    years = as_int(value)
    return years is not None and years >= 1


def _is_item_list(value: Any) -> bool:
    if not isinstance(value, list):
        return False
    for item in value:
        if not isinstance(item, Mapping):
            return False
        for key in ("volume", "price"):
            if key in item and not _is_number(item[key]):
                return False
    return True


_CASHFLOW_SPECS = [
    RequiredFieldSpec(
        module="cashflow",
        name="project_years",
        paths=(("projectYears",), ("project_years",), ("project", "years")),
        required=True,
        severity="error",
        default=DEFAULT_PROJECT_YEARS,
        description="Analysis horizon in whole years (>= 1).",
        validator=_is_horizon,
    ),
    RequiredFieldSpec(
        module="cashflow",
        name="capex_items",
        paths=(("capexItems",), ("capex_items",), ("capex",)),
        required=False,
        severity="error",
        default=[],
        description="Year-0 investment line items (id, name, volume, unit, price).",
        validator=_is_item_list,
    ),
    RequiredFieldSpec(
        module="cashflow",
        name="opex_cash_in",
        paths=(("opexCashIn",), ("opex_cash_in",), ("opex", "cash_in")),
        required=False,
        severity="error",
        default=[],
        description="Recurring yearly inflow line items.",
        validator=_is_item_list,
    ),
    RequiredFieldSpec(
        module="cashflow",
        name="opex_cash_out",
        paths=(("opexCashOut",), ("opex_cash_out",), ("opex", "cash_out")),
        required=False,
        severity="error",
        default=[],
        description="Recurring yearly outflow line items.",
        validator=_is_item_list,
    ),
    RequiredFieldSpec(
        module="cashflow",
        name="opex_in_growth",
        paths=(("opexInGrowth",), ("opex_in_growth",), ("opex", "in_growth_pct")),
        required=False,
        severity="error",
        default=DEFAULT_GROWTH_PCT,
        description="Inflow growth, percent per year (may be negative).",
        validator=_is_number,
    ),
    RequiredFieldSpec(
        module="cashflow",
        name="opex_out_growth",
        paths=(("opexOutGrowth",), ("opex_out_growth",), ("opex", "out_growth_pct")),
        required=False,
        severity="error",
        default=DEFAULT_GROWTH_PCT,
        description="Outflow growth, percent per year (may be negative).",
        validator=_is_number,
    ),
]

register_required_fields("cashflow", _CASHFLOW_SPECS)


# =============================================================================
# Projection
# =============================================================================


def _build_series(data: ProjectData) -> List[float]:
    capex = capex_total(data)
    base_in = yearly_revenue(data)
    base_out = yearly_expenses(data)
    growth_in = pct_to_decimal(data.opex_in_growth)
    growth_out = pct_to_decimal(data.opex_out_growth)

    logger.debug(
        "Projecting %s years: capex=%.2f | in=%.2f (g=%.4f) | out=%.2f (g=%.4f)",
        data.project_years,
        capex,
        base_in,
        growth_in,
        base_out,
        growth_out,
    )

    series: List[float] = [-capex]
    for year in range(1, int(data.project_years) + 1):
        cash_in = base_in * (1.0 + growth_in) ** year
        cash_out = base_out * (1.0 + growth_out) ** year
        series.append(float(cash_in - cash_out))
    return series


def project_cash_flows(
    data: ProjectData,
    on_diagnostic: Optional[DiagnosticCallback] = None,
) -> List[float]:
    """
    Net cash flow per year, index = year, length ``project_years + 1``.

    Parameters
    ----------
    data : ProjectData
        Project snapshot; not modified.
    on_diagnostic : callable, optional
        ``(source, message)`` observer, called when the sentinel is returned.

    Returns
    -------
    List[float]
        The series, or ``[0.0]`` if it could not be generated.
    """
    try:
        return _build_series(data)
    except Exception as exc:
        logger.error("Cash flow projection failed, returning [0.0]: %s", exc)
        emit_diagnostic(on_diagnostic, "project_cash_flows", f"fallback to [0.0]: {exc}")
        return list(FALLBACK_CASH_FLOWS)


__all__ = ["project_cash_flows"]
