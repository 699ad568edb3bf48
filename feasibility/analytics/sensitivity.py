"""
Sensitivity (tornado) analysis: one lever at a time, symmetric +/- variation.

Four levers are perturbed by +/- ``variation_percent``:

- Revenue             opex_cash_in prices
- Operating Costs     opex_cash_out prices
- Initial Investment  capex_items prices
- Discount Rate       discount_rate (downside floored at 0.1%)

Each perturbed scenario is a deep copy of the input snapshot run through the
full metrics pipeline. ``npv_low`` always holds the unfavourable direction of
a lever and ``npv_high`` the favourable one, so for costs, capex and rate the
*increased* input lands in ``npv_low``. Results are ranked by NPV range,
largest first; ties keep the lever order above.
"""

from __future__ import annotations

import copy
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import pandas as pd

from feasibility.constants import (
    DEFAULT_VARIATION_PCT,
    MIN_SCENARIO_DISCOUNT_RATE_PCT,
    RISK_HIGH_THRESHOLD_PCT,
    RISK_MEDIUM_THRESHOLD_PCT,
)
from feasibility.finance.metrics import compute_metrics
from feasibility.project_types import (
    LineItem,
    ProjectData,
    SensitivityResult,
    SensitivityVariable,
)

logger = logging.getLogger(__name__)

SENSITIVITY_COLUMNS: List[str] = [
    "variable",
    "npv_low",
    "npv_high",
    "range",
    "low_impact",
    "high_impact",
    "sensitivity_pct",
    "risk_level",
]


# =============================================================================
# Scenario construction
# =============================================================================


def _scale_prices(items: Sequence[LineItem], factor: float) -> Tuple[LineItem, ...]:
    return tuple(item.with_price(item.price * factor) for item in items)


def _scenario(data: ProjectData, **changes) -> ProjectData:
    """Deep copy of ``data`` with ``changes`` applied; ``data`` is untouched."""
    return replace(copy.deepcopy(data), **changes)


def build_scenarios(
    data: ProjectData,
    variation_percent: float = DEFAULT_VARIATION_PCT,
) -> List[Tuple[SensitivityVariable, ProjectData, ProjectData]]:
    """
    (lever, unfavourable scenario, favourable scenario) for each lever.

    The unfavourable scenario feeds ``npv_low``, the favourable one ``npv_high``.
    """
    v = variation_percent / 100.0
    up, down = 1.0 + v, 1.0 - v

    revenue_up = _scenario(data, opex_cash_in=_scale_prices(data.opex_cash_in, up))
    revenue_down = _scenario(data, opex_cash_in=_scale_prices(data.opex_cash_in, down))

    cost_up = _scenario(data, opex_cash_out=_scale_prices(data.opex_cash_out, up))
    cost_down = _scenario(data, opex_cash_out=_scale_prices(data.opex_cash_out, down))

    capex_up = _scenario(data, capex_items=_scale_prices(data.capex_items, up))
    capex_down = _scenario(data, capex_items=_scale_prices(data.capex_items, down))

    rate_up = _scenario(data, discount_rate=data.discount_rate * up)
    rate_down = _scenario(
        data,
        discount_rate=max(MIN_SCENARIO_DISCOUNT_RATE_PCT, data.discount_rate * down),
    )

    return [
        (SensitivityVariable.REVENUE, revenue_down, revenue_up),
        (SensitivityVariable.OPERATING_COSTS, cost_up, cost_down),
        (SensitivityVariable.INITIAL_INVESTMENT, capex_up, capex_down),
        (SensitivityVariable.DISCOUNT_RATE, rate_up, rate_down),
    ]


def _scenario_npv(data: ProjectData) -> float:
    return compute_metrics(data).npv


# =============================================================================
# Driver
# =============================================================================


def compute_sensitivity(
    data: ProjectData,
    variation_percent: float = DEFAULT_VARIATION_PCT,
    max_workers: Optional[int] = None,
) -> List[SensitivityResult]:
    """
    Rank the four levers by NPV range under a +/- ``variation_percent`` shock.

    Parameters
    ----------
    data : ProjectData
        Baseline snapshot; never modified.
    variation_percent : float
        Symmetric shock size in percent (20 means +/-20%). The UI offers
        5-50, but any positive value is accepted.
    max_workers : int, optional
        If > 1, evaluate the eight scenarios on a thread pool. Output is
        identical to the sequential run.

    Returns
    -------
    List[SensitivityResult]
        Four results, sorted by ``range`` descending (stable).
    """
    if variation_percent <= 0:
        logger.warning(
            "Non-positive variation %.4f%%; scenarios will not bracket the base case",
            variation_percent,
        )

    scenarios = build_scenarios(data, variation_percent)
    flat: List[ProjectData] = []
    for _, unfavorable, favorable in scenarios:
        flat.extend((unfavorable, favorable))

    npvs = _evaluate(flat, max_workers)

    results: List[SensitivityResult] = []
    for idx, (variable, _, _) in enumerate(scenarios):
        npv_low = npvs[2 * idx]
        npv_high = npvs[2 * idx + 1]
        results.append(
            SensitivityResult(
                variable=variable,
                npv_low=npv_low,
                npv_high=npv_high,
                range=npv_high - npv_low,
            )
        )
        logger.debug(
            "%s: NPV low=%.2f high=%.2f range=%.2f",
            variable.value,
            npv_low,
            npv_high,
            npv_high - npv_low,
        )

    # sorted() is stable, also with reverse=True
    return sorted(results, key=lambda r: r.range, reverse=True)


def _evaluate(scenarios: List[ProjectData], max_workers: Optional[int]) -> List[float]:
    run: Callable[[ProjectData], float] = _scenario_npv
    if max_workers is not None and max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            return list(executor.map(run, scenarios))
    return [run(s) for s in scenarios]


# =============================================================================
# Ranking / presentation helpers
# =============================================================================


def sensitivity_pct(result: SensitivityResult, base_npv: float) -> float:
    """NPV range as a percent of |base NPV|; 0.0 when the base NPV is zero."""
    if base_npv == 0:
        return 0.0
    return result.range / abs(base_npv) * 100.0


def risk_level(pct: float) -> str:
    if pct > RISK_HIGH_THRESHOLD_PCT:
        return "High"
    if pct > RISK_MEDIUM_THRESHOLD_PCT:
        return "Medium"
    return "Low"


def sensitivity_table(results: Sequence[SensitivityResult], base_npv: float) -> pd.DataFrame:
    """
    Results as a DataFrame in rank order.

    Columns: variable, npv_low, npv_high, range, low_impact, high_impact,
    sensitivity_pct, risk_level. The impacts are the scenario NPVs minus
    ``base_npv``.
    Values are left numeric; formatting belongs to the presentation layer.
    """
    rows: List[Dict[str, object]] = []
    for r in results:
        pct = sensitivity_pct(r, base_npv)
        rows.append(
            {
                "variable": r.variable.value,
                "npv_low": r.npv_low,
                "npv_high": r.npv_high,
                "range": r.range,
                "low_impact": r.npv_low - base_npv,
                "high_impact": r.npv_high - base_npv,
                "sensitivity_pct": pct,
                "risk_level": risk_level(pct),
            }
        )
    if not rows:
        return pd.DataFrame(columns=SENSITIVITY_COLUMNS)
    return pd.DataFrame(rows, columns=SENSITIVITY_COLUMNS)


class SensitivityAnalyzer:
    """
    Tornado analysis bound to one project snapshot.

    Usage::

        analyzer = SensitivityAnalyzer(project, variation_percent=15)
        ranked = analyzer.run()
        table = analyzer.sensitivity_table()
    """

    def __init__(
        self,
        data: ProjectData,
        variation_percent: float = DEFAULT_VARIATION_PCT,
        max_workers: Optional[int] = None,
    ):
        self.data = data
        self.variation_percent = variation_percent
        self.max_workers = max_workers
        self._results: Optional[List[SensitivityResult]] = None

    @property
    def base_npv(self) -> float:
        return compute_metrics(self.data).npv

    def run(self) -> List[SensitivityResult]:
        self._results = compute_sensitivity(
            self.data,
            variation_percent=self.variation_percent,
            max_workers=self.max_workers,
        )
        return self._results

    @property
    def results(self) -> List[SensitivityResult]:
        if self._results is None:
            return self.run()
        return self._results

    def most_sensitive(self) -> SensitivityResult:
        return self.results[0]

    def least_sensitive(self) -> SensitivityResult:
        return self.results[-1]

    def sensitivity_table(self) -> pd.DataFrame:
        return sensitivity_table(self.results, self.base_npv)


__all__ = [
    "SENSITIVITY_COLUMNS",
    "build_scenarios",
    "compute_sensitivity",
    "sensitivity_pct",
    "risk_level",
    "sensitivity_table",
    "SensitivityAnalyzer",
]
