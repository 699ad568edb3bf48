"""Value objects passed through the feasibility pipeline.

Every type here is a frozen dataclass. A calculation pass takes a
``ProjectData`` snapshot and produces fresh derived objects; nothing is
mutated in place and nothing is cached between calls.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from feasibility.constants import (
    DEFAULT_DISCOUNT_RATE_PCT,
    DEFAULT_GROWTH_PCT,
    DEFAULT_PROJECT_YEARS,
)
from feasibility.finance.utils import as_float, as_int


# =============================================================================
# Inputs
# =============================================================================


@dataclass(frozen=True)
class LineItem:
    """
    One CAPEX or OPEX line: ``volume`` units at ``price`` each.

    The sign convention (cost vs. revenue) is applied by the caller; the item
    itself only knows its magnitude. ``unit`` is display-only.
    """

    id: str
    name: str
    volume: float
    unit: str
    price: float

    @property
    def total(self) -> float:
        return self.volume * self.price

    def with_price(self, price: float) -> "LineItem":
        return replace(self, price=price)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "LineItem":
        item_id = raw.get("id")
        return cls(
            id=str(item_id) if item_id is not None else uuid.uuid4().hex,
            name=str(raw.get("name", "")),
            volume=as_float(raw.get("volume"), 0.0),
            unit=str(raw.get("unit", "")),
            price=as_float(raw.get("price"), 0.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "volume": self.volume,
            "unit": self.unit,
            "price": self.price,
        }


def _items(raw: Optional[Iterable[Any]]) -> Tuple[LineItem, ...]:
    if not raw:
        return ()
    return tuple(
        item if isinstance(item, LineItem) else LineItem.from_dict(item)
        for item in raw
    )


# camelCase (UI documents) -> snake_case field names
_FIELD_ALIASES: Dict[str, str] = {
    "capexItems": "capex_items",
    "opexCashIn": "opex_cash_in",
    "opexCashOut": "opex_cash_out",
    "projectYears": "project_years",
    "discountRate": "discount_rate",
    "opexInGrowth": "opex_in_growth",
    "opexOutGrowth": "opex_out_growth",
}


@dataclass(frozen=True)
class ProjectData:
    """
    Snapshot of an investment project.

    Attributes
    ----------
    capex_items:
        One-off investment lines, charged at year 0.
    opex_cash_in / opex_cash_out:
        Recurring yearly inflow / outflow lines (year-0 baseline amounts).
    project_years:
        Analysis horizon N; every derived series has N + 1 entries.
    discount_rate:
        Percent per year (12.0 means 12%).
    opex_in_growth / opex_out_growth:
        Compound growth, percent per year. May be negative.
    """

    capex_items: Tuple[LineItem, ...] = ()
    opex_cash_in: Tuple[LineItem, ...] = ()
    opex_cash_out: Tuple[LineItem, ...] = ()
    project_years: int = DEFAULT_PROJECT_YEARS
    discount_rate: float = DEFAULT_DISCOUNT_RATE_PCT
    opex_in_growth: float = DEFAULT_GROWTH_PCT
    opex_out_growth: float = DEFAULT_GROWTH_PCT

    def __post_init__(self) -> None:
        # Accept lists from callers but store tuples so snapshots stay immutable.
        for name in ("capex_items", "opex_cash_in", "opex_cash_out"):
            value = getattr(self, name)
            if not isinstance(value, tuple):
                object.__setattr__(self, name, _items(value))

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "ProjectData":
        """Build from a UI document (camelCase) or a snake_case mapping."""
        data = {_FIELD_ALIASES.get(k, k): v for k, v in raw.items()}
        return cls(
            capex_items=_items(data.get("capex_items")),
            opex_cash_in=_items(data.get("opex_cash_in")),
            opex_cash_out=_items(data.get("opex_cash_out")),
            project_years=as_int(data.get("project_years"), DEFAULT_PROJECT_YEARS),
            discount_rate=as_float(data.get("discount_rate"), DEFAULT_DISCOUNT_RATE_PCT),
            opex_in_growth=as_float(data.get("opex_in_growth"), DEFAULT_GROWTH_PCT),
            opex_out_growth=as_float(data.get("opex_out_growth"), DEFAULT_GROWTH_PCT),
        )

    def to_dict(self) -> Dict[str, Any]:
        """camelCase document, the shape the UI saves and loads."""
        return {
            "capexItems": [i.to_dict() for i in self.capex_items],
            "opexCashIn": [i.to_dict() for i in self.opex_cash_in],
            "opexCashOut": [i.to_dict() for i in self.opex_cash_out],
            "projectYears": self.project_years,
            "discountRate": self.discount_rate,
            "opexInGrowth": self.opex_in_growth,
            "opexOutGrowth": self.opex_out_growth,
        }


# =============================================================================
# Derived outputs
# =============================================================================


@dataclass(frozen=True)
class CashFlowRow:
    year: int
    cash_flow: float
    discounted_cash_flow: float
    cumulative_cash_flow: float
    discount_factor: float


@dataclass(frozen=True)
class FinancialMetrics:
    """Scalar results of one pipeline pass. ``irr`` is a decimal fraction."""

    npv: float
    irr: float
    payback_period: float
    total_capex: float
    yearly_revenue: float
    yearly_expenses: float


@dataclass(frozen=True)
class IrrSolution:
    """Newton-Raphson outcome. ``rate`` is the last guess, converged or not."""

    rate: float
    iterations: int
    converged: bool


class SensitivityVariable(str, Enum):
    REVENUE = "Revenue"
    OPERATING_COSTS = "Operating Costs"
    INITIAL_INVESTMENT = "Initial Investment"
    DISCOUNT_RATE = "Discount Rate"


@dataclass(frozen=True)
class SensitivityResult:
    """
    NPV swing for one lever.

    ``npv_low`` is always the NPV of the economically unfavourable direction
    and ``npv_high`` the favourable one. For Revenue that is the scaled-down /
    scaled-up input; for Operating Costs, Initial Investment and Discount Rate
    the mapping is inverted (the increased input lands in ``npv_low``).
    """

    variable: SensitivityVariable
    npv_low: float
    npv_high: float
    range: float

    @property
    def npv_unfavorable(self) -> float:
        return self.npv_low

    @property
    def npv_favorable(self) -> float:
        return self.npv_high


class Recommendation(str, Enum):
    PROCEED = "proceed"
    PROCEED_WITH_CAUTION = "proceed_with_caution"
    REJECT = "reject"


@dataclass(frozen=True)
class DecisionCriterion:
    metric: str
    threshold: str
    passed: bool
    description: str = ""


@dataclass(frozen=True)
class InvestmentDecision:
    """
    Outcome of the three accept/reject criteria.

    ``profitability_index`` is reported alongside the criteria but does not
    affect ``recommendation``. It is None when the project has no CAPEX.
    """

    criteria: Tuple[DecisionCriterion, ...] = field(default_factory=tuple)
    recommendation: Recommendation = Recommendation.REJECT
    profitability_index: Optional[float] = None

    @property
    def passed_count(self) -> int:
        return sum(1 for c in self.criteria if c.passed)

    @property
    def profitability_index_acceptable(self) -> Optional[bool]:
        if self.profitability_index is None:
            return None
        return self.profitability_index > 1

    def to_dict(self) -> Dict[str, Any]:
        rows: List[Dict[str, Any]] = [
            {
                "metric": c.metric,
                "threshold": c.threshold,
                "passed": c.passed,
                "description": c.description,
            }
            for c in self.criteria
        ]
        return {
            "criteria": rows,
            "passed_count": self.passed_count,
            "recommendation": self.recommendation.value,
            "profitability_index": self.profitability_index,
            "profitability_index_acceptable": self.profitability_index_acceptable,
        }


__all__ = [
    "LineItem",
    "ProjectData",
    "CashFlowRow",
    "FinancialMetrics",
    "IrrSolution",
    "SensitivityVariable",
    "SensitivityResult",
    "Recommendation",
    "DecisionCriterion",
    "InvestmentDecision",
]
