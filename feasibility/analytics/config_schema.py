"""
Registry of config fields the engine modules read from a project document.

Engine modules declare their inputs at import time::

    register_required_fields("cashflow", [
        RequiredFieldSpec(
            module="cashflow",
            name="project_years",
            paths=(("projectYears",), ("project_years",), ("project", "years")),
            ...
        ),
    ])

``scenario_loader`` resolves and validates documents against the registry;
``build_schema_dataframe`` dumps it for inspection (``feasibility --schema``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from feasibility.finance.utils import get_nested

ValidatorFn = Callable[[Any], bool]
PathSpec = Tuple[str, ...]

_MISSING = object()


@dataclass(frozen=True)
class RequiredFieldSpec:
    """
    One logical config field and where to look for it.

    Attributes
    ----------
    module:
        Owning engine module ("cashflow", "discounting").
    name:
        ProjectData attribute the value feeds (e.g. "discount_rate").
    paths:
        Candidate key paths, tried in order. The UI's camelCase key comes
        first, then snake_case, then the nested YAML layout.
    required:
        When True a missing value is reported at ``severity``; when False a
        missing value falls back to ``default``.
    severity:
        "error" blocks loading, "warning" is logged only.
    validator:
        Predicate on the resolved value; a False result is reported at
        ``severity``.
    """

    module: str
    name: str
    paths: Sequence[PathSpec]
    required: bool = True
    severity: str = "error"
    description: str = ""
    default: Any = None
    validator: Optional[ValidatorFn] = field(default=None)

    def resolve(self, raw: Mapping[str, Any]) -> Any:
        """First value found along ``paths``, or ``_MISSING``."""
        for path in self.paths:
            value = get_nested(raw, path, _MISSING)
            if value is not _MISSING:
                return value
        return _MISSING


_REGISTRY: Dict[str, List[RequiredFieldSpec]] = {}


def register_required_fields(module: str, specs: Iterable[RequiredFieldSpec]) -> None:
    """Add ``specs`` under ``module``. Re-registering a name replaces it."""
    bucket = _REGISTRY.setdefault(module, [])
    for spec in specs:
        bucket[:] = [s for s in bucket if s.name != spec.name]
        bucket.append(spec)


def get_required_fields(module: Optional[str] = None) -> List[RequiredFieldSpec]:
    if module is None:
        out: List[RequiredFieldSpec] = []
        for specs in _REGISTRY.values():
            out.extend(specs)
        return out
    return list(_REGISTRY.get(module, []))


def is_missing(value: Any) -> bool:
    return value is _MISSING


def build_schema_dataframe() -> pd.DataFrame:
    """
    Flatten the registry: one row per field, sorted by module then name.

    Columns: module, name, path_candidates, required, severity, default,
    description.
    """
    columns = [
        "module",
        "name",
        "path_candidates",
        "required",
        "severity",
        "default",
        "description",
    ]
    rows = [
        {
            "module": spec.module,
            "name": spec.name,
            "path_candidates": [".".join(p) for p in spec.paths],
            "required": spec.required,
            "severity": spec.severity,
            "default": spec.default,
            "description": spec.description,
        }
        for spec in get_required_fields()
    ]
    if not rows:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(rows, columns=columns).sort_values(["module", "name"]).reset_index(drop=True)


__all__ = [
    "RequiredFieldSpec",
    "register_required_fields",
    "get_required_fields",
    "is_missing",
    "build_schema_dataframe",
    "ValidatorFn",
    "PathSpec",
]
