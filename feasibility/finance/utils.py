"""Scalar coercion helpers shared by the finance and config layers."""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, Optional

# on_diagnostic(source, message): optional observer for fallbacks and
# non-convergence. The engine still returns its normal result.
DiagnosticCallback = Callable[[str, str], None]


def emit_diagnostic(
    on_diagnostic: Optional[DiagnosticCallback],
    source: str,
    message: str,
) -> None:
    if on_diagnostic is not None:
        on_diagnostic(source, message)


def as_float(value: Any, default: Optional[float] = None) -> Optional[float]:
    """float(value), or ``default`` for None / unparseable input."""
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def as_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    """
    int(value), or ``default`` for None / unparseable input.

    Whole-number floats and strings such as ``"5.0"`` are accepted; fractional
    values fall back to ``default`` rather than being truncated.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, float):
        return int(value) if value.is_integer() else default
    try:
        return int(value)
    except (TypeError, ValueError):
        pass
    as_num = as_float(value)
    if as_num is not None and as_num.is_integer():
        return int(as_num)
    return default


def get_nested(d: Mapping[str, Any], path: Iterable[str], default: Any = None) -> Any:
    """Walk ``d`` along ``path``; ``default`` if any segment is missing."""
    current: Any = d
    for key in path:
        if not isinstance(current, Mapping) or key not in current:
            return default
        current = current[key]
    return current


def pct_to_decimal(pct: float) -> float:
    """12 -> 0.12. Project documents carry rates as percents."""
    return pct / 100.0


__all__ = [
    "DiagnosticCallback",
    "emit_diagnostic",
    "as_float",
    "as_int",
    "get_nested",
    "pct_to_decimal",
]
