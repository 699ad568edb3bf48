from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from feasibility.analytics.config_schema import build_schema_dataframe
from feasibility.analytics.scenario_loader import (
    ConfigValidationError,
    DEFAULT_MODULES,
    ScenarioConfigError,
    ensure_modules_registered,
    load_project,
)
from feasibility.analytics.sensitivity import SensitivityAnalyzer
from feasibility.constants import DEFAULT_VARIATION_PCT
from feasibility.finance.metrics import cash_flow_frame, compute_metrics, evaluate_investment

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="feasibility",
        description="Capital-budgeting runner (NPV / IRR / payback / tornado).",
    )
    p.add_argument(
        "--config",
        type=str,
        help="Path to a project file (.yaml, .yml or .json).",
    )
    p.add_argument(
        "--variation",
        type=float,
        default=DEFAULT_VARIATION_PCT,
        help="Sensitivity shock in percent (default: %(default)s).",
    )
    p.add_argument(
        "--format",
        dest="format",
        choices=["text", "json"],
        default="text",
        help="Output format.",
    )
    p.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Thread-pool size for sensitivity scenarios (default: sequential).",
    )
    p.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
    )
    p.add_argument(
        "--schema",
        action="store_true",
        help="Print the accepted config fields and exit.",
    )
    return p


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not args.schema and not args.config:
        parser.error("--config is required unless --schema is given")
    return args


def _run(args: argparse.Namespace) -> Dict[str, Any]:
    project = load_project(args.config)
    metrics = compute_metrics(project)
    decision = evaluate_investment(project, metrics)
    analyzer = SensitivityAnalyzer(
        project,
        variation_percent=args.variation,
        max_workers=args.workers,
    )
    return {
        "metrics": asdict(metrics),
        "decision": decision.to_dict(),
        "cash_flows": cash_flow_frame(project),
        "sensitivity": analyzer.sensitivity_table(),
        "variation_pct": args.variation,
    }


def _print_text(res: Dict[str, Any]) -> None:
    m = res["metrics"]
    print("=" * 72)
    print("FEASIBILITY RESULTS")
    print("=" * 72)
    print(f"NPV:             {m['npv']:,.2f}")
    print(f"IRR:             {m['irr'] * 100:.2f}%")
    print(f"Payback period:  {m['payback_period']:.2f} years")
    print(f"Total CAPEX:     {m['total_capex']:,.2f}")
    print(f"Yearly revenue:  {m['yearly_revenue']:,.2f}")
    print(f"Yearly expenses: {m['yearly_expenses']:,.2f}")

    d = res["decision"]
    print(f"\nDecision: {d['recommendation']} ({d['passed_count']}/{len(d['criteria'])} criteria)")
    for c in d["criteria"]:
        mark = "PASS" if c["passed"] else "FAIL"
        print(f"  [{mark}] {c['metric']}: {c['threshold']}")
    pi = d["profitability_index"]
    if pi is None:
        print("  Profitability index: N/A")
    else:
        status = "Acceptable" if d["profitability_index_acceptable"] else "Not acceptable"
        print(f"  Profitability index: {pi:.2f} ({status})")

    print("\n--- Cash flows ---")
    print(res["cash_flows"].to_string(index=False))

    print(f"\n--- Sensitivity (+/-{res['variation_pct']:g}%) ---")
    print(res["sensitivity"].to_string(index=False))


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.schema:
        ensure_modules_registered(DEFAULT_MODULES)
        print(build_schema_dataframe().to_string(index=False))
        return 0

    try:
        res = _run(args)
    except (FileNotFoundError, ScenarioConfigError, ConfigValidationError) as exc:
        logger.error("%s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if args.format == "json":
        payload = dict(res)
        payload["cash_flows"] = res["cash_flows"].to_dict(orient="records")
        payload["sensitivity"] = res["sensitivity"].to_dict(orient="records")
        print(json.dumps(payload, indent=2))
    else:
        _print_text(res)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
