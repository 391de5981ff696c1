from __future__ import annotations

import argparse
import json
from typing import Any, Dict, List, Optional

from goalplan.core.config import SETTINGS
from goalplan.tools.planning_tools import tool_plan_goal, tool_project_future_cost
from goalplan.utils.logging import setup_logging


def _print(out: Dict[str, Any], as_json: bool, lines: List[str]) -> int:
    if "error" in out:
        if as_json:
            print(json.dumps(out, indent=2, default=str))
        else:
            err = out["error"]
            print(f"ERROR: {err['code']}: {err['message']}")
            for e in ((err.get("details") or {}).get("validation") or {}).get("errors", []):
                print(f"  - {e['message']} ({e.get('field') or ''})")
        return 2

    if as_json:
        print(json.dumps(out, indent=2, default=str))
    else:
        for line in lines:
            print(line)
        for w in out.get("warnings") or []:
            print(f"WARN: {w}")
    return 0


def cmd_project(args: argparse.Namespace) -> int:
    out = tool_project_future_cost(
        {
            "last_year_fee": args.fee,
            "near_term_increase_rate": args.near_term_rate,
            "long_term_increase_rate": args.long_term_rate,
            "horizon_years": args.years,
        }
    )
    lines = [] if "error" in out else [f"Future cost in {out['horizon_years']} years: {out['future_cost']:,.0f}"]
    return _print(out, args.json, lines)


def cmd_solve(args: argparse.Namespace) -> int:
    payload: Dict[str, Any] = {
        "horizon_years": args.years,
        "annual_return_rate": args.rate,
        "lump_sum": args.lump_sum,
        "annual_step_up": args.step_up,
    }
    if args.target is not None:
        payload["target_amount"] = args.target
    if args.fee is not None:
        payload.update(
            last_year_fee=args.fee,
            near_term_increase_rate=args.near_term_rate,
            long_term_increase_rate=args.long_term_rate,
        )

    out = tool_plan_goal(payload)
    lines: List[str] = []
    if "error" not in out:
        plan = out["plan"]
        lo, hi = plan["suggested_range"]
        lines = [
            f"Target: {out['target_amount']:,.0f} in {out['horizon_years']} years",
            f"Status: {plan['status']}",
            f"Recommended monthly SIP: {plan['recommended_monthly_sip']:,.0f}",
            f"Suggested range: {lo:,.0f} - {hi:,.0f}",
        ]
    return _print(out, args.json, lines)


def main(argv: Optional[List[str]] = None) -> None:
    setup_logging(SETTINGS.log_level)

    p = argparse.ArgumentParser(prog="plan_cli", description="Goal cost projection and SIP planning")
    sub = p.add_subparsers(dest="cmd", required=True)

    pr = sub.add_parser("project", help="Project a future cost from last year's fee")
    pr.add_argument("--fee", type=float, required=True)
    pr.add_argument("--years", type=int, required=True)
    pr.add_argument("--near_term_rate", type=float, default=0.0)
    pr.add_argument("--long_term_rate", type=float, default=0.0)
    pr.add_argument("--json", action="store_true")
    pr.set_defaults(func=cmd_project)

    so = sub.add_parser("solve", help="Solve the minimum monthly SIP for a target")
    so.add_argument("--target", type=float, default=None)
    so.add_argument("--fee", type=float, default=None, help="Project the target from this fee instead")
    so.add_argument("--near_term_rate", type=float, default=0.0)
    so.add_argument("--long_term_rate", type=float, default=0.0)
    so.add_argument("--years", type=int, required=True)
    so.add_argument("--rate", type=float, required=True, help="Expected annual return as a fraction")
    so.add_argument("--lump_sum", type=float, default=0.0)
    so.add_argument("--step_up", type=float, default=0.0)
    so.add_argument("--json", action="store_true")
    so.set_defaults(func=cmd_solve)

    args = p.parse_args(argv)
    if args.cmd == "solve" and args.target is None and args.fee is None:
        p.error("solve needs --target or --fee")
    rc = args.func(args)
    raise SystemExit(rc)


if __name__ == "__main__":
    main()
