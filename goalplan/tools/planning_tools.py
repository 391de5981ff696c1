from __future__ import annotations

import math
import uuid
from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from goalplan.core.config import SETTINGS, Settings
from goalplan.core.schemas import (
    ContributionPlan,
    ContributionRequest,
    CostBaseline,
    ErrorEnvelope,
    GoalPlan,
    ValidationReport,
)
from goalplan.utils.allocation import normalize_sip
from goalplan.utils.contribution_solver import build_contribution_plan, find_base_sip
from goalplan.utils.cost_projector import project_future_cost
from goalplan.utils.horizon import horizon_years
from goalplan.utils.logging import get_logger, set_log_context
from goalplan.utils.schedule import schedule_rows
from goalplan.utils.validators import validate_baseline, validate_contribution_request

log = get_logger(__name__)

# float()/int() coercion of alias fields raises TypeError or ValueError
_PAYLOAD_ERRORS = (ValidationError, ValueError, TypeError)

# catalog / client field -> canonical field
_ALIASES = {
    "lastYearFee": "last_year_fee",
    "targetAmount": "target_amount",
    "futureCost": "target_amount",
    "lumpSumAmount": "lump_sum",
    "stepUpAmount": "annual_step_up",
    "yearly_setup": "annual_step_up",
    "targetYear": "target_year",
    "targetDate": "target_date",
    "minInvestment": "min_investment",
}

# percent-valued catalog fields -> canonical fraction field
_PERCENT_ALIASES = {
    "expectedIncreasePercentLt10Yr": "near_term_increase_rate",
    "expectedIncreasePercentGt10Yr": "long_term_increase_rate",
    "returns": "annual_return_rate",
    "expected_return_pct": "annual_return_rate",
}


def _canonical(payload: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    p = dict(payload or {})
    for alias, field in _ALIASES.items():
        if field not in p and alias in p:
            p[field] = p.pop(alias)
    for alias, field in _PERCENT_ALIASES.items():
        if field not in p and alias in p and p[alias] is not None:
            p[field] = float(p.pop(alias)) / 100.0
    return p


def _resolve_horizon(p: Dict[str, Any]) -> int:
    if p.get("horizon_years") is not None:
        return int(p["horizon_years"])

    today = p.get("today")
    if isinstance(today, str):
        today = date.fromisoformat(today)

    if p.get("target_date") is not None:
        target = p["target_date"]
        if isinstance(target, str):
            target = date.fromisoformat(target[:10])
        return horizon_years(target, today)
    if p.get("target_year") is not None:
        return horizon_years(int(p["target_year"]), today)

    raise ValueError("Provide horizon_years, target_year or target_date.")


def _failure(code: str, message: str, report: Optional[ValidationReport] = None) -> Dict[str, Any]:
    details = {"validation": report.model_dump()} if report is not None else None
    return {"error": ErrorEnvelope(code=code, message=message, details=details).model_dump()}


def _limit_warnings(plan: ContributionPlan, settings: Settings) -> List[str]:
    if plan.recommended_monthly_sip > settings.max_sip:
        return [f"Recommended SIP {plan.recommended_monthly_sip:.0f} exceeds the {settings.max_sip:.0f} monthly limit."]
    return []


def _bind_log_context(payload: Optional[Dict[str, Any]], component: str) -> None:
    payload = payload or {}
    goal_id = payload.get("goal_id") or payload.get("goalId") or "-"
    request_id = payload.get("request_id") or payload.get("requestId") or str(uuid.uuid4())
    set_log_context(request_id=str(request_id), goal_id=str(goal_id), component=component)


def tool_project_future_cost(payload: Dict[str, Any], *, settings: Optional[Settings] = None) -> Dict[str, Any]:
    settings = settings or SETTINGS
    _bind_log_context(payload, "cost_projector")
    try:
        p = _canonical(payload)
        baseline = CostBaseline(**{k: p[k] for k in CostBaseline.model_fields if k in p})
        years = _resolve_horizon(p)
    except _PAYLOAD_ERRORS as e:
        log.warning("Rejected cost payload: %s", e)
        return _failure("BAD_PAYLOAD", str(e))

    report = validate_baseline(baseline, years, settings=settings)
    if not report.ok:
        return _failure("INVALID_BASELINE", "Cost baseline failed validation.", report)

    return {
        "baseline": baseline.model_dump(),
        "horizon_years": years,
        "future_cost": project_future_cost(baseline, years, settings=settings),
        "warnings": [w.message for w in report.warnings],
    }


def tool_solve_contribution(payload: Dict[str, Any], *, settings: Optional[Settings] = None) -> Dict[str, Any]:
    settings = settings or SETTINGS
    _bind_log_context(payload, "contribution_solver")
    try:
        p = _canonical(payload)
        p["horizon_years"] = _resolve_horizon(p)
        req = ContributionRequest(**{k: p[k] for k in ContributionRequest.model_fields if k in p})
    except _PAYLOAD_ERRORS as e:
        log.warning("Rejected contribution payload: %s", e)
        return _failure("BAD_PAYLOAD", str(e))

    report = validate_contribution_request(req, settings=settings)
    if not report.ok:
        return _failure("INVALID_REQUEST", "Contribution request failed validation.", report)

    plan = build_contribution_plan(req, settings=settings)
    out = plan.model_dump()
    out["unrounded_sip"] = find_base_sip(req, settings=settings)
    out["warnings"] = [w.message for w in report.warnings] + _limit_warnings(plan, settings)
    return out


def tool_plan_goal(payload: Dict[str, Any], *, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """Goal creation flow: project the cost when a fee baseline is given, then size the SIP."""
    settings = settings or SETTINGS
    _bind_log_context(payload, "goal_planner")
    warnings = []

    try:
        p = _canonical(payload)
        years = _resolve_horizon(p)
        normalize = p.get("min_investment") is not None or p.get("goal_count") is not None
        min_investment = float(p.get("min_investment") or 0.0)
        goal_count = int(p.get("goal_count") or 1)

        projected = "last_year_fee" in p and "target_amount" not in p
        if projected:
            baseline = CostBaseline(**{k: p[k] for k in CostBaseline.model_fields if k in p})
            base_report = validate_baseline(baseline, max(0, years), settings=settings)
            if not base_report.ok:
                return _failure("INVALID_BASELINE", "Cost baseline failed validation.", base_report)
            warnings.extend(w.message for w in base_report.warnings)
            p["target_amount"] = project_future_cost(baseline, max(0, years), settings=settings)

        p["horizon_years"] = years
        req = ContributionRequest(**{k: p[k] for k in ContributionRequest.model_fields if k in p})
    except _PAYLOAD_ERRORS as e:
        log.warning("Rejected goal payload: %s", e)
        return _failure("BAD_PAYLOAD", str(e))

    report = validate_contribution_request(req, settings=settings)
    if not report.ok:
        return _failure("INVALID_REQUEST", "Contribution request failed validation.", report)
    warnings.extend(w.message for w in report.warnings)

    plan = build_contribution_plan(req, settings=settings)
    unrounded = find_base_sip(req, settings=settings)
    warnings.extend(_limit_warnings(plan, settings))

    normalized = None
    if normalize:
        normalized = normalize_sip(plan.recommended_monthly_sip, min_investment, goal_count, settings=settings)

    rows = schedule_rows(req, unrounded) if math.isfinite(unrounded) else []
    log.info(
        "Planned goal: target=%s years=%s sip=%s status=%s",
        req.target_amount, req.horizon_years, plan.recommended_monthly_sip, plan.status,
    )

    return GoalPlan(
        target_amount=req.target_amount,
        horizon_years=req.horizon_years,
        projected_from_baseline=projected,
        plan=plan,
        unrounded_sip=unrounded,
        normalized_monthly_sip=normalized,
        schedule=rows,
        warnings=warnings,
    ).model_dump()
