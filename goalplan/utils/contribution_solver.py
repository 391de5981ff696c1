from __future__ import annotations

import math
from decimal import Decimal
from typing import List, Optional, Tuple

from goalplan.core.config import SETTINGS, Settings
from goalplan.core.schemas import ContributionPlan, ContributionRequest, PlanStatus
from goalplan.utils.logging import get_logger
from goalplan.utils.money import _d, all_finite, engine_context, round_to_step, to_float

log = get_logger(__name__)

MONTHS_PER_YEAR = 12

_NAN = Decimal("NaN")
_INF = Decimal("Infinity")


def _monthly_rate(annual_return_rate) -> Decimal:
    return _d(annual_return_rate) / Decimal(MONTHS_PER_YEAR)


def _annuity_factor(mr: Decimal) -> Decimal:
    # Twelve unit contributions with no growth when the rate is zero.
    if mr == 0:
        return Decimal(MONTHS_PER_YEAR)
    return ((Decimal(1) + mr) ** MONTHS_PER_YEAR - Decimal(1)) / mr


def _block_weights(mr: Decimal, n_years: int) -> List[Decimal]:
    """Value at the horizon of one currency unit contributed monthly during each year."""
    factor = _annuity_factor(mr)
    growth = (Decimal(1) + mr) ** MONTHS_PER_YEAR
    return [factor * growth ** (n_years - 1 - k) for k in range(n_years)]


def _lump_future_value(lump_sum: Decimal, mr: Decimal, n_months: int) -> Decimal:
    if n_months <= 0:
        return lump_sum
    return lump_sum * (Decimal(1) + mr) ** n_months


class _Schedule:
    """FV(S) = lump_fv + S * sum(w_k) + step_up * sum(k * w_k)."""

    def __init__(self, request: ContributionRequest) -> None:
        self.n_years = max(0, int(request.horizon_years))
        self.mr = _monthly_rate(request.annual_return_rate)
        self.step_up = _d(request.annual_step_up)
        self.lump_fv = _lump_future_value(_d(request.lump_sum), self.mr, self.n_years * MONTHS_PER_YEAR)
        self.weights = _block_weights(self.mr, self.n_years)
        self.level_weight = sum(self.weights, Decimal(0))
        self.step_weight = sum((k * w for k, w in enumerate(self.weights)), Decimal(0))

    def future_value(self, base_sip: Decimal) -> Decimal:
        return self.lump_fv + base_sip * self.level_weight + self.step_up * self.step_weight


def schedule_future_value(request: ContributionRequest, base_sip: float) -> float:
    """Value at the horizon of the lump sum plus a SIP starting at `base_sip`."""
    if not all_finite(base_sip, request.annual_return_rate, request.lump_sum, request.annual_step_up):
        return math.nan
    with engine_context():
        return to_float(_Schedule(request).future_value(_d(base_sip)))


def _solve(request: ContributionRequest, settings: Settings) -> Tuple[Decimal, PlanStatus]:
    if not all_finite(
        request.target_amount,
        request.annual_return_rate,
        request.lump_sum,
        request.annual_step_up,
    ):
        log.warning("Non-finite contribution request %s; no SIP can be estimated", request.model_dump())
        return _NAN, "invalid_input"

    with engine_context():
        target = _d(request.target_amount)
        sched = _Schedule(request)

        if sched.lump_fv >= target:
            return Decimal(0), "already_funded"

        if sched.n_years == 0:
            log.warning(
                "Target %s unreachable: lump sum %s with no contribution years",
                request.target_amount, request.lump_sum,
            )
            return _INF, "unreachable"

        # Step-ups alone may already reach the target.
        if sched.future_value(Decimal(0)) >= target:
            return Decimal(0), "ok"

        lo = Decimal(0)
        hi = _d(settings.initial_upper_bound)
        for _ in range(int(settings.max_bound_doublings)):
            if sched.future_value(hi) >= target:
                break
            hi *= 2

        if not sched.future_value(hi) >= target:
            log.warning(
                "Target %s unreachable within %s years at rate %s; upper bound %s exhausted",
                request.target_amount, sched.n_years, request.annual_return_rate, hi,
            )
            return _INF, "unreachable"

        # Stop once the schedule lands within `tol` of the target, or once
        # the bracket is too narrow to move the future value by `tol`.
        tol = _d(settings.tolerance)
        sip_tol = tol / max(Decimal(1), sched.level_weight)
        iterations = 0
        for iterations in range(1, int(settings.max_iterations) + 1):
            if sched.future_value(hi) - target < tol or hi - lo < sip_tol:
                break
            mid = (lo + hi) / 2
            if sched.future_value(mid) >= target:
                hi = mid
            else:
                lo = mid

        log.debug("SIP bracket [%s, %s] after %s iterations", lo, hi, iterations)
        return hi, "ok"


def find_base_sip(request: ContributionRequest, *, settings: Optional[Settings] = None) -> float:
    """Unrounded minimum base SIP. `math.inf` when the target cannot be reached, NaN on non-finite input."""
    root, _ = _solve(request, settings or SETTINGS)
    return to_float(root)


def solve_minimum_sip(request: ContributionRequest, *, settings: Optional[Settings] = None) -> float:
    """Minimum base SIP rounded to the nearest multiple of the rounding step (500)."""
    settings = settings or SETTINGS
    root, _ = _solve(request, settings)
    with engine_context():
        return to_float(round_to_step(root, settings.rounding_step))


def build_contribution_plan(request: ContributionRequest, *, settings: Optional[Settings] = None) -> ContributionPlan:
    settings = settings or SETTINGS
    root, status = _solve(request, settings)

    if status == "invalid_input":
        return ContributionPlan(
            recommended_monthly_sip=math.nan,
            suggested_range=(math.nan, math.nan),
            status=status,
        )
    if status == "unreachable":
        return ContributionPlan(recommended_monthly_sip=0.0, suggested_range=(0.0, 0.0), status=status)

    with engine_context():
        sip = round_to_step(root, settings.rounding_step)
        upper = sip * _d(settings.range_multiplier)

    return ContributionPlan(
        recommended_monthly_sip=to_float(sip),
        suggested_range=(to_float(sip), to_float(upper)),
        status=status,
    )
