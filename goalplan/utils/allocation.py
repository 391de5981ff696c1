from __future__ import annotations

from decimal import Decimal, ROUND_CEILING
from typing import Iterable, List, Optional, Sequence

from goalplan.core.config import SETTINGS, Settings
from goalplan.core.schemas import BasketFund, CombinedGoal, GoalOrderSplit, GoalShare
from goalplan.utils.logging import get_logger
from goalplan.utils.money import _d, engine_context, round_to_step, to_float

log = get_logger(__name__)

BASKET_MIN_STEP = Decimal(100)


def _basket_minimum(funds: Iterable[BasketFund], attr: str) -> float:
    required = Decimal(0)
    for f in funds:
        fund_min = _d(getattr(f, attr))
        if fund_min <= 0:
            continue
        # A fund holding 25% of the basket needs 4x its own minimum at basket level.
        needed = fund_min / (_d(f.allocation_percentage) / Decimal(100))
        required = max(required, needed)
    steps = (required / BASKET_MIN_STEP).to_integral_value(rounding=ROUND_CEILING)
    return float(steps * BASKET_MIN_STEP)


def basket_min_sip(funds: Iterable[BasketFund]) -> float:
    return _basket_minimum(funds, "min_sip_amount")


def basket_min_investment(funds: Iterable[BasketFund]) -> float:
    return _basket_minimum(funds, "min_purchase_amount")


def combine_goals(goals: Sequence[GoalShare]) -> CombinedGoal:
    """Fold several goals funded by one SIP into a single target."""
    dates = [g.target_date for g in goals if g.target_date is not None]
    return CombinedGoal(
        target_amount=float(sum((_d(g.target_amount) for g in goals), Decimal(0))),
        target_date=min(dates) if dates else None,
        min_investment=float(sum((_d(g.min_investment) for g in goals), Decimal(0))),
        goal_count=len(goals),
    )


def normalize_amount(value: float, step: Optional[float] = None, limit: Optional[float] = None, *, settings: Optional[Settings] = None) -> float:
    """Round to a multiple of `step` (default 100) and clamp into [0, limit]."""
    settings = settings or SETTINGS
    step = settings.amount_step if step is None else step
    with engine_context():
        out = round_to_step(_d(value), step)
        if out <= 0:
            out = Decimal(0)
        if limit is not None and out > _d(limit):
            out = _d(limit)
    return to_float(out)


def normalize_sip(sip: float, min_investment: float = 0.0, goal_count: int = 1, *, settings: Optional[Settings] = None) -> float:
    """SIP rounded to 100 per funded goal, never below the baskets' minimum."""
    settings = settings or SETTINGS
    step = settings.sip_step_per_goal * max(1, int(goal_count))
    with engine_context():
        out = round_to_step(_d(sip), step)
        out = max(_d(min_investment), out)
    return to_float(out)


def split_across_goals(
    sip: float,
    goals: Sequence[GoalShare],
    *,
    lump_sum: float = 0.0,
    step_up: float = 0.0,
    settings: Optional[Settings] = None,
) -> List[GoalOrderSplit]:
    """Distribute combined amounts over goals in proportion to their targets.

    Every share is rounded to the allocation step (100) on its own, so the
    shares need not add back up to the combined amounts exactly.
    """
    settings = settings or SETTINGS
    if not goals:
        log.warning("No goal to split across")
        return []
    total = sum((_d(g.target_amount) for g in goals), Decimal(0))
    if total == 0:
        log.warning("Goals have a zero total target; nothing to split across %s goals", len(goals))
        return []

    step = settings.amount_step
    out: List[GoalOrderSplit] = []
    with engine_context():
        for g in goals:
            proportion = _d(g.target_amount) / total
            out.append(
                GoalOrderSplit(
                    goal_id=g.goal_id,
                    proportion=to_float(proportion),
                    sip_amount=_share(sip, proportion, step),
                    lump_sum_amount=_share(lump_sum, proportion, step),
                    step_up_amount=_share(step_up, proportion, step),
                )
            )
    return out


def _share(amount: float, proportion: Decimal, step: float) -> float:
    if amount <= 0:
        return 0.0
    return to_float(round_to_step(_d(amount) * proportion, step))
