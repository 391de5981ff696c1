"""Inflation-adjusted future cost of a goal from a last-known annual fee.

Two inflation regimes apply. Up to `near_term_years` (10) the fee compounds at
the long-term rate only. Beyond that the near-term rate compounds over the
years past the threshold *and* the long-term rate over the full horizon; the
two factors are multiplied, not chained. Product has not confirmed that this
double compounding is intended, so it is kept exactly as the catalog
estimates have always been computed.
"""
from __future__ import annotations

import math
from decimal import Decimal
from typing import Optional

from goalplan.core.config import SETTINGS, Settings
from goalplan.core.schemas import CostBaseline, ProjectionRequest
from goalplan.utils.logging import get_logger
from goalplan.utils.money import _d, all_finite, engine_context, round_currency, to_float

log = get_logger(__name__)


def _float_pow(base: float, exp: int) -> float:
    try:
        return base ** exp
    except (OverflowError, ZeroDivisionError):
        return math.inf


def _float_projection(baseline: CostBaseline, years: int, threshold: int) -> float:
    # Non-finite inputs: let IEEE arithmetic produce NaN/Infinity.
    fee = float(baseline.last_year_fee)
    lt = 1.0 + float(baseline.long_term_increase_rate)
    if years <= threshold:
        return fee * _float_pow(lt, years)
    nt = 1.0 + float(baseline.near_term_increase_rate)
    return fee * _float_pow(nt, years - threshold) * _float_pow(lt, years)


def project_future_cost(
    baseline: CostBaseline,
    horizon_years: int,
    *,
    settings: Optional[Settings] = None,
) -> float:
    """Future cost of `baseline` after `horizon_years`, rounded to a whole unit.

    `horizon_years` is not clamped: zero returns the fee itself and negative
    values discount backward.
    """
    settings = settings or SETTINGS
    years = int(horizon_years)
    threshold = int(settings.near_term_years)

    if not all_finite(
        baseline.last_year_fee,
        baseline.near_term_increase_rate,
        baseline.long_term_increase_rate,
    ):
        log.warning("Non-finite cost baseline %s; result is not a number", baseline.model_dump())
        return _float_projection(baseline, years, threshold)

    with engine_context():
        fee = _d(baseline.last_year_fee)
        long_term = Decimal(1) + _d(baseline.long_term_increase_rate)

        if years <= threshold:
            future = fee * long_term ** years
        else:
            near_term = Decimal(1) + _d(baseline.near_term_increase_rate)
            future = fee * near_term ** (years - threshold) * long_term ** years

        out = round_currency(future)

    log.debug("Projected fee %s over %s years -> %s", baseline.last_year_fee, years, out)
    return to_float(out)


def project(request: ProjectionRequest, *, settings: Optional[Settings] = None) -> float:
    return project_future_cost(request.baseline, request.horizon_years, settings=settings)
