from __future__ import annotations

from decimal import Decimal
from typing import List

import pandas as pd

from goalplan.core.schemas import ContributionRequest, ScheduleRow
from goalplan.utils.contribution_solver import MONTHS_PER_YEAR, _annuity_factor, _block_weights, _monthly_rate
from goalplan.utils.money import _d, all_finite, engine_context, to_float

SCHEDULE_COLUMNS = ["year", "monthly_sip", "contributed", "block_value", "value_at_horizon", "balance"]


def schedule_rows(request: ContributionRequest, base_sip: float) -> List[ScheduleRow]:
    """Year-by-year breakdown of the SIP schedule solved for `request`.

    `balance` is the running value at the end of each year, lump sum included;
    the last row's balance equals `schedule_future_value(request, base_sip)`.
    """
    if not all_finite(base_sip, request.annual_return_rate, request.lump_sum, request.annual_step_up):
        return []

    n_years = max(0, int(request.horizon_years))
    rows: List[ScheduleRow] = []

    with engine_context():
        mr = _monthly_rate(request.annual_return_rate)
        factor = _annuity_factor(mr)
        growth = (Decimal(1) + mr) ** MONTHS_PER_YEAR
        weights = _block_weights(mr, n_years)
        step = _d(request.annual_step_up)

        balance = _d(request.lump_sum)
        for k in range(n_years):
            monthly = _d(base_sip) + k * step
            block = monthly * factor
            balance = balance * growth + block
            rows.append(
                ScheduleRow(
                    year=k + 1,
                    monthly_sip=to_float(monthly),
                    contributed=to_float(monthly * MONTHS_PER_YEAR),
                    block_value=to_float(block),
                    value_at_horizon=to_float(monthly * weights[k]),
                    balance=to_float(balance),
                )
            )
    return rows


def contribution_schedule(request: ContributionRequest, base_sip: float) -> pd.DataFrame:
    rows = schedule_rows(request, base_sip)
    return pd.DataFrame([r.model_dump() for r in rows], columns=SCHEDULE_COLUMNS)
