from __future__ import annotations

import math
from typing import Optional

from goalplan.core.config import SETTINGS, Settings
from goalplan.core.schemas import ContributionRequest, CostBaseline, ValidationReport


def _check_amount(report: ValidationReport, value: float, field: str) -> None:
    if not math.isfinite(value):
        report.add_error(f"{field} must be a finite number, got {value}.", field=field)
    elif value < 0:
        report.add_error(f"{field} cannot be negative.", field=field)


def validate_baseline(baseline: CostBaseline, horizon_years: Optional[int] = None, *, settings: Optional[Settings] = None) -> ValidationReport:
    settings = settings or SETTINGS
    report = ValidationReport()

    _check_amount(report, baseline.last_year_fee, "last_year_fee")
    _check_amount(report, baseline.near_term_increase_rate, "near_term_increase_rate")
    _check_amount(report, baseline.long_term_increase_rate, "long_term_increase_rate")

    if horizon_years is not None:
        if horizon_years < 0:
            report.add_warning(
                f"Target year is {abs(horizon_years)} year(s) in the past; the fee is discounted backward.",
                field="horizon_years",
            )
        elif horizon_years > settings.near_term_years:
            report.add_warning(
                f"Horizon beyond {settings.near_term_years} years compounds both increase rates.",
                field="horizon_years",
            )

    return report.finalize()


def validate_contribution_request(req: ContributionRequest, *, settings: Optional[Settings] = None) -> ValidationReport:
    settings = settings or SETTINGS
    report = ValidationReport()

    _check_amount(report, req.target_amount, "target_amount")
    _check_amount(report, req.lump_sum, "lump_sum")
    _check_amount(report, req.annual_step_up, "annual_step_up")
    _check_amount(report, req.annual_return_rate, "annual_return_rate")

    if math.isfinite(req.annual_return_rate) and req.annual_return_rate > 1:
        report.add_warning(
            f"annual_return_rate={req.annual_return_rate} looks like a percentage; rates are fractions (0.12 == 12%).",
            field="annual_return_rate",
        )

    if req.horizon_years <= 0 and not report.errors and req.lump_sum < req.target_amount:
        report.add_error("Target date must be at least one year away when the lump sum does not cover the target.", field="horizon_years")

    if req.lump_sum > settings.max_lump_sum:
        report.add_warning(f"lump_sum exceeds the {settings.max_lump_sum:.0f} limit.", field="lump_sum")
    if req.annual_step_up > settings.max_step_up:
        report.add_warning(f"annual_step_up exceeds the {settings.max_step_up:.0f} limit.", field="annual_step_up")

    return report.finalize()
