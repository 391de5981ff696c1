import math

import pytest

from goalplan.core.config import Settings
from goalplan.core.schemas import ContributionRequest
from goalplan.utils.contribution_solver import (
    build_contribution_plan,
    find_base_sip,
    schedule_future_value,
    solve_minimum_sip,
)


def _req(**kw):
    base = dict(target_amount=1_000_000, horizon_years=10, annual_return_rate=0.12, lump_sum=0, annual_step_up=0)
    base.update(kw)
    return ContributionRequest(**base)


def _exact_level_sip(target, years, rate):
    mr = rate / 12
    factor = ((1 + mr) ** 12 - 1) / mr
    growth = (1 + mr) ** 12
    weight = sum(factor * growth ** (years - 1 - k) for k in range(years))
    return target / weight


def test_ten_year_scenario_converges_and_rounds_to_500():
    req = _req()
    raw = find_base_sip(req)
    assert abs(raw - _exact_level_sip(1_000_000, 10, 0.12)) < 0.01
    assert abs(schedule_future_value(req, raw) - 1_000_000) < 0.01

    sip = solve_minimum_sip(req)
    assert sip % 500 == 0
    assert sip == 4500.0


def test_zero_rate_reduces_to_simple_division():
    req = _req(annual_return_rate=0.0)
    assert find_base_sip(req) == pytest.approx(1_000_000 / 120, abs=0.01)
    assert solve_minimum_sip(req) == 8500.0


def test_zero_rate_annuity_is_twelve_contributions():
    req = _req(horizon_years=1, annual_return_rate=0.0)
    assert schedule_future_value(req, 100) == pytest.approx(1200.0)


def test_plan_range_is_ten_times_minimum():
    plan = build_contribution_plan(_req())
    assert plan.status == "ok"
    assert plan.recommended_monthly_sip == 4500.0
    assert plan.suggested_range == (4500.0, 45000.0)


def test_lump_sum_covering_target_needs_no_sip():
    req = _req(horizon_years=5, lump_sum=1_000_000)
    assert solve_minimum_sip(req) == 0.0
    plan = build_contribution_plan(req)
    assert plan.status == "already_funded"
    assert plan.suggested_range == (0.0, 0.0)


def test_lump_sum_growth_alone_can_cover_target():
    # 600k at 1%/month for 10 years grows past 1.9M
    req = _req(target_amount=1_900_000, lump_sum=600_000)
    assert find_base_sip(req) == 0.0


def test_monotonic_in_lump_sum():
    raws = [find_base_sip(_req(lump_sum=l)) for l in (0, 100_000, 200_000, 300_000)]
    assert all(a > b for a, b in zip(raws, raws[1:]))
    sips = [solve_minimum_sip(_req(lump_sum=l)) for l in (0, 100_000, 200_000, 300_000)]
    assert all(a >= b for a, b in zip(sips, sips[1:]))


def test_monotonic_in_return_rate():
    sips = [solve_minimum_sip(_req(annual_return_rate=r)) for r in (0.0, 0.04, 0.08, 0.12, 0.16)]
    assert all(a >= b for a, b in zip(sips, sips[1:]))


def test_step_up_lowers_base_sip():
    flat = find_base_sip(_req())
    stepped = find_base_sip(_req(annual_step_up=1000))
    assert stepped < flat
    assert schedule_future_value(_req(annual_step_up=1000), stepped) >= 1_000_000 - 1e-6


def test_step_up_alone_reaching_target_needs_no_base_sip():
    req = _req(target_amount=100_000, annual_step_up=10_000)
    assert find_base_sip(req) == 0.0
    plan = build_contribution_plan(req)
    assert plan.status == "ok"
    assert plan.recommended_monthly_sip == 0.0


def test_zero_horizon_unreachable_is_flagged():
    req = _req(horizon_years=0, lump_sum=10_000)
    assert math.isinf(find_base_sip(req))
    assert math.isinf(solve_minimum_sip(req))
    plan = build_contribution_plan(req)
    assert plan.status == "unreachable"
    assert plan.recommended_monthly_sip == 0.0
    assert plan.suggested_range == (0.0, 0.0)


def test_zero_horizon_funded_by_lump_sum():
    req = _req(horizon_years=0, lump_sum=1_000_000)
    assert solve_minimum_sip(req) == 0.0
    assert build_contribution_plan(req).status == "already_funded"


def test_negative_horizon_behaves_like_zero():
    assert math.isinf(find_base_sip(_req(horizon_years=-2)))


def test_upper_bound_grows_for_large_targets():
    req = _req(target_amount=1e12, horizon_years=1, annual_return_rate=0.0)
    assert find_base_sip(req) == pytest.approx(1e12 / 12, abs=0.01)


def test_iteration_cap_is_honored():
    # one halving of the initial 1,000,000 bracket
    assert find_base_sip(_req(), settings=Settings(max_iterations=1)) == 500_000.0


def test_rounding_step_from_settings():
    assert solve_minimum_sip(_req(), settings=Settings(rounding_step=100)) == 4300.0


def test_non_finite_input_returns_nan():
    req = _req(target_amount=float("nan"))
    assert math.isnan(find_base_sip(req))
    assert math.isnan(solve_minimum_sip(req))
    plan = build_contribution_plan(req)
    assert plan.status == "invalid_input"
    assert math.isnan(plan.recommended_monthly_sip)


def test_idempotent():
    req = _req(lump_sum=50_000, annual_step_up=500, annual_return_rate=0.1)
    assert find_base_sip(req) == find_base_sip(req)
    assert build_contribution_plan(req) == build_contribution_plan(req)


def test_step_up_schedule_lands_within_tolerance_of_target():
    req = _req(target_amount=2_500_000, horizon_years=15, annual_return_rate=0.1, lump_sum=75_000, annual_step_up=500)
    gap = schedule_future_value(req, find_base_sip(req)) - 2_500_000
    assert -1e-6 <= gap < 0.01
