from goalplan.core.schemas import ContributionRequest, CostBaseline
from goalplan.utils.validators import validate_baseline, validate_contribution_request


def test_valid_baseline_has_no_issues():
    rep = validate_baseline(CostBaseline(last_year_fee=500000, near_term_increase_rate=0.08, long_term_increase_rate=0.06), 5)
    assert rep.ok
    assert rep.warnings == []


def test_baseline_warnings_for_long_and_past_horizons():
    b = CostBaseline(last_year_fee=500000, near_term_increase_rate=0.08, long_term_increase_rate=0.06)
    assert validate_baseline(b, 14).warnings[0].field == "horizon_years"
    assert "past" in validate_baseline(b, -1).warnings[0].message


def test_baseline_rejects_nan_and_negative_rates():
    rep = validate_baseline(CostBaseline(last_year_fee=float("nan"), long_term_increase_rate=-0.1))
    assert not rep.ok
    assert [e.field for e in rep.errors] == ["last_year_fee", "long_term_increase_rate"]


def test_request_over_limits_only_warns():
    req = ContributionRequest(
        target_amount=5_000_000, horizon_years=10, annual_return_rate=0.1, lump_sum=600_000, annual_step_up=20_000
    )
    rep = validate_contribution_request(req)
    assert rep.ok
    assert {w.field for w in rep.warnings} == {"lump_sum", "annual_step_up"}


def test_zero_horizon_is_fine_when_lump_sum_covers_target():
    req = ContributionRequest(target_amount=1000, horizon_years=0, annual_return_rate=0.1, lump_sum=1000)
    assert validate_contribution_request(req).ok


def test_negative_amounts_are_errors():
    req = ContributionRequest(target_amount=-1, horizon_years=3, annual_return_rate=0.1)
    rep = validate_contribution_request(req)
    assert not rep.ok
    assert rep.errors[0].field == "target_amount"
