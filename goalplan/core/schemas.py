from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


# -------------------------
# Common / Core
# -------------------------

class ErrorEnvelope(BaseModel):
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None
    retriable: bool = False


class ValidationIssue(BaseModel):
    level: str  # ERROR | WARN | INFO
    message: str
    field: Optional[str] = None


class ValidationReport(BaseModel):
    ok: bool = True
    errors: List[ValidationIssue] = Field(default_factory=list)
    warnings: List[ValidationIssue] = Field(default_factory=list)

    def add_error(self, msg: str, field: Optional[str] = None) -> None:
        self.errors.append(ValidationIssue(level="ERROR", message=msg, field=field))

    def add_warning(self, msg: str, field: Optional[str] = None) -> None:
        self.warnings.append(ValidationIssue(level="WARN", message=msg, field=field))

    def merge(self, other: "ValidationReport") -> "ValidationReport":
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        return self.finalize()

    def finalize(self) -> "ValidationReport":
        self.ok = len(self.errors) == 0
        return self


# -------------------------
# Cost projection
# -------------------------
# Engine value types carry no range constraints: NaN/Infinity must reach
# the arithmetic. Preconditions are checked in goalplan.utils.validators.

class CostBaseline(BaseModel):
    model_config = ConfigDict(frozen=True)

    last_year_fee: float
    near_term_increase_rate: float = 0.0  # fraction, applies beyond 10 years
    long_term_increase_rate: float = 0.0  # fraction, applies over the full horizon


class ProjectionRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    baseline: CostBaseline
    horizon_years: int


# -------------------------
# Contribution solving
# -------------------------

PlanStatus = Literal["ok", "already_funded", "unreachable", "invalid_input"]


class ContributionRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    target_amount: float
    horizon_years: int
    annual_return_rate: float  # fraction, 0.12 == 12%
    lump_sum: float = 0.0
    annual_step_up: float = 0.0  # currency added to the SIP once per elapsed year


class ContributionPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    recommended_monthly_sip: float
    suggested_range: Tuple[float, float]
    status: PlanStatus = "ok"


class ScheduleRow(BaseModel):
    year: int
    monthly_sip: float
    contributed: float
    block_value: float
    value_at_horizon: float
    balance: float


# -------------------------
# Baskets / multi-goal allocation
# -------------------------

class BasketFund(BaseModel):
    fund_id: Optional[str] = None
    allocation_percentage: float = Field(..., gt=0, le=100)
    min_sip_amount: float = 0.0
    min_purchase_amount: float = 0.0


class GoalShare(BaseModel):
    goal_id: str
    target_amount: float = Field(..., ge=0)
    target_date: Optional[date] = None
    min_investment: float = Field(default=0.0, ge=0)


class CombinedGoal(BaseModel):
    target_amount: float
    target_date: Optional[date] = None
    min_investment: float
    goal_count: int


class GoalOrderSplit(BaseModel):
    goal_id: str
    proportion: float
    sip_amount: float
    lump_sum_amount: float
    step_up_amount: float


class GoalPlan(BaseModel):
    """Outcome of the end-to-end goal flow: projected cost, then the SIP to fund it."""

    target_amount: float
    horizon_years: int
    projected_from_baseline: bool = False
    plan: ContributionPlan
    unrounded_sip: float
    normalized_monthly_sip: Optional[float] = None  # after basket minimum / per-goal step
    schedule: List[ScheduleRow] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
