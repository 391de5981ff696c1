from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Dict

import yaml
from dotenv import load_dotenv


@dataclass(frozen=True)
class Settings:
    env: str = "dev"
    log_level: str = "INFO"

    near_term_years: int = 10

    rounding_step: float = 500.0
    range_multiplier: float = 10.0
    tolerance: float = 0.01
    max_iterations: int = 60
    initial_upper_bound: float = 1_000_000.0
    max_bound_doublings: int = 60

    amount_step: float = 100.0
    sip_step_per_goal: float = 100.0

    max_sip: float = 100_000.0
    max_lump_sum: float = 500_000.0
    max_step_up: float = 10_000.0


def _deep_get(d: Dict[str, Any], path: str, default=None):
    cur = d
    for part in path.split("."):
        if not isinstance(cur, dict) or part not in cur:
            return default
        cur = cur[part]
    return cur


def load_settings(config_path: str = "config.yaml") -> Settings:
    """
    Loads config.yaml + overrides from .env/environment variables.
    """
    load_dotenv()

    cfg: Dict[str, Any] = {}
    if os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}

    # Empty env vars count as "not set" so they never mask config.yaml.
    def _env_or_cfg(key: str, cfg_path: str, default):
        v = os.getenv(key)
        if v is None:
            return _deep_get(cfg, cfg_path, default)
        v = v.strip()
        return _deep_get(cfg, cfg_path, default) if v == "" else v

    d = Settings()

    env = _env_or_cfg("APP_ENV", "app.env", d.env)
    log_level = _env_or_cfg("LOG_LEVEL", "app.log_level", d.log_level)

    near_term_years = int(_env_or_cfg("PROJECTION_NEAR_TERM_YEARS", "projection.near_term_years", d.near_term_years))

    rounding_step = float(_env_or_cfg("SOLVER_ROUNDING_STEP", "solver.rounding_step", d.rounding_step))
    range_multiplier = float(_env_or_cfg("SOLVER_RANGE_MULTIPLIER", "solver.range_multiplier", d.range_multiplier))
    tolerance = float(_env_or_cfg("SOLVER_TOLERANCE", "solver.tolerance", d.tolerance))
    max_iterations = int(_env_or_cfg("SOLVER_MAX_ITERATIONS", "solver.max_iterations", d.max_iterations))
    initial_upper_bound = float(_env_or_cfg("SOLVER_INITIAL_UPPER_BOUND", "solver.initial_upper_bound", d.initial_upper_bound))
    max_bound_doublings = int(_env_or_cfg("SOLVER_MAX_BOUND_DOUBLINGS", "solver.max_bound_doublings", d.max_bound_doublings))

    amount_step = float(_env_or_cfg("ALLOCATION_AMOUNT_STEP", "allocation.amount_step", d.amount_step))
    sip_step_per_goal = float(_env_or_cfg("ALLOCATION_SIP_STEP_PER_GOAL", "allocation.sip_step_per_goal", d.sip_step_per_goal))

    max_sip = float(_env_or_cfg("LIMIT_MAX_SIP", "limits.max_sip", d.max_sip))
    max_lump_sum = float(_env_or_cfg("LIMIT_MAX_LUMP_SUM", "limits.max_lump_sum", d.max_lump_sum))
    max_step_up = float(_env_or_cfg("LIMIT_MAX_STEP_UP", "limits.max_step_up", d.max_step_up))

    if isinstance(log_level, str):
        log_level = log_level.strip().upper()

    return Settings(
        env=env,
        log_level=log_level,
        near_term_years=near_term_years,
        rounding_step=rounding_step,
        range_multiplier=range_multiplier,
        tolerance=tolerance,
        max_iterations=max_iterations,
        initial_upper_bound=initial_upper_bound,
        max_bound_doublings=max_bound_doublings,
        amount_step=amount_step,
        sip_step_per_goal=sip_step_per_goal,
        max_sip=max_sip,
        max_lump_sum=max_lump_sum,
        max_step_up=max_step_up,
    )


# Optional convenience singleton
SETTINGS = load_settings()
