from goalplan.core.config import Settings, load_settings

_ENV_KEYS = [
    "APP_ENV",
    "LOG_LEVEL",
    "PROJECTION_NEAR_TERM_YEARS",
    "SOLVER_ROUNDING_STEP",
    "SOLVER_RANGE_MULTIPLIER",
    "SOLVER_TOLERANCE",
    "SOLVER_MAX_ITERATIONS",
    "SOLVER_INITIAL_UPPER_BOUND",
    "SOLVER_MAX_BOUND_DOUBLINGS",
    "ALLOCATION_AMOUNT_STEP",
    "ALLOCATION_SIP_STEP_PER_GOAL",
    "LIMIT_MAX_SIP",
    "LIMIT_MAX_LUMP_SUM",
    "LIMIT_MAX_STEP_UP",
]


def _clear_env(monkeypatch):
    for k in _ENV_KEYS:
        monkeypatch.delenv(k, raising=False)


def test_defaults_when_config_missing(tmp_path, monkeypatch):
    _clear_env(monkeypatch)
    s = load_settings(str(tmp_path / "missing.yaml"))
    assert s == Settings()
    assert s.rounding_step == 500.0
    assert s.range_multiplier == 10.0
    assert s.tolerance == 0.01


def test_yaml_values_and_env_overrides(tmp_path, monkeypatch):
    _clear_env(monkeypatch)
    cfg = tmp_path / "config.yaml"
    cfg.write_text("solver:\n  rounding_step: 100\n  max_iterations: 40\nlimits:\n  max_sip: 50000\n", encoding="utf-8")
    monkeypatch.setenv("SOLVER_MAX_ITERATIONS", "50")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    s = load_settings(str(cfg))
    assert s.rounding_step == 100.0
    assert s.max_iterations == 50
    assert s.max_sip == 50000.0
    assert s.log_level == "DEBUG"


def test_empty_env_var_does_not_mask_config(tmp_path, monkeypatch):
    _clear_env(monkeypatch)
    cfg = tmp_path / "config.yaml"
    cfg.write_text("solver:\n  rounding_step: 250\n", encoding="utf-8")
    monkeypatch.setenv("SOLVER_ROUNDING_STEP", "  ")
    assert load_settings(str(cfg)).rounding_step == 250.0
