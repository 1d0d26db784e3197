import pytest
from pydantic import ValidationError

from cre_returns.adapters.config import EngineConfig


def test_defaults():
    cfg = EngineConfig()

    assert cfg.IRR_INITIAL_GUESS == 0.12
    assert cfg.IRR_MAX_ITERATIONS == 50
    assert cfg.IRR_TOLERANCE == 1e-7
    assert cfg.IRR_RATE_FLOOR == -0.99
    assert cfg.SELLING_COST_RATE == 0.02
    assert cfg.EXIT_NOI_BASIS == "forward"


def test_env_override_with_percent(monkeypatch):
    monkeypatch.setenv("CRE_SELLING_COST_RATE", "3%")
    monkeypatch.setenv("CRE_EXIT_NOI_BASIS", "trailing")
    monkeypatch.setenv("cre_irr_max_iterations", "80")

    cfg = EngineConfig()

    assert cfg.SELLING_COST_RATE == pytest.approx(0.03)
    assert cfg.EXIT_NOI_BASIS == "trailing"
    assert cfg.IRR_MAX_ITERATIONS == 80


@pytest.mark.parametrize(
    "kwargs",
    [
        {"SELLING_COST_RATE": -0.01},
        {"SELLING_COST_RATE": "abc"},
        {"EXIT_NOI_BASIS": "sideways"},
        {"IRR_MAX_ITERATIONS": 0},
        {"IRR_TOLERANCE": 0},
        {"IRR_RATE_FLOOR": -1.0},
    ],
)
def test_invalid_settings_rejected(kwargs):
    with pytest.raises(ValidationError):
        EngineConfig(**kwargs)
