# src/cre_returns/adapters/config.py
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineConfig(BaseSettings):
    # App & logging
    ENV: str = Field(default="dev")
    LOG_LEVEL: str = Field(default="INFO")

    # -----------------------------
    # IRR solver (Newton-Raphson)
    # -----------------------------
    IRR_INITIAL_GUESS: float = Field(default=0.12)
    IRR_MAX_ITERATIONS: int = Field(default=50)
    IRR_TOLERANCE: float = Field(default=1e-7)
    IRR_RATE_FLOOR: float = Field(default=-0.99)

    # -----------------------------
    # Exit / sale
    # -----------------------------
    SELLING_COST_RATE: float = Field(default=0.02)
    # "forward" prices the sale on year hold+1 NOI, "trailing" on the final hold year
    EXIT_NOI_BASIS: Literal["forward", "trailing"] = Field(default="forward")

    # -----------------------------
    # Scenario perturbations
    # -----------------------------
    SCENARIO_CONSERVATIVE_GROWTH_SPREAD: float = Field(default=0.010)
    SCENARIO_AGGRESSIVE_GROWTH_SPREAD: float = Field(default=0.015)
    SCENARIO_LARGE_DEAL_PRICE: float = Field(default=40_000_000.0)
    SCENARIO_LARGE_DEAL_CONSERVATIVE_GROWTH_SPREAD: float = Field(default=0.008)
    SCENARIO_LARGE_DEAL_AGGRESSIVE_GROWTH_SPREAD: float = Field(default=0.010)
    SCENARIO_EXIT_CAP_SPREAD: float = Field(default=0.005)
    SCENARIO_GROWTH_FLOOR: float = Field(default=0.015)
    SCENARIO_GROWTH_CEILING: float = Field(default=0.045)
    SCENARIO_EXIT_CAP_FLOOR: float = Field(default=0.045)
    SCENARIO_WORKERS: int = Field(default=3)

    # -----------------------------
    # Target-IRR optimizer
    # -----------------------------
    OPTIMIZER_MIN_EQUITY: float = Field(default=0.05)
    OPTIMIZER_MAX_EQUITY: float = Field(default=1.0)
    OPTIMIZER_GRID_POINTS: int = Field(default=20)
    OPTIMIZER_MAX_ITERATIONS: int = Field(default=60)
    OPTIMIZER_IRR_TOLERANCE: float = Field(default=1e-4)
    OPTIMIZER_DEFAULT_TARGET_IRR: float = Field(default=0.15)

    # -----------------------------
    # Validator thresholds
    # -----------------------------
    MIN_EQUITY_FRACTION_WARN: float = Field(default=0.25)
    MIN_TARGET_IRR_WARN: float = Field(default=0.08)
    MIN_EXIT_CAP_WARN: float = Field(default=0.05)
    MIN_HOLD_YEARS_WARN: int = Field(default=3)
    MIN_DSCR_WARN: float = Field(default=1.0)

    model_config = SettingsConfigDict(
        env_prefix="CRE_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator(
        "SELLING_COST_RATE",
        "SCENARIO_CONSERVATIVE_GROWTH_SPREAD",
        "SCENARIO_AGGRESSIVE_GROWTH_SPREAD",
        "SCENARIO_LARGE_DEAL_CONSERVATIVE_GROWTH_SPREAD",
        "SCENARIO_LARGE_DEAL_AGGRESSIVE_GROWTH_SPREAD",
        "SCENARIO_EXIT_CAP_SPREAD",
        "SCENARIO_GROWTH_FLOOR",
        "SCENARIO_GROWTH_CEILING",
        "SCENARIO_EXIT_CAP_FLOOR",
        "OPTIMIZER_MIN_EQUITY",
        "OPTIMIZER_MAX_EQUITY",
        "MIN_EQUITY_FRACTION_WARN",
        "MIN_EXIT_CAP_WARN",
        mode="before",
    )
    @classmethod
    def _to_non_negative_fraction(cls, v: Any) -> Any:
        if v is None:
            return v
        if isinstance(v, str):
            s = v.strip()
            if s.endswith("%"):
                return _non_negative(float(s[:-1]) / 100.0)
            v = s
        try:
            f = float(v)
        except Exception as err:
            raise ValueError("rate must be numeric or percent-like") from err
        return _non_negative(f)

    @field_validator("IRR_MAX_ITERATIONS", "OPTIMIZER_MAX_ITERATIONS", "OPTIMIZER_GRID_POINTS", "SCENARIO_WORKERS")
    @classmethod
    def _positive_count(cls, v: int) -> int:
        if v < 1:
            raise ValueError("iteration/worker counts must be >= 1")
        return v

    @field_validator("IRR_TOLERANCE", "OPTIMIZER_IRR_TOLERANCE")
    @classmethod
    def _positive_tolerance(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("tolerance must be > 0")
        return v

    @field_validator("IRR_RATE_FLOOR")
    @classmethod
    def _floor_above_minus_one(cls, v: float) -> float:
        if v <= -1.0:
            raise ValueError("IRR_RATE_FLOOR must be > -1.0")
        return v


def _non_negative(f: float) -> float:
    if f < 0:
        raise ValueError("rate must be non-negative")
    return f


config = EngineConfig()
