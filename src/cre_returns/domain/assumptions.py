# src/cre_returns/domain/assumptions.py
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DealAssumptions(BaseModel):
    """
    Immutable deal inputs for one evaluation.

    Only types are enforced here. Range checks (equity in (0, 1], positive
    exit cap, ...) belong to the validator so a bad combination can still be
    inspected and reported instead of failing at parse time.
    """
    model_config = ConfigDict(frozen=True, extra="forbid", allow_inf_nan=False)

    purchase_price: float = Field(..., description="Acquisition price in currency units")
    equity_fraction: float = Field(..., description="0.40 means 40% equity, 60% loan-to-cost")
    annual_interest_rate: float = Field(..., description="Nominal APR compounded monthly, e.g. 0.065")
    amortization_years: int = Field(..., description="Loan amortization period in years")
    hold_years: int = Field(..., description="Years held before sale")
    first_year_noi: float = Field(..., description="Year 1 net operating income")
    annual_noi_growth: float = Field(..., description="e.g. 0.025 for 2.5% per year")
    exit_cap_rate: float = Field(..., description="Cap rate used to price the sale")

    @field_validator(
        "equity_fraction",
        "annual_interest_rate",
        "annual_noi_growth",
        "exit_cap_rate",
        mode="before",
    )
    @classmethod
    def _percent_string(cls, v: Any) -> Any:
        # "6.5%" -> 0.065; bare numbers are taken as fractions already
        if isinstance(v, str):
            s = v.strip()
            if s.endswith("%"):
                return float(s[:-1]) / 100.0
            return s
        return v

    @field_validator("purchase_price", "first_year_noi", mode="before")
    @classmethod
    def _currency_string(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().replace(",", "").replace("$", "")
        return v

    @property
    def loan_amount(self) -> float:
        return self.purchase_price * (1.0 - self.equity_fraction)

    @property
    def initial_equity(self) -> float:
        return self.purchase_price * self.equity_fraction

    def with_overrides(self, **patch: Any) -> "DealAssumptions":
        """
        Return a re-validated copy with `patch` applied.

        Used for scenario variants, optimizer probes and externally suggested
        assumption patches alike.
        """
        return type(self).model_validate({**self.model_dump(), **patch})
