# src/cre_returns/api/schemas.py
from __future__ import annotations

import math
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from cre_returns.analysis.sensitivity import DEFAULT_EXIT_CAP_SHIFTS, DEFAULT_GROWTH_SHIFTS
from cre_returns.domain.assumptions import DealAssumptions
from cre_returns.domain.underwriting import (
    DealProjection,
    DerivedMetrics,
    OptimizationResult,
    Scenario,
    ValidationMessage,
    ValidationReport,
)


def _finite(v: Any) -> Any:
    # JSON has no NaN/Infinity; undefined IRR or unlevered DSCR go out as null
    if isinstance(v, float) and not math.isfinite(v):
        return None
    return v


# --------------------------------------------
# Requests
# --------------------------------------------

class OptimizeRequest(BaseModel):
    assumptions: DealAssumptions
    target_irr: float | None = Field(default=None, description="Defaults to OPTIMIZER_DEFAULT_TARGET_IRR")


class SensitivityRequest(BaseModel):
    assumptions: DealAssumptions
    exit_cap_shifts: list[float] = Field(default_factory=lambda: list(DEFAULT_EXIT_CAP_SHIFTS))
    growth_shifts: list[float] = Field(default_factory=lambda: list(DEFAULT_GROWTH_SHIFTS))


# --------------------------------------------
# Responses
# --------------------------------------------

class MetricsOut(BaseModel):
    irr: float | None
    equity_multiple: float
    cash_on_cash_year1: float
    annual_debt_service: float
    irr_converged: bool
    dscr_year1: float | None
    exit_value: float

    @classmethod
    def from_metrics(cls, m: DerivedMetrics) -> "MetricsOut":
        return cls(
            irr=_finite(m.irr),
            equity_multiple=m.equity_multiple,
            cash_on_cash_year1=m.cash_on_cash_year1,
            annual_debt_service=m.annual_debt_service,
            irr_converged=m.irr_converged,
            dscr_year1=_finite(m.dscr_year1),
            exit_value=m.exit_value,
        )


class YearOut(BaseModel):
    year: int
    noi: float
    debt_service: float
    cash_flow: float
    loan_balance: float


class ExitOut(BaseModel):
    exit_noi: float
    sale_value: float
    selling_costs: float
    loan_payoff: float
    net_proceeds: float


class ProjectionOut(BaseModel):
    years: list[YearOut]
    exit: ExitOut
    cash_flows: list[float]
    metrics: MetricsOut

    @classmethod
    def from_projection(cls, p: DealProjection) -> "ProjectionOut":
        balances = p.schedule.annual_balances(len(p.years))
        return cls(
            years=[
                YearOut(year=r.year, noi=r.noi, debt_service=r.debt_service, cash_flow=r.cash_flow, loan_balance=b)
                for r, b in zip(p.years, balances)
            ],
            exit=ExitOut(
                exit_noi=p.exit.exit_noi,
                sale_value=p.exit.sale_value,
                selling_costs=p.exit.selling_costs,
                loan_payoff=p.exit.loan_payoff,
                net_proceeds=p.exit.net_proceeds,
            ),
            cash_flows=list(p.series.flows),
            metrics=MetricsOut.from_metrics(p.metrics),
        )


class ScenarioOut(BaseModel):
    label: Literal["Conservative", "Base", "Aggressive"]
    assumptions: DealAssumptions
    terminal_value: float
    metrics: MetricsOut

    @classmethod
    def from_scenario(cls, s: Scenario) -> "ScenarioOut":
        return cls(
            label=s.label,
            assumptions=s.assumptions,
            terminal_value=s.terminal_value,
            metrics=MetricsOut.from_metrics(s.metrics),
        )


class OptimizeResponse(BaseModel):
    equity_fraction: float
    achieved_irr: float | None
    target_irr: float
    reachable: bool
    iterations: int

    @classmethod
    def from_result(cls, r: OptimizationResult) -> "OptimizeResponse":
        return cls(
            equity_fraction=r.equity_fraction,
            achieved_irr=_finite(r.achieved_irr),
            target_irr=r.target_irr,
            reachable=r.reachable,
            iterations=r.iterations,
        )


class MessageOut(BaseModel):
    code: str
    severity: Literal["error", "warning"]
    message: str
    context: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_message(cls, m: ValidationMessage) -> "MessageOut":
        return cls(
            code=m.code,
            severity=m.severity,
            message=m.message,
            context={k: _finite(v) for k, v in m.context.items()},
        )


class ValidateResponse(BaseModel):
    errors: list[MessageOut]
    warnings: list[MessageOut]

    @classmethod
    def from_report(cls, r: ValidationReport) -> "ValidateResponse":
        return cls(
            errors=[MessageOut.from_message(m) for m in r.errors],
            warnings=[MessageOut.from_message(m) for m in r.warnings],
        )


class SensitivityResponse(BaseModel):
    """One row per (exit cap shift, growth shift) combination."""
    model_config = ConfigDict(extra="allow")

    rows: list[dict[str, Any]]
