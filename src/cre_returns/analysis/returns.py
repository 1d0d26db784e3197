# src/cre_returns/analysis/returns.py
from __future__ import annotations

from cre_returns.adapters.config import EngineConfig, config
from cre_returns.adapters.logging_utils import get_logger
from cre_returns.analysis.cashflow import build_cash_flow_series, compute_exit_value, project_years
from cre_returns.analysis.irr import solve_irr
from cre_returns.domain.assumptions import DealAssumptions
from cre_returns.domain.errors import ConfigurationError
from cre_returns.domain.finance import AmortizationSchedule, schedule_for
from cre_returns.domain.rules import require_valid
from cre_returns.domain.underwriting import (
    CashFlowSeries,
    DealProjection,
    DerivedMetrics,
    EvaluationResult,
    ExitValue,
    IrrResult,
)

logger = get_logger(__name__)


def aggregate_metrics(
    assumptions: DealAssumptions,
    schedule: AmortizationSchedule,
    series: CashFlowSeries,
    exit: ExitValue,
    irr: IrrResult,
) -> DerivedMetrics:
    """
    Investor-facing metrics from the equity cash flows:
    - equity multiple = total distributions / initial equity
    - cash-on-cash (yr 1) = (NOI_1 - annual debt service) / initial equity
    """
    equity_in = series.initial_equity
    annual_debt = schedule.annual_debt_service

    dscr = assumptions.first_year_noi / annual_debt if annual_debt > 0 else float("inf")

    return DerivedMetrics(
        irr=irr.rate,
        equity_multiple=series.total_distributions / equity_in,
        cash_on_cash_year1=(assumptions.first_year_noi - annual_debt) / equity_in,
        annual_debt_service=annual_debt,
        irr_converged=irr.converged,
        dscr_year1=dscr,
        exit_value=exit.sale_value,
    )


def project_deal(assumptions: DealAssumptions, settings: EngineConfig | None = None) -> DealProjection:
    """
    Full pipeline: amortization -> yearly cash flows -> exit -> IRR & metrics.

    Raises ConfigurationError before computing anything if the assumptions
    cannot be evaluated.
    """
    settings = settings or config
    require_valid(assumptions)

    schedule = schedule_for(assumptions)
    rows = project_years(assumptions, schedule)
    exit = compute_exit_value(assumptions, rows, schedule, settings)
    series = build_cash_flow_series(assumptions, rows, exit)
    irr = solve_irr(series.flows, settings)

    return DealProjection(
        assumptions=assumptions,
        schedule=schedule,
        years=tuple(rows),
        exit=exit,
        series=series,
        metrics=aggregate_metrics(assumptions, schedule, series, exit, irr),
    )


def compute_outputs(assumptions: DealAssumptions, settings: EngineConfig | None = None) -> DerivedMetrics:
    return project_deal(assumptions, settings).metrics


def evaluate(assumptions: DealAssumptions, settings: EngineConfig | None = None) -> EvaluationResult:
    """Result-typed variant of compute_outputs for live-recompute callers."""
    try:
        metrics = compute_outputs(assumptions, settings)
    except ConfigurationError as err:
        logger.warning(
            "configuration_error",
            extra={"context": {"problems": [p.code for p in err.problems]}},
        )
        return EvaluationResult(ok=False, error=err)
    return EvaluationResult(ok=True, metrics=metrics)
