# src/cre_returns/services/validation.py
from __future__ import annotations

import math

from cre_returns.adapters.config import EngineConfig, config
from cre_returns.adapters.logging_utils import get_logger
from cre_returns.analysis.returns import compute_outputs
from cre_returns.domain.assumptions import DealAssumptions
from cre_returns.domain.rules import configuration_problems
from cre_returns.domain.underwriting import DerivedMetrics, ValidationMessage, ValidationReport

logger = get_logger(__name__)


def _warning(code: str, message: str, **context) -> ValidationMessage:
    return ValidationMessage(code=code, severity="warning", message=message, context=context)


def validate_assumptions(
    assumptions: DealAssumptions,
    settings: EngineConfig | None = None,
    metrics: DerivedMetrics | None = None,
) -> ValidationReport:
    """
    Risk checks on the assumptions and, when they are evaluable, on the
    resulting metrics.

    Produces:
        ValidationReport(
            errors=[ValidationMessage(code, "error", message, context), ...],
            warnings=[ValidationMessage(code, "warning", message, context), ...],
        )

    These never raise; callers decide whether to block on errors. Pass
    `metrics` to skip recomputing the pipeline.
    """
    settings = settings or config
    a = assumptions

    errors = configuration_problems(a)
    warnings = []

    # ------------------------------------------------------------------
    # 1) Assumption-only checks
    # ------------------------------------------------------------------
    if 0 < a.equity_fraction < settings.MIN_EQUITY_FRACTION_WARN:
        warnings.append(
            _warning(
                "LOW_EQUITY",
                f"Low equity increases risk: equity below {settings.MIN_EQUITY_FRACTION_WARN:.0%} "
                "raises refinance and sale risk.",
                equity_fraction=a.equity_fraction,
            )
        )

    if a.exit_cap_rate > 0:
        if a.exit_cap_rate < a.annual_interest_rate:
            warnings.append(
                _warning(
                    "EXIT_CAP_BELOW_INTEREST",
                    "Exit cap below interest rate: negative leverage and cap-rate compression risk.",
                    exit_cap_rate=a.exit_cap_rate,
                    annual_interest_rate=a.annual_interest_rate,
                )
            )
        if a.exit_cap_rate < settings.MIN_EXIT_CAP_WARN:
            warnings.append(
                _warning(
                    "EXIT_CAP_OPTIMISTIC",
                    f"Exit cap below {settings.MIN_EXIT_CAP_WARN:.0%} may be optimistic for most markets.",
                    exit_cap_rate=a.exit_cap_rate,
                )
            )

    if 0 < a.hold_years < settings.MIN_HOLD_YEARS_WARN:
        warnings.append(
            _warning(
                "SHORT_HOLD",
                f"Hold period under {settings.MIN_HOLD_YEARS_WARN} years increases market timing risk.",
                hold_years=a.hold_years,
            )
        )

    # ------------------------------------------------------------------
    # 2) Metric checks (only when the deal can be evaluated)
    # ------------------------------------------------------------------
    if not errors:
        if metrics is None:
            try:
                metrics = compute_outputs(a, settings)
            except ArithmeticError as err:
                warnings.append(
                    _warning("METRICS_UNAVAILABLE", "Return metrics could not be computed.", detail=str(err))
                )

    if metrics is not None and not errors:
        if math.isnan(metrics.irr):
            warnings.append(
                _warning("IRR_UNDEFINED", "IRR is undefined: the deal never returns cash to equity.")
            )
        else:
            if metrics.irr < settings.MIN_TARGET_IRR_WARN:
                warnings.append(
                    _warning(
                        "IRR_BELOW_MARKET",
                        f"IRR below market expectations ({settings.MIN_TARGET_IRR_WARN:.0%}).",
                        irr=metrics.irr,
                    )
                )
            if not metrics.irr_converged:
                warnings.append(
                    _warning(
                        "IRR_NOT_CONVERGED",
                        "IRR solver did not converge; the figure is an estimate.",
                        irr=metrics.irr,
                    )
                )
        if metrics.dscr_year1 < settings.MIN_DSCR_WARN:
            warnings.append(
                _warning(
                    "DSCR_BELOW_ONE",
                    "Year 1 NOI does not cover debt service; watch DSCR and valuation risk.",
                    dscr_year1=metrics.dscr_year1,
                )
            )

    report = ValidationReport(errors=errors, warnings=warnings)

    if report.has_flags:
        logger.info(
            "assumption_validation_flags",
            extra={"context": {"errors": [m.code for m in errors], "warnings": [m.code for m in warnings]}},
        )

    return report
