# src/cre_returns/analysis/cashflow.py
from __future__ import annotations

from cre_returns.adapters.config import EngineConfig, config
from cre_returns.domain.assumptions import DealAssumptions
from cre_returns.domain.errors import ConfigurationError
from cre_returns.domain.finance import AmortizationSchedule
from cre_returns.domain.underwriting import CashFlowSeries, ExitValue, ValidationMessage, YearRow


def noi_for_year(assumptions: DealAssumptions, year: int) -> float:
    """NOI compounds from year 1: noi_y = noi_1 * (1 + g)^(y - 1)."""
    return assumptions.first_year_noi * (1 + assumptions.annual_noi_growth) ** (year - 1)


def project_years(assumptions: DealAssumptions, schedule: AmortizationSchedule) -> list[YearRow]:
    rows = []
    debt = schedule.annual_debt_service
    for y in range(1, assumptions.hold_years + 1):
        noi = noi_for_year(assumptions, y)
        rows.append(YearRow(year=y, noi=noi, debt_service=debt, cash_flow=noi - debt))
    return rows


def compute_exit_value(
    assumptions: DealAssumptions,
    rows: list[YearRow],
    schedule: AmortizationSchedule,
    settings: EngineConfig | None = None,
) -> ExitValue:
    """
    Sale at the end of the hold.

    The terminal NOI is taken from the projected rows so growth is never
    applied twice; "forward" then grows it one more year for the buyer.
    """
    settings = settings or config

    cap = assumptions.exit_cap_rate
    if cap <= 0:
        raise ConfigurationError(
            [
                ValidationMessage(
                    code="EXIT_CAP_NON_POSITIVE",
                    severity="error",
                    message="Exit cap rate must be positive.",
                    context={"exit_cap_rate": cap},
                )
            ]
        )

    terminal_noi = rows[-1].noi
    if settings.EXIT_NOI_BASIS == "forward":
        exit_noi = terminal_noi * (1 + assumptions.annual_noi_growth)
    else:
        exit_noi = terminal_noi

    sale_value = exit_noi / cap
    selling_costs = sale_value * settings.SELLING_COST_RATE
    loan_payoff = schedule.balance_after(assumptions.hold_years * 12)

    return ExitValue(
        exit_noi=exit_noi,
        sale_value=sale_value,
        selling_costs=selling_costs,
        loan_payoff=loan_payoff,
        net_proceeds=sale_value - selling_costs - loan_payoff,
    )


def build_cash_flow_series(assumptions: DealAssumptions, rows: list[YearRow], exit: ExitValue) -> CashFlowSeries:
    flows = [-assumptions.initial_equity]
    flows.extend(r.cash_flow for r in rows)
    # sale proceeds are added to, not replacing, the last operating year
    flows[-1] += exit.net_proceeds
    return CashFlowSeries(flows=tuple(flows))
