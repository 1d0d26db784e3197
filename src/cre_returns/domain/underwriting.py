from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Optional

import pandas as pd

from cre_returns.domain.assumptions import DealAssumptions
from cre_returns.domain.errors import ConfigurationError
from cre_returns.domain.finance import AmortizationSchedule

ScenarioLabel = Literal["Conservative", "Base", "Aggressive"]
Severity = Literal["error", "warning"]


@dataclass(frozen=True)
class IrrResult:
    rate: float             # annual rate; nan when no IRR exists
    converged: bool         # tolerance met within the iteration budget
    iterations: int


@dataclass(frozen=True)
class YearRow:
    year: int
    noi: float
    debt_service: float
    cash_flow: float        # NOI - debt service, before sale proceeds


@dataclass(frozen=True)
class ExitValue:
    exit_noi: float         # NOI the buyer prices the asset on
    sale_value: float       # exit_noi / exit cap
    selling_costs: float
    loan_payoff: float      # balance after hold_years * 12 months
    net_proceeds: float     # sale - costs - payoff


@dataclass(frozen=True)
class CashFlowSeries:
    """
    Equity cash flows indexed by year: flows[0] is the (negative) equity
    outlay, flows[-1] includes net sale proceeds. Always hold_years + 1 long.
    """
    flows: tuple[float, ...]

    @property
    def initial_equity(self) -> float:
        return -self.flows[0]

    @property
    def total_distributions(self) -> float:
        return sum(self.flows[1:])

    def __len__(self) -> int:
        return len(self.flows)


@dataclass(frozen=True)
class DerivedMetrics:
    irr: float
    equity_multiple: float
    cash_on_cash_year1: float
    annual_debt_service: float
    irr_converged: bool = True
    dscr_year1: float = float("inf")
    exit_value: float = 0.0


@dataclass(frozen=True)
class DealProjection:
    assumptions: DealAssumptions
    schedule: AmortizationSchedule
    years: tuple[YearRow, ...]
    exit: ExitValue
    series: CashFlowSeries
    metrics: DerivedMetrics

    def to_frame(self) -> pd.DataFrame:
        """Yearly rows plus the equity cash flow actually received each year."""
        df = pd.DataFrame(
            [
                {"year": r.year, "noi": r.noi, "debt_service": r.debt_service, "cash_flow": r.cash_flow}
                for r in self.years
            ]
        )
        df["loan_balance"] = self.schedule.annual_balances(len(self.years))
        df["equity_cash_flow"] = list(self.series.flows[1:])
        return df


@dataclass(frozen=True)
class Scenario:
    label: ScenarioLabel
    assumptions: DealAssumptions
    metrics: DerivedMetrics

    @property
    def terminal_value(self) -> float:
        return self.metrics.exit_value

    @property
    def irr(self) -> float:
        return self.metrics.irr


@dataclass(frozen=True)
class OptimizationResult:
    equity_fraction: float
    achieved_irr: float
    target_irr: float
    reachable: bool
    iterations: int


@dataclass(frozen=True)
class ValidationMessage:
    code: str
    severity: Severity
    message: str
    context: dict[str, Any] = field(default_factory=dict)


@dataclass
class ValidationReport:
    errors: list[ValidationMessage] = field(default_factory=list)
    warnings: list[ValidationMessage] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def has_flags(self) -> bool:
        return bool(self.errors or self.warnings)

    def messages(self) -> list[str]:
        return [m.message for m in self.errors + self.warnings]


@dataclass(frozen=True)
class EvaluationResult:
    """Either metrics or the configuration error that prevented computing them."""
    ok: bool
    metrics: Optional[DerivedMetrics] = None
    error: Optional[ConfigurationError] = None
