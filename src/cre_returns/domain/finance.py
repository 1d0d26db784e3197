from __future__ import annotations

from dataclasses import dataclass, field

from cre_returns.domain.assumptions import DealAssumptions


def annuity_payment(rate_monthly: float, n_months: int, principal: float) -> float:
    """
    Level payment for a fully amortizing loan:
    M = (r * P) / (1 - (1 + r)^-n)
    """
    r = rate_monthly
    if r == 0:
        return principal / n_months
    return (r * principal) / (1 - (1 + r) ** (-n_months))


@dataclass(frozen=True)
class AmortizationSchedule:
    loan_amount: float
    rate_monthly: float
    n_months: int
    monthly_payment: float
    # balances[m] = principal outstanding after m payments; balances[0] = loan
    balances: tuple[float, ...] = field(repr=False)

    @property
    def annual_debt_service(self) -> float:
        return self.monthly_payment * 12

    def balance_after(self, month: int) -> float:
        if month < 0:
            raise ValueError("month must be >= 0")
        if month < len(self.balances):
            return self.balances[month]
        raise ValueError(f"month {month} is beyond the simulated horizon ({len(self.balances) - 1})")

    def annual_balances(self, years: int) -> list[float]:
        """Year-end balances for years 1..years."""
        return [self.balance_after(y * 12) for y in range(1, years + 1)]


def build_amortization_schedule(
    purchase_price: float,
    equity_fraction: float,
    annual_interest_rate: float,
    amortization_years: int,
    months: int | None = None,
) -> AmortizationSchedule:
    """
    Simulate the loan month by month.

    interest = balance * r; principal = payment - interest; balance -= principal.
    `months` sets the simulated horizon (defaults to the full term). Past
    maturity the level payment keeps running, so the balance goes negative
    and the overpayment is credited back at payoff.
    """
    loan_amount = purchase_price * (1 - equity_fraction)
    m_rate = annual_interest_rate / 12
    n_months = amortization_years * 12
    payment = annuity_payment(m_rate, n_months, loan_amount)

    horizon = n_months if months is None else months
    balances = [loan_amount]
    bal = loan_amount
    for _ in range(horizon):
        interest = bal * m_rate
        principal = payment - interest
        bal -= principal
        balances.append(bal)

    return AmortizationSchedule(
        loan_amount=loan_amount,
        rate_monthly=m_rate,
        n_months=n_months,
        monthly_payment=payment,
        balances=tuple(balances),
    )


def schedule_for(assumptions: DealAssumptions) -> AmortizationSchedule:
    return build_amortization_schedule(
        purchase_price=assumptions.purchase_price,
        equity_fraction=assumptions.equity_fraction,
        annual_interest_rate=assumptions.annual_interest_rate,
        amortization_years=assumptions.amortization_years,
        months=assumptions.hold_years * 12,
    )
