from cre_returns.domain.assumptions import DealAssumptions
from cre_returns.domain.errors import ConfigurationError
from cre_returns.domain.underwriting import ValidationMessage


def _error(code: str, message: str, **context) -> ValidationMessage:
    return ValidationMessage(code=code, severity="error", message=message, context=context)


def configuration_problems(a: DealAssumptions) -> list[ValidationMessage]:
    """Hard errors: assumption combinations the engine cannot evaluate."""
    problems = []

    if a.purchase_price <= 0:
        problems.append(_error("PRICE_NON_POSITIVE", "Purchase price must be positive.", purchase_price=a.purchase_price))
    if a.equity_fraction <= 0 or a.equity_fraction > 1:
        problems.append(
            _error(
                "EQUITY_OUT_OF_RANGE",
                "Equity fraction must be greater than 0 and at most 1.",
                equity_fraction=a.equity_fraction,
            )
        )
    if a.exit_cap_rate <= 0:
        problems.append(_error("EXIT_CAP_NON_POSITIVE", "Exit cap rate must be positive.", exit_cap_rate=a.exit_cap_rate))
    if a.annual_interest_rate < 0:
        problems.append(
            _error("INTEREST_NEGATIVE", "Interest rate cannot be negative.", annual_interest_rate=a.annual_interest_rate)
        )
    if a.hold_years <= 0:
        problems.append(_error("HOLD_NON_POSITIVE", "Hold period must be at least one year.", hold_years=a.hold_years))
    if a.amortization_years <= 0:
        problems.append(
            _error(
                "AMORTIZATION_NON_POSITIVE",
                "Amortization period must be at least one year.",
                amortization_years=a.amortization_years,
            )
        )

    return problems


def require_valid(a: DealAssumptions) -> None:
    problems = configuration_problems(a)
    if problems:
        raise ConfigurationError(problems)
