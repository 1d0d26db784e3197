from pprint import pprint

from cre_returns.analysis.returns import project_deal
from cre_returns.domain.assumptions import DealAssumptions
from cre_returns.services.scenarios import generate_scenarios
from cre_returns.services.validation import validate_assumptions


def main() -> None:
    deal = DealAssumptions(
        purchase_price=10_000_000,
        equity_fraction=0.40,
        annual_interest_rate=0.065,
        amortization_years=30,
        hold_years=5,
        first_year_noi=650_000,
        annual_noi_growth=0.025,
        exit_cap_rate=0.06,
    )

    projection = project_deal(deal)

    print("\n=== YEARS ===")
    print(projection.to_frame().to_string(index=False))

    print("\n=== EXIT ===")
    pprint(projection.exit)

    print("\n=== CASH FLOWS ===")
    pprint(projection.series.flows)

    print("\n=== METRICS ===")
    pprint(projection.metrics)

    print("\n=== SCENARIOS ===")
    for s in generate_scenarios(deal):
        print(f"{s.label:<13} irr={s.irr:.4f} terminal_value={s.terminal_value:,.0f}")

    print("\n=== VALIDATION ===")
    pprint(validate_assumptions(deal).messages())


if __name__ == "__main__":
    main()
