import math
from concurrent.futures import ThreadPoolExecutor

import pytest
from hypothesis import given, settings, strategies as st

from cre_returns.analysis.returns import compute_outputs, evaluate, project_deal
from cre_returns.domain.assumptions import DealAssumptions
from cre_returns.domain.errors import ConfigurationError
from fixtures.deals import reference_deal


def test_reference_deal_regression():
    m = compute_outputs(reference_deal())

    assert m.annual_debt_service == pytest.approx(455_089.0, rel=1e-4)
    assert m.irr == pytest.approx(0.1455, abs=2e-3)
    assert m.irr_converged
    assert m.equity_multiple == pytest.approx(1.884, abs=2e-3)
    assert m.equity_multiple > 1.0
    assert m.cash_on_cash_year1 == pytest.approx(0.04873, abs=1e-4)
    assert m.dscr_year1 == pytest.approx(650_000.0 / m.annual_debt_service)
    assert m.exit_value == pytest.approx(12_256_922.0, rel=1e-6)


def test_unlevered_deal():
    m = compute_outputs(reference_deal(equity_fraction=1.0))

    assert m.annual_debt_service == 0.0
    assert math.isinf(m.dscr_year1)
    assert m.cash_on_cash_year1 == pytest.approx(0.065)
    # positive leverage: debt raises the return
    assert m.irr < compute_outputs(reference_deal()).irr


def test_zero_interest_deal_is_evaluable():
    m = compute_outputs(reference_deal(annual_interest_rate=0.0))

    assert m.annual_debt_service == pytest.approx(6_000_000.0 / 30)
    assert m.irr_converged


def test_same_inputs_same_outputs_across_threads():
    a = reference_deal()

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: compute_outputs(a), range(32)))

    assert all(r == results[0] for r in results)


@pytest.mark.parametrize(
    "overrides, code",
    [
        ({"equity_fraction": 0.0}, "EQUITY_OUT_OF_RANGE"),
        ({"equity_fraction": 1.2}, "EQUITY_OUT_OF_RANGE"),
        ({"exit_cap_rate": -0.01}, "EXIT_CAP_NON_POSITIVE"),
        ({"purchase_price": 0.0}, "PRICE_NON_POSITIVE"),
        ({"hold_years": 0}, "HOLD_NON_POSITIVE"),
        ({"amortization_years": 0}, "AMORTIZATION_NON_POSITIVE"),
    ],
)
def test_configuration_errors_fail_fast(overrides, code):
    a = reference_deal(**overrides)

    with pytest.raises(ConfigurationError) as exc:
        compute_outputs(a)
    assert code in [p.code for p in exc.value.problems]

    res = evaluate(a)
    assert not res.ok
    assert res.metrics is None
    assert code in [p.code for p in res.error.problems]


def test_evaluate_ok():
    res = evaluate(reference_deal())

    assert res.ok
    assert res.error is None
    assert res.metrics == compute_outputs(reference_deal())


def test_projection_frame():
    p = project_deal(reference_deal())

    df = p.to_frame()

    assert list(df.columns) == ["year", "noi", "debt_service", "cash_flow", "loan_balance", "equity_cash_flow"]
    assert df["year"].tolist() == [1, 2, 3, 4, 5]
    assert df["equity_cash_flow"].iloc[-1] == pytest.approx(p.series.flows[-1])
    assert df["loan_balance"].iloc[-1] == pytest.approx(p.exit.loan_payoff)


def _deal(price, going_in_cap, growth, rate, exit_cap, hold, equity):
    return DealAssumptions(
        purchase_price=price,
        equity_fraction=equity,
        annual_interest_rate=rate,
        amortization_years=30,
        hold_years=hold,
        first_year_noi=price * going_in_cap,
        annual_noi_growth=growth,
        exit_cap_rate=exit_cap,
    )


@settings(max_examples=60, deadline=None)
@given(
    going_in_cap=st.floats(min_value=0.07, max_value=0.09),
    growth=st.floats(min_value=0.01, max_value=0.04),
    rate=st.floats(min_value=0.03, max_value=0.05),
    exit_cap=st.floats(min_value=0.05, max_value=0.07),
    hold=st.integers(min_value=3, max_value=10),
    equity=st.floats(min_value=0.4, max_value=0.9),
    delta=st.floats(min_value=0.05, max_value=0.2),
)
def test_more_leverage_raises_irr_with_positive_spread(going_in_cap, growth, rate, exit_cap, hold, equity, delta):
    low_lev = compute_outputs(_deal(10_000_000.0, going_in_cap, growth, rate, exit_cap, hold, equity))
    high_lev = compute_outputs(_deal(10_000_000.0, going_in_cap, growth, rate, exit_cap, hold, equity - delta))

    assert low_lev.irr_converged and high_lev.irr_converged
    assert high_lev.irr > low_lev.irr


@settings(max_examples=60, deadline=None)
@given(
    price=st.floats(min_value=500_000.0, max_value=200_000_000.0),
    going_in_cap=st.floats(min_value=0.03, max_value=0.12),
    growth=st.floats(min_value=-0.1, max_value=0.2),
    rate=st.floats(min_value=0.0, max_value=0.12),
    exit_cap=st.floats(min_value=0.03, max_value=0.12),
    hold=st.integers(min_value=1, max_value=15),
    equity=st.floats(min_value=0.05, max_value=1.0),
)
def test_equity_multiple_matches_distributions(price, going_in_cap, growth, rate, exit_cap, hold, equity):
    p = project_deal(_deal(price, going_in_cap, growth, rate, exit_cap, hold, equity))

    initial_equity = -p.series.flows[0]
    total_distributions = sum(p.series.flows[1:])

    assert p.metrics.equity_multiple * initial_equity == pytest.approx(total_distributions, rel=1e-9, abs=1e-6)
