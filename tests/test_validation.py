import math

from cre_returns.analysis.returns import compute_outputs
from cre_returns.services.validation import validate_assumptions
from fixtures.deals import clean_deal, negative_leverage_deal, reference_deal


def _codes(msgs):
    return {m.code for m in msgs}


def test_low_equity_and_cap_below_rate_both_flagged():
    a = reference_deal(equity_fraction=0.1, exit_cap_rate=0.04, annual_interest_rate=0.06)

    report = validate_assumptions(a)

    assert report.ok
    codes = _codes(report.warnings)
    assert "LOW_EQUITY" in codes
    assert "EXIT_CAP_BELOW_INTEREST" in codes
    text = " ".join(report.messages()).lower()
    assert "low equity increases risk" in text
    assert "exit cap below interest rate" in text
    assert all(m.severity == "warning" for m in report.warnings)


def test_clean_deal_has_no_flags():
    report = validate_assumptions(clean_deal())

    assert report.errors == []
    assert report.warnings == []
    assert not report.has_flags


def test_reference_deal_only_flags_cap_below_rate():
    report = validate_assumptions(reference_deal())

    assert _codes(report.warnings) == {"EXIT_CAP_BELOW_INTEREST"}


def test_low_irr_flagged():
    report = validate_assumptions(negative_leverage_deal())

    irr_msgs = [m for m in report.warnings if m.code == "IRR_BELOW_MARKET"]
    assert len(irr_msgs) == 1
    assert "IRR below market expectations" in irr_msgs[0].message
    assert irr_msgs[0].context["irr"] < 0.08


def test_errors_reported_not_raised():
    a = reference_deal(equity_fraction=0.0, exit_cap_rate=0.0, hold_years=0)

    report = validate_assumptions(a)

    assert not report.ok
    assert _codes(report.errors) == {"EQUITY_OUT_OF_RANGE", "EXIT_CAP_NON_POSITIVE", "HOLD_NON_POSITIVE"}
    assert all(m.severity == "error" for m in report.errors)
    # metric checks are skipped when the deal cannot be evaluated
    assert "IRR_BELOW_MARKET" not in _codes(report.warnings)


def test_equity_above_one_is_error():
    report = validate_assumptions(reference_deal(equity_fraction=1.5))

    assert _codes(report.errors) == {"EQUITY_OUT_OF_RANGE"}
    assert "LOW_EQUITY" not in _codes(report.warnings)


def test_optimistic_exit_cap_and_short_hold():
    a = clean_deal(exit_cap_rate=0.045, annual_interest_rate=0.04, hold_years=2)

    codes = _codes(validate_assumptions(a).warnings)

    assert "EXIT_CAP_OPTIMISTIC" in codes
    assert "SHORT_HOLD" in codes
    assert "EXIT_CAP_BELOW_INTEREST" not in codes


def test_debt_service_not_covered():
    a = reference_deal(equity_fraction=0.1)

    report = validate_assumptions(a)

    dscr = [m for m in report.warnings if m.code == "DSCR_BELOW_ONE"]
    assert len(dscr) == 1
    assert dscr[0].context["dscr_year1"] < 1.0


def test_precomputed_metrics_are_used():
    a = clean_deal()
    metrics = compute_outputs(a)
    bad = type(metrics)(**{**metrics.__dict__, "irr": 0.01, "irr_converged": False})

    codes = _codes(validate_assumptions(a, metrics=bad).warnings)

    assert {"IRR_BELOW_MARKET", "IRR_NOT_CONVERGED"} <= codes


def test_undefined_irr_flagged():
    # ten percent equity on a shrinking asset: nothing ever comes back
    a = negative_leverage_deal(equity_fraction=0.1)

    report = validate_assumptions(a)

    assert math.isnan(compute_outputs(a).irr)
    assert "IRR_UNDEFINED" in _codes(report.warnings)
