from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import typer

from cre_returns.analysis.returns import evaluate
from cre_returns.analysis.sensitivity import irr_pivot, sensitivity_table
from cre_returns.api.schemas import MetricsOut, OptimizeResponse, ScenarioOut, ValidateResponse
from cre_returns.domain.assumptions import DealAssumptions
from cre_returns.domain.errors import ConfigurationError
from cre_returns.services.optimizer import optimize_for_irr
from cre_returns.services.scenarios import generate_scenarios
from cre_returns.services.validation import validate_assumptions

app = typer.Typer(help="Deal return engine: metrics, scenarios, IRR targeting, validation.")

# Calculator defaults for a stabilized $10M acquisition
DEFAULT_DEAL = {
    "purchase_price": 10_000_000.0,
    "equity_fraction": 0.40,
    "annual_interest_rate": 0.065,
    "amortization_years": 30,
    "hold_years": 5,
    "first_year_noi": 650_000.0,
    "annual_noi_growth": 0.025,
    "exit_cap_rate": 0.06,
}

DealFile = typer.Option(None, "--deal", help="JSON file with deal assumptions")
Price = typer.Option(None, help="Purchase price")
Equity = typer.Option(None, help="Equity fraction, e.g. 0.4")
Rate = typer.Option(None, help="Annual interest rate, e.g. 0.065")
Amort = typer.Option(None, help="Amortization years")
Hold = typer.Option(None, help="Hold years")
Noi = typer.Option(None, help="Year 1 NOI")
Growth = typer.Option(None, help="Annual NOI growth, e.g. 0.025")
ExitCap = typer.Option(None, help="Exit cap rate, e.g. 0.06")


def _load_deal(deal: Optional[Path], **overrides) -> DealAssumptions:
    """Defaults < JSON file < explicit options."""
    data = dict(DEFAULT_DEAL)
    if deal is not None:
        data.update(json.loads(deal.read_text()))
    data.update({k: v for k, v in overrides.items() if v is not None})
    return DealAssumptions.model_validate(data)


def _fail(err: ConfigurationError) -> None:
    for p in err.problems:
        typer.echo(f"error: {p.message}", err=True)
    raise typer.Exit(code=1)


@app.command("evaluate")
def evaluate_cmd(
    deal: Optional[Path] = DealFile,
    purchase_price: Optional[float] = Price,
    equity_fraction: Optional[float] = Equity,
    annual_interest_rate: Optional[float] = Rate,
    amortization_years: Optional[int] = Amort,
    hold_years: Optional[int] = Hold,
    first_year_noi: Optional[float] = Noi,
    annual_noi_growth: Optional[float] = Growth,
    exit_cap_rate: Optional[float] = ExitCap,
) -> None:
    """
    Print IRR, equity multiple, year 1 cash-on-cash and debt service as JSON.
    """
    a = _load_deal(
        deal,
        purchase_price=purchase_price,
        equity_fraction=equity_fraction,
        annual_interest_rate=annual_interest_rate,
        amortization_years=amortization_years,
        hold_years=hold_years,
        first_year_noi=first_year_noi,
        annual_noi_growth=annual_noi_growth,
        exit_cap_rate=exit_cap_rate,
    )
    res = evaluate(a)
    if not res.ok:
        _fail(res.error)
    typer.echo(MetricsOut.from_metrics(res.metrics).model_dump_json(indent=2))


@app.command("scenarios")
def scenarios_cmd(deal: Optional[Path] = DealFile) -> None:
    """
    Conservative / Base / Aggressive variants with terminal value and IRR.
    """
    try:
        scenarios = generate_scenarios(_load_deal(deal))
    except ConfigurationError as e:
        _fail(e)
    typer.echo(json.dumps([ScenarioOut.from_scenario(s).model_dump() for s in scenarios], indent=2))


@app.command("optimize")
def optimize_cmd(
    deal: Optional[Path] = DealFile,
    target_irr: Optional[float] = typer.Option(None, "--target-irr", help="Target IRR, e.g. 0.15"),
) -> None:
    """
    Search for the equity fraction that hits the target IRR.
    """
    try:
        result = optimize_for_irr(_load_deal(deal), target_irr)
    except ConfigurationError as e:
        _fail(e)
    typer.echo(OptimizeResponse.from_result(result).model_dump_json(indent=2))
    if not result.reachable:
        typer.echo("target not exactly reachable within equity bounds", err=True)


@app.command("validate")
def validate_cmd(deal: Optional[Path] = DealFile) -> None:
    """
    List risk warnings and hard errors. Exits 1 when there are errors.
    """
    report = validate_assumptions(_load_deal(deal))
    typer.echo(ValidateResponse.from_report(report).model_dump_json(indent=2))
    if not report.ok:
        raise typer.Exit(code=1)


@app.command("sensitivity")
def sensitivity_cmd(
    deal: Optional[Path] = DealFile,
    exit_cap_shift: List[float] = typer.Option([-0.005, 0.0, 0.005], "--cap-shift", help="Exit cap shift(s)"),
    growth_shift: List[float] = typer.Option([-0.01, 0.0, 0.01], "--growth-shift", help="NOI growth shift(s)"),
) -> None:
    """
    IRR grid over exit cap and NOI growth shifts.
    """
    try:
        table = sensitivity_table(_load_deal(deal), exit_cap_shift, growth_shift)
    except ConfigurationError as e:
        _fail(e)
    typer.echo(irr_pivot(table).to_string(float_format=lambda x: f"{x:.2%}"))


if __name__ == "__main__":
    app()
