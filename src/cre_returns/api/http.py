# src/cre_returns/api/http.py
from __future__ import annotations

from fastapi import FastAPI, HTTPException

from cre_returns.analysis.returns import evaluate, project_deal
from cre_returns.analysis.sensitivity import sensitivity_table
from cre_returns.domain.assumptions import DealAssumptions
from cre_returns.domain.errors import ConfigurationError
from cre_returns.services.optimizer import optimize_for_irr
from cre_returns.services.scenarios import generate_scenarios
from cre_returns.services.validation import validate_assumptions
from .schemas import (
    MessageOut,
    MetricsOut,
    OptimizeRequest,
    OptimizeResponse,
    ProjectionOut,
    ScenarioOut,
    SensitivityRequest,
    SensitivityResponse,
    ValidateResponse,
    _finite,
)

app = FastAPI(title="CRE investment return engine")


def _bad_request(err: ConfigurationError) -> HTTPException:
    return HTTPException(
        status_code=400,
        detail=[MessageOut.from_message(p).model_dump() for p in err.problems],
    )


@app.post("/outputs", response_model=MetricsOut)
def outputs_endpoint(payload: DealAssumptions) -> MetricsOut:
    """IRR, equity multiple, year 1 cash-on-cash and debt service for one deal."""
    res = evaluate(payload)
    if not res.ok:
        raise _bad_request(res.error)
    return MetricsOut.from_metrics(res.metrics)


@app.post("/projection", response_model=ProjectionOut)
def projection_endpoint(payload: DealAssumptions) -> ProjectionOut:
    try:
        return ProjectionOut.from_projection(project_deal(payload))
    except ConfigurationError as e:
        raise _bad_request(e) from e


@app.post("/scenarios", response_model=list[ScenarioOut])
def scenarios_endpoint(payload: DealAssumptions) -> list[ScenarioOut]:
    try:
        return [ScenarioOut.from_scenario(s) for s in generate_scenarios(payload)]
    except ConfigurationError as e:
        raise _bad_request(e) from e


@app.post("/optimize", response_model=OptimizeResponse)
def optimize_endpoint(payload: OptimizeRequest) -> OptimizeResponse:
    try:
        result = optimize_for_irr(payload.assumptions, payload.target_irr)
    except ConfigurationError as e:
        raise _bad_request(e) from e
    return OptimizeResponse.from_result(result)


@app.post("/validate", response_model=ValidateResponse)
def validate_endpoint(payload: DealAssumptions) -> ValidateResponse:
    # errors are reported in the body, never as a failed request
    return ValidateResponse.from_report(validate_assumptions(payload))


@app.post("/sensitivity", response_model=SensitivityResponse)
def sensitivity_endpoint(payload: SensitivityRequest) -> SensitivityResponse:
    try:
        table = sensitivity_table(payload.assumptions, payload.exit_cap_shifts, payload.growth_shifts)
    except ConfigurationError as e:
        raise _bad_request(e) from e
    rows = [{k: _finite(v) for k, v in row.items()} for row in table.to_dict(orient="records")]
    return SensitivityResponse(rows=rows)
