# src/cre_returns/services/scenarios.py
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from cre_returns.adapters.config import EngineConfig, config
from cre_returns.adapters.logging_utils import get_logger
from cre_returns.analysis.returns import compute_outputs
from cre_returns.domain.assumptions import DealAssumptions
from cre_returns.domain.rules import require_valid
from cre_returns.domain.underwriting import Scenario, ScenarioLabel

logger = get_logger(__name__)

SCENARIO_ORDER: tuple[ScenarioLabel, ...] = ("Conservative", "Base", "Aggressive")


def growth_spreads(assumptions: DealAssumptions, settings: EngineConfig) -> tuple[float, float]:
    """(conservative, aggressive) NOI growth spreads; large deals get tighter bands."""
    if assumptions.purchase_price > settings.SCENARIO_LARGE_DEAL_PRICE:
        return (
            settings.SCENARIO_LARGE_DEAL_CONSERVATIVE_GROWTH_SPREAD,
            settings.SCENARIO_LARGE_DEAL_AGGRESSIVE_GROWTH_SPREAD,
        )
    return settings.SCENARIO_CONSERVATIVE_GROWTH_SPREAD, settings.SCENARIO_AGGRESSIVE_GROWTH_SPREAD


def scenario_assumptions(
    assumptions: DealAssumptions,
    settings: EngineConfig | None = None,
) -> dict[ScenarioLabel, DealAssumptions]:
    """
    Conservative: lower growth, higher exit cap.
    Aggressive: higher growth, lower exit cap.

    Growth is clamped to [SCENARIO_GROWTH_FLOOR, SCENARIO_GROWTH_CEILING] and
    the aggressive cap to SCENARIO_EXIT_CAP_FLOOR, but a clamp never moves a
    variant past the base value, so Conservative <= Base <= Aggressive holds.
    """
    settings = settings or config

    g = assumptions.annual_noi_growth
    cap = assumptions.exit_cap_rate
    cons_spread, aggr_spread = growth_spreads(assumptions, settings)

    cons_growth = max(min(g, settings.SCENARIO_GROWTH_FLOOR), g - cons_spread)
    aggr_growth = min(max(g, settings.SCENARIO_GROWTH_CEILING), g + aggr_spread)
    cons_cap = cap + settings.SCENARIO_EXIT_CAP_SPREAD
    aggr_cap = max(min(cap, settings.SCENARIO_EXIT_CAP_FLOOR), cap - settings.SCENARIO_EXIT_CAP_SPREAD)

    return {
        "Conservative": assumptions.with_overrides(annual_noi_growth=cons_growth, exit_cap_rate=cons_cap),
        "Base": assumptions,
        "Aggressive": assumptions.with_overrides(annual_noi_growth=aggr_growth, exit_cap_rate=aggr_cap),
    }


def generate_scenarios(assumptions: DealAssumptions, settings: EngineConfig | None = None) -> list[Scenario]:
    """
    Run the full pipeline on the three variants.

    Evaluations share nothing, so they run on a thread pool; the result is
    always ordered Conservative, Base, Aggressive.
    """
    settings = settings or config
    require_valid(assumptions)

    variants = scenario_assumptions(assumptions, settings)
    ordered = [variants[label] for label in SCENARIO_ORDER]

    with ThreadPoolExecutor(max_workers=settings.SCENARIO_WORKERS) as pool:
        metrics = list(pool.map(lambda a: compute_outputs(a, settings), ordered))

    scenarios = [
        Scenario(label=label, assumptions=a, metrics=m)
        for label, a, m in zip(SCENARIO_ORDER, ordered, metrics)
    ]

    logger.debug(
        "scenarios_generated",
        extra={"context": {s.label: {"irr": s.irr, "terminal_value": s.terminal_value} for s in scenarios}},
    )
    return scenarios
