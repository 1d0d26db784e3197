# src/cre_returns/services/optimizer.py
from __future__ import annotations

import math

import numpy as np

from cre_returns.adapters.config import EngineConfig, config
from cre_returns.adapters.logging_utils import get_logger
from cre_returns.analysis.returns import compute_outputs
from cre_returns.domain.assumptions import DealAssumptions
from cre_returns.domain.rules import require_valid
from cre_returns.domain.underwriting import OptimizationResult

logger = get_logger(__name__)


def optimize_for_irr(
    assumptions: DealAssumptions,
    target_irr: float | None = None,
    settings: EngineConfig | None = None,
) -> OptimizationResult:
    """
    Find the equity fraction whose IRR matches `target_irr`, all else fixed.

    1. Evaluate a coarse grid over [OPTIMIZER_MIN_EQUITY, OPTIMIZER_MAX_EQUITY].
    2. Take the highest-equity pair of neighbours whose IRR gaps change sign.
    3. Bisect inside it until |IRR - target| <= OPTIMIZER_IRR_TOLERANCE or the
       iteration budget is spent.

    IRR is not monotone in leverage once debt service eats the cash flow, so
    the grid is what guarantees a true bracket. Without one the closest grid
    point comes back with reachable=False.
    """
    settings = settings or config
    target = settings.OPTIMIZER_DEFAULT_TARGET_IRR if target_irr is None else float(target_irr)
    require_valid(assumptions)

    lo, hi = settings.OPTIMIZER_MIN_EQUITY, settings.OPTIMIZER_MAX_EQUITY
    if not 0 < lo < hi <= 1:
        raise ValueError("optimizer equity bounds must satisfy 0 < min < max <= 1")

    tol = settings.OPTIMIZER_IRR_TOLERANCE
    evaluations = 0
    best_equity, best_irr, best_gap = hi, float("nan"), math.inf

    def gap_at(equity: float) -> float:
        nonlocal evaluations, best_equity, best_irr, best_gap
        evaluations += 1
        irr = compute_outputs(assumptions.with_overrides(equity_fraction=equity), settings).irr
        gap = irr - target
        if math.isfinite(gap) and abs(gap) < best_gap:
            best_equity, best_irr, best_gap = equity, irr, abs(gap)
        return gap

    grid = np.linspace(lo, hi, max(2, settings.OPTIMIZER_GRID_POINTS))
    gaps = [gap_at(float(e)) for e in grid]

    bracket = None
    if best_gap > tol:
        for i in range(len(grid) - 1, 0, -1):
            g_hi, g_lo = gaps[i], gaps[i - 1]
            if math.isfinite(g_hi) and math.isfinite(g_lo) and (g_hi > 0) != (g_lo > 0):
                bracket = (float(grid[i - 1]), g_lo, float(grid[i]))
                break

    if bracket is not None:
        a, g_a, b = bracket
        for _ in range(settings.OPTIMIZER_MAX_ITERATIONS):
            mid = 0.5 * (a + b)
            g_mid = gap_at(mid)
            if not math.isfinite(g_mid) or abs(g_mid) <= tol:
                break
            if (g_mid > 0) == (g_a > 0):
                a, g_a = mid, g_mid
            else:
                b = mid

    reachable = best_gap <= tol
    if not reachable:
        logger.info(
            "optimizer_target_unreachable",
            extra={
                "context": {
                    "target_irr": target,
                    "best_equity_fraction": best_equity,
                    "best_irr": best_irr,
                    "bracketed": bracket is not None,
                }
            },
        )

    return OptimizationResult(
        equity_fraction=best_equity,
        achieved_irr=best_irr,
        target_irr=target,
        reachable=reachable,
        iterations=evaluations,
    )
