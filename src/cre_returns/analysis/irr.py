# src/cre_returns/analysis/irr.py
from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from cre_returns.adapters.config import EngineConfig, config
from cre_returns.adapters.logging_utils import get_logger
from cre_returns.domain.underwriting import IrrResult

logger = get_logger(__name__)


def npv(rate: float, flows: Sequence[float]) -> float:
    """NPV of annual flows, flows[t] discounted t years."""
    cf = np.asarray(flows, dtype=float)
    t = np.arange(cf.size, dtype=float)
    return float(np.sum(cf / (1.0 + rate) ** t))


def solve_irr(flows: Sequence[float], settings: EngineConfig | None = None) -> IrrResult:
    """
    Newton-Raphson IRR.

    Starts at IRR_INITIAL_GUESS and iterates
        r <- r - NPV(r) / NPV'(r),   NPV'(r) = sum(-t * cf_t / (1 + r)^(t + 1))
    until the step is below IRR_TOLERANCE, the step is non-finite, or the
    iteration budget runs out. r is floored at IRR_RATE_FLOOR each step.

    Never raises on non-convergence: the last estimate is returned with
    converged=False. A series with no initial outlay or no positive inflow
    has no IRR and yields rate=nan.
    """
    settings = settings or config

    cf = np.asarray(flows, dtype=float)
    if cf.size < 2:
        raise ValueError("IRR needs at least two cash flows")

    if cf[0] >= 0 or not (cf[1:] > 0).any():
        logger.warning(
            "irr_undefined",
            extra={"context": {"first_flow": float(cf[0]), "n_flows": int(cf.size)}},
        )
        return IrrResult(rate=float("nan"), converged=False, iterations=0)

    t = np.arange(cf.size, dtype=float)
    r = settings.IRR_INITIAL_GUESS
    floor = settings.IRR_RATE_FLOOR

    for k in range(1, settings.IRR_MAX_ITERATIONS + 1):
        with np.errstate(all="ignore"):
            df = (1.0 + r) ** t
            value = float(np.sum(cf / df))
            deriv = float(np.sum(-t * cf / (df * (1.0 + r))))

        new_r = r - value / deriv if deriv != 0.0 else float("nan")

        if not math.isfinite(new_r):
            logger.warning(
                "irr_not_converged",
                extra={"context": {"reason": "non_finite_step", "rate": r, "iterations": k}},
            )
            return IrrResult(rate=r, converged=False, iterations=k)

        if abs(new_r - r) < settings.IRR_TOLERANCE:
            return IrrResult(rate=max(floor, new_r), converged=True, iterations=k)

        r = max(floor, new_r)

    logger.warning(
        "irr_not_converged",
        extra={"context": {"reason": "max_iterations", "rate": r, "iterations": settings.IRR_MAX_ITERATIONS}},
    )
    return IrrResult(rate=r, converged=False, iterations=settings.IRR_MAX_ITERATIONS)
