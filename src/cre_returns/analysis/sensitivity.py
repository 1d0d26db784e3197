# src/cre_returns/analysis/sensitivity.py

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import pandas as pd

from cre_returns.adapters.config import EngineConfig
from cre_returns.analysis.returns import evaluate
from cre_returns.domain.assumptions import DealAssumptions
from cre_returns.domain.rules import require_valid

DEFAULT_EXIT_CAP_SHIFTS = (-0.005, 0.0, 0.005)
DEFAULT_GROWTH_SHIFTS = (-0.01, 0.0, 0.01)


def sensitivity_table(
    assumptions: DealAssumptions,
    exit_cap_shifts: Sequence[float] = DEFAULT_EXIT_CAP_SHIFTS,
    growth_shifts: Sequence[float] = DEFAULT_GROWTH_SHIFTS,
    settings: EngineConfig | None = None,
) -> pd.DataFrame:
    """
    Re-run the pipeline over every (exit cap shift, NOI growth shift) pair.

    One row per combination with columns:
      - exit_cap_shift, growth_shift
      - exit_cap_rate, annual_noi_growth (shifted values)
      - irr, equity_multiple, irr_converged

    Shifted combinations that are not evaluable (e.g. exit cap pushed to 0)
    get NaN metrics instead of aborting the grid.
    """
    require_valid(assumptions)

    # one row per distinct (cap shift, growth shift) pair
    caps, growths = np.meshgrid(
        np.unique(np.asarray(exit_cap_shifts, dtype=float)),
        np.unique(np.asarray(growth_shifts, dtype=float)),
        indexing="ij",
    )

    rows = []
    for cap_shift, growth_shift in zip(caps.ravel(), growths.ravel()):
        variant = assumptions.with_overrides(
            exit_cap_rate=assumptions.exit_cap_rate + float(cap_shift),
            annual_noi_growth=assumptions.annual_noi_growth + float(growth_shift),
        )
        res = evaluate(variant, settings)
        rows.append(
            {
                "exit_cap_shift": float(cap_shift),
                "growth_shift": float(growth_shift),
                "exit_cap_rate": variant.exit_cap_rate,
                "annual_noi_growth": variant.annual_noi_growth,
                "irr": res.metrics.irr if res.ok else np.nan,
                "equity_multiple": res.metrics.equity_multiple if res.ok else np.nan,
                "irr_converged": res.metrics.irr_converged if res.ok else False,
            }
        )

    return pd.DataFrame(rows)


def irr_pivot(table: pd.DataFrame) -> pd.DataFrame:
    """IRR grid: NOI growth down the rows, exit cap across the columns."""
    return table.pivot(index="annual_noi_growth", columns="exit_cap_rate", values="irr")
