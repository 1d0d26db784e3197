# src/cre_returns/domain/errors.py
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from cre_returns.domain.underwriting import ValidationMessage


class ConfigurationError(ValueError):
    """Assumptions that cannot be evaluated at all. Raised before any computation."""

    def __init__(self, problems: list[ValidationMessage]):
        self.problems = list(problems)
        super().__init__("; ".join(p.message for p in self.problems) or "Invalid deal assumptions")
