"""
Impact-weighted score aggregation.

Let ``W_i`` be the weight of impact level ``i``, ``P_i`` the number of rules
of that level that passed and ``T_i`` the number evaluated. Then::

    score = sum(P_i * W_i) / sum(T_i * W_i) * 100

Levels are not renormalised individually: a level with more rules carries
proportionally more of the total, and a level with no rules contributes
nothing to either sum.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping

from instrumentation_score.errors import AggregationError
from instrumentation_score.impact import Impact


@dataclass
class ImpactTally:
    """Passed and total rule counts for one impact level."""

    passed: int = 0
    total: int = 0

    def __post_init__(self):
        if self.passed < 0 or self.total < 0:
            raise ValueError(
                f"Tally counts must be non-negative, got passed={self.passed} total={self.total}"
            )
        if self.passed > self.total:
            raise ValueError(
                f"Tally passed ({self.passed}) cannot exceed total ({self.total})"
            )

    def record(self, compliant: bool) -> None:
        """Fold one rule outcome into the tally."""
        self.total += 1
        if compliant:
            self.passed += 1


def new_tallies() -> Dict[Impact, ImpactTally]:
    """Empty tallies, one per impact level."""
    return {impact: ImpactTally() for impact in Impact}


def score(tallies: Mapping[Impact, ImpactTally]) -> float:
    """Compute the instrumentation score from per-impact tallies.

    Args:
        tallies: One entry for every :class:`Impact`, empty levels included.

    Returns:
        Score in ``[0, 100]``.

    Raises:
        AggregationError: If an impact level is missing or no rule was
            tallied at any level.
    """
    missing = [impact.value for impact in Impact if impact not in tallies]
    if missing:
        raise AggregationError(f"Missing tallies for impact levels: {', '.join(missing)}")

    numerator = sum(tallies[impact].passed * impact.weight for impact in Impact)
    denominator = sum(tallies[impact].total * impact.weight for impact in Impact)
    if denominator == 0:
        raise AggregationError("No rules were evaluated at any impact level")

    return numerator / denominator * 100
