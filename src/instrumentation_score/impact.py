"""
Impact levels and their scoring weights.

Every rule in the catalogue is bound to exactly one impact level. The weight
of a level decides how much a single rule of that level moves the final
score, so a failed critical rule costs four times as much as a failed low
rule.

Usage::

    from instrumentation_score.impact import Impact

    Impact.CRITICAL.weight  # 40
    list(Impact)            # severity order, most severe first
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping


class Impact(str, Enum):
    """Severity classification of a rule, declared most severe first."""

    CRITICAL = "critical"
    IMPORTANT = "important"
    NORMAL = "normal"
    LOW = "low"

    @property
    def weight(self) -> int:
        return IMPACT_WEIGHTS[self]


IMPACT_WEIGHTS: Mapping[Impact, int] = MappingProxyType({
    Impact.CRITICAL: 40,
    Impact.IMPORTANT: 30,
    Impact.NORMAL: 20,
    Impact.LOW: 10,
})
