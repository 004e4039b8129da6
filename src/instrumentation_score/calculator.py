"""
Scoring runs: evaluate the rule catalogue against a backend.

The calculator walks the catalogue in declaration order, tallies each outcome
under its rule's impact level and aggregates the tallies into a score. It is
fail-fast: the first exception raised by the backend aborts the run, no
further rules are evaluated and the exception reaches the caller unchanged.

Usage::

    from instrumentation_score import calculate_score
    from instrumentation_score.backends import create_backend

    with create_backend("elasticsearch") as backend:
        print(calculate_score(backend))

    # Full report with tallies and per-rule outcomes
    report = ScoreCalculator().calculate(backend)
    print(report.model_dump_json(indent=2))
"""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence

from opentelemetry import trace
from pydantic import BaseModel, ConfigDict, Field

from instrumentation_score.impact import Impact
from instrumentation_score.otel import emit_rule_outcome, emit_score_result
from instrumentation_score.rules import (
    RULE_CATALOGUE,
    InstrumentationBackend,
    RuleDefinition,
    verify_backend,
)
from instrumentation_score.score import ImpactTally, new_tallies, score

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


# ---------------------------------------------------------------------------
# Result models
# ---------------------------------------------------------------------------


class RuleOutcome(BaseModel):
    """The verdict of one rule in one run."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    rule_id: str
    impact: Impact
    compliant: bool


class ScoreReport(BaseModel):
    """A completed scoring run."""

    model_config = ConfigDict(extra="forbid")

    score: float = Field(..., description="Instrumentation score, 0-100")
    tallies: Dict[Impact, ImpactTally]
    outcomes: List[RuleOutcome] = Field(default_factory=list)

    @property
    def rules_passed(self) -> int:
        return sum(1 for o in self.outcomes if o.compliant)

    @property
    def violations(self) -> List[RuleOutcome]:
        return [o for o in self.outcomes if not o.compliant]


# ---------------------------------------------------------------------------
# Calculator
# ---------------------------------------------------------------------------


class ScoreCalculator:
    """Evaluates a rule catalogue against a backend and scores it."""

    def __init__(self, catalogue: Sequence[RuleDefinition] = RULE_CATALOGUE):
        self.catalogue = tuple(catalogue)

    def calculate(self, backend: InstrumentationBackend) -> ScoreReport:
        """Run every rule against ``backend`` and score the results.

        Raises:
            IncompleteBackendError: If the backend lacks a capability. Raised
                before any rule is evaluated.
            BackendError: The first backend failure, unchanged.
            AggregationError: If the catalogue contributes no weighted rules.
        """
        backend_name = type(backend).__name__
        with tracer.start_as_current_span("instrumentation_score.calculate") as span:
            span.set_attribute("backend.type", backend_name)
            span.set_attribute("score.rules_total", len(self.catalogue))

            verify_backend(backend, self.catalogue)

            tallies = new_tallies()
            outcomes: List[RuleOutcome] = []
            for rule in self.catalogue:
                try:
                    compliant = rule.evaluate(backend)
                except Exception as e:
                    logger.error(f"Rule {rule.rule_id} failed on {backend_name}: {e}")
                    span.set_attribute("score.failed_rule", rule.rule_id)
                    raise

                tallies[rule.impact].record(compliant)
                outcome = RuleOutcome(
                    rule_id=rule.rule_id, impact=rule.impact, compliant=compliant
                )
                outcomes.append(outcome)
                emit_rule_outcome(outcome)

            report = ScoreReport(score=score(tallies), tallies=tallies, outcomes=outcomes)
            span.set_attribute("score.value", report.score)
            emit_score_result(report)
            return report


def calculate_score(
    backend: InstrumentationBackend,
    catalogue: Sequence[RuleDefinition] = RULE_CATALOGUE,
) -> float:
    """Score ``backend`` against the rule catalogue."""
    return ScoreCalculator(catalogue).calculate(backend).score
