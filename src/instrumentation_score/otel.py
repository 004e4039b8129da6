"""
OTel span event emission helpers for scoring runs.

Events are attached to the current span, which during a run is the
``instrumentation_score.calculate`` span opened by the calculator.

Usage::

    from instrumentation_score.otel import emit_rule_outcome, emit_score_result

    emit_rule_outcome(outcome)
    emit_score_result(report)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from opentelemetry import trace as otel_trace

if TYPE_CHECKING:
    from instrumentation_score.calculator import RuleOutcome, ScoreReport

logger = logging.getLogger(__name__)

RULE_EVALUATED_EVENT = "instrumentation_score.rule.evaluated"
RESULT_EVENT = "instrumentation_score.result"


def add_span_event(
    name: str, attributes: dict[str, str | int | float | bool]
) -> None:
    """Add an event to the current OTel span if it is recording."""
    span = otel_trace.get_current_span()
    if span and span.is_recording():
        span.add_event(name=name, attributes=attributes)


def emit_rule_outcome(outcome: "RuleOutcome") -> None:
    """Emit a span event for a single evaluated rule.

    Event name: ``instrumentation_score.rule.evaluated``
    """
    logger.debug(
        "Rule %s (%s): %s",
        outcome.rule_id,
        outcome.impact.value,
        "compliant" if outcome.compliant else "violated",
    )
    add_span_event(RULE_EVALUATED_EVENT, {
        "rule.id": outcome.rule_id,
        "rule.impact": outcome.impact.value,
        "rule.compliant": outcome.compliant,
    })


def emit_score_result(report: "ScoreReport") -> None:
    """Emit a span event summarising a completed run.

    Event name: ``instrumentation_score.result``
    """
    attrs: dict[str, str | int | float | bool] = {
        "score.value": report.score,
        "score.rules_evaluated": len(report.outcomes),
        "score.rules_passed": report.rules_passed,
    }
    for impact, tally in report.tallies.items():
        attrs[f"score.{impact.value}.passed"] = tally.passed
        attrs[f"score.{impact.value}.total"] = tally.total

    logger.info(
        "Instrumentation score %.2f (%d/%d rules passed)",
        report.score,
        report.rules_passed,
        len(report.outcomes),
    )
    add_span_event(RESULT_EVENT, attrs)
