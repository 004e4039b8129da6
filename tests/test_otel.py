"""Tests for scoring OTel span event emission helpers."""

import logging
from unittest.mock import MagicMock, patch

import pytest
from opentelemetry.trace import StatusCode

from instrumentation_score import calculator
from instrumentation_score.calculator import RuleOutcome, ScoreCalculator, ScoreReport
from instrumentation_score.errors import BackendError
from instrumentation_score.impact import Impact
from instrumentation_score.otel import (
    RESULT_EVENT,
    RULE_EVALUATED_EVENT,
    emit_rule_outcome,
    emit_score_result,
)
from instrumentation_score.score import ImpactTally, new_tallies


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_span():
    """Create a mock OTel span that is recording."""
    span = MagicMock()
    span.is_recording.return_value = True
    return span


@pytest.fixture
def mock_otel(mock_span):
    """Patch OTel to return our mock span."""
    with patch("instrumentation_score.otel.otel_trace") as mock_trace:
        mock_trace.get_current_span.return_value = mock_span
        yield mock_span


# ---------------------------------------------------------------------------
# Emission
# ---------------------------------------------------------------------------


class TestEmitRuleOutcome:
    def test_emits_rule_attributes(self, mock_otel):
        emit_rule_outcome(RuleOutcome(rule_id="LOG-001", impact=Impact.IMPORTANT, compliant=False))

        mock_otel.add_event.assert_called_once()
        call_args = mock_otel.add_event.call_args
        assert call_args.kwargs["name"] == RULE_EVALUATED_EVENT
        assert call_args.kwargs["attributes"] == {
            "rule.id": "LOG-001",
            "rule.impact": "important",
            "rule.compliant": False,
        }

    def test_not_recording_span_gets_no_event(self, mock_otel):
        mock_otel.is_recording.return_value = False
        emit_rule_outcome(RuleOutcome(rule_id="LOG-001", impact=Impact.IMPORTANT, compliant=True))
        mock_otel.add_event.assert_not_called()


class TestEmitScoreResult:
    def test_emits_score_and_tallies(self, mock_otel):
        tallies = new_tallies()
        tallies[Impact.IMPORTANT] = ImpactTally(2, 3)
        report = ScoreReport(
            score=66.5,
            tallies=tallies,
            outcomes=[
                RuleOutcome(rule_id="LOG-001", impact=Impact.IMPORTANT, compliant=True),
                RuleOutcome(rule_id="LOG-002", impact=Impact.IMPORTANT, compliant=True),
                RuleOutcome(rule_id="MET-001", impact=Impact.IMPORTANT, compliant=False),
            ],
        )
        emit_score_result(report)

        call_args = mock_otel.add_event.call_args
        assert call_args.kwargs["name"] == RESULT_EVENT
        attrs = call_args.kwargs["attributes"]
        assert attrs["score.value"] == 66.5
        assert attrs["score.rules_evaluated"] == 3
        assert attrs["score.rules_passed"] == 2
        assert attrs["score.important.passed"] == 2
        assert attrs["score.important.total"] == 3
        assert attrs["score.critical.total"] == 0


class TestCalculatorEmission:
    def test_run_emits_one_event_per_rule_then_result(self, mock_otel, make_backend):
        ScoreCalculator().calculate(make_backend(results={"LOG-002": False}))

        names = [c.kwargs["name"] for c in mock_otel.add_event.call_args_list]
        assert names == [RULE_EVALUATED_EVENT] * 3 + [RESULT_EVENT]


class TestFailedRunSpan:
    @pytest.fixture
    def exporter(self, monkeypatch):
        """Record calculator spans in memory with a real SDK tracer."""
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import SimpleSpanProcessor
        from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

        exporter = InMemorySpanExporter()
        provider = TracerProvider()
        provider.add_span_processor(SimpleSpanProcessor(exporter))
        monkeypatch.setattr(calculator, "tracer", provider.get_tracer("test"))
        yield exporter
        provider.shutdown()

    def test_failing_rule_marks_span_and_logs(self, exporter, make_backend, caplog):
        caplog.set_level(logging.ERROR, logger="instrumentation_score.calculator")
        backend = make_backend(errors={"LOG-002": BackendError("LOG-002", "HTTP 503")})

        with pytest.raises(BackendError):
            ScoreCalculator().calculate(backend)

        (span,) = exporter.get_finished_spans()
        assert span.name == "instrumentation_score.calculate"
        assert span.status.status_code == StatusCode.ERROR
        assert span.attributes["score.failed_rule"] == "LOG-002"
        assert [e.name for e in span.events] == [RULE_EVALUATED_EVENT, "exception"]
        assert "HTTP 503" in span.events[1].attributes["exception.message"]

        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert any("LOG-002" in r.getMessage() for r in errors)
