"""
Pytest configuration and fixtures for instrumentation score tests.
"""

from __future__ import annotations

import os
from typing import Callable, Dict, Generator, List, Mapping, Optional

import pytest

from instrumentation_score.config import reset_config


# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> Generator[None, None, None]:
    """Drop INSTRUMENTATION_SCORE_* variables, any local .env and the cached config."""
    for key in list(os.environ):
        if key.startswith("INSTRUMENTATION_SCORE_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(os.path.dirname(__file__))
    reset_config()
    yield
    reset_config()


# ============================================================================
# Backend Fixtures
# ============================================================================


class RecordingBackend:
    """Backend answering from fixed verdicts and recording every call."""

    def __init__(
        self,
        results: Optional[Mapping[str, bool]] = None,
        errors: Optional[Mapping[str, Exception]] = None,
    ):
        self.results = dict(results or {})
        self.errors = dict(errors or {})
        self.calls: List[str] = []

    def _answer(self, rule_id: str) -> bool:
        self.calls.append(rule_id)
        if rule_id in self.errors:
            raise self.errors[rule_id]
        return self.results.get(rule_id, True)

    def evaluate_log_001(self) -> bool:
        return self._answer("LOG-001")

    def evaluate_log_002(self) -> bool:
        return self._answer("LOG-002")

    def evaluate_met_001(self) -> bool:
        return self._answer("MET-001")


@pytest.fixture
def make_backend() -> Callable[..., RecordingBackend]:
    """Factory for recording backends."""
    def factory(
        results: Optional[Dict[str, bool]] = None,
        errors: Optional[Dict[str, Exception]] = None,
    ) -> RecordingBackend:
        return RecordingBackend(results=results, errors=errors)
    return factory


@pytest.fixture
def compliant_backend(make_backend) -> RecordingBackend:
    """Backend for which every rule passes."""
    return make_backend()
