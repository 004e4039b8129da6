"""Exceptions raised while scoring a backend."""

from __future__ import annotations

from typing import Iterable, List

__all__ = [
    "InstrumentationScoreError",
    "BackendError",
    "AggregationError",
    "IncompleteBackendError",
]


class InstrumentationScoreError(Exception):
    """Base class for all instrumentation score errors."""


class BackendError(InstrumentationScoreError):
    """A backend could not decide whether a rule is satisfied.

    Covers connectivity failures, malformed responses and missing fields.
    Always fatal to the current scoring run.
    """

    def __init__(self, rule_id: str, message: str):
        self.rule_id = rule_id
        self.message = message
        super().__init__(f"{rule_id}: {message}")


class AggregationError(InstrumentationScoreError):
    """Tallies cannot be turned into a score (e.g. zero weighted total)."""


class IncompleteBackendError(InstrumentationScoreError):
    """A backend does not implement every rule in the catalogue."""

    def __init__(self, backend_name: str, missing: Iterable[str]):
        self.backend_name = backend_name
        self.missing: List[str] = list(missing)
        super().__init__(
            f"Backend {backend_name} does not implement rules: "
            f"{', '.join(self.missing)}"
        )
