"""
Rule capabilities and the rule catalogue.

Each rule is a capability: a protocol with a single zero-argument method that
a backend implements by querying its telemetry store. The method returns
``True`` when the telemetry satisfies the rule and ``False`` when it violates
it, and raises :class:`~instrumentation_score.errors.BackendError` when the
backend cannot tell.

The catalogue is an explicit, ordered tuple. Adding a rule means:

1. declare a capability protocol below,
2. add it to :class:`InstrumentationBackend`,
3. append a :class:`RuleDefinition` to :data:`RULE_CATALOGUE`,
4. implement the method on every backend.

Usage::

    from instrumentation_score.rules import RULE_CATALOGUE, verify_backend

    verify_backend(backend)
    for rule in RULE_CATALOGUE:
        print(rule.rule_id, rule.impact.value, rule.evaluate(backend))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol, Sequence, runtime_checkable

from instrumentation_score.errors import BackendError, IncompleteBackendError
from instrumentation_score.impact import Impact

logger = logging.getLogger(__name__)

RULES_REFERENCE_BASE = "https://github.com/instrumentation-score/spec/blob/main/rules"


# ---------------------------------------------------------------------------
# Capabilities
# ---------------------------------------------------------------------------


@runtime_checkable
class Log001(Protocol):
    """Debug-level logs are not emitted by production environments."""

    def evaluate_log_001(self) -> bool: ...


@runtime_checkable
class Log002(Protocol):
    """Log records carry a severity."""

    def evaluate_log_002(self) -> bool: ...


@runtime_checkable
class Met001(Protocol):
    """Metric attribute cardinality is at most a threshold."""

    def evaluate_met_001(self) -> bool: ...


@runtime_checkable
class InstrumentationBackend(Log001, Log002, Met001, Protocol):
    """A backend able to evaluate every rule in the catalogue."""


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RuleDefinition:
    """A catalogued rule: identifier, impact binding and capability."""

    rule_id: str
    impact: Impact
    capability: type
    method_name: str
    description: str

    @property
    def reference(self) -> str:
        return f"{RULES_REFERENCE_BASE}/{self.rule_id}.md"

    def is_supported_by(self, backend: Any) -> bool:
        return callable(getattr(backend, self.method_name, None))

    def evaluate(self, backend: Any) -> bool:
        """Invoke this rule's capability on ``backend``.

        Exceptions raised by the backend propagate unchanged.

        Raises:
            BackendError: If the backend returns something other than a bool.
        """
        result = getattr(backend, self.method_name)()
        if not isinstance(result, bool):
            raise BackendError(
                self.rule_id,
                f"{self.method_name}() returned {type(result).__name__}, expected bool",
            )
        return result


RULE_CATALOGUE: tuple[RuleDefinition, ...] = (
    RuleDefinition(
        rule_id="LOG-001",
        impact=Impact.IMPORTANT,
        capability=Log001,
        method_name="evaluate_log_001",
        description="Debug-level logs are not emitted by production environments",
    ),
    RuleDefinition(
        rule_id="LOG-002",
        impact=Impact.IMPORTANT,
        capability=Log002,
        method_name="evaluate_log_002",
        description="Log records carry a severity (severity text is not UNSET)",
    ),
    RuleDefinition(
        rule_id="MET-001",
        impact=Impact.IMPORTANT,
        capability=Met001,
        method_name="evaluate_met_001",
        description="Metric attribute cardinality is at most the configured threshold",
    ),
)


def get_rule(rule_id: str) -> RuleDefinition:
    """Look up a catalogued rule by identifier.

    Raises:
        KeyError: If no rule has this identifier.
    """
    for rule in RULE_CATALOGUE:
        if rule.rule_id == rule_id:
            return rule
    raise KeyError(f"Unknown rule: {rule_id}")


def verify_backend(
    backend: Any,
    catalogue: Sequence[RuleDefinition] = RULE_CATALOGUE,
) -> None:
    """Check that ``backend`` implements every rule in ``catalogue``.

    Raises:
        IncompleteBackendError: Naming every rule without a capability method.
    """
    missing = [rule.rule_id for rule in catalogue if not rule.is_supported_by(backend)]
    if missing:
        logger.error(
            "Backend %s is missing capabilities: %s",
            type(backend).__name__,
            ", ".join(missing),
        )
        raise IncompleteBackendError(type(backend).__name__, missing)
