"""
Query-backed rule definitions.

Backends that answer rules with search queries describe each rule as a
query plus a path into the query's response and a threshold. The path is
dot-separated; a ``*`` segment fans out over every element of a list::

    hits.total.value
    aggregations.by_key.buckets.*.cardinality.value

The rule is compliant when the largest value found is at most the threshold.
A fan-out over an empty list finds nothing and is compliant. A rule may also
name a ``count_path``: when the response counts zero matching documents there,
the store holds nothing to judge and the rule is compliant without reading
``result_path`` (search engines omit aggregations over an empty index).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from instrumentation_score.errors import BackendError

WILDCARD = "*"


def extract_path(document: Any, path: str) -> List[float]:
    """Collect the numeric values found at ``path`` in ``document``.

    Raises:
        ValueError: If a segment is missing or a value is not numeric.
    """
    current: List[Any] = [document]
    for segment in path.split("."):
        expanded: List[Any] = []
        for node in current:
            if segment == WILDCARD:
                if not isinstance(node, list):
                    raise ValueError(f"'{segment}' in {path!r} expects a list, got {type(node).__name__}")
                expanded.extend(node)
            elif isinstance(node, dict) and segment in node:
                expanded.append(node[segment])
            else:
                raise ValueError(f"Field {segment!r} of {path!r} not found in response")
        current = expanded

    for value in current:
        # bool is an int subclass but never a count
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"Value at {path!r} is not numeric: {value!r}")
    return current


@dataclass(frozen=True)
class QueryRule:
    """A rule answered by one search query."""

    rule_id: str
    index: str
    query: Dict[str, Any] = field(hash=False)
    result_path: str
    threshold: float = 0
    count_path: Optional[str] = None

    def is_compliant(self, response: Any) -> bool:
        """Compare the values at ``result_path`` against the threshold.

        Raises:
            BackendError: If the response lacks the path or holds non-numeric
                values there.
        """
        try:
            if self.count_path is not None and extract_path(response, self.count_path) == [0]:
                return True
            values = extract_path(response, self.result_path)
        except ValueError as e:
            raise BackendError(self.rule_id, str(e)) from e
        observed = max(values, default=0)
        return observed <= self.threshold
