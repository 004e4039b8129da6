"""
Elasticsearch backend.

Evaluates the rule catalogue against OTel data stored in Elasticsearch data
streams (``logs-*-otel-*``, ``metrics-*-otel-*``). Each rule is one
``_search`` request; see :mod:`instrumentation_score.backends.query` for how
responses are turned into verdicts.

Usage::

    from instrumentation_score.backends.elasticsearch import ElasticsearchBackend

    with ElasticsearchBackend("http://localhost:9200", api_key="...") as backend:
        backend.evaluate_log_001()
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from instrumentation_score.backends.base import BackendType, BaseBackend, register_backend
from instrumentation_score.backends.query import QueryRule
from instrumentation_score.config import (
    DEFAULT_LOGS_INDEX,
    DEFAULT_METRICS_INDEX,
    InstrumentationScoreConfig,
)
from instrumentation_score.errors import BackendError

logger = logging.getLogger(__name__)

TOTAL_HITS_PATH = "hits.total.value"
ATTRIBUTE_CARDINALITY_PATH = "aggregations.by_attribute_key.keys.buckets.*.cardinality_values.value"

# Distinct attribute keys inspected by MET-001
ATTRIBUTE_KEYS_LIMIT = 100


def debug_logs_in_production_query() -> Dict[str, Any]:
    """DEBUG records from production over the last 14 full days."""
    return {
        "size": 0,
        "track_total_hits": True,
        "query": {
            "bool": {
                "must": [
                    {"term": {"severity.text": "DEBUG"}},
                    {"term": {"deployment.environment.name": "production"}},
                    {"range": {"@timestamp": {"gte": "now-14d/d", "lt": "now/d"}}},
                ]
            }
        },
    }


def unset_severity_query() -> Dict[str, Any]:
    """Log records whose severity was never set."""
    return {
        "size": 0,
        "track_total_hits": True,
        "query": {"term": {"severity.text": "UNSET"}},
    }


def attribute_cardinality_query() -> Dict[str, Any]:
    """Distinct values per metric attribute key over the last hour."""
    return {
        "size": 0,
        "query": {"range": {"@timestamp": {"gte": "now-1h"}}},
        "aggs": {
            "by_attribute_key": {
                "nested": {"path": "attributes"},
                "aggs": {
                    "keys": {
                        "terms": {"field": "attributes.key", "size": ATTRIBUTE_KEYS_LIMIT},
                        "aggs": {
                            "cardinality_values": {
                                "cardinality": {"field": "attributes.value.keyword"}
                            }
                        },
                    }
                },
            }
        },
    }


@register_backend(BackendType.ELASTICSEARCH)
class ElasticsearchBackend(BaseBackend):
    """
    Rule evaluation over the Elasticsearch ``_search`` API.

    Args:
        endpoint: Elasticsearch base URL
        api_key: Encoded API key, sent as ``Authorization: ApiKey <key>``
        timeout_seconds: Timeout for each search request
        logs_index: Index pattern for log records
        metrics_index: Index pattern for metric data points
        cardinality_threshold: Highest tolerated distinct values per
            metric attribute key (MET-001)
        transport: Optional httpx transport (for testing)
    """

    def __init__(
        self,
        endpoint: str,
        api_key: Optional[str] = None,
        timeout_seconds: float = 30.0,
        logs_index: str = DEFAULT_LOGS_INDEX,
        metrics_index: str = DEFAULT_METRICS_INDEX,
        cardinality_threshold: int = 10000,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.endpoint = endpoint.rstrip("/")
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"ApiKey {api_key}"
        self._http = httpx.Client(
            base_url=self.endpoint,
            headers=headers,
            timeout=timeout_seconds,
            transport=transport,
        )
        self._rules: Dict[str, QueryRule] = {
            "LOG-001": QueryRule(
                rule_id="LOG-001",
                index=logs_index,
                query=debug_logs_in_production_query(),
                result_path=TOTAL_HITS_PATH,
            ),
            "LOG-002": QueryRule(
                rule_id="LOG-002",
                index=logs_index,
                query=unset_severity_query(),
                result_path=TOTAL_HITS_PATH,
            ),
            "MET-001": QueryRule(
                rule_id="MET-001",
                index=metrics_index,
                query=attribute_cardinality_query(),
                result_path=ATTRIBUTE_CARDINALITY_PATH,
                threshold=cardinality_threshold,
                count_path=TOTAL_HITS_PATH,
            ),
        }

    @classmethod
    def from_config(cls, config: InstrumentationScoreConfig) -> "ElasticsearchBackend":
        return cls(
            endpoint=config.elasticsearch_endpoint,
            api_key=config.elasticsearch_api_key,
            timeout_seconds=config.http_timeout_seconds,
            logs_index=config.logs_index,
            metrics_index=config.metrics_index,
            cardinality_threshold=config.metric_cardinality_threshold,
        )

    def close(self) -> None:
        self._http.close()

    def _search(self, rule: QueryRule) -> Any:
        """Run the rule's query and return the decoded response body."""
        try:
            response = self._http.post(f"/{rule.index}/_search", json=rule.query)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise BackendError(
                rule.rule_id,
                f"search on {rule.index} returned HTTP {e.response.status_code}",
            ) from e
        except httpx.RequestError as e:
            raise BackendError(rule.rule_id, f"search on {rule.index} failed: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            raise BackendError(rule.rule_id, f"invalid JSON from {rule.index}: {e}") from e
        logger.debug(f"{rule.rule_id} response: {body}")
        return body

    def _evaluate(self, rule_id: str) -> bool:
        rule = self._rules[rule_id]
        return rule.is_compliant(self._search(rule))

    def evaluate_log_001(self) -> bool:
        return self._evaluate("LOG-001")

    def evaluate_log_002(self) -> bool:
        return self._evaluate("LOG-002")

    def evaluate_met_001(self) -> bool:
        return self._evaluate("MET-001")
