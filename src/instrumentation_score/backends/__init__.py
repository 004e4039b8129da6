"""
Telemetry backends for instrumentation scoring.

A backend answers every rule in the catalogue against a real telemetry
store. Backends are registered by type and built from configuration.

Example:
    from instrumentation_score.backends import create_backend, BackendType

    with create_backend(BackendType.ELASTICSEARCH) as backend:
        backend.evaluate_log_001()
"""

from instrumentation_score.backends.base import (
    BackendType,
    BaseBackend,
    create_backend,
    register_backend,
)
from instrumentation_score.backends.elasticsearch import ElasticsearchBackend
from instrumentation_score.backends.query import QueryRule, extract_path

__all__ = [
    "BackendType",
    "BaseBackend",
    "create_backend",
    "register_backend",
    "ElasticsearchBackend",
    "QueryRule",
    "extract_path",
]
