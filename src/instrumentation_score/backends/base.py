"""
Base backend class and factory.

:class:`~instrumentation_score.rules.InstrumentationBackend` is the protocol
the calculator accepts. :class:`BaseBackend` is the abstract class concrete
backends derive from: it declares every rule capability abstract, so a
backend that forgets a rule cannot be instantiated.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Optional, Type

from instrumentation_score.config import InstrumentationScoreConfig, get_config

logger = logging.getLogger(__name__)


class BackendType(str, Enum):
    """Available telemetry backends."""
    ELASTICSEARCH = "elasticsearch"


class BaseBackend(ABC):
    """
    Abstract base class for telemetry backends.

    Backends own their connection state and release it in :meth:`close`.
    They are context managers so a scoring run can borrow one::

        with ElasticsearchBackend.from_config(config) as backend:
            calculate_score(backend)
    """

    @classmethod
    @abstractmethod
    def from_config(cls, config: InstrumentationScoreConfig) -> "BaseBackend":
        """Build the backend from configuration."""
        pass

    @abstractmethod
    def evaluate_log_001(self) -> bool:
        """No debug-level logs from production environments."""
        pass

    @abstractmethod
    def evaluate_log_002(self) -> bool:
        """Log records carry a severity."""
        pass

    @abstractmethod
    def evaluate_met_001(self) -> bool:
        """Metric attribute cardinality is at most the threshold."""
        pass

    def close(self) -> None:
        """Release connection state. No-op by default."""

    def __enter__(self) -> "BaseBackend":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


# Backend registry
_BACKENDS: Dict[BackendType, Type[BaseBackend]] = {}


def register_backend(backend_type: BackendType):
    """Decorator to register a backend class."""
    def decorator(cls: Type[BaseBackend]) -> Type[BaseBackend]:
        _BACKENDS[backend_type] = cls
        return cls
    return decorator


def create_backend(
    backend_type: BackendType | str,
    config: Optional[InstrumentationScoreConfig] = None,
) -> BaseBackend:
    """
    Create a backend instance.

    Args:
        backend_type: Registered backend type (or its string value)
        config: Configuration to build from (defaults to the global config)

    Returns:
        Backend instance

    Raises:
        ValueError: If the backend type is unknown
    """
    # Import backends to register them
    from instrumentation_score.backends import elasticsearch  # noqa: F401

    try:
        backend_type = BackendType(backend_type)
    except ValueError:
        raise ValueError(f"Unknown backend type: {backend_type}") from None

    if backend_type not in _BACKENDS:
        raise ValueError(f"Unknown backend type: {backend_type.value}")

    backend_class = _BACKENDS[backend_type]
    logger.info(f"Creating {backend_type.value} backend")
    return backend_class.from_config(config or get_config())
