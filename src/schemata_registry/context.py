"""Shared state for the schema and template registries.

A :class:`RegistryContext` is built once at startup and handed to every
registry and service, so they share one document cache and one validation
engine without module-level globals.
"""

import threading
from typing import Optional

from .config import RegistryConfig
from .engine import ValidationEngine
from .retrieval import DocumentCache, DocumentRetriever


class RegistryContext:
    """Holds the document cache, retriever and validation engine."""

    _default_instance: Optional["RegistryContext"] = None
    _instance_lock = threading.RLock()

    def __init__(
        self,
        config: Optional[RegistryConfig] = None,
        retriever: Optional[DocumentRetriever] = None,
        engine: Optional[ValidationEngine] = None,
    ):
        """Initialize a new context.

        Args:
            config: Configuration for this context. If None, it is read from
                    the environment.
            retriever: Retriever to use. If None, one is built with a fresh cache.
            engine: Validation engine to use. If None, one is built from config.
        """
        self.config = config or RegistryConfig.from_env()
        self.retriever = retriever or DocumentRetriever(DocumentCache(), timeout=self.config.request_timeout)
        self.engine = engine or ValidationEngine(
            coerce_types=self.config.coerce_types,
            use_defaults=self.config.use_defaults,
            all_errors=self.config.all_errors,
        )

    @property
    def cache(self) -> DocumentCache:
        """The document cache shared by all registries."""
        return self.retriever.cache

    @classmethod
    def get_default(cls) -> "RegistryContext":
        """Get the process-wide context, creating it from the environment on first use.

        Returns:
            The default RegistryContext instance
        """
        with cls._instance_lock:
            if cls._default_instance is None:
                cls._default_instance = cls()
            return cls._default_instance

    @staticmethod
    def cleanup() -> None:
        """Drop the process-wide context."""
        with RegistryContext._instance_lock:
            RegistryContext._default_instance = None


def get_context() -> RegistryContext:
    """Get the process-wide registry context.

    This is a convenience function for :meth:`RegistryContext.get_default`.
    """
    return RegistryContext.get_default()
