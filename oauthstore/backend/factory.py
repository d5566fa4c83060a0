"""
Factory for creating key-value backends.
Provides a centralized way to create and configure backends by name.
"""

from typing import Any, Dict, Type

from ..core.config import RedisConfig
from .memory import MemoryBackend
from .redis_backend import RedisBackend
from .types import KeyValueBackend


# Registry of available backend implementations
_BACKEND_IMPLEMENTATIONS: Dict[str, Type[KeyValueBackend]] = {
    'memory': MemoryBackend,
    'redis': RedisBackend,
}


class BackendFactory:
    """Factory for creating backend implementations."""

    @staticmethod
    def create_backend(kind: str, **options: Any) -> KeyValueBackend:
        """
        Create a backend instance.

        Args:
            kind: Type of backend ('memory', 'redis', ...)
            **options: Constructor arguments for the backend

        Returns:
            KeyValueBackend instance

        Raises:
            ValueError: If kind is not supported
        """
        implementation = _BACKEND_IMPLEMENTATIONS.get(kind.lower())
        if not implementation:
            raise ValueError(f"Unsupported backend type: {kind}")

        if implementation is RedisBackend and "config" not in options and "client" not in options:
            options = {"config": RedisConfig(**options)}

        return implementation(**options)

    @staticmethod
    def register_backend(name: str, implementation: Type[KeyValueBackend]) -> None:
        """
        Register a new backend implementation.

        Args:
            name: Name to register the implementation under
            implementation: KeyValueBackend implementation class
        """
        _BACKEND_IMPLEMENTATIONS[name.lower()] = implementation

    @staticmethod
    def get_available_types() -> list:
        """Get list of available backend types."""
        return list(_BACKEND_IMPLEMENTATIONS.keys())


def create_backend(kind: str, **options: Any) -> KeyValueBackend:
    """Convenience function to create a backend."""
    return BackendFactory.create_backend(kind, **options)


def register_backend(name: str, implementation: Type[KeyValueBackend]) -> None:
    """Convenience function to register a backend implementation."""
    BackendFactory.register_backend(name, implementation)
