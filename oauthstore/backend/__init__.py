"""
Key-value backends for the OAuth2 storage adapter.

- Backend interface and control-plane types
- Memory-based backend for development/testing
- Redis-based backend for production
- Backend factory
"""

from .types import (
    Item,
    TableSpec,
    TableStatus,
    KeyValueBackend,
    BackendError,
    TableExistsError,
    TableNotFoundError,
    BackendUnavailableError,
)

from .memory import MemoryBackend
from .redis_backend import RedisBackend

from .factory import (
    BackendFactory,
    create_backend,
    register_backend,
)

__all__ = [
    'Item',
    'TableSpec',
    'TableStatus',
    'KeyValueBackend',
    'BackendError',
    'TableExistsError',
    'TableNotFoundError',
    'BackendUnavailableError',

    'MemoryBackend',
    'RedisBackend',

    'BackendFactory',
    'create_backend',
    'register_backend',
]
