"""
oauthstore Python Package

OAuth2 authorization server storage on a schemaless key-value store.
"""

__version__ = "0.1.0"

from .core.config import StorageConfig, SchemaConfig, RedisConfig, Settings
from .core.types import Client, AuthorizeData, AccessData
from .errors import (
    OAuthStoreError,
    NotFoundError,
    ClientNotFoundError,
    AuthorizeNotFoundError,
    AccessNotFoundError,
    RefreshNotFoundError,
    TokenExpiredError,
    SerializationError,
    StoreError,
)
from .repository.userdata import AttributeProjection
from .schema.manager import SchemaManager
from .storage import Storage, create_storage

__all__ = [
    "Storage",
    "create_storage",
    "SchemaManager",
    "StorageConfig",
    "SchemaConfig",
    "RedisConfig",
    "Settings",
    "Client",
    "AuthorizeData",
    "AccessData",
    "AttributeProjection",
    "OAuthStoreError",
    "NotFoundError",
    "ClientNotFoundError",
    "AuthorizeNotFoundError",
    "AccessNotFoundError",
    "RefreshNotFoundError",
    "TokenExpiredError",
    "SerializationError",
    "StoreError",
]
