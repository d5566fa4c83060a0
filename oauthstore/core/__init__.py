"""
Core configuration and data types.
"""

from .config import StorageConfig, SchemaConfig, RedisConfig, Settings
from .types import Client, AuthorizeData, AccessData, encode_user_data

__all__ = [
    "StorageConfig",
    "SchemaConfig",
    "RedisConfig",
    "Settings",
    "Client",
    "AuthorizeData",
    "AccessData",
    "encode_user_data",
]
