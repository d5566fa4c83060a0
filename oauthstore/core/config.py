"""
Configuration module for the OAuth2 key-value storage adapter.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Callable, Dict, List, Optional

from ..util.config import get_config_value


CLIENT_SUFFIX = "client"
AUTHORIZE_SUFFIX = "authorize"
ACCESS_SUFFIX = "access"
REFRESH_SUFFIX = "refresh"


@dataclass
class StorageConfig:
    """
    Table names and decoding hooks used by the repositories.

    ``create_user_data`` receives the decoded user-data value of an access
    or refresh record and returns the typed object to attach to it.
    """
    client_table: str
    authorize_table: str
    access_table: str
    refresh_table: str
    create_user_data: Optional[Callable[[Any], Any]] = None

    @classmethod
    def with_prefix(cls, prefix: str,
                    create_user_data: Optional[Callable[[Any], Any]] = None) -> "StorageConfig":
        """Build a configuration whose table names share a common prefix."""
        return cls(
            client_table=prefix + CLIENT_SUFFIX,
            authorize_table=prefix + AUTHORIZE_SUFFIX,
            access_table=prefix + ACCESS_SUFFIX,
            refresh_table=prefix + REFRESH_SUFFIX,
            create_user_data=create_user_data,
        )

    def table_names(self) -> List[str]:
        """Table names in provisioning order."""
        return [self.client_table, self.authorize_table, self.access_table, self.refresh_table]

    def validate(self) -> bool:
        """Validate the configuration"""
        names = self.table_names()
        if not all(names):
            raise ValueError("all table names are required")
        if len(set(names)) != len(names):
            raise ValueError("table names must be distinct")
        return True


@dataclass
class SchemaConfig:
    """Readiness polling and control-plane retry settings."""
    timeout: timedelta = field(default_factory=lambda: timedelta(seconds=60))
    initial_delay: timedelta = field(default_factory=lambda: timedelta(milliseconds=100))
    max_delay: timedelta = field(default_factory=lambda: timedelta(seconds=5))
    multiplier: float = 2.0
    control_plane_attempts: int = 3


@dataclass
class RedisConfig:
    """Connection settings for the Redis backend."""
    addresses: List[str] = field(default_factory=lambda: ["localhost:6379"])
    password: Optional[str] = None
    db: int = 0
    ssl: bool = False
    ssl_cert_reqs: str = "required"
    connection_pool_kwargs: Dict[str, Any] = field(default_factory=dict)
    key_prefix: str = "oauthstore:"
    scan_batch_size: int = 100


@dataclass
class Settings:
    """Top-level settings assembled from the environment."""
    table_prefix: str = ""
    backend: str = "memory"
    redis: RedisConfig = field(default_factory=RedisConfig)
    schema: SchemaConfig = field(default_factory=SchemaConfig)

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from OAUTHSTORE_* environment variables"""
        redis_config = RedisConfig(
            addresses=get_config_value("redis_addresses", "localhost:6379", list),
            password=get_config_value("redis_password"),
            db=get_config_value("redis_db", 0, int),
            ssl=get_config_value("redis_ssl", False, bool),
            key_prefix=get_config_value("redis_key_prefix", "oauthstore:"),
        )
        schema_config = SchemaConfig(
            timeout=get_config_value("schema_timeout", timedelta(seconds=60), timedelta),
        )
        return cls(
            table_prefix=get_config_value("table_prefix", ""),
            backend=get_config_value("backend", "memory"),
            redis=redis_config,
            schema=schema_config,
        )

    def storage_config(self, create_user_data: Optional[Callable[[Any], Any]] = None) -> StorageConfig:
        return StorageConfig.with_prefix(self.table_prefix, create_user_data)
