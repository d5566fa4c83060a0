"""
Storage facade consumed by an OAuth2 protocol engine.

The engine calls one method per request. Client creation and removal,
explicit refresh saves and the schema lifecycle are not used by the
engine's own flow but are exposed for applications, tooling and tests.
"""

import logging
from typing import Any, Optional

from .backend.factory import create_backend
from .backend.types import KeyValueBackend
from .core.config import SchemaConfig, StorageConfig
from .core.types import AccessData, AuthorizeData, Client
from .repository.authorize import AuthorizationCodeRepository
from .repository.clients import ClientRepository
from .repository.tokens import TokenRepository
from .schema.manager import SchemaManager


logger = logging.getLogger(__name__)


class Storage:
    """
    OAuth2 storage backed by a key-value store.

    Args:
        backend: Key-value backend holding the four tables
        config: Table names and user-data reconstruction hook
        schema_config: Readiness polling settings for create/drop schema
    """

    def __init__(self, backend: KeyValueBackend, config: StorageConfig,
                 schema_config: Optional[SchemaConfig] = None):
        config.validate()
        self.backend = backend
        self.config = config

        self.clients = ClientRepository(backend, config.client_table)
        self.authorize = AuthorizationCodeRepository(backend, config.authorize_table)
        self.tokens = TokenRepository(
            backend,
            config.access_table,
            config.refresh_table,
            create_user_data=config.create_user_data
        )
        self.schema = SchemaManager(backend, config, schema_config)

    def clone(self) -> "Storage":
        """Per-request copy for the engine; the storage holds no request state."""
        return self

    async def close(self) -> None:
        """Release the backend connection."""
        await self.backend.close()

    # Schema lifecycle

    async def create_schema(self) -> None:
        """Create all tables and wait until they are ready."""
        await self.schema.provision()

    async def drop_schema(self) -> None:
        """Delete all tables and wait until they are gone."""
        await self.schema.teardown()

    # Clients

    async def create_client(self, client: Client) -> None:
        await self.clients.create(client)

    async def get_client(self, client_id: str) -> Client:
        return await self.clients.get(client_id)

    async def remove_client(self, client_id: str) -> None:
        await self.clients.remove(client_id)

    # Authorization codes

    async def save_authorize(self, data: AuthorizeData) -> None:
        await self.authorize.save(data)

    async def load_authorize(self, code: str) -> AuthorizeData:
        return await self.authorize.load(code)

    async def remove_authorize(self, code: str) -> None:
        await self.authorize.remove(code)

    # Access and refresh tokens

    async def save_access(self, data: AccessData) -> None:
        await self.tokens.save_access(data)

    async def load_access(self, token: str) -> AccessData:
        return await self.tokens.load_access(token)

    async def remove_access(self, token: str) -> None:
        await self.tokens.remove_access(token)

    async def save_refresh(self, data: AccessData) -> None:
        await self.tokens.save_refresh(data)

    async def load_refresh(self, token: str) -> AccessData:
        return await self.tokens.load_refresh(token)

    async def remove_refresh(self, token: str) -> None:
        await self.tokens.remove_refresh(token)


def create_storage(prefix: str = "", backend: str = "memory",
                   schema_config: Optional[SchemaConfig] = None,
                   create_user_data=None, **options: Any) -> Storage:
    """
    Create a storage with prefixed table names.

    Args:
        prefix: Table name prefix
        backend: Backend type ('memory', 'redis', ...)
        schema_config: Readiness polling settings
        create_user_data: Optional user-data reconstruction hook
        **options: Backend constructor arguments

    Returns:
        Storage instance
    """
    config = StorageConfig.with_prefix(prefix, create_user_data)
    logger.debug(f"Creating {backend} storage with table prefix '{prefix}'")
    return Storage(create_backend(backend, **options), config, schema_config)
