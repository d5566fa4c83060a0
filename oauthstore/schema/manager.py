"""
Schema lifecycle for the four backing tables.

Provisioning and teardown block the awaiting caller until the backend's
control plane confirms each table's state, so they belong in setup and
maintenance tooling rather than in request handling.
"""

import logging
from typing import List, Optional

from ..backend.types import (
    BackendError,
    BackendUnavailableError,
    KeyValueBackend,
    TableSpec,
    TableStatus,
)
from ..core.config import SchemaConfig, StorageConfig
from ..errors import ErrorCode, ErrorContext, ErrorSource, StoreError
from ..resilience import Retry, RetryConfig, WaitConfig, WaitTimeoutError, wait_until


logger = logging.getLogger(__name__)


CLIENT_KEY = "id"
AUTHORIZE_KEY = "code"
TOKEN_KEY = "token"


def table_specs(config: StorageConfig) -> List[TableSpec]:
    """Table definitions in provisioning order."""
    return [
        TableSpec(config.client_table, CLIENT_KEY),
        TableSpec(config.authorize_table, AUTHORIZE_KEY),
        TableSpec(config.access_table, TOKEN_KEY),
        TableSpec(config.refresh_table, TOKEN_KEY),
    ]


class SchemaManager:
    """
    Creates and drops the client, authorize, access and refresh tables.

    Any control-plane error or readiness timeout aborts the remaining
    sequence. Tables already created or dropped stay that way; the caller
    retries or tears down manually.
    """

    def __init__(self, backend: KeyValueBackend, config: StorageConfig,
                 schema_config: Optional[SchemaConfig] = None):
        self.backend = backend
        self.config = config
        self.schema_config = schema_config or SchemaConfig()

        self._wait_config = WaitConfig(
            timeout=self.schema_config.timeout,
            initial_delay=self.schema_config.initial_delay,
            max_delay=self.schema_config.max_delay,
            multiplier=self.schema_config.multiplier,
        )
        self._retry = Retry(RetryConfig(
            max_attempts=self.schema_config.control_plane_attempts,
            initial_delay=self.schema_config.initial_delay,
            max_delay=self.schema_config.max_delay,
            multiplier=self.schema_config.multiplier,
            retryable_exceptions=[BackendUnavailableError],
        ))

    async def provision(self) -> None:
        """
        Create every table and wait until each reports ACTIVE.

        Raises:
            StoreError: If a table cannot be created or does not become
                ready within the configured timeout
        """
        for spec in table_specs(self.config):
            logger.info(f"Creating table {spec.name}")
            try:
                await self.backend.create_table(spec)
                await wait_until(
                    lambda: self._has_status(spec.name, TableStatus.ACTIVE),
                    self._wait_config,
                    f"table {spec.name} to become active"
                )
            except (BackendError, WaitTimeoutError) as e:
                logger.error(f"Failed to provision table {spec.name}: {e}")
                raise self._wrap(e, "create table", spec.name) from e
            logger.info(f"Table {spec.name} is active")

    async def teardown(self) -> None:
        """
        Delete every table and wait until each is gone.

        Raises:
            StoreError: If a table cannot be deleted or does not disappear
                within the configured timeout
        """
        for spec in table_specs(self.config):
            logger.info(f"Deleting table {spec.name}")
            try:
                await self.backend.delete_table(spec.name)
                await wait_until(
                    lambda: self._has_status(spec.name, None),
                    self._wait_config,
                    f"table {spec.name} to be deleted"
                )
            except (BackendError, WaitTimeoutError) as e:
                logger.error(f"Failed to tear down table {spec.name}: {e}")
                raise self._wrap(e, "delete table", spec.name) from e
            logger.info(f"Table {spec.name} deleted")

    async def _has_status(self, name: str, expected: Optional[TableStatus]) -> bool:
        status = await self._retry.execute(self.backend.describe_table, name)
        return status == expected

    def _wrap(self, exc: Exception, action: str, table: str) -> StoreError:
        code = ErrorCode.SCHEMA_TIMEOUT if isinstance(exc, WaitTimeoutError) else ErrorCode.STORAGE_ERROR
        return StoreError(
            message=f"Failed to {action} {table}: {exc}",
            code=code,
            source=ErrorSource.SCHEMA,
            context=ErrorContext(table=table),
            cause=exc
        )
