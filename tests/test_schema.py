"""
Tests for schema provisioning and teardown.
"""

from datetime import timedelta

import pytest

from oauthstore.backend.memory import MemoryBackend
from oauthstore.backend.types import (
    BackendUnavailableError,
    TableExistsError,
    TableNotFoundError,
    TableStatus,
)
from oauthstore.core.config import SchemaConfig, StorageConfig
from oauthstore.errors import ErrorCode, ErrorSource, StoreError
from oauthstore.resilience import WaitTimeoutError
from oauthstore.schema import SchemaManager, table_specs


class FlakyDescribeBackend(MemoryBackend):
    """Memory backend whose status checks fail a number of times first."""

    def __init__(self, failures: int):
        super().__init__()
        self.failures = failures
        self.describe_calls = 0

    async def describe_table(self, name):
        self.describe_calls += 1
        if self.failures > 0:
            self.failures -= 1
            raise BackendUnavailableError("describe_table", name, "throttled")
        return await super().describe_table(name)


@pytest.fixture
def config():
    return StorageConfig.with_prefix("Schema")


class TestSchemaManager:
    """Provisioning and teardown of the four tables."""

    def test_table_specs(self, config):
        specs = table_specs(config)

        assert [(s.name, s.key_attribute) for s in specs] == [
            ("Schemaclient", "id"),
            ("Schemaauthorize", "code"),
            ("Schemaaccess", "token"),
            ("Schemarefresh", "token"),
        ]

    @pytest.mark.asyncio
    async def test_provision_and_teardown(self, config, fast_schema_config):
        backend = MemoryBackend()
        manager = SchemaManager(backend, config, fast_schema_config)

        await manager.provision()
        for name in config.table_names():
            assert await backend.describe_table(name) == TableStatus.ACTIVE

        await manager.teardown()
        assert await backend.list_tables() == []

    @pytest.mark.asyncio
    async def test_waits_for_asynchronous_propagation(self, config, fast_schema_config):
        backend = MemoryBackend(activation_delay=0.02, deletion_delay=0.02)
        manager = SchemaManager(backend, config, fast_schema_config)

        await manager.provision()
        for name in config.table_names():
            assert await backend.describe_table(name) == TableStatus.ACTIVE

        await manager.teardown()
        for name in config.table_names():
            assert await backend.describe_table(name) is None

    @pytest.mark.asyncio
    async def test_second_provision_fails(self, config, fast_schema_config):
        manager = SchemaManager(MemoryBackend(), config, fast_schema_config)
        await manager.provision()

        with pytest.raises(StoreError) as exc_info:
            await manager.provision()

        error = exc_info.value
        assert isinstance(error.cause, TableExistsError)
        assert error.source == ErrorSource.SCHEMA
        assert error.context.table == config.client_table

    @pytest.mark.asyncio
    async def test_readiness_timeout_leaves_partial_schema(self, config):
        backend = MemoryBackend(activation_delay=10)
        schema_config = SchemaConfig(
            timeout=timedelta(milliseconds=30),
            initial_delay=timedelta(milliseconds=5),
            max_delay=timedelta(milliseconds=10),
        )
        manager = SchemaManager(backend, config, schema_config)

        with pytest.raises(StoreError) as exc_info:
            await manager.provision()

        assert exc_info.value.code == ErrorCode.SCHEMA_TIMEOUT
        assert isinstance(exc_info.value.cause, WaitTimeoutError)
        # Only the first table was requested before the sequence aborted
        assert await backend.list_tables() == [config.client_table]
        assert await backend.describe_table(config.client_table) == TableStatus.CREATING

    @pytest.mark.asyncio
    async def test_transient_status_errors_are_retried(self, config, fast_schema_config):
        backend = FlakyDescribeBackend(failures=2)
        manager = SchemaManager(backend, config, fast_schema_config)

        await manager.provision()

        assert backend.failures == 0
        assert backend.describe_calls == 4 + 2

    @pytest.mark.asyncio
    async def test_persistent_status_errors_surface(self, config, fast_schema_config):
        backend = FlakyDescribeBackend(failures=100)
        manager = SchemaManager(backend, config, fast_schema_config)

        with pytest.raises(StoreError) as exc_info:
            await manager.provision()

        assert isinstance(exc_info.value.cause, BackendUnavailableError)
        assert backend.describe_calls == fast_schema_config.control_plane_attempts

    @pytest.mark.asyncio
    async def test_teardown_without_schema_fails(self, config, fast_schema_config):
        manager = SchemaManager(MemoryBackend(), config, fast_schema_config)

        with pytest.raises(StoreError) as exc_info:
            await manager.teardown()

        assert isinstance(exc_info.value.cause, TableNotFoundError)
