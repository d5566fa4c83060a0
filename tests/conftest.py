"""
Shared fixtures for oauthstore tests.
"""

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict

import pytest
import pytest_asyncio

from oauthstore.backend.memory import MemoryBackend
from oauthstore.core.config import SchemaConfig, StorageConfig
from oauthstore.core.types import Client
from oauthstore.storage import Storage


@dataclass
class UserDataTest:
    """User data that projects a queryable username attribute."""
    username: str = ""

    def to_attribute_values(self) -> Dict[str, Any]:
        return {"username": self.username}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserDataTest":
        return cls(**data)


@pytest.fixture
def fast_schema_config():
    """Schema settings with short polling delays."""
    return SchemaConfig(
        timeout=timedelta(seconds=5),
        initial_delay=timedelta(milliseconds=1),
        max_delay=timedelta(milliseconds=10),
    )


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def storage_config():
    return StorageConfig.with_prefix("Test", create_user_data=UserDataTest.from_dict)


@pytest_asyncio.fixture
async def storage(backend, storage_config, fast_schema_config):
    """A storage with all four tables provisioned."""
    storage = Storage(backend, storage_config, fast_schema_config)
    await storage.create_schema()
    yield storage
    await storage.drop_schema()
    await storage.close()


@pytest.fixture
def client():
    return Client(id="1234", secret="aabbccdd", redirect_uri="/dev/null")
