"""
Tests for access and refresh token storage.
"""

from datetime import datetime, timedelta, timezone

import pytest

from oauthstore.backend.memory import MemoryBackend
from oauthstore.backend.types import BackendUnavailableError
from oauthstore.core.types import AccessData, AuthorizeData
from oauthstore.errors import (
    AccessNotFoundError,
    EntityKind,
    RefreshNotFoundError,
    SerializationError,
    StoreError,
    TokenExpiredError,
)
from oauthstore.storage import Storage

from conftest import UserDataTest


class FailingPutBackend(MemoryBackend):
    """Memory backend whose writes to one table fail."""

    def __init__(self, failing_table: str):
        super().__init__()
        self.failing_table = failing_table

    async def put_item(self, table, item):
        if table == self.failing_table:
            raise BackendUnavailableError("put_item", table, "connection reset")
        await super().put_item(table, item)


@pytest.fixture
def access_data(client):
    return AccessData(
        client=client,
        access_token="1",
        refresh_token="r9999",
        expires_in=3600,
        scope="read",
        user_data=UserDataTest(username="kamil@uniplaces.com"),
    )


class TestAccessTokens:
    """Access tokens and their refresh mirror."""

    @pytest.mark.asyncio
    async def test_access_lifecycle(self, storage, access_data):
        with pytest.raises(AccessNotFoundError):
            await storage.load_access(access_data.access_token)
        with pytest.raises(RefreshNotFoundError):
            await storage.load_refresh(access_data.refresh_token)

        # Only the access token is saved explicitly
        await storage.save_access(access_data)

        assert await storage.load_access(access_data.access_token) == access_data
        assert await storage.load_refresh(access_data.refresh_token) == access_data

        await storage.remove_access(access_data.access_token)

        with pytest.raises(AccessNotFoundError) as exc_info:
            await storage.load_access(access_data.access_token)
        assert exc_info.value.entity == EntityKind.ACCESS
        # The refresh token outlives its access token
        assert await storage.load_refresh(access_data.refresh_token) == access_data

    @pytest.mark.asyncio
    async def test_expired_access_and_mirror(self, storage, access_data):
        access_data.created_at -= timedelta(seconds=access_data.expires_in)
        await storage.save_access(access_data)

        with pytest.raises(TokenExpiredError) as exc_info:
            await storage.load_access(access_data.access_token)
        assert exc_info.value.entity == EntityKind.ACCESS

        with pytest.raises(TokenExpiredError) as exc_info:
            await storage.load_refresh(access_data.refresh_token)
        assert exc_info.value.entity == EntityKind.REFRESH

    @pytest.mark.asyncio
    async def test_no_mirror_without_refresh_token(self, storage, backend, access_data):
        access_data.refresh_token = ""
        await storage.save_access(access_data)

        assert await backend.count_items(storage.config.refresh_table) == 0
        assert await storage.load_access(access_data.access_token) == access_data

    @pytest.mark.asyncio
    async def test_user_data_attributes_are_projected(self, storage, backend, access_data):
        await storage.save_access(access_data)

        access_item = await backend.get_item(storage.config.access_table, {"token": "1"})
        refresh_item = await backend.get_item(storage.config.refresh_table, {"token": "r9999"})

        assert access_item["username"] == "kamil@uniplaces.com"
        assert refresh_item["username"] == "kamil@uniplaces.com"
        assert set(access_item) == {"token", "payload", "username"}

    @pytest.mark.asyncio
    async def test_user_data_without_hook_stays_generic(self, backend, storage_config,
                                                        fast_schema_config, access_data):
        storage_config.create_user_data = None
        storage = Storage(backend, storage_config, fast_schema_config)
        await storage.create_schema()

        await storage.save_access(access_data)
        got = await storage.load_access(access_data.access_token)

        assert got.user_data == {"username": "kamil@uniplaces.com"}
        await storage.drop_schema()

    @pytest.mark.asyncio
    async def test_plain_user_data_is_carried_in_payload_only(self, storage, backend, access_data):
        storage.tokens.create_user_data = None
        access_data.user_data = {"username": "plain"}
        await storage.save_access(access_data)

        item = await backend.get_item(storage.config.access_table, {"token": "1"})
        assert set(item) == {"token", "payload"}
        assert (await storage.load_access("1")).user_data == {"username": "plain"}

    @pytest.mark.asyncio
    async def test_reserved_attribute_clash(self, storage, access_data):
        class Clashing:
            def to_dict(self):
                return {}

            def to_attribute_values(self):
                return {"payload": "oops"}

        access_data.user_data = Clashing()
        with pytest.raises(SerializationError):
            await storage.save_access(access_data)

        with pytest.raises(AccessNotFoundError):
            await storage.load_access(access_data.access_token)

    @pytest.mark.asyncio
    async def test_unencodable_attribute_value(self, storage, access_data):
        class IssuedAt:
            def to_dict(self):
                return {}

            def to_attribute_values(self):
                return {"issued": datetime.now(timezone.utc)}

        access_data.user_data = IssuedAt()
        with pytest.raises(SerializationError):
            await storage.save_access(access_data)

        with pytest.raises(AccessNotFoundError):
            await storage.load_access(access_data.access_token)
        with pytest.raises(RefreshNotFoundError):
            await storage.load_refresh(access_data.refresh_token)

    @pytest.mark.asyncio
    async def test_non_string_token(self, storage, access_data):
        access_data.access_token = 1
        with pytest.raises(SerializationError):
            await storage.save_access(access_data)

    @pytest.mark.asyncio
    async def test_embedded_grants_round_trip(self, storage, client, access_data):
        access_data.authorize_data = AuthorizeData(client=client, code="9999", expires_in=600)
        access_data.access_data = AccessData(
            client=client,
            access_token="0",
            refresh_token="r0",
            expires_in=3600,
            user_data=UserDataTest(username="previous"),
        )
        await storage.save_access(access_data)

        got = await storage.load_access(access_data.access_token)
        assert got == access_data
        assert isinstance(got.access_data.user_data, UserDataTest)

    @pytest.mark.asyncio
    async def test_mirror_failure_keeps_access_record(self, storage_config, fast_schema_config,
                                                      access_data):
        backend = FailingPutBackend(storage_config.refresh_table)
        storage = Storage(backend, storage_config, fast_schema_config)
        await storage.create_schema()

        with pytest.raises(StoreError) as exc_info:
            await storage.save_access(access_data)
        assert isinstance(exc_info.value.cause, BackendUnavailableError)
        assert exc_info.value.is_retryable()

        assert await storage.load_access(access_data.access_token) == access_data
        with pytest.raises(RefreshNotFoundError):
            await storage.load_refresh(access_data.refresh_token)

    @pytest.mark.asyncio
    async def test_corrupt_payload(self, storage, backend):
        await backend.put_item(storage.config.access_table, {"token": "bad", "payload": "{not json"})

        with pytest.raises(SerializationError):
            await storage.load_access("bad")


class TestRefreshTokens:
    """Refresh tokens saved on their own."""

    @pytest.mark.asyncio
    async def test_refresh_lifecycle(self, storage, access_data):
        with pytest.raises(RefreshNotFoundError):
            await storage.load_refresh(access_data.refresh_token)

        await storage.save_refresh(access_data)
        assert await storage.load_refresh(access_data.refresh_token) == access_data

        with pytest.raises(AccessNotFoundError):
            await storage.load_access(access_data.access_token)

        await storage.remove_refresh(access_data.refresh_token)
        with pytest.raises(RefreshNotFoundError):
            await storage.load_refresh(access_data.refresh_token)

        access_data.created_at -= timedelta(seconds=access_data.expires_in)
        await storage.save_refresh(access_data)
        with pytest.raises(TokenExpiredError):
            await storage.load_refresh(access_data.refresh_token)

    @pytest.mark.asyncio
    async def test_save_refresh_requires_token(self, storage, access_data):
        access_data.refresh_token = ""
        with pytest.raises(ValueError):
            await storage.save_refresh(access_data)

    @pytest.mark.asyncio
    async def test_remove_refresh_keeps_access(self, storage, access_data):
        await storage.save_access(access_data)
        await storage.remove_refresh(access_data.refresh_token)

        assert await storage.load_access(access_data.access_token) == access_data
