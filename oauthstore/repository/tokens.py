"""
Access and refresh token repository.

Access data is stored twice when a refresh token was issued: once in the
access table under the access token and once in the refresh table under
the refresh token. The two writes are sequential and not atomic. If the
refresh write fails, the access record stays in place and the caller gets
the refresh error.
"""

import logging
from functools import partial
from typing import Any, Callable, Optional

from ..backend.types import KeyValueBackend
from ..common.utils import mask_token
from ..core.types import AccessData
from ..errors import EntityKind, TokenExpiredError
from ..schema.manager import TOKEN_KEY
from .base import PAYLOAD_ATTRIBUTE, BaseRepository
from .userdata import project_attributes


logger = logging.getLogger(__name__)


class _AccessTable(BaseRepository):
    """One of the two tables holding AccessData records."""

    def __init__(self, backend: KeyValueBackend, table: str, entity: EntityKind):
        self.entity = entity
        super().__init__(backend, table, TOKEN_KEY)

    async def write(self, key: str, data: AccessData) -> None:
        extra = project_attributes(data.user_data, reserved=(TOKEN_KEY, PAYLOAD_ATTRIBUTE))
        await self._put(key, self._encode(data), extra)

    async def read(self, key: str,
                   create_user_data: Optional[Callable[[Any], Any]]) -> AccessData:
        payload = await self._get_payload(key)
        data = self._decode(
            key, payload, partial(AccessData.from_json, create_user_data=create_user_data)
        )

        if data.is_expired():
            logger.debug(f"{self.entity.value.capitalize()} token {mask_token(key)} "
                         f"expired at {data.expire_at().isoformat()}")
            raise TokenExpiredError(self.entity, key, data.expire_at())

        return data

    async def delete(self, key: str) -> None:
        await self._delete(key)


class TokenRepository:
    """
    Save, load and remove access and refresh tokens.

    Args:
        backend: Key-value backend
        access_table: Table keyed by access token
        refresh_table: Table keyed by refresh token
        create_user_data: Optional hook rebuilding typed user data on load
    """

    def __init__(self, backend: KeyValueBackend, access_table: str, refresh_table: str,
                 create_user_data: Optional[Callable[[Any], Any]] = None):
        self.access = _AccessTable(backend, access_table, EntityKind.ACCESS)
        self.refresh = _AccessTable(backend, refresh_table, EntityKind.REFRESH)
        self.create_user_data = create_user_data

    async def save_access(self, data: AccessData) -> None:
        """
        Store access data under its access token.

        When the record carries a refresh token it is mirrored into the
        refresh table right after the access write.

        Raises:
            SerializationError: If the record cannot be encoded
            StoreError: If either write fails; a failed mirror write does
                not undo the access write
        """
        await self.access.write(data.access_token, data)

        if data.refresh_token:
            try:
                await self.save_refresh(data)
            except Exception as e:
                logger.error(
                    f"Access token {mask_token(data.access_token)} stored without its refresh "
                    f"mirror {mask_token(data.refresh_token)}: {e}"
                )
                raise

    async def load_access(self, token: str) -> AccessData:
        """
        Load access data by access token.

        Raises:
            AccessNotFoundError: If no data is stored under the token
            TokenExpiredError: If the token has expired
        """
        return await self.access.read(token, self.create_user_data)

    async def remove_access(self, token: str) -> None:
        """Delete access data. The refresh mirror, if any, is left in place."""
        await self.access.delete(token)

    async def save_refresh(self, data: AccessData) -> None:
        """
        Store access data under its refresh token.

        Raises:
            ValueError: If the record has no refresh token
        """
        if not data.refresh_token:
            raise ValueError("refresh_token is required to save refresh data")
        await self.refresh.write(data.refresh_token, data)

    async def load_refresh(self, token: str) -> AccessData:
        """
        Load access data by refresh token.

        The mirror expires on the schedule of the access token it was
        copied from.

        Raises:
            RefreshNotFoundError: If no data is stored under the token
            TokenExpiredError: If the token has expired
        """
        return await self.refresh.read(token, self.create_user_data)

    async def remove_refresh(self, token: str) -> None:
        """Delete refresh data by refresh token."""
        await self.refresh.delete(token)
