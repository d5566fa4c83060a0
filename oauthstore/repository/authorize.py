"""
Authorization code repository.
"""

import logging

from ..backend.types import KeyValueBackend
from ..common.utils import mask_token
from ..core.types import AuthorizeData
from ..errors import EntityKind, TokenExpiredError
from ..schema.manager import AUTHORIZE_KEY
from .base import BaseRepository


logger = logging.getLogger(__name__)


class AuthorizationCodeRepository(BaseRepository):
    """Save, load and remove authorization codes keyed by code value."""

    entity = EntityKind.AUTHORIZE

    def __init__(self, backend: KeyValueBackend, table: str):
        super().__init__(backend, table, AUTHORIZE_KEY)

    async def save(self, data: AuthorizeData) -> None:
        """Store authorization data under its code."""
        await self._put(data.code, self._encode(data))

    async def load(self, code: str) -> AuthorizeData:
        """
        Load authorization data by code, including the client snapshot.

        Expired codes are reported, not deleted.

        Raises:
            AuthorizeNotFoundError: If no data is stored under the code
            TokenExpiredError: If the code has expired
        """
        payload = await self._get_payload(code)
        data = self._decode(code, payload, AuthorizeData.from_json)

        if data.is_expired():
            logger.debug(f"Authorization code {mask_token(code)} expired at {data.expire_at().isoformat()}")
            raise TokenExpiredError(self.entity, code, data.expire_at())

        return data

    async def remove(self, code: str) -> None:
        """Delete authorization data by code."""
        await self._delete(code)
