"""
Client repository.
"""

from ..backend.types import KeyValueBackend
from ..core.types import Client
from ..errors import EntityKind
from ..schema.manager import CLIENT_KEY
from .base import BaseRepository


class ClientRepository(BaseRepository):
    """CRUD for registered clients keyed by client id."""

    entity = EntityKind.CLIENT

    def __init__(self, backend: KeyValueBackend, table: str):
        super().__init__(backend, table, CLIENT_KEY)

    async def create(self, client: Client) -> None:
        """Store a client, replacing any existing client with the same id."""
        await self._put(client.id, self._encode(client))

    async def get(self, client_id: str) -> Client:
        """
        Load a client by id.

        Raises:
            ClientNotFoundError: If no client is stored under the id
        """
        payload = await self._get_payload(client_id)
        return self._decode(client_id, payload, Client.from_json)

    async def remove(self, client_id: str) -> None:
        """Delete a client. Removing an unknown id is not an error."""
        await self._delete(client_id)
