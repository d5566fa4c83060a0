"""
Shared item mapping for the repositories.

Every item is ``{<key attribute>: key, "payload": <serialized record>}``
plus any extension attributes.
"""

import json
import logging
from typing import Any, Callable, Dict, Optional, TypeVar

from ..backend.types import BackendError, KeyValueBackend
from ..common.utils import mask_token
from ..errors import EntityKind, SerializationError, not_found_error, wrap_backend_error


logger = logging.getLogger(__name__)


PAYLOAD_ATTRIBUTE = "payload"

T = TypeVar("T")


class BaseRepository:
    """
    Reads and writes serialized records in a single table.

    Backend failures are raised as StoreError and encoding failures as
    SerializationError; nothing is retried here.
    """

    entity: EntityKind

    def __init__(self, backend: KeyValueBackend, table: str, key_attribute: str):
        self.backend = backend
        self.table = table
        self.key_attribute = key_attribute

    def _key(self, key: str) -> Dict[str, Any]:
        return {self.key_attribute: key}

    def _encode(self, record: Any) -> str:
        try:
            return record.to_json()
        except (TypeError, ValueError) as e:
            raise SerializationError(
                f"Failed to encode {self.entity.value} record: {e}", cause=e
            ) from e

    def _decode(self, key: str, payload: Any, decoder: Callable[[str], T]) -> T:
        if not isinstance(payload, str):
            raise SerializationError(
                f"Item {mask_token(key)} in {self.table} has no {PAYLOAD_ATTRIBUTE} attribute"
            )
        try:
            return decoder(payload)
        except Exception as e:
            raise SerializationError(
                f"Failed to decode {self.entity.value} record: {e}", cause=e
            ) from e

    async def _put(self, key: str, payload: str,
                   extra: Optional[Dict[str, Any]] = None) -> None:
        if not isinstance(key, str):
            raise SerializationError(
                f"{self.entity.value.capitalize()} key must be a string, got {type(key).__name__}"
            )

        if extra:
            # Extension attributes are stored as individual JSON values
            try:
                json.dumps(extra)
            except (TypeError, ValueError) as e:
                raise SerializationError(
                    f"Failed to encode {self.entity.value} attributes: {e}", cause=e
                ) from e

        item: Dict[str, Any] = dict(extra or {})
        item[self.key_attribute] = key
        item[PAYLOAD_ATTRIBUTE] = payload

        try:
            await self.backend.put_item(self.table, item)
        except BackendError as e:
            logger.error(f"Failed to write {self.entity.value} {mask_token(key)}: {e}")
            raise wrap_backend_error(e, f"Failed to write {self.entity.value}", self.table) from e

        logger.debug(f"Stored {self.entity.value} {mask_token(key)} in {self.table}")

    async def _get_payload(self, key: str) -> Any:
        try:
            item = await self.backend.get_item(
                self.table,
                self._key(key),
                attributes=[self.key_attribute, PAYLOAD_ATTRIBUTE]
            )
        except BackendError as e:
            logger.error(f"Failed to read {self.entity.value} {mask_token(key)}: {e}")
            raise wrap_backend_error(e, f"Failed to read {self.entity.value}", self.table) from e

        if not item:
            raise not_found_error(self.entity, key)

        return item.get(PAYLOAD_ATTRIBUTE)

    async def _delete(self, key: str) -> None:
        try:
            await self.backend.delete_item(self.table, self._key(key))
        except BackendError as e:
            logger.error(f"Failed to delete {self.entity.value} {mask_token(key)}: {e}")
            raise wrap_backend_error(e, f"Failed to delete {self.entity.value}", self.table) from e

        logger.debug(f"Removed {self.entity.value} {mask_token(key)} from {self.table}")
