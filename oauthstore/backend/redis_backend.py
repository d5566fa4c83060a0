"""
Redis-based key-value backend.

Tables are registered in a catalog hash and each item is stored as a Redis
hash whose fields are the item's attributes, JSON encoded per field so that
typed extension attributes survive the round trip.

Key layout (with the default ``oauthstore:`` prefix):

    oauthstore:tables              catalog, field = table name
    oauthstore:{table}:{key}       one hash per item
"""

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional, Tuple

import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError

from ..core.config import RedisConfig
from .types import (
    BackendError,
    BackendUnavailableError,
    Item,
    KeyValueBackend,
    TableExistsError,
    TableNotFoundError,
    TableSpec,
    TableStatus,
)


logger = logging.getLogger(__name__)


DEFAULT_PORT = 6379


def parse_address(address: str, default_port: int = DEFAULT_PORT) -> Tuple[str, int]:
    """
    Split a Redis address into host and port.

    Accepts ``host``, ``host:port``, ``[ipv6]:port`` and bare IPv6
    literals; the port defaults to ``default_port``.
    """
    if address.startswith("["):
        host, _, rest = address[1:].partition("]")
        port = rest[1:] if rest.startswith(":") else ""
    elif address.count(":") == 1:
        host, port = address.split(":")
    else:
        host, port = address, ""

    if not host:
        raise ValueError(f"Invalid Redis address: {address!r}")

    return host, int(port) if port else default_port


def _encode_value(operation: str, table: str, value: Any) -> str:
    try:
        return json.dumps(value)
    except (TypeError, ValueError) as e:
        raise BackendError(operation, table, f"Attribute value is not JSON encodable: {e}", e) from e


def _decode_value(operation: str, table: str, raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError as e:
        raise BackendError(operation, table, f"Stored value is not valid JSON: {e}", e) from e


class RedisBackend(KeyValueBackend):
    """
    Redis backend implementation.

    Tables become ACTIVE as soon as they are registered; deletion removes
    the table's items with SCAN in batches before dropping the catalog
    entry, and reports DELETING in the meantime or after an interrupted
    deletion.
    """

    def __init__(self, config: Optional[RedisConfig] = None, client: Optional[redis.Redis] = None):
        """
        Initialize Redis backend.

        Args:
            config: Redis connection configuration
            client: Pre-built client, mainly for tests
        """
        self.config = config or RedisConfig()
        self._redis: Optional[redis.Redis] = client
        self._connected = client is not None
        self._key_attributes: Dict[str, str] = {}

    async def connect(self) -> None:
        """Connect to Redis."""
        if self._connected:
            return

        host, port = parse_address(self.config.addresses[0])

        self._redis = redis.Redis(
            host=host,
            port=port,
            password=self.config.password,
            db=self.config.db,
            ssl=self.config.ssl,
            ssl_cert_reqs=self.config.ssl_cert_reqs,
            decode_responses=True,
            **self.config.connection_pool_kwargs
        )

        async with self._translate_errors("connect", host):
            await self._redis.ping()

        self._connected = True
        logger.info(f"Connected to Redis at {host}:{port}")

    async def close(self) -> None:
        """Disconnect from Redis."""
        if self._redis is not None and self._connected:
            await self._redis.aclose()
            self._connected = False
            logger.info("Disconnected from Redis")

    @property
    def catalog_key(self) -> str:
        return f"{self.config.key_prefix}tables"

    def item_key(self, table: str, key: str) -> str:
        return f"{self.config.key_prefix}{table}:{key}"

    @asynccontextmanager
    async def _translate_errors(self, operation: str, table: str):
        try:
            yield
        except (RedisConnectionError, RedisTimeoutError) as e:
            raise BackendUnavailableError(operation, table, str(e), e) from e
        except RedisError as e:
            raise BackendError(operation, table, str(e), e) from e

    async def _client(self) -> redis.Redis:
        if not self._connected:
            await self.connect()
        return self._redis

    async def _read_catalog(self, name: str) -> Optional[Dict[str, Any]]:
        client = await self._client()
        async with self._translate_errors("describe_table", name):
            raw = await client.hget(self.catalog_key, name)
        return _decode_value("describe_table", name, raw) if raw else None

    async def _key_attribute(self, operation: str, table: str) -> str:
        key_attribute = self._key_attributes.get(table)
        if key_attribute is None:
            entry = await self._read_catalog(table)
            if entry is None or entry["status"] != TableStatus.ACTIVE.value:
                raise TableNotFoundError(operation, table, "Requested resource not found")
            key_attribute = entry["key_attribute"]
            self._key_attributes[table] = key_attribute
        return key_attribute

    async def create_table(self, spec: TableSpec) -> None:
        client = await self._client()
        entry = json.dumps({
            "key_attribute": spec.key_attribute,
            "status": TableStatus.ACTIVE.value,
        })

        async with self._translate_errors("create_table", spec.name):
            created = await client.hsetnx(self.catalog_key, spec.name, entry)

        if not created:
            raise TableExistsError("create_table", spec.name, "Table already exists")

        logger.debug(f"Registered table {spec.name} keyed by {spec.key_attribute}")

    async def describe_table(self, name: str) -> Optional[TableStatus]:
        entry = await self._read_catalog(name)
        return TableStatus(entry["status"]) if entry else None

    async def delete_table(self, name: str) -> None:
        """
        Delete a table and all of its items.

        A table left DELETING by an interrupted deletion is not an error:
        the item cleanup is run again and the catalog entry removed.
        """
        entry = await self._read_catalog(name)
        if entry is None:
            raise TableNotFoundError("delete_table", name, "Requested resource not found")

        client = await self._client()
        self._key_attributes.pop(name, None)

        async with self._translate_errors("delete_table", name):
            if entry["status"] == TableStatus.DELETING.value:
                logger.warning(f"Resuming interrupted deletion of table {name}")
            else:
                entry["status"] = TableStatus.DELETING.value
                await client.hset(self.catalog_key, name, json.dumps(entry))

            removed = 0
            batch: List[str] = []
            async for key in client.scan_iter(
                match=f"{self.config.key_prefix}{name}:*",
                count=self.config.scan_batch_size
            ):
                batch.append(key)
                if len(batch) >= self.config.scan_batch_size:
                    removed += await client.delete(*batch)
                    batch = []
            if batch:
                removed += await client.delete(*batch)

            await client.hdel(self.catalog_key, name)

        logger.debug(f"Deleted table {name} with {removed} items")

    async def put_item(self, table: str, item: Item) -> None:
        key_attribute = await self._key_attribute("put_item", table)
        if not isinstance(item.get(key_attribute), str):
            raise ValueError(f"Item is missing string key attribute '{key_attribute}'")

        client = await self._client()
        key = self.item_key(table, item[key_attribute])
        mapping = {name: _encode_value("put_item", table, value) for name, value in item.items()}

        async with self._translate_errors("put_item", table):
            async with client.pipeline(transaction=True) as pipe:
                pipe.delete(key)
                pipe.hset(key, mapping=mapping)
                await pipe.execute()

    async def get_item(self, table: str, key: Item,
                       attributes: Optional[List[str]] = None) -> Optional[Item]:
        key_attribute = await self._key_attribute("get_item", table)
        client = await self._client()
        redis_key = self.item_key(table, key[key_attribute])

        async with self._translate_errors("get_item", table):
            if attributes is not None:
                values = await client.hmget(redis_key, attributes)
                raw = {name: value for name, value in zip(attributes, values) if value is not None}
            else:
                raw = await client.hgetall(redis_key)

        if not raw:
            return None

        return {name: _decode_value("get_item", table, value) for name, value in raw.items()}

    async def delete_item(self, table: str, key: Item) -> None:
        key_attribute = await self._key_attribute("delete_item", table)
        client = await self._client()

        async with self._translate_errors("delete_item", table):
            await client.delete(self.item_key(table, key[key_attribute]))
