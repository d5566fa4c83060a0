"""
In-memory key-value backend.

This backend keeps all tables in process memory and is suitable for
development and testing. It mimics the asynchronous control plane of a
hosted store: a new table reports CREATING until ``activation_delay``
seconds have passed, and a deleted table reports DELETING until
``deletion_delay`` seconds have passed.

Note: All data is lost when the process terminates.
"""

import asyncio
import copy
import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .types import (
    Item,
    KeyValueBackend,
    TableExistsError,
    TableNotFoundError,
    TableSpec,
    TableStatus,
)


logger = logging.getLogger(__name__)


@dataclass
class _Table:
    spec: TableSpec
    status: TableStatus
    transition_at: float
    items: Dict[str, Item] = field(default_factory=dict)


class MemoryBackend(KeyValueBackend):
    """
    In-memory backend implementation.

    All operations take a single asyncio lock, so concurrent callers see
    each write as a whole.
    """

    def __init__(self, activation_delay: float = 0.0, deletion_delay: float = 0.0):
        """
        Initialize memory backend.

        Args:
            activation_delay: Seconds a new table stays CREATING
            deletion_delay: Seconds a deleted table stays DELETING
        """
        self._tables: Dict[str, _Table] = {}
        self._lock = asyncio.Lock()
        self.activation_delay = activation_delay
        self.deletion_delay = deletion_delay

    def _settle(self, name: str) -> Optional[_Table]:
        """Apply any pending status transition and return the table."""
        table = self._tables.get(name)
        if table is None:
            return None

        if time.monotonic() >= table.transition_at:
            if table.status == TableStatus.CREATING:
                table.status = TableStatus.ACTIVE
            elif table.status == TableStatus.DELETING:
                del self._tables[name]
                return None

        return table

    def _active_table(self, operation: str, name: str) -> _Table:
        table = self._settle(name)
        if table is None or table.status != TableStatus.ACTIVE:
            raise TableNotFoundError(operation, name, "Requested resource not found")
        return table

    async def create_table(self, spec: TableSpec) -> None:
        async with self._lock:
            if self._settle(spec.name) is not None:
                raise TableExistsError("create_table", spec.name, "Table already exists")

            self._tables[spec.name] = _Table(
                spec=spec,
                status=TableStatus.CREATING,
                transition_at=time.monotonic() + self.activation_delay,
            )
            logger.debug(f"Creating table {spec.name} keyed by {spec.key_attribute}")

    async def describe_table(self, name: str) -> Optional[TableStatus]:
        async with self._lock:
            table = self._settle(name)
            return table.status if table else None

    async def delete_table(self, name: str) -> None:
        async with self._lock:
            table = self._settle(name)
            if table is None or table.status == TableStatus.DELETING:
                raise TableNotFoundError("delete_table", name, "Requested resource not found")

            table.status = TableStatus.DELETING
            table.transition_at = time.monotonic() + self.deletion_delay
            table.items.clear()
            logger.debug(f"Deleting table {name}")

    async def put_item(self, table: str, item: Item) -> None:
        async with self._lock:
            target = self._active_table("put_item", table)
            key_attribute = target.spec.key_attribute
            if not isinstance(item.get(key_attribute), str):
                raise ValueError(f"Item is missing string key attribute '{key_attribute}'")

            target.items[item[key_attribute]] = copy.deepcopy(item)

    async def get_item(self, table: str, key: Item,
                       attributes: Optional[List[str]] = None) -> Optional[Item]:
        async with self._lock:
            target = self._active_table("get_item", table)
            item = target.items.get(key[target.spec.key_attribute])
            if item is None:
                return None

            if attributes is not None:
                item = {name: item[name] for name in attributes if name in item}

            return copy.deepcopy(item)

    async def delete_item(self, table: str, key: Item) -> None:
        async with self._lock:
            target = self._active_table("delete_item", table)
            target.items.pop(key[target.spec.key_attribute], None)

    async def list_tables(self) -> List[str]:
        """List the names of all tables that currently exist."""
        async with self._lock:
            return [name for name in list(self._tables) if self._settle(name) is not None]

    async def count_items(self, table: str) -> int:
        """Count items in an active table."""
        async with self._lock:
            return len(self._active_table("count_items", table).items)
