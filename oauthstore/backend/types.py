"""
Key-value backend types and interfaces.

A backend exposes named tables of schemaless items addressed by a single
string key attribute, plus a small control plane to create, inspect and
delete tables.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional


Item = Dict[str, Any]


class TableStatus(Enum):
    """Lifecycle state of a table as reported by the control plane."""
    CREATING = "creating"
    ACTIVE = "active"
    DELETING = "deleting"


@dataclass(frozen=True)
class TableSpec:
    """Table definition: a name and its single primary key attribute."""
    name: str
    key_attribute: str


class BackendError(Exception):
    """Base exception for backend failures."""

    def __init__(self, operation: str, table: str, message: str,
                 cause: Optional[Exception] = None):
        self.operation = operation
        self.table = table
        self.message = message
        self.cause = cause
        super().__init__(f"{operation} on {table}: {message}")


class TableExistsError(BackendError):
    """Raised when creating a table that already exists."""
    pass


class TableNotFoundError(BackendError):
    """Raised when addressing a table that does not exist or is not ready."""
    pass


class BackendUnavailableError(BackendError):
    """Transient transport failure; the request may succeed if retried."""
    pass


class KeyValueBackend(ABC):
    """
    Abstract base class for key-value backends.

    Item writes replace the whole item (last write wins). Reads and deletes
    address items by the exact value of the table's key attribute.
    """

    @abstractmethod
    async def create_table(self, spec: TableSpec) -> None:
        """
        Request creation of a table.

        The table may report CREATING for a while before it is ACTIVE.

        Raises:
            TableExistsError: If a table with that name already exists
        """
        pass

    @abstractmethod
    async def describe_table(self, name: str) -> Optional[TableStatus]:
        """
        Report the status of a table.

        Returns:
            TableStatus, or None when the table does not exist
        """
        pass

    @abstractmethod
    async def delete_table(self, name: str) -> None:
        """
        Request deletion of a table.

        Raises:
            TableNotFoundError: If the table does not exist
        """
        pass

    @abstractmethod
    async def put_item(self, table: str, item: Item) -> None:
        """Write an item, replacing any existing item with the same key."""
        pass

    @abstractmethod
    async def get_item(self, table: str, key: Item,
                       attributes: Optional[List[str]] = None) -> Optional[Item]:
        """
        Read an item by key.

        Args:
            table: Table name
            key: Mapping of the key attribute to its value
            attributes: Optional projection of attribute names to return

        Returns:
            The item, or None if no item exists at the key
        """
        pass

    @abstractmethod
    async def delete_item(self, table: str, key: Item) -> None:
        """Delete an item by key. Deleting an absent key is not an error."""
        pass

    async def close(self) -> None:
        """Release any resources held by the backend."""
        pass
