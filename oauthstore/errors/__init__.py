"""
Error taxonomy for the OAuth2 key-value storage adapter.

Every repository operation either returns a decoded artifact or raises
exactly one of the errors defined here:

- NotFoundError (one subclass per entity kind) when no item exists at a key
- TokenExpiredError when the item exists but its computed expiry has passed
- SerializationError when encoding or decoding a payload fails
- StoreError wrapping any backend transport or control-plane failure
"""

from enum import Enum
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from dataclasses import dataclass

from ..backend.types import BackendUnavailableError


class ErrorCode(Enum):
    """Structured error codes for storage operations."""

    CLIENT_NOT_FOUND = "client_not_found"
    AUTHORIZE_NOT_FOUND = "authorize_not_found"
    ACCESS_NOT_FOUND = "access_not_found"
    REFRESH_NOT_FOUND = "refresh_not_found"
    TOKEN_EXPIRED = "token_expired"
    SERIALIZATION_FAILED = "serialization_failed"
    STORAGE_ERROR = "storage_error"
    SCHEMA_TIMEOUT = "schema_timeout"


class EntityKind(Enum):
    """The four artifact kinds persisted by the adapter."""

    CLIENT = "client"
    AUTHORIZE = "authorize"
    ACCESS = "access"
    REFRESH = "refresh"


class ErrorSource(Enum):
    """Sources where errors can originate."""

    REPOSITORY = "repository"
    SERIALIZATION = "serialization"
    STORAGE = "storage"
    SCHEMA = "schema"


@dataclass
class ErrorContext:
    """Additional context for errors."""

    table: Optional[str] = None
    key: Optional[str] = None
    timestamp: datetime = None
    metadata: Dict[str, Any] = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now(timezone.utc)
        if self.metadata is None:
            self.metadata = {}


class OAuthStoreError(Exception):
    """
    Base exception class for all storage adapter errors.

    Carries an error code, the source of the failure, optional context
    and the underlying cause.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        source: ErrorSource = ErrorSource.REPOSITORY,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None
    ):
        self.code = code
        self.message = message
        self.source = source
        self.context = context or ErrorContext()
        self.cause = cause

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result = {
            "error": self.code.value,
            "error_description": self.message,
            "error_source": self.source.value,
            "timestamp": self.context.timestamp.isoformat(),
        }

        if self.context.table:
            result["table"] = self.context.table

        if self.context.metadata:
            result["metadata"] = self.context.metadata

        if self.cause:
            result["caused_by"] = str(self.cause)

        return result

    def is_retryable(self) -> bool:
        """Check if this error might be resolved by retrying."""
        return False


_NOT_FOUND_CODES = {
    EntityKind.CLIENT: ErrorCode.CLIENT_NOT_FOUND,
    EntityKind.AUTHORIZE: ErrorCode.AUTHORIZE_NOT_FOUND,
    EntityKind.ACCESS: ErrorCode.ACCESS_NOT_FOUND,
    EntityKind.REFRESH: ErrorCode.REFRESH_NOT_FOUND,
}

_NOT_FOUND_MESSAGES = {
    EntityKind.CLIENT: "Client not found",
    EntityKind.AUTHORIZE: "Authorize not found",
    EntityKind.ACCESS: "Access not found",
    EntityKind.REFRESH: "Refresh not found",
}


class NotFoundError(OAuthStoreError):
    """No item exists at the requested primary key."""

    def __init__(self, entity: EntityKind, key: str, **kwargs):
        self.entity = entity
        self.key = key
        context = kwargs.pop("context", ErrorContext())
        context.key = key

        super().__init__(
            code=_NOT_FOUND_CODES[entity],
            message=_NOT_FOUND_MESSAGES[entity],
            source=ErrorSource.REPOSITORY,
            context=context,
            **kwargs
        )


class ClientNotFoundError(NotFoundError):
    def __init__(self, key: str, **kwargs):
        super().__init__(EntityKind.CLIENT, key, **kwargs)


class AuthorizeNotFoundError(NotFoundError):
    def __init__(self, key: str, **kwargs):
        super().__init__(EntityKind.AUTHORIZE, key, **kwargs)


class AccessNotFoundError(NotFoundError):
    def __init__(self, key: str, **kwargs):
        super().__init__(EntityKind.ACCESS, key, **kwargs)


class RefreshNotFoundError(NotFoundError):
    def __init__(self, key: str, **kwargs):
        super().__init__(EntityKind.REFRESH, key, **kwargs)


class TokenExpiredError(OAuthStoreError):
    """
    The item exists but its expiry (created_at + expires_in) has passed.

    The record is left in storage; the caller decides whether to remove it.
    """

    def __init__(self, entity: EntityKind, key: str,
                 expired_at: Optional[datetime] = None, **kwargs):
        self.entity = entity
        self.key = key
        self.expired_at = expired_at
        context = kwargs.pop("context", ErrorContext())
        context.key = key
        if expired_at is not None:
            context.metadata["expired_at"] = expired_at.isoformat()

        super().__init__(
            code=ErrorCode.TOKEN_EXPIRED,
            message="Token expired",
            source=ErrorSource.REPOSITORY,
            context=context,
            **kwargs
        )


class SerializationError(OAuthStoreError):
    """Encoding or decoding of a payload failed."""

    def __init__(self, message: str, **kwargs):
        super().__init__(
            code=ErrorCode.SERIALIZATION_FAILED,
            message=message,
            source=ErrorSource.SERIALIZATION,
            **kwargs
        )


class StoreError(OAuthStoreError):
    """Wraps an underlying backend transport or control-plane failure."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.STORAGE_ERROR,
                 source: ErrorSource = ErrorSource.STORAGE, **kwargs):
        super().__init__(
            code=code,
            message=message,
            source=source,
            **kwargs
        )

    def is_retryable(self) -> bool:
        return isinstance(self.cause, BackendUnavailableError)


def not_found_error(entity: EntityKind, key: str) -> NotFoundError:
    """Create the NotFound error matching an entity kind."""
    error_types = {
        EntityKind.CLIENT: ClientNotFoundError,
        EntityKind.AUTHORIZE: AuthorizeNotFoundError,
        EntityKind.ACCESS: AccessNotFoundError,
        EntityKind.REFRESH: RefreshNotFoundError,
    }
    return error_types[entity](key)


def wrap_backend_error(exc: Exception, message: str,
                       table: Optional[str] = None) -> StoreError:
    """Wrap a backend exception as a StoreError, keeping the original cause."""
    return StoreError(
        message=f"{message}: {exc}",
        context=ErrorContext(table=table),
        cause=exc
    )


__all__ = [
    "ErrorCode",
    "EntityKind",
    "ErrorSource",
    "ErrorContext",
    "OAuthStoreError",
    "NotFoundError",
    "ClientNotFoundError",
    "AuthorizeNotFoundError",
    "AccessNotFoundError",
    "RefreshNotFoundError",
    "TokenExpiredError",
    "SerializationError",
    "StoreError",
    "not_found_error",
    "wrap_backend_error",
]
