"""
Core data types for the OAuth2 storage adapter.

These mirror the artifacts a protocol engine hands to its storage layer:
registered clients, authorization codes and access data (which doubles as
the refresh token record). Each type converts to and from a plain
dictionary so it can be carried as an opaque JSON payload.
"""

import dataclasses
import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

from ..common.utils import ensure_utc, get_current_time, parse_timestamp


UserDataFactory = Callable[[Any], Any]


def encode_user_data(value: Any) -> Any:
    """
    Convert a user-data payload into a JSON-compatible value.

    Objects providing ``to_dict()`` are asked for it, dataclasses are
    converted field by field, anything else is passed through as is.
    """
    if value is None:
        return None
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    return value


@dataclass
class Client:
    """A registered OAuth2 client."""

    id: str
    secret: str = ""
    redirect_uri: str = ""
    user_data: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "secret": self.secret,
            "redirect_uri": self.redirect_uri,
            "user_data": encode_user_data(self.user_data),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Client":
        return cls(
            id=data["id"],
            secret=data.get("secret", ""),
            redirect_uri=data.get("redirect_uri", ""),
            user_data=data.get("user_data"),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, json_str: str) -> "Client":
        return cls.from_dict(json.loads(json_str))


class _Expiring:
    """Expiration derived from ``created_at`` and ``expires_in`` seconds."""

    created_at: datetime
    expires_in: int

    def expire_at(self) -> datetime:
        """Point in time at which the record stops being valid."""
        return self.created_at + timedelta(seconds=self.expires_in)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        """
        Check whether the record has expired.

        A record is expired once its expiry is not after ``now``.
        """
        now = ensure_utc(now) if now is not None else get_current_time()
        return self.expire_at() <= now


@dataclass
class AuthorizeData(_Expiring):
    """Authorization code data."""

    client: Optional[Client] = None
    code: str = ""
    expires_in: int = 0
    scope: str = ""
    redirect_uri: str = ""
    state: str = ""
    created_at: datetime = field(default_factory=get_current_time)
    user_data: Any = None
    code_challenge: str = ""
    code_challenge_method: str = ""

    def __post_init__(self):
        self.created_at = ensure_utc(self.created_at)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "client": self.client.to_dict() if self.client else None,
            "code": self.code,
            "expires_in": self.expires_in,
            "scope": self.scope,
            "redirect_uri": self.redirect_uri,
            "state": self.state,
            "created_at": self.created_at.isoformat(),
            "user_data": encode_user_data(self.user_data),
            "code_challenge": self.code_challenge,
            "code_challenge_method": self.code_challenge_method,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuthorizeData":
        # The embedded client is a snapshot taken at save time.
        client = Client.from_dict(data["client"]) if data.get("client") else None
        return cls(
            client=client,
            code=data["code"],
            expires_in=int(data.get("expires_in", 0)),
            scope=data.get("scope", ""),
            redirect_uri=data.get("redirect_uri", ""),
            state=data.get("state", ""),
            created_at=parse_timestamp(data["created_at"]),
            user_data=data.get("user_data"),
            code_challenge=data.get("code_challenge", ""),
            code_challenge_method=data.get("code_challenge_method", ""),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, json_str: str) -> "AuthorizeData":
        return cls.from_dict(json.loads(json_str))


@dataclass
class AccessData(_Expiring):
    """
    Access grant data.

    The same record is stored under the access token and, when a refresh
    token was issued, mirrored under the refresh token.
    """

    client: Optional[Client] = None
    authorize_data: Optional[AuthorizeData] = None
    access_data: Optional["AccessData"] = None
    access_token: str = ""
    refresh_token: str = ""
    expires_in: int = 0
    scope: str = ""
    redirect_uri: str = ""
    created_at: datetime = field(default_factory=get_current_time)
    user_data: Any = None

    def __post_init__(self):
        self.created_at = ensure_utc(self.created_at)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "client": self.client.to_dict() if self.client else None,
            "authorize_data": self.authorize_data.to_dict() if self.authorize_data else None,
            "access_data": self.access_data.to_dict() if self.access_data else None,
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_in": self.expires_in,
            "scope": self.scope,
            "redirect_uri": self.redirect_uri,
            "created_at": self.created_at.isoformat(),
            "user_data": encode_user_data(self.user_data),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any],
                  create_user_data: Optional[UserDataFactory] = None) -> "AccessData":
        """
        Create AccessData from dictionary.

        Args:
            data: Dictionary data
            create_user_data: Optional hook turning the decoded user data
                into its concrete type

        Returns:
            AccessData instance
        """
        client = Client.from_dict(data["client"]) if data.get("client") else None
        authorize_data = None
        if data.get("authorize_data"):
            authorize_data = AuthorizeData.from_dict(data["authorize_data"])
        previous = None
        if data.get("access_data"):
            previous = cls.from_dict(data["access_data"], create_user_data)

        user_data = data.get("user_data")
        if create_user_data is not None and user_data is not None:
            user_data = create_user_data(user_data)

        return cls(
            client=client,
            authorize_data=authorize_data,
            access_data=previous,
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token", ""),
            expires_in=int(data.get("expires_in", 0)),
            scope=data.get("scope", ""),
            redirect_uri=data.get("redirect_uri", ""),
            created_at=parse_timestamp(data["created_at"]),
            user_data=user_data,
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, json_str: str,
                  create_user_data: Optional[UserDataFactory] = None) -> "AccessData":
        return cls.from_dict(json.loads(json_str), create_user_data)
