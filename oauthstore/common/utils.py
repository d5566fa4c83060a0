"""
Common utilities and helper functions.
"""

from datetime import datetime, timezone
from typing import Optional


def get_current_time() -> datetime:
    """Get the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp into an aware UTC datetime."""
    if value is None:
        return None
    return ensure_utc(datetime.fromisoformat(value))


def mask_token(token: str, visible: int = 4) -> str:
    """
    Mask a token for logging.

    Args:
        token: Token value
        visible: Number of leading characters to keep

    Returns:
        Masked token such as ``abcd****``
    """
    if len(token) <= visible:
        return "*" * len(token)
    return token[:visible] + "****"
