"""Common utilities."""

from .utils import get_current_time, ensure_utc, parse_timestamp, mask_token

__all__ = [
    "get_current_time",
    "ensure_utc",
    "parse_timestamp",
    "mask_token",
]
