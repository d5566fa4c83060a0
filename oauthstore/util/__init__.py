"""Configuration helpers."""

from .config import get_config_value, parse_duration_string

__all__ = [
    "get_config_value",
    "parse_duration_string",
]
