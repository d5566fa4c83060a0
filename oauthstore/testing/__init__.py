"""
Testing utilities for code built on the storage adapter.
"""

from .tokengen import SequentialAuthorizeTokenGen, SequentialAccessTokenGen

__all__ = [
    "SequentialAuthorizeTokenGen",
    "SequentialAccessTokenGen",
]
