"""
Schema provisioning and teardown for the backing tables.
"""

from .manager import SchemaManager, table_specs, CLIENT_KEY, AUTHORIZE_KEY, TOKEN_KEY

__all__ = [
    "SchemaManager",
    "table_specs",
    "CLIENT_KEY",
    "AUTHORIZE_KEY",
    "TOKEN_KEY",
]
