"""
Repositories mapping OAuth2 artifacts onto key-value items.
"""

from .base import BaseRepository, PAYLOAD_ATTRIBUTE
from .clients import ClientRepository
from .authorize import AuthorizationCodeRepository
from .tokens import TokenRepository
from .userdata import AttributeProjection, project_attributes, encode_user_data

__all__ = [
    "BaseRepository",
    "PAYLOAD_ATTRIBUTE",
    "ClientRepository",
    "AuthorizationCodeRepository",
    "TokenRepository",
    "AttributeProjection",
    "project_attributes",
    "encode_user_data",
]
