"""
Tests for data types and their serialization.
"""

import json
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import pytest

from oauthstore.core.types import AccessData, AuthorizeData, Client, encode_user_data
from oauthstore.errors import SerializationError
from oauthstore.repository.userdata import AttributeProjection, project_attributes


class TestExpiration:
    """Derived expiry."""

    def test_expire_at(self):
        created = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        data = AuthorizeData(code="1", expires_in=600, created_at=created)

        assert data.expire_at() == created + timedelta(minutes=10)

    def test_expiry_boundary_counts_as_expired(self):
        created = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        data = AccessData(access_token="1", expires_in=60, created_at=created)

        assert not data.is_expired(now=created + timedelta(seconds=59))
        assert data.is_expired(now=created + timedelta(seconds=60))
        assert data.is_expired(now=created + timedelta(seconds=61))

    def test_naive_datetimes_are_utc(self):
        data = AccessData(access_token="1", expires_in=60, created_at=datetime(2024, 1, 1))

        assert data.created_at.tzinfo == timezone.utc
        assert data.is_expired()


class TestSerialization:
    """Payload encoding."""

    def test_access_data_json_shape(self):
        created = datetime(2024, 1, 1, tzinfo=timezone.utc)
        data = AccessData(
            client=Client(id="1234", secret="aabbccdd"),
            access_token="1",
            refresh_token="r1",
            expires_in=3600,
            created_at=created,
        )

        payload = json.loads(data.to_json())
        assert payload["access_token"] == "1"
        assert payload["refresh_token"] == "r1"
        assert payload["client"]["id"] == "1234"
        assert payload["created_at"] == "2024-01-01T00:00:00+00:00"
        assert payload["authorize_data"] is None

    def test_from_json_applies_user_data_hook(self):
        data = AccessData(access_token="1", user_data={"n": 1})

        got = AccessData.from_json(data.to_json(), create_user_data=lambda raw: ("typed", raw["n"]))
        assert got.user_data == ("typed", 1)

    def test_encode_user_data(self):
        @dataclass
        class Profile:
            name: str

        class WithDict:
            def to_dict(self):
                return {"custom": True}

        assert encode_user_data(None) is None
        assert encode_user_data(Profile("x")) == {"name": "x"}
        assert encode_user_data(WithDict()) == {"custom": True}
        assert encode_user_data(["a", 1]) == ["a", 1]


class TestAttributeProjection:
    """User-data capability checks."""

    def test_duck_typed_capability(self):
        class Projecting:
            def to_attribute_values(self):
                return {"tenant": "acme"}

        assert isinstance(Projecting(), AttributeProjection)
        assert not isinstance({"tenant": "acme"}, AttributeProjection)
        assert project_attributes(Projecting()) == {"tenant": "acme"}

    def test_absent_capability(self):
        assert project_attributes(None) == {}
        assert project_attributes({"a": 1}) == {}

    def test_projection_must_be_a_mapping(self):
        class Bad(AttributeProjection):
            def to_attribute_values(self):
                return ["tenant"]

        with pytest.raises(SerializationError):
            project_attributes(Bad())

    def test_reserved_names(self):
        class Clash(AttributeProjection):
            def to_attribute_values(self):
                return {"token": "x"}

        with pytest.raises(SerializationError):
            project_attributes(Clash(), reserved=("token", "payload"))
