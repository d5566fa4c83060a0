"""
User-data extension for token records.

A user-data payload attached to an access record can expose extra,
individually addressable attributes next to the opaque serialized
payload by implementing :class:`AttributeProjection`. Any object with a
``to_attribute_values`` method qualifies, whether or not it inherits from
the class.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable

from ..core.types import encode_user_data
from ..errors import SerializationError


class AttributeProjection(ABC):
    """Capability of projecting a payload into named store attributes."""

    @abstractmethod
    def to_attribute_values(self) -> Dict[str, Any]:
        """
        Project the payload into store attributes.

        Returns:
            Mapping of attribute name to a JSON-compatible value
        """
        pass

    @classmethod
    def __subclasshook__(cls, subclass):
        if cls is AttributeProjection:
            method = getattr(subclass, "to_attribute_values", None)
            if callable(method):
                return True
        return NotImplemented


def project_attributes(user_data: Any, reserved: Iterable[str] = ()) -> Dict[str, Any]:
    """
    Collect the extension attributes contributed by a user-data payload.

    Args:
        user_data: The payload attached to a token record, possibly None
        reserved: Attribute names owned by the item itself

    Returns:
        The projected attributes, empty when the payload lacks the capability

    Raises:
        SerializationError: If the projection is not a mapping or uses a
            reserved attribute name
    """
    if not isinstance(user_data, AttributeProjection):
        return {}

    attributes = user_data.to_attribute_values()
    if not isinstance(attributes, dict):
        raise SerializationError(
            f"{type(user_data).__name__}.to_attribute_values() must return a dict"
        )

    clashes = sorted(set(attributes) & set(reserved))
    if clashes:
        raise SerializationError(
            f"User data attributes clash with reserved attributes: {', '.join(clashes)}"
        )

    return dict(attributes)


__all__ = [
    "AttributeProjection",
    "project_attributes",
    "encode_user_data",
]
