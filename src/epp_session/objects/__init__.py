"""
EPP Object Types

Maps an object type token to the module holding that type's namespace,
request payloads and typed responses.
"""

from enum import Enum
from types import ModuleType
from typing import Optional

from epp_session.config import CONTACT_NS, DOMAIN_NS, HOST_NS

RESPONSE_CLASSES = (
    "CheckResponse",
    "CreateResponse",
    "DeleteResponse",
    "InfoResponse",
    "RenewResponse",
    "TransferResponse",
    "UpdateResponse",
)


class ObjectType(str, Enum):
    """Object types the client understands."""

    DOMAIN = "domain"
    CONTACT = "contact"
    HOST = "host"

    @property
    def namespace(self) -> str:
        return _NAMESPACES[self]

    @property
    def module(self) -> ModuleType:
        """Module exposing NAMESPACE and the <Verb>Response classes."""
        # imported here, the object modules import ObjectType from this package
        from epp_session.objects import contact, domain, host

        modules = {
            ObjectType.DOMAIN: domain,
            ObjectType.CONTACT: contact,
            ObjectType.HOST: host,
        }
        return modules[self]


_NAMESPACES = {
    ObjectType.DOMAIN: DOMAIN_NS,
    ObjectType.CONTACT: CONTACT_NS,
    ObjectType.HOST: HOST_NS,
}


def object_type_of(token) -> Optional[ObjectType]:
    """
    Return the ObjectType for a token, or None.

    The token is an ObjectType, its case-sensitive string value ("domain",
    "contact", "host"), or a payload carrying an ``object_type`` attribute.
    """
    if not isinstance(token, str):
        token = getattr(token, "object_type", None)
    if isinstance(token, ObjectType):
        return token
    if not isinstance(token, str):
        return None
    try:
        return ObjectType(token)
    except ValueError:
        return None


def resolve_type(token) -> Optional[ModuleType]:
    """Return the object module for a token, None if the type is unknown."""
    object_type = object_type_of(token)
    if object_type is None:
        return None
    return object_type.module
