"""
Host Objects (RFC 5732)

Request payloads and typed responses for name server hosts.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from lxml import etree

from epp_session.config import HOST_NS
from epp_session.objects import ObjectType
from epp_session.objects.base import (
    BaseCheckResponse,
    BaseInfoResponse,
    ObjectResponse,
    sub,
    sub_status,
)

NAMESPACE = HOST_NS


@dataclass
class HostAddress:
    """Host IP address."""
    address: str
    ip_version: str = "v4"  # v4 or v6


def _sub_addresses(parent: etree._Element, addresses: List[HostAddress]) -> None:
    for addr in addresses:
        sub(parent, NAMESPACE, "addr", addr.address, ip=addr.ip_version)


# =============================================================================
# Request payloads
# =============================================================================

@dataclass
class Check:
    """host:check payload."""
    names: List[str]

    object_type = ObjectType.HOST
    verb = "check"

    def __post_init__(self):
        if isinstance(self.names, str):
            self.names = [self.names]

    def build(self, parent: etree._Element) -> etree._Element:
        check = sub(parent, NAMESPACE, "check")
        for name in self.names:
            sub(check, NAMESPACE, "name", name)
        return check


@dataclass
class Info:
    """host:info payload."""
    name: str

    object_type = ObjectType.HOST
    verb = "info"

    def build(self, parent: etree._Element) -> etree._Element:
        info = sub(parent, NAMESPACE, "info")
        sub(info, NAMESPACE, "name", self.name)
        return info


@dataclass
class Create:
    """host:create payload. Addresses are only needed for in-bailiwick hosts."""
    name: str
    addresses: List[HostAddress] = field(default_factory=list)

    object_type = ObjectType.HOST
    verb = "create"

    def build(self, parent: etree._Element) -> etree._Element:
        create = sub(parent, NAMESPACE, "create")
        sub(create, NAMESPACE, "name", self.name)
        _sub_addresses(create, self.addresses)
        return create


@dataclass
class Delete:
    """host:delete payload."""
    name: str

    object_type = ObjectType.HOST
    verb = "delete"

    def build(self, parent: etree._Element) -> etree._Element:
        delete = sub(parent, NAMESPACE, "delete")
        sub(delete, NAMESPACE, "name", self.name)
        return delete


@dataclass
class Update:
    """host:update payload."""
    name: str
    add_addresses: List[HostAddress] = field(default_factory=list)
    rem_addresses: List[HostAddress] = field(default_factory=list)
    add_status: List[str] = field(default_factory=list)
    rem_status: List[str] = field(default_factory=list)
    new_name: Optional[str] = None

    object_type = ObjectType.HOST
    verb = "update"

    def build(self, parent: etree._Element) -> etree._Element:
        update = sub(parent, NAMESPACE, "update")
        sub(update, NAMESPACE, "name", self.name)

        for tag, addresses, statuses in (
            ("add", self.add_addresses, self.add_status),
            ("rem", self.rem_addresses, self.rem_status),
        ):
            if addresses or statuses:
                section = sub(update, NAMESPACE, tag)
                _sub_addresses(section, addresses)
                for status in statuses:
                    sub_status(section, NAMESPACE, status)

        if self.new_name:
            chg = sub(update, NAMESPACE, "chg")
            sub(chg, NAMESPACE, "name", self.new_name)

        return update


# =============================================================================
# Typed responses
# =============================================================================

class CheckResponse(BaseCheckResponse):
    namespace = NAMESPACE


class CreateResponse(ObjectResponse):
    namespace = NAMESPACE
    data_tag = "creData"

    @property
    def name(self) -> Optional[str]:
        return self._text("name")

    @property
    def cr_date(self) -> Optional[datetime]:
        return self._date("crDate")


class DeleteResponse(ObjectResponse):
    namespace = NAMESPACE


class InfoResponse(BaseInfoResponse):
    namespace = NAMESPACE

    @property
    def name(self) -> Optional[str]:
        return self._text("name")

    @property
    def addresses(self) -> List[HostAddress]:
        return [
            HostAddress(address=a.text, ip_version=a.get("ip", "v4"))
            for a in self._findall("addr")
        ]


# Hosts have no renew or transfer in RFC 5732; kept so every verb has a wrapper.
class RenewResponse(ObjectResponse):
    namespace = NAMESPACE


class TransferResponse(ObjectResponse):
    namespace = NAMESPACE


class UpdateResponse(ObjectResponse):
    namespace = NAMESPACE
