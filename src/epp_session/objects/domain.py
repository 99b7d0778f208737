"""
Domain Objects (RFC 5731)

Request payloads and typed responses for domain names.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Union

from lxml import etree

from epp_session.config import DOMAIN_NS
from epp_session.objects import ObjectType
from epp_session.objects.base import (
    BaseCheckResponse,
    BaseInfoResponse,
    BaseTransferResponse,
    ObjectResponse,
    StatusValue,
    generate_auth_info,
    sub,
    sub_auth_info,
    sub_status,
)

NAMESPACE = DOMAIN_NS


@dataclass
class DomainContact:
    """Domain contact association."""
    id: str
    type: str  # admin, tech, billing


def _sub_period(parent: etree._Element, period: Optional[int], unit: str) -> None:
    if period:
        sub(parent, NAMESPACE, "period", period, unit=unit)


def _sub_ns(parent: etree._Element, hosts: List[str]) -> None:
    if hosts:
        ns = sub(parent, NAMESPACE, "ns")
        for host in hosts:
            sub(ns, NAMESPACE, "hostObj", host)


def _sub_contacts(parent: etree._Element, contacts: List[DomainContact]) -> None:
    for contact in contacts:
        sub(parent, NAMESPACE, "contact", contact.id, type=contact.type)


# =============================================================================
# Request payloads
# =============================================================================

@dataclass
class Check:
    """domain:check payload."""
    names: List[str]

    object_type = ObjectType.DOMAIN
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
    """domain:info payload. hosts is one of all, del, sub, none."""
    name: str
    auth_info: Optional[str] = None
    hosts: str = "all"

    object_type = ObjectType.DOMAIN
    verb = "info"

    def build(self, parent: etree._Element) -> etree._Element:
        info = sub(parent, NAMESPACE, "info")
        sub(info, NAMESPACE, "name", self.name, hosts=self.hosts)
        sub_auth_info(info, NAMESPACE, self.auth_info)
        return info


@dataclass
class Create:
    """domain:create payload. Auth info is generated when not supplied."""
    name: str
    registrant: str
    period: int = 1
    period_unit: str = "y"
    admin: Optional[str] = None
    tech: Optional[str] = None
    billing: Optional[str] = None
    nameservers: List[str] = field(default_factory=list)
    auth_info: Optional[str] = None

    object_type = ObjectType.DOMAIN
    verb = "create"

    def __post_init__(self):
        if self.auth_info is None:
            self.auth_info = generate_auth_info()

    def build(self, parent: etree._Element) -> etree._Element:
        create = sub(parent, NAMESPACE, "create")
        sub(create, NAMESPACE, "name", self.name)
        _sub_period(create, self.period, self.period_unit)
        _sub_ns(create, self.nameservers)
        sub(create, NAMESPACE, "registrant", self.registrant)
        for role in ("admin", "tech", "billing"):
            contact_id = getattr(self, role)
            if contact_id:
                sub(create, NAMESPACE, "contact", contact_id, type=role)
        sub_auth_info(create, NAMESPACE, self.auth_info)
        return create


@dataclass
class Delete:
    """domain:delete payload."""
    name: str

    object_type = ObjectType.DOMAIN
    verb = "delete"

    def build(self, parent: etree._Element) -> etree._Element:
        delete = sub(parent, NAMESPACE, "delete")
        sub(delete, NAMESPACE, "name", self.name)
        return delete


@dataclass
class Renew:
    """domain:renew payload. cur_exp_date is the current expiry (YYYY-MM-DD)."""
    name: str
    cur_exp_date: Union[str, date]
    period: int = 1
    period_unit: str = "y"

    object_type = ObjectType.DOMAIN
    verb = "renew"

    def build(self, parent: etree._Element) -> etree._Element:
        cur_exp_date = self.cur_exp_date
        if isinstance(cur_exp_date, datetime):
            cur_exp_date = cur_exp_date.date()
        if isinstance(cur_exp_date, date):
            cur_exp_date = cur_exp_date.isoformat()

        renew = sub(parent, NAMESPACE, "renew")
        sub(renew, NAMESPACE, "name", self.name)
        sub(renew, NAMESPACE, "curExpDate", cur_exp_date)
        _sub_period(renew, self.period, self.period_unit)
        return renew


@dataclass
class Transfer:
    """domain:transfer payload; the operation is given to the client call."""
    name: str
    auth_info: Optional[str] = None
    period: Optional[int] = None
    period_unit: str = "y"

    object_type = ObjectType.DOMAIN
    verb = "transfer"

    def build(self, parent: etree._Element) -> etree._Element:
        transfer = sub(parent, NAMESPACE, "transfer")
        sub(transfer, NAMESPACE, "name", self.name)
        _sub_period(transfer, self.period, self.period_unit)
        sub_auth_info(transfer, NAMESPACE, self.auth_info)
        return transfer


@dataclass
class Update:
    """
    domain:update payload.

    Status can be a plain string ("clientHold") or a StatusValue with reason.
    """
    name: str
    add_ns: List[str] = field(default_factory=list)
    rem_ns: List[str] = field(default_factory=list)
    add_contacts: List[DomainContact] = field(default_factory=list)
    rem_contacts: List[DomainContact] = field(default_factory=list)
    add_status: List[Union[str, StatusValue]] = field(default_factory=list)
    rem_status: List[Union[str, StatusValue]] = field(default_factory=list)
    new_registrant: Optional[str] = None
    new_auth_info: Optional[str] = None

    object_type = ObjectType.DOMAIN
    verb = "update"

    def build(self, parent: etree._Element) -> etree._Element:
        update = sub(parent, NAMESPACE, "update")
        sub(update, NAMESPACE, "name", self.name)

        for tag, hosts, contacts, statuses in (
            ("add", self.add_ns, self.add_contacts, self.add_status),
            ("rem", self.rem_ns, self.rem_contacts, self.rem_status),
        ):
            if not (hosts or contacts or statuses):
                continue
            section = sub(update, NAMESPACE, tag)
            _sub_ns(section, hosts)
            _sub_contacts(section, contacts)
            for status in statuses:
                sub_status(section, NAMESPACE, status)

        if self.new_registrant or self.new_auth_info:
            chg = sub(update, NAMESPACE, "chg")
            if self.new_registrant:
                sub(chg, NAMESPACE, "registrant", self.new_registrant)
            sub_auth_info(chg, NAMESPACE, self.new_auth_info)

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

    @property
    def ex_date(self) -> Optional[datetime]:
        return self._date("exDate")


class DeleteResponse(ObjectResponse):
    namespace = NAMESPACE


class InfoResponse(BaseInfoResponse):
    namespace = NAMESPACE

    @property
    def name(self) -> Optional[str]:
        return self._text("name")

    @property
    def registrant(self) -> Optional[str]:
        return self._text("registrant")

    @property
    def contacts(self) -> List[DomainContact]:
        return [DomainContact(id=c.text, type=c.get("type", "")) for c in self._findall("contact")]

    @property
    def nameservers(self) -> List[str]:
        ns = self._find("ns")
        if ns is None:
            return []
        hosts = [h.text for h in ns.findall(self._q("hostObj")) if h.text]
        if not hosts:
            hosts = [h.text for h in ns.iter(self._q("hostName")) if h.text]
        return hosts

    @property
    def hosts(self) -> List[str]:
        """Subordinate hosts."""
        return [h.text for h in self._findall("host") if h.text]

    @property
    def ex_date(self) -> Optional[datetime]:
        return self._date("exDate")


class RenewResponse(ObjectResponse):
    namespace = NAMESPACE
    data_tag = "renData"

    @property
    def name(self) -> Optional[str]:
        return self._text("name")

    @property
    def ex_date(self) -> Optional[datetime]:
        return self._date("exDate")


class TransferResponse(BaseTransferResponse):
    namespace = NAMESPACE

    @property
    def name(self) -> Optional[str]:
        return self._text("name")

    @property
    def ex_date(self) -> Optional[datetime]:
        return self._date("exDate")


class UpdateResponse(ObjectResponse):
    namespace = NAMESPACE
