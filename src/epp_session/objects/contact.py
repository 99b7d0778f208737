"""
Contact Objects (RFC 5733)

Request payloads and typed responses for contacts.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from lxml import etree

from epp_session.config import CONTACT_NS
from epp_session.exceptions import EPPInvalidOperationError
from epp_session.objects import ObjectType
from epp_session.objects.base import (
    BaseCheckResponse,
    BaseInfoResponse,
    BaseTransferResponse,
    ObjectResponse,
    generate_auth_info,
    sub,
    sub_auth_info,
    sub_status,
)

NAMESPACE = CONTACT_NS


@dataclass
class PostalInfo:
    """Contact postal information."""
    name: str
    city: str
    cc: str  # 2-letter ISO country code
    type: str = "int"  # int or loc
    org: Optional[str] = None
    street: List[str] = field(default_factory=list)
    sp: Optional[str] = None  # State/Province
    pc: Optional[str] = None  # Postal Code

    def build(self, parent: etree._Element) -> etree._Element:
        postal = sub(parent, NAMESPACE, "postalInfo", type=self.type)
        sub(postal, NAMESPACE, "name", self.name)
        if self.org:
            sub(postal, NAMESPACE, "org", self.org)
        addr = sub(postal, NAMESPACE, "addr")
        for street in self.street:
            sub(addr, NAMESPACE, "street", street)
        sub(addr, NAMESPACE, "city", self.city)
        if self.sp:
            sub(addr, NAMESPACE, "sp", self.sp)
        if self.pc:
            sub(addr, NAMESPACE, "pc", self.pc)
        sub(addr, NAMESPACE, "cc", self.cc)
        return postal


def _sub_phone(parent: etree._Element, tag: str, number: Optional[str], ext: Optional[str]) -> None:
    if number:
        sub(parent, NAMESPACE, tag, number, x=ext)


# =============================================================================
# Request payloads
# =============================================================================

@dataclass
class Check:
    """contact:check payload."""
    ids: List[str]

    object_type = ObjectType.CONTACT
    verb = "check"

    def __post_init__(self):
        if isinstance(self.ids, str):
            self.ids = [self.ids]

    def build(self, parent: etree._Element) -> etree._Element:
        check = sub(parent, NAMESPACE, "check")
        for contact_id in self.ids:
            sub(check, NAMESPACE, "id", contact_id)
        return check


@dataclass
class Info:
    """contact:info payload."""
    id: str
    auth_info: Optional[str] = None

    object_type = ObjectType.CONTACT
    verb = "info"

    def build(self, parent: etree._Element) -> etree._Element:
        info = sub(parent, NAMESPACE, "info")
        sub(info, NAMESPACE, "id", self.id)
        sub_auth_info(info, NAMESPACE, self.auth_info)
        return info


@dataclass
class Create:
    """
    contact:create payload.

    disclose maps element names (e.g. "voice", "email") to whether they may
    be disclosed. All values must agree since a contact carries one disclose
    element, whose flag applies to every listed field. Auth info is generated
    when not supplied.
    """
    id: str
    email: str
    postal_info: PostalInfo
    voice: Optional[str] = None
    voice_ext: Optional[str] = None
    fax: Optional[str] = None
    fax_ext: Optional[str] = None
    auth_info: Optional[str] = None
    disclose: Optional[Dict[str, bool]] = None

    object_type = ObjectType.CONTACT
    verb = "create"

    def __post_init__(self):
        if self.auth_info is None:
            self.auth_info = generate_auth_info()
        if self.disclose and len(set(map(bool, self.disclose.values()))) > 1:
            raise EPPInvalidOperationError("Disclose fields must all be shown or all be hidden")

    def build(self, parent: etree._Element) -> etree._Element:
        create = sub(parent, NAMESPACE, "create")
        sub(create, NAMESPACE, "id", self.id)
        self.postal_info.build(create)
        _sub_phone(create, "voice", self.voice, self.voice_ext)
        _sub_phone(create, "fax", self.fax, self.fax_ext)
        sub(create, NAMESPACE, "email", self.email)
        sub_auth_info(create, NAMESPACE, self.auth_info)

        if self.disclose:
            flag = any(self.disclose.values())
            disclose = sub(create, NAMESPACE, "disclose", flag="1" if flag else "0")
            for name in self.disclose:
                sub(disclose, NAMESPACE, name)

        return create


@dataclass
class Delete:
    """contact:delete payload."""
    id: str

    object_type = ObjectType.CONTACT
    verb = "delete"

    def build(self, parent: etree._Element) -> etree._Element:
        delete = sub(parent, NAMESPACE, "delete")
        sub(delete, NAMESPACE, "id", self.id)
        return delete


@dataclass
class Transfer:
    """contact:transfer payload; the operation is given to the client call."""
    id: str
    auth_info: Optional[str] = None

    object_type = ObjectType.CONTACT
    verb = "transfer"

    def build(self, parent: etree._Element) -> etree._Element:
        transfer = sub(parent, NAMESPACE, "transfer")
        sub(transfer, NAMESPACE, "id", self.id)
        sub_auth_info(transfer, NAMESPACE, self.auth_info)
        return transfer


@dataclass
class Update:
    """contact:update payload."""
    id: str
    add_status: List[str] = field(default_factory=list)
    rem_status: List[str] = field(default_factory=list)
    new_postal_info: Optional[PostalInfo] = None
    new_voice: Optional[str] = None
    new_fax: Optional[str] = None
    new_email: Optional[str] = None
    new_auth_info: Optional[str] = None

    object_type = ObjectType.CONTACT
    verb = "update"

    def build(self, parent: etree._Element) -> etree._Element:
        update = sub(parent, NAMESPACE, "update")
        sub(update, NAMESPACE, "id", self.id)

        for tag, statuses in (("add", self.add_status), ("rem", self.rem_status)):
            if statuses:
                section = sub(update, NAMESPACE, tag)
                for status in statuses:
                    sub_status(section, NAMESPACE, status)

        changes = (self.new_postal_info, self.new_voice, self.new_fax, self.new_email, self.new_auth_info)
        if any(changes):
            chg = sub(update, NAMESPACE, "chg")
            if self.new_postal_info:
                self.new_postal_info.build(chg)
            _sub_phone(chg, "voice", self.new_voice, None)
            _sub_phone(chg, "fax", self.new_fax, None)
            if self.new_email:
                sub(chg, NAMESPACE, "email", self.new_email)
            sub_auth_info(chg, NAMESPACE, self.new_auth_info)

        return update


# =============================================================================
# Typed responses
# =============================================================================

@dataclass
class PostalInfoData:
    """Postal information returned by contact:info."""
    type: str
    name: Optional[str] = None
    org: Optional[str] = None
    street: List[str] = field(default_factory=list)
    city: Optional[str] = None
    sp: Optional[str] = None
    pc: Optional[str] = None
    cc: Optional[str] = None


class CheckResponse(BaseCheckResponse):
    namespace = NAMESPACE
    key_tag = "id"


class CreateResponse(ObjectResponse):
    namespace = NAMESPACE
    data_tag = "creData"

    @property
    def id(self) -> Optional[str]:
        return self._text("id")

    @property
    def cr_date(self) -> Optional[datetime]:
        return self._date("crDate")


class DeleteResponse(ObjectResponse):
    namespace = NAMESPACE


class InfoResponse(BaseInfoResponse):
    namespace = NAMESPACE

    @property
    def id(self) -> Optional[str]:
        return self._text("id")

    @property
    def postal_info(self) -> List[PostalInfoData]:
        def text(elem, path):
            found = elem.find(path)
            return found.text if found is not None else None

        q = self._q
        infos = []
        for pi in self._findall("postalInfo"):
            addr_path = q("addr") + "/"
            infos.append(PostalInfoData(
                type=pi.get("type", "int"),
                name=text(pi, q("name")),
                org=text(pi, q("org")),
                street=[s.text for s in pi.findall(addr_path + q("street")) if s.text],
                city=text(pi, addr_path + q("city")),
                sp=text(pi, addr_path + q("sp")),
                pc=text(pi, addr_path + q("pc")),
                cc=text(pi, addr_path + q("cc")),
            ))
        return infos

    @property
    def voice(self) -> Optional[str]:
        return self._text("voice")

    @property
    def fax(self) -> Optional[str]:
        return self._text("fax")

    @property
    def email(self) -> Optional[str]:
        return self._text("email")


class RenewResponse(ObjectResponse):
    # Contacts are not renewed in RFC 5733; kept so every verb has a wrapper.
    namespace = NAMESPACE


class TransferResponse(BaseTransferResponse):
    namespace = NAMESPACE

    @property
    def id(self) -> Optional[str]:
        return self._text("id")


class UpdateResponse(ObjectResponse):
    namespace = NAMESPACE
