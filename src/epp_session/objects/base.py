"""
Object Response Base

Shared helpers for object payloads and typed responses.
"""

import logging
import secrets
import string
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Union

from dateutil.parser import isoparse
from lxml import etree

from epp_session.models import Response

logger = logging.getLogger("epp.objects")


def parse_datetime(text: Optional[str]) -> Optional[datetime]:
    """Parse an EPP dateTime, None if missing or malformed."""
    if not text:
        return None
    try:
        return isoparse(text.strip())
    except ValueError:
        logger.debug(f"Unparseable date: {text!r}")
        return None


def sub(parent: etree._Element, namespace: str, tag: str, text=None, **attrs) -> etree._Element:
    """Append a namespaced child, skipping None attributes."""
    elem = etree.SubElement(parent, "{%s}%s" % (namespace, tag))
    if text is not None:
        elem.text = str(text)
    for key, value in attrs.items():
        if value is not None:
            elem.set(key, str(value))
    return elem


def sub_auth_info(parent: etree._Element, namespace: str, password: Optional[str]) -> None:
    """Append <authInfo><pw/></authInfo> when a password is given."""
    if password is None:
        return
    auth = sub(parent, namespace, "authInfo")
    sub(auth, namespace, "pw", password)


def generate_auth_info(length: int = 16) -> str:
    """Generate random auth info password."""
    chars = string.ascii_letters + string.digits + "!@#$%"
    return "".join(secrets.choice(chars) for _ in range(length))


@dataclass
class StatusValue:
    """Status with optional reason text, e.g. clientHold "Payment pending"."""
    status: str
    reason: Optional[str] = None
    lang: str = "en"


def sub_status(parent: etree._Element, namespace: str, status: Union[str, StatusValue]) -> None:
    """Append <status s="..."/>, with reason text when given."""
    if isinstance(status, StatusValue):
        elem = sub(parent, namespace, "status", status.reason, s=status.status)
        if status.reason:
            elem.set("lang", status.lang)
    else:
        sub(parent, namespace, "status", s=status)


@dataclass
class CheckItem:
    """Single check result."""
    name: str
    available: bool
    reason: Optional[str] = None


class ObjectResponse:
    """
    Typed view over one raw Response.

    Subclasses set ``namespace`` and ``data_tag`` (the <resData> child such as
    ``chkData``). Accessors return None or empty values when the server sent
    no data, for example on an error result.
    """

    namespace: str = None
    data_tag: Optional[str] = None

    def __init__(self, response: Response):
        self.response = response
        self._data = None
        if self.data_tag and response.res_data is not None:
            self._data = response.res_data.find(self._q(self.data_tag))

    def _q(self, tag: str) -> str:
        return "{%s}%s" % (self.namespace, tag)

    def _find(self, tag: str):
        if self._data is None:
            return None
        return self._data.find(self._q(tag))

    def _findall(self, tag: str) -> list:
        if self._data is None:
            return []
        return self._data.findall(self._q(tag))

    def _text(self, tag: str, default: str = None) -> Optional[str]:
        elem = self._find(tag)
        if elem is not None and elem.text:
            return elem.text.strip()
        return default

    def _date(self, tag: str) -> Optional[datetime]:
        return parse_datetime(self._text(tag))

    @property
    def code(self) -> int:
        return self.response.code

    @property
    def message(self) -> str:
        return self.response.message

    @property
    def success(self) -> bool:
        return self.response.success

    def __repr__(self):
        return f"<{self.__module__}.{type(self).__name__} code={self.code}>"


class BaseCheckResponse(ObjectResponse):
    """<chkData> with one <cd> per checked object."""

    data_tag = "chkData"
    key_tag = "name"

    @property
    def results(self) -> List[CheckItem]:
        items = []
        for cd in self._findall("cd"):
            key = cd.find(self._q(self.key_tag))
            if key is None:
                continue
            reason = cd.find(self._q("reason"))
            items.append(CheckItem(
                name=(key.text or "").strip(),
                available=key.get("avail", "0") in ("1", "true"),
                reason=reason.text if reason is not None else None,
            ))
        return items

    @property
    def available(self) -> bool:
        """Availability of the first checked object."""
        results = self.results
        return bool(results) and results[0].available

    def is_available(self, name: str) -> bool:
        """Availability of a specific object, False if it was not checked."""
        for item in self.results:
            if item.name.lower() == name.lower():
                return item.available
        return False


class BaseTransferResponse(ObjectResponse):
    """<trnData> common to domain and contact transfers."""

    data_tag = "trnData"

    @property
    def tr_status(self) -> Optional[str]:
        return self._text("trStatus")

    @property
    def re_id(self) -> Optional[str]:
        """Requesting client."""
        return self._text("reID")

    @property
    def re_date(self) -> Optional[datetime]:
        return self._date("reDate")

    @property
    def ac_id(self) -> Optional[str]:
        """Client expected to act on the request."""
        return self._text("acID")

    @property
    def ac_date(self) -> Optional[datetime]:
        return self._date("acDate")


class BaseInfoResponse(ObjectResponse):
    """<infData> fields shared by every object type."""

    data_tag = "infData"

    @property
    def roid(self) -> Optional[str]:
        return self._text("roid")

    @property
    def status(self) -> List[str]:
        return [s.get("s", "") for s in self._findall("status")]

    @property
    def cl_id(self) -> Optional[str]:
        """Sponsoring client."""
        return self._text("clID")

    @property
    def cr_id(self) -> Optional[str]:
        return self._text("crID")

    @property
    def cr_date(self) -> Optional[datetime]:
        return self._date("crDate")

    @property
    def up_id(self) -> Optional[str]:
        return self._text("upID")

    @property
    def up_date(self) -> Optional[datetime]:
        return self._date("upDate")

    @property
    def tr_date(self) -> Optional[datetime]:
        return self._date("trDate")

    @property
    def auth_info(self) -> Optional[str]:
        auth = self._find("authInfo")
        if auth is None:
            return None
        pw = auth.find(self._q("pw"))
        return pw.text if pw is not None else None
