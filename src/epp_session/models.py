"""
EPP Session Models

Data classes for greetings and raw (untyped) EPP responses.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional


@dataclass
class Greeting:
    """EPP server greeting."""
    server_id: str
    server_date: Optional[datetime] = None
    version: List[str] = field(default_factory=list)
    lang: List[str] = field(default_factory=list)
    obj_uris: List[str] = field(default_factory=list)
    ext_uris: List[str] = field(default_factory=list)
    raw_xml: Optional[bytes] = field(default=None, repr=False)


@dataclass
class Result:
    """One <result> of a response. Error responses may carry several."""
    code: int
    message: str
    reason: Optional[str] = None  # text of <extValue><reason>


@dataclass
class PollMessage:
    """Message queue entry returned by poll."""
    id: str
    count: int
    qdate: Optional[datetime] = None
    message: str = ""


@dataclass
class Response:
    """
    Raw EPP response.

    Typed responses for a given object type and verb wrap one of these;
    it is never modified after parsing.
    """
    code: int
    message: str
    results: List[Result] = field(default_factory=list)
    cl_trid: Optional[str] = None
    sv_trid: Optional[str] = None
    res_data: Any = field(default=None, repr=False)  # <resData> element
    extension: Any = field(default=None, repr=False)  # <extension> element
    msg_queue: Optional[PollMessage] = None
    raw_xml: Optional[bytes] = field(default=None, repr=False)

    @property
    def success(self) -> bool:
        """Check if response indicates success."""
        return 1000 <= self.code < 2000

    @property
    def reason(self) -> Optional[str]:
        """First server-supplied reason, if any."""
        for result in self.results:
            if result.reason:
                return result.reason
        return None

    def __str__(self):
        return self.raw_xml.decode("utf-8", errors="replace") if self.raw_xml else f"{self.code} {self.message}"
