"""
Shared fixtures: an in-memory EPP server behind a fake transport.

The fake transport frames traffic with the reader/writer classes it is given,
so both protocol variants are exercised end to end without sockets.
"""

from typing import Dict, List, Optional

import pytest
from lxml import etree

from epp_session.exceptions import EPPConnectionError
from epp_session.framing import TerminatedFrameReader, encode_frame

EPP_NS = "urn:ietf:params:xml:ns:epp-1.0"
DOMAIN_NS = "urn:ietf:params:xml:ns:domain-1.0"
CONTACT_NS = "urn:ietf:params:xml:ns:contact-1.0"
HOST_NS = "urn:ietf:params:xml:ns:host-1.0"

GREETING = b'''<?xml version="1.0" encoding="UTF-8"?>
<epp xmlns="urn:ietf:params:xml:ns:epp-1.0">
  <greeting>
    <svID>Example EPP server epp.registry.example</svID>
    <svDate>2026-10-19T22:00:00.0Z</svDate>
    <svcMenu>
      <version>1.0</version>
      <lang>en</lang>
      <objURI>urn:ietf:params:xml:ns:domain-1.0</objURI>
      <objURI>urn:ietf:params:xml:ns:contact-1.0</objURI>
      <objURI>urn:ietf:params:xml:ns:host-1.0</objURI>
      <svcExtension>
        <extURI>urn:ietf:params:xml:ns:secDNS-1.1</extURI>
      </svcExtension>
    </svcMenu>
  </greeting>
</epp>'''


def response_xml(
    code: int = 1000,
    msg: str = "Command completed successfully",
    cl_trid: Optional[str] = None,
    res_data: str = "",
    reason: Optional[str] = None,
    msg_q: str = "",
) -> bytes:
    """Render an EPP <response> document."""
    ext_value = ""
    if reason:
        ext_value = f"<extValue><value><reason/></value><reason>{reason}</reason></extValue>"
    tr_id = "<trID>"
    if cl_trid:
        tr_id += f"<clTRID>{cl_trid}</clTRID>"
    tr_id += "<svTRID>SV-54321</svTRID></trID>"
    if res_data:
        res_data = f"<resData>{res_data}</resData>"
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<epp xmlns="{EPP_NS}"><response>'
        f'<result code="{code}"><msg>{msg}</msg>{ext_value}</result>'
        f"{msg_q}{res_data}{tr_id}"
        "</response></epp>"
    ).encode("utf-8")


class FakeTransport:
    """Transport double bound to a FakeRegistry."""

    def __init__(self, registry, config, reader_class, writer_class):
        self.registry = registry
        self.config = config
        self.reader_class = reader_class
        self.writer_class = writer_class

        self.connected = False
        self.closed = False
        self.wire = bytearray()  # bytes written, framing included
        self.sent: List[bytes] = []
        self.replies: List[tuple] = []  # (kind, reply bytes)
        self._incoming = bytearray()
        self._reader = reader_class(self._read)
        self._writer = writer_class(self._write)

    def _read(self, size: int) -> bytes:
        chunk = bytes(self._incoming[:size])
        del self._incoming[:size]
        return chunk

    def _write(self, data: bytes) -> int:
        self.wire += data
        return len(data)

    def _queue(self, kind: str, reply: bytes) -> None:
        self.replies.append((kind, reply))
        if self.reader_class is TerminatedFrameReader:
            self._incoming += reply
        else:
            self._incoming += encode_frame(reply)

    @property
    def is_connected(self) -> bool:
        return self.connected

    def connect(self) -> None:
        if self.registry.refuse_connections:
            raise EPPConnectionError(f"Failed to connect to host {self.config.host}:{self.config.port}")
        self.connected = True
        self._queue("greeting", self.registry.greeting)

    def disconnect(self) -> None:
        self.connected = False
        self.closed = True

    def send(self, data: bytes) -> None:
        if not self.connected:
            raise EPPConnectionError("Not connected")
        self._writer.write_frame(data)
        self.sent.append(data)
        kind, reply = self.registry.reply_to(data)
        self._queue(kind, reply)

    def receive(self) -> bytes:
        if not self.connected:
            raise EPPConnectionError("Not connected")
        return self._reader.read_frame()


class FakeRegistry:
    """
    Scripted EPP server.

    Login and logout answer with ``login_code`` and ``logout_code``; business
    commands answer with whatever was set through ``reply()`` for their verb,
    or a plain 1000. Replies echo the request clTRID unless ``cl_trid_override``
    is set.
    """

    def __init__(self):
        self.greeting = GREETING
        self.login_code = 1000
        self.logout_code = 1500
        self.login_reason: Optional[str] = None
        self.cl_trid_override: Optional[str] = None
        self.refuse_connections = False
        self.transports: List[FakeTransport] = []
        self._replies: Dict[str, dict] = {}

    def __call__(self, config, reader_class, writer_class) -> FakeTransport:
        transport = FakeTransport(self, config, reader_class, writer_class)
        self.transports.append(transport)
        return transport

    def reply(self, verb: str, **kwargs) -> None:
        """Script the reply to a business verb, see response_xml for kwargs."""
        self._replies[verb] = kwargs

    def reply_to(self, data: bytes):
        root = etree.fromstring(data)
        if root.find(f"{{{EPP_NS}}}hello") is not None:
            return "greeting", self.greeting

        command = root.find(f"{{{EPP_NS}}}command")
        cl_trid = command.findtext(f"{{{EPP_NS}}}clTRID")
        if self.cl_trid_override:
            cl_trid = self.cl_trid_override
        verb = etree.QName(command[0]).localname

        if verb == "login":
            if self.login_code >= 2000:
                return verb, response_xml(
                    self.login_code, "Authentication error", cl_trid, reason=self.login_reason
                )
            return verb, response_xml(self.login_code, cl_trid=cl_trid)
        if verb == "logout":
            msg = "Command completed successfully; ending session"
            if self.logout_code >= 2000:
                msg = "Command failed"
            return verb, response_xml(self.logout_code, msg, cl_trid)

        return verb, response_xml(cl_trid=cl_trid, **self._replies.get(verb, {}))

    # Inspection helpers

    @property
    def sent(self) -> List[bytes]:
        return [data for transport in self.transports for data in transport.sent]

    def sent_verbs(self) -> List[str]:
        """Command verbs in the order they were sent, 'hello' for hellos."""
        verbs = []
        for data in self.sent:
            root = etree.fromstring(data)
            command = root.find(f"{{{EPP_NS}}}command")
            if command is None:
                verbs.append("hello")
            else:
                verbs.append(etree.QName(command[0]).localname)
        return verbs

    def last_reply(self, kind: str) -> bytes:
        for transport in reversed(self.transports):
            for reply_kind, reply in reversed(transport.replies):
                if reply_kind == kind:
                    return reply
        raise LookupError(kind)


@pytest.fixture
def registry():
    return FakeRegistry()


@pytest.fixture
def client(registry):
    from epp_session import EPPClient

    return EPPClient("registrar1", "secret", "epp.registry.example", transport_factory=registry)


@pytest.fixture
def legacy_client(registry):
    from epp_session import EPPClient

    return EPPClient(
        "registrar1", "secret", "epp.registry.example",
        transport_factory=registry, compatibility=True,
    )
