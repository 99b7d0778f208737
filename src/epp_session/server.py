"""
EPP Server Connections

Session handling against an EPP server: connection scope, login scope and
request/response exchange. Two protocol variants share this behavior and
differ only on the wire:

- Server: RFC 5734 length-prefixed frames.
- LegacyServer: ``</epp>``-terminated frames and schemaLocation hints,
  for servers that predate RFC 5730/5734.
"""

import logging
import secrets
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Callable, Optional

from epp_session.commands import Command
from epp_session.config import SessionConfig
from epp_session.exceptions import (
    EPPConnectionError,
    EPPError,
    EPPLoginError,
    EPPLogoutError,
    EPPProtocolError,
    EPPSessionError,
)
from epp_session.framing import (
    FrameReader,
    FrameWriter,
    TerminatedFrameReader,
    TerminatedFrameWriter,
)
from epp_session.models import Greeting, Response
from epp_session.transport import EPPTransport
from epp_session.xml_builder import XMLBuilder
from epp_session.xml_parser import XMLParser

logger = logging.getLogger("epp.server")

# RFC 5730 allows clTRID values of 3 to 64 characters
MAX_CL_TRID_LENGTH = 64


class BaseServer(ABC):
    """
    One EPP session against a server.

    Holds the only mutable session state: transport handle, login flag,
    scope depths, and the last request/response/error/greeting seen.
    ``connection()`` and ``with_login()`` are nestable on one call stack;
    only the outermost scope opens and closes. Not safe for concurrent use.
    """

    schema_location = False

    def __init__(self, config: SessionConfig, transport_factory: Callable = None):
        """
        Initialize server session.

        Args:
            config: Session configuration
            transport_factory: Called as ``factory(config, reader_class, writer_class)``
                to create a transport for each connection scope. Defaults to EPPTransport.
        """
        self.config = config
        self.transport_factory = transport_factory or EPPTransport

        self._transport = None
        self._connection_depth = 0
        self._login_depth = 0
        self._logged_in = False

        self._session_id = secrets.token_hex(4).upper()
        self._cl_trid_counter = 0

        self._last_request: Optional[bytes] = None
        self._last_response: Optional[Response] = None
        self._last_error: Optional[EPPSessionError] = None
        self._greeting: Optional[Greeting] = None

    @abstractmethod
    def _create_transport(self):
        """Create an unconnected transport framed for this protocol variant."""

    # =========================================================================
    # State accessors
    # =========================================================================

    @property
    def last_request(self) -> Optional[bytes]:
        """XML of the last business request sent."""
        return self._last_request

    @property
    def last_response(self) -> Optional[Response]:
        """Raw response to the last business request."""
        return self._last_response

    @property
    def last_error(self) -> Optional[EPPSessionError]:
        """Error from the last failed login or logout."""
        return self._last_error

    @property
    def greeting(self) -> Optional[Greeting]:
        return self._greeting

    @property
    def is_connected(self) -> bool:
        return self._transport is not None and self._transport.is_connected

    @property
    def is_logged_in(self) -> bool:
        return self._logged_in

    # =========================================================================
    # Scopes
    # =========================================================================

    @contextmanager
    def connection(self):
        """
        Connection scope.

        Opens the transport and reads the server greeting, then closes the
        transport on every exit path. Inside an open scope this is a no-op.

        Raises:
            EPPConnectionError: If the server cannot be reached
            EPPProtocolError: If the greeting is malformed
        """
        if self._connection_depth:
            self._connection_depth += 1
            try:
                yield self
            finally:
                self._connection_depth -= 1
            return

        transport = self._create_transport()
        transport.connect()
        self._transport = transport
        self._connection_depth = 1
        try:
            self._greeting = XMLParser.parse_greeting(self._transport.receive())
            logger.info(f"Connected to {self._greeting.server_id or self.config.host}")
            yield self
        finally:
            self._close()

    @contextmanager
    def with_login(self):
        """
        Login scope.

        Logs in unless already logged in within this connection, and logs out
        when the outermost scope exits. A rejected login is recorded in
        ``last_error`` and raised without attempting logout.

        Raises:
            EPPLoginError: If the server rejects the login
            EPPLogoutError: If the server rejects the logout after a clean exit
        """
        if self._login_depth:
            self._login_depth += 1
            try:
                yield self
            finally:
                self._login_depth -= 1
            return

        self._login()
        self._login_depth = 1
        try:
            yield self
        except BaseException:
            self._login_depth = 0
            self._logout(propagate=False)
            raise
        self._login_depth = 0
        self._logout()

    def _close(self) -> None:
        transport, self._transport = self._transport, None
        self._connection_depth = 0
        self._login_depth = 0
        self._logged_in = False
        if transport is not None:
            transport.disconnect()

    # =========================================================================
    # Exchanges
    # =========================================================================

    def _next_cl_trid(self) -> str:
        self._cl_trid_counter += 1
        cl_trid = f"{self.config.tag}-{self._session_id}-{self._cl_trid_counter:06d}"
        return cl_trid[-MAX_CL_TRID_LENGTH:]

    def _require_connection(self) -> None:
        if not self.is_connected:
            raise EPPConnectionError("Not connected")

    def _exchange(self, xml: bytes, cl_trid: str) -> Response:
        """Send one command and parse the reply, checking its clTRID."""
        self._require_connection()
        self._transport.send(xml)
        response = XMLParser.parse_response(self._transport.receive())

        if response.cl_trid is not None and response.cl_trid != cl_trid:
            raise EPPProtocolError(
                f"Response clTRID {response.cl_trid!r} does not match request {cl_trid!r}"
            )
        return response

    def _login(self) -> None:
        cl_trid = self._next_cl_trid()
        xml = XMLBuilder.build_login(
            client_id=self.config.tag,
            password=self.config.password,
            version=self.config.version,
            lang=self.config.lang,
            obj_uris=self.config.services,
            ext_uris=self.config.extensions,
            cl_trid=cl_trid,
            schema_location=self.schema_location,
        )
        response = self._exchange(xml, cl_trid)

        if not response.success:
            self._last_error = EPPLoginError(response.message, response.code, response.reason, response)
            logger.warning(f"Login as {self.config.tag} failed: {self._last_error}")
            raise self._last_error

        self._logged_in = True
        logger.info(f"Logged in as {self.config.tag}")

    def _logout(self, propagate: bool = True) -> None:
        """
        Log out. With propagate=False, failures are logged because another
        exception is already on its way to the caller.
        """
        try:
            cl_trid = self._next_cl_trid()
            response = self._exchange(XMLBuilder.build_logout(cl_trid, self.schema_location), cl_trid)
            if not response.success:
                self._last_error = EPPLogoutError(response.message, response.code, response.reason, response)
                raise self._last_error
        except EPPError as e:
            if propagate:
                raise
            logger.warning(f"Logout failed: {e}")
        else:
            logger.info("Logged out")
        finally:
            self._logged_in = False

    def hello(self) -> Greeting:
        """
        Send hello and store the greeting. Works with or without login.

        Raises:
            EPPConnectionError: If not connected or the exchange fails
        """
        self._require_connection()
        self._transport.send(XMLBuilder.build_hello(self.schema_location))
        self._greeting = XMLParser.parse_greeting(self._transport.receive())
        return self._greeting

    def request(self, cmd: Command, extension=None) -> Response:
        """
        Send a business command and return the raw response.

        Records the request and its response as ``last_request`` and
        ``last_response``. Transport failures are not retried.

        Raises:
            EPPConnectionError: If not connected or on I/O failure
            EPPSessionError: If not logged in
            EPPProtocolError: If the reply cannot be parsed or correlated
        """
        self._require_connection()
        if not self._logged_in:
            raise EPPSessionError("Command use error: not logged in")

        cl_trid = self._next_cl_trid()
        xml = XMLBuilder.build_command(cmd, extension, cl_trid, self.schema_location)
        self._last_request = xml
        self._last_response = None

        logger.debug(f"Sending {cmd!r} ({cl_trid})")
        response = self._exchange(xml, cl_trid)
        self._last_response = response
        return response


class Server(BaseServer):
    """Current protocol variant (RFC 5734 framing)."""

    def _create_transport(self):
        return self.transport_factory(self.config, FrameReader, FrameWriter)


class LegacyServer(BaseServer):
    """Legacy protocol variant for servers without RFC 5734 framing."""

    schema_location = True

    def _create_transport(self):
        return self.transport_factory(self.config, TerminatedFrameReader, TerminatedFrameWriter)
