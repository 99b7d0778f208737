"""
EPP Client

Front-facing EPP client. Every command runs inside a connection scope and a
login scope, so callers never manage sockets or login/logout themselves.
"""

import logging
import warnings
from contextlib import contextmanager
from typing import Callable, Optional

from epp_session import commands
from epp_session.commands import Command
from epp_session.config import SessionConfig
from epp_session.exceptions import (
    EPPConfigurationError,
    EPPInvalidOperationError,
    EPPUnsupportedTypeError,
)
from epp_session.models import Greeting, Response
from epp_session.objects import resolve_type
from epp_session.server import BaseServer, LegacyServer, Server

logger = logging.getLogger("epp.client")


class EPPClient:
    """
    EPP client for domain registry operations.

    Provides one method per EPP verb. Payloads carry their object type:

        from epp_session.objects import domain

        client = EPPClient("registrar1", "password123", "epp.registry.example")

        result = client.check(domain.Check(["example.test", "other.test"]))
        print(result.is_available("example.test"))

        client.transfer("query", domain.Transfer("example.test"))

    Each call connects, logs in, sends the command, logs out and
    disconnects. To share one session between calls:

        with client.session():
            client.check(domain.Check("example.test"))
            client.info(domain.Info("example.test"))
    """

    def __init__(
        self,
        tag: str,
        password: str,
        host: str,
        transport_factory: Callable = None,
        **options,
    ):
        """
        Initialize EPP client.

        Args:
            tag: EPP tag (registrar client ID)
            password: EPP tag password
            host: EPP server hostname
            transport_factory: Optional transport factory, see BaseServer
            **options: SessionConfig options:
                port (700), ssl_context, compatibility (False), lang ("en"),
                version ("1.0"), extensions, services (DEFAULT_SERVICES),
                address_family ("AF_INET"/"AF_INET6", default all),
                timeout, cert_file, key_file, ca_file, verify_server, use_tls

        Raises:
            EPPConfigurationError: If tag or host is empty or an option is invalid
        """
        try:
            self.config = SessionConfig(tag=tag, password=password, host=host, **options)
        except TypeError as e:
            raise EPPConfigurationError(f"Invalid option: {e}") from None

        server_class = LegacyServer if self.config.compatibility else Server
        self._conn: BaseServer = server_class(self.config, transport_factory)
        self._sessions = []

    @property
    def tag(self) -> str:
        return self.config.tag

    @property
    def host(self) -> str:
        return self.config.host

    @property
    def compatibility(self) -> bool:
        """True if the legacy protocol variant is in use."""
        return isinstance(self._conn, LegacyServer)

    # =========================================================================
    # Session state
    # =========================================================================

    @property
    def last_request(self) -> Optional[bytes]:
        """XML of the last request sent to the EPP server."""
        return self._conn.last_request

    @property
    def last_response(self) -> Optional[Response]:
        """Last response received from the EPP server."""
        return self._conn.last_response

    @property
    def last_error(self):
        """Last error received from a login or logout request."""
        return self._conn.last_error

    @property
    def greeting(self) -> Optional[Greeting]:
        return self._conn.greeting

    def _last_request(self) -> Optional[bytes]:
        warnings.warn(
            f"{type(self).__name__}._last_request() is deprecated, use the last_request property",
            DeprecationWarning,
            stacklevel=2,
        )
        return self.last_request

    def _last_response(self) -> Optional[Response]:
        warnings.warn(
            f"{type(self).__name__}._last_response() is deprecated, use the last_response property",
            DeprecationWarning,
            stacklevel=2,
        )
        return self.last_response

    def _last_error(self):
        warnings.warn(
            f"{type(self).__name__}._last_error() is deprecated, use the last_error property",
            DeprecationWarning,
            stacklevel=2,
        )
        return self.last_error

    # =========================================================================
    # Session scope
    # =========================================================================

    @contextmanager
    def connection(self):
        """
        Keep one connection open, e.g. to say hello before a command.

        Each command inside still logs in and out, and servers end the
        connection at logout, so use session() for several commands.
        """
        with self._conn.connection():
            yield self

    @contextmanager
    def session(self):
        """Keep one connection and login open for every command in the block."""
        with self._conn.connection():
            with self._conn.with_login():
                yield self

    def __enter__(self):
        # one session per nesting level, inner ones reuse the open scopes
        session = self.session()
        result = session.__enter__()
        self._sessions.append(session)
        return result

    def __exit__(self, exc_type, exc_val, exc_tb):
        return self._sessions.pop().__exit__(exc_type, exc_val, exc_tb)

    # =========================================================================
    # Commands
    # =========================================================================

    def hello(self) -> Greeting:
        """Send hello and return the server greeting."""
        with self._conn.connection():
            return self._conn.hello()

    def check(self, payload, extension=None):
        return self._object_command("check", payload, extension)

    def create(self, payload, extension=None):
        return self._object_command("create", payload, extension)

    def delete(self, payload, extension=None):
        return self._object_command("delete", payload, extension)

    def info(self, payload, extension=None):
        return self._object_command("info", payload, extension)

    def renew(self, payload, extension=None):
        return self._object_command("renew", payload, extension)

    def transfer(self, op: str, payload, extension=None):
        """
        Transfer command.

        Args:
            op: request, query, cancel, approve or reject
            payload: Object transfer payload
            extension: Optional extension payload

        Raises:
            EPPInvalidOperationError: If op is not a transfer operation
            EPPUnsupportedTypeError: If the payload's object type is unknown
        """
        return self._object_command("transfer", payload, extension, op)

    def update(self, payload, extension=None):
        return self._object_command("update", payload, extension)

    def poll(self) -> Response:
        """Request the next queued message. Returns the raw response."""
        return self.command(commands.Poll())

    def ack(self, msg_id: str) -> Response:
        """
        Acknowledge a queued message. Returns the raw response.

        Raises:
            EPPInvalidOperationError: If msg_id is empty
        """
        if msg_id is None:
            raise EPPInvalidOperationError("Message ID to acknowledge must not be empty")
        return self.command(commands.Poll(msg_id))

    def _object_command(self, verb: str, payload, extension, *args):
        # resolve and build before any I/O so bad input never opens a socket
        module = resolve_type(payload)
        if module is None:
            raise EPPUnsupportedTypeError(getattr(payload, "object_type", payload))

        cmd = commands.build_command(verb, *args, payload)
        logger.debug(f"{verb} {module.__name__.rsplit('.', 1)[-1]}")
        response = self.command(cmd, extension)
        return commands.wrap_response(verb, module, response)

    def command(self, cmd: Command, extension=None) -> Response:
        """
        Run a command inside connection and login scopes.

        Reuses scopes already open on this call stack; otherwise opens them
        and closes them on every exit path.
        """
        with self._conn.connection():
            with self._conn.with_login():
                return self._conn.request(cmd, extension)
