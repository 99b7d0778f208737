"""
EPP Transport

TCP/TLS stream to an EPP server, with pluggable framing.
"""

import logging
import socket
import ssl
from typing import List, Optional, Type

from epp_session.config import SessionConfig
from epp_session.exceptions import EPPConnectionError, EPPFrameError
from epp_session.framing import FrameReader, FrameWriter

logger = logging.getLogger("epp.transport")


class EPPTransport:
    """
    Stream connection to an EPP server.

    Handles:
    - Address resolution limited to the configured address family
    - TLS 1.2+ with optional client certificate
    - Frame-based I/O using the reader/writer classes of the protocol variant
    """

    def __init__(
        self,
        config: SessionConfig,
        reader_class: Type = FrameReader,
        writer_class: Type = FrameWriter,
    ):
        """
        Initialize transport.

        Args:
            config: Session configuration
            reader_class: Frame reader class, built around the socket's recv
            writer_class: Frame writer class, built around the socket's send
        """
        self.config = config
        self.host = config.host
        self.port = config.port
        self.reader_class = reader_class
        self.writer_class = writer_class

        self._socket: Optional[socket.socket] = None
        self._frame_reader = None
        self._frame_writer = None

    @property
    def is_connected(self) -> bool:
        """Check if connected to server."""
        return self._socket is not None

    def connect(self) -> None:
        """
        Connect to the first reachable address of the server.

        Raises:
            EPPConnectionError: If no address accepts the connection
        """
        if self.is_connected:
            raise EPPConnectionError("Already connected")

        errors: List[Exception] = []
        for family, socktype, proto, _, address in self._resolve():
            try:
                self._socket = self._open(family, socktype, proto, address)
            except (OSError, ssl.SSLError) as e:
                logger.debug(f"Connection to {address[0]}:{address[1]} failed: {e}")
                errors.append(e)
                continue

            self._frame_reader = self.reader_class(self._socket.recv)
            self._frame_writer = self.writer_class(self._socket.send)
            logger.info(f"Connected to {self.host}:{self.port} ({address[0]})")
            return

        raise EPPConnectionError(f"Failed to connect to host {self.host}:{self.port}", errors)

    def _resolve(self):
        try:
            return socket.getaddrinfo(
                self.host,
                self.port,
                self.config.address_family or socket.AF_UNSPEC,
                socket.SOCK_STREAM,
            )
        except socket.gaierror as e:
            raise EPPConnectionError(f"Cannot resolve {self.host}: {e}", [e])

    def _open(self, family, socktype, proto, address) -> socket.socket:
        sock = socket.socket(family, socktype, proto)
        sock.settimeout(self.config.timeout)
        try:
            sock.connect(address)
            if not self.config.use_tls:
                return sock

            context = self.config.ssl_context or self._create_ssl_context()
            tls_sock = context.wrap_socket(sock, server_hostname=self.host)
            cipher = tls_sock.cipher()
            if cipher:
                logger.debug(f"TLS cipher: {cipher[0]}, version: {cipher[1]}")
            return tls_sock
        except BaseException:
            sock.close()
            raise

    def _create_ssl_context(self) -> ssl.SSLContext:
        """Build a TLS 1.2+ client context from the certificate options."""
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
        context.minimum_version = ssl.TLSVersion.TLSv1_2

        if self.config.verify_server:
            context.verify_mode = ssl.CERT_REQUIRED
            context.check_hostname = True
        else:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE

        if self.config.ca_file:
            context.load_verify_locations(self.config.ca_file)
        else:
            context.load_default_certs()

        if self.config.cert_file:
            # key may live in the certificate file
            context.load_cert_chain(
                certfile=self.config.cert_file,
                keyfile=self.config.key_file,
            )

        return context

    def disconnect(self) -> None:
        """Close connection to EPP server."""
        if not self.is_connected:
            return

        sock, self._socket = self._socket, None
        self._frame_reader = None
        self._frame_writer = None
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        sock.close()
        logger.info(f"Disconnected from {self.host}:{self.port}")

    def send(self, data: bytes) -> None:
        """
        Send one EPP message.

        Raises:
            EPPConnectionError: If not connected or the write fails
            EPPFrameError: If the message cannot be framed
        """
        if not self.is_connected:
            raise EPPConnectionError("Not connected")

        try:
            self._frame_writer.write_frame(data)
        except EPPFrameError:
            raise
        except OSError as e:
            raise EPPConnectionError(f"Send failed: {e}", [e])
        logger.debug(f"Sent {len(data)} bytes")

    def receive(self) -> bytes:
        """
        Receive one EPP message.

        Raises:
            EPPConnectionError: If not connected, on timeout or read failure
            EPPFrameError: If the received frame is malformed
        """
        if not self.is_connected:
            raise EPPConnectionError("Not connected")

        try:
            data = self._frame_reader.read_frame()
        except socket.timeout as e:
            raise EPPConnectionError("Read timeout", [e])
        except OSError as e:
            raise EPPConnectionError(f"Receive failed: {e}", [e])
        logger.debug(f"Received {len(data)} bytes")
        return data
