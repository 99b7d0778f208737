"""
EPP Session Configuration

Immutable settings shared by the client and its connection implementation.
"""

import socket
import ssl
from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple, Union

from epp_session.exceptions import EPPConfigurationError

# Object namespaces
DOMAIN_NS = "urn:ietf:params:xml:ns:domain-1.0"
CONTACT_NS = "urn:ietf:params:xml:ns:contact-1.0"
HOST_NS = "urn:ietf:params:xml:ns:host-1.0"

# Default service URNs advertised at login.
#
# Public so callers can add services to the default list:
#
#     services = DEFAULT_SERVICES + ("urn:ietf:params:xml:ns:secDNS-1.1",)
#     EPPClient("tag", "password", "epp.example.com", services=services)
DEFAULT_SERVICES: Tuple[str, ...] = (DOMAIN_NS, CONTACT_NS, HOST_NS)

DEFAULT_PORT = 700

_ADDRESS_FAMILIES = {
    "AF_INET": socket.AF_INET,
    "AF_INET6": socket.AF_INET6,
}


def _unique(uris: Iterable[str]) -> Tuple[str, ...]:
    """Drop duplicate URNs, keeping the first occurrence."""
    if isinstance(uris, str):
        uris = [uris]
    seen = []
    for uri in uris:
        if uri not in seen:
            seen.append(uri)
    return tuple(seen)


def _address_family(value: Union[str, int, None]) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, str):
        if value not in _ADDRESS_FAMILIES:
            raise EPPConfigurationError(
                f"Invalid address family {value!r}, expected AF_INET or AF_INET6"
            )
        return _ADDRESS_FAMILIES[value]
    if value not in _ADDRESS_FAMILIES.values():
        raise EPPConfigurationError(f"Invalid address family {value!r}")
    return value


@dataclass(frozen=True)
class SessionConfig:
    """
    EPP session configuration.

    Attributes:
        tag: Registrar tag (EPP client ID)
        password: Tag password
        host: EPP server hostname
        port: EPP server port (default: 700)
        ssl_context: TLS context, e.g. for client certificate auth.
            When None a TLS 1.2+ context is built from the cert options.
        compatibility: Use the legacy protocol variant
        lang: EPP language code
        version: EPP protocol version
        extensions: Extension URNs advertised at login
        services: Service URNs advertised at login
        address_family: "AF_INET", "AF_INET6" or the socket constant.
            Limits connections to that family; None tries all addresses.
        timeout: Socket timeout in seconds
        cert_file: Client certificate (PEM), used without ssl_context
        key_file: Client private key (PEM), used without ssl_context
        ca_file: CA certificate(s) (PEM), used without ssl_context
        verify_server: Verify the server certificate, used without ssl_context
        use_tls: Set False to talk plaintext (test servers only)
    """
    tag: str
    password: str = field(repr=False)
    host: str
    port: int = DEFAULT_PORT
    ssl_context: Optional[ssl.SSLContext] = field(default=None, compare=False, repr=False)
    compatibility: bool = False
    lang: str = "en"
    version: str = "1.0"
    extensions: Tuple[str, ...] = ()
    services: Tuple[str, ...] = DEFAULT_SERVICES
    address_family: Optional[int] = None
    timeout: float = 30
    cert_file: Optional[str] = None
    key_file: Optional[str] = None
    ca_file: Optional[str] = None
    verify_server: bool = True
    use_tls: bool = True

    def __post_init__(self):
        if not self.tag:
            raise EPPConfigurationError("EPP tag is required")
        if not self.host:
            raise EPPConfigurationError("EPP host is required")
        if not isinstance(self.port, int) or not 0 < self.port < 65536:
            raise EPPConfigurationError(f"Invalid port: {self.port!r}")

        # frozen dataclass, so normalise through object.__setattr__
        object.__setattr__(self, "services", _unique(self.services))
        object.__setattr__(self, "extensions", _unique(self.extensions))
        object.__setattr__(self, "address_family", _address_family(self.address_family))
