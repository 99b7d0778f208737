"""
EPP Session Client

EPP (RFC 5730-5734) client session manager: connection and login scoping,
command dispatch per object type, and current/legacy protocol variants.
"""

__version__ = "1.0.0"

from epp_session.client import EPPClient
from epp_session.config import DEFAULT_SERVICES, SessionConfig
from epp_session.models import Greeting, PollMessage, Response, Result
from epp_session.objects import ObjectType, resolve_type
from epp_session.server import LegacyServer, Server
from epp_session.exceptions import (
    EPPError,
    EPPConfigurationError,
    EPPUnsupportedTypeError,
    EPPInvalidOperationError,
    EPPConnectionError,
    EPPProtocolError,
    EPPFrameError,
    EPPXMLError,
    EPPSessionError,
    EPPLoginError,
    EPPLogoutError,
)

__all__ = [
    # Client
    "EPPClient",
    "SessionConfig",
    "DEFAULT_SERVICES",
    # Connections
    "Server",
    "LegacyServer",
    # Object types
    "ObjectType",
    "resolve_type",
    # Models
    "Greeting",
    "PollMessage",
    "Response",
    "Result",
    # Exceptions
    "EPPError",
    "EPPConfigurationError",
    "EPPUnsupportedTypeError",
    "EPPInvalidOperationError",
    "EPPConnectionError",
    "EPPProtocolError",
    "EPPFrameError",
    "EPPXMLError",
    "EPPSessionError",
    "EPPLoginError",
    "EPPLogoutError",
]
