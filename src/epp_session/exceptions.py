"""
EPP Session Exceptions

Exception hierarchy for EPP session and command dispatch.
"""


class EPPError(Exception):
    """Base EPP exception."""

    def __init__(self, message: str, code: int = None):
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self):
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


class EPPConfigurationError(EPPError):
    """Client was constructed with invalid arguments."""

    def __init__(self, message: str = "Invalid configuration"):
        super().__init__(message)


class EPPUnsupportedTypeError(EPPError):
    """Object type is not one the client understands."""

    def __init__(self, object_type):
        super().__init__(f"Unsupported object type: {object_type!r}")
        self.object_type = object_type


class EPPInvalidOperationError(EPPError):
    """Command or sub-operation cannot be built from the given arguments."""

    def __init__(self, message: str = "Invalid operation"):
        super().__init__(message)


class EPPConnectionError(EPPError):
    """Connection to EPP server failed."""

    def __init__(self, message: str = "Connection failed", errors: list = None):
        super().__init__(message)
        self.errors = errors or []


class EPPProtocolError(EPPError):
    """Server reply could not be parsed or correlated with the request."""

    def __init__(self, message: str = "Protocol error"):
        super().__init__(message)


class EPPFrameError(EPPProtocolError):
    """EPP frame encoding/decoding error."""

    def __init__(self, message: str = "Frame error"):
        super().__init__(message)


class EPPXMLError(EPPProtocolError):
    """XML parsing or building error."""

    def __init__(self, message: str = "XML error"):
        super().__init__(message)


class EPPSessionError(EPPError):
    """Session setup or teardown was rejected by the server."""

    def __init__(self, message: str = "Session error", code: int = None, reason: str = None, response=None):
        super().__init__(message, code)
        self.reason = reason
        self.response = response

    def __str__(self):
        base = super().__str__()
        if self.reason:
            base += f" - {self.reason}"
        return base


class EPPLoginError(EPPSessionError):
    """Login was rejected."""


class EPPLogoutError(EPPSessionError):
    """Logout was rejected."""
