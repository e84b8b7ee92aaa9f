"""
Exceptions for gsminfo.

Every failure of a modem session is one of three kinds: the transport could
not be used, the modem did not answer in time, or it answered but failed the
liveness check.
"""

from typing import Optional

from .types import ErrorKind


class GSMInfoError(Exception):
    """
    Base exception for gsminfo errors.

    All gsminfo exceptions inherit from this class.
    """

    def __init__(
        self,
        message: str,
        command: Optional[str] = None,
        response: Optional[list[str]] = None
    ) -> None:
        """
        Initialize exception with context.

        Args:
            message: Error description
            command: AT command that caused the error (if applicable)
            response: Modem response (if applicable)
        """
        self.command = command
        self.response = response
        super().__init__(message)

    def __str__(self) -> str:
        """Format error message with context."""
        parts = [super().__str__()]

        if self.command:
            parts.append(f"Command: {self.command}")

        if self.response:
            parts.append(f"Response: {self.response}")

        return " | ".join(parts)


class SessionError(GSMInfoError):
    """
    Terminal failure of a modem session or port enumeration.

    ``kind`` tells the caller which of the three failure classes occurred and
    ``http_status`` is the status an HTTP front end should answer with.
    """

    kind: ErrorKind = ErrorKind.TRANSPORT_FAILURE
    http_status: int = 500


class NotRespondingError(SessionError):
    """
    Raised when the modem answers the liveness probe without "OK".
    """

    kind = ErrorKind.NOT_RESPONDING
    http_status = 400


class SessionTimeoutError(SessionError):
    """
    Raised when no line arrives within the window of a session step.

    This typically indicates:
    - Nothing is attached to the port
    - Wrong baud rate
    - Carrier did not answer the USSD request in time
    """

    kind = ErrorKind.TIMEOUT
    http_status = 504


class TransportFailureError(SessionError):
    """
    Raised when the transport layer fails.

    This indicates:
    - Serial port cannot be opened
    - Write or read failed
    - Host serial port registry unavailable
    """

    kind = ErrorKind.TRANSPORT_FAILURE
    http_status = 500


class DeviceDisconnectedError(TransportFailureError):
    """
    Raised when the device is unplugged during a session.
    """
    pass


class PortEnumerationError(TransportFailureError):
    """
    Raised when the host serial port registry cannot be queried.
    """

    http_status = 503
