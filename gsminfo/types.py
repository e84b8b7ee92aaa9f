"""
Data types and structures for gsminfo.

Provides type-safe representations of ports, session states and results.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

# Label for ports without manufacturer metadata
UNKNOWN_DEVICE = "Unknown device"

# Placeholder for fields missing from a USSD reply at the API boundary
UNKNOWN = "Unknown"


class ErrorKind(Enum):
    """Failure classes of a modem session."""
    NOT_RESPONDING = "not_responding"
    TIMEOUT = "timeout"
    TRANSPORT_FAILURE = "transport_failure"


class SessionState(Enum):
    """Steps of a modem session, in order."""
    OPENING = "opening"
    HANDSHAKING = "handshaking"
    QUERYING = "querying"
    EXTRACTING = "extracting"
    CLOSED = "closed"


@dataclass(frozen=True)
class PortDescriptor:
    """A serial port visible to the host."""
    identifier: str  # Device path or name (e.g., "/dev/ttyUSB2", "COM3")
    label: str = UNKNOWN_DEVICE

    def to_dict(self) -> dict[str, str]:
        """Render as the port listing entry of the HTTP API."""
        return {"port": self.identifier, "description": self.label}


@dataclass(frozen=True)
class UssdFields:
    """Fields extracted from a USSD reply line."""
    phone_number: Optional[str] = None
    balance: Optional[str] = None


@dataclass(frozen=True)
class ModemQueryResult:
    """
    Outcome of one modem session.

    ``phone_number`` and ``balance`` are None when the reply did not contain
    them; ``raw_response`` is the reply line exactly as received.
    """
    port: str
    phone_number: Optional[str]
    balance: Optional[str]
    raw_response: str

    def to_dict(self) -> dict[str, str]:
        """Render as the JSON body of the HTTP API, with "Unknown" for gaps."""
        return {
            "port": self.port,
            "phone_number": self.phone_number or UNKNOWN,
            "balance": self.balance or UNKNOWN,
            "raw_response": self.raw_response,
        }
