"""
Core modem infrastructure.

Provides low-level building blocks for modem communication:
- Transport: Serial communication abstraction
- LineChannel: Command/first-line-reply exchange with deadlines
- ModemSession: Handshake and USSD balance query
"""

from .transport import Transport, SerialTransport, MockTransport, DEFAULT_BAUDRATE
from .channel import LineChannel
from .session import (
    ModemSession,
    TransportFactory,
    query,
    HANDSHAKE_TIMEOUT,
    USSD_TIMEOUT,
    USSD_CODE,
)

__all__ = [
    "Transport",
    "SerialTransport",
    "MockTransport",
    "DEFAULT_BAUDRATE",
    "LineChannel",
    "ModemSession",
    "TransportFactory",
    "query",
    "HANDSHAKE_TIMEOUT",
    "USSD_TIMEOUT",
    "USSD_CODE",
]
