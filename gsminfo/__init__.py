"""
gsminfo - phone number and prepaid balance from GSM modems over serial.
"""

from .version import __version__
from .modem import GSMInfo
from .core import ModemSession, query
from .features import PortEnumerator, list_ports
from .parsers import extract_phone_and_balance

from .types import (
    ErrorKind,
    ModemQueryResult,
    PortDescriptor,
    SessionState,
    UssdFields,
)

from .exceptions import (
    GSMInfoError,
    SessionError,
    NotRespondingError,
    SessionTimeoutError,
    TransportFailureError,
    DeviceDisconnectedError,
    PortEnumerationError,
)

__all__ = [
    "__version__",
    "GSMInfo",
    "ModemSession",
    "query",
    "PortEnumerator",
    "list_ports",
    "extract_phone_and_balance",
    "ErrorKind",
    "ModemQueryResult",
    "PortDescriptor",
    "SessionState",
    "UssdFields",
    "GSMInfoError",
    "SessionError",
    "NotRespondingError",
    "SessionTimeoutError",
    "TransportFailureError",
    "DeviceDisconnectedError",
    "PortEnumerationError",
]
