"""
Main GSMInfo class.

User-facing API that an HTTP front end, the CLI or a script calls into.
"""

import asyncio
import logging
from typing import Iterable, Optional

from .core import (
    DEFAULT_BAUDRATE,
    HANDSHAKE_TIMEOUT,
    USSD_CODE,
    USSD_TIMEOUT,
    ModemSession,
    TransportFactory,
)
from .features import PortEnumerator, RESERVED_PORTS
from .features.ports import PortRegistry
from .types import ModemQueryResult, PortDescriptor

logger = logging.getLogger(__name__)


class GSMInfo:
    """
    Port listing and modem queries with shared settings.

    Holds no connection; every ``query`` opens and closes its own port, so
    queries against different ports may run concurrently.

    Example usage from async code:

    .. code-block:: python

        info = GSMInfo()
        ports = info.list_ports()
        result = await info.query(ports[0].identifier)
        print(result.to_dict())

    Example usage from blocking code:

    .. code-block:: python

        result = GSMInfo().fetch("COM4")
        print(f"Balance: {result.balance}")
    """

    def __init__(
        self,
        baudrate: int = DEFAULT_BAUDRATE,
        handshake_timeout: float = HANDSHAKE_TIMEOUT,
        ussd_timeout: float = USSD_TIMEOUT,
        ussd_code: str = USSD_CODE,
        reserved_ports: Iterable[str] = RESERVED_PORTS,
        transport_factory: Optional[TransportFactory] = None,
        port_registry: Optional[PortRegistry] = None
    ) -> None:
        """
        Initialize GSMInfo.

        Args:
            baudrate: Serial port baud rate (default: 115200)
            handshake_timeout: Seconds to wait for the ``AT`` reply (default: 1.0)
            ussd_timeout: Seconds to wait for the USSD reply (default: 3.0)
            ussd_code: USSD code to dial (default: "*101#")
            reserved_ports: Port identifiers hidden from listings (default: COM1)
            transport_factory: Custom ``(port, baudrate) -> Transport`` (for testing)
            port_registry: Custom port registry callable (for testing)
        """
        self.baudrate = baudrate
        self.handshake_timeout = handshake_timeout
        self.ussd_timeout = ussd_timeout
        self.ussd_code = ussd_code
        self._transport_factory = transport_factory
        self._enumerator = PortEnumerator(
            registry=port_registry,
            reserved=reserved_ports
        )

        logger.info("Initialized GSMInfo")

    def list_ports(self) -> list[PortDescriptor]:
        """
        List serial ports, highest-numbered first.

        Raises:
            PortEnumerationError: If the host registry cannot be queried
        """
        return self._enumerator.list_ports()

    def session(self, port: str) -> ModemSession:
        """Create a session for ``port`` with this instance's settings."""
        return ModemSession(
            port,
            baudrate=self.baudrate,
            handshake_timeout=self.handshake_timeout,
            ussd_timeout=self.ussd_timeout,
            ussd_code=self.ussd_code,
            transport_factory=self._transport_factory
        )

    async def query(self, port: str) -> ModemQueryResult:
        """
        Query phone number and balance from the modem on ``port``.

        Raises:
            ValueError: If port is empty
            TransportFailureError: If the port cannot be opened or used
            SessionTimeoutError: If the modem does not reply in time
            NotRespondingError: If the modem fails the ``AT`` check
        """
        return await self.session(port).query()

    def fetch(self, port: str) -> ModemQueryResult:
        """
        Blocking version of ``query``.

        Must not be called from a running event loop.
        """
        return asyncio.run(self.query(port))

    def __repr__(self) -> str:
        """String representation."""
        return f"<GSMInfo baudrate={self.baudrate} ussd_code={self.ussd_code}>"
