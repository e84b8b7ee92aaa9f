"""
Serial port enumeration.

Lists the serial ports the host can see, ready for a port picker: the legacy
system port is hidden, every port gets a label, and the highest-numbered port
comes first.
"""

import logging
import re
from typing import Callable, Iterable, Optional

import serial.tools.list_ports

from ..exceptions import PortEnumerationError
from ..types import PortDescriptor, UNKNOWN_DEVICE

logger = logging.getLogger(__name__)

# Exact identifiers that are never modems
RESERVED_PORTS = frozenset({"COM1"})

_NON_DIGITS = re.compile(r"\D")

PortRegistry = Callable[[], Iterable]


def port_number(identifier: str) -> int:
    """
    Numeric value of the digits in a port identifier.

    All digits are joined, so "/dev/ttyUSB12" gives 12 and "COM3" gives 3.
    Identifiers without digits give 0.
    """
    digits = _NON_DIGITS.sub("", identifier)
    return int(digits) if digits else 0


class PortEnumerator:
    """
    Lists serial ports for presentation.

    Example:

    .. code-block:: python

        for port in PortEnumerator().list_ports():
            print(f"{port.identifier}: {port.label}")
    """

    def __init__(
        self,
        registry: Optional[PortRegistry] = None,
        reserved: Iterable[str] = RESERVED_PORTS
    ) -> None:
        """
        Initialize enumerator.

        Args:
            registry: Callable returning port info objects with ``device`` and
                ``manufacturer`` attributes (default: pyserial ``comports``)
            reserved: Port identifiers to leave out
        """
        self._registry = registry or serial.tools.list_ports.comports
        self.reserved = frozenset(reserved)

    def list_ports(self) -> list[PortDescriptor]:
        """
        List available serial ports, highest port number first.

        Ports with equal numbers keep the registry's order.

        Returns:
            Ordered list of PortDescriptor

        Raises:
            PortEnumerationError: If the host registry cannot be queried
        """
        try:
            infos = list(self._registry())
        except Exception as e:
            logger.error(f"Failed to list serial ports: {e}")
            raise PortEnumerationError(f"Error listing ports: {e}") from e

        ports = [
            PortDescriptor(
                identifier=info.device,
                label=getattr(info, "manufacturer", None) or UNKNOWN_DEVICE,
            )
            for info in infos
            if info.device not in self.reserved
        ]
        ports.sort(key=lambda port: port_number(port.identifier), reverse=True)

        logger.debug(f"Found {len(ports)} serial ports: {[p.identifier for p in ports]}")
        return ports


def list_ports() -> list[PortDescriptor]:
    """List host serial ports with the default registry and exclusions."""
    return PortEnumerator().list_ports()
