"""
Modem session: one balance/number query against one serial port.

The session opens the port, checks the modem is alive with ``AT``, dials the
USSD balance code and parses the first reply line. The port is closed on
every way out, including errors and task cancellation.
"""

import logging
from typing import Callable, Optional

from .channel import LineChannel
from .transport import DEFAULT_BAUDRATE, SerialTransport, Transport
from ..exceptions import NotRespondingError
from ..parsers import UssdBalanceParser
from ..types import ModemQueryResult, SessionState

logger = logging.getLogger(__name__)

HANDSHAKE_COMMAND = "AT"
HANDSHAKE_OK = "OK"
USSD_CODE = "*101#"

# Seconds to wait for the first reply line of each step
HANDSHAKE_TIMEOUT = 1.0
USSD_TIMEOUT = 3.0

TransportFactory = Callable[[str, int], Transport]


def ussd_dial_command(code: str) -> str:
    """Build the voice-dial form of a USSD request (e.g., ``ATD*101#;``)."""
    return f"ATD{code};"


def open_serial(port: str, baudrate: int) -> Transport:
    """Default transport factory."""
    return SerialTransport(port=port, baudrate=baudrate)


class ModemSession:
    """
    Single query against a GSM modem.

    A session is used once; each call to ``query`` opens and closes its own
    channel. Two sessions must not target the same port at the same time.

    Example:

    .. code-block:: python

        session = ModemSession("/dev/ttyUSB2")
        result = await session.query()
        print(result.phone_number, result.balance)
    """

    def __init__(
        self,
        port: str,
        baudrate: int = DEFAULT_BAUDRATE,
        handshake_timeout: float = HANDSHAKE_TIMEOUT,
        ussd_timeout: float = USSD_TIMEOUT,
        ussd_code: str = USSD_CODE,
        transport_factory: Optional[TransportFactory] = None
    ) -> None:
        """
        Initialize session.

        Args:
            port: Serial port identifier (e.g., "/dev/ttyUSB2", "COM3")
            baudrate: Serial baud rate (default: 115200)
            handshake_timeout: Seconds to wait for the ``AT`` reply
            ussd_timeout: Seconds to wait for the USSD reply
            ussd_code: USSD code to dial
            transport_factory: Callable ``(port, baudrate) -> Transport`` (for testing)

        Raises:
            ValueError: If port is empty
        """
        if not port:
            raise ValueError("Port identifier must not be empty")

        self.port = port
        self.baudrate = baudrate
        self.handshake_timeout = handshake_timeout
        self.ussd_timeout = ussd_timeout
        self.ussd_code = ussd_code
        self._transport_factory = transport_factory or open_serial
        self._parser = UssdBalanceParser()

        self.state = SessionState.OPENING

    async def query(self) -> ModemQueryResult:
        """
        Run the handshake and USSD query.

        Returns:
            ModemQueryResult with the extracted fields and the raw reply

        Raises:
            TransportFailureError: If the port cannot be opened or used
            SessionTimeoutError: If a step gets no reply in time
            NotRespondingError: If the ``AT`` reply lacks "OK"
        """
        logger.info(f"Querying modem on {self.port}")
        self.state = SessionState.OPENING
        try:
            transport = self._transport_factory(self.port, self.baudrate)
        except Exception:
            self.state = SessionState.CLOSED
            raise

        channel = LineChannel(transport)
        try:
            channel.open()

            self.state = SessionState.HANDSHAKING
            reply = await channel.exchange(HANDSHAKE_COMMAND, self.handshake_timeout)
            if HANDSHAKE_OK not in reply:
                logger.error(f"Modem on {self.port} answered {reply!r} to AT")
                raise NotRespondingError(
                    "Device not responding.",
                    command=HANDSHAKE_COMMAND,
                    response=[reply]
                )

            self.state = SessionState.QUERYING
            raw_response = await channel.exchange(
                ussd_dial_command(self.ussd_code), self.ussd_timeout
            )

            self.state = SessionState.EXTRACTING
            fields = self._parser.parse(raw_response)
        finally:
            await channel.aclose()
            self.state = SessionState.CLOSED

        result = ModemQueryResult(
            port=self.port,
            phone_number=fields.phone_number,
            balance=fields.balance,
            raw_response=raw_response,
        )
        logger.info(
            f"Modem on {self.port}: number={result.phone_number} balance={result.balance}"
        )
        return result


async def query(port: str, **options) -> ModemQueryResult:
    """
    Query the modem on ``port`` once.

    Keyword options are passed to ``ModemSession``.
    """
    return await ModemSession(port, **options).query()
