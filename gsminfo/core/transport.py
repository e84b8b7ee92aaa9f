"""
Transport layer abstraction for modem communication.

Provides abstractions for serial communication with dependency injection support.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
import serial
from serial import SerialException

from ..exceptions import TransportFailureError, DeviceDisconnectedError

logger = logging.getLogger(__name__)

DEFAULT_BAUDRATE = 115200

# Serial read timeout; bounds how long the reader thread blocks per poll
DEFAULT_POLL_TIMEOUT = 0.1

_DISCONNECT_PHRASES = (
    "device disconnected",
    "device reports readiness to read but returned no data",
    "no such device",
    "device not configured",
    "input/output error",
)


class Transport(ABC):
    """Abstract base class for modem transport."""

    @abstractmethod
    def write(self, data: bytes) -> int:
        """
        Write data to the transport.

        Args:
            data: Bytes to write

        Returns:
            Number of bytes written

        Raises:
            TransportFailureError: If write fails
        """
        pass

    @abstractmethod
    def read_until(self, terminator: bytes = b"\n") -> bytes:
        """
        Read from transport until terminator is found.

        Returns whatever arrived before the read timeout, which may be a
        partial line or nothing at all.

        Args:
            terminator: Byte sequence marking end of data

        Returns:
            Bytes read, including terminator if it was seen

        Raises:
            TransportFailureError: If read fails
        """
        pass

    @abstractmethod
    def reset_input_buffer(self) -> None:
        """Clear the input buffer."""
        pass

    @abstractmethod
    def is_open(self) -> bool:
        """Check if transport is open."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Close the transport."""
        pass


class SerialTransport(Transport):
    """Serial port transport implementation."""

    def __init__(
        self,
        port: str,
        baudrate: int = DEFAULT_BAUDRATE,
        timeout: float = DEFAULT_POLL_TIMEOUT
    ) -> None:
        """
        Open a serial port.

        Args:
            port: Serial port path (e.g., /dev/ttyUSB2, COM3)
            baudrate: Baud rate for serial communication
            timeout: Read timeout in seconds

        Raises:
            TransportFailureError: If serial port cannot be opened
        """
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout

        try:
            self._serial = serial.Serial(
                port=port,
                baudrate=baudrate,
                timeout=timeout
            )
            logger.info(f"Opened serial port {port} at {baudrate} baud")
        except (SerialException, ValueError) as e:
            logger.error(f"Failed to open serial port {port}: {e}")
            raise TransportFailureError(
                f"Error fetching info from port {port}: {e}"
            ) from e

    def write(self, data: bytes) -> int:
        """Write data to serial port."""
        try:
            written = self._serial.write(data)
            logger.debug(f"Wrote {written} bytes: {data}")
            return written
        except SerialException as e:
            logger.error(f"Serial write failed: {e}")
            raise TransportFailureError(f"Serial write failed: {e}") from e

    def read_until(self, terminator: bytes = b"\n") -> bytes:
        """Read from serial port until terminator or read timeout."""
        try:
            data = self._serial.read_until(terminator)

            if data:
                logger.debug(f"Read {len(data)} bytes: {data}")

            return data
        except SerialException as e:
            error_str = str(e).lower()

            if any(phrase in error_str for phrase in _DISCONNECT_PHRASES):
                logger.error(f"Device disconnected: {e}")
                raise DeviceDisconnectedError(
                    f"Serial device disconnected: {e}",
                    response=[str(e)]
                ) from e

            logger.error(f"Serial read failed: {e}")
            raise TransportFailureError(f"Serial read failed: {e}") from e

    def reset_input_buffer(self) -> None:
        """Clear the serial input buffer."""
        try:
            self._serial.reset_input_buffer()
            logger.debug("Reset input buffer")
        except SerialException as e:
            logger.error(f"Failed to reset input buffer: {e}")
            raise TransportFailureError(f"Failed to reset input buffer: {e}") from e

    def is_open(self) -> bool:
        """Check if serial port is open."""
        return bool(self._serial and self._serial.is_open)

    def close(self) -> None:
        """Close the serial port."""
        if self._serial and self._serial.is_open:
            self._serial.close()
            logger.info(f"Closed serial port {self.port}")


class MockTransport(Transport):
    """
    Mock transport for testing.

    Simulates a modem without hardware. Each queued response answers the next
    write, optionally after a delay, and is then read back one line at a time.
    """

    def __init__(self, poll_interval: float = 0.005) -> None:
        """
        Initialize mock transport.

        Args:
            poll_interval: How long an empty read blocks, like a serial read timeout
        """
        self.poll_interval = poll_interval
        self.writes: list[bytes] = []
        self.close_count = 0
        self._open = True
        self._pending: list[tuple[float, bytes]] = []
        self._response_queue: list[tuple[list[str], float]] = []
        self._lock = threading.Lock()
        logger.info("Initialized MockTransport")

    def add_response(self, lines: list[str], delay: float = 0.0) -> None:
        """
        Queue the reply to the next write.

        Args:
            lines: Response lines without terminators (e.g., ["OK"])
            delay: Seconds between the write and the reply becoming readable
        """
        with self._lock:
            self._response_queue.append((list(lines), delay))
            logger.debug(f"Added mock response: {lines} (delay {delay}s)")

    def write(self, data: bytes) -> int:
        """Record a write and release the next queued response."""
        if not self._open:
            raise DeviceDisconnectedError(
                "MockTransport is closed (simulating device disconnection)",
                response=["MockTransport closed"]
            )

        with self._lock:
            self.writes.append(data)
            if self._response_queue:
                lines, delay = self._response_queue.pop(0)
                ready_at = time.monotonic() + delay
                for line in lines:
                    self._pending.append((ready_at, (line + "\r\n").encode("utf-8")))

        logger.debug(f"Mock write: {data}")
        return len(data)

    def read_until(self, terminator: bytes = b"\n") -> bytes:
        """Return the next released line, or b"" after one poll interval."""
        if not self._open:
            raise DeviceDisconnectedError(
                "MockTransport is closed (simulating device disconnection)",
                response=["MockTransport closed"]
            )

        with self._lock:
            if self._pending and self._pending[0][0] <= time.monotonic():
                _, result = self._pending.pop(0)
                logger.debug(f"Mock read: {result}")
                return result

        time.sleep(self.poll_interval)
        return b""

    def reset_input_buffer(self) -> None:
        """Drop released but unread lines, as a serial input flush would."""
        with self._lock:
            self._pending.clear()
            logger.debug("Reset mock input buffer")

    def is_open(self) -> bool:
        """Check if mock transport is open."""
        return self._open

    def close(self) -> None:
        """Close mock transport."""
        self.close_count += 1
        self._open = False
        logger.info("Closed MockTransport")

