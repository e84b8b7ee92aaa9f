"""
Line channel over a transport.

A reader thread turns the transport's byte stream into lines and hands them
to the asyncio loop. At most one listener waits for a line at a time; it takes
the first line and is detached. Lines that arrive while nobody is waiting, or
that were read before the current command was written, are dropped.
"""

import asyncio
import logging
import threading
from typing import Optional

from .transport import Transport
from ..exceptions import SessionTimeoutError, TransportFailureError

logger = logging.getLogger(__name__)

LINE_TERMINATOR = b"\n"
COMMAND_TERMINATOR = "\r"


class LineChannel:
    """
    Command/response channel owned by a single modem session.

    Usage:

    .. code-block:: python

        channel = LineChannel(transport)
        channel.open()
        try:
            line = await channel.exchange("AT", timeout=1.0)
        finally:
            await channel.aclose()
    """

    def __init__(self, transport: Transport) -> None:
        """
        Initialize channel.

        Args:
            transport: Open transport; the channel takes ownership and closes it
        """
        self.transport = transport

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._listener: Optional[asyncio.Future] = None
        self._failure: Optional[TransportFailureError] = None
        self._epoch = 0

        self._reader_thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._closed = False

    def open(self) -> None:
        """
        Start the reader thread.

        Must be called from a coroutine running on the loop that will await
        ``exchange``.
        """
        if self._reader_thread is not None:
            return

        self._loop = asyncio.get_running_loop()
        self._stop_event.clear()
        self._reader_thread = threading.Thread(
            target=self._reader_loop,
            daemon=True,
            name="LineChannelReader"
        )
        self._reader_thread.start()
        logger.debug("Started channel reader thread")

    async def exchange(self, command: str, timeout: float) -> str:
        """
        Write a command and wait for the first line that follows it.

        Each exchange starts a new epoch. Lines are stamped with the epoch they
        were read under, so a line read before the write never answers this
        command even if its delivery is still queued. The input buffer is
        flushed and the listener attached before the write, and the listener
        is detached on reply, timeout or cancellation.

        Args:
            command: Command without terminator (e.g., "AT")
            timeout: Seconds to wait for the first line

        Returns:
            First non-blank line received, without line terminator

        Raises:
            SessionTimeoutError: If no line arrives in time
            TransportFailureError: If the transport fails
        """
        if self._closed:
            raise TransportFailureError("Channel is closed", command=command)
        if self._failure is not None:
            raise self._failure

        self._epoch += 1
        listener = self._loop.create_future()
        self._listener = listener
        try:
            self.transport.reset_input_buffer()
            logger.debug(f"Sending command: {command} (epoch {self._epoch})")
            self.transport.write((command + COMMAND_TERMINATOR).encode("ascii"))
            line = await asyncio.wait_for(listener, timeout)
            logger.debug(f"Received line for {command}: {line}")
            return line
        except asyncio.TimeoutError as e:
            logger.error(f"No response to {command} within {timeout}s")
            raise SessionTimeoutError(
                "Timeout reading from serial port.",
                command=command
            ) from e
        finally:
            self._listener = None

    def close(self) -> None:
        """
        Stop the reader thread and close the transport.

        Blocks until the reader thread's current read returns. Safe to call
        more than once; the transport is closed only the first time.
        """
        if self._closed:
            return
        self._closed = True

        self._stop_event.set()
        if self._reader_thread is not None:
            self._reader_thread.join(timeout=1.0)
            if self._reader_thread.is_alive():
                logger.warning("Channel reader thread did not terminate in time")

        self.transport.close()
        logger.debug("Channel closed")

    async def aclose(self) -> None:
        """
        Close without blocking the event loop.

        The listener is detached on the loop; joining the reader thread and
        closing the transport run in a worker thread.
        """
        if self._closed:
            return

        if self._listener is not None and not self._listener.done():
            self._listener.cancel()
        self._listener = None

        await asyncio.to_thread(self.close)

    @property
    def is_closed(self) -> bool:
        """True once ``close`` has run."""
        return self._closed

    def _reader_loop(self) -> None:
        """
        Read lines until stopped or the transport fails.

        Partial reads are buffered until the terminator arrives; a fragment
        left over from an earlier epoch is dropped. Blank lines are skipped.
        """
        buffer = b""
        buffer_epoch = self._epoch

        while not self._stop_event.is_set():
            try:
                chunk = self.transport.read_until(LINE_TERMINATOR)
            except TransportFailureError as e:
                logger.error(f"Channel reader stopped: {e}")
                self._post(self._fail, e)
                break

            if not chunk:
                continue

            epoch = self._epoch
            if buffer and epoch != buffer_epoch:
                logger.debug(f"Dropping partial line from epoch {buffer_epoch}: {buffer!r}")
                buffer = b""
            if not buffer:
                buffer_epoch = epoch

            buffer += chunk
            if not buffer.endswith(LINE_TERMINATOR):
                continue

            line = buffer.decode("utf-8", errors="replace").strip("\r\n")
            buffer = b""

            if not line.strip():
                continue

            self._post(self._deliver, line, buffer_epoch)

        logger.debug("Channel reader thread stopped")

    def _post(self, callback, *args) -> None:
        """Schedule a callback on the session's event loop."""
        try:
            self._loop.call_soon_threadsafe(callback, *args)
        except RuntimeError:
            # Loop already closed; the session is gone
            logger.debug(f"Dropping {args!r}: event loop closed")

    def _deliver(self, line: str, epoch: int) -> None:
        """Hand a line to the listener of its epoch, or drop it."""
        listener = self._listener
        if listener is None or listener.done():
            logger.debug(f"Discarding line with no listener: {line}")
            return
        if epoch != self._epoch:
            logger.debug(f"Discarding line from epoch {epoch} (now {self._epoch}): {line}")
            return

        self._listener = None
        listener.set_result(line)

    def _fail(self, error: TransportFailureError) -> None:
        """Fail the waiting listener, or remember the failure for the next one."""
        self._failure = error
        listener = self._listener
        if listener is not None and not listener.done():
            self._listener = None
            listener.set_exception(error)
