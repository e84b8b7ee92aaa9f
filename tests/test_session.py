"""
Tests for ModemSession.
"""

import asyncio

import pytest

from gsminfo.core import MockTransport, ModemSession, query
from gsminfo.exceptions import (
    DeviceDisconnectedError,
    NotRespondingError,
    SessionTimeoutError,
    TransportFailureError,
)
from gsminfo.types import ErrorKind, ModemQueryResult, SessionState

SAMPLE_USSD_REPLY = "TKC:500 Your number is 01712345678"


def run(session):
    """Run a session to completion."""
    return asyncio.run(session.query())


def test_query_success(mock_transport, transport_factory, session_options):
    """Test full handshake and USSD exchange."""
    mock_transport.add_response(["OK"])
    mock_transport.add_response([SAMPLE_USSD_REPLY])

    session = ModemSession("COM4", **session_options)
    result = run(session)

    assert result == ModemQueryResult(
        port="COM4",
        phone_number="01712345678",
        balance="500",
        raw_response=SAMPLE_USSD_REPLY,
    )
    assert mock_transport.writes == [b"AT\r", b"ATD*101#;\r"]
    assert mock_transport.close_count == 1
    assert session.state == SessionState.CLOSED
    assert transport_factory.opened == [("COM4", 115200)]


def test_query_reply_without_fields(mock_transport, session_options):
    """Test unparseable USSD reply is still a result."""
    mock_transport.add_response(["OK"])
    mock_transport.add_response(["+CUSD: 4"])

    result = run(ModemSession("COM4", **session_options))

    assert result.phone_number is None
    assert result.balance is None
    assert result.raw_response == "+CUSD: 4"
    assert result.to_dict()["phone_number"] == "Unknown"
    assert result.to_dict()["balance"] == "Unknown"


def test_handshake_accepts_ok_inside_line(mock_transport, session_options):
    """Test any first line containing "OK" passes the liveness check."""
    mock_transport.add_response(["AT OK"])
    mock_transport.add_response([SAMPLE_USSD_REPLY])

    result = run(ModemSession("COM4", **session_options))

    assert result.balance == "500"


def test_blank_lines_are_skipped(mock_transport, session_options):
    """Test empty lines before a reply are not treated as the reply."""
    mock_transport.add_response(["", "OK"])
    mock_transport.add_response(["", SAMPLE_USSD_REPLY])

    result = run(ModemSession("COM4", **session_options))

    assert result.raw_response == SAMPLE_USSD_REPLY


def test_only_first_ussd_line_is_used(mock_transport, session_options):
    """Test lines after the first reply line are ignored."""
    mock_transport.add_response(["OK"])
    mock_transport.add_response(["Your number is 01712345678", "TKC:500", "OK"])

    result = run(ModemSession("COM4", **session_options))

    assert result.raw_response == "Your number is 01712345678"
    assert result.balance is None


def test_extra_handshake_line_is_not_the_ussd_reply():
    """Test a line trailing the OK is never taken as the USSD reply."""
    for _ in range(25):
        transport = MockTransport()
        transport.add_response(["OK", "+CREG: 1"])
        transport.add_response([SAMPLE_USSD_REPLY], delay=0.02)

        result = run(ModemSession(
            "COM4",
            handshake_timeout=0.5,
            ussd_timeout=0.5,
            transport_factory=lambda port, baudrate: transport
        ))

        assert result.raw_response == SAMPLE_USSD_REPLY
        assert result.phone_number == "01712345678"
        assert result.balance == "500"
        assert transport.close_count == 1


def test_handshake_timeout(mock_transport, session_options):
    """Test silence after AT fails with a timeout and closes the port."""
    session = ModemSession("COM4", **session_options)

    with pytest.raises(SessionTimeoutError) as exc_info:
        run(session)

    assert exc_info.value.kind == ErrorKind.TIMEOUT
    assert exc_info.value.command == "AT"
    assert mock_transport.writes == [b"AT\r"]
    assert mock_transport.close_count == 1
    assert session.state == SessionState.CLOSED


def test_late_handshake_reply_is_discarded(mock_transport, session_options):
    """Test a reply arriving after the window does not rescue the session."""
    mock_transport.add_response(["OK"], delay=0.5)

    with pytest.raises(SessionTimeoutError):
        run(ModemSession("COM4", **session_options))

    assert len(mock_transport.writes) == 1
    assert mock_transport.close_count == 1


def test_handshake_rejected(mock_transport, session_options):
    """Test a reply without OK fails and never sends the USSD request."""
    mock_transport.add_response(["ERROR"])
    mock_transport.add_response([SAMPLE_USSD_REPLY])

    with pytest.raises(NotRespondingError) as exc_info:
        run(ModemSession("COM4", **session_options))

    error = exc_info.value
    assert error.kind == ErrorKind.NOT_RESPONDING
    assert error.http_status == 400
    assert error.response == ["ERROR"]
    assert "Device not responding." in str(error)
    assert len(mock_transport.writes) == 1
    assert mock_transport.close_count == 1


def test_ussd_timeout(mock_transport, session_options):
    """Test silence after the USSD request fails with a timeout."""
    mock_transport.add_response(["OK"])

    with pytest.raises(SessionTimeoutError) as exc_info:
        run(ModemSession("COM4", **session_options))

    assert exc_info.value.command == "ATD*101#;"
    assert exc_info.value.http_status == 504
    assert len(mock_transport.writes) == 2
    assert mock_transport.close_count == 1


def test_open_failure(session_options):
    """Test open failure is reported without touching a channel."""
    def failing_factory(port, baudrate):
        raise TransportFailureError(f"Error fetching info from port {port}: access denied")

    session_options["transport_factory"] = failing_factory
    session = ModemSession("COM9", **session_options)

    with pytest.raises(TransportFailureError) as exc_info:
        run(session)

    assert exc_info.value.kind == ErrorKind.TRANSPORT_FAILURE
    assert "COM9" in str(exc_info.value)
    assert session.state == SessionState.CLOSED


def test_disconnect_during_session(session_options):
    """Test a transport failure while waiting fails the session."""
    class UnpluggedTransport(MockTransport):
        def read_until(self, terminator=b"\n"):
            raise DeviceDisconnectedError("Serial device disconnected: no such device")

    transport = UnpluggedTransport()
    session_options["transport_factory"] = lambda port, baudrate: transport

    with pytest.raises(DeviceDisconnectedError):
        run(ModemSession("COM4", **session_options))

    assert transport.close_count == 1


def test_cancellation_closes_port(mock_transport, transport_factory):
    """Test cancelling the task mid-handshake still closes the port."""
    session = ModemSession(
        "COM4",
        handshake_timeout=5.0,
        transport_factory=transport_factory
    )

    async def scenario():
        task = asyncio.create_task(session.query())
        await asyncio.sleep(0.1)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())

    assert mock_transport.writes == [b"AT\r"]
    assert mock_transport.close_count == 1
    assert session.state == SessionState.CLOSED


def test_custom_ussd_code_and_baudrate(mock_transport, transport_factory, session_options):
    """Test USSD code and baud rate options."""
    mock_transport.add_response(["OK"])
    mock_transport.add_response([SAMPLE_USSD_REPLY])

    run(ModemSession("COM4", baudrate=9600, ussd_code="*121#", **session_options))

    assert mock_transport.writes[1] == b"ATD*121#;\r"
    assert transport_factory.opened == [("COM4", 9600)]


def test_empty_port_rejected():
    """Test empty port identifier is refused before opening."""
    with pytest.raises(ValueError):
        ModemSession("")


def test_module_query(mock_transport, session_options):
    """Test module-level query coroutine."""
    mock_transport.add_response(["OK"])
    mock_transport.add_response([SAMPLE_USSD_REPLY])

    result = asyncio.run(query("/dev/ttyUSB2", **session_options))

    assert result.port == "/dev/ttyUSB2"
    assert result.phone_number == "01712345678"


def test_concurrent_sessions_on_different_ports():
    """Test sessions on different ports run side by side."""
    transports = {"COM3": MockTransport(), "COM4": MockTransport()}
    transports["COM3"].add_response(["OK"], delay=0.05)
    transports["COM3"].add_response(["TKC:100 number 01700000003"])
    transports["COM4"].add_response(["OK"])
    transports["COM4"].add_response(["TKC:200 number 01700000004"], delay=0.05)

    options = {
        "handshake_timeout": 0.5,
        "ussd_timeout": 0.5,
        "transport_factory": lambda port, baudrate: transports[port],
    }

    async def scenario():
        return await asyncio.gather(
            query("COM3", **options),
            query("COM4", **options),
        )

    first, second = asyncio.run(scenario())

    assert (first.port, first.balance, first.phone_number) == ("COM3", "100", "01700000003")
    assert (second.port, second.balance, second.phone_number) == ("COM4", "200", "01700000004")
    assert all(t.close_count == 1 for t in transports.values())
