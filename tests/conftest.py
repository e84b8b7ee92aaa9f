"""
Pytest configuration and fixtures.

Provides shared test fixtures for gsminfo tests.
"""

import pytest
import logging

from gsminfo.core import MockTransport


# Enable logging for tests
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# Short windows keep the timing tests fast
FAST_HANDSHAKE_TIMEOUT = 0.2
FAST_USSD_TIMEOUT = 0.3


@pytest.fixture
def mock_transport():
    """
    Create a MockTransport instance for testing.

    Example:
        def test_something(mock_transport):
            mock_transport.add_response(["OK"])
            # ... test code ...
    """
    transport = MockTransport()
    yield transport
    if transport.is_open():
        transport.close()


@pytest.fixture
def transport_factory(mock_transport):
    """
    Transport factory handing out ``mock_transport``.

    Records the (port, baudrate) pairs it was called with in ``opened``.
    """
    def factory(port, baudrate):
        factory.opened.append((port, baudrate))
        return mock_transport

    factory.opened = []
    return factory


@pytest.fixture
def session_options(transport_factory):
    """ModemSession keyword arguments with fast timeouts and the mock transport."""
    return {
        "handshake_timeout": FAST_HANDSHAKE_TIMEOUT,
        "ussd_timeout": FAST_USSD_TIMEOUT,
        "transport_factory": transport_factory,
    }


@pytest.fixture
def port_registry():
    """
    Fake host port registry.

    Example:
        def test_ports(port_registry):
            port_registry.ports.append(SimpleNamespace(device="COM3", manufacturer="FTDI"))
    """
    def registry():
        return list(registry.ports)

    registry.ports = []
    return registry
