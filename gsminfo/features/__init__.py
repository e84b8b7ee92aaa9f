"""
Feature modules built on the core.

- ports: Serial port enumeration
"""

from .ports import PortEnumerator, list_ports, port_number, RESERVED_PORTS

__all__ = [
    "PortEnumerator",
    "list_ports",
    "port_number",
    "RESERVED_PORTS",
]
