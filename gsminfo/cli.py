"""
Command line interface for gsminfo.

List serial ports or query a modem's phone number and balance.
"""

import sys
import json
import logging
from typing import Optional

from .core import DEFAULT_BAUDRATE, HANDSHAKE_TIMEOUT, USSD_CODE, USSD_TIMEOUT
from .exceptions import SessionError
from .modem import GSMInfo
from .types import ErrorKind
from .version import __version__

EXIT_CODES = {
    ErrorKind.NOT_RESPONDING: 2,
    ErrorKind.TIMEOUT: 3,
    ErrorKind.TRANSPORT_FAILURE: 4,
}


class GSMInfoCLI:
    """Runs one CLI command and reports the outcome."""

    def __init__(self, info: GSMInfo, as_json: bool = False):
        """
        Initialize CLI.

        Args:
            info: Configured GSMInfo instance
            as_json: Print machine-readable output
        """
        self.info = info
        self.as_json = as_json

    def list_ports(self) -> int:
        """Print available serial ports."""
        try:
            ports = self.info.list_ports()
        except SessionError as e:
            return self._report_error(e)

        if self.as_json:
            print(json.dumps({"ports": [p.to_dict() for p in ports]}, indent=2))
            return 0

        if not ports:
            print("No serial ports found")
            return 0

        for port in ports:
            print(f"{port.identifier:<16} {port.label}")
        return 0

    def query(self, port: str) -> int:
        """Query a modem and print the result."""
        try:
            result = self.info.fetch(port)
        except SessionError as e:
            return self._report_error(e)

        if self.as_json:
            print(json.dumps(result.to_dict(), indent=2))
            return 0

        data = result.to_dict()
        print(f"Port:         {data['port']}")
        print(f"Phone number: {data['phone_number']}")
        print(f"Balance:      {data['balance']}")
        print(f"Raw response: {data['raw_response']}")
        return 0

    def _report_error(self, error: SessionError) -> int:
        """Print an error and return its exit code."""
        if self.as_json:
            print(json.dumps({"error": str(error), "kind": error.kind.value}))
        else:
            print(f"Error: {error}", file=sys.stderr)
        return EXIT_CODES[error.kind]


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="gsm-info",
        description="gsminfo - GSM modem phone number and balance lookup",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  gsm-info ports
  gsm-info query /dev/ttyUSB2
  gsm-info query COM4 --json
  gsm-info query COM4 --ussd-code '*121#' --ussd-timeout 5
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print JSON output"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("ports", help="List available serial ports")

    query_parser = subparsers.add_parser("query", help="Query phone number and balance")
    query_parser.add_argument(
        "port",
        help="Serial port (e.g., /dev/ttyUSB2, COM3)"
    )
    query_parser.add_argument(
        "-b", "--baudrate",
        type=int,
        default=DEFAULT_BAUDRATE,
        help=f"Baud rate (default: {DEFAULT_BAUDRATE})"
    )
    query_parser.add_argument(
        "--handshake-timeout",
        type=float,
        default=HANDSHAKE_TIMEOUT,
        help=f"Seconds to wait for the AT reply (default: {HANDSHAKE_TIMEOUT})"
    )
    query_parser.add_argument(
        "--ussd-timeout",
        type=float,
        default=USSD_TIMEOUT,
        help=f"Seconds to wait for the USSD reply (default: {USSD_TIMEOUT})"
    )
    query_parser.add_argument(
        "--ussd-code",
        default=USSD_CODE,
        help=f"USSD code to dial (default: {USSD_CODE})"
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
    else:
        logging.basicConfig(
            level=logging.WARNING,
            format='%(levelname)s: %(message)s'
        )

    if args.command == "ports":
        return GSMInfoCLI(GSMInfo(), as_json=args.json).list_ports()

    if not args.port:
        parser.error("port must not be empty")

    info = GSMInfo(
        baudrate=args.baudrate,
        handshake_timeout=args.handshake_timeout,
        ussd_timeout=args.ussd_timeout,
        ussd_code=args.ussd_code
    )
    return GSMInfoCLI(info, as_json=args.json).query(args.port)


if __name__ == "__main__":
    sys.exit(main())
