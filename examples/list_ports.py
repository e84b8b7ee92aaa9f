"""
Port listing example.

Shows the serial ports a modem could be attached to, best candidate first.
"""

from gsminfo import list_ports


def main():
    """Main function."""
    print("gsminfo - Serial Ports\n")

    ports = list_ports()
    if not ports:
        print("No serial ports found")
        return

    for port in ports:
        print(f"{port.identifier:<16} {port.label}")


if __name__ == "__main__":
    main()
