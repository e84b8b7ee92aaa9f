"""
Balance check example.

Queries the phone number and prepaid balance of the SIM in a modem.
"""

from gsminfo import GSMInfo, SessionError

# Replace with your serial port
PORT = "/dev/ttyUSB2"


def main():
    """Main function."""
    print("gsminfo - Balance Check Example\n")

    info = GSMInfo()
    try:
        result = info.fetch(PORT)
    except SessionError as e:
        print(f"Query failed ({e.kind.value}): {e}")
        return

    print(f"Phone number: {result.phone_number or 'Unknown'}")
    print(f"Balance: {result.balance or 'Unknown'}")
    print(f"Raw response: {result.raw_response}")


if __name__ == "__main__":
    main()
