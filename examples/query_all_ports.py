"""
Concurrent query example.

Queries every listed port at once; each session owns its own port.
"""

import asyncio

from gsminfo import GSMInfo


async def main():
    """Main function."""
    info = GSMInfo()
    ports = info.list_ports()

    results = await asyncio.gather(
        *(info.query(port.identifier) for port in ports),
        return_exceptions=True
    )

    for port, result in zip(ports, results):
        if isinstance(result, Exception):
            print(f"{port.identifier}: {result}")
        else:
            print(f"{port.identifier}: number={result.phone_number} balance={result.balance}")


if __name__ == "__main__":
    asyncio.run(main())
