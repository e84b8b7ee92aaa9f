"""
Response parsers for modem replies.

Provides type-safe parsing of modem responses into structured data.
"""

from .base import ResponseParser
from .ussd import UssdBalanceParser, extract_phone_and_balance

__all__ = [
    "ResponseParser",
    "UssdBalanceParser",
    "extract_phone_and_balance",
]
