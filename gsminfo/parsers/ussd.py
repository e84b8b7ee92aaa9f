"""
USSD reply parser.

Pulls the subscriber number and prepaid balance out of the free-form text a
carrier sends back for a balance query, e.g.::

    TKC:500 Your number is 01712345678

The patterns are tied to the carrier's reply format. Both fields are optional
and found independently of each other.
"""

import logging
import re

from .base import ResponseParser
from ..types import UssdFields

logger = logging.getLogger(__name__)

# 10 or 11 digits standing alone
PHONE_NUMBER_PATTERN = re.compile(r"\b\d{10,11}\b", re.ASCII)

# "TKC", optional colon, optional single whitespace, then the amount token
BALANCE_PATTERN = re.compile(r"TKC:?\s?(\w+)", re.ASCII)


class UssdBalanceParser(ResponseParser[UssdFields]):
    """Parser for the balance/number USSD reply."""

    def parse(self, response: str) -> UssdFields:
        """
        Extract phone number and balance.

        Never raises; a field that cannot be found is None.
        """
        phone_match = PHONE_NUMBER_PATTERN.search(response)
        balance_match = BALANCE_PATTERN.search(response)

        fields = UssdFields(
            phone_number=phone_match.group(0) if phone_match else None,
            balance=balance_match.group(1) if balance_match else None,
        )
        logger.debug(f"Extracted {fields} from {response!r}")
        return fields


def extract_phone_and_balance(response: str) -> UssdFields:
    """
    Extract phone number and balance from a USSD reply.

    Example:

    .. code-block:: python

        fields = extract_phone_and_balance("TKC:500 Your number is 01712345678")
        assert fields.phone_number == "01712345678"
        assert fields.balance == "500"
    """
    return UssdBalanceParser().parse(response)
