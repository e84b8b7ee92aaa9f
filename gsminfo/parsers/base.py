"""
Base parser classes.

Provides the common interface for turning modem reply text into typed data.
"""

import logging
from abc import ABC, abstractmethod
from typing import TypeVar, Generic

logger = logging.getLogger(__name__)

T = TypeVar('T')


class ResponseParser(ABC, Generic[T]):
    """
    Abstract base class for response parsers.

    Parsers convert a raw modem reply line into a typed data structure.
    """

    @abstractmethod
    def parse(self, response: str) -> T:
        """
        Parse a modem reply.

        Args:
            response: Reply line as received from the modem

        Returns:
            Parsed data structure
        """
        pass
