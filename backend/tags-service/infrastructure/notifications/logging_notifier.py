"""Notifier implementation that logs and collects error reports.

One LoggingNotifier is created per request; the collected messages are returned
to API clients as warnings alongside the operation result.
"""

import logging
from typing import List

from domain.services.context import Notifier

logger = logging.getLogger(__name__)


class LoggingNotifier(Notifier):
    """Notifier that writes reports to the log and keeps them in memory.

    Example:
        >>> notifier = LoggingNotifier()
        >>> notifier.error("Failed to copy association 12")
        >>> notifier.messages
        ['Failed to copy association 12']
    """

    def __init__(self) -> None:
        self._messages: List[str] = []

    def error(self, message: str) -> None:
        logger.error(message)
        self._messages.append(message)

    @property
    def messages(self) -> List[str]:
        """Messages reported so far, oldest first."""
        return list(self._messages)

    def has_errors(self) -> bool:
        return bool(self._messages)
