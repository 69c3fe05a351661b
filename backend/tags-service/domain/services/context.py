"""Explicit collaborators injected into domain services.

The acting user, the current time and the channel for non-fatal error reports
are passed in rather than read from globals, so that services stay
deterministic under test.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass(frozen=True)
class UserContext:
    """Identity of the user on whose behalf an operation runs.

    Attributes:
        user_id (int): Identifier of the acting user, 0 for anonymous.
    """

    user_id: int = 0


class Clock(ABC):
    """Source of the current time."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time as a naive UTC datetime."""
        pass


class SystemClock(Clock):
    """Clock backed by the system time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc).replace(tzinfo=None)


class Notifier(ABC):
    """Receiver for non-fatal errors raised while processing a batch.

    Bulk operations report rows they had to skip here instead of failing
    the whole call.
    """

    @abstractmethod
    def error(self, message: str) -> None:
        """Report a non-fatal error.

        Args:
            message (str): Human-readable description of the failure.
        """
        pass
