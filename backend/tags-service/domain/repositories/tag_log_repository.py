"""Tag audit log repository interface."""

from abc import ABC, abstractmethod
from typing import List

from sqlalchemy.orm import Session

from ..entities.tag_log import TagLogEntity


class TagLogRepositoryInterface(ABC):
    """Abstract interface for the append-only tag audit log.

    There is deliberately no update or delete operation.
    """

    @abstractmethod
    async def append(self, db_session: Session, entry: TagLogEntity) -> TagLogEntity:
        """Append an entry to the log.

        Args:
            db_session (Session): Fresh database session for this operation.
            entry (TagLogEntity): Unsaved entry (id is None).

        Returns:
            TagLogEntity: The stored entry with its ID.
        """
        pass

    @abstractmethod
    async def list_for_tag(
        self, db_session: Session, tag_id: int, limit: int = 50
    ) -> List[TagLogEntity]:
        """List entries attributed to a tag, newest first."""
        pass
