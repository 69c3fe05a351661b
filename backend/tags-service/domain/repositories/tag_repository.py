"""Tag repository interface.

Tag storage is a collaborator of the association core: merge and copy only
need to know that both tag ids resolve, the rest serves tag administration.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from ..entities.tag import TagEntity


class TagRepositoryInterface(ABC):
    """Abstract tag storage.

    Read methods fill ``TagEntity.usage_count``. Implementations flush but
    never commit.
    """

    @abstractmethod
    async def get_all(self, db_session: Session) -> List[TagEntity]:
        """Return every tag with its usage count, in storage order."""
        pass

    @abstractmethod
    async def get_by_id(self, db_session: Session, tag_id: int) -> Optional[TagEntity]:
        pass

    @abstractmethod
    async def get_many(
        self, db_session: Session, tag_ids: Iterable[int]
    ) -> Dict[int, TagEntity]:
        """Resolve several tag ids in one query.

        Args:
            db_session (Session): Fresh database session for this operation.
            tag_ids (Iterable[int]): Ids to resolve; duplicates are allowed.

        Returns:
            Dict[int, TagEntity]: Found tags keyed by id. Unknown ids are
                simply absent.

        Example:
            >>> found = await repository.get_many(db, [12, 7, 999])
            >>> sorted(found)
            [7, 12]
        """
        pass

    @abstractmethod
    async def get_by_name(self, db_session: Session, name: str) -> Optional[TagEntity]:
        """Find a tag by name, ignoring case and surrounding whitespace."""
        pass

    @abstractmethod
    async def save(self, db_session: Session, tag: TagEntity) -> TagEntity:
        """Insert a new tag or update name and description of an existing one.

        Returns:
            TagEntity: The stored tag with its id.
        """
        pass

    @abstractmethod
    async def delete(self, db_session: Session, tag_id: int) -> bool:
        """Delete a tag row.

        Returns:
            bool: False if no tag had this id.
        """
        pass
