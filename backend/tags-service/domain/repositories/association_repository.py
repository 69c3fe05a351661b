"""Association repository interface.

This module defines the abstract interface for reading and writing tag/object
associations, following the Repository pattern from DDD.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from sqlalchemy.orm import Session

from ..entities.association import AssociationEntity


class AssociationRepositoryInterface(ABC):
    """Abstract interface for association repository operations.

    Implementations only flush; committing or rolling back is left to the
    caller so that a whole merge or copy runs in one transaction.

    NOTE: All methods receive a fresh database session to ensure
    proper transaction management and avoid session leaks.
    """

    @abstractmethod
    async def add(
        self, db_session: Session, association: AssociationEntity
    ) -> AssociationEntity:
        """Persist a new association.

        Args:
            db_session (Session): Fresh database session for this operation.
            association (AssociationEntity): Unsaved association (id is None).

        Returns:
            AssociationEntity: The stored association with its new ID.
        """
        pass

    @abstractmethod
    async def get_by_id(
        self, db_session: Session, association_id: int
    ) -> Optional[AssociationEntity]:
        """Retrieve an association by its identifier."""
        pass

    @abstractmethod
    async def find_one_by_scope(
        self,
        db_session: Session,
        scope: str,
        object_id: int,
        tag_id: int,
        tagger_id: Optional[int] = None,
        label: str = "",
    ) -> Optional[AssociationEntity]:
        """Find the association of a tag with one object.

        Args:
            db_session (Session): Fresh database session for this operation.
            scope (str): Scope of the object.
            object_id (int): Identifier of the object inside its scope.
            tag_id (int): Identifier of the tag.
            tagger_id (Optional[int]): When truthy, only associations created
                by this user match.
            label (str): Label of the association; matched exactly.

        Returns:
            Optional[AssociationEntity]: The first matching association, or None.
        """
        pass

    @abstractmethod
    async def list_by_tag(
        self,
        db_session: Session,
        tag_id: int,
        scope: Optional[str] = None,
        for_update: bool = False,
    ) -> List[AssociationEntity]:
        """List every association referencing a tag, ordered by ID.

        Args:
            db_session (Session): Fresh database session for this operation.
            tag_id (int): Identifier of the tag.
            scope (Optional[str]): Restrict to one scope.
            for_update (bool): Lock the rows for the rest of the transaction
                where the database supports it.

        Returns:
            List[AssociationEntity]: Matching associations.
        """
        pass

    @abstractmethod
    async def has_duplicate(
        self,
        db_session: Session,
        scope: str,
        tag_id: int,
        object_id: int,
        label: str,
        exclude_id: Optional[int] = None,
    ) -> bool:
        """Check whether an association with the given key already exists.

        Args:
            exclude_id (Optional[int]): Association to ignore (the row being
                examined itself).

        Returns:
            bool: True if another association shares (scope, tag_id, object_id, label).
        """
        pass

    @abstractmethod
    async def retag(
        self, db_session: Session, association_id: int, new_tag_id: int
    ) -> AssociationEntity:
        """Point an existing association at another tag, keeping its identity.

        Raises:
            LookupError: If the association does not exist.
        """
        pass

    @abstractmethod
    async def delete(self, db_session: Session, association_id: int) -> bool:
        """Delete one association.

        Returns:
            bool: True if the association was deleted, False if not found.
        """
        pass

    @abstractmethod
    async def delete_matching(
        self, db_session: Session, scope: str, object_id: int, tag_id: int, label: str = ""
    ) -> int:
        """Delete every association of a tag with one object and label.

        Returns:
            int: Number of associations deleted.
        """
        pass

    @abstractmethod
    async def find_copy_candidates(
        self,
        db_session: Session,
        old_tag_id: int,
        new_tag_id: int,
        scope: Optional[str] = None,
    ) -> List[int]:
        """Find associations of ``old_tag_id`` with no counterpart under ``new_tag_id``.

        A counterpart is an association of ``new_tag_id`` with the same scope,
        object and label. The check is done in a single query (an exclusion
        join) rather than one probe per row.

        Args:
            db_session (Session): Fresh database session for this operation.
            old_tag_id (int): Source tag.
            new_tag_id (int): Destination tag.
            scope (Optional[str]): Restrict to one scope.

        Returns:
            List[int]: IDs of the source associations to copy, ordered by ID.
        """
        pass

    @abstractmethod
    async def count_by_tag(self, db_session: Session, tag_id: int) -> int:
        """Count associations referencing a tag."""
        pass
