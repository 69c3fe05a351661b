"""Tag domain service.

This module contains the TagService that implements business logic
for tag operations, orchestrating between entities and repositories.
"""

import logging
from typing import List, Optional, Tuple

from domain.entities.tag import TagEntity
from domain.repositories.association_repository import AssociationRepositoryInterface
from domain.repositories.tag_repository import TagRepositoryInterface
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class TagService:
    """Domain service for tag business operations.

    Tags are looked up by the merge/copy endpoints and managed here; the
    associations that reference them are owned by AssociationService.

    Attributes:
        _tag_repository (TagRepositoryInterface): Repository for tag data access.
        _association_repository (AssociationRepositoryInterface): Used to refuse
            deleting tags that are still in use.

    Example:
        >>> service = TagService(tag_repository, association_repository)
        >>> with get_db_session() as db:
        ...     tags = await service.get_all_tags(db)
        ...     print(len(tags))
        5
    """

    def __init__(
        self,
        tag_repository: TagRepositoryInterface,
        association_repository: AssociationRepositoryInterface,
    ) -> None:
        """Initialize the tag service with required dependencies.

        Args:
            tag_repository (TagRepositoryInterface): Repository implementation for tag data access.
            association_repository (AssociationRepositoryInterface): Repository for associations.
        """
        self._tag_repository = tag_repository
        self._association_repository = association_repository

    async def get_all_tags(self, db_session: Session) -> List[TagEntity]:
        """Retrieve all available tags.

        Args:
            db_session (Session): Fresh database session for this operation.

        Returns:
            List[TagEntity]: List of all available tag entities sorted by name.
        """
        tags = await self._tag_repository.get_all(db_session)

        return sorted(tags, key=lambda tag: tag.name.casefold())

    async def get_tag_by_id(self, db_session: Session, tag_id: int) -> TagEntity:
        """Retrieve a tag by its unique identifier.

        Args:
            db_session (Session): Fresh database session for this operation.
            tag_id (int): The unique identifier of the tag to retrieve.

        Returns:
            TagEntity: The requested tag entity.

        Raises:
            TagNotFoundError: If the tag with the specified ID does not exist.
        """
        tag = await self._tag_repository.get_by_id(db_session, tag_id)
        if not tag:
            raise TagNotFoundError(f"Tag with ID {tag_id} not found")
        return tag

    async def resolve_pair(
        self, db_session: Session, source_tag_id: int, target_tag_id: int
    ) -> Tuple[TagEntity, TagEntity]:
        """Resolve the two tags of a merge or copy in one lookup.

        Args:
            db_session (Session): Fresh database session for this operation.
            source_tag_id (int): Tag whose associations are merged or copied.
            target_tag_id (int): Tag receiving them.

        Returns:
            Tuple[TagEntity, TagEntity]: Source and target tags.

        Raises:
            TagNotFoundError: Naming every id that does not resolve.
        """
        found = await self._tag_repository.get_many(
            db_session, [source_tag_id, target_tag_id]
        )
        missing = [
            tag_id for tag_id in (source_tag_id, target_tag_id) if tag_id not in found
        ]
        if missing:
            missing_ids = ", ".join(str(tag_id) for tag_id in missing)
            raise TagNotFoundError(f"Tag(s) with ID {missing_ids} not found")
        return found[source_tag_id], found[target_tag_id]

    async def create_tag(
        self, db_session: Session, name: str, description: Optional[str] = ""
    ) -> TagEntity:
        """Create a new tag with the specified name.

        Args:
            db_session (Session): Fresh database session for this operation.
            name (str): The name for the new tag.
            description (Optional[str]): Optional description.

        Returns:
            TagEntity: The created tag entity with assigned ID.

        Raises:
            TagAlreadyExistsError: If a tag with the same name already exists.
            ValueError: If the tag name is invalid.

        Example:
            >>> with get_db_session() as db:
            ...     tag = await service.create_tag(db, "nanotechnology")
            ...     print(tag.id)
            17
        """
        # Validation happens in the entity constructor
        new_tag = TagEntity(id=None, name=name, description=description or "")

        existing_tag = await self._tag_repository.get_by_name(db_session, new_tag.name)
        if existing_tag:
            raise TagAlreadyExistsError(f"Tag with name '{new_tag.name}' already exists")

        return await self._persist(db_session, new_tag)

    async def update_tag(
        self,
        db_session: Session,
        tag_id: int,
        new_name: str,
        description: Optional[str] = None,
    ) -> TagEntity:
        """Update an existing tag's name and description.

        Args:
            db_session (Session): Fresh database session for this operation.
            tag_id (int): The unique identifier of the tag to update.
            new_name (str): The new name for the tag.
            description (Optional[str]): New description; unchanged when None.

        Returns:
            TagEntity: The updated tag entity.

        Raises:
            TagNotFoundError: If the tag with the specified ID does not exist.
            TagAlreadyExistsError: If another tag with the new name already exists.
            ValueError: If the new tag name is invalid.
        """
        existing_tag = await self.get_tag_by_id(db_session, tag_id)

        updated_tag = TagEntity(
            id=tag_id,
            name=new_name,
            description=existing_tag.description if description is None else description,
            usage_count=existing_tag.usage_count,
        )

        # A change of case only is not a rename
        if not existing_tag.has_name(updated_tag.name):
            duplicate_tag = await self._tag_repository.get_by_name(
                db_session, updated_tag.name
            )
            if duplicate_tag and duplicate_tag.id != tag_id:
                raise TagAlreadyExistsError(
                    f"Tag with name '{updated_tag.name}' already exists"
                )

        return await self._persist(db_session, updated_tag)

    async def delete_tag(self, db_session: Session, tag_id: int) -> bool:
        """Delete a tag by its unique identifier.

        Args:
            db_session (Session): Fresh database session for this operation.
            tag_id (int): The unique identifier of the tag to delete.

        Returns:
            bool: True if the tag was deleted, False if not found.

        Raises:
            TagInUseError: If objects are still tagged with it. Merge it into
                another tag first.
        """
        in_use = await self._association_repository.count_by_tag(db_session, tag_id)
        if in_use:
            raise TagInUseError(
                f"Tag with ID {tag_id} is still attached to {in_use} object(s)"
            )

        try:
            deleted = await self._tag_repository.delete(db_session, tag_id)
            db_session.commit()
        except SQLAlchemyError:
            db_session.rollback()
            raise

        if deleted:
            logger.info(f"Deleted tag {tag_id}")
        return deleted

    async def _persist(self, db_session: Session, tag: TagEntity) -> TagEntity:
        try:
            saved = await self._tag_repository.save(db_session, tag)
            db_session.commit()
        except SQLAlchemyError:
            db_session.rollback()
            logger.error(f"Failed to save tag '{tag.name}'", exc_info=True)
            raise
        return saved


class TagNotFoundError(Exception):
    """Exception raised when a requested tag is not found."""

    pass


class TagAlreadyExistsError(Exception):
    """Exception raised when trying to create a tag that already exists."""

    pass


class TagInUseError(Exception):
    """Exception raised when deleting a tag that objects still reference."""

    pass
