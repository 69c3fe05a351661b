"""SQLAlchemy implementation of the association repository.

This module contains the concrete implementation of AssociationRepositoryInterface
using SQLAlchemy for database operations and entity mapping.
"""

import logging
from typing import List, Optional

from domain.entities.association import AssociationEntity
from domain.repositories.association_repository import AssociationRepositoryInterface
from sqlalchemy import and_, func
from sqlalchemy.orm import Session, aliased

from infrastructure.models.associations import TagObjectORM

logger = logging.getLogger(__name__)


class SqlAlchemyAssociationRepository(AssociationRepositoryInterface):
    """SQLAlchemy implementation of the association repository.

    Methods flush but never commit. The domain service decides the
    transaction boundaries.

    NOTE: This repository does not store the session internally.
    Each method receives a fresh session to ensure proper transaction management
    and avoid session leaks.
    """

    async def add(
        self, db_session: Session, association: AssociationEntity
    ) -> AssociationEntity:
        """Insert a new association row.

        Args:
            db_session (Session): Fresh SQLAlchemy database session for this operation.
            association (AssociationEntity): Unsaved association.

        Returns:
            AssociationEntity: The stored association with its generated ID.

        Raises:
            ValueError: If the association already has an ID.
        """
        if not association.is_new():
            raise ValueError(
                f"Association {association.id} is already persisted and cannot be added again"
            )

        model = TagObjectORM(
            tbl=association.scope,
            objectid=association.object_id,
            tagid=association.tag_id,
            taggerid=association.tagger_id,
            taggedon=association.tagged_on,
            label=association.label,
        )
        db_session.add(model)
        db_session.flush()
        return self._model_to_entity(model)

    async def get_by_id(
        self, db_session: Session, association_id: int
    ) -> Optional[AssociationEntity]:
        model = db_session.get(TagObjectORM, association_id)
        return self._model_to_entity(model) if model else None

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
            db_session (Session): Fresh SQLAlchemy database session for this operation.
            scope (str): Scope of the object.
            object_id (int): Identifier of the object inside its scope.
            tag_id (int): Identifier of the tag.
            tagger_id (Optional[int]): Narrow to one tagger when truthy.
            label (str): Label, matched exactly ("" is its own value).

        Returns:
            Optional[AssociationEntity]: The matching association with the
                lowest ID, or None.
        """
        query = db_session.query(TagObjectORM).filter(
            TagObjectORM.tbl == scope,
            TagObjectORM.objectid == object_id,
            TagObjectORM.tagid == tag_id,
            TagObjectORM.label == (label or ""),
        )
        if tagger_id:
            query = query.filter(TagObjectORM.taggerid == tagger_id)

        model = query.order_by(TagObjectORM.id).first()
        return self._model_to_entity(model) if model else None

    async def list_by_tag(
        self,
        db_session: Session,
        tag_id: int,
        scope: Optional[str] = None,
        for_update: bool = False,
    ) -> List[AssociationEntity]:
        query = db_session.query(TagObjectORM).filter(TagObjectORM.tagid == tag_id)
        if scope:
            query = query.filter(TagObjectORM.tbl == scope)
        if for_update:
            # Ignored by SQLite, row locks on PostgreSQL/MySQL
            query = query.with_for_update()

        models = query.order_by(TagObjectORM.id).all()
        return [self._model_to_entity(model) for model in models]

    async def has_duplicate(
        self,
        db_session: Session,
        scope: str,
        tag_id: int,
        object_id: int,
        label: str,
        exclude_id: Optional[int] = None,
    ) -> bool:
        query = db_session.query(TagObjectORM.id).filter(
            TagObjectORM.tbl == scope,
            TagObjectORM.tagid == tag_id,
            TagObjectORM.objectid == object_id,
            TagObjectORM.label == (label or ""),
        )
        if exclude_id is not None:
            query = query.filter(TagObjectORM.id != exclude_id)
        return query.first() is not None

    async def retag(
        self, db_session: Session, association_id: int, new_tag_id: int
    ) -> AssociationEntity:
        """Change the tag of an existing association in place.

        Args:
            db_session (Session): Fresh SQLAlchemy database session for this operation.
            association_id (int): Association to update.
            new_tag_id (int): Tag the association should reference.

        Returns:
            AssociationEntity: The updated association; ID, tagger, label
                and tagging time are unchanged.

        Raises:
            LookupError: If the association does not exist.
        """
        model = db_session.get(TagObjectORM, association_id)
        if model is None:
            raise LookupError(f"Association {association_id} not found")

        model.tagid = new_tag_id
        db_session.flush()
        return self._model_to_entity(model)

    async def delete(self, db_session: Session, association_id: int) -> bool:
        model = db_session.get(TagObjectORM, association_id)
        if model is None:
            return False
        db_session.delete(model)
        db_session.flush()
        return True

    async def delete_matching(
        self, db_session: Session, scope: str, object_id: int, tag_id: int, label: str = ""
    ) -> int:
        deleted = (
            db_session.query(TagObjectORM)
            .filter(
                TagObjectORM.tbl == scope,
                TagObjectORM.objectid == object_id,
                TagObjectORM.tagid == tag_id,
                TagObjectORM.label == (label or ""),
            )
            .delete(synchronize_session="fetch")
        )
        db_session.flush()
        return deleted

    async def find_copy_candidates(
        self,
        db_session: Session,
        old_tag_id: int,
        new_tag_id: int,
        scope: Optional[str] = None,
    ) -> List[int]:
        """Exclusion join between the source and destination tag associations.

        Equivalent SQL::

            SELECT old.id
            FROM tags_object old
            LEFT JOIN tags_object new
              ON new.tagid = :new_tag_id
             AND new.tbl = old.tbl
             AND new.objectid = old.objectid
             AND new.label = old.label
            WHERE old.tagid = :old_tag_id [AND old.tbl = :scope]
              AND new.id IS NULL

        Args:
            db_session (Session): Fresh SQLAlchemy database session for this operation.
            old_tag_id (int): Source tag.
            new_tag_id (int): Destination tag.
            scope (Optional[str]): Restrict to one scope.

        Returns:
            List[int]: IDs of source associations without a destination counterpart.
        """
        old = aliased(TagObjectORM, name="old")
        new = aliased(TagObjectORM, name="new")

        query = (
            db_session.query(old.id)
            .outerjoin(
                new,
                and_(
                    new.tagid == new_tag_id,
                    new.tbl == old.tbl,
                    new.objectid == old.objectid,
                    new.label == old.label,
                ),
            )
            .filter(old.tagid == old_tag_id, new.id.is_(None))
        )
        if scope:
            query = query.filter(old.tbl == scope)
        # Lock only the source side; the outer side may be NULL
        query = query.with_for_update(of=old)

        ids = [row[0] for row in query.order_by(old.id).all()]
        logger.debug(
            f"Found {len(ids)} copy candidates from tag {old_tag_id} to tag {new_tag_id}"
            + (f" in scope '{scope}'" if scope else "")
        )
        return ids

    async def count_by_tag(self, db_session: Session, tag_id: int) -> int:
        return (
            db_session.query(func.count(TagObjectORM.id))
            .filter(TagObjectORM.tagid == tag_id)
            .scalar()
        )

    def _model_to_entity(self, model: TagObjectORM) -> AssociationEntity:
        """Convert SQLAlchemy model to domain entity."""
        return AssociationEntity(
            id=model.id,
            scope=model.tbl,
            object_id=model.objectid,
            tag_id=model.tagid,
            tagger_id=model.taggerid or 0,
            label=model.label or "",
            tagged_on=model.taggedon,
        )
