"""SQLAlchemy implementation of the tag repository."""

from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from domain.entities.tag import TagEntity
from domain.repositories.tag_repository import TagRepositoryInterface
from sqlalchemy import func
from sqlalchemy.orm import Session

from infrastructure.models.associations import TagObjectORM
from infrastructure.models.tag_orm import TagORM


class SqlAlchemyTagRepository(TagRepositoryInterface):
    """Tag repository backed by the ``tags`` table.

    Usage counts come from an outer join on ``tags_object`` so that unused
    tags are listed with a count of zero.

    NOTE: This repository does not store the session internally.
    Each method receives a fresh session to ensure proper transaction management
    and avoid session leaks.

    Example:
        >>> repository = SqlAlchemyTagRepository()
        >>> [(tag.name, tag.usage_count) for tag in await repository.get_all(db)]
        [('physics', 12), ('optics', 0)]
    """

    async def get_all(self, db_session: Session) -> List[TagEntity]:
        rows = self._with_usage(db_session).order_by(TagORM.id).all()
        return [self._model_to_entity(model, usage) for model, usage in rows]

    async def get_by_id(self, db_session: Session, tag_id: int) -> Optional[TagEntity]:
        row = self._with_usage(db_session).filter(TagORM.id == tag_id).first()
        return self._model_to_entity(*row) if row else None

    async def get_many(
        self, db_session: Session, tag_ids: Iterable[int]
    ) -> Dict[int, TagEntity]:
        wanted = set(tag_ids)
        if not wanted:
            return {}

        rows = self._with_usage(db_session).filter(TagORM.id.in_(wanted)).all()
        return {model.id: self._model_to_entity(model, usage) for model, usage in rows}

    async def get_by_name(self, db_session: Session, name: str) -> Optional[TagEntity]:
        row = (
            self._with_usage(db_session)
            .filter(func.lower(TagORM.name) == name.strip().lower())
            .first()
        )
        return self._model_to_entity(*row) if row else None

    async def save(self, db_session: Session, tag: TagEntity) -> TagEntity:
        """Insert or update a tag row.

        Args:
            db_session (Session): Fresh SQLAlchemy database session for this operation.
            tag (TagEntity): Tag to store. ``usage_count`` is ignored.

        Returns:
            TagEntity: The stored tag with its id.

        Raises:
            LookupError: If ``tag`` has an id that no row carries.
        """
        if tag.is_new():
            tag_model = TagORM(name=tag.name, description=tag.description)
            db_session.add(tag_model)
            db_session.flush()
            return replace(tag, id=tag_model.id, usage_count=0)

        tag_model = db_session.get(TagORM, tag.id)
        if tag_model is None:
            raise LookupError(f"Tag {tag.id} does not exist")

        tag_model.name = tag.name
        tag_model.description = tag.description
        db_session.flush()
        return tag

    async def delete(self, db_session: Session, tag_id: int) -> bool:
        tag_model = db_session.get(TagORM, tag_id)
        if tag_model is None:
            return False
        db_session.delete(tag_model)
        db_session.flush()
        return True

    def _with_usage(self, db_session: Session):
        """Query of (TagORM, association count) pairs."""
        return (
            db_session.query(TagORM, func.count(TagObjectORM.id))
            .outerjoin(TagObjectORM, TagObjectORM.tagid == TagORM.id)
            .group_by(TagORM.id)
        )

    def _model_to_entity(self, tag_model: TagORM, usage_count: int = 0) -> TagEntity:
        return TagEntity(
            id=tag_model.id,
            name=tag_model.name,
            description=tag_model.description or "",
            usage_count=usage_count or 0,
        )
