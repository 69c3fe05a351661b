"""SQLAlchemy implementation of the tag audit log repository."""

import json
from typing import List

from domain.entities.tag_log import TagLogAction, TagLogEntity
from domain.repositories.tag_log_repository import TagLogRepositoryInterface
from sqlalchemy.orm import Session

from infrastructure.models.tag_log_orm import TagLogORM


class SqlAlchemyTagLogRepository(TagLogRepositoryInterface):
    """SQLAlchemy implementation of the append-only tag audit log.

    Payloads are stored as JSON text in the ``comments`` column.

    NOTE: This repository does not store the session internally.
    Each method receives a fresh session to ensure proper transaction management
    and avoid session leaks.
    """

    async def append(self, db_session: Session, entry: TagLogEntity) -> TagLogEntity:
        """Insert a log entry.

        Args:
            db_session (Session): Fresh SQLAlchemy database session for this operation.
            entry (TagLogEntity): Unsaved log entry.

        Returns:
            TagLogEntity: The stored entry with its generated ID.
        """
        model = TagLogORM(
            tag_id=entry.tag_id,
            action=entry.action.value,
            comments=json.dumps(entry.payload),
            actor_id=entry.actor_id,
            timestamp=entry.timestamp,
        )
        db_session.add(model)
        db_session.flush()
        return self._model_to_entity(model)

    async def list_for_tag(
        self, db_session: Session, tag_id: int, limit: int = 50
    ) -> List[TagLogEntity]:
        models = (
            db_session.query(TagLogORM)
            .filter(TagLogORM.tag_id == tag_id)
            .order_by(TagLogORM.timestamp.desc(), TagLogORM.id.desc())
            .limit(limit)
            .all()
        )
        return [self._model_to_entity(model) for model in models]

    def _model_to_entity(self, model: TagLogORM) -> TagLogEntity:
        return TagLogEntity(
            id=model.id,
            tag_id=model.tag_id,
            action=TagLogAction(model.action),
            payload=json.loads(model.comments) if model.comments else {},
            actor_id=model.actor_id or 0,
            timestamp=model.timestamp,
        )
