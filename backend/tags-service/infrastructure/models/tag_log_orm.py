"""SQLAlchemy ORM model for the tag audit log.

This module contains the TagLogORM class that stores one row per structural
change to tag associations (merges, copies). Rows are append-only.

Architecture:
    This ORM model is part of the Infrastructure layer and should only be used by
    SqlAlchemyTagLogRepository. Domain code should use TagLogEntity instead.
"""

from datetime import datetime

from infrastructure.models.base import Base
from sqlalchemy import Column, DateTime, Integer, String, Text


class TagLogORM(Base):
    """SQLAlchemy ORM model for audit log entries.

    Attributes:
        id (int): Primary key, auto-incremented.
        tag_id (int): Tag the change is attributed to (the destination tag).
        action (str): Action name, e.g. "objects_moved" or "objects_copied".
        comments (str): JSON-serialized payload describing the change.
        actor_id (int): User who performed the change.
        timestamp (datetime): When the change happened.

    Table Schema:
        - Table name: 'tags_log'
        - Primary key: id (INTEGER)
        - Indexes: tag_id
    """

    __tablename__ = "tags_log"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Not a foreign key: log entries outlive deleted tags
    tag_id = Column(Integer, nullable=False, index=True, comment="Affected tag ID")

    action = Column(String(50), nullable=False, comment="Action name")

    comments = Column(Text, nullable=False, default="", comment="JSON payload")

    actor_id = Column(
        Integer, nullable=False, default=0, comment="User who performed the action"
    )

    timestamp = Column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
        comment="Timestamp when the entry was written",
    )

    def __repr__(self) -> str:
        return (
            f"<TagLogORM(id={self.id}, tag_id={self.tag_id}, action='{self.action}')>"
        )
