"""ORM model of the ``tags`` table.

Only the tag registry endpoints write this table. Associations reference a
tag by ``tags.id``; their rows live in ``tags_object``.
"""

from datetime import datetime

from infrastructure.models.base import Base
from sqlalchemy import Column, DateTime, Integer, String, Text
from sqlalchemy.orm import relationship


class TagORM(Base):
    """Row of the ``tags`` table.

    Attributes:
        id (int): Primary key referenced by ``tags_object.tagid``.
        name (str): Display name, unique.
        description (str): Free-text description, "" when unset.
        created_at (datetime): Creation time (naive UTC).
        objects (List[TagObjectORM]): Associations referencing this tag.

    Note:
        Deleting a row never cascades to ``tags_object``; the tag service
        refuses to delete tags that are still in use.
    """

    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False, comment="Display name")
    description = Column(Text, nullable=False, default="")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    objects = relationship("TagObjectORM", back_populates="tag", lazy="select")

    def __repr__(self) -> str:
        return f"<TagORM(id={self.id}, name='{self.name}')>"
