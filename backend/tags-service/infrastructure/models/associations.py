"""Tag/object association table.

This module defines the association model linking tags to arbitrary tagged
objects. Unlike a plain many-to-many ``Table``, each row carries its own
identity and metadata (who tagged the object, when, and with which label),
so it is mapped as a full ORM class.

Tables:
    tags_object: Associates a tag with an object identified by (tbl, objectid)

Architecture:
    This model is part of the Infrastructure layer. Only
    SqlAlchemyAssociationRepository and SqlAlchemyTagSearchRepository read or
    write it; domain code works with AssociationEntity.
"""

from datetime import datetime

from infrastructure.models.base import Base
from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship


class TagObjectORM(Base):
    """SQLAlchemy ORM model for one tag attached to one object.

    Attributes:
        id (int): Primary key, never changes once assigned.
        tbl (str): Scope of the tagged object (e.g. "resources", "tickets").
        objectid (int): Identifier of the tagged object inside its scope.
        tagid (int): Foreign key to the tag.
        taggerid (int): User who created the association.
        taggedon (datetime): When the association was created.
        label (str): Optional qualifier of the relationship; "" when unused.

    Table Schema:
        - Table name: 'tags_object'
        - Primary key: id (INTEGER)
        - Foreign key: tagid -> tags.id
        - Indexes: (tagid, tbl), (tbl, objectid)

    Note:
        Uniqueness of (tbl, tagid, objectid, label) is deliberately not a
        database constraint; merge and copy maintain it.
    """

    __tablename__ = "tags_object"
    __table_args__ = (
        Index("idx_tags_object_tag_scope", "tagid", "tbl"),
        Index("idx_tags_object_scope_object", "tbl", "objectid"),
        {"comment": "Association table between tags and arbitrary objects"},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    tbl = Column(String(255), nullable=False, comment="Scope of the tagged object")

    objectid = Column(
        Integer, nullable=False, comment="Identifier of the object inside its scope"
    )

    tagid = Column(
        Integer, ForeignKey("tags.id"), nullable=False, comment="Foreign key to tags.id"
    )

    taggerid = Column(
        Integer, nullable=False, default=0, comment="User who created the association"
    )

    taggedon = Column(
        DateTime,
        default=datetime.utcnow,
        nullable=False,
        comment="Timestamp when the object was tagged",
    )

    label = Column(
        String(255),
        nullable=False,
        default="",
        comment="Qualifier of the relationship, empty string when unused",
    )

    tag = relationship("TagORM", back_populates="objects", lazy="select")

    def __repr__(self) -> str:
        return (
            f"<TagObjectORM(id={self.id}, tbl='{self.tbl}', objectid={self.objectid}, "
            f"tagid={self.tagid}, label='{self.label}')>"
        )
