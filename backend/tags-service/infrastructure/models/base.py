"""Declarative base shared by the ``tags``, ``tags_object`` and ``tags_log`` models.

Constraint and index names follow a fixed convention so that the schema
created by ``Base.metadata.create_all`` matches across SQLite and PostgreSQL.
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import declarative_base

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

Base = declarative_base(metadata=MetaData(naming_convention=NAMING_CONVENTION))
